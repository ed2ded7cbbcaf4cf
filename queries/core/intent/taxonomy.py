"""Result types for intent parsing.

This module defines the values that flow out of the engine: intent
classifications, slots and their values, parse results, and the tagged
entities produced by the tagging entry point.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from ..builtin_entities import BuiltinValue


@dataclass(frozen=True)
class SlotValue:
    """Resolved value of a slot.

    A custom value is a plain string: either the canonical reference value of
    a catalog utterance, or the raw text echoed back for an automatically
    extensible entity. A builtin value is the structured payload produced by
    the builtin entity parser.

    Attributes:
        kind: "Custom" or "Builtin"
        value: String for custom values, structured value for builtin ones
    """

    kind: str
    value: str | BuiltinValue

    CUSTOM = "Custom"
    BUILTIN = "Builtin"

    @classmethod
    def custom(cls, value: str) -> "SlotValue":
        return cls(kind=cls.CUSTOM, value=value)

    @classmethod
    def builtin(cls, value: BuiltinValue) -> "SlotValue":
        return cls(kind=cls.BUILTIN, value=value)

    @property
    def is_custom(self) -> bool:
        return self.kind == self.CUSTOM

    def to_dict(self) -> dict[str, Any]:
        if self.is_custom:
            return {"kind": self.kind, "value": self.value}
        return {"kind": self.kind, "value": self.value.to_dict()}


@dataclass(frozen=True)
class Slot:
    """A named intent argument extracted from text.

    Attributes:
        raw_value: Text the slot was extracted from
        value: Resolved slot value
        range: Half-open character offsets into the input, when known
        entity: Entity name resolved through the intent's slot mapping
        slot_name: Argument name
    """

    raw_value: str
    value: SlotValue
    range: tuple[int, int] | None
    entity: str
    slot_name: str

    def with_slot_value(self, value: SlotValue) -> "Slot":
        """Return a copy of this slot with another value."""
        return replace(self, value=value)

    def to_dict(self) -> dict[str, Any]:
        return {
            "raw_value": self.raw_value,
            "value": self.value.to_dict(),
            "range": list(self.range) if self.range is not None else None,
            "entity": self.entity,
            "slot_name": self.slot_name,
        }


@dataclass(frozen=True)
class IntentClassification:
    """Result of intent classification.

    Attributes:
        intent_name: Name of the detected intent
        probability: Confidence score 0.0-1.0
    """

    intent_name: str
    probability: float

    def to_dict(self) -> dict[str, Any]:
        return {"intent_name": self.intent_name, "probability": self.probability}


@dataclass(frozen=True)
class ParseResult:
    """Result of parsing a piece of text.

    ``intent`` and ``slots`` are either both set or both None.

    Attributes:
        input: Original input text
        intent: Detected intent, if any
        slots: Slots of the detected intent, if any intent was detected
    """

    input: str
    intent: IntentClassification | None = None
    slots: list[Slot] | None = None

    @classmethod
    def empty(cls, text: str) -> "ParseResult":
        """Create a result for text that matched no intent."""
        return cls(input=text, intent=None, slots=None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "input": self.input,
            "intent": self.intent.to_dict() if self.intent else None,
            "slots": [s.to_dict() for s in self.slots] if self.slots is not None else None,
        }


@dataclass(frozen=True)
class TaggedEntity:
    """An entity span found while tagging text for one intent.

    Attributes:
        value: Tagged text
        range: Half-open character offsets into the input, when known
        entity: Entity name
        slot_name: Argument name, unset until disambiguation
    """

    value: str
    range: tuple[int, int] | None
    entity: str
    slot_name: str | None = None

    @classmethod
    def from_slot(cls, slot: Slot) -> "TaggedEntity":
        return cls(value=slot.raw_value, range=slot.range, entity=slot.entity, slot_name=slot.slot_name)

    def with_slot_name(self, slot_name: str) -> "TaggedEntity":
        return replace(self, slot_name=slot_name)

    def to_dict(self) -> dict[str, Any]:
        return {
            "value": self.value,
            "range": list(self.range) if self.range is not None else None,
            "entity": self.entity,
            "slot_name": self.slot_name,
        }


__all__ = [
    "SlotValue",
    "Slot",
    "IntentClassification",
    "ParseResult",
    "TaggedEntity",
]
