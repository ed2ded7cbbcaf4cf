"""Abstract base class for intent parsing strategies."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import AbstractSet

from ..builtin_entities import BuiltinEntityKind, BuiltinEntityParser
from .taxonomy import IntentClassification, Slot, SlotValue

logger = logging.getLogger(__name__)


class IntentParser(ABC):
    """Abstract base class for intent parsing strategies.

    The engine holds an ordered list of strategies and asks each one in turn
    to classify the input. The first strategy returning a classification is
    then asked for the slots of that intent.

    Threading:
    - Strategies are built once and never mutated afterwards
    - Both methods must be deterministic and free of side effects
    """

    @abstractmethod
    def get_intent(
        self,
        text: str,
        intents_filter: AbstractSet[str] | None = None,
    ) -> IntentClassification | None:
        """Classify text into an intent.

        Args:
            text: Input text
            intents_filter: Only these intents may be returned (default: all)

        Returns:
            The classification, or None if no intent matches
        """
        ...

    @abstractmethod
    def get_slots(self, text: str, intent_name: str) -> list[Slot]:
        """Extract the slots of an intent from text.

        Args:
            text: Input text
            intent_name: Intent whose slots are extracted

        Returns:
            Slots in order of appearance
        """
        ...


def build_slot(
    text: str,
    char_range: tuple[int, int],
    slot_name: str,
    entity: str,
    builtin_entity_parser: BuiltinEntityParser,
) -> Slot | None:
    """Build a slot from a span of text.

    Custom entities keep the raw text as value; the engine later normalizes
    it against the entity catalog. Builtin entities are resolved by parsing
    the raw text for that entity kind.

    Args:
        text: Input text
        char_range: Half-open character offsets of the slot
        slot_name: Argument name
        entity: Entity name from the intent's slot mapping
        builtin_entity_parser: Parser used to resolve builtin values

    Returns:
        The slot, or None if a builtin value could not be resolved
    """
    start, end = char_range
    raw_value = text[start:end]

    if BuiltinEntityKind.is_builtin(entity):
        kind = BuiltinEntityKind.from_identifier(entity)
        matches = builtin_entity_parser.extract_entities(raw_value, [kind])
        if not matches:
            logger.debug(f"Dropping slot {slot_name}: no {entity} in {raw_value!r}")
            return None
        value = SlotValue.builtin(matches[0].entity)
    else:
        value = SlotValue.custom(raw_value)

    return Slot(raw_value=raw_value, value=value, range=(start, end), entity=entity, slot_name=slot_name)
