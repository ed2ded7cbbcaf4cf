"""Pattern-based intent parsing strategy.

This module provides regex-based intent classification. Each intent owns an
ordered list of patterns whose named groups capture slots. It runs before
the statistical strategy: a pattern match is exact, so it is reported with
probability 1.0.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import AbstractSet, Mapping

from ..builtin_entities import BuiltinEntityParser
from ..configuration import RuleBasedParserConfig
from ..errors import ConfigurationError
from .base import IntentParser, build_slot
from .taxonomy import IntentClassification, Slot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PatternMatch:
    """Result of pattern matching.

    Attributes:
        intent_name: Intent owning the matching pattern
        pattern: The pattern that matched
        match: Regex match object
    """

    intent_name: str
    pattern: re.Pattern[str]
    match: re.Match[str]


class RuleBasedIntentParser(IntentParser):
    """Regex-based intent classification and slot filling.

    Intents are tried in configured order and, within an intent, patterns in
    list order. The first pattern to match wins.
    """

    def __init__(
        self,
        config: RuleBasedParserConfig,
        slot_name_mapping: Mapping[str, Mapping[str, str]],
        builtin_entity_parser: BuiltinEntityParser,
    ) -> None:
        """Compile the configured patterns.

        Args:
            config: Pattern configuration
            slot_name_mapping: Intent -> {slot name: entity name}
            builtin_entity_parser: Parser used to resolve builtin slot values

        Raises:
            ConfigurationError: If a pattern does not compile, or captures a
                group that is not a slot of its intent
        """
        self._slot_name_mapping = slot_name_mapping
        self._group_names_to_slot_names = dict(config.group_names_to_slot_names)
        self._builtin_entity_parser = builtin_entity_parser
        self._compiled: dict[str, list[re.Pattern[str]]] = {}

        for intent_name, patterns in config.patterns.items():
            slots = slot_name_mapping.get(intent_name, {})
            compiled = []
            for pattern in patterns:
                try:
                    regex = re.compile(pattern, re.IGNORECASE)
                except re.error as e:
                    raise ConfigurationError(
                        f"Invalid pattern for intent {intent_name}: {pattern!r} ({e})"
                    ) from e
                for group in regex.groupindex:
                    if self._slot_name(group) not in slots:
                        raise ConfigurationError(
                            f"Pattern group {group!r} is not a slot of intent {intent_name}"
                        )
                compiled.append(regex)
            self._compiled[intent_name] = compiled

    def _slot_name(self, group: str) -> str:
        return self._group_names_to_slot_names.get(group, group)

    def match(
        self,
        text: str,
        intents_filter: AbstractSet[str] | None = None,
    ) -> PatternMatch | None:
        """Find the first pattern matching text.

        Args:
            text: User input text
            intents_filter: Only patterns of these intents are tried

        Returns:
            PatternMatch, or None if no pattern matches
        """
        for intent_name, patterns in self._compiled.items():
            if intents_filter is not None and intent_name not in intents_filter:
                continue
            for pattern in patterns:
                m = pattern.search(text)
                if m:
                    return PatternMatch(intent_name=intent_name, pattern=pattern, match=m)
        return None

    def get_intent(
        self,
        text: str,
        intents_filter: AbstractSet[str] | None = None,
    ) -> IntentClassification | None:
        pattern_match = self.match(text, intents_filter)
        if pattern_match is None:
            return None
        logger.debug(f"Pattern {pattern_match.pattern.pattern!r} matched intent {pattern_match.intent_name}")
        return IntentClassification(intent_name=pattern_match.intent_name, probability=1.0)

    def get_slots(self, text: str, intent_name: str) -> list[Slot]:
        pattern_match = self.match(text, frozenset([intent_name]))
        if pattern_match is None:
            return []

        m = pattern_match.match
        slots_mapping = self._slot_name_mapping.get(intent_name, {})
        slots = []
        for group in pattern_match.pattern.groupindex:
            if not m.group(group):
                continue
            slot_name = self._slot_name(group)
            slot = build_slot(
                text,
                m.span(group),
                slot_name,
                slots_mapping[slot_name],
                self._builtin_entity_parser,
            )
            if slot is not None:
                slots.append(slot)

        slots.sort(key=lambda s: s.range)
        return slots
