"""NLU engine orchestrator for queries.

The engine exposes three entry points:
1. parse - Waterfall over the configured strategies (pattern-based first,
   then statistical). The first strategy to classify the text wins and its
   slots are normalized against the custom entity catalog.
2. extract_slot - Resolve a single slot of a known intent without
   classifying the text.
3. tag - Tag entity spans for one intent. When the intent has little
   training data, the statistical slots are layered under exact catalog
   matches and builtin entities.

All configuration state is built once and never mutated, so one engine can
serve concurrent callers.
"""

from __future__ import annotations

import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from .. import __version__
from ..config import EngineSettings
from .builtin_entities import BuiltinEntityKind, Language, get_builtin_entity_parser
from .configuration import EntityConfig, ModelConfig, NLUEngineConfiguration
from .errors import ConfigurationError, UnknownIntentError, UnknownSlotError
from .intent.base import IntentParser
from .intent.patterns import RuleBasedIntentParser
from .intent.probabilistic import ProbabilisticIntentParser
from .intent.tagging import disambiguate_tagged_entities, enrich_entities, tag_builtin_entities
from .intent.taxonomy import ParseResult, Slot, SlotValue, TaggedEntity
from .tokenization import compute_all_ngrams, substring_with_char_range, tokenize

logger = logging.getLogger(__name__)

MODEL_VERSION = __version__


class NLUEngine:
    """Intent parsing engine.

    Attributes:
        settings: Runtime settings (low-data threshold, log level)
    """

    def __init__(
        self,
        configuration: NLUEngineConfiguration | Mapping[str, Any],
        settings: EngineSettings | None = None,
    ) -> None:
        """Build the engine from a configuration.

        Args:
            configuration: Validated configuration or a raw mapping
            settings: Runtime settings (default: from environment)

        Raises:
            ConfigurationError: If the configuration is invalid
            UnsupportedLanguageError: If the language has no builtin ruleset
        """
        if not isinstance(configuration, NLUEngineConfiguration):
            configuration = NLUEngineConfiguration.from_dict(dict(configuration))

        self.settings = settings or EngineSettings()
        self._language = Language.from_code(configuration.language)
        self._builtin_entity_parser = get_builtin_entity_parser(self._language)
        self._entities: Mapping[str, EntityConfig] = MappingProxyType(dict(configuration.entities))
        self._intents_data_sizes: Mapping[str, int] = MappingProxyType(
            dict(configuration.intents_data_sizes)
        )
        self._slot_name_mapping: Mapping[str, Mapping[str, str]] = MappingProxyType(
            {intent: MappingProxyType(dict(slots)) for intent, slots in configuration.slot_name_mapping.items()}
        )
        self._check_slot_entities()
        self._parsers: tuple[IntentParser, ...] = self._build_parsers(configuration.model)
        logger.debug(
            f"Engine ready: language={self._language.value}, "
            f"parsers={[type(p).__name__ for p in self._parsers]}"
        )

    @classmethod
    def from_path(cls, path: Path | str, settings: EngineSettings | None = None) -> "NLUEngine":
        """Build an engine from a JSON or YAML configuration file."""
        return cls(NLUEngineConfiguration.load(path), settings)

    def _check_slot_entities(self) -> None:
        for intent_name, slots in self._slot_name_mapping.items():
            for slot_name, entity in slots.items():
                if entity not in self._entities and not BuiltinEntityKind.is_builtin(entity):
                    raise ConfigurationError(
                        f"Slot {slot_name} of intent {intent_name} uses unknown entity {entity}"
                    )

    def _build_parsers(self, model: ModelConfig) -> tuple[IntentParser, ...]:
        parsers: list[IntentParser] = []
        if model.rule_based_parser is not None:
            parsers.append(
                RuleBasedIntentParser(
                    model.rule_based_parser, self._slot_name_mapping, self._builtin_entity_parser
                )
            )
        if model.probabilistic_parser is not None:
            parsers.append(
                ProbabilisticIntentParser(
                    model.probabilistic_parser, self._slot_name_mapping, self._builtin_entity_parser
                )
            )
        return tuple(parsers)

    @property
    def language(self) -> str:
        return self._language.value

    @property
    def parsers(self) -> tuple[IntentParser, ...]:
        return self._parsers

    @staticmethod
    def model_version() -> str:
        return MODEL_VERSION

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def parse(self, text: str, intents_filter: Iterable[str] | None = None) -> ParseResult:
        """Parse text through the strategy waterfall.

        Args:
            text: User input text
            intents_filter: Only these intents may be returned (default: all)

        Returns:
            ParseResult; intent and slots are both None when nothing matched
        """
        if not self._parsers:
            return ParseResult.empty(text)

        allowed = frozenset(intents_filter) if intents_filter is not None else None
        for parser in self._parsers:
            classification = parser.get_intent(text, allowed)
            if classification is None:
                continue

            slots = []
            for slot in parser.get_slots(text, classification.intent_name):
                resolved = self._resolve_slot(slot)
                if resolved is not None:
                    slots.append(resolved)
            return ParseResult(input=text, intent=classification, slots=slots)

        logger.debug(f"No intent found for {text!r}")
        return ParseResult.empty(text)

    def _resolve_slot(self, slot: Slot) -> Slot | None:
        entity = self._entities.get(slot.entity)
        if entity is None:
            # Builtin entity, already resolved by the strategy
            return slot

        reference_value = entity.utterances.get(slot.raw_value)
        if reference_value is not None:
            return slot.with_slot_value(SlotValue.custom(reference_value))
        if entity.automatically_extensible:
            return slot

        logger.debug(f"Dropping slot {slot.slot_name}: {slot.raw_value!r} is not a {slot.entity}")
        return None

    # ------------------------------------------------------------------
    # Single slot extraction
    # ------------------------------------------------------------------

    def _slots_of(self, intent_name: str) -> Mapping[str, str]:
        slots = self._slot_name_mapping.get(intent_name)
        if slots is None:
            raise UnknownIntentError(intent_name)
        return slots

    def extract_slot(self, text: str, intent_name: str, slot_name: str) -> Slot | None:
        """Extract one slot of a known intent from text.

        Custom entities must match the whole text exactly. Builtin entities
        take the first builtin match of the slot's kind.

        Args:
            text: Text holding the slot value
            intent_name: Intent owning the slot
            slot_name: Slot to extract

        Returns:
            The slot (without a range), or None if the text holds no value

        Raises:
            UnknownIntentError: If the intent is not configured
            UnknownSlotError: If the slot is not an argument of the intent
        """
        entity_name = self._slots_of(intent_name).get(slot_name)
        if entity_name is None:
            raise UnknownSlotError(intent_name, slot_name)

        custom_entity = self._entities.get(entity_name)
        if custom_entity is not None:
            return self._extract_custom_slot(text, entity_name, slot_name, custom_entity)
        return self._extract_builtin_slot(text, entity_name, slot_name)

    @staticmethod
    def _extract_custom_slot(
        text: str, entity_name: str, slot_name: str, entity: EntityConfig
    ) -> Slot | None:
        reference_value = entity.utterances.get(text)
        if reference_value is None:
            if not entity.automatically_extensible:
                return None
            reference_value = text
        return Slot(
            raw_value=text,
            value=SlotValue.custom(reference_value),
            range=None,
            entity=entity_name,
            slot_name=slot_name,
        )

    def _extract_builtin_slot(self, text: str, entity_name: str, slot_name: str) -> Slot | None:
        kind = BuiltinEntityKind.from_identifier(entity_name)
        matches = self._builtin_entity_parser.extract_entities(text, [kind])
        if not matches:
            return None
        match = matches[0]
        return Slot(
            raw_value=substring_with_char_range(text, match.range),
            value=SlotValue.builtin(match.entity),
            range=None,
            entity=entity_name,
            slot_name=slot_name,
        )

    # ------------------------------------------------------------------
    # Tagging
    # ------------------------------------------------------------------

    def tag(self, text: str, intent_name: str, threshold: int | None = None) -> list[TaggedEntity]:
        """Tag the entities of one intent in text.

        The baseline tags are the slots ``parse`` finds with the intent filter
        set to this intent. If the intent has at least ``threshold`` training
        examples the baseline is returned as is. Otherwise catalog matches,
        builtin entities and the baseline are layered in that order (earlier
        layers win overlaps) and slot names are assigned from the intent's
        slot mapping.

        Args:
            text: Text to tag
            intent_name: Intent whose entities are tagged
            threshold: Low-data threshold (default: settings value)

        Returns:
            Tagged entities

        Raises:
            UnknownIntentError: If the intent has no data size or slot mapping
        """
        intent_data_size = self._intents_data_sizes.get(intent_name)
        if intent_data_size is None:
            raise UnknownIntentError(intent_name)
        slot_name_mapping = self._slots_of(intent_name)
        intent_entities = frozenset(slot_name_mapping.values())
        if threshold is None:
            threshold = self.settings.small_data_regime_threshold

        parsed_slots = self.parse(text, [intent_name]).slots or []
        parsed_entities = [TaggedEntity.from_slot(slot) for slot in parsed_slots]

        if intent_data_size >= threshold:
            return parsed_entities

        logger.debug(
            f"Intent {intent_name} has {intent_data_size} examples (< {threshold}); augmenting tags"
        )
        tagged_entities = enrich_entities(
            self.tag_seen_entities(text, intent_entities),
            tag_builtin_entities(text, self.language),
        )
        tagged_entities = enrich_entities(tagged_entities, parsed_entities)
        return disambiguate_tagged_entities(tagged_entities, slot_name_mapping)

    def tag_seen_entities(self, text: str, intent_entities: Iterable[str]) -> list[TaggedEntity]:
        """Tag spans of text that exactly match catalog utterances.

        Every token n-gram is looked up in the utterances of the given
        entities, longest n-grams first. An n-gram matching utterances of
        several entities is ambiguous and ignored. A match is kept only if it
        does not overlap a longer match kept before it.

        Args:
            text: Text to tag
            intent_entities: Entity names eligible for matching

        Returns:
            Tagged entities without slot names
        """
        wanted = frozenset(intent_entities)
        entities = [(name, entity) for name, entity in self._entities.items() if name in wanted]
        tokens = tokenize(text)
        ngrams = sorted(compute_all_ngrams(tokens), key=lambda ngram: -len(ngram.indexes))

        tagged_entities: list[TaggedEntity] = []
        for ngram in ngrams:
            matching = [name for name, entity in entities if ngram.value in entity.utterances]
            if len(matching) != 1:
                continue
            char_range = (tokens[ngram.indexes[0]].start, tokens[ngram.indexes[-1]].end)
            candidate = TaggedEntity(
                value=substring_with_char_range(text, char_range),
                range=char_range,
                entity=matching[0],
            )
            tagged_entities = enrich_entities(tagged_entities, [candidate])
        return tagged_entities


__all__ = ["MODEL_VERSION", "NLUEngine"]
