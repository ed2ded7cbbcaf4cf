"""Intent parsing strategies for the queries NLU engine.

This package provides the strategies the engine tries in order, and the
tagging helpers used for intents with little training data.

Strategies:
1. RuleBasedIntentParser - Regex patterns with named slot groups
2. ProbabilisticIntentParser - Logistic regression intent classifier plus
   linear-chain slot fillers

Example usage:
    ```python
    from queries.core.intent import RuleBasedIntentParser
    from queries.core.configuration import RuleBasedParserConfig
    from queries.core.builtin_entities import get_builtin_entity_parser

    parser = RuleBasedIntentParser(
        RuleBasedParserConfig(patterns={"MakeTea": [r"^make me (?P<number_of_cups>\\w+) teas?$"]}),
        {"MakeTea": {"number_of_cups": "snips/number"}},
        get_builtin_entity_parser("en"),
    )

    result = parser.get_intent("make me three teas")
    assert result.intent_name == "MakeTea"
    ```
"""

from .base import IntentParser, build_slot
from .patterns import PatternMatch, RuleBasedIntentParser
from .probabilistic import (
    LinearChainSlotFiller,
    LogRegIntentClassifier,
    ProbabilisticIntentParser,
)
from .tagging import (
    disambiguate_tagged_entities,
    enrich_entities,
    ranges_overlap,
    tag_builtin_entities,
)
from .taxonomy import (
    IntentClassification,
    ParseResult,
    Slot,
    SlotValue,
    TaggedEntity,
)

__all__ = [
    # Strategies
    "IntentParser",
    "RuleBasedIntentParser",
    "PatternMatch",
    "ProbabilisticIntentParser",
    "LogRegIntentClassifier",
    "LinearChainSlotFiller",
    "build_slot",
    # Results
    "IntentClassification",
    "ParseResult",
    "Slot",
    "SlotValue",
    "TaggedEntity",
    # Tagging
    "ranges_overlap",
    "enrich_entities",
    "tag_builtin_entities",
    "disambiguate_tagged_entities",
]
