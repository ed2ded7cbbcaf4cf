"""Core components for queries."""

from __future__ import annotations

from .builtin_entities import (
    BuiltinEntityKind,
    BuiltinEntityMatch,
    BuiltinEntityParser,
    Language,
    get_builtin_entity_parser,
)
from .configuration import (
    EntityConfig,
    NLUEngineConfiguration,
)
from .engine import (
    MODEL_VERSION,
    NLUEngine,
)
from .errors import (
    ConfigurationError,
    QueriesError,
    UnknownEntityKindError,
    UnknownIntentError,
    UnknownSlotError,
    UnsupportedLanguageError,
)
from .intent import (
    IntentClassification,
    ParseResult,
    Slot,
    SlotValue,
    TaggedEntity,
)

__all__ = [
    # Engine
    "NLUEngine",
    "MODEL_VERSION",
    # Configuration
    "NLUEngineConfiguration",
    "EntityConfig",
    # Results
    "IntentClassification",
    "ParseResult",
    "Slot",
    "SlotValue",
    "TaggedEntity",
    # Builtin entities
    "BuiltinEntityKind",
    "BuiltinEntityMatch",
    "BuiltinEntityParser",
    "Language",
    "get_builtin_entity_parser",
    # Errors
    "QueriesError",
    "ConfigurationError",
    "UnsupportedLanguageError",
    "UnknownEntityKindError",
    "UnknownIntentError",
    "UnknownSlotError",
]
