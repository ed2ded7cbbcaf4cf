"""Exceptions raised by the queries NLU engine.

"No match" is never an error: empty classifications, empty slot lists and
empty tag sequences are ordinary results. Everything here signals either a
bad configuration (raised at construction) or a bad request (unknown intent
or slot name).
"""

from __future__ import annotations


class QueriesError(Exception):
    """Base exception for engine errors."""

    pass


class ConfigurationError(QueriesError):
    """Engine configuration is malformed or inconsistent."""

    pass


class UnsupportedLanguageError(ConfigurationError):
    """Language code has no builtin entity ruleset."""

    def __init__(self, language: str) -> None:
        super().__init__(f"Unsupported language: {language}")
        self.language = language


class UnknownEntityKindError(ConfigurationError):
    """Identifier does not name a builtin entity kind."""

    def __init__(self, identifier: str) -> None:
        super().__init__(f"Unknown builtin entity kind: {identifier}")
        self.identifier = identifier


class UnknownIntentError(QueriesError):
    """Intent is absent from the slot name mapping or data size table."""

    def __init__(self, intent_name: str) -> None:
        super().__init__(f"Unknown intent: {intent_name}")
        self.intent_name = intent_name


class UnknownSlotError(QueriesError):
    """Slot is not a registered argument of a known intent."""

    def __init__(self, intent_name: str, slot_name: str) -> None:
        super().__init__(f"Unknown slot: {slot_name} (intent: {intent_name})")
        self.intent_name = intent_name
        self.slot_name = slot_name


__all__ = [
    "QueriesError",
    "ConfigurationError",
    "UnsupportedLanguageError",
    "UnknownEntityKindError",
    "UnknownIntentError",
    "UnknownSlotError",
]
