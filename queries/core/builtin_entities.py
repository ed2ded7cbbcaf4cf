"""Builtin entity recognition for the queries NLU engine.

This module recognizes general-purpose entities (numbers, ordinals,
percentages, amounts of money, temperatures and durations) with a small,
deterministic rule set per language. Composite entities are built on top of
number matches: "5 minutes" is a number followed by a duration unit.

Overlapping candidates are resolved longest-first and the surviving matches
are returned in reading order, so the first match is always the leftmost.

Example usage:
    ```python
    from queries.core.builtin_entities import BuiltinEntityKind, NumberValue, get_builtin_entity_parser

    parser = get_builtin_entity_parser("en")
    matches = parser.extract_entities("make me two cups", [BuiltinEntityKind.NUMBER])
    assert matches[0].entity == NumberValue(2.0)
    ```
"""

from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass, field
from enum import Enum
from functools import lru_cache
from typing import Any, ClassVar, Iterable, Union

from .errors import UnknownEntityKindError, UnsupportedLanguageError

logger = logging.getLogger(__name__)


# ============================================================================
# Languages and Entity Kinds
# ============================================================================


class Language(str, Enum):
    """Languages with a builtin entity ruleset."""

    EN = "en"
    FR = "fr"

    @classmethod
    def from_code(cls, code: str) -> "Language":
        """Map a language code ("en", "fr-FR", ...) to a Language.

        Raises:
            UnsupportedLanguageError: If no ruleset exists for the code
        """
        base = re.split(r"[-_]", code.strip().lower(), maxsplit=1)[0]
        try:
            return cls(base)
        except ValueError:
            raise UnsupportedLanguageError(code) from None


class BuiltinEntityKind(str, Enum):
    """Builtin entity kinds, identified by their configuration names."""

    NUMBER = "snips/number"
    ORDINAL = "snips/ordinal"
    PERCENTAGE = "snips/percentage"
    AMOUNT_OF_MONEY = "snips/amountOfMoney"
    TEMPERATURE = "snips/temperature"
    DURATION = "snips/duration"

    @property
    def identifier(self) -> str:
        return self.value

    @classmethod
    def from_identifier(cls, identifier: str) -> "BuiltinEntityKind":
        """Look up a kind by identifier.

        Raises:
            UnknownEntityKindError: If the identifier is not a builtin kind
        """
        try:
            return cls(identifier)
        except ValueError:
            raise UnknownEntityKindError(identifier) from None

    @classmethod
    def is_builtin(cls, identifier: str) -> bool:
        return identifier in cls._value2member_map_


# Tie-break between candidates of equal length (lower wins)
_KIND_PRIORITY = {
    BuiltinEntityKind.AMOUNT_OF_MONEY: 0,
    BuiltinEntityKind.TEMPERATURE: 1,
    BuiltinEntityKind.DURATION: 2,
    BuiltinEntityKind.PERCENTAGE: 3,
    BuiltinEntityKind.ORDINAL: 4,
    BuiltinEntityKind.NUMBER: 5,
}


# ============================================================================
# Structured Values
# ============================================================================


class _BuiltinValue:
    kind: ClassVar[str]

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, **asdict(self)}


@dataclass(frozen=True)
class NumberValue(_BuiltinValue):
    kind: ClassVar[str] = "Number"
    value: float


@dataclass(frozen=True)
class OrdinalValue(_BuiltinValue):
    kind: ClassVar[str] = "Ordinal"
    value: int


@dataclass(frozen=True)
class PercentageValue(_BuiltinValue):
    kind: ClassVar[str] = "Percentage"
    value: float


@dataclass(frozen=True)
class AmountOfMoneyValue(_BuiltinValue):
    kind: ClassVar[str] = "AmountOfMoney"
    value: float
    unit: str | None = None


@dataclass(frozen=True)
class TemperatureValue(_BuiltinValue):
    kind: ClassVar[str] = "Temperature"
    value: float
    unit: str | None = None


@dataclass(frozen=True)
class DurationValue(_BuiltinValue):
    kind: ClassVar[str] = "Duration"
    years: int = 0
    quarters: int = 0
    months: int = 0
    weeks: int = 0
    days: int = 0
    hours: int = 0
    minutes: int = 0
    seconds: int = 0


BuiltinValue = Union[
    NumberValue,
    OrdinalValue,
    PercentageValue,
    AmountOfMoneyValue,
    TemperatureValue,
    DurationValue,
]


@dataclass(frozen=True)
class BuiltinEntityMatch:
    """A builtin entity found in text.

    Attributes:
        range: Half-open character offsets of the match
        value: Matched surface text
        entity_kind: Kind of the entity
        entity: Structured value
    """

    range: tuple[int, int]
    value: str
    entity_kind: BuiltinEntityKind
    entity: BuiltinValue


# ============================================================================
# Language Rulesets
# ============================================================================


@dataclass(frozen=True)
class _Ruleset:
    number_words: dict[str, int]
    tens: frozenset[str]
    scales: dict[str, int]
    joiners: frozenset[str]
    ordinal_words: dict[str, int]
    ordinal_suffix: str
    percent_words: tuple[str, ...]
    currency_words: dict[str, str]
    degree_words: tuple[str, ...]
    temperature_units: dict[str, str]
    duration_units: dict[str, str]
    articles: tuple[str, ...] = field(default_factory=tuple)


_EN = _Ruleset(
    number_words={
        "zero": 0, "one": 1, "two": 2, "three": 3, "four": 4, "five": 5,
        "six": 6, "seven": 7, "eight": 8, "nine": 9, "ten": 10,
        "eleven": 11, "twelve": 12, "thirteen": 13, "fourteen": 14,
        "fifteen": 15, "sixteen": 16, "seventeen": 17, "eighteen": 18,
        "nineteen": 19, "twenty": 20, "thirty": 30, "forty": 40,
        "fifty": 50, "sixty": 60, "seventy": 70, "eighty": 80, "ninety": 90,
    },
    tens=frozenset(
        ["twenty", "thirty", "forty", "fifty", "sixty", "seventy", "eighty", "ninety"]
    ),
    scales={"hundred": 100, "thousand": 1_000, "million": 1_000_000},
    joiners=frozenset(["and"]),
    ordinal_words={
        "first": 1, "second": 2, "third": 3, "fourth": 4, "fifth": 5,
        "sixth": 6, "seventh": 7, "eighth": 8, "ninth": 9, "tenth": 10,
        "eleventh": 11, "twelfth": 12, "thirteenth": 13, "twentieth": 20,
    },
    ordinal_suffix=r"st|nd|rd|th",
    percent_words=("percent", "per cent"),
    currency_words={
        "dollar": "$", "dollars": "$", "bucks": "$",
        "euro": "€", "euros": "€",
        "pound": "£", "pounds": "£",
    },
    degree_words=("degrees", "degree"),
    temperature_units={"celsius": "celsius", "fahrenheit": "fahrenheit", "c": "celsius", "f": "fahrenheit"},
    duration_units={
        "seconds": "seconds", "second": "seconds", "secs": "seconds", "sec": "seconds",
        "minutes": "minutes", "minute": "minutes", "mins": "minutes", "min": "minutes",
        "hours": "hours", "hour": "hours", "hrs": "hours", "hr": "hours",
        "days": "days", "day": "days",
        "weeks": "weeks", "week": "weeks",
        "months": "months", "month": "months",
        "quarters": "quarters", "quarter": "quarters",
        "years": "years", "year": "years",
    },
    articles=("a", "an"),
)

_FR = _Ruleset(
    number_words={
        "zéro": 0, "zero": 0, "un": 1, "une": 1, "deux": 2, "trois": 3,
        "quatre": 4, "cinq": 5, "six": 6, "sept": 7, "huit": 8, "neuf": 9,
        "dix": 10, "onze": 11, "douze": 12, "treize": 13, "quatorze": 14,
        "quinze": 15, "seize": 16, "vingt": 20, "trente": 30,
        "quarante": 40, "cinquante": 50, "soixante": 60,
        "quatre-vingt": 80, "quatre-vingts": 80,
    },
    tens=frozenset(["vingt", "trente", "quarante", "cinquante", "soixante"]),
    scales={"cent": 100, "cents": 100, "mille": 1_000, "million": 1_000_000, "millions": 1_000_000},
    joiners=frozenset(["et"]),
    ordinal_words={
        "premier": 1, "première": 1, "deuxième": 2, "second": 2, "seconde": 2,
        "troisième": 3, "quatrième": 4, "cinquième": 5, "sixième": 6,
        "septième": 7, "huitième": 8, "neuvième": 9, "dixième": 10,
    },
    ordinal_suffix=r"er|re|ère|ème|eme|e",
    percent_words=("pour cent", "pourcent"),
    currency_words={"euro": "€", "euros": "€", "dollar": "$", "dollars": "$", "livres": "£"},
    degree_words=("degrés", "degré", "degres", "degre"),
    temperature_units={"celsius": "celsius", "fahrenheit": "fahrenheit", "c": "celsius", "f": "fahrenheit"},
    duration_units={
        "secondes": "seconds", "seconde": "seconds", "sec": "seconds",
        "minutes": "minutes", "minute": "minutes", "min": "minutes",
        "heures": "hours", "heure": "hours", "h": "hours",
        "jours": "days", "jour": "days",
        "semaines": "weeks", "semaine": "weeks",
        "mois": "months",
        "trimestres": "quarters", "trimestre": "quarters",
        "années": "years", "année": "years", "ans": "years", "an": "years",
    },
)

_RULESETS: dict[Language, _Ruleset] = {Language.EN: _EN, Language.FR: _FR}

_DIGITS = re.compile(r"(?<![\w.,])(\d{1,3}(?:,\d{3})+|\d+)(\.\d+)?(?!\w)")
_WORD = re.compile(r"[^\W\d_]+(?:-[^\W\d_]+)*")
_CURRENCY_SYMBOLS = {"$": "$", "€": "€", "£": "£"}


def _alternation(words: Iterable[str]) -> str:
    return "|".join(re.escape(w) for w in sorted(words, key=len, reverse=True))


# ============================================================================
# Parser
# ============================================================================


@dataclass(frozen=True)
class _NumberSpan:
    start: int
    end: int
    value: float


class BuiltinEntityParser:
    """Rule-based recognizer for builtin entities of one language.

    Instances hold only compiled, read-only state and can be shared freely
    across threads. Use ``get_builtin_entity_parser`` to obtain the shared
    instance for a language.
    """

    def __init__(self, language: Language) -> None:
        self.language = language
        self._rules = _RULESETS[language]
        rules = self._rules

        self._ordinal_digits = re.compile(
            rf"(?<![\w.,])(\d+)({rules.ordinal_suffix})(?!\w)", re.IGNORECASE
        )
        self._percent_suffix = re.compile(
            rf"\s*(?:%|(?:{_alternation(rules.percent_words)})(?!\w))", re.IGNORECASE
        )
        self._money_prefix = re.compile(r"([$€£])\s*$")
        self._money_suffix = re.compile(
            rf"\s*([$€£])|\s+({_alternation(rules.currency_words)})(?!\w)", re.IGNORECASE
        )
        self._temperature_suffix = re.compile(
            rf"\s*°\s*([cf](?![a-z]))?"
            rf"|\s+(?:{_alternation(rules.degree_words)})"
            rf"(?:\s+({_alternation(rules.temperature_units)})(?!\w))?(?!\w)",
            re.IGNORECASE,
        )
        self._duration_suffix = re.compile(
            rf"\s*({_alternation(rules.duration_units)})(?!\w)", re.IGNORECASE
        )
        self._article_duration = (
            re.compile(
                rf"(?<!\w)(?:{_alternation(rules.articles)})\s+"
                rf"({_alternation(rules.duration_units)})(?!\w)",
                re.IGNORECASE,
            )
            if rules.articles
            else None
        )

    def extract_entities(
        self,
        text: str,
        kinds: Iterable[BuiltinEntityKind] | None = None,
    ) -> list[BuiltinEntityMatch]:
        """Find builtin entities in text.

        Args:
            text: Input text
            kinds: Restrict results to these kinds (default: all kinds)

        Returns:
            Non-overlapping matches sorted by start offset
        """
        wanted = set(kinds) if kinds is not None else set(BuiltinEntityKind)
        if not wanted or not text:
            return []

        numbers = self._numbers(text)
        candidates: list[BuiltinEntityMatch] = []

        if BuiltinEntityKind.NUMBER in wanted:
            candidates.extend(
                self._match(text, n.start, n.end, BuiltinEntityKind.NUMBER, NumberValue(n.value))
                for n in numbers
            )
        if BuiltinEntityKind.ORDINAL in wanted:
            candidates.extend(self._ordinals(text))
        if BuiltinEntityKind.PERCENTAGE in wanted:
            candidates.extend(self._percentages(text, numbers))
        if BuiltinEntityKind.AMOUNT_OF_MONEY in wanted:
            candidates.extend(self._amounts_of_money(text, numbers))
        if BuiltinEntityKind.TEMPERATURE in wanted:
            candidates.extend(self._temperatures(text, numbers))
        if BuiltinEntityKind.DURATION in wanted:
            candidates.extend(self._durations(text, numbers))

        # Longest first, then leftmost, then kind priority
        candidates.sort(
            key=lambda m: (m.range[0] - m.range[1], m.range[0], _KIND_PRIORITY[m.entity_kind])
        )
        accepted: list[BuiltinEntityMatch] = []
        for candidate in candidates:
            start, end = candidate.range
            if any(start < a.range[1] and a.range[0] < end for a in accepted):
                continue
            accepted.append(candidate)

        accepted.sort(key=lambda m: m.range[0])
        logger.debug(f"Builtin entities in {text!r}: {[m.value for m in accepted]}")
        return accepted

    @staticmethod
    def _match(
        text: str, start: int, end: int, kind: BuiltinEntityKind, entity: BuiltinValue
    ) -> BuiltinEntityMatch:
        return BuiltinEntityMatch(range=(start, end), value=text[start:end], entity_kind=kind, entity=entity)

    # --- Numbers ---

    def _numbers(self, text: str) -> list[_NumberSpan]:
        spans = [
            _NumberSpan(m.start(), m.end(), float(m.group(1).replace(",", "") + (m.group(2) or "")))
            for m in _DIGITS.finditer(text)
        ]
        spans.extend(self._number_words(text))
        spans.sort(key=lambda s: s.start)
        return spans

    def _word_value(self, word: str) -> int | None:
        rules = self._rules
        if word in rules.number_words:
            return rules.number_words[word]
        if word in rules.scales:
            return rules.scales[word]
        if "-" not in word:
            return None

        # Hyphenated compounds: "twenty-one", "dix-sept", "quatre-vingt-dix"
        parts = [p for p in word.split("-") if p not in rules.joiners]
        values: list[int] = []
        i = 0
        while i < len(parts):
            pair = "-".join(parts[i : i + 2])
            if i + 1 < len(parts) and pair in rules.number_words:
                values.append(rules.number_words[pair])
                i += 2
            elif parts[i] in rules.number_words:
                values.append(rules.number_words[parts[i]])
                i += 1
            else:
                return None
        # Each part must be smaller than the one before it ("two-three" is not a number)
        if any(later >= earlier for earlier, later in zip(values, values[1:])):
            return None
        return sum(values)

    def _joins(self, previous: str, word: str, gap: str) -> bool:
        rules = self._rules
        gap_words = gap.split()
        if gap_words:
            joined_by_and = (
                len(gap_words) == 1 and gap_words[0] in rules.joiners and previous in rules.scales
            )
            if not joined_by_and:
                return False
        if previous in rules.scales or word in rules.scales:
            return True
        value = rules.number_words.get(word)
        return previous in rules.tens and value is not None and 0 < value < 10

    def _number_words(self, text: str) -> list[_NumberSpan]:
        groups: list[list[tuple[re.Match[str], str, int]]] = []
        for m in _WORD.finditer(text):
            word = m.group().lower()
            value = self._word_value(word)
            if value is None:
                continue
            if groups:
                last_match, last_word, _ = groups[-1][-1]
                gap = text[last_match.end() : m.start()].lower()
                if self._joins(last_word, word, gap):
                    groups[-1].append((m, word, value))
                    continue
            groups.append([(m, word, value)])

        return [
            _NumberSpan(group[0][0].start(), group[-1][0].end(), float(self._combine(group)))
            for group in groups
        ]

    def _combine(self, group: list[tuple[re.Match[str], str, int]]) -> int:
        total = 0
        current = 0
        for _, word, value in group:
            if word in self._rules.scales:
                if value == 100:
                    current = (current or 1) * value
                else:
                    total += (current or 1) * value
                    current = 0
            else:
                current += value
        return total + current

    # --- Ordinals ---

    def _ordinals(self, text: str) -> list[BuiltinEntityMatch]:
        matches = [
            self._match(text, m.start(), m.end(), BuiltinEntityKind.ORDINAL, OrdinalValue(int(m.group(1))))
            for m in self._ordinal_digits.finditer(text)
        ]
        for m in _WORD.finditer(text):
            value = self._rules.ordinal_words.get(m.group().lower())
            if value is not None:
                matches.append(
                    self._match(text, m.start(), m.end(), BuiltinEntityKind.ORDINAL, OrdinalValue(value))
                )
        return matches

    # --- Composites built on numbers ---

    def _percentages(self, text: str, numbers: list[_NumberSpan]) -> list[BuiltinEntityMatch]:
        matches = []
        for n in numbers:
            suffix = self._percent_suffix.match(text, n.end)
            if suffix:
                matches.append(
                    self._match(
                        text, n.start, suffix.end(), BuiltinEntityKind.PERCENTAGE, PercentageValue(n.value)
                    )
                )
        return matches

    def _amounts_of_money(self, text: str, numbers: list[_NumberSpan]) -> list[BuiltinEntityMatch]:
        matches = []
        for n in numbers:
            prefix = self._money_prefix.search(text, 0, n.start)
            if prefix:
                unit = _CURRENCY_SYMBOLS[prefix.group(1)]
                matches.append(
                    self._match(
                        text, prefix.start(1), n.end, BuiltinEntityKind.AMOUNT_OF_MONEY,
                        AmountOfMoneyValue(n.value, unit),
                    )
                )
                continue
            suffix = self._money_suffix.match(text, n.end)
            if suffix:
                if suffix.group(1):
                    unit = _CURRENCY_SYMBOLS[suffix.group(1)]
                else:
                    unit = self._rules.currency_words[suffix.group(2).lower()]
                matches.append(
                    self._match(
                        text, n.start, suffix.end(), BuiltinEntityKind.AMOUNT_OF_MONEY,
                        AmountOfMoneyValue(n.value, unit),
                    )
                )
        return matches

    def _temperatures(self, text: str, numbers: list[_NumberSpan]) -> list[BuiltinEntityMatch]:
        matches = []
        for n in numbers:
            suffix = self._temperature_suffix.match(text, n.end)
            if not suffix:
                continue
            unit_word = suffix.group(1) or suffix.group(2)
            unit = self._rules.temperature_units[unit_word.lower()] if unit_word else "degree"
            matches.append(
                self._match(
                    text, n.start, suffix.end(), BuiltinEntityKind.TEMPERATURE, TemperatureValue(n.value, unit)
                )
            )
        return matches

    def _durations(self, text: str, numbers: list[_NumberSpan]) -> list[BuiltinEntityMatch]:
        units = self._rules.duration_units
        matches = []
        for n in numbers:
            if not n.value.is_integer():
                continue
            suffix = self._duration_suffix.match(text, n.end)
            if suffix:
                grain = units[suffix.group(1).lower()]
                matches.append(
                    self._match(
                        text, n.start, suffix.end(), BuiltinEntityKind.DURATION,
                        DurationValue(**{grain: int(n.value)}),
                    )
                )
        if self._article_duration is not None:
            for m in self._article_duration.finditer(text):
                grain = units[m.group(1).lower()]
                matches.append(
                    self._match(text, m.start(), m.end(), BuiltinEntityKind.DURATION, DurationValue(**{grain: 1}))
                )
        return matches


@lru_cache(maxsize=None)
def _parser_for(language: Language) -> BuiltinEntityParser:
    logger.debug(f"Compiling builtin entity parser for {language.value}")
    return BuiltinEntityParser(language)


def get_builtin_entity_parser(language: str | Language) -> BuiltinEntityParser:
    """Return the shared parser for a language.

    Raises:
        UnsupportedLanguageError: If the language has no ruleset
    """
    if not isinstance(language, Language):
        language = Language.from_code(language)
    return _parser_for(language)


__all__ = [
    "Language",
    "BuiltinEntityKind",
    "NumberValue",
    "OrdinalValue",
    "PercentageValue",
    "AmountOfMoneyValue",
    "TemperatureValue",
    "DurationValue",
    "BuiltinValue",
    "BuiltinEntityMatch",
    "BuiltinEntityParser",
    "get_builtin_entity_parser",
]
