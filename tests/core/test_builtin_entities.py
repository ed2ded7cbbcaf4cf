"""Tests for builtin entity recognition.

Tests cover:
- Language and entity kind lookups
- Numbers (digits and words), ordinals
- Composite entities (percentages, money, temperatures, durations)
- Overlap resolution and kind filtering
- French ruleset
"""

from __future__ import annotations

import pytest

from queries.core.builtin_entities import (
    AmountOfMoneyValue,
    BuiltinEntityKind,
    BuiltinEntityParser,
    DurationValue,
    Language,
    NumberValue,
    OrdinalValue,
    PercentageValue,
    TemperatureValue,
    get_builtin_entity_parser,
)
from queries.core.errors import UnknownEntityKindError, UnsupportedLanguageError


def _entities(parser: BuiltinEntityParser, text: str, kinds=None) -> list:
    return [m.entity for m in parser.extract_entities(text, kinds)]


# ============================================================================
# Lookup Tests
# ============================================================================


class TestLanguage:
    """Tests for Language.from_code."""

    def test_plain_code(self) -> None:
        """Plain codes map to languages."""
        assert Language.from_code("en") is Language.EN

    def test_regional_code(self) -> None:
        """Regional variants use the base language."""
        assert Language.from_code("fr-FR") is Language.FR
        assert Language.from_code("EN_us") is Language.EN

    def test_unsupported(self) -> None:
        """Unknown languages raise UnsupportedLanguageError."""
        with pytest.raises(UnsupportedLanguageError) as exc_info:
            Language.from_code("de")
        assert exc_info.value.language == "de"


class TestBuiltinEntityKind:
    """Tests for entity kind identifiers."""

    def test_from_identifier(self) -> None:
        """Identifiers resolve to kinds."""
        assert BuiltinEntityKind.from_identifier("snips/amountOfMoney") is BuiltinEntityKind.AMOUNT_OF_MONEY

    def test_unknown_identifier(self) -> None:
        """Unknown identifiers raise UnknownEntityKindError."""
        with pytest.raises(UnknownEntityKindError):
            BuiltinEntityKind.from_identifier("snips/datetime")

    def test_is_builtin(self) -> None:
        """is_builtin tells builtin identifiers from custom entity names."""
        assert BuiltinEntityKind.is_builtin("snips/number")
        assert not BuiltinEntityKind.is_builtin("coffee_type")


class TestGetBuiltinEntityParser:
    """Tests for the shared parser cache."""

    def test_shared_instance(self) -> None:
        """The same parser is returned for equivalent language codes."""
        assert get_builtin_entity_parser("en") is get_builtin_entity_parser(Language.EN)
        assert get_builtin_entity_parser("en-GB") is get_builtin_entity_parser("en")

    def test_unsupported(self) -> None:
        """Unsupported languages raise UnsupportedLanguageError."""
        with pytest.raises(UnsupportedLanguageError):
            get_builtin_entity_parser("xx")


# ============================================================================
# English Tests
# ============================================================================


class TestEnglishNumbers:
    """Tests for number recognition in English."""

    @pytest.fixture
    def parser(self) -> BuiltinEntityParser:
        return get_builtin_entity_parser("en")

    def test_digits(self, parser: BuiltinEntityParser) -> None:
        """Plain digits are numbers."""
        matches = parser.extract_entities("make me 3 cups")
        assert len(matches) == 1
        assert matches[0].range == (8, 9)
        assert matches[0].value == "3"
        assert matches[0].entity == NumberValue(3.0)

    def test_decimal_and_grouped_digits(self, parser: BuiltinEntityParser) -> None:
        """Decimals and thousands separators are read as one number."""
        assert _entities(parser, "3.5") == [NumberValue(3.5)]
        assert _entities(parser, "1,200") == [NumberValue(1200.0)]

    def test_single_word(self, parser: BuiltinEntityParser) -> None:
        """Number words are numbers."""
        matches = parser.extract_entities("make me two cups")
        assert matches[0].range == (8, 11)
        assert matches[0].entity == NumberValue(2.0)

    def test_compound_words(self, parser: BuiltinEntityParser) -> None:
        """Tens followed by units combine."""
        assert _entities(parser, "twenty one") == [NumberValue(21.0)]
        assert _entities(parser, "twenty-one") == [NumberValue(21.0)]

    def test_scales(self, parser: BuiltinEntityParser) -> None:
        """Scale words multiply, and 'and' may follow a scale."""
        matches = parser.extract_entities("one hundred and five")
        assert len(matches) == 1
        assert matches[0].value == "one hundred and five"
        assert matches[0].entity == NumberValue(105.0)
        assert _entities(parser, "two thousand three hundred") == [NumberValue(2300.0)]

    def test_adjacent_units_stay_apart(self, parser: BuiltinEntityParser) -> None:
        """Two unit words in a row are two numbers."""
        assert _entities(parser, "two three") == [NumberValue(2.0), NumberValue(3.0)]

    def test_ascending_hyphen_compound_rejected(self, parser: BuiltinEntityParser) -> None:
        """A hyphenated run that does not descend is not a number."""
        assert _entities(parser, "two-three") == []

    def test_digits_inside_words_ignored(self, parser: BuiltinEntityParser) -> None:
        """Digits glued to letters are not numbers."""
        assert _entities(parser, "room b12", [BuiltinEntityKind.NUMBER]) == []

    def test_no_entities(self, parser: BuiltinEntityParser) -> None:
        """Text without entities yields nothing."""
        assert parser.extract_entities("hello there") == []
        assert parser.extract_entities("") == []


class TestEnglishComposites:
    """Tests for composite entities in English."""

    @pytest.fixture
    def parser(self) -> BuiltinEntityParser:
        return get_builtin_entity_parser("en")

    def test_ordinals(self, parser: BuiltinEntityParser) -> None:
        """Ordinal digits and words are ordinals."""
        assert _entities(parser, "the 1st one", [BuiltinEntityKind.ORDINAL]) == [OrdinalValue(1)]
        assert _entities(parser, "the third cup") == [OrdinalValue(3)]

    def test_percentage(self, parser: BuiltinEntityParser) -> None:
        """Numbers followed by a percent sign or word are percentages."""
        assert _entities(parser, "50%") == [PercentageValue(50.0)]
        assert _entities(parser, "twenty percent") == [PercentageValue(20.0)]

    def test_amount_of_money(self, parser: BuiltinEntityParser) -> None:
        """Currency symbols and words make amounts of money."""
        matches = parser.extract_entities("it costs $45")
        assert matches[0].range == (9, 12)
        assert matches[0].entity == AmountOfMoneyValue(45.0, "$")
        assert _entities(parser, "10 euros") == [AmountOfMoneyValue(10.0, "€")]

    def test_temperature(self, parser: BuiltinEntityParser) -> None:
        """Degrees with or without a unit are temperatures."""
        assert _entities(parser, "20°C") == [TemperatureValue(20.0, "celsius")]
        assert _entities(parser, "70 degrees fahrenheit") == [TemperatureValue(70.0, "fahrenheit")]
        assert _entities(parser, "80 degrees") == [TemperatureValue(80.0, "degree")]

    def test_duration(self, parser: BuiltinEntityParser) -> None:
        """Numbers followed by a time unit are durations."""
        matches = parser.extract_entities("ready in 5 minutes")
        assert len(matches) == 1
        assert matches[0].value == "5 minutes"
        assert matches[0].entity_kind is BuiltinEntityKind.DURATION
        assert matches[0].entity == DurationValue(minutes=5)
        assert _entities(parser, "two hours") == [DurationValue(hours=2)]

    def test_article_duration(self, parser: BuiltinEntityParser) -> None:
        """An article before a unit counts as one."""
        assert _entities(parser, "in an hour") == [DurationValue(hours=1)]

    def test_kind_filter(self, parser: BuiltinEntityParser) -> None:
        """Restricting kinds keeps the inner number of a composite."""
        matches = parser.extract_entities("5 minutes", [BuiltinEntityKind.NUMBER])
        assert [m.value for m in matches] == ["5"]

    def test_empty_kind_filter(self, parser: BuiltinEntityParser) -> None:
        """An empty kind filter finds nothing."""
        assert parser.extract_entities("5 minutes", []) == []

    def test_matches_sorted_and_disjoint(self, parser: BuiltinEntityParser) -> None:
        """Matches never overlap and come back in reading order."""
        matches = parser.extract_entities("two cups at 80 degrees in 5 minutes for $3")
        assert [m.entity_kind for m in matches] == [
            BuiltinEntityKind.NUMBER,
            BuiltinEntityKind.TEMPERATURE,
            BuiltinEntityKind.DURATION,
            BuiltinEntityKind.AMOUNT_OF_MONEY,
        ]
        for first, second in zip(matches, matches[1:]):
            assert first.range[1] <= second.range[0]

    def test_to_dict(self) -> None:
        """Structured values serialize with their kind."""
        assert DurationValue(minutes=5).to_dict()["kind"] == "Duration"
        assert AmountOfMoneyValue(3.0, "$").to_dict() == {"kind": "AmountOfMoney", "value": 3.0, "unit": "$"}


# ============================================================================
# French Tests
# ============================================================================


class TestFrench:
    """Tests for the French ruleset."""

    @pytest.fixture
    def parser(self) -> BuiltinEntityParser:
        return get_builtin_entity_parser("fr")

    def test_compound_numbers(self, parser: BuiltinEntityParser) -> None:
        """Hyphenated French numbers combine."""
        assert _entities(parser, "vingt-et-un") == [NumberValue(21.0)]
        assert _entities(parser, "quatre-vingt-dix") == [NumberValue(90.0)]

    def test_duration(self, parser: BuiltinEntityParser) -> None:
        """French time units make durations."""
        assert _entities(parser, "dans deux heures") == [DurationValue(hours=2)]

    def test_money(self, parser: BuiltinEntityParser) -> None:
        """French currency words make amounts of money."""
        assert _entities(parser, "dix euros") == [AmountOfMoneyValue(10.0, "€")]
