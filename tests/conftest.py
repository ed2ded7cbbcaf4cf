"""Shared fixtures: a small beverage ordering engine configuration."""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any

import pytest

BEVERAGE_CONFIGURATION: dict[str, Any] = {
    "language": "en",
    "entities": {
        "coffee_type": {
            "utterances": {
                "espresso": "Espresso",
                "latte": "Latte",
                "iced latte": "Iced Latte",
                "flat white": "Flat White",
            },
            "automatically_extensible": False,
        },
        "tea_type": {
            "utterances": {
                "green tea": "Green Tea",
                "earl grey": "Earl Grey",
                "latte": "Chai Latte",
            },
            "automatically_extensible": False,
        },
    },
    "intents_data_sizes": {
        "MakeCoffee": 2,
        "MakeTea": 10,
        "OrderCoffee": 1,
        "MakeDrink": 1,
        "OrderPastries": 0,
    },
    "slot_name_mapping": {
        "MakeCoffee": {"number_of_cups": "snips/number", "coffee_type": "coffee_type"},
        "MakeTea": {"number_of_cups": "snips/number", "beverage_temperature": "snips/temperature"},
        "OrderCoffee": {"coffee_type": "coffee_type"},
        "MakeDrink": {"coffee_type": "coffee_type", "tea_type": "tea_type"},
        "OrderPastries": {"number_of_croissants": "snips/number", "number_of_muffins": "snips/number"},
    },
    "model": {
        "rule_based_parser": {
            "patterns": {
                "OrderCoffee": [r"^i want an? (?P<coffee_type>\w+(?: \w+)?)$"],
                "MakeTea": [
                    r"^make me (?P<number_of_cups>\w+) cups? of tea(?: at (?P<beverage_temperature>.+))?$"
                ],
            },
        },
        "probabilistic_parser": {
            "intent_classifier": {
                "intents": ["MakeCoffee", "MakeTea", None],
                "vocabulary": {"coffee": 0, "cups": 1, "tea": 2, "latte": 3},
                "coefficients": [
                    [3.0, 1.0, -2.0, 2.0],
                    [-2.0, 0.5, 3.0, 0.0],
                    [-1.0, -1.0, -1.0, -1.0],
                ],
                "intercept": [0.0, 0.0, 0.5],
            },
            "slot_fillers": {
                "MakeCoffee": {
                    "labels": [
                        "O",
                        "B-number_of_cups",
                        "I-number_of_cups",
                        "B-coffee_type",
                        "I-coffee_type",
                    ],
                    "feature_weights": {
                        "word[+1]=cups": {"B-number_of_cups": 5.0},
                        "word[+1]=cup": {"B-number_of_cups": 5.0},
                        "word=mocha": {"B-coffee_type": 5.0},
                    },
                },
            },
        },
    },
}


@pytest.fixture
def beverage_configuration() -> dict[str, Any]:
    """A fresh, mutable copy of the beverage engine configuration."""
    return copy.deepcopy(BEVERAGE_CONFIGURATION)


@pytest.fixture
def beverage_configuration_file(tmp_path: Path, beverage_configuration: dict[str, Any]) -> Path:
    """The beverage configuration written to a JSON file."""
    path = tmp_path / "beverage_engine.json"
    path.write_text(json.dumps(beverage_configuration), encoding="utf-8")
    return path
