"""
Engine Configuration - Trained model and vocabulary for the NLU engine.

An engine configuration bundles everything the engine needs at
construction time:
- language: Language code of the builtin entity parser
- entities: Custom entity catalog (utterance -> reference value)
- intents_data_sizes: Number of training examples per intent
- slot_name_mapping: Per intent, argument name -> entity name
- model: Configuration of each parsing strategy (each one optional)

Configurations are stored as JSON or YAML and are immutable once loaded.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


# ============================================================================
# Entities
# ============================================================================


class EntityConfig(_FrozenModel):
    """A custom entity of the catalog.

    Attributes:
        utterances: Surface string -> canonical reference value
        automatically_extensible: Accept unseen surface strings as-is
    """

    utterances: dict[str, str] = Field(default_factory=dict)
    automatically_extensible: bool = False


# ============================================================================
# Parsing Strategies
# ============================================================================


class RuleBasedParserConfig(_FrozenModel):
    """Configuration of the pattern-based strategy.

    Attributes:
        patterns: Intent -> ordered list of regular expressions. Named groups
            capture slots.
        group_names_to_slot_names: Group name -> slot name, for slot names
            that are not valid Python group names. Unmapped groups are slot
            names themselves.
    """

    patterns: dict[str, list[str]] = Field(default_factory=dict)
    group_names_to_slot_names: dict[str, str] = Field(default_factory=dict)


class IntentClassifierConfig(_FrozenModel):
    """Multinomial logistic regression over token counts.

    Attributes:
        intents: Class labels; ``None`` is the no-intent class
        vocabulary: Lower-cased token -> feature index
        coefficients: One weight row per class
        intercept: One bias per class
    """

    intents: list[Optional[str]]
    vocabulary: dict[str, int] = Field(default_factory=dict)
    coefficients: list[list[float]]
    intercept: list[float]

    @model_validator(mode="after")
    def check_shapes(self) -> "IntentClassifierConfig":
        n_classes = len(self.intents)
        if n_classes == 0:
            raise ValueError("intent classifier needs at least one class")
        if len(self.coefficients) != n_classes or len(self.intercept) != n_classes:
            raise ValueError("coefficients and intercept need one entry per intent class")
        n_features = max(self.vocabulary.values(), default=-1) + 1
        for row in self.coefficients:
            if len(row) != n_features:
                raise ValueError(f"coefficient rows must have {n_features} weights, got {len(row)}")
        return self


class SlotFillerConfig(_FrozenModel):
    """Linear-chain BIO tagger for the slots of one intent.

    Attributes:
        labels: Tag set; "O" plus "B-<slot>" / "I-<slot>" labels
        feature_weights: Feature -> {label: weight}
        transitions: Optional label x label transition scores
    """

    labels: list[str]
    feature_weights: dict[str, dict[str, float]] = Field(default_factory=dict)
    transitions: Optional[list[list[float]]] = None

    @field_validator("labels")
    @classmethod
    def check_labels(cls, labels: list[str]) -> list[str]:
        if "O" not in labels:
            raise ValueError("slot filler labels must include 'O'")
        for label in labels:
            if label != "O" and not label.startswith(("B-", "I-")):
                raise ValueError(f"invalid BIO label: {label!r}")
        return labels

    @model_validator(mode="after")
    def check_transitions(self) -> "SlotFillerConfig":
        n_labels = len(self.labels)
        if self.transitions is not None:
            if len(self.transitions) != n_labels or any(len(r) != n_labels for r in self.transitions):
                raise ValueError(f"transitions must be a {n_labels}x{n_labels} matrix")
        for feature, weights in self.feature_weights.items():
            unknown = set(weights) - set(self.labels)
            if unknown:
                raise ValueError(f"feature {feature!r} weights unknown labels {sorted(unknown)}")
        return self


class ProbabilisticParserConfig(_FrozenModel):
    """Configuration of the statistical strategy."""

    intent_classifier: IntentClassifierConfig
    slot_fillers: dict[str, SlotFillerConfig] = Field(default_factory=dict)


class ModelConfig(_FrozenModel):
    """Configured strategies. Each one is optional."""

    rule_based_parser: Optional[RuleBasedParserConfig] = None
    probabilistic_parser: Optional[ProbabilisticParserConfig] = None


# ============================================================================
# Engine Configuration
# ============================================================================


class NLUEngineConfiguration(_FrozenModel):
    """Complete engine configuration.

    Attributes:
        language: Language code (e.g., "en")
        entities: Custom entity catalog
        intents_data_sizes: Training examples per intent
        slot_name_mapping: Intent -> {slot name: entity name}
        model: Strategy configurations
    """

    language: str
    entities: dict[str, EntityConfig] = Field(default_factory=dict)
    intents_data_sizes: dict[str, int] = Field(default_factory=dict)
    slot_name_mapping: dict[str, dict[str, str]] = Field(default_factory=dict)
    model: ModelConfig = Field(default_factory=ModelConfig)

    @field_validator("intents_data_sizes")
    @classmethod
    def check_data_sizes(cls, sizes: dict[str, int]) -> dict[str, int]:
        negative = [name for name, size in sizes.items() if size < 0]
        if negative:
            raise ValueError(f"negative data size for intents {negative}")
        return sizes

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NLUEngineConfiguration":
        """Validate a configuration mapping.

        Raises:
            ConfigurationError: If the mapping is not a valid configuration
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid engine configuration: {e}") from e

    @classmethod
    def load(cls, path: Path | str) -> "NLUEngineConfiguration":
        """Load a configuration from a JSON or YAML file.

        Args:
            path: Path to a .json, .yaml or .yml file

        Returns:
            Validated configuration

        Raises:
            ConfigurationError: If the file cannot be read or is invalid
        """
        path = Path(path)
        try:
            with path.open(encoding="utf-8") as f:
                if path.suffix.lower() in (".yaml", ".yml"):
                    data = YAML(typ="safe").load(f)
                else:
                    data = json.load(f)
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration {path}: {e}") from e
        except (json.JSONDecodeError, YAMLError) as e:
            raise ConfigurationError(f"Cannot decode configuration {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration {path} must contain a mapping")

        logger.debug(f"Loaded engine configuration from {path}")
        return cls.from_dict(data)


__all__ = [
    "EntityConfig",
    "RuleBasedParserConfig",
    "IntentClassifierConfig",
    "SlotFillerConfig",
    "ProbabilisticParserConfig",
    "ModelConfig",
    "NLUEngineConfiguration",
]
