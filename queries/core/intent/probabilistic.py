"""Statistical intent parsing strategy.

Intent classification is a multinomial logistic regression over lower-cased
token counts. Slot filling is a per-intent linear-chain tagger over BIO
labels, decoded with Viterbi. Both models are plain weight tables read from
the engine configuration; nothing here trains.
"""

from __future__ import annotations

import logging
from typing import AbstractSet, Mapping

import numpy as np

from ..builtin_entities import BuiltinEntityParser
from ..configuration import IntentClassifierConfig, ProbabilisticParserConfig, SlotFillerConfig
from ..errors import ConfigurationError
from ..tokenization import Token, tokenize
from .base import IntentParser, build_slot
from .taxonomy import IntentClassification, Slot

logger = logging.getLogger(__name__)

OUTSIDE = "O"
BEGIN_PREFIX = "B-"
INSIDE_PREFIX = "I-"

_BOS = "<s>"
_EOS = "</s>"


class LogRegIntentClassifier:
    """Multinomial logistic regression intent classifier.

    Attributes:
        intents: Class labels; None is the no-intent class
        vocabulary: Lower-cased token -> feature index
    """

    def __init__(self, config: IntentClassifierConfig) -> None:
        self.intents: list[str | None] = list(config.intents)
        self.vocabulary: dict[str, int] = dict(config.vocabulary)
        n_features = max(self.vocabulary.values(), default=-1) + 1
        self._coefficients = np.asarray(config.coefficients, dtype=float).reshape(
            len(self.intents), n_features
        )
        self._intercept = np.asarray(config.intercept, dtype=float)

    def featurize(self, text: str) -> np.ndarray:
        """Count vocabulary tokens in text."""
        features = np.zeros(self._coefficients.shape[1])
        for token in tokenize(text):
            index = self.vocabulary.get(token.value.lower())
            if index is not None:
                features[index] += 1.0
        return features

    def probabilities(self, text: str) -> np.ndarray:
        """Softmax probability of each class."""
        scores = self._coefficients @ self.featurize(text) + self._intercept
        scores = np.exp(scores - scores.max())
        return scores / scores.sum()

    def get_intent(
        self,
        text: str,
        intents_filter: AbstractSet[str] | None = None,
    ) -> IntentClassification | None:
        """Classify text, restricted to the filtered intents.

        The no-intent class always competes, so a filter never forces an
        intent on unrelated text.
        """
        probabilities = self.probabilities(text)
        allowed = [
            i
            for i, name in enumerate(self.intents)
            if name is None or intents_filter is None or name in intents_filter
        ]
        if not allowed:
            return None
        best = max(allowed, key=lambda i: probabilities[i])
        intent_name = self.intents[best]
        if intent_name is None:
            return None
        return IntentClassification(intent_name=intent_name, probability=float(probabilities[best]))


def _shape(value: str) -> str:
    if value.isdigit():
        return "digit"
    if value.isupper():
        return "upper"
    if value.istitle():
        return "title"
    if value.islower():
        return "lower"
    return "other"


class LinearChainSlotFiller:
    """BIO tagger for the slots of one intent.

    Each token gets the sum of the weights of its features for every label;
    the best label sequence is decoded with Viterbi. "I-x" labels may only
    follow "B-x" or "I-x".
    """

    def __init__(
        self,
        intent_name: str,
        config: SlotFillerConfig,
        slot_mapping: Mapping[str, str],
        builtin_entity_parser: BuiltinEntityParser,
    ) -> None:
        self.intent_name = intent_name
        self.labels: list[str] = list(config.labels)
        self._slot_mapping = slot_mapping
        self._builtin_entity_parser = builtin_entity_parser

        for label in self.labels:
            if label != OUTSIDE and label[2:] not in slot_mapping:
                raise ConfigurationError(
                    f"Slot filler label {label!r} is not a slot of intent {intent_name}"
                )

        index = {label: i for i, label in enumerate(self.labels)}
        n_labels = len(self.labels)
        self._weights: dict[str, np.ndarray] = {}
        for feature, label_weights in config.feature_weights.items():
            row = np.zeros(n_labels)
            for label, weight in label_weights.items():
                row[index[label]] = weight
            self._weights[feature] = row

        if config.transitions is not None:
            transitions = np.asarray(config.transitions, dtype=float)
        else:
            transitions = np.zeros((n_labels, n_labels))
        self._start = np.zeros(n_labels)
        for j, label in enumerate(self.labels):
            if not label.startswith(INSIDE_PREFIX):
                continue
            self._start[j] = -np.inf
            slot = label[2:]
            for i, previous in enumerate(self.labels):
                if previous not in (BEGIN_PREFIX + slot, INSIDE_PREFIX + slot):
                    transitions[i, j] = -np.inf
        self._transitions = transitions

    @staticmethod
    def features(tokens: list[Token], i: int) -> list[str]:
        """Features of the i-th token."""
        word = tokens[i].value.lower()
        previous = tokens[i - 1].value.lower() if i > 0 else _BOS
        following = tokens[i + 1].value.lower() if i + 1 < len(tokens) else _EOS
        return [
            f"word={word}",
            f"word[-1]={previous}",
            f"word[+1]={following}",
            f"shape={_shape(tokens[i].value)}",
        ]

    def tag(self, tokens: list[Token]) -> list[str]:
        """Decode the best label sequence for tokens."""
        if not tokens:
            return []

        emissions = np.zeros((len(tokens), len(self.labels)))
        for i in range(len(tokens)):
            for feature in self.features(tokens, i):
                weights = self._weights.get(feature)
                if weights is not None:
                    emissions[i] += weights

        scores = self._start + emissions[0]
        backpointers = np.zeros((len(tokens), len(self.labels)), dtype=int)
        for i in range(1, len(tokens)):
            candidates = scores[:, np.newaxis] + self._transitions
            backpointers[i] = candidates.argmax(axis=0)
            scores = candidates.max(axis=0) + emissions[i]

        path = [int(scores.argmax())]
        for i in range(len(tokens) - 1, 0, -1):
            path.append(int(backpointers[i, path[-1]]))
        path.reverse()
        return [self.labels[j] for j in path]

    def get_slots(self, text: str) -> list[Slot]:
        tokens = tokenize(text)
        labels = self.tag(tokens)

        # (slot name, first token, last token)
        spans: list[tuple[str, int, int]] = []
        for i, label in enumerate(labels):
            if label == OUTSIDE:
                continue
            slot_name = label[2:]
            if label.startswith(INSIDE_PREFIX) and spans and spans[-1][0] == slot_name and spans[-1][2] == i - 1:
                spans[-1] = (slot_name, spans[-1][1], i)
            else:
                spans.append((slot_name, i, i))

        slots = []
        for slot_name, first, last in spans:
            slot = build_slot(
                text,
                (tokens[first].start, tokens[last].end),
                slot_name,
                self._slot_mapping[slot_name],
                self._builtin_entity_parser,
            )
            if slot is not None:
                slots.append(slot)
        return slots


class ProbabilisticIntentParser(IntentParser):
    """Statistical strategy: logistic regression classifier plus slot fillers.

    Intents without a configured slot filler have no slots.
    """

    def __init__(
        self,
        config: ProbabilisticParserConfig,
        slot_name_mapping: Mapping[str, Mapping[str, str]],
        builtin_entity_parser: BuiltinEntityParser,
    ) -> None:
        """Build the classifier and slot fillers.

        Raises:
            ConfigurationError: If a slot filler targets an unknown intent or
                labels a slot its intent does not have
        """
        self.intent_classifier = LogRegIntentClassifier(config.intent_classifier)
        self.slot_fillers: dict[str, LinearChainSlotFiller] = {}
        for intent_name, filler_config in config.slot_fillers.items():
            if intent_name not in slot_name_mapping:
                raise ConfigurationError(f"Slot filler configured for unknown intent {intent_name}")
            self.slot_fillers[intent_name] = LinearChainSlotFiller(
                intent_name,
                filler_config,
                slot_name_mapping[intent_name],
                builtin_entity_parser,
            )

    def get_intent(
        self,
        text: str,
        intents_filter: AbstractSet[str] | None = None,
    ) -> IntentClassification | None:
        result = self.intent_classifier.get_intent(text, intents_filter)
        if result is not None:
            logger.debug(f"Classified intent {result.intent_name} (p={result.probability:.3f})")
        return result

    def get_slots(self, text: str, intent_name: str) -> list[Slot]:
        slot_filler = self.slot_fillers.get(intent_name)
        if slot_filler is None:
            return []
        return slot_filler.get_slots(text)
