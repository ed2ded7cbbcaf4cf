"""Tokenization and n-gram helpers.

Tokens carry half-open character ranges into the original text so that any
span built from them can be mapped back with ``text[start:end]``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

# Words, or any single non-space character that is not part of a word
_TOKEN_PATTERN = re.compile(r"\w+|[^\w\s]", re.UNICODE)


@dataclass(frozen=True)
class Token:
    """A token and its character range in the source text.

    Attributes:
        value: Surface form of the token
        range: Half-open ``(start, end)`` character offsets
    """

    value: str
    range: tuple[int, int]

    @property
    def start(self) -> int:
        return self.range[0]

    @property
    def end(self) -> int:
        return self.range[1]


@dataclass(frozen=True)
class Ngram:
    """A contiguous run of tokens.

    Attributes:
        value: Token values joined with a single space
        indexes: Token indexes covered by the n-gram, in order
    """

    value: str
    indexes: tuple[int, ...]


def tokenize(text: str) -> list[Token]:
    """Split text into word and punctuation tokens.

    Args:
        text: Input text

    Returns:
        Tokens in reading order; whitespace never produces a token
    """
    return [Token(m.group(), m.span()) for m in _TOKEN_PATTERN.finditer(text)]


def compute_all_ngrams(tokens: list[Token], max_ngram_size: int | None = None) -> list[Ngram]:
    """Enumerate every contiguous token run.

    N-grams are produced by start index, then by increasing length.

    Args:
        tokens: Tokens from ``tokenize``
        max_ngram_size: Longest run to emit (default: all tokens)

    Returns:
        List of n-grams
    """
    size = len(tokens) if max_ngram_size is None else min(max_ngram_size, len(tokens))
    ngrams: list[Ngram] = []
    for start in range(len(tokens)):
        for end in range(start + 1, min(start + size, len(tokens)) + 1):
            ngrams.append(
                Ngram(
                    value=" ".join(t.value for t in tokens[start:end]),
                    indexes=tuple(range(start, end)),
                )
            )
    return ngrams


def substring_with_char_range(text: str, char_range: tuple[int, int]) -> str:
    """Return the slice of ``text`` covered by a half-open character range."""
    start, end = char_range
    return text[start:end]


__all__ = [
    "Token",
    "Ngram",
    "tokenize",
    "compute_all_ngrams",
    "substring_with_char_range",
]
