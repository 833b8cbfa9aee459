"""Head-and-tail text budgeting for prompt inputs.

Two modes are provided. ``squeeze_words`` works on whitespace-delimited words
and strips fenced/quoted blocks first; ``squeeze_tokens`` works on tiktoken
units for inputs that must respect a model's token accounting exactly. Both
keep the beginning and the end of an over-long text and drop the middle.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Protocol, Sequence

import tiktoken

from ..logging import get_logger

FENCE_MARKERS: tuple[str, ...] = ("```", '"""')
MAX_WORD_LENGTH = 150
DECODE_FAILURE_PLACEHOLDER = "failed to decode tokens"
DEFAULT_ENCODING = "cl100k_base"

_LOGGER = get_logger("budget")


class TokenEncoding(Protocol):
    def encode_ordinary(self, text: str) -> List[int]: ...

    def decode(self, tokens: Sequence[int]) -> str: ...


@dataclass(frozen=True)
class TruncatedText:
    """Budgeted text together with the policy that produced it."""

    text: str
    max_len: int
    split: float
    truncated: bool


def squeeze_words(text: str, max_len: int, split: float) -> str:
    """Fit ``text`` into ``max_len`` words, preferring head and tail context.

    Fenced blocks are removed and over-long tokens (hashes, data URLs) are
    discarded before counting. When the cleaned text still exceeds the budget
    the first ``ceil(max_len * split)`` words and the last remaining words are
    kept.
    """
    if not text:
        return text
    max_len = max(0, int(max_len))
    cleaned_lines, removed = _strip_quoted(text)
    words = [word for line in cleaned_lines for word in line.split()]

    if len(words) <= max_len:
        if not removed:
            return text
        return "\n".join(cleaned_lines)

    head, tail = _head_tail_counts(max_len, split)
    kept = words[:head] + (words[len(words) - tail :] if tail else [])
    return " ".join(kept)


def squeeze_tokens(
    text: str,
    max_len: int,
    split: float,
    *,
    encoding: TokenEncoding | None = None,
) -> str:
    """Fit ``text`` into ``max_len`` tokenizer units (cl100k_base by default)."""
    if not text:
        return text
    bpe = encoding if encoding is not None else default_encoding()
    max_len = max(0, int(max_len))
    tokens = bpe.encode_ordinary(text)
    if len(tokens) <= max_len:
        return text

    head, tail = _head_tail_counts(max_len, split)
    kept = list(tokens[:head]) + (list(tokens[len(tokens) - tail :]) if tail else [])
    try:
        return bpe.decode(kept)
    except (KeyError, ValueError) as exc:
        _LOGGER.warning("Token decode failed after squeezing: %s", exc)
        return DECODE_FAILURE_PLACEHOLDER


def budget_text(text: str, max_len: int, split: float) -> TruncatedText:
    """Word-budget ``text`` and report whether anything was cut."""
    squeezed = squeeze_words(text, max_len, split)
    return TruncatedText(text=squeezed, max_len=max_len, split=split, truncated=squeezed != text)


@lru_cache(maxsize=1)
def default_encoding() -> TokenEncoding:
    return tiktoken.get_encoding(DEFAULT_ENCODING)


def _strip_quoted(text: str) -> tuple[List[str], bool]:
    kept: List[str] = []
    removed = False
    inside_quote = False
    for line in text.splitlines():
        if any(marker in line for marker in FENCE_MARKERS):
            inside_quote = not inside_quote
            removed = True
            continue
        if inside_quote:
            removed = True
            continue
        words = line.split()
        filtered = [word for word in words if len(word) <= MAX_WORD_LENGTH]
        if len(filtered) != len(words):
            removed = True
            line = " ".join(filtered)
        kept.append(line)
    return kept, removed


def _head_tail_counts(max_len: int, split: float) -> tuple[int, int]:
    ratio = min(1.0, max(0.0, float(split)))
    head = min(max_len, math.ceil(max_len * ratio))
    return head, max_len - head


__all__ = [
    "DECODE_FAILURE_PLACEHOLDER",
    "TruncatedText",
    "budget_text",
    "default_encoding",
    "squeeze_tokens",
    "squeeze_words",
]
