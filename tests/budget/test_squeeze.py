"""Tests for head-and-tail text budgeting."""

from __future__ import annotations

from gitreport.budget import budget_text, squeeze_tokens, squeeze_words
from gitreport.budget.squeeze import DECODE_FAILURE_PLACEHOLDER


class CharEncoding:
    """One token per character; enough to exercise token-mode slicing."""

    def encode_ordinary(self, text):
        return [ord(char) for char in text]

    def decode(self, tokens):
        return "".join(chr(token) for token in tokens)


class BrokenEncoding(CharEncoding):
    def decode(self, tokens):
        raise KeyError(tokens[0])


def _words(count: int) -> str:
    return " ".join(f"w{i}" for i in range(count))


def test_short_text_is_returned_unchanged() -> None:
    text = "fix the\nflaky  test"
    assert squeeze_words(text, 10, 0.5) == text


def test_empty_text_is_returned_unchanged() -> None:
    assert squeeze_words("", 10, 0.5) == ""
    assert squeeze_tokens("", 10, 0.5, encoding=CharEncoding()) == ""


def test_long_text_keeps_head_and_tail() -> None:
    result = squeeze_words(_words(20), 10, 0.5)
    assert result.split() == ["w0", "w1", "w2", "w3", "w4", "w15", "w16", "w17", "w18", "w19"]


def test_split_of_one_keeps_only_head() -> None:
    result = squeeze_words(_words(20), 4, 1.0)
    assert result.split() == ["w0", "w1", "w2", "w3"]


def test_split_is_clamped_to_unit_interval() -> None:
    assert squeeze_words(_words(20), 4, 3.0).split() == ["w0", "w1", "w2", "w3"]
    assert squeeze_words(_words(20), 4, -1.0).split() == ["w16", "w17", "w18", "w19"]


def test_result_never_exceeds_budget() -> None:
    for budget in (0, 1, 3, 7, 19):
        for split in (0.0, 0.33, 0.5, 0.9, 1.0):
            assert len(squeeze_words(_words(20), budget, split).split()) <= budget


def test_squeeze_is_idempotent_once_under_budget() -> None:
    text = "intro\n```\ncode block\n```\noutro " + "x" * 200
    once = squeeze_words(text, 50, 0.5)
    assert squeeze_words(once, 50, 0.5) == once


def test_fenced_blocks_and_long_tokens_are_removed() -> None:
    text = 'before\n```python\nprint("hi")\n```\nafter ' + "a" * 151 + ' ok\n"""\nquoted\n"""\nend'
    result = squeeze_words(text, 100, 0.5)
    assert result == "before\nafter ok\nend"


def test_token_mode_keeps_head_and_tail() -> None:
    result = squeeze_tokens("abcdefghij", 4, 0.5, encoding=CharEncoding())
    assert result == "abij"


def test_token_mode_returns_short_text_unchanged() -> None:
    assert squeeze_tokens("abc", 4, 0.5, encoding=CharEncoding()) == "abc"


def test_token_mode_decode_failure_yields_placeholder() -> None:
    result = squeeze_tokens("abcdefghij", 4, 0.5, encoding=BrokenEncoding())
    assert result == DECODE_FAILURE_PLACEHOLDER


def test_budget_text_reports_truncation() -> None:
    short = budget_text("tiny text", 10, 0.5)
    assert short.truncated is False
    assert short.text == "tiny text"

    long = budget_text(_words(30), 10, 0.5)
    assert long.truncated is True
    assert len(long.text.split()) == 10
