"""Tests for weighted capacity allocation."""

from __future__ import annotations

from gitreport.budget import CHARS_PER_TOKEN, SourceSpec, allocate, allocate_texts
from gitreport.prompting.constants import SOURCE_WEIGHTS


def test_allocation_is_proportional_to_weights() -> None:
    plan = allocate(
        6000,
        [
            SourceSpec("profile", 1, True),
            SourceSpec("commits", 4, True),
            SourceSpec("issues", 4, True),
            SourceSpec("discussion", 2, True),
        ],
    )
    assert plan.budgets == {"profile": 545, "commits": 2181, "issues": 2181, "discussion": 1090}
    assert plan.total <= 6000


def test_absent_sources_get_nothing_and_free_their_weight() -> None:
    plan = allocate(6000, [("profile", 1, True), ("commits", 4, True), ("issues", 4, False)])
    assert "issues" not in plan
    assert plan.budget("issues") == 0
    assert plan.budgets == {"profile": 1200, "commits": 4800}


def test_single_present_source_gets_full_capacity() -> None:
    plan = allocate(900, [("profile", 1, False), ("commits", 4, True)])
    assert plan.budgets == {"commits": 900}


def test_no_present_sources_yields_empty_plan() -> None:
    plan = allocate(6000, [("profile", 1, False), ("commits", 4, False)])
    assert len(plan) == 0
    assert plan.total == 0


def test_budget_ratios_follow_weight_ratios() -> None:
    plan = allocate(10_000, [("a", 1, True), ("b", 3, True)])
    assert plan.budget("b") == 3 * plan.budget("a")


def test_char_budget_converts_tokens_to_characters() -> None:
    plan = allocate(100, [("commits", 1, True)])
    assert plan.char_budget("commits") == 100 * CHARS_PER_TOKEN
    assert plan.char_budget("missing") == 0


def test_allocate_texts_treats_blank_text_as_absent() -> None:
    plan = allocate_texts(
        6000,
        SOURCE_WEIGHTS,
        {"profile": "Name: Alice", "commits": "   ", "issues": "link: fixed bug", "discussion": None},
    )
    assert set(plan.budgets) == {"profile", "issues"}
    assert plan.budgets == {"profile": 1200, "issues": 4800}
