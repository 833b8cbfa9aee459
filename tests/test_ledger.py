"""Tests for contributor ledgers."""

from __future__ import annotations

from gitreport.ledger import ContributorLedger


def test_fold_creates_then_appends() -> None:
    ledger = ContributorLedger()
    assert ledger.fold("alice", "https://github.com/o/r/issues/1", "Reported the bug.")
    assert ledger.fold("alice", "https://github.com/o/r/commit/abc", "Fixed it.")

    entry = ledger.get("alice")
    assert entry is not None
    assert entry.links == ["https://github.com/o/r/issues/1", "https://github.com/o/r/commit/abc"]
    assert entry.summaries == ["Reported the bug.", "Fixed it."]
    assert ledger.observation_count("alice") == 2
    assert ledger.observation_count("bob") == 0


def test_empty_names_are_rejected() -> None:
    ledger = ContributorLedger()
    assert ledger.fold("", "link", "summary") is False
    assert ledger.fold("   ", "link", "summary") is False
    assert not ledger
    assert len(ledger) == 0


def test_parallel_logs_stay_aligned_with_multiline_text() -> None:
    ledger = ContributorLedger()
    ledger.fold_all(
        [
            ("bob", "link-1", "first line\nsecond line"),
            ("bob", "link\n2", "single"),
            ("bob", "", ""),
            ("carol", "link-3", "done\n\n"),
        ]
    )
    for _, (links, summaries) in ledger.as_mapping().items():
        assert len(links.split("\n")) == len(summaries.split("\n"))
    assert ledger.get("bob").summaries[0] == "first line second line"


def test_render_pairs_links_and_summaries() -> None:
    ledger = ContributorLedger()
    ledger.fold("dave", "https://x/1", "Added docs.")
    ledger.fold("dave", "", "Reviewed a PR.")

    assert ledger.render("dave") == "https://x/1: Added docs.\nReviewed a PR."
    assert ledger.render("nobody") == ""


def test_fold_all_counts_accepted_observations() -> None:
    ledger = ContributorLedger()
    folded = ledger.fold_all([("a", "l", "s"), ("", "l", "s"), ("b", "l", "s")])
    assert folded == 2
    assert ledger.names() == ["a", "b"]
    assert "a" in ledger
    assert list(ledger) == ["a", "b"]
