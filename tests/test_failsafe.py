"""Tests for deterministic fallback report text."""

from __future__ import annotations

from gitreport.failsafe import build_contributor_stub, build_empty_report
from gitreport.ledger import ContributorLedger


def test_stub_lists_links_from_every_ledger() -> None:
    commits = ContributorLedger()
    commits.fold("alice", "https://x/commit/1", "Fixed it.")
    issues = ContributorLedger()
    issues.fold("alice", "https://x/issues/2", "Reported it.")
    issues.fold("alice", "https://x/commit/1", "Linked the fix.")

    stub = build_contributor_stub("alice", [commits, issues])

    assert stub == (
        "alice contributed 3 tracked changes or discussions. "
        "Sources: https://x/commit/1, https://x/issues/2."
    )


def test_stub_caps_links_and_includes_reason() -> None:
    ledger = ContributorLedger()
    for number in range(7):
        ledger.fold("bob", f"https://x/issues/{number}", "Commented.")

    stub = build_contributor_stub("bob", [ledger], reason="backend\ntimed out")

    assert "https://x/issues/4" in stub
    assert "https://x/issues/5" not in stub
    assert "(+2 more)" in stub
    assert stub.endswith("(Summary unavailable: backend timed out.)")


def test_stub_without_observations() -> None:
    assert build_contributor_stub("carol", [ContributorLedger()]) == (
        "No activity by carol was found in this period."
    )


def test_empty_report_mentions_scope() -> None:
    assert build_empty_report("octo/widgets", 7) == (
        "No activity was found in octo/widgets over the last 7 days.\n"
    )
    assert build_empty_report("octo/widgets", 3, "dave") == (
        "No activity by dave was found in octo/widgets over the last 3 days.\n"
    )
