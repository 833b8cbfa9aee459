"""Tests for issue and commit fan-out into contributor ledgers."""

from __future__ import annotations

import asyncio

import pytest

from gitreport.aggregator import AggregationError, ContributorAggregator
from gitreport.ledger import ContributorLedger
from gitreport.llm.chain import ChatComposer
from gitreport.models import Comment
from tests._fixtures.fakes import API, WEB, FakeGitHub, ScriptedBackend, make_commit, make_issue


def _aggregator(github: FakeGitHub, backend: ScriptedBackend) -> ContributorAggregator:
    return ContributorAggregator(github, ChatComposer(backend))


def _issue_replies(numbers) -> dict:
    return {f"title 'Issue {n}'": f'{{"user{n}": "Drove issue {n} to a fix."}}' for n in numbers}


def test_failing_issue_is_dropped_and_others_fold() -> None:
    issues = [make_issue(n, f"user{n}") for n in range(1, 6)]
    github = FakeGitHub(comments={f"{API}/issues/3/comments": RuntimeError("boom")})
    backend = ScriptedBackend(_issue_replies(range(1, 6)))

    ledger = asyncio.run(_aggregator(github, backend).aggregate_issues(issues))

    assert sorted(ledger.names()) == ["user1", "user2", "user4", "user5"]
    entry = ledger.get("user4")
    assert entry.links == [f"{WEB}/issues/4"]
    assert entry.summaries == ["Drove issue 4 to a fix."]


def test_missing_comments_drop_the_issue() -> None:
    issues = [make_issue(1, "user1"), make_issue(2, "user2")]
    github = FakeGitHub(comments={f"{API}/issues/2/comments": None})
    backend = ScriptedBackend(_issue_replies([1, 2]))

    ledger = asyncio.run(_aggregator(github, backend).aggregate_issues(issues))

    assert ledger.names() == ["user1"]


def test_no_items_raise_aggregation_error(github, backend) -> None:
    with pytest.raises(AggregationError, match="no entries processed"):
        asyncio.run(_aggregator(github, backend).aggregate_issues([]))


def test_every_item_failing_raises_aggregation_error(github) -> None:
    backend = ScriptedBackend({"Issue": "I cannot produce JSON for this."})
    issues = [make_issue(n, f"user{n}") for n in range(1, 4)]

    with pytest.raises(AggregationError, match="no entries processed"):
        asyncio.run(_aggregator(github, backend).aggregate_issues(issues))


def test_issue_with_several_contributors_adds_one_entry_each() -> None:
    github = FakeGitHub()
    backend = ScriptedBackend(
        {"title 'Issue 7'": '{"alice": "Reported the crash.", "bob": "Posted the patch."}'}
    )

    ledger = asyncio.run(_aggregator(github, backend).aggregate_issues([make_issue(7, "alice")]))

    assert ledger.names() == ["alice", "bob"]
    assert ledger.get("bob").links == [f"{WEB}/issues/7"]


def test_issue_prompt_focuses_on_watched_contributors() -> None:
    github = FakeGitHub(
        comments={
            f"{API}/issues/1/comments": [
                Comment(author="maintainer", body="Looking into it."),
                Comment(author="drive-by", body="+1"),
            ]
        }
    )
    backend = ScriptedBackend(_issue_replies([1]))

    asyncio.run(
        _aggregator(github, backend).aggregate_issues([make_issue(1, "user1")], contributors={"maintainer"})
    )

    analysis = backend.calls[0]["messages"][1]["content"]
    assert "assess the contributions of maintainer" in analysis
    assert "maintainer commented: Looking into it." in analysis
    assert "drive-by commented: +1" in analysis


def test_issue_prompt_prefers_explicit_target() -> None:
    backend = ScriptedBackend(_issue_replies([1]))

    asyncio.run(
        _aggregator(FakeGitHub(), backend).aggregate_issues(
            [make_issue(1, "user1")], target="carol", contributors={"helper"}
        )
    )

    analysis = backend.calls[0]["messages"][1]["content"]
    assert "assess the contributions of carol" in analysis


def test_issue_prompt_falls_back_to_top_contributors() -> None:
    backend = ScriptedBackend(_issue_replies([1]))

    asyncio.run(_aggregator(FakeGitHub(), backend).aggregate_issues([make_issue(1, "user1")]))

    analysis = backend.calls[0]["messages"][1]["content"]
    assert "top contributors, no more than 3," in analysis


def test_two_commits_by_same_author_fold_into_existing_ledger() -> None:
    commits = [make_commit("a1", "alice"), make_commit("b2", "alice")]
    backend = ScriptedBackend(
        {
            "Commit a1": '{"alice": "Refactored the parser."}',
            "Commit b2": '{"alice": "Added retry logic."}',
        }
    )
    ledger = ContributorLedger()
    ledger.fold("bob", f"{WEB}/issues/9", "Triaged a report.")

    asyncio.run(_aggregator(FakeGitHub(), backend).fold_commits(commits, ledger))

    entry = ledger.get("alice")
    assert len(entry) == 2
    assert sorted(entry.links) == [f"{WEB}/commit/a1", f"{WEB}/commit/b2"]
    assert sorted(entry.summaries) == ["Added retry logic.", "Refactored the parser."]
    assert ledger.observation_count("bob") == 1


def test_commits_fold_in_completion_order() -> None:
    commits = [make_commit("a1", "alice"), make_commit("b2", "alice")]
    github = FakeGitHub(delays={f"{WEB}/commit/a1": 0.3})
    backend = ScriptedBackend(
        {
            "Commit a1": '{"alice": "Refactored the parser."}',
            "Commit b2": '{"alice": "Added retry logic."}',
        }
    )
    ledger = ContributorLedger()

    asyncio.run(_aggregator(github, backend).fold_commits(commits, ledger))

    entry = ledger.get("alice")
    assert entry.links == [f"{WEB}/commit/b2", f"{WEB}/commit/a1"]
    assert entry.summaries == ["Added retry logic.", "Refactored the parser."]


def test_commit_summary_is_attributed_to_the_commit_author() -> None:
    backend = ScriptedBackend({"Commit c3": '{"dave": "Bumped the version."}'})
    ledger = ContributorLedger()

    asyncio.run(_aggregator(FakeGitHub(), backend).fold_commits([make_commit("c3", "Dave")], ledger))

    assert ledger.names() == ["Dave"]
    assert ledger.get("Dave").summaries == ["Bumped the version."]


def test_commit_without_patch_is_dropped() -> None:
    github = FakeGitHub(patches={f"{WEB}/commit/d4": None})
    backend = ScriptedBackend({"Commit": '{"erin": "Changed things."}'})
    ledger = ContributorLedger()

    asyncio.run(
        _aggregator(github, backend).fold_commits(
            [make_commit("d4", "erin"), make_commit("e5", "erin")], ledger
        )
    )

    assert ledger.get("erin").links == [f"{WEB}/commit/e5"]


def test_fold_commits_with_no_items_leaves_ledger_untouched() -> None:
    ledger = ContributorLedger()
    asyncio.run(_aggregator(FakeGitHub(), ScriptedBackend()).fold_commits([], ledger))
    assert len(ledger) == 0
