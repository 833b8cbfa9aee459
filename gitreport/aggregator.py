"""Fan-out summarization of issues and commits into contributor ledgers.

Each item runs its own fetch, budget, chat and parse pipeline. All items are
dispatched at once; results are gathered in completion order and folded into
the ledger afterwards by the calling coroutine, so the ledger never has
concurrent writers. A failing item is logged and dropped.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Collection, List, Optional, Protocol, Sequence

from .budget import squeeze_words
from .ledger import ContributorLedger, Observation
from .llm.chain import ChatComposer
from .logging import get_logger
from .models import Comment, RawItem
from .parsing import parse_contributor_summaries
from .prompting import constants as limits
from .prompting.builder import PromptBuilder
from .utils import run_blocking


class AggregationError(RuntimeError):
    """Raised when an aggregation yields no usable ledger entries."""


class ItemSource(Protocol):
    def get_comments(self, comments_url: str, token: str | None = None) -> Optional[List[Comment]]: ...

    def get_patch(self, commit_url: str, token: str | None = None) -> Optional[str]: ...


class ContributorAggregator:
    """Turns raw issues and commits into per-contributor observations."""

    def __init__(
        self,
        source: ItemSource,
        composer: ChatComposer,
        prompt_builder: PromptBuilder | None = None,
    ) -> None:
        self.source = source
        self.composer = composer
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.logger = get_logger("aggregator")

    async def aggregate_issues(
        self,
        items: Sequence[RawItem],
        *,
        target: str | None = None,
        contributors: Collection[str] = (),
        token: str | None = None,
    ) -> ContributorLedger:
        """Summarize every issue and fold the results into a fresh ledger.

        ``target`` and ``contributors`` only change who the prompts ask the
        model to focus on; every issue is processed either way.
        """
        batches = await self._gather(
            [
                self._guard(item, self.summarize_issue(item, target=target, contributors=contributors, token=token))
                for item in items
            ]
        )
        ledger = ContributorLedger()
        for observations in batches:
            ledger.fold_all(observations)
        if not ledger:
            raise AggregationError("no entries processed")
        self.logger.info("Folded %d issues into %d contributor entries", len(batches), len(ledger))
        return ledger

    async def fold_commits(
        self,
        items: Sequence[RawItem],
        ledger: ContributorLedger,
        *,
        token: str | None = None,
    ) -> None:
        """Summarize every commit and append the results to ``ledger`` in place."""
        batches = await self._gather(
            [self._guard(item, self.summarize_commit(item, token=token)) for item in items]
        )
        folded = sum(ledger.fold_all(observations) for observations in batches)
        self.logger.info("Folded %d of %d commits into the ledger", folded, len(items))

    async def summarize_issue(
        self,
        item: RawItem,
        *,
        target: str | None = None,
        contributors: Collection[str] = (),
        token: str | None = None,
    ) -> List[Observation]:
        comments = await run_blocking(self.source.get_comments, item.comments_url, token)
        if comments is None:
            raise RuntimeError(f"comments unavailable for issue #{item.number}")

        builder = self.prompt_builder
        body = squeeze_words(item.body or "", limits.ISSUE_BODY_WORDS, limits.ISSUE_BODY_SPLIT)
        parts = [builder.issue_header(item, body)]
        watched: List[str] = []
        for comment in comments:
            comment_body = squeeze_words(comment.body or "", limits.COMMENT_WORDS, limits.COMMENT_SPLIT)
            if comment.author in contributors:
                watched.append(comment.author)
            parts.append(builder.comment_line(comment, comment_body))
        transcript = "".join(parts)[: limits.ISSUE_TRANSCRIPT_MAX_CHARS]

        focus = builder.focus_phrase(target, watched)
        prompts = builder.issue(item, transcript, focus)
        reply = await self.composer.chain(
            prompts.system,
            prompts.analysis,
            limits.ISSUE_ANALYSIS_TOKENS,
            prompts.follow_up,
            limits.ISSUE_SUMMARY_TOKENS,
            tag=f"issue-summary#{item.number}",
        )
        parsed = parse_contributor_summaries(reply)
        if not parsed.ok:
            raise ValueError(f"issue #{item.number}: {parsed.error}")
        return [(name, item.html_url, summary) for name, summary in parsed.pairs]

    async def summarize_commit(self, item: RawItem, *, token: str | None = None) -> List[Observation]:
        patch = await run_blocking(self.source.get_patch, item.html_url, token)
        if patch is None:
            raise RuntimeError(f"patch unavailable for {item.html_url}")
        patch = squeeze_words(patch, limits.PATCH_WORDS, limits.PATCH_SPLIT)[: limits.PATCH_MAX_CHARS]

        prompts = self.prompt_builder.commit(item, patch)
        reply = await self.composer.chain(
            prompts.system,
            prompts.analysis,
            limits.COMMIT_ANALYSIS_TOKENS,
            prompts.follow_up,
            limits.COMMIT_SUMMARY_TOKENS,
            tag=f"commit-summary {item.sha or item.html_url}",
        )
        parsed = parse_contributor_summaries(reply)
        if not parsed.ok:
            raise ValueError(f"commit {item.html_url}: {parsed.error}")
        summary = _summary_for_author(item.author, parsed.pairs)
        if summary is None:
            raise ValueError(f"commit {item.html_url}: no summary attributable to {item.author}")
        return [(item.author, item.html_url, summary)]

    async def _guard(self, item: RawItem, work: Awaitable[List[Observation]]) -> List[Observation]:
        try:
            return await work
        except Exception as exc:
            self.logger.warning("Dropping %s %s: %s", item.kind, item.html_url, exc)
            return []

    @staticmethod
    async def _gather(work: Sequence[Awaitable[List[Observation]]]) -> List[List[Observation]]:
        """Wait for every item, collecting results in completion order."""
        results: List[List[Observation]] = []
        for finished in asyncio.as_completed(work):
            results.append(await finished)
        return results


def _summary_for_author(author: str, pairs: Sequence[tuple[str, str]]) -> Optional[str]:
    lowered = author.lower()
    for name, summary in pairs:
        if name.lower() == lowered and summary.strip():
            return summary
    if len(pairs) == 1 and pairs[0][1].strip():
        return pairs[0][1]
    return None


__all__ = ["AggregationError", "ContributorAggregator", "ItemSource"]
