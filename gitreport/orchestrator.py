"""Pipeline orchestration for repository and contributor activity reports."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .aggregator import AggregationError, ContributorAggregator
from .budget import squeeze_words
from .config import ReportConfig
from .correlation import correlate
from .failsafe import build_contributor_stub, build_empty_report
from .github import GitHubClient
from .ledger import ContributorLedger
from .llm.chain import ChainError, ChatComposer, PromptPair
from .llm.runner import LLMRunner
from .logging import get_logger
from .models import FinalReport, RepositoryOverview
from .prompting import constants as limits
from .prompting.builder import PromptBuilder
from .utils import run_blocking


class RepositoryNotFoundError(RuntimeError):
    """Raised when ``owner/repo`` does not resolve to a readable repository."""


class ReportError(RuntimeError):
    """Raised when a report cannot be produced at all."""


class ReportOrchestrator:
    """Coordinates fetching, aggregation and correlation for one report request."""

    def __init__(
        self,
        config: ReportConfig | None = None,
        *,
        github: GitHubClient | None = None,
        llm_runner: LLMRunner | None = None,
        prompt_builder: PromptBuilder | None = None,
    ) -> None:
        self.config = config or ReportConfig(root=Path.cwd())
        self.github = github or self._build_github_client(self.config)
        self.llm_runner = llm_runner or self._build_llm_runner(self.config)
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.composer = ChatComposer(self.llm_runner)
        self.aggregator = ContributorAggregator(self.github, self.composer, self.prompt_builder)
        self.logger = get_logger("orchestrator")

    def run_report(
        self,
        owner: str,
        repo: str,
        *,
        username: str | None = None,
        token: str | None = None,
        days: int | None = None,
    ) -> str:
        """Synchronous wrapper around :meth:`generate` for the CLI."""
        return asyncio.run(self.generate(owner, repo, username=username, token=token, days=days))

    async def generate(
        self,
        owner: str,
        repo: str,
        *,
        username: str | None = None,
        token: str | None = None,
        days: int | None = None,
    ) -> str:
        """Build the plain-text activity report for ``owner/repo``."""
        if not owner or not repo:
            raise ReportError("You must provide an owner and repo name.")
        window = days if days and days > 0 else self.config.report.days
        self.logger.info(
            "Starting report for %s/%s (user=%s, days=%d)", owner, repo, username or "-", window
        )

        overview = await self.validate_repository(owner, repo, token=token)
        commit_ledger, issue_ledger = await asyncio.gather(
            self._commit_ledger(owner, repo, username, window, token),
            self._issue_ledger(owner, repo, username, window, token, overview),
        )

        targets = self._select_targets(username, commit_ledger, issue_ledger)
        if not targets:
            self.logger.info("No attributable activity for %s", overview.full_name)
            return build_empty_report(overview.full_name, window, username)

        profile = await self._profile_text(username, overview, token)
        sections = await asyncio.gather(
            *(
                self._target_section(name, profile, commit_ledger, issue_ledger)
                for name in targets
            )
        )

        lines = [f"Activity report for {overview.full_name} over the last {window} days", ""]
        if overview.summary:
            lines.extend([overview.summary.strip(), ""])
        for section in sections:
            lines.extend([section, ""])
        return "\n".join(lines).strip() + "\n"

    async def validate_repository(
        self, owner: str, repo: str, *, token: str | None = None
    ) -> RepositoryOverview:
        """Confirm the repository exists and gather its summary and contributors."""
        full_name = f"{owner}/{repo}"
        profile = await run_blocking(self.github.get_community_profile, owner, repo, token)
        if profile is None:
            raise RepositoryNotFoundError(
                f"No community profile for {full_name}; check the owner and repository name."
            )

        summary = ""
        if profile.has_readme:
            content = await run_blocking(self.github.get_readme, owner, repo, token)
            if content:
                summary = await self.summarize_readme(full_name, content) or ""
        if not summary:
            summary = profile.description or ""

        contributors = await run_blocking(self.github.get_contributors, owner, repo, token)
        return RepositoryOverview(
            full_name=full_name, summary=summary, contributors=frozenset(contributors)
        )

    async def summarize_readme(self, full_name: str, content: str) -> Optional[str]:
        if len(content) > limits.README_SQUEEZE_THRESHOLD:
            content = squeeze_words(content, limits.README_SQUEEZE_WORDS, limits.README_SQUEEZE_SPLIT)
        content = content[: limits.README_MAX_CHARS]
        system, user = self.prompt_builder.readme(full_name, content)
        try:
            return await self.composer.complete(
                PromptPair(system=system, user=user, max_tokens=limits.README_OUTPUT_TOKENS),
                tag="readme-summary",
            )
        except ChainError as exc:
            self.logger.warning("Error summarizing README for %s: %s", full_name, exc)
            return None

    async def _commit_ledger(
        self, owner: str, repo: str, username: str | None, days: int, token: str | None
    ) -> ContributorLedger:
        count, commits = await run_blocking(self.github.get_commits, owner, repo, username, days, token)
        self.logger.info("Fetched %d commits for %s/%s", count, owner, repo)
        ledger = ContributorLedger()
        await self.aggregator.fold_commits(commits, ledger, token=token)
        return ledger

    async def _issue_ledger(
        self,
        owner: str,
        repo: str,
        username: str | None,
        days: int,
        token: str | None,
        overview: RepositoryOverview,
    ) -> ContributorLedger:
        count, issues = await run_blocking(self.github.get_issues, owner, repo, username, days, token)
        self.logger.info("Fetched %d issues for %s/%s", count, owner, repo)
        try:
            return await self.aggregator.aggregate_issues(
                issues, target=username, contributors=overview.contributors, token=token
            )
        except AggregationError as exc:
            self.logger.info("Issue aggregation for %s/%s produced nothing: %s", owner, repo, exc)
            return ContributorLedger()

    async def _profile_text(
        self, username: str | None, overview: RepositoryOverview, token: str | None
    ) -> str:
        parts: List[str] = []
        if username:
            user_profile = await run_blocking(self.github.get_user_profile, username, token)
            if user_profile:
                parts.append(user_profile)
        if overview.summary:
            parts.append(f"Home project {overview.full_name}: {overview.summary}")
        return "\n".join(parts)

    async def _target_section(
        self,
        name: str,
        profile: str,
        commit_ledger: ContributorLedger,
        issue_ledger: ContributorLedger,
    ) -> str:
        hint = commit_ledger.observation_count(name) + issue_ledger.observation_count(name)
        report: FinalReport | None = await correlate(
            self.composer,
            name,
            profile=profile or None,
            commits=commit_ledger.render(name) or None,
            issues=issue_ledger.render(name) or None,
            item_count_hint=hint,
            capacity=self.config.report.correlation_capacity,
            prompt_builder=self.prompt_builder,
        )
        if report is None:
            stub = build_contributor_stub(
                name, (commit_ledger, issue_ledger), reason="the correlation step did not return a usable summary"
            )
            return f"{name}: {stub}"
        return f"{name}: {report.text}"

    def _select_targets(
        self,
        username: str | None,
        commit_ledger: ContributorLedger,
        issue_ledger: ContributorLedger,
    ) -> List[str]:
        if username:
            matched = _matching_name(username, (commit_ledger, issue_ledger))
            return [matched] if matched else []
        counts: Dict[str, int] = {}
        for ledger in (commit_ledger, issue_ledger):
            for name, entry in ledger.items():
                counts[name] = counts.get(name, 0) + len(entry)
        ranked = sorted(counts.items(), key=lambda pair: (-pair[1], pair[0]))
        return [name for name, _ in ranked[: self.config.report.max_targets]]

    @staticmethod
    def _build_github_client(config: ReportConfig) -> GitHubClient:
        kwargs: Dict[str, object] = {}
        if config.github.api_url:
            kwargs["api_url"] = config.github.api_url
        if config.github.token:
            kwargs["token"] = config.github.token
        if config.github.request_timeout is not None:
            kwargs["request_timeout"] = config.github.request_timeout
        return GitHubClient(**kwargs)  # type: ignore[arg-type]

    @staticmethod
    def _build_llm_runner(config: ReportConfig) -> LLMRunner:
        llm_cfg = config.llm
        kwargs: Dict[str, object] = {}
        if llm_cfg.model:
            kwargs["model"] = llm_cfg.model
        if llm_cfg.base_url:
            kwargs["base_url"] = llm_cfg.base_url
        if llm_cfg.api_key:
            kwargs["api_key"] = llm_cfg.api_key
        if llm_cfg.temperature is not None:
            kwargs["temperature"] = llm_cfg.temperature
        if llm_cfg.request_timeout is not None:
            kwargs["request_timeout"] = llm_cfg.request_timeout
        return LLMRunner(**kwargs)  # type: ignore[arg-type]


def _matching_name(username: str, ledgers: Sequence[ContributorLedger]) -> Optional[str]:
    """Ledger key for ``username``; logins compare case-insensitively."""
    lowered = username.strip().lower()
    for ledger in ledgers:
        for name in ledger:
            if name.lower() == lowered:
                return name
    return None


__all__ = ["ReportError", "ReportOrchestrator", "RepositoryNotFoundError"]
