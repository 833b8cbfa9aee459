"""Renders report prompts from the bundled Jinja2 templates."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ..models import Comment, RawItem
from .constants import DEFAULT_FOCUS


@dataclass(frozen=True)
class ChainPrompts:
    """System prompt plus the two user turns of a chained exchange."""

    system: str
    analysis: str
    follow_up: str


class PromptBuilder:
    """Fills the analysis/summary templates for READMEs, issues, commits and correlation."""

    def __init__(self, templates_dir: Path | None = None) -> None:
        self.templates_dir = templates_dir
        self._env = self._create_env(templates_dir)

    def readme(self, full_name: str, content: str) -> tuple[str, str]:
        return (
            self._render("readme_system.j2"),
            self._render("readme_user.j2", full_name=full_name, content=content),
        )

    def issue(self, item: RawItem, transcript: str, focus: str) -> ChainPrompts:
        return ChainPrompts(
            system=self._render("issue_system.j2"),
            analysis=self._render(
                "issue_analysis.j2",
                creator=item.author,
                title=item.title,
                transcript=transcript,
                focus=focus,
            ),
            follow_up=self._render("issue_summary.j2", focus=focus),
        )

    def commit(self, item: RawItem, patch: str) -> ChainPrompts:
        return ChainPrompts(
            system=self._render("commit_system.j2", author=item.author),
            analysis=self._render(
                "commit_analysis.j2", author=item.author, patch=patch, message=item.title
            ),
            follow_up=self._render("commit_summary.j2", author=item.author),
        )

    def correlation(
        self,
        target: str,
        *,
        profile: str | None = None,
        commits: str | None = None,
        issues: str | None = None,
        discussion: str | None = None,
    ) -> ChainPrompts:
        return ChainPrompts(
            system=self._render("correlate_system.j2"),
            analysis=self._render(
                "correlate_analysis.j2",
                target=target,
                profile=profile,
                commits=commits,
                issues=issues,
                discussion=discussion,
            ),
            follow_up=self._render("correlate_fields.j2"),
        )

    @staticmethod
    def issue_header(item: RawItem, body: str) -> str:
        labels = ", ".join(item.labels)
        return (
            f"User '{item.author}' opened an issue titled '{item.title}', labeled '{labels}', "
            f"with the following post: '{body}'."
        )

    @staticmethod
    def comment_line(comment: Comment, body: str) -> str:
        return f" {comment.author} commented: {body}"

    @staticmethod
    def focus_phrase(target: Optional[str], watched: Sequence[str]) -> str:
        """Who the model should call out by name.

        An explicit target wins; otherwise known contributors who took part in
        the discussion; otherwise a generic request for the top contributors.
        """
        if target and target.strip():
            return target.strip()
        names = list(dict.fromkeys(name for name in watched if name))
        if names:
            return ", ".join(names)
        return DEFAULT_FOCUS

    def _render(self, template_name: str, **context: object) -> str:
        template = self._env.get_template(template_name)
        return template.render(**context).strip()

    @staticmethod
    def _create_env(templates_dir: Path | None) -> Environment:
        directories: list[str] = []
        if templates_dir:
            directories.append(str(templates_dir))
        default_dir = str(Path(__file__).with_name("templates"))
        if default_dir not in directories:
            directories.append(default_dir)
        loader = FileSystemLoader(directories)
        return Environment(
            loader=loader,
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )


__all__ = ["ChainPrompts", "PromptBuilder"]
