"""Final cross-referencing pass producing one short report per contributor."""

from __future__ import annotations

from typing import Dict, Optional

from .budget import allocate_texts, squeeze_words
from .llm.chain import ChainError, ChatComposer
from .logging import get_logger
from .models import FinalReport
from .parsing import parse_report_fields
from .prompting import constants as limits
from .prompting.builder import PromptBuilder

_LOGGER = get_logger("correlation")


def select_output_caps(item_count_hint: int) -> tuple[int, int]:
    """Turn-1/turn-2 token caps for the given input volume."""
    for ceiling, analysis_tokens, fields_tokens in limits.OUTPUT_CAP_BUCKETS:
        if item_count_hint <= ceiling:
            return analysis_tokens, fields_tokens
    return limits.LARGE_OUTPUT_CAPS


def fit_sources(
    texts: Dict[str, Optional[str]],
    capacity: int = limits.DEFAULT_CORRELATION_CAPACITY,
) -> Dict[str, str]:
    """Trim each present source to its weighted share of ``capacity``."""
    plan = allocate_texts(capacity, limits.SOURCE_WEIGHTS, texts)
    fitted: Dict[str, str] = {}
    for name in plan.budgets:
        text = texts.get(name) or ""
        squeezed = squeeze_words(text, plan.budget(name), limits.CORRELATION_SPLIT)
        fitted[name] = squeezed[: plan.char_budget(name)]
    return fitted


async def correlate(
    composer: ChatComposer,
    target: str,
    *,
    profile: str | None = None,
    commits: str | None = None,
    issues: str | None = None,
    discussion: str | None = None,
    item_count_hint: int = 0,
    capacity: int = limits.DEFAULT_CORRELATION_CAPACITY,
    prompt_builder: PromptBuilder | None = None,
) -> Optional[FinalReport]:
    """Return the correlated report for ``target`` or ``None`` if any stage fails."""
    fitted = fit_sources(
        {"profile": profile, "commits": commits, "issues": issues, "discussion": discussion},
        capacity,
    )
    if not fitted:
        _LOGGER.info("Nothing to correlate for %s", target)
        return None

    builder = prompt_builder or PromptBuilder()
    prompts = builder.correlation(
        target,
        profile=fitted.get("profile"),
        commits=fitted.get("commits"),
        issues=fitted.get("issues"),
        discussion=fitted.get("discussion"),
    )
    analysis_tokens, fields_tokens = select_output_caps(item_count_hint)
    try:
        reply = await composer.chain(
            prompts.system,
            prompts.analysis,
            analysis_tokens,
            prompts.follow_up,
            fields_tokens,
            tag=f"correlate-{target}",
        )
    except ChainError as exc:
        _LOGGER.warning("Correlation failed for %s: %s", target, exc)
        return None

    parsed = parse_report_fields(reply)
    if not parsed.ok:
        _LOGGER.warning("Correlation reply for %s unusable: %s", target, parsed.error)
        return None
    if not parsed.text.strip():
        _LOGGER.warning("Correlation reply for %s contained no content", target)
        return None
    return FinalReport(target=target, text=parsed.text, fields=parsed.fields)


__all__ = ["correlate", "fit_sources", "select_output_caps"]
