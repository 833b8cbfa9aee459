"""Deterministic fallback text when a report section cannot be generated."""

from __future__ import annotations

from typing import Iterable, List

from .ledger import ContributorLedger

MAX_STUB_LINKS = 5


def build_contributor_stub(
    name: str,
    ledgers: Iterable[ContributorLedger],
    *,
    reason: str | None = None,
) -> str:
    """Summarise a contributor from raw ledger links when correlation fails."""
    links: List[str] = []
    observations = 0
    for ledger in ledgers:
        entry = ledger.get(name)
        if entry is None:
            continue
        observations += len(entry)
        for link in entry.links:
            if link and link not in links:
                links.append(link)

    if observations == 0:
        body = f"No activity by {name} was found in this period."
    else:
        plural = "s" if observations != 1 else ""
        body = f"{name} contributed {observations} tracked change{plural} or discussion{plural}."
        if links:
            shown = links[:MAX_STUB_LINKS]
            body += " Sources: " + ", ".join(shown)
            if len(links) > len(shown):
                body += f" (+{len(links) - len(shown)} more)"
            body += "."

    cleaned_reason = _format_reason(reason)
    if cleaned_reason:
        body += f" (Summary unavailable: {cleaned_reason}.)"
    return body


def build_empty_report(full_name: str, days: int, target: str | None = None) -> str:
    scope = f" by {target}" if target else ""
    return f"No activity{scope} was found in {full_name} over the last {days} days.\n"


def _format_reason(reason: str | None) -> str | None:
    if not reason:
        return None
    cleaned = " ".join(reason.strip().split())
    if not cleaned:
        return None
    return cleaned[:200] + ("…" if len(cleaned) > 200 else "")


__all__ = ["build_contributor_stub", "build_empty_report"]
