"""Per-contributor ledgers of source links and summary snippets."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .utils import one_line

Observation = Tuple[str, str, str]


@dataclass
class LedgerEntry:
    """Two parallel append-only logs for one contributor."""

    links: List[str] = field(default_factory=list)
    summaries: List[str] = field(default_factory=list)

    @property
    def links_text(self) -> str:
        return "\n".join(self.links)

    @property
    def summaries_text(self) -> str:
        return "\n".join(self.summaries)

    def __len__(self) -> int:
        return len(self.summaries)


class ContributorLedger:
    """Mapping of contributor name to :class:`LedgerEntry`, grown by folding.

    A ledger lives for one report run. Entries are never removed; each fold
    either creates an entry or appends to both logs of an existing one. Links
    and summaries are flattened to a single line so the newline-joined logs
    always have the same number of segments.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, LedgerEntry] = {}

    def fold(self, name: str, link: str, summary: str) -> bool:
        """Record one observation. Returns ``False`` when ``name`` is unusable."""
        if not isinstance(name, str) or not name.strip():
            return False
        key = name.strip()
        entry = self._entries.get(key)
        if entry is None:
            entry = self._entries[key] = LedgerEntry()
        entry.links.append(one_line(link or ""))
        entry.summaries.append(one_line(summary or ""))
        return True

    def fold_all(self, observations: Iterable[Observation]) -> int:
        return sum(1 for name, link, summary in observations if self.fold(name, link, summary))

    def get(self, name: str) -> Optional[LedgerEntry]:
        return self._entries.get(name)

    def names(self) -> List[str]:
        return list(self._entries)

    def items(self) -> Iterator[Tuple[str, LedgerEntry]]:
        return iter(self._entries.items())

    def as_mapping(self) -> Dict[str, Tuple[str, str]]:
        return {name: (entry.links_text, entry.summaries_text) for name, entry in self._entries.items()}

    def observation_count(self, name: str) -> int:
        entry = self._entries.get(name)
        return len(entry) if entry else 0

    def render(self, name: str) -> str:
        """Readable ``link: summary`` lines for one contributor, or ``""``."""
        entry = self._entries.get(name)
        if entry is None:
            return ""
        return "\n".join(
            f"{link}: {summary}" if link else summary
            for link, summary in zip(entry.links, entry.summaries)
        )

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)


__all__ = ["ContributorLedger", "LedgerEntry", "Observation"]
