"""Decoding of flat key/value JSON replies from the chat backend.

Replies are nominally JSON but frequently arrive with markdown fences, stray
prose or trailing commas. Each parser tries a strict decode first, then a
pattern scan, and reports failure through its result object instead of raising.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .logging import get_logger

REPORT_FIELDS: tuple[str, ...] = ("impactful", "alignment", "patterns", "synergy", "significance")

_PAIR_PATTERN = re.compile(r'"([^"]+)":\s*"([^"]*)"')

_LOGGER = get_logger("parsing")


@dataclass
class SummaryParse:
    """Contributor summaries recovered from a reply."""

    pairs: List[Tuple[str, str]] = field(default_factory=list)
    error: Optional[str] = None
    recovered: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class ReportParse:
    """The five report fields recovered from a reply, flattened into ``text``."""

    fields: Dict[str, str] = field(default_factory=dict)
    text: str = ""
    error: Optional[str] = None
    recovered: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


def parse_contributor_summaries(raw: str) -> SummaryParse:
    """Parse ``{"name": "sentence", ...}`` into ``(name, sentence)`` pairs."""
    decoded = _decode_object(raw)
    if decoded is not None:
        pairs = [
            (key.strip(), value)
            for key, value in decoded.items()
            if isinstance(value, str) and key.strip()
        ]
        return SummaryParse(pairs=pairs)

    pairs = [
        (key.strip(), value)
        for key, value in _PAIR_PATTERN.findall(raw or "")
        if key.strip()
    ]
    if not pairs:
        return SummaryParse(error="No fields could be extracted from malformed JSON")
    _LOGGER.debug("Recovered %d summary pairs from malformed JSON", len(pairs))
    return SummaryParse(pairs=pairs, recovered=True)


def parse_report_fields(raw: str) -> ReportParse:
    """Parse the fixed five-field report object and join its values."""
    decoded = _decode_object(raw)
    recovered = False
    if decoded is None:
        decoded = {}
        for key in REPORT_FIELDS:
            match = re.search(rf'"{key}":\s*"([^"]*)"', raw or "")
            if match:
                decoded[key] = match.group(1)
        if len(decoded) < len(REPORT_FIELDS):
            missing = ", ".join(key for key in REPORT_FIELDS if key not in decoded)
            return ReportParse(error=f"Failed to extract all fields from JSON (missing: {missing})")
        recovered = True
        _LOGGER.debug("Recovered report fields from malformed JSON")

    fields = {
        key: decoded[key]
        for key in REPORT_FIELDS
        if isinstance(decoded.get(key), str)
    }
    text = " ".join(value for value in fields.values() if value)
    return ReportParse(fields=fields, text=text, recovered=recovered)


def _decode_object(raw: str) -> Optional[dict]:
    if not raw:
        return None
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as exc:
        _LOGGER.debug("Reply is not valid JSON: %s", exc)
        return None
    return value if isinstance(value, dict) else None


__all__ = [
    "REPORT_FIELDS",
    "ReportParse",
    "SummaryParse",
    "parse_contributor_summaries",
    "parse_report_fields",
]
