"""Text budgeting and capacity allocation."""

from .allocator import CHARS_PER_TOKEN, AllocationPlan, SourceSpec, allocate, allocate_texts
from .squeeze import TruncatedText, budget_text, squeeze_tokens, squeeze_words

__all__ = [
    "AllocationPlan",
    "CHARS_PER_TOKEN",
    "SourceSpec",
    "TruncatedText",
    "allocate",
    "allocate_texts",
    "budget_text",
    "squeeze_tokens",
    "squeeze_words",
]
