"""Shared budgets and output caps for report prompts."""

from __future__ import annotations

# README digest
README_MAX_CHARS = 20_000
README_SQUEEZE_THRESHOLD = 48_000
README_SQUEEZE_WORDS = 9_000
README_SQUEEZE_SPLIT = 0.7
README_OUTPUT_TOKENS = 256

# Issues
ISSUE_BODY_WORDS = 400
ISSUE_BODY_SPLIT = 0.7
COMMENT_WORDS = 200
COMMENT_SPLIT = 1.0
ISSUE_TRANSCRIPT_MAX_CHARS = 32_000
ISSUE_ANALYSIS_TOKENS = 768
ISSUE_SUMMARY_TOKENS = 384
DEFAULT_FOCUS = "top contributors, no more than 3,"

# Commits
PATCH_WORDS = 4_000
PATCH_SPLIT = 0.6
PATCH_MAX_CHARS = 24_000
COMMIT_ANALYSIS_TOKENS = 384
COMMIT_SUMMARY_TOKENS = 128

# Correlation
SOURCE_WEIGHTS: dict[str, int] = {
    "profile": 1,
    "commits": 4,
    "issues": 4,
    "discussion": 2,
}
DEFAULT_CORRELATION_CAPACITY = 6_000
CORRELATION_SPLIT = 0.5
# (max item count, turn-1 tokens, turn-2 tokens); larger inputs use LARGE_OUTPUT_CAPS.
OUTPUT_CAP_BUCKETS: tuple[tuple[int, int, int], ...] = (
    (10, 512, 256),
    (40, 768, 384),
)
LARGE_OUTPUT_CAPS: tuple[int, int] = (1024, 512)
