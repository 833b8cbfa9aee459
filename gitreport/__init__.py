"""Per-contributor GitHub activity reports."""

__version__ = "0.1.0"
