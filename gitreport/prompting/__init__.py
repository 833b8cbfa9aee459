"""Prompt templates for report generation."""

from .builder import ChainPrompts, PromptBuilder

__all__ = ["ChainPrompts", "PromptBuilder"]
