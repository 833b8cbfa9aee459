"""Chat backend client and exchange composition."""

from .chain import ChainError, ChatComposer, ChatExchange, ChatMessage, PromptPair
from .runner import ChatBackendError, LLMRunner

__all__ = [
    "ChainError",
    "ChatBackendError",
    "ChatComposer",
    "ChatExchange",
    "ChatMessage",
    "LLMRunner",
    "PromptPair",
]
