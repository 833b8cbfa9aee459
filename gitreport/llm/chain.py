"""Single-turn and two-turn ("chain") chat exchanges.

A chain sends an open-ended analysis request first, appends the assistant's
reply to the conversation, then asks a follow-up that compresses the analysis
into a constrained form. The second request carries every earlier turn.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Sequence

from ..logging import get_logger
from ..utils import run_blocking

SYSTEM = "system"
USER = "user"
ASSISTANT = "assistant"


class ChatBackend(Protocol):
    def chat(self, messages: Sequence[dict], *, max_tokens: Optional[int] = None) -> str: ...


class ChainError(RuntimeError):
    """A chat turn failed; ``tag`` names the logical operation, ``step`` the turn."""

    def __init__(self, tag: str, step: int, reason: str) -> None:
        super().__init__(f"{tag} (step {step}): {reason}")
        self.tag = tag
        self.step = step
        self.reason = reason


@dataclass(frozen=True)
class ChatMessage:
    role: str
    content: str


@dataclass(frozen=True)
class PromptPair:
    system: str
    user: str
    max_tokens: int


@dataclass
class ChatExchange:
    """Append-only conversation state threaded through chained requests."""

    messages: List[ChatMessage] = field(default_factory=list)

    @classmethod
    def start(cls, system: str, user: str) -> "ChatExchange":
        exchange = cls()
        exchange.append(SYSTEM, system)
        exchange.append(USER, user)
        return exchange

    def append(self, role: str, content: str) -> None:
        self.messages.append(ChatMessage(role=role, content=content))

    def as_payload(self) -> List[dict]:
        return [{"role": message.role, "content": message.content} for message in self.messages]

    def __len__(self) -> int:
        return len(self.messages)


class ChatComposer:
    """Builds exchanges and runs them against a chat backend."""

    def __init__(self, backend: ChatBackend) -> None:
        self.backend = backend
        self.logger = get_logger("llm.chain")

    async def complete(self, pair: PromptPair, *, tag: str) -> str:
        """Run a single system+user turn."""
        exchange = ChatExchange.start(pair.system, pair.user)
        return await self._turn(exchange, pair.max_tokens, tag=tag, step=1)

    async def chain(
        self,
        system: str,
        user_1: str,
        max_tokens_1: int,
        user_2: str,
        max_tokens_2: int,
        *,
        tag: str,
    ) -> str:
        """Run two turns, the second resent with the first turn's full context."""
        exchange = ChatExchange.start(system, user_1)
        analysis = await self._turn(exchange, max_tokens_1, tag=tag, step=1)
        self.logger.debug("%s step 1 reply: %r", tag, analysis)

        exchange.append(ASSISTANT, analysis)
        exchange.append(USER, user_2)
        reply = await self._turn(exchange, max_tokens_2, tag=tag, step=2)
        self.logger.debug("%s step 2 reply: %r", tag, reply)
        return reply

    async def _turn(self, exchange: ChatExchange, max_tokens: int, *, tag: str, step: int) -> str:
        payload = exchange.as_payload()
        try:
            reply = await run_blocking(self.backend.chat, payload, max_tokens=max_tokens)
        except RuntimeError as exc:
            raise ChainError(tag, step, str(exc)) from exc
        if not reply or not reply.strip():
            raise ChainError(tag, step, "empty reply")
        return reply.strip()


__all__ = [
    "ASSISTANT",
    "ChainError",
    "ChatBackend",
    "ChatComposer",
    "ChatExchange",
    "ChatMessage",
    "PromptPair",
    "SYSTEM",
    "USER",
]
