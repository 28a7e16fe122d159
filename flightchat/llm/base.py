"""Conversational-completion capability the pipeline depends on."""

from typing import List, Protocol, Sequence

from flightchat.errors import UpstreamLLMFailure
from flightchat.obs.logger import log_event
from flightchat.types import ChatMessage


class ConversationalLLM(Protocol):
    async def chat(self, messages: Sequence[ChatMessage]) -> str:
        ...


def with_instruction(instruction: str, messages: Sequence[ChatMessage]) -> List[ChatMessage]:
    """Prepend a system instruction to a conversation."""
    return [ChatMessage(role="system", content=instruction), *messages]


async def call_llm(
    llm: ConversationalLLM,
    messages: Sequence[ChatMessage],
    step: str,
    allow_empty: bool = False,
) -> str:
    """Single LLM round trip; any collaborator failure becomes UpstreamLLMFailure."""
    try:
        text = await llm.chat(messages)
    except UpstreamLLMFailure:
        raise
    except Exception as e:
        log_event("llm_failed", level="ERROR", step=step, error=f"{type(e).__name__}: {e}")
        raise UpstreamLLMFailure(f"{type(e).__name__}: {e}", step=step) from e

    text = text or ""
    if not allow_empty and not text.strip():
        log_event("llm_empty_completion", level="ERROR", step=step)
        raise UpstreamLLMFailure("empty completion", step=step)
    return text
