"""LLM provider selection and the LangChain chat adapter.

The provider is read from settings once, when the gateway builds its
pipeline; nothing downstream looks at LLM_PROVIDER again.
"""

from typing import Any, List, Sequence
import time

from langchain_anthropic import ChatAnthropic
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from flightchat.config import Settings
from flightchat.errors import LLMConfigError
from flightchat.obs.logger import log_event
from flightchat.obs.metrics import record_timing
from flightchat.types import ChatMessage

SUPPORTED_PROVIDERS = ("openai", "anthropic")


def build_chat_model(config: Settings) -> BaseChatModel:
    provider = config.LLM_PROVIDER.lower()

    if provider == "anthropic":
        if not config.ANTHROPIC_API_KEY:
            raise LLMConfigError("ANTHROPIC_API_KEY is not set")
        return ChatAnthropic(
            model=config.ANTHROPIC_MODEL,
            temperature=config.LLM_TEMPERATURE,
            max_tokens=config.LLM_MAX_TOKENS,
            api_key=config.ANTHROPIC_API_KEY,
        )

    if provider == "openai":
        if not config.OPENAI_API_KEY:
            raise LLMConfigError("OPENAI_API_KEY is not set")
        return ChatOpenAI(
            model=config.OPENAI_MODEL,
            temperature=config.LLM_TEMPERATURE,
            max_tokens=config.LLM_MAX_TOKENS,
            api_key=config.OPENAI_API_KEY,
        )

    raise LLMConfigError(
        f"Unsupported LLM provider '{config.LLM_PROVIDER}' (expected one of {', '.join(SUPPORTED_PROVIDERS)})"
    )


def to_langchain_messages(messages: Sequence[ChatMessage]) -> List[BaseMessage]:
    """Convert a conversation, folding every system message into one leading SystemMessage.

    Anthropic only accepts a single system prompt at the head of the
    conversation, so later system turns are merged into it.
    """
    system_parts = [m.content for m in messages if m.role == "system"]
    converted: List[BaseMessage] = []
    if system_parts:
        converted.append(SystemMessage(content="\n\n".join(system_parts)))
    for m in messages:
        if m.role == "user":
            converted.append(HumanMessage(content=m.content))
        elif m.role == "assistant":
            converted.append(AIMessage(content=m.content))
    return converted


def content_to_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(block.get("text", ""))
        return "".join(parts)
    return "" if content is None else str(content)


class LangChainChat:
    """ConversationalLLM backed by any LangChain chat model."""

    def __init__(self, model: BaseChatModel, provider: str):
        self.model = model
        self.provider = provider

    async def chat(self, messages: Sequence[ChatMessage]) -> str:
        log_event("llm_call", level="DEBUG", provider=self.provider, messages=len(messages))
        start = time.monotonic()
        res = await self.model.ainvoke(to_langchain_messages(messages))
        elapsed_ms = (time.monotonic() - start) * 1000.0
        record_timing("llm_latency_ms", elapsed_ms, {"provider": self.provider})
        text = content_to_text(res.content)
        log_event("llm_response", level="DEBUG", provider=self.provider, chars=len(text), ms_total=round(elapsed_ms, 2))
        return text


def create_llm(config: Settings) -> LangChainChat:
    """Build the configured provider; raises LLMConfigError when it cannot be used."""
    model = build_chat_model(config)
    provider = config.LLM_PROVIDER.lower()
    log_event("llm_configured", provider=provider)
    return LangChainChat(model, provider)
