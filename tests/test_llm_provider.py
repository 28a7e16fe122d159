import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from flightchat.config import Settings
from flightchat.errors import LLMConfigError
from flightchat.llm.provider import (
    LangChainChat,
    build_chat_model,
    content_to_text,
    to_langchain_messages,
)
from flightchat.types import ChatMessage


def make_settings(**overrides):
    base = {"OPENAI_API_KEY": None, "ANTHROPIC_API_KEY": None}
    base.update(overrides)
    return Settings(_env_file=None, **base)


def test_system_messages_fold_into_one_leading_message():
    converted = to_langchain_messages([
        ChatMessage(role="system", content="Be brief."),
        ChatMessage(role="user", content="Hi"),
        ChatMessage(role="assistant", content="Hello!"),
        ChatMessage(role="system", content="Answer in English."),
        ChatMessage(role="user", content="Flights?"),
    ])

    assert isinstance(converted[0], SystemMessage)
    assert converted[0].content == "Be brief.\n\nAnswer in English."
    assert [type(m) for m in converted[1:]] == [HumanMessage, AIMessage, HumanMessage]
    assert converted[-1].content == "Flights?"


def test_content_blocks_flatten_to_text():
    assert content_to_text("plain") == "plain"
    assert content_to_text([{"type": "text", "text": "a"}, {"type": "tool_use"}, "b"]) == "ab"
    assert content_to_text(None) == ""


@pytest.mark.parametrize("provider, key_name", [
    ("openai", "OPENAI_API_KEY"),
    ("anthropic", "ANTHROPIC_API_KEY"),
])
def test_missing_key_raises(provider, key_name):
    with pytest.raises(LLMConfigError, match=key_name):
        build_chat_model(make_settings(LLM_PROVIDER=provider))


def test_unknown_provider_raises():
    with pytest.raises(LLMConfigError, match="Unsupported"):
        build_chat_model(make_settings(LLM_PROVIDER="gemini", OPENAI_API_KEY="sk-test"))


def test_openai_model_from_settings():
    model = build_chat_model(make_settings(LLM_PROVIDER="OpenAI", OPENAI_API_KEY="sk-test", OPENAI_MODEL="gpt-4o-mini"))
    assert isinstance(model, ChatOpenAI)
    assert model.model_name == "gpt-4o-mini"


async def test_langchain_chat_returns_text():
    llm = LangChainChat(FakeListChatModel(responses=["Sure, where to?"]), provider="fake")
    text = await llm.chat([
        ChatMessage(role="system", content="You are a travel assistant."),
        ChatMessage(role="user", content="Plan a trip"),
    ])
    assert text == "Sure, where to?"
