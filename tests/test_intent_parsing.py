import json
import re

import pytest

from flightchat.errors import UpstreamLLMFailure
from flightchat.llm.extract_intent import (
    FlightSearchIntent,
    GeneralReply,
    extract_intent,
    parse_intent,
)
from flightchat.llm.prompts import INTENT_PROMPT
from flightchat.types import ChatMessage


SEARCH_JSON = '{"intent":"search_flights","origin":"ICN","destination":"JFK","departDate":"2025-03-17"}'


def test_parse_search_intent():
    parsed = parse_intent(SEARCH_JSON)
    assert isinstance(parsed, FlightSearchIntent)
    assert parsed.intent.origin == "ICN"
    assert parsed.intent.destination == "JFK"
    assert parsed.intent.depart_date == "2025-03-17"
    assert parsed.intent.return_date is None
    assert parsed.intent.adults is None
    assert parsed.raw == SEARCH_JSON


def test_parse_round_trip_intent_with_options():
    text = json.dumps({
        "intent": "search_flights",
        "origin": "Seoul",
        "destination": "Tokyo",
        "departDate": "2025-05-01",
        "returnDate": "2025-05-08",
        "round": True,
        "adults": 2,
        "currency": "KRW",
    })
    parsed = parse_intent(text)
    assert isinstance(parsed, FlightSearchIntent)
    assert parsed.intent.round is True
    assert parsed.intent.return_date == "2025-05-08"
    assert parsed.intent.adults == 2
    assert parsed.intent.currency == "KRW"


@pytest.mark.parametrize("text", [
    "I'd love to help you plan a trip!",
    "",
    "```json\n" + SEARCH_JSON + "\n```",
    '{"intent": "book_hotel", "city": "Paris"}',
    '{"origin": "ICN", "destination": "JFK", "departDate": "2025-03-17"}',
    '["search_flights"]',
    "42",
    '{"intent": "search_flights", "origin": "ICN"}',
])
def test_non_search_output_is_general_reply_verbatim(text):
    parsed = parse_intent(text)
    assert isinstance(parsed, GeneralReply)
    assert parsed.text == text


async def test_extract_intent_prepends_instruction_and_returns_raw_text(stub_llm):
    llm = stub_llm("  Hello there!  ")
    conversation = [
        ChatMessage(role="user", content="Any tips for Lisbon?"),
        ChatMessage(role="assistant", content="Sure, what do you like?"),
        ChatMessage(role="user", content="Food"),
    ]

    text = await extract_intent(llm, conversation, today="2025-03-10")

    assert text == "  Hello there!  "
    assert len(llm.calls) == 1
    sent = llm.calls[0]
    assert sent[0].role == "system"
    assert sent[0].content == INTENT_PROMPT.format(today="2025-03-10")
    assert sent[1:] == conversation


async def test_extract_intent_wraps_provider_errors(stub_llm):
    llm = stub_llm(RuntimeError("provider down"))
    with pytest.raises(UpstreamLLMFailure) as exc_info:
        await extract_intent(llm, [ChatMessage(role="user", content="hi")])
    assert exc_info.value.step == "extract_intent"
    assert "provider down" in exc_info.value.detail


async def test_extract_intent_rejects_empty_completion(stub_llm):
    llm = stub_llm("   ")
    with pytest.raises(UpstreamLLMFailure):
        await extract_intent(llm, [ChatMessage(role="user", content="hi")])


async def test_intent_instruction_carries_todays_date(stub_llm):
    llm = stub_llm("Hi!")
    await extract_intent(llm, [ChatMessage(role="user", content="Flights to Tokyo next Monday")])

    instruction = llm.calls[0][0].content
    assert re.search(r"Today's date for reference: \d{4}-\d{2}-\d{2}$", instruction)
    assert '"intent": "search_flights"' in instruction
