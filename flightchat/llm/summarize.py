"""Result summary and destination travel cards, one LLM call each."""

from pydantic import TypeAdapter, ValidationError
from typing import List
import json

from flightchat.llm.base import ConversationalLLM, call_llm
from flightchat.llm.prompts import CARDS_PROMPT, CARDS_USER, SUMMARY_PROMPT
from flightchat.obs.logger import log_event
from flightchat.obs.metrics import inc_counter
from flightchat.types import ChatMessage, FlightSearchResult, TravelCard

CARD_COUNT = 3

_cards_adapter = TypeAdapter(List[TravelCard])


async def summarize_results(llm: ConversationalLLM, result: FlightSearchResult) -> str:
    messages = [
        ChatMessage(role="system", content=SUMMARY_PROMPT),
        ChatMessage(role="user", content=result.model_dump_json()),
    ]
    return await call_llm(llm, messages, step="summarize")


def fallback_cards(destination: str) -> List[TravelCard]:
    return [
        TravelCard(title="Explore", summary=f"Discover {destination}"),
        TravelCard(title="Local Tips", summary="Check local guides for recommendations"),
        TravelCard(title="Weather", summary="Check forecast before your trip"),
    ]


def parse_cards(text: str, destination: str) -> List[TravelCard]:
    """Parse the card generator output; any malformed output yields the fallback triple."""
    try:
        cards = _cards_adapter.validate_python(json.loads(text))
    except (json.JSONDecodeError, TypeError, ValidationError) as e:
        return _degraded(destination, type(e).__name__)

    if len(cards) != CARD_COUNT:
        return _degraded(destination, f"expected {CARD_COUNT} cards, got {len(cards)}")
    return cards


def _degraded(destination: str, reason: str) -> List[TravelCard]:
    log_event("cards_fallback", level="WARNING", destination=destination, reason=reason)
    inc_counter("cards_fallback_total")
    return fallback_cards(destination)


async def generate_travel_cards(llm: ConversationalLLM, destination: str) -> List[TravelCard]:
    messages = [
        ChatMessage(role="system", content=CARDS_PROMPT.format(destination=destination)),
        ChatMessage(role="user", content=CARDS_USER.format(destination=destination)),
    ]
    text = await call_llm(llm, messages, step="travel_cards", allow_empty=True)
    return parse_cards(text, destination)
