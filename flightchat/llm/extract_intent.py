from pydantic import BaseModel, ValidationError
from datetime import datetime
from typing import Optional, Sequence, Union
import json

from flightchat.llm.base import ConversationalLLM, call_llm, with_instruction
from flightchat.llm.prompts import INTENT_PROMPT
from flightchat.obs.logger import log_event
from flightchat.types import ChatMessage, FlightIntent


class GeneralReply(BaseModel):
    """Free-form assistant text, returned to the user as-is."""
    text: str


class FlightSearchIntent(BaseModel):
    intent: FlightIntent
    raw: str


ParsedIntent = Union[GeneralReply, FlightSearchIntent]


async def extract_intent(llm: ConversationalLLM, messages: Sequence[ChatMessage],
                         today: Optional[str] = None) -> str:
    """Ask the LLM to classify the conversation; returns its raw text untouched."""
    today = today or datetime.now().strftime("%Y-%m-%d")
    instruction = INTENT_PROMPT.format(today=today)
    text = await call_llm(llm, with_instruction(instruction, messages), step="extract_intent")
    log_event("intent_response", level="DEBUG", chars=len(text))
    return text


def parse_intent(text: str) -> ParsedIntent:
    """Map raw LLM output to a flight-search intent, or to a general reply.

    Only a bare JSON object with intent == "search_flights" and the required
    fields counts as a search. Anything else is conversation.
    """
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        log_event("intent_general_reply", level="DEBUG", reason="not_json")
        return GeneralReply(text=text)

    if not isinstance(data, dict) or data.get("intent") != "search_flights":
        log_event("intent_general_reply", level="DEBUG", reason="no_search_intent")
        return GeneralReply(text=text)

    try:
        intent = FlightIntent.model_validate(data)
    except ValidationError as e:
        log_event("intent_general_reply", level="WARNING", reason="invalid_fields", errors=e.error_count())
        return GeneralReply(text=text)

    log_event(
        "intent_search_flights",
        origin=intent.origin,
        destination=intent.destination,
        depart_date=intent.depart_date,
    )
    return FlightSearchIntent(intent=intent, raw=text)
