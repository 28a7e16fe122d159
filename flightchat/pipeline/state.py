"""
Chat pipeline state schema and reducers

ChatState is what flows between the LangGraph nodes during one chat turn.
Reducers never mutate their input; each returns a new state.
"""

from enum import Enum
from typing import List, Optional, Sequence
from typing_extensions import TypedDict
import copy

from flightchat.types import ChatMessage, FlightIntent, FlightSearchResult, TravelCard


class Stage(str, Enum):
    START = "start"
    INTENT_PARSED = "intent_parsed"
    GENERAL_REPLY = "general_reply"
    SEARCHING = "searching"
    NO_RESULTS = "no_results"
    SUMMARIZING = "summarizing"
    CARDS = "cards"
    DONE = "done"


OUTCOMES = {
    Stage.GENERAL_REPLY: "general_reply",
    Stage.NO_RESULTS: "no_results",
    Stage.CARDS: "flights",
}


class ChatState(TypedDict):
    """State of a single chat turn"""

    messages: List[ChatMessage]
    stage: Stage

    # Intent extraction
    intent_text: str                  # raw LLM output, verbatim
    intent: Optional[FlightIntent]    # set only for a parsed search_flights intent

    # Flight flow
    search_results: Optional[FlightSearchResult]

    # Response parts
    message: str
    cards: List[TravelCard]

    # Branch that produced the response, kept once the turn is DONE
    outcome: str


def create_initial_state(messages: Sequence[ChatMessage]) -> ChatState:
    return ChatState(
        messages=list(messages),
        stage=Stage.START,
        intent_text="",
        intent=None,
        search_results=None,
        message="",
        cards=[],
        outcome="",
    )


def set_intent(current: ChatState, text: str, intent: Optional[FlightIntent]) -> ChatState:
    new_state = copy.deepcopy(current)
    new_state["intent_text"] = text
    new_state["intent"] = intent
    new_state["stage"] = Stage.INTENT_PARSED
    return new_state


def set_search_results(current: ChatState, results: FlightSearchResult) -> ChatState:
    new_state = copy.deepcopy(current)
    new_state["search_results"] = results
    new_state["stage"] = Stage.SEARCHING
    return new_state


def set_message(current: ChatState, message: str, stage: Stage) -> ChatState:
    new_state = copy.deepcopy(current)
    new_state["message"] = message
    new_state["stage"] = stage
    return new_state


def set_cards(current: ChatState, cards: List[TravelCard]) -> ChatState:
    new_state = copy.deepcopy(current)
    new_state["cards"] = list(cards)
    new_state["stage"] = Stage.CARDS
    return new_state


def set_done(current: ChatState) -> ChatState:
    new_state = copy.deepcopy(current)
    new_state["outcome"] = OUTCOMES.get(current["stage"], Stage(current["stage"]).value)
    new_state["stage"] = Stage.DONE
    return new_state


def has_flight_intent(state: ChatState) -> bool:
    return state.get("intent") is not None


def has_offers(state: ChatState) -> bool:
    results = state.get("search_results")
    return results is not None and len(results.items) > 0
