"""
EXTRACT_INTENT and GENERAL_REPLY nodes

The intent node runs the single classification call; when the output is not a
flight-search intent the general-reply node hands the raw text back verbatim.
"""

from flightchat.llm.base import ConversationalLLM
from flightchat.llm.extract_intent import FlightSearchIntent, extract_intent, parse_intent
from flightchat.obs.logger import log_event
from flightchat.pipeline.state import ChatState, Stage, set_intent, set_message


class ExtractIntentNode:
    def __init__(self, llm: ConversationalLLM):
        self.llm = llm

    async def __call__(self, state: ChatState) -> ChatState:
        text = await extract_intent(self.llm, state["messages"])
        parsed = parse_intent(text)
        intent = parsed.intent if isinstance(parsed, FlightSearchIntent) else None
        return set_intent(state, text, intent)


class GeneralReplyNode:
    async def __call__(self, state: ChatState) -> ChatState:
        log_event("general_reply", level="DEBUG", chars=len(state["intent_text"]))
        new_state = set_message(state, state["intent_text"], Stage.GENERAL_REPLY)
        new_state["cards"] = []
        return new_state
