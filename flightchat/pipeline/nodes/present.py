"""
SUMMARIZE and TRAVEL_CARDS nodes

Both run only after a search that returned at least one offer.
"""

from flightchat.llm.base import ConversationalLLM
from flightchat.llm.summarize import generate_travel_cards, summarize_results
from flightchat.pipeline.state import ChatState, Stage, set_cards, set_message


class SummarizeNode:
    def __init__(self, llm: ConversationalLLM):
        self.llm = llm

    async def __call__(self, state: ChatState) -> ChatState:
        summary = await summarize_results(self.llm, state["search_results"])
        return set_message(state, summary, Stage.SUMMARIZING)


class TravelCardsNode:
    def __init__(self, llm: ConversationalLLM):
        self.llm = llm

    async def __call__(self, state: ChatState) -> ChatState:
        cards = await generate_travel_cards(self.llm, state["intent"].destination)
        return set_cards(state, cards)
