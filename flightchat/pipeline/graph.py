"""
Chat pipeline state machine

extract_intent -> general_reply
               -> search_flights -> no_results
                                 -> summarize -> travel_cards
Every branch then passes through finish, which marks the turn DONE.
Nodes run strictly one after another.
"""

from typing import Any, Literal
from langgraph.graph import StateGraph, END

from flightchat.flights.client import FlightSearchService
from flightchat.llm.base import ConversationalLLM
from flightchat.obs.logger import log_event
from flightchat.pipeline.nodes.intent import ExtractIntentNode, GeneralReplyNode
from flightchat.pipeline.nodes.present import SummarizeNode, TravelCardsNode
from flightchat.pipeline.nodes.search_flights import NoResultsNode, SearchFlightsNode
from flightchat.pipeline.state import ChatState, has_flight_intent, has_offers, set_done


# Routing functions
def route_intent(state: ChatState) -> Literal["search_flights", "general_reply"]:
    """Route from extract_intent: only a parsed search intent enters the flight flow"""
    if has_flight_intent(state):
        log_event("route", level="DEBUG", frm="extract_intent", to="search_flights")
        return "search_flights"
    log_event("route", level="DEBUG", frm="extract_intent", to="general_reply")
    return "general_reply"


def route_search(state: ChatState) -> Literal["summarize", "no_results"]:
    """Route from search_flights on whether any offer came back"""
    if has_offers(state):
        return "summarize"
    log_event("route", level="DEBUG", frm="search_flights", to="no_results")
    return "no_results"


def create_chat_graph(llm: ConversationalLLM, search_service: FlightSearchService) -> StateGraph:
    workflow = StateGraph(ChatState)

    extract = ExtractIntentNode(llm)
    general = GeneralReplyNode()
    search = SearchFlightsNode(search_service)
    no_results = NoResultsNode()
    summarize = SummarizeNode(llm)
    cards = TravelCardsNode(llm)

    async def extract_intent_node(state: ChatState) -> ChatState:
        return await extract(state)

    async def general_reply_node(state: ChatState) -> ChatState:
        return await general(state)

    async def search_flights_node(state: ChatState) -> ChatState:
        return await search(state)

    async def no_results_node(state: ChatState) -> ChatState:
        return await no_results(state)

    async def summarize_node(state: ChatState) -> ChatState:
        return await summarize(state)

    async def travel_cards_node(state: ChatState) -> ChatState:
        return await cards(state)

    def finish_node(state: ChatState) -> ChatState:
        return set_done(state)

    workflow.add_node("extract_intent", extract_intent_node)
    workflow.add_node("general_reply", general_reply_node)
    workflow.add_node("search_flights", search_flights_node)
    workflow.add_node("no_results", no_results_node)
    workflow.add_node("summarize", summarize_node)
    workflow.add_node("travel_cards", travel_cards_node)
    workflow.add_node("finish", finish_node)

    workflow.set_entry_point("extract_intent")

    workflow.add_conditional_edges(
        "extract_intent",
        route_intent,
        {
            "search_flights": "search_flights",
            "general_reply": "general_reply",
        }
    )
    workflow.add_conditional_edges(
        "search_flights",
        route_search,
        {
            "summarize": "summarize",
            "no_results": "no_results",
        }
    )
    workflow.add_edge("summarize", "travel_cards")

    workflow.add_edge("general_reply", "finish")
    workflow.add_edge("no_results", "finish")
    workflow.add_edge("travel_cards", "finish")
    workflow.add_edge("finish", END)

    return workflow


def compile_chat_graph(llm: ConversationalLLM, search_service: FlightSearchService) -> Any:
    return create_chat_graph(llm, search_service).compile()
