"""
Chat pipeline entry point

One ChatPipeline is built at startup with the configured LLM and flight
service. Each call to process_chat_turn runs a fresh graph invocation; no
state is shared between turns.
"""

from typing import Sequence
import time

from flightchat.errors import EmptyRequest, PipelineError
from flightchat.flights.client import FlightSearchService
from flightchat.llm.base import ConversationalLLM
from flightchat.obs.logger import log_event
from flightchat.obs.metrics import inc_counter, record_timing
from flightchat.pipeline.graph import compile_chat_graph
from flightchat.pipeline.state import ChatState, create_initial_state, has_offers
from flightchat.types import ChatMessage, ChatResponse


def build_response(state: ChatState) -> ChatResponse:
    """Assemble the terminal response; flights only for a non-empty search."""
    return ChatResponse(
        message=state["message"],
        flights=state["search_results"] if has_offers(state) else None,
        cards=state["cards"],
    )


class ChatPipeline:
    def __init__(self, llm: ConversationalLLM, search_service: FlightSearchService):
        self.llm = llm
        self.search_service = search_service
        self.graph = compile_chat_graph(llm, search_service)

    async def process_chat_turn(self, messages: Sequence[ChatMessage]) -> ChatResponse:
        if not messages:
            inc_counter("chat_turns_total", {"outcome": "empty_request"})
            raise EmptyRequest()

        log_event("chat_turn_started", messages=len(messages))
        start = time.monotonic()
        try:
            final_state = await self.graph.ainvoke(create_initial_state(messages))
        except PipelineError as e:
            inc_counter("chat_turns_total", {"outcome": type(e).__name__})
            log_event(
                "chat_turn_failed",
                level="ERROR",
                error=type(e).__name__,
                step=getattr(e, "step", None),
                detail=e.detail,
            )
            raise
        finally:
            record_timing("chat_turn_latency_ms", (time.monotonic() - start) * 1000.0)

        outcome = final_state["outcome"]
        inc_counter("chat_turns_total", {"outcome": outcome})
        response = build_response(final_state)
        log_event(
            "chat_turn_completed",
            outcome=outcome,
            offers=len(response.flights.items) if response.flights else 0,
            cards=len(response.cards),
        )
        return response


def create_chat_pipeline(llm: ConversationalLLM, search_service: FlightSearchService) -> ChatPipeline:
    """Factory function to create the chat pipeline"""
    return ChatPipeline(llm=llm, search_service=search_service)
