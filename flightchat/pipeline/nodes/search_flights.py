"""
SEARCH_FLIGHTS and NO_RESULTS nodes

The search node turns the parsed intent into search parameters and calls the
flight service once. Any failure there aborts the turn with
UpstreamSearchFailure; an empty but successful search goes to NO_RESULTS.
"""

from flightchat.errors import PipelineError, UpstreamSearchFailure
from flightchat.flights.client import FlightSearchService
from flightchat.llm.prompts import NO_RESULTS_MESSAGE
from flightchat.obs.logger import log_event
from flightchat.pipeline.state import ChatState, Stage, set_message, set_search_results
from flightchat.types import FlightIntent, FlightSearchParams

DEFAULT_ADULTS = 1
DEFAULT_CURRENCY = "USD"


def search_params_from_intent(intent: FlightIntent) -> FlightSearchParams:
    return FlightSearchParams(
        origin=intent.origin,
        destination=intent.destination,
        depart_date=intent.depart_date,
        return_date=intent.return_date,
        round=bool(intent.round),
        adults=intent.adults or DEFAULT_ADULTS,
        currency=intent.currency or DEFAULT_CURRENCY,
    )


class SearchFlightsNode:
    def __init__(self, search_service: FlightSearchService):
        self.search_service = search_service

    async def __call__(self, state: ChatState) -> ChatState:
        intent = state.get("intent")
        if intent is None:
            # Routing guarantees an intent here
            raise UpstreamSearchFailure("search_flights reached without a flight intent")

        params = search_params_from_intent(intent)
        try:
            results = await self.search_service.search_flights(params)
        except PipelineError:
            raise
        except Exception as e:
            log_event("flight_search_failed", level="ERROR", error=f"{type(e).__name__}: {e}")
            raise UpstreamSearchFailure(str(e)) from e

        log_event("flight_search_completed", offers=len(results.items), currency=results.currency)
        return set_search_results(state, results)


class NoResultsNode:
    async def __call__(self, state: ChatState) -> ChatState:
        new_state = set_message(state, NO_RESULTS_MESSAGE, Stage.NO_RESULTS)
        new_state["cards"] = []
        return new_state
