import os
import sys
import asyncio
import inspect

import pytest

# Ensure project root is on sys.path so `import flightchat` works in tests
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from flightchat.types import FlightOffer, FlightSearchResult, LocationList, Price


def pytest_pyfunc_call(pyfuncitem):
    """Allow running async tests without pytest-asyncio.

    If the test function is a coroutine, run it in a fresh event loop.
    """
    testfunction = pyfuncitem.obj
    if inspect.iscoroutinefunction(testfunction):
        funcargs = pyfuncitem.funcargs
        sig = inspect.signature(testfunction)
        # Filter only the parameters that the test function expects
        allowed = {name: funcargs[name] for name in sig.parameters.keys() if name in funcargs}
        asyncio.run(testfunction(**allowed))
        return True
    return None


class StubLLM:
    """Canned ConversationalLLM; each call pops the next response (or raises it)."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    async def chat(self, messages):
        self.calls.append(list(messages))
        if not self.responses:
            raise AssertionError("unexpected LLM call")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class StubSearch:
    """Canned FlightSearchService."""

    def __init__(self, result=None, error=None, locations=None):
        self.result = result
        self.error = error
        self.locations = locations or LocationList()
        self.calls = []

    async def search_flights(self, params):
        self.calls.append(params)
        if self.error:
            raise self.error
        return self.result

    async def lookup_locations(self, term, limit=5):
        self.calls.append((term, limit))
        if self.error:
            raise self.error
        return self.locations


@pytest.fixture
def stub_llm():
    return StubLLM


@pytest.fixture
def stub_search():
    return StubSearch


@pytest.fixture
def one_offer_result():
    return FlightSearchResult(
        currency="USD",
        items=[
            FlightOffer(
                id="1",
                price=Price(total="890.00", currency="USD"),
                itineraries=[{"duration": "PT14H10M", "segments": []}],
            )
        ],
    )


@pytest.fixture
def empty_result():
    return FlightSearchResult(currency="USD", items=[])
