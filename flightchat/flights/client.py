"""Gateway-side client for the flight service.

Searches go through the ``/mcp`` envelope endpoint; location lookups use the
plain REST route. No retries and no timeout override: failures surface as
FlightSearchError with a readable message.
"""

from typing import Any, Dict, Optional, Protocol
import time
import uuid

import httpx
from pydantic import ValidationError

from flightchat.errors import FlightSearchError
from flightchat.obs.context import request_id_var
from flightchat.obs.logger import log_event
from flightchat.obs.metrics import record_timing
from flightchat.types import (
    FlightSearchParams,
    FlightSearchResult,
    LocationList,
    ServiceRequest,
    ServiceResponse,
)

FLIGHT_SERVICE = "flight_search"


class FlightSearchService(Protocol):
    async def search_flights(self, params: FlightSearchParams) -> FlightSearchResult:
        ...

    async def lookup_locations(self, term: str, limit: int = 5) -> LocationList:
        ...


def build_search_payload(params: FlightSearchParams) -> Dict[str, Any]:
    return {
        "origin": params.origin,
        "destination": params.destination,
        "departDate": params.depart_date,
        "returnDate": params.return_date,
        "round": params.round,
        "adults": params.adults if params.adults is not None else 1,
        "currency": params.currency or "USD",
        "maxStopovers": params.max_stopovers if params.max_stopovers is not None else 0,
    }


def _error_message(r: httpx.Response) -> str:
    try:
        body = r.json()
    except ValueError:
        return r.text or f"HTTP {r.status_code}"
    if isinstance(body, dict) and isinstance(body.get("detail"), dict):
        body = body["detail"]  # FastAPI HTTPException shape
    if isinstance(body, dict) and isinstance(body.get("message"), str):
        return body["message"]
    return r.text or f"HTTP {r.status_code}"


class FlightSearchClient:
    def __init__(self, base_url: str, http: Optional[httpx.AsyncClient] = None):
        self.base_url = base_url.rstrip("/")
        # The flight service waits on Amadeus; no client-side deadline here
        self._http = http or httpx.AsyncClient(timeout=None)

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        req_id = request_id_var.get()
        if req_id:
            headers["X-Request-ID"] = req_id
        return headers

    async def search_flights(self, params: FlightSearchParams) -> FlightSearchResult:
        envelope = ServiceRequest(
            message_id=str(uuid.uuid4()),
            session_id=str(uuid.uuid4()),
            service=FLIGHT_SERVICE,
            action="invoke",
            payload=build_search_payload(params),
        )
        log_event(
            "flight_search_request",
            origin=params.origin,
            destination=params.destination,
            depart_date=params.depart_date,
            message_id=envelope.message_id,
        )

        start = time.monotonic()
        try:
            r = await self._http.post(
                f"{self.base_url}/mcp",
                json=envelope.model_dump(by_alias=True),
                headers=self._headers(),
            )
        except httpx.HTTPError as e:
            raise FlightSearchError(f"Flight service unreachable: {type(e).__name__}: {e}") from e
        finally:
            record_timing("flight_search_latency_ms", (time.monotonic() - start) * 1000.0)

        if r.status_code != 200:
            raise FlightSearchError(f"Flight service call failed ({r.status_code}): {r.text}")

        try:
            raw = r.json()
        except ValueError as e:
            raise FlightSearchError("Flight service returned invalid JSON") from e
        if not isinstance(raw, dict):
            raise FlightSearchError("Unexpected flight service response")

        try:
            data = ServiceResponse.model_validate(raw)
        except ValidationError as e:
            raise FlightSearchError("Malformed flight service envelope") from e
        if data.error:
            raise FlightSearchError(f"Flight service error: {data.error.message}")

        try:
            result = FlightSearchResult.model_validate(data.result)
        except ValidationError as e:
            raise FlightSearchError("Malformed flight search result") from e

        log_event("flight_search_result", currency=result.currency, offers=len(result.items))
        return result

    async def lookup_locations(self, term: str, limit: int = 5) -> LocationList:
        log_event("location_lookup", term=term, limit=limit)
        try:
            r = await self._http.get(
                f"{self.base_url}/api/locations",
                params={"term": term, "limit": str(limit)},
                headers=self._headers(),
            )
        except httpx.HTTPError as e:
            raise FlightSearchError(f"Flight service unreachable: {type(e).__name__}: {e}") from e

        if r.status_code != 200:
            raise FlightSearchError(_error_message(r))

        try:
            return LocationList.model_validate(r.json())
        except (ValueError, ValidationError) as e:
            raise FlightSearchError("Unexpected location lookup response") from e

    async def aclose(self) -> None:
        await self._http.aclose()
