"""Flight service: Amadeus Flight Offers behind a small HTTP surface.

Serves the gateway's ``/mcp`` envelope calls plus plain REST routes for
direct use. Endpoints are sync; FastAPI runs them in its threadpool around
the blocking Amadeus client.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from dotenv import load_dotenv

from flightchat.amadeus.client import AmadeusClient
from flightchat.amadeus.transform import normalize_locations, normalize_offers
from flightchat.config import settings
from flightchat.errors import AmadeusError
from flightchat.obs.context import session_id_var
from flightchat.obs.logger import log_event
from flightchat.obs.metrics import get_metrics_snapshot, inc_counter
from flightchat.obs.middleware import ObservabilityMiddleware
from flightchat.types import (
    FlightSearchParams,
    FlightSearchResult,
    LocationList,
    ServiceError,
    ServiceRequest,
    ServiceResponse,
)

load_dotenv()

SERVICES = ("flight_search", "lookup_locations")


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.amadeus = AmadeusClient()
    if not app.state.amadeus.configured:
        print("[WARNING] AMADEUS_CLIENT_ID / AMADEUS_CLIENT_SECRET not set; searches will fail")
    print(f"[INFO] Starting flight server (Amadeus env: {settings.AMADEUS_ENV})")

    yield

    app.state.amadeus.close()
    print("[INFO] Shutting down flight server")


app = FastAPI(
    title="Flight Search Service",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(ObservabilityMiddleware, service="flight-server")


def get_amadeus(request: Request) -> AmadeusClient:
    return request.app.state.amadeus


def run_search(amadeus: AmadeusClient, params: FlightSearchParams) -> FlightSearchResult:
    currency = params.currency or "USD"
    raw = amadeus.search_flights(params)
    result = normalize_offers(raw, currency)
    log_event("flights_found", offers=len(result.items), currency=currency)
    return result


@app.get("/health")
def health(amadeus: AmadeusClient = Depends(get_amadeus)):
    return {
        "status": "ok",
        "service": "flight-server",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "amadeusConfigured": amadeus.configured,
    }


@app.get("/metrics")
def metrics():
    return get_metrics_snapshot()


@app.get("/api/locations", response_model=LocationList)
def locations(
    term: str = Query("Seoul", min_length=1),
    limit: int = Query(5, ge=1, le=50),
    amadeus: AmadeusClient = Depends(get_amadeus),
):
    try:
        return normalize_locations(amadeus.lookup_locations(term, limit))
    except AmadeusError as e:
        log_event("location_lookup_failed", level="ERROR", term=term, error=str(e))
        raise HTTPException(status_code=502, detail={"error": "Location lookup failed", "message": str(e)})


@app.post("/api/search-flights", response_model=FlightSearchResult)
def search_flights(params: FlightSearchParams, amadeus: AmadeusClient = Depends(get_amadeus)):
    try:
        return run_search(amadeus, params)
    except AmadeusError as e:
        log_event("flight_search_failed", level="ERROR", error=str(e))
        raise HTTPException(status_code=502, detail={"error": "Flight search failed", "message": str(e)})


@app.post("/mcp")
def service_call(envelope: ServiceRequest, amadeus: AmadeusClient = Depends(get_amadeus)):
    """Envelope endpoint used by the gateway"""
    session_id_var.set(envelope.session_id)
    inc_counter("service_calls_total", {"service": envelope.service})

    if envelope.service not in SERVICES:
        return JSONResponse(
            {"error": "Unknown service", "message": f"Unsupported service '{envelope.service}'"},
            status_code=400,
        )

    response = ServiceResponse(
        message_id=envelope.message_id,
        session_id=envelope.session_id,
        service=envelope.service,
    )
    try:
        if envelope.service == "flight_search":
            params = FlightSearchParams.model_validate(envelope.payload)
            result = run_search(amadeus, params)
            response.result = result.model_dump()
            response.metadata = {"source": "amadeus", "count": len(result.items)}
        else:
            term = str(envelope.payload.get("term") or "Seoul")
            limit = int(envelope.payload.get("limit") or 5)
            response.result = normalize_locations(amadeus.lookup_locations(term, limit)).model_dump()
    except AmadeusError as e:
        log_event("service_call_failed", level="ERROR", service=envelope.service, error=str(e))
        response.error = ServiceError(code="UPSTREAM_ERROR", message=str(e))
    except (TypeError, ValueError) as e:
        # pydantic ValidationError is a ValueError
        response.error = ServiceError(code="INVALID_PAYLOAD", message=str(e))

    return response.model_dump(by_alias=True, exclude_none=True)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "flight_server:app",
        host="0.0.0.0",
        port=settings.FLIGHT_SERVER_PORT,
        reload=settings.APP_ENV == "dev",
        log_level="info"
    )
