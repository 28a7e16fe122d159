from contextlib import asynccontextmanager
from datetime import datetime, timezone
from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from dotenv import load_dotenv

from flightchat.config import settings
from flightchat.errors import EmptyRequest, FlightSearchError, PipelineError
from flightchat.flights.client import FlightSearchClient, FlightSearchService
from flightchat.llm.provider import create_llm
from flightchat.obs.logger import log_event
from flightchat.obs.metrics import get_metrics_snapshot
from flightchat.obs.middleware import ObservabilityMiddleware
from flightchat.pipeline.handler import ChatPipeline, create_chat_pipeline
from flightchat.types import (
    ChatRequest,
    ChatResponse,
    FlightSearchRequest,
    FlightSearchResult,
    LocationList,
)

load_dotenv()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: fail fast when the configured LLM provider cannot be used
    print(f"[INFO] Starting flight chat gateway (LLM: {settings.LLM_PROVIDER}, flight server: {settings.FLIGHT_SERVER_URL})")

    app.state.flight_service = FlightSearchClient(settings.FLIGHT_SERVER_URL)
    app.state.llm = create_llm(settings)
    app.state.pipeline = create_chat_pipeline(
        llm=app.state.llm,
        search_service=app.state.flight_service,
    )

    yield

    # Shutdown
    await app.state.flight_service.aclose()
    print("[INFO] Shutting down flight chat gateway")


app = FastAPI(
    title="Flight Chat Gateway",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(ObservabilityMiddleware, service="gateway")


def get_pipeline(request: Request) -> ChatPipeline:
    return request.app.state.pipeline


def get_flight_service(request: Request) -> FlightSearchService:
    return request.app.state.flight_service


@app.exception_handler(EmptyRequest)
async def empty_request_handler(request: Request, exc: EmptyRequest):
    return JSONResponse({"error": exc.user_message}, status_code=400)


@app.exception_handler(PipelineError)
async def pipeline_error_handler(request: Request, exc: PipelineError):
    log_event("chat_error", level="ERROR", error=type(exc).__name__, detail=exc.detail)
    return JSONResponse(
        {
            "message": exc.user_message,
            "error": True,
            "type": type(exc).__name__,
            "detail": exc.detail,
        },
        status_code=502,
    )


@app.get("/health")
async def health():
    return {
        "status": "ok",
        "service": "api-gateway",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "providers": {
            "llm": settings.LLM_PROVIDER,
            "flightServer": settings.FLIGHT_SERVER_URL,
        },
    }


@app.get("/metrics")
async def metrics():
    return get_metrics_snapshot()


@app.get("/locations", response_model=LocationList)
async def locations(
    term: str = Query("Seoul", min_length=1),
    limit: int = Query(5, ge=1, le=50),
    flight_service: FlightSearchService = Depends(get_flight_service),
):
    try:
        return await flight_service.lookup_locations(term=term, limit=limit)
    except FlightSearchError as e:
        log_event("location_lookup_failed", level="ERROR", term=term, error=str(e))
        raise HTTPException(status_code=500, detail="Location lookup failed")


@app.post("/search-flights", response_model=FlightSearchResult)
async def search_flights(
    body: FlightSearchRequest,
    flight_service: FlightSearchService = Depends(get_flight_service),
):
    """Direct flight search, no LLM involved"""
    try:
        return await flight_service.search_flights(body)
    except FlightSearchError as e:
        log_event("direct_search_failed", level="ERROR", error=str(e))
        raise HTTPException(status_code=502, detail="Flight search failed")


@app.post("/chat", response_model=ChatResponse, response_model_exclude_none=True)
async def chat(body: ChatRequest, pipeline: ChatPipeline = Depends(get_pipeline)):
    return await pipeline.process_chat_turn(body.messages)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.GATEWAY_PORT,
        reload=settings.APP_ENV == "dev",
        log_level="info"
    )
