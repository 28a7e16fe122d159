from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Literal, Optional

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


class ChatMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Literal["system", "user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    messages: List[ChatMessage] = Field(default_factory=list)


class FlightIntent(BaseModel):
    """Structured flight-search request the LLM emits as JSON."""
    model_config = ConfigDict(populate_by_name=True)

    intent: Literal["search_flights"]
    origin: str = Field(description="IATA code or city name")
    destination: str
    depart_date: str = Field(alias="departDate", description="YYYY-MM-DD")
    return_date: Optional[str] = Field(None, alias="returnDate")
    round: Optional[bool] = None
    adults: Optional[int] = None
    currency: Optional[str] = None


class FlightSearchParams(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    origin: str
    destination: str
    depart_date: str = Field(alias="departDate")
    return_date: Optional[str] = Field(None, alias="returnDate")
    round: Optional[bool] = None
    adults: Optional[int] = None
    currency: Optional[str] = None
    max_stopovers: Optional[int] = Field(None, alias="maxStopovers")


class FlightSearchRequest(FlightSearchParams):
    """Body of the direct search endpoint; stricter than the pipeline params."""

    origin: str = Field(min_length=3, max_length=10)
    destination: str = Field(min_length=3, max_length=10)
    depart_date: str = Field(alias="departDate", pattern=DATE_PATTERN)
    return_date: Optional[str] = Field(None, alias="returnDate", pattern=DATE_PATTERN)
    adults: Optional[int] = Field(None, ge=1, le=9)
    max_stopovers: Optional[int] = Field(None, alias="maxStopovers", ge=0, le=2)


class Price(BaseModel):
    total: str
    currency: str


class FlightOffer(BaseModel):
    id: str
    price: Price
    itineraries: List[Any] = Field(default_factory=list)  # opaque legs


class FlightSearchResult(BaseModel):
    currency: str
    items: List[FlightOffer] = Field(default_factory=list)


class TravelCard(BaseModel):
    title: str
    summary: str
    url: Optional[str] = None


class ChatResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str = Field(min_length=1)
    flights: Optional[FlightSearchResult] = None
    cards: List[TravelCard] = Field(default_factory=list)


class Location(BaseModel):
    code: str
    name: str
    type: str
    city: Optional[str] = None
    country: Optional[str] = None


class LocationList(BaseModel):
    locations: List[Location] = Field(default_factory=list)


# Gateway <-> flight server envelope

class ServiceError(BaseModel):
    code: str
    message: str


class ServiceRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message_id: str = Field(alias="messageId")
    session_id: str = Field(alias="sessionId")
    service: str
    action: Literal["invoke", "update"]
    payload: Dict[str, Any] = Field(default_factory=dict)


class ServiceResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message_id: str = Field(alias="messageId")
    session_id: str = Field(alias="sessionId")
    service: str
    action: Literal["result", "update"] = "result"
    result: Dict[str, Any] = Field(default_factory=dict)
    metadata: Optional[Dict[str, Any]] = None
    error: Optional[ServiceError] = None
