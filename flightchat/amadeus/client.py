import httpx
import time
from typing import Dict, Any, List, Optional

from flightchat.config import settings
from flightchat.errors import AmadeusError
from flightchat.obs.logger import log_event
from flightchat.types import FlightSearchParams


def base_url(env: str) -> str:
    return "https://api.amadeus.com" if env == "production" else "https://test.api.amadeus.com"


class AmadeusClient:
    def __init__(self, client_id: Optional[str] = None, client_secret: Optional[str] = None,
                 env: Optional[str] = None, max_offers: Optional[int] = None):
        self.client_id = client_id or settings.AMADEUS_CLIENT_ID
        self.client_secret = client_secret or settings.AMADEUS_CLIENT_SECRET
        self.base = base_url(env or settings.AMADEUS_ENV)
        self.max_offers = max_offers or settings.AMADEUS_MAX_OFFERS
        self._token = None
        self._exp = 0
        # Persistent HTTP client with HTTP/2 and sensible timeouts
        self._http = httpx.Client(
            http2=True,
            timeout=httpx.Timeout(connect=3.0, read=45.0, write=12.0, pool=12.0),
        )

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def _get_token(self) -> str:
        if self._token and time.time() < self._exp - 60:
            return self._token
        if not self.configured:
            raise AmadeusError("AMADEUS_CLIENT_ID / AMADEUS_CLIENT_SECRET are not set")
        data = {
            "grant_type": "client_credentials",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
        }
        try:
            r = self._http.post(
                f"{self.base}/v1/security/oauth2/token",
                data=data,
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            raise AmadeusError(f"Amadeus auth connection error: {type(e).__name__}: {e}") from e
        if r.status_code != 200:
            raise AmadeusError(f"Amadeus auth failed ({r.status_code}): {r.text}", r.status_code)
        try:
            j = r.json()
            self._token = j["access_token"]
        except (ValueError, KeyError, TypeError) as e:
            raise AmadeusError("Amadeus auth returned no access token") from e
        self._exp = time.time() + j.get("expires_in", 1799)
        log_event("amadeus_token_refreshed", level="DEBUG", expires_in=j.get("expires_in", 1799))
        return self._token

    def _build_travelers(self, adults: Optional[int]) -> List[Dict[str, Any]]:
        """
        Build travelers array of ADULTs with sequential string ids starting at '1'.
        """
        count = max(1, int(adults) if adults is not None else 1)
        return [{"id": str(i + 1), "travelerType": "ADULT"} for i in range(count)]

    def _build_origin_destinations(self, origin: str, destination: str,
                                   dep_date: str, ret_date: Optional[str]) -> List[Dict[str, Any]]:
        """
        One-way uses a single leg; a return date adds the reverse leg.
        """
        legs: List[Dict[str, Any]] = [
            {
                "id": "1",
                "originLocationCode": origin,
                "destinationLocationCode": destination,
                "departureDateTimeRange": {"date": dep_date},
            }
        ]
        if ret_date:
            legs.append({
                "id": "2",
                "originLocationCode": destination,
                "destinationLocationCode": origin,
                "departureDateTimeRange": {"date": ret_date},
            })
        return legs

    def build_search_body(self, params: FlightSearchParams) -> Dict[str, Any]:
        # round=False forces one-way even when a return date slipped through
        ret_date = params.return_date if params.round is not False else None
        criteria: Dict[str, Any] = {"maxFlightOffers": self.max_offers}
        if params.max_stopovers is not None:
            criteria["flightFilters"] = {
                "connectionRestriction": {"maxNumberOfConnections": params.max_stopovers}
            }
        return {
            "currencyCode": params.currency or "USD",
            "originDestinations": self._build_origin_destinations(
                origin=params.origin,
                destination=params.destination,
                dep_date=params.depart_date,
                ret_date=ret_date,
            ),
            "travelers": self._build_travelers(params.adults),
            "sources": ["GDS"],
            "searchCriteria": criteria,
        }

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        token = self._get_token()
        headers = {"Authorization": f"Bearer {token}", **kwargs.pop("headers", {})}
        try:
            r = self._http.request(method, f"{self.base}{path}", headers=headers, **kwargs)
        except httpx.HTTPError as e:
            raise AmadeusError(f"Amadeus connection error: {type(e).__name__}: {e}") from e
        if r.status_code != 200:
            log_event("amadeus_error", level="ERROR", path=path, status=r.status_code, body=r.text[:500])
            raise AmadeusError(f"Amadeus API error ({r.status_code}): {r.text}", r.status_code)
        try:
            data = r.json()
        except ValueError as e:
            raise AmadeusError("Amadeus returned invalid JSON") from e
        if not isinstance(data, dict):
            raise AmadeusError("Unexpected Amadeus response")
        return data

    def search_flights(self, params: FlightSearchParams) -> Dict[str, Any]:
        body = self.build_search_body(params)
        log_event(
            "amadeus_search",
            origin=params.origin,
            destination=params.destination,
            depart_date=params.depart_date,
            round_trip=len(body["originDestinations"]) == 2,
        )
        data = self._request(
            "POST",
            "/v2/shopping/flight-offers",
            json=body,
            headers={"Content-Type": "application/json"},
        )
        log_event("amadeus_search_done", offers=len(data.get("data") or []))
        return data

    def lookup_locations(self, term: str, limit: int = 5) -> Dict[str, Any]:
        log_event("amadeus_locations", term=term, limit=limit)
        return self._request(
            "GET",
            "/v1/reference-data/locations",
            params={"subType": "CITY,AIRPORT", "keyword": term, "page[limit]": limit},
        )

    def close(self) -> None:
        self._http.close()
