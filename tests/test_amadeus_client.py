from unittest.mock import patch

import httpx
import pytest

from flightchat.amadeus.client import AmadeusClient
from flightchat.errors import AmadeusError
from flightchat.types import FlightSearchParams


class DummyResponse:
    def __init__(self, status_code=200, json_data=None, text=""):
        self.status_code = status_code
        self._json_data = json_data if json_data is not None else {"data": []}
        self.text = text

    def json(self):
        return self._json_data


def make_client():
    return AmadeusClient(client_id="id", client_secret="secret", env="sandbox", max_offers=20)


def test_builds_expected_json_body_and_headers():
    client = make_client()

    with (
        patch.object(AmadeusClient, "_get_token", return_value="TEST_TOKEN"),
        patch("flightchat.amadeus.client.httpx.Client.request") as mock_request,
    ):
        mock_request.return_value = DummyResponse(200, {"data": ["ok"]})

        client.search_flights(FlightSearchParams(
            origin="LHR",
            destination="MAD",
            depart_date="2025-10-15",
            adults=2,
            currency="EUR",
        ))

        assert mock_request.called
        method, url = mock_request.call_args.args[:2]
        assert method == "POST"
        assert url == "https://test.api.amadeus.com/v2/shopping/flight-offers"

        headers = mock_request.call_args.kwargs.get("headers")
        assert headers["Authorization"] == "Bearer TEST_TOKEN"
        assert headers["Content-Type"] == "application/json"

        body = mock_request.call_args.kwargs.get("json")
        assert body["currencyCode"] == "EUR"
        assert body["sources"] == ["GDS"]
        assert body["searchCriteria"] == {"maxFlightOffers": 20}
        # originDestinations one-way
        legs = body["originDestinations"]
        assert len(legs) == 1
        assert legs[0]["originLocationCode"] == "LHR"
        assert legs[0]["destinationLocationCode"] == "MAD"
        assert legs[0]["departureDateTimeRange"]["date"] == "2025-10-15"
        # travelers two adults
        trav = body["travelers"]
        assert len(trav) == 2
        assert trav[0] == {"id": "1", "travelerType": "ADULT"}
        assert trav[1] == {"id": "2", "travelerType": "ADULT"}


def test_includes_return_leg_when_return_date_provided():
    body = make_client().build_search_body(FlightSearchParams(
        origin="LHR",
        destination="MAD",
        depart_date="2025-10-15",
        return_date="2025-10-22",
        round=True,
    ))

    legs = body["originDestinations"]
    assert len(legs) == 2
    assert legs[1]["originLocationCode"] == "MAD"
    assert legs[1]["destinationLocationCode"] == "LHR"
    assert legs[1]["departureDateTimeRange"]["date"] == "2025-10-22"
    assert body["currencyCode"] == "USD"
    assert len(body["travelers"]) == 1


def test_round_false_drops_return_leg():
    body = make_client().build_search_body(FlightSearchParams(
        origin="LHR", destination="MAD", depart_date="2025-10-15",
        return_date="2025-10-22", round=False,
    ))
    assert len(body["originDestinations"]) == 1


def test_max_stopovers_maps_to_connection_restriction():
    body = make_client().build_search_body(FlightSearchParams(
        origin="ICN", destination="JFK", depart_date="2025-03-17", max_stopovers=0,
    ))
    assert body["searchCriteria"]["flightFilters"] == {
        "connectionRestriction": {"maxNumberOfConnections": 0}
    }


def test_non_200_raises_amadeus_error():
    client = make_client()
    with (
        patch.object(AmadeusClient, "_get_token", return_value="TEST_TOKEN"),
        patch("flightchat.amadeus.client.httpx.Client.request") as mock_request,
    ):
        mock_request.return_value = DummyResponse(400, {"errors": []}, text="INVALID DATE")
        with pytest.raises(AmadeusError) as exc_info:
            client.search_flights(FlightSearchParams(origin="ICN", destination="JFK", depart_date="2020-01-01"))
    assert exc_info.value.status_code == 400
    assert "INVALID DATE" in str(exc_info.value)


def test_token_is_reused_until_expiry():
    client = make_client()
    with patch("flightchat.amadeus.client.httpx.Client.post") as mock_post:
        mock_post.return_value = DummyResponse(200, {"access_token": "T1", "expires_in": 1799})
        assert client._get_token() == "T1"
        assert client._get_token() == "T1"
        assert mock_post.call_count == 1
        assert mock_post.call_args.kwargs["data"]["grant_type"] == "client_credentials"


def test_missing_credentials_raise():
    client = AmadeusClient(client_id="", client_secret="", env="sandbox")
    client.client_id = None
    client.client_secret = None
    with pytest.raises(AmadeusError, match="AMADEUS_CLIENT_ID"):
        client._get_token()


def test_lookup_locations_query():
    client = make_client()
    with (
        patch.object(AmadeusClient, "_get_token", return_value="TEST_TOKEN"),
        patch("flightchat.amadeus.client.httpx.Client.request") as mock_request,
    ):
        mock_request.return_value = DummyResponse(200, {"data": []})
        client.lookup_locations("Seoul", 3)

    method, url = mock_request.call_args.args[:2]
    assert method == "GET"
    assert url.endswith("/v1/reference-data/locations")
    assert mock_request.call_args.kwargs["params"] == {
        "subType": "CITY,AIRPORT", "keyword": "Seoul", "page[limit]": 3,
    }


def client_with_transport(handler):
    client = make_client()
    client._http = httpx.Client(transport=httpx.MockTransport(handler))
    return client


def test_token_connection_error_raises_amadeus_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = client_with_transport(handler)
    with pytest.raises(AmadeusError, match="ConnectError"):
        client.search_flights(FlightSearchParams(origin="ICN", destination="JFK", depart_date="2025-03-17"))


@pytest.mark.parametrize("response", [
    httpx.Response(200, text="<html>gateway</html>"),
    httpx.Response(200, json={"token_type": "Bearer"}),
    httpx.Response(200, json=["not", "an", "object"]),
])
def test_unusable_token_body_raises_amadeus_error(response):
    client = client_with_transport(lambda request: response)
    with pytest.raises(AmadeusError, match="access token"):
        client._get_token()
