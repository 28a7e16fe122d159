from typing import Any, Dict

from pydantic import ValidationError

from flightchat.errors import AmadeusError
from flightchat.types import FlightOffer, FlightSearchResult, Location, LocationList, Price


def normalize_offers(json_obj: Dict[str, Any], currency: str) -> FlightSearchResult:
    """Reduce an Amadeus flight-offers payload to {currency, items[]}."""
    items = []
    for o in json_obj.get("data") or []:
        try:
            price = o["price"]
            items.append(FlightOffer(
                id=str(o.get("id", "")),
                price=Price(
                    total=str(price.get("grandTotal") or price["total"]),
                    currency=price.get("currency") or currency,
                ),
                itineraries=o.get("itineraries") or [],
            ))
        except (KeyError, TypeError, AttributeError, ValidationError) as e:
            raise AmadeusError(f"Malformed flight offer in Amadeus response: {type(e).__name__}: {e}") from e
    return FlightSearchResult(currency=currency, items=items)


def normalize_locations(json_obj: Dict[str, Any]) -> LocationList:
    locations = []
    for loc in json_obj.get("data") or []:
        code = loc.get("iataCode")
        if not code:
            continue
        address = loc.get("address") or {}
        locations.append(Location(
            code=code,
            name=loc.get("detailedName") or loc.get("name") or code,
            type=str(loc.get("subType", "")).lower(),
            city=address.get("cityName"),
            country=address.get("countryName") or address.get("countryCode"),
        ))
    return LocationList(locations=locations)
