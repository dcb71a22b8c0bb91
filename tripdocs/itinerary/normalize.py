"""
Record normalizer.

Turns raw extractor output into immutable, canonical bookings: strings are
trimmed, 3-letter airport codes uppercased, dates re-emitted as
``YYYY-MM-DD`` and datetimes as ISO 8601. Values that cannot be parsed are
kept as written; the validator's completeness checks judge them later.
"""

import logging
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import BaseModel

from tripdocs.itinerary.dates import (
    parse_fallback_date,
    parse_fallback_datetime,
    parse_iso_datetime,
)
from tripdocs.shared.contracts.trip import (
    Booking,
    Car,
    Flight,
    FlightSegment,
    Hotel,
    Trip,
)


logger = logging.getLogger(__name__)

_IATA_CODE = re.compile(r"^[A-Z]{3}$")

RawRecord = Mapping[str, Any]


def normalize_record(raw: Union[RawRecord, BaseModel], kind: str) -> Booking:
    """
    Normalize one extracted record into a booking of the given kind.

    The kind is the classifier's verdict for the source document; field
    presence is not used to pick the variant.

    Args:
        raw: Extractor output (camelCase or snake_case keys), or an existing booking
        kind: One of "flight", "hotel", "car"

    Returns:
        Normalized, immutable booking

    Raises:
        ValueError: If kind is not a known booking kind
    """
    data = _as_mapping(raw)

    if kind == "flight":
        return normalize_flight(data)
    if kind == "hotel":
        return normalize_hotel(data)
    if kind == "car":
        return normalize_car(data)

    raise ValueError(f"Unknown document type: {kind}")


def normalize_flight(raw: RawRecord) -> Flight:
    segments = _field(raw, "segments") or []
    if not isinstance(segments, (list, tuple)):
        logger.warning(f"Ignoring non-list flight segments | type={type(segments).__name__}")
        segments = []

    return Flight(
        segments=[
            _normalize_segment(_as_mapping(seg))
            for seg in segments
            if isinstance(seg, (Mapping, BaseModel))
        ],
        confirmation_number=clean_string(_field(raw, "confirmation_number")),
        passenger_name=clean_string(_field(raw, "passenger_name")),
    )


def normalize_hotel(raw: RawRecord) -> Hotel:
    return Hotel(
        property_name=clean_string(_field(raw, "property_name")),
        check_in_date=normalize_date(_field(raw, "check_in_date")),
        check_out_date=normalize_date(_field(raw, "check_out_date")),
        confirmation_number=clean_string(_field(raw, "confirmation_number")),
        address=clean_string(_field(raw, "address")),
        guest_name=clean_string(_field(raw, "guest_name")),
    )


def normalize_car(raw: RawRecord) -> Car:
    return Car(
        pickup_location=clean_string(_field(raw, "pickup_location")),
        dropoff_location=clean_string(_field(raw, "dropoff_location")),
        pickup_time=normalize_datetime(_field(raw, "pickup_time")),
        dropoff_time=normalize_datetime(_field(raw, "dropoff_time")),
        confirmation_number=clean_string(_field(raw, "confirmation_number")),
        vehicle_type=clean_string(_field(raw, "vehicle_type")),
        rental_company=clean_string(_field(raw, "rental_company")),
    )


def _normalize_segment(raw: RawRecord) -> FlightSegment:
    return FlightSegment(
        depart_airport=normalize_airport_code(_field(raw, "depart_airport")),
        arrive_airport=normalize_airport_code(_field(raw, "arrive_airport")),
        depart_time=normalize_datetime(_field(raw, "depart_time")),
        arrive_time=normalize_datetime(_field(raw, "arrive_time")),
        flight_number=clean_string(_field(raw, "flight_number")),
        airline=clean_string(_field(raw, "airline")),
    )


def clean_string(value: Any) -> Optional[str]:
    """Trim a scalar to a string; empty or missing values become None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def normalize_airport_code(code: Any) -> Optional[str]:
    """Uppercase exactly-3-letter codes; anything else is assumed to be a name."""
    text = clean_string(code)
    if text is None:
        return None
    upper = text.upper()
    if _IATA_CODE.match(upper):
        return upper
    return text


def normalize_date(value: Any) -> Optional[str]:
    """Canonicalize a date to ``YYYY-MM-DD``; unparseable input is returned trimmed."""
    text = clean_string(value)
    if text is None:
        return None

    parsed = parse_iso_datetime(text)
    if parsed is not None:
        return parsed.date().isoformat()

    fallback = parse_fallback_date(text)
    if fallback is not None:
        return fallback.isoformat()

    return text


def normalize_datetime(value: Any) -> Optional[str]:
    """Canonicalize a datetime to ISO 8601; unparseable input is returned trimmed."""
    text = clean_string(value)
    if text is None:
        return None

    parsed = parse_iso_datetime(text) or parse_fallback_datetime(text)
    if parsed is not None:
        return parsed.isoformat()

    return text


def merge_bookings(bookings: Iterable[Booking]) -> Trip:
    """Group normalized bookings into a Trip, preserving input order within each kind."""
    flights: List[Flight] = []
    hotels: List[Hotel] = []
    cars: List[Car] = []

    for booking in bookings:
        if isinstance(booking, Flight):
            flights.append(booking)
        elif isinstance(booking, Hotel):
            hotels.append(booking)
        elif isinstance(booking, Car):
            cars.append(booking)
        else:
            raise TypeError(f"Not a booking: {type(booking).__name__}")

    return Trip(flights=flights, hotels=hotels, cars=cars)


def _as_mapping(raw: Union[RawRecord, BaseModel]) -> Dict[str, Any]:
    if isinstance(raw, BaseModel):
        return raw.model_dump(by_alias=True, exclude_none=True)
    if isinstance(raw, Mapping):
        return dict(raw)
    raise TypeError(f"Cannot normalize record of type {type(raw).__name__}")


def _field(raw: RawRecord, name: str) -> Any:
    """Look a field up by snake_case name, falling back to its camelCase key."""
    if name in raw:
        return raw[name]
    head, *rest = name.split("_")
    camel = head + "".join(part.capitalize() for part in rest)
    return raw.get(camel)
