"""
Itinerary builder.

Merges a Trip's bookings into a dense, date-ordered list of DayRows covering
every calendar day between the earliest and latest resolvable booking date.
"""

import logging
from datetime import date, timedelta
from typing import Dict, Iterator, List, Optional, Tuple

from tripdocs.itinerary.dates import resolve_date, resolve_datetime
from tripdocs.shared.contracts.trip import Car, DayRow, Flight, Hotel, Trip


logger = logging.getLogger(__name__)

UNNAMED_HOTEL_LABEL = "Hotel (unnamed)"
UNKNOWN_LOCATION_LABEL = "Location"


def build_itinerary(trip: Trip) -> List[DayRow]:
    """
    Build the day-by-day schedule for a trip.

    Steps:
    1. Collect every resolvable booking date; none -> empty schedule
    2. Generate one empty row per day in [min, max], both ends included
    3. Attach hotel nights, flight departures, and car pickups/dropoffs

    Args:
        trip: Merged, normalized bookings

    Returns:
        DayRows sorted by date ascending, or [] if no date resolves
    """
    date_range = get_trip_date_range(trip)
    if date_range is None:
        return []

    start, end = date_range
    day_map: Dict[str, DayRow] = {
        day.isoformat(): DayRow(date=day.isoformat())
        for day in _each_day(start, end)
    }

    for hotel in trip.hotels:
        _add_hotel(hotel, day_map)

    for flight in trip.flights:
        _add_flight(flight, day_map)

    for car in trip.cars:
        _add_car(car, day_map)

    logger.debug(
        f"Built itinerary | start={start.isoformat()}, end={end.isoformat()}, days={len(day_map)}"
    )

    return sorted(day_map.values(), key=lambda row: row.date)


def get_trip_date_range(trip: Trip) -> Optional[Tuple[date, date]]:
    """Earliest and latest resolvable date across all bookings, or None."""
    all_dates: List[date] = []

    for hotel in trip.hotels:
        all_dates.extend(_resolved(hotel.check_in_date, hotel.check_out_date))

    for flight in trip.flights:
        for segment in flight.segments:
            all_dates.extend(_resolved(segment.depart_time, segment.arrive_time))

    for car in trip.cars:
        all_dates.extend(_resolved(car.pickup_time, car.dropoff_time))

    if not all_dates:
        return None

    return min(all_dates), max(all_dates)


def _add_hotel(hotel: Hotel, day_map: Dict[str, DayRow]) -> None:
    check_in = resolve_date(hotel.check_in_date)
    check_out = resolve_date(hotel.check_out_date)
    if check_in is None or check_out is None:
        return

    label = hotel.property_name or UNNAMED_HOTEL_LABEL

    # The checkout day is not a night of the stay
    for n in range((check_out - check_in).days):
        night = check_in + timedelta(days=n)
        row = day_map.get(night.isoformat())
        if row is not None:
            row.hotels.append(label)


def _add_flight(flight: Flight, day_map: Dict[str, DayRow]) -> None:
    for idx, segment in enumerate(flight.segments, start=1):
        departure = resolve_datetime(segment.depart_time)
        if departure is None:
            continue

        parts = [segment.flight_number or f"Flight {idx}"]
        if segment.depart_airport and segment.arrive_airport:
            parts.append(f"{segment.depart_airport} → {segment.arrive_airport}")
        parts.append(departure.strftime("%H:%M"))

        row = day_map.get(departure.date().isoformat())
        if row is not None:
            row.flights.append(" ".join(parts))


def _add_car(car: Car, day_map: Dict[str, DayRow]) -> None:
    legs = (
        ("Pickup", car.pickup_location, car.pickup_time),
        ("Dropoff", car.dropoff_location, car.dropoff_time),
    )
    for action, location, when in legs:
        moment = resolve_datetime(when)
        if moment is None:
            continue
        row = day_map.get(moment.date().isoformat())
        if row is not None:
            label = f"{action} {location or UNKNOWN_LOCATION_LABEL} {moment.strftime('%H:%M')}"
            row.cars.append(label)


def _resolved(*values: Optional[str]) -> Iterator[date]:
    for value in values:
        day = resolve_date(value)
        if day is not None:
            yield day


def _each_day(start: date, end: date) -> Iterator[date]:
    """Every day from start through end inclusive; nothing if end < start."""
    for n in range((end - start).days + 1):
        yield start + timedelta(days=n)
