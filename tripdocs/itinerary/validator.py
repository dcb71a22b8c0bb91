"""
Itinerary validator.

Inspects the built schedule and the source bookings and reports
human-readable warnings. Checks are independent and reported in a fixed
order: coverage gaps, double bookings, flight completeness, hotel
completeness. An empty trip yields no warnings.
"""

from typing import List

from tripdocs.shared.contracts.trip import DayRow, Trip


def validate_itinerary(trip: Trip, rows: List[DayRow]) -> List[str]:
    """
    Validate a built itinerary against its source trip.

    Args:
        trip: The merged trip the rows were built from
        rows: Output of build_itinerary(trip)

    Returns:
        Warning strings in check order (empty list means no issues)
    """
    warnings: List[str] = []
    warnings.extend(check_for_gaps(rows))
    warnings.extend(check_for_double_bookings(rows))
    warnings.extend(check_flights(trip))
    warnings.extend(check_hotels(trip))
    return warnings


def check_for_gaps(rows: List[DayRow]) -> List[str]:
    """Days with no hotel, plus a trip-wide note when a multi-day trip has none at all."""
    warnings = [f"No hotel booked for {row.date}" for row in rows if not row.hotels]

    if len(rows) > 1 and sum(len(row.hotels) for row in rows) == 0:
        warnings.append("No hotel bookings found for multi-day trip")

    return warnings


def check_for_double_bookings(rows: List[DayRow]) -> List[str]:
    return [
        f"Double hotel booking on {row.date}: {', '.join(row.hotels)}"
        for row in rows
        if len(row.hotels) > 1
    ]


def check_flights(trip: Trip) -> List[str]:
    warnings: List[str] = []

    for idx, flight in enumerate(trip.flights, start=1):
        if not flight.segments:
            warnings.append(f"Flight #{idx} has no segments")
            continue

        for seg_idx, segment in enumerate(flight.segments, start=1):
            missing = []
            if not segment.depart_airport:
                missing.append("departure airport")
            if not segment.arrive_airport:
                missing.append("arrival airport")
            if not segment.depart_time:
                missing.append("departure time")
            if not segment.arrive_time:
                missing.append("arrival time")

            if missing:
                warnings.append(
                    f"Flight #{idx} segment #{seg_idx} missing: {', '.join(missing)}"
                )

    return warnings


def check_hotels(trip: Trip) -> List[str]:
    warnings: List[str] = []

    for idx, hotel in enumerate(trip.hotels, start=1):
        missing = []
        if not hotel.property_name:
            missing.append("property name")
        if not hotel.check_in_date:
            missing.append("check-in date")
        if not hotel.check_out_date:
            missing.append("check-out date")

        if missing:
            label = hotel.property_name or f"Hotel #{idx}"
            warnings.append(f"{label} missing: {', '.join(missing)}")

    return warnings
