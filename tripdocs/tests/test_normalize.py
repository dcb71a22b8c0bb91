"""
Tests for the record normalizer.

Tests field canonicalization of extractor output, kind dispatch,
idempotence, and merging bookings into a Trip.
"""

import pytest

from tripdocs.itinerary.normalize import (
    clean_string,
    merge_bookings,
    normalize_airport_code,
    normalize_date,
    normalize_datetime,
    normalize_record,
)
from tripdocs.shared.contracts.trip import Car, Flight, FlightSegment, Hotel, Trip


# ============================================================================
# Test Fixtures
# ============================================================================


def _make_raw_flight():
    """Extractor-style flight record with messy values."""
    return {
        "segments": [
            {
                "departAirport": " sfo ",
                "arriveAirport": "jfk",
                "departTime": "2025-01-15T08:00:00",
                "arriveTime": "2025-01-15 16:30",
                "flightNumber": " UA100 ",
                "airline": "United",
            },
            {
                "departAirport": "John F. Kennedy International",
                "arriveAirport": "bos",
                "departTime": "01/15/2025 18:00",
                "arriveTime": None,
                "flightNumber": "",
            },
        ],
        "confirmationNumber": "ABC123",
        "passengerName": "  Jane Doe ",
    }


def _make_raw_hotel():
    return {
        "propertyName": " Grand Hotel ",
        "checkInDate": "01/15/2025",
        "checkOutDate": "2025-1-18",
        "confirmationNumber": "H-42",
        "address": "1 Main St",
        "guestName": "Jane Doe",
    }


def _make_raw_car():
    return {
        "pickupLocation": "LAX Airport",
        "dropoffLocation": "",
        "pickupTime": "2025-01-15T10:00:00Z",
        "dropoffTime": "sometime next week",
        "vehicleType": "SUV",
        "rentalCompany": "Hertz",
    }


# ============================================================================
# TestFieldHelpers
# ============================================================================


class TestFieldHelpers:
    """Tests for the scalar canonicalization helpers."""

    def test_clean_string_trims(self):
        assert clean_string("  hello ") == "hello"

    def test_clean_string_empty_becomes_none(self):
        assert clean_string("   ") is None
        assert clean_string(None) is None

    def test_clean_string_stringifies_scalars(self):
        assert clean_string(123) == "123"

    def test_airport_code_uppercased(self):
        assert normalize_airport_code(" sfo ") == "SFO"

    def test_airport_name_kept(self):
        """Values that are not exactly three letters are treated as names."""
        assert normalize_airport_code("San Francisco Intl") == "San Francisco Intl"
        assert normalize_airport_code("sf1") == "sf1"

    def test_date_formats(self):
        """ISO and fallback day formats all canonicalize to YYYY-MM-DD."""
        assert normalize_date("2025-01-15") == "2025-01-15"
        assert normalize_date("2025-01-15T22:00:00") == "2025-01-15"
        assert normalize_date("2025-1-5") == "2025-01-05"
        assert normalize_date("01/15/2025") == "2025-01-15"
        assert normalize_date("01-15-2025") == "2025-01-15"

    def test_unparseable_date_kept_trimmed(self):
        assert normalize_date("  mid January ") == "mid January"

    def test_invalid_calendar_date_kept(self):
        assert normalize_date("02/30/2025") == "02/30/2025"

    def test_datetime_formats(self):
        assert normalize_datetime("2025-01-15T08:00:00") == "2025-01-15T08:00:00"
        assert normalize_datetime("2025-01-15 08:00") == "2025-01-15T08:00:00"
        assert normalize_datetime("01/15/2025 18:05") == "2025-01-15T18:05:00"
        assert normalize_datetime("2025-01-15") == "2025-01-15T00:00:00"

    def test_datetime_utc_suffix(self):
        assert normalize_datetime("2025-01-15T10:00:00Z") == "2025-01-15T10:00:00+00:00"


# ============================================================================
# TestNormalizeRecord
# ============================================================================


class TestNormalizeRecord:
    """Tests for normalizing whole records by kind."""

    def test_flight(self):
        flight = normalize_record(_make_raw_flight(), "flight")

        assert isinstance(flight, Flight)
        assert flight.passenger_name == "Jane Doe"
        assert len(flight.segments) == 2

        first, second = flight.segments
        assert first.depart_airport == "SFO"
        assert first.arrive_airport == "JFK"
        assert first.arrive_time == "2025-01-15T16:30:00"
        assert first.flight_number == "UA100"

        assert second.depart_airport == "John F. Kennedy International"
        assert second.depart_time == "2025-01-15T18:00:00"
        assert second.arrive_time is None
        assert second.flight_number is None

    def test_hotel(self):
        hotel = normalize_record(_make_raw_hotel(), "hotel")

        assert isinstance(hotel, Hotel)
        assert hotel.property_name == "Grand Hotel"
        assert hotel.check_in_date == "2025-01-15"
        assert hotel.check_out_date == "2025-01-18"

    def test_car(self):
        car = normalize_record(_make_raw_car(), "car")

        assert isinstance(car, Car)
        assert car.dropoff_location is None
        assert car.pickup_time == "2025-01-15T10:00:00+00:00"
        assert car.dropoff_time == "sometime next week"

    def test_snake_case_keys_accepted(self):
        hotel = normalize_record({"property_name": "Inn", "check_in_date": "2025-02-01"}, "hotel")

        assert hotel.property_name == "Inn"
        assert hotel.check_in_date == "2025-02-01"

    def test_kind_decides_variant(self):
        """The classifier's kind wins over whatever fields the record carries."""
        booking = normalize_record({"segments": []}, "hotel")

        assert isinstance(booking, Hotel)

    def test_empty_record(self):
        flight = normalize_record({"segments": []}, "flight")

        assert flight.segments == ()
        assert flight.confirmation_number is None

    def test_non_list_segments_dropped(self):
        flight = normalize_record({"segments": "UA100"}, "flight")

        assert flight.segments == ()

    def test_unknown_kind_raises(self):
        with pytest.raises(ValueError, match="Unknown document type"):
            normalize_record({}, "train")

    def test_idempotent(self):
        """Normalizing a normalized booking yields an equal booking."""
        cases = [
            (_make_raw_flight(), "flight"),
            (_make_raw_hotel(), "hotel"),
            (_make_raw_car(), "car"),
        ]
        for raw, kind in cases:
            once = normalize_record(raw, kind)
            twice = normalize_record(once, kind)
            assert twice == once

    def test_bookings_are_immutable(self):
        hotel = normalize_record(_make_raw_hotel(), "hotel")

        with pytest.raises(Exception):
            hotel.property_name = "Other"


# ============================================================================
# TestMergeBookings
# ============================================================================


class TestMergeBookings:
    """Tests for grouping bookings into a Trip."""

    def test_groups_by_kind_in_order(self):
        h1 = Hotel(property_name="A")
        h2 = Hotel(property_name="B")
        f1 = Flight(segments=[FlightSegment(flight_number="UA1")])
        c1 = Car(pickup_location="LAX")

        trip = merge_bookings([h1, f1, h2, c1])

        assert isinstance(trip, Trip)
        assert [h.property_name for h in trip.hotels] == ["A", "B"]
        assert trip.flights == (f1,)
        assert trip.cars == (c1,)
        assert trip.booking_count == 4

    def test_empty(self):
        trip = merge_bookings([])

        assert trip.booking_count == 0

    def test_rejects_non_bookings(self):
        with pytest.raises(TypeError):
            merge_bookings([{"propertyName": "A"}])

    def test_merged_trip_cannot_change(self):
        trip = merge_bookings([Hotel(property_name="A")])

        with pytest.raises(AttributeError):
            trip.hotels.append(Hotel(property_name="B"))
        with pytest.raises(Exception):
            trip.hotels = ()

        assert [h.property_name for h in trip.hotels] == ["A"]

    def test_flight_segments_cannot_change(self):
        flight = normalize_record({"segments": [{"flightNumber": "UA1"}]}, "flight")

        with pytest.raises(AttributeError):
            flight.segments.append(FlightSegment(flight_number="UA2"))

        assert len(flight.segments) == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
