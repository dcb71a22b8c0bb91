"""
Trip booking contracts.

Defines the normalized booking variants (flight, hotel, car), the merged
Trip aggregate, and the per-day itinerary row produced by the builder.
"""

from typing import Annotated, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from tripdocs.shared.schemas.base import ContractModel


DocType = Literal["flight", "hotel", "car"]


class ClassificationResult(BaseModel):
    """Classifier output for a single document."""

    doc_type: DocType = Field(description="Detected booking kind")
    confidence: float = Field(ge=0, le=1, description="Classifier confidence (0-1)")


class BookingModel(ContractModel):
    """Immutable base for normalized bookings."""

    model_config = ConfigDict(frozen=True)


class FlightSegment(BookingModel):
    """One leg of a (possibly multi-leg) flight."""

    depart_airport: Optional[str] = Field(default=None, description="Departure airport (IATA code or name)")
    arrive_airport: Optional[str] = Field(default=None, description="Arrival airport (IATA code or name)")
    depart_time: Optional[str] = Field(default=None, description="Departure timestamp (ISO 8601)")
    arrive_time: Optional[str] = Field(default=None, description="Arrival timestamp (ISO 8601)")
    flight_number: Optional[str] = Field(default=None, description="Flight number, e.g. 'UA100'")
    airline: Optional[str] = Field(default=None, description="Operating airline")


class Flight(BookingModel):
    """A flight booking made of ordered segments."""

    kind: Literal["flight"] = "flight"
    segments: Tuple[FlightSegment, ...] = Field(default=(), description="Ordered flight legs")
    confirmation_number: Optional[str] = Field(default=None, description="Booking reference")
    passenger_name: Optional[str] = Field(default=None, description="Passenger name")


class Hotel(BookingModel):
    """A hotel stay."""

    kind: Literal["hotel"] = "hotel"
    property_name: Optional[str] = Field(default=None, description="Hotel/property name")
    check_in_date: Optional[str] = Field(default=None, description="Check-in date (YYYY-MM-DD)")
    check_out_date: Optional[str] = Field(default=None, description="Check-out date (YYYY-MM-DD)")
    confirmation_number: Optional[str] = Field(default=None, description="Booking reference")
    address: Optional[str] = Field(default=None, description="Property address")
    guest_name: Optional[str] = Field(default=None, description="Guest name")


class Car(BookingModel):
    """A car rental."""

    kind: Literal["car"] = "car"
    pickup_location: Optional[str] = Field(default=None, description="Pickup location")
    dropoff_location: Optional[str] = Field(default=None, description="Dropoff location")
    pickup_time: Optional[str] = Field(default=None, description="Pickup timestamp (ISO 8601)")
    dropoff_time: Optional[str] = Field(default=None, description="Dropoff timestamp (ISO 8601)")
    confirmation_number: Optional[str] = Field(default=None, description="Booking reference")
    vehicle_type: Optional[str] = Field(default=None, description="Vehicle class or model")
    rental_company: Optional[str] = Field(default=None, description="Rental company")


Booking = Annotated[Union[Flight, Hotel, Car], Field(discriminator="kind")]


class Trip(BookingModel):
    """All bookings of a trip, grouped by kind. Built once per run by merging."""

    flights: Tuple[Flight, ...] = ()
    hotels: Tuple[Hotel, ...] = ()
    cars: Tuple[Car, ...] = ()

    @property
    def booking_count(self) -> int:
        return len(self.flights) + len(self.hotels) + len(self.cars)


class DayRow(ContractModel):
    """Aggregated schedule for one calendar day."""

    date: str = Field(description="Calendar day (YYYY-MM-DD)")
    hotels: List[str] = Field(default_factory=list, description="Hotel labels for the night")
    flights: List[str] = Field(default_factory=list, description="Flight labels departing this day")
    cars: List[str] = Field(default_factory=list, description="Car pickup/dropoff labels")
