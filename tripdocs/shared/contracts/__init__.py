"""Data contracts shared by the itinerary pipeline and the progress engine."""

from tripdocs.shared.contracts.trip import (
    Booking,
    Car,
    ClassificationResult,
    DayRow,
    DocType,
    Flight,
    FlightSegment,
    Hotel,
    Trip,
)
from tripdocs.shared.contracts.workflow import (
    CompletionUpdate,
    ProgressUpdate,
    Run,
    Step,
    Update,
    WorkflowStatus,
)

__all__ = [
    "Booking",
    "Car",
    "ClassificationResult",
    "DayRow",
    "DocType",
    "Flight",
    "FlightSegment",
    "Hotel",
    "Trip",
    "CompletionUpdate",
    "ProgressUpdate",
    "Run",
    "Step",
    "Update",
    "WorkflowStatus",
]
