"""
Itinerary workflow state schema.

Defines the state that flows through the itinerary graph, carrying the
uploaded documents and the intermediate results of each stage.
"""

from typing import TypedDict, List, Optional, Annotated
import operator

from tripdocs.shared.contracts.trip import Booking, DayRow, Trip


class UploadedDocument(TypedDict):
    """One uploaded file as received by the API."""

    filename: str
    data: bytes


class DocumentText(TypedDict):
    """OCR output for one uploaded file."""

    filename: str
    text: str


class ItineraryState(TypedDict):
    """
    State schema for the itinerary graph.

    Each stage fills in its own slot; nothing is carried between runs.
    """

    run_id: str

    # Inputs
    files: List[UploadedDocument]

    # Stage outputs
    documents: List[DocumentText]
    bookings: List[Booking]
    trip: Optional[Trip]
    itinerary: List[DayRow]
    warnings: List[str]
    markdown: Optional[str]

    # Tracking
    messages: Annotated[List[dict], operator.add]
