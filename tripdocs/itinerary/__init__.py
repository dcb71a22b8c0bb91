"""
Itinerary aggregation.

Normalizes extracted bookings, merges them into a day-indexed schedule,
validates the schedule, and renders it as markdown.
"""

from tripdocs.itinerary.builder import build_itinerary
from tripdocs.itinerary.markdown import build_markdown_content
from tripdocs.itinerary.normalize import merge_bookings, normalize_record
from tripdocs.itinerary.validator import validate_itinerary

__all__ = [
    "build_itinerary",
    "build_markdown_content",
    "merge_bookings",
    "normalize_record",
    "validate_itinerary",
]
