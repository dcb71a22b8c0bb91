"""Tripdocs: travel documents in, day-by-day itinerary out."""
