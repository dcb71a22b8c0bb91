"""
Itinerary workflow graph.

Sequences the document pipeline as a LangGraph graph:
    uploaded files -> text -> bookings -> trip -> itinerary -> markdown

Runs are started by the orchestrator and report every stage to the run
registry. Import `tripdocs.graph.orchestrator` or
`tripdocs.graph.workflow_api` directly for the entry points.
"""

from tripdocs.graph.build import create_itinerary_graph

__all__ = ["create_itinerary_graph"]
