"""
Itinerary graph construction.

Builds the graph that turns uploaded travel documents into a rendered
itinerary:
    init -> extract_files -> process_documents -> merging
         -> build -> validate -> build_markdown -> complete -> END

Every node records its step on the run registry as 'running' and then
'completed'. A node that raises records its step as 'failed' and fails the
run in the same registry call, then re-raises so the graph stops.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from langgraph.graph import StateGraph, END

from tripdocs.extraction import DocumentCollaborators
from tripdocs.graph.state import DocumentText, ItineraryState
from tripdocs.itinerary import (
    build_itinerary,
    build_markdown_content,
    merge_bookings,
    normalize_record,
    validate_itinerary,
)
from tripdocs.progress.registry import RunRegistry
from tripdocs.shared.config import DEFAULT_CONFIG, WorkflowConfig
from tripdocs.shared.contracts.trip import Booking
from tripdocs.shared.contracts.workflow import (
    STEP_BUILD,
    STEP_BUILD_MARKDOWN,
    STEP_EXTRACT_FILES,
    STEP_INIT,
    STEP_MERGING,
    STEP_PROCESS_DOCUMENTS,
    STEP_VALIDATE,
    Step,
)


logger = logging.getLogger(__name__)


def error_message(exc: BaseException) -> str:
    """Failure text stored on a run; falls back to the exception type."""
    return str(exc) or type(exc).__name__


class StepTracker:
    """Handle for the step being run; set `message` for the completed record."""

    def __init__(self, name: str):
        self.name = name
        self.message: Optional[str] = None


@asynccontextmanager
async def track_step(
    registry: RunRegistry,
    run_id: str,
    name: str,
    message: Optional[str] = None,
) -> AsyncIterator[StepTracker]:
    """
    Record a step 'running' on entry and 'completed' on exit.

    If the body raises, the step is recorded 'failed' and the run is failed
    with the error text before the exception propagates.
    """
    await registry.record_step(run_id, Step(name=name, status="running", message=message))
    tracker = StepTracker(name)
    try:
        yield tracker
    except Exception as e:
        text = error_message(e)
        await registry.fail(
            run_id,
            text,
            failed_step=Step(name=name, status="failed", message=text),
        )
        raise
    await registry.record_step(
        run_id, Step(name=name, status="completed", message=tracker.message)
    )


def _node_log(state: ItineraryState, node: str) -> str:
    return f"[run={state.get('run_id', 'unknown')}] [graph=itinerary] [node={node}] "


def create_itinerary_graph(
    registry: RunRegistry,
    collaborators: Optional[DocumentCollaborators] = None,
    config: Optional[WorkflowConfig] = None,
):
    """
    Create and compile the itinerary graph.

    Args:
        registry: Registry that records the run's steps
        collaborators: OCR/classify/extract operations. Uses the OpenAI
            backed defaults if not provided.
        config: Workflow configuration. Uses DEFAULT_CONFIG if not provided.

    Returns:
        Compiled LangGraph application ready for `ainvoke`.
    """
    if collaborators is None:
        collaborators = DocumentCollaborators()
    if config is None:
        config = DEFAULT_CONFIG

    async def init_node(state: ItineraryState) -> Dict[str, Any]:
        _log = _node_log(state, "init")
        run_id = state["run_id"]
        count = len(state["files"])
        logger.info(f"{_log}Entering node | files={count}")

        async with track_step(registry, run_id, STEP_INIT, "Starting workflow") as step:
            step.message = f"Received {count} document(s)"

        return {
            "messages": [
                {"role": "system", "agent": "itinerary", "content": f"Workflow started with {count} document(s)"}
            ]
        }

    async def extract_files_node(state: ItineraryState) -> Dict[str, Any]:
        _log = _node_log(state, "extract_files")
        run_id = state["run_id"]
        files = state["files"]
        logger.info(f"{_log}Entering node | files={len(files)}")

        async def read_one(upload) -> DocumentText:
            text = await collaborators.ocr(upload["filename"], upload["data"], config=config)
            logger.info(f"{_log}Text extracted | file={upload['filename']}, chars={len(text)}")
            return {"filename": upload["filename"], "text": text}

        async with track_step(
            registry, run_id, STEP_EXTRACT_FILES, f"Extracting text from {len(files)} file(s)"
        ) as step:
            # All-or-nothing join: the first failure propagates and the
            # remaining reads are left to finish unobserved.
            documents = await asyncio.gather(*(read_one(f) for f in files))
            step.message = f"Extracted text from {len(documents)} file(s)"

        return {"documents": list(documents)}

    async def process_documents_node(state: ItineraryState) -> Dict[str, Any]:
        _log = _node_log(state, "process_documents")
        run_id = state["run_id"]
        documents = state["documents"]
        logger.info(f"{_log}Entering node | documents={len(documents)}")

        async def process_one(document: DocumentText) -> Booking:
            kind = await collaborators.classify(document["text"], config=config)
            raw = await collaborators.extract(document["text"], kind, config=config)
            booking = normalize_record(raw, kind)

            logger.info(f"{_log}Document processed | file={document['filename']}, kind={kind}")
            await registry.record_step(
                run_id,
                Step(
                    name=STEP_PROCESS_DOCUMENTS,
                    status="running",
                    message=f"Processed {document['filename']} as {kind}",
                ),
            )
            return booking

        async with track_step(
            registry, run_id, STEP_PROCESS_DOCUMENTS, f"Processing {len(documents)} documents"
        ) as step:
            # Siblings of a failed document are not cancelled; their results
            # are discarded and their late step updates hit a terminal run.
            bookings = await asyncio.gather(*(process_one(d) for d in documents))
            step.message = f"Processed {len(bookings)} documents"

        return {"bookings": list(bookings)}

    async def merging_node(state: ItineraryState) -> Dict[str, Any]:
        _log = _node_log(state, "merging")
        logger.info(f"{_log}Entering node | bookings={len(state['bookings'])}")

        async with track_step(registry, state["run_id"], STEP_MERGING, "Merging bookings") as step:
            trip = merge_bookings(state["bookings"])
            step.message = (
                f"Merged {len(trip.flights)} flights, {len(trip.hotels)} hotels, {len(trip.cars)} cars"
            )

        logger.info(f"{_log}{step.message}")
        return {"trip": trip}

    async def build_node(state: ItineraryState) -> Dict[str, Any]:
        _log = _node_log(state, "build")
        logger.info(f"{_log}Entering node | bookings={state['trip'].booking_count}")

        async with track_step(
            registry, state["run_id"], STEP_BUILD, "Building day-by-day itinerary"
        ) as step:
            rows = build_itinerary(state["trip"])
            step.message = f"Built {len(rows)}-day itinerary"

        if rows:
            logger.info(f"{_log}Itinerary built | days={len(rows)}, first={rows[0].date}, last={rows[-1].date}")
        else:
            logger.info(f"{_log}Itinerary built | days=0")
        return {"itinerary": rows}

    async def validate_node(state: ItineraryState) -> Dict[str, Any]:
        _log = _node_log(state, "validate")
        logger.info(f"{_log}Entering node | days={len(state['itinerary'])}")

        async with track_step(registry, state["run_id"], STEP_VALIDATE, "Validating itinerary") as step:
            warnings = validate_itinerary(state["trip"], state["itinerary"])
            step.message = f"Validated itinerary with {len(warnings)} warning(s)"

        for warning in warnings:
            logger.info(f"{_log}Warning: {warning}")
        return {"warnings": warnings}

    async def build_markdown_node(state: ItineraryState) -> Dict[str, Any]:
        _log = _node_log(state, "build_markdown")
        logger.info(f"{_log}Entering node")

        async with track_step(
            registry, state["run_id"], STEP_BUILD_MARKDOWN, "Building markdown content"
        ) as step:
            markdown = build_markdown_content(state["itinerary"], state["warnings"])
            step.message = "Built markdown content"

        return {"markdown": markdown}

    async def complete_node(state: ItineraryState) -> Dict[str, Any]:
        _log = _node_log(state, "complete")
        logger.info(
            f"{_log}Pipeline complete | days={len(state['itinerary'])}, "
            f"warnings={len(state['warnings'])} -> END"
        )

        await registry.complete(state["run_id"], state["warnings"], state["markdown"])

        return {
            "messages": [
                {
                    "role": "system",
                    "agent": "itinerary",
                    "content": f"Pipeline complete. {len(state['itinerary'])} day(s), {len(state['warnings'])} warning(s).",
                }
            ]
        }

    graph = StateGraph(ItineraryState)

    # Add nodes
    graph.add_node("init", init_node)
    graph.add_node("extract_files", extract_files_node)
    graph.add_node("process_documents", process_documents_node)
    graph.add_node("merging", merging_node)
    graph.add_node("build", build_node)
    graph.add_node("validate", validate_node)
    graph.add_node("build_markdown", build_markdown_node)
    graph.add_node("complete", complete_node)

    # Linear pipeline
    graph.set_entry_point("init")
    graph.add_edge("init", "extract_files")
    graph.add_edge("extract_files", "process_documents")
    graph.add_edge("process_documents", "merging")
    graph.add_edge("merging", "build")
    graph.add_edge("build", "validate")
    graph.add_edge("validate", "build_markdown")
    graph.add_edge("build_markdown", "complete")
    graph.add_edge("complete", END)

    app = graph.compile()

    return app
