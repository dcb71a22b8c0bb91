"""
Workflow orchestrator.

Validates an upload, registers a run, and drives the itinerary graph for it
in a background task. Callers get the run id back immediately and follow
progress through the run registry.
"""

import asyncio
import logging
from typing import List, Optional, Set

from tripdocs.extraction import DocumentCollaborators, is_supported_document
from tripdocs.graph.build import create_itinerary_graph, error_message
from tripdocs.graph.state import UploadedDocument
from tripdocs.progress.registry import RunRegistry, get_registry
from tripdocs.shared.config import DEFAULT_CONFIG, WorkflowConfig


logger = logging.getLogger(__name__)

# Strong references to in-flight runs so the event loop cannot drop them
_background_tasks: Set["asyncio.Task[None]"] = set()


class WorkflowInputError(ValueError):
    """Raised when an upload is rejected before a run is created."""

    pass


def validate_files(files: List[UploadedDocument], config: Optional[WorkflowConfig] = None) -> None:
    """
    Check an upload against the workflow limits.

    Raises:
        WorkflowInputError: On no files, too many files, an unreadable file
            type or an oversized file
    """
    if config is None:
        config = DEFAULT_CONFIG

    if not files:
        raise WorkflowInputError("No files provided")

    if len(files) > config.max_files:
        raise WorkflowInputError(f"Maximum {config.max_files} files allowed")

    supported = [upload for upload in files if is_supported_document(upload["filename"])]
    if len(supported) != len(files):
        raise WorkflowInputError(
            f"Only {len(supported)} out of {len(files)} files are supported documents "
            "(PDF, image or text)"
        )

    limit_mb = config.max_file_bytes // (1024 * 1024)
    for upload in files:
        if len(upload["data"]) > config.max_file_bytes:
            raise WorkflowInputError(f"File {upload['filename']} exceeds {limit_mb}MB limit")


async def start_workflow(
    files: List[UploadedDocument],
    registry: Optional[RunRegistry] = None,
    collaborators: Optional[DocumentCollaborators] = None,
    config: Optional[WorkflowConfig] = None,
) -> str:
    """
    Start processing an upload and return without waiting for it.

    Args:
        files: Uploaded documents
        registry: Run registry. Uses the process-wide registry if not provided.
        collaborators: OCR/classify/extract operations
        config: Workflow configuration. Uses DEFAULT_CONFIG if not provided.

    Returns:
        The new run's id

    Raises:
        WorkflowInputError: If the upload is rejected (no run is created)
    """
    if registry is None:
        registry = get_registry()
    if config is None:
        config = DEFAULT_CONFIG

    validate_files(files, config)

    run_id = registry.create_run(document_count=len(files))
    logger.info(f"[run={run_id}] [graph=itinerary] [api=start] Run scheduled | files={len(files)}")

    task = asyncio.create_task(run_workflow(run_id, files, registry, collaborators, config))
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)

    return run_id


async def run_workflow(
    run_id: str,
    files: List[UploadedDocument],
    registry: RunRegistry,
    collaborators: Optional[DocumentCollaborators] = None,
    config: Optional[WorkflowConfig] = None,
) -> None:
    """
    Run the itinerary graph for an existing run to a terminal state.

    Never raises for pipeline errors: any unrecovered exception fails the
    run with its message.
    """
    if config is None:
        config = DEFAULT_CONFIG

    _log = f"[run={run_id}] [graph=itinerary] [orchestrator] "

    initial_state = {
        "run_id": run_id,
        "files": files,
        "documents": [],
        "bookings": [],
        "trip": None,
        "itinerary": [],
        "warnings": [],
        "markdown": None,
        "messages": [],
    }

    try:
        graph = create_itinerary_graph(registry, collaborators, config)

        logger.info(f"{_log}Invoking itinerary graph | files={len(files)}")
        final_state = await graph.ainvoke(
            initial_state, config={"recursion_limit": config.recursion_limit}
        )

        logger.info(
            f"{_log}Pipeline finished | days={len(final_state.get('itinerary', []))}, "
            f"warnings={len(final_state.get('warnings', []))}, "
            f"messages={len(final_state.get('messages', []))}"
        )
    except Exception as e:
        logger.exception(f"{_log}Pipeline failed: {e}")
        # No-op when the failing step already failed the run
        await registry.fail(run_id, error_message(e))
