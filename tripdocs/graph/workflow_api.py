"""
FastAPI endpoints for itinerary workflows.

Provides the API to upload travel documents, follow a run's progress as a
server-sent event stream, and fetch run snapshots.
"""

import json
import logging
from typing import Any, AsyncIterator, Dict, List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from tripdocs.extraction import DocumentCollaborators
from tripdocs.graph.orchestrator import WorkflowInputError, start_workflow
from tripdocs.graph.state import UploadedDocument
from tripdocs.progress.publisher import ObserverAlreadyAttachedError, ProgressSubscription
from tripdocs.progress.registry import RunNotFoundError, RunRegistry, get_registry
from tripdocs.shared.config import DEFAULT_CONFIG, WorkflowConfig


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/workflows", tags=["workflows"])


# ============================================================================
# Dependencies
# ============================================================================


def get_collaborators() -> DocumentCollaborators:
    """OpenAI backed document operations (overridden in tests)."""
    return DocumentCollaborators()


def get_workflow_config() -> WorkflowConfig:
    return DEFAULT_CONFIG


# ============================================================================
# Request/Response Models
# ============================================================================


class WorkflowStartResponse(BaseModel):
    """Response from starting a workflow."""

    run_id: str = Field(description="Identifier of the new run")
    message: str = Field(description="Human-readable acknowledgement")


# ============================================================================
# Helpers
# ============================================================================


def _sse(data: Dict[str, Any], event: Optional[str] = None) -> str:
    prefix = f"event: {event}\n" if event else ""
    return f"{prefix}data: {json.dumps(data)}\n\n"


async def _event_stream(subscription: ProgressSubscription) -> AsyncIterator[str]:
    """Relay a run's updates as SSE frames until its stream ends."""
    _log = f"[run={subscription.run_id}] [api=stream] "

    async with subscription:
        async for update in subscription:
            yield _sse(update.to_wire())

        if subscription.error is not None:
            yield _sse({"error": subscription.error}, event="error")

    logger.info(f"{_log}Stream finished | failed={subscription.error is not None}")


# ============================================================================
# Endpoints
# ============================================================================


@router.post("", response_model=WorkflowStartResponse, status_code=status.HTTP_202_ACCEPTED)
async def create_workflow(
    files: Optional[List[UploadFile]] = File(default=None),
    registry: RunRegistry = Depends(get_registry),
    collaborators: DocumentCollaborators = Depends(get_collaborators),
    config: WorkflowConfig = Depends(get_workflow_config),
):
    """
    Start processing uploaded travel documents.

    Returns immediately with the run id; progress is available from the
    run's stream endpoint.
    """
    uploads: List[UploadedDocument] = []
    for upload in files or []:
        uploads.append({"filename": upload.filename or "document", "data": await upload.read()})

    try:
        run_id = await start_workflow(uploads, registry, collaborators, config)
    except WorkflowInputError as e:
        logger.warning(f"[api=create] Upload rejected: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.exception(f"[api=create] Failed to start workflow: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to start workflow: {str(e)}",
        )

    return WorkflowStartResponse(
        run_id=run_id,
        message=f"Started processing {len(uploads)} file(s)",
    )


@router.get("/{run_id}/stream")
async def stream_workflow(run_id: str, registry: RunRegistry = Depends(get_registry)):
    """
    Follow a run's progress as server-sent events.

    Each event carries one update as JSON. A failed run ends with an
    `error` event holding the failure message.
    """
    try:
        subscription = await registry.subscribe(run_id)
    except RunNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Run {run_id} not found",
        )
    except ObserverAlreadyAttachedError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Run {run_id} already has an attached observer",
        )

    return StreamingResponse(
        _event_stream(subscription),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@router.get("/{run_id}")
async def get_workflow(run_id: str, registry: RunRegistry = Depends(get_registry)):
    """Get a snapshot of a run."""
    run = registry.get_run(run_id)
    if run is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Run {run_id} not found",
        )
    return run.to_wire()


@router.get("")
async def list_workflows(registry: RunRegistry = Depends(get_registry)):
    """List snapshots of all runs in this process."""
    return [run.to_wire() for run in registry.list_runs()]
