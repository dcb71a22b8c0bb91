"""
Workflow run contracts.

Defines the run/step records owned by the run registry and the Update
events streamed to a run's observer.
"""

import time
from typing import Annotated, List, Literal, Optional, Union

from pydantic import Field

from tripdocs.shared.schemas.base import ContractModel


WorkflowStatus = Literal["pending", "running", "completed", "failed"]

TERMINAL_STATUSES = ("completed", "failed")

# Pipeline stage identifiers, in execution order
STEP_INIT = "INIT"
STEP_EXTRACT_FILES = "EXTRACT_FILES"
STEP_PROCESS_DOCUMENTS = "PROCESS_DOCUMENTS"
STEP_MERGING = "MERGING"
STEP_BUILD = "BUILD"
STEP_VALIDATE = "VALIDATE"
STEP_BUILD_MARKDOWN = "BUILD_MARKDOWN"

STEP_NAMES = (
    STEP_INIT,
    STEP_EXTRACT_FILES,
    STEP_PROCESS_DOCUMENTS,
    STEP_MERGING,
    STEP_BUILD,
    STEP_VALIDATE,
    STEP_BUILD_MARKDOWN,
)


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class Step(ContractModel):
    """One named stage within a run."""

    name: str = Field(description="Stage identifier, stable per pipeline stage")
    status: WorkflowStatus = Field(description="Stage status")
    message: Optional[str] = Field(default=None, description="Human-readable progress note")
    timestamp: int = Field(default_factory=now_ms, description="Epoch milliseconds of the last update")


class Run(ContractModel):
    """One execution of the document-to-itinerary pipeline."""

    id: str = Field(description="Opaque unique run identifier")
    status: WorkflowStatus = Field(default="pending")
    steps: List[Step] = Field(default_factory=list, description="Steps in first-seen order")
    warnings: Optional[List[str]] = Field(default=None, description="Validator warnings (completed runs)")
    error: Optional[str] = Field(default=None, description="Failure message (failed runs)")
    markdown: Optional[str] = Field(default=None, description="Rendered itinerary (completed runs)")
    document_count: int = Field(default=0, ge=0, description="Number of input documents")
    created_at: int = Field(default_factory=now_ms)
    completed_at: Optional[int] = Field(default=None)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


class ProgressUpdate(ContractModel):
    """A step transition."""

    type: Literal["progress"] = "progress"
    step: Step


class CompletionUpdate(ContractModel):
    """Final event of a successful run."""

    type: Literal["completion"] = "completion"
    warnings: List[str] = Field(default_factory=list)
    markdown: str = ""


Update = Annotated[Union[ProgressUpdate, CompletionUpdate], Field(discriminator="type")]
