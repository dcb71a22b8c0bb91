"""
Workflow configuration.

Centralizes all configuration options for the itinerary workflow, making
it easy to tune model choices and input limits without touching the graph
wiring.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _env_model(name: str) -> str:
    return os.environ.get(name) or "gpt-4o-mini"


@dataclass
class WorkflowConfig:
    """
    Configuration for the itinerary workflow.

    Attributes:
        classify_model: LLM used to classify documents (env AI_MODEL_CLASSIFY)
        extract_model: LLM used to extract booking fields (env AI_MODEL_EXTRACT)
        ocr_model: LLM used to read PDF documents (env AI_MODEL_OCR)
        confidence_threshold: Below this, keyword heuristics override the classifier
        max_classify_chars: Document text sent to the classifier
        max_extract_chars: Document text sent to the extractor
        max_files: Maximum documents per run
        max_file_bytes: Maximum size of one document
        recursion_limit: Maximum number of graph steps
    """

    # LLM configuration
    classify_model: str = field(default_factory=lambda: _env_model("AI_MODEL_CLASSIFY"))
    extract_model: str = field(default_factory=lambda: _env_model("AI_MODEL_EXTRACT"))
    ocr_model: str = field(default_factory=lambda: _env_model("AI_MODEL_OCR"))

    # Classification rules
    confidence_threshold: float = 0.6

    # Prompt clipping
    max_classify_chars: int = 4000
    max_extract_chars: int = 8000

    # Upload limits
    max_files: int = 10
    max_file_bytes: int = 10 * 1024 * 1024

    # Graph execution limits
    recursion_limit: int = 25


# Default configuration instance
DEFAULT_CONFIG = WorkflowConfig()


def get_config(
    classify_model: Optional[str] = None,
    extract_model: Optional[str] = None,
    ocr_model: Optional[str] = None,
    confidence_threshold: Optional[float] = None,
    max_files: Optional[int] = None,
    max_file_bytes: Optional[int] = None,
) -> WorkflowConfig:
    """
    Create a configuration with optional overrides.

    Args:
        classify_model: Override for the classification model
        extract_model: Override for the extraction model
        ocr_model: Override for the OCR model
        confidence_threshold: Override for the heuristic fallback threshold
        max_files: Override for documents per run
        max_file_bytes: Override for maximum document size

    Returns:
        WorkflowConfig with specified overrides applied
    """
    return WorkflowConfig(
        classify_model=classify_model or DEFAULT_CONFIG.classify_model,
        extract_model=extract_model or DEFAULT_CONFIG.extract_model,
        ocr_model=ocr_model or DEFAULT_CONFIG.ocr_model,
        confidence_threshold=confidence_threshold
        if confidence_threshold is not None
        else DEFAULT_CONFIG.confidence_threshold,
        max_classify_chars=DEFAULT_CONFIG.max_classify_chars,
        max_extract_chars=DEFAULT_CONFIG.max_extract_chars,
        max_files=max_files or DEFAULT_CONFIG.max_files,
        max_file_bytes=max_file_bytes or DEFAULT_CONFIG.max_file_bytes,
        recursion_limit=DEFAULT_CONFIG.recursion_limit,
    )
