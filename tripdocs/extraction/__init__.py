"""
Extraction collaborators.

OCR, classification and field extraction of uploaded travel documents,
bundled as DocumentCollaborators for injection into the workflow.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict

from tripdocs.extraction.classify import apply_heuristics, classify_document
from tripdocs.extraction.extract import extract_fields
from tripdocs.extraction.ocr import is_supported_document, ocr_document


@dataclass
class DocumentCollaborators:
    """
    External operations the workflow depends on.

    Attributes:
        ocr: async (filename, data, config) -> text
        classify: async (text, config) -> DocType
        extract: async (text, kind, config) -> raw record
    """

    ocr: Callable[..., Awaitable[str]] = ocr_document
    classify: Callable[..., Awaitable[str]] = classify_document
    extract: Callable[..., Awaitable[Dict[str, Any]]] = extract_fields


__all__ = [
    "DocumentCollaborators",
    "apply_heuristics",
    "classify_document",
    "extract_fields",
    "is_supported_document",
    "ocr_document",
]
