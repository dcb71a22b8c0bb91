"""
Document text extraction (OCR).

Plain-text documents are decoded directly. PDFs and images are sent to a
vision-capable OpenAI model which transcribes them to markdown text.
"""

import base64
import logging
from pathlib import PurePath
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI

from tripdocs.extraction.prompts import OCR_SYSTEM_PROMPT
from tripdocs.shared.config import DEFAULT_CONFIG, WorkflowConfig
from tripdocs.shared.llm.client import call_llm


logger = logging.getLogger(__name__)

TEXT_SUFFIXES = (".txt", ".text", ".md", ".eml")
PDF_SUFFIXES = (".pdf",)
IMAGE_MEDIA_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
}


class UnsupportedDocumentError(ValueError):
    """Raised for files whose type cannot be read."""

    pass


def document_suffix(filename: str) -> str:
    return PurePath(filename).suffix.lower()


def is_supported_document(filename: str) -> bool:
    suffix = document_suffix(filename)
    return suffix in TEXT_SUFFIXES or suffix in PDF_SUFFIXES or suffix in IMAGE_MEDIA_TYPES


async def ocr_document(
    filename: str,
    data: bytes,
    config: Optional[WorkflowConfig] = None,
    client: Optional[AsyncOpenAI] = None,
) -> str:
    """
    Extract the text of one uploaded document.

    Args:
        filename: Original file name (its suffix selects the reader)
        data: Raw file bytes
        config: Workflow configuration. Uses DEFAULT_CONFIG if not provided.
        client: Optional OpenAI client, defaults to the shared cached client

    Returns:
        Document text (markdown for transcribed documents)

    Raises:
        UnsupportedDocumentError: If the file type is not supported
    """
    if config is None:
        config = DEFAULT_CONFIG

    suffix = document_suffix(filename)

    if suffix in TEXT_SUFFIXES:
        return data.decode("utf-8", errors="replace")

    encoded = base64.b64encode(data).decode("ascii")

    if suffix in PDF_SUFFIXES:
        attachment: Dict[str, Any] = {
            "type": "file",
            "file": {
                "filename": filename,
                "file_data": f"data:application/pdf;base64,{encoded}",
            },
        }
    elif suffix in IMAGE_MEDIA_TYPES:
        attachment = {
            "type": "image_url",
            "image_url": {"url": f"data:{IMAGE_MEDIA_TYPES[suffix]};base64,{encoded}"},
        }
    else:
        raise UnsupportedDocumentError(f"Unsupported document type: {filename}")

    content: List[Dict[str, Any]] = [
        attachment,
        {"type": "text", "text": "Transcribe this document."},
    ]
    messages = [
        {"role": "system", "content": OCR_SYSTEM_PROMPT},
        {"role": "user", "content": content},
    ]

    text = await call_llm(messages, model=config.ocr_model, client=client)
    logger.debug(f"OCR complete | file={filename}, bytes={len(data)}, chars={len(text)}")
    return text
