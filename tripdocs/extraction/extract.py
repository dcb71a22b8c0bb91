"""
Booking field extraction.

Asks the LLM for the structured fields of a document of known kind. A
failed call or unusable response degrades to an empty record of that kind
rather than failing the run.
"""

import logging
from typing import Any, Dict, Optional

from tripdocs.extraction.classify import LLMCall
from tripdocs.extraction.prompts import EXTRACT_SYSTEM_PROMPT, EXTRACT_TEMPLATES
from tripdocs.extraction.response_parser import ParseError, parse_json_object
from tripdocs.shared.config import DEFAULT_CONFIG, WorkflowConfig
from tripdocs.shared.llm.client import get_llm_response


logger = logging.getLogger(__name__)


def empty_record(kind: str) -> Dict[str, Any]:
    """Default record used when extraction fails."""
    if kind == "flight":
        return {"segments": []}
    return {}


async def extract_fields(
    text: str,
    kind: str,
    config: Optional[WorkflowConfig] = None,
    llm: Optional[LLMCall] = None,
) -> Dict[str, Any]:
    """
    Extract raw booking fields from document text.

    Args:
        text: Document text (OCR output)
        kind: Booking kind from the classifier
        config: Workflow configuration. Uses DEFAULT_CONFIG if not provided.
        llm: Async LLM call, defaults to the shared OpenAI client

    Returns:
        Raw record with camelCase keys (not yet normalized)

    Raises:
        ValueError: If kind is not a known booking kind
    """
    template = EXTRACT_TEMPLATES.get(kind)
    if template is None:
        raise ValueError(f"Unknown document type: {kind}")

    if config is None:
        config = DEFAULT_CONFIG
    if llm is None:
        llm = get_llm_response

    clipped = text[: config.max_extract_chars]

    try:
        raw = await llm(
            user_prompt=template.format(text=clipped),
            system_prompt=EXTRACT_SYSTEM_PROMPT,
            model=config.extract_model,
        )
        record = parse_json_object(raw)
    except ParseError as e:
        logger.warning(f"Unusable {kind} extraction response, using empty record: {e}")
        return empty_record(kind)
    except Exception as e:
        logger.warning(f"{kind.capitalize()} extraction failed, using empty record: {e}")
        return empty_record(kind)

    if kind == "flight" and not isinstance(record.get("segments"), list):
        record["segments"] = []

    return record
