"""
Document classification.

Asks the LLM whether a document is a flight, hotel or car booking. Low
confidence answers defer to a keyword heuristic; if the LLM call fails
entirely, the heuristic decides, and "hotel" is the last resort.
"""

import logging
from typing import Awaitable, Callable, Optional

from pydantic import ValidationError

from tripdocs.extraction.prompts import CLASSIFY_SYSTEM_PROMPT
from tripdocs.extraction.response_parser import ParseError, parse_json_object
from tripdocs.shared.config import DEFAULT_CONFIG, WorkflowConfig
from tripdocs.shared.contracts.trip import ClassificationResult, DocType
from tripdocs.shared.llm.client import get_llm_response


logger = logging.getLogger(__name__)

# (user_prompt, system_prompt, model) -> raw response text
LLMCall = Callable[..., Awaitable[str]]

DEFAULT_DOC_TYPE: DocType = "hotel"

HOTEL_KEYWORDS = (
    "check-in",
    "check-out",
    "reservation",
    "room",
    "hotel",
    "accommodation",
    "guest",
    "property",
)

FLIGHT_KEYWORDS = (
    "flight",
    "airline",
    "boarding",
    "departure",
    "arrival",
    "gate",
    "seat",
    "passenger",
    "aircraft",
)

CAR_KEYWORDS = (
    "rental",
    "vehicle",
    "pickup",
    "drop-off",
    "car",
    "suv",
    "sedan",
    "driver",
)


async def classify_document(
    text: str,
    config: Optional[WorkflowConfig] = None,
    llm: Optional[LLMCall] = None,
) -> DocType:
    """
    Classify a document's booking kind.

    Args:
        text: Document text (OCR output)
        config: Workflow configuration. Uses DEFAULT_CONFIG if not provided.
        llm: Async LLM call, defaults to the shared OpenAI client

    Returns:
        "flight", "hotel" or "car" (never raises for LLM failures)
    """
    if config is None:
        config = DEFAULT_CONFIG
    if llm is None:
        llm = get_llm_response

    clipped = text[: config.max_classify_chars]

    try:
        raw = await llm(
            user_prompt=f"Document text:\n{clipped}",
            system_prompt=CLASSIFY_SYSTEM_PROMPT,
            model=config.classify_model,
        )
        result = ClassificationResult.model_validate(parse_json_object(raw))
    except (ParseError, ValidationError) as e:
        logger.warning(f"Unusable classification response, falling back to heuristics: {e}")
        return apply_heuristics(text) or DEFAULT_DOC_TYPE
    except Exception as e:
        logger.warning(f"AI classification failed, falling back to heuristics: {e}")
        return apply_heuristics(text) or DEFAULT_DOC_TYPE

    if result.confidence < config.confidence_threshold:
        heuristic_type = apply_heuristics(text)
        if heuristic_type:
            logger.info(
                f"Low confidence classification | llm={result.doc_type}, "
                f"confidence={result.confidence}, heuristic={heuristic_type}"
            )
            return heuristic_type

    return result.doc_type


def apply_heuristics(text: str) -> Optional[DocType]:
    """
    Keyword-count classifier.

    Counts how many keywords of each kind occur in the text. Ties go to
    hotel, then flight, then car. No hits at all returns None.
    """
    lower_text = text.lower()

    hotel_score = sum(1 for kw in HOTEL_KEYWORDS if kw in lower_text)
    flight_score = sum(1 for kw in FLIGHT_KEYWORDS if kw in lower_text)
    car_score = sum(1 for kw in CAR_KEYWORDS if kw in lower_text)

    max_score = max(hotel_score, flight_score, car_score)
    if max_score == 0:
        return None

    if hotel_score == max_score:
        return "hotel"
    if flight_score == max_score:
        return "flight"
    return "car"
