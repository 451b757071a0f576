"""Batch fetcher: turns a generation request into validated question records."""

from __future__ import annotations

import logging
from typing import Any, Union

from ..adapters.base import GenerationAdapter
from .errors import MalformedEnvelopeError, NetworkError
from .prompt import build_payload
from .types import (
    OPTIONS_PER_QUESTION,
    ErrorKind,
    Failure,
    FetchOutcome,
    GenerationRequest,
    QuestionRecord,
    Success,
)
from .utils import parse_question_array

logger = logging.getLogger(__name__)

MALFORMED_MESSAGE = "empty or malformed response structure"


def decode_envelope(data: Any) -> Union[str, None]:
    """Return candidates[0].content.parts[0].text, or None if absent or empty."""
    if not isinstance(data, dict):
        return None
    candidates = data.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return None
    content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
    if not isinstance(content, dict):
        return None
    parts = content.get("parts")
    if not isinstance(parts, list) or not parts or not isinstance(parts[0], dict):
        return None
    text = parts[0].get("text")
    if not isinstance(text, str) or not text.strip():
        return None
    return text


def validate_record(item: Any) -> QuestionRecord:
    """Check one generated question; raises ValueError describing the first problem."""
    if not isinstance(item, dict):
        raise ValueError(f"record is a {type(item).__name__}, not an object")
    question = item.get("question")
    if not isinstance(question, str) or not question.strip():
        raise ValueError("missing or empty question text")
    options = item.get("options")
    if not isinstance(options, list) or not all(isinstance(o, str) for o in options):
        raise ValueError("options must be a list of strings")
    if len(options) != OPTIONS_PER_QUESTION:
        raise ValueError(f"expected {OPTIONS_PER_QUESTION} options, got {len(options)}")
    if len(set(options)) != len(options):
        raise ValueError("options are not unique")
    answer = item.get("correctAnswer")
    if not isinstance(answer, str) or answer not in options:
        raise ValueError(f"correctAnswer {answer!r} does not match any option")
    return QuestionRecord(question=question, options=tuple(options), correct_answer=answer)


def validate_records(items: list[Any]) -> tuple[list[QuestionRecord], list[str]]:
    records: list[QuestionRecord] = []
    dropped: list[str] = []
    for idx, item in enumerate(items):
        try:
            records.append(validate_record(item))
        except ValueError as e:
            reason = f"record {idx}: {e}"
            logger.warning("Dropping invalid question (%s): %s", ErrorKind.VALIDATION_ERROR.value, reason)
            dropped.append(reason)
    return records, dropped


async def fetch_batch(request: GenerationRequest, adapter: GenerationAdapter) -> FetchOutcome:
    """Fetch one batch of questions.

    Network failures are retried by the adapter; everything that happens after
    a response is received (envelope, JSON and record checks) is final.
    """
    payload = build_payload(request)
    logger.info(
        "Requesting %d %s questions about %r in %s via %s",
        request.count,
        request.difficulty.value,
        request.topic,
        request.language,
        adapter.id,
    )
    try:
        data = await adapter.generate(payload)
    except NetworkError as e:
        message = str(e)
        logger.error("Question batch request failed: %s", message)
        return Failure(ErrorKind.NETWORK, message)
    except MalformedEnvelopeError as e:
        logger.error("Question batch response was not JSON: %s", e)
        return Failure(ErrorKind.MALFORMED_RESPONSE, MALFORMED_MESSAGE)

    text = decode_envelope(data)
    if text is None:
        logger.error("Question batch response had no generated text")
        return Failure(ErrorKind.MALFORMED_RESPONSE, MALFORMED_MESSAGE)

    try:
        items = parse_question_array(text)
    except ValueError as e:
        logger.error("Could not parse generated questions: %s", e)
        return Failure(ErrorKind.PARSE_ERROR, str(e))

    records, dropped = validate_records(items)
    if dropped:
        logger.info("Accepted %d of %d generated questions", len(records), len(items))
    return Success(records=records, dropped=dropped)
