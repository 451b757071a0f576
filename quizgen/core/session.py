"""Per-session quiz context: generation parameters, fetch bookkeeping and state."""

from __future__ import annotations

import asyncio
import logging
import uuid
from enum import Enum
from typing import Any, Union

from ..adapters.base import GenerationAdapter
from .errors import FetchInProgressError, NoActiveQuizError, SessionClosedError
from .fetcher import fetch_batch
from .quiz_state import QuizStateMerger
from .types import (
    INITIAL_BATCH_SIZE,
    LOAD_MORE_BATCH_SIZE,
    Failure,
    FetchOutcome,
    GenerationRequest,
)

logger = logging.getLogger(__name__)

GENERATE = "generate"
LOAD_MORE = "load_more"


class SessionStatus(str, Enum):
    EMPTY = "Empty"
    GENERATING = "Generating"
    POPULATED = "Populated"
    GENERATION_FAILED = "GenerationFailed"
    LOADING_MORE = "LoadingMore"
    CLOSED = "Closed"


class QuizSession:
    def __init__(self, adapter: GenerationAdapter, session_id: Union[str, None] = None) -> None:
        self.id = session_id or uuid.uuid4().hex
        self.adapter = adapter
        self.merger = QuizStateMerger()
        self.request: Union[GenerationRequest, None] = None
        self.error: Union[Failure, None] = None
        self._pending: dict[str, asyncio.Task] = {}
        # Bumped on every successful generate so in-flight load-more results
        # for the previous topic can be recognised.
        self._epoch = 0
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def status(self) -> SessionStatus:
        if self._closed:
            return SessionStatus.CLOSED
        if GENERATE in self._pending:
            return SessionStatus.GENERATING
        if LOAD_MORE in self._pending:
            return SessionStatus.LOADING_MORE
        if self.request is not None:
            return SessionStatus.POPULATED
        if self.error is not None:
            return SessionStatus.GENERATION_FAILED
        return SessionStatus.EMPTY

    def is_pending(self, kind: str) -> bool:
        return kind in self._pending

    async def _fetch(self, kind: str, request: GenerationRequest) -> FetchOutcome:
        if self._closed:
            raise SessionClosedError()
        if kind in self._pending:
            raise FetchInProgressError(kind.replace("_", "-"))
        self.error = None
        task = asyncio.ensure_future(fetch_batch(request, self.adapter))
        self._pending[kind] = task
        try:
            outcome = await task
        except asyncio.CancelledError:
            if not self._closed:
                raise
            raise SessionClosedError() from None
        finally:
            self._pending.pop(kind, None)
        if self._closed:
            logger.info("Discarding %s result for closed session %s", kind, self.id)
            raise SessionClosedError()
        return outcome

    async def generate(self, topic: str, difficulty: str, language: str) -> FetchOutcome:
        """Fetch a fresh batch for a new topic and replace the quiz with it."""
        request = GenerationRequest(topic, difficulty, language, INITIAL_BATCH_SIZE)
        outcome = await self._fetch(GENERATE, request)
        failure = self.merger.apply_generate(outcome)
        if failure is not None:
            self.error = failure
        else:
            self.request = request
            self._epoch += 1
            logger.info("Session %s now has %d questions on %r", self.id, len(self.merger.questions), request.topic)
        return outcome

    async def load_more(self) -> FetchOutcome:
        """Fetch another batch on the current topic and append it."""
        if self.request is None:
            raise NoActiveQuizError()
        epoch = self._epoch
        outcome = await self._fetch(LOAD_MORE, self.request.with_count(LOAD_MORE_BATCH_SIZE))
        if epoch != self._epoch:
            logger.info("Discarding load-more result for session %s: quiz was regenerated", self.id)
            return outcome
        failure = self.merger.apply_load_more(outcome)
        if failure is not None:
            self.error = failure
        return outcome

    def select_answer(self, index: int, option: str) -> bool:
        if self._closed:
            raise SessionClosedError()
        return self.merger.record_answer(index, option)

    def score(self) -> tuple[int, int]:
        return self.merger.score()

    def snapshot(self) -> dict[str, Any]:
        data = self.merger.snapshot()
        data.update(
            {
                "session_id": self.id,
                "status": self.status.value,
                "topic": self.request.topic if self.request else None,
                "difficulty": self.request.difficulty.value if self.request else None,
                "language": self.request.language if self.request else None,
                "loading": self.is_pending(GENERATE),
                "loading_more": self.is_pending(LOAD_MORE),
                "error": (
                    {"kind": self.error.kind.value, "message": self.error.message}
                    if self.error
                    else None
                ),
            }
        )
        return data

    async def close(self) -> None:
        """Tear the session down, cancelling outstanding fetches and backoff waits."""
        if self._closed:
            return
        self._closed = True
        tasks = list(self._pending.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("Closed session %s (%d pending fetches cancelled)", self.id, len(tasks))
