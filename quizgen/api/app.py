from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Callable, Union

from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel

from ..adapters.base import GenerationAdapter
from ..core.errors import (
    FetchInProgressError,
    NoActiveQuizError,
    SessionClosedError,
)
from ..core.generation_config import GenerationConfigLoader
from ..core.session import QuizSession
from ..core.types import (
    INITIAL_BATCH_SIZE,
    LOAD_MORE_BATCH_SIZE,
    SUPPORTED_LANGUAGES,
    Difficulty,
    Failure,
    FetchOutcome,
)

logger = logging.getLogger(__name__)


class GenerateRequest(BaseModel):
    topic: str
    difficulty: Difficulty = Difficulty.MEDIUM
    language: str = "English"


class AnswerRequest(BaseModel):
    index: int
    option: str


class SessionRegistry:
    """In-process sessions sharing one generation adapter."""

    def __init__(self, adapter_factory: Callable[[], GenerationAdapter]) -> None:
        self.adapter_factory = adapter_factory
        self._adapter: Union[GenerationAdapter, None] = None
        self.sessions: dict[str, QuizSession] = {}

    @property
    def adapter(self) -> GenerationAdapter:
        # Built on first use so importing the app does not open an HTTP client.
        if self._adapter is None:
            self._adapter = self.adapter_factory()
        return self._adapter

    def create(self) -> QuizSession:
        session = QuizSession(self.adapter)
        self.sessions[session.id] = session
        return session

    def get(self, session_id: str) -> QuizSession:
        session = self.sessions.get(session_id)
        if session is None:
            raise HTTPException(status_code=404, detail="Session not found")
        return session

    async def remove(self, session_id: str) -> None:
        session = self.sessions.pop(session_id, None)
        if session is None:
            raise HTTPException(status_code=404, detail="Session not found")
        await session.close()

    async def close_all(self) -> None:
        for session_id in list(self.sessions):
            await self.remove(session_id)
        if self._adapter is not None:
            await self._adapter.aclose()
            self._adapter = None


def _registry(request: Request) -> SessionRegistry:
    return request.app.state.sessions


def _raise_for_failure(outcome: FetchOutcome) -> None:
    if isinstance(outcome, Failure):
        raise HTTPException(
            status_code=502,
            detail={"kind": outcome.kind.value, "message": outcome.message},
        )


def create_app(adapter_factory: Union[Callable[[], GenerationAdapter], None] = None) -> FastAPI:
    if adapter_factory is None:
        adapter_factory = GenerationConfigLoader().create_adapter

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await app.state.sessions.close_all()

    app = FastAPI(title="quizgen", lifespan=lifespan)
    app.state.sessions = SessionRegistry(adapter_factory)

    @app.get("/api/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.get("/api/options")
    def options() -> dict:
        return {
            "difficulties": [d.value for d in Difficulty],
            "languages": list(SUPPORTED_LANGUAGES),
            "initial_batch_size": INITIAL_BATCH_SIZE,
            "load_more_batch_size": LOAD_MORE_BATCH_SIZE,
        }

    @app.post("/api/sessions")
    async def create_session(request: Request) -> dict:
        session = _registry(request).create()
        return {"session_id": session.id}

    @app.get("/api/sessions/{session_id}")
    async def get_session(session_id: str, request: Request) -> dict:
        return _registry(request).get(session_id).snapshot()

    @app.delete("/api/sessions/{session_id}")
    async def delete_session(session_id: str, request: Request) -> dict:
        await _registry(request).remove(session_id)
        return {"status": "closed"}

    @app.post("/api/sessions/{session_id}/generate")
    async def generate(session_id: str, body: GenerateRequest, request: Request) -> dict:
        session = _registry(request).get(session_id)
        try:
            outcome = await session.generate(body.topic, body.difficulty, body.language)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except FetchInProgressError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        except SessionClosedError as exc:
            raise HTTPException(status_code=410, detail=str(exc)) from exc
        _raise_for_failure(outcome)
        return session.snapshot()

    @app.post("/api/sessions/{session_id}/load-more")
    async def load_more(session_id: str, request: Request) -> dict:
        session = _registry(request).get(session_id)
        before = len(session.merger.questions)
        try:
            outcome = await session.load_more()
        except NoActiveQuizError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except FetchInProgressError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        except SessionClosedError as exc:
            raise HTTPException(status_code=410, detail=str(exc)) from exc
        _raise_for_failure(outcome)
        data = session.snapshot()
        data["added"] = len(session.merger.questions) - before
        return data

    @app.post("/api/sessions/{session_id}/answers")
    async def answer(session_id: str, body: AnswerRequest, request: Request) -> dict:
        session = _registry(request).get(session_id)
        try:
            recorded = session.select_answer(body.index, body.option)
        except (IndexError, ValueError) as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except SessionClosedError as exc:
            raise HTTPException(status_code=410, detail=str(exc)) from exc
        correct, total = session.score()
        return {
            "recorded": recorded,
            "answer": session.merger.answers[body.index],
            "correct_answer": session.merger.questions[body.index].correct_answer,
            "score": {"correct": correct, "total": total},
        }

    return app


app = create_app()
