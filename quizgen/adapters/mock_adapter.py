from __future__ import annotations

import json
import re
from typing import Any

_COUNT_RE = re.compile(r"Generate (\d+) multiple-choice questions about the topic: (.*)", re.DOTALL)


class MockAdapter:
    """Simple adapter that returns canned question batches for testing."""

    def __init__(self, model: str = "mock") -> None:
        self.id = f"mock:{model}"
        self.calls: list[dict[str, Any]] = []

    async def generate(self, payload: dict[str, Any]) -> Any:
        self.calls.append(payload)
        query = payload["contents"][0]["parts"][0]["text"]
        match = _COUNT_RE.search(query)
        count = int(match.group(1)) if match else 1
        topic = match.group(2).strip() if match else "general knowledge"
        offset = (len(self.calls) - 1) * 1000
        questions = [
            {
                "question": f"Mock question {offset + i + 1} about {topic}?",
                "options": ["Alpha", "Bravo", "Charlie", "Delta"],
                "correctAnswer": "Bravo",
            }
            for i in range(count)
        ]
        return {"candidates": [{"content": {"parts": [{"text": json.dumps(questions)}]}}]}

    async def aclose(self) -> None:
        return None
