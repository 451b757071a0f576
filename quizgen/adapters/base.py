from __future__ import annotations

from typing import Any, Protocol


class GenerationAdapter(Protocol):
    id: str

    async def generate(self, payload: dict[str, Any]) -> Any:
        """POST a generateContent body and return the decoded JSON response."""
        ...

    async def aclose(self) -> None: ...
