import json
from typing import Any


def strip_code_fence(text: str) -> str:
    """Return the body of a ```json fenced block, or the trimmed text."""
    trimmed = text.strip()
    if trimmed.startswith("```"):
        end = trimmed.find("```", 3)
        if end != -1:
            lines = trimmed[3:end].splitlines()
            if lines and lines[0].strip().lower() in ("json", ""):
                lines = lines[1:]
            return "\n".join(lines).strip()
    return trimmed


def parse_question_array(text: str) -> list[Any]:
    """Parse generated text as a JSON array.

    Raises ValueError when the text is not JSON or not an array.
    """
    try:
        data = json.loads(strip_code_fence(text))
    except json.JSONDecodeError as exc:
        raise ValueError(f"generated text is not valid JSON: {exc.msg} (line {exc.lineno}, column {exc.colno})") from exc
    if not isinstance(data, list):
        raise ValueError(f"expected a JSON array of questions, got {type(data).__name__}")
    return data
