from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

INITIAL_BATCH_SIZE = 30
LOAD_MORE_BATCH_SIZE = 10
OPTIONS_PER_QUESTION = 4


class Difficulty(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


SUPPORTED_LANGUAGES = (
    "English",
    "Spanish",
    "French",
    "German",
    "Italian",
    "Portuguese",
    "Hindi",
    "Japanese",
    "Chinese",
)


class ErrorKind(str, Enum):
    NETWORK = "Network"
    MALFORMED_RESPONSE = "MalformedResponse"
    PARSE_ERROR = "ParseError"
    VALIDATION_ERROR = "ValidationError"


@dataclass(frozen=True)
class QuestionRecord:
    question: str
    options: tuple[str, ...]
    correct_answer: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "options", tuple(self.options))

    def to_dict(self) -> dict[str, object]:
        return {
            "question": self.question,
            "options": list(self.options),
            "correctAnswer": self.correct_answer,
        }


@dataclass(frozen=True)
class GenerationRequest:
    topic: str
    difficulty: Difficulty
    language: str
    count: int = INITIAL_BATCH_SIZE

    def __post_init__(self) -> None:
        topic = (self.topic or "").strip()
        if not topic:
            raise ValueError("Topic must not be empty")
        object.__setattr__(self, "topic", topic)
        try:
            difficulty = Difficulty(self.difficulty)
        except ValueError as exc:
            allowed = ", ".join(d.value for d in Difficulty)
            raise ValueError(f"Unknown difficulty '{self.difficulty}' (expected one of: {allowed})") from exc
        object.__setattr__(self, "difficulty", difficulty)
        if self.language not in SUPPORTED_LANGUAGES:
            raise ValueError(
                f"Unsupported language '{self.language}' (expected one of: {', '.join(SUPPORTED_LANGUAGES)})"
            )
        if self.count <= 0:
            raise ValueError("Question count must be positive")

    def with_count(self, count: int) -> "GenerationRequest":
        return GenerationRequest(self.topic, self.difficulty, self.language, count)


@dataclass(frozen=True)
class Success:
    records: list[QuestionRecord]
    dropped: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    kind: ErrorKind
    message: str

    @property
    def ok(self) -> bool:
        return False


FetchOutcome = Union[Success, Failure]


@dataclass
class QuizState:
    questions: list[QuestionRecord] = field(default_factory=list)
    answers: dict[int, str] = field(default_factory=dict)
