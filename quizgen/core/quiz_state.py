from __future__ import annotations

import logging
from typing import Any, Union

from .types import Failure, FetchOutcome, QuestionRecord, QuizState

logger = logging.getLogger(__name__)


class QuizStateMerger:
    """Owns a QuizState and applies fetch outcomes to it."""

    def __init__(self, state: Union[QuizState, None] = None) -> None:
        self.state = state if state is not None else QuizState()

    @property
    def questions(self) -> list[QuestionRecord]:
        return self.state.questions

    @property
    def answers(self) -> dict[int, str]:
        return self.state.answers

    def apply_generate(self, outcome: FetchOutcome) -> Union[Failure, None]:
        """Replace the quiz with a new batch; a failure leaves it untouched."""
        if isinstance(outcome, Failure):
            return outcome
        self.state.questions = list(outcome.records)
        self.state.answers = {}
        return None

    def apply_load_more(self, outcome: FetchOutcome) -> Union[Failure, None]:
        """Append a batch after the existing questions; a failure leaves it untouched."""
        if isinstance(outcome, Failure):
            return outcome
        self.state.questions.extend(outcome.records)
        return None

    def record_answer(self, index: int, selected_option: str) -> bool:
        """Record the first answer for a question. Later answers are ignored."""
        if not 0 <= index < len(self.state.questions):
            raise IndexError(f"No question at index {index}")
        if index in self.state.answers:
            logger.debug("Question %d already answered; ignoring %r", index, selected_option)
            return False
        if selected_option not in self.state.questions[index].options:
            raise ValueError(f"{selected_option!r} is not an option for question {index}")
        self.state.answers[index] = selected_option
        return True

    def score(self) -> tuple[int, int]:
        correct = sum(
            1
            for idx, answer in self.state.answers.items()
            if idx < len(self.state.questions) and answer == self.state.questions[idx].correct_answer
        )
        return correct, len(self.state.questions)

    def snapshot(self) -> dict[str, Any]:
        correct, total = self.score()
        return {
            "questions": [q.to_dict() for q in self.state.questions],
            "answers": {str(idx): answer for idx, answer in sorted(self.state.answers.items())},
            "score": {"correct": correct, "total": total},
        }
