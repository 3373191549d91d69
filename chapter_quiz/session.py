"""
Quiz session state machine.

    IDLE --start()--> ACTIVE --(answer/skip until finished)--> complete() --> COMPLETE

A session works on its own shuffled copy of the chapter's questions, so
nothing done during a quiz touches stored chapter data. The session does not
record progress; its owner does that with the summary returned by complete().
"""

import random
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from chapter_quiz.domain import Chapter, Question
from chapter_quiz.errors import EmptyChapterError, InvalidStateError, ValidationError


class SessionStatus(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    COMPLETE = "complete"


@dataclass(frozen=True)
class AnswerOutcome:
    question: Question
    selected: int
    is_correct: bool

    @property
    def correct_option(self) -> str:
        return self.question.correct_option


@dataclass(frozen=True)
class QuizSummary:
    chapter: Chapter
    score: int
    total: int
    missed: tuple[Question, ...]

    @property
    def percentage(self) -> int:
        return round(self.score / self.total * 100) if self.total else 0


class QuizSession:
    """One pass through a chapter's questions in random order."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()
        self.status = SessionStatus.IDLE
        self.chapter: Optional[Chapter] = None
        self._queue: list[Question] = []
        self.position = 0
        self.score = 0
        self._missed: list[Question] = []
        self.total = 0
        self._summary: Optional[QuizSummary] = None

    @property
    def queue(self) -> tuple[Question, ...]:
        return tuple(self._queue)

    @property
    def missed(self) -> tuple[Question, ...]:
        return tuple(self._missed)

    def start(self, chapter: Chapter) -> None:
        """Begin a quiz on `chapter`. Also used to play a finished session again."""
        if self.status is SessionStatus.ACTIVE:
            raise InvalidStateError("a quiz is already in progress")
        if not chapter.questions:
            raise EmptyChapterError(chapter.name)

        queue = [q.copy() for q in chapter.questions]
        self._rng.shuffle(queue)

        self.chapter = chapter
        self._queue = queue
        self.position = 0
        self.score = 0
        self._missed = []
        self.total = len(queue)
        self._summary = None
        self.status = SessionStatus.ACTIVE

    def current_question(self) -> Optional[Question]:
        if self.position >= len(self._queue):
            return None
        return self._queue[self.position]

    def _require_question(self) -> Question:
        question = self.current_question()
        if self.status is not SessionStatus.ACTIVE or question is None:
            raise InvalidStateError("no current question")
        return question

    def answer(self, selected_index: int) -> AnswerOutcome:
        """Record an answer for the current question and advance."""
        question = self._require_question()
        if (
            not isinstance(selected_index, int)
            or isinstance(selected_index, bool)
            or not 0 <= selected_index < len(question.options)
        ):
            raise ValidationError(f"no option with index {selected_index!r}")

        is_correct = selected_index == question.answer
        if is_correct:
            self.score += 1
        else:
            self._missed.append(question)
        self.position += 1
        return AnswerOutcome(question=question, selected=selected_index, is_correct=is_correct)

    def skip(self) -> Question:
        """Skip the current question; it is kept for review like a wrong answer."""
        question = self._require_question()
        self._missed.append(question)
        self.position += 1
        return question

    def is_finished(self) -> bool:
        return self.position >= len(self._queue)

    def progress(self) -> float:
        return self.position / self.total if self.total else 0.0

    def complete(self) -> QuizSummary:
        """Finish the quiz. Repeated calls return the same summary."""
        if self._summary is not None:
            return self._summary
        if self.status is not SessionStatus.ACTIVE or not self.is_finished():
            raise InvalidStateError("quiz is not finished yet")

        self._summary = QuizSummary(
            chapter=self.chapter,
            score=self.score,
            total=self.total,
            missed=tuple(self._missed),
        )
        self.status = SessionStatus.COMPLETE
        return self._summary
