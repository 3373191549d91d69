"""
Chapter and question types, plus parsing of raw JSON data into them.

Raw data always has the shape used by chapter files and the custom ledger:

    {"name": "Intro", "questions": [{"text": "2+2?", "options": ["3", "4"], "answer": 1}]}
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from chapter_quiz.errors import ValidationError


def normalize_name(name: str) -> str:
    """Chapter identity key: trimmed and lower-cased."""
    return name.strip().lower()


@dataclass
class Question:
    """Multiple-choice question. `answer` indexes into `options`."""

    text: str
    options: list[str]
    answer: int

    @property
    def correct_option(self) -> str:
        return self.options[self.answer]

    def copy(self) -> "Question":
        return Question(text=self.text, options=list(self.options), answer=self.answer)

    def to_dict(self) -> dict:
        return {"text": self.text, "options": list(self.options), "answer": self.answer}


@dataclass
class Chapter:
    """Named collection of questions."""

    name: str
    questions: list[Question] = field(default_factory=list)

    @property
    def key(self) -> str:
        return normalize_name(self.name)

    def copy(self) -> "Chapter":
        return Chapter(name=self.name, questions=[q.copy() for q in self.questions])

    def to_dict(self) -> dict:
        return {"name": self.name, "questions": [q.to_dict() for q in self.questions]}


def parse_question(data: Any, path: Optional[str] = None) -> Question:
    """Build a Question from a mapping, enforcing the question invariant."""
    if isinstance(data, Question):
        data = data.to_dict()
    if not isinstance(data, dict):
        raise ValidationError("question must be an object", path)

    text = data.get("text")
    if not isinstance(text, str) or not text.strip():
        raise ValidationError("question text must be a non-empty string", path)

    options = data.get("options")
    if not isinstance(options, list) or len(options) < 2:
        raise ValidationError("question needs at least 2 options", path)
    if not all(isinstance(option, str) for option in options):
        raise ValidationError("options must be strings", path)

    answer = data.get("answer")
    # bool is an int subclass, but `true` is not a valid index
    if not isinstance(answer, int) or isinstance(answer, bool):
        raise ValidationError("answer must be an integer index", path)
    if not 0 <= answer < len(options):
        raise ValidationError(
            f"answer {answer} is out of range for {len(options)} options", path
        )

    return Question(text=text, options=list(options), answer=answer)


def check_chapter_shape(data: Any, path: Optional[str] = None) -> None:
    """Check the top-level `{name, questions[]}` shape without looking inside questions."""
    if not isinstance(data, dict):
        raise ValidationError("chapter must be an object", path)
    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("chapter needs a non-empty 'name'", path)
    if not isinstance(data.get("questions"), list):
        raise ValidationError("chapter needs a 'questions' array", path)


def parse_chapter(data: Any, path: Optional[str] = None) -> Chapter:
    """Build a Chapter from a mapping; every question must be valid."""
    check_chapter_shape(data, path)
    prefix = f"{path}." if path else ""
    questions = [
        parse_question(item, f"{prefix}questions[{i}]")
        for i, item in enumerate(data["questions"])
    ]
    return Chapter(name=data["name"], questions=questions)
