import json
import logging
from typing import TYPE_CHECKING, Any, Union

from chapter_quiz.db.repository import KeyValueRepository
from chapter_quiz.domain import (
    Chapter,
    Question,
    check_chapter_shape,
    normalize_name,
    parse_chapter,
    parse_question,
)
from chapter_quiz.errors import ValidationError

if TYPE_CHECKING:  # content_service imports this module
    from chapter_quiz.services.content_service import ContentRepository

CUSTOM_QUESTIONS_KEY = "custom_quiz_questions"


class CustomLedger:
    """Persisted list of user-added chapters, independent of base content."""

    def __init__(self, store: KeyValueRepository, key: str = CUSTOM_QUESTIONS_KEY) -> None:
        self._store = store
        self._key = key

    def load(self) -> list[Chapter]:
        """Read the ledger. Absent key is an empty ledger; corrupt data raises ValidationError."""
        try:
            data = self._store.get_json(self._key, default=[])
        except ValueError as e:
            raise ValidationError(f"stored custom questions are not valid JSON: {e}") from e
        if not isinstance(data, list):
            raise ValidationError("stored custom questions must be an array")
        return [parse_chapter(item, f"ledger[{i}]") for i, item in enumerate(data)]

    def append(self, additions: list[tuple[str, list[Question]]]) -> None:
        """Append already-validated questions, one write for the whole batch."""
        chapters = self.load()
        index = {chapter.key: chapter for chapter in chapters}
        for name, questions in additions:
            chapter = index.get(normalize_name(name))
            if chapter is None:
                chapter = Chapter(name=name)
                chapters.append(chapter)
                index[chapter.key] = chapter
            chapter.questions.extend(q.copy() for q in questions)
        self._store.set_json(self._key, [chapter.to_dict() for chapter in chapters])


class CustomContentStore:
    """Adds custom questions to the ledger and mirrors them into the live repository."""

    def __init__(self, ledger: CustomLedger, repository: "ContentRepository") -> None:
        self._ledger = ledger
        self._repository = repository

    def add_question(self, chapter_name: str, question: Union[Question, dict]) -> Question:
        """Validate and append a single question."""
        if not isinstance(chapter_name, str) or not chapter_name.strip():
            raise ValidationError("chapter name must be a non-empty string")
        parsed = parse_question(question)
        self._apply([(chapter_name, [parsed])])
        return parsed

    def add_bulk(self, chapters: Any) -> int:
        """Validate a whole batch of `{name, questions[]}` entries, then append all of it."""
        if not isinstance(chapters, list):
            raise ValidationError("Invalid format. Must be an array of chapters.")
        for i, entry in enumerate(chapters):
            check_chapter_shape(entry, f"chapters[{i}]")

        additions = [
            (chapter.name, chapter.questions)
            for chapter in (
                parse_chapter(entry, f"chapters[{i}]") for i, entry in enumerate(chapters)
            )
            if chapter.questions
        ]
        self._apply(additions)
        return sum(len(questions) for _, questions in additions)

    def import_text(self, text: str) -> int:
        """Bulk import from the JSON text format."""
        if not text or not text.strip():
            raise ValidationError("Textarea is empty.")
        try:
            data = json.loads(text)
        except ValueError as e:
            raise ValidationError(f"Invalid JSON: {e}") from e
        return self.add_bulk(data)

    def _apply(self, additions: list[tuple[str, list[Question]]]) -> None:
        self._ledger.append(additions)
        for name, questions in additions:
            self._repository.append_questions(name, questions)
            logging.info(f"Added {len(questions)} custom questions to {name!r}")
