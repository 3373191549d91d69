from typing import Optional


class QuizError(Exception):
    """Base class for quiz engine errors."""


class LoadError(QuizError):
    """Quiz content could not be loaded at all."""


class PartialLoadWarning(QuizError, UserWarning):
    """A single chapter file failed to load and was dropped."""

    def __init__(self, identifier: str, reason: str) -> None:
        super().__init__(f"Chapter file {identifier!r} skipped: {reason}")
        self.identifier = identifier
        self.reason = reason


class EmptyChapterError(QuizError):
    """A quiz was started on a chapter without questions."""

    def __init__(self, chapter_name: str) -> None:
        super().__init__(f"Chapter {chapter_name!r} has no questions")
        self.chapter_name = chapter_name


class InvalidStateError(QuizError):
    """A session method was called out of sequence."""


class ValidationError(QuizError, ValueError):
    """Malformed question, chapter or bulk-import data."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        if path:
            message = f"{path}: {message}"
        super().__init__(message)
        self.path = path
