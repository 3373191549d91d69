import asyncio
import logging
from typing import Any, Iterable, Optional

from chapter_quiz.domain import Chapter, Question, normalize_name, parse_chapter
from chapter_quiz.errors import LoadError, PartialLoadWarning, QuizError
from chapter_quiz.services.content_source import ContentSource
from chapter_quiz.services.custom_service import CustomLedger

LOAD_ERROR_MESSAGE = (
    "Could not load quiz content. Please ensure 'chapters.json' "
    "and chapter files exist and are correct."
)


def merge_chapter(chapters: list[Chapter], index: dict[str, Chapter], chapter: Chapter) -> Chapter:
    """Fold one chapter into `chapters`, appending to an existing chapter with the same key."""
    existing = index.get(chapter.key)
    if existing is not None:
        existing.questions.extend(q.copy() for q in chapter.questions)
        return existing
    added = chapter.copy()
    chapters.append(added)
    index[added.key] = added
    return added


class ContentRepository:
    """Unified chapter list: base chapters from a content source plus the custom ledger."""

    def __init__(self, source: ContentSource, ledger: CustomLedger) -> None:
        self._source = source
        self._ledger = ledger
        self._chapters: list[Chapter] = []
        self._index: dict[str, Chapter] = {}
        self.warnings: list[PartialLoadWarning] = []
        self.load_error: Optional[str] = None
        self.is_loaded = False

    @property
    def chapters(self) -> list[Chapter]:
        return list(self._chapters)

    async def load(self) -> list[Chapter]:
        """Load base chapters, replay the custom ledger and swap in the result."""
        self._chapters, self._index = [], {}
        self.warnings = []
        self.is_loaded = False
        try:
            chapters, index, warnings = await self._load_all()
        except LoadError as e:
            self.load_error = LOAD_ERROR_MESSAGE
            logging.error(f"Could not load chapter data: {e}")
            raise LoadError(LOAD_ERROR_MESSAGE) from e

        self._chapters, self._index = chapters, index
        self.warnings = warnings
        self.load_error = None
        self.is_loaded = True
        logging.info(
            f"Loaded {len(chapters)} chapters ({len(warnings)} chapter files skipped)"
        )
        return self.chapters

    async def _load_all(self) -> tuple[list[Chapter], dict[str, Chapter], list[PartialLoadWarning]]:
        try:
            identifiers = await self._source.fetch_index()
        except Exception as e:
            raise LoadError(f"index unavailable: {e}") from e
        if not isinstance(identifiers, list) or not all(
            isinstance(i, str) for i in identifiers
        ):
            raise LoadError("index must be an array of chapter file names")

        results = await asyncio.gather(*(self._fetch_one(i) for i in identifiers))

        chapters: list[Chapter] = []
        index: dict[str, Chapter] = {}
        warnings: list[PartialLoadWarning] = []
        for result in results:
            if isinstance(result, PartialLoadWarning):
                logging.warning(str(result))
                warnings.append(result)
                continue
            for chapter in result:
                merge_chapter(chapters, index, chapter)

        try:
            custom_chapters = self._ledger.load()
        except QuizError as e:
            raise LoadError(f"custom questions unreadable: {e}") from e
        for chapter in custom_chapters:
            merge_chapter(chapters, index, chapter)

        return chapters, index, warnings

    async def _fetch_one(self, identifier: str) -> Any:
        """Fetch and parse one chapter file; failures come back as a warning, never raised."""
        try:
            data = await self._source.fetch_chapter(identifier)
            items = data if isinstance(data, list) else [data]
            return [
                parse_chapter(item, f"{identifier}[{i}]") for i, item in enumerate(items)
            ]
        except Exception as e:
            return PartialLoadWarning(identifier, str(e))

    def find_chapter_by_name(self, name: str) -> Optional[Chapter]:
        """Case- and whitespace-insensitive chapter lookup."""
        return self._index.get(normalize_name(name))

    def get_chapter(self, index: int) -> Optional[Chapter]:
        if 0 <= index < len(self._chapters):
            return self._chapters[index]
        return None

    def append_questions(self, name: str, questions: Iterable[Question]) -> Chapter:
        """Mirror new questions into the live list, creating the chapter if needed."""
        return merge_chapter(
            self._chapters, self._index, Chapter(name=name, questions=list(questions))
        )
