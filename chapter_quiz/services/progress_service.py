import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from chapter_quiz.db.repository import KeyValueRepository
from chapter_quiz.domain import normalize_name
from chapter_quiz.session import QuizSession, QuizSummary, SessionStatus

PROGRESS_KEY = "chapter_progress"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ProgressOverview:
    completed: int
    total: int

    @property
    def percentage(self) -> int:
        return round(self.completed / self.total * 100) if self.total else 0


class ProgressTracker:
    """Chapter completion records, keyed by normalized chapter name."""

    def __init__(
        self,
        store: KeyValueRepository,
        key: str = PROGRESS_KEY,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._key = key
        self._clock = clock

    @classmethod
    def for_user(cls, store: KeyValueRepository, user_id: int) -> "ProgressTracker":
        """Tracker with a separate record per Telegram user."""
        return cls(store, key=f"{PROGRESS_KEY}:{user_id}")

    def _read(self) -> dict:
        try:
            data = self._store.get_json(self._key, default={})
        except ValueError as e:
            logging.warning(f"Progress record {self._key!r} is corrupt, starting fresh: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def mark_completed(self, chapter_name: str) -> None:
        """Mark a chapter completed now. Calling again refreshes the timestamp."""
        progress = self._read()
        progress[normalize_name(chapter_name)] = {
            "completed": True,
            "completedAt": self._clock().isoformat(),
        }
        self._store.set_json(self._key, progress)

    def _entry(self, chapter_name: str) -> Optional[dict]:
        entry = self._read().get(normalize_name(chapter_name))
        return entry if isinstance(entry, dict) else None

    def is_completed(self, chapter_name: str) -> bool:
        entry = self._entry(chapter_name)
        return bool(entry and entry.get("completed"))

    def completed_at(self, chapter_name: str) -> Optional[str]:
        entry = self._entry(chapter_name)
        return entry.get("completedAt") if entry else None

    def completed_count(self) -> int:
        return sum(
            1
            for entry in self._read().values()
            if isinstance(entry, dict) and entry.get("completed")
        )

    def overview(self, total_chapters: int) -> ProgressOverview:
        return ProgressOverview(completed=self.completed_count(), total=total_chapters)


def complete_and_record(session: QuizSession, tracker: ProgressTracker) -> QuizSummary:
    """Complete the session and mark its chapter completed, only on the first call."""
    first_time = session.status is not SessionStatus.COMPLETE
    summary = session.complete()
    if first_time:
        tracker.mark_completed(summary.chapter.name)
        logging.info(
            f"Chapter {summary.chapter.name!r} completed: {summary.score}/{summary.total}"
        )
    return summary
