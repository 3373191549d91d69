import json
from typing import Any, Optional

from sqlalchemy.orm import sessionmaker

from chapter_quiz.db.models import KeyValue


class KeyValueRepository:
    """Repository for persisted string values addressed by key."""

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def get(self, key: str) -> Optional[str]:
        """Get the raw value for a key, or None if absent."""
        with self._session_factory() as session:
            row = session.get(KeyValue, key)
            return row.value if row else None

    def set(self, key: str, value: str) -> None:
        """Create or overwrite the value for a key."""
        with self._session_factory() as session:
            row = session.get(KeyValue, key)
            if row:
                row.value = value
            else:
                session.add(KeyValue(key=key, value=value))
            session.commit()

    def get_json(self, key: str, default: Any = None) -> Any:
        """Get a decoded JSON value. Absent key returns `default`; bad JSON raises ValueError."""
        raw = self.get(key)
        if raw is None:
            return default
        return json.loads(raw)

    def set_json(self, key: str, data: Any) -> None:
        """Store a value as JSON text."""
        self.set(key, json.dumps(data, ensure_ascii=False))
