from chapter_quiz.db.models import KeyValue, create_db_engine, init_db
from chapter_quiz.db.repository import KeyValueRepository

__all__ = ["KeyValue", "create_db_engine", "init_db", "KeyValueRepository"]
