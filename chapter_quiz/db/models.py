from pathlib import Path
from typing import Union

from sqlalchemy import create_engine, Column, String, Text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


class KeyValue(Base):
    """String key-value pair surviving restarts (ledger, progress records)."""

    __tablename__ = "kv_store"

    key = Column(String(200), primary_key=True)
    # JSON text
    value = Column(Text, nullable=False)


def create_db_engine(db_path: Union[str, Path]) -> Engine:
    """Create an SQLite engine for the given database file."""
    return create_engine(f"sqlite:///{db_path}", echo=False)


def init_db(engine: Engine) -> sessionmaker:
    """Create tables and return a session factory bound to the engine."""
    if engine.url.database:
        Path(engine.url.database).parent.mkdir(parents=True, exist_ok=True)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
