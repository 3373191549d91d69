"""Shared fixtures: temporary SQLite store, in-memory content source, sample chapters."""

import random

import pytest

from chapter_quiz.db import KeyValueRepository, create_db_engine, init_db
from chapter_quiz.services.content_service import ContentRepository
from chapter_quiz.services.content_source import ContentSource
from chapter_quiz.services.custom_service import CustomContentStore, CustomLedger

INTRO = {
    "name": "Intro",
    "questions": [{"text": "2+2?", "options": ["3", "4"], "answer": 1}],
}

SHELL = {
    "name": "Shell basics",
    "questions": [
        {"text": "List files?", "options": ["cd", "ls", "rm"], "answer": 1},
        {"text": "Current directory?", "options": ["pwd", "whoami"], "answer": 0},
        {"text": "Remove a file?", "options": ["rm", "mv", "cp"], "answer": 0},
        {"text": "Print text?", "options": ["echo", "cat"], "answer": 0},
    ],
}


class FakeContentSource(ContentSource):
    """Serves decoded JSON from dicts; Exception values are raised instead."""

    def __init__(self, index, files=None) -> None:
        self.index = index
        self.files = files or {}
        self.fetched: list[str] = []

    async def fetch_index(self):
        if isinstance(self.index, Exception):
            raise self.index
        return self.index

    async def fetch_chapter(self, identifier):
        self.fetched.append(identifier)
        data = self.files[identifier]
        if isinstance(data, Exception):
            raise data
        return data


@pytest.fixture
def store(tmp_path):
    session_factory = init_db(create_db_engine(tmp_path / "quiz.db"))
    return KeyValueRepository(session_factory)


@pytest.fixture
def ledger(store):
    return CustomLedger(store)


@pytest.fixture
def source():
    return FakeContentSource(
        ["intro.json", "shell.json"],
        {"intro.json": [INTRO], "shell.json": SHELL},
    )


@pytest.fixture
def repository(source, ledger):
    return ContentRepository(source, ledger)


@pytest.fixture
def custom_store(ledger, repository):
    return CustomContentStore(ledger, repository)


@pytest.fixture
def rng():
    return random.Random(1234)
