"""Smoke coverage for the bot flows with Telegram objects mocked out."""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from aiogram.fsm.context import FSMContext
from aiogram.fsm.storage.base import StorageKey
from aiogram.fsm.storage.memory import MemoryStorage

from chapter_quiz import config
from chapter_quiz.errors import LoadError
from chapter_quiz.handlers import custom, quiz, start
from chapter_quiz.services.progress_service import ProgressTracker
from chapter_quiz.states import QuizState

USER_ID = 555


def _new_state() -> FSMContext:
    storage = MemoryStorage()
    return FSMContext(storage=storage, key=StorageKey(bot_id=99, chat_id=777, user_id=USER_ID))


def _make_message(text: str = "") -> SimpleNamespace:
    return SimpleNamespace(
        text=text,
        from_user=SimpleNamespace(id=USER_ID, username="tester"),
        answer=AsyncMock(),
    )


def _make_callback(data: str) -> SimpleNamespace:
    message = SimpleNamespace(
        edit_text=AsyncMock(),
        edit_reply_markup=AsyncMock(),
        answer=AsyncMock(),
        delete=AsyncMock(),
    )
    return SimpleNamespace(
        data=data,
        from_user=SimpleNamespace(id=USER_ID, username="tester"),
        message=message,
        answer=AsyncMock(),
    )


@pytest.fixture(autouse=True)
def no_delay(monkeypatch):
    monkeypatch.setattr(config, "ANSWER_DELAY", 0)


@pytest.mark.asyncio
async def test_start_shows_progress(repository, store):
    await repository.load()
    ProgressTracker.for_user(store, USER_ID).mark_completed("intro")
    msg = _make_message("/start")

    await start.cmd_start(msg, _new_state(), repository, store)

    text = msg.answer.await_args.args[0]
    assert "Completed Chapters: 1 / 2 \\(50%\\)" in text


@pytest.mark.asyncio
async def test_start_shows_load_error(repository, store, source):
    source.index = OSError("offline")
    with pytest.raises(LoadError):
        await repository.load()
    msg = _make_message("/start")

    await start.cmd_start(msg, _new_state(), repository, store)

    assert "Could not load quiz content" in msg.answer.await_args.args[0]


@pytest.mark.asyncio
async def test_quiz_flow_records_completion(repository, store):
    await repository.load()
    state = _new_state()

    await quiz.choose_chapter(_make_callback("chapter:0"), state, repository)

    assert await state.get_state() == QuizState.answering.state
    session = (await state.get_data())["session"]
    assert session.chapter.name == "Intro"

    cb = _make_callback(f"ans:0:{session.current_question().answer}")
    await quiz.handle_answer(cb, state, store)

    cb.answer.assert_awaited_with("✅ Correct!")
    summary_text = cb.message.answer.await_args_list[-1].args[0]
    assert "*1 / 1*" in summary_text
    assert await state.get_state() == QuizState.finished.state
    assert ProgressTracker.for_user(store, USER_ID).is_completed("INTRO ")


@pytest.mark.asyncio
async def test_stale_answer_rejected(repository, store):
    await repository.load()
    state = _new_state()
    await quiz.choose_chapter(_make_callback("chapter:1"), state, repository)
    await quiz.handle_answer(_make_callback("ans:0:0"), state, store)

    stale = _make_callback("ans:0:1")
    await quiz.handle_answer(stale, state, store)

    session = (await state.get_data())["session"]
    assert session.position == 1
    stale.answer.assert_awaited_with("⚠️ This question is already answered", show_alert=True)


@pytest.mark.asyncio
async def test_skip_and_play_again(repository, store):
    await repository.load()
    state = _new_state()
    await quiz.choose_chapter(_make_callback("chapter:0"), state, repository)

    await quiz.handle_skip(_make_callback("skip:0"), state, store)

    session = (await state.get_data())["session"]
    assert len(session.complete().missed) == 1
    assert await state.get_state() == QuizState.finished.state

    await quiz.play_again(_make_callback("again"), state, repository)

    assert await state.get_state() == QuizState.answering.state
    assert session.position == 0


@pytest.mark.asyncio
async def test_empty_chapter_alert(repository):
    await repository.load()
    repository.append_questions("Empty", [])
    state = _new_state()
    cb = _make_callback("chapter:2")

    await quiz.choose_chapter(cb, state, repository)

    cb.answer.assert_awaited_with("This chapter has no questions.", show_alert=True)
    assert await state.get_state() is None


@pytest.mark.asyncio
async def test_home_confirm_discards_session(repository, store):
    await repository.load()
    state = _new_state()
    await quiz.choose_chapter(_make_callback("chapter:0"), state, repository)

    await quiz.handle_home(_make_callback("home"), state)
    assert await state.get_state() == QuizState.confirming_home.state

    await quiz.confirm_home(_make_callback("home:confirm"), state, repository, store)

    assert await state.get_state() is None
    assert await state.get_data() == {}
    assert not ProgressTracker.for_user(store, USER_ID).is_completed("Intro")


@pytest.mark.asyncio
async def test_bulk_import_messages(repository, custom_store):
    await repository.load()
    state = _new_state()

    empty = _make_message("   ")
    await custom.receive_questions(empty, state, custom_store)
    assert "Textarea is empty" in empty.answer.await_args.args[0]

    good = _make_message('[{"name": "New", "questions": [{"text": "Q?", "options": ["a", "b"], "answer": 0}]}]')
    await custom.receive_questions(good, state, custom_store)
    assert "added successfully" in good.answer.await_args.args[0]
    assert repository.find_chapter_by_name("new") is not None


@pytest.mark.asyncio
async def test_skip_after_last_question_is_rejected(repository, store):
    await repository.load()
    state = _new_state()
    await quiz.choose_chapter(_make_callback("chapter:0"), state, repository)
    session = (await state.get_data())["session"]
    # answered, but the handler has not advanced to the results yet
    session.answer(session.current_question().answer)

    cb = _make_callback("skip:1")
    await quiz.handle_skip(cb, state, store)

    cb.answer.assert_awaited_with("❌ Could not skip this question")
    assert session.position == 1
    assert session.missed == ()
    assert await state.get_state() == QuizState.answering.state
