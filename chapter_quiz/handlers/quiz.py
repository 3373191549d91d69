import asyncio
import logging
from typing import Optional

from aiogram import Router, F
from aiogram.fsm.context import FSMContext
from aiogram.types import Message, CallbackQuery
from aiogram.exceptions import TelegramBadRequest

from chapter_quiz import config
from chapter_quiz.db.repository import KeyValueRepository
from chapter_quiz.domain import Chapter
from chapter_quiz.errors import EmptyChapterError, InvalidStateError, ValidationError
from chapter_quiz.handlers.start import build_menu_text
from chapter_quiz.keyboards import (
    build_answers_keyboard,
    build_back_keyboard,
    build_chapters_keyboard,
    build_complete_keyboard,
    build_confirm_home_keyboard,
    build_main_menu_keyboard,
)
from chapter_quiz.services.content_service import ContentRepository
from chapter_quiz.services.formatting import (
    escape_md,
    format_feedback,
    format_question,
    format_summary,
)
from chapter_quiz.services.progress_service import ProgressTracker, complete_and_record
from chapter_quiz.session import QuizSession
from chapter_quiz.states import QuizState

router = Router()


def _parse_callback(data: str) -> Optional[list[int]]:
    """Parse `prefix:<int>[:<int>...]` callback data, None if malformed."""
    try:
        return [int(part) for part in data.split(":")[1:]]
    except ValueError:
        return None


async def _get_session(state: FSMContext) -> Optional[QuizSession]:
    data = await state.get_data()
    return data.get("session")


@router.callback_query(F.data == "menu:chapters")
async def show_chapters(
    cb: CallbackQuery,
    state: FSMContext,
    repository: ContentRepository,
    store: KeyValueRepository,
) -> None:
    """Show the chapter list."""
    chapters = repository.chapters
    await state.set_state(QuizState.selecting_chapter)

    if not chapters:
        await cb.message.edit_text(
            "No chapters found\\. Try adding some custom questions\\!",
            reply_markup=build_back_keyboard(),
            parse_mode="MarkdownV2",
        )
        await cb.answer()
        return

    tracker = ProgressTracker.for_user(store, cb.from_user.id)
    completed = {c.key for c in chapters if tracker.is_completed(c.name)}
    await cb.message.edit_text(
        "📚 *Choose a chapter:*",
        reply_markup=build_chapters_keyboard(chapters, completed),
        parse_mode="MarkdownV2",
    )
    await cb.answer()


@router.callback_query(F.data.startswith("chapter:"))
async def choose_chapter(
    cb: CallbackQuery, state: FSMContext, repository: ContentRepository
) -> None:
    """Handle chapter selection and start quiz."""
    parsed = _parse_callback(cb.data)
    chapter = repository.get_chapter(parsed[0]) if parsed else None
    if chapter is None:
        await cb.answer("⚠️ Chapter not found", show_alert=True)
        return

    await start_quiz(cb, state, chapter, QuizSession())


async def start_quiz(
    cb: CallbackQuery, state: FSMContext, chapter: Chapter, session: QuizSession
) -> None:
    """Start (or restart) `session` on `chapter` and send the first question."""
    try:
        session.start(chapter)
    except EmptyChapterError:
        await cb.answer("This chapter has no questions.", show_alert=True)
        return

    await state.update_data(session=session)
    await state.set_state(QuizState.answering)

    await cb.message.edit_text(
        f"📚 *{escape_md(chapter.name)}*\n"
        f"Questions: {session.total}\n\n"
        "Let's go\\!",
        parse_mode="MarkdownV2",
    )
    await ask_question(cb.message, session)
    await cb.answer()


async def ask_question(msg: Message, session: QuizSession) -> None:
    """Send the current question to the user."""
    question = session.current_question()
    keyboard = build_answers_keyboard(question, session.position)
    try:
        await msg.answer(
            format_question(session), reply_markup=keyboard, parse_mode="MarkdownV2"
        )
    except TelegramBadRequest as e:
        logging.warning(f"Error sending question: {e}")
        # Fallback to plain text
        await msg.answer(question.text[:4000], reply_markup=keyboard)


async def advance(
    msg: Message,
    state: FSMContext,
    session: QuizSession,
    user_id: int,
    store: KeyValueRepository,
) -> None:
    """Send the next question, or the results once the queue is exhausted."""
    if session.is_finished():
        await show_results(msg, state, session, user_id, store)
    else:
        await ask_question(msg, session)


async def show_results(
    msg: Message,
    state: FSMContext,
    session: QuizSession,
    user_id: int,
    store: KeyValueRepository,
) -> None:
    """Show quiz results and record chapter completion."""
    summary = complete_and_record(session, ProgressTracker.for_user(store, user_id))

    await msg.answer(
        format_summary(summary),
        reply_markup=build_complete_keyboard(),
        parse_mode="MarkdownV2",
    )
    # Keep the session for Play again
    await state.set_state(QuizState.finished)


@router.callback_query(QuizState.answering, F.data.startswith("ans:"))
async def handle_answer(
    cb: CallbackQuery, state: FSMContext, store: KeyValueRepository
) -> None:
    """Handle user's answer."""
    session = await _get_session(state)
    parsed = _parse_callback(cb.data)
    if session is None or not parsed or len(parsed) != 2:
        logging.error(f"Invalid callback format: {cb.data}")
        await cb.answer("❌ Could not process the answer")
        return

    position, option = parsed
    # Check if this is the current question
    if position != session.position:
        await cb.answer("⚠️ This question is already answered", show_alert=True)
        return

    try:
        outcome = session.answer(option)
    except (InvalidStateError, ValidationError) as e:
        logging.warning(f"Rejected answer {cb.data}: {e}")
        await cb.answer("❌ Could not process the answer")
        return

    await cb.answer("✅ Correct!" if outcome.is_correct else "❌ Incorrect")
    try:
        await cb.message.edit_reply_markup(reply_markup=None)
    except TelegramBadRequest as e:
        logging.warning(f"Could not remove answer buttons: {e}")
    await cb.message.answer(format_feedback(outcome), parse_mode="MarkdownV2")

    await asyncio.sleep(config.ANSWER_DELAY)

    # The user may have left the quiz while the feedback was shown
    if await state.get_state() != QuizState.answering.state:
        return
    if await _get_session(state) is not session:
        return
    await advance(cb.message, state, session, cb.from_user.id, store)


@router.callback_query(QuizState.answering, F.data.startswith("skip:"))
async def handle_skip(
    cb: CallbackQuery, state: FSMContext, store: KeyValueRepository
) -> None:
    """Skip the current question; it goes to the review list."""
    session = await _get_session(state)
    parsed = _parse_callback(cb.data)
    if session is None or not parsed or parsed[0] != session.position:
        await cb.answer("⚠️ This question is already answered", show_alert=True)
        return

    try:
        session.skip()
    except InvalidStateError as e:
        logging.warning(f"Rejected skip {cb.data}: {e}")
        await cb.answer("❌ Could not skip this question")
        return

    await cb.answer("⏭ Skipped")
    try:
        await cb.message.edit_reply_markup(reply_markup=None)
    except TelegramBadRequest as e:
        logging.warning(f"Could not remove answer buttons: {e}")
    await advance(cb.message, state, session, cb.from_user.id, store)


@router.callback_query(QuizState.answering, F.data == "home")
async def handle_home(cb: CallbackQuery, state: FSMContext) -> None:
    """Ask before abandoning the quiz."""
    await state.set_state(QuizState.confirming_home)
    await cb.message.answer(
        "End quiz and return home? Progress will be lost.",
        reply_markup=build_confirm_home_keyboard(),
    )
    await cb.answer()


@router.callback_query(QuizState.confirming_home, F.data == "home:confirm")
async def confirm_home(
    cb: CallbackQuery,
    state: FSMContext,
    repository: ContentRepository,
    store: KeyValueRepository,
) -> None:
    """Discard the session and go back to the main menu."""
    await state.clear()
    tracker = ProgressTracker.for_user(store, cb.from_user.id)
    await cb.message.edit_text(
        build_menu_text(repository, tracker),
        reply_markup=build_main_menu_keyboard(),
        parse_mode="MarkdownV2",
    )
    await cb.answer()


@router.callback_query(QuizState.confirming_home, F.data == "home:cancel")
async def cancel_home(
    cb: CallbackQuery, state: FSMContext, store: KeyValueRepository
) -> None:
    """Continue the quiz where it was."""
    session = await _get_session(state)
    await state.set_state(QuizState.answering)
    await cb.message.delete()
    await cb.answer()
    if session is not None:
        await advance(cb.message, state, session, cb.from_user.id, store)


@router.callback_query(QuizState.finished, F.data == "again")
async def play_again(
    cb: CallbackQuery, state: FSMContext, repository: ContentRepository
) -> None:
    """Restart the finished session on the same chapter."""
    session = await _get_session(state)
    if session is None or session.chapter is None:
        await cb.answer("⚠️ Nothing to restart. Press /start", show_alert=True)
        return

    chapter = repository.find_chapter_by_name(session.chapter.name) or session.chapter
    await start_quiz(cb, state, chapter, session)


@router.callback_query()
async def unknown_callback(cb: CallbackQuery) -> None:
    """Handle unknown callbacks."""
    await cb.answer(
        "⚠️ This action is outdated or the session has ended. Press /start",
        show_alert=True,
    )
