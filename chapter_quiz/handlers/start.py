from aiogram import Router, F
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from aiogram.types import Message, CallbackQuery

from chapter_quiz.db.repository import KeyValueRepository
from chapter_quiz.keyboards import build_main_menu_keyboard
from chapter_quiz.services.content_service import ContentRepository
from chapter_quiz.services.formatting import escape_md, format_menu_progress
from chapter_quiz.services.progress_service import ProgressTracker

router = Router()


def build_menu_text(repository: ContentRepository, tracker: ProgressTracker) -> str:
    """Main menu text: progress panel, or the load error if content is missing."""
    if repository.load_error:
        return f"⚠️ *Error*\n\n{escape_md(repository.load_error)}"
    overview = tracker.overview(len(repository.chapters))
    return "🧠 *Chapter Quiz*\n\n" + format_menu_progress(overview)


@router.message(Command("start"))
async def cmd_start(
    msg: Message,
    state: FSMContext,
    repository: ContentRepository,
    store: KeyValueRepository,
) -> None:
    """Handle /start command - show the main menu."""
    await state.clear()
    tracker = ProgressTracker.for_user(store, msg.from_user.id)
    await msg.answer(
        build_menu_text(repository, tracker),
        reply_markup=build_main_menu_keyboard(),
        parse_mode="MarkdownV2",
    )


@router.callback_query(F.data == "menu:home")
async def back_to_menu(
    cb: CallbackQuery,
    state: FSMContext,
    repository: ContentRepository,
    store: KeyValueRepository,
) -> None:
    """Handle Back to menu buttons."""
    await state.clear()
    tracker = ProgressTracker.for_user(store, cb.from_user.id)
    await cb.message.edit_text(
        build_menu_text(repository, tracker),
        reply_markup=build_main_menu_keyboard(),
        parse_mode="MarkdownV2",
    )
    await cb.answer()
