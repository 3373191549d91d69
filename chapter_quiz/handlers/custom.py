import logging

from aiogram import Router, F
from aiogram.fsm.context import FSMContext
from aiogram.types import Message, CallbackQuery

from chapter_quiz.errors import ValidationError
from chapter_quiz.keyboards import build_back_keyboard
from chapter_quiz.services.custom_service import CustomContentStore
from chapter_quiz.services.formatting import escape_md
from chapter_quiz.states import QuizState

router = Router()

ADD_QUESTIONS_PROMPT = (
    "📝 *Add questions*\n\n"
    "Send a JSON array of chapters\\. Questions for a chapter that already "
    "exists are added to it\\.\n\n"
    "```json\n"
    '[{"name": "Intro", "questions": [\n'
    '  {"text": "2+2?", "options": ["3", "4"], "answer": 1}\n'
    "]}]\n"
    "```"
)


@router.callback_query(F.data == "menu:add")
async def prompt_questions(cb: CallbackQuery, state: FSMContext) -> None:
    """Ask the user for bulk-import JSON."""
    await state.set_state(QuizState.adding_questions)
    await cb.message.edit_text(
        ADD_QUESTIONS_PROMPT,
        reply_markup=build_back_keyboard(),
        parse_mode="MarkdownV2",
    )
    await cb.answer()


@router.message(QuizState.adding_questions)
async def receive_questions(
    msg: Message, state: FSMContext, custom_store: CustomContentStore
) -> None:
    """Process a bulk-import message. Stays in this state so more can be sent."""
    try:
        added = custom_store.import_text(msg.text or "")
    except ValidationError as e:
        logging.info(f"Bulk import from {msg.from_user.id} rejected: {e}")
        await msg.answer(
            f"❌ Error: {escape_md(str(e))}",
            reply_markup=build_back_keyboard(),
            parse_mode="MarkdownV2",
        )
        return

    await msg.answer(
        f"✅ Bulk questions added successfully\\! \\({added} questions\\)",
        reply_markup=build_back_keyboard(),
        parse_mode="MarkdownV2",
    )
