from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton

from chapter_quiz.domain import Chapter, Question

# Telegram limits button text length
MAX_BUTTON_TEXT = 60


def _button_text(text: str) -> str:
    if len(text) <= MAX_BUTTON_TEXT:
        return text
    return text[: MAX_BUTTON_TEXT - 1] + "…"


def build_main_menu_keyboard() -> InlineKeyboardMarkup:
    """Build keyboard for the main menu."""
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [InlineKeyboardButton(text="Start quiz", callback_data="menu:chapters")],
            [InlineKeyboardButton(text="Add questions", callback_data="menu:add")],
        ]
    )


def build_back_keyboard() -> InlineKeyboardMarkup:
    """Build keyboard with a single way back to the menu."""
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [InlineKeyboardButton(text="Back to menu", callback_data="menu:home")]
        ]
    )


def build_chapters_keyboard(
    chapters: list[Chapter], completed: set[str]
) -> InlineKeyboardMarkup:
    """Build keyboard for chapter selection; `completed` holds normalized names."""
    rows = []
    for index, chapter in enumerate(chapters):
        status_icon = "✓ " if chapter.key in completed else ""
        label = f"{status_icon}{index + 1}. {chapter.name} · {len(chapter.questions)} questions"
        rows.append(
            [InlineKeyboardButton(text=_button_text(label), callback_data=f"chapter:{index}")]
        )
    rows.append([InlineKeyboardButton(text="Back to menu", callback_data="menu:home")])
    return InlineKeyboardMarkup(inline_keyboard=rows)


def build_answers_keyboard(question: Question, position: int) -> InlineKeyboardMarkup:
    """
    Build keyboard for answer options plus Skip and Home.

    Callback data carries the queue position so presses on an old question
    can be told apart from the current one.
    """
    rows = [
        [
            InlineKeyboardButton(
                text=_button_text(option), callback_data=f"ans:{position}:{i}"
            )
        ]
        for i, option in enumerate(question.options)
    ]
    rows.append(
        [
            InlineKeyboardButton(text="Skip", callback_data=f"skip:{position}"),
            InlineKeyboardButton(text="Home", callback_data="home"),
        ]
    )
    return InlineKeyboardMarkup(inline_keyboard=rows)


def build_confirm_home_keyboard() -> InlineKeyboardMarkup:
    """Build keyboard for the end-quiz confirmation."""
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [
                InlineKeyboardButton(text="End quiz", callback_data="home:confirm"),
                InlineKeyboardButton(text="Cancel", callback_data="home:cancel"),
            ]
        ]
    )


def build_complete_keyboard() -> InlineKeyboardMarkup:
    """Build keyboard shown under the quiz summary."""
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [InlineKeyboardButton(text="Play again", callback_data="again")],
            [InlineKeyboardButton(text="Back to menu", callback_data="menu:home")],
        ]
    )
