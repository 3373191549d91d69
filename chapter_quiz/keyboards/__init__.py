from chapter_quiz.keyboards.builders import (
    build_main_menu_keyboard,
    build_back_keyboard,
    build_chapters_keyboard,
    build_answers_keyboard,
    build_confirm_home_keyboard,
    build_complete_keyboard,
)

__all__ = [
    "build_main_menu_keyboard",
    "build_back_keyboard",
    "build_chapters_keyboard",
    "build_answers_keyboard",
    "build_confirm_home_keyboard",
    "build_complete_keyboard",
]
