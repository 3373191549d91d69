from aiogram.fsm.state import State, StatesGroup


class QuizState(StatesGroup):
    """FSM states for the quiz bot user flow."""

    selecting_chapter = State()  # User is picking a chapter
    answering = State()  # User is answering quiz questions
    confirming_home = State()  # User pressed Home during a quiz
    finished = State()  # Summary is shown, play again is possible
    adding_questions = State()  # User is sending bulk-import JSON
