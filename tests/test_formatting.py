from chapter_quiz.domain import Chapter, Question
from chapter_quiz.services.formatting import (
    escape_md,
    format_feedback,
    format_menu_progress,
    format_question,
    format_summary,
    progress_bar,
)
from chapter_quiz.services.progress_service import ProgressOverview
from chapter_quiz.session import QuizSession, QuizSummary


def test_escape_md():
    assert escape_md("2+2=4. (yes)!") == "2\\+2\\=4\\. \\(yes\\)\\!"
    assert escape_md("a\\b") == "a\\\\b"


def test_progress_bar():
    assert progress_bar(0) == "░" * 10
    assert progress_bar(0.5) == "▓" * 5 + "░" * 5
    assert progress_bar(1.5) == "▓" * 10


def test_menu_progress():
    text = format_menu_progress(ProgressOverview(completed=1, total=4))
    assert "Completed Chapters: 1 / 4 \\(25%\\)" in text


def test_question_text():
    session = QuizSession()
    session.start(Chapter("Intro", [Question("2+2?\nThink twice.", ["3", "4"], 1)]))

    text = format_question(session)

    assert "Question 1 / 1" in text
    assert "*2\\+2?*" in text
    assert text.endswith("Think twice\\.")


def test_feedback():
    session = QuizSession()
    session.start(Chapter("Intro", [Question("2+2?", ["3", "4"], 1)]))
    outcome = session.answer(0)

    assert "Incorrect" in format_feedback(outcome)
    assert "_4_" in format_feedback(outcome)


def test_summary_perfect_and_review():
    chapter = Chapter("Intro", [Question("2+2?", ["3", "4"], 1)])
    perfect = QuizSummary(chapter=chapter, score=1, total=1, missed=())
    assert "Perfect score" in format_summary(perfect)
    assert "*1 / 1*" in format_summary(perfect)

    missed = QuizSummary(chapter=chapter, score=0, total=1, missed=tuple(chapter.questions))
    text = format_summary(missed)
    assert "Review Incorrect Answers" in text
    assert "Correct answer: 4" in text


def test_summary_truncates_long_review():
    questions = tuple(Question(f"q{i}", ["a", "b"], 0) for i in range(25))
    summary = QuizSummary(chapter=Chapter("Big", list(questions)), score=0, total=25, missed=questions)

    assert "…and 5 more" in format_summary(summary)
