import re

from chapter_quiz.services.progress_service import ProgressOverview
from chapter_quiz.session import AnswerOutcome, QuizSession, QuizSummary

BAR_WIDTH = 10
# Longer summaries hit Telegram's message size limit
MAX_REVIEW_ITEMS = 20


def escape_md(text: str) -> str:
    """Escape special characters for MarkdownV2."""
    return re.sub(r"([_*\[\]()~`>#+\-=|{}.!\\])", r"\\\1", text)


def progress_bar(fraction: float, width: int = BAR_WIDTH) -> str:
    filled = max(0, min(width, round(fraction * width)))
    return "▓" * filled + "░" * (width - filled)


def format_menu_progress(overview: ProgressOverview) -> str:
    return (
        "*Your Progress*\n"
        f"Completed Chapters: {overview.completed} / {overview.total} "
        f"\\({overview.percentage}%\\)\n"
        f"{progress_bar(overview.percentage / 100)}"
    )


def format_question(session: QuizSession) -> str:
    question = session.current_question()
    lines = question.text.strip().splitlines()
    text = (
        f"❓ _Question {session.position + 1} / {session.total}_\n"
        f"Score: *{session.score}*\n"
        f"{progress_bar(session.progress())}\n\n"
        f"*{escape_md(lines[0])}*"
    )
    if len(lines) > 1:
        text += "\n" + "\n".join(escape_md(line) for line in lines[1:])
    return text


def format_feedback(outcome: AnswerOutcome) -> str:
    if outcome.is_correct:
        return "✅ *Correct\\!*"
    return f"❌ *Incorrect\\.*\nCorrect answer: _{escape_md(outcome.correct_option)}_"


def format_summary(summary: QuizSummary) -> str:
    text = (
        f"🏁 *Quiz complete\\!*\n\n"
        f"📚 {escape_md(summary.chapter.name)}\n"
        f"✨ Final score: *{summary.score} / {summary.total}*\n\n"
    )
    if not summary.missed:
        return text + "Perfect score\\! No incorrect answers to review\\."

    lines = [
        f"*{escape_md(q.text.strip().splitlines()[0])}*\n"
        f"   _Correct answer: {escape_md(q.correct_option)}_"
        for q in summary.missed[:MAX_REVIEW_ITEMS]
    ]
    text += "*Review Incorrect Answers*\n\n" + "\n\n".join(lines)
    hidden = len(summary.missed) - MAX_REVIEW_ITEMS
    if hidden > 0:
        text += f"\n\n_…and {hidden} more_"
    return text
