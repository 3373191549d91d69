from aiogram import Router

from chapter_quiz.handlers.start import router as start_router
from chapter_quiz.handlers.custom import router as custom_router
from chapter_quiz.handlers.quiz import router as quiz_router


def setup_routers() -> Router:
    """Setup and return the main router with all sub-routers."""
    router = Router()
    router.include_router(start_router)
    router.include_router(custom_router)
    # quiz router ends with the catch-all callback handler
    router.include_router(quiz_router)
    return router


__all__ = ["setup_routers"]
