from chapter_quiz.services.content_service import ContentRepository
from chapter_quiz.services.content_source import (
    ContentSource,
    DirectoryContentSource,
    HttpContentSource,
)
from chapter_quiz.services.custom_service import CustomContentStore, CustomLedger
from chapter_quiz.services.progress_service import ProgressTracker, complete_and_record

__all__ = [
    "ContentRepository",
    "ContentSource",
    "DirectoryContentSource",
    "HttpContentSource",
    "CustomContentStore",
    "CustomLedger",
    "ProgressTracker",
    "complete_and_record",
]
