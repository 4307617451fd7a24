"""Injectable collaborators for the API routes (override in tests)."""

from cajoncoach.config import settings
from cajoncoach.history import HistoryRepository, JsonHistoryRepository
from cajoncoach.services import FeedbackProvider, StaticFeedbackProvider


def get_history_repository() -> HistoryRepository:
    return JsonHistoryRepository(settings.history_path, limit=settings.history_limit)


def get_feedback_provider() -> FeedbackProvider:
    return StaticFeedbackProvider()
