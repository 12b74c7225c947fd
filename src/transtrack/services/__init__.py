"""Business services."""

from .states import allowed_transitions, is_valid_transition, is_valid_history
from .languages import SOURCE_LANGUAGES, TARGET_LANGUAGES, get_language_options
from .dispatch import LocalDispatcher, ArqDispatcher
from .lifecycle import (
    JobLifecycleEngine,
    JobDetails,
    UploadLimits,
    count_by_status,
    sort_newest_first,
)
from .feed import JobFeed
from .users import UserService

__all__ = [
    "allowed_transitions",
    "is_valid_transition",
    "is_valid_history",
    "SOURCE_LANGUAGES",
    "TARGET_LANGUAGES",
    "get_language_options",
    "LocalDispatcher",
    "ArqDispatcher",
    "JobLifecycleEngine",
    "JobDetails",
    "UploadLimits",
    "count_by_status",
    "sort_newest_first",
    "JobFeed",
    "UserService",
]
