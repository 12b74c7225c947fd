"""Job store implementations and change notification."""

from .base import JOBS_TOPIC, JobFilter, JobRecord, JobStore, ChangeNotifier
from .notifier import LocalNotifier, RedisNotifier, Subscription
from .memory import InMemoryJobStore
from .sql import SqlJobStore

__all__ = [
    "JOBS_TOPIC",
    "JobFilter",
    "JobRecord",
    "JobStore",
    "ChangeNotifier",
    "LocalNotifier",
    "RedisNotifier",
    "Subscription",
    "InMemoryJobStore",
    "SqlJobStore",
]
