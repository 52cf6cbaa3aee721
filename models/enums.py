"""Enumerations for notices, connectivity and statistics periods."""

from enum import Enum


class NotificationSeverity(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    DESTRUCTIVE = "destructive"


class ConnectivityEvent(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"


class StatsPeriod(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class CacheBackend(str, Enum):
    SQLITE = "sqlite"
    JSON = "json"
    MEMORY = "memory"
