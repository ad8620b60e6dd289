"""Action kinds written to the document log."""
from __future__ import annotations

from enum import Enum


class LogAction(str, Enum):
    CREATE = "create"
    STATUS_CHANGE = "status_change"
    APPROVE = "approve"
    QUERY = "query"
    ARCHIVE = "archive"
    DELETE = "delete"
    RESTORE = "restore"
    REMINDER = "reminder"
