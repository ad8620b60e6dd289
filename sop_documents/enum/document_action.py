"""sop_documents/enum/document_action.py
=====================================

Canonical action identifiers used by the eligibility resolver and the
transition executor.

The UI and services should use these ids instead of hardcoding strings.
"""
from __future__ import annotations

from enum import Enum


class DocumentAction(str, Enum):
    """Supported document actions."""

    SUBMIT = "submit"

    APPROVE = "approve"
    REJECT = "reject"
    QUERY = "query"
    ADDRESS_QUERY = "addressQuery"

    START_REVIEW = "startReview"
    COMPLETE_CHANGE_REQUEST = "completeChangeRequest"
    REVIEW_DOCUMENT = "reviewDocument"
    UPLOAD_REVISED = "uploadRevised"
    CHANGE_STATUS = "changeStatus"
    EDIT = "edit"

    ARCHIVE = "archive"
    DELETE = "delete"
    RESTORE = "restore"
    SEND_REMINDER = "sendReminder"

    @classmethod
    def parse(cls, value: object) -> "DocumentAction":
        if isinstance(value, cls):
            return value
        raw = str(value or "").strip()
        wanted = raw.replace("_", "").replace("-", "").lower()
        for member in cls:
            if member.value.lower() == wanted or member.name.replace("_", "").lower() == wanted:
                return member
        raise ValueError(f"Unknown document action: {value!r}")
