"""sop_documents/enum/user_role.py
===============================

Session roles. A session acts with exactly one role; it is passed into every
engine call instead of being read from ambient state.
"""
from __future__ import annotations

from enum import Enum


class UserRole(str, Enum):
    """Acting role of the current session."""

    ADMIN = "admin"
    DOCUMENT_CONTROLLER = "document-controller"
    DOCUMENT_CREATOR = "document-creator"
    REQUESTER = "requester"
    DOCUMENT_REQUESTER = "document-requester"
    REVIEWER = "reviewer"
    DOCUMENT_OWNER = "document-owner"

    @classmethod
    def parse(cls, value: object) -> "UserRole":
        if isinstance(value, cls):
            return value
        raw = str(value or "").strip()
        try:
            return cls(raw.lower())
        except ValueError:
            pass
        try:
            return cls[raw.upper().replace("-", "_")]
        except KeyError:
            raise ValueError(f"Unknown user role: {value!r}") from None


# "requester" and "document-requester" name the same party.
REQUESTER_ROLES = frozenset({UserRole.REQUESTER, UserRole.DOCUMENT_REQUESTER})

# Never see archive/delete/reminder controls, whatever the status.
RESTRICTED_ROLES = frozenset({UserRole.DOCUMENT_CREATOR, UserRole.REQUESTER})
