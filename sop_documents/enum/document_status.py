"""Document status enumeration."""
from __future__ import annotations

from enum import Enum


class DocumentStatus(str, Enum):
    """Canonical SOP lifecycle statuses (wire values are kebab-case)."""

    DRAFT = "draft"
    UNDER_REVIEW = "under-review"
    PENDING_CREATOR_APPROVAL = "pending-creator-approval"
    PENDING_REQUESTER_APPROVAL = "pending-requester-approval"
    UNDER_REVISION = "under-revision"
    PENDING_OWNER_APPROVAL = "pending-owner-approval"
    APPROVED = "approved"
    REJECTED = "rejected"
    LIVE = "live"
    LIVE_CR = "live-cr"
    ARCHIVED = "archived"
    DELETED = "deleted"
    QUERIED = "queried"
    REVIEWED = "reviewed"

    @classmethod
    def parse(cls, value: object) -> "DocumentStatus":
        """Accept enum, wire value or enum name ("UNDER_REVIEW"); raise ValueError otherwise."""
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
            raise ValueError(f"Unknown document status: {value!r}") from None


PENDING_APPROVAL_STATUSES = frozenset({
    DocumentStatus.PENDING_CREATOR_APPROVAL,
    DocumentStatus.PENDING_REQUESTER_APPROVAL,
    DocumentStatus.PENDING_OWNER_APPROVAL,
})

# Hidden from the active document table; only the archive/deleted listings show them.
INACTIVE_STATUSES = frozenset({DocumentStatus.ARCHIVED, DocumentStatus.DELETED})
