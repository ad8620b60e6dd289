"""Workflow engine exceptions.

All errors are local and recoverable: the caller (UI handler) decides how
to present them. A failed transition never changes the document.
"""
from __future__ import annotations

from typing import Optional


class DocumentsError(Exception):
    """Base exception for the SOP documents feature."""


class InvalidTransition(DocumentsError):
    """Action not enabled for the (role, document) pair."""

    def __init__(self, action: object, role: object, status: object, message: Optional[str] = None) -> None:
        self.action = getattr(action, "value", action)
        self.role = getattr(role, "value", role)
        self.status = getattr(status, "value", status)
        super().__init__(
            message or f"Action '{self.action}' is not permitted for role '{self.role}' on a '{self.status}' document."
        )


class ValidationError(DocumentsError):
    """Required payload missing or malformed; raised before any mutation."""

    def __init__(self, message: str, *, field: Optional[str] = None) -> None:
        self.field = field
        super().__init__(message)


class PreconditionFailed(DocumentsError):
    """A business precondition does not hold (e.g. revision-date gap)."""

    def __init__(self, message: str, *, field: Optional[str] = None) -> None:
        self.field = field
        super().__init__(message)


class DocumentNotFoundError(DocumentsError):
    def __init__(self, document_id: str) -> None:
        self.document_id = document_id
        super().__init__(f"Document not found: {document_id}")


class PersistenceError(DocumentsError):
    """Storing a document failed; the caller may retry."""
