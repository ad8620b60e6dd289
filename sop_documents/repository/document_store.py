"""Document store protocol (interface).

Defines the contract for document data access without implementation details.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Protocol

from sop_documents.enum.document_status import DocumentStatus
from sop_documents.models.document_models import SopDocument


class DocumentStore(Protocol):
    """Protocol for document data access."""

    def get(self, doc_id: str) -> Optional[SopDocument]:
        """Current version of the document, or None."""
        ...

    def save(self, doc: SopDocument) -> None:
        """Insert or replace the document."""
        ...

    def list(
        self,
        *,
        status: Optional[DocumentStatus] = None,
        text: Optional[str] = None,
    ) -> List[SopDocument]:
        """
        List documents with optional filters.

        Args:
            status: Filter by status
            text: Search in name/code (case-insensitive)
        """
        ...

    def exists(self, doc_id: str) -> bool:
        ...


def matches(doc: SopDocument, status: Optional[DocumentStatus], text: Optional[str]) -> bool:
    if status is not None and doc.status != DocumentStatus.parse(status):
        return False
    if text:
        needle = text.strip().lower()
        haystack = f"{doc.sop_name} {doc.document_code}".lower()
        if needle not in haystack:
            return False
    return True


class InMemoryDocumentStore:
    """Dict-backed store; documents are immutable so no copies are needed."""

    def __init__(self, documents: Optional[List[SopDocument]] = None) -> None:
        self._docs: Dict[str, SopDocument] = {d.id: d for d in documents or []}

    def get(self, doc_id: str) -> Optional[SopDocument]:
        return self._docs.get(doc_id)

    def save(self, doc: SopDocument) -> None:
        self._docs[doc.id] = doc

    def list(
        self,
        *,
        status: Optional[DocumentStatus] = None,
        text: Optional[str] = None,
    ) -> List[SopDocument]:
        return [d for d in self._docs.values() if matches(d, status, text)]

    def exists(self, doc_id: str) -> bool:
        return doc_id in self._docs
