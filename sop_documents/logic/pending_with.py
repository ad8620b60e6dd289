# sop_documents/logic/pending_with.py
"""
Pending-with resolution: which party has to act next on a document.

Single source of truth for every table row, card and dialog. Pure and
deterministic; the UI calls it on every render.
"""

from __future__ import annotations

from typing import Sequence

from sop_documents.enum.document_status import DocumentStatus
from sop_documents.models.document_models import Person, SopDocument

DOCUMENT_CREATOR = "Document Creator"
DOCUMENT_REQUESTER = "Document Requester"
DOCUMENT_OWNER = "Document Owner"
DOCUMENT_CONTROLLER = "Document Controller"
REVIEWERS = "Reviewers"
DOCUMENT_REVIEWER = "Document Reviewer"
COMPLETE = "Complete"
NOT_APPLICABLE = "—"

# Party labels under which a requester/reviewer acts on an under-review document.
REVIEWER_PARTY_ALIASES = frozenset({REVIEWERS, DOCUMENT_REVIEWER, DOCUMENT_REQUESTER})

_BY_STATUS = {
    DocumentStatus.DRAFT: DOCUMENT_CREATOR,
    DocumentStatus.UNDER_REVISION: DOCUMENT_OWNER,
    DocumentStatus.PENDING_CREATOR_APPROVAL: DOCUMENT_CREATOR,
    DocumentStatus.PENDING_REQUESTER_APPROVAL: DOCUMENT_REQUESTER,
    DocumentStatus.PENDING_OWNER_APPROVAL: DOCUMENT_OWNER,
    DocumentStatus.APPROVED: COMPLETE,
    DocumentStatus.REJECTED: DOCUMENT_CREATOR,
    DocumentStatus.QUERIED: DOCUMENT_CONTROLLER,
}


def has_pending_override(doc: SopDocument) -> bool:
    return bool(doc.pending_with and doc.pending_with.strip())


def resolve_pending_with(doc: SopDocument) -> str:
    """Role label of the party responsible for the next action."""
    if has_pending_override(doc):
        return doc.pending_with  # type: ignore[return-value]

    if doc.status == DocumentStatus.UNDER_REVIEW:
        return REVIEWERS if doc.reviewers else DOCUMENT_CREATOR
    return _BY_STATUS.get(doc.status, NOT_APPLICABLE)


# ----------------- Display helpers ------------------------------------------
def _names(people: Sequence[Person]) -> str:
    return ", ".join(p.name for p in people)


def pending_with_display(doc: SopDocument) -> str:
    """
    Human-readable variant for table cells: for under-review documents the
    responsible people are listed by name, otherwise the role label.
    """
    party = resolve_pending_with(doc)
    if doc.status != DocumentStatus.UNDER_REVIEW:
        return party
    if party == DOCUMENT_CREATOR and doc.document_creators:
        return _names(doc.document_creators)
    if party == DOCUMENT_OWNER and doc.document_owners:
        return _names(doc.document_owners)
    if party in REVIEWER_PARTY_ALIASES:
        people = doc.current_reviewers or doc.reviewers
        if people:
            return _names(people)
    return party


def format_owners(doc: SopDocument) -> str:
    owners = doc.document_owners
    if not owners:
        return "Not Assigned"
    if len(owners) == 1:
        return owners[0].name
    return f"{owners[0].name} +{len(owners) - 1} more"
