"""Transition request / payload / result DTOs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence, Tuple

from sop_documents.dto.effects import Effect, LogEffect, NotificationEffect
from sop_documents.enum.document_action import DocumentAction
from sop_documents.enum.user_role import UserRole
from sop_documents.models.document_models import Person, SopDocument, unique_people


@dataclass(frozen=True)
class TransitionPayload:
    """
    Optional data accompanying an action.

    - reason: reject/query text (required for those two)
    - upload_date: date stamped when pushing live (defaults to today)
    - reviewers: new reviewer assignment (submit, edit)
    - last_revision_date / next_revision_date: revision dates to set
    - version_number: explicit version for an uploaded revision
    - existing_documents: lineage used to compute the next version
    - response: free text answering a query
    - sop_name / document_code / country / department / document_type and the
      people lists: attribute edits (edit action)
    """

    reason: Optional[str] = None
    upload_date: Optional[str] = None
    reviewers: Optional[Tuple[Person, ...]] = None
    last_revision_date: Optional[str] = None
    next_revision_date: Optional[str] = None
    version_number: Optional[str] = None
    existing_documents: Tuple[SopDocument, ...] = ()
    response: Optional[str] = None
    sop_name: Optional[str] = None
    document_code: Optional[str] = None
    country: Optional[str] = None
    department: Optional[str] = None
    document_type: Optional[str] = None
    document_owners: Optional[Tuple[Person, ...]] = None
    document_creators: Optional[Tuple[Person, ...]] = None
    compliance_names: Optional[Tuple[Person, ...]] = None

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "TransitionPayload":
        """Accepts camelCase or snake_case keys; None yields an empty payload."""
        if data is None:
            return cls()
        if isinstance(data, TransitionPayload):
            return data

        def pick(*keys: str) -> Any:
            for key in keys:
                if key in data and data[key] is not None:
                    return data[key]
            return None

        def people(*keys: str) -> Optional[Tuple[Person, ...]]:
            value = pick(*keys)
            return unique_people(value) if value is not None else None

        existing = pick("existing_documents", "existingDocuments") or ()
        return cls(
            reason=pick("reason", "comment", "query"),
            upload_date=pick("upload_date", "uploadDate"),
            reviewers=people("reviewers"),
            last_revision_date=pick("last_revision_date", "lastRevisionDate"),
            next_revision_date=pick("next_revision_date", "nextRevisionDate"),
            version_number=pick("version_number", "versionNumber"),
            existing_documents=tuple(
                d if isinstance(d, SopDocument) else SopDocument.from_dict(d) for d in existing
            ),
            response=pick("response"),
            sop_name=pick("sop_name", "sopName"),
            document_code=pick("document_code", "documentCode"),
            country=pick("country"),
            department=pick("department"),
            document_type=pick("document_type", "documentType"),
            document_owners=people("document_owners", "documentOwners"),
            document_creators=people("document_creators", "documentCreators"),
            compliance_names=people("compliance_names", "complianceNames"),
        )


@dataclass(frozen=True)
class TransitionRequest:
    document_id: str
    action: DocumentAction
    acting_role: UserRole
    payload: TransitionPayload = field(default_factory=TransitionPayload)


@dataclass(frozen=True)
class TransitionResult:
    document: SopDocument
    effects: Tuple[Effect, ...] = ()

    @property
    def log_effects(self) -> Sequence[LogEffect]:
        return [e for e in self.effects if isinstance(e, LogEffect)]

    @property
    def notifications(self) -> Sequence[NotificationEffect]:
        return [e for e in self.effects if isinstance(e, NotificationEffect)]
