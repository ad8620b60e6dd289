"""
DocumentCreationService - builds new SOP documents.

Two entry points:
- create_draft(): the workflow path, document starts in ``draft``.
- upload_live(): the upload-bypass path, document starts directly ``live``
  without any review cycle.

Both are pure like the workflow engine: they return the new document plus
effect instructions; persisting and dispatching is up to the caller.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Iterable, Optional, Tuple
from uuid import uuid4

from core.config.config_service import ConfigService
from core.helpers.date_time_helper import DateLike, parse_optional_date, utc_now
from sop_documents.dto.effects import DateStampEffect, Effect, LogEffect, NotificationEffect
from sop_documents.dto.transition import TransitionResult
from sop_documents.enum.document_status import DocumentStatus
from sop_documents.enum.log_action import LogAction
from sop_documents.enum.user_role import UserRole
from sop_documents.exceptions.errors import ValidationError
from sop_documents.logic.code_generator import CODE_PREFIX, CODE_SEQUENCE, generate_document_code, next_version_number
from sop_documents.logic.revision_dates import REVISION_GAP_MONTHS, default_next_revision_date, ensure_revision_gap
from sop_documents.models.document_models import SopDocument, unique_people

logger = logging.getLogger(__name__)


class DocumentCreationService:
    """
    Handles document creation.

    SRP: lifecycle start only, no workflow logic.
    """

    def __init__(
        self,
        *,
        code_prefix: str = CODE_PREFIX,
        code_sequence: str = CODE_SEQUENCE,
        revision_gap_months: int = REVISION_GAP_MONTHS,
        id_factory: Callable[[], str] = lambda: str(uuid4()),
    ) -> None:
        self._prefix = code_prefix
        self._sequence = code_sequence
        self._gap_months = revision_gap_months
        self._new_id = id_factory

    @classmethod
    def from_config(cls, config: ConfigService) -> "DocumentCreationService":
        wf = config.workflow
        return cls(
            code_prefix=wf.code_prefix,
            code_sequence=wf.code_sequence,
            revision_gap_months=wf.revision_gap_months,
        )

    # ------------------------------------------------------------------ #
    def create_draft(self, *, now: Optional[datetime] = None, **fields: Any) -> TransitionResult:
        """Create a workflow document in ``draft``. See :meth:`_build` for fields."""
        doc = self._build(status=DocumentStatus.DRAFT, now=now or utc_now(), **fields)
        logger.debug("Draft document %s prepared (%s v%s)", doc.id, doc.document_code, doc.version_number)
        return TransitionResult(document=doc, effects=(self._create_log(doc),))

    def upload_live(
        self,
        *,
        upload_date: Optional[DateLike] = None,
        now: Optional[datetime] = None,
        **fields: Any,
    ) -> TransitionResult:
        """Upload-bypass: register an already approved SOP directly as ``live``."""
        stamp = now or utc_now()
        try:
            upload = parse_optional_date(upload_date) or stamp.date()
        except ValueError as ex:
            raise ValidationError(f"Invalid upload date: {upload_date!r}", field="uploadDate") from ex

        doc = self._build(status=DocumentStatus.LIVE, now=stamp, upload_date=upload.isoformat(), **fields)
        effects: Tuple[Effect, ...] = (
            self._create_log(doc),
            DateStampEffect(document_id=doc.id, field_name="uploadDate", value=doc.upload_date or ""),
            NotificationEffect(
                recipient_role=UserRole.DOCUMENT_OWNER.value, document_id=doc.id, template_key="document_live"
            ),
        )
        return TransitionResult(document=doc, effects=effects)

    # ------------------------------------------------------------------ #
    def _build(
        self,
        *,
        status: DocumentStatus,
        now: datetime,
        sop_name: str,
        department: str,
        document_type: str,
        country: str = "",
        document_code: Optional[str] = None,
        existing_documents: Iterable[SopDocument] = (),
        document_owners: Iterable[Any] = (),
        reviewers: Iterable[Any] = (),
        document_creators: Iterable[Any] = (),
        compliance_names: Iterable[Any] = (),
        last_revision_date: Optional[DateLike] = None,
        next_revision_date: Optional[DateLike] = None,
        upload_date: Optional[str] = None,
    ) -> SopDocument:
        if not (sop_name or "").strip():
            raise ValidationError("SOP name is required.", field="sopName")
        if not (department or "").strip():
            raise ValidationError("Department is required.", field="department")
        if not (document_type or "").strip():
            raise ValidationError("Document type is required.", field="documentType")

        code = (document_code or "").strip() or generate_document_code(
            department, document_type, prefix=self._prefix, sequence=self._sequence
        )
        version = next_version_number(existing_documents, code)

        try:
            last = parse_optional_date(last_revision_date) or now.date()
            nxt = parse_optional_date(next_revision_date) or default_next_revision_date(last)
        except ValueError as ex:
            raise ValidationError(f"Invalid revision date: {ex}") from ex
        ensure_revision_gap(last, nxt, months=self._gap_months)

        return SopDocument(
            id=self._new_id(),
            status=status,
            sop_name=sop_name.strip(),
            document_code=code,
            version_number=version,
            country=country or "",
            department=department.strip(),
            document_type=document_type.strip(),
            document_owners=unique_people(document_owners),
            reviewers=unique_people(reviewers),
            document_creators=unique_people(document_creators),
            compliance_names=unique_people(compliance_names),
            last_revision_date=last.isoformat(),
            next_revision_date=nxt.isoformat(),
            created_at=now.isoformat(),
            upload_date=upload_date,
            review_cycle=0,
        )

    @staticmethod
    def _create_log(doc: SopDocument) -> LogEffect:
        return LogEffect(
            document_id=doc.id,
            action_kind=LogAction.CREATE.value,
            details={
                "documentName": doc.sop_name,
                "documentCode": doc.document_code,
                "versionNumber": doc.version_number,
                "status": doc.status.value,
                "description": "Document created",
            },
        )
