# sop_documents/logic/workflow_engine.py
"""
Transition executor for the SOP workflow.

- Side-effect free: returns the new document plus a list of effect
  instructions (log entry, date stamps, notifications). The caller persists
  and dispatches them.
- Re-checks eligibility on every call with the same guards the UI uses; an
  action that is not enabled for (role, document) raises InvalidTransition
  before the payload is even looked at.
- Never mutates the input document.

Sign-off chain: Creator -> Requester -> Owner -> Controller pushes live.
Which branch an approve takes out of ``under-review`` depends on the
resolved pending-with party at the time of the call, not on the status alone.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from core.helpers.date_time_helper import parse_date, utc_today
from sop_documents.dto.effects import DateStampEffect, Effect, LogEffect, NotificationEffect
from sop_documents.dto.transition import TransitionPayload, TransitionResult
from sop_documents.enum.document_action import DocumentAction
from sop_documents.enum.document_status import DocumentStatus
from sop_documents.enum.log_action import LogAction
from sop_documents.enum.user_role import UserRole
from sop_documents.exceptions.errors import InvalidTransition, PreconditionFailed, ValidationError
from sop_documents.logic.code_generator import CODE_PREFIX, next_version_number, parse_version
from sop_documents.logic.eligibility import eligible_actions
from sop_documents.logic.pending_with import DOCUMENT_CREATOR, DOCUMENT_OWNER, resolve_pending_with
from sop_documents.logic.revision_dates import REVISION_GAP_MONTHS, ensure_revision_gap
from sop_documents.models.document_models import SopDocument, camel_case
from sop_documents.services.policy.notification_policy import REMINDER_TEMPLATE, NotificationPolicy

PayloadLike = Union[TransitionPayload, Mapping[str, Any], None]


@dataclass
class _Outcome:
    document: SopDocument
    log_kind: LogAction
    details: Dict[str, Any] = field(default_factory=dict)
    stamps: List[Tuple[str, str]] = field(default_factory=list)
    notifications: Optional[List[Tuple[str, str]]] = None


def _require_text(value: Optional[str], field_name: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(f"A non-empty {field_name} is required.", field=field_name)
    return text


def _parse_payload_date(value: Optional[str], field_name: str) -> Optional[date]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        return parse_date(value)
    except (TypeError, ValueError) as ex:
        raise ValidationError(f"Invalid date for {field_name}: {value!r}", field=field_name) from ex


_EDITABLE_TEXT = ("sop_name", "country", "department", "document_type")
_EDITABLE_PEOPLE = ("document_owners", "reviewers", "document_creators", "compliance_names")


class WorkflowEngine:
    """Stateless executor; configuration only (notification routes, gap months, code prefix)."""

    def __init__(
        self,
        *,
        notification_policy: Optional[NotificationPolicy] = None,
        revision_gap_months: int = REVISION_GAP_MONTHS,
        code_prefix: str = CODE_PREFIX,
    ) -> None:
        self._notifications = notification_policy or NotificationPolicy()
        self._gap_months = revision_gap_months
        self._code_prefix = code_prefix
        self._handlers: Dict[DocumentAction, Callable[..., _Outcome]] = {
            DocumentAction.SUBMIT: self._submit,
            DocumentAction.APPROVE: self._approve,
            DocumentAction.REJECT: self._reject,
            DocumentAction.QUERY: self._query,
            DocumentAction.ADDRESS_QUERY: self._address_query,
            DocumentAction.START_REVIEW: self._start_review,
            DocumentAction.COMPLETE_CHANGE_REQUEST: self._complete_change_request,
            DocumentAction.EDIT: self._edit,
            DocumentAction.REVIEW_DOCUMENT: self._review_document,
            DocumentAction.UPLOAD_REVISED: self._upload_revised,
            DocumentAction.CHANGE_STATUS: self._change_status,
            DocumentAction.ARCHIVE: self._archive,
            DocumentAction.DELETE: self._delete,
            DocumentAction.RESTORE: self._restore,
            DocumentAction.SEND_REMINDER: self._send_reminder,
        }

    # ------------------------------------------------------------------ #
    def apply(
        self,
        doc: SopDocument,
        action: DocumentAction | str,
        acting_role: UserRole | str,
        payload: PayloadLike = None,
        *,
        today: Optional[date] = None,
    ) -> TransitionResult:
        act = DocumentAction.parse(action)
        role = UserRole.parse(acting_role)

        if act not in eligible_actions(role, doc):
            raise InvalidTransition(act, role, doc.status)

        data = TransitionPayload.from_mapping(payload)
        outcome = self._handlers[act](doc, role, data, today or utc_today())
        return TransitionResult(document=outcome.document, effects=self._effects(doc, act, role, outcome))

    def _effects(
        self, before: SopDocument, action: DocumentAction, role: UserRole, outcome: _Outcome
    ) -> Tuple[Effect, ...]:
        after = outcome.document
        details = {
            "action": action.value,
            "actingRole": role.value,
            "previousStatus": before.status.value,
            "newStatus": after.status.value,
            "pendingWith": resolve_pending_with(after),
        }
        details.update(outcome.details)

        effects: List[Effect] = [LogEffect(document_id=after.id, action_kind=outcome.log_kind.value, details=details)]
        effects.extend(DateStampEffect(document_id=after.id, field_name=f, value=v) for f, v in outcome.stamps)

        routes = outcome.notifications
        if routes is None:
            routes = self._notifications.routes_for(action, after.status)
        effects.extend(
            NotificationEffect(recipient_role=recipient, document_id=after.id, template_key=template)
            for recipient, template in routes
        )
        return tuple(effects)

    def _checked_revision_dates(
        self, doc: SopDocument, payload: TransitionPayload
    ) -> Tuple[Optional[str], Optional[str], List[Tuple[str, str]]]:
        """Revision dates after applying the payload; the 3-month floor is enforced on change."""
        last = _parse_payload_date(payload.last_revision_date, "lastRevisionDate")
        nxt = _parse_payload_date(payload.next_revision_date, "nextRevisionDate")
        stamps: List[Tuple[str, str]] = []
        new_last = last.isoformat() if last else doc.last_revision_date
        new_next = nxt.isoformat() if nxt else doc.next_revision_date
        if last or nxt:
            ensure_revision_gap(new_last, new_next, months=self._gap_months)
        if last:
            stamps.append(("lastRevisionDate", new_last))  # type: ignore[arg-type]
        if nxt:
            stamps.append(("nextRevisionDate", new_next))  # type: ignore[arg-type]
        return new_last, new_next, stamps

    # ----------------- Forward actions --------------------------------------
    def _submit(self, doc: SopDocument, role: UserRole, payload: TransitionPayload, today: date) -> _Outcome:
        reviewers = payload.reviewers if payload.reviewers is not None else doc.reviewers
        new = doc.evolve(
            status=DocumentStatus.UNDER_REVIEW,
            reviewers=reviewers,
            current_reviewers=reviewers,
            pending_with=None,
            review_cycle=doc.review_cycle + 1,
        )
        kind = LogAction.CREATE if doc.status == DocumentStatus.DRAFT else LogAction.STATUS_CHANGE
        return _Outcome(new, kind, {"reviewers": [p.name for p in reviewers]})

    def _approve(self, doc: SopDocument, role: UserRole, payload: TransitionPayload, today: date) -> _Outcome:
        status = doc.status
        if status == DocumentStatus.UNDER_REVIEW:
            party = resolve_pending_with(doc)
            if role == UserRole.DOCUMENT_CREATOR and party == DOCUMENT_CREATOR:
                new = doc.evolve(status=DocumentStatus.PENDING_REQUESTER_APPROVAL, pending_with=None)
                return _Outcome(new, LogAction.STATUS_CHANGE, {"approvedAs": party})
            if role == UserRole.DOCUMENT_OWNER and party == DOCUMENT_OWNER:
                new = doc.evolve(status=DocumentStatus.APPROVED, pending_with=None)
                return _Outcome(new, LogAction.APPROVE, {"approvedAs": party})
            # Requester / reviewer sign-off: the owner signs next, still under review.
            new = doc.evolve(pending_with=DOCUMENT_OWNER)
            return _Outcome(new, LogAction.STATUS_CHANGE, {"approvedAs": party})

        if status == DocumentStatus.PENDING_CREATOR_APPROVAL:
            new = doc.evolve(status=DocumentStatus.PENDING_REQUESTER_APPROVAL, pending_with=None)
            return _Outcome(new, LogAction.STATUS_CHANGE)
        if status == DocumentStatus.PENDING_REQUESTER_APPROVAL:
            new = doc.evolve(status=DocumentStatus.PENDING_OWNER_APPROVAL, pending_with=None)
            return _Outcome(new, LogAction.STATUS_CHANGE)
        new = doc.evolve(status=DocumentStatus.APPROVED, pending_with=None)
        return _Outcome(new, LogAction.APPROVE)

    def _reject(self, doc: SopDocument, role: UserRole, payload: TransitionPayload, today: date) -> _Outcome:
        reason = _require_text(payload.reason, "reason")
        new = doc.with_comment(f"Rejected: {reason}").evolve(status=DocumentStatus.REJECTED, pending_with=None)
        return _Outcome(new, LogAction.STATUS_CHANGE, {"reason": reason})

    def _query(self, doc: SopDocument, role: UserRole, payload: TransitionPayload, today: date) -> _Outcome:
        reason = _require_text(payload.reason, "reason")
        new = doc.with_comment(f"Query: {reason}").evolve(status=DocumentStatus.QUERIED, pending_with=None)
        return _Outcome(new, LogAction.QUERY, {"query": reason})

    def _address_query(self, doc: SopDocument, role: UserRole, payload: TransitionPayload, today: date) -> _Outcome:
        new = doc
        response = (payload.response or "").strip()
        if response:
            new = new.with_comment(f"Query response: {response}")
        new = new.evolve(status=DocumentStatus.UNDER_REVIEW, pending_with=None)
        return _Outcome(new, LogAction.STATUS_CHANGE, {"response": response} if response else {})

    def _start_review(self, doc: SopDocument, role: UserRole, payload: TransitionPayload, today: date) -> _Outcome:
        new = doc.evolve(status=DocumentStatus.LIVE_CR, pending_with=None)
        return _Outcome(
            new,
            LogAction.STATUS_CHANGE,
            {"description": "Status changed from Live to Live-CR due to change request"},
        )

    def _complete_change_request(
        self, doc: SopDocument, role: UserRole, payload: TransitionPayload, today: date
    ) -> _Outcome:
        new = doc.evolve(status=DocumentStatus.LIVE, pending_with=None)
        return _Outcome(
            new,
            LogAction.STATUS_CHANGE,
            {"description": "Change request completed, status changed from Live-CR to Live"},
        )

    def _edit(self, doc: SopDocument, role: UserRole, payload: TransitionPayload, today: date) -> _Outcome:
        changes: Dict[str, Any] = {}
        for name in _EDITABLE_TEXT:
            value = getattr(payload, name)
            if value is None:
                continue
            value = str(value).strip()
            if name == "sop_name" and not value:
                raise ValidationError("SOP name is required.", field="sopName")
            if value != getattr(doc, name):
                changes[name] = value

        if payload.document_code is not None:
            code = str(payload.document_code).strip()
            if not code.startswith(self._code_prefix):
                raise ValidationError(
                    f"Document code must start with '{self._code_prefix}'.", field="documentCode"
                )
            if code != doc.document_code:
                changes["document_code"] = code

        for name in _EDITABLE_PEOPLE:
            people = getattr(payload, name)
            if people is not None and people != getattr(doc, name):
                changes[name] = people

        last, nxt, stamps = self._checked_revision_dates(doc, payload)
        if last != doc.last_revision_date:
            changes["last_revision_date"] = last
        if nxt != doc.next_revision_date:
            changes["next_revision_date"] = nxt

        if not changes:
            raise ValidationError("The edit does not change anything.")

        details: Dict[str, Any] = {"changedFields": sorted(camel_case(name) for name in changes)}
        # Editing a published document opens a change request.
        if doc.status == DocumentStatus.LIVE:
            changes["status"] = DocumentStatus.LIVE_CR
            details["description"] = "Status changed from Live to Live-CR due to document edit"
        return _Outcome(doc.evolve(**changes), LogAction.STATUS_CHANGE, details, stamps)

    def _review_document(self, doc: SopDocument, role: UserRole, payload: TransitionPayload, today: date) -> _Outcome:
        new = doc.evolve(status=DocumentStatus.REVIEWED, pending_with=None)
        return _Outcome(new, LogAction.STATUS_CHANGE)

    def _upload_revised(self, doc: SopDocument, role: UserRole, payload: TransitionPayload, today: date) -> _Outcome:
        lineage = tuple(payload.existing_documents) + (doc,)
        version = payload.version_number or next_version_number(lineage, doc.document_code)
        if parse_version(version) <= parse_version(doc.version_number):
            raise PreconditionFailed(
                f"Revised version {version} must be greater than {doc.version_number}.",
                field="versionNumber",
            )
        last, nxt, stamps = self._checked_revision_dates(doc, payload)
        new = doc.evolve(
            status=DocumentStatus.UNDER_REVIEW,
            version_number=str(version),
            last_revision_date=last,
            next_revision_date=nxt,
            pending_with=None,
            review_cycle=doc.review_cycle + 1,
        )
        return _Outcome(
            new,
            LogAction.STATUS_CHANGE,
            {"previousVersion": doc.version_number, "versionNumber": new.version_number},
            stamps,
        )

    def _change_status(self, doc: SopDocument, role: UserRole, payload: TransitionPayload, today: date) -> _Outcome:
        upload = _parse_payload_date(payload.upload_date, "uploadDate") or today
        last, nxt, stamps = self._checked_revision_dates(doc, payload)
        upload_iso = upload.isoformat()
        new = doc.evolve(
            status=DocumentStatus.LIVE,
            upload_date=upload_iso,
            last_revision_date=last,
            next_revision_date=nxt,
            pending_with=None,
        )
        return _Outcome(new, LogAction.STATUS_CHANGE, {"uploadDate": upload_iso}, [("uploadDate", upload_iso)] + stamps)

    # ----------------- Housekeeping -----------------------------------------
    def _archive(self, doc: SopDocument, role: UserRole, payload: TransitionPayload, today: date) -> _Outcome:
        return _Outcome(doc.evolve(status=DocumentStatus.ARCHIVED, pending_with=None), LogAction.ARCHIVE)

    def _delete(self, doc: SopDocument, role: UserRole, payload: TransitionPayload, today: date) -> _Outcome:
        return _Outcome(doc.evolve(status=DocumentStatus.DELETED, pending_with=None), LogAction.DELETE)

    def _restore(self, doc: SopDocument, role: UserRole, payload: TransitionPayload, today: date) -> _Outcome:
        target = DocumentStatus.LIVE if doc.status == DocumentStatus.ARCHIVED else DocumentStatus.DRAFT
        return _Outcome(doc.evolve(status=target, pending_with=None), LogAction.RESTORE)

    def _send_reminder(self, doc: SopDocument, role: UserRole, payload: TransitionPayload, today: date) -> _Outcome:
        recipient = self._notifications.recipient_for_party(resolve_pending_with(doc))
        routes = [(recipient, REMINDER_TEMPLATE)] if recipient else []
        return _Outcome(doc, LogAction.REMINDER, {"breached": doc.is_breached}, notifications=routes)


_default_engine = WorkflowEngine()


def apply_transition(
    doc: SopDocument,
    action: DocumentAction | str,
    acting_role: UserRole | str,
    payload: PayloadLike = None,
    *,
    today: Optional[date] = None,
) -> TransitionResult:
    """Module-level entry point using the default engine configuration."""
    return _default_engine.apply(doc, action, acting_role, payload, today=today)
