# sop_documents/logic/eligibility.py
"""
Action eligibility for the SOP workflow.

- Stateless: pure guard logic, no storage or UI here.
- Input is always the explicit (role, document) pair; nothing is read from
  session state and nothing is cached between calls.
- Every rule is independent; a document may expose several actions at once.

The transition executor calls the same functions, so what the UI shows and
what the engine accepts cannot drift apart.
"""

from __future__ import annotations

from typing import Dict, FrozenSet

from sop_documents.dto.controls_state import ActionState
from sop_documents.enum.document_action import DocumentAction
from sop_documents.enum.document_status import INACTIVE_STATUSES, DocumentStatus
from sop_documents.enum.user_role import REQUESTER_ROLES, RESTRICTED_ROLES, UserRole
from sop_documents.logic.pending_with import (
    DOCUMENT_CREATOR,
    DOCUMENT_OWNER,
    REVIEWER_PARTY_ALIASES,
    resolve_pending_with,
)
from sop_documents.models.document_models import SopDocument

_SIGN_OFF_BY_STATUS = {
    DocumentStatus.PENDING_CREATOR_APPROVAL: frozenset({UserRole.DOCUMENT_CREATOR}),
    DocumentStatus.PENDING_REQUESTER_APPROVAL: REQUESTER_ROLES,
    DocumentStatus.PENDING_OWNER_APPROVAL: frozenset({UserRole.DOCUMENT_OWNER}),
}

_SUBMIT_ROLES = frozenset({UserRole.DOCUMENT_CREATOR, UserRole.DOCUMENT_CONTROLLER})
_START_REVIEW_ROLES = frozenset({UserRole.DOCUMENT_OWNER, UserRole.DOCUMENT_CONTROLLER})
_EDIT_ROLES = frozenset({UserRole.DOCUMENT_CONTROLLER, UserRole.DOCUMENT_CREATOR})
_START_REVIEW_INERT_ROLES = frozenset({
    UserRole.DOCUMENT_OWNER,
    UserRole.REQUESTER,
    UserRole.DOCUMENT_CREATOR,
    UserRole.DOCUMENT_CONTROLLER,
})


class ActionEligibility:
    """Guard functions per action; each returns an :class:`ActionState`."""

    # ----------------- Party matching ---------------------------------------
    @staticmethod
    def acts_for_pending_party(role: UserRole, doc: SopDocument) -> bool:
        """True if *role* is the party an under-review document waits for."""
        party = resolve_pending_with(doc)
        if role == UserRole.DOCUMENT_CREATOR:
            return party == DOCUMENT_CREATOR
        if role in REQUESTER_ROLES or role == UserRole.REVIEWER:
            return party in REVIEWER_PARTY_ALIASES
        if role == UserRole.DOCUMENT_OWNER:
            return party == DOCUMENT_OWNER
        return False

    # ----------------- Forward actions --------------------------------------
    @classmethod
    def sign_off(cls, role: UserRole, doc: SopDocument) -> ActionState:
        """approve / reject"""
        if role in _SIGN_OFF_BY_STATUS.get(doc.status, frozenset()):
            return ActionState.active()
        if doc.status == DocumentStatus.UNDER_REVIEW and cls.acts_for_pending_party(role, doc):
            return ActionState.active()
        return ActionState.hidden()

    @classmethod
    def query(cls, role: UserRole, doc: SopDocument) -> ActionState:
        if doc.status == DocumentStatus.UNDER_REVIEW and cls.acts_for_pending_party(role, doc):
            return ActionState.active()
        return ActionState.hidden()

    @staticmethod
    def submit(role: UserRole, doc: SopDocument) -> ActionState:
        if role in _SUBMIT_ROLES and doc.status in (DocumentStatus.DRAFT, DocumentStatus.REJECTED):
            return ActionState.active()
        # A reviewed document goes back into review through the controller.
        if role == UserRole.DOCUMENT_CONTROLLER and doc.status == DocumentStatus.REVIEWED:
            return ActionState.active()
        return ActionState.hidden()

    @staticmethod
    def start_review(role: UserRole, doc: SopDocument) -> ActionState:
        if role not in _START_REVIEW_ROLES or doc.status not in (DocumentStatus.LIVE, DocumentStatus.LIVE_CR):
            return ActionState.hidden()
        # A change request is already open.
        if doc.status == DocumentStatus.LIVE_CR:
            return ActionState.disabled()
        # Drawn but inert on a live document that never went through review.
        if role in _START_REVIEW_INERT_ROLES and doc.review_cycle == 0:
            return ActionState.disabled()
        return ActionState.active()

    @staticmethod
    def complete_change_request(role: UserRole, doc: SopDocument) -> ActionState:
        if role in _START_REVIEW_ROLES and doc.status == DocumentStatus.LIVE_CR:
            return ActionState.active()
        return ActionState.hidden()

    @staticmethod
    def edit(role: UserRole, doc: SopDocument) -> ActionState:
        # Approved documents only move on through changeStatus.
        if (
            role in _EDIT_ROLES
            and doc.status != DocumentStatus.APPROVED
            and doc.status not in INACTIVE_STATUSES
        ):
            return ActionState.active()
        return ActionState.hidden()

    @staticmethod
    def review_document(role: UserRole, doc: SopDocument) -> ActionState:
        if role == UserRole.REVIEWER and doc.status == DocumentStatus.UNDER_REVIEW:
            return ActionState.active()
        return ActionState.hidden()

    @staticmethod
    def upload_revised(role: UserRole, doc: SopDocument) -> ActionState:
        if role == UserRole.DOCUMENT_OWNER and doc.status == DocumentStatus.UNDER_REVISION:
            return ActionState.active()
        return ActionState.hidden()

    @staticmethod
    def change_status(role: UserRole, doc: SopDocument) -> ActionState:
        # Approved documents can only be pushed live by the controller.
        if role == UserRole.DOCUMENT_CONTROLLER and doc.status == DocumentStatus.APPROVED:
            return ActionState.active()
        return ActionState.hidden()

    @staticmethod
    def address_query(role: UserRole, doc: SopDocument) -> ActionState:
        if role == UserRole.DOCUMENT_CONTROLLER and doc.status == DocumentStatus.QUERIED:
            return ActionState.active()
        return ActionState.hidden()

    # ----------------- Controller housekeeping ------------------------------
    @staticmethod
    def _controller_only(role: UserRole) -> bool:
        # Role exclusion wins over any status rule.
        if role in RESTRICTED_ROLES:
            return False
        return role == UserRole.DOCUMENT_CONTROLLER

    @classmethod
    def archive(cls, role: UserRole, doc: SopDocument) -> ActionState:
        if cls._controller_only(role) and doc.status not in INACTIVE_STATUSES:
            return ActionState.active()
        return ActionState.hidden()

    @classmethod
    def delete(cls, role: UserRole, doc: SopDocument) -> ActionState:
        if cls._controller_only(role) and doc.status != DocumentStatus.DELETED:
            return ActionState.active()
        return ActionState.hidden()

    @classmethod
    def send_reminder(cls, role: UserRole, doc: SopDocument) -> ActionState:
        if (
            cls._controller_only(role)
            and doc.status != DocumentStatus.APPROVED
            and doc.status not in INACTIVE_STATUSES
        ):
            return ActionState.active()
        return ActionState.hidden()

    @staticmethod
    def restore(role: UserRole, doc: SopDocument) -> ActionState:
        # Offered to every role; the archive/deleted listings decide whether to draw it.
        if doc.status in INACTIVE_STATUSES:
            return ActionState.active()
        return ActionState.hidden()


_GUARDS = {
    DocumentAction.SUBMIT: ActionEligibility.submit,
    DocumentAction.APPROVE: ActionEligibility.sign_off,
    DocumentAction.REJECT: ActionEligibility.sign_off,
    DocumentAction.QUERY: ActionEligibility.query,
    DocumentAction.ADDRESS_QUERY: ActionEligibility.address_query,
    DocumentAction.START_REVIEW: ActionEligibility.start_review,
    DocumentAction.COMPLETE_CHANGE_REQUEST: ActionEligibility.complete_change_request,
    DocumentAction.EDIT: ActionEligibility.edit,
    DocumentAction.REVIEW_DOCUMENT: ActionEligibility.review_document,
    DocumentAction.UPLOAD_REVISED: ActionEligibility.upload_revised,
    DocumentAction.CHANGE_STATUS: ActionEligibility.change_status,
    DocumentAction.ARCHIVE: ActionEligibility.archive,
    DocumentAction.DELETE: ActionEligibility.delete,
    DocumentAction.RESTORE: ActionEligibility.restore,
    DocumentAction.SEND_REMINDER: ActionEligibility.send_reminder,
}


def action_state(role: UserRole | str, doc: SopDocument, action: DocumentAction | str) -> ActionState:
    return _GUARDS[DocumentAction.parse(action)](UserRole.parse(role), doc)


def action_states(role: UserRole | str, doc: SopDocument) -> Dict[DocumentAction, ActionState]:
    """Render state for every action, including visible-but-disabled ones."""
    acting = UserRole.parse(role)
    return {action: guard(acting, doc) for action, guard in _GUARDS.items()}


def eligible_actions(role: UserRole | str, doc: SopDocument) -> FrozenSet[DocumentAction]:
    """Actions the role may execute right now (enabled controls only)."""
    return frozenset(a for a, state in action_states(role, doc).items() if state.enabled)


def visible_actions(role: UserRole | str, doc: SopDocument) -> FrozenSet[DocumentAction]:
    return frozenset(a for a, state in action_states(role, doc).items() if state.visible)
