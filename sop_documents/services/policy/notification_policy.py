"""Notification routing policy.

Decides who gets told about a transition and with which template. Routes are
read from ``workflow_notifications.json``; embedded defaults apply when the
file is missing or unreadable.

Route keys are either ``"<action>"`` or ``"<action>-><target status>"``; the
status-specific key wins.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple

from sop_documents.enum.document_action import DocumentAction
from sop_documents.enum.document_status import DocumentStatus
from sop_documents.enum.user_role import UserRole
from sop_documents.logic import pending_with as party

logger = logging.getLogger(__name__)

Route = Tuple[str, str]  # (recipient_role, template_key)

REMINDER_TEMPLATE = "review_reminder"

_DEFAULT_ROUTES: Dict[str, List[Route]] = {
    "submit": [("reviewer", "review_requested")],
    "approve->pending-requester-approval": [("requester", "approval_requested")],
    "approve->under-review": [("document-owner", "approval_requested")],
    "approve->pending-owner-approval": [("document-owner", "approval_requested")],
    "approve->approved": [("document-controller", "document_approved")],
    "reject": [("document-creator", "document_rejected")],
    "query": [("document-controller", "document_queried")],
    "addressQuery": [("reviewer", "query_addressed")],
    "changeStatus": [("document-owner", "document_live"), ("document-creator", "document_live")],
    "startReview->live-cr": [("document-owner", "change_request_started")],
    "completeChangeRequest": [("document-controller", "change_request_completed")],
    "edit->live-cr": [("document-owner", "change_request_started")],
    "uploadRevised": [("reviewer", "review_requested")],
    "reviewDocument": [("document-controller", "document_reviewed")],
    "archive": [("document-owner", "document_archived")],
    "restore": [("document-controller", "document_restored")],
}

_DEFAULT_PARTY_RECIPIENTS: Dict[str, str] = {
    party.DOCUMENT_CREATOR: UserRole.DOCUMENT_CREATOR.value,
    party.DOCUMENT_REQUESTER: UserRole.REQUESTER.value,
    party.REVIEWERS: UserRole.REVIEWER.value,
    party.DOCUMENT_REVIEWER: UserRole.REVIEWER.value,
    party.DOCUMENT_OWNER: UserRole.DOCUMENT_OWNER.value,
    party.DOCUMENT_CONTROLLER: UserRole.DOCUMENT_CONTROLLER.value,
}


class NotificationPolicy:
    """Maps transitions to ``(recipient_role, template_key)`` routes."""

    def __init__(
        self,
        *,
        routes: Optional[Mapping[str, List[Route]]] = None,
        party_recipients: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._routes = dict(_DEFAULT_ROUTES if routes is None else routes)
        self._party_recipients = dict(_DEFAULT_PARTY_RECIPIENTS if party_recipients is None else party_recipients)

    @classmethod
    def load_from_file(cls, policy_file: str | Path) -> "NotificationPolicy":
        path = Path(policy_file)
        data: Dict[str, object] = {}
        if path.exists():
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
                logger.info("Loaded notification policy from %s", path)
            except (OSError, ValueError) as ex:
                logger.error("Failed to load notification policy: %s", ex)
                data = {}
        else:
            logger.warning("Notification policy file not found: %s", path)

        routes: Dict[str, List[Route]] = dict(_DEFAULT_ROUTES)
        raw_routes = data.get("routes", {}) if isinstance(data, dict) else {}
        if isinstance(raw_routes, dict):
            for key, entries in raw_routes.items():
                parsed: List[Route] = []
                for entry in entries or []:
                    if not isinstance(entry, dict):
                        continue
                    role = str(entry.get("recipient", "")).strip()
                    template = str(entry.get("template", "")).strip()
                    if role and template:
                        parsed.append((role, template))
                routes[str(key).strip()] = parsed

        recipients = dict(_DEFAULT_PARTY_RECIPIENTS)
        raw_recipients = data.get("party_recipients", {}) if isinstance(data, dict) else {}
        if isinstance(raw_recipients, dict):
            recipients.update({str(k): str(v) for k, v in raw_recipients.items() if str(v).strip()})

        return cls(routes=routes, party_recipients=recipients)

    def routes_for(self, action: DocumentAction, target: DocumentStatus) -> List[Route]:
        specific = f"{action.value}->{target.value}"
        if specific in self._routes:
            return list(self._routes[specific])
        return list(self._routes.get(action.value, []))

    def recipient_for_party(self, party_label: str) -> Optional[str]:
        """Role that should receive a reminder for a pending-with label."""
        return self._party_recipients.get(party_label)
