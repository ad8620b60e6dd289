# sop_documents/services/workflow_service.py
"""
WorkflowService - orchestrates one transition end to end.

Flow per action:
1. read the current document from the store
2. apply the transition (eligibility is re-checked against the fresh record)
3. persist, retrying a bounded number of times
4. dispatch log and notification effects

Log and notification failures are logged and never undo the transition.
Date stamps are already part of the saved document; they are only logged.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Union

from core.config.config_service import ConfigService
from sop_documents.dto.controls_state import ActionState
from sop_documents.dto.effects import DateStampEffect, LogEffect, NotificationEffect
from sop_documents.dto.transition import TransitionPayload, TransitionRequest, TransitionResult
from sop_documents.enum.document_action import DocumentAction
from sop_documents.enum.user_role import UserRole
from sop_documents.exceptions.errors import DocumentNotFoundError, DocumentsError, PersistenceError
from sop_documents.logic.eligibility import action_states, eligible_actions
from sop_documents.logic.workflow_engine import WorkflowEngine
from sop_documents.models.document_models import SopDocument
from sop_documents.repository.document_store import DocumentStore
from sop_documents.services.audit_service import AuditService, DocumentLogEntry, LogSink
from sop_documents.services.notification_service import LoggingNotifier, Notifier, deliver
from sop_documents.services.policy.notification_policy import NotificationPolicy

logger = logging.getLogger(__name__)

PayloadLike = Union[TransitionPayload, Mapping[str, Any], None]


class WorkflowService:
    """Store-aware facade around :class:`WorkflowEngine`."""

    def __init__(
        self,
        *,
        store: DocumentStore,
        log_sink: LogSink,
        notifier: Optional[Notifier] = None,
        engine: Optional[WorkflowEngine] = None,
        persist_attempts: int = 3,
    ) -> None:
        self._store = store
        self._audit = AuditService(log_sink)
        self._notifier = notifier or LoggingNotifier()
        self._engine = engine or WorkflowEngine()
        self._attempts = max(1, int(persist_attempts))

    @classmethod
    def from_config(
        cls,
        config: ConfigService,
        *,
        store: DocumentStore,
        log_sink: LogSink,
        notifier: Optional[Notifier] = None,
    ) -> "WorkflowService":
        policy = NotificationPolicy.load_from_file(config.files.notification_policy)
        engine = WorkflowEngine(
            notification_policy=policy,
            revision_gap_months=config.workflow.revision_gap_months,
            code_prefix=config.workflow.code_prefix,
        )
        return cls(
            store=store,
            log_sink=log_sink,
            notifier=notifier,
            engine=engine,
            persist_attempts=config.workflow.persist_attempts,
        )

    # ---- queries -----------------------------------------------------------

    def get(self, document_id: str) -> SopDocument:
        doc = self._store.get(document_id)
        if doc is None:
            raise DocumentNotFoundError(document_id)
        return doc

    def available_actions(self, document_id: str, role: UserRole | str) -> FrozenSet[DocumentAction]:
        return eligible_actions(role, self.get(document_id))

    def action_states(self, document_id: str, role: UserRole | str) -> Dict[DocumentAction, ActionState]:
        return action_states(role, self.get(document_id))

    def history(self, document_id: str) -> List[DocumentLogEntry]:
        return self._audit.history(document_id)

    # ---- commands ----------------------------------------------------------

    def perform(
        self,
        document_id: str,
        action: DocumentAction | str,
        role: UserRole | str,
        payload: PayloadLike = None,
        *,
        today: Optional[date] = None,
    ) -> TransitionResult:
        doc = self.get(document_id)
        try:
            result = self._engine.apply(doc, action, role, payload, today=today)
        except DocumentsError as ex:
            logger.warning("Transition %s by %s on %s refused: %s", action, role, document_id, ex)
            raise

        self._persist(result.document)
        self.dispatch(result)
        return result

    def execute(self, request: TransitionRequest, *, today: Optional[date] = None) -> TransitionResult:
        return self.perform(request.document_id, request.action, request.acting_role, request.payload, today=today)

    def register(self, result: TransitionResult) -> SopDocument:
        """Persist a freshly created document (see DocumentCreationService)."""
        self._persist(result.document)
        self.dispatch(result)
        return result.document

    # ---- internals ---------------------------------------------------------

    def _persist(self, doc: SopDocument) -> None:
        for attempt in range(1, self._attempts + 1):
            try:
                self._store.save(doc)
                return
            except PersistenceError as ex:
                logger.warning("Persist attempt %d/%d for %s failed: %s", attempt, self._attempts, doc.id, ex)
                if attempt == self._attempts:
                    raise

    def dispatch(self, result: TransitionResult) -> None:
        for effect in result.effects:
            if isinstance(effect, LogEffect):
                try:
                    self._audit.record(effect)
                except Exception as ex:  # log sink must never block the transition
                    logger.warning("Writing document log for %s failed: %s", effect.document_id, ex)
            elif isinstance(effect, NotificationEffect):
                try:
                    deliver(self._notifier, effect)
                except Exception as ex:  # notifier must never block the transition
                    logger.warning(
                        "Notification %s to %s failed: %s", effect.template_key, effect.recipient_role, ex
                    )
            elif isinstance(effect, DateStampEffect):
                logger.debug("Stamped %s=%s on %s", effect.field_name, effect.value, effect.document_id)
