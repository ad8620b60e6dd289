"""WorkflowService orchestration: store, log, notifications."""
from __future__ import annotations

import logging
from datetime import date
from pathlib import Path

import pytest

from core.config.config_service import ConfigService
from sop_documents.dto.transition import TransitionPayload, TransitionRequest
from sop_documents.enum.document_action import DocumentAction
from sop_documents.enum.document_status import DocumentStatus
from sop_documents.enum.user_role import UserRole
from sop_documents.exceptions.errors import DocumentNotFoundError, InvalidTransition, PersistenceError
from sop_documents.models.document_models import SopDocument
from sop_documents.repository.document_store import InMemoryDocumentStore
from sop_documents.services.audit_service import InMemoryDocumentLog
from sop_documents.services.notification_service import RecordingNotifier
from sop_documents.services.workflow_service import WorkflowService


class FlakyStore(InMemoryDocumentStore):
    def __init__(self, failures: int, documents=None) -> None:
        super().__init__(documents)
        self.failures = failures
        self.calls = 0

    def save(self, doc: SopDocument) -> None:
        self.calls += 1
        if self.calls <= self.failures:
            raise PersistenceError("database is locked")
        super().save(doc)


class BrokenLog(InMemoryDocumentLog):
    def log_action(self, document_id, action_kind, details) -> None:
        raise RuntimeError("log database offline")


class BrokenNotifier:
    def notify(self, recipient_role, document_id, template_key) -> None:
        raise ConnectionError("mail server down")


def _approved() -> SopDocument:
    return SopDocument(id="doc-1", status=DocumentStatus.APPROVED, sop_name="Cash Handling")


def _service(store=None, log=None, notifier=None, **kw) -> WorkflowService:
    return WorkflowService(
        store=store or InMemoryDocumentStore([_approved()]),
        log_sink=log or InMemoryDocumentLog(),
        notifier=notifier or RecordingNotifier(),
        **kw,
    )


def test_perform_persists_logs_and_notifies() -> None:
    store = InMemoryDocumentStore([_approved()])
    log = InMemoryDocumentLog()
    notifier = RecordingNotifier()
    service = _service(store, log, notifier)

    result = service.perform("doc-1", "changeStatus", "document-controller", today=date(2024, 5, 17))

    assert store.get("doc-1").status == DocumentStatus.LIVE
    assert store.get("doc-1").upload_date == "2024-05-17"
    assert result.document == store.get("doc-1")
    assert [e.action_kind for e in service.history("doc-1")] == ["status_change"]
    assert {n.recipient_role for n in notifier.sent} == {"document-owner", "document-creator"}


def test_stale_decision_is_rechecked() -> None:
    store = InMemoryDocumentStore([_approved()])
    service = _service(store)
    service.perform("doc-1", DocumentAction.CHANGE_STATUS, UserRole.DOCUMENT_CONTROLLER)

    # A second click based on the old "approved" row must be refused.
    with pytest.raises(InvalidTransition):
        service.perform("doc-1", DocumentAction.CHANGE_STATUS, UserRole.DOCUMENT_CONTROLLER)
    assert service.history("doc-1")[-1].action_kind == "status_change"
    assert len(service.history("doc-1")) == 1


def test_unknown_document() -> None:
    with pytest.raises(DocumentNotFoundError):
        _service().perform("missing", "archive", "document-controller")


def test_persist_is_retried() -> None:
    store = FlakyStore(failures=2, documents=[_approved()])
    service = _service(store, persist_attempts=3)
    service.perform("doc-1", "archive", "document-controller")
    assert store.calls == 3
    assert store.get("doc-1").status == DocumentStatus.ARCHIVED


def test_persist_gives_up_without_side_effects() -> None:
    store = FlakyStore(failures=5, documents=[_approved()])
    log = InMemoryDocumentLog()
    notifier = RecordingNotifier()
    service = _service(store, log, notifier, persist_attempts=2)
    with pytest.raises(PersistenceError):
        service.perform("doc-1", "archive", "document-controller")
    assert store.calls == 2
    assert store.get("doc-1").status == DocumentStatus.APPROVED
    assert log.entries == []
    assert notifier.sent == []


def test_log_and_notify_failures_do_not_block(caplog) -> None:
    store = InMemoryDocumentStore([_approved()])
    service = _service(store, BrokenLog(), BrokenNotifier())
    with caplog.at_level(logging.WARNING):
        service.perform("doc-1", "archive", "document-controller")
    assert store.get("doc-1").status == DocumentStatus.ARCHIVED
    assert "log database offline" in caplog.text
    assert "mail server down" in caplog.text


def test_queries_and_request_object() -> None:
    service = _service()
    assert DocumentAction.CHANGE_STATUS in service.available_actions("doc-1", "document-controller")
    assert service.action_states("doc-1", "reviewer")[DocumentAction.CHANGE_STATUS].visible is False

    request = TransitionRequest(
        document_id="doc-1",
        action=DocumentAction.CHANGE_STATUS,
        acting_role=UserRole.DOCUMENT_CONTROLLER,
        payload=TransitionPayload(upload_date="2024-06-01"),
    )
    result = service.execute(request)
    assert result.document.upload_date == "2024-06-01"


def test_from_config(tmp_path: Path) -> None:
    config = ConfigService(
        defaults_ini=tmp_path / "none.ini",
        machine_ini=tmp_path / "none.ini",
        environ={"SOPFLOW_WORKFLOW__PERSIST_ATTEMPTS": "1"},
    )
    store = FlakyStore(failures=1, documents=[_approved()])
    service = WorkflowService.from_config(config, store=store, log_sink=InMemoryDocumentLog())
    with pytest.raises(PersistenceError):
        service.perform("doc-1", "archive", "document-controller")
    assert store.calls == 1
