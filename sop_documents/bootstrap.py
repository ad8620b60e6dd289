# sop_documents/bootstrap.py
"""Wires stores, log sink and services from configuration."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from core.config.config_service import ConfigService, config_service
from core.qm_logging.logging_config import configure_logging
from sop_documents.repository.sqlite_document_store import SQLiteDocumentStore
from sop_documents.services.audit_service import SQLiteDocumentLog
from sop_documents.services.document_creation_service import DocumentCreationService
from sop_documents.services.notification_service import LoggingNotifier, Notifier
from sop_documents.services.workflow_service import WorkflowService

logger = logging.getLogger(__name__)


@dataclass
class WorkflowContext:
    store: SQLiteDocumentStore
    log: SQLiteDocumentLog
    creation: DocumentCreationService
    workflow: WorkflowService

    def close(self) -> None:
        self.store.close()
        self.log.close()


def build_context(config: Optional[ConfigService] = None, *, notifier: Optional[Notifier] = None) -> WorkflowContext:
    cfg = config or config_service
    configure_logging(cfg.logging.level, cfg.logging.format)

    store = SQLiteDocumentStore(cfg.database.documents)
    log = SQLiteDocumentLog(cfg.database.logs)
    workflow = WorkflowService.from_config(cfg, store=store, log_sink=log, notifier=notifier or LoggingNotifier())
    logger.info("SOP workflow ready (documents=%s, logs=%s)", cfg.database.documents, cfg.database.logs)
    return WorkflowContext(
        store=store,
        log=log,
        creation=DocumentCreationService.from_config(cfg),
        workflow=workflow,
    )
