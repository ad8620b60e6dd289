"""Document activity log.

Every successful transition produces exactly one log entry. The log is
append-only; entries are never updated or removed.

Two sinks are provided:
- :class:`SQLiteDocumentLog` persists to an ``audit_log`` table.
- :class:`InMemoryDocumentLog` keeps entries in a list (tests, previews).
"""

from __future__ import annotations

import json
import logging
import sqlite3
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Protocol

from core.common.db_interface import SQLiteRepository
from core.helpers.date_time_helper import utc_now_iso
from sop_documents.dto.effects import LogEffect

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocumentLogEntry:
    document_id: str
    action_kind: str
    timestamp: str
    details: Dict[str, Any] = field(default_factory=dict)
    acting_role: Optional[str] = None


class LogSink(Protocol):
    def log_action(self, document_id: str, action_kind: str, details: Mapping[str, Any]) -> None: ...

    def entries_for(self, document_id: str) -> List[DocumentLogEntry]: ...


class InMemoryDocumentLog:
    """List-backed sink."""

    def __init__(self) -> None:
        self._entries: List[DocumentLogEntry] = []

    def log_action(self, document_id: str, action_kind: str, details: Mapping[str, Any]) -> None:
        data = dict(details or {})
        self._entries.append(
            DocumentLogEntry(
                document_id=document_id,
                action_kind=action_kind,
                timestamp=utc_now_iso(),
                details=data,
                acting_role=data.get("actingRole"),
            )
        )

    def entries_for(self, document_id: str) -> List[DocumentLogEntry]:
        return [e for e in self._entries if e.document_id == document_id]

    @property
    def entries(self) -> List[DocumentLogEntry]:
        return list(self._entries)


class SQLiteDocumentLog(SQLiteRepository):
    """Append-only ``audit_log`` table."""

    def __init__(self, db_path: Path | str) -> None:
        super().__init__(db_path)

    def _ensure_schema(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS audit_log (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                doc_id TEXT NOT NULL,
                ts_utc TEXT NOT NULL,
                acting_role TEXT,
                action TEXT NOT NULL,
                details TEXT
            )
            """
        )
        conn.execute("CREATE INDEX IF NOT EXISTS ix_audit_log_doc ON audit_log(doc_id)")
        conn.commit()

    def log_action(self, document_id: str, action_kind: str, details: Mapping[str, Any]) -> None:
        data = dict(details or {})
        with self.transaction() as conn:
            conn.execute(
                "INSERT INTO audit_log(doc_id, ts_utc, acting_role, action, details) VALUES (?,?,?,?,?)",
                (
                    document_id,
                    utc_now_iso(),
                    data.get("actingRole"),
                    action_kind,
                    json.dumps(data, ensure_ascii=False, default=str),
                ),
            )

    def entries_for(self, document_id: str) -> List[DocumentLogEntry]:
        rows = self.connect().execute(
            "SELECT doc_id, ts_utc, acting_role, action, details FROM audit_log WHERE doc_id = ? ORDER BY id",
            (document_id,),
        ).fetchall()
        out: List[DocumentLogEntry] = []
        for r in rows:
            try:
                details = json.loads(r["details"] or "{}")
            except ValueError:
                logger.warning("Corrupt log details for document %s", document_id)
                details = {}
            out.append(
                DocumentLogEntry(
                    document_id=r["doc_id"],
                    action_kind=r["action"],
                    timestamp=r["ts_utc"],
                    details=details,
                    acting_role=r["acting_role"],
                )
            )
        return out


class AuditService:
    """Writes :class:`LogEffect` instructions to a sink."""

    def __init__(self, sink: LogSink) -> None:
        self._sink = sink

    def record(self, effect: LogEffect) -> None:
        self._sink.log_action(effect.document_id, effect.action_kind, effect.details)
        logger.info("Logged %s for document %s", effect.action_kind, effect.document_id)

    def history(self, document_id: str) -> List[DocumentLogEntry]:
        return self._sink.entries_for(document_id)
