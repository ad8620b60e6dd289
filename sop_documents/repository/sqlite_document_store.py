"""SQLite-backed document store.

One row per document. Searchable columns are kept flat; the complete record
is stored as JSON in ``payload`` using the camelCase mapping of
:class:`SopDocument`.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from typing import List, Optional

from core.common.db_interface import SQLiteRepository
from core.helpers.date_time_helper import utc_now_iso
from sop_documents.enum.document_status import DocumentStatus
from sop_documents.exceptions.errors import PersistenceError
from sop_documents.models.document_models import SopDocument
from sop_documents.repository.document_store import matches

logger = logging.getLogger(__name__)


class SQLiteDocumentStore(SQLiteRepository):
    def __init__(self, db_path: Path | str) -> None:
        super().__init__(db_path)

    def _ensure_schema(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS documents (
                doc_id TEXT PRIMARY KEY,
                status TEXT NOT NULL,
                sop_name TEXT,
                document_code TEXT,
                version_number TEXT,
                updated_at TEXT NOT NULL,
                payload TEXT NOT NULL
            )
            """
        )
        conn.execute("CREATE INDEX IF NOT EXISTS ix_documents_status ON documents(status)")
        conn.commit()

    @staticmethod
    def _row_to_doc(row: sqlite3.Row) -> SopDocument:
        return SopDocument.from_dict(json.loads(row["payload"]))

    def get(self, doc_id: str) -> Optional[SopDocument]:
        row = self.connect().execute("SELECT payload FROM documents WHERE doc_id = ?", (doc_id,)).fetchone()
        return self._row_to_doc(row) if row else None

    def save(self, doc: SopDocument) -> None:
        try:
            with self.transaction() as conn:
                conn.execute(
                    """
                    INSERT INTO documents(doc_id, status, sop_name, document_code, version_number, updated_at, payload)
                    VALUES (?,?,?,?,?,?,?)
                    ON CONFLICT(doc_id) DO UPDATE SET
                        status=excluded.status,
                        sop_name=excluded.sop_name,
                        document_code=excluded.document_code,
                        version_number=excluded.version_number,
                        updated_at=excluded.updated_at,
                        payload=excluded.payload
                    """,
                    (
                        doc.id,
                        doc.status.value,
                        doc.sop_name,
                        doc.document_code,
                        doc.version_number,
                        utc_now_iso(),
                        json.dumps(doc.to_dict(), ensure_ascii=False),
                    ),
                )
        except sqlite3.Error as ex:
            logger.error("Saving document %s failed: %s", doc.id, ex)
            raise PersistenceError(f"Could not save document {doc.id}: {ex}") from ex

    def list(
        self,
        *,
        status: Optional[DocumentStatus] = None,
        text: Optional[str] = None,
    ) -> List[SopDocument]:
        if status is not None:
            rows = self.connect().execute(
                "SELECT payload FROM documents WHERE status = ? ORDER BY sop_name, doc_id",
                (DocumentStatus.parse(status).value,),
            ).fetchall()
        else:
            rows = self.connect().execute("SELECT payload FROM documents ORDER BY sop_name, doc_id").fetchall()
        return [d for d in (self._row_to_doc(r) for r in rows) if matches(d, None, text)]

    def exists(self, doc_id: str) -> bool:
        row = self.connect().execute("SELECT 1 FROM documents WHERE doc_id = ?", (doc_id,)).fetchone()
        return row is not None
