"""
core/common/db_interface.py
===========================

Shared interface + helpers for SQLite-backed stores.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional
import sqlite3

MEMORY_DB = ":memory:"


def create_sqlite_connection(
    db_path: Path | str,
    *,
    check_same_thread: bool = False,
    foreign_keys: bool = False,
) -> sqlite3.Connection:
    """Create a sqlite3 connection with common defaults (Row factory)."""
    target = str(db_path)
    if target != MEMORY_DB:
        Path(target).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(target, check_same_thread=check_same_thread)
    conn.row_factory = sqlite3.Row
    if foreign_keys:
        conn.execute("PRAGMA foreign_keys = ON")
    return conn


class DatabaseAccess(ABC):
    """Interface for stores that depend on a database."""

    @property
    @abstractmethod
    def db_path(self) -> Path:
        raise NotImplementedError

    @abstractmethod
    def connect(self) -> sqlite3.Connection:
        raise NotImplementedError


class SQLiteRepository(DatabaseAccess):
    """Default SQLite implementation holding one shared connection.

    A ``:memory:`` path only lives as long as that connection, so the
    connection is opened once and reused.
    """

    def __init__(self, db_path: Path | str, *, foreign_keys: bool = False) -> None:
        self._db_path = Path(db_path)
        self._raw_path = str(db_path)
        self._conn: Optional[sqlite3.Connection] = None
        self._foreign_keys = foreign_keys

    @property
    def db_path(self) -> Path:
        return self._db_path

    def connect(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = create_sqlite_connection(self._raw_path, foreign_keys=self._foreign_keys)
            self._ensure_schema(self._conn)
        return self._conn

    def _ensure_schema(self, conn: sqlite3.Connection) -> None:
        """Hook for subclasses: CREATE TABLE IF NOT EXISTS ..."""

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        conn = self.connect()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    def close(self) -> None:
        if self._conn is not None:
            try:
                self._conn.close()
            finally:
                self._conn = None
