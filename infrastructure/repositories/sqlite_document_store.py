"""SQLite-хранилище документов с уникальным индексом по идентификатору демона."""
from __future__ import annotations

import json
import logging
import sqlite3
import uuid
from pathlib import Path
from typing import Iterable, Sequence

from domain.entities import IndexedDocument
from domain.errors import DuplicateIdentifier, StoreLookupError
from domain.interfaces import DocumentStore

logger = logging.getLogger(__name__)

_BATCH_SIZE = 500


class SqliteDocumentStore(DocumentStore):
    """Хранит произвольные документы как JSON в лёгкой SQLite-базе."""

    def __init__(self, db_path: str | Path = "sphinxbridge.db") -> None:
        self._db_path = Path(db_path)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self._db_path)

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS schema_version (
                    id INTEGER PRIMARY KEY CHECK (id = 1),
                    version INTEGER NOT NULL
                )
                """
            )
            conn.execute("INSERT OR IGNORE INTO schema_version (id, version) VALUES (1, 1)")
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS documents (
                    doc_key TEXT PRIMARY KEY,
                    class_tag TEXT NOT NULL,
                    identifier INTEGER,
                    fields TEXT NOT NULL
                )
                """
            )
            conn.execute(
                """
                CREATE UNIQUE INDEX IF NOT EXISTS idx_documents_class_identifier
                ON documents (class_tag, identifier)
                """
            )

    def find_by_identifier(self, class_tag: str, identifier: int) -> IndexedDocument | None:
        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT doc_key, class_tag, identifier, fields FROM documents WHERE class_tag = ? AND identifier = ?",
                    (class_tag, identifier),
                ).fetchone()
        except sqlite3.Error as exc:
            raise StoreLookupError(f"Lookup of {class_tag}/{identifier} failed: {exc}") from exc
        if row is None:
            return None
        return self._row_to_document(row)

    def find_all_by_identifiers(
        self,
        class_tag: str,
        identifiers: Iterable[int],
        select: Sequence[str] | None = None,
    ) -> list[IndexedDocument]:
        wanted = list(dict.fromkeys(identifiers))
        documents: list[IndexedDocument] = []
        try:
            with self._connect() as conn:
                for start in range(0, len(wanted), _BATCH_SIZE):
                    batch = wanted[start : start + _BATCH_SIZE]
                    placeholders = ", ".join("?" for _ in batch)
                    rows = conn.execute(
                        f"""
                        SELECT doc_key, class_tag, identifier, fields FROM documents
                        WHERE class_tag = ? AND identifier IN ({placeholders})
                        """,
                        (class_tag, *batch),
                    ).fetchall()
                    documents.extend(self._row_to_document(row, select) for row in rows)
        except sqlite3.Error as exc:
            raise StoreLookupError(f"Batch fetch for {class_tag} failed: {exc}") from exc
        return documents

    def insert_or_replace(self, document: IndexedDocument) -> None:
        if not document.key:
            document.key = str(uuid.uuid4())
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO documents (doc_key, class_tag, identifier, fields) VALUES (?, ?, ?, ?)
                    ON CONFLICT(doc_key) DO UPDATE SET
                        class_tag = excluded.class_tag,
                        identifier = excluded.identifier,
                        fields = excluded.fields
                    """,
                    (document.key, document.class_tag, document.identifier, json.dumps(document.fields)),
                )
        except sqlite3.IntegrityError as exc:
            if document.identifier is None:
                raise
            logger.debug("Identifier %d already taken in %s: %s", document.identifier, document.class_tag, exc)
            raise DuplicateIdentifier(document.class_tag, document.identifier) from exc

    def count(self, class_tag: str) -> int:
        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT COUNT(*) FROM documents WHERE class_tag = ? AND identifier IS NOT NULL",
                    (class_tag,),
                ).fetchone()
        except sqlite3.Error as exc:
            raise StoreLookupError(f"Count for {class_tag} failed: {exc}") from exc
        return int(row[0])

    def get(self, key: str) -> IndexedDocument | None:
        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT doc_key, class_tag, identifier, fields FROM documents WHERE doc_key = ?",
                    (key,),
                ).fetchone()
        except sqlite3.Error as exc:
            raise StoreLookupError(f"Lookup of document {key} failed: {exc}") from exc
        if row is None:
            return None
        return self._row_to_document(row)

    def delete(self, key: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM documents WHERE doc_key = ?", (key,))

    @staticmethod
    def _row_to_document(row: tuple, select: Sequence[str] | None = None) -> IndexedDocument:
        fields = json.loads(row[3])
        if select is not None:
            fields = {name: fields[name] for name in select if name in fields}
        return IndexedDocument(key=row[0], class_tag=row[1], identifier=row[2], fields=fields)


__all__ = ["SqliteDocumentStore"]
