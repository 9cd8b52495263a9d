"""Abstract interfaces for the SphinxBridge system."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, Sequence

from domain.entities import DaemonResult, IndexedDocument, QueryRequest


class DocumentStore(ABC):
    """Schemaless document store keyed by class tag and daemon identifier."""

    @abstractmethod
    def find_by_identifier(self, class_tag: str, identifier: int) -> IndexedDocument | None:
        """Return the document holding ``identifier`` or ``None`` when it is free.

        Implementations raise ``StoreLookupError`` when the lookup itself fails.
        """

    @abstractmethod
    def find_all_by_identifiers(
        self,
        class_tag: str,
        identifiers: Iterable[int],
        select: Sequence[str] | None = None,
    ) -> list[IndexedDocument]:
        """Batch fetch documents of a class; the order of the result is unspecified."""

    @abstractmethod
    def insert_or_replace(self, document: IndexedDocument) -> None:
        """Persist a document, raising ``DuplicateIdentifier`` on an identifier clash."""

    @abstractmethod
    def count(self, class_tag: str) -> int:
        """Return the number of documents holding an identifier in the class."""

    @abstractmethod
    def get(self, key: str) -> IndexedDocument | None:
        """Return the document stored under ``key`` or ``None``."""


class SearchDaemonClient(ABC):
    """Client for the external full-text search daemon."""

    @abstractmethod
    def query(self, request: QueryRequest) -> DaemonResult:
        """Run a query and return ranked matches; raises ``DaemonUnavailable`` on transport errors."""


__all__ = [
    "DocumentStore",
    "SearchDaemonClient",
]
