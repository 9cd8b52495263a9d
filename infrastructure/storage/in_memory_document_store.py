"""Хранилище документов в памяти для демо и тестов."""
from __future__ import annotations

import copy
import uuid
from typing import Iterable, Sequence

from domain.entities import IndexedDocument
from domain.errors import DuplicateIdentifier
from domain.interfaces import DocumentStore


class InMemoryDocumentStore(DocumentStore):
    """Хранит документы в словарях Python."""

    def __init__(self) -> None:
        self._documents: dict[str, IndexedDocument] = {}
        self._by_identifier: dict[tuple[str, int], str] = {}

    def find_by_identifier(self, class_tag: str, identifier: int) -> IndexedDocument | None:
        key = self._by_identifier.get((class_tag, identifier))
        if key is None:
            return None
        return copy.deepcopy(self._documents[key])

    def find_all_by_identifiers(
        self,
        class_tag: str,
        identifiers: Iterable[int],
        select: Sequence[str] | None = None,
    ) -> list[IndexedDocument]:
        wanted = set(identifiers)
        documents: list[IndexedDocument] = []
        for document in self._documents.values():
            if document.class_tag != class_tag or document.identifier not in wanted:
                continue
            fields = copy.deepcopy(document.fields)
            if select is not None:
                fields = {name: fields[name] for name in select if name in fields}
            documents.append(
                IndexedDocument(
                    key=document.key,
                    class_tag=document.class_tag,
                    identifier=document.identifier,
                    fields=fields,
                )
            )
        return documents

    def insert_or_replace(self, document: IndexedDocument) -> None:
        if not document.key:
            document.key = str(uuid.uuid4())
        if document.identifier is not None:
            owner = self._by_identifier.get((document.class_tag, document.identifier))
            if owner is not None and owner != document.key:
                raise DuplicateIdentifier(document.class_tag, document.identifier)

        previous = self._documents.get(document.key)
        if previous is not None and previous.identifier is not None:
            self._by_identifier.pop((previous.class_tag, previous.identifier), None)
        self._documents[document.key] = copy.deepcopy(document)
        if document.identifier is not None:
            self._by_identifier[(document.class_tag, document.identifier)] = document.key

    def count(self, class_tag: str) -> int:
        return sum(1 for class_key, _identifier in self._by_identifier if class_key == class_tag)

    def get(self, key: str) -> IndexedDocument | None:
        document = self._documents.get(key)
        return copy.deepcopy(document) if document is not None else None

    def delete(self, key: str) -> None:
        document = self._documents.pop(key, None)
        if document is not None and document.identifier is not None:
            self._by_identifier.pop((document.class_tag, document.identifier), None)


__all__ = ["InMemoryDocumentStore"]
