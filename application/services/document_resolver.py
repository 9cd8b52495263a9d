"""Fetches matched documents from the store in daemon rank order."""
from __future__ import annotations

import logging
from typing import Any, Sequence

from application.services.registry import ClassRegistry
from application.services.result_decoder import DecodedMatches
from domain.interfaces import DocumentStore

logger = logging.getLogger(__name__)


class DocumentResolver:
    """Batch-fetches documents per class and restores the ranking order."""

    def __init__(self, store: DocumentStore, registry: ClassRegistry) -> None:
        self._store = store
        self._registry = registry

    def resolve(
        self,
        class_tag: str,
        identifiers: Sequence[int],
        select: Sequence[str] | None = None,
    ) -> list[Any]:
        registration = self._registry.get(class_tag)
        if not identifiers:
            return []
        positions: dict[int, int] = {}
        for position, identifier in enumerate(identifiers):
            positions.setdefault(identifier, position)

        fetched = self._store.find_all_by_identifiers(class_tag, list(positions), select)
        found = [document for document in fetched if document.identifier in positions]
        found.sort(key=lambda document: positions[document.identifier])
        if len(found) < len(positions):
            logger.info(
                "%d of %d %s documents missing from the store",
                len(positions) - len(found),
                len(positions),
                class_tag,
            )
        return [registration.materialize(document) for document in found]

    def resolve_groups(self, decoded: DecodedMatches, select: Sequence[str] | None = None) -> list[Any]:
        """Resolve a possibly mixed-class result, one fetch per class."""

        groups = decoded.groups()
        if len(groups) == 1:
            class_tag, identifiers = next(iter(groups.items()))
            return self.resolve(class_tag, identifiers, select)

        by_entry: dict[tuple[str, int], Any] = {}
        for class_tag, identifiers in groups.items():
            registration = self._registry.get(class_tag)
            fetched = self._store.find_all_by_identifiers(class_tag, list(dict.fromkeys(identifiers)), select)
            for document in fetched:
                by_entry[(class_tag, document.identifier)] = registration.materialize(document)

        ordered: list[Any] = []
        seen: set[tuple[str, int]] = set()
        for entry in decoded.entries:
            if entry in seen or entry not in by_entry:
                continue
            seen.add(entry)
            ordered.append(by_entry[entry])
        return ordered


__all__ = ["DocumentResolver"]
