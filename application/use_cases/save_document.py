"""Use case that persists a document with a daemon-compatible identifier."""
from __future__ import annotations

import logging

from application.services.identifier_generator import IdentifierGenerator
from application.services.registry import ClassRegistry
from domain.entities import IndexedDocument
from domain.errors import DuplicateIdentifier, SpaceExhausted
from domain.interfaces import DocumentStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 5


def save_document(
    document: IndexedDocument,
    *,
    registry: ClassRegistry,
    store: DocumentStore,
    generator: IdentifierGenerator,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> IndexedDocument:
    """Assign an identifier when missing and write the document.

    Two writers may pick the same free identifier; the store's unique index
    rejects the second insert, which then draws again.
    """

    configuration = registry.configuration(document.class_tag)
    _keep_stored_identifier(document, store)
    assigned_here = document.identifier is None

    for attempt in range(1, max_attempts + 1):
        generator.ensure_identifier(document, configuration)
        try:
            store.insert_or_replace(document)
        except DuplicateIdentifier:
            if not assigned_here:
                raise
            logger.info(
                "Identifier %s lost a race in %s (attempt %d/%d)",
                document.identifier,
                document.class_tag,
                attempt,
                max_attempts,
            )
            document.identifier = None
            continue
        logger.debug("Saved %s document %s as %d", document.class_tag, document.key, document.identifier)
        return document

    raise SpaceExhausted(document.class_tag, max_attempts)


def _keep_stored_identifier(document: IndexedDocument, store: DocumentStore) -> None:
    # identifiers are never reassigned once a document holds one
    if not document.key:
        return
    stored = store.get(document.key)
    if stored is None or stored.identifier is None or stored.class_tag != document.class_tag:
        return
    if document.identifier is None:
        document.identifier = stored.identifier
    elif document.identifier != stored.identifier:
        raise ValueError(
            f"Document {document.key} already holds identifier {stored.identifier} in {document.class_tag}"
        )


__all__ = ["save_document", "DEFAULT_MAX_ATTEMPTS"]
