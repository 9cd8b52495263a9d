"""Use case that runs a full-text query and resolves the matches."""
from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from application.services.attribute_codec import AttributeCodec
from application.services.document_resolver import DocumentResolver
from application.services.query_builder import QueryBuilder
from application.services.registry import ClassRegistry
from application.services.result_decoder import ResultDecoder
from application.services.search_results import assemble_results
from domain.entities import IndexConfiguration, SearchOptions, SearchResults
from domain.interfaces import DocumentStore, SearchDaemonClient

logger = logging.getLogger(__name__)

ClientFactory = Callable[[IndexConfiguration | None], SearchDaemonClient]


def search(
    query_text: str,
    *,
    registry: ClassRegistry,
    store: DocumentStore,
    client_factory: ClientFactory,
    class_tag: str | None = None,
    options: SearchOptions | Mapping[str, Any] | None = None,
    query_builder: QueryBuilder | None = None,
) -> SearchResults | list[int]:
    """Search within ``class_tag`` or, without one, across every class.

    Returns the ordered identifier list instead of ``SearchResults`` when the
    ``raw`` option is set; the store is not touched in that case.
    """

    opts = options if isinstance(options, SearchOptions) else SearchOptions.from_mapping(options)
    builder = query_builder or QueryBuilder()
    configuration = registry.configuration(class_tag) if class_tag else None

    request = builder.build(configuration, query_text, opts)
    page_size = builder.page_size(opts)
    page = builder.page(opts)

    client = client_factory(configuration)
    raw = client.query(request)
    logger.info(
        "Query %r on %s: status=%d total_found=%d matches=%d",
        request.text,
        request.index,
        raw.status,
        raw.total_found,
        len(raw.matches),
    )

    if not raw.succeeded or raw.total_found <= 0 or not raw.matches:
        if opts.raw:
            return []
        return assemble_results(raw, [], page, page_size)

    decoded = ResultDecoder(AttributeCodec(registry)).decode(raw.matches, class_scope=request.class_scope)
    if opts.raw:
        return decoded.identifiers

    documents = DocumentResolver(store, registry).resolve_groups(decoded, opts.select)
    return assemble_results(raw, documents, page, page_size)


__all__ = ["search", "ClientFactory"]
