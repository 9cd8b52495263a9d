"""Turns free text plus search options into a daemon query."""
from __future__ import annotations

import logging
from typing import Any, Mapping

from application.services.attribute_codec import CLASS_FIELD
from domain.entities import (
    DEFAULT_MATCH_MODE,
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    AttributeFilter,
    IndexConfiguration,
    QueryRequest,
    SearchOptions,
)

logger = logging.getLogger(__name__)

EXTENDED_SORT_MODE = "extended"


def normalize_page(value: Any, default: int) -> int:
    """Coerce a page/page size value; anything non-numeric or below one falls back."""

    if value is None or isinstance(value, bool):
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def build_filters(constraints: Mapping[str, Any]) -> tuple[AttributeFilter, ...]:
    filters: list[AttributeFilter] = []
    for attribute, value in constraints.items():
        if isinstance(value, (list, tuple, set, frozenset)):
            values = tuple(value)
        else:
            values = (value,)
        filters.append(AttributeFilter(attribute=str(attribute), values=values))
    return tuple(filters)


class QueryBuilder:
    """Builds ``QueryRequest`` objects for scoped and store-wide searches."""

    def __init__(self, default_index: str = "*") -> None:
        self._default_index = default_index

    def build(
        self,
        configuration: IndexConfiguration | None,
        text: str,
        options: SearchOptions | None = None,
    ) -> QueryRequest:
        opts = options or SearchOptions()

        if configuration is None:
            query_text = text
            index = self._default_index
            class_scope = None
        else:
            query_text = f"{text} @{CLASS_FIELD} {configuration.class_tag}"
            index = configuration.index_name
            class_scope = configuration.class_tag

        page_size = self.page_size(opts)
        page = self.page(opts)

        sort_mode = EXTENDED_SORT_MODE if opts.sort_by else None
        request = QueryRequest(
            text=query_text,
            index=index,
            match_mode=opts.match_mode or DEFAULT_MATCH_MODE,
            limit=page_size,
            offset=(page - 1) * page_size,
            max_matches=opts.max_matches if opts.max_matches else None,
            sort_mode=sort_mode,
            sort_by=opts.sort_by or None,
            filters=build_filters(opts.with_),
            class_scope=class_scope,
        )
        logger.debug("Built query %r on %s (limit=%d, offset=%d)", request.text, index, request.limit, request.offset)
        return request

    @staticmethod
    def page_size(options: SearchOptions) -> int:
        # limit always follows the page size
        return normalize_page(options.page_size, DEFAULT_PAGE_SIZE)

    @staticmethod
    def page(options: SearchOptions) -> int:
        return normalize_page(options.page, DEFAULT_PAGE)


__all__ = ["QueryBuilder", "build_filters", "normalize_page", "EXTENDED_SORT_MODE"]
