"""Builds the immutable ``SearchResults`` view."""
from __future__ import annotations

import logging
from typing import Any, Sequence

from domain.entities import DaemonResult, SearchResults

logger = logging.getLogger(__name__)


def assemble_results(
    raw: DaemonResult,
    documents: Sequence[Any],
    page: int,
    page_size: int,
) -> SearchResults:
    """Combine daemon stats with resolved documents.

    A failed query or one without matches yields an empty result, never an error.
    """

    if not raw.succeeded or raw.total_found <= 0:
        if not raw.succeeded:
            logger.warning("Daemon returned status %d: %s", raw.status, raw.error or "no details")
        return SearchResults(
            total_found=0,
            page=page,
            page_size=page_size,
            documents=(),
            raw_status=raw.status,
            time=raw.time,
            words=dict(raw.words),
        )
    if raw.warning:
        logger.warning("Daemon warning: %s", raw.warning)
    return SearchResults(
        total_found=raw.total_found,
        page=page,
        page_size=page_size,
        documents=tuple(documents),
        raw_status=raw.status,
        time=raw.time,
        words=dict(raw.words),
    )


__all__ = ["assemble_results"]
