"""Search daemon client speaking the Manticore/Sphinx JSON HTTP protocol."""
from __future__ import annotations

import logging
from typing import Any

import requests

from domain.entities import (
    DEFAULT_PORT,
    DEFAULT_SERVER,
    STATUS_ERROR,
    STATUS_OK,
    STATUS_WARNING,
    AttributeFilter,
    DaemonResult,
    QueryRequest,
    RawMatch,
)
from domain.errors import DaemonUnavailable
from domain.interfaces import SearchDaemonClient

logger = logging.getLogger(__name__)

_SCORE_ALIASES = {"@weight", "@relevance", "@rank"}
_ID_ALIASES = {"@id"}


class HttpSearchDaemonClient(SearchDaemonClient):
    """Posts JSON queries to ``/search`` and converts the hits into matches."""

    def __init__(
        self,
        server: str = DEFAULT_SERVER,
        port: int = DEFAULT_PORT,
        *,
        timeout: float = 10.0,
        scheme: str = "http",
        session: requests.Session | None = None,
    ) -> None:
        self._base_url = f"{scheme}://{server}:{port}"
        self._timeout = timeout
        self._session = session or requests.Session()

    @property
    def base_url(self) -> str:
        return self._base_url

    def query(self, request: QueryRequest) -> DaemonResult:
        body = self.build_body(request)
        try:
            response = self._session.post(f"{self._base_url}/search", json=body, timeout=self._timeout)
        except requests.RequestException as exc:
            raise DaemonUnavailable(f"Search daemon at {self._base_url} unreachable: {exc}") from exc

        if response.status_code >= 500:
            raise DaemonUnavailable(f"Search daemon at {self._base_url} answered HTTP {response.status_code}")
        try:
            payload = response.json()
        except ValueError as exc:
            raise DaemonUnavailable(f"Search daemon at {self._base_url} sent a non-JSON reply") from exc

        if response.status_code >= 400 or payload.get("error"):
            error = payload.get("error") or f"HTTP {response.status_code}"
            logger.error("Search daemon rejected query %r: %s", request.text, error)
            return DaemonResult(status=STATUS_ERROR, error=self._message(error))
        return self.parse_response(payload)

    @classmethod
    def build_body(cls, request: QueryRequest) -> dict[str, Any]:
        must: list[dict[str, Any]] = [cls._full_text_clause(request.match_mode, request.text)]
        must_not: list[dict[str, Any]] = []
        for attribute_filter in request.filters:
            clause = cls._filter_clause(attribute_filter)
            (must_not if attribute_filter.exclude else must).append(clause)

        boolean: dict[str, Any] = {"must": must}
        if must_not:
            boolean["must_not"] = must_not
        body: dict[str, Any] = {
            "index": request.index,
            "query": {"bool": boolean},
            "limit": request.limit,
            "offset": request.offset,
        }
        if request.max_matches:
            body["max_matches"] = request.max_matches
        if request.sort_by:
            body["sort"] = parse_sort_by(request.sort_by)
        return body

    @staticmethod
    def parse_response(payload: dict[str, Any]) -> DaemonResult:
        hits = payload.get("hits") or {}
        matches = [
            RawMatch(
                document_id=hit.get("_id"),
                weight=float(hit.get("_score") or 0.0),
                attributes=dict(hit.get("_source") or {}),
            )
            for hit in hits.get("hits") or []
        ]
        warning = HttpSearchDaemonClient._message(payload.get("warning") or "")
        return DaemonResult(
            status=STATUS_WARNING if warning else STATUS_OK,
            total_found=int(hits.get("total") or 0),
            matches=matches,
            total=len(matches),
            time=float(payload.get("took") or 0) / 1000.0,
            warning=warning,
        )

    @staticmethod
    def _full_text_clause(match_mode: str, text: str) -> dict[str, Any]:
        mode = (match_mode or "extended").lower()
        if mode == "all":
            return {"match": {"*": {"query": text, "operator": "and"}}}
        if mode == "any":
            return {"match": {"*": {"query": text, "operator": "or"}}}
        if mode == "phrase":
            return {"match_phrase": {"*": text}}
        if mode == "fullscan":
            return {"match_all": {}}
        return {"query_string": text}

    @staticmethod
    def _filter_clause(attribute_filter: AttributeFilter) -> dict[str, Any]:
        if len(attribute_filter.values) == 1:
            return {"equals": {attribute_filter.attribute: attribute_filter.values[0]}}
        return {"in": {attribute_filter.attribute: list(attribute_filter.values)}}

    @staticmethod
    def _message(value: Any) -> str:
        if isinstance(value, dict):
            return str(value.get("reason") or value.get("type") or value)
        return str(value)


def parse_sort_by(sort_by: str) -> list[Any]:
    """Translate an extended sort clause such as ``"@weight DESC, date ASC"``."""

    entries: list[Any] = []
    for part in sort_by.split(","):
        tokens = part.split()
        if not tokens:
            continue
        name = tokens[0]
        direction = tokens[1].lower() if len(tokens) > 1 else "asc"
        if direction not in ("asc", "desc"):
            raise ValueError(f"Bad sort direction in {part.strip()!r}")
        if name.lower() in _SCORE_ALIASES:
            name = "_score"
        elif name.lower() in _ID_ALIASES:
            name = "id"
        entries.append({name: direction})
    return entries


__all__ = ["HttpSearchDaemonClient", "parse_sort_by"]
