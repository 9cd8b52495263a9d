"""Domain entities for the SphinxBridge system."""
from __future__ import annotations

from dataclasses import dataclass, field
from math import ceil
from typing import Any, Iterator, Mapping

DEFAULT_ID_BITS = 32
DEFAULT_SERVER = "localhost"
DEFAULT_PORT = 9312
DEFAULT_MATCH_MODE = "extended"
DEFAULT_PAGE_SIZE = 20
DEFAULT_PAGE = 1

STATUS_OK = 0
STATUS_ERROR = 1
STATUS_RETRY = 2
STATUS_WARNING = 3


@dataclass(slots=True)
class IndexedDocument:
    """A schemaless store record that is mirrored into the search daemon."""

    class_tag: str
    fields: dict[str, Any] = field(default_factory=dict)
    identifier: int | None = None
    key: str = ""


@dataclass(frozen=True, slots=True)
class IndexConfiguration:
    """Per-class index settings, fixed at registration time."""

    class_tag: str
    fields: tuple[str, ...]
    attributes: tuple[str, ...] = ()
    id_bits: int = DEFAULT_ID_BITS
    server: str = DEFAULT_SERVER
    port: int = DEFAULT_PORT
    index: str = ""

    @property
    def index_name(self) -> str:
        return self.index or self.class_tag.lower()

    @property
    def id_space(self) -> int:
        return 1 << self.id_bits


@dataclass(frozen=True, slots=True)
class AttributeFilter:
    """Exact-match constraint on a daemon attribute (any of ``values``)."""

    attribute: str
    values: tuple[Any, ...]
    exclude: bool = False


@dataclass(frozen=True, slots=True)
class QueryRequest:
    """A daemon-ready query."""

    text: str
    index: str = "*"
    match_mode: str = DEFAULT_MATCH_MODE
    limit: int = DEFAULT_PAGE_SIZE
    offset: int = 0
    max_matches: int | None = None
    sort_mode: str | None = None
    sort_by: str | None = None
    filters: tuple[AttributeFilter, ...] = ()
    class_scope: str | None = None


@dataclass(slots=True)
class RawMatch:
    """One ranked match as returned by the daemon."""

    document_id: Any
    weight: float = 0.0
    attributes: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class DaemonResult:
    """Raw daemon response for a single query."""

    status: int = STATUS_OK
    total_found: int = 0
    matches: list[RawMatch] = field(default_factory=list)
    total: int = 0
    time: float = 0.0
    error: str = ""
    warning: str = ""
    words: dict[str, Any] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.status in (STATUS_OK, STATUS_WARNING)


@dataclass(slots=True)
class SearchOptions:
    """Options accepted by the search entry point."""

    match_mode: str | None = None
    limit: Any = None
    max_matches: int | None = None
    sort_by: str | None = None
    with_: dict[str, Any] = field(default_factory=dict)
    raw: bool = False
    select: tuple[str, ...] | None = None
    page_size: Any = None
    page: Any = None

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any] | None) -> SearchOptions:
        """Build options from a plain mapping, accepting ``with`` for filters."""

        data = dict(options or {})
        filters = data.pop("with", None)
        if filters is not None:
            data["with_"] = filters
        unknown = set(data) - set(cls.__dataclass_fields__)
        if unknown:
            raise ValueError(f"Unknown search options: {', '.join(sorted(unknown))}")
        select = data.get("select")
        if select is not None:
            data["select"] = tuple(select)
        data["with_"] = dict(data.get("with_") or {})
        return cls(**data)


@dataclass(frozen=True, slots=True)
class SearchResults:
    """Paginated, materialized view over one daemon query."""

    total_found: int
    page: int
    page_size: int
    documents: tuple[Any, ...] = ()
    raw_status: int = STATUS_OK
    time: float = 0.0
    words: Mapping[str, Any] = field(default_factory=dict)

    @property
    def total_pages(self) -> int:
        if self.total_found <= 0:
            return 0
        return ceil(self.total_found / self.page_size)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def previous_page(self) -> int | None:
        return self.page - 1 if self.page > 1 else None

    @property
    def next_page(self) -> int | None:
        return self.page + 1 if self.page < self.total_pages else None

    def __len__(self) -> int:
        return len(self.documents)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.documents)


__all__ = [
    "AttributeFilter",
    "DaemonResult",
    "IndexConfiguration",
    "IndexedDocument",
    "QueryRequest",
    "RawMatch",
    "SearchOptions",
    "SearchResults",
    "DEFAULT_ID_BITS",
    "DEFAULT_MATCH_MODE",
    "DEFAULT_PAGE",
    "DEFAULT_PAGE_SIZE",
    "DEFAULT_PORT",
    "DEFAULT_SERVER",
    "STATUS_ERROR",
    "STATUS_OK",
    "STATUS_RETRY",
    "STATUS_WARNING",
]
