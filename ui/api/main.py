"""FastAPI layer that exposes registration, save and search operations."""
from __future__ import annotations

from dataclasses import asdict, is_dataclass
from typing import Any

from fastapi import FastAPI, Query as FastAPIQuery, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from application.use_cases.save_document import save_document
from application.use_cases.search import search
from domain.entities import DEFAULT_ID_BITS, DEFAULT_PORT, DEFAULT_SERVER, IndexedDocument, SearchOptions
from domain.errors import ClassAlreadyRegistered, ClassNotRegistered, DaemonUnavailable, DuplicateIdentifier, SpaceExhausted
from infrastructure.config import ContainerConfig, build_default_container
from ui.logging_utils import setup_logging

setup_logging()
app = FastAPI(title="SphinxBridge API")
container = build_default_container(ContainerConfig.from_env())


class ClassPayload(BaseModel):
    class_tag: str
    fields: list[str]
    attributes: list[str] = Field(default_factory=list)
    server: str = DEFAULT_SERVER
    port: int = DEFAULT_PORT
    idsize: int = DEFAULT_ID_BITS
    index: str = ""


class ClassResponse(BaseModel):
    class_tag: str
    index: str
    fields: list[str]
    attributes: list[str]
    id_bits: int


class DocumentPayload(BaseModel):
    key: str = ""
    identifier: int | None = None
    fields: dict[str, Any] = Field(default_factory=dict)


class SavedDocument(BaseModel):
    key: str
    class_tag: str
    identifier: int | None


class SearchResponse(BaseModel):
    query: str
    total_found: int
    page: int
    page_size: int
    total_pages: int
    documents: list[dict[str, Any]] = Field(default_factory=list)
    identifiers: list[int] | None = None


_ERROR_STATUS = {
    ClassNotRegistered: 404,
    ClassAlreadyRegistered: 409,
    DuplicateIdentifier: 409,
    SpaceExhausted: 507,
    DaemonUnavailable: 503,
    ValueError: 422,
}


def _error_handler(status_code: int):
    async def handler(_request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    return handler


for _exc_type, _status_code in _ERROR_STATUS.items():
    app.add_exception_handler(_exc_type, _error_handler(_status_code))


def _serialize(document: Any) -> dict[str, Any]:
    if is_dataclass(document):
        return asdict(document)
    if isinstance(document, dict):
        return document
    return {"value": str(document)}


def _run_search(
    q: str,
    class_tag: str | None,
    page: str | None,
    page_size: str | None,
    match_mode: str | None,
    sort_by: str | None,
    raw: bool,
    select: list[str] | None,
) -> SearchResponse:
    options = SearchOptions(
        match_mode=match_mode,
        sort_by=sort_by,
        raw=raw,
        select=tuple(select) if select else None,
        page=page,
        page_size=page_size,
    )
    outcome = search(
        q,
        class_tag=class_tag,
        options=options,
        registry=container.registry,
        store=container.store,
        client_factory=container.client_factory,
        query_builder=container.query_builder,
    )
    page_number = container.query_builder.page(options)
    size = container.query_builder.page_size(options)
    if isinstance(outcome, list):
        return SearchResponse(
            query=q,
            total_found=len(outcome),
            page=page_number,
            page_size=size,
            total_pages=1 if outcome else 0,
            identifiers=outcome,
        )
    return SearchResponse(
        query=q,
        total_found=outcome.total_found,
        page=outcome.page,
        page_size=outcome.page_size,
        total_pages=outcome.total_pages,
        documents=[_serialize(document) for document in outcome.documents],
    )


@app.post("/classes", response_model=ClassResponse, status_code=201)
def register_class_endpoint(payload: ClassPayload) -> ClassResponse:
    registration = container.registry.register(
        payload.class_tag,
        *payload.fields,
        server=payload.server,
        port=payload.port,
        idsize=payload.idsize,
        attributes=payload.attributes,
        index=payload.index,
    )
    configuration = registration.configuration
    return ClassResponse(
        class_tag=configuration.class_tag,
        index=configuration.index_name,
        fields=list(configuration.fields),
        attributes=list(configuration.attributes),
        id_bits=configuration.id_bits,
    )


@app.post("/documents/{class_tag}", response_model=SavedDocument)
def save_document_endpoint(class_tag: str, payload: DocumentPayload) -> SavedDocument:
    document = IndexedDocument(
        class_tag=class_tag,
        fields=payload.fields,
        identifier=payload.identifier,
        key=payload.key,
    )
    saved = save_document(
        document,
        registry=container.registry,
        store=container.store,
        generator=container.generator,
    )
    return SavedDocument(key=saved.key, class_tag=saved.class_tag, identifier=saved.identifier)


@app.get("/search", response_model=SearchResponse)
def search_endpoint(
    q: str = FastAPIQuery(..., description="Full-text query"),
    page: str | None = None,
    page_size: str | None = None,
    match_mode: str | None = None,
    sort_by: str | None = None,
    raw: bool = False,
    select: list[str] | None = FastAPIQuery(None),
) -> SearchResponse:
    return _run_search(q, None, page, page_size, match_mode, sort_by, raw, select)


@app.get("/search/{class_tag}", response_model=SearchResponse)
def class_search_endpoint(
    class_tag: str,
    q: str = FastAPIQuery(..., description="Full-text query"),
    page: str | None = None,
    page_size: str | None = None,
    match_mode: str | None = None,
    sort_by: str | None = None,
    raw: bool = False,
    select: list[str] | None = FastAPIQuery(None),
) -> SearchResponse:
    return _run_search(q, class_tag, page, page_size, match_mode, sort_by, raw, select)
