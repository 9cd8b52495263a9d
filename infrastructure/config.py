"""Dependency wiring for the SphinxBridge application."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Literal, get_args

from application.services.identifier_generator import IdentifierGenerator
from application.services.query_builder import QueryBuilder
from application.services.registry import ClassRegistry
from domain.entities import DEFAULT_PORT, DEFAULT_SERVER, IndexConfiguration
from domain.interfaces import DocumentStore, SearchDaemonClient
from infrastructure.daemon.http_search_client import HttpSearchDaemonClient
from infrastructure.repositories.sqlite_document_store import SqliteDocumentStore
from infrastructure.storage.in_memory_document_store import InMemoryDocumentStore


StoreName = Literal["sqlite", "memory"]


@dataclass(slots=True)
class Container:
    """Simple container bundling concrete infrastructure implementations."""

    registry: ClassRegistry
    store: DocumentStore
    generator: IdentifierGenerator
    query_builder: QueryBuilder
    client_factory: Callable[[IndexConfiguration | None], SearchDaemonClient]


@dataclass(slots=True)
class ContainerConfig:
    """Configuration for the document store and the default daemon endpoint."""

    store: StoreName = "sqlite"
    db_path: str | Path = "sphinxbridge.db"
    daemon_server: str = DEFAULT_SERVER
    daemon_port: int = DEFAULT_PORT
    default_index: str = "*"
    daemon_timeout: float = 10.0
    registry: ClassRegistry = field(default_factory=ClassRegistry)

    @classmethod
    def from_env(cls) -> ContainerConfig:
        """Read settings from ``SPHINXBRIDGE_*`` environment variables."""

        defaults = cls()
        store = os.getenv("SPHINXBRIDGE_STORE", defaults.store)
        if store not in get_args(StoreName):
            raise ValueError(f"Unknown store '{store}'")
        return cls(
            store=store,  # type: ignore[arg-type]
            db_path=os.getenv("SPHINXBRIDGE_DB_PATH", str(defaults.db_path)),
            daemon_server=os.getenv("SPHINXBRIDGE_DAEMON_SERVER", defaults.daemon_server),
            daemon_port=int(os.getenv("SPHINXBRIDGE_DAEMON_PORT", defaults.daemon_port)),
            default_index=os.getenv("SPHINXBRIDGE_DEFAULT_INDEX", defaults.default_index),
            daemon_timeout=float(os.getenv("SPHINXBRIDGE_DAEMON_TIMEOUT", defaults.daemon_timeout)),
        )


def _build_store(cfg: ContainerConfig) -> DocumentStore:
    if cfg.store == "sqlite":
        return SqliteDocumentStore(db_path=cfg.db_path)
    if cfg.store == "memory":
        return InMemoryDocumentStore()
    raise ValueError(f"Unknown store '{cfg.store}'")


def build_default_container(config: ContainerConfig | None = None) -> Container:
    """Instantiate the default infrastructure stack."""

    cfg = config or ContainerConfig()
    registry = cfg.registry
    store = _build_store(cfg)
    clients: dict[tuple[str, int], SearchDaemonClient] = {}

    def client_factory(configuration: IndexConfiguration | None) -> SearchDaemonClient:
        if configuration is None:
            endpoint = (cfg.daemon_server, cfg.daemon_port)
        else:
            endpoint = (configuration.server, configuration.port)
        if endpoint not in clients:
            clients[endpoint] = HttpSearchDaemonClient(*endpoint, timeout=cfg.daemon_timeout)
        return clients[endpoint]

    return Container(
        registry=registry,
        store=store,
        generator=IdentifierGenerator(store),
        query_builder=QueryBuilder(default_index=cfg.default_index),
        client_factory=client_factory,
    )


__all__ = ["Container", "ContainerConfig", "build_default_container"]
