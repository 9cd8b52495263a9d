"""Registry of searchable document classes and their index configuration."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Iterator

from domain.entities import (
    DEFAULT_ID_BITS,
    DEFAULT_PORT,
    DEFAULT_SERVER,
    IndexConfiguration,
    IndexedDocument,
)
from domain.errors import ClassAlreadyRegistered, ClassNotRegistered

logger = logging.getLogger(__name__)

MAX_ID_BITS = 63

DocumentFactory = Callable[[IndexedDocument], Any]


def _identity(document: IndexedDocument) -> IndexedDocument:
    return document


@dataclass(frozen=True, slots=True)
class ClassRegistration:
    """Configuration plus the handler that materializes stored documents."""

    configuration: IndexConfiguration
    factory: DocumentFactory = _identity

    @property
    def class_tag(self) -> str:
        return self.configuration.class_tag

    def materialize(self, document: IndexedDocument) -> Any:
        return self.factory(document)


class ClassRegistry:
    """Closed set of registered classes, populated at configuration time."""

    def __init__(self) -> None:
        self._registrations: dict[str, ClassRegistration] = {}

    def register(
        self,
        class_tag: str,
        *fields: str,
        server: str = DEFAULT_SERVER,
        port: int = DEFAULT_PORT,
        idsize: int = DEFAULT_ID_BITS,
        attributes: Iterable[str] = (),
        index: str = "",
        factory: DocumentFactory | None = None,
    ) -> ClassRegistration:
        """Enable full-text indexing for ``class_tag`` over ``fields``."""

        if not class_tag:
            raise ValueError("Class tag must not be empty")
        if class_tag in self._registrations:
            raise ClassAlreadyRegistered(class_tag)
        if not fields:
            raise ValueError(f"Class '{class_tag}' needs at least one indexed field")
        if not 1 <= int(idsize) <= MAX_ID_BITS:
            raise ValueError(f"idsize must be between 1 and {MAX_ID_BITS}, got {idsize}")

        configuration = IndexConfiguration(
            class_tag=class_tag,
            fields=tuple(dict.fromkeys(fields)),
            attributes=tuple(dict.fromkeys(attributes)),
            id_bits=int(idsize),
            server=server,
            port=int(port),
            index=index,
        )
        registration = ClassRegistration(configuration=configuration, factory=factory or _identity)
        self._registrations[class_tag] = registration
        logger.info(
            "Registered class %s (index=%s, fields=%s, id_bits=%d)",
            class_tag,
            configuration.index_name,
            ",".join(configuration.fields),
            configuration.id_bits,
        )
        return registration

    def get(self, class_tag: str) -> ClassRegistration:
        try:
            return self._registrations[class_tag]
        except KeyError as exc:
            raise ClassNotRegistered(class_tag) from exc

    def configuration(self, class_tag: str) -> IndexConfiguration:
        return self.get(class_tag).configuration

    def contains(self, class_tag: str) -> bool:
        return class_tag in self._registrations

    def tags(self) -> list[str]:
        return list(self._registrations)

    def __contains__(self, class_tag: object) -> bool:
        return class_tag in self._registrations

    def __iter__(self) -> Iterator[ClassRegistration]:
        return iter(self._registrations.values())

    def __len__(self) -> int:
        return len(self._registrations)


__all__ = ["ClassRegistration", "ClassRegistry", "DocumentFactory", "MAX_ID_BITS"]
