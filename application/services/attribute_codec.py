"""Packs the class tag into a multi-value daemon attribute and back."""
from __future__ import annotations

from typing import Any

from application.services.registry import ClassRegistration, ClassRegistry
from domain.entities import IndexedDocument
from domain.errors import UnknownClass

CLASS_ATTRIBUTE = "csphinx-class"
CLASS_FIELD = "classname"


class AttributeCodec:
    """Encodes class tags as the UTF-8 byte values of the tag.

    The daemon stores the code as a multi-value attribute, so it comes back
    either as a list of integers or, from some clients, as a comma-joined
    string. Both forms decode to the same tag.
    """

    def __init__(self, registry: ClassRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> ClassRegistry:
        return self._registry

    @staticmethod
    def encode(class_tag: str) -> list[int]:
        return list(class_tag.encode("utf-8"))

    def decode(self, value: Any) -> str:
        raw = self._to_bytes(value)
        try:
            class_tag = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise UnknownClass(value) from exc
        if not class_tag or class_tag not in self._registry:
            raise UnknownClass(value)
        return class_tag

    @staticmethod
    def _to_bytes(value: Any) -> bytes:
        if isinstance(value, (bytes, bytearray)):
            return bytes(value)
        if isinstance(value, str):
            parts = [part.strip() for part in value.split(",") if part.strip()]
        elif isinstance(value, (list, tuple)):
            parts = list(value)
        else:
            raise UnknownClass(value)
        try:
            return bytes(int(part) for part in parts)
        except (TypeError, ValueError) as exc:
            raise UnknownClass(value) from exc


def build_index_row(
    document: IndexedDocument,
    registration: ClassRegistration,
    codec: AttributeCodec,
) -> dict[str, Any]:
    """Return the row an indexer feeds to the daemon for ``document``."""

    if document.identifier is None:
        raise ValueError("Document has no identifier yet; save it before indexing")
    configuration = registration.configuration
    row: dict[str, Any] = {"id": document.identifier, CLASS_FIELD: configuration.class_tag}
    for name in configuration.fields:
        value = document.fields.get(name)
        row[name] = "" if value is None else str(value)
    for name in configuration.attributes:
        row[name] = document.fields.get(name)
    row[CLASS_ATTRIBUTE] = codec.encode(configuration.class_tag)
    return row


__all__ = ["AttributeCodec", "CLASS_ATTRIBUTE", "CLASS_FIELD", "build_index_row"]
