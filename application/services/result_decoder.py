"""Recovers class tags and identifiers from raw daemon matches."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable

from application.services.attribute_codec import CLASS_ATTRIBUTE, AttributeCodec
from domain.entities import RawMatch
from domain.errors import UnknownClass

logger = logging.getLogger(__name__)

# largest value a signed 64-bit store column holds
MAX_IDENTIFIER = 2**63 - 1


@dataclass(slots=True)
class DecodedMatches:
    """Decoded matches in daemon rank order."""

    entries: list[tuple[str, int]] = field(default_factory=list)
    class_tag: str | None = None

    @property
    def identifiers(self) -> list[int]:
        return [identifier for _class_tag, identifier in self.entries]

    def groups(self) -> dict[str, list[int]]:
        grouped: dict[str, list[int]] = {}
        for class_tag, identifier in self.entries:
            grouped.setdefault(class_tag, []).append(identifier)
        return grouped

    def __len__(self) -> int:
        return len(self.entries)


def parse_identifier(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        identifier = int(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if isinstance(value, float) and value != identifier:
        return None
    if identifier < 0 or identifier > MAX_IDENTIFIER:
        return None
    return identifier


class ResultDecoder:
    def __init__(self, codec: AttributeCodec) -> None:
        self._codec = codec

    def decode(self, matches: Iterable[RawMatch], *, class_scope: str | None = None) -> DecodedMatches:
        decoded = DecodedMatches()
        for match in matches:
            identifier = parse_identifier(match.document_id)
            if identifier is None:
                logger.warning("Skipping match with undecodable id %r", match.document_id)
                continue

            encoded = match.attributes.get(CLASS_ATTRIBUTE)
            if encoded is None:
                if class_scope is None:
                    logger.warning("Skipping match %d without a class attribute", identifier)
                    continue
                class_tag = class_scope
            else:
                try:
                    class_tag = self._codec.decode(encoded)
                except UnknownClass as exc:
                    logger.warning("Skipping match %d: %s", identifier, exc)
                    continue

            registry = self._codec.registry
            if class_tag in registry and identifier >= registry.configuration(class_tag).id_space:
                logger.warning("Skipping match %d outside the %s identifier space", identifier, class_tag)
                continue

            decoded.entries.append((class_tag, identifier))
            decoded.class_tag = class_tag
        return decoded


__all__ = ["DecodedMatches", "ResultDecoder", "parse_identifier", "MAX_IDENTIFIER"]
