"""Exception taxonomy for the reconciliation layer."""
from __future__ import annotations

from typing import Any


class SphinxBridgeError(Exception):
    """Base class for all errors raised by SphinxBridge."""


class SpaceExhausted(SphinxBridgeError):
    """No free identifier could be found within the retry budget."""

    def __init__(self, class_tag: str, attempts: int) -> None:
        super().__init__(f"No free identifier for class '{class_tag}' after {attempts} attempts")
        self.class_tag = class_tag
        self.attempts = attempts


class UnknownClass(SphinxBridgeError):
    """A class attribute value does not map to a registered class."""

    def __init__(self, value: Any) -> None:
        super().__init__(f"Attribute value {value!r} does not name a registered class")
        self.value = value


class ClassNotRegistered(SphinxBridgeError, LookupError):
    """The caller asked for a class tag that was never registered."""

    def __init__(self, class_tag: str) -> None:
        super().__init__(f"Class '{class_tag}' is not registered")
        self.class_tag = class_tag


class ClassAlreadyRegistered(SphinxBridgeError):
    def __init__(self, class_tag: str) -> None:
        super().__init__(f"Class '{class_tag}' is already registered")
        self.class_tag = class_tag


class StoreLookupError(SphinxBridgeError):
    """The document store failed to answer a lookup (as opposed to "not found")."""


class DuplicateIdentifier(SphinxBridgeError):
    """The store rejected a write because the identifier is taken within the class."""

    def __init__(self, class_tag: str, identifier: int) -> None:
        super().__init__(f"Identifier {identifier} already used in class '{class_tag}'")
        self.class_tag = class_tag
        self.identifier = identifier


class DaemonUnavailable(SphinxBridgeError):
    """Transport-level failure talking to the search daemon."""


__all__ = [
    "SphinxBridgeError",
    "SpaceExhausted",
    "UnknownClass",
    "ClassNotRegistered",
    "ClassAlreadyRegistered",
    "StoreLookupError",
    "DuplicateIdentifier",
    "DaemonUnavailable",
]
