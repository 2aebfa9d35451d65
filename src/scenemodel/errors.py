"""Exception hierarchy shared by the scene model components."""

from __future__ import annotations


class SceneModelError(Exception):
    """Base class for every error raised by the scene model."""


class NodeValidationError(SceneModelError, ValueError):
    """Raised when a node, override or command argument is malformed."""


class NodeNotFoundError(SceneModelError, LookupError):
    """Raised when a command references a node id missing from the tree."""

    def __init__(self, node_id: str, message: str | None = None) -> None:
        super().__init__(message or f"Node '{node_id}' does not exist")
        self.node_id = node_id


class SerializationError(SceneModelError, ValueError):
    """Raised when a serialized scene cannot be turned into a complete tree."""


class TransactionError(SceneModelError, RuntimeError):
    """Raised when an operation is not allowed while a transaction is open."""


__all__ = [
    "NodeNotFoundError",
    "NodeValidationError",
    "SceneModelError",
    "SerializationError",
    "TransactionError",
]
