"""JSON export and import of whole scenes.

Imports build a complete candidate tree before anything else sees it, so a
malformed document never leaves a half-populated scene behind.
"""

from __future__ import annotations

import json
from typing import Any, Mapping, Tuple

from pydantic import ValidationError

from .errors import SerializationError
from .nodes import RootNode, find_duplicate_ids


def root_to_payload(root: RootNode) -> dict[str, Any]:
    """Return a JSON-serialisable representation of ``root``."""

    return root.model_dump(mode="json", by_alias=True)


def dump_scene(root: RootNode, version: int, *, indent: int | None = 2) -> str:
    """Serialize ``{root, version}`` to JSON text."""

    return json.dumps(
        {"root": root_to_payload(root), "version": version},
        indent=indent,
        ensure_ascii=False,
    )


def dump_root(root: RootNode) -> str:
    """Serialize only the root in compact form; used for history snapshots."""

    return json.dumps(root_to_payload(root), separators=(",", ":"), ensure_ascii=False)


def root_from_payload(payload: object) -> RootNode:
    """Validate ``payload`` into a complete root node.

    Raises:
        SerializationError: If required fields are missing, a variant tag is
            unknown, a value is invalid or node ids repeat.
    """

    if not isinstance(payload, Mapping):
        raise SerializationError("Scene root must be an object definition")

    try:
        root = RootNode.model_validate(payload)
    except ValidationError as exc:
        raise SerializationError(f"Invalid scene root: {exc}") from exc

    duplicates = find_duplicate_ids(root)
    if duplicates:
        raise SerializationError(
            f"Scene contains duplicate node ids: {', '.join(duplicates)}"
        )
    return root


def load_root(text: str) -> RootNode:
    """Parse the compact form written by :func:`dump_root`."""

    return root_from_payload(_parse(text))


def load_scene(text: str) -> Tuple[RootNode, int]:
    """Parse a document written by :func:`dump_scene`.

    Returns:
        The validated root and the stored version (``0`` when omitted).

    Raises:
        SerializationError: If the text is not a valid scene document.
    """

    payload = _parse(text)
    if not isinstance(payload, Mapping):
        raise SerializationError("Scene document must be a JSON object")
    if "root" not in payload:
        raise SerializationError("Scene document is missing 'root'")

    version = payload.get("version", 0)
    if isinstance(version, bool) or not isinstance(version, int):
        raise SerializationError("Scene version must be an integer")
    if version < 0:
        raise SerializationError("Scene version must be zero or a positive integer")

    return root_from_payload(payload["root"]), version


def _parse(text: str) -> object:
    if not isinstance(text, (str, bytes, bytearray)):
        raise SerializationError(f"Scene JSON must be text, got {type(text)!r}")
    try:
        return json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise SerializationError(f"Scene JSON is malformed: {exc}") from exc


__all__ = [
    "dump_root",
    "dump_scene",
    "load_root",
    "load_scene",
    "root_from_payload",
    "root_to_payload",
]
