"""Scene persistence utilities.

Stores hold serialized scene documents (the ``{root, version}`` JSON written by
:meth:`SceneModelManager.to_json`) keyed by a scene identifier.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List

from .manager import SceneModelManager
from .serializer import load_scene


class SceneStore(ABC):
    """Interface describing how scene documents are persisted."""

    @abstractmethod
    def save(self, scene_id: str, document: str) -> None:
        """Persist the serialized document for later retrieval.

        Raises:
            SerializationError: If ``document`` is not a valid scene document.
        """

    @abstractmethod
    def load(self, scene_id: str) -> str:
        """Return the serialized document for the given scene.

        Raises:
            KeyError: If the scene cannot be found.
        """

    @abstractmethod
    def delete(self, scene_id: str) -> None:
        """Remove the stored document if it exists."""

    @abstractmethod
    def list_scenes(self) -> List[str]:
        """Return all scene identifiers stored in this persistence layer."""

    def save_scene(self, scene_id: str, manager: SceneModelManager) -> None:
        """Persist the manager's current scene under ``scene_id``."""

        self.save(scene_id, manager.to_json())

    def restore_scene(self, scene_id: str, manager: SceneModelManager) -> None:
        """Replace the manager's scene with the stored document."""

        manager.from_json(self.load(scene_id))


class InMemorySceneStore(SceneStore):
    """Keep scene documents in local process memory."""

    def __init__(self) -> None:
        self._scenes: Dict[str, str] = {}

    def save(self, scene_id: str, document: str) -> None:
        key = _validate_scene_id(scene_id)
        load_scene(document)
        self._scenes[key] = document

    def load(self, scene_id: str) -> str:
        key = _validate_scene_id(scene_id)
        try:
            return self._scenes[key]
        except KeyError as exc:
            raise KeyError(f"Scene '{scene_id}' does not exist") from exc

    def delete(self, scene_id: str) -> None:
        key = _validate_scene_id(scene_id)
        self._scenes.pop(key, None)

    def list_scenes(self) -> List[str]:
        return sorted(self._scenes.keys())


class FileSceneStore(SceneStore):
    """Persist scene documents as JSON files on disk."""

    def __init__(self, storage_dir: Path) -> None:
        self.storage_dir = Path(storage_dir)
        self.storage_dir.mkdir(parents=True, exist_ok=True)

    def save(self, scene_id: str, document: str) -> None:
        scene_file = self._scene_path(scene_id)
        load_scene(document)
        scene_file.write_text(document, encoding="utf-8")

    def load(self, scene_id: str) -> str:
        scene_file = self._scene_path(scene_id)
        if not scene_file.exists():
            raise KeyError(f"Scene '{scene_id}' does not exist")
        return scene_file.read_text(encoding="utf-8")

    def delete(self, scene_id: str) -> None:
        scene_file = self._scene_path(scene_id)
        if scene_file.exists():
            scene_file.unlink()

    def list_scenes(self) -> List[str]:
        return sorted(
            scene_path.stem
            for scene_path in self.storage_dir.glob("*.json")
            if scene_path.is_file()
        )

    def _scene_path(self, scene_id: str) -> Path:
        validated = _validate_scene_id(scene_id)
        return self.storage_dir / f"{validated}.json"


def _validate_scene_id(scene_id: str) -> str:
    if not isinstance(scene_id, str):
        raise TypeError("scene_id must be a string")
    stripped = scene_id.strip()
    if not stripped:
        raise ValueError("scene_id must be a non-empty string")
    if "/" in stripped or "\\" in stripped or stripped.startswith("."):
        raise ValueError("scene_id must not contain path separators or start with '.'")
    return stripped


__all__ = ["FileSceneStore", "InMemorySceneStore", "SceneStore"]
