"""Asset resolution: mapping registry asset ids onto concrete URLs."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping

from .nodes import AssetReference

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedAsset:
    """Result of resolving an asset id."""

    url: str
    alt: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.url, str) or not self.url.strip():
            raise ValueError("Resolved asset url must be a non-empty string")


class AssetResolver(ABC):
    """Interface for looking up asset URLs by registry id.

    Resolution is synchronous: any fetching or preloading happens in the
    surrounding application before the scene is mutated or rendered.
    """

    @abstractmethod
    def resolve(self, asset_id: str) -> ResolvedAsset | None:
        """Return the asset for ``asset_id`` or ``None`` when it is unknown."""

    def resolve_url(self, reference: AssetReference | None) -> str | None:
        """Return the URL a reference points at, or ``None`` when unresolvable.

        ``asset_id`` takes precedence; the literal ``url`` is the fallback.
        """

        if reference is None:
            return None
        if reference.asset_id:
            resolved = self.resolve(reference.asset_id)
            if resolved is not None:
                return resolved.url
            logger.warning("Asset '%s' could not be resolved", reference.asset_id)
        return reference.url or None


class NullAssetResolver(AssetResolver):
    """Resolver that knows no assets; only literal URLs render."""

    def resolve(self, asset_id: str) -> ResolvedAsset | None:
        return None


class MappingAssetResolver(AssetResolver):
    """Resolve assets from an in-memory mapping of id to URL or ``ResolvedAsset``."""

    def __init__(self, assets: Mapping[str, str | ResolvedAsset] | None = None) -> None:
        self._assets: Dict[str, ResolvedAsset] = {}
        for asset_id, value in (assets or {}).items():
            self.register(asset_id, value)

    def register(self, asset_id: str, value: str | ResolvedAsset, *, alt: str | None = None) -> None:
        """Add or replace an asset entry."""

        if not isinstance(asset_id, str) or not asset_id.strip():
            raise ValueError("asset_id must be a non-empty string")
        if isinstance(value, ResolvedAsset):
            self._assets[asset_id] = value
        else:
            self._assets[asset_id] = ResolvedAsset(url=value, alt=alt)

    def resolve(self, asset_id: str) -> ResolvedAsset | None:
        return self._assets.get(asset_id)

    def __contains__(self, asset_id: object) -> bool:
        return asset_id in self._assets

    def __len__(self) -> int:
        return len(self._assets)


class ManifestAssetResolver(MappingAssetResolver):
    """Resolve assets listed in an asset manifest JSON document.

    The manifest has the shape ``{"assets": [{"id": ..., "url": ..., "alt": ...}]}``.
    """

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ManifestAssetResolver":
        entries = payload.get("assets")
        if not isinstance(entries, list):
            raise ValueError("Asset manifest must define a list of assets")

        resolver = cls()
        for index, entry in enumerate(_iter_entries(entries)):
            asset_id = entry.get("id")
            url = entry.get("url")
            alt = entry.get("alt", entry.get("name"))
            if not isinstance(asset_id, str) or not isinstance(url, str):
                raise ValueError(
                    f"Asset #{index} in manifest must provide 'id' and 'url' strings."
                )
            if alt is not None and not isinstance(alt, str):
                raise ValueError(f"Asset '{asset_id}' must use a string 'alt'.")
            resolver.register(asset_id, url, alt=alt)
        return resolver

    @classmethod
    def from_file(cls, path: Path) -> "ManifestAssetResolver":
        """Load a manifest from disk."""

        manifest_path = Path(path)
        payload = json.loads(manifest_path.read_text(encoding="utf-8"))
        if not isinstance(payload, Mapping):
            raise ValueError(f"Asset manifest '{manifest_path}' must contain an object")
        resolver = cls.from_payload(payload)
        logger.debug("Loaded %d assets from %s", len(resolver), manifest_path)
        return resolver


def build_asset_manifest(
    asset_ids: Iterable[str],
    resolver: AssetResolver,
) -> Dict[str, Any]:
    """Return the manifest describing ``asset_ids`` as ``resolver`` sees them.

    The result uses the shape :class:`ManifestAssetResolver` reads, so a
    manifest written next to exported component source can resolve the same
    assets later. Ids the resolver does not know are left out with a warning.
    """

    entries: List[Dict[str, str]] = []
    for asset_id in dict.fromkeys(asset_ids):
        resolved = resolver.resolve(asset_id)
        if resolved is None:
            logger.warning(
                "Asset '%s' could not be resolved; leaving it out of the manifest",
                asset_id,
            )
            continue
        entry = {"id": asset_id, "url": resolved.url}
        if resolved.alt is not None:
            entry["alt"] = resolved.alt
        entries.append(entry)
    return {"assets": entries}


def write_asset_manifest(path: Path, manifest: Mapping[str, Any]) -> Path:
    """Write ``manifest`` as indented JSON and return the path written."""

    manifest_path = Path(path)
    manifest_path.write_text(json.dumps(manifest, indent=2) + "\n", encoding="utf-8")
    logger.debug("Wrote %d assets to %s", len(manifest.get("assets", [])), manifest_path)
    return manifest_path


def _iter_entries(entries: Iterable[object]) -> Iterable[Mapping[str, Any]]:
    for index, entry in enumerate(entries):
        if not isinstance(entry, Mapping):
            raise ValueError(f"Asset #{index} in manifest must be an object definition.")
        yield entry


__all__ = [
    "AssetResolver",
    "ManifestAssetResolver",
    "MappingAssetResolver",
    "NullAssetResolver",
    "ResolvedAsset",
    "build_asset_manifest",
    "write_asset_manifest",
]
