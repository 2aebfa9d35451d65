"""Test configuration for the scene model project."""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from typing import List, Type, TypeVar

import pytest

from scenemodel import MappingAssetResolver, ResolvedAsset, SceneModelManager
from scenemodel.events import SceneEvent

EventT = TypeVar("EventT")

PRODUCT_URL = "https://x/img.png"


class EventRecorder:
    """Listener that keeps every event it receives, in delivery order."""

    def __init__(self) -> None:
        self.events: List[SceneEvent] = []

    def __call__(self, event: SceneEvent) -> None:
        self.events.append(event)

    def of_type(self, event_type: Type[EventT]) -> List[EventT]:
        return [event for event in self.events if isinstance(event, event_type)]

    def clear(self) -> None:
        self.events.clear()


@pytest.fixture
def resolver() -> MappingAssetResolver:
    return MappingAssetResolver(
        {"a1": ResolvedAsset(url=PRODUCT_URL, alt="Product shot")}
    )


@pytest.fixture
def manager(resolver: MappingAssetResolver) -> SceneModelManager:
    return SceneModelManager(resolver, width=800, height=600)


@pytest.fixture
def recorder() -> EventRecorder:
    return EventRecorder()
