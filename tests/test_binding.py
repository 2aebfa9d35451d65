"""Unit tests for the :mod:`scenemodel.binding` module."""

import pytest

from scenemodel import NodeChanged, SceneBinding, SceneChanged, SceneModelManager


def test_binding_mirrors_manager_state_while_attached(manager: SceneModelManager) -> None:
    with SceneBinding(manager) as binding:
        assert binding.is_attached
        text_id = manager.add_node("text")
        manager.select_nodes([text_id])
        manager.set_hovered_node(text_id)

        assert binding.version == 1
        assert [child.id for child in binding.root.children] == [text_id]
        assert binding.selected_ids == (text_id,)
        assert binding.hovered_id == text_id
        assert binding.can_undo and not binding.can_redo

        manager.undo()

        assert binding.version == 2
        assert binding.root.children == []
        assert binding.selected_ids == ()
        assert binding.can_redo
        assert binding.last_event == SceneChanged()


def test_binding_stops_mirroring_after_detach(manager: SceneModelManager) -> None:
    with SceneBinding(manager) as binding:
        manager.add_node("text")

    manager.add_node("text")

    assert not binding.is_attached
    assert binding.version == 1


def test_binding_detaches_when_body_raises(manager: SceneModelManager) -> None:
    binding = SceneBinding(manager)

    with pytest.raises(RuntimeError):
        with binding:
            raise RuntimeError("boom")

    assert not binding.is_attached
    binding.detach()


def test_binding_invokes_update_callback(manager: SceneModelManager) -> None:
    seen = []
    binding = SceneBinding(manager, on_update=lambda bound, event: seen.append((bound.version, event)))

    binding.attach()
    binding.attach()
    text_id = manager.add_node("text")
    binding.detach()

    assert seen[-1] == (1, NodeChanged(id=text_id))
    assert len([event for _, event in seen if isinstance(event, NodeChanged)]) == 1


def test_binding_renders_on_demand(manager: SceneModelManager) -> None:
    binding = SceneBinding(manager)
    manager.add_node("text", "root", {"content": "Preview me"})

    assert "Preview me" in binding.render_markup()
    assert "export default function Landing(" in binding.render_component_source("Landing")
