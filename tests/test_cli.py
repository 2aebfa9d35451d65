"""Tests for the ``scenemodel`` command line entry point."""

import json
from pathlib import Path

import pytest

from scenemodel import SceneModelManager
from scenemodel.cli import main
from scenemodel.serializer import load_scene


@pytest.fixture()
def scene_file(tmp_path: Path) -> Path:
    manager = SceneModelManager(width=640, height=480)
    image_id = manager.add_node("image")
    manager.bind_asset(image_id, {"assetId": "a1"})
    manager.add_node("text", "root", {"content": "Caption"})
    path = tmp_path / "scene.json"
    path.write_text(manager.to_json(), encoding="utf-8")
    return path


@pytest.fixture()
def manifest_file(tmp_path: Path) -> Path:
    path = tmp_path / "assets-manifest.json"
    path.write_text(
        json.dumps({"assets": [{"id": "a1", "url": "https://x/img.png"}]}),
        encoding="utf-8",
    )
    return path


def test_new_writes_empty_scene(tmp_path: Path, capsys) -> None:
    output = tmp_path / "empty.json"

    exit_code = main(["new", "--width", "640", "--height", "480", "--output", str(output)])

    assert exit_code == 0
    root, version = load_scene(output.read_text(encoding="utf-8"))
    assert (root.canvas.width, root.canvas.height) == (640, 480)
    assert root.children == []
    assert version == 0
    assert f"Wrote {output}" in capsys.readouterr().out


def test_render_markup_to_stdout(scene_file: Path, manifest_file: Path, capsys) -> None:
    exit_code = main(["render", str(scene_file), "--assets", str(manifest_file)])

    captured = capsys.readouterr()
    assert exit_code == 0
    assert captured.out.startswith('<div data-node-id="root"')
    assert 'src="https://x/img.png"' in captured.out
    assert "Caption" in captured.out


def test_render_component_to_file(scene_file: Path, tmp_path: Path) -> None:
    output = tmp_path / "Scene.tsx"

    exit_code = main(
        [
            "render",
            str(scene_file),
            "--target",
            "component",
            "--component-name",
            "LandingScene",
            "--output",
            str(output),
        ]
    )

    assert exit_code == 0
    source = output.read_text(encoding="utf-8")
    assert "export default function LandingScene({ slots = {} }) {" in source
    assert 'getAsset("a1")' in source
    assert "https://x/img.png" not in source


def test_render_writes_asset_manifest(
    scene_file: Path, manifest_file: Path, tmp_path: Path, capsys
) -> None:
    manifest_output = tmp_path / "export" / "assets.json"
    manifest_output.parent.mkdir()

    exit_code = main(
        [
            "render",
            str(scene_file),
            "--target",
            "component",
            "--assets",
            str(manifest_file),
            "--manifest-output",
            str(manifest_output),
        ]
    )

    assert exit_code == 0
    assert capsys.readouterr().out.startswith("import React from 'react';")
    manifest = json.loads(manifest_output.read_text(encoding="utf-8"))
    assert manifest == {"assets": [{"id": "a1", "url": "https://x/img.png"}]}


def test_manifest_is_not_written_when_rendering_fails(scene_file: Path, tmp_path: Path) -> None:
    manifest_output = tmp_path / "assets.json"

    exit_code = main(
        [
            "render",
            str(scene_file),
            "--target",
            "component",
            "--component-name",
            "lowercase",
            "--manifest-output",
            str(manifest_output),
        ]
    )

    assert exit_code == 1
    assert not manifest_output.exists()


@pytest.mark.parametrize(
    "arguments",
    [
        ["render", "missing-scene.json"],
        ["render", "{scene}", "--component-name", "lowercase", "--target", "component"],
        ["render", "{broken}"],
    ],
)
def test_errors_are_reported_with_exit_status(
    arguments, scene_file: Path, tmp_path: Path, capsys
) -> None:
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    argv = [
        argument.format(scene=scene_file, broken=broken) for argument in arguments
    ]

    exit_code = main(argv)

    assert exit_code == 1
    assert capsys.readouterr().err.startswith("error: ")
