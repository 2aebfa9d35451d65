"""Unit tests for the :mod:`scenemodel.settings` module."""

import logging

import pytest

from scenemodel import EditorSettings


def test_defaults_apply_without_environment() -> None:
    settings = EditorSettings.from_env({})

    assert settings == EditorSettings()
    assert settings.canvas_width == 1280
    assert settings.canvas_height == 800
    assert settings.canvas_background == "#ffffff"
    assert settings.history_limit == 100
    assert settings.log_level == "WARNING"
    assert settings.log_level_value == logging.WARNING


def test_values_are_read_from_environment() -> None:
    settings = EditorSettings.from_env(
        {
            "SCENEMODEL_CANVAS_WIDTH": " 1920 ",
            "SCENEMODEL_CANVAS_HEIGHT": "1080",
            "SCENEMODEL_CANVAS_BACKGROUND": "#000000",
            "SCENEMODEL_HISTORY_LIMIT": "25",
            "SCENEMODEL_LOG_LEVEL": "debug",
        }
    )

    assert (settings.canvas_width, settings.canvas_height) == (1920, 1080)
    assert settings.canvas_background == "#000000"
    assert settings.history_limit == 25
    assert settings.log_level == "DEBUG"
    assert settings.log_level_value == logging.DEBUG


def test_blank_values_fall_back_to_defaults() -> None:
    settings = EditorSettings.from_env(
        {"SCENEMODEL_CANVAS_WIDTH": "  ", "SCENEMODEL_LOG_LEVEL": ""}
    )

    assert settings.canvas_width == 1280
    assert settings.log_level == "WARNING"


@pytest.mark.parametrize(
    "environ",
    [
        {"SCENEMODEL_CANVAS_WIDTH": "wide"},
        {"SCENEMODEL_CANVAS_HEIGHT": "0"},
        {"SCENEMODEL_HISTORY_LIMIT": "-4"},
        {"SCENEMODEL_LOG_LEVEL": "LOUD"},
    ],
)
def test_invalid_values_raise(environ) -> None:
    with pytest.raises(ValueError):
        EditorSettings.from_env(environ)
