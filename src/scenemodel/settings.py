"""Configuration helpers for scene editing sessions."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping

from .history import DEFAULT_HISTORY_LIMIT

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def _normalise_string(value: str | None, *, default: str) -> str:
    if value is None:
        return default

    trimmed = value.strip()
    return trimmed or default


def _parse_positive_int(value: str | None, *, name: str, default: int) -> int:
    if value is None:
        return default

    trimmed = value.strip()
    if not trimmed:
        return default

    try:
        parsed = int(trimmed)
    except ValueError as exc:
        raise ValueError(f"{name} must be a positive integer.") from exc
    if parsed < 1:
        raise ValueError(f"{name} must be greater than zero.")
    return parsed


@dataclass(frozen=True)
class EditorSettings:
    """Settings for a scene editing session.

    Values are read from environment variables so hosts can tune the editor
    without code changes. Empty strings are treated as if the variable was
    unset.
    """

    canvas_width: int = 1280
    canvas_height: int = 800
    canvas_background: str = "#ffffff"
    history_limit: int = DEFAULT_HISTORY_LIMIT
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        if self.log_level.upper() not in _LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {', '.join(_LOG_LEVELS)}, got {self.log_level!r}"
            )
        object.__setattr__(self, "log_level", self.log_level.upper())

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.log_level)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "EditorSettings":
        """Return settings populated from ``environ``.

        Args:
            environ: Optional mapping of environment variables. When omitted,
                :data:`os.environ` is used.

        Raises:
            ValueError: If a numeric variable is not a positive integer or the
                log level is unknown.
        """

        source = environ if environ is not None else os.environ

        return cls(
            canvas_width=_parse_positive_int(
                source.get("SCENEMODEL_CANVAS_WIDTH"),
                name="SCENEMODEL_CANVAS_WIDTH",
                default=1280,
            ),
            canvas_height=_parse_positive_int(
                source.get("SCENEMODEL_CANVAS_HEIGHT"),
                name="SCENEMODEL_CANVAS_HEIGHT",
                default=800,
            ),
            canvas_background=_normalise_string(
                source.get("SCENEMODEL_CANVAS_BACKGROUND"), default="#ffffff"
            ),
            history_limit=_parse_positive_int(
                source.get("SCENEMODEL_HISTORY_LIMIT"),
                name="SCENEMODEL_HISTORY_LIMIT",
                default=DEFAULT_HISTORY_LIMIT,
            ),
            log_level=_normalise_string(
                source.get("SCENEMODEL_LOG_LEVEL"), default="WARNING"
            ),
        )


__all__ = ["EditorSettings"]
