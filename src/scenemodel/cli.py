"""Command line entry point for creating and rendering scene documents."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from .assets import ManifestAssetResolver, write_asset_manifest
from .errors import SceneModelError
from .manager import SceneModelManager
from .rendering.component_source import DEFAULT_COMPONENT_NAME
from .settings import EditorSettings

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point for the ``scenemodel`` command."""

    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        settings = EditorSettings.from_env()
        level = args.log_level or settings.log_level
        logging.basicConfig(level=getattr(logging, level), format=_LOG_FORMAT)

        if args.command == "new":
            output = _new_scene(args, settings)
        else:
            output = _render_scene(args, settings)

        if args.output:
            output_path = Path(args.output)
            output_path.write_text(output, encoding="utf-8")
            logger.debug("Wrote %d characters to %s", len(output), output_path)
            print(f"Wrote {output_path}")
        else:
            sys.stdout.write(output)
    except (SceneModelError, OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


def _new_scene(args: argparse.Namespace, settings: EditorSettings) -> str:
    manager = SceneModelManager(settings=settings, width=args.width, height=args.height)
    return manager.to_json() + "\n"


def _render_scene(args: argparse.Namespace, settings: EditorSettings) -> str:
    resolver = ManifestAssetResolver.from_file(Path(args.assets)) if args.assets else None
    manager = SceneModelManager(resolver, settings)
    manager.from_json(Path(args.scene).read_text(encoding="utf-8"))

    if args.target == "markup":
        output = manager.render_markup() + "\n"
    else:
        output = manager.render_component_source(args.component_name)

    if args.manifest_output:
        manifest_path = write_asset_manifest(Path(args.manifest_output), manager.asset_manifest())
        logger.info("Wrote asset manifest to %s", manifest_path)
    return output


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scenemodel",
        description="Create scene documents and render them to markup or component source.",
    )
    parser.add_argument(
        "--log-level",
        choices=["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"],
        help="Logging level. Defaults to SCENEMODEL_LOG_LEVEL or WARNING.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    new_parser = subparsers.add_parser("new", help="Write an empty scene document.")
    new_parser.add_argument(
        "--width", type=_positive_int, help="Canvas width. Defaults to the configured width."
    )
    new_parser.add_argument(
        "--height", type=_positive_int, help="Canvas height. Defaults to the configured height."
    )
    new_parser.add_argument(
        "--output", help="File to write the document to. Defaults to standard output."
    )

    render_parser = subparsers.add_parser(
        "render", help="Render a scene document to markup or component source."
    )
    render_parser.add_argument("scene", help="Path to a scene document JSON file.")
    render_parser.add_argument(
        "--target",
        choices=["markup", "component"],
        default="markup",
        help="Output representation. Defaults to 'markup'.",
    )
    render_parser.add_argument(
        "--assets",
        help="Asset manifest JSON used to resolve asset ids in markup previews.",
    )
    render_parser.add_argument(
        "--component-name",
        default=DEFAULT_COMPONENT_NAME,
        help=f"Exported component name. Defaults to '{DEFAULT_COMPONENT_NAME}'.",
    )
    render_parser.add_argument(
        "--manifest-output",
        help="Also write a manifest of the assets the scene references to this file.",
    )
    render_parser.add_argument(
        "--output", help="File to write the rendering to. Defaults to standard output."
    )
    return parser


def _positive_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("Value must be a positive integer.") from exc
    if parsed < 1:
        raise argparse.ArgumentTypeError("Value must be a positive integer.")
    return parsed


__all__ = ["main"]
