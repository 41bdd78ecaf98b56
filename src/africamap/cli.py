"""CLI entrypoint for the Central Africa responsive map."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

from .app import build_state
from .config import AppConfig, load_config
from .controller import ResponsiveController
from .layout import LayoutParameters
from .loader import DataLoader, DataLoadError
from .models import RenderManifest
from .paths import format_number
from .preview import write_preview_index
from .server import serve
from .surface import MapContainer
from .util import (
    detect_git_commit,
    ensure_directories,
    setup_logging,
    sha256_file,
    write_json,
    write_text,
)
from .validate import Validator, format_report_lines

LOGGER = logging.getLogger("africamap.cli")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="africamap",
        description="Responsive annotated map of Central Africa.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_common(p: argparse.ArgumentParser) -> None:
        p.add_argument(
            "--config",
            default=None,
            help="Path to YAML config. Built-in defaults are used when omitted.",
        )
        p.add_argument("--verbose", action="store_true", help="Enable debug logs.")

    render_p = subparsers.add_parser("render", help="Render the map to SVG at one or more widths.")
    add_common(render_p)
    render_p.add_argument(
        "--width",
        action="append",
        type=float,
        default=[],
        help="Container width in pixels. Can be repeated.",
    )
    render_p.add_argument(
        "--output-dir",
        default=None,
        help="Directory for SVG files (overrides paths.output_dir).",
    )
    render_p.add_argument(
        "--no-index",
        action="store_true",
        help="Skip writing the HTML preview index.",
    )

    validate_p = subparsers.add_parser(
        "validate",
        help="Check the config, annotation catalog and dataset.",
    )
    add_common(validate_p)

    serve_p = subparsers.add_parser("serve", help="Serve the live responsive map locally.")
    add_common(serve_p)
    serve_p.add_argument(
        "--no-browser",
        action="store_true",
        help="Do not open a browser tab.",
    )

    return parser


def _load_and_setup(args: argparse.Namespace) -> AppConfig:
    cfg = load_config(args.config)
    log_path = cfg.paths.logs_dir / "africamap.log"
    setup_logging(log_path, verbose=args.verbose)
    ensure_directories(cfg.paths.build_directories)
    return cfg


def _svg_name(width: float) -> str:
    return f"map_{format_number(width).replace('.', '_')}.svg"


def _run_render(
    cfg: AppConfig,
    *,
    widths: Sequence[float],
    output_dir: Path,
    write_index: bool,
) -> int:
    features = DataLoader(cfg.data).load()
    chosen = list(dict.fromkeys(widths)) or [float(cfg.viewport.default_width)]

    renders: list[tuple[Path, LayoutParameters]] = []
    mobile_flags: dict[float, bool] = {}
    for width in chosen:
        if width <= 0:
            LOGGER.warning("Skipping non-positive width %s", format_number(width))
            continue
        container = MapContainer(cfg.viewport.container_selector, width=width)
        state = build_state(cfg, features, width)
        controller = ResponsiveController(state, container)
        try:
            layout = controller.layout
            if layout is None:
                raise RuntimeError(f"Controller produced no layout at width {width}")
            svg_path = write_text(output_dir / _svg_name(width), controller.svg_markup())
        finally:
            controller.dispose()
        renders.append((svg_path, layout))
        mobile_flags[layout.width] = controller.is_mobile
        LOGGER.info(
            "Wrote %s (%sx%s, mobile=%s)",
            svg_path,
            format_number(layout.svg_width),
            format_number(layout.svg_height),
            controller.is_mobile,
        )

    if not renders:
        LOGGER.error("No valid widths to render.")
        return 1

    artifacts = {path.name: str(path) for path, _ in renders}
    if write_index:
        index_path = write_preview_index(
            renders=renders,
            mobile_flags=mobile_flags,
            output_html=output_dir / "index.html",
        )
        artifacts["preview_index"] = str(index_path)
        LOGGER.info("Preview index generated at %s", index_path)

    manifest = RenderManifest.create(
        config_hash_sha256=sha256_file(cfg.source_path),
        git_commit=detect_git_commit(
            cfg.source_path.parent if cfg.source_path is not None else Path.cwd()
        ),
        layouts={
            format_number(layout.width): {**layout.to_dict(), "mobile": mobile_flags[layout.width]}
            for _, layout in renders
        },
        artifacts=artifacts,
    )
    manifest_path = output_dir / "manifest.json"
    write_json(manifest_path, manifest.to_dict())
    LOGGER.info("Render manifest written to %s", manifest_path)
    return 0


def _run_validate(cfg: AppConfig) -> int:
    report = Validator(cfg).run()
    for line in format_report_lines(report):
        LOGGER.info(line)
    return 0 if report.ok else 1


def _dispatch(args: argparse.Namespace) -> int:
    cfg = _load_and_setup(args)
    command = str(args.command)
    if command == "render":
        output_dir = Path(args.output_dir) if args.output_dir else cfg.paths.output_dir
        return _run_render(
            cfg,
            widths=[float(item) for item in args.width],
            output_dir=output_dir,
            write_index=not bool(args.no_index),
        )
    if command == "validate":
        return _run_validate(cfg)
    if command == "serve":
        return serve(cfg, open_browser=not bool(args.no_browser))
    LOGGER.error("Unknown command: %s", command)
    return 2


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        return _dispatch(args)
    except DataLoadError as exc:
        LOGGER.error("Map data could not be loaded: %s", exc)
        return 1
    except (FileNotFoundError, ValueError) as exc:
        LOGGER.error("%s", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
