"""HTML preview of the map rendered at several container widths."""

from __future__ import annotations

from html import escape
from pathlib import Path
from typing import Mapping, Sequence

from .layout import LayoutParameters
from .paths import format_number


def write_preview_index(
    *,
    renders: Sequence[tuple[Path, LayoutParameters]],
    mobile_flags: Mapping[float, bool],
    output_html: Path,
    title: str = "Central Africa map preview",
) -> Path:
    """Generate an HTML page showing every rendered width side by side."""
    cards: list[str] = []
    for svg_path, layout in sorted(renders, key=lambda item: item[1].width, reverse=True):
        rel_src = svg_path.name if svg_path.parent == output_html.parent else str(svg_path)
        mobile = mobile_flags.get(layout.width, False)
        width_text = format_number(layout.width)
        cards.append(
            "\n".join(
                [
                    "<div class='card'>",
                    f"  <h3>{width_text}px{' (mobile)' if mobile else ''}</h3>",
                    (
                        f"  <p class='meta'>height {format_number(layout.height)}px, "
                        f"scale factor {format_number(layout.scale_factor, precision=4)}, "
                        f"projection scale {format_number(layout.projection_scale, precision=2)}</p>"
                    ),
                    (
                        f"  <img src='{escape(rel_src)}' alt='Map at {width_text}px' "
                        f"width='{width_text}'>"
                    ),
                    "</div>",
                ]
            )
        )

    html = "\n".join(
        [
            "<!doctype html>",
            "<html lang='en'>",
            "<head>",
            "  <meta charset='utf-8'>",
            "  <meta name='viewport' content='width=device-width, initial-scale=1'>",
            f"  <title>{escape(title)}</title>",
            "  <style>",
            "    body { font-family: Arial, sans-serif; margin: 16px; }",
            "    .grid { display: flex; flex-wrap: wrap; align-items: flex-start; gap: 16px; }",
            "    .card { border: 1px solid #ddd; border-radius: 8px; padding: 12px; }",
            "    .card h3 { margin: 0 0 8px 0; font-size: 16px; }",
            "    .meta { margin: 0 0 8px 0; font-size: 13px; color: #333; }",
            "    img { display: block; }",
            "  </style>",
            "</head>",
            "<body>",
            f"  <h1>{escape(title)}</h1>",
            "  <div class='grid'>",
            *cards,
            "  </div>",
            "</body>",
            "</html>",
            "",
        ]
    )
    output_html.parent.mkdir(parents=True, exist_ok=True)
    output_html.write_text(html, encoding="utf-8")
    return output_html
