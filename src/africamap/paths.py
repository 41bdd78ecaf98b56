"""SVG path-data builders for projected poly-lines and rings."""

from __future__ import annotations

from typing import Iterable, Sequence

Point = tuple[float, float]

# Uniform cubic B-spline to Bezier weights.
_BASIS_CONTROL_1 = (0.0, 2.0 / 3.0, 1.0 / 3.0, 0.0)
_BASIS_CONTROL_2 = (0.0, 1.0 / 3.0, 2.0 / 3.0, 0.0)
_BASIS_END = (0.0, 1.0 / 6.0, 2.0 / 3.0, 1.0 / 6.0)


def format_number(value: float, precision: int = 3) -> str:
    text = f"{value:.{precision}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in {"-0", ""}:
        return "0"
    return text


def _xy(x: float, y: float) -> str:
    return f"{format_number(x)},{format_number(y)}"


def _dot4(weights: Sequence[float], values: Sequence[float]) -> float:
    return sum(w * v for w, v in zip(weights, values))


def linear_path(points: Iterable[Point], *, closed: bool = False) -> str:
    pts = list(points)
    if not pts:
        return ""
    parts = [f"M{_xy(*pts[0])}"]
    parts.extend(f"L{_xy(x, y)}" for x, y in pts[1:])
    if closed:
        parts.append("Z")
    return "".join(parts)


def basis_path(points: Iterable[Point]) -> str:
    """Smooth B-spline through `points`, pinned to the first and last point."""
    pts = [(float(x), float(y)) for x, y in points]
    if len(pts) < 3:
        return linear_path(pts)

    x0, y0 = pts[0]
    px = [x0, x0, x0, pts[1][0]]
    py = [y0, y0, y0, pts[1][1]]
    parts = [
        f"M{_xy(x0, y0)}",
        f"L{_xy(_dot4(_BASIS_END, px), _dot4(_BASIS_END, py))}",
    ]
    for x, y in [*pts[2:], pts[-1]]:
        px = [*px[1:], x]
        py = [*py[1:], y]
        parts.append(
            "C"
            + ",".join(
                [
                    _xy(_dot4(_BASIS_CONTROL_1, px), _dot4(_BASIS_CONTROL_1, py)),
                    _xy(_dot4(_BASIS_CONTROL_2, px), _dot4(_BASIS_CONTROL_2, py)),
                    _xy(_dot4(_BASIS_END, px), _dot4(_BASIS_END, py)),
                ]
            )
        )
    parts.append(f"L{_xy(*pts[-1])}")
    return "".join(parts)
