"""Zoom sequences: per-frame zoom levels and the point each frame dives toward.

A sequence starts from a :class:`FractalConfig` and only ever changes its
``zoom`` and offsets. Zoom levels are interpolated in log space so each frame
magnifies by the same ratio (``linear``) or accelerates then settles
(``ease``). After a frame is rendered the next one is centred on the set's
boundary pixel closest to the middle of the frame, which keeps the dive on
detail instead of drifting into flat interior or empty exterior.
"""

from __future__ import annotations

from dataclasses import replace

import numpy as np

from .config import FractalConfig, Point
from .renderer import RenderResult, pixel_to_complex

EASINGS = ("linear", "ease")


def zoom_schedule(
    config: FractalConfig,
    frames: int,
    *,
    target_zoom: float | None = None,
    zoom_step: float = 1.25,
    easing: str = "ease",
) -> np.ndarray:
    """Return the ``zoom`` value for each of ``frames`` frames.

    Without ``target_zoom`` every frame magnifies the previous one by
    ``zoom_step``. With it, the schedule runs from ``config.zoom`` to
    ``target_zoom`` and ``easing`` shapes the progress in between.
    """

    if easing not in EASINGS:
        raise ValueError(f"unsupported easing {easing!r}; expected one of {', '.join(EASINGS)}")
    if zoom_step <= 0 or (target_zoom is not None and target_zoom <= 0):
        raise ValueError("zoom levels must be positive")
    if frames <= 0:
        return np.empty(0, dtype=np.float64)

    if target_zoom is None:
        return config.zoom * zoom_step ** np.arange(frames, dtype=np.float64)
    if frames == 1:
        return np.array([target_zoom], dtype=np.float64)

    progress = np.linspace(0.0, 1.0, frames)
    if easing == "ease":
        progress = progress * progress * (3 - 2 * progress)
    start = np.log(config.zoom)
    return np.exp(start + (np.log(target_zoom) - start) * progress)


def boundary_pixels(interior: np.ndarray) -> np.ndarray:
    """(row, col) of interior pixels with at least one exterior 4-neighbour."""

    interior = np.asarray(interior, dtype=bool)
    padded = np.pad(interior, 1, mode="edge")
    neighbours_inside = (
        padded[:-2, 1:-1] & padded[2:, 1:-1] & padded[1:-1, :-2] & padded[1:-1, 2:]
    )
    return np.argwhere(interior & ~neighbours_inside)


def focus_point(result: RenderResult) -> Point:
    """Complex coordinate of the boundary pixel nearest the frame centre.

    Falls back to the centre of the viewport when the frame shows no boundary.
    """

    viewport = result.viewport
    pixels = boundary_pixels(result.interior)
    if pixels.size == 0:
        return Point((viewport.x_min + viewport.x_max) / 2, (viewport.y_min + viewport.y_max) / 2)

    middle = np.array([viewport.height / 2, viewport.width / 2])
    row, col = pixels[np.argmin(np.sum((pixels - middle) ** 2, axis=1))]
    return pixel_to_complex(viewport, int(col), int(row))


def recenter(config: FractalConfig, result: RenderResult) -> FractalConfig:
    focus = focus_point(result)
    return replace(config, offset_x=focus.x, offset_y=focus.y)
