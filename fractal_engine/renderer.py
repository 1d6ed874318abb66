"""Viewport math and rendering of escape-time fractals onto surfaces."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import numpy as np
import tensorflow as tf

from .colors import colorize, get_color
from .config import DEFAULT_JULIA_CONSTANT, ColorScheme, FractalConfig, FractalType, Point, resolve_config
from .iteration import SMOOTHING_SHIFT, escape_value
from .surface import BYTES_PER_PIXEL, Surface

logger = logging.getLogger(__name__)

BACKENDS = ("python", "tensorflow")

# Width of the viewport in the complex plane at zoom 1.
BASE_WIDTH = 3.0


@dataclass(frozen=True)
class Viewport:
    """The region of the complex plane covered by a surface, and its sampling steps."""

    x_min: float
    x_max: float
    y_min: float
    y_max: float
    x_step: float
    y_step: float
    width: int
    height: int


@dataclass(frozen=True)
class RenderResult:
    """Escape metrics for every pixel of a frame."""

    values: np.ndarray
    interior: np.ndarray
    viewport: Viewport


def compute_viewport(config: FractalConfig, width: int, height: int) -> Viewport:
    """Derive the viewport for ``config`` on a ``width`` x ``height`` raster.

    The vertical extent follows the raster's aspect ratio so pixels stay square.
    """

    if width < 1 or height < 1:
        raise ValueError(f"raster dimensions must be positive, got {width}x{height}")

    scale = BASE_WIDTH / config.zoom
    x_min = config.offset_x - scale / 2
    x_max = config.offset_x + scale / 2
    y_span = scale * height / width
    y_min = config.offset_y - y_span / 2
    y_max = config.offset_y + y_span / 2

    return Viewport(
        x_min=x_min,
        x_max=x_max,
        y_min=y_min,
        y_max=y_max,
        x_step=(x_max - x_min) / width,
        y_step=(y_max - y_min) / height,
        width=width,
        height=height,
    )


def pixel_to_complex(viewport: Viewport, px: int, py: int) -> Point:
    return Point(viewport.x_min + px * viewport.x_step, viewport.y_min + py * viewport.y_step)


@tf.function
def _escape_step(
    zr: tf.Tensor,
    zi: tf.Tensor,
    cr: tf.Tensor,
    ci: tf.Tensor,
    counts: tf.Tensor,
    active: tf.Tensor,
    escape_radius: tf.Tensor,
    fold: bool,
) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
    """Perform a single iteration for points that have not escaped."""

    zr_new = zr * zr - zi * zi + cr
    zi_new = 2.0 * zr * zi + ci
    if fold:
        zr_new = tf.abs(zr_new)
        zi_new = tf.abs(zi_new)
    zr = tf.where(active, zr_new, zr)
    zi = tf.where(active, zi_new, zi)
    counts = counts + tf.cast(active, tf.int32)
    active = tf.logical_and(active, zr * zr + zi * zi < escape_radius)
    return zr, zi, counts, active


@tf.function
def _escape_run(
    zr: tf.Tensor,
    zi: tf.Tensor,
    cr: tf.Tensor,
    ci: tf.Tensor,
    escape_radius: tf.Tensor,
    max_iterations: tf.Tensor,
    fold: bool,
) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
    """Iterate every point using a TensorFlow while loop."""

    max_iterations = tf.cast(max_iterations, tf.int32)
    i = tf.constant(0, dtype=tf.int32)
    counts = tf.zeros_like(zr, dtype=tf.int32)
    active = zr * zr + zi * zi < escape_radius

    def cond(i: tf.Tensor, zr: tf.Tensor, zi: tf.Tensor, counts: tf.Tensor, active: tf.Tensor) -> tf.Tensor:
        return tf.logical_and(tf.less(i, max_iterations), tf.reduce_any(active))

    def body(i: tf.Tensor, zr: tf.Tensor, zi: tf.Tensor, counts: tf.Tensor, active: tf.Tensor) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
        zr, zi, counts, active = _escape_step(zr, zi, cr, ci, counts, active, escape_radius, fold)
        return i + 1, zr, zi, counts, active

    return tf.while_loop(cond, body, (i, zr, zi, counts, active))


def _normalize_counts(counts: np.ndarray, magnitude_sq: np.ndarray, max_iterations: int, smooth: bool) -> np.ndarray:
    counts_f = counts.astype(np.float64)
    if smooth:
        with np.errstate(divide="ignore", invalid="ignore"):
            escaped = (counts_f - np.log2(np.log2(magnitude_sq)) + SMOOTHING_SHIFT) / max_iterations
        escaped = np.where(magnitude_sq > 1.0, escaped, np.nan)
    else:
        escaped = counts_f / max_iterations
    return np.where(counts >= max_iterations, 1.0, escaped)


def _sample_axes(viewport: Viewport) -> tuple[np.ndarray, np.ndarray]:
    xs = viewport.x_min + np.arange(viewport.width, dtype=np.float64) * viewport.x_step
    ys = viewport.y_min + np.arange(viewport.height, dtype=np.float64) * viewport.y_step
    return xs, ys


def _values_tensorflow(
    fractal_type: FractalType,
    config: FractalConfig,
    viewport: Viewport,
    constant: Point,
    device: Optional[str],
) -> np.ndarray:
    xs, ys = _sample_axes(viewport)
    X, Y = np.meshgrid(xs, ys)

    with tf.device(device if device is not None else "/CPU:0"):
        x_tf = tf.convert_to_tensor(X, dtype=tf.float64)
        y_tf = tf.convert_to_tensor(Y, dtype=tf.float64)
        if fractal_type is FractalType.JULIA:
            zr, zi = x_tf, y_tf
            cr = tf.fill(tf.shape(x_tf), tf.constant(constant[0], dtype=tf.float64))
            ci = tf.fill(tf.shape(y_tf), tf.constant(constant[1], dtype=tf.float64))
        else:
            zr = tf.zeros_like(x_tf)
            zi = tf.zeros_like(y_tf)
            cr, ci = x_tf, y_tf

        _, zr, zi, counts, _ = _escape_run(
            zr,
            zi,
            cr,
            ci,
            tf.constant(config.escape_radius, dtype=tf.float64),
            tf.constant(config.max_iterations, dtype=tf.int32),
            fractal_type is FractalType.BURNING_SHIP,
        )

    zr_np = zr.numpy()
    zi_np = zi.numpy()
    return _normalize_counts(
        counts.numpy(),
        zr_np * zr_np + zi_np * zi_np,
        config.max_iterations,
        smooth=fractal_type is not FractalType.BURNING_SHIP,
    )


def _values_python(fractal_type: FractalType, config: FractalConfig, viewport: Viewport, constant: Point) -> np.ndarray:
    values = np.empty((viewport.height, viewport.width), dtype=np.float64)
    for py in range(viewport.height):
        for px in range(viewport.width):
            values[py, px] = escape_value(fractal_type, pixel_to_complex(viewport, px, py), config, constant)
    return values


def _check_backend(backend: str) -> str:
    if backend not in BACKENDS:
        raise ValueError(f"unsupported backend {backend!r}; expected one of {', '.join(BACKENDS)}")
    return backend


def render_frame(
    fractal_type: FractalType | str,
    config: FractalConfig | Mapping[str, Any] | None,
    width: int,
    height: int,
    julia_constant: Point | None = None,
    *,
    backend: str = "python",
    device: Optional[str] = None,
) -> RenderResult:
    """Compute the escape metric of every pixel without touching a surface."""

    fractal_type = FractalType(fractal_type)
    config = resolve_config(config)
    backend = _check_backend(backend)
    constant = julia_constant if julia_constant is not None else DEFAULT_JULIA_CONSTANT
    viewport = compute_viewport(config, width, height)

    logger.debug("Rendering %s %dx%d with the %s backend", fractal_type.value, width, height, backend)
    if backend == "tensorflow":
        values = _values_tensorflow(fractal_type, config, viewport, constant, device)
    else:
        values = _values_python(fractal_type, config, viewport, constant)

    with np.errstate(invalid="ignore"):
        interior = values >= 1
    return RenderResult(values=values, interior=interior, viewport=viewport)


def _usable_buffer(surface: Surface | None) -> memoryview | None:
    """Return a flat writable byte view of the surface buffer, or None when it cannot be drawn on."""

    if surface is None:
        logger.warning("No surface to render into; skipping.")
        return None

    width = getattr(surface, "width", 0)
    height = getattr(surface, "height", 0)
    buffer = getattr(surface, "buffer", None)
    if buffer is None or width <= 0 or height <= 0:
        logger.warning("Surface %r has no usable buffer; skipping.", surface)
        return None

    try:
        pixels = memoryview(buffer).cast("B")
    except TypeError:
        logger.warning("Surface %r buffer of type %s is not a contiguous byte buffer; skipping.", surface, type(buffer).__name__)
        return None
    if pixels.readonly:
        logger.warning("Surface %r buffer is read-only; skipping.", surface)
        return None

    expected = width * height * BYTES_PER_PIXEL
    if pixels.nbytes != expected:
        logger.warning("Surface %r buffer holds %d bytes, expected %d; skipping.", surface, pixels.nbytes, expected)
        return None
    return pixels


def blit(surface: Surface, values: np.ndarray, scheme: ColorScheme | str) -> None:
    """Color ``values`` with ``scheme`` and write them into ``surface`` as one commit."""

    pixels = _usable_buffer(surface)
    if pixels is None:
        return

    values = np.asarray(values)
    if values.shape != (surface.height, surface.width):
        raise ValueError(f"values of shape {values.shape} do not match a {surface.width}x{surface.height} surface")

    rgba = np.empty(values.shape + (BYTES_PER_PIXEL,), dtype=np.uint8)
    rgba[..., :3] = colorize(values, scheme)
    rgba[..., 3] = 255
    pixels[:] = rgba.tobytes()
    surface.commit()


def render(
    surface: Surface | None,
    fractal_type: FractalType | str = FractalType.MANDELBROT,
    config: FractalConfig | Mapping[str, Any] | None = None,
    julia_constant: Point | None = None,
    *,
    backend: str = "python",
    device: Optional[str] = None,
) -> None:
    """Fill ``surface`` with the fractal and commit it once.

    ``config`` may be a :class:`FractalConfig` or a mapping of field overrides
    merged over the defaults. ``julia_constant`` is only used for Julia sets.
    A missing or unusable surface makes this a no-op.
    """

    pixels = _usable_buffer(surface)
    if pixels is None:
        return

    fractal_type = FractalType(fractal_type)
    config = resolve_config(config)
    backend = _check_backend(backend)
    width = surface.width
    height = surface.height

    if backend == "tensorflow":
        result = render_frame(fractal_type, config, width, height, julia_constant, backend=backend, device=device)
        blit(surface, result.values, config.color_scheme)
        return

    constant = julia_constant if julia_constant is not None else DEFAULT_JULIA_CONSTANT
    viewport = compute_viewport(config, width, height)
    scheme = config.color_scheme

    for py in range(height):
        for px in range(width):
            t = escape_value(fractal_type, pixel_to_complex(viewport, px, py), config, constant)
            r, g, b = get_color(t, scheme)
            idx = (py * width + px) * BYTES_PER_PIXEL
            pixels[idx] = r
            pixels[idx + 1] = g
            pixels[idx + 2] = b
            pixels[idx + 3] = 255

    surface.commit()
