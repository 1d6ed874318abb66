"""Escape-time iteration for single points of the complex plane.

Every function returns a normalized escape metric: values below 1 record
how quickly the orbit left the escape radius, and exactly 1 marks a point
that stayed bounded for ``max_iterations`` steps.
"""

from __future__ import annotations

from math import log2, nan

from .config import DEFAULT_CONFIG, DEFAULT_JULIA_CONSTANT, FractalConfig, FractalType, Point

# Offset added to the smoothed count so the first escape bands start above 0.
SMOOTHING_SHIFT = 4


def _smooth(iteration: int, magnitude_sq: float, max_iterations: int) -> float:
    # log2(log2(m)) is undefined for m <= 1, which only happens when the
    # escape radius itself is <= 1.
    if magnitude_sq <= 1.0:
        return nan
    return (iteration - log2(log2(magnitude_sq)) + SMOOTHING_SHIFT) / max_iterations


def _quadratic_orbit(zr: float, zi: float, cx: float, cy: float, config: FractalConfig) -> float:
    max_iterations = config.max_iterations
    escape_radius = config.escape_radius
    iteration = 0

    while zr * zr + zi * zi < escape_radius and iteration < max_iterations:
        zr, zi = zr * zr - zi * zi + cx, 2 * zr * zi + cy
        iteration += 1

    if iteration == max_iterations:
        return 1.0
    return _smooth(iteration, zr * zr + zi * zi, max_iterations)


def mandelbrot(c: Point, config: FractalConfig = DEFAULT_CONFIG) -> float:
    """Iterate ``z <- z**2 + c`` from ``z = 0``."""

    cx, cy = c
    return _quadratic_orbit(0.0, 0.0, cx, cy, config)


def julia(z: Point, c: Point, config: FractalConfig = DEFAULT_CONFIG) -> float:
    """Iterate ``z <- z**2 + c`` from the given point with a fixed ``c``."""

    zr, zi = z
    cx, cy = c
    return _quadratic_orbit(zr, zi, cx, cy, config)


def burning_ship(c: Point, config: FractalConfig = DEFAULT_CONFIG) -> float:
    """Iterate the Burning Ship map, folding both components after each step.

    The result is the unsmoothed ratio ``iterations / max_iterations``.
    """

    cx, cy = c
    max_iterations = config.max_iterations
    escape_radius = config.escape_radius
    zr = zi = 0.0
    iteration = 0

    while zr * zr + zi * zi < escape_radius and iteration < max_iterations:
        zr, zi = abs(zr * zr - zi * zi + cx), abs(2 * zr * zi + cy)
        iteration += 1

    if iteration == max_iterations:
        return 1.0
    return iteration / max_iterations


def escape_value(
    fractal_type: FractalType | str,
    point: Point,
    config: FractalConfig = DEFAULT_CONFIG,
    constant: Point | None = None,
) -> float:
    """Dispatch ``point`` to the iteration matching ``fractal_type``."""

    fractal_type = FractalType(fractal_type)
    if fractal_type is FractalType.MANDELBROT:
        return mandelbrot(point, config)
    if fractal_type is FractalType.JULIA:
        return julia(point, constant if constant is not None else DEFAULT_JULIA_CONSTANT, config)
    if fractal_type is FractalType.BURNING_SHIP:
        return burning_ship(point, config)
    raise ValueError(f"unsupported fractal type {fractal_type!r}")
