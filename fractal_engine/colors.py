"""Color schemes mapping escape metrics to 8-bit RGB."""

from __future__ import annotations

from math import floor

import numpy as np

from .config import ColorScheme

BLACK = (0, 0, 0)


def _hue_to_channel(p: float, q: float, t: float) -> float:
    if t < 0:
        t += 1
    if t > 1:
        t -= 1
    if t < 1 / 6:
        return p + (q - p) * 6 * t
    if t < 1 / 2:
        return q
    if t < 2 / 3:
        return p + (q - p) * (2 / 3 - t) * 6
    return p


def hsl_to_rgb(h: float, s: float, l: float) -> tuple[int, int, int]:
    """Convert HSL (each component in [0, 1]) to an 8-bit RGB triple."""

    if s == 0:
        r = g = b = l
    else:
        q = l * (1 + s) if l < 0.5 else l + s - l * s
        p = 2 * l - q
        r = _hue_to_channel(p, q, h + 1 / 3)
        g = _hue_to_channel(p, q, h)
        b = _hue_to_channel(p, q, h - 1 / 3)
    return floor(r * 255), floor(g * 255), floor(b * 255)


def get_color(t: float, scheme: ColorScheme | str) -> tuple[int, int, int]:
    """Map an escape metric ``t`` to RGB using ``scheme``.

    Interior points (``t >= 1``) and NaN metrics are black for every
    scheme. Negative metrics are clamped to 0.
    """

    scheme = ColorScheme(scheme)
    if not t < 1:
        return BLACK
    t = max(t, 0.0)

    if scheme is ColorScheme.FIRE:
        return floor(255 * t), floor(255 * t * t), 0
    if scheme is ColorScheme.RAINBOW:
        return hsl_to_rgb(t, 1, 0.5)
    if scheme is ColorScheme.GRAYSCALE:
        gray = floor(255 * t)
        return gray, gray, gray
    if scheme is ColorScheme.OCEAN:
        return floor(50 * t), floor(50 * t + 100 * t * t), floor(100 + 155 * t)
    if scheme is ColorScheme.SUNSET:
        return floor(255 * t ** 0.7), floor(100 * t), floor(50 + 205 * (1 - t))
    raise ValueError(f"unsupported color scheme {scheme!r}")


def _hue_to_channel_array(p: float, q: float, t: np.ndarray) -> np.ndarray:
    t = np.where(t < 0, t + 1, t)
    t = np.where(t > 1, t - 1, t)
    return np.select(
        [t < 1 / 6, t < 1 / 2, t < 2 / 3],
        [p + (q - p) * 6 * t, np.full_like(t, q), p + (q - p) * (2 / 3 - t) * 6],
        default=p,
    )


def hsl_to_rgb_array(h: np.ndarray, s: float, l: float) -> np.ndarray:
    """Vectorized :func:`hsl_to_rgb` over an array of hues; returns floats in [0, 1]."""

    h = np.asarray(h, dtype=np.float64)
    if s == 0:
        return np.stack((np.full_like(h, l),) * 3, axis=-1)
    q = l * (1 + s) if l < 0.5 else l + s - l * s
    p = 2 * l - q
    return np.stack(
        (
            _hue_to_channel_array(p, q, h + 1 / 3),
            _hue_to_channel_array(p, q, h),
            _hue_to_channel_array(p, q, h - 1 / 3),
        ),
        axis=-1,
    )


def colorize(values: np.ndarray, scheme: ColorScheme | str) -> np.ndarray:
    """Vectorized :func:`get_color`: ``uint8`` array of shape ``values.shape + (3,)``."""

    scheme = ColorScheme(scheme)
    t = np.asarray(values, dtype=np.float64)
    with np.errstate(invalid="ignore"):
        inside = ~(t < 1)
    t = np.maximum(np.where(inside, 0.0, t), 0.0)

    if scheme is ColorScheme.FIRE:
        channels = np.stack((255 * t, 255 * t * t, np.zeros_like(t)), axis=-1)
    elif scheme is ColorScheme.RAINBOW:
        channels = hsl_to_rgb_array(t, 1, 0.5) * 255
    elif scheme is ColorScheme.GRAYSCALE:
        channels = np.stack((255 * t,) * 3, axis=-1)
    elif scheme is ColorScheme.OCEAN:
        channels = np.stack((50 * t, 50 * t + 100 * t * t, 100 + 155 * t), axis=-1)
    elif scheme is ColorScheme.SUNSET:
        channels = np.stack((255 * t ** 0.7, 100 * t, 50 + 205 * (1 - t)), axis=-1)
    else:
        raise ValueError(f"unsupported color scheme {scheme!r}")

    rgb = np.clip(np.floor(channels), 0, 255).astype(np.uint8)
    rgb[inside] = BLACK
    return rgb
