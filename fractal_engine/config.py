"""Value types and defaults shared by the iteration, color and render layers."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Mapping, NamedTuple


class Point(NamedTuple):
    """A complex number ``x + y*i`` as an immutable pair."""

    x: float
    y: float


class FractalType(str, Enum):
    MANDELBROT = "mandelbrot"
    JULIA = "julia"
    BURNING_SHIP = "burning_ship"

    @classmethod
    def _missing_(cls, value: object) -> FractalType | None:
        if isinstance(value, str):
            normalized = value.strip().lower().replace("-", "_")
            if normalized == "burningship":
                return cls.BURNING_SHIP
            for member in cls:
                if member.value == normalized:
                    return member
        return None


class ColorScheme(str, Enum):
    FIRE = "fire"
    RAINBOW = "rainbow"
    GRAYSCALE = "grayscale"
    OCEAN = "ocean"
    SUNSET = "sunset"


DEFAULT_JULIA_CONSTANT = Point(-0.7, 0.27015)


@dataclass(frozen=True)
class FractalConfig:
    """Iteration, coloring and viewport parameters for a render.

    ``escape_radius`` is compared against the *squared* magnitude of z, so
    the default of 4 corresponds to the usual escape distance of 2.
    ``zoom`` sets the viewport width to ``3 / zoom`` around
    ``(offset_x, offset_y)``.
    """

    max_iterations: int = 256
    escape_radius: float = 4.0
    color_scheme: ColorScheme = ColorScheme.RAINBOW
    offset_x: float = -0.5
    offset_y: float = 0.0
    zoom: float = 1.0


DEFAULT_CONFIG = FractalConfig()


def make_config(base: FractalConfig | None = None, **overrides: Any) -> FractalConfig:
    """Merge ``overrides`` field by field over ``base`` (the defaults if omitted)."""

    config = base if base is not None else DEFAULT_CONFIG
    if "color_scheme" in overrides:
        overrides["color_scheme"] = ColorScheme(overrides["color_scheme"])
    return replace(config, **overrides)


def resolve_config(config: FractalConfig | Mapping[str, Any] | None) -> FractalConfig:
    if config is None:
        return DEFAULT_CONFIG
    if isinstance(config, FractalConfig):
        return config
    return make_config(**dict(config))
