"""Well-known Julia set constants."""

from __future__ import annotations

from dataclasses import dataclass

from .config import Point


@dataclass(frozen=True)
class JuliaPreset:
    name: str
    constant: Point
    description: str


JULIA_PRESETS: tuple[JuliaPreset, ...] = (
    JuliaPreset("Dendrite", Point(0.0, 1.0), "Branching, tree-like filaments with no interior"),
    JuliaPreset("Dragon", Point(-0.8, 0.156), "Curling dragon-like arms"),
    JuliaPreset("Swirl", Point(-0.7269, 0.1889), "Tightly wound swirls"),
    JuliaPreset("Spiral", Point(-0.4, 0.6), "Spiral galaxy arms around a connected core"),
    JuliaPreset("Nebula", Point(0.285, 0.01), "Cloudy, nebula-like structure"),
    JuliaPreset("Burning Ship", Point(-1.755, 0.0), "Flame-like shapes near the Burning Ship's antenna"),
    JuliaPreset("Circle", Point(0.0, 0.0), "Degenerate case: the unit circle"),
    JuliaPreset("Cardioid", Point(0.25, 0.0), "Cauliflower from the cusp of the main cardioid"),
)


def get_julia_preset(name: str) -> JuliaPreset:
    """Look up a preset by name; case is ignored and dashes or underscores match spaces."""

    key = name.strip().lower().replace("-", " ").replace("_", " ")
    for preset in JULIA_PRESETS:
        if preset.name.lower() == key:
            return preset
    raise KeyError(name)
