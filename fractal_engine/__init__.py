"""Public API for escape-time fractal rendering."""

from .colors import colorize, get_color, hsl_to_rgb
from .config import (
    DEFAULT_CONFIG,
    DEFAULT_JULIA_CONSTANT,
    ColorScheme,
    FractalConfig,
    FractalType,
    Point,
    make_config,
    resolve_config,
)
from .generator import boundary_pixels, focus_point, recenter, zoom_schedule
from .iteration import burning_ship, escape_value, julia, mandelbrot
from .presets import JULIA_PRESETS, JuliaPreset, get_julia_preset
from .renderer import (
    RenderResult,
    Viewport,
    blit,
    compute_viewport,
    pixel_to_complex,
    render,
    render_frame,
)
from .surface import ImageSurface, Surface

__all__ = [
    "ColorScheme",
    "DEFAULT_CONFIG",
    "DEFAULT_JULIA_CONSTANT",
    "FractalConfig",
    "FractalType",
    "ImageSurface",
    "JULIA_PRESETS",
    "JuliaPreset",
    "Point",
    "RenderResult",
    "Surface",
    "Viewport",
    "blit",
    "boundary_pixels",
    "burning_ship",
    "colorize",
    "compute_viewport",
    "escape_value",
    "focus_point",
    "get_color",
    "get_julia_preset",
    "hsl_to_rgb",
    "julia",
    "make_config",
    "mandelbrot",
    "pixel_to_complex",
    "recenter",
    "render",
    "render_frame",
    "resolve_config",
    "zoom_schedule",
]
