import dataclasses

import pytest

from fractal_engine import (
    DEFAULT_CONFIG,
    ColorScheme,
    FractalConfig,
    FractalType,
    Point,
    make_config,
    resolve_config,
)


def test_defaults():
    assert DEFAULT_CONFIG == FractalConfig(
        max_iterations=256,
        escape_radius=4.0,
        color_scheme=ColorScheme.RAINBOW,
        offset_x=-0.5,
        offset_y=0.0,
        zoom=1.0,
    )


def test_partial_override_keeps_other_defaults():
    config = make_config(zoom=2.0, max_iterations=64)

    assert config.zoom == 2.0
    assert config.max_iterations == 64
    assert config.escape_radius == DEFAULT_CONFIG.escape_radius
    assert config.offset_x == DEFAULT_CONFIG.offset_x
    assert config.color_scheme is ColorScheme.RAINBOW


def test_override_on_top_of_base():
    base = make_config(offset_x=0.25)

    assert make_config(base, zoom=4.0) == FractalConfig(offset_x=0.25, zoom=4.0)


def test_color_scheme_string_is_coerced():
    assert make_config(color_scheme="ocean").color_scheme is ColorScheme.OCEAN
    with pytest.raises(ValueError):
        make_config(color_scheme="plasma")


def test_unknown_field_is_rejected():
    with pytest.raises(TypeError):
        make_config(iterations=10)


def test_config_is_immutable():
    with pytest.raises(dataclasses.FrozenInstanceError):
        DEFAULT_CONFIG.zoom = 3.0


def test_resolve_config():
    config = make_config(zoom=8.0)

    assert resolve_config(None) is DEFAULT_CONFIG
    assert resolve_config(config) is config
    assert resolve_config({"zoom": 8.0}) == config
    assert resolve_config({"color_scheme": "fire"}).color_scheme is ColorScheme.FIRE


@pytest.mark.parametrize(
    "name, expected",
    [
        ("mandelbrot", FractalType.MANDELBROT),
        ("julia", FractalType.JULIA),
        ("burning_ship", FractalType.BURNING_SHIP),
        ("burningShip", FractalType.BURNING_SHIP),
        ("burning-ship", FractalType.BURNING_SHIP),
        ("Julia", FractalType.JULIA),
    ],
)
def test_fractal_type_names(name, expected):
    assert FractalType(name) is expected


def test_unknown_fractal_type():
    with pytest.raises(ValueError):
        FractalType("newton")


def test_point_is_a_pair():
    point = Point(1.5, -2.0)
    x, y = point

    assert (x, y) == (1.5, -2.0)
    assert point == (1.5, -2.0)
