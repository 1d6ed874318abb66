import numpy as np
import pytest

from fractal_engine import (
    DEFAULT_CONFIG,
    boundary_pixels,
    compute_viewport,
    focus_point,
    make_config,
    pixel_to_complex,
    recenter,
    render_frame,
    zoom_schedule,
)
from fractal_engine.renderer import RenderResult


def _result(interior, config=DEFAULT_CONFIG):
    interior = np.asarray(interior, dtype=bool)
    height, width = interior.shape
    return RenderResult(
        values=np.where(interior, 1.0, 0.5),
        interior=interior,
        viewport=compute_viewport(config, width, height),
    )


def test_no_frames_no_zooms():
    assert zoom_schedule(DEFAULT_CONFIG, 0).size == 0


def test_constant_step_multiplies_zoom():
    zooms = zoom_schedule(make_config(zoom=2.0), 4, zoom_step=1.5)

    np.testing.assert_allclose(zooms, [2.0, 3.0, 4.5, 6.75])


@pytest.mark.parametrize("easing", ["linear", "ease"])
def test_target_zoom_is_reached(easing):
    zooms = zoom_schedule(make_config(zoom=2.0), 6, target_zoom=2e4, easing=easing)

    assert zooms.shape == (6,)
    assert zooms[0] == pytest.approx(2.0)
    assert zooms[-1] == pytest.approx(2e4)
    assert np.all(np.diff(zooms) > 0)


def test_linear_easing_has_equal_ratios():
    zooms = zoom_schedule(DEFAULT_CONFIG, 5, target_zoom=1e4, easing="linear")

    np.testing.assert_allclose(zooms[1:] / zooms[:-1], [10.0] * 4)


def test_ease_starts_and_ends_slowly():
    zooms = zoom_schedule(DEFAULT_CONFIG, 9, target_zoom=1e8, easing="ease")
    ratios = zooms[1:] / zooms[:-1]

    assert ratios[0] < ratios[3]
    assert ratios[-1] < ratios[4]


def test_single_frame_with_target_renders_target():
    np.testing.assert_array_equal(zoom_schedule(DEFAULT_CONFIG, 1, target_zoom=50.0), [50.0])


@pytest.mark.parametrize(
    "kwargs",
    [{"easing": "bounce"}, {"zoom_step": 0.0}, {"target_zoom": -1.0}],
)
def test_invalid_schedule_arguments(kwargs):
    with pytest.raises(ValueError):
        zoom_schedule(DEFAULT_CONFIG, 3, **kwargs)


def test_boundary_pixels_of_a_block():
    interior = np.zeros((5, 5), dtype=bool)
    interior[1:4, 1:4] = True

    pixels = {tuple(p) for p in boundary_pixels(interior)}

    assert (2, 2) not in pixels
    assert pixels == {(r, c) for r in range(1, 4) for c in range(1, 4)} - {(2, 2)}


def test_interior_touching_frame_edge_is_not_boundary():
    assert boundary_pixels(np.ones((4, 4), dtype=bool)).size == 0


def test_focus_defaults_to_viewport_center():
    result = _result(np.zeros((9, 7)))

    assert focus_point(result) == pytest.approx((DEFAULT_CONFIG.offset_x, DEFAULT_CONFIG.offset_y))


def test_focus_picks_boundary_nearest_center():
    interior = np.zeros((9, 9), dtype=bool)
    interior[0, 0] = True
    interior[6, 5] = True
    result = _result(interior)

    assert focus_point(result) == pixel_to_complex(result.viewport, 5, 6)


def test_recenter_moves_offsets_only():
    config = make_config(max_iterations=64, zoom=1.5)
    result = render_frame("mandelbrot", config, 16, 16)

    updated = recenter(config, result)

    assert (updated.offset_x, updated.offset_y) == focus_point(result)
    assert updated.zoom == config.zoom
    assert updated.max_iterations == config.max_iterations
    row, col = np.argwhere(result.interior).T
    assert any(pixel_to_complex(result.viewport, c, r) == focus_point(result) for r, c in zip(row, col))
