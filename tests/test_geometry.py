import numpy as np
import pytest

from glassline.config import Configuration, VisualMode, argb_to_abgr
from glassline.geometry import generate, usable_spectrum
from glassline.vertex import Topology

VIEWPORT = (200, 100)


def make_config(mode, **kwargs):
    kwargs.setdefault("glow_strength", 0.0)
    return Configuration(mode=mode, **kwargs).validated()


def spectrum_with_usable(values):
    """Smoothed spectrum whose usable slice is exactly `values`."""
    n = len(values)
    spectrum = np.zeros(2 * n + 2)
    spectrum[1 : n + 1] = values
    return spectrum


def test_usable_spectrum_drops_dc_and_upper_half():
    spectrum = np.arange(16.0)
    assert list(usable_spectrum(spectrum)) == [1, 2, 3, 4, 5, 6, 7]


@pytest.mark.parametrize("mode", list(VisualMode))
@pytest.mark.parametrize("length", [0, 1, 2, 3, 4, 5])
def test_too_few_bins_draw_nothing(mode, length):
    cfg = make_config(mode, glow_strength=0.5)
    assert generate(np.ones(length), cfg, VIEWPORT) == []


@pytest.mark.parametrize("mode", list(VisualMode))
def test_missing_spectrum_draws_nothing(mode):
    assert generate(None, make_config(mode), VIEWPORT) == []


@pytest.mark.parametrize("mode", list(VisualMode))
def test_every_mode_draws_something(mode):
    spectrum = spectrum_with_usable(np.linspace(0.0, 0.5, 32))
    batches = generate(spectrum, make_config(mode, glow_strength=0.5), VIEWPORT)
    assert batches
    for batch in batches:
        assert batch.points.shape[1] == 2
        assert np.all(np.isfinite(batch.points))


def test_empty_viewport_draws_nothing():
    spectrum = spectrum_with_usable(np.ones(8))
    assert generate(spectrum, make_config(VisualMode.LINE), (0, 100)) == []


def test_silent_line_sits_on_bottom_edge():
    spectrum = np.zeros(1024)
    batches = generate(spectrum, make_config(VisualMode.LINE), VIEWPORT)

    assert len(batches) == 1
    batch = batches[0]
    assert batch.topology is Topology.LINE_STRIP
    assert len(batch) == 511
    assert np.all(batch.points[:, 1] == VIEWPORT[1])
    assert batch.points[0, 0] == 0.0
    assert batch.points[-1, 0] == pytest.approx(VIEWPORT[0])


def test_line_is_clamped_to_viewport():
    spectrum = spectrum_with_usable([0.0, 5.0, 0.5])
    batch = generate(spectrum, make_config(VisualMode.LINE), VIEWPORT)[0]
    assert list(batch.points[:, 1]) == pytest.approx([100.0, 0.0, 50.0])


def test_bars_average_contiguous_bins():
    values = [0.1, 0.3, 0.2, 0.2, 0.0, 0.4, 0.5, 0.5]
    spectrum = spectrum_with_usable(values)
    batches = generate(spectrum, make_config(VisualMode.BARS, bar_count=4), VIEWPORT)

    assert len(batches) == 4
    width, height = VIEWPORT
    for i, (batch, expected) in enumerate(zip(batches, [0.2, 0.2, 0.2, 0.5])):
        assert batch.topology is Topology.TRIANGLE_LIST
        assert len(batch) == 6
        assert batch.points[:, 1].max() == pytest.approx(height)
        assert batch.points[:, 1].min() == pytest.approx(height - expected * height)
        # 10% gap: each bar covers 90% of its 50px slot
        assert batch.points[:, 0].min() == pytest.approx(i * 50 + 2.5)
        assert batch.points[:, 0].max() == pytest.approx(i * 50 + 47.5)


@pytest.mark.parametrize(
    "mode",
    [VisualMode.BARS, VisualMode.CIRCULAR_BARS, VisualMode.SYMMETRIC_BARS, VisualMode.MIRRORED_BARS],
)
def test_bar_count_is_clamped_to_usable_bins(mode):
    spectrum = spectrum_with_usable(np.full(8, 0.1))
    batches = generate(spectrum, make_config(mode, bar_count=64), VIEWPORT)
    assert len(batches) == 8


def test_circular_line_is_a_closed_loop():
    spectrum = spectrum_with_usable(np.linspace(0.1, 1.0, 32))
    batch = generate(spectrum, make_config(VisualMode.CIRCULAR_LINE, radius=30), VIEWPORT)[0]

    assert batch.topology is Topology.LINE_STRIP
    assert len(batch) == 33
    assert np.allclose(batch.points[0], batch.points[-1])


def test_circular_line_radius_follows_magnitude():
    spectrum = spectrum_with_usable([0.0, 0.0, 0.0, 0.0])
    batch = generate(spectrum, make_config(VisualMode.CIRCULAR_LINE, radius=30), VIEWPORT)[0]
    distances = np.hypot(batch.points[:, 0] - 100, batch.points[:, 1] - 50)
    assert np.allclose(distances, 30.0, atol=1e-3)


def test_circular_bars_wedge_geometry():
    spectrum = spectrum_with_usable([1.0, 1.0, 1.0, 1.0])
    batches = generate(spectrum, make_config(VisualMode.CIRCULAR_BARS, radius=20, bar_count=4), VIEWPORT)

    assert len(batches) == 4
    first = batches[0]
    assert first.topology is Topology.TRIANGLE_LIST
    assert len(first) == 6
    distances = np.hypot(first.points[:, 0] - 100, first.points[:, 1] - 50)
    assert distances.min() == pytest.approx(20.0, abs=1e-3)
    assert distances.max() == pytest.approx(40.0, abs=1e-3)
    # Wedge 0 starts at angle 0 and spans 80% of a quarter turn
    angles = np.arctan2(first.points[:, 1] - 50, first.points[:, 0] - 100)
    assert angles.min() == pytest.approx(0.0, abs=1e-4)
    assert angles.max() == pytest.approx(0.8 * np.pi / 2, abs=1e-4)


def test_symmetric_bars_gradient_and_centering():
    cfg = make_config(VisualMode.SYMMETRIC_BARS, bar_count=4)
    spectrum = spectrum_with_usable(np.full(8, 0.5))
    batches = generate(spectrum, cfg, VIEWPORT)

    assert batches[0].color == argb_to_abgr(cfg.color_start)
    assert batches[-1].color == argb_to_abgr(cfg.color_end)
    for batch in batches:
        xs = batch.points[:, 0]
        assert xs.min() == pytest.approx(50.0)
        assert xs.max() == pytest.approx(150.0)


def test_glow_layer_is_drawn_first_and_larger():
    cfg = make_config(VisualMode.SYMMETRIC_WAVEFORM, glow_strength=1.0)
    spectrum = spectrum_with_usable(np.full(16, 0.5))
    batches = generate(spectrum, cfg, VIEWPORT)

    assert len(batches) == 4
    assert [b.color for b in batches] == [argb_to_abgr(cfg.glow_color)] * 2 + [argb_to_abgr(cfg.color)] * 2
    glow_top, main_top = batches[0], batches[2]
    # amplitude 0.5 * 0.3 * 100 = 15, glow scaled by 1.5
    assert main_top.points[0, 1] == pytest.approx(50 - 15)
    assert glow_top.points[0, 1] == pytest.approx(50 - 22.5)


def test_glow_below_threshold_is_skipped():
    cfg = make_config(VisualMode.FILLED_MIRROR, glow_strength=0.01)
    batches = generate(spectrum_with_usable(np.ones(8)), cfg, VIEWPORT)
    assert len(batches) == 1


def test_batch_colors_are_swizzled():
    cfg = make_config(VisualMode.LINE, color=0xFF112233)
    batch = generate(spectrum_with_usable(np.ones(4)), cfg, VIEWPORT)[0]
    assert batch.color == 0xFF332211


def test_centered_waveform_spreads_from_center():
    spectrum = spectrum_with_usable(np.full(16, 0.2))
    batches = generate(spectrum, make_config(VisualMode.CENTERED_WAVEFORM), VIEWPORT)

    assert len(batches) == 4
    left_top, _, right_top, _ = batches
    assert len(left_top) == 8
    assert left_top.points[0, 0] == pytest.approx(100.0)
    assert np.all(np.diff(left_top.points[:, 0]) < 0)
    assert np.all(np.diff(right_top.points[:, 0]) > 0)


def test_filled_mirror_alternates_top_and_bottom():
    spectrum = spectrum_with_usable(np.full(8, 0.5))
    batch = generate(spectrum, make_config(VisualMode.FILLED_MIRROR), VIEWPORT)[0]

    assert batch.topology is Topology.TRIANGLE_STRIP
    assert len(batch) == 16
    assert np.allclose(batch.points[0::2, 1], 30.0)
    assert np.allclose(batch.points[1::2, 1], 70.0)


def test_pulse_line_uses_average_level():
    cfg = make_config(VisualMode.PULSE_LINE, glow_strength=0.5, thickness=2.0)
    spectrum = spectrum_with_usable([0.0, 0.5, 0.5, 1.0])
    glow, main = generate(spectrum, cfg, VIEWPORT)

    # avg 0.5 -> height 0.8 * 100 * 0.7, width 2 * (1 + 1)
    assert main.topology is Topology.TRIANGLE_STRIP
    assert np.ptp(main.points[:, 1]) == pytest.approx(56.0)
    assert np.ptp(main.points[:, 0]) == pytest.approx(4.0)
    assert np.ptp(glow.points[:, 0]) == pytest.approx(12.0)
    assert np.ptp(glow.points[:, 1]) == pytest.approx(56.0)


def test_multi_wave_draws_three_layers_back_to_front():
    cfg = make_config(VisualMode.MULTI_WAVE)
    batches = generate(spectrum_with_usable(np.full(8, 0.5)), cfg, VIEWPORT)

    assert len(batches) == 6
    colors = [b.color for b in batches[::2]]
    assert colors == [argb_to_abgr(cfg.glow_color), argb_to_abgr(cfg.color_end), argb_to_abgr(cfg.color)]
    # Glow wave: 0.5 * 1.1 * 30 = 16.5 above a center shifted up by 5
    assert batches[0].points[0, 1] == pytest.approx(45 - 16.5)
    assert batches[5].points[0, 1] == pytest.approx(50 + 15)


def test_symmetric_dots_sample_every_other_bin():
    cfg = make_config(VisualMode.SYMMETRIC_DOTS, glow_strength=0.5)
    glow, main = generate(spectrum_with_usable(np.full(9, 0.1)), cfg, VIEWPORT)

    # Bins 0, 2, 4, 6, 8: two quads each, six vertices per quad
    assert len(main) == 5 * 2 * 6
    assert main.topology is Topology.TRIANGLE_LIST
    assert np.ptp(main.points[:6, 0]) == pytest.approx(2 * cfg.thickness)
    assert np.ptp(glow.points[:6, 0]) == pytest.approx(4 * cfg.thickness)


def test_mirrored_bars_span_center_line():
    spectrum = spectrum_with_usable(np.full(8, 0.5))
    batches = generate(spectrum, make_config(VisualMode.MIRRORED_BARS, bar_count=2), VIEWPORT)

    assert len(batches) == 2
    for batch in batches:
        assert batch.topology is Topology.TRIANGLE_STRIP
        assert batch.points[:, 1].min() == pytest.approx(30.0)
        assert batch.points[:, 1].max() == pytest.approx(70.0)

    # Same 10% gap as Bars: 90 wide and centered in each 100 wide slot
    first, second = batches
    assert (first.points[:, 0].min(), first.points[:, 0].max()) == pytest.approx((5.0, 95.0))
    assert (second.points[:, 0].min(), second.points[:, 0].max()) == pytest.approx((105.0, 195.0))


def test_batches_are_read_only():
    batch = generate(spectrum_with_usable(np.ones(4)), make_config(VisualMode.LINE), VIEWPORT)[0]
    with pytest.raises(ValueError):
        batch.points[0, 0] = 1.0
