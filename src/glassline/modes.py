"""
Geometry generators, one per visual mode.

Each generator maps the usable part of the smoothed spectrum onto vertex
batches for a viewport. Generators that support glow emit an over-scaled,
glow-colored copy of their geometry before the main layer, so the halo ends
up underneath purely through draw order.
"""

import math
from dataclasses import dataclass

import numpy as np

from glassline.config import Configuration, VisualMode, argb_to_abgr, lerp_argb
from glassline.constants import (
    BAR_GAP,
    CIRCLE_LINE_GAIN,
    GLOW_AMPLITUDE_GAIN,
    GLOW_THRESHOLD,
    MIRROR_AMPLITUDE,
    MULTI_WAVE_END_LAYER,
    MULTI_WAVE_GLOW_LAYER,
    MULTI_WAVE_MAIN_LAYER,
    PULSE_GLOW_WIDTH_GAIN,
    WAVE_AMPLITUDE,
    WEDGE_FILL,
)
from glassline.vertex import Topology, VertexBatch, line_strip, rect_strip, rect_triangles

MODE_GENERATORS = {}


def register(mode):
    def decorator(cls):
        MODE_GENERATORS[mode] = cls()
        return cls

    return decorator


@dataclass(frozen=True)
class FrameContext:
    """Everything a generator may read while building one frame."""

    spectrum: np.ndarray
    usable: np.ndarray
    config: Configuration
    width: float
    height: float

    @property
    def n(self):
        return len(self.usable)

    @property
    def center(self):
        return self.width / 2.0, self.height / 2.0

    @property
    def glow_enabled(self):
        return self.config.glow_strength > GLOW_THRESHOLD

    @property
    def glow_gain(self):
        return 1.0 + self.config.glow_strength * GLOW_AMPLITUDE_GAIN

    def magnitudes(self):
        return self.usable * self.config.amp_scale

    @property
    def bar_count(self):
        return min(max(int(self.config.bar_count), 1), self.n)

    def bar_magnitudes(self):
        """
        Mean magnitude of each bar's contiguous bin range, scaled by amp_scale.
        Bin indices past the end of the spectrum are left out of the sum.
        """
        count = self.bar_count
        bins_per_bar = max(1, self.n // count)

        values = np.empty(count)
        for i in range(count):
            start = 1 + i * bins_per_bar
            values[i] = self.spectrum[start : start + bins_per_bar].sum() / bins_per_bar
        return values * self.config.amp_scale


class ModeGenerator:
    """Glow layer (when enabled) followed by the main layer."""

    def generate(self, ctx):
        batches = []
        if ctx.glow_enabled:
            batches.extend(self.glow_layer(ctx))
        batches.extend(self.main_layer(ctx))
        return batches

    def glow_layer(self, ctx):
        return self.layer(ctx, ctx.glow_gain, argb_to_abgr(ctx.config.glow_color))

    def main_layer(self, ctx):
        return self.layer(ctx, 1.0, argb_to_abgr(ctx.config.color))

    def layer(self, ctx, gain, color):
        raise NotImplementedError


@register(VisualMode.LINE)
class LineGenerator(ModeGenerator):
    def layer(self, ctx, gain, color):
        h = ctx.height
        xs = np.arange(ctx.n) / (ctx.n - 1) * ctx.width
        ys = np.clip(h - ctx.magnitudes() * gain * h, 0.0, h)
        return [line_strip(xs, ys, color)]


@register(VisualMode.BARS)
class BarsGenerator(ModeGenerator):
    """Vertical bars standing on the bottom edge."""

    def layer(self, ctx, gain, color):
        mags = ctx.bar_magnitudes()
        slot = ctx.width / len(mags)
        bar_width = slot * (1.0 - BAR_GAP)
        h = ctx.height

        batches = []
        for i, mag in enumerate(mags):
            x0 = i * slot + slot * BAR_GAP / 2.0
            bar_height = min(max(mag * gain * h, 0.0), h)
            points = rect_triangles(x0, h, x0 + bar_width, h - bar_height)
            batches.append(VertexBatch(points, Topology.TRIANGLE_LIST, color))
        return batches


@register(VisualMode.CIRCULAR_LINE)
class CircularLineGenerator(ModeGenerator):
    def layer(self, ctx, gain, color):
        cx, cy = ctx.center
        radius = ctx.config.radius

        angles = np.arange(ctx.n) / ctx.n * 2.0 * np.pi
        r = radius + ctx.magnitudes() * gain * radius * CIRCLE_LINE_GAIN
        xs = cx + r * np.cos(angles)
        ys = cy + r * np.sin(angles)

        # Close the loop back onto bin 0
        xs = np.append(xs, xs[0])
        ys = np.append(ys, ys[0])
        return [line_strip(xs, ys, color)]


@register(VisualMode.CIRCULAR_BARS)
class CircularBarsGenerator(ModeGenerator):
    """Radial wedges with a fixed inner radius, two triangles each."""

    def layer(self, ctx, gain, color):
        cx, cy = ctx.center
        radius = ctx.config.radius
        mags = ctx.bar_magnitudes()
        count = len(mags)

        def pol2cart(rho, phi):
            return cx + rho * math.cos(phi), cy + rho * math.sin(phi)

        batches = []
        for i, mag in enumerate(mags):
            a0 = i / count * 2.0 * math.pi
            a1 = (i + WEDGE_FILL) / count * 2.0 * math.pi
            outer = radius + max(mag, 0.0) * gain * radius

            inner0, inner1 = pol2cart(radius, a0), pol2cart(radius, a1)
            outer0, outer1 = pol2cart(outer, a0), pol2cart(outer, a1)
            points = [inner0, outer0, outer1, inner0, outer1, inner1]
            batches.append(VertexBatch(points, Topology.TRIANGLE_LIST, color))
        return batches


@register(VisualMode.SYMMETRIC_BARS)
class SymmetricBarsGenerator(ModeGenerator):
    """
    Horizontal bars growing left and right from the vertical center line.
    The main layer is tinted along a gradient from color_start (top bar) to
    color_end (bottom bar).
    """

    def main_layer(self, ctx):
        return self.layer(ctx, 1.0, None)

    def layer(self, ctx, gain, color):
        cfg = ctx.config
        mags = ctx.bar_magnitudes()
        count = len(mags)
        slot = ctx.height / count
        bar_thickness = slot * (1.0 - BAR_GAP)
        cx = ctx.width / 2.0

        batches = []
        for i, mag in enumerate(mags):
            if color is None:
                fraction = i / (count - 1) if count > 1 else 0.0
                bar_color = argb_to_abgr(lerp_argb(cfg.color_start, cfg.color_end, fraction))
            else:
                bar_color = color

            y0 = i * slot + slot * BAR_GAP / 2.0
            length = min(max(mag * gain * cx, 0.0), cx)
            points = rect_triangles(cx - length, y0, cx + length, y0 + bar_thickness)
            batches.append(VertexBatch(points, Topology.TRIANGLE_LIST, bar_color))
        return batches


def mirrored_wave(ctx, gain, color, y_offset=0.0):
    """Top and bottom polylines mirrored around the horizontal center line."""
    cy = ctx.height / 2.0 + y_offset
    xs = np.arange(ctx.n) / ctx.n * ctx.width
    amplitude = ctx.magnitudes() * gain * ctx.height * WAVE_AMPLITUDE
    return [line_strip(xs, cy - amplitude, color), line_strip(xs, cy + amplitude, color)]


@register(VisualMode.SYMMETRIC_WAVEFORM)
class SymmetricWaveformGenerator(ModeGenerator):
    def layer(self, ctx, gain, color):
        return mirrored_wave(ctx, gain, color)


@register(VisualMode.CENTERED_WAVEFORM)
class CenteredWaveformGenerator(ModeGenerator):
    """Mirrored waveform with bass at the screen center and highs spreading outward."""

    def layer(self, ctx, gain, color):
        cx, cy = ctx.center
        half = ctx.n // 2

        spread = np.arange(half) / half * cx
        amplitude = ctx.magnitudes()[:half] * gain * ctx.height * WAVE_AMPLITUDE
        left = cx - spread
        right = cx + spread

        return [
            line_strip(left, cy - amplitude, color),
            line_strip(left, cy + amplitude, color),
            line_strip(right, cy - amplitude, color),
            line_strip(right, cy + amplitude, color),
        ]


@register(VisualMode.MIRRORED_BARS)
class MirroredBarsGenerator(ModeGenerator):
    """Vertical bars reaching up and down from the horizontal center line."""

    def layer(self, ctx, gain, color):
        cy = ctx.height / 2.0
        mags = ctx.bar_magnitudes()
        slot = ctx.width / len(mags)
        bar_width = slot * (1.0 - BAR_GAP)

        batches = []
        for i, mag in enumerate(mags):
            x0 = i * slot + slot * BAR_GAP / 2.0
            amplitude = min(max(mag * gain * ctx.height * MIRROR_AMPLITUDE, 0.0), cy)
            points = rect_strip(x0, cy - amplitude, x0 + bar_width, cy + amplitude)
            batches.append(VertexBatch(points, Topology.TRIANGLE_STRIP, color))
        return batches


@register(VisualMode.FILLED_MIRROR)
class FilledMirrorGenerator(ModeGenerator):
    """Mirrored waveform filled as a triangle strip across the center line."""

    def layer(self, ctx, gain, color):
        cy = ctx.height / 2.0
        xs = np.arange(ctx.n) / ctx.n * ctx.width
        amplitude = ctx.magnitudes() * gain * ctx.height * MIRROR_AMPLITUDE

        points = np.empty((2 * ctx.n, 2))
        points[0::2, 0] = xs
        points[0::2, 1] = cy - amplitude
        points[1::2, 0] = xs
        points[1::2, 1] = cy + amplitude
        return [VertexBatch(points, Topology.TRIANGLE_STRIP, color)]


@register(VisualMode.PULSE_LINE)
class PulseLineGenerator(ModeGenerator):
    """Single vertical bar sized by the average level of all usable bins."""

    def glow_layer(self, ctx):
        gain = 1.0 + ctx.config.glow_strength * PULSE_GLOW_WIDTH_GAIN
        return self.layer(ctx, gain, argb_to_abgr(ctx.config.glow_color))

    def layer(self, ctx, gain, color):
        cx, cy = ctx.center
        avg = float(np.mean(ctx.usable)) * ctx.config.amp_scale

        height = min(ctx.height * 0.8 * (0.2 + avg), ctx.height)
        width = ctx.config.thickness * (1.0 + avg * 2.0) * gain

        points = rect_strip(cx - width / 2, cy - height / 2, cx + width / 2, cy + height / 2)
        return [VertexBatch(points, Topology.TRIANGLE_STRIP, color)]


@register(VisualMode.MULTI_WAVE)
class MultiWaveGenerator(ModeGenerator):
    """Three overlaid mirrored waves, back to front: glow, end color, main color."""

    def generate(self, ctx):
        cfg = ctx.config
        layers = [
            (cfg.glow_color, MULTI_WAVE_GLOW_LAYER),
            (cfg.color_end, MULTI_WAVE_END_LAYER),
            (cfg.color, MULTI_WAVE_MAIN_LAYER),
        ]

        batches = []
        for color, (scale, y_offset) in layers:
            batches.extend(mirrored_wave(ctx, scale, argb_to_abgr(color), y_offset))
        return batches


@register(VisualMode.SYMMETRIC_DOTS)
class SymmetricDotsGenerator(ModeGenerator):
    """Square dots above and below the center line at every other bin."""

    def glow_layer(self, ctx):
        extent = ctx.config.thickness * 2.0
        return self.dots(ctx, ctx.glow_gain, argb_to_abgr(ctx.config.glow_color), extent)

    def layer(self, ctx, gain, color):
        return self.dots(ctx, gain, color, ctx.config.thickness)

    def dots(self, ctx, gain, color, extent):
        cy = ctx.height / 2.0
        bins = np.arange(0, ctx.n, 2)
        xs = bins / ctx.n * ctx.width
        amplitude = ctx.magnitudes()[bins] * gain * ctx.height * WAVE_AMPLITUDE

        points = []
        for x, amp in zip(xs, amplitude):
            for y in (cy - amp, cy + amp):
                points.extend(rect_triangles(x - extent, y - extent, x + extent, y + extent))
        return [VertexBatch(points, Topology.TRIANGLE_LIST, color)]
