"""
Visual settings for the pipeline.

A `Configuration` is immutable: hosts build a new one whenever their settings
change and hand it to the pipeline wholesale. Values outside their tunable
range are clamped rather than rejected, since they come from sliders that are
adjusted while audio is playing.
"""

import dataclasses
import logging
import math
from dataclasses import dataclass
from enum import IntEnum

from glassline.constants import (
    AMP_SCALE_RANGE,
    BAR_COUNT_RANGE,
    DEFAULT_COLOR,
    DEFAULT_COLOR_END,
    DEFAULT_COLOR_START,
    DEFAULT_GLOW_COLOR,
    FFT_SIZE,
    GLOW_STRENGTH_RANGE,
    LINE_WIDTH_RANGE,
    MAX_FFT_SIZE,
    MIN_FFT_SIZE,
    RADIUS_RANGE,
    SMOOTHING_RANGE,
    THICKNESS_RANGE,
)

logger = logging.getLogger(__name__)


class VisualMode(IntEnum):
    """
    Integer values are this package's own numbering and do not line up with
    the GlassLine OBS plugin's mode list (where 0 is Centered Waveform and 2
    is Mirrored Bars). Settings carried over from the plugin should name the
    mode instead, e.g. {"mode": "centered_waveform"}.
    """

    LINE = 0
    BARS = 1
    CIRCULAR_LINE = 2
    CIRCULAR_BARS = 3
    SYMMETRIC_BARS = 4
    SYMMETRIC_WAVEFORM = 5
    CENTERED_WAVEFORM = 6  # Bass at screen center, highs spread outward
    MIRRORED_BARS = 7
    FILLED_MIRROR = 8
    PULSE_LINE = 9
    MULTI_WAVE = 10
    SYMMETRIC_DOTS = 11

    @classmethod
    def parse(cls, value):
        """Accepts a mode, its integer value or a case-insensitive name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().upper().replace("-", "_").replace(" ", "_")
            if key in cls.__members__:
                return cls[key]
            if key.isdigit():
                value = int(key)
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            logger.warning(f"[!] Unknown visual mode {value!r}, falling back to line")
            return cls.LINE


# --- Color helpers ---


def argb_to_abgr(argb):
    """Swap red and blue; settings are authored ARGB, batches carry ABGR."""
    argb &= 0xFFFFFFFF
    a = (argb >> 24) & 0xFF
    r = (argb >> 16) & 0xFF
    g = (argb >> 8) & 0xFF
    b = argb & 0xFF
    return (a << 24) | (b << 16) | (g << 8) | r


def lerp_argb(start, end, t):
    """Per-channel linear interpolation between two ARGB colors."""
    t = min(max(t, 0.0), 1.0)
    color = 0
    for shift in (24, 16, 8, 0):
        a = (start >> shift) & 0xFF
        b = (end >> shift) & 0xFF
        color |= int(round(a + (b - a) * t)) << shift
    return color


def parse_color(text):
    """
    Parse "#AARRGGBB", "#RRGGBB" or "0xAARRGGBB" into an ARGB int.
    Six-digit colors are treated as fully opaque.
    """
    raw = text.strip().lower()
    if raw.startswith("#"):
        raw = raw[1:]
    elif raw.startswith("0x"):
        raw = raw[2:]
    if len(raw) not in (6, 8):
        raise ValueError(f"expected 6 or 8 hex digits, got {text!r}")
    value = int(raw, 16)
    if len(raw) == 6:
        value |= 0xFF000000
    return value


def _clamp(name, value, bounds):
    low, high = bounds[0], bounds[1]
    if not math.isfinite(value):
        # NaN slips through min/max, so non-finite input falls back to the default
        default = bounds[2] if len(bounds) > 2 else low
        logger.warning(f"[!] {name}={value} is not a finite number, using {default}")
        return default
    clamped = min(max(value, low), high)
    if clamped != value:
        logger.warning(f"[!] {name}={value} out of range [{low}, {high}], using {clamped}")
    return clamped


def _fit_fft_size(value):
    if not math.isfinite(float(value)):
        logger.warning(f"[!] fft_size={value} is not a finite number, using {FFT_SIZE}")
        return FFT_SIZE
    size = int(value)
    clamped = _clamp("fft_size", size, (MIN_FFT_SIZE, MAX_FFT_SIZE))
    # Round down to the nearest power of two
    fitted = 1 << (clamped.bit_length() - 1)
    if fitted != clamped:
        logger.warning(f"[!] fft_size={size} is not a power of two, using {fitted}")
    return fitted


@dataclass(frozen=True)
class Configuration:
    """
    Main geometry is drawn in `color`. The GlassLine OBS plugin drew its main
    layer in `color_start` instead; hosts porting those settings should copy
    their start color into `color` to keep the same look. Here `color_start`
    and `color_end` only feed the Symmetric Bars gradient, and `color_end` the
    middle Multi-Wave layer.
    """

    mode: VisualMode = VisualMode.LINE
    color: int = DEFAULT_COLOR
    color_start: int = DEFAULT_COLOR_START
    color_end: int = DEFAULT_COLOR_END
    glow_color: int = DEFAULT_GLOW_COLOR
    glow_strength: float = GLOW_STRENGTH_RANGE[2]
    thickness: float = THICKNESS_RANGE[2]
    line_width: float = LINE_WIDTH_RANGE[2]
    smoothing: float = SMOOTHING_RANGE[2]
    amp_scale: float = AMP_SCALE_RANGE[2]
    bar_count: int = BAR_COUNT_RANGE[2]
    radius: float = RADIUS_RANGE[2]
    fft_size: int = FFT_SIZE
    audio_source: str = ""

    def validated(self):
        """Copy of this configuration with every field pulled into range."""
        return dataclasses.replace(
            self,
            mode=VisualMode.parse(self.mode),
            color=int(self.color) & 0xFFFFFFFF,
            color_start=int(self.color_start) & 0xFFFFFFFF,
            color_end=int(self.color_end) & 0xFFFFFFFF,
            glow_color=int(self.glow_color) & 0xFFFFFFFF,
            glow_strength=_clamp("glow_strength", float(self.glow_strength), GLOW_STRENGTH_RANGE),
            thickness=_clamp("thickness", float(self.thickness), THICKNESS_RANGE),
            line_width=_clamp("line_width", float(self.line_width), LINE_WIDTH_RANGE),
            smoothing=_clamp("smoothing", float(self.smoothing), SMOOTHING_RANGE),
            amp_scale=_clamp("amp_scale", float(self.amp_scale), AMP_SCALE_RANGE),
            bar_count=int(_clamp("bar_count", float(self.bar_count), BAR_COUNT_RANGE)),
            radius=_clamp("radius", float(self.radius), RADIUS_RANGE),
            fft_size=_fit_fft_size(self.fft_size),
            audio_source=str(self.audio_source or ""),
        )

    @classmethod
    def from_settings(cls, settings):
        """
        Build a validated configuration from a host settings mapping.
        Missing keys keep their defaults; the audio source name is read from "source".

            Configuration.from_settings({"mode": "mirrored_bars", "source": "Desktop Audio"})
        """
        values = {}
        for field in dataclasses.fields(cls):
            key = "source" if field.name == "audio_source" else field.name
            if key in settings and settings[key] is not None:
                values[field.name] = settings[key]
        return cls(**values).validated()
