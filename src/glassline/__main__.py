#!/usr/bin/env python3
"""
GlassLine Visualizer CLI
========================

Renders an audio file into a video using the real-time visualization
pipeline. Audio is replayed block by block into the pipeline exactly as a
live capture callback would deliver it, and every video frame is drawn from
the vertex batches the pipeline produces at that moment.

Usage:
    python -m glassline input.wav --output result.mp4 --mode circular-bars
    python -m glassline -h (for help)
"""

import argparse
import logging
import os
import sys

import cv2
from moviepy import AudioFileClip, VideoClip

from glassline.audio_source import FileAudioSource
from glassline.config import Configuration, VisualMode, parse_color
from glassline.constants import (
    AMP_SCALE_RANGE,
    BAR_COUNT_RANGE,
    BLOCK_SIZE,
    DEFAULT_COLOR,
    DEFAULT_COLOR_END,
    DEFAULT_COLOR_START,
    DEFAULT_FPS,
    DEFAULT_GLOW_COLOR,
    DEFAULT_RESOLUTION,
    FFT_SIZE,
    GLOW_STRENGTH_RANGE,
    LINE_WIDTH_RANGE,
    RADIUS_RANGE,
    SMOOTHING_RANGE,
    THICKNESS_RANGE,
)
from glassline.pipeline import VisualiserPipeline
from glassline.rasterizer import FrameRasterizer

logger = logging.getLogger("glassline")


def configure_logging(level_name):
    level = getattr(logging, (level_name or "INFO").upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(message)s")


def _color(text):
    try:
        return parse_color(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def _mode(text):
    key = text.strip().upper().replace("-", "_")
    if key not in VisualMode.__members__:
        raise argparse.ArgumentTypeError(f"unknown mode {text!r}")
    return VisualMode[key]


def build_parser():
    modes = ", ".join(m.name.lower().replace("_", "-") for m in VisualMode)
    parser = argparse.ArgumentParser(
        prog="glassline",
        description="Generate an audio-reactive visualization video from an audio file.",
    )
    parser.add_argument("input", help="Path to input audio file (WAV/MP3)")
    parser.add_argument("--output", "-o", default="output.mp4", help="Path to output video file")
    parser.add_argument("--width", type=int, default=DEFAULT_RESOLUTION[0], help="Video width")
    parser.add_argument("--height", type=int, default=DEFAULT_RESOLUTION[1], help="Video height")
    parser.add_argument("--fps", type=int, default=DEFAULT_FPS, help="Frames per second")
    parser.add_argument("--duration", type=float, help="Limit duration in seconds (optional)")

    parser.add_argument("--mode", type=_mode, default=VisualMode.LINE, help=f"Visual mode: {modes}")
    parser.add_argument("--color", type=_color, default=DEFAULT_COLOR, help="Main color (#AARRGGBB)")
    parser.add_argument("--color-start", type=_color, default=DEFAULT_COLOR_START, help="Gradient start color")
    parser.add_argument("--color-end", type=_color, default=DEFAULT_COLOR_END, help="Gradient end color")
    parser.add_argument("--glow-color", type=_color, default=DEFAULT_GLOW_COLOR, help="Glow color")
    parser.add_argument("--glow-strength", type=float, default=GLOW_STRENGTH_RANGE[2])
    parser.add_argument("--thickness", type=float, default=THICKNESS_RANGE[2])
    parser.add_argument("--line-width", type=float, default=LINE_WIDTH_RANGE[2])
    parser.add_argument("--smoothing", type=float, default=SMOOTHING_RANGE[2])
    parser.add_argument("--amp-scale", type=float, default=AMP_SCALE_RANGE[2])
    parser.add_argument("--bar-count", type=int, default=BAR_COUNT_RANGE[2])
    parser.add_argument("--radius", type=float, default=RADIUS_RANGE[2])
    parser.add_argument("--fft-size", type=int, default=FFT_SIZE, help="Transform window (power of two)")
    parser.add_argument("--block-size", type=int, default=BLOCK_SIZE, help="Samples per audio callback")
    parser.add_argument(
        "--log-level",
        default=os.getenv("GLASSLINE_LOG_LEVEL", "INFO"),
        help="DEBUG/INFO/WARNING/ERROR",
    )
    return parser


def config_from_args(args, source_name):
    return Configuration(
        mode=args.mode,
        color=args.color,
        color_start=args.color_start,
        color_end=args.color_end,
        glow_color=args.glow_color,
        glow_strength=args.glow_strength,
        thickness=args.thickness,
        line_width=args.line_width,
        smoothing=args.smoothing,
        amp_scale=args.amp_scale,
        bar_count=args.bar_count,
        radius=args.radius,
        fft_size=args.fft_size,
        audio_source=source_name,
    ).validated()


def main(argv=None):
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    # 1. Validation
    if not os.path.exists(args.input):
        sys.exit(f"[!] Input file not found: {args.input}")
    if args.block_size <= 0:
        sys.exit(f"[!] Block size must be positive, got {args.block_size}")

    # 2. Audio source
    try:
        source = FileAudioSource(args.input, block_size=args.block_size)
    except Exception as e:
        sys.exit(f"[!] Error loading audio file: {e}")

    duration = source.duration
    if args.duration and args.duration < duration:
        duration = args.duration
        logger.info(f"[i] Truncating duration to {duration} seconds.")

    logger.info(f"[+] Preparing render: {args.width}x{args.height} @ {args.fps}fps")
    logger.info(f"[+] Mode: {args.mode.name.lower()}, duration: {duration:.2f} seconds")

    # 3. Pipeline wired to the source through a capture subscription
    pipeline = VisualiserPipeline()
    pipeline.registry.register(source)
    pipeline.update(config_from_args(args, source.name))
    rasterizer = FrameRasterizer(args.width, args.height)

    def make_frame(t):
        source.advance_to(t)
        batches = pipeline.render(args.width, args.height)
        frame = rasterizer.draw(batches, line_width=pipeline.config.line_width)
        return cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)

    with pipeline:
        video_clip = VideoClip(make_frame, duration=duration)

        # Attach original audio
        audio_clip = AudioFileClip(args.input)
        audio_clip = audio_clip.subclipped(0, duration)
        video_clip = video_clip.with_audio(audio_clip)

        # 4. Export
        logger.info("[+] Rendering video... (This may take a while)")
        video_clip.write_videofile(
            args.output,
            fps=args.fps,
            codec="libx264",
            audio_codec="aac",
            threads=4,
            preset="medium",
            logger="bar",
        )

    logger.info(f"[+] Done! Saved to {args.output}")


if __name__ == "__main__":
    main()
