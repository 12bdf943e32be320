"""
The audio-to-geometry pipeline shared by the audio and render threads.

`push_audio` is called from the audio side whenever a block of samples
arrives, `render` once per displayed frame. One lock guards the sample
window, the smoothed spectrum and the configuration. Rendering never waits
for a new transform: it draws whatever smoothed spectrum is current, which
may be stale or missing.
"""

import logging
import threading

import numpy as np

from glassline.audio_source import AudioSourceRegistry
from glassline.config import Configuration
from glassline.errors import InvalidTransformSize
from glassline.geometry import generate
from glassline.ingestion import SampleWindow
from glassline.spectrum import apply_hann, smooth, transform

logger = logging.getLogger(__name__)


class VisualiserPipeline:
    def __init__(self, config=None, registry=None, channel=0):
        self._lock = threading.Lock()
        # Serializes config swaps with capture rebinding; never taken from the audio thread
        self._lifecycle_lock = threading.RLock()
        self._config = (config or Configuration()).validated()
        self._window = SampleWindow(self._config.fft_size)
        self._smoothed = None
        self.channel = channel

        self.registry = registry if registry is not None else AudioSourceRegistry()
        self._capture = None
        if self._config.audio_source:
            self.set_audio_source(self._config.audio_source)

    @property
    def config(self):
        with self._lock:
            return self._config

    @property
    def smoothed_spectrum(self):
        with self._lock:
            return None if self._smoothed is None else self._smoothed.copy()

    def update(self, settings):
        """
        Replace the configuration wholesale. Accepts a `Configuration` or a
        host settings mapping.
        """
        if isinstance(settings, Configuration):
            config = settings.validated()
        else:
            config = Configuration.from_settings(settings)

        with self._lifecycle_lock:
            with self._lock:
                previous = self._config
                self._config = config
                if config.fft_size != self._window.capacity:
                    logger.info(f"[+] Resizing sample window {self._window.capacity} -> {config.fft_size}")
                    self._window = SampleWindow(config.fft_size)

            if config.audio_source != previous.audio_source:
                self.set_audio_source(config.audio_source)

    def push_audio(self, samples, frames=None):
        """
        Audio-thread entry point. Runs a transform once the window is full;
        until then the previous smoothed spectrum stays as it is.
        """
        data = np.asarray(samples, dtype=np.float32)
        if frames is not None:
            data = data[..., :frames]

        with self._lock:
            self._window.push(data, channel=self.channel)
            if not self._window.is_full:
                return

            try:
                magnitudes = transform(apply_hann(self._window.samples()))
            except InvalidTransformSize as e:
                logger.error(f"[!] Skipping transform: {e}")
                return

            self._smoothed = smooth(self._smoothed, magnitudes, self._config.smoothing)

    # Matches the AudioSource capture callback signature
    on_audio = push_audio

    def render(self, width, height):
        """Render-thread entry point, returns the vertex batches for this frame."""
        with self._lock:
            spectrum = self._smoothed
            config = self._config

        # `smooth` always builds a new array, so the snapshot is safe to read unlocked
        return generate(spectrum, config, (width, height))

    def reset(self):
        with self._lock:
            self._window.clear()
            self._smoothed = None

    # --- Audio source lifecycle ---

    def set_audio_source(self, name):
        """
        Drop the current capture subscription, then subscribe to `name` if
        the registry knows it.
        """
        with self._lifecycle_lock:
            self._release_capture()
            if not name:
                return

            self._capture = self.registry.capture(name, self.on_audio)
            if self._capture is None:
                logger.warning(f"[!] Audio source not found: {name}")
            else:
                logger.info(f"[+] Capturing audio from {name}")

    def _release_capture(self):
        if self._capture is not None:
            self._capture.release()
            self._capture = None

    def close(self):
        with self._lifecycle_lock:
            self._release_capture()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
