import logging

import librosa
import numpy as np

from glassline.constants import BLOCK_SIZE

logger = logging.getLogger(__name__)


class AudioSource:
    """
    A named producer of audio blocks. Consumers subscribe a capture callback
    and receive every block as `callback(samples, frames)`, where `samples`
    is planar (channels, frames).
    """

    def __init__(self, name):
        self.name = name
        self._callbacks = []

    def add_capture_callback(self, callback):
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def remove_capture_callback(self, callback):
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    @property
    def subscriber_count(self):
        return len(self._callbacks)

    def emit(self, samples):
        block = np.atleast_2d(np.asarray(samples, dtype=np.float32))
        frames = block.shape[1]
        for callback in list(self._callbacks):
            callback(block, frames)


class FileAudioSource(AudioSource):
    """
    Replays a decoded audio file in fixed-size blocks, as an audio device
    would deliver them in real time.
    """

    def __init__(self, filepath, name=None, block_size=BLOCK_SIZE):
        super().__init__(name or filepath)
        self.block_size = block_size
        logger.info(f"[+] Loading audio: {filepath}...")

        # Keep every channel; the pipeline picks the one it analyses
        y, self.sample_rate = librosa.load(filepath, sr=None, mono=False)
        self.y = np.atleast_2d(y)
        self.duration = librosa.get_duration(y=self.y, sr=self.sample_rate)
        self.position = 0

        logger.info(
            f"[+] {self.y.shape[0]} channel(s) @ {self.sample_rate} Hz, {self.duration:.2f} seconds"
        )

    @property
    def total_frames(self):
        return self.y.shape[1]

    def advance_to(self, t):
        """
        Emit every whole block that starts before time `t`. Returns the number
        of blocks emitted.
        """
        target = min(int(t * self.sample_rate), self.total_frames)
        emitted = 0
        while self.position < target:
            end = min(self.position + self.block_size, self.total_frames)
            self.emit(self.y[:, self.position : end])
            self.position = end
            emitted += 1
        return emitted

    def rewind(self):
        self.position = 0


class CaptureHandle:
    """
    Owned subscription of a callback to an audio source. Releasing is safe
    to repeat, and leaving a `with` block always releases.
    """

    def __init__(self, source, callback):
        self.source = source
        self.callback = callback
        self.active = False

    def acquire(self):
        if not self.active:
            self.source.add_capture_callback(self.callback)
            self.active = True
        return self

    def release(self):
        if self.active:
            self.source.remove_capture_callback(self.callback)
            self.active = False

    def __enter__(self):
        return self.acquire()

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False


class AudioSourceRegistry:
    """Audio sources available for capture, looked up by name."""

    def __init__(self):
        self._sources = {}

    def register(self, source):
        if source.name in self._sources:
            logger.warning(f"[!] Replacing audio source {source.name!r}")
        self._sources[source.name] = source
        return source

    def unregister(self, name):
        return self._sources.pop(name, None)

    def get(self, name):
        return self._sources.get(name)

    def names(self):
        return sorted(self._sources)

    def capture(self, name, callback):
        """Subscribe `callback` to the named source. Returns None when the name is unknown."""
        source = self.get(name)
        if source is None:
            return None
        return CaptureHandle(source, callback).acquire()
