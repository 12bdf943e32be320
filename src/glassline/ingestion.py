import numpy as np

from glassline.constants import FFT_SIZE
from glassline.errors import InvalidTransformSize
from glassline.spectrum import is_power_of_two


class SampleWindow:
    """
    Sliding window over the most recent mono samples.
    Once full it keeps exactly `capacity` samples, dropping the oldest first.
    """

    def __init__(self, capacity=FFT_SIZE):
        if not is_power_of_two(capacity):
            raise InvalidTransformSize(capacity)
        self.capacity = capacity
        self._samples = np.zeros(0, dtype=np.float32)

    def __len__(self):
        return len(self._samples)

    @property
    def is_full(self):
        return len(self._samples) >= self.capacity

    def push(self, chunk, channel=0):
        """
        Append a block of samples. Planar (channels, frames) blocks only
        contribute the selected channel.
        """
        data = np.asarray(chunk, dtype=np.float32)
        if data.ndim == 2:
            if data.shape[0] == 0:
                return
            if channel >= data.shape[0]:
                channel = 0
            data = data[channel]
        data = data.ravel()

        if len(data) == 0:
            return

        merged = np.concatenate([self._samples, data])
        if len(merged) > self.capacity:
            merged = merged[len(merged) - self.capacity :]
        self._samples = merged

    def samples(self):
        """Current content, oldest first. The returned array is read-only."""
        view = self._samples.view()
        view.flags.writeable = False
        return view

    def clear(self):
        self._samples = np.zeros(0, dtype=np.float32)
