class VisualizerError(Exception):
    """Base class for errors raised by the spectral pipeline."""


class InvalidTransformSize(VisualizerError, ValueError):
    """Raised when a sample block length is not a usable power of two."""

    def __init__(self, size):
        super().__init__(f"block length must be a power of two, got {size}")
        self.size = size
