import logging

import numpy as np

from glassline.config import VisualMode
from glassline.modes import MODE_GENERATORS, FrameContext

logger = logging.getLogger(__name__)


def usable_spectrum(spectrum):
    """
    Bins worth drawing: DC (bin 0) is dropped, as is everything from the
    midpoint of the frame upwards.
    """
    data = np.asarray(spectrum, dtype=np.float64)
    return data[1 : len(data) // 2]


def generate(spectrum, config, viewport):
    """
    Map a smoothed spectrum onto vertex batches for the configured mode.
    Returns an empty list when there is nothing meaningful to draw.
    """
    if spectrum is None:
        return []

    spectrum = np.asarray(spectrum, dtype=np.float64)
    usable = usable_spectrum(spectrum)
    if len(usable) <= 1:
        return []

    width, height = viewport
    if width <= 0 or height <= 0:
        logger.debug(f"Skipping frame for empty viewport {width}x{height}")
        return []

    ctx = FrameContext(
        spectrum=spectrum,
        usable=usable,
        config=config,
        width=float(width),
        height=float(height),
    )
    generator = MODE_GENERATORS[VisualMode.parse(config.mode)]
    return generator.generate(ctx)
