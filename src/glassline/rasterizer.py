import cv2
import numpy as np

from glassline.constants import BACKGROUND_COLOR
from glassline.vertex import Topology


def abgr_to_bgr(abgr):
    """Split a packed ABGR color into an OpenCV (B, G, R) tuple and alpha."""
    r = abgr & 0xFF
    g = (abgr >> 8) & 0xFF
    b = (abgr >> 16) & 0xFF
    a = (abgr >> 24) & 0xFF
    return (b, g, r), a


class FrameRasterizer:
    """
    Draws vertex batches onto video frames using OpenCV.
    Each batch is one flat-colored, non-indexed primitive list.
    """

    def __init__(self, width, height, bg_color=BACKGROUND_COLOR):
        self.w = width
        self.h = height
        self.bg_color = bg_color

    def blank(self):
        return np.full((self.h, self.w, 3), self.bg_color, dtype=np.uint8)

    def draw(self, batches, line_width=1):
        frame = self.blank()
        for batch in batches:
            self.draw_batch(frame, batch, line_width)
        return frame

    def draw_batch(self, frame, batch, line_width=1):
        if len(batch) == 0:
            return frame

        color, alpha = abgr_to_bgr(batch.color)
        if alpha == 0:
            return frame

        # Translucent batches go through a layer blended back onto the frame
        target = frame if alpha == 255 else frame.copy()
        points = np.round(batch.points).astype(np.int32)

        if batch.topology is Topology.LINE_STRIP:
            thickness = max(1, int(round(line_width)))
            cv2.polylines(target, [points], False, color, thickness, cv2.LINE_AA)
        elif batch.topology is Topology.TRIANGLE_LIST:
            for i in range(0, len(points) - 2, 3):
                cv2.fillConvexPoly(target, points[i : i + 3], color, cv2.LINE_8)
        elif batch.topology is Topology.TRIANGLE_STRIP:
            for i in range(len(points) - 2):
                cv2.fillConvexPoly(target, points[i : i + 3], color, cv2.LINE_8)

        if target is not frame:
            weight = alpha / 255.0
            cv2.addWeighted(target, weight, frame, 1.0 - weight, 0, dst=frame)
        return frame
