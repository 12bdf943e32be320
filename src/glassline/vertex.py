from dataclasses import dataclass
from enum import Enum

import numpy as np


class Topology(Enum):
    LINE_STRIP = "line_strip"
    TRIANGLE_LIST = "triangle_list"
    TRIANGLE_STRIP = "triangle_strip"


@dataclass(frozen=True)
class VertexBatch:
    """One drawable unit: 2D points, primitive topology and a flat ABGR color."""

    points: np.ndarray
    topology: Topology
    color: int

    def __post_init__(self):
        points = np.array(self.points, dtype=np.float32).reshape(-1, 2)
        points.flags.writeable = False
        object.__setattr__(self, "points", points)

    def __len__(self):
        return len(self.points)


def rect_triangles(x0, y0, x1, y1):
    """Axis-aligned rectangle as two triangles (six vertices)."""
    return [
        (x0, y0),
        (x1, y0),
        (x0, y1),
        (x1, y0),
        (x1, y1),
        (x0, y1),
    ]


def rect_strip(x0, y0, x1, y1):
    """Axis-aligned rectangle as a four-vertex triangle strip."""
    return [(x0, y0), (x0, y1), (x1, y0), (x1, y1)]


def line_strip(xs, ys, color):
    return VertexBatch(np.column_stack([xs, ys]), Topology.LINE_STRIP, color)
