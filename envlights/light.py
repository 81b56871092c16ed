# envlights/light.py
"""
Directional light extracted from an environment map region
"""
import math

import numpy as np


def equirect_to_direction(u, v):
    """
    Unit direction for a normalized equirectangular position

    Args:
        u: column fraction in [0, 1]
        v: row fraction in [0, 1]

    Returns:
        np.ndarray (3,) unit vector
    """
    # longitude / colatitude
    phi = u * 2.0 * math.pi - math.pi * 0.5
    theta = (1.0 - v) * math.pi

    d = np.array([
        math.sin(theta) * math.cos(phi),
        math.cos(theta),
        math.sin(theta) * math.sin(phi),
    ])
    norm = np.linalg.norm(d)
    if norm == 0:
        return d
    return d / norm


def angle_between(d1, d2):
    """Angle in degrees between two unit vectors"""
    cos_angle = float(np.clip(np.dot(d1, d2), -1.0, 1.0))
    return math.degrees(math.acos(cos_angle))


class Light:
    """
    Light built from one or more partition regions

    Attributes:
        centroid: (u, v) luminance weighted position, normalized to [0, 1]
        footprint: (x, y, w, h) bounding rectangle, normalized
        rect: (x, y, w, h) bounding rectangle in pixels
        color: (r, g, b) average linear colour
        sum: total luminance of the source pixels
        pixel_count: number of source pixels
        sum2: sum of squared luminance of the source pixels
        error: set when the statistics of a source region were degenerate
        merged_count: number of candidate lights absorbed into this one
    """

    def __init__(self, centroid, footprint, rect, color, sum, pixel_count, sum2,
                 error=False, merged_count=0):
        self.centroid = tuple(float(c) for c in centroid)
        self.footprint = tuple(float(f) for f in footprint)
        self.rect = tuple(int(r) for r in rect)
        self.color = tuple(float(c) for c in color)
        self.sum = float(sum)
        self.pixel_count = pixel_count
        self.sum2 = float(sum2)
        self.error = bool(error)
        self.merged_count = merged_count
        self._direction = None

    @property
    def lum_average(self):
        if self.pixel_count <= 0:
            return 0.0
        return self.sum / self.pixel_count

    @property
    def variance(self):
        if self.pixel_count <= 0:
            return 0.0
        mean = self.lum_average
        return max(self.sum2 / self.pixel_count - mean * mean, 0.0)

    @property
    def width(self):
        return self.footprint[2]

    @property
    def height(self):
        return self.footprint[3]

    @property
    def area(self):
        return self.footprint[2] * self.footprint[3]

    @property
    def direction(self):
        if self._direction is None:
            self._direction = equirect_to_direction(*self.centroid)
        return self._direction

    def union_footprint(self, other):
        """Normalized bounding rectangle covering both lights"""
        return _union(self.footprint, other.footprint)

    def absorb(self, other):
        """
        Energy weighted combination of this light and a weaker one

        Returns:
            New Light, neither input is modified
        """
        total = self.sum + other.sum
        # negative energy gets no weight so the centre stays between the two
        ea, eb = max(self.sum, 0.0), max(other.sum, 0.0)
        if ea + eb > 0:
            wa, wb = ea / (ea + eb), eb / (ea + eb)
        else:
            count = self.pixel_count + other.pixel_count
            wa = self.pixel_count / count if count > 0 else 0.5
            wb = 1.0 - wa

        centroid = [wa * a + wb * b for a, b in zip(self.centroid, other.centroid)]
        color = [wa * a + wb * b for a, b in zip(self.color, other.color)]

        return Light(
            centroid=centroid,
            footprint=self.union_footprint(other),
            rect=_union(self.rect, other.rect),
            color=color,
            sum=total,
            pixel_count=self.pixel_count + other.pixel_count,
            sum2=self.sum2 + other.sum2,
            error=self.error or other.error,
            merged_count=self.merged_count + other.merged_count + 1,
        )

    def __lt__(self, other):
        return self.sum < other.sum

    def __repr__(self):
        u, v = self.centroid
        return (f"Light(centroid=({u:.4f}, {v:.4f}), sum={self.sum:.6g}, "
                f"variance={self.variance:.6g}, error={self.error})")


def _union(a, b):
    x0 = min(a[0], b[0])
    y0 = min(a[1], b[1])
    x1 = max(a[0] + a[2], b[0] + b[2])
    y1 = max(a[1] + a[3], b[1] + b[3])
    return (x0, y0, x1 - x0, y1 - y0)
