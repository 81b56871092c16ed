# envlights/summed_area_table.py
import numpy as np

# Rec.709 / sRGB primaries
LUMINANCE_WEIGHTS = np.array([0.2126, 0.7152, 0.0722], dtype=np.float64)

NUM_MOMENTS = 6
PLANE_R, PLANE_G, PLANE_B = 6, 7, 8
NUM_PLANES = 9


def luminance(pixels):
    """
    Per-pixel luminance of an RGB(A) image

    Args:
        pixels: array (height, width, channels) with channels >= 3

    Returns:
        float64 array (height, width)
    """
    rgb = np.asarray(pixels)[..., :3].astype(np.float64)
    return rgb @ LUMINANCE_WEIGHTS


class SummedAreaTable:
    """
    Summed area tables over luminance moments and raw colour

    Nine planes are kept, each padded with a zero first row and column:
    planes 0..5 hold luminance raised to the power 0..5 (pixel count,
    luminance sum, sum of squares, ...), planes 6..8 hold R, G and B.
    planes[k, y, x] is the sum over all pixels with coordinates strictly
    less than (x, y), so any rectangle aggregate costs four lookups.
    """

    def __init__(self, pixels):
        """
        Build all planes in one pass over the image

        Args:
            pixels: HDR image (height, width, channels), channels >= 3
        """
        pixels = np.asarray(pixels)
        if pixels.ndim != 3:
            raise ValueError("SummedAreaTable requires an (height, width, channels) array")

        self.height, self.width, self.channels = pixels.shape
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image dimensions must be positive, got {self.width}x{self.height}")
        if self.channels < 3:
            raise ValueError(f"Need at least 3 channels, got {self.channels}")

        # Accumulate in double precision whatever the input precision is
        self.luminance = luminance(pixels)
        self.min_luminance = float(self.luminance.min())
        self.max_luminance = float(self.luminance.max())

        # Zero first row and column for easier indexing
        self.planes = np.zeros((NUM_PLANES, self.height + 1, self.width + 1), dtype=np.float64)
        values = self.planes[:, 1:, 1:]

        values[0] = 1.0
        for k in range(1, NUM_MOMENTS):
            values[k] = values[k - 1] * self.luminance
        values[PLANE_R:] = np.moveaxis(pixels[..., :3], -1, 0)

        # Compute cumulative sums in place
        np.cumsum(values, axis=1, out=values)
        np.cumsum(values, axis=2, out=values)

    def query(self, x0, y0, x1, y1, plane=1):
        """
        Aggregate of one plane over the closed rectangle [x0, x1] x [y0, y1]

        Args:
            plane: 0..5 for luminance moments, 6..8 for R, G, B
        """
        t = self.planes[plane]
        # Standard formula: D - B - C + A
        return float(t[y1 + 1, x1 + 1] - t[y0, x1 + 1] - t[y1 + 1, x0] + t[y0, x0])

    def _rectangle(self, x, y, w, h, planes):
        t = self.planes[planes]
        return (t[:, y + h, x + w] - t[:, y, x + w]
                - t[:, y + h, x] + t[:, y, x])

    def region_moments(self, x, y, w, h):
        """Six luminance moment sums over the rectangle at (x, y) of size w x h"""
        if w <= 0 or h <= 0:
            return np.zeros(NUM_MOMENTS)
        return self._rectangle(x, y, w, h, slice(0, NUM_MOMENTS))

    def region_colors(self, x, y, w, h):
        """R, G, B sums over the rectangle at (x, y) of size w x h"""
        if w <= 0 or h <= 0:
            return np.zeros(3)
        return self._rectangle(x, y, w, h, slice(PLANE_R, NUM_PLANES))

    def column_prefix(self, x, y, w, h, num_moments=3):
        """
        Moment sums of the band rows [y, y+h) for columns x..x+w

        Entry i is the sum over columns [x, x+i), so the band split at
        column x+k has left sums prefix[k] and right sums prefix[w] - prefix[k].

        Returns:
            array (num_moments, w + 1)
        """
        t = self.planes[:num_moments]
        band = t[:, y + h, x:x + w + 1] - t[:, y, x:x + w + 1]
        return band - band[:, :1]

    def row_prefix(self, x, y, w, h, num_moments=3):
        """Same as column_prefix for rows y..y+h of the band columns [x, x+w)"""
        t = self.planes[:num_moments]
        band = t[:, y:y + h + 1, x + w] - t[:, y:y + h + 1, x]
        return band - band[:, :1]

    @property
    def total_luminance_sum(self):
        return self.query(0, 0, self.width - 1, self.height - 1, 1)

    @property
    def pixel_count(self):
        return self.width * self.height

    def __repr__(self):
        return f"SummedAreaTable({self.width}x{self.height}, sum={self.total_luminance_sum:.6g})"
