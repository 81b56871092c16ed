# envlights/sat_region.py
"""
Rectangular region of a summed area table with cached luminance moments
"""
import weakref

import numpy as np

# Cut costs closer than this fraction of the parent's sum of squares are ties
TIE_TOLERANCE = 1e-9


class SatRegion:
    """
    Rectangle (x, y, w, h) in pixels plus its six luminance moment sums

    The region only holds a weak reference to its SummedAreaTable: the
    table must outlive every region created from it.
    """

    def __init__(self, x=0, y=0, w=0, h=0, table=None, sums=None):
        self.x = x
        self.y = y
        self.w = w
        self.h = h
        self._table_ref = weakref.ref(table) if table is not None else None
        if sums is None:
            sums = np.zeros(6)
        self.sum0, self.sum1, self.sum2, self.sum3, self.sum4, self.sum5 = (float(s) for s in sums)

    @classmethod
    def create(cls, x, y, w, h, table):
        """
        Create a region and cache its moment sums from the table

        Raises:
            ValueError: if the rectangle is empty or leaves the table
        """
        if w < 1 or h < 1:
            raise ValueError(f"Region must be at least 1x1, got {w}x{h}")
        if x < 0 or y < 0 or x + w > table.width or y + h > table.height:
            raise ValueError(
                f"Region ({x}, {y}, {w}, {h}) outside {table.width}x{table.height} table"
            )
        region = cls(x, y, w, h, table)
        region.sum()
        return region

    @property
    def table(self):
        if self._table_ref is None:
            raise ReferenceError("Region is not attached to a summed area table")
        table = self._table_ref()
        if table is None:
            raise ReferenceError("Summed area table was released before its region")
        return table

    def sum(self):
        """Refresh the cached moment sums from the table"""
        sums = self.table.region_moments(self.x, self.y, self.w, self.h)
        self.sum0, self.sum1, self.sum2, self.sum3, self.sum4, self.sum5 = (float(s) for s in sums)
        return sums

    @property
    def sums(self):
        return (self.sum0, self.sum1, self.sum2, self.sum3, self.sum4, self.sum5)

    @property
    def rect(self):
        return (self.x, self.y, self.w, self.h)

    @property
    def area(self):
        return self.w * self.h

    @property
    def luminance_average(self):
        if self.sum0 <= 0:
            return 0.0
        return self.sum1 / self.sum0

    @property
    def variance(self):
        if self.sum0 <= 0:
            return 0.0
        mean = self.sum1 / self.sum0
        return max(self.sum2 / self.sum0 - mean * mean, 0.0)

    def copy(self):
        """Duplicate the cached sums, share the table"""
        region = SatRegion(self.x, self.y, self.w, self.h, sums=self.sums)
        region._table_ref = self._table_ref
        return region

    def split_w(self):
        """
        Cut the region with a vertical line

        Returns:
            (A, B): left and right regions
        """
        prefix = self.table.column_prefix(self.x, self.y, self.w, self.h)
        k = self._best_cut(prefix, self.w)
        return (SatRegion.create(self.x, self.y, k, self.h, self.table),
                SatRegion.create(self.x + k, self.y, self.w - k, self.h, self.table))

    def split_h(self):
        """
        Cut the region with a horizontal line

        Returns:
            (A, B): top and bottom regions
        """
        prefix = self.table.row_prefix(self.x, self.y, self.w, self.h)
        k = self._best_cut(prefix, self.h)
        return (SatRegion.create(self.x, self.y, self.w, k, self.table),
                SatRegion.create(self.x, self.y + k, self.w, self.h - k, self.table))

    def split(self):
        """Split along the longer side, width on ties"""
        if self.w >= self.h:
            return self.split_w()
        return self.split_h()

    def _best_cut(self, prefix, length):
        """
        Pick the cut position k in [1, length-1] minimising the summed
        squared luminance deviation of both halves.

        Near-equal costs are resolved by the most even energy split,
        then by distance to the middle, then by the smallest k.

        Args:
            prefix: (3, length + 1) moment prefix sums along the cut axis
        """
        if length < 2:
            raise ValueError(f"Cannot cut a side of length {length}")

        cuts = np.arange(1, length)
        a = prefix[:, 1:length]
        b = prefix[:, length:length + 1] - a

        cost = _squared_deviation(a) + _squared_deviation(b)
        tolerance = TIE_TOLERANCE * abs(self.sum2)
        tied = np.flatnonzero(cost <= cost.min() + tolerance)

        imbalance = np.abs(a[1] - b[1])
        best = min(tied, key=lambda i: (imbalance[i], abs(2 * cuts[i] - length), cuts[i]))
        return int(cuts[best])

    def __eq__(self, other):
        if not isinstance(other, SatRegion):
            return NotImplemented
        return self.rect == other.rect and self.sums == other.sums

    def __repr__(self):
        return f"SatRegion(x={self.x}, y={self.y}, w={self.w}, h={self.h}, sum={self.sum1:.6g})"


def _squared_deviation(moments):
    """Sum of squared deviations from the mean, m2 - m1^2 / m0, per column"""
    count, total, squares = moments
    with np.errstate(divide='ignore', invalid='ignore'):
        deviation = squares - np.where(count > 0, total * total / count, 0.0)
    return np.maximum(deviation, 0.0)
