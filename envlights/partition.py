# envlights/partition.py
"""
Median cut / variance minimisation partition of a summed area table
"""
from .sat_region import SatRegion


def _can_split(region):
    return region.w >= 2 and region.h >= 2


def median_variance_cut(table, max_depth):
    """
    Recursively split the whole image into at most 2^max_depth regions

    Regions are visited depth first, left/top child before right/bottom
    child, using an explicit stack so deep budgets cannot hit the
    interpreter recursion limit.

    Args:
        table: SummedAreaTable of the image
        max_depth: number of subdivisions

    Returns:
        List of leaf SatRegion, an exact disjoint cover of the image
    """
    if max_depth < 0:
        raise ValueError(f"max_depth must be >= 0, got {max_depth}")

    regions = []

    # insert entire image as start region
    root = SatRegion.create(0, 0, table.width, table.height, table)
    stack = [(root, max_depth)]

    while stack:
        region, budget = stack.pop()

        # can't split any further?
        if not _can_split(region) or budget == 0:
            regions.append(region)
            continue

        a, b = region.split()

        # A child too small to cut again is emitted as is
        stack.append((b, budget - 1 if _can_split(b) else 0))
        stack.append((a, budget - 1 if _can_split(a) else 0))

    return regions
