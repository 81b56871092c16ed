# envlights/synthesis.py
"""
Turn partition regions into candidate lights
"""
import numpy as np
from tqdm import tqdm

from .errors import DegenerateRegionError
from .light import Light


def _region_statistics(region, table):
    """
    Luminance moments, colour sums and centroid of a region

    Raises:
        DegenerateRegionError: if the region covers no pixel
    """
    x, y, w, h = region.rect
    count = region.sum0
    if count <= 0 or w <= 0 or h <= 0:
        raise DegenerateRegionError(f"Region {region.rect} has no pixels")

    colors = table.region_colors(x, y, w, h)

    # negative HDR values carry no weight, the centre stays inside the region
    lum = np.maximum(table.luminance[y:y + h, x:x + w], 0.0)
    weight = float(lum.sum())

    if weight > 0:
        # luminance weighted centre of the pixels
        cols = np.arange(x, x + w) + 0.5
        rows = np.arange(y, y + h) + 0.5
        cx = float(lum.sum(axis=0) @ cols) / weight
        cy = float(lum.sum(axis=1) @ rows) / weight
    else:
        # no energy to weight with
        cx = x + w * 0.5
        cy = y + h * 0.5

    return colors / count, (cx / table.width, cy / table.height)


def create_light(region, table):
    """
    Build the candidate light of one partition region

    Lights below the horizon are still created; culling is left to output.

    Args:
        region: SatRegion with cached moment sums
        table: SummedAreaTable the region was cut from

    Returns:
        Light
    """
    x, y, w, h = region.rect
    footprint = (x / table.width, y / table.height, w / table.width, h / table.height)

    error = False
    try:
        color, centroid = _region_statistics(region, table)
    except DegenerateRegionError:
        error = True
        color = (0.0, 0.0, 0.0)
        centroid = ((x + w * 0.5) / table.width, (y + h * 0.5) / table.height)

    return Light(
        centroid=centroid,
        footprint=footprint,
        rect=region.rect,
        color=color,
        sum=region.sum1,
        pixel_count=int(round(region.sum0)),
        sum2=region.sum2,
        error=error,
    )


def create_lights_from_regions(regions, table, verbose=False):
    """
    Candidate light for every region, in region order

    Args:
        regions: list of SatRegion from median_variance_cut
        table: SummedAreaTable the regions were cut from
        verbose: show a progress bar on stderr

    Returns:
        List of Light
    """
    return [create_light(region, table)
            for region in tqdm(regions, desc="Synthesizing lights", disable=not verbose)]
