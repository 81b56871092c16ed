# envlights/errors.py
"""
Exceptions raised while extracting lights from an environment map
"""


class LightExtractionError(Exception):
    """Base class for all light extraction failures"""


class ImageDecodeError(LightExtractionError):
    """Input file is missing, truncated or not a supported HDR format"""


class DegeneratePartitionError(LightExtractionError):
    """Partitioning the image produced no regions"""


class DegenerateRegionError(LightExtractionError):
    """
    A region has no pixels to compute statistics from.

    Never leaves the synthesis step: the light built from such a region
    gets its error flag set instead.
    """
