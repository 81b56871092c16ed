# envlights/__init__.py
from .errors import (LightExtractionError, ImageDecodeError,
                     DegeneratePartitionError, DegenerateRegionError)
from .summed_area_table import SummedAreaTable, luminance
from .sat_region import SatRegion
from .partition import median_variance_cut
from .light import Light, equirect_to_direction, angle_between
from .synthesis import create_light, create_lights_from_regions
from .merge import (MergeStrategy, merge_lights, select_lights,
                    merge_near_lights, apply_merge_strategy)
from .output import light_to_record, lights_to_records, output_json
from .image_source import load_image, save_image
from .light_extractor import LightExtractor, ExtractionResult

__all__ = [
    'LightExtractionError', 'ImageDecodeError', 'DegeneratePartitionError', 'DegenerateRegionError',
    'SummedAreaTable', 'luminance', 'SatRegion', 'median_variance_cut',
    'Light', 'equirect_to_direction', 'angle_between',
    'create_light', 'create_lights_from_regions',
    'MergeStrategy', 'merge_lights', 'select_lights', 'merge_near_lights', 'apply_merge_strategy',
    'light_to_record', 'lights_to_records', 'output_json',
    'load_image', 'save_image', 'LightExtractor', 'ExtractionResult',
]
