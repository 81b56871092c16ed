# envlights/light_extractor.py
"""
Complete light extraction pipeline:
SAT -> partition -> candidate lights -> merge -> ranked lights
"""
import json
import os
import sys
from datetime import datetime

from .debug_draw import debug_draw_lights
from .errors import DegeneratePartitionError
from .image_source import load_image
from .merge import MergeStrategy, apply_merge_strategy
from .output import lights_to_records, output_json
from .partition import median_variance_cut
from .summed_area_table import SummedAreaTable
from .synthesis import create_lights_from_regions


class ExtractionResult:
    """Every stage of one extraction, kept for output and debugging"""

    def __init__(self, table, regions, candidates, lights, merge_count):
        self.table = table
        self.regions = regions
        self.candidates = candidates
        self.lights = lights
        self.merge_count = merge_count

    @property
    def width(self):
        return self.table.width

    @property
    def height(self):
        return self.table.height

    @property
    def luminance_sum(self):
        return self.table.total_luminance_sum


class LightExtractor:
    """
    Extracts dominant directional lights from an equirectangular HDR map
    """

    default_params = {
        # Partition: at most 2^num_cuts regions
        'num_cuts': 8,

        # Merge limits, relative to the environment map
        'max_merged_area': 0.05,
        'max_merged_length': 0.08,
        'luminance_ratio': 0.5,
        'merge_angle_degrees': 35.0,
        'merge_strategy': MergeStrategy.MERGE.value,

        # Output
        'num_lights': 1,
    }

    def __init__(self, config_path=None, verbose=True, **overrides):
        """
        Initialize extractor with configuration

        Args:
            config_path: optional JSON file overriding default_params
            verbose: print progress to stderr
            **overrides: parameters taking precedence over the config file
        """
        self.verbose = verbose

        # Load configuration if provided
        self.config = {}
        if config_path and os.path.exists(config_path):
            with open(config_path, 'r') as f:
                self.config = json.load(f)

        # Merge with config
        self.params = {**self.default_params, **self.config, **overrides}
        self._validate_params()

        self._log(f"Light extractor initialized: cuts={self.params['num_cuts']}, "
                  f"area={self.params['max_merged_area']}, "
                  f"length={self.params['max_merged_length']}, "
                  f"ratio={self.params['luminance_ratio']}, "
                  f"strategy={self.params['merge_strategy']}")

    def _validate_params(self):
        if int(self.params['num_cuts']) < 0:
            raise ValueError(f"num_cuts must be >= 0, got {self.params['num_cuts']}")
        for key in ('max_merged_area', 'max_merged_length', 'luminance_ratio', 'merge_angle_degrees'):
            if float(self.params[key]) < 0:
                raise ValueError(f"{key} must be >= 0, got {self.params[key]}")
        self.params['merge_strategy'] = MergeStrategy.parse(self.params['merge_strategy']).value

    def _log(self, message):
        if self.verbose:
            print(message, file=sys.stderr)

    def process_image(self, pixels):
        """
        Run the whole pipeline on an image

        Args:
            pixels: float array (height, width, channels), channels >= 3

        Returns:
            ExtractionResult

        Raises:
            DegeneratePartitionError: if the image could not be cut into regions
        """
        self._log(f"\nProcessing image: {pixels.shape}")

        # create summed area table of luminance image
        table = SummedAreaTable(pixels)
        luminance_sum = table.total_luminance_sum
        self._log(f"✓ Summed area table: luminance sum={luminance_sum:.6g}, "
                  f"min={table.min_luminance:.6g}, max={table.max_luminance:.6g}")

        # apply cut algorithm
        regions = median_variance_cut(table, int(self.params['num_cuts']))
        if not regions:
            raise DegeneratePartitionError(
                f"Cannot cut {table.width}x{table.height} image into light regions")
        self._log(f"✓ Partitioned into {len(regions)} regions")

        candidates = create_lights_from_regions(regions, table, verbose=self.verbose)

        # From ratio to absolute luminance
        luminance_max_light = float(self.params['luminance_ratio']) * luminance_sum

        lights, merge_count = apply_merge_strategy(
            self.params['merge_strategy'],
            candidates,
            float(self.params['max_merged_area']),
            float(self.params['max_merged_length']),
            luminance_max_light,
            float(self.params['merge_angle_degrees']),
        )
        self._log(f"✓ {len(candidates)} candidate lights -> {len(lights)} lights "
                  f"({merge_count} merged, strategy={self.params['merge_strategy']})")

        return ExtractionResult(table, regions, candidates, lights, merge_count)

    def process_file(self, path):
        """Load an .hdr / .exr file and run process_image on it"""
        pixels, width, height, channels = load_image(path)
        self._log(f"✓ Loaded {path}: {width}x{height}, {channels} channels")
        return pixels, self.process_image(pixels)

    def records(self, result):
        """JSON-ready records of the result, capped at num_lights"""
        return lights_to_records(result.lights, result.luminance_sum, int(self.params['num_lights']))

    def write_json(self, result, stream, indent=None):
        return output_json(result.lights, result.luminance_sum,
                           int(self.params['num_lights']), stream=stream, indent=indent)

    def visualize_results(self, pixels, result, output_dir, image_name):
        """
        Save debug images of every stage

        Returns:
            List of written file paths
        """
        written = debug_draw_lights(output_dir, image_name, pixels, result.table,
                                    result.regions, result.candidates, result.lights,
                                    int(self.params['num_lights']))
        for path in written:
            self._log(f"✓ Saved visualization to: {path}")
        return written

    def save_results(self, image_name, result, output_dir):
        """
        Save a text report of the merged lights
        """
        os.makedirs(output_dir, exist_ok=True)
        result_file = os.path.join(output_dir, f"{image_name}_lights.txt")
        luminance_sum = result.luminance_sum

        with open(result_file, 'w') as f:
            f.write("=" * 60 + "\n")
            f.write("ENVIRONMENT MAP LIGHT EXTRACTION RESULTS\n")
            f.write("=" * 60 + "\n\n")

            f.write(f"Image: {image_name} ({result.width}x{result.height})\n")
            f.write(f"Date: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n")
            f.write(f"Luminance sum: {luminance_sum:.6f}\n")
            f.write(f"Regions: {len(result.regions)}\n")
            f.write(f"Candidate lights: {len(result.candidates)}\n")
            f.write(f"Lights: {len(result.lights)} ({result.merge_count} merged)\n\n")

            f.write("Parameters:\n")
            for key in sorted(self.default_params):
                f.write(f"  {key}: {self.params[key]}\n")
            f.write("\n" + "-" * 60 + "\n\n")

            for i, light in enumerate(result.lights):
                u, v = light.centroid
                x, y, w, h = light.rect
                ratio = light.sum / luminance_sum if luminance_sum else 0.0

                f.write(f"Light {i}:{' (below horizon)' if v >= 0.5 else ''}\n")
                f.write(f"  Centroid: ({u:.4f}, {v:.4f})\n")
                f.write(f"  Direction: [{', '.join(f'{c:.4f}' for c in light.direction)}]\n")
                f.write(f"  Pixels: [{x}, {y}, {w}, {h}]\n")
                f.write(f"  Color: [{', '.join(f'{c:.4f}' for c in light.color)}]\n")
                f.write(f"  Sum: {light.sum:.6f} ({ratio * 100:.2f}% of total)\n")
                f.write(f"  Luminosity: {light.lum_average:.6f}\n")
                f.write(f"  Variance: {light.variance:.6f}\n")
                f.write(f"  Absorbed: {light.merged_count}\n")
                f.write(f"  Error: {int(light.error)}\n")
                f.write("-" * 30 + "\n")

        self._log(f"✓ Saved results to: {result_file}")
        return result_file
