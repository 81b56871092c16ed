# main.py
"""
MAIN EXECUTION SCRIPT FOR ENVIRONMENT MAP LIGHT EXTRACTION
Usage: python main.py [-a area] [-l length] [-r ratio] [-n cuts] [-m lights] [-d] file.hdr
"""
import argparse
import os
import sys
from pathlib import Path

from envlights import LightExtractor, LightExtractionError, MergeStrategy


class _ArgumentParser(argparse.ArgumentParser):
    """Usage errors exit with status 1"""

    def error(self, message):
        self.print_usage(sys.stderr)
        print(f"{self.prog}: error: {message}", file=sys.stderr)
        sys.exit(1)


def build_parser():
    defaults = LightExtractor.default_params
    parser = _ArgumentParser(
        description='Extract dominant directional lights from an equirectangular HDR environment map')

    parser.add_argument('file', help='Input .hdr or .exr environment map')

    # Idea is to limit light extraction to analytic directional lights,
    # so area and power of an extracted light are capped
    parser.add_argument('-a', '--max-area', type=float, dest='max_merged_area',
                        help=f"Max merged light area, ratio of the map (default {defaults['max_merged_area']})")
    parser.add_argument('-l', '--max-length', type=float, dest='max_merged_length',
                        help=f"Max merged light side, ratio of the map (default {defaults['max_merged_length']})")
    parser.add_argument('-r', '--ratio', type=float, dest='luminance_ratio',
                        help=f"Luminance ratio under which a light can be merged (default {defaults['luminance_ratio']})")
    parser.add_argument('-n', '--cuts', type=int, dest='num_cuts',
                        help=f"Number of subdivisions, yields up to 2^n regions (default {defaults['num_cuts']})")
    parser.add_argument('-m', '--lights', type=int, dest='num_lights',
                        help=f"Max number of lights in the output, 0 for all (default {defaults['num_lights']})")
    parser.add_argument('--angle', type=float, dest='merge_angle_degrees',
                        help=f"Max angle in degrees between merged lights (default {defaults['merge_angle_degrees']})")
    parser.add_argument('--strategy', choices=[s.value for s in MergeStrategy], dest='merge_strategy',
                        help=f"Merge strategy (default {defaults['merge_strategy']})")

    parser.add_argument('-d', '--debug', action='store_true', help='Save debug visualizations and a text report')
    parser.add_argument('--debug-dir', default='debug', help='Output folder for debug files')
    parser.add_argument('--config', help='Path to JSON config file')
    parser.add_argument('-o', '--output', help='Write the JSON lights to this file instead of stdout')
    parser.add_argument('-q', '--quiet', action='store_true', help='Do not print progress')
    return parser


def main(argv=None):
    """Main execution function, returns the process exit code"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.config and not os.path.exists(args.config):
        print(f"Error: Config file '{args.config}' does not exist", file=sys.stderr)
        return 1

    # Command line flags override the config file
    keys = ('num_cuts', 'max_merged_area', 'max_merged_length', 'luminance_ratio',
            'merge_angle_degrees', 'merge_strategy', 'num_lights')
    overrides = {key: getattr(args, key) for key in keys if getattr(args, key) is not None}

    try:
        extractor = LightExtractor(args.config, verbose=not args.quiet, **overrides)
    except ValueError as e:
        parser.error(str(e))

    try:
        pixels, result = extractor.process_file(args.file)
    except LightExtractionError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.output:
        with open(args.output, 'w') as f:
            extractor.write_json(result, f, indent=2)
        if not args.quiet:
            print(f"✓ Saved lights to: {args.output}", file=sys.stderr)
    else:
        extractor.write_json(result, sys.stdout)

    if args.debug:
        name = Path(args.file).stem
        extractor.visualize_results(pixels, result, args.debug_dir, name)
        extractor.save_results(name, result, args.debug_dir)

    return 0


if __name__ == "__main__":
    sys.exit(main())
