"""Command line interface for stipplevec."""
import argparse
import logging
import sys
from pathlib import Path

from stipplevec.lbg import LBGRefiner
from stipplevec.raster_ingest import load_density
from stipplevec.svg_export import export_stipples
from stipplevec.types import IterationResult, StippleConfig, StippleError


class _Parser(argparse.ArgumentParser):
    """Argument parser that exits with status 1 on usage errors."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    defaults = StippleConfig()

    parser = _Parser(
        prog='stipplevec',
        description='Convert a grayscale image into weighted Voronoi stipples (SVG)'
    )

    parser.add_argument(
        'input',
        type=str,
        help='Input image path'
    )

    parser.add_argument(
        '-o', '--output-dir',
        type=str,
        default=defaults.output_dir,
        help=f'Directory for per-iteration and final SVGs (default: {defaults.output_dir})'
    )

    parser.add_argument(
        '--lower',
        type=float,
        default=defaults.lower_threshold,
        help=f'Cells with less density mass are dropped (default: {defaults.lower_threshold:g})'
    )

    parser.add_argument(
        '--upper',
        type=float,
        default=defaults.upper_threshold,
        help=f'Cells with more density mass are split (default: {defaults.upper_threshold:g})'
    )

    parser.add_argument(
        '--sites',
        type=int,
        default=defaults.initial_sites,
        help=f'Number of initial stipples (default: {defaults.initial_sites})'
    )

    parser.add_argument(
        '--seed',
        type=int,
        default=None,
        help='Random seed for initial stipple placement'
    )

    parser.add_argument(
        '--max-iterations',
        type=int,
        default=None,
        help='Stop after this many iterations even if not converged'
    )

    parser.add_argument(
        '--no-boundaries',
        action='store_true',
        help='Do not draw Voronoi cell boundaries'
    )

    parser.add_argument(
        '--vertices',
        action='store_true',
        help='Mark approximate Voronoi vertices'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Verbose progress and final coordinates'
    )

    return parser


def main(args=None):
    """Main entry point."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    logging.basicConfig(
        level=logging.INFO if parsed_args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s'
    )

    config = StippleConfig(
        lower_threshold=parsed_args.lower,
        upper_threshold=parsed_args.upper,
        initial_sites=parsed_args.sites,
        seed=parsed_args.seed,
        max_iterations=parsed_args.max_iterations,
        trace_boundaries=not parsed_args.no_boundaries,
        mark_vertices=parsed_args.vertices,
        output_dir=parsed_args.output_dir,
    )

    try:
        config.validate()
    except StippleError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    input_path = Path(parsed_args.input)
    output_dir = Path(config.output_dir)

    try:
        field = load_density(input_path)
    except (FileNotFoundError, StippleError) as e:
        print(f"Error: Failed to load image. {e}", file=sys.stderr)
        return 1

    print(f"Image: {field.width}x{field.height}")
    print(f"Thresholds: lower={config.lower_threshold:g}, upper={config.upper_threshold:g}")

    def write_iteration(result: IterationResult) -> None:
        print(f"Iteration {result.iteration}: {len(result.sites)} stipples, "
              f"{result.changes} changed")
        export_stipples(
            output_dir / f"iteration_{result.iteration}.svg",
            field,
            result.sites,
            config
        )

    try:
        refiner = LBGRefiner(field, config)
        sites = refiner.run(callback=write_iteration)

        final_path = output_dir / "output_stipples.svg"
        export_stipples(final_path, field, sites, config)

    except StippleError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    state = "converged" if refiner.converged else "stopped"
    print(f"Generated {len(sites)} stipples ({state} after {refiner.iteration} iterations)")
    if parsed_args.verbose:
        for site in sites:
            print(f"  {site.x:.4f}, {site.y:.4f}")
    print(f"Saved: {final_path}")

    return 0


if __name__ == '__main__':
    sys.exit(main())
