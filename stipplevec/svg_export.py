"""SVG export for stipples and Voronoi boundaries."""
import logging
from pathlib import Path
from typing import Sequence, Union

import numpy as np

from stipplevec.types import (
    BoundaryPath,
    Cell,
    DensityField,
    ExportError,
    PartitionResult,
    Site,
    StippleConfig,
)
from stipplevec.voronoi import partition

logger = logging.getLogger(__name__)


def format_number(x: float, precision: int) -> str:
    """
    Format number with given precision.

    Args:
        x: Number to format
        precision: Decimal places

    Returns:
        Formatted string
    """
    formatted = f"{x:.{precision}f}"
    # Remove trailing zeros and decimal point if not needed
    if '.' in formatted:
        formatted = formatted.rstrip('0').rstrip('.')
    if formatted == '-0':
        formatted = '0'
    return formatted


def polyline_to_svg(path: BoundaryPath, precision: int = 2) -> str:
    """Convert a boundary path to an SVG polyline element."""
    fmt = lambda v: format_number(v, precision)
    points = ' '.join(f"{fmt(x)},{fmt(y)}" for x, y in path.points)
    return f'<polyline points="{points}"/>'


def stipple_to_svg(cell: Cell, dot_scale: float = 4.0, precision: int = 2) -> str:
    """
    Convert a cell to a filled circle at its centroid.

    The radius follows the cell's mean density.
    """
    fmt = lambda v: format_number(v, precision)
    radius = dot_scale * cell.mean_density
    return (
        f'<circle cx="{fmt(cell.centroid.x)}" cy="{fmt(cell.centroid.y)}" '
        f'r="{fmt(radius)}" fill="black"/>'
    )


def _in_canvas(site: Site, width: int, height: int) -> bool:
    return 0 <= site.x < width and 0 <= site.y < height


def generate_svg(
    result: PartitionResult,
    width: int,
    height: int,
    config: StippleConfig
) -> str:
    """
    Generate SVG from a partition of the current stipples.

    Args:
        result: Partition of the sites to draw
        width: Image width
        height: Image height
        config: Configuration

    Returns:
        Complete SVG string
    """
    precision = config.precision
    layers = []

    if result.paths:
        lines = [polyline_to_svg(p, precision) for p in result.paths if len(p) >= 2]
        layers.append('<!-- Voronoi edges -->')
        layers.append(
            '<g stroke="red" stroke-width="1" fill="none" opacity="0.7">\n    '
            + '\n    '.join(lines)
            + '\n  </g>'
        )

    if result.vertices is not None and result.vertices.any():
        ys, xs = np.nonzero(result.vertices)
        markers = [
            f'<circle cx="{int(x)}" cy="{int(y)}" r="1"/>' for x, y in zip(xs, ys)
        ]
        layers.append('<!-- Voronoi vertices -->')
        layers.append('<g fill="blue">\n    ' + '\n    '.join(markers) + '\n  </g>')

    dots = []
    for i, cell in enumerate(result.cells):
        if cell.is_empty:
            logger.debug(f"Skipping empty cell {i}")
            continue
        if not _in_canvas(cell.centroid, width, height):
            logger.warning(
                f"Invalid stipple point coordinates: "
                f"({cell.centroid.x:.2f}, {cell.centroid.y:.2f})"
            )
            continue
        dots.append(stipple_to_svg(cell, config.dot_scale, precision))

    layers.append('<!-- Stipple points -->')
    layers.extend(dots)

    svg_content = '\n  '.join(layers)

    svg = f'''<?xml version="1.0" encoding="UTF-8"?>
<svg xmlns="http://www.w3.org/2000/svg" version="1.1" width="{width}" height="{height}">
  {svg_content}
</svg>
'''

    return svg


def save_svg(
    svg_string: str,
    output_path: Union[str, Path]
) -> None:
    """
    Save SVG string to file.

    Args:
        svg_string: SVG content
        output_path: Output file path

    Raises:
        ExportError: If the file cannot be written
    """
    output_path = Path(output_path)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(svg_string)
    except OSError as e:
        raise ExportError(f"Failed to open file for writing: {output_path}: {e}")


def export_stipples(
    output_path: Union[str, Path],
    field: DensityField,
    sites: Sequence[Site],
    config: StippleConfig
) -> PartitionResult:
    """
    Partition the given sites and write them as an SVG document.

    Args:
        output_path: Output file path
        field: Density field
        sites: Stipple sites to draw
        config: Configuration

    Returns:
        The partition that was drawn
    """
    logger.info(f"{output_path}\t{len(sites)}")

    if sites:
        result = partition(
            field,
            sites,
            trace_boundaries=config.trace_boundaries,
            config=config,
        )
    else:
        logger.warning("No stipples to export")
        result = PartitionResult(cells=[])

    svg = generate_svg(result, field.width, field.height, config)
    save_svg(svg, output_path)
    return result

