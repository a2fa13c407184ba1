"""Density-weighted Voronoi partitioning by brute-force nearest-site search."""
import logging
import math
from typing import List, Optional, Sequence, Tuple

import numpy as np

from stipplevec.types import (
    Cell,
    DensityField,
    InvalidGeometryError,
    PartitionResult,
    Site,
    StippleConfig,
)
from stipplevec.boundary_extraction import extract_boundaries

logger = logging.getLogger(__name__)


def weighted_distance(field: DensityField, pixel: Tuple[int, int], site: Site) -> float:
    """
    Euclidean distance from pixel to site, scaled by the density at the pixel.

    Args:
        field: Density field
        pixel: (x, y) integer pixel position
        site: Site position

    Returns:
        Weighted distance
    """
    x, y = pixel
    return math.hypot(x - site.x, y - site.y) * field[x, y]


def _check_sites(sites: Sequence[Site]) -> None:
    if len(sites) == 0:
        raise InvalidGeometryError("Cannot partition with an empty site set")


def _pixel_grid(field: DensityField) -> Tuple[np.ndarray, np.ndarray]:
    ys, xs = np.mgrid[0:field.height, 0:field.width]
    return xs.astype(np.float64), ys.astype(np.float64)


def nearest_site_map(field: DensityField, sites: Sequence[Site]) -> np.ndarray:
    """
    Assign every pixel to its nearest site under the weighted distance.

    Sites are scanned in order and a pixel only moves to a later site
    on a strictly smaller distance, so the first site wins ties.

    Args:
        field: Density field
        sites: Non-empty site sequence

    Returns:
        (H, W) int array of site indices
    """
    _check_sites(sites)
    xs, ys = _pixel_grid(field)
    density = field.data

    assignment = np.zeros((field.height, field.width), dtype=np.intp)
    best = np.full((field.height, field.width), np.inf)

    for i, site in enumerate(sites):
        dist = np.hypot(xs - site.x, ys - site.y) * density
        closer = dist < best
        best[closer] = dist[closer]
        assignment[closer] = i

    return assignment


def accumulate_cells(field: DensityField, assignment: np.ndarray, n_sites: int) -> List[Cell]:
    """
    Accumulate per-site cell statistics from an assignment map.

    Args:
        field: Density field
        assignment: (H, W) site indices
        n_sites: Number of sites (cells returned)

    Returns:
        One Cell per site; centroids normalized where mass > 0
    """
    xs, ys = _pixel_grid(field)
    labels = assignment.ravel()
    density = field.data.ravel()

    counts = np.bincount(labels, minlength=n_sites)
    mass = np.bincount(labels, weights=density, minlength=n_sites)
    sum_x = np.bincount(labels, weights=xs.ravel() * density, minlength=n_sites)
    sum_y = np.bincount(labels, weights=ys.ravel() * density, minlength=n_sites)

    cells = []
    for i in range(n_sites):
        cell = Cell(pixel_count=int(counts[i]), density_mass=float(mass[i]))
        if cell.density_mass > 0:
            cell.centroid = Site(
                float(sum_x[i] / cell.density_mass),
                float(sum_y[i] / cell.density_mass),
            )
        cells.append(cell)

    return cells


def vertex_mask(field: DensityField, sites: Sequence[Site], epsilon: float = 1e-2) -> np.ndarray:
    """
    Mark pixels where three sites are nearly equidistant.

    A pixel is a vertex candidate when its three smallest weighted
    distances agree within epsilon. Fewer than three sites give no
    vertices.

    Args:
        field: Density field
        sites: Site sequence
        epsilon: Tolerance on distance differences

    Returns:
        (H, W) bool array
    """
    shape = (field.height, field.width)
    if len(sites) < 3:
        return np.zeros(shape, dtype=bool)

    xs, ys = _pixel_grid(field)
    d1 = np.full(shape, np.inf)
    d2 = np.full(shape, np.inf)
    d3 = np.full(shape, np.inf)

    for site in sites:
        dist = np.hypot(xs - site.x, ys - site.y) * field.data
        # Insert into the running top three
        d3 = np.where(dist < d2, d2, np.minimum(d3, dist))
        d2 = np.where(dist < d1, d1, np.minimum(d2, dist))
        d1 = np.minimum(d1, dist)

    return (np.abs(d1 - d2) < epsilon) & (np.abs(d2 - d3) < epsilon)


def partition(
    field: DensityField,
    sites: Sequence[Site],
    keep_assignment: bool = False,
    trace_boundaries: bool = False,
    config: Optional[StippleConfig] = None
) -> PartitionResult:
    """
    Run one weighted Voronoi partition pass.

    Args:
        field: Density field
        sites: Non-empty site sequence
        keep_assignment: Attach the assignment map to the result
        trace_boundaries: Trace boundary polylines from the assignment map
        config: Tracing and vertex settings (defaults if None)

    Returns:
        PartitionResult with one Cell per site

    Raises:
        InvalidGeometryError: If sites is empty
    """
    config = config or StippleConfig()
    _check_sites(sites)

    assignment = nearest_site_map(field, sites)
    cells = accumulate_cells(field, assignment, len(sites))
    logger.debug(f"Partitioned {field.width}x{field.height} into {len(cells)} cells")

    result = PartitionResult(cells=cells)

    if trace_boundaries:
        result.paths = extract_boundaries(assignment, config)
        logger.debug(f"Traced {len(result.paths)} boundary paths")

    if config.mark_vertices:
        result.vertices = vertex_mask(field, sites, config.vertex_epsilon)

    if keep_assignment:
        result.assignment = assignment

    return result
