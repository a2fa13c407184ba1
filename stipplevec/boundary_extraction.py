"""Boundary pixel detection and greedy polyline tracing."""
from typing import List, Optional
import numpy as np
from scipy.ndimage import maximum_filter, minimum_filter

from stipplevec.types import BoundaryPath, StippleConfig

# N, then clockwise; (dx, dy) with y growing downwards
DIRECTIONS = [
    (0, -1),
    (1, -1),
    (1, 0),
    (1, 1),
    (0, 1),
    (-1, 1),
    (-1, 0),
    (-1, -1),
]


def detect_boundary_pixels(assignment: np.ndarray) -> np.ndarray:
    """
    Find pixels bordering a differently assigned region.

    A pixel is on a boundary when any in-bounds 8-neighbor carries a
    different site index. Edge replication at the border never adds a
    new label, so out-of-bounds neighbors are ignored.

    Args:
        assignment: (H, W) site indices

    Returns:
        (H, W) bool mask of boundary pixels
    """
    hi = maximum_filter(assignment, size=3, mode='nearest')
    lo = minimum_filter(assignment, size=3, mode='nearest')
    return hi != lo


def _trace_from(
    mask: np.ndarray,
    x: int,
    y: int,
    max_path_length: int
) -> List[tuple]:
    """Greedily follow active mask pixels from (x, y), consuming them."""
    h, w = mask.shape

    mask[y, x] = False
    points = [(x, y)]
    last_dx, last_dy = 0, 0

    while len(points) < max_path_length:
        best_score = -1
        best_dir = None

        for dx, dy in DIRECTIONS:
            nx, ny = x + dx, y + dy
            if nx < 0 or nx >= w or ny < 0 or ny >= h:
                continue
            if not mask[ny, nx]:
                continue

            # Prefer continuing straight; reversals never win
            score = dx * last_dx + dy * last_dy
            if score > best_score:
                best_score = score
                best_dir = (dx, dy)

        if best_dir is None:
            break

        last_dx, last_dy = best_dir
        x += last_dx
        y += last_dy
        mask[y, x] = False
        points.append((x, y))

    return points


def trace_boundary_paths(
    mask: np.ndarray,
    max_path_length: int = 100000,
    min_path_length: int = 5,
    max_paths: Optional[int] = None
) -> List[BoundaryPath]:
    """
    Link boundary pixels into polylines.

    Starts are taken in row-major order. Each path extends towards the
    active neighbor best aligned with the previous step, ties going to
    the earlier direction. The mask is consumed in place.

    Args:
        mask: (H, W) bool boundary mask, cleared as pixels are traced
        max_path_length: Upper bound on points per path
        min_path_length: Shorter traces are discarded
        max_paths: Stop after this many retained paths (None = no limit)

    Returns:
        Retained boundary paths
    """
    paths = []

    for y, x in np.argwhere(mask):
        if max_paths is not None and len(paths) >= max_paths:
            break
        if not mask[y, x]:
            continue

        points = _trace_from(mask, int(x), int(y), max_path_length)
        if len(points) >= min_path_length:
            paths.append(BoundaryPath(points=points))

    return paths


def extract_boundaries(assignment: np.ndarray, config: StippleConfig) -> List[BoundaryPath]:
    """Detect and trace the boundaries of an assignment map."""
    mask = detect_boundary_pixels(assignment)
    return trace_boundary_paths(
        mask,
        max_path_length=config.max_path_length,
        min_path_length=config.min_path_length,
        max_paths=config.max_paths,
    )
