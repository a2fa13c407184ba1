"""Linde-Buzo-Gray refinement of stipple sites."""
import logging
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from stipplevec.types import (
    Cell,
    DensityField,
    IterationResult,
    RefinerState,
    Site,
    StippleConfig,
)
from stipplevec.voronoi import partition

logger = logging.getLogger(__name__)


def initial_sites(field: DensityField, count: int, seed: Optional[int] = None) -> List[Site]:
    """
    Scatter sites uniformly over the image.

    Args:
        field: Density field (for its dimensions)
        count: Number of sites
        seed: Seed for reproducible placement

    Returns:
        List of sites in [0, width) x [0, height)
    """
    rng = np.random.default_rng(seed)
    xs = rng.uniform(0, field.width, size=count)
    ys = rng.uniform(0, field.height, size=count)
    return [Site(float(x), float(y)) for x, y in zip(xs, ys)]


def split_cell(cell: Cell, count: int = 2, offset: float = 0.01) -> List[Site]:
    """
    Replace a cell's site by several sites next to its centroid.

    Sites are offset along x only, alternating +offset, -offset,
    +2*offset, -2*offset and so on.
    """
    cx, cy = cell.centroid.x, cell.centroid.y
    sites = []
    for k in range(count):
        step = offset * (k // 2 + 1)
        sign = 1.0 if k % 2 == 0 else -1.0
        sites.append(Site(cx + sign * step, cy))
    return sites


def apply_policy(cells: Sequence[Cell], config: StippleConfig) -> Tuple[List[Site], int, int, int]:
    """
    Build the next site generation from a set of cells.

    Cells with mass below the lower threshold, and empty cells, are
    dropped. Cells above the upper threshold are split. All others move
    to their centroid.

    Args:
        cells: Cells in site order
        config: Thresholds and split settings

    Returns:
        (sites, drops, splits, keeps)
    """
    sites = []
    drops = splits = keeps = 0

    for i, cell in enumerate(cells):
        mass = cell.density_mass

        if i % 10 == 0:
            logger.debug(f"Processing cell {i}/{len(cells)}, density: {mass:.4f}")

        if cell.is_empty or mass < config.lower_threshold:
            drops += 1
        elif mass > config.upper_threshold:
            sites.extend(split_cell(cell, config.split_count, config.split_offset))
            splits += 1
        else:
            sites.append(cell.centroid)
            keeps += 1

    return sites, drops, splits, keeps


class LBGRefiner:
    """Iterative split/keep/drop refinement driven by weighted Voronoi cells."""

    def __init__(
        self,
        field: DensityField,
        config: Optional[StippleConfig] = None,
        sites: Optional[Sequence[Site]] = None,
        trace: bool = False
    ):
        """
        Initialize refiner.

        Args:
            field: Density field to stipple
            config: Configuration (uses defaults if None)
            sites: Starting generation (random if None)
            trace: Trace boundary paths on each iteration's partition
        """
        self.field = field
        self.config = config or StippleConfig()
        self.config.validate()

        if sites is None:
            sites = initial_sites(field, self.config.initial_sites, self.config.seed)

        self.sites: List[Site] = list(sites)
        self.state = RefinerState.RUNNING
        self.iteration = 0
        self.trace = trace

        logger.info(f"Initialized stipple list with {len(self.sites)} points")

    @property
    def converged(self) -> bool:
        return self.state is RefinerState.CONVERGED

    def step(self) -> IterationResult:
        """
        Run one LBG iteration and advance to the next generation.

        Returns:
            IterationResult for this iteration

        Raises:
            InvalidGeometryError: If the current generation is empty
        """
        logger.debug("Computing Voronoi diagram...")
        result = partition(
            self.field,
            self.sites,
            trace_boundaries=self.trace,
            config=self.config,
        )
        logger.debug(f"Voronoi diagram computed: {len(result.cells)} cells")

        sites, drops, splits, keeps = apply_policy(result.cells, self.config)

        self.iteration += 1
        self.sites = sites

        iteration_result = IterationResult(
            iteration=self.iteration,
            partition=result,
            sites=sites,
            drops=drops,
            splits=splits,
            keeps=keeps,
        )

        if iteration_result.changes == 0:
            self.state = RefinerState.CONVERGED

        logger.info(
            f"Iteration {self.iteration}: {len(sites)} stipples "
            f"(dropped {drops}, split {splits}, kept {keeps})"
        )
        return iteration_result

    def run(self, callback: Optional[Callable[[IterationResult], None]] = None) -> List[Site]:
        """
        Iterate until no cell changes or the iteration cap is reached.

        Args:
            callback: Called with each IterationResult

        Returns:
            Final site generation
        """
        while not self.converged:
            if self.config.max_iterations is not None and self.iteration >= self.config.max_iterations:
                logger.warning(
                    f"Stopped after {self.iteration} iterations without converging"
                )
                break

            result = self.step()
            if callback is not None:
                callback(result)

        return self.sites
