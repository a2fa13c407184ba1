"""Core types for the stippling pipeline."""
from dataclasses import dataclass, field
from typing import Optional, List, Tuple
from enum import Enum, auto
import numpy as np


class RefinerState(Enum):
    """Lifecycle of an LBG refinement run."""
    RUNNING = auto()
    CONVERGED = auto()


class StippleError(Exception):
    """Base exception for stippling errors."""
    pass


class InvalidGeometryError(StippleError):
    """Empty site set, non-positive dimensions or malformed density data."""
    pass


class ImageLoadError(StippleError):
    """Image could not be read or decoded."""
    pass


class ExportError(StippleError):
    """Output document could not be written."""
    pass


class ConfigError(StippleError):
    """Inconsistent refinement configuration."""
    pass


@dataclass(frozen=True)
class Site:
    """Stipple point in pixel coordinates."""
    x: float
    y: float


@dataclass(eq=False)
class DensityField:
    """
    Immutable grid of per-pixel density weights.

    Values lie in [0, 1]; higher means darker. The array is indexed
    ``data[y, x]`` and is copied and frozen on construction.
    """
    data: np.ndarray

    def __post_init__(self):
        data = np.array(self.data, dtype=np.float64)

        if data.ndim != 2:
            raise InvalidGeometryError(f"Expected 2D density array, got {data.ndim}D")

        if data.shape[0] <= 0 or data.shape[1] <= 0:
            raise InvalidGeometryError(f"Density field has non-positive dimensions: {data.shape}")

        if not np.all(np.isfinite(data)):
            raise InvalidGeometryError("Density field contains non-finite values")

        if data.min() < 0.0 or data.max() > 1.0:
            raise InvalidGeometryError(
                f"Density values must lie in [0, 1], got [{data.min():.3f}, {data.max():.3f}]"
            )

        data.setflags(write=False)
        self.data = data

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def height(self) -> int:
        return int(self.data.shape[0])

    def __getitem__(self, xy: Tuple[int, int]) -> float:
        x, y = xy
        return float(self.data[y, x])


@dataclass
class Cell:
    """Statistics of the pixels assigned to one site during a partition pass."""
    pixel_count: int = 0
    density_mass: float = 0.0
    centroid: Site = Site(0.0, 0.0)

    @property
    def is_empty(self) -> bool:
        """True when the centroid is undefined (no pixels or no mass)."""
        return self.pixel_count == 0 or self.density_mass <= 0.0

    @property
    def mean_density(self) -> float:
        if self.pixel_count == 0:
            return 0.0
        return self.density_mass / self.pixel_count


@dataclass
class BoundaryPath:
    """Traced polyline of contiguous boundary pixels, as (x, y) pairs."""
    points: List[Tuple[int, int]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.points)


@dataclass
class PartitionResult:
    """Output of one weighted Voronoi partition pass."""
    cells: List[Cell]
    assignment: Optional[np.ndarray] = None  # (H, W) nearest-site indices
    paths: List[BoundaryPath] = field(default_factory=list)
    vertices: Optional[np.ndarray] = None  # (H, W) bool

    @property
    def total_pixels(self) -> int:
        return sum(cell.pixel_count for cell in self.cells)


@dataclass
class IterationResult:
    """Summary of one LBG iteration."""
    iteration: int
    partition: PartitionResult
    sites: List[Site]  # next generation
    drops: int = 0
    splits: int = 0
    keeps: int = 0

    @property
    def changes(self) -> int:
        return self.drops + self.splits


@dataclass
class StippleConfig:
    """Configuration for LBG stippling."""
    # Refinement policy: below lower the site is dropped, above upper it is split
    lower_threshold: float = 300.0
    upper_threshold: float = 500.0
    split_count: int = 2
    split_offset: float = 0.01

    # Initial generation
    initial_sites: int = 10
    seed: Optional[int] = None

    # None = iterate until converged
    max_iterations: Optional[int] = None

    # Boundary tracing
    trace_boundaries: bool = True
    max_path_length: int = 100000
    max_paths: int = 100000
    min_path_length: int = 5

    # Vertex markers
    mark_vertices: bool = False
    vertex_epsilon: float = 1e-2

    # Output
    dot_scale: float = 4.0
    precision: int = 2  # Decimal places for SVG coordinates
    output_dir: str = "output"

    def validate(self) -> None:
        """Raise ConfigError if the settings cannot drive a refinement run."""
        if self.lower_threshold < 0 or self.upper_threshold < 0:
            raise ConfigError("Thresholds must be non-negative")
        if self.lower_threshold > self.upper_threshold:
            raise ConfigError(
                f"lower_threshold ({self.lower_threshold}) exceeds "
                f"upper_threshold ({self.upper_threshold})"
            )
        if self.split_count < 1:
            raise ConfigError(f"split_count must be >= 1, got {self.split_count}")
        if self.initial_sites < 1:
            raise ConfigError(f"initial_sites must be >= 1, got {self.initial_sites}")
        if self.min_path_length < 1:
            raise ConfigError(f"min_path_length must be >= 1, got {self.min_path_length}")
        if self.max_path_length < self.min_path_length:
            raise ConfigError("max_path_length must be >= min_path_length")
        if self.max_iterations is not None and self.max_iterations < 1:
            raise ConfigError(f"max_iterations must be >= 1, got {self.max_iterations}")
