"""Weighted Voronoi stippling package."""
from stipplevec.types import (
    Site,
    Cell,
    DensityField,
    BoundaryPath,
    PartitionResult,
    IterationResult,
    StippleConfig,
    RefinerState,
    StippleError,
    InvalidGeometryError,
    ImageLoadError,
    ExportError,
    ConfigError,
)

__all__ = [
    "Site",
    "Cell",
    "DensityField",
    "BoundaryPath",
    "PartitionResult",
    "IterationResult",
    "StippleConfig",
    "RefinerState",
    "StippleError",
    "InvalidGeometryError",
    "ImageLoadError",
    "ExportError",
    "ConfigError",
]
