"""
Pydantic models for adjacency graph construction.
"""

from pydantic import BaseModel, Field

from cadastre.geometry import DEFAULT_GRID_SIZE


class AdjacencyConfig(BaseModel):
    """Configuration for the pairwise adjacency scan."""

    grid_size: float = Field(
        default=DEFAULT_GRID_SIZE,
        gt=0,
        le=1.0,
        description="Precision grid cell size used to snap boundaries",
    )
    use_bbox_prefilter: bool = Field(
        default=True,
        description="Skip pairs whose bounding boxes cannot meet",
    )
    max_workers: int = Field(
        default=1,
        ge=1,
        le=64,
        description="Worker threads for the pairwise scan (1 = sequential)",
    )
