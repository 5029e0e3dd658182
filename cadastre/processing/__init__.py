"""
Processing module for parcel batches.

This module builds the physical adjacency graph of a loaded parcel list.
"""

from .adjacency import AdjacencyGraph, AdjacencyGraphBuilder, build_graph
from .models import AdjacencyConfig

__all__ = [
    "AdjacencyConfig",
    "AdjacencyGraph",
    "AdjacencyGraphBuilder",
    "build_graph",
]
