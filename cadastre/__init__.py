"""
Parcel adjacency graphs from delimited cadastre files.

Loads parcel records (id, length, area, owner, location tags and a WKT
multipolygon boundary) and derives the undirected graph of parcels that
are physically adjacent on the ground.

Usage:
    from cadastre import build_graph, load_parcels

    parcels = load_parcels("data/parcels.csv")
    graph = build_graph(parcels)

    print(graph.vertex_count(), "parcels,", graph.edge_count(), "adjacencies")
"""

from .acquisition import Parcel, ParcelFileLoader, load_parcels
from .exceptions import (
    AdjacencyBuildError,
    CadastreError,
    ConfigurationError,
    EmptyResultError,
    FieldFormatError,
    GeometrySyntaxError,
    GeometryTypeError,
    InvalidInputError,
    SourceReadError,
    TopologyError,
)
from .processing import AdjacencyGraph, AdjacencyGraphBuilder, build_graph

__all__ = [
    # Exceptions
    "AdjacencyBuildError",
    "CadastreError",
    "ConfigurationError",
    "EmptyResultError",
    "FieldFormatError",
    "GeometrySyntaxError",
    "GeometryTypeError",
    "InvalidInputError",
    "SourceReadError",
    "TopologyError",
    # Loading
    "Parcel",
    "ParcelFileLoader",
    "load_parcels",
    # Graph
    "AdjacencyGraph",
    "AdjacencyGraphBuilder",
    "build_graph",
]
