"""
Adjacency graph construction for parcel batches.

This module provides the AdjacencyGraphBuilder, which evaluates the
parcel adjacency predicate over every unordered pair of a parcel list,
and the read-only AdjacencyGraph it produces.

Build strategy:
- Validate the input list before any geometry work
- Validate and snap every boundary once (a degenerate boundary fails the
  whole build, whether or not any pair would reach it)
- Scan pairs (i, j), i < j, in input order; an optional bounding-box
  pre-filter drops pairs whose boxes, grown by one grid cell, are apart
- Merge hits into a symmetric neighbour mapping

The graph is all-or-nothing: any topology failure during the scan raises
AdjacencyBuildError and no graph is returned.
"""

import logging
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Iterator, Mapping, Optional, Sequence

import numpy as np
from shapely.geometry.base import BaseGeometry

from cadastre.acquisition.parcel import Parcel
from cadastre.exceptions import AdjacencyBuildError, InvalidInputError, TopologyError
from cadastre.geometry import prepare, relate

from .models import AdjacencyConfig


class AdjacencyGraph:
    """
    Undirected adjacency relation over a fixed list of parcels.

    Built in full by AdjacencyGraphBuilder and read-only afterwards. The
    neighbour mapping is symmetric and never contains self-loops; parcels
    without neighbours (or unknown to the graph) have an empty neighbour set.

    Attributes:
        parcels: The vertex list, in the order the graph was built from.
    """

    def __init__(
        self,
        parcels: Sequence[Parcel],
        adjacency: Mapping[Parcel, Iterable[Parcel]],
    ) -> None:
        self._parcels = tuple(parcels)
        self._adjacency = {
            parcel: frozenset(neighbours)
            for parcel, neighbours in adjacency.items()
            if neighbours
        }

    @property
    def parcels(self) -> tuple[Parcel, ...]:
        return self._parcels

    def neighbors(self, parcel: Parcel) -> frozenset[Parcel]:
        """
        Return the parcels adjacent to ``parcel``.

        Raises:
            InvalidInputError: If ``parcel`` is None.
        """
        if parcel is None:
            raise InvalidInputError("Cannot look up neighbours of None", "null_argument")
        return self._adjacency.get(parcel, frozenset())

    def are_adjacent(self, a: Parcel, b: Parcel) -> bool:
        """True if ``b`` is a neighbour of ``a`` (and so ``a`` of ``b``)."""
        if a is None or b is None:
            raise InvalidInputError("Cannot test adjacency against None", "null_argument")
        return b in self._adjacency.get(a, ())

    def vertex_count(self) -> int:
        return len(self._parcels)

    def edge_count(self) -> int:
        return sum(len(neighbours) for neighbours in self._adjacency.values()) // 2

    def edges(self) -> Iterator[tuple[Parcel, Parcel]]:
        """Yield each adjacent pair once, ordered by input position."""
        position = {parcel: i for i, parcel in enumerate(self._parcels)}
        for i, parcel in enumerate(self._parcels):
            later = [n for n in self.neighbors(parcel) if position.get(n, -1) > i]
            for neighbour in sorted(later, key=position.__getitem__):
                yield parcel, neighbour

    def describe(self) -> str:
        """Readable listing of every parcel and the ids adjacent to it."""
        position = {parcel: i for i, parcel in enumerate(self._parcels)}
        lines = []
        for parcel in self._parcels:
            lines.append(f"Parcel {parcel.id} (area: {parcel.area:g}, owner: {parcel.owner})")
            neighbours = sorted(self.neighbors(parcel), key=lambda n: position.get(n, -1))
            if neighbours:
                lines.append("  Adjacent to: " + ", ".join(str(n.id) for n in neighbours))
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"AdjacencyGraph(vertices={self.vertex_count()}, "
            f"edges={self.edge_count()})"
        )


class AdjacencyGraphBuilder:
    """
    Builds AdjacencyGraph instances from parcel lists.

    Usage:
        builder = AdjacencyGraphBuilder(AdjacencyConfig(max_workers=4))
        graph = builder.build(parcels)

        for a, b in graph.edges():
            print(a.id, "<->", b.id)

    Attributes:
        config: Tolerance, pre-filter and parallelism settings.
        logger: Logger receiving build statistics.
    """

    def __init__(
        self,
        config: Optional[AdjacencyConfig] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """
        Initialize the builder.

        Args:
            config: Build configuration. Defaults to AdjacencyConfig().
            logger: Logger for diagnostics. Defaults to this module's logger.
        """
        self.config = config or AdjacencyConfig()
        self.logger = logger or logging.getLogger(__name__)

    @staticmethod
    def _check_input(parcels: Optional[Iterable[Parcel]]) -> list[Parcel]:
        if parcels is None:
            raise InvalidInputError("Parcel list is missing", "missing")
        parcels = list(parcels)
        if not parcels:
            raise InvalidInputError("Parcel list is empty", "empty")
        for index, parcel in enumerate(parcels):
            if parcel is None:
                raise InvalidInputError(
                    f"Parcel list contains None at position {index}", "null_element"
                )
        return parcels

    def _prepare_all(self, parcels: list[Parcel]) -> list[Optional[BaseGeometry]]:
        prepared = []
        for parcel in parcels:
            if parcel.geometry is None:
                self.logger.debug("Parcel %s has no geometry; it gets no neighbours", parcel.id)
                prepared.append(None)
                continue
            try:
                prepared.append(prepare(parcel.geometry, self.config.grid_size))
            except TopologyError as e:
                raise AdjacencyBuildError(
                    f"Degenerate boundary on parcel {parcel.id}",
                    parcel_ids=(parcel.id,),
                    cause=e,
                ) from e
        return prepared

    def _bounds(
        self,
        parcels: list[Parcel],
        prepared: list[Optional[BaseGeometry]],
    ) -> np.ndarray:
        """Boxes grown by one grid cell; NaN rows never pass the filter."""
        bounds = np.full((len(parcels), 4), np.nan)
        for i, parcel in enumerate(parcels):
            if prepared[i] is not None:
                box = parcel.geometry.bounds.expand(self.config.grid_size)
                bounds[i] = box.as_tuple()
        return bounds

    def _candidates(self, i: int, bounds: np.ndarray) -> Iterable[int]:
        if not self.config.use_bbox_prefilter:
            return range(i + 1, len(bounds))
        box = bounds[i]
        rest = bounds[i + 1:]
        mask = (
            (rest[:, 0] <= box[2])
            & (rest[:, 2] >= box[0])
            & (rest[:, 1] <= box[3])
            & (rest[:, 3] >= box[1])
        )
        return (np.flatnonzero(mask) + i + 1).tolist()

    def _scan_rows(
        self,
        rows: Iterable[int],
        parcels: list[Parcel],
        prepared: list[Optional[BaseGeometry]],
        bounds: np.ndarray,
    ) -> tuple[list[tuple[int, int]], int]:
        """
        Evaluate the predicate for every candidate pair starting at ``rows``.

        Returns:
            Adjacent index pairs and the number of pairs evaluated.
        """
        found = []
        evaluated = 0
        for i in rows:
            if prepared[i] is None:
                continue
            for j in self._candidates(i, bounds):
                if prepared[j] is None:
                    continue
                evaluated += 1
                try:
                    relation = relate(prepared[i], prepared[j])
                except TopologyError as e:
                    raise AdjacencyBuildError(
                        f"Cannot evaluate adjacency of parcels "
                        f"{parcels[i].id} and {parcels[j].id}",
                        parcel_ids=(parcels[i].id, parcels[j].id),
                        cause=e,
                    ) from e
                if relation.adjacent:
                    self.logger.debug(
                        "Parcels %s and %s adjacent (%s)",
                        parcels[i].id,
                        parcels[j].id,
                        relation.matrix,
                    )
                    found.append((i, j))
        return found, evaluated

    def _scan(
        self,
        parcels: list[Parcel],
        prepared: list[Optional[BaseGeometry]],
        bounds: np.ndarray,
    ) -> tuple[list[tuple[int, int]], int]:
        workers = min(self.config.max_workers, len(parcels))
        if workers <= 1:
            return self._scan_rows(range(len(parcels)), parcels, prepared, bounds)

        # Strided partitions balance the shrinking rows of the triangle
        partitions = [range(k, len(parcels), workers) for k in range(workers)]
        found = []
        evaluated = 0
        with ThreadPoolExecutor(max_workers=workers) as executor:
            results = executor.map(
                lambda rows: self._scan_rows(rows, parcels, prepared, bounds),
                partitions,
            )
            for pairs, count in results:
                found.extend(pairs)
                evaluated += count
        found.sort()
        return found, evaluated

    def build(self, parcels: Sequence[Parcel]) -> AdjacencyGraph:
        """
        Build the adjacency graph of a parcel list.

        Args:
            parcels: Non-empty list of parcels without None entries.

        Returns:
            AdjacencyGraph over the parcels, in input order.

        Raises:
            InvalidInputError: If the list is None, empty or contains None.
            AdjacencyBuildError: If any boundary is degenerate or a
                predicate cannot be evaluated.
        """
        parcels = self._check_input(parcels)
        total_pairs = len(parcels) * (len(parcels) - 1) // 2

        self.logger.info(
            "Building adjacency graph for %d parcels (%d pairs)",
            len(parcels),
            total_pairs,
        )

        prepared = self._prepare_all(parcels)
        bounds = self._bounds(parcels, prepared)
        pairs, evaluated = self._scan(parcels, prepared, bounds)

        adjacency = defaultdict(set)
        for i, j in pairs:
            adjacency[parcels[i]].add(parcels[j])
            adjacency[parcels[j]].add(parcels[i])

        graph = AdjacencyGraph(parcels, adjacency)

        self.logger.info(
            "Evaluated %d of %d pairs (%.1f%%), found %d adjacencies",
            evaluated,
            total_pairs,
            100 * evaluated / total_pairs if total_pairs > 0 else 0,
            graph.edge_count(),
        )
        return graph


def build_graph(
    parcels: Sequence[Parcel],
    config: Optional[AdjacencyConfig] = None,
) -> AdjacencyGraph:
    """
    Build the adjacency graph of a parcel list.

    Convenience wrapper around AdjacencyGraphBuilder.build().
    """
    return AdjacencyGraphBuilder(config).build(parcels)
