"""Minimum feedback arc set (MFAS) solver used for outlier rejection in 1DSfM.

Given a weighted directed graph, the MFAS problem is to remove edges of minimum total weight so that the remaining
graph is acyclic. Equivalently, find a 1D ordering of the nodes that minimizes the total weight of the edges pointing
backward. The problem is NP-hard; the ordering computed here is the greedy heuristic of 1DSfM and is not guaranteed to
be optimal.

In translation averaging, the nodes are cameras and the edges are relative translation directions, projected onto a
projection direction. Edges that point backward in the ordering are inconsistent with the other measurements along
that direction and are flagged as outliers.

References:
- Kyle Wilson and Noah Snavely, "Robust Global Translations with 1DSfM", ECCV 2014.
- https://research.cs.cornell.edu/1dsfm/
"""

import math
from typing import Dict, List, Mapping, Optional, Sequence

import onedsfm.mfas.graph as graph_utils
import onedsfm.mfas.ordering as ordering_utils
import onedsfm.mfas.outliers as outlier_utils
from onedsfm.mfas.errors import UnknownNode
from onedsfm.mfas.graph import Direction, KeyPair, Node, WeightedDirectedGraph


class MFAS:
    """Solves the MFAS problem on a single weighted directed graph.

    The node sequence is used by reference and not copied, since the same (possibly large) set of nodes is usually
    shared by many MFAS instances, one per projection direction. The caller owns it and must keep it unchanged while
    any instance built on it is in use. Instances never mutate the nodes, so they can be used from parallel workers.
    """

    def __init__(self, nodes: Sequence[Node], edge_weights: Mapping[KeyPair, float]) -> None:
        """Constructs from the nodes of a graph and weighted directed edges between them.

        Args:
            nodes: nodes in the graph.
            edge_weights: map from (from, to) to a signed weight. An edge with a negative weight is stored reversed,
                with the absolute value of its weight.
        """
        self._set_graph(graph_utils.build_graph_from_edge_weights(nodes, edge_weights))

    def _set_graph(self, graph: WeightedDirectedGraph) -> None:
        self._graph = graph
        self._ordering: Optional[List[Node]] = None
        self._ranks: Optional[Dict[Node, int]] = None

    @classmethod
    def from_graph(cls, graph: WeightedDirectedGraph) -> "MFAS":
        """Constructs from a graph which was already built, e.g. by `graph.build_graph_from_translations`."""
        mfas = cls.__new__(cls)
        mfas._set_graph(graph)
        return mfas

    @classmethod
    def from_translations(
        cls,
        nodes: Sequence[Node],
        relative_translations: Mapping[KeyPair, Direction],
        projection_direction: Direction,
    ) -> "MFAS":
        """Constructs for translation averaging, by projecting relative directions onto a projection direction.

        Args:
            nodes: nodes in the graph (cameras and/or landmarks).
            relative_translations: map from (i, j) to the unit translation direction from i to j.
            projection_direction: direction onto which the translation directions are projected.

        Returns:
            MFAS instance for the projected graph.
        """
        return cls.from_graph(
            graph_utils.build_graph_from_translations(nodes, relative_translations, projection_direction)
        )

    @property
    def graph(self) -> WeightedDirectedGraph:
        """The graph with canonical (non-negative) edge weights."""
        return self._graph

    def compute_ordering(self) -> List[Node]:
        """Computes the 1D MFAS ordering of the nodes in the graph.

        Returns:
            Nodes in the obtained order.
        """
        if self._ordering is None:
            self._ordering = ordering_utils.compute_ordering(self._graph)
        return list(self._ordering)

    def rank(self, node: Node) -> int:
        """Position of a node in the MFAS ordering."""
        if self._ranks is None:
            self._ranks = outlier_utils.ordering_to_ranks(self.compute_ordering())
        if node not in self._ranks:
            raise UnknownNode(f"Node {node} is not in the graph.")
        return self._ranks[node]

    def compute_outlier_weights(self) -> Dict[KeyPair, float]:
        """Computes the "outlier weights" of the edges of the graph.

        The outlier weight of an edge is zero if the edge is an inlier (it points forward in the ordering), and the
        magnitude of its weight if it is an outlier.

        Returns:
            Map from every edge (with its canonical direction) to its outlier weight.
        """
        return outlier_utils.compute_outlier_weights(self._graph, self.compute_ordering())

    def total_outlier_weight(self) -> float:
        return math.fsum(self.compute_outlier_weights().values())
