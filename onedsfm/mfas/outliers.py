"""Classification of edges as inliers or outliers with respect to a node ordering."""

from typing import Dict, Sequence

from onedsfm.mfas.errors import InvalidGraph, UnknownNode
from onedsfm.mfas.graph import KeyPair, Node, WeightedDirectedGraph


def ordering_to_ranks(ordering: Sequence[Node]) -> Dict[Node, int]:
    """Maps every node in the ordering to its position."""
    ranks = {node: rank for rank, node in enumerate(ordering)}
    if len(ranks) != len(ordering):
        raise InvalidGraph("Ordering contains duplicated nodes.")
    return ranks


def compute_outlier_weights(graph: WeightedDirectedGraph, ordering: Sequence[Node]) -> Dict[KeyPair, float]:
    """Computes the outlier weight of every edge of the graph.

    An edge (u, v) is an inlier if u comes before v in the ordering and its outlier weight is 0. Otherwise the edge is
    an outlier and its outlier weight is its weight in the graph.

    Args:
        graph: graph with non-negative edge weights.
        ordering: ordering of the graph's nodes.

    Returns:
        Map from each edge of the graph to its outlier weight.

    Raises:
        UnknownNode: if an endpoint of an edge is missing from the ordering.
    """
    ranks = ordering_to_ranks(ordering)

    outlier_weights: Dict[KeyPair, float] = {}
    for i, j, weight in graph.edges():
        if i not in ranks or j not in ranks:
            missing = i if i not in ranks else j
            raise UnknownNode(f"Node {missing} of edge ({i}, {j}) is not in the ordering.")
        outlier_weights[(i, j)] = 0.0 if ranks[i] < ranks[j] else weight
    return outlier_weights
