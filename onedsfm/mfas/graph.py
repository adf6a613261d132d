"""Construction of the positively-weighted directed graph solved by MFAS.

Edges are stored with a canonical direction: an edge whose weight is negative is flipped and its weight negated, so
that every stored edge points from the node that comes earlier along the projection direction to the one that comes
later.

References:
- Kyle Wilson and Noah Snavely, "Robust Global Translations with 1DSfM", ECCV 2014.
- https://github.com/borglab/gtsam/blob/develop/gtsam/sfm/MFAS.h
"""

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Hashable, Iterator, Mapping, Sequence, Set, Tuple, Union

import numpy as np
from gtsam import Unit3

import onedsfm.utils.logger as logger_utils
from onedsfm.mfas.errors import DegenerateInput, InvalidGraph

logger = logger_utils.get_logger()

Node = Hashable
KeyPair = Tuple[Node, Node]
Direction = Union[Unit3, np.ndarray, Sequence[float]]

# Norm below which a direction cannot be normalized. Also used to decide whether two parallel edge weights agree.
DEGENERACY_TOLERANCE = 1e-9


@dataclass(frozen=True)
class WeightedDirectedGraph:
    """An immutable directed graph with non-negative edge weights.

    The node sequence is not copied: it is owned by the caller and may be shared by many graphs (e.g. one per
    projection direction). The caller must not mutate it while any graph built on it is in use.

    Args:
        nodes: nodes in the graph.
        edge_weights: read-only map from (from, to) to a non-negative weight, iterated in sorted key order.
    """

    nodes: Sequence[Node]
    edge_weights: Mapping[KeyPair, float]

    @property
    def num_nodes(self) -> int:
        return len(self.nodes)

    @property
    def num_edges(self) -> int:
        return len(self.edge_weights)

    def edges(self) -> Iterator[Tuple[Node, Node, float]]:
        """Iterates over (from, to, weight) triplets in sorted key order."""
        for (i, j), weight in self.edge_weights.items():
            yield i, j, weight

    def total_weight(self) -> float:
        return math.fsum(self.edge_weights.values())


def to_unit_vector(direction: Direction, tolerance: float = DEGENERACY_TOLERANCE) -> np.ndarray:
    """Normalizes a direction given as a Unit3 or a 3-vector.

    Args:
        direction: direction to normalize.
        tolerance: minimum allowed norm of the direction.

    Returns:
        Unit-norm numpy array of shape (3,).

    Raises:
        DegenerateInput: if the direction is not 3-dimensional, not finite, or too short to normalize.
    """
    if isinstance(direction, Unit3):
        vector = np.asarray(direction.point3(), dtype=float)
    else:
        vector = np.asarray(direction, dtype=float)

    if vector.shape != (3,):
        raise DegenerateInput(f"Expected a 3D direction, got an array of shape {vector.shape}.")
    if not np.all(np.isfinite(vector)):
        raise DegenerateInput(f"Direction {vector} is not finite.")
    norm = np.linalg.norm(vector)
    if norm <= tolerance:
        raise DegenerateInput(f"Direction {vector} has norm {norm:.3e}, cannot normalize it.")
    return vector / norm


def validate_nodes(nodes: Sequence[Node]) -> Set[Node]:
    """Checks that all nodes are unique and returns them as a set."""
    node_set = set(nodes)
    if len(node_set) != len(nodes):
        raise InvalidGraph(f"Node set has {len(nodes) - len(node_set)} duplicated node(s).")
    return node_set


def _check_edge(i: Node, j: Node, node_set: Set[Node]) -> None:
    if i == j:
        raise InvalidGraph(f"Self-loop on node {i} is not allowed.")
    for node in (i, j):
        if node not in node_set:
            raise InvalidGraph(f"Edge ({i}, {j}) references node {node} which is not in the node set.")


def _add_canonical_edge(edge_weights: Dict[KeyPair, float], i: Node, j: Node, weight: float) -> None:
    """Adds the edge with its canonical direction, merging it with a parallel edge if the weights agree."""
    if weight < 0:
        i, j, weight = j, i, -weight

    if (i, j) in edge_weights:
        existing_weight = edge_weights[(i, j)]
        if abs(existing_weight - weight) > DEGENERACY_TOLERANCE:
            raise InvalidGraph(
                f"Edge ({i}, {j}) appears with conflicting weights {existing_weight} and {weight}."
            )
        return
    edge_weights[(i, j)] = weight


def _freeze(nodes: Sequence[Node], edge_weights: Dict[KeyPair, float]) -> WeightedDirectedGraph:
    try:
        sorted_keys = sorted(edge_weights)
    except TypeError as e:
        raise InvalidGraph(f"Nodes must be mutually comparable for a deterministic ordering: {e}") from e
    frozen_weights = MappingProxyType({key: edge_weights[key] for key in sorted_keys})
    return WeightedDirectedGraph(nodes=nodes, edge_weights=frozen_weights)


def build_graph_from_edge_weights(
    nodes: Sequence[Node], edge_weights: Mapping[KeyPair, float]
) -> WeightedDirectedGraph:
    """Builds the graph from signed edge weights.

    Args:
        nodes: nodes in the graph.
        edge_weights: map from (from, to) to a signed weight. Negative weights are flipped to the reverse edge.

    Returns:
        Graph with non-negative edge weights.

    Raises:
        InvalidGraph: on duplicated nodes, self-loops, edges with unknown endpoints, non-finite or conflicting weights.
    """
    node_set = validate_nodes(nodes)
    canonical_weights: Dict[KeyPair, float] = {}
    for (i, j), weight in edge_weights.items():
        _check_edge(i, j, node_set)
        weight = float(weight)
        if not math.isfinite(weight):
            raise InvalidGraph(f"Edge ({i}, {j}) has non-finite weight {weight}.")
        _add_canonical_edge(canonical_weights, i, j, weight)

    return _freeze(nodes, canonical_weights)


def project_translations(
    relative_translations: Mapping[KeyPair, Direction], projection_direction: Direction
) -> Dict[KeyPair, float]:
    """Computes the signed weight of every measurement by projecting it onto the projection direction.

    Raises:
        DegenerateInput: if the projection direction or a measurement cannot be normalized.
    """
    projection_unit = to_unit_vector(projection_direction)
    return {
        key: float(np.dot(to_unit_vector(direction), projection_unit))
        for key, direction in relative_translations.items()
    }


def build_graph_from_translations(
    nodes: Sequence[Node], relative_translations: Mapping[KeyPair, Direction], projection_direction: Direction
) -> WeightedDirectedGraph:
    """Builds the graph by projecting relative translation directions onto a projection direction.

    The measurement (i, j) is the direction from node i to node j. Its weight is positive when j is further than i
    along the projection direction; otherwise the edge is stored as (j, i) with the negated weight.

    Args:
        nodes: nodes in the graph.
        relative_translations: map from (i, j) to the measured direction from i to j.
        projection_direction: direction along which the measurements are projected.

    Returns:
        Graph with non-negative edge weights.

    Raises:
        DegenerateInput: if the projection direction or a measurement cannot be normalized.
        InvalidGraph: on duplicated nodes, self-loops, edges with unknown endpoints, or conflicting measurements.
    """
    graph = build_graph_from_edge_weights(nodes, project_translations(relative_translations, projection_direction))
    logger.debug(
        "Built MFAS graph with %d nodes and %d edges from %d measurements.",
        graph.num_nodes,
        graph.num_edges,
        len(relative_translations),
    )
    return graph

