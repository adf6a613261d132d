"""Utilities for performing graph operations on the view graph."""

from typing import Hashable, List, Tuple

import networkx as nx

import onedsfm.utils.logger as logger_utils

logger = logger_utils.get_logger()


def get_nodes_in_largest_connected_component(edges: List[Tuple[Hashable, Hashable]]) -> List[Hashable]:
    """Finds the nodes in the largest connected component of the bidirectional graph defined by the input edges.

    Args:
        edges: Edges of the bi-directional graph.

    Returns:
        Nodes in the largest connected component of the input graph.
    """
    if len(edges) == 0:
        return []

    input_graph = nx.Graph()
    input_graph.add_edges_from(edges)

    # Log the sizes of the connected components.
    cc_sizes = sorted((len(x) for x in nx.connected_components(input_graph)), reverse=True)
    logger.info("Connected component sizes: %s nodes.", str(cc_sizes))

    largest_cc_nodes = max(nx.connected_components(input_graph), key=len)
    return list(input_graph.subgraph(largest_cc_nodes).nodes())
