"""Minimum feedback arc set solver for 1DSfM outlier rejection."""

from onedsfm.mfas.errors import DegenerateInput, InvalidGraph, MfasError, UnknownNode
from onedsfm.mfas.graph import (
    KeyPair,
    Node,
    WeightedDirectedGraph,
    build_graph_from_edge_weights,
    build_graph_from_translations,
)
from onedsfm.mfas.mfas import MFAS
from onedsfm.mfas.ordering import compute_ordering
from onedsfm.mfas.outliers import compute_outlier_weights, ordering_to_ranks

__all__ = [
    "MFAS",
    "DegenerateInput",
    "InvalidGraph",
    "KeyPair",
    "MfasError",
    "Node",
    "UnknownNode",
    "WeightedDirectedGraph",
    "build_graph_from_edge_weights",
    "build_graph_from_translations",
    "compute_ordering",
    "compute_outlier_weights",
    "ordering_to_ranks",
]
