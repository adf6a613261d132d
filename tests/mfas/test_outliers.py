"""Unit tests for classifying edges with respect to an ordering."""

import unittest

import onedsfm.mfas.outliers as outlier_utils
from onedsfm.mfas.errors import InvalidGraph, UnknownNode
from onedsfm.mfas.graph import build_graph_from_edge_weights


class TestOutlierWeights(unittest.TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.graph = build_graph_from_edge_weights((0, 1, 2), {(0, 1): 5.0, (1, 2): 3.0, (2, 0): 1.0})

    def test_backward_edges_keep_their_weight(self) -> None:
        outlier_weights = outlier_utils.compute_outlier_weights(self.graph, [0, 1, 2])
        self.assertDictEqual(outlier_weights, {(0, 1): 0.0, (1, 2): 0.0, (2, 0): 1.0})

    def test_reverse_ordering(self) -> None:
        outlier_weights = outlier_utils.compute_outlier_weights(self.graph, [2, 1, 0])
        self.assertDictEqual(outlier_weights, {(0, 1): 5.0, (1, 2): 3.0, (2, 0): 0.0})

    def test_same_keys_as_graph(self) -> None:
        outlier_weights = outlier_utils.compute_outlier_weights(self.graph, [1, 0, 2])
        self.assertSetEqual(set(outlier_weights.keys()), set(self.graph.edge_weights.keys()))
        for key, weight in outlier_weights.items():
            self.assertIn(weight, (0.0, self.graph.edge_weights[key]))

    def test_missing_node(self) -> None:
        with self.assertRaises(UnknownNode):
            outlier_utils.compute_outlier_weights(self.graph, [0, 1])

    def test_missing_node_is_a_key_error(self) -> None:
        with self.assertRaises(KeyError):
            outlier_utils.compute_outlier_weights(self.graph, [0, 2])

    def test_empty(self) -> None:
        graph = build_graph_from_edge_weights((), {})
        self.assertDictEqual(outlier_utils.compute_outlier_weights(graph, []), {})


class TestOrderingToRanks(unittest.TestCase):
    def test_ranks_are_positions(self) -> None:
        self.assertDictEqual(outlier_utils.ordering_to_ranks(["b", "c", "a"]), {"b": 0, "c": 1, "a": 2})

    def test_duplicated_node(self) -> None:
        with self.assertRaises(InvalidGraph):
            outlier_utils.ordering_to_ranks([0, 1, 0])


if __name__ == "__main__":
    unittest.main()
