"""Unit tests for building the MFAS graph."""

import unittest

import numpy as np
from gtsam import Unit3

import onedsfm.mfas.graph as graph_utils
from onedsfm.mfas.errors import DegenerateInput, InvalidGraph

NODES = (0, 1, 2, 3)


class TestBuildGraphFromEdgeWeights(unittest.TestCase):
    def test_positive_weights_are_kept(self) -> None:
        graph = graph_utils.build_graph_from_edge_weights(NODES, {(2, 3): 1.5, (0, 1): 2.0})

        self.assertDictEqual(dict(graph.edge_weights), {(0, 1): 2.0, (2, 3): 1.5})
        self.assertEqual(graph.num_nodes, 4)
        self.assertEqual(graph.num_edges, 2)

    def test_negative_weights_are_flipped(self) -> None:
        """An edge with a negative weight is stored reversed, with the absolute weight."""
        graph = graph_utils.build_graph_from_edge_weights(NODES, {(0, 1): -2.0, (1, 2): 3.0})

        self.assertDictEqual(dict(graph.edge_weights), {(1, 0): 2.0, (1, 2): 3.0})
        for _, _, weight in graph.edges():
            self.assertGreaterEqual(weight, 0)

    def test_edges_are_iterated_in_sorted_order(self) -> None:
        graph = graph_utils.build_graph_from_edge_weights(NODES, {(3, 0): 1.0, (1, 2): 1.0, (0, 3): 2.0, (0, 1): 1.0})
        self.assertListEqual(list(graph.edge_weights.keys()), [(0, 1), (0, 3), (1, 2), (3, 0)])

    def test_consistent_parallel_edges_are_merged(self) -> None:
        graph = graph_utils.build_graph_from_edge_weights(NODES, {(0, 1): 2.0, (1, 0): -2.0})
        self.assertDictEqual(dict(graph.edge_weights), {(0, 1): 2.0})

    def test_conflicting_parallel_edges(self) -> None:
        with self.assertRaises(InvalidGraph):
            graph_utils.build_graph_from_edge_weights(NODES, {(0, 1): 2.0, (1, 0): -1.0})

    def test_self_loop(self) -> None:
        with self.assertRaises(InvalidGraph):
            graph_utils.build_graph_from_edge_weights(NODES, {(1, 1): 1.0})

    def test_unknown_node(self) -> None:
        with self.assertRaises(InvalidGraph):
            graph_utils.build_graph_from_edge_weights(NODES, {(0, 7): 1.0})

    def test_duplicated_nodes(self) -> None:
        with self.assertRaises(InvalidGraph):
            graph_utils.build_graph_from_edge_weights([0, 1, 1], {(0, 1): 1.0})

    def test_non_finite_weight(self) -> None:
        with self.assertRaises(InvalidGraph):
            graph_utils.build_graph_from_edge_weights(NODES, {(0, 1): np.nan})

    def test_graph_is_read_only(self) -> None:
        graph = graph_utils.build_graph_from_edge_weights(NODES, {(0, 1): 1.0})
        with self.assertRaises(TypeError):
            graph.edge_weights[(1, 2)] = 1.0  # type: ignore

    def test_nodes_are_shared(self) -> None:
        """The graph refers to the caller's node sequence instead of copying it."""
        graph = graph_utils.build_graph_from_edge_weights(NODES, {(0, 1): 1.0})
        self.assertIs(graph.nodes, NODES)


class TestBuildGraphFromTranslations(unittest.TestCase):
    def test_weights_are_projections(self) -> None:
        """Measurements pointing against the projection direction are flipped."""
        relative_translations = {
            (0, 1): Unit3(np.array([1.0, 0.0, 0.0])),
            (1, 2): Unit3(np.array([-1.0, 1.0, 0.0])),
            (2, 3): np.array([0.0, 0.0, 5.0]),
        }
        graph = graph_utils.build_graph_from_translations(NODES, relative_translations, np.array([2.0, 0.0, 0.0]))

        self.assertSetEqual(set(graph.edge_weights.keys()), {(0, 1), (2, 1), (2, 3)})
        self.assertAlmostEqual(graph.edge_weights[(0, 1)], 1.0)
        self.assertAlmostEqual(graph.edge_weights[(2, 1)], np.sqrt(0.5))
        self.assertAlmostEqual(graph.edge_weights[(2, 3)], 0.0)

    def test_degenerate_projection_direction(self) -> None:
        with self.assertRaises(DegenerateInput):
            graph_utils.build_graph_from_translations(NODES, {(0, 1): np.array([1.0, 0, 0])}, np.zeros(3))

    def test_degenerate_measurement(self) -> None:
        with self.assertRaises(DegenerateInput):
            graph_utils.build_graph_from_translations(
                NODES, {(0, 1): np.array([1e-12, 0, 0])}, np.array([1.0, 0.0, 0.0])
            )

    def test_non_3d_direction(self) -> None:
        with self.assertRaises(DegenerateInput):
            graph_utils.build_graph_from_translations(NODES, {(0, 1): np.array([1.0, 0.0])}, np.array([1.0, 0, 0]))


class TestToUnitVector(unittest.TestCase):
    def test_normalizes(self) -> None:
        np.testing.assert_allclose(graph_utils.to_unit_vector([0.0, 3.0, 4.0]), [0.0, 0.6, 0.8])

    def test_unit3(self) -> None:
        np.testing.assert_allclose(graph_utils.to_unit_vector(Unit3(np.array([0.0, 0.0, 2.0]))), [0.0, 0.0, 1.0])

    def test_not_finite(self) -> None:
        with self.assertRaises(DegenerateInput):
            graph_utils.to_unit_vector([np.inf, 0.0, 0.0])


if __name__ == "__main__":
    unittest.main()
