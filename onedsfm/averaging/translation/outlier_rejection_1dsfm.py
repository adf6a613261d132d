"""Outlier rejection for relative translation directions using 1DSfM.

Relative translation directions are projected onto many 1D subspaces. For each projection direction an MFAS instance
orders the cameras along that direction, and the measurements pointing backward in the ordering get a non-zero outlier
weight. Measurements whose outlier weight, averaged over all directions, is above a threshold are rejected.

References:
- https://research.cs.cornell.edu/1dsfm/
- https://github.com/wilsonkl/SfM_Init
"""

import timeit
from collections import defaultdict
from enum import Enum
from typing import Any, DefaultDict, Dict, List, Mapping, Sequence, Set, Tuple, Union

import dask
import numpy as np
from distributed.worker import get_client
from gtsam import Unit3

import onedsfm.utils.graph as graph_utils
import onedsfm.utils.logger as logger_utils
import onedsfm.utils.sampling as sampling_utils
from onedsfm.mfas import MFAS, DegenerateInput, InvalidGraph, KeyPair, Node
from onedsfm.mfas.graph import Direction, to_unit_vector

# Hyperparameters for 1D-SFM
# maximum number of times 1dsfm will project the Unit3's to a 1d subspace for outlier rejection
MAX_PROJECTION_DIRECTIONS = 2000
OUTLIER_WEIGHT_THRESHOLD = 0.125

# Heuristically set to limit the number of delayed tasks, as recommended by Dask:
# https://docs.dask.org/en/stable/delayed-best-practices.html#avoid-too-many-tasks
MAX_DELAYED_CALLS = 16

logger = logger_utils.get_logger()

RelativeDirectionsDict = Dict[KeyPair, Direction]
UnitDirectionsDict = Dict[KeyPair, np.ndarray]


class OutlierRejection1DSfM:
    """Rejects outlier relative translation directions with 1DSfM's MFAS voting scheme."""

    class ProjectionSamplingMethod(str, Enum):
        """Used to select how the projection directions in 1DSfM are sampled."""

        # The string values for enums enable using them in the config.

        # Randomly choose projection directions from input measurements.
        SAMPLE_INPUT_MEASUREMENTS = "SAMPLE_INPUT_MEASUREMENTS"
        # Fit a Gaussian density to input measurements and sample from it.
        SAMPLE_WITH_INPUT_DENSITY = "SAMPLE_WITH_INPUT_DENSITY"
        # Uniformly sample 3D directions at random.
        SAMPLE_WITH_UNIFORM_DENSITY = "SAMPLE_WITH_UNIFORM_DENSITY"

    def __init__(
        self,
        max_projection_directions: int = MAX_PROJECTION_DIRECTIONS,
        outlier_weight_threshold: float = OUTLIER_WEIGHT_THRESHOLD,
        projection_sampling_method: Union[str, ProjectionSamplingMethod] = (
            ProjectionSamplingMethod.SAMPLE_WITH_UNIFORM_DENSITY
        ),
        max_delayed_calls: int = MAX_DELAYED_CALLS,
        prune_to_largest_connected_component: bool = False,
        seed: int = 0,
    ) -> None:
        """Initializes the 1DSfM outlier rejection.

        Args:
            max_projection_directions: Number of projection directions to sample (at most the number of measurements
                when sampling from the input measurements).
            outlier_weight_threshold: Measurements with a mean outlier weight above this are outliers.
            projection_sampling_method: ProjectionSamplingMethod to be used for directions to run 1DSfM.
            max_delayed_calls: Maximum number of concurrent delayed tasks to create.
            prune_to_largest_connected_component: Whether to keep only the inliers in the largest connected component
                of the inlier view graph.
            seed: Seed for sampling the projection directions.
        """
        if max_projection_directions <= 0:
            raise ValueError(f"max_projection_directions must be positive, got {max_projection_directions}.")
        if max_delayed_calls <= 0:
            raise ValueError(f"max_delayed_calls must be positive, got {max_delayed_calls}.")

        self._max_1dsfm_projection_directions = max_projection_directions
        self._outlier_weight_threshold = outlier_weight_threshold
        self._projection_sampling_method = self.ProjectionSamplingMethod(projection_sampling_method)
        self._max_delayed_calls = max_delayed_calls
        self._prune_to_largest_connected_component = prune_to_largest_connected_component
        self._seed = seed

    @property
    def outlier_weight_threshold(self) -> float:
        return self._outlier_weight_threshold

    @property
    def projection_sampling_method(self) -> ProjectionSamplingMethod:
        return self._projection_sampling_method

    def __sample_projection_directions(self, measurements: List[Unit3]) -> List[Unit3]:
        """Samples projection directions for 1DSfM based on the provided sampling method.

        Args:
            measurements: List of unit translations to be used for biasing sampling.
            Used only if the sampling method is SAMPLE_INPUT_MEASUREMENTS or SAMPLE_WITH_INPUT_DENSITY.

        Returns:
            List of sampled Unit3 projection directions.
        """
        rng = np.random.default_rng(self._seed)
        num_samples = self._max_1dsfm_projection_directions

        if self._projection_sampling_method == self.ProjectionSamplingMethod.SAMPLE_INPUT_MEASUREMENTS:
            return sampling_utils.sample_measurement_directions(measurements, num_samples, rng=rng)
        elif self._projection_sampling_method == self.ProjectionSamplingMethod.SAMPLE_WITH_INPUT_DENSITY:
            try:
                return sampling_utils.sample_kde_directions(measurements, num_samples=num_samples, rng=rng)
            except (ValueError, np.linalg.LinAlgError) as e:
                # Too few measurements, or measurements on a curve or a point of the sphere.
                logger.warning(
                    "Cannot fit a density to %d measurements, sampling uniformly instead: %s", len(measurements), e
                )
                return sampling_utils.sample_random_directions(num_samples=num_samples, rng=rng)
        elif self._projection_sampling_method == self.ProjectionSamplingMethod.SAMPLE_WITH_UNIFORM_DENSITY:
            return sampling_utils.sample_random_directions(num_samples=num_samples, rng=rng)
        else:
            raise ValueError("Unsupported sampling method!")

    @staticmethod
    def _normalize_measurements(relative_translations: Mapping[KeyPair, Direction]) -> UnitDirectionsDict:
        """Validates the measurements once, before they are shared by all MFAS instances.

        Raises:
            DegenerateInput: if a measurement cannot be normalized.
            InvalidGraph: if a measurement is a self-loop, or a pair is measured in both directions.
        """
        unit_translations: UnitDirectionsDict = {}
        for (i, j), direction in relative_translations.items():
            if i == j:
                raise InvalidGraph(f"Measurement ({i}, {j}) is a self-loop.")
            if (j, i) in relative_translations:
                raise InvalidGraph(f"Pair ({i}, {j}) is measured in both directions.")
            unit_translations[(i, j)] = to_unit_vector(direction)
        return unit_translations

    @staticmethod
    def run_mfas(
        nodes: Sequence[Node],
        relative_translations: Mapping[KeyPair, Direction],
        directions: Sequence[Direction],
    ) -> List[Dict[KeyPair, float]]:
        """Runs MFAS on a batch of directions.

        Args:
            nodes: Nodes of the view graph, shared by all MFAS instances.
            relative_translations: Relative translation directions (i, j) -> direction from i to j.
            directions: Projection directions.

        Returns:
            For every projection direction that is not degenerate, the outlier weight of every measurement, keyed by
            the measurement's own (i, j) pair.
        """
        results = []
        for direction in directions:
            try:
                mfas = MFAS.from_translations(nodes, relative_translations, direction)
            except DegenerateInput as e:
                logger.warning("Skipping projection direction: %s", e)
                continue

            outlier_weights = mfas.compute_outlier_weights()
            results.append(
                {(i, j): outlier_weights.get((i, j), outlier_weights.get((j, i))) for (i, j) in relative_translations}
            )
        return results

    def compute_outlier_weights(self, relative_translations: Mapping[KeyPair, Direction]) -> Dict[KeyPair, float]:
        """Computes the outlier weight of every measurement, averaged over all projection directions.

        Args:
            relative_translations: Relative translation directions (i, j) -> direction from i to j.

        Returns:
            Mean outlier weight of every measurement.

        Raises:
            DegenerateInput: if a measurement is degenerate, or if every projection direction was degenerate.
            InvalidGraph: if a measurement is a self-loop or a pair is measured in both directions.
        """
        if len(relative_translations) == 0:
            return {}

        unit_translations = self._normalize_measurements(relative_translations)
        try:
            nodes = tuple(sorted({node for pair in unit_translations for node in pair}))
        except TypeError as e:
            raise InvalidGraph(f"Nodes must be mutually comparable: {e}") from e

        # Sample directions for projection
        projection_directions = self.__sample_projection_directions(
            [Unit3(direction) for direction in unit_translations.values()]
        )

        # Scatter data to all workers if client available.
        try:
            client = get_client()
            future_nodes, future_unit_translations = client.scatter([nodes, unit_translations], broadcast=True)
        except ValueError:  # allows use without initializing client.
            logger.info("No Dask client found... Running without scattering.")
            future_nodes, future_unit_translations = nodes, unit_translations

        batch_size = int(np.ceil(len(projection_directions) / self._max_delayed_calls))
        batched_outlier_weights: List[Any] = []
        for j in range(0, len(projection_directions), batch_size):
            batched_outlier_weights.append(
                dask.delayed(self.run_mfas)(
                    future_nodes,
                    future_unit_translations,
                    [direction.point3() for direction in projection_directions[j : j + batch_size]],
                )
            )

        # Compute outlier weights in parallel.
        start_time = timeit.default_timer()
        batched_outlier_weights = dask.compute(*batched_outlier_weights)
        logger.info(
            "⏱️ Computed outlier weights using MFAS for %d directions in %.2f seconds.",
            len(projection_directions),
            timeit.default_timer() - start_time,
        )

        outlier_weights_sum: DefaultDict[KeyPair, float] = defaultdict(float)
        num_directions = 0
        for batch_outlier_weights in batched_outlier_weights:
            for outlier_weight_dict in batch_outlier_weights:
                num_directions += 1
                for key, weight in outlier_weight_dict.items():
                    outlier_weights_sum[key] += weight

        if num_directions == 0:
            raise DegenerateInput("All sampled projection directions were degenerate.")
        if num_directions < len(projection_directions):
            logger.warning("Used %d of %d projection directions.", num_directions, len(projection_directions))

        return {key: outlier_weights_sum[key] / num_directions for key in unit_translations}

    def compute_inliers(
        self, relative_translations: Mapping[KeyPair, Direction]
    ) -> Tuple[RelativeDirectionsDict, Set[Node]]:
        """Performs inlier detection for the relative direction measurements.

        Args:
            relative_translations: Relative translation directions (i, j) -> direction from i to j.

        Returns:
            Tuple of:
            inlier_translations: Subset of the input measurements which are inliers.
            inlier_nodes: Set of nodes with at least one inlier measurement.
        """
        mean_outlier_weights = self.compute_outlier_weights(relative_translations)

        inlier_keys = [
            key for key, weight in mean_outlier_weights.items() if weight < self._outlier_weight_threshold
        ]
        if self._prune_to_largest_connected_component:
            largest_cc_nodes = set(graph_utils.get_nodes_in_largest_connected_component(inlier_keys))
            inlier_keys = [(i, j) for (i, j) in inlier_keys if i in largest_cc_nodes and j in largest_cc_nodes]

        inlier_translations = {key: relative_translations[key] for key in inlier_keys}
        inlier_nodes: Set[Node] = {node for key in inlier_keys for node in key}
        logger.info(
            "1DSfM found %d inliers among %d measurements, on %d nodes.",
            len(inlier_translations),
            len(relative_translations),
            len(inlier_nodes),
        )
        return inlier_translations, inlier_nodes
