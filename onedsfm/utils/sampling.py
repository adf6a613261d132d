"""Utilities for sampling projection directions for 1DSfM."""

from typing import List, Optional

import numpy as np
from gtsam import Unit3
from scipy import stats

import onedsfm.utils.coordinate_conversions as conversion_utils


def sample_random_directions(num_samples: int, rng: Optional[np.random.Generator] = None) -> List[Unit3]:
    """Samples `num_samples` Unit3 3D directions, uniformly on the sphere.

    Args:
        num_samples: Number of samples required.
        rng: Random number generator, a new unseeded one is used if not provided.

    Returns:
        List of sampled Unit3 directions.
    """
    rng = rng if rng is not None else np.random.default_rng()
    samples = rng.normal(size=(num_samples, 3))
    return [Unit3(sample) for sample in samples]


def sample_measurement_directions(
    measurements: List[Unit3], num_samples: int, rng: Optional[np.random.Generator] = None
) -> List[Unit3]:
    """Samples (without replacement) at most `num_samples` of the measurements as projection directions."""
    rng = rng if rng is not None else np.random.default_rng()
    num_samples = min(len(measurements), num_samples)
    sampled_indices = rng.choice(len(measurements), num_samples, replace=False)
    return [measurements[idx] for idx in sampled_indices]


def sample_kde_directions(
    measurements: List[Unit3],
    num_samples: int,
    max_kde_samples: int = 2000,
    rng: Optional[np.random.Generator] = None,
) -> List[Unit3]:
    """Fits a Gaussian density kernel to the provided measurements, and then samples num_samples from this kernel.

    The kernel is fit in spherical coordinates, see `cartesian_to_spherical_directions`.

    Args:
        measurements: List of Unit3 direction measurements.
        num_samples: Number of samples to be sampled from the kernel.
        max_kde_samples: Maximum number of measurements used to fit the kernel.
        rng: Random number generator, a new unseeded one is used if not provided.

    Returns:
        List of sampled Unit3 directions.
    """
    rng = rng if rng is not None else np.random.default_rng()
    if len(measurements) > max_kde_samples:
        sampled_idx = rng.choice(len(measurements), max_kde_samples, replace=False).tolist()
        measurements_subset = [measurements[i] for i in sampled_idx]
    else:
        measurements_subset = measurements

    measurements_spherical = conversion_utils.cartesian_to_spherical_directions(measurements_subset)

    # gaussian_kde expects each sample to be a column, hence transpose.
    kde = stats.gaussian_kde(measurements_spherical.T)
    sampled_directions_spherical = kde.resample(size=num_samples, seed=rng).T
    return conversion_utils.spherical_to_cartesian_directions(sampled_directions_spherical)
