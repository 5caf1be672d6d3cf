# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

"""Numerical kernel of the univariate Gaussian model: factorization of
the (diagonal) covariance matrix and sampling within box constraints.
All functions are stateless, randomness is pulled from the provided random state.
"""

import numpy as np
from scipy import linalg
import amalgam.common.typing as tp
from amalgam.common import errors


# number of normal draws tried before falling back to uniform sampling
MAX_NORMAL_SAMPLING_ATTEMPTS = 100


def cholesky_decomposition_univariate(covariance: np.ndarray) -> np.ndarray:
    """Lower triangular factor of a covariance matrix restricted to its diagonal.
    Off-diagonal terms of the input are ignored.
    """
    variances = np.diagonal(covariance)
    if np.any(variances < 0):
        raise errors.AmalgamValueError(f"Variances must be non-negative (got {variances})")
    return np.diag(np.sqrt(variances))


def matrix_lower_triangular_inverse(matrix: np.ndarray) -> np.ndarray:
    """Inverse of a lower triangular matrix.

    Diagonal matrices are inverted coefficient-wise, with null coefficients
    mapped to 0 (so that collapsed dimensions do not contribute to
    standardized distances). Other matrices must be invertible.
    """
    matrix = np.asarray(matrix, dtype=float)
    diagonal = np.diagonal(matrix)
    if not np.count_nonzero(matrix - np.diag(diagonal)):
        inverse = np.zeros_like(diagonal)
        nonzero = diagonal != 0
        inverse[nonzero] = 1.0 / diagonal[nonzero]
        return np.diag(inverse)
    return linalg.solve_triangular(matrix, np.identity(matrix.shape[0]), lower=True)


def in_range(sample: np.ndarray, lower: np.ndarray, upper: np.ndarray) -> bool:
    """Checks that the sample lies within the bounds (included)"""
    return bool(np.all(sample >= lower) and np.all(sample <= upper))


def boundary_repair(sample: np.ndarray, lower: np.ndarray, upper: np.ndarray) -> bool:
    """Clips the sample inplace into the bounds, and returns whether it was
    modified or not
    """
    repaired = not in_range(sample, lower, upper)
    if repaired:
        np.clip(sample, lower, upper, out=sample)
    return repaired


def sample_uniform(lower: np.ndarray, upper: np.ndarray, rng: tp.RandomSourceLike) -> np.ndarray:
    return np.asarray(rng.uniform(lower, upper), dtype=float)


def sample_normal_univariate(
    mean: np.ndarray,
    cholesky: np.ndarray,
    lower: np.ndarray,
    upper: np.ndarray,
    rng: tp.RandomSourceLike,
) -> tp.Tuple[np.ndarray, int]:
    """Samples from N(mean, cholesky . cholesky^T) until the sample is within bounds.

    Parameters
    ----------
    mean: np.ndarray
        center of the distribution
    cholesky: np.ndarray
        diagonal (lower triangular) factor of the covariance matrix
    lower: np.ndarray
        lower bounds
    upper: np.ndarray
        upper bounds
    rng: RandomState
        the random source

    Returns
    -------
    np.ndarray
        the sample
    int
        the number of normal draws used. After MAX_NORMAL_SAMPLING_ATTEMPTS failed draws,
        the sample is drawn uniformly within the bounds instead.
    """
    scales = np.diagonal(cholesky)
    for attempt in range(1, MAX_NORMAL_SAMPLING_ATTEMPTS + 1):
        sample = mean + scales * rng.normal(0.0, 1.0, size=mean.size)
        if in_range(sample, lower, upper):
            return sample, attempt
    return sample_uniform(lower, upper, rng), MAX_NORMAL_SAMPLING_ATTEMPTS
