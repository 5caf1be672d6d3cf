# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

from math import exp, sqrt
import numpy as np
import amalgam.common.typing as tp
from amalgam.common.decorators import Registry


registry: Registry[tp.Callable[[np.ndarray], float]] = Registry()


@registry.register
def sphere(x: np.ndarray) -> float:
    """The most classical continuous optimization testbed.

    If you do not solve that one then you have a bug."""
    assert x.ndim == 1
    return float(x.dot(x))


@registry.register
def rastrigin(x: np.ndarray) -> float:
    """Classical multimodal function."""
    cosi = float(np.sum(np.cos(2 * np.pi * x)))
    return float(10 * (len(x) - cosi) + sphere(x))


@registry.register
def rosenbrock(x: np.ndarray) -> float:
    x_m_1 = x[:-1] - 1
    x_diff = x[:-1] ** 2 - x[1:]
    return float(100 * x_diff.dot(x_diff) + x_m_1.dot(x_m_1))


@registry.register
def ackley(x: np.ndarray) -> float:
    dim = x.size
    sum_cos = np.sum(np.cos(2 * np.pi * x))
    return -20.0 * exp(-0.2 * sqrt(sphere(x) / dim)) - exp(sum_cos / dim) + 20 + exp(1)


@registry.register
def griewank(x: np.ndarray) -> float:
    """Multimodal function, often used in Bayesian optimization."""
    part1 = sphere(x)
    part2 = np.prod(np.cos(x / np.sqrt(1 + np.arange(len(x)))))
    return 1 + (float(part1) / 4000.0) - float(part2)


@registry.register
def himmelblau(x: np.ndarray) -> float:
    """Two-dimensional function with four global minima (all equal to 0),
    a standard niching testbed.
    """
    assert x.size == 2, "Himmelblau function is only defined in dimension 2"
    return float((x[0] ** 2 + x[1] - 11) ** 2 + (x[0] + x[1] ** 2 - 7) ** 2)


@registry.register
def sixhumpcamelback(x: np.ndarray) -> float:
    """Two-dimensional function with six local minima, two of them global
    (about -1.0316 at (0.0898, -0.7126) and (-0.0898, 0.7126)).
    Usually searched on [-3, 3] x [-2, 2].
    """
    assert x.size == 2, "Six-hump camel back function is only defined in dimension 2"
    p0s = x[0] ** 2
    p1s = x[1] ** 2
    return float((4.0 - 2.1 * p0s + p0s ** 2 / 3.0) * p0s + x[0] * x[1] + (-4.0 + 4.0 * p1s) * p1s)
