# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import typing as tp
import numpy as np
from amalgam.common import testing
from . import corefuncs


@testing.parametrized(**{name: (name, func) for name, func in corefuncs.registry.items()})
def testcorefuncs_function(name: str, func: tp.Callable[..., tp.Any]) -> None:
    x = np.random.normal(0, 1, 2)
    outputs = []
    for _ in range(2):
        np.random.seed(12)
        outputs.append(func(x))
    np.testing.assert_equal(outputs[0], outputs[1], f"Function {name} is not deterministic")
    assert isinstance(outputs[0], float)


@testing.parametrized(
    sphere=(corefuncs.sphere, 30, [1, 2, 3, 4]),
    rosenbrock=(corefuncs.rosenbrock, 2705, [1, 2, 3, 4]),
    rosenbrock_opt=(corefuncs.rosenbrock, 0, [1, 1, 1]),
    rastrigin=(corefuncs.rastrigin, 0, [0, 0, 0]),
    ackley=(corefuncs.ackley, 0, [0, 0]),
    griewank=(corefuncs.griewank, 0, [0, 0, 0]),
    himmelblau=(corefuncs.himmelblau, 0, [3, 2]),
    sixhump_origin=(corefuncs.sixhumpcamelback, 0, [0, 0]),
    sixhump_ones=(corefuncs.sixhumpcamelback, 3.233333, [1, 1]),
    sixhump_opt=(corefuncs.sixhumpcamelback, -1.031628, [0.0898, -0.7126]),
)
def test_core_function_values(
    func: tp.Callable[[np.ndarray], float], expected: float, data: tp.List[float]
) -> None:
    value = func(np.array(data, dtype=float))
    np.testing.assert_almost_equal(value, expected, decimal=5)
