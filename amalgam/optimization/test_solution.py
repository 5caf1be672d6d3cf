# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import pickle
import numpy as np
from amalgam.common import testing
from .solution import Solution


def _solution(f: float, penalty: float = 0.0) -> Solution:
    sol = Solution(2)
    sol.f = f
    sol.penalty = penalty
    return sol


def test_solution_defaults() -> None:
    sol = Solution(3)
    np.testing.assert_array_equal(sol.param, [0, 0, 0])
    assert sol.dimension == 3
    assert sol.f == float("inf")
    assert sol.feasible
    assert not sol.elite
    assert sol.cluster_number == -1
    assert sol.multiplier == 1.0


def test_solution_copies_its_parameters() -> None:
    param = np.array([1.0, 2.0])
    sol = Solution(param)
    param[0] = 12
    np.testing.assert_array_equal(sol.param, [1, 2])


@testing.parametrized(
    fitness=(_solution(1.0), _solution(2.0), True),
    same_fitness=(_solution(1.0), _solution(1.0), False),
    feasible_first=(_solution(12.0), _solution(1.0, penalty=1.0), True),
    infeasible_last=(_solution(1.0, penalty=1.0), _solution(12.0), False),
    penalties=(_solution(12.0, penalty=1.0), _solution(1.0, penalty=2.0), True),
)
def test_better_than(first: Solution, second: Solution, expected: bool) -> None:
    assert first.better_than(second) == expected
    if expected:
        assert first.sort_key() < second.sort_key()


def test_copy_is_independent() -> None:
    sol = _solution(3.0)
    clone = sol.copy()
    clone.param[0] = 12
    clone.f = 1.0
    assert sol.param[0] == 0
    assert sol.f == 3.0


def test_param_distance() -> None:
    sol = Solution([0.0, 0.0])
    assert sol.param_distance(Solution([3.0, 4.0])) == 5.0
    assert sol.param_distance([0.0, 1.0]) == 1.0


def test_repr_and_pickle() -> None:
    sol = _solution(2.5)
    assert repr(sol).startswith("Solution<f: 2.5, penalty: 0.0")
    other = pickle.loads(pickle.dumps(sol))
    np.testing.assert_array_equal(other.param, sol.param)
    assert other.f == sol.f
