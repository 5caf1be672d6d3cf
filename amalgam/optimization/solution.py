# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import copy
import numpy as np
import amalgam.common.typing as tp


class Solution:
    """Candidate point of the search space, with its evaluation outcome.

    Parameters
    ----------
    param: int or array-like
        either the dimension of the problem (the parameters are then set to 0)
        or the parameter values

    Note
    ----
    Solutions are handled as values: populations store copies
    (see :code:`copy`) and never share a solution with another container.
    """

    def __init__(self, param: tp.Union[int, tp.ArrayLike]) -> None:
        if isinstance(param, (int, np.integer)):
            self.param = np.zeros(int(param))
        else:
            self.param = np.array(param, dtype=float, copy=True)
        assert self.param.ndim == 1, f"Parameters must be a 1d array (got shape {self.param.shape})"
        self.param_transformed = np.zeros(self.param.size)
        self.f = float("inf")
        self.penalty = 0.0
        self.elite = False
        self.time_obtained = 0.0
        self.feval_obtained = 0
        self.generation_obtained = 0
        self.cluster_number = -1
        self.multiplier = 1.0
        self.norm_tab_dis = 0.0  # diversity distance

    @property
    def dimension(self) -> int:
        return self.param.size

    @property
    def feasible(self) -> bool:
        return self.penalty <= 0

    def better_than(self, other: "Solution") -> bool:
        """Returns True if this solution is strictly better than the other one:
        feasible solutions are compared on fitness, infeasible ones on penalty,
        and any feasible solution beats an infeasible one.
        """
        if self.penalty > 0:
            if other.penalty > 0:
                return self.penalty < other.penalty
            return False
        if other.penalty > 0:
            return True
        return self.f < other.f

    def sort_key(self) -> tp.Tuple[int, float]:
        """Key consistent with :code:`better_than`, for sorting fittest first"""
        if self.penalty > 0:
            return (1, self.penalty)
        return (0, self.f)

    def param_distance(self, other: tp.Union["Solution", tp.ArrayLike]) -> float:
        """Euclidean distance between the parameters of both solutions"""
        param = other.param if isinstance(other, Solution) else np.asarray(other, dtype=float)
        return float(np.linalg.norm(self.param - param))

    def copy(self) -> "Solution":
        return copy.deepcopy(self)

    def __repr__(self) -> str:
        return f"Solution<f: {self.f}, penalty: {self.penalty}, param: {self.param}>"
