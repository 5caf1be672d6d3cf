# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import numpy as np
import amalgam.common.typing as tp
from amalgam.optimization.solution import Solution
from . import corefuncs


class FitnessFunction:
    """Box-constrained minimization problem, evaluated on solutions.

    Subclasses must set :code:`number_of_parameters` and implement
    :code:`get_param_bounds` and :code:`define_problem_evaluation`,
    which fills in the :code:`f` and :code:`penalty` fields of a solution
    (penalty 0 means feasible).

    Parameters
    ----------
    number_of_parameters: int
        dimension of the problem
    maximum_number_of_evaluations: int
        evaluation budget available for solving the problem

    Note
    ----
    Use :code:`evaluate` rather than :code:`define_problem_evaluation`, it keeps
    track of the number of evaluations.
    """

    def __init__(self, number_of_parameters: int, maximum_number_of_evaluations: int = 10000) -> None:
        assert number_of_parameters > 0, "There must be at least one parameter"
        self.number_of_parameters = int(number_of_parameters)
        self.maximum_number_of_evaluations = int(maximum_number_of_evaluations)
        self.number_of_evaluations = 0

    @property
    def name(self) -> str:
        return self.__class__.__name__

    def get_param_bounds(self) -> tp.Tuple[np.ndarray, np.ndarray]:
        raise NotImplementedError

    def define_problem_evaluation(self, solution: Solution) -> None:
        raise NotImplementedError

    def evaluate(self, solution: Solution) -> None:
        self.define_problem_evaluation(solution)
        self.number_of_evaluations += 1

    @property
    def remaining_evaluations(self) -> int:
        return max(0, self.maximum_number_of_evaluations - self.number_of_evaluations)

    def __repr__(self) -> str:
        return f"{self.name}(dimension={self.number_of_parameters}, evaluations={self.number_of_evaluations})"


class ArtificialFitness(FitnessFunction):
    """Wraps a callable into a fitness function with box constraints.

    Parameters
    ----------
    function: callable or str
        function taking a 1d array and returning either its value, or a tuple
        (value, penalty). A string is looked up in the core functions registry.
    lower: array-like
        lower bounds of the parameters
    upper: array-like
        upper bounds of the parameters
    maximum_number_of_evaluations: int
        evaluation budget
    """

    def __init__(
        self,
        function: tp.Union[str, tp.Callable[[np.ndarray], tp.Evaluation]],
        lower: tp.ArrayLike,
        upper: tp.ArrayLike,
        maximum_number_of_evaluations: int = 10000,
    ) -> None:
        self._lower = np.array(lower, dtype=float, copy=True)
        self._upper = np.array(upper, dtype=float, copy=True)
        assert self._lower.ndim == 1 and self._lower.shape == self._upper.shape, "Bounds must be 1d arrays of same size"
        assert np.all(self._lower <= self._upper), "Lower bounds must not exceed upper bounds"
        super().__init__(self._lower.size, maximum_number_of_evaluations)
        if isinstance(function, str):
            self._name = function
            function = corefuncs.registry[function]
        else:
            self._name = getattr(function, "__name__", function.__class__.__name__)
        assert callable(function)
        self._function = function

    @property
    def name(self) -> str:
        return self._name

    def get_param_bounds(self) -> tp.Tuple[np.ndarray, np.ndarray]:
        return self._lower.copy(), self._upper.copy()

    def define_problem_evaluation(self, solution: Solution) -> None:
        output = self._function(solution.param)
        if isinstance(output, tuple):
            value, penalty = output
        else:
            value, penalty = output, 0.0
        solution.f = float(value)
        solution.penalty = float(penalty)


class SixHumpCamelBack(ArtificialFitness):
    """The 2D six-hump camel back function on [-3, 3] x [-2, 2]
    """

    def __init__(self, maximum_number_of_evaluations: int = 10000) -> None:
        super().__init__(corefuncs.sixhumpcamelback, [-3.0, -2.0], [3.0, 2.0], maximum_number_of_evaluations)

    @property
    def name(self) -> str:
        return "SixHumpCamelBack"
