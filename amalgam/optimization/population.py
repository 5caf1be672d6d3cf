# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import numpy as np
import amalgam.common.typing as tp
from .solution import Solution
from . import sampling


class Population:
    """Ordered collection of solutions, with the statistics required
    by the distribution estimation.

    Parameters
    ----------
    solutions: iterable of Solution
        initial solutions (they are copied)

    Note
    ----
    The population owns its solutions: solutions are copied in, never aliased.
    """

    def __init__(self, solutions: tp.Iterable[Solution] = ()) -> None:
        self.sols: tp.List[Solution] = []
        self.add_solutions(solutions)

    def add_solutions(self, solutions: tp.Iterable[Solution]) -> None:
        self.sols.extend(s.copy() for s in solutions)

    def __len__(self) -> int:
        return len(self.sols)

    def __getitem__(self, index: int) -> Solution:
        return self.sols[index]

    def __iter__(self) -> tp.Iterator[Solution]:
        return iter(self.sols)

    def __repr__(self) -> str:
        return f"Population<size: {len(self)}>"

    def copy(self) -> "Population":
        return Population(self.sols)

    def first(self) -> Solution:
        return self.sols[0]

    def params(self) -> np.ndarray:
        """Parameters of all solutions, as a (size, dimension) array"""
        return np.array([s.param for s in self.sols], dtype=float)

    def fitnesses(self) -> np.ndarray:
        return np.array([s.f for s in self.sols], dtype=float)

    def sort_on_fitness(self) -> None:
        """Sorts inplace, fittest first (stable)"""
        self.sols.sort(key=Solution.sort_key)

    def truncate(self, size: int) -> None:
        """Keeps only the first size solutions (call after sorting for truncation selection)"""
        assert size > 0, "Cannot truncate a population to an empty one"
        del self.sols[size:]

    def mean(self) -> np.ndarray:
        return np.mean(self.params(), axis=0)

    def covariance_univariate(self, mean: np.ndarray) -> np.ndarray:
        """Diagonal covariance matrix of the parameters around the provided mean
        (maximum likelihood estimate, normalized by the population size)
        """
        centered = self.params() - mean
        return np.diag(np.mean(centered ** 2, axis=0))

    def average_fitness(self) -> float:
        return float(np.mean(self.fitnesses()))

    def relative_fitness_std(self) -> float:
        """Standard deviation of the fitness values, relative to their mean"""
        fitnesses = self.fitnesses()
        std = float(np.std(fitnesses))
        if std <= 0:
            return 0.0
        mean = abs(float(np.mean(fitnesses)))
        return std / mean if mean > 0 else float("inf")

    def improvement_over(self, threshold: float, index: int = 0) -> bool:
        """Whether the index-th solution has a fitness strictly below the threshold"""
        return self.sols[index].f < threshold

    def evaluate(self, fitness_function: tp.Any, skip_number_of_elites: int = 0) -> int:
        """Evaluates all solutions but the first skip_number_of_elites ones (which already hold
        their evaluation), and returns the number of evaluations
        """
        count = 0
        for solution in self.sols[skip_number_of_elites:]:
            fitness_function.evaluate(solution)
            count += 1
        return count

    def fill_uniform(self, sample_size: int, lower: np.ndarray, upper: np.ndarray, rng: tp.RandomSourceLike) -> None:
        """Replaces the content of the population by sample_size uniform samples within bounds"""
        self.sols = [Solution(sampling.sample_uniform(lower, upper, rng)) for _ in range(sample_size)]

    def fill_normal_univariate(
        self,
        sample_size: int,
        problem_size: int,
        mean: np.ndarray,
        cholesky: np.ndarray,
        lower: np.ndarray,
        upper: np.ndarray,
        number_of_elites: int,
        rng: tp.RandomSourceLike,
    ) -> int:
        """Keeps the first number_of_elites solutions and fills the rest of the
        population with samples of the univariate normal distribution, within bounds.

        Parameters
        ----------
        sample_size: int
            size of the population after sampling (elites included)
        problem_size: int
            dimension of the problem
        mean: np.ndarray
            mean of the distribution
        cholesky: np.ndarray
            diagonal factor of the covariance matrix of the distribution
        lower: np.ndarray
            lower bounds
        upper: np.ndarray
            upper bounds
        number_of_elites: int
            number of leading solutions which are preserved unmodified
        rng: RandomState
            random source

        Returns
        -------
        int
            the number of normal draws which were needed
        """
        assert mean.size == problem_size, f"Expected a mean of size {problem_size} but got {mean.size}"
        elites = self.sols[: min(number_of_elites, sample_size)]
        for elite in elites:
            elite.elite = True
        self.sols = elites
        number_of_draws = 0
        for _ in range(sample_size - len(elites)):
            param, draws = sampling.sample_normal_univariate(mean, cholesky, lower, upper, rng)
            number_of_draws += draws
            self.sols.append(Solution(param))
        return number_of_draws
