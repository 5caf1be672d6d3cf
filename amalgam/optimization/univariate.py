# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import copy
import logging
import numpy as np
import amalgam.common.typing as tp
from . import base
from . import sampling
from .solution import Solution
from .population import Population


logger = logging.getLogger(__name__)

# the multiplier update always uses this threshold, whatever "sample_succes_ratio_threshold" is set to
_SAMPLE_SUCCESS_RATIO_THRESHOLD = 0.10
_MINIMUM_MULTIPLIER = 1e-10
_MAX_AMS_ATTEMPTS = 100


# pylint: disable=too-many-instance-attributes
class _AmalgamUnivariate(base.LocalOptimizer):
    """AMaLGaM with a univariate (diagonal) Gaussian model.

    Each generation, a normal distribution with diagonal covariance is estimated from the
    population, and a new population is sampled from it. The best solution is always kept
    (elitism), a fraction of the samples is shifted along the recent mean shift
    (Anticipated Mean Shift, AMS), and the distribution multiplier scaling the covariance
    is adapted from the Standard-Deviation Ratio (SDR) of the improvements.
    """

    _TUNABLES = base.LocalOptimizer._TUNABLES + (
        "st_dev_ratio_threshold",
        "distribution_multiplier_decrease",
        "sample_succes_ratio_threshold",
        "delta_ams",
        "apply_ams",
    )

    def __init__(
        self,
        number_of_parameters: int,
        lower_param_bounds: tp.ArrayLike,
        upper_param_bounds: tp.ArrayLike,
        init_univariate_bandwidth: float,
        fitness_function: tp.Any,
        random_state: tp.Optional[np.random.RandomState] = None,
    ) -> None:
        super().__init__(
            number_of_parameters,
            lower_param_bounds,
            upper_param_bounds,
            init_univariate_bandwidth,
            fitness_function,
            random_state=random_state,
        )
        dim = self.number_of_parameters
        # distribution
        self.mean = np.zeros(dim)
        self.old_mean = np.zeros(dim)
        self.covariance = np.zeros((dim, dim))
        self.cholesky = np.zeros((dim, dim))
        self.inverse_cholesky = np.zeros((dim, dim))
        # step size control
        self.multiplier = 1.0
        self.no_improvement_stretch = 0
        # settings
        self.st_dev_ratio_threshold = 1.0
        self.distribution_multiplier_decrease = 0.9
        self.sample_succes_ratio_threshold = 0.1  # not read by the multiplier update
        self.delta_ams = 2.0
        self.apply_ams = True
        self.name = "AMaLGaM-Univariate"

    def clone(self, random_state: tp.Optional[np.random.RandomState] = None) -> "_AmalgamUnivariate":
        """Independent copy of the optimizer, which can then run on its own.
        The random state is copied as well (both instances then draw the same numbers)
        unless a new one is provided. The fitness function and callbacks are shared.
        """
        memo = {id(self.fitness_function): self.fitness_function, id(self._callbacks): {}}
        if random_state is not None:
            memo[id(self.random_state)] = random_state
        opt = copy.deepcopy(self, memo)
        opt._callbacks = {name: list(callbacks) for name, callbacks in self._callbacks.items()}
        return opt

    def initialize_from_population(self, population: Population) -> None:
        """Initializes the search from an evaluated population"""
        assert len(population), "Cannot initialize from an empty population"
        self.pop = population.copy()
        self.multiplier = 1.0
        self.no_improvement_stretch = 0
        self.old_mean = self.pop.mean()
        self.mean = self.old_mean.copy()
        self.pop.sort_on_fitness()
        self.best = self.pop.first().copy()

    def recommended_popsize(self, problem_dimension: int) -> int:
        return int(max(int(2.0 / self.selection_fraction + 1), 10.0 * np.sqrt(problem_dimension)))

    def estimate_sample_parameters(self) -> None:
        """Estimates the mean and the diagonal covariance of the (sorted) population,
        and the scaled cholesky factor used for sampling
        """
        self.old_mean = self.mean
        # focus on the best solution while the distribution shrinks
        if self.multiplier < 1.0:
            self.mean = self.pop.first().param.copy()
        else:
            self.mean = self.pop.mean()
        if len(self.pop) == 1:
            self.covariance = np.identity(self.dimension) * (0.01 * self.init_univariate_bandwidth)
        else:
            self.covariance = self.pop.covariance_univariate(self.mean)
        self.cholesky = sampling.cholesky_decomposition_univariate(self.covariance) * np.sqrt(self.multiplier)
        self.inverse_cholesky = sampling.matrix_lower_triangular_inverse(self.cholesky)

    def sample_new_population(self, sample_size: int) -> int:
        """Samples, evaluates and sorts a new population (the best solution is kept),
        then updates the distribution multiplier.

        Parameters
        ----------
        sample_size: int
            size of the new population, elite included

        Returns
        -------
        int
            the number of evaluations
        """
        number_of_samples = self.pop.fill_normal_univariate(
            sample_size,
            self.dimension,
            self.mean,
            self.cholesky,
            self.lower_param_bounds,
            self.upper_param_bounds,
            1,
            self._rng,
        )
        if self.apply_ams:
            ams_direction = self.mean - self.old_mean
            number_of_ams_solutions = int(0.5 * self.selection_fraction * sample_size)
            self.apply_ams_to_population(number_of_ams_solutions, self.delta_ams * self.multiplier, ams_direction)
        number_of_evaluations = self.pop.evaluate(self.fitness_function, skip_number_of_elites=1)
        for solution in self.pop.sols[1:]:
            solution.generation_obtained = self.number_of_generations
            solution.feval_obtained = self.fitness_function.number_of_evaluations
            solution.multiplier = self.multiplier
        self.pop.sort_on_fitness()
        # update of the step size
        improvement = self.pop.improvement_over(self.best.f)
        sdr = self.get_sdr(self.best, self.mean, self.inverse_cholesky)
        # the elite is not sampled
        sample_success_ratio = (sample_size - 1) / number_of_samples if number_of_samples else 1.0
        self.multiplier, self.no_improvement_stretch = self.update_distribution_multiplier(
            self.multiplier, improvement, self.no_improvement_stretch, sample_success_ratio, sdr
        )
        logger.debug(
            "%s generation %s: improvement=%s, sdr=%.3g, success ratio=%.3g, multiplier=%.3g",
            self.name,
            self.number_of_generations,
            improvement,
            sdr,
            sample_success_ratio,
            self.multiplier,
        )
        self.best = self.pop.first().copy()
        self.average_fitness_history.append(self.pop.average_fitness())
        self.number_of_generations += 1
        return number_of_evaluations

    def get_sdr(self, best: Solution, mean: np.ndarray, inverse_cholesky: np.ndarray) -> float:
        """Standard-Deviation Ratio: largest standardized distance between the mean and the
        average of the solutions improving over the previous best (0 if there are none).
        """
        improving = []
        for solution in self.pop:
            if not solution.f < best.f:
                break
            improving.append(solution.param)
        if not improving:
            return 0.0
        average_params = np.mean(improving, axis=0)
        return float(np.max(np.abs(inverse_cholesky.dot(average_params - mean))))

    def update_distribution_multiplier(
        self,
        multiplier: float,
        improvement: bool,
        no_improvement_stretch: int,
        sample_success_ratio: float,
        sdr: float,
    ) -> tp.Tuple[float, int]:
        """Computes the updated distribution multiplier and no-improvement stretch

        Parameters
        ----------
        multiplier: float
            current distribution multiplier
        improvement: bool
            whether the last generation improved over the previous best
        no_improvement_stretch: int
            current number of generations without improvement
        sample_success_ratio: float
            ratio of normal draws which were within bounds
        sdr: float
            standard-deviation ratio of the improvements

        Returns
        -------
        float
            the new multiplier
        int
            the new no-improvement stretch
        """
        # most samples out of bounds
        if sample_success_ratio < _SAMPLE_SUCCESS_RATIO_THRESHOLD:
            multiplier *= 0.5
        if improvement:
            no_improvement_stretch = 0
            multiplier = max(multiplier, 1.0)
            if sdr > self.st_dev_ratio_threshold:
                multiplier /= self.distribution_multiplier_decrease
        else:
            if multiplier <= 1.0:
                no_improvement_stretch += 1
            if multiplier > 1.0 or no_improvement_stretch >= self.maximum_no_improvement_stretch:
                multiplier *= self.distribution_multiplier_decrease
            if multiplier < 1.0 and no_improvement_stretch < self.maximum_no_improvement_stretch:
                multiplier = 1.0
        return multiplier, no_improvement_stretch

    def apply_ams_to_population(
        self, number_of_ams_solutions: int, ams_factor: float, ams_direction: np.ndarray
    ) -> None:
        """Shifts the first solutions (elite excluded) along the anticipated mean shift.
        The shift is halved until the solution is within bounds, and given up after
        a fixed number of attempts.
        """
        lower, upper = self.lower_param_bounds, self.upper_param_bounds
        for solution in self.pop.sols[1 : min(number_of_ams_solutions + 1, len(self.pop))]:
            sampling.boundary_repair(solution.param, lower, upper)
            shrink_factor = 2.0
            ams_params = solution.param + shrink_factor * ams_factor * ams_direction
            attempts = 0
            while attempts < _MAX_AMS_ATTEMPTS and not sampling.in_range(ams_params, lower, upper):
                attempts += 1
                shrink_factor *= 0.5
                ams_params -= shrink_factor * ams_factor * ams_direction
            if attempts < _MAX_AMS_ATTEMPTS:
                solution.param = ams_params

    def check_termination_condition(self) -> bool:
        """Updates the :code:`active` flag, and returns True if the optimizer must stop"""
        if not self.number_of_generations:
            self.active = True
            return False
        if not len(self.pop):
            self.active = False
            return True
        max_param_std = float(np.sqrt(np.max(np.diagonal(self.covariance))))
        mean_norm = float(np.max(np.abs(self.pop.mean())))
        if mean_norm <= 0:
            # the relative spread is undefined, so use the absolute one
            reason = "parameter std" if max_param_std < self.param_std_tolerance else ""
        else:
            reason = "relative parameter std" if max_param_std / mean_norm < self.param_std_tolerance else ""
        if not reason and len(self.pop) > 1 and self.pop.relative_fitness_std() < self.fitness_std_tolerance:
            reason = "relative fitness std"
        if not reason and self.multiplier < _MINIMUM_MULTIPLIER:
            reason = "distribution multiplier"
        if reason:
            logger.debug("%s terminates on %s", self.name, reason)
        self.active = not reason
        return not self.active


class AmalgamUnivariate(base.ConfiguredOptimizer):
    """AMaLGaM-Univariate local optimizer: estimation of distribution algorithm with
    a diagonal Gaussian model, elitism, Anticipated Mean Shift and adaptive step size.

    Parameters
    ----------
    selection_fraction: float
        fraction of the population used for AMS sizing and recommended population size
    st_dev_ratio_threshold: float
        SDR above which the distribution multiplier is increased after an improvement
    distribution_multiplier_decrease: float
        factor (< 1) for decreasing the multiplier (its inverse is used for increasing it)
    sample_succes_ratio_threshold: float
        kept for reference, the multiplier update uses a fixed threshold of 0.1
    param_std_tolerance: float
        termination tolerance on the relative standard deviation of the parameters
    fitness_std_tolerance: float
        termination tolerance on the relative standard deviation of the fitness
    maximum_no_improvement_stretch: Optional[int]
        number of generations without improvement before shrinking the distribution
        (default: dimension + 25)
    apply_ams: bool
        whether to apply the Anticipated Mean Shift
    delta_ams: float
        AMS step size
    """

    # pylint: disable=unused-argument
    def __init__(
        self,
        *,
        selection_fraction: float = 0.35,
        st_dev_ratio_threshold: float = 1.0,
        distribution_multiplier_decrease: float = 0.9,
        sample_succes_ratio_threshold: float = 0.1,
        param_std_tolerance: float = 1e-15,
        fitness_std_tolerance: float = 1e-12,
        maximum_no_improvement_stretch: tp.Optional[int] = None,
        apply_ams: bool = True,
        delta_ams: float = 2.0,
    ) -> None:
        super().__init__(_AmalgamUnivariate, locals())
        assert 0 < selection_fraction <= 1, "selection_fraction must be in ]0, 1]"
        assert 0 < distribution_multiplier_decrease < 1, "distribution_multiplier_decrease must be in ]0, 1["
        assert maximum_no_improvement_stretch is None or maximum_no_improvement_stretch > 0
        assert param_std_tolerance >= 0 and fitness_std_tolerance >= 0


AMaLGaMUnivariate = AmalgamUnivariate().set_name("AMaLGaM-Univariate", register=True)
NoAmsAMaLGaMUnivariate = AmalgamUnivariate(apply_ams=False).set_name("AMaLGaM-Univariate-NoAMS", register=True)
