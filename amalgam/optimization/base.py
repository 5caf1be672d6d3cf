# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import pickle
import logging
import warnings
from pathlib import Path
import numpy as np
import amalgam.common.typing as tp
from amalgam.common import tools as amtools
from amalgam.common import errors
from amalgam.common.decorators import Registry
from .solution import Solution
from .population import Population


logger = logging.getLogger(__name__)
registry: Registry["ConfiguredOptimizer"] = Registry()
_GenerationCallBack = tp.Callable[["LocalOptimizer"], None]
X = tp.TypeVar("X", bound="LocalOptimizer")


def load(cls: tp.Type[X], filepath: tp.PathLike) -> X:
    """Loads a pickle file and checks that it contains an optimizer.
    """
    filepath = Path(filepath)
    with filepath.open("rb") as f:
        opt = pickle.load(f)
    assert isinstance(opt, cls), f"You should only load {cls} with this method (found {type(opt)})"
    return opt


class LocalOptimizer:  # pylint: disable=too-many-instance-attributes
    """Population-based local search engine, to be driven generation
    by generation (possibly by an outer multi-start framework):

    - :code:`initialize_from_population(population)` seeds the search with an evaluated population.
    - :code:`estimate_sample_parameters()` estimates the search distribution from the population.
    - :code:`sample_new_population(sample_size)` samples, evaluates and selects a new generation.
    - :code:`check_termination_condition()` updates the :code:`active` flag.

    :code:`step` chains the three last ones, and :code:`minimize` runs whole searches.

    This class is abstract, subclasses implement the estimation/sampling/termination
    methods as well as :code:`clone` and :code:`recommended_popsize`.

    Parameters
    ----------
    number_of_parameters: int
        dimension of the problem
    lower_param_bounds: array-like
        lower bounds of the parameters
    upper_param_bounds: array-like
        upper bounds of the parameters
    init_univariate_bandwidth: float
        scale of the initial search distribution (used for degenerate populations)
    fitness_function: FitnessFunction
        the problem to minimize (see :code:`amalgam.functions`)
    random_state: np.random.RandomState (optional)
        random source owned by this optimizer. A new one is seeded if not provided.
    """

    # names of the settings which can be updated through "configure"
    _TUNABLES: tp.Tuple[str, ...] = (
        "selection_fraction",
        "maximum_no_improvement_stretch",
        "param_std_tolerance",
        "fitness_std_tolerance",
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
        self.number_of_parameters = int(number_of_parameters)
        self.lower_param_bounds = np.array(lower_param_bounds, dtype=float, copy=True)
        self.upper_param_bounds = np.array(upper_param_bounds, dtype=float, copy=True)
        for bounds in (self.lower_param_bounds, self.upper_param_bounds):
            assert bounds.shape == (self.number_of_parameters,), f"Bounds must have shape ({number_of_parameters},)"
        assert np.all(self.lower_param_bounds <= self.upper_param_bounds), "Lower bounds must not exceed upper bounds"
        assert init_univariate_bandwidth > 0, "Initial bandwidth must be positive"
        self.init_univariate_bandwidth = float(init_univariate_bandwidth)
        self.fitness_function = fitness_function
        if random_state is None:
            seed = np.random.randint(2 ** 32, dtype=np.uint32)
            random_state = np.random.RandomState(seed)
        self.random_state = random_state
        self.name = self.__class__.__name__  # printed name in repr
        # instance state
        self.active = True
        self.number_of_generations = 0
        self.pop = Population()
        self.best = Solution(self.number_of_parameters)
        self.average_fitness_history: tp.List[float] = []
        # settings common to the family
        self.selection_fraction = 0.35
        self.maximum_no_improvement_stretch = self.number_of_parameters + 25
        self.param_std_tolerance = 1e-15
        self.fitness_std_tolerance = 1e-12
        self._callbacks: tp.Dict[str, tp.List[_GenerationCallBack]] = {}

    @property
    def _rng(self) -> np.random.RandomState:
        """np.random.RandomState: random state the optimizer must pull from."""
        return self.random_state

    @property
    def dimension(self) -> int:
        """int: Dimension of the optimization space."""
        return self.number_of_parameters

    def configure(self, **tunables: tp.Any) -> None:
        """Updates settings of the optimizer. This is only possible before the first generation.

        Parameters
        ----------
        **tunables: Any
            new values of the settings, eg: :code:`optimizer.configure(apply_ams=False)`
        """
        if self.number_of_generations:
            raise errors.AmalgamRuntimeError(
                f"Settings of {self.name} cannot be changed after {self.number_of_generations} generation(s)"
            )
        unknown = set(tunables) - set(self._TUNABLES)
        if unknown:
            raise errors.AmalgamValueError(f"Unknown setting(s) {sorted(unknown)} (available: {sorted(self._TUNABLES)})")
        for name, value in tunables.items():
            setattr(self, name, value)

    def tunables(self) -> tp.Dict[str, tp.Any]:
        return {name: getattr(self, name) for name in self._TUNABLES}

    # # # # # capabilities to be implemented by the variants # # # # #

    def initialize_from_population(self, population: Population) -> None:
        raise NotImplementedError

    def estimate_sample_parameters(self) -> None:
        raise NotImplementedError

    def sample_new_population(self, sample_size: int) -> int:
        raise NotImplementedError

    def check_termination_condition(self) -> bool:
        raise NotImplementedError

    def recommended_popsize(self, problem_dimension: int) -> int:
        raise NotImplementedError

    def clone(self: X, random_state: tp.Optional[np.random.RandomState] = None) -> X:
        raise NotImplementedError

    # # # # # generation loop # # # # #

    def register_callback(self, name: str, callback: _GenerationCallBack) -> None:
        """Add a callback method called at the end of each generation, with the optimizer as
        only argument. This can be useful for custom logging.

        Parameters
        ----------
        name: str
            name of the event to register the callback for (only :code:`generation`)
        callback: callable
            a callable taking the optimizer as argument
        """
        assert name in ["generation"], f'Only "generation" can have callbacks (not {name})'
        self._callbacks.setdefault(name, []).append(callback)

    def remove_all_callbacks(self) -> None:
        """Removes all registered callables"""
        self._callbacks = {}

    def selection_size(self, sample_size: int) -> int:
        """Number of best solutions kept after sampling, for the next estimation"""
        return max(1, int(self.selection_fraction * sample_size))

    def step(self, sample_size: tp.Optional[int] = None, truncate: bool = True) -> int:
        """Runs one generation: estimation of the distribution, sampling of a new population,
        truncation selection and update of the termination state.

        Parameters
        ----------
        sample_size: int (optional)
            size of the new population (defaults to the recommended population size)
        truncate: bool
            whether to keep only the best solutions (see :code:`selection_size`) for the next estimation.
            Deactivate it if selection is performed by an outer framework.

        Returns
        -------
        int
            the number of evaluations performed during this generation
        """
        if not self.active:
            raise errors.AmalgamRuntimeError(f"{self.name} is not active anymore, it cannot run another generation")
        if not len(self.pop):
            raise errors.AmalgamRuntimeError(f"{self.name} must be initialized from a population first")
        if sample_size is None:
            sample_size = self.recommended_popsize(self.dimension)
        self.estimate_sample_parameters()
        evaluations = self.sample_new_population(sample_size)
        if truncate:
            self.pop.truncate(self.selection_size(sample_size))
        if self.check_termination_condition():
            logger.debug("%s deactivated at generation %s (best: %s)", self.name, self.number_of_generations, self.best)
        for callback in self._callbacks.get("generation", []):
            callback(self)
        return evaluations

    def minimize(
        self,
        population: tp.Optional[Population] = None,
        budget: tp.Optional[int] = None,
        sample_size: tp.Optional[int] = None,
        max_generations: tp.Optional[int] = None,
    ) -> Solution:
        """Runs generations until the optimizer deactivates, the budget is exhausted,
        the maximum number of generations is reached or an early stopping callback is triggered.

        Parameters
        ----------
        population: Population (optional)
            evaluated initial population. If not provided and the optimizer was not initialized yet,
            a uniform population of recommended size is sampled and evaluated.
        budget: int (optional)
            maximum number of evaluations for this run (defaults to the remaining evaluations
            of the fitness function). Generations are never interrupted, so the
            last one may exceed the budget.
        sample_size: int (optional)
            size of the sampled populations (defaults to the size of the population
            the optimizer starts from)
        max_generations: int (optional)
            maximum number of generations for this run

        Returns
        -------
        Solution
            a copy of the best solution found
        """
        evaluations = 0
        if population is not None:
            recommended = self.recommended_popsize(self.dimension)
            if len(population) < recommended:
                warnings.warn(
                    f"Population size {len(population)} is smaller than the recommended size {recommended}",
                    errors.InefficientSettingsWarning,
                )
            self.initialize_from_population(population)
        elif not len(self.pop):
            population = Population()
            population.fill_uniform(
                self.recommended_popsize(self.dimension), self.lower_param_bounds, self.upper_param_bounds, self._rng
            )
            evaluations += population.evaluate(self.fitness_function)
            self.initialize_from_population(population)
        if budget is None:
            budget = evaluations + self.fitness_function.remaining_evaluations
        if sample_size is None:
            sample_size = max(len(self.pop), self.recommended_popsize(self.dimension))
        generations = 0
        while self.active and evaluations < budget:
            if max_generations is not None and generations >= max_generations:
                break
            try:
                evaluations += self.step(sample_size)
            except errors.AmalgamEarlyStopping:
                logger.debug("Early stopping of %s after %s generation(s)", self.name, self.number_of_generations)
                break
            generations += 1
        return self.best.copy()

    def dump(self, filepath: tp.Union[str, Path]) -> None:
        """Pickles the optimizer into a file."""
        filepath = Path(filepath)
        with filepath.open("wb") as f:
            pickle.dump(self, f)

    @classmethod
    def load(cls: tp.Type[X], filepath: tp.Union[str, Path]) -> X:
        """Loads a pickle and checks that the class is correct."""
        return load(cls, filepath)

    def __repr__(self) -> str:
        return (
            f"Instance of {self.name}(dimension={self.dimension}, generations={self.number_of_generations}, "
            f"active={self.active})"
        )


class ConfiguredOptimizer:
    """Creates optimizer instances with configuration.

    Parameters
    ----------
    OptimizerClass: type
        class of the optimizer to configure
    config: dict
        dictionnary of all the configurations, provided as kwargs to the optimizer instantiation

    Note
    ----
    This provides a default repr which can be bypassed through set_name
    """

    def __init__(self, OptimizerClass: tp.Type[LocalOptimizer], config: tp.Dict[str, tp.Any]) -> None:
        self._OptimizerClass = OptimizerClass
        config.pop("self", None)  # self comes from "locals()"
        config.pop("__class__", None)  # self comes from "locals()"
        self._config = config  # keep all, to avoid weird behavior at mismatch between optim and configoptim
        diff = amtools.different_from_defaults(instance=self, instance_dict=config, check_mismatches=True)
        params = ", ".join(f"{x}={y!r}" for x, y in sorted(diff.items()))
        self.name = f"{self.__class__.__name__}({params})"

    def config(self) -> tp.Dict[str, tp.Any]:
        return dict(self._config)

    def __call__(
        self,
        number_of_parameters: int,
        lower_param_bounds: tp.ArrayLike,
        upper_param_bounds: tp.ArrayLike,
        init_univariate_bandwidth: float,
        fitness_function: tp.Any,
        random_state: tp.Optional[np.random.RandomState] = None,
    ) -> LocalOptimizer:
        """Creates an optimizer for the problem

        Parameters
        ----------
        number_of_parameters: int
            dimension of the problem
        lower_param_bounds: array-like
            lower bounds of the parameters
        upper_param_bounds: array-like
            upper bounds of the parameters
        init_univariate_bandwidth: float
            scale of the initial search distribution
        fitness_function: FitnessFunction
            the problem to minimize
        random_state: np.random.RandomState (optional)
            random source owned by the optimizer
        """
        run = self._OptimizerClass(
            number_of_parameters,
            lower_param_bounds,
            upper_param_bounds,
            init_univariate_bandwidth,
            fitness_function,
            random_state=random_state,
        )
        run.configure(**{x: y for x, y in self._config.items() if y is not None})
        run.name = self.name
        return run

    def __repr__(self) -> str:
        return self.name

    def set_name(self, name: str, register: bool = False) -> "ConfiguredOptimizer":
        """Set a new representation for the instance"""
        self.name = name
        if register:
            registry.register_name(name, self)
        return self

    def load(self, filepath: tp.Union[str, Path]) -> LocalOptimizer:
        """Loads a pickle and checks that it is an optimizer of the configured class."""
        return self._OptimizerClass.load(filepath)

    def __eq__(self, other: tp.Any) -> tp.Any:
        if self.__class__ == other.__class__:
            if self._config == other._config:
                return True
        return False
