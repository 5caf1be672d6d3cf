# Copyright (c) Meta Platforms, Inc. and affiliates.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import time
import logging
import numpy as np
import amalgam.common.typing as tp
from amalgam.common import errors
from . import base

global_logger = logging.getLogger(__name__)

# -------------------------------------------------------------------------------------

class GenerationLogger:
    """Logger to register as "generation" callback in an optimizer, for logging
    the current best solution regularly.

    Parameters
    ----------
    logger:
        given logger that callback will use to log
    log_level:
        log level that logger will write to
    log_interval_generations: int
        max number of generations before performing another log
    log_interval_seconds:
        max number of seconds before performing another log
    """

    def __init__(
        self,
        *,
        logger: logging.Logger = global_logger,
        log_level: int = logging.INFO,
        log_interval_generations: int = 1,
        log_interval_seconds: float = 60.0,
    ) -> None:
        assert log_interval_generations > 0
        assert log_interval_seconds > 0
        self._logger = logger
        self._log_level = log_level
        self._log_interval_generations = int(log_interval_generations)
        self._log_interval_seconds = log_interval_seconds
        self._next_generation = self._log_interval_generations
        self._next_time = time.time() + log_interval_seconds

    def __call__(self, optimizer: base.LocalOptimizer) -> None:
        if time.time() >= self._next_time or optimizer.number_of_generations >= self._next_generation:
            self._next_time = time.time() + self._log_interval_seconds
            self._next_generation = optimizer.number_of_generations + self._log_interval_generations
            self._logger.log(
                self._log_level,
                "After %s generation(s) of %s, best is %s (active: %s)",
                optimizer.number_of_generations,
                optimizer.name,
                optimizer.best,
                optimizer.active,
            )

# -------------------------------------------------------------------------------------

class EarlyStopping:
    """Callback for stopping the :code:`minimize` method before the optimizer
    deactivates or the budget is fully used.

    Parameters
    ----------
    stopping_criterion: func(optimizer) -> bool
        function that takes the current optimizer as input and returns True
        if the minimization must be stopped

    Example
    -------
    In the following code, the :code:`minimize` method will be stopped after the 4th generation

    >>> early_stopping = callbacks.EarlyStopping(lambda opt: opt.number_of_generations > 3)
    >>> optimizer.register_callback("generation", early_stopping)
    >>> optimizer.minimize()

    Stopping as soon as the best fitness goes below a value to reach:

    >>> early_stopping = callbacks.EarlyStopping(lambda opt: opt.best.f < 1e-8)
    """

    def __init__(self, stopping_criterion: tp.Callable[[base.LocalOptimizer], bool]) -> None:
        self.stopping_criterion = stopping_criterion

    def __call__(self, optimizer: base.LocalOptimizer) -> None:
        if self.stopping_criterion(optimizer):
            raise errors.AmalgamEarlyStopping("Early stopping criterion is reached")

    @classmethod
    def timer(cls, max_duration: float) -> "EarlyStopping":
        """Early stop when max_duration seconds has been reached (from the first generation)"""
        return cls(_DurationCriterion(max_duration))

    @classmethod
    def no_improvement_stopper(cls, tolerance_window: int) -> "EarlyStopping":
        """Early stop when the best fitness did not decrease during tolerance_window generations"""
        return cls(_FitnessImprovementToleranceCriterion(tolerance_window))


class _DurationCriterion:
    def __init__(self, max_duration: float) -> None:
        self._start = float("inf")
        self._max_duration = max_duration

    def __call__(self, optimizer: base.LocalOptimizer) -> bool:
        if np.isinf(self._start):
            self._start = time.time()
        return time.time() > self._start + self._max_duration


class _FitnessImprovementToleranceCriterion:
    def __init__(self, tolerance_window: int) -> None:
        self._tolerance_window: int = tolerance_window
        self._best_value = float("inf")
        self._best_generation = 0

    def __call__(self, optimizer: base.LocalOptimizer) -> bool:
        if optimizer.best.f < self._best_value:
            self._best_value = optimizer.best.f
            self._best_generation = optimizer.number_of_generations
        return optimizer.number_of_generations - self._best_generation >= self._tolerance_window
