# Copyright (c) Meta Platforms, Inc. and affiliates.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import time
import logging
import numpy as np
import pytest
from amalgam.functions import ArtificialFitness
from amalgam.common import errors
from . import univariate
from . import callbacks


def _make_optimizer(budget: int = 1000) -> univariate._AmalgamUnivariate:
    func = ArtificialFitness("sphere", [-1.0, -1.0], [1.0, 1.0], maximum_number_of_evaluations=budget)
    return univariate.AMaLGaMUnivariate(2, [-1.0, -1.0], [1.0, 1.0], 1.0, func, random_state=np.random.RandomState(12))


def test_generation_logger(caplog: pytest.LogCaptureFixture) -> None:
    optim = _make_optimizer()
    logger = logging.getLogger("amalgam.test")
    optim.register_callback("generation", callbacks.GenerationLogger(logger=logger, log_interval_generations=2))
    with caplog.at_level(logging.INFO, logger="amalgam.test"):
        optim.minimize(max_generations=5)
    messages = [record.getMessage() for record in caplog.records if record.name == "amalgam.test"]
    assert len(messages) == 2
    assert messages[0].startswith("After 2 generation(s) of AMaLGaM-Univariate, best is Solution<f: ")
    assert messages[1].startswith("After 4 generation(s)")


def test_early_stopping() -> None:
    optim = _make_optimizer()
    early_stopping = callbacks.EarlyStopping(lambda opt: opt.number_of_generations > 2)
    optim.register_callback("generation", early_stopping)
    optim.minimize()
    assert optim.number_of_generations == 3
    with pytest.raises(errors.AmalgamEarlyStopping):
        early_stopping(optim)


def test_duration_criterion() -> None:
    optim = _make_optimizer()
    criterion = callbacks._DurationCriterion(0.01)
    assert not criterion(optim)
    time.sleep(0.02)
    assert criterion(optim)
    assert not callbacks.EarlyStopping.timer(100)(optim)


def test_no_improvement_stopper() -> None:
    optim = _make_optimizer()
    criterion = callbacks._FitnessImprovementToleranceCriterion(3)
    optim.best.f = 1.0
    assert not criterion(optim)
    for generation in range(1, 3):
        optim.number_of_generations = generation
        assert not criterion(optim)
    optim.number_of_generations = 3
    assert criterion(optim)
    optim.best.f = 0.5  # improvement resets the window
    assert not criterion(optim)
    optim.number_of_generations = 6
    assert criterion(optim)


def _rounded_sphere(x: np.ndarray) -> float:
    return float(np.round(x.dot(x), 2))


def test_no_improvement_stopper_in_minimize() -> None:
    func = ArtificialFitness(_rounded_sphere, [-1.0, -1.0], [1.0, 1.0], maximum_number_of_evaluations=100000)
    optim = univariate.AMaLGaMUnivariate(2, [-1.0, -1.0], [1.0, 1.0], 1.0, func, random_state=np.random.RandomState(12))
    optim.configure(fitness_std_tolerance=0.0)  # the plateau must not deactivate the optimizer
    optim.register_callback("generation", callbacks.EarlyStopping.no_improvement_stopper(5))
    best = optim.minimize(max_generations=2000)
    assert best.f == 0
    assert optim.active
    assert optim.number_of_generations < 2000
