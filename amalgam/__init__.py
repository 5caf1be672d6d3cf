# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

from .common import typing as typing
from .common import errors as errors
from . import optimization as optimization
from .optimization import registry as optimizers
from .optimization import callbacks as callbacks
from .optimization import Solution as Solution
from .optimization import Population as Population
from . import functions as functions


__all__ = ["optimization", "optimizers", "callbacks", "functions", "errors", "typing", "Solution", "Population"]


__version__ = "0.1.0"
