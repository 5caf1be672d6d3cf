# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

from .base import LocalOptimizer  # abstract class, for type checking
from .base import registry
from .solution import Solution
from .population import Population
from .univariate import AmalgamUnivariate
from .univariate import AMaLGaMUnivariate
