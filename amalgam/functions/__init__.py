# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

from .base import FitnessFunction as FitnessFunction
from .base import ArtificialFitness as ArtificialFitness
from .base import SixHumpCamelBack as SixHumpCamelBack
from . import corefuncs as corefuncs
