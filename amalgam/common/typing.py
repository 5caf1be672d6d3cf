# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

"""Definitions of some convenient types.
"""
# pylint: disable=unused-import
# structures
from typing import Any as Any
from typing import Type as Type
from typing import TypeVar as TypeVar
from typing import Optional as Optional
from typing import Union as Union

# containers
from typing import Dict as Dict
from typing import Tuple as Tuple
from typing import List as List
from typing import Sequence as Sequence
from typing import MutableMapping as MutableMapping

# iterables
from typing import Iterator as Iterator
from typing import Iterable as Iterable

# others
from typing import Callable as Callable
from pathlib import Path as Path
from typing_extensions import Protocol

#
import numpy as _np


ArrayLike = Union[Tuple[float, ...], List[float], _np.ndarray]
PathLike = Union[str, Path]
# an objective either returns its value, or its value and a constraint penalty
Evaluation = Union[float, Tuple[float, float]]


# %% Protocol definitions for random sources

class RandomSourceLike(Protocol):
    # pylint: disable=pointless-statement, unused-argument

    def normal(self, loc: float = 0.0, scale: float = 1.0, size: Any = None) -> Any:
        ...

    def uniform(self, low: float = 0.0, high: float = 1.0, size: Any = None) -> Any:
        ...
