# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import numpy as np
from . import tools


class _Configured:

    def __init__(self, x: float = 1.0, y: str = "blublu", _hidden: int = 0) -> None:
        self.x = x
        self.y = y
        self._hidden = _hidden


def test_different_from_defaults() -> None:
    instance = _Configured(x=2.0, _hidden=3)
    np.testing.assert_equal(tools.different_from_defaults(instance=instance), {"x": 2.0})
    np.testing.assert_equal(tools.different_from_defaults(instance=_Configured()), {})


def test_different_from_defaults_mismatch() -> None:
    instance = _Configured()
    config = {"x": 1.0, "y": "blublu", "_hidden": 0}
    np.testing.assert_equal(tools.different_from_defaults(instance=instance, instance_dict=config, check_mismatches=True), {})
    np.testing.assert_raises(
        RuntimeError, tools.different_from_defaults, instance=instance, instance_dict={"x": 1.0}, check_mismatches=True
    )
