# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import typing as tp
import numpy as np
from . import testing


def test_printed_assert_equal() -> None:
    testing.printed_assert_equal(0, 0)
    np.testing.assert_raises(AssertionError, testing.printed_assert_equal, 0, 1)


@testing.parametrized(
    inside=([[0, 0], [1, -2]], False),
    on_bounds=([[-1, -2], [1, 2]], False),
    outside_upper=([[0, 0], [1.5, 0]], True),
    outside_lower=([[0, -2.1]], True),
)
def test_assert_within_bounds(points: tp.List[tp.List[float]], should_fail: bool) -> None:
    try:
        testing.assert_within_bounds(points, [-1, -2], [1, 2])
    except AssertionError as error:
        if not should_fail:
            raise AssertionError("An error has been raised while it should not.")
        assert "outside of the bounds" in error.args[0]
    else:
        if should_fail:
            raise AssertionError("An error should have been raised.")


@testing.parametrized(
    val1=(1, 2, 3),
    val2=(4, 5, 9),
)
def test_parametrized(x: int, y: int, expected: int) -> None:
    np.testing.assert_equal(x + y, expected)
