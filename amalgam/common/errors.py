# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

# base classes


class AmalgamError(Exception):
    """Base class for error raised by amalgam"""


class AmalgamWarning(Warning):
    pass


# errors
# pylint: disable=too-many-ancestors


class AmalgamEarlyStopping(StopIteration, AmalgamError):
    """Stops the generation loop if raised"""


class AmalgamRuntimeError(RuntimeError, AmalgamError):
    """Runtime error raised by amalgam"""


class AmalgamValueError(ValueError, AmalgamError):
    """Value error raised by amalgam"""


# warnings


class AmalgamRuntimeWarning(RuntimeWarning, AmalgamWarning):
    """Runtime warning raised by amalgam"""


class InefficientSettingsWarning(AmalgamRuntimeWarning):
    """Optimization settings are not optimal for the optimizer"""
