# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import typing as tp
from . import errors


X = tp.TypeVar("X")


# pylint does not understand Dict[str, X],
# so we reimplement the MutableMapping interface
class Registry(tp.MutableMapping[str, X]):
    """Registers objective functions or configured optimizers by name.
    """

    def __init__(self) -> None:
        super().__init__()
        self.data: tp.Dict[str, X] = {}

    def register(self, obj: X) -> X:
        """Decorator method for registering functions/classes under their own name
        """
        name = getattr(obj, "__name__", obj.__class__.__name__)
        self.register_name(name, obj)
        return obj

    def register_name(self, name: str, obj: X) -> None:
        """Register an object with a provided name
        """
        if name in self:
            raise errors.AmalgamRuntimeError(f'Encountered a name collision "{name}"')
        self[name] = obj

    def unregister(self, name: str) -> None:
        """Remove a previously-registered object, e.g. so you can
        re-register it in a notebook.
        """
        if name in self:
            del self[name]

    def __getitem__(self, key: str) -> X:
        return self.data[key]

    def __setitem__(self, key: str, value: X) -> None:
        self.data[key] = value

    def __delitem__(self, key: str) -> None:
        del self.data[key]

    def __iter__(self) -> tp.Iterator[str]:
        return iter(self.data)

    def __len__(self) -> int:
        return len(self.data)
