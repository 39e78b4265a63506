# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Tri-state booleans for options whose default depends on them being set at all.
"""
from typing import Any
from enum import Enum


class OptBool(str, Enum):
    """
    A boolean that can also be left undefined.
    """
    UNDEFINED = "undefined"
    TRUE = "true"
    FALSE = "false"

    @property
    def defined(self) -> bool:
        return self != OptBool.UNDEFINED

    def resolve(self, default: bool) -> bool:
        """
        Returns the boolean value, or ``default`` when undefined.
        """
        if self == OptBool.UNDEFINED:
            return default
        return self == OptBool.TRUE

    @classmethod
    def from_bool(cls, value: bool) -> "OptBool":
        return cls.TRUE if value else cls.FALSE

    @classmethod
    def from_json(cls, value: Any, present: bool = True) -> "OptBool":
        """
        Decodes a value read by the JSON decoder.

        JSON only knows ``true`` and ``false``; an absent key is undefined,
        an explicit ``null`` is rejected.

        :param value: Decoded value.
        :param present: Whether the key was present at all.
        :raises ValueError: If the value is not a boolean.
        """
        if not present:
            return cls.UNDEFINED
        if isinstance(value, bool):
            return cls.from_bool(value)
        raise ValueError(f"Expected a boolean, got {value!r}")

    @classmethod
    def from_yaml(cls, value: Any, present: bool = True) -> "OptBool":
        """
        Decodes a value read by the YAML loader.

        An absent key and an empty value (``key:``) are both undefined.

        :param value: Loaded value.
        :param present: Whether the key was present at all.
        :raises ValueError: If the value is not a boolean.
        """
        if not present or value is None:
            return cls.UNDEFINED
        if isinstance(value, bool):
            return cls.from_bool(value)
        raise ValueError(f"Expected a boolean, got {value!r}")
