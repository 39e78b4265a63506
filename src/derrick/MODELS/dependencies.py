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
Models for the dependencies a container declares on other containers.
"""
from typing import List
from enum import Enum
from pydantic import BaseModel


class DependencyKind(str, Enum):
    """
    Kinds of dependency edges, also used as cascade filters.
    """
    NONE = "none"
    ALL = "all"
    LINK = "link"
    NET = "net"
    VOLUMES_FROM = "volumesFrom"


class Dependencies(BaseModel):
    """
    Normalized dependencies of a single container.

    ``all`` holds every referenced container once, links first, then
    volumes-from sources, then the net container.
    """
    all: List[str] = []
    link: List[str] = []
    volumes_from: List[str] = []
    net: str = ""

    def includes(self, needle: str) -> bool:
        """
        Checks whether the given name is a dependency of any kind.
        """
        return self.includes_as_kind(needle, DependencyKind.ALL)

    def includes_as_kind(self, needle: str, kind: DependencyKind) -> bool:
        """
        Checks whether the given name is a dependency of the given kind.
        """
        return needle in self.for_kind(kind)

    def for_kind(self, kind: DependencyKind) -> List[str]:
        """
        Returns the dependencies of a certain kind.

        :param kind: Kind of dependency; ``none`` yields nothing.
        :return: Container names, in declaration order.
        """
        kind = DependencyKind(kind)
        if kind == DependencyKind.ALL:
            return list(self.all)
        if kind == DependencyKind.LINK:
            return list(self.link)
        if kind == DependencyKind.VOLUMES_FROM:
            return list(self.volumes_from)
        if kind == DependencyKind.NET:
            return [self.net] if self.net else []
        return []

    def must_run(self, needle: str) -> bool:
        """
        Checks whether the given dependency has to be running.
        Link and net dependencies must run, volumes-from sources only need to exist.
        """
        if self.net and needle == self.net:
            return True
        return needle in self.link

    def satisfied(self) -> bool:
        """
        True when no unresolved dependency is left.
        """
        return len(self.all) == 0

    def remove(self, resolved: str):
        """
        Removes the given name from ``all``.
        """
        self.all = [name for name in self.all if name != resolved]
