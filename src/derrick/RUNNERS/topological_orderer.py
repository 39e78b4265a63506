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
Ordering of containers for startup and shutdown.
"""
import logging
from typing import Dict, List

from ..MODELS.container import ContainerMap
from ..MODELS.dependencies import Dependencies
from ..exceptions import CyclicDependencyError

logger = logging.getLogger(__name__)


class TopologicalOrderer:
    """
    Computes deterministic, dependency respecting orders over a set of containers.
    """
    def __init__(self, containers: ContainerMap):
        """
        :param containers: The containers to order. Dependencies on containers
            outside this set are ignored.
        """
        self.containers = containers

    def order(self, reversed: bool = False) -> List[str]:
        """
        Determines the order in which containers should be acted on.

        Containers are placed in sweeps: every sweep visits the pending
        containers by name and places each one without unresolved dependencies,
        removing it from the dependencies of all others.

        :param reversed: False to place dependencies before their dependents
            (startup order), True for the opposite (shutdown order).
            In shutdown order a cycle is broken by releasing the alphabetically
            last container still depended on, so a -> b -> c -> a stops as a, b, c.
        :return: All container names.
        :raises CyclicDependencyError: If the startup order cannot be resolved.
        """
        pending = self._unresolved()
        placed: List[str] = []

        while pending:
            progress = False
            for name in sorted(pending):
                if pending[name].satisfied():
                    self._place(name, pending, placed)
                    progress = True
            if progress:
                continue

            if not reversed:
                raise CyclicDependencyError(list(pending))
            # Stuck on a cycle: place the last name that others still wait for
            # ahead of its own dependencies.
            released = max(name for dependencies in pending.values() for name in dependencies.all)
            logger.warning(
                "Cyclic dependencies between %s, releasing %s to determine shutdown order",
                ", ".join(sorted(pending)), released,
            )
            self._place(released, pending, placed)

        if reversed:
            placed.reverse()
        return placed

    def alphabetical(self, reversed: bool = False) -> List[str]:
        """
        Orders containers by name, ignoring dependencies.
        """
        return sorted(self.containers, reverse=reversed)

    def _unresolved(self) -> Dict[str, Dependencies]:
        """
        Fresh dependencies of every container, restricted to the ordered set.
        """
        unresolved = {}
        for name, container in self.containers.items():
            dependencies = container.dependencies()
            for dependency in list(dependencies.all):
                if dependency not in self.containers:
                    dependencies.remove(dependency)
            unresolved[name] = dependencies
        return unresolved

    @staticmethod
    def _place(name: str, pending: Dict[str, Dependencies], placed: List[str]):
        placed.append(name)
        del pending[name]
        for dependencies in pending.values():
            dependencies.remove(name)
