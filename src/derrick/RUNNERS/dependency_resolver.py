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
Dependency graph between containers, used to work out which containers a command targets.
"""
import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Set, Union

from ..MODELS.container import ContainerMap
from ..MODELS.dependencies import Dependencies, DependencyKind

logger = logging.getLogger(__name__)

DEFAULT_GROUP = "default"

# Kinds that make up actual edges; ``all`` and ``none`` are filters over them.
EDGE_KINDS = (DependencyKind.LINK, DependencyKind.NET, DependencyKind.VOLUMES_FROM)


class DependencyGraph:
    """
    Forward (depends on) and reverse (depended on by) edges between declared
    containers, by kind of dependency.

    References to containers that are not declared are dropped while the graph
    is built, so they never show up in a target or subset.
    """
    def __init__(self,
                 containers: ContainerMap,
                 groups: Optional[Dict[str, List[str]]] = None):
        """
        Builds the graph.

        :param containers: All declared containers.
        :param groups: Named groups of container names.
        """
        self.containers = containers
        self.groups = groups or {}
        self.dependencies: Dict[str, Dependencies] = {
            name: container.dependencies() for name, container in containers.items()
        }

        self.forward: Dict[DependencyKind, Dict[str, List[str]]] = {}
        self.reverse: Dict[DependencyKind, Dict[str, List[str]]] = {}
        for kind in EDGE_KINDS:
            self.forward[kind] = defaultdict(list)
            self.reverse[kind] = defaultdict(list)
            for name, dependencies in self.dependencies.items():
                for dependency in dependencies.for_kind(kind):
                    if dependency not in containers:
                        logger.debug("Ignoring undeclared %s dependency %s of %s",
                                     kind.value, dependency, name)
                        continue
                    self.forward[kind][name].append(dependency)
                    self.reverse[kind][dependency].append(name)

    def is_known_target(self, target: str) -> bool:
        """
        Checks whether a target spec refers to a group or a container.
        The empty target always refers to the default selection.
        """
        return not target or target in self.groups or target in self.containers

    def explicitly_targeted(self, target: str) -> List[str]:
        """
        Expands a target spec into the container names it names explicitly.

        :param target: Empty for the default selection, a group name, or a container name.
        :return: Declared container names, without duplicates.
        """
        if not target:
            if DEFAULT_GROUP in self.groups:
                names = self.groups[DEFAULT_GROUP]
            else:
                names = sorted(self.containers)
        elif target in self.groups:
            names = self.groups[target]
        else:
            names = [target]

        targeted = []
        for name in names:
            if name in self.containers and name not in targeted:
                targeted.append(name)
        return targeted

    def determine_target(self,
                         target: str,
                         cascade_dependencies: Union[DependencyKind, str] = DependencyKind.NONE,
                         cascade_affected: Union[DependencyKind, str] = DependencyKind.NONE) -> List[str]:
        """
        Computes the containers a command should act on.

        :param target: Empty for the default selection, a group name, or a container name.
        :param cascade_dependencies: Kind of dependencies of the targeted containers to include too.
        :param cascade_affected: Kind of dependencies on the targeted containers whose owners to include too.
        :return: Container names, sorted by name.
        """
        explicit = self.explicitly_targeted(target)
        result = set(explicit)
        result |= self.closure(explicit, DependencyKind(cascade_dependencies), reverse=False)
        result |= self.closure(explicit, DependencyKind(cascade_affected), reverse=True)
        return sorted(result)

    def subset(self,
               names: Iterable[str],
               include_descendants: bool = False,
               include_ancestors: bool = False) -> ContainerMap:
        """
        Filters the declared containers down to the given names.

        :param names: Container names to keep; undeclared ones are ignored.
        :param include_descendants: Also keep every container depending on a kept one.
        :param include_ancestors: Also keep every container a kept one depends on.
        :return: The filtered containers.
        """
        explicit = [name for name in names if name in self.containers]
        kept = set(explicit)
        if include_descendants:
            kept |= self.closure(explicit, DependencyKind.ALL, reverse=True)
        if include_ancestors:
            kept |= self.closure(explicit, DependencyKind.ALL, reverse=False)
        return {name: self.containers[name] for name in kept}

    def closure(self, names: Iterable[str], kind: DependencyKind, reverse: bool = False) -> Set[str]:
        """
        Transitive closure over edges of one kind.

        :param names: Starting containers, included in the result.
        :param kind: Edge kind to follow at every hop; ``none`` follows nothing.
        :param reverse: Follow edges towards dependents instead of dependencies.
        :return: The starting containers and everything reachable from them.
        """
        reached = set(names)
        if kind == DependencyKind.NONE:
            return reached

        pending = list(reached)
        while pending:
            name = pending.pop()
            for neighbour in self.neighbours(name, kind, reverse):
                if neighbour not in reached:
                    reached.add(neighbour)
                    pending.append(neighbour)
        return reached

    def neighbours(self, name: str, kind: DependencyKind, reverse: bool = False) -> List[str]:
        """
        Direct neighbours of a container along edges of the given kind.
        """
        kind = DependencyKind(kind)
        if kind == DependencyKind.NONE:
            return []
        kinds = EDGE_KINDS if kind == DependencyKind.ALL else (kind,)
        edges = self.reverse if reverse else self.forward

        neighbours = []
        for edge_kind in kinds:
            for neighbour in edges[edge_kind].get(name, []):
                if neighbour not in neighbours:
                    neighbours.append(neighbour)
        return neighbours
