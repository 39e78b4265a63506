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
Extraction of normalized dependencies from raw run parameters.
"""
from typing import List
from ..MODELS.dependencies import Dependencies
from ..MODELS.run_parameters import RunParameters

CONTAINER_NET_PREFIX = "container:"


class DependencyExtractor:
    """
    Turns the raw link, net and volumes-from declarations into Dependencies.
    """
    @staticmethod
    def extract(run: RunParameters) -> Dependencies:
        """
        Extracts the dependencies declared by a container's run parameters.

        :param run: Raw run parameters.
        :return: Normalized dependencies.
        """
        link = DependencyExtractor._unique(
            [DependencyExtractor.link_target(entry) for entry in run.link]
        )
        volumes_from = DependencyExtractor._unique(run.volumes_from)
        net = DependencyExtractor.net_target(run.net)

        all_names = DependencyExtractor._unique(
            link + volumes_from + ([net] if net else [])
        )
        return Dependencies(all=all_names, link=link, volumes_from=volumes_from, net=net)

    @staticmethod
    def link_target(entry: str) -> str:
        """
        Returns the container part of a ``name:alias`` link.
        """
        return entry.split(':', 1)[0]

    @staticmethod
    def net_target(net: str) -> str:
        """
        Returns the container whose network stack is shared, or an empty string
        for any other network mode (bridge, host, none, ...).
        """
        if net.startswith(CONTAINER_NET_PREFIX):
            return net[len(CONTAINER_NET_PREFIX):]
        return ""

    @staticmethod
    def _unique(names: List[str]) -> List[str]:
        seen = []
        for name in names:
            if name and name not in seen:
                seen.append(name)
        return seen
