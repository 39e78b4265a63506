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
Models for the parameters a container is run with.
"""
import os
from typing import List, Optional
from pydantic import BaseModel
from .opt_bool import OptBool


class RunParameters(BaseModel):
    """
    Raw ``docker run`` parameters of a container, as declared in the configuration.
    ``link``, ``net`` and ``volumes_from`` also declare dependencies.
    """
    # Dependencies
    link: List[str] = []
    net: str = ""
    volumes_from: List[str] = []

    # Execution
    cmd: List[str] = []
    entrypoint: str = ""
    workdir: str = ""
    user: str = ""
    detach: OptBool = OptBool.UNDEFINED
    interactive: bool = False
    tty: bool = False
    rm: bool = False
    restart: str = ""
    privileged: bool = False

    # Environment
    env: List[str] = []
    env_file: List[str] = []
    label: List[str] = []

    # Networking
    publish: List[str] = []
    publish_all: bool = False
    expose: List[str] = []
    hostname: str = ""
    dns: List[str] = []
    add_host: List[str] = []

    # Storage
    volume: List[str] = []

    # Resources
    cpu_shares: Optional[int] = None
    memory: str = ""
    cap_add: List[str] = []
    cap_drop: List[str] = []
    device: List[str] = []

    def resolved_volumes(self, base_dir: str = ".") -> List[str]:
        """
        Returns the volume specs with relative host paths made absolute.

        :param base_dir: Directory relative host paths are resolved against.
        :return: Volume specs, e.g. ``/abs/host:/container``.
        """
        volumes = []
        for spec in self.volume:
            parts = spec.split(':', 1)
            if len(parts) == 2 and not os.path.isabs(parts[0]):
                host = os.path.abspath(os.path.join(base_dir, parts[0]))
                spec = f"{host}:{parts[1]}"
            volumes.append(spec)
        return volumes
