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
Drivers applying container actions, and the docker CLI implementation.
"""
import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from ..MODELS.container import Container
from ..RUNNERS.process_runner import CommandRunner
from ..exceptions import CommandError, DriverError

logger = logging.getLogger(__name__)


@dataclass
class ContainerStatus:
    """Live status of a container, as reported by the driver."""

    name: str
    image: str
    id: str = "-"
    running: str = "-"
    ip: str = "-"


class ContainerDriver(ABC):
    """
    Answers point-in-time state queries and performs the state changing calls.
    """

    @abstractmethod
    def exists(self, name: str) -> bool:
        """Whether the container exists."""

    @abstractmethod
    def is_running(self, name: str) -> bool:
        """Whether the container is running right now."""

    @abstractmethod
    def is_paused(self, name: str) -> bool:
        """Whether the container is paused right now."""

    @abstractmethod
    def image_exists(self, image: str) -> bool:
        """Whether the image is available locally."""

    @abstractmethod
    def perform(self, verb: str, container: Container, alias: str = "", **params):
        """
        Performs an action on a container.

        :raises DriverError: If the action failed.
        """

    @abstractmethod
    def status(self, container: Container, notrunc: bool = False) -> ContainerStatus:
        """Reports the live status of a container."""


class DockerDriver(ContainerDriver):
    """
    Container driver backed by the docker command line client.
    """
    def __init__(self, runner: Optional[CommandRunner] = None, base_dir: str = ".",
                 executable: str = "docker"):
        """
        :param runner: Runner used for docker invocations.
        :param base_dir: Directory relative volume and build paths are resolved against.
        :param executable: Name of the docker client.
        """
        self.runner = runner or CommandRunner()
        self.base_dir = base_dir
        self.executable = executable

    def exists(self, name: str) -> bool:
        return bool(self._inspect(name, "{{.Id}}"))

    def is_running(self, name: str) -> bool:
        return self._inspect(name, "{{.State.Running}}") == "true"

    def is_paused(self, name: str) -> bool:
        return self._inspect(name, "{{.State.Paused}}") == "true"

    def image_exists(self, image: str) -> bool:
        if not image:
            return False
        try:
            return bool(self.runner.output(
                self.executable, ["inspect", "--type=image", "--format={{.Id}}", image]))
        except CommandError:
            return False

    def perform(self, verb: str, container: Container, alias: str = "", **params):
        """
        Runs the docker command for an action.

        :param verb: One of run, start, stop, kill, pause, unpause, rm, push, provision.
        :param container: Container to act on.
        :param alias: Name to create the container under; defaults to the container name.
        :param params: Driver specific flags, e.g. ``nocache`` for provision.
        :raises DriverError: If docker failed.
        """
        builder = getattr(self, f"_{verb}_arguments", None)
        if builder is None:
            raise DriverError(container.name, f"Unsupported action: {verb}")
        args = builder(container, alias=alias, **params)
        try:
            self.runner.execute(self.executable, args)
        except CommandError as e:
            raise DriverError(container.name, str(e)) from e

    def status(self, container: Container, notrunc: bool = False) -> ContainerStatus:
        fields = self._inspect(container.name,
                               "{{.Id}}\t{{.State.Running}}\t{{.NetworkSettings.IPAddress}}")
        if not fields:
            return ContainerStatus(name=container.name, image=container.image)
        parts = fields.split("\t") + ["", "", ""]
        container_id = parts[0] if notrunc else parts[0][:12]
        return ContainerStatus(
            name=container.name,
            image=container.image,
            id=container_id,
            running=parts[1] or "-",
            ip=parts[2] or "-",
        )

    def _inspect(self, name: str, template: str) -> str:
        """
        Queries a single field of a container; empty when it does not exist.
        """
        try:
            return self.runner.output(self.executable,
                                      ["inspect", "--type=container", f"--format={template}", name])
        except CommandError:
            return ""

    def _run_arguments(self, container: Container, alias: str = "", **params) -> List[str]:
        run = container.run
        args = ["run"]
        if run.detach.resolve(default=True):
            args.append("--detach")
        for flag, enabled in (("--interactive", run.interactive), ("--tty", run.tty),
                              ("--rm", run.rm), ("--privileged", run.privileged),
                              ("--publish-all", run.publish_all)):
            if enabled:
                args.append(flag)

        repeated = (
            ("--add-host", run.add_host),
            ("--cap-add", run.cap_add),
            ("--cap-drop", run.cap_drop),
            ("--device", run.device),
            ("--dns", run.dns),
            ("--env", run.env),
            ("--env-file", run.env_file),
            ("--expose", run.expose),
            ("--label", run.label),
            ("--link", run.link),
            ("--publish", run.publish),
            ("--volume", run.resolved_volumes(self.base_dir)),
            ("--volumes-from", run.volumes_from),
        )
        for flag, values in repeated:
            for value in values:
                args.extend([flag, value])

        single = (
            ("--cpu-shares", str(run.cpu_shares) if run.cpu_shares is not None else ""),
            ("--entrypoint", run.entrypoint),
            ("--hostname", run.hostname),
            ("--memory", run.memory),
            ("--net", run.net),
            ("--restart", run.restart),
            ("--user", run.user),
            ("--workdir", run.workdir),
        )
        for flag, value in single:
            if value:
                args.extend([flag, value])

        args.extend(["--name", alias or container.name, container.image])
        args.extend(run.cmd)
        return args

    def _start_arguments(self, container: Container, **params) -> List[str]:
        return ["start", container.name]

    def _stop_arguments(self, container: Container, **params) -> List[str]:
        return ["stop", container.name]

    def _kill_arguments(self, container: Container, **params) -> List[str]:
        return ["kill", container.name]

    def _pause_arguments(self, container: Container, **params) -> List[str]:
        return ["pause", container.name]

    def _unpause_arguments(self, container: Container, **params) -> List[str]:
        return ["unpause", container.name]

    def _rm_arguments(self, container: Container, **params) -> List[str]:
        return ["rm", container.name]

    def _push_arguments(self, container: Container, **params) -> List[str]:
        return ["push", container.image]

    def _provision_arguments(self, container: Container, nocache: bool = False,
                             **params) -> List[str]:
        if not container.dockerfile:
            return ["pull", container.image]
        args = ["build", "--rm", f"--tag={container.image}"]
        if nocache:
            args.append("--no-cache")
        args.append(os.path.join(self.base_dir, container.dockerfile))
        return args
