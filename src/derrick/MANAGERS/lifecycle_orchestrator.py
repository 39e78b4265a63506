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
Lifecycle transitions of containers, wrapped with their hooks.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from ..MODELS.container import Container, ContainerMap
from ..RUNNERS.hook_runner import HookRunner
from ..exceptions import DriverError
from .docker_driver import ContainerDriver, ContainerStatus

logger = logging.getLogger(__name__)


class ActionKind(str, Enum):
    """
    Actions that can be applied to a sequence of containers.
    """
    PROVISION = "provision"
    RUN = "run"
    START = "start"
    STOP = "stop"
    KILL = "kill"
    PAUSE = "pause"
    UNPAUSE = "unpause"
    REMOVE = "rm"
    PUSH = "push"
    STATUS = "status"


@dataclass(frozen=True)
class Action:
    """
    What applying an action to one container involves.

    ``pre_hook`` and ``post_hook`` name fields of Hooks; ``reversed`` is true for
    actions that go through containers dependents first.
    """
    kind: ActionKind
    verb: str
    pre_hook: str = ""
    post_hook: str = ""
    notify_links: bool = False
    reversed: bool = False


ACTIONS: Dict[ActionKind, Action] = {
    ActionKind.PROVISION: Action(ActionKind.PROVISION, "provision"),
    ActionKind.RUN: Action(ActionKind.RUN, "run", "pre_start", "post_start", notify_links=True),
    ActionKind.START: Action(ActionKind.START, "start", "pre_start", "post_start", notify_links=True),
    ActionKind.STOP: Action(ActionKind.STOP, "stop", "pre_stop", "post_stop", reversed=True),
    ActionKind.KILL: Action(ActionKind.KILL, "kill", "pre_stop", "post_stop", reversed=True),
    ActionKind.PAUSE: Action(ActionKind.PAUSE, "pause", reversed=True),
    ActionKind.UNPAUSE: Action(ActionKind.UNPAUSE, "unpause"),
    ActionKind.REMOVE: Action(ActionKind.REMOVE, "rm", reversed=True),
    ActionKind.PUSH: Action(ActionKind.PUSH, "push"),
    ActionKind.STATUS: Action(ActionKind.STATUS, "status"),
}


@dataclass
class ExecutionReport:
    """Outcome of applying one action to a sequence of containers."""

    action: ActionKind
    succeeded: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)
    statuses: List[ContainerStatus] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


class LifecycleOrchestrator:
    """
    Applies actions to containers one at a time, calling hooks around the driver call.
    """
    def __init__(self, driver: ContainerDriver, hook_runner: Optional[HookRunner] = None):
        """
        :param driver: Driver performing the state changing calls and live queries.
        :param hook_runner: Runner for hook commands.
        """
        self.driver = driver
        self.hook_runner = hook_runner or HookRunner()
        self._handlers = {
            ActionKind.PROVISION: self.provision,
            ActionKind.RUN: self.run,
            ActionKind.START: self.start,
            ActionKind.STOP: self.stop,
            ActionKind.KILL: self.kill,
            ActionKind.PAUSE: self.pause,
            ActionKind.UNPAUSE: self.unpause,
            ActionKind.REMOVE: self.remove,
            ActionKind.PUSH: self.push,
            ActionKind.STATUS: self.status,
        }

    def execute(self, kind: ActionKind, names: List[str], containers: ContainerMap,
                alias: str = "", **params) -> ExecutionReport:
        """
        Applies an action to containers in the given order.

        A driver failure is recorded for the container it happened on and
        the remaining containers are still processed.

        :param kind: Action to apply.
        :param names: Ordered container names.
        :param containers: All declared containers, used for link lookups.
        :param alias: Name passed on to the driver when creating containers.
        :param params: Action specific driver flags.
        :return: Which containers succeeded and which failed.
        """
        kind = ActionKind(kind)
        report = ExecutionReport(action=kind)
        for name in names:
            container = containers[name]
            try:
                result = self.apply(kind, container, containers, alias=alias, **params)
            except DriverError as e:
                logger.error("%s failed for %s: %s", kind.value, name, e)
                report.failed[name] = str(e)
                continue
            if isinstance(result, ContainerStatus):
                report.statuses.append(result)
            report.succeeded.append(name)
        return report

    def apply(self, kind: ActionKind, container: Container, containers: ContainerMap,
              alias: str = "", **params):
        """
        Applies a single action to a single container.
        """
        handler = self._handlers[ActionKind(kind)]
        return handler(container, containers=containers, alias=alias, **params)

    def run(self, container: Container, containers: Optional[ContainerMap] = None,
            alias: str = "", **params):
        """
        Creates and starts a container. An existing container is only started,
        and only when it is not running already.
        """
        if self.driver.exists(container.name):
            logger.info("Container %s does already exist", container.name)
            if not self.driver.is_running(container.name):
                self._transition(ACTIONS[ActionKind.START], container, containers, alias)
            return
        self._transition(ACTIONS[ActionKind.RUN], container, containers, alias)

    def start(self, container: Container, containers: Optional[ContainerMap] = None,
              alias: str = "", **params):
        """
        Starts a stopped container, or runs it when it does not exist yet.
        """
        if not self.driver.exists(container.name):
            self._transition(ACTIONS[ActionKind.RUN], container, containers, alias)
        elif not self.driver.is_running(container.name):
            self._transition(ACTIONS[ActionKind.START], container, containers, alias)

    def stop(self, container: Container, **params):
        if self.driver.is_running(container.name):
            self._transition(ACTIONS[ActionKind.STOP], container)

    def kill(self, container: Container, **params):
        if self.driver.is_running(container.name):
            self._transition(ACTIONS[ActionKind.KILL], container)

    def pause(self, container: Container, **params):
        if self.driver.is_running(container.name) and not self.driver.is_paused(container.name):
            self._transition(ACTIONS[ActionKind.PAUSE], container)

    def unpause(self, container: Container, **params):
        if self.driver.is_paused(container.name):
            self._transition(ACTIONS[ActionKind.UNPAUSE], container)

    def remove(self, container: Container, kill: bool = False, **params):
        """
        Removes an existing container. A running one is killed first when ``kill`` is set,
        otherwise the driver refuses to remove it.
        """
        if not self.driver.exists(container.name):
            return
        if kill:
            self.kill(container)
        self._transition(ACTIONS[ActionKind.REMOVE], container)

    def push(self, container: Container, **params):
        self._transition(ACTIONS[ActionKind.PUSH], container)

    def provision(self, container: Container, nocache: bool = False, **params):
        """Builds the container's image from its Dockerfile, or pulls it."""
        self._transition(ACTIONS[ActionKind.PROVISION], container, nocache=nocache)

    def status(self, container: Container, notrunc: bool = False, **params) -> ContainerStatus:
        return self.driver.status(container, notrunc=notrunc)

    def _transition(self, action: Action, container: Container,
                    containers: Optional[ContainerMap] = None, alias: str = "", **params):
        """
        Performs the driver call of an action, wrapped with the container's hooks.

        For link notifying actions, every linked container that is running at
        this moment gets its pre-link hook before and its post-link hook after
        the driver call.
        """
        if action.pre_hook:
            self.hook_runner.execute(getattr(container.hooks, action.pre_hook))

        linked = []
        if action.notify_links:
            linked = self.running_links(container, containers or {})
        for dependency in linked:
            self.hook_runner.execute(dependency.hooks.pre_link)

        logger.info("%s %s", action.verb.capitalize(), container.name)
        self.driver.perform(action.verb, container, alias=alias, **params)

        for dependency in linked:
            self.hook_runner.execute(dependency.hooks.post_link)
        if action.post_hook:
            self.hook_runner.execute(getattr(container.hooks, action.post_hook))

    def running_links(self, container: Container, containers: ContainerMap) -> List[Container]:
        """
        Linked containers that are declared and running right now.
        """
        running = []
        for name in container.dependencies().link:
            dependency = containers.get(name)
            if dependency is not None and self.driver.is_running(name):
                running.append(dependency)
        return running
