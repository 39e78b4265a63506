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
Orchestration of commands over the targeted containers, in dependency order.
"""
import logging
from typing import Dict, List, Optional

from ..MODELS.container import Container, ContainerMap
from ..MODELS.options import Options
from ..MODELS.orchestration_config import OrchestrationConfig
from ..RUNNERS.dependency_resolver import DependencyGraph
from ..RUNNERS.hook_runner import HookRunner
from ..RUNNERS.process_runner import CommandRunner
from ..RUNNERS.topological_orderer import TopologicalOrderer
from ..exceptions import DependencyNotRunningError, UnknownTargetError
from .docker_driver import ContainerDriver, DockerDriver
from .lifecycle_orchestrator import ACTIONS, ActionKind, ExecutionReport, LifecycleOrchestrator

logger = logging.getLogger(__name__)


class ServiceOrchestrator:
    """
    Runs commands on the containers selected by the options' target and cascade settings.
    """
    def __init__(self,
                 config: OrchestrationConfig,
                 options: Optional[Options] = None,
                 driver: Optional[ContainerDriver] = None,
                 hook_runner: Optional[HookRunner] = None):
        """
        Initializes the orchestrator.

        :param config: Configuration of all containers.
        :param options: Options of this invocation.
        :param driver: Driver for container actions; docker by default.
        :param hook_runner: Runner for hook commands.
        """
        self.config = config
        self.options = options or Options()
        runner = CommandRunner(verbose=self.options.verbose, working_dir=config.base_dir)
        self.driver = driver or DockerDriver(runner, base_dir=config.base_dir)
        self.lifecycle = LifecycleOrchestrator(self.driver, hook_runner or HookRunner(runner))
        self.graph = DependencyGraph(config.containers, config.groups)

    @property
    def containers(self) -> ContainerMap:
        return self.config.containers

    def target(self) -> List[str]:
        """
        Resolves the targeted containers.

        :return: Container names, sorted by name.
        :raises UnknownTargetError: If the target is neither a group nor a container.
        """
        target = self.options.target
        if not self.graph.is_known_target(target):
            raise UnknownTargetError(target)
        return self.graph.determine_target(
            target,
            self.options.cascade_dependencies,
            self.options.cascade_affected,
        )

    def ordered(self, reversed: bool = False) -> List[str]:
        """
        The targeted containers in the order to act on them.

        :param reversed: Dependents first instead of dependencies first.
        :raises CyclicDependencyError: If the startup order cannot be resolved.
        """
        targeted = self.target()
        if self.config.order:
            order = [name for name in self.config.order if name in targeted]
            return order[::-1] if reversed else order
        subset = {name: self.containers[name] for name in targeted}
        return TopologicalOrderer(subset).order(reversed)

    def execute(self, kind: ActionKind, **params) -> ExecutionReport:
        """
        Applies an action to every targeted container, in the action's direction.
        """
        action = ACTIONS[ActionKind(kind)]
        names = self.ordered(action.reversed)
        logger.debug("%s: %s", action.kind.value, ", ".join(names))
        return self.lifecycle.execute(action.kind, names, self.containers, **params)

    def provision(self, nocache: Optional[bool] = None, missing_only: bool = False) -> ExecutionReport:
        """
        Builds or pulls the images of the targeted containers.

        :param nocache: Build without cache; defaults to the options.
        :param missing_only: Skip containers whose image is already present.
        """
        nocache = self.options.nocache if nocache is None else nocache
        names = self.ordered()
        if missing_only:
            names = [name for name in names
                     if not self.driver.image_exists(self.containers[name].image)]
        return self.lifecycle.execute(ActionKind.PROVISION, names, self.containers, nocache=nocache)

    def run(self, recreate: Optional[bool] = None) -> ExecutionReport:
        """
        Runs the targeted containers, removing them first when recreating.
        A container that could not be removed is reported as failed and not run.
        """
        recreate = self.options.recreate if recreate is None else recreate
        failed = {}
        if recreate:
            failed.update(self.rm(kill=True).failed)
        return self._start_all(ActionKind.RUN, failed)

    def lift(self, recreate: Optional[bool] = None, nocache: Optional[bool] = None) -> ExecutionReport:
        """
        Provisions and runs the targeted containers.
        Without recreating, only missing images are provisioned. Containers
        whose removal or provisioning failed are reported as failed and not run.
        """
        recreate = self.options.recreate if recreate is None else recreate
        failed = {}
        if recreate:
            failed.update(self.rm(kill=True).failed)
            failed.update(self.provision(nocache=nocache).failed)
        else:
            failed.update(self.provision(nocache=nocache, missing_only=True).failed)
        return self._start_all(ActionKind.RUN, failed)

    def start(self) -> ExecutionReport:
        return self._start_all(ActionKind.START)

    def stop(self) -> ExecutionReport:
        return self.execute(ActionKind.STOP)

    def kill(self) -> ExecutionReport:
        return self.execute(ActionKind.KILL)

    def pause(self) -> ExecutionReport:
        return self.execute(ActionKind.PAUSE)

    def unpause(self) -> ExecutionReport:
        return self.execute(ActionKind.UNPAUSE)

    def rm(self, kill: Optional[bool] = None) -> ExecutionReport:
        kill = self.options.kill if kill is None else kill
        return self.execute(ActionKind.REMOVE, kill=kill)

    def push(self) -> ExecutionReport:
        return self.execute(ActionKind.PUSH)

    def status(self, notrunc: Optional[bool] = None) -> ExecutionReport:
        notrunc = self.options.notrunc if notrunc is None else notrunc
        return self.execute(ActionKind.STATUS, notrunc=notrunc)

    def _start_all(self, kind: ActionKind,
                   failed: Optional[Dict[str, str]] = None) -> ExecutionReport:
        """
        Runs or starts containers in startup order, refusing containers whose
        link or net dependencies are not running at that point.

        :param failed: Containers that already failed in an earlier phase of the
            command; they are carried into the report and skipped.
        """
        report = ExecutionReport(action=kind, failed=dict(failed or {}))
        for name in self.ordered():
            if name in report.failed:
                logger.warning("Skipping %s: %s", name, report.failed[name])
                continue
            container = self.containers[name]
            try:
                self.check_dependencies_running(container)
            except DependencyNotRunningError as e:
                logger.error("%s", e)
                report.failed[name] = str(e)
                continue
            single = self.lifecycle.execute(kind, [name], self.containers)
            report.succeeded.extend(single.succeeded)
            report.failed.update(single.failed)
        return report

    def check_dependencies_running(self, container: Container):
        """
        Checks that every declared link and net dependency is running.
        Volumes-from sources only have to exist and are not checked.

        :raises DependencyNotRunningError: For the first dependency that is not running.
        """
        dependencies = container.dependencies()
        for name in dependencies.all:
            if name not in self.containers or not dependencies.must_run(name):
                continue
            if not self.driver.is_running(name):
                raise DependencyNotRunningError(container.name, name)
