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

"""Exceptions raised by derrick."""
from typing import List


class DerrickError(Exception):
    """Base exception for derrick errors."""

    pass


class ConfigurationError(DerrickError):
    """Configuration is missing, unparsable or invalid."""

    pass


class UnknownTargetError(DerrickError):
    """Target names neither a group nor a container."""

    def __init__(self, target: str):
        self.target = target
        super().__init__(f"No group or container matching '{target}'")


class CyclicDependencyError(DerrickError):
    """Containers could not be placed in a dependency respecting order."""

    def __init__(self, unresolved: List[str]):
        self.unresolved = sorted(unresolved)
        super().__init__(
            "Dependencies for container(s) %s could not be resolved, "
            "check for cyclic dependencies" % ", ".join(self.unresolved)
        )


class CommandError(DerrickError):
    """An external command could not be run or exited with a non-zero status."""

    def __init__(self, command: List[str], message: str, returncode=None):
        self.command = command
        self.returncode = returncode
        super().__init__(message)


class DriverError(DerrickError):
    """The driver failed to apply an action to a container."""

    def __init__(self, container: str, message: str):
        self.container = container
        super().__init__(f"[{container}] {message}")


class DependencyNotRunningError(DriverError):
    """A link or net dependency is not running, so the container cannot start."""

    def __init__(self, container: str, dependency: str):
        self.dependency = dependency
        super().__init__(
            container,
            f"Cannot start: dependency {dependency} must be running",
        )
