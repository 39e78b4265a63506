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
Best-effort execution of lifecycle hooks.
"""
import logging
import shlex
from typing import Optional

from .process_runner import CommandRunner
from ..exceptions import CommandError

logger = logging.getLogger(__name__)


class HookRunner:
    """
    Runs hook commands. A failing hook is logged and never stops the action it belongs to.
    """
    def __init__(self, runner: Optional[CommandRunner] = None):
        self.runner = runner or CommandRunner()

    def execute(self, hook: str) -> bool:
        """
        Runs a hook command line to completion.

        :param hook: Command line of the hook; empty for no hook.
        :return: True if the hook ran successfully or there was nothing to run.
        """
        if not hook:
            return True
        try:
            parts = shlex.split(hook)
        except ValueError as e:
            logger.warning("Hook %r cannot be parsed: %s", hook, e)
            return False
        if not parts:
            return True

        try:
            self.runner.execute(parts[0], parts[1:])
        except CommandError as e:
            logger.warning("Hook %r failed: %s", hook, e)
            return False
        return True
