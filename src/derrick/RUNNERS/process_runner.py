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
Execution of external commands, either streaming their output or capturing it.
"""
import logging
import subprocess
from typing import List, Optional

from ..exceptions import CommandError

logger = logging.getLogger(__name__)


class CommandRunner:
    """
    Runs external commands to completion, one at a time.
    """
    def __init__(self, verbose: bool = False, working_dir: Optional[str] = None):
        """
        Initializes the command runner.

        Args:
            verbose (bool): Log every executed command at INFO instead of DEBUG.
            working_dir (Optional[str]): Directory to run commands in.
        """
        self.verbose = verbose
        self.working_dir = working_dir

    def execute(self, name: str, args: Optional[List[str]] = None):
        """
        Runs a command, passing its output through to ours.

        Args:
            name (str): Executable to run.
            args (Optional[List[str]]): Arguments of the executable.

        Raises:
            CommandError: If the executable cannot be started or exits with a non-zero status.
        """
        command = [name] + list(args or [])
        logger.log(logging.INFO if self.verbose else logging.DEBUG,
                   "Running command: %s", " ".join(command))
        try:
            # Avoid shell=True for security reasons (CWE-78)
            returncode = subprocess.call(
                command,
                cwd=self.working_dir,
                shell=False,
            )
        except OSError as e:
            raise CommandError(command, f"Failed to start {name}: {e}") from e
        if returncode != 0:
            raise CommandError(command, f"{' '.join(command)} exited with status {returncode}",
                               returncode=returncode)

    def output(self, name: str, args: Optional[List[str]] = None) -> str:
        """
        Runs a command and captures its standard output.

        Args:
            name (str): Executable to run.
            args (Optional[List[str]]): Arguments of the executable.

        Returns:
            str: Standard output, stripped of surrounding whitespace.

        Raises:
            CommandError: If the executable cannot be started or exits with a non-zero status.
        """
        command = [name] + list(args or [])
        logger.debug("Capturing output of: %s", " ".join(command))
        try:
            completed = subprocess.run(
                command,
                cwd=self.working_dir,
                capture_output=True,
                text=True,
                shell=False,
            )
        except OSError as e:
            raise CommandError(command, f"Failed to start {name}: {e}") from e
        if completed.returncode != 0:
            raise CommandError(command, completed.stderr.strip() or
                               f"{' '.join(command)} exited with status {completed.returncode}",
                               returncode=completed.returncode)
        return completed.stdout.strip()
