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
Parsers for derrick configuration files, in JSON or YAML.
"""
import json
import logging
import os
import shlex
from typing import Any, Callable, Dict, List, Optional

import yaml
from dotenv import dotenv_values
from pydantic import ValidationError

from ..MODELS.container import Container, Hooks
from ..MODELS.opt_bool import OptBool
from ..MODELS.orchestration_config import OrchestrationConfig
from ..MODELS.run_parameters import RunParameters
from ..UTILS.string_interpolation import EnvironmentInterpolator
from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILES = ["derrick.json", "derrick.yaml", "derrick.yml"]

JSON = "json"
YAML = "yaml"


class ConfigParser:
    """
    Parser for derrick.json / derrick.yml files.
    """
    def __init__(self, context: Optional[Dict[str, str]] = None):
        """
        Initializes the parser with an optional environment context for interpolation.

        :param context: Environment variables for interpolation. Defaults to the
            process environment on top of an optional .env file next to the config.
        """
        self.context = context

    @staticmethod
    def config_files(path: str = "") -> List[str]:
        """
        Candidate config files, in order of preference.

        :param path: Explicitly given config file, if any.
        """
        if path:
            return [path]
        return list(DEFAULT_CONFIG_FILES)

    def locate(self, path: str = "") -> str:
        """
        Returns the first existing config file.

        :raises ConfigurationError: If none exists.
        """
        candidates = self.config_files(path)
        for candidate in candidates:
            if os.path.isfile(candidate):
                return candidate
        raise ConfigurationError(f"No configuration found, tried {', '.join(candidates)}")

    def parse(self, config_path: str = "") -> OrchestrationConfig:
        """
        Parses a config file from a path.

        :param config_path: Path to the config file; the default files are tried when empty.
        :return: Parsed configuration.
        """
        path = self.locate(config_path)
        with open(path, 'r') as f:
            content = f.read()
        base_dir = os.path.dirname(os.path.abspath(path))
        file_format = JSON if path.endswith(".json") else YAML
        return self.parse_from_string(content, file_format=file_format, base_dir=base_dir)

    def parse_from_string(self, content: str, file_format: str = YAML,
                          base_dir: str = ".") -> OrchestrationConfig:
        """
        Parses a configuration from a string.

        :param content: JSON or YAML content.
        :param file_format: ``json`` or ``yaml``.
        :param base_dir: Directory relative paths in the configuration refer to.
        :return: Parsed configuration.
        :raises ConfigurationError: If the content is invalid.
        """
        try:
            if file_format == JSON:
                data = json.loads(content) if content.strip() else {}
            else:
                data = yaml.safe_load(content)
        except (ValueError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Invalid {file_format.upper()}: {e}") from e
        if not data:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError("Configuration must be a mapping")

        missing: List[str] = []
        data = self._expand(data, self._context(base_dir), missing)
        if missing:
            logger.warning("Unset variables interpolated as empty strings: %s", ", ".join(missing))

        declared = data.get('containers') or {}
        if not isinstance(declared, dict):
            raise ConfigurationError("containers must be a mapping of names to definitions")

        decode_bool = OptBool.from_json if file_format == JSON else OptBool.from_yaml
        try:
            containers = {}
            for name, spec in declared.items():
                containers[name] = self._parse_container(name, spec or {}, decode_bool)

            return OrchestrationConfig(
                containers=containers,
                groups=self._parse_groups(data.get('groups') or {}),
                order=self._to_list(data.get('order')),
                base_dir=base_dir,
            )
        except (ValidationError, ValueError, TypeError) as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    def _context(self, base_dir: str) -> Dict[str, str]:
        if self.context is not None:
            return self.context
        context = {}
        env_file = os.path.join(base_dir, ".env")
        if os.path.isfile(env_file):
            context.update({k: v for k, v in dotenv_values(env_file).items() if v is not None})
        context.update(os.environ)
        return context

    def _expand(self, value: Any, context: Dict[str, str], missing: List[str]) -> Any:
        """
        Interpolates environment variables in every string value of decoded content.
        Mapping keys are left as they are.
        """
        if isinstance(value, str):
            return EnvironmentInterpolator.interpolate(value, context, missing)
        if isinstance(value, dict):
            return {key: self._expand(item, context, missing) for key, item in value.items()}
        if isinstance(value, list):
            return [self._expand(item, context, missing) for item in value]
        return value

    def _parse_container(self, name: str, spec: Dict[str, Any],
                         decode_bool: Callable[..., OptBool]) -> Container:
        """
        Parses a single container definition.

        :param name: The name of the container.
        :param spec: The container specification dictionary.
        :param decode_bool: Tri-state boolean decoder for the file format.
        :return: A Container instance.
        """
        if not isinstance(spec, dict):
            raise ConfigurationError(f"Container {name} must be a mapping")
        spec = self._normalize(spec)
        run = self._normalize(spec.get('run') or {})
        hooks = self._normalize(spec.get('hooks') or {})

        return Container(
            name=name,
            image=spec.get('image') or '',
            dockerfile=spec.get('dockerfile'),
            run=RunParameters(
                link=self._to_list(run.get('link')),
                net=run.get('net') or '',
                volumes_from=self._to_list(run.get('volumes-from')),
                cmd=self._command(run.get('cmd')),
                entrypoint=run.get('entrypoint') or '',
                workdir=run.get('workdir') or '',
                user=run.get('user') or '',
                detach=decode_bool(run.get('detach'), 'detach' in run),
                interactive=run.get('interactive') or False,
                tty=run.get('tty') or False,
                rm=run.get('rm') or False,
                restart=run.get('restart') or '',
                privileged=run.get('privileged') or False,
                env=self._environment(run.get('env')),
                env_file=self._to_list(run.get('env-file')),
                label=self._environment(run.get('label')),
                publish=self._to_list(run.get('publish')),
                publish_all=run.get('publish-all') or False,
                expose=self._to_list(run.get('expose')),
                hostname=run.get('hostname') or '',
                dns=self._to_list(run.get('dns')),
                add_host=self._to_list(run.get('add-host')),
                volume=self._to_list(run.get('volume')),
                cpu_shares=run.get('cpu-shares'),
                memory=str(run.get('memory') or ''),
                cap_add=self._to_list(run.get('cap-add')),
                cap_drop=self._to_list(run.get('cap-drop')),
                device=self._to_list(run.get('device')),
            ),
            hooks=Hooks(
                pre_start=hooks.get('pre-start') or '',
                post_start=hooks.get('post-start') or '',
                pre_stop=hooks.get('pre-stop') or '',
                post_stop=hooks.get('post-stop') or '',
                pre_link=hooks.get('pre-link') or '',
                post_link=hooks.get('post-link') or '',
            ),
        )

    def _parse_groups(self, groups: Dict[str, Any]) -> Dict[str, List[str]]:
        if not isinstance(groups, dict):
            raise ConfigurationError("groups must be a mapping of names to container lists")
        return {name: self._to_list(members) for name, members in groups.items()}

    @staticmethod
    def _normalize(spec: Dict[str, Any]) -> Dict[str, Any]:
        """
        Accepts both ``volumes-from`` and ``volumes_from`` style keys.
        """
        if not isinstance(spec, dict):
            raise ConfigurationError(f"Expected a mapping, got {spec!r}")
        return {str(key).replace('_', '-'): value for key, value in spec.items()}

    def _command(self, val: Any) -> List[str]:
        """
        Commands may be given as a string, split like a shell would, or as a list.
        """
        if isinstance(val, str):
            return shlex.split(val)
        return [str(part) for part in self._to_list(val)]

    def _environment(self, val: Any) -> List[str]:
        """
        Environment variables and labels may be given as a list or a mapping.
        """
        if isinstance(val, dict):
            return [f"{key}={value}" for key, value in val.items()]
        return self._to_list(val)

    def _to_list(self, val: Any) -> List[str]:
        """
        Helper to ensure a value is a list of strings.

        :param val: The value to convert.
        :return: A list of strings.
        """
        if val is None:
            return []
        if isinstance(val, (str, int, float)):
            return [str(val)]
        return [str(item) for item in val]
