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
Utilities for string interpolation using environment variables.
"""
import logging
import re
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

# $$, ${VAR}, ${VAR:-default}, ${VAR:+value} or $VAR
PATTERN = re.compile(
    r'\$(?:(?P<escaped>\$)'
    r'|\{(?P<braced>[^}:]+)(?::(?P<modifier>-|\+)(?P<alt>[^}]*))?\}'
    r'|(?P<named>[A-Za-z_][A-Za-z0-9_]*))'
)


class EnvironmentInterpolator:
    """
    Utility for interpolating environment variables in strings.
    Supports $VAR, ${VAR}, ${VAR:-default}, ${VAR:+value} and $$ for a literal dollar.
    """
    @staticmethod
    def interpolate(template: str, context: Dict[str, str],
                    missing: Optional[List[str]] = None) -> str:
        """
        Interpolates environment variables in the template string using the provided context.
        Unset variables without a default resolve to an empty string.

        :param template: The string containing placeholders.
        :param context: The environment variables context.
        :param missing: If given, names of unset variables are appended to it.
        :return: The interpolated string.
        """
        def replace(match):
            if match.group('escaped'):
                return '$'

            var_name = match.group('braced') or match.group('named')
            modifier = match.group('modifier')  # None, '-', or '+'
            alt_value = match.group('alt') or ''
            value = context.get(var_name)

            if modifier == '-':
                return value if value else alt_value
            if modifier == '+':
                return alt_value if value else ''
            if value is None:
                logger.debug("Variable %s is not set, using an empty string", var_name)
                if missing is not None and var_name not in missing:
                    missing.append(var_name)
                return ''
            return value

        return PATTERN.sub(replace, template)
