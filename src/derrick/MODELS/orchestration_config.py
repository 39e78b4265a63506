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
Models for overall orchestration configuration.
"""
from typing import List, Dict
from pydantic import BaseModel
from .container import Container


class OrchestrationConfig(BaseModel):
    """
    Complete configuration for a set of containers.
    Equivalent to a parsed derrick.yml file.
    """
    containers: Dict[str, Container]
    groups: Dict[str, List[str]] = {}
    # Manual order, dependencies first; replaces the computed order when set.
    order: List[str] = []
    base_dir: str = "."
