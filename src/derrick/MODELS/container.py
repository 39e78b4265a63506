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
Models for declared containers and their lifecycle hooks.
"""
from typing import Dict, Optional
from pydantic import BaseModel, Field
from .dependencies import Dependencies
from .run_parameters import RunParameters
from ..RUNNERS.dependency_extractor import DependencyExtractor


class Hooks(BaseModel):
    """
    Commands executed at lifecycle transitions of a container.
    An empty string means no hook.
    """
    pre_start: str = ""
    post_start: str = ""
    pre_stop: str = ""
    post_stop: str = ""
    pre_link: str = ""
    post_link: str = ""


class Container(BaseModel):
    """
    A single declared container.
    The name is also the identity the driver queries live state with.
    """
    name: str
    image: str = ""
    dockerfile: Optional[str] = None
    run: RunParameters = Field(default_factory=RunParameters)
    hooks: Hooks = Field(default_factory=Hooks)

    def dependencies(self) -> Dependencies:
        """
        Extracts the dependencies of this container.
        A new value is returned on every call, callers may mutate it.
        """
        return DependencyExtractor.extract(self.run)


ContainerMap = Dict[str, Container]
