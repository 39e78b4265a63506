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
Options of a single derrick invocation.
"""
from pydantic import BaseModel
from .dependencies import DependencyKind


class Options(BaseModel):
    """
    Command line options, passed explicitly to the components that need them.
    """
    verbose: bool = False
    recreate: bool = False
    nocache: bool = False
    notrunc: bool = False
    kill: bool = False
    cascade_dependencies: DependencyKind = DependencyKind.NONE
    cascade_affected: DependencyKind = DependencyKind.NONE
    config: str = ""
    target: str = ""
