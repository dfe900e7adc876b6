# Copyright 2025-2026 Dimensional Inc.
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

"""Factory functions for planning components."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from rrtplan.planning.spec import PlannerSpec, SpaceSampler

_PLANNER_NAMES = ["birrt", "basicrrt", "explorationrrt"]


def create_planner(
    name: str = "birrt",
    **kwargs: Any,
) -> PlannerSpec:
    """Create motion planner. name='birrt'|'basicrrt'|'explorationrrt'."""
    key = name.lower()
    if key == "birrt":
        from rrtplan.planning.planners.birrt_planner import BirrtPlanner

        return BirrtPlanner(**kwargs)
    elif key == "basicrrt":
        from rrtplan.planning.planners.basic_rrt_planner import BasicRrtPlanner

        return BasicRrtPlanner(**kwargs)
    elif key == "explorationrrt":
        from rrtplan.planning.planners.exploration_planner import ExplorationPlanner

        return ExplorationPlanner(**kwargs)
    else:
        raise ValueError(f"Unknown planner: {name}. Available: {_PLANNER_NAMES}")


def create_sampler(
    name: str = "mt19937",
    seed: int = 0,
) -> SpaceSampler:
    """Create a seeded space sampler. name='mt19937'."""
    if name == "mt19937":
        from rrtplan.planning.utils.sampler import UniformSampler

        return UniformSampler(seed)
    else:
        raise ValueError(f"Unknown sampler: {name}. Available: ['mt19937']")
