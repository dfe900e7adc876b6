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

"""
Motion Planners Module

RRT-family planners. All of them are backend-agnostic: they only use the
ConstraintChecker, metric and samplers supplied in PlannerParameters.

## Implementations

- BirrtPlanner: Bi-directional RRT-Connect with multiple goals
- BasicRrtPlanner: Single-tree goal-biased RRT
- ExplorationPlanner: Coverage-oriented tree growth

## Usage

```python
from rrtplan.planning.factory import create_planner

planner = create_planner(name="birrt")  # Returns PlannerSpec
if planner.init_plan(params):
    result = planner.plan_path()
```
"""

from rrtplan.planning.planners.basic_rrt_planner import BasicRrtPlanner
from rrtplan.planning.planners.birrt_planner import BirrtPlanner
from rrtplan.planning.planners.exploration_planner import ExplorationPlanner
from rrtplan.planning.planners.rrt_planner import RrtPlannerBase

__all__ = ["BasicRrtPlanner", "BirrtPlanner", "ExplorationPlanner", "RrtPlannerBase"]
