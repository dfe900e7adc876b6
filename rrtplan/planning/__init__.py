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
Sampling-based Planning Module

RRT-family motion planning over an abstract configuration space.

## Architecture

- PlannerParameters: capabilities fixed for one planning session
  (ConstraintChecker, DistanceMetric, DiffStateFn, optional samplers)
- SpatialTree: arena-backed forest with nearest-neighbor extension
- PlannerSpec: planners driving sample -> extend -> check loops
  - BirrtPlanner: Bi-directional RRT-Connect with multiple goals
  - BasicRrtPlanner: Goal-biased single-tree RRT
  - ExplorationPlanner: Coverage growth

## Usage

```python
import numpy as np

from rrtplan.planning import PlannerParameters, create_planner
from rrtplan.planning.utils import SegmentConstraintChecker

params = PlannerParameters(
    config_lower_limit=[-10.0, -10.0],
    config_upper_limit=[10.0, 10.0],
    constraint_checker=SegmentConstraintChecker(lambda q: np.linalg.norm(q - 5.0) > 1.0),
    step_length=0.5,
    initial_config=[0.0, 0.0],
    goal_config=[9.0, 9.0],
)
planner = create_planner(name="birrt")
if planner.init_plan(params):
    result = planner.plan_path()
```
"""

from rrtplan.planning.factory import create_planner, create_sampler
from rrtplan.planning.planners import (
    BasicRrtPlanner,
    BirrtPlanner,
    ExplorationPlanner,
    RrtPlannerBase,
)
from rrtplan.planning.spec import (
    BasicRRTParameters,
    ConfigPath,
    ConfigurationSpecification,
    ConstraintChecker,
    ConstraintFilterOptions,
    ConstraintFilterReturn,
    ExplorationParameters,
    ExtendType,
    GoalPath,
    IntervalType,
    PlannerAction,
    PlannerParameters,
    PlannerProgress,
    PlannerSpec,
    PlanningResult,
    PlanningStatus,
    RRTParameters,
    SpaceSampler,
    Trajectory,
)
from rrtplan.planning.tree import ExtendResult, SpatialTree

__all__ = [
    "BasicRRTParameters",
    "BasicRrtPlanner",
    "BirrtPlanner",
    "ConfigPath",
    "ConfigurationSpecification",
    "ConstraintChecker",
    "ConstraintFilterOptions",
    "ConstraintFilterReturn",
    "ExplorationParameters",
    "ExplorationPlanner",
    "ExtendResult",
    "ExtendType",
    "GoalPath",
    "IntervalType",
    "PlannerAction",
    "PlannerParameters",
    "PlannerProgress",
    "PlannerSpec",
    "PlanningResult",
    "PlanningStatus",
    "RRTParameters",
    "RrtPlannerBase",
    "SpaceSampler",
    "SpatialTree",
    "Trajectory",
    "create_planner",
    "create_sampler",
]
