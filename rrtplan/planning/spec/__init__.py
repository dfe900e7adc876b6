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

"""Sampling-based Planning Specifications."""

from rrtplan.planning.spec.config import (
    BasicRRTParameters,
    ExplorationParameters,
    PlannerParameters,
    RRTParameters,
)
from rrtplan.planning.spec.enums import (
    ConstraintFilterOptions,
    ExtendType,
    IntervalType,
    PlannerAction,
    PlanningStatus,
)
from rrtplan.planning.spec.protocols import (
    ConstraintChecker,
    DiffStateFn,
    DistanceMetric,
    PlanCallback,
    PlannerSpec,
    SpaceSampler,
)
from rrtplan.planning.spec.types import (
    Config,
    ConfigPath,
    ConfigurationSpecification,
    ConstraintFilterReturn,
    GoalPath,
    NodeIndex,
    PlannerProgress,
    PlanningResult,
    Trajectory,
)

__all__ = [
    "BasicRRTParameters",
    "Config",
    "ConfigPath",
    "ConfigurationSpecification",
    "ConstraintChecker",
    "ConstraintFilterOptions",
    "ConstraintFilterReturn",
    "DiffStateFn",
    "DistanceMetric",
    "ExplorationParameters",
    "ExtendType",
    "GoalPath",
    "IntervalType",
    "NodeIndex",
    "PlanCallback",
    "PlannerAction",
    "PlannerParameters",
    "PlannerProgress",
    "PlannerSpec",
    "PlanningResult",
    "PlanningStatus",
    "RRTParameters",
    "SpaceSampler",
    "Trajectory",
]
