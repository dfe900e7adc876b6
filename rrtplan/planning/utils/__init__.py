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
Planning Utilities

- sampler: UniformSampler, the seeded random stream owned by each planner
- space_utils: metrics, difference functions, SegmentConstraintChecker
- path_utils: buffer splitting, path length and feasibility helpers
"""

from rrtplan.planning.utils.path_utils import (
    compute_path_length,
    is_path_feasible,
    is_path_within_limits,
    split_configs,
)
from rrtplan.planning.utils.sampler import UniformSampler
from rrtplan.planning.utils.space_utils import (
    CONSTRAINT_VIOLATED,
    SegmentConstraintChecker,
    euclidean_distance,
    make_circular_diff,
    make_weighted_distance_metric,
    subtract_states,
    wrap_to_pi,
)

__all__ = [
    "CONSTRAINT_VIOLATED",
    "SegmentConstraintChecker",
    "UniformSampler",
    "compute_path_length",
    "euclidean_distance",
    "is_path_feasible",
    "is_path_within_limits",
    "make_circular_diff",
    "make_weighted_distance_metric",
    "split_configs",
    "subtract_states",
    "wrap_to_pi",
]
