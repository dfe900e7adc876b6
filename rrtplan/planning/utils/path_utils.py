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
Path Utilities

Standalone helpers for configuration buffers and paths. These functions are
stateless and can be used by any planner implementation.

## Functions

- split_configs(): Split a flattened configuration buffer into configurations
- compute_path_length(): Total length of a path under a metric
- is_path_feasible(): Check every segment of a path against a ConstraintChecker
- is_path_within_limits(): Check every waypoint against configuration limits
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import numpy as np

from rrtplan.planning.spec.enums import IntervalType
from rrtplan.planning.utils.space_utils import euclidean_distance

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from rrtplan.planning.spec import ConfigPath, ConstraintChecker, DistanceMetric


def split_configs(buffer: Sequence[float], dof: int) -> ConfigPath | None:
    """Split a flattened buffer into configurations of ``dof`` values.

    Returns None when the buffer length is not a multiple of ``dof``.

    Example:
        split_configs([0.0, 0.0, 1.0, 1.0], dof=2)  # -> [array([0., 0.]), array([1., 1.])]
    """
    values = np.asarray(buffer, dtype=np.float64).ravel()
    if dof <= 0 or values.size % dof:
        return None
    return [values[i : i + dof].copy() for i in range(0, values.size, dof)]


def compute_path_length(path: ConfigPath, metric: DistanceMetric | None = None) -> float:
    """Sum of the distances between consecutive waypoints.

    Args:
        path: Path to measure
        metric: Distance metric, Euclidean when None

    Returns:
        Total length, 0 for paths with fewer than two waypoints
    """
    dist = metric or euclidean_distance
    return float(sum(dist(path[i], path[i + 1]) for i in range(len(path) - 1)))


def is_path_feasible(checker: ConstraintChecker, path: ConfigPath) -> bool:
    """Check that the constraint checker accepts every segment of ``path``.

    The first waypoint is checked on its own, every following segment with
    IntervalType.OPEN_START so each configuration is evaluated once.
    """
    if not path:
        return False
    if checker.check(path[0], path[0], interval=IntervalType.OPEN_START) != 0:
        return False
    return all(
        checker.check(path[i], path[i + 1], interval=IntervalType.OPEN_START) == 0
        for i in range(len(path) - 1)
    )


def is_path_within_limits(
    path: ConfigPath,
    lower_limits: NDArray[np.float64],
    upper_limits: NDArray[np.float64],
) -> bool:
    """Check if all waypoints in path are within the configuration limits."""
    for q in path:
        if np.any(q < lower_limits) or np.any(q > upper_limits):
            return False
    return True
