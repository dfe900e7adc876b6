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
Configuration Space Utilities

Distance metrics, difference functions and a reference constraint checker.

## Functions

- euclidean_distance(): Default metric
- subtract_states(): Default difference function
- make_circular_diff(): Difference function wrapping selected DOFs to [-pi, pi)
- make_weighted_distance_metric(): Weighted metric on top of a difference function

## Classes

- SegmentConstraintChecker: Turns a per-configuration validity test into a
  ConstraintChecker by discretizing segments
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
import math
from typing import TYPE_CHECKING

import numpy as np

from rrtplan.planning.spec.enums import ConstraintFilterOptions, IntervalType

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from rrtplan.planning.spec.protocols import DiffStateFn, DistanceMetric
    from rrtplan.planning.spec.types import ConstraintFilterReturn

CONSTRAINT_VIOLATED = 1


def euclidean_distance(q0: NDArray[np.float64], q1: NDArray[np.float64]) -> float:
    return float(np.linalg.norm(np.asarray(q0, dtype=np.float64) - np.asarray(q1, dtype=np.float64)))


def subtract_states(q0: NDArray[np.float64], q1: NDArray[np.float64]) -> NDArray[np.float64]:
    return np.asarray(q0, dtype=np.float64) - np.asarray(q1, dtype=np.float64)


def wrap_to_pi(values: NDArray[np.float64]) -> NDArray[np.float64]:
    """Wrap angles to [-pi, pi)."""
    return (values + math.pi) % (2.0 * math.pi) - math.pi


def make_circular_diff(circular: Sequence[bool]) -> DiffStateFn:
    """Difference function taking the short way around on circular DOFs.

    Example:
        # planar arm whose first joint spins freely
        diff = make_circular_diff([True, False])
        diff(np.array([3.1, 0.0]), np.array([-3.1, 0.0]))  # -> [-0.083, 0.0]
    """
    mask = np.asarray(circular, dtype=bool)

    def diff(q0: NDArray[np.float64], q1: NDArray[np.float64]) -> NDArray[np.float64]:
        delta = subtract_states(q0, q1)
        delta[mask] = wrap_to_pi(delta[mask])
        return delta

    return diff


def make_weighted_distance_metric(
    weights: Sequence[float] | None = None,
    diff_state_fn: DiffStateFn | None = None,
) -> DistanceMetric:
    """Weighted Euclidean metric ``sqrt(sum(w * d**2))`` over ``diff_state_fn``."""
    diff_fn = diff_state_fn or subtract_states
    w = None if weights is None else np.asarray(weights, dtype=np.float64)

    def metric(q0: NDArray[np.float64], q1: NDArray[np.float64]) -> float:
        delta = diff_fn(q0, q1)
        if w is None:
            return float(np.sqrt(np.dot(delta, delta)))
        return float(np.sqrt(np.dot(w * delta, delta)))

    return metric


class SegmentConstraintChecker:
    """ConstraintChecker built from a per-configuration validity function.

    Segments are discretized so that no DOF moves more than ``resolution``
    between two checked configurations.

    Example:
        checker = SegmentConstraintChecker(lambda q: q[0] < 5.0, resolution=0.1)
        checker.check(np.zeros(2), np.array([6.0, 0.0]))  # -> CONSTRAINT_VIOLATED
    """

    def __init__(
        self,
        is_valid: Callable[[NDArray[np.float64]], bool],
        resolution: float = 0.05,
        diff_state_fn: DiffStateFn | None = None,
    ) -> None:
        if resolution <= 0:
            raise ValueError(f"resolution must be positive, got {resolution}")
        self._is_valid = is_valid
        self._resolution = resolution
        self._diff_state_fn = diff_state_fn or subtract_states
        self.num_checks = 0

    def check(
        self,
        q0: NDArray[np.float64],
        q1: NDArray[np.float64],
        dq0: NDArray[np.float64] | None = None,
        dq1: NDArray[np.float64] | None = None,
        elapsed_time: float = 0.0,
        interval: IntervalType = IntervalType.OPEN_START,
        options: int = ConstraintFilterOptions.DEFAULT,
        filter_return: ConstraintFilterReturn | None = None,
    ) -> int:
        q_start = np.asarray(q0, dtype=np.float64)
        delta = self._diff_state_fn(q1, q_start)
        num_steps = int(np.ceil(float(np.max(np.abs(delta), initial=0.0)) / self._resolution))
        fill = bool(options & ConstraintFilterOptions.FILL_CHECKED_CONFIGURATION)

        if num_steps == 0:
            # single configuration
            if not self._check_config(q_start, filter_return):
                return CONSTRAINT_VIOLATED
            return 0

        first = 0 if interval in (IntervalType.OPEN_END, IntervalType.CLOSED) else 1
        last = num_steps if interval in (IntervalType.OPEN_START, IntervalType.CLOSED) else num_steps - 1

        checked: list[NDArray[np.float64]] = []
        for step in range(first, last + 1):
            q = q_start + (step / num_steps) * delta
            if not self._check_config(q, filter_return):
                return CONSTRAINT_VIOLATED
            if 0 < step < num_steps:
                checked.append(q)

        if fill and filter_return is not None:
            filter_return.configurations = checked
        return 0

    def _check_config(
        self, q: NDArray[np.float64], filter_return: ConstraintFilterReturn | None
    ) -> bool:
        self.num_checks += 1
        if self._is_valid(q):
            return True
        if filter_return is not None:
            filter_return.invalid_values = q.copy()
        return False
