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

"""Growable forest of sampled configurations shared by all RRT planners.

Nodes live in an arena addressed by stable integer index. Each node stores its
configuration, the index of its parent (-1 for roots), an integer tag (the
start/goal index for roots) and a validity flag. Invalidated nodes stay in
storage so indices handed out earlier remain meaningful.
"""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import TYPE_CHECKING, TextIO

import numpy as np

from rrtplan.planning.spec.enums import ExtendType, IntervalType
from rrtplan.planning.utils.space_utils import subtract_states

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from rrtplan.planning.spec import ConstraintChecker, DiffStateFn, DistanceMetric, NodeIndex

NO_PARENT = -1

# A reached node counts as the target when closer than this fraction of the step length
CONNECT_TOLERANCE_RATIO = 1e-6


@dataclass(frozen=True)
class ExtendResult:
    """Outcome of SpatialTree.extend(), ``node`` is None only when FAILED."""

    status: ExtendType
    node: NodeIndex | None = None

    @property
    def failed(self) -> bool:
        return self.status == ExtendType.FAILED

    @property
    def connected(self) -> bool:
        return self.status == ExtendType.CONNECTED


class SpatialTree:
    """Rooted forest with nearest-neighbor lookup and step-bounded extension.

    Args:
        fwd_index: 0 for a tree grown from the start, 1 for one grown from the goals.
    """

    def __init__(self, fwd_index: int = 0) -> None:
        self.fwd_index = fwd_index
        self._dof = 0
        self._step_length = 0.0
        self._extent_hint = 0.0
        self._connect_tolerance = 0.0
        self._distance_metric: DistanceMetric | None = None
        self._diff_state_fn: DiffStateFn = subtract_states
        self._constraint_checker: ConstraintChecker | None = None
        self._configs: list[NDArray[np.float64]] = []
        self._parents: list[int] = []
        self._tags: list[int] = []
        self._valid: list[bool] = []

    def init(
        self,
        dof: int,
        distance_metric: DistanceMetric,
        step_length: float,
        extent_hint: float,
        constraint_checker: ConstraintChecker,
        diff_state_fn: DiffStateFn | None = None,
    ) -> None:
        """Configure the tree and drop all nodes.

        Args:
            dof: Dimension of every configuration
            distance_metric: Metric used for nearest-neighbor lookup
            step_length: Maximum metric distance covered by one sub-step
            extent_hint: Diameter of the configuration space under the metric
            constraint_checker: Oracle validating every extension sub-step
            diff_state_fn: Wrap-aware difference function, subtraction when None
        """
        if dof <= 0:
            raise ValueError(f"dof must be positive, got {dof}")
        if step_length <= 0:
            raise ValueError(f"step_length must be positive, got {step_length}")
        self._dof = dof
        self._distance_metric = distance_metric
        self._step_length = step_length
        self._extent_hint = extent_hint
        self._constraint_checker = constraint_checker
        self._diff_state_fn = diff_state_fn or subtract_states
        self._connect_tolerance = CONNECT_TOLERANCE_RATIO * step_length
        self.reset()

    def reset(self) -> None:
        self._configs = []
        self._parents = []
        self._tags = []
        self._valid = []

    @property
    def dof(self) -> int:
        return self._dof

    @property
    def step_length(self) -> float:
        return self._step_length

    @property
    def extent_hint(self) -> float:
        return self._extent_hint

    def insert_node(
        self,
        parent: NodeIndex | None,
        config: NDArray[np.float64],
        tag: int = 0,
    ) -> NodeIndex:
        """Append a node and return its index. The configuration is copied."""
        q = np.array(config, dtype=np.float64)
        if q.shape != (self._dof,):
            raise ValueError(f"Configuration has shape {q.shape}, tree expects ({self._dof},)")
        if parent is not None and not 0 <= parent < len(self._configs):
            raise ValueError(f"Parent index {parent} does not exist")
        self._configs.append(q)
        self._parents.append(NO_PARENT if parent is None else parent)
        self._tags.append(tag)
        self._valid.append(True)
        return len(self._configs) - 1

    def extend(self, target: NDArray[np.float64], one_step: bool = False) -> ExtendResult:
        """Grow the tree from its nearest live node toward ``target``.

        The displacement is split into ``ceil(dist / step_length)`` equal
        sub-steps. Each sub-step is validated by the constraint checker and
        inserted as a child of the previous one; walking stops at the first
        rejected sub-step, or after the first accepted one when ``one_step``.
        """
        if self._constraint_checker is None or self._distance_metric is None:
            raise RuntimeError("SpatialTree.init() must be called before extend()")

        q_target = np.asarray(target, dtype=np.float64)
        nearest, dist = self._nearest(q_target)
        if nearest is None:
            return ExtendResult(ExtendType.FAILED)
        if dist <= self._connect_tolerance:
            return ExtendResult(ExtendType.CONNECTED, nearest)

        q_near = self._configs[nearest]
        delta = self._diff_state_fn(q_target, q_near)
        num_steps = max(1, math.ceil(dist / self._step_length))

        last: NodeIndex | None = None
        parent = nearest
        q_prev = q_near
        for step in range(1, num_steps + 1):
            if step == num_steps:
                q_new = q_target.copy()
            else:
                q_new = q_near + (step / num_steps) * delta
            if self._constraint_checker.check(q_prev, q_new, interval=IntervalType.OPEN_START) != 0:
                break
            last = parent = self.insert_node(parent, q_new)
            q_prev = q_new
            if one_step:
                break

        if last is None:
            return ExtendResult(ExtendType.FAILED)
        if self._distance_metric(self._configs[last], q_target) <= self._connect_tolerance:
            return ExtendResult(ExtendType.CONNECTED, last)
        return ExtendResult(ExtendType.ADVANCED, last)

    def _nearest(self, target: NDArray[np.float64]) -> tuple[NodeIndex | None, float]:
        assert self._distance_metric is not None
        best: NodeIndex | None = None
        best_dist = math.inf
        for index, q in enumerate(self._configs):
            if not self._valid[index]:
                continue
            dist = self._distance_metric(q, target)
            if dist < best_dist:
                best, best_dist = index, dist
        return best, best_dist

    def get_vector_config(self, node: NodeIndex) -> NDArray[np.float64]:
        return self._configs[node].copy()

    def get_node_from_index(self, index: int) -> NodeIndex:
        if not 0 <= index < len(self._configs):
            raise IndexError(f"Node index {index} out of range")
        return index

    def get_nodes_vector(self) -> list[NodeIndex]:
        """Indices of all live nodes in insertion order."""
        return [i for i, valid in enumerate(self._valid) if valid]

    def get_num_nodes(self) -> int:
        """Number of stored nodes, invalidated ones included."""
        return len(self._configs)

    def get_num_valid_nodes(self) -> int:
        return sum(self._valid)

    def get_parent(self, node: NodeIndex) -> NodeIndex | None:
        parent = self._parents[node]
        return None if parent == NO_PARENT else parent

    def get_tag(self, node: NodeIndex) -> int:
        return self._tags[node]

    def is_valid(self, node: NodeIndex) -> bool:
        return self._valid[node]

    def path_to_root(self, node: NodeIndex) -> list[NodeIndex]:
        """Node indices from the root down to ``node``."""
        chain = [node]
        while self._parents[chain[-1]] != NO_PARENT:
            chain.append(self._parents[chain[-1]])
            if len(chain) > len(self._configs):
                raise RuntimeError("Cycle detected in spatial tree")
        chain.reverse()
        return chain

    def get_root(self, node: NodeIndex) -> NodeIndex:
        return self.path_to_root(node)[0]

    def invalidate_nodes_with_parent(self, node: NodeIndex) -> None:
        """Mark ``node`` and all of its descendants as absent.

        Children always have a larger index than their parent, so a single
        forward sweep reaches every descendant.
        """
        self._valid[node] = False
        for index in range(node + 1, len(self._configs)):
            parent = self._parents[index]
            if self._valid[index] and parent != NO_PARENT and not self._valid[parent]:
                self._valid[index] = False

    def dump_tree(self, stream: TextIO) -> None:
        """Write ``<dof values> <parent index>`` for every live node."""
        for index in self.get_nodes_vector():
            values = " ".join(f"{v:.17g}" for v in self._configs[index])
            stream.write(f"{values} {self._parents[index]}\n")
