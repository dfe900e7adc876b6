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

"""Shared base of the RRT planners: session setup and path shortcutting.

These planners are backend-agnostic - they only reach the world through the
ConstraintChecker, metric and samplers bundled in PlannerParameters.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
import threading
from typing import TYPE_CHECKING, ClassVar

import numpy as np

from rrtplan.planning.spec import (
    ConstraintFilterOptions,
    ConstraintFilterReturn,
    IntervalType,
    PlannerAction,
    PlannerParameters,
    PlannerProgress,
    PlanningResult,
    PlanningStatus,
)
from rrtplan.planning.tree.spatial_tree import SpatialTree
from rrtplan.planning.utils.path_utils import split_configs
from rrtplan.planning.utils.sampler import UniformSampler
from rrtplan.utils.logging_config import setup_logger

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from rrtplan.planning.spec import ConfigPath, PlanCallback, Trajectory

logger = setup_logger()

# Shortcutting gives up once this many more rejections than waypoints pile up
SHORTCUT_REJECTION_MARGIN = 4

# Shortcutting budget applied to every extracted path
PATH_OPTIMIZATION_ITERATIONS = 10

DEFAULT_MAX_ITERATIONS = 10000


class RrtPlannerBase(ABC):
    """Common state of the RRT planners.

    Owns the forward tree, the seeded uniform sampler and the registered
    progress callbacks. ``init_plan`` and ``plan_path`` of subclasses run
    under ``env_lock``, which callers may share with whatever simulation state
    their constraint checker touches.
    """

    parameters_class: ClassVar[type[PlannerParameters]] = PlannerParameters

    def __init__(self, env_lock: threading.RLock | None = None) -> None:
        self._env_lock = env_lock if env_lock is not None else threading.RLock()
        self._parameters: PlannerParameters | None = None
        self._uniform_sampler = UniformSampler()
        self._tree_forward = SpatialTree(0)
        self._initial_nodes: list[int | None] = []
        self._filter_return = ConstraintFilterReturn()
        self._callbacks: list[PlanCallback] = []
        self._goal_index = -1
        self._start_index = -1

    @abstractmethod
    def get_name(self) -> str: ...

    @abstractmethod
    def init_plan(self, params: PlannerParameters) -> bool:
        """Prepare a planning session, returns False when the planner is not ready."""

    @abstractmethod
    def plan_path(self, trajectory: Trajectory | None = None) -> PlanningResult:
        """Run the planning loop on the session prepared by init_plan()."""

    def get_parameters(self) -> PlannerParameters | None:
        return self._parameters

    def get_goal_index(self) -> int:
        """Index of the goal reached by the last plan, -1 if none."""
        return self._goal_index

    def get_init_goal_indices(self) -> tuple[int, int]:
        """(start index, goal index) of the last plan."""
        return self._start_index, self._goal_index

    @property
    def forward_tree(self) -> SpatialTree:
        return self._tree_forward

    def register_plan_callback(self, callback: PlanCallback) -> Callable[[], None]:
        """Register a progress callback, returns a function that unregisters it."""
        self._callbacks.append(callback)

        def unregister() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unregister

    def _call_callbacks(self, progress: PlannerProgress) -> PlannerAction:
        """Poll every callback, an interrupt request wins over any other answer."""
        action = PlannerAction.NONE
        for callback in list(self._callbacks):
            answer = callback(progress)
            if answer == PlannerAction.INTERRUPT:
                return answer
            if answer == PlannerAction.RETURN_WITH_ANY_SOLUTION:
                action = answer
        return action

    def _init_plan(self, params: PlannerParameters) -> bool:
        """Validate parameters, seed the sampler and root the forward tree."""
        self._reset_session()

        problem = params.validate()
        if problem is not None:
            logger.error(f"Invalid planner parameters: {problem}")
            return False

        dof = params.get_dof()
        initial_configs = split_configs(params.initial_config, dof)
        if initial_configs is None:
            logger.error(
                f"Initial config wrong dim: {len(params.initial_config)} % {dof} != 0"
            )
            return False

        self._uniform_sampler.set_seed(params.random_seed)
        for sampler in params.internal_samplers:
            sampler.set_seed(params.random_seed)

        metric = params.get_distance_metric()
        checker = params.constraint_checker
        assert checker is not None
        self._tree_forward.init(
            dof,
            metric,
            params.step_length,
            metric(params.get_lower_limits(), params.get_upper_limits()),
            checker,
            params.get_diff_state_fn(),
        )

        self._initial_nodes = []
        for index, q in enumerate(initial_configs):
            if checker.check(q, q, interval=IntervalType.OPEN_START) != 0:
                logger.warning(f"Initial configuration {index} fails constraints")
                self._initial_nodes.append(None)
                continue
            self._initial_nodes.append(self._tree_forward.insert_node(None, q, index))

        if self._tree_forward.get_num_nodes() == 0 and params.sample_initial_fn is None:
            logger.warning("No initial configurations")
            return False

        self._parameters = params
        return True

    def _reset_session(self) -> None:
        """Drop the parameters and every node of the previous session."""
        self._parameters = None
        self._goal_index = -1
        self._start_index = -1
        self._tree_forward.reset()
        self._initial_nodes = []

    def _require_parameters(self) -> PlannerParameters:
        assert self._parameters is not None
        return self._parameters

    def _is_config_valid(self, q: NDArray[np.float64]) -> bool:
        checker = self._require_parameters().constraint_checker
        assert checker is not None
        return checker.check(q, q, interval=IntervalType.OPEN_START) == 0

    def _sample_config(self) -> NDArray[np.float64] | None:
        """Uniform sample from ``sample_fn``, or inside the limits when it is unset."""
        params = self._require_parameters()
        if params.sample_fn is not None:
            q = params.sample_fn()
            return None if q is None else np.asarray(q, dtype=np.float64)
        return self._uniform_sampler.sample_sequence(
            params.get_lower_limits(), params.get_upper_limits()
        )

    def _sample_new_initial(self) -> None:
        """Add a configuration from ``sample_initial_fn`` as a new forward root."""
        params = self._require_parameters()
        if params.sample_initial_fn is None:
            return
        q = params.sample_initial_fn()
        if q is None:
            return
        if not self._is_config_valid(q):
            logger.debug("Sampled initial configuration fails constraints")
            return
        index = len(self._initial_nodes)
        logger.debug(f"Inserting new initial {index}")
        self._initial_nodes.append(self._tree_forward.insert_node(None, q, index))

    def _simple_optimize_path(self, path: ConfigPath, num_iterations: int) -> ConfigPath:
        """Shorten ``path`` by random shortcuts validated with the checker.

        Picks ``end`` at least two waypoints after ``start`` and tries the
        direct transition between them. On success the waypoints in between
        are replaced by the intermediate configurations the checker reported,
        or dropped when those would not make the path shorter. Endpoints never
        move and the waypoint count never grows.
        """
        if len(path) <= 2:
            return list(path)

        checker = self._require_parameters().constraint_checker
        assert checker is not None
        options = ConstraintFilterOptions.DEFAULT | ConstraintFilterOptions.FILL_CHECKED_CONFIGURATION

        optimized = list(path)
        num_rejected = 0
        for _ in range(num_iterations):
            if len(optimized) <= 2 or num_rejected >= len(optimized) + SHORTCUT_REJECTION_MARGIN:
                break

            end = 2 + self._uniform_sampler.sample_sequence_one_uint32() % (len(optimized) - 2)
            start = self._uniform_sampler.sample_sequence_one_uint32() % (end - 1)

            self._filter_return.clear()
            if (
                checker.check(
                    optimized[start],
                    optimized[end],
                    interval=IntervalType.OPEN,
                    options=options,
                    filter_return=self._filter_return,
                )
                != 0
            ):
                num_rejected += 1
                continue

            middle = [np.array(q, dtype=np.float64) for q in self._filter_return.configurations]
            if len(middle) >= end - start - 1:
                middle = []
            optimized[start + 1 : end] = middle
            num_rejected = 0

        return optimized

    def _emit_path(self, trajectory: Trajectory | None, path: ConfigPath) -> None:
        """Append ``path`` to the caller's trajectory, initializing its layout if empty."""
        if trajectory is None:
            return
        if trajectory.get_dof() == 0:
            trajectory.init(self._require_parameters().get_configuration_specification())
        trajectory.insert(trajectory.get_num_waypoints(), path)


# ============= Result Helpers =============


def create_failure_result(
    status: PlanningStatus,
    message: str,
    planning_time: float = 0.0,
    iterations: int = 0,
) -> PlanningResult:
    """Create a failed planning result."""
    return PlanningResult(
        status=status,
        path=[],
        planning_time=planning_time,
        iterations=iterations,
        message=message,
    )
