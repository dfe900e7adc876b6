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

"""Single-tree goal-biased RRT planner."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

import numpy as np

from rrtplan.planning.planners.rrt_planner import (
    DEFAULT_MAX_ITERATIONS,
    PATH_OPTIMIZATION_ITERATIONS,
    RrtPlannerBase,
    create_failure_result,
)
from rrtplan.planning.spec import (
    BasicRRTParameters,
    PlannerAction,
    PlannerProgress,
    PlanningResult,
    PlanningStatus,
)
from rrtplan.planning.utils.path_utils import compute_path_length, split_configs
from rrtplan.utils.logging_config import setup_logger

if TYPE_CHECKING:
    import threading

    from numpy.typing import NDArray

    from rrtplan.planning.spec import NodeIndex, PlannerParameters, Trajectory

logger = setup_logger()

# goal_fn values at or below this count as reaching the goal
GOAL_HEURISTIC_TOLERANCE = 1e-4


class BasicRrtPlanner(RrtPlannerBase):
    """Grows one tree from the starts, one step at a time, biased toward known goals.

    Success is declared as soon as a new node lands within two step lengths
    of a goal, or the goal heuristic ``goal_fn`` vanishes at it.
    """

    parameters_class = BasicRRTParameters

    def __init__(self, env_lock: threading.RLock | None = None) -> None:
        super().__init__(env_lock)
        self._goals: list[NDArray[np.float64]] = []

    def get_name(self) -> str:
        return "BasicRRT"

    def init_plan(self, params: PlannerParameters) -> bool:
        with self._env_lock:
            rrt_params = BasicRRTParameters.from_parameters(params)
            if rrt_params.max_iterations <= 0:
                rrt_params.max_iterations = DEFAULT_MAX_ITERATIONS
            if not self._init_plan(rrt_params):
                return False
            self._parameters = None

            goals = split_configs(rrt_params.goal_config, rrt_params.get_dof())
            if goals is None:
                logger.error("Goals are improperly specified")
                self._reset_session()
                return False

            assert rrt_params.constraint_checker is not None
            self._goals = []
            for index, q in enumerate(goals):
                if rrt_params.constraint_checker.check(q, q) == 0:
                    self._goals.append(q)
                else:
                    logger.warning(f"Goal {index} in collision")

            if not self._goals and rrt_params.goal_fn is None:
                logger.warning("No goals or goal function specified")
                self._reset_session()
                return False

            self._parameters = rrt_params
            logger.debug("Basic RRT planner initialized", goals=len(self._goals))
            return True

    def _reset_session(self) -> None:
        super()._reset_session()
        self._goals = []

    def _params(self) -> BasicRRTParameters:
        params = self._require_parameters()
        assert isinstance(params, BasicRRTParameters)
        return params

    def plan_path(self, trajectory: Trajectory | None = None) -> PlanningResult:
        self._goal_index = -1
        self._start_index = -1
        if self._parameters is None:
            logger.warning("Planner not initialized")
            return create_failure_result(PlanningStatus.NOT_READY, "Planner not initialized")

        with self._env_lock:
            return self._plan_path(trajectory)

    def _plan_path(self, trajectory: Trajectory | None) -> PlanningResult:
        params = self._params()
        start_time = time.time()
        metric = params.get_distance_metric()

        last_node: NodeIndex | None = None
        reached_goal: int | None = None
        success = False
        iteration = 0

        while not success and iteration < params.max_iterations:
            iteration += 1

            if params.sample_goal_fn is not None:
                q_goal = params.sample_goal_fn()
                if q_goal is not None and self._is_config_valid(q_goal):
                    logger.debug("Found goal")
                    self._goals.append(np.asarray(q_goal, dtype=np.float64))
            self._sample_new_initial()

            target: NDArray[np.float64] | None
            if self._goals and (
                iteration == 1
                or self._uniform_sampler.sample_sequence_one_real() < params.goal_bias_prob
            ):
                choice = self._uniform_sampler.sample_sequence_one_uint32() % len(self._goals)
                target = self._goals[choice]
            else:
                target = self._sample_config()

            if target is not None:
                extended = self._tree_forward.extend(target, one_step=True)
                if not extended.failed:
                    assert extended.node is not None
                    last_node = extended.node
                    q_reached = self._tree_forward.get_vector_config(last_node)
                    for goal_index, q_goal in enumerate(self._goals):
                        if metric(q_goal, q_reached) < 2 * params.step_length:
                            success = True
                            reached_goal = goal_index
                            logger.debug(f"Found goal index: {goal_index}")
                            break
                    if (
                        not success
                        and params.goal_fn is not None
                        and params.goal_fn(q_reached) <= GOAL_HEURISTIC_TOLERANCE
                    ):
                        success = True
                        logger.debug("Node at goal")

            if success:
                break

            action = self._call_callbacks(PlannerProgress(iteration=iteration))
            if action == PlannerAction.INTERRUPT:
                logger.info("Planning interrupted", iteration=iteration)
                return create_failure_result(
                    PlanningStatus.INTERRUPTED,
                    "Interrupted by progress callback",
                    time.time() - start_time,
                    iteration,
                )

        planning_time = time.time() - start_time
        if not success or last_node is None:
            logger.warning(f"Iterations exceeded {params.max_iterations}, plan failed")
            return create_failure_result(
                PlanningStatus.FAILED,
                f"No path found after {iteration} iterations",
                planning_time,
                iteration,
            )

        chain = self._tree_forward.path_to_root(last_node)
        path = [self._tree_forward.get_vector_config(node) for node in chain]
        path = self._simple_optimize_path(path, PATH_OPTIMIZATION_ITERATIONS)
        if reached_goal is not None:
            self._append_goal(path, self._goals[reached_goal])

        self._start_index = self._tree_forward.get_tag(chain[0])
        self._goal_index = -1 if reached_goal is None else reached_goal
        self._emit_path(trajectory, path)

        logger.info(f"Plan success, path={len(path)} points in {planning_time:.3f}s")
        return PlanningResult(
            status=PlanningStatus.SUCCESS,
            path=path,
            planning_time=planning_time,
            path_length=compute_path_length(path, metric),
            iterations=iteration,
            start_index=self._start_index,
            goal_index=self._goal_index,
            message="Path found",
        )

    def _append_goal(self, path: list[NDArray[np.float64]], q_goal: NDArray[np.float64]) -> None:
        """End the path on the matched goal when the last hop to it is feasible."""
        params = self._params()
        assert params.constraint_checker is not None
        if params.get_distance_metric()(path[-1], q_goal) <= 0.0:
            return
        if params.constraint_checker.check(path[-1], q_goal) == 0:
            path.append(q_goal.copy())
