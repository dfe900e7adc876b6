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

"""RRT-based exploration planner.

Grows a single tree for coverage instead of toward a goal. The result is the
set of explored configurations, not a point-to-point path.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from rrtplan.planning.planners.rrt_planner import (
    DEFAULT_MAX_ITERATIONS,
    RrtPlannerBase,
    create_failure_result,
)
from rrtplan.planning.spec import (
    ExplorationParameters,
    IntervalType,
    PlannerAction,
    PlannerProgress,
    PlanningResult,
    PlanningStatus,
)
from rrtplan.utils.logging_config import setup_logger

if TYPE_CHECKING:
    import threading

    from rrtplan.planning.spec import PlannerParameters, Trajectory

logger = setup_logger()


class ExplorationPlanner(RrtPlannerBase):
    """Expands the forward tree until ``expected_data_size`` nodes exist.

    With probability ``explore_prob`` a random node is asked for a neighbor
    through ``sample_neighbor_fn``; otherwise the tree takes one regular
    extension step toward a uniform sample.
    """

    parameters_class = ExplorationParameters

    def __init__(self, env_lock: threading.RLock | None = None) -> None:
        super().__init__(env_lock)

    def get_name(self) -> str:
        return "ExplorationRRT"

    def init_plan(self, params: PlannerParameters) -> bool:
        with self._env_lock:
            explore_params = ExplorationParameters.from_parameters(params)
            if explore_params.max_iterations <= 0:
                explore_params.max_iterations = DEFAULT_MAX_ITERATIONS
            if explore_params.explore_prob > 0 and explore_params.sample_neighbor_fn is None:
                logger.error("explore_prob is set but no sample_neighbor_fn was supplied")
                self._reset_session()
                return False
            if not self._init_plan(explore_params):
                return False
            logger.debug("Exploration planner initialized")
            return True

    def _params(self) -> ExplorationParameters:
        params = self._require_parameters()
        assert isinstance(params, ExplorationParameters)
        return params

    def plan_path(self, trajectory: Trajectory | None = None) -> PlanningResult:
        self._goal_index = -1
        self._start_index = -1
        if self._parameters is None:
            return create_failure_result(PlanningStatus.NOT_READY, "Planner not initialized")

        with self._env_lock:
            return self._plan_path(trajectory)

    def _plan_path(self, trajectory: Trajectory | None) -> PlanningResult:
        params = self._params()
        start_time = time.time()
        tree = self._tree_forward
        checker = params.constraint_checker
        assert checker is not None

        iteration = 0
        while iteration < params.max_iterations and tree.get_num_nodes() < params.expected_data_size:
            iteration += 1

            explore = self._uniform_sampler.sample_sequence_one_real() < params.explore_prob
            if explore and tree.get_num_nodes() > 0:
                assert params.sample_neighbor_fn is not None
                index = self._uniform_sampler.sample_sequence_one_uint32() % tree.get_num_nodes()
                node = tree.get_node_from_index(index)
                q_node = tree.get_vector_config(node)
                q_sample = params.sample_neighbor_fn(q_node, params.step_length)
                if q_sample is None:
                    logger.warning(f"Neighbor sampling failed at node {node}")
                    return create_failure_result(
                        PlanningStatus.FAILED,
                        f"Neighbor sampling failed at node {node}",
                        time.time() - start_time,
                        iteration,
                    )
                if checker.check(q_node, q_sample, interval=IntervalType.OPEN_START) == 0:
                    tree.insert_node(node, q_sample)
                    logger.debug(f"size {tree.get_num_nodes()}")
            else:
                q_sample = self._sample_config()
                if q_sample is not None and tree.extend(q_sample, one_step=True).connected:
                    logger.debug(f"size {tree.get_num_nodes()}")

            if self._call_callbacks(PlannerProgress(iteration=iteration)) == PlannerAction.INTERRUPT:
                logger.info("Exploration interrupted", iteration=iteration)
                return create_failure_result(
                    PlanningStatus.INTERRUPTED,
                    "Interrupted by progress callback",
                    time.time() - start_time,
                    iteration,
                )

        path = [tree.get_vector_config(node) for node in tree.get_nodes_vector()]
        self._emit_path(trajectory, path)
        planning_time = time.time() - start_time
        logger.info(f"Exploration finished with {len(path)} nodes in {planning_time:.3f}s")
        return PlanningResult(
            status=PlanningStatus.SUCCESS,
            path=path,
            planning_time=planning_time,
            iterations=iteration,
            message=f"Explored {len(path)} configurations",
        )
