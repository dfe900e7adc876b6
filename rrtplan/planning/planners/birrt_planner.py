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

"""Bi-directional RRT-Connect planner with multiple goals.

See J.J. Kuffner and S.M. LaValle, "RRT-Connect: An efficient approach to
single-query path planning", ICRA 2000.
"""

from __future__ import annotations

from pathlib import Path
import time
from typing import TYPE_CHECKING

import numpy as np

from rrtplan.constants import DEFAULT_TREE_DUMP_FILE
from rrtplan.planning.planners.rrt_planner import (
    DEFAULT_MAX_ITERATIONS,
    PATH_OPTIMIZATION_ITERATIONS,
    RrtPlannerBase,
    create_failure_result,
)
from rrtplan.planning.spec import (
    GoalPath,
    PlannerAction,
    PlannerProgress,
    PlanningResult,
    PlanningStatus,
    RRTParameters,
)
from rrtplan.planning.tree.spatial_tree import SpatialTree
from rrtplan.planning.utils.path_utils import compute_path_length, split_configs
from rrtplan.utils.logging_config import setup_logger

if TYPE_CHECKING:
    import threading

    from numpy.typing import NDArray

    from rrtplan.planning.spec import NodeIndex, PlannerParameters, Trajectory

logger = setup_logger()

# Every round charges this many ticks against 3 * max_iterations
TICKS_PER_ROUND = 3


class BirrtPlanner(RrtPlannerBase):
    """Grows a forward tree from the starts and a backward tree from the goals.

    The trees take turns: tree A extends toward a sample, then tree B extends
    toward what A reached. When B connects, the joined path becomes a
    candidate. With ``minimum_goal_paths > 1`` the goal just reached is
    invalidated and planning continues toward the remaining goals; the
    shortest candidate is returned.
    """

    parameters_class = RRTParameters

    def __init__(self, env_lock: threading.RLock | None = None) -> None:
        super().__init__(env_lock)
        self._tree_backward = SpatialTree(1)
        self._goal_nodes: list[NodeIndex | None] = []
        self._num_valid_goals = 0
        self._goal_paths: list[GoalPath] = []

    def get_name(self) -> str:
        return "BiRRT"

    @property
    def backward_tree(self) -> SpatialTree:
        return self._tree_backward

    def get_goal_paths(self) -> list[GoalPath]:
        """Candidate paths collected by the last plan_path() call."""
        return list(self._goal_paths)

    def init_plan(self, params: PlannerParameters) -> bool:
        """Build both trees, returns False when the planner is not ready."""
        with self._env_lock:
            rrt_params = RRTParameters.from_parameters(params)
            if rrt_params.max_iterations <= 0:
                rrt_params.max_iterations = DEFAULT_MAX_ITERATIONS
            if not self._init_plan(rrt_params):
                return False
            self._parameters = None

            dof = rrt_params.get_dof()
            goals = split_configs(rrt_params.goal_config, dof)
            if goals is None:
                logger.error("Goals are improperly specified")
                self._reset_session()
                return False

            metric = rrt_params.get_distance_metric()
            assert rrt_params.constraint_checker is not None
            self._tree_backward.init(
                dof,
                metric,
                rrt_params.step_length,
                metric(rrt_params.get_lower_limits(), rrt_params.get_upper_limits()),
                rrt_params.constraint_checker,
                rrt_params.get_diff_state_fn(),
            )

            self._goal_nodes = []
            self._num_valid_goals = 0
            for index, q in enumerate(goals):
                if rrt_params.constraint_checker.check(q, q) == 0:
                    self._goal_nodes.append(self._tree_backward.insert_node(None, q, index))
                    self._num_valid_goals += 1
                else:
                    logger.warning(f"Goal {index} fails constraints")
                    # placeholder keeps goal indices aligned with the caller's list
                    self._goal_nodes.append(None)

            if self._tree_backward.get_num_nodes() == 0 and rrt_params.sample_goal_fn is None:
                logger.warning("No goals specified")
                self._reset_session()
                return False

            self._parameters = rrt_params
            logger.debug(
                "BiRRT planner initialized",
                initial=self._tree_forward.get_num_nodes(),
                goal=self._tree_backward.get_num_nodes(),
            )
            return True

    def _reset_session(self) -> None:
        super()._reset_session()
        self._tree_backward.reset()
        self._goal_nodes = []
        self._num_valid_goals = 0
        self._goal_paths = []

    def _params(self) -> RRTParameters:
        params = self._require_parameters()
        assert isinstance(params, RRTParameters)
        return params

    def plan_path(self, trajectory: Trajectory | None = None) -> PlanningResult:
        """Run RRT-Connect until enough candidate paths are found or the budget runs out."""
        self._goal_index = -1
        self._start_index = -1
        if self._parameters is None:
            logger.error("Planner not initialized")
            return create_failure_result(PlanningStatus.NOT_READY, "Planner not initialized")

        with self._env_lock:
            return self._plan_path(trajectory)

    def _plan_path(self, trajectory: Trajectory | None) -> PlanningResult:
        params = self._params()
        start_time = time.time()
        max_ticks = TICKS_PER_ROUND * params.max_iterations

        tree_a, tree_b = self._tree_forward, self._tree_backward
        goal_paths: list[GoalPath] = []
        self._goal_paths = goal_paths
        sample_goal = True
        ticks = 0

        while len(goal_paths) < params.minimum_goal_paths and ticks < max_ticks:
            ticks += TICKS_PER_ROUND
            logger.debug(
                "BiRRT round",
                iteration=ticks // TICKS_PER_ROUND,
                forward=self._tree_forward.get_num_nodes(),
                backward=self._tree_backward.get_num_nodes(),
            )

            self._sample_new_goal()
            self._sample_new_initial()

            target: NDArray[np.float64] | None = None
            if (
                sample_goal or self._uniform_sampler.sample_sequence_one_real() < params.goal_bias_prob
            ) and self._num_valid_goals > 0:
                sample_goal = False
                target = self._pick_unclaimed_goal(goal_paths)
            if target is None:
                target = self._sample_config()

            if target is not None:
                extended_a = tree_a.extend(target)
                if not extended_a.failed:
                    assert extended_a.node is not None
                    extended_b = tree_b.extend(tree_a.get_vector_config(extended_a.node))
                    if extended_b.connected:
                        assert extended_b.node is not None
                        if tree_a is self._tree_forward:
                            goal_path = self._extract_path(extended_a.node, extended_b.node)
                        else:
                            goal_path = self._extract_path(extended_b.node, extended_a.node)
                        goal_paths.append(goal_path)
                        logger.debug(
                            "Found a goal",
                            start_index=goal_path.start_index,
                            goal_index=goal_path.goal_index,
                            length=goal_path.length,
                        )
                        if (
                            len(goal_paths) >= params.minimum_goal_paths
                            or len(goal_paths) >= self._num_valid_goals
                        ):
                            break
                        sample_goal = True
                        # keep the remaining search away from the goal just reached
                        goal_node = self._goal_nodes[goal_path.goal_index]
                        if goal_node is not None:
                            self._tree_backward.invalidate_nodes_with_parent(goal_node)

                    tree_a, tree_b = tree_b, tree_a

            action = self._call_callbacks(PlannerProgress(iteration=ticks // TICKS_PER_ROUND))
            if action == PlannerAction.INTERRUPT:
                logger.info("Planning interrupted", iteration=ticks // TICKS_PER_ROUND)
                return create_failure_result(
                    PlanningStatus.INTERRUPTED,
                    "Interrupted by progress callback",
                    time.time() - start_time,
                    ticks // TICKS_PER_ROUND,
                )
            if action == PlannerAction.RETURN_WITH_ANY_SOLUTION and goal_paths:
                break

        iterations = ticks // TICKS_PER_ROUND
        planning_time = time.time() - start_time
        if not goal_paths:
            logger.warning(f"Plan failed after {iterations} iterations, {planning_time:.3f}s")
            return create_failure_result(
                PlanningStatus.FAILED,
                f"No path found after {iterations} iterations",
                planning_time,
                iterations,
            )

        best = min(goal_paths, key=lambda goal_path: goal_path.length)
        self._goal_index = best.goal_index
        self._start_index = best.start_index
        self._emit_path(trajectory, best.qall)

        logger.info(
            f"Plan success, iters={iterations}, path={len(best.qall)} points, "
            f"computation time={planning_time:.3f}s"
        )
        return PlanningResult(
            status=PlanningStatus.SUCCESS,
            path=[q.copy() for q in best.qall],
            planning_time=planning_time,
            path_length=compute_path_length(best.qall, params.get_distance_metric()),
            iterations=iterations,
            start_index=best.start_index,
            goal_index=best.goal_index,
            message="Path found",
        )

    def _sample_new_goal(self) -> None:
        """Add a configuration from ``sample_goal_fn`` as a new backward root."""
        params = self._params()
        if params.sample_goal_fn is None:
            return
        q = params.sample_goal_fn()
        if q is None:
            return
        if not self._is_config_valid(q):
            logger.debug("Sampled goal fails constraints")
            return
        index = len(self._goal_nodes)
        logger.debug(f"Inserting new goal index {index}")
        self._goal_nodes.append(self._tree_backward.insert_node(None, q, index))
        self._num_valid_goals += 1

    def _pick_unclaimed_goal(self, goal_paths: list[GoalPath]) -> NDArray[np.float64] | None:
        """Configuration of a random goal no candidate path ends on yet, if one is found."""
        claimed = {goal_path.goal_index for goal_path in goal_paths}
        num_goals = len(self._goal_nodes)
        for _ in range(3 * num_goals):
            goal_index = self._uniform_sampler.sample_sequence_one_uint32() % num_goals
            goal_node = self._goal_nodes[goal_index]
            if goal_node is None or goal_index in claimed:
                continue
            return self._tree_backward.get_vector_config(goal_node)
        return None

    def _extract_path(self, forward_node: NodeIndex, backward_node: NodeIndex) -> GoalPath:
        """Join both trees' root chains at the connection into a start-to-goal path."""
        params = self._params()
        forward_chain = self._tree_forward.path_to_root(forward_node)
        backward_chain = self._tree_backward.path_to_root(backward_node)[::-1]

        goal_path = GoalPath(
            start_index=self._tree_forward.get_tag(forward_chain[0]),
            goal_index=self._tree_backward.get_tag(backward_chain[-1]),
        )

        path = [self._tree_forward.get_vector_config(node) for node in forward_chain]
        # the backward connection node sits on the forward junction node
        path.extend(self._tree_backward.get_vector_config(node) for node in backward_chain[1:])

        goal_path.qall = self._simple_optimize_path(path, PATH_OPTIMIZATION_ITERATIONS)

        # First and last points only: raw RRT paths are often more tortuous
        # than what they simplify to.
        diff = params.get_diff_state_fn()(goal_path.qall[0], goal_path.qall[-1])
        goal_path.length = float(np.sum(np.abs(diff) * params.get_velocity_weights()))
        return goal_path

    def dump_tree(self, filename: str | Path | None = None) -> Path:
        """Write the forward then the backward tree, one ``<values> <parent>`` row per node."""
        path = Path(filename) if filename is not None else DEFAULT_TREE_DUMP_FILE
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Dumping rrt tree to {path}")
        with open(path, "w", encoding="utf-8") as f:
            self._tree_forward.dump_tree(f)
            self._tree_backward.dump_tree(f)
        return path
