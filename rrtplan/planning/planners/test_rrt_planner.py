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

"""Tests for the shared RRT planner setup and path shortcutting."""

from unittest.mock import MagicMock

import numpy as np
import pytest

from rrtplan.planning.planners.basic_rrt_planner import BasicRrtPlanner
from rrtplan.planning.planners.birrt_planner import BirrtPlanner
from rrtplan.planning.planners.rrt_planner import SHORTCUT_REJECTION_MARGIN, RrtPlannerBase
from rrtplan.planning.spec import PlannerAction, PlannerProgress
from rrtplan.planning.utils.path_utils import is_path_feasible
from rrtplan.planning.utils.space_utils import SegmentConstraintChecker


def _straight_path(num_points: int) -> list[np.ndarray]:
    return [np.array([float(i), 0.0]) for i in range(num_points)]


@pytest.fixture
def planner(free_checker, make_params):
    planner = BirrtPlanner()
    assert planner.init_plan(make_params(free_checker, goal_config=[9.0, 0.0]))
    return planner


def test_base_class_is_abstract():
    with pytest.raises(TypeError):
        RrtPlannerBase()


# =============================================================================
# Test Initialization
# =============================================================================


class TestInitPlan:
    """Test validation of the initial configurations."""

    def test_initial_buffer_must_match_dof(self, free_checker, make_params):
        params = make_params(free_checker, initial_config=[0.0, 0.0, 1.0], goal_config=[9.0, 9.0])
        assert BirrtPlanner().init_plan(params) is False

    def test_missing_checker_not_ready(self, make_params):
        params = make_params(None, goal_config=[9.0, 9.0])
        assert BirrtPlanner().init_plan(params) is False

    def test_no_valid_start(self, wall_checker, make_params):
        params = make_params(wall_checker, initial_config=[5.0, 0.0], goal_config=[9.0, 9.0])
        assert BirrtPlanner().init_plan(params) is False

    def test_no_valid_start_with_initial_sampler(self, wall_checker, make_params):
        params = make_params(
            wall_checker,
            initial_config=[5.0, 0.0],
            goal_config=[9.0, 9.0],
            sample_initial_fn=lambda: None,
        )
        assert BirrtPlanner().init_plan(params) is True

    def test_roots_tagged_with_position(self, wall_checker, make_params):
        planner = BirrtPlanner()
        params = make_params(
            wall_checker,
            initial_config=[5.0, 0.0, 1.0, 1.0],
            goal_config=[9.0, 9.0],
        )
        assert planner.init_plan(params)

        tree = planner.forward_tree
        assert tree.get_num_nodes() == 1
        assert tree.get_tag(0) == 1

    def test_reinit_resets_trees(self, free_checker, make_params):
        planner = BirrtPlanner()
        params = make_params(free_checker, goal_config=[9.0, 9.0])
        assert planner.init_plan(params)
        planner.plan_path()

        assert planner.init_plan(params)
        assert planner.forward_tree.get_num_nodes() == 1
        assert planner.backward_tree.get_num_nodes() == 1

    def test_failed_goals_leave_no_session(self, wall_checker, make_params):
        planner = BirrtPlanner()
        assert planner.init_plan(make_params(wall_checker, goal_config=[9.0, 9.0]))

        assert not planner.init_plan(make_params(wall_checker, goal_config=[5.0, 5.0]))

        assert planner.get_parameters() is None
        assert planner.forward_tree.get_num_nodes() == 0
        assert planner.backward_tree.get_num_nodes() == 0

    def test_malformed_goals_leave_no_session(self, free_checker, make_params):
        planner = BasicRrtPlanner()

        assert not planner.init_plan(make_params(free_checker, goal_config=[1.0, 2.0, 3.0]))

        assert planner.get_parameters() is None
        assert planner.forward_tree.get_num_nodes() == 0

    def test_invalid_parameters_drop_previous_session(self, free_checker, make_params):
        planner = BirrtPlanner()
        assert planner.init_plan(make_params(free_checker, goal_config=[9.0, 9.0]))

        params = make_params(free_checker, goal_config=[9.0, 9.0], step_length=0.0)
        assert not planner.init_plan(params)

        assert planner.forward_tree.get_num_nodes() == 0
        assert planner.backward_tree.get_num_nodes() == 0

    def test_internal_samplers_seeded(self, free_checker, make_params):
        sampler = MagicMock()
        params = make_params(
            free_checker, goal_config=[9.0, 9.0], random_seed=11, internal_samplers=[sampler]
        )
        assert BasicRrtPlanner().init_plan(params)
        sampler.set_seed.assert_called_once_with(11)


# =============================================================================
# Test Shortcutting
# =============================================================================


class TestSimpleOptimizePath:
    """Test randomized shortcutting."""

    def test_short_path_untouched(self, planner):
        path = _straight_path(2)
        assert len(planner._simple_optimize_path(path, 10)) == 2

    def test_preserves_endpoints_and_never_grows(self, planner):
        path = _straight_path(10)

        optimized = planner._simple_optimize_path(path, 10)

        assert 2 <= len(optimized) < len(path)
        np.testing.assert_allclose(optimized[0], path[0])
        np.testing.assert_allclose(optimized[-1], path[-1])
        assert is_path_feasible(planner.get_parameters().constraint_checker, optimized)

    def test_direct_transition_when_interpolants_not_shorter(self, planner):
        # three checked interpolants would replace a single waypoint
        planner.get_parameters().constraint_checker = SegmentConstraintChecker(
            lambda q: True, resolution=0.5
        )
        path = [np.array([0.0, 0.0]), np.array([1.0, 1.0]), np.array([2.0, 0.0])]

        optimized = planner._simple_optimize_path(path, 10)

        assert len(optimized) == 2

    def test_interpolants_replace_detour(self, planner):
        # far detour: the checked interpolants are fewer than the waypoints removed
        planner.get_parameters().constraint_checker = SegmentConstraintChecker(
            lambda q: True, resolution=1.0
        )
        path = [np.array([0.0, 0.0])]
        path += [np.array([0.0, float(y)]) for y in range(1, 9)]
        path += [np.array([2.0, 8.0]), np.array([2.0, 0.0])]

        optimized = planner._simple_optimize_path(path, 50)

        assert len(optimized) < len(path)
        np.testing.assert_allclose(optimized[0], [0.0, 0.0])
        np.testing.assert_allclose(optimized[-1], [2.0, 0.0])

    def test_gives_up_after_rejections(self, planner):
        checker = MagicMock()
        checker.check.return_value = 1
        planner.get_parameters().constraint_checker = checker
        path = _straight_path(10)

        optimized = planner._simple_optimize_path(path, 100)

        assert len(optimized) == 10
        assert checker.check.call_count == len(path) + SHORTCUT_REJECTION_MARGIN

    def test_obstacle_blocks_shortcut(self, planner):
        # block 4 < x < 6 below y = 8, the path goes over it
        checker = SegmentConstraintChecker(lambda q: not (4.0 < q[0] < 6.0 and q[1] < 8.0))
        planner.get_parameters().constraint_checker = checker
        path = [
            np.array([3.0, 0.0]),
            np.array([3.0, 9.0]),
            np.array([7.0, 9.0]),
            np.array([7.0, 0.0]),
        ]

        optimized = planner._simple_optimize_path(path, 20)

        assert len(optimized) == len(path)
        assert is_path_feasible(checker, optimized)


# =============================================================================
# Test Callbacks
# =============================================================================


def test_interrupt_wins_over_other_answers(planner):
    planner.register_plan_callback(lambda progress: PlannerAction.RETURN_WITH_ANY_SOLUTION)
    planner.register_plan_callback(lambda progress: PlannerAction.INTERRUPT)

    assert planner._call_callbacks(PlannerProgress(iteration=1)) == PlannerAction.INTERRUPT


def test_unregister_callback(planner):
    unregister = planner.register_plan_callback(lambda progress: PlannerAction.INTERRUPT)
    unregister()

    assert planner._call_callbacks(PlannerProgress(iteration=1)) == PlannerAction.NONE
