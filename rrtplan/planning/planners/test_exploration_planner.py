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

import numpy as np
import pytest

from rrtplan.planning.planners.exploration_planner import ExplorationPlanner
from rrtplan.planning.spec import ExplorationParameters, PlannerAction, PlanningStatus
from rrtplan.planning.utils.space_utils import SegmentConstraintChecker


def _shift_right(q, radius):
    return q + np.array([radius, 0.0])


@pytest.fixture
def make_explore_params(make_params):
    def _make(checker, **kwargs):
        return make_params(checker, cls=ExplorationParameters, **kwargs)

    return _make


def test_grows_to_expected_size(free_checker, make_explore_params):
    planner = ExplorationPlanner()
    assert planner.init_plan(make_explore_params(free_checker, expected_data_size=30))

    result = planner.plan_path()

    assert result.is_success()
    assert len(result.path) == 30
    assert result.iterations == 29
    np.testing.assert_allclose(result.path[0], [0.0, 0.0])
    assert result.goal_index == -1


def test_neighbor_sampling(free_checker, make_explore_params):
    planner = ExplorationPlanner()
    params = make_explore_params(
        free_checker,
        expected_data_size=5,
        explore_prob=1.0,
        sample_neighbor_fn=_shift_right,
    )
    assert planner.init_plan(params)

    result = planner.plan_path()

    assert result.is_success()
    assert len(result.path) == 5
    for q in result.path:
        assert q[1] == 0.0
        assert q[0] == pytest.approx(round(q[0]))


def test_rejected_neighbor_not_inserted(wall_checker, make_explore_params):
    planner = ExplorationPlanner()
    params = make_explore_params(
        wall_checker,
        initial_config=[3.5, 0.0],
        expected_data_size=5,
        max_iterations=10,
        explore_prob=1.0,
        sample_neighbor_fn=lambda q, radius: np.array([5.0, q[1]]),
    )
    assert planner.init_plan(params)

    result = planner.plan_path()

    assert result.is_success()
    assert len(result.path) == 1
    assert result.iterations == 10


def test_neighbor_failure(free_checker, make_explore_params):
    planner = ExplorationPlanner()
    params = make_explore_params(
        free_checker, explore_prob=1.0, sample_neighbor_fn=lambda q, radius: None
    )
    assert planner.init_plan(params)

    result = planner.plan_path()

    assert result.status == PlanningStatus.FAILED
    assert result.iterations == 1


def test_explore_prob_needs_neighbor_fn(free_checker, make_explore_params):
    planner = ExplorationPlanner()
    assert planner.init_plan(make_explore_params(free_checker, explore_prob=0.5)) is False


def test_stops_at_iteration_budget(make_explore_params):
    only_origin = SegmentConstraintChecker(lambda q: not np.any(q), resolution=0.1)
    planner = ExplorationPlanner()
    assert planner.init_plan(make_explore_params(only_origin, max_iterations=20))

    result = planner.plan_path()

    assert result.is_success()
    assert result.iterations == 20
    assert len(result.path) == 1


def test_interrupt(free_checker, make_explore_params):
    planner = ExplorationPlanner()
    assert planner.init_plan(make_explore_params(free_checker))
    planner.register_plan_callback(lambda progress: PlannerAction.INTERRUPT)

    result = planner.plan_path()

    assert result.status == PlanningStatus.INTERRUPTED
    assert result.iterations == 1


def test_interrupt_when_sampler_gives_nothing(free_checker, make_explore_params):
    progress = []

    def callback(p):
        progress.append(p.iteration)
        return PlannerAction.INTERRUPT

    planner = ExplorationPlanner()
    assert planner.init_plan(
        make_explore_params(free_checker, max_iterations=10, sample_fn=lambda: None)
    )
    planner.register_plan_callback(callback)

    result = planner.plan_path()

    assert result.status == PlanningStatus.INTERRUPTED
    assert result.iterations == 1
    assert progress == [1]
