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

from collections.abc import Callable

import pytest

from rrtplan.planning.spec import PlannerParameters
from rrtplan.planning.utils.space_utils import SegmentConstraintChecker


@pytest.fixture
def free_checker():
    """Constraint checker that accepts every configuration."""
    return SegmentConstraintChecker(lambda q: True, resolution=0.1)


@pytest.fixture
def wall_checker():
    """Rejects the vertical band 4 < x < 6 of the plane."""
    return SegmentConstraintChecker(lambda q: not 4.0 < q[0] < 6.0, resolution=0.05)


@pytest.fixture
def make_params() -> Callable[..., PlannerParameters]:
    """Build 2-DOF parameters on the [0, 10] x [0, 10] square."""

    def _make(checker, cls=PlannerParameters, **kwargs):
        values = {
            "config_lower_limit": [0.0, 0.0],
            "config_upper_limit": [10.0, 10.0],
            "constraint_checker": checker,
            "step_length": 1.0,
            "max_iterations": 1000,
            "random_seed": 42,
            "initial_config": [0.0, 0.0],
        }
        values.update(kwargs)
        return cls(**values)

    return _make
