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

from rrtplan.planning.utils.path_utils import (
    compute_path_length,
    is_path_feasible,
    is_path_within_limits,
    split_configs,
)
from rrtplan.planning.utils.space_utils import make_weighted_distance_metric


def test_split_configs():
    configs = split_configs([0.0, 1.0, 2.0, 3.0], 2)
    assert configs is not None
    assert len(configs) == 2
    np.testing.assert_array_equal(configs[1], [2.0, 3.0])


def test_split_configs_bad_length():
    assert split_configs([0.0, 1.0, 2.0], 2) is None
    assert split_configs([0.0], 0) is None


def test_split_configs_empty():
    assert split_configs([], 3) == []


def test_compute_path_length():
    path = [np.array([0.0, 0.0]), np.array([3.0, 4.0]), np.array([3.0, 5.0])]
    assert compute_path_length(path) == pytest.approx(6.0)
    assert compute_path_length(path[:1]) == 0.0


def test_compute_path_length_with_metric():
    path = [np.array([0.0, 0.0]), np.array([1.0, 0.0])]
    metric = make_weighted_distance_metric([9.0, 1.0])
    assert compute_path_length(path, metric) == pytest.approx(3.0)


def test_is_path_feasible(wall_checker):
    around = [np.array([0.0, 0.0]), np.array([3.0, 9.0])]
    through = [np.array([0.0, 0.0]), np.array([8.0, 0.0])]
    starts_inside = [np.array([5.0, 0.0]), np.array([3.0, 0.0])]

    assert is_path_feasible(wall_checker, around)
    assert not is_path_feasible(wall_checker, through)
    assert not is_path_feasible(wall_checker, starts_inside)
    assert not is_path_feasible(wall_checker, [])


def test_is_path_within_limits():
    lower = np.array([0.0, 0.0])
    upper = np.array([1.0, 1.0])
    assert is_path_within_limits([np.array([0.5, 1.0])], lower, upper)
    assert not is_path_within_limits([np.array([0.5, 1.5])], lower, upper)
