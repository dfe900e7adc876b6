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

"""Seeded random stream shared by every stochastic choice of a planner."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from numpy.typing import NDArray


class UniformSampler:
    """Mersenne-Twister backed uniform sampler.

    Owning one instance per planner keeps runs reproducible: the same seed and
    the same callback behavior produce the same trees.
    """

    def __init__(self, seed: int = 0) -> None:
        self._seed = seed
        self._rng = np.random.Generator(np.random.MT19937(seed))

    def set_seed(self, seed: int) -> None:
        self._seed = seed
        self._rng = np.random.Generator(np.random.MT19937(seed))

    def get_seed(self) -> int:
        return self._seed

    def sample_sequence_one_real(self) -> float:
        return float(self._rng.random())

    def sample_sequence_one_uint32(self) -> int:
        return int(self._rng.integers(0, 2**32, dtype=np.uint64))

    def sample_sequence(
        self, lower: NDArray[np.float64], upper: NDArray[np.float64]
    ) -> NDArray[np.float64]:
        return self._rng.uniform(lower, upper).astype(np.float64)
