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

"""Options consumed by a single planning call."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field, fields
from typing import TYPE_CHECKING, Any

import numpy as np

from motionplan.config import PlanningSettings
from motionplan.constraints.base import ConstraintSet
from motionplan.spec.errors import InvalidConfigurationError

if TYPE_CHECKING:
    from numpy.typing import NDArray

DistanceMetric = Callable[["NDArray[np.float64]", "NDArray[np.float64]"], float]


def euclidean_distance(a: NDArray[np.float64], b: NDArray[np.float64]) -> float:
    """Euclidean norm of the configuration delta."""
    return float(np.linalg.norm(np.asarray(b) - np.asarray(a)))


@dataclass
class PlannerOptions:
    """Tunables for one planning request.

    Attributes:
        distance_metric: Distance between two configurations (nearest neighbour)
        constraints: Constraints every waypoint and segment must satisfy
        step_size: Largest configuration-space step per extension
        resolution: Sample spacing for segment checks (default step_size / 4)
        max_iterations: Search iteration budget
        timeout: Wall-clock budget in seconds (None = unbounded)
        seed: Seed for every random draw of the call (None = nondeterministic)
        optimize: Enable RRT* choose-parent and rewiring
        smooth: Enable shortcut smoothing of the extracted path
        smoothing_iterations: Shortcut attempts when smoothing
        connect_bias: Probability of sampling the other tree's newest node
        rewire_radius: Upper bound on the RRT* neighbourhood (default 3 * step_size)
        rewire_gamma: Scale of the shrinking RRT* neighbourhood
        goal_tolerance: Distance at which a connect attempt counts as reached
        num_workers: Threads used for neighbour segment checks
        ik_attempts: Alternate seeds tried when resolving a goal pose
    """

    distance_metric: DistanceMetric = euclidean_distance
    constraints: ConstraintSet = field(default_factory=ConstraintSet)
    step_size: float = 0.1
    resolution: float | None = None
    max_iterations: int = 5000
    timeout: float | None = None
    seed: int | None = None
    optimize: bool = True
    smooth: bool = True
    smoothing_iterations: int = 100
    connect_bias: float = 0.1
    rewire_radius: float | None = None
    rewire_gamma: float = 5.0
    goal_tolerance: float = 1e-6
    num_workers: int = 1
    ik_attempts: int = 10

    def __post_init__(self) -> None:
        if not self.step_size > 0.0:
            raise InvalidConfigurationError(f"step_size must be positive, got {self.step_size}")
        if self.resolution is None:
            self.resolution = self.step_size / 4.0
        if not self.resolution > 0.0:
            raise InvalidConfigurationError(f"resolution must be positive, got {self.resolution}")
        if self.rewire_radius is None:
            self.rewire_radius = 3.0 * self.step_size
        if self.max_iterations < 0:
            raise InvalidConfigurationError("max_iterations must be non-negative")
        if self.timeout is not None and self.timeout < 0.0:
            raise InvalidConfigurationError("timeout must be non-negative")
        if not 0.0 <= self.connect_bias <= 1.0:
            raise InvalidConfigurationError(
                f"connect_bias must be within [0, 1], got {self.connect_bias}"
            )
        if self.num_workers < 1:
            raise InvalidConfigurationError("num_workers must be at least 1")
        if self.ik_attempts < 1:
            raise InvalidConfigurationError("ik_attempts must be at least 1")

    @classmethod
    def from_settings(
        cls, settings: PlanningSettings | None = None, **overrides: Any
    ) -> PlannerOptions:
        """Options seeded from environment-driven settings, then overridden.

        Raises:
            InvalidConfigurationError: Unknown override name or invalid value
        """
        settings = settings if settings is not None else PlanningSettings()
        known = {f.name for f in fields(cls)}
        unknown = set(overrides) - known
        if unknown:
            raise InvalidConfigurationError(f"Unknown planner options: {sorted(unknown)}")

        values: dict[str, Any] = {
            name: getattr(settings, name)
            for name in type(settings).model_fields
            if name in known
        }
        values.update(overrides)
        return cls(**values)

    def make_rng(self) -> np.random.Generator:
        return np.random.default_rng(self.seed)
