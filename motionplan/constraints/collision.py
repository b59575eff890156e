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

"""Constraints that place the chain's link geometries against the world."""

from __future__ import annotations

from itertools import combinations
from typing import TYPE_CHECKING

from motionplan.constraints.base import Constraint
from motionplan.geometry.collision import collides, first_collision
from motionplan.spec.errors import InvalidConfigurationError, InvalidGeometryError
from motionplan.spec.types import ConstraintResult

if TYPE_CHECKING:
    import numpy as np
    from numpy.typing import NDArray

    from motionplan.geometry.primitives import Geometry
    from motionplan.kinematics.frame import KinematicChain
    from motionplan.world.world_state import WorldState


def _placed_geometries(
    chain: KinematicChain, configuration: NDArray[np.float64]
) -> dict[str, Geometry]:
    try:
        return chain.geometries(configuration)
    except InvalidGeometryError:
        raise
    except ValueError as e:
        raise InvalidConfigurationError(
            f"Could not place link geometry: {e}", configuration=list(configuration)
        ) from e


class CollisionConstraint(Constraint):
    """No link geometry may penetrate an obstacle.

    With ``check_self_collision`` links that are not adjacent in the chain
    must not penetrate each other either.
    """

    def __init__(
        self,
        chain: KinematicChain,
        world_state: WorldState,
        check_self_collision: bool = False,
        name: str = "collision",
    ) -> None:
        super().__init__(name)
        self._chain = chain
        self._obstacles = world_state.obstacles
        self._check_self_collision = check_self_collision
        self._adjacent = chain.adjacent_links()

    def evaluate(self, configuration: NDArray[np.float64]) -> ConstraintResult:
        links = _placed_geometries(self._chain, configuration)

        for link, geometry in links.items():
            hit = first_collision(geometry, self._obstacles)
            if hit is not None:
                return self._failed(configuration, f"Link '{link}' collides with obstacle '{hit}'")

        if self._check_self_collision:
            for (name_a, a), (name_b, b) in combinations(links.items(), 2):
                if frozenset((name_a, name_b)) in self._adjacent:
                    continue
                if collides(a, b):
                    return self._failed(
                        configuration, f"Link '{name_a}' collides with link '{name_b}'"
                    )

        return self._passed()


class InteractionSpaceConstraint(Constraint):
    """Every link geometry center must lie inside some interaction space.

    Passes trivially when the world defines no interaction spaces.
    """

    def __init__(
        self,
        chain: KinematicChain,
        world_state: WorldState,
        name: str = "interaction_space",
    ) -> None:
        super().__init__(name)
        self._chain = chain
        self._spaces = world_state.interaction_spaces

    def evaluate(self, configuration: NDArray[np.float64]) -> ConstraintResult:
        if not self._spaces:
            return self._passed()

        for link, geometry in _placed_geometries(self._chain, configuration).items():
            center = geometry.pose.translation
            if not any(space.contains_point(center) for space in self._spaces.values()):
                return self._failed(
                    configuration, f"Link '{link}' is outside every interaction space"
                )
        return self._passed()
