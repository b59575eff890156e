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

"""World state: the obstacles and interaction spaces a plan must respect.

Geometries arrive grouped by the reference frame they are expressed in.
At construction every group is resolved to "world" so that collision
checks never need to consult a frame tree. The result is read-only.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from motionplan.constants import WORLD_FRAME
from motionplan.geometry.primitives import Geometry
from motionplan.spatialmath.pose import Pose
from motionplan.spec.errors import InvalidConfigurationError
from motionplan.utils.logging_config import setup_logger

logger = setup_logger()


@dataclass(frozen=True)
class GeometriesInFrame:
    """Named geometries whose poses are relative to ``reference_frame``."""

    reference_frame: str
    geometries: Mapping[str, Geometry] = field(default_factory=dict)

    @classmethod
    def in_world(cls, geometries: Mapping[str, Geometry]) -> GeometriesInFrame:
        return cls(WORLD_FRAME, geometries)


class WorldState:
    """Obstacles and interaction spaces, resolved to the world frame.

    Args:
        obstacles: Geometry groups the robot must not touch
        interaction_spaces: Geometry groups the robot must stay inside
        frames: World pose of every non-world reference frame used above

    Raises:
        InvalidConfigurationError: Unknown reference frame or duplicate name
    """

    def __init__(
        self,
        obstacles: Iterable[GeometriesInFrame] = (),
        interaction_spaces: Iterable[GeometriesInFrame] = (),
        frames: Mapping[str, Pose] | None = None,
    ) -> None:
        self._frames = dict(frames or {})
        for name, pose in self._frames.items():
            if pose.frame_id != WORLD_FRAME:
                raise InvalidConfigurationError(
                    f"Frame '{name}' must be given relative to '{WORLD_FRAME}', "
                    f"got '{pose.frame_id}'"
                )

        self._obstacles = MappingProxyType(self._resolve(obstacles, "obstacle"))
        self._interaction_spaces = MappingProxyType(
            self._resolve(interaction_spaces, "interaction space")
        )
        logger.debug(
            "World state created",
            obstacles=len(self._obstacles),
            interaction_spaces=len(self._interaction_spaces),
        )

    @classmethod
    def from_geometries(
        cls,
        obstacles: Mapping[str, Geometry] | None = None,
        interaction_spaces: Mapping[str, Geometry] | None = None,
    ) -> WorldState:
        """Build a world state from geometries already expressed in world."""
        return cls(
            obstacles=[GeometriesInFrame.in_world(obstacles)] if obstacles else (),
            interaction_spaces=(
                [GeometriesInFrame.in_world(interaction_spaces)] if interaction_spaces else ()
            ),
        )

    def _frame_pose(self, reference_frame: str) -> Pose:
        if reference_frame == WORLD_FRAME:
            return Pose.identity()
        try:
            return self._frames[reference_frame]
        except KeyError:
            raise InvalidConfigurationError(
                f"Unknown reference frame '{reference_frame}'"
            ) from None

    def _resolve(self, groups: Iterable[GeometriesInFrame], kind: str) -> dict[str, Geometry]:
        resolved: dict[str, Geometry] = {}
        for group in groups:
            parent = self._frame_pose(group.reference_frame)
            for name, geometry in group.geometries.items():
                if name in resolved:
                    raise InvalidConfigurationError(f"Duplicate {kind} name '{name}'")
                resolved[name] = geometry.transform(parent)
        return resolved

    @property
    def obstacles(self) -> Mapping[str, Geometry]:
        """Read-only mapping of obstacle name to world geometry."""
        return self._obstacles

    @property
    def interaction_spaces(self) -> Mapping[str, Geometry]:
        """Read-only mapping of interaction-space name to world geometry."""
        return self._interaction_spaces

    @property
    def frames(self) -> Mapping[str, Pose]:
        return MappingProxyType(self._frames)

    def is_empty(self) -> bool:
        return not self._obstacles and not self._interaction_spaces

    def __repr__(self) -> str:
        return (
            f"WorldState(obstacles={list(self._obstacles)}, "
            f"interaction_spaces={list(self._interaction_spaces)})"
        )
