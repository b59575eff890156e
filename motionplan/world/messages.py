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

"""Wire messages describing a world.

Poses travel as a point plus an orientation vector (``o_x, o_y, o_z``
with ``theta`` in degrees). Box dimensions travel as full edge lengths.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Literal

from pydantic import BaseModel, Field, ValidationError, model_validator

from motionplan.constants import WORLD_FRAME
from motionplan.geometry.primitives import Box, Capsule, Geometry, Sphere, make_geometry
from motionplan.spatialmath.pose import Pose
from motionplan.spec.enums import GeometryType
from motionplan.spec.errors import InvalidConfigurationError
from motionplan.world.world_state import GeometriesInFrame, WorldState


class PoseMessage(BaseModel):
    """Point plus orientation vector."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    o_x: float = 0.0
    o_y: float = 0.0
    o_z: float = 1.0
    theta: float = 0.0  # degrees

    def to_pose(self, frame_id: str = WORLD_FRAME) -> Pose:
        return Pose.from_orientation_vector(
            (self.x, self.y, self.z), self.o_x, self.o_y, self.o_z, self.theta, frame_id=frame_id
        )

    @classmethod
    def from_pose(cls, pose: Pose) -> PoseMessage:
        x, y, z = (float(v) for v in pose.translation)
        o_x, o_y, o_z, theta = pose.orientation_vector(degrees=True)
        return cls(x=x, y=y, z=z, o_x=o_x, o_y=o_y, o_z=o_z, theta=theta)


class GeometryMessage(BaseModel):
    """One primitive: its type, center pose and type-specific dimensions."""

    type: Literal["box", "sphere", "capsule"]
    center: PoseMessage = Field(default_factory=PoseMessage)
    dims: tuple[float, float, float] | None = None  # box edge lengths
    radius: float | None = None  # sphere, capsule
    length: float | None = None  # capsule end-to-end
    label: str = ""

    @model_validator(mode="after")
    def _check_dimensions(self) -> GeometryMessage:
        required = {"box": ("dims",), "sphere": ("radius",), "capsule": ("radius", "length")}
        missing = [name for name in required[self.type] if getattr(self, name) is None]
        if missing:
            raise ValueError(f"{self.type} requires {', '.join(missing)}")
        return self

    def to_geometry(self, frame_id: str = WORLD_FRAME) -> Geometry:
        """Decode into a primitive.

        Raises:
            InvalidGeometryError: Dimensions are not positive and finite
        """
        geometry_type = GeometryType[self.type.upper()]
        match geometry_type:
            case GeometryType.BOX:
                dimensions: tuple[float, ...] = self.dims or ()
            case GeometryType.SPHERE:
                dimensions = (self.radius,)  # type: ignore[assignment]
            case GeometryType.CAPSULE:
                dimensions = (self.radius, self.length)  # type: ignore[assignment]
        return make_geometry(geometry_type, self.center.to_pose(frame_id), dimensions, self.label)

    @classmethod
    def from_geometry(cls, geometry: Geometry) -> GeometryMessage:
        center = PoseMessage.from_pose(geometry.pose)
        match geometry:
            case Box(half_extents=half):
                dims = (2.0 * half[0], 2.0 * half[1], 2.0 * half[2])
                return cls(type="box", center=center, dims=dims, label=geometry.label)
            case Sphere(radius=radius):
                return cls(type="sphere", center=center, radius=radius, label=geometry.label)
            case Capsule(radius=radius, length=length):
                return cls(
                    type="capsule", center=center, radius=radius, length=length, label=geometry.label
                )
        raise InvalidConfigurationError(f"Unsupported geometry: {geometry!r}")


class GeometriesInFrameMessage(BaseModel):
    """Named geometries anchored to one reference frame."""

    reference_frame: str = WORLD_FRAME
    geometries: dict[str, GeometryMessage] = Field(default_factory=dict)

    def to_geometries_in_frame(self) -> GeometriesInFrame:
        return GeometriesInFrame(
            self.reference_frame,
            {name: msg.to_geometry(self.reference_frame) for name, msg in self.geometries.items()},
        )


class WorldStateMessage(BaseModel):
    """Wire description of a WorldState."""

    obstacles: list[GeometriesInFrameMessage] = Field(default_factory=list)
    interaction_spaces: list[GeometriesInFrameMessage] = Field(default_factory=list)

    @classmethod
    def from_json(cls, data: str | bytes) -> WorldStateMessage:
        """Parse and validate a JSON document.

        Raises:
            InvalidConfigurationError: If the document does not validate
        """
        try:
            return cls.model_validate_json(data)
        except ValidationError as e:
            raise InvalidConfigurationError(f"Invalid world state message: {e}") from e

    def to_world_state(self, frames: Mapping[str, Pose] | None = None) -> WorldState:
        return WorldState(
            obstacles=[group.to_geometries_in_frame() for group in self.obstacles],
            interaction_spaces=[group.to_geometries_in_frame() for group in self.interaction_spaces],
            frames=frames,
        )

    @classmethod
    def from_world_state(cls, world_state: WorldState) -> WorldStateMessage:
        """Encode a world state; every group is expressed in world."""

        def encode(geometries: Mapping[str, Geometry]) -> list[GeometriesInFrameMessage]:
            if not geometries:
                return []
            return [
                GeometriesInFrameMessage(
                    geometries={
                        name: GeometryMessage.from_geometry(g) for name, g in geometries.items()
                    }
                )
            ]

        return cls(
            obstacles=encode(world_state.obstacles),
            interaction_spaces=encode(world_state.interaction_spaces),
        )
