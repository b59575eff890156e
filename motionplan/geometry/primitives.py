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

"""Solid collision primitives.

Each primitive carries the Pose of its center. Primitives are immutable;
``transform`` returns a new primitive placed by a parent pose.

- Box: half extents along its local x, y, z axes
- Sphere: radius
- Capsule: radius and total end-to-end length along its local z axis
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field, replace
import math
from typing import TYPE_CHECKING, TypeAlias

import numpy as np

from motionplan.geometry.distance import point_segment_distance
from motionplan.spatialmath.pose import Pose
from motionplan.spec.enums import GeometryType
from motionplan.spec.errors import InvalidGeometryError

if TYPE_CHECKING:
    from numpy.typing import NDArray


def _check_dimension(kind: str, name: str, value: float) -> None:
    if not math.isfinite(value) or value <= 0.0:
        raise InvalidGeometryError(f"{kind} {name} must be positive and finite, got {value}")


@dataclass(frozen=True, eq=False)
class Box:
    """Oriented box."""

    pose: Pose
    half_extents: tuple[float, float, float]
    label: str = ""
    geometry_type: GeometryType = field(default=GeometryType.BOX, init=False)

    def __post_init__(self) -> None:
        extents = tuple(float(v) for v in self.half_extents)
        if len(extents) != 3:
            raise InvalidGeometryError(f"Box requires 3 half extents, got {len(extents)}")
        for axis, value in zip("xyz", extents, strict=True):
            _check_dimension("Box", f"half extent {axis}", value)
        object.__setattr__(self, "half_extents", extents)

    @classmethod
    def from_dimensions(
        cls, pose: Pose, dimensions: Sequence[float], label: str = ""
    ) -> Box:
        """Create a box from full edge lengths."""
        return cls(pose, tuple(float(d) / 2.0 for d in dimensions), label)

    def transform(self, pose: Pose) -> Box:
        return replace(self, pose=pose + self.pose)

    def contains_point(self, point: Sequence[float] | NDArray[np.float64]) -> bool:
        local = self.pose.rotation.inv().apply(np.asarray(point, dtype=np.float64) - self.pose.translation)
        return bool(np.all(np.abs(local) <= np.asarray(self.half_extents)))

    def vertices(self) -> NDArray[np.float64]:
        """The 8 corners in the box's reference frame."""
        signs = np.array(
            [[sx, sy, sz] for sx in (-1, 1) for sy in (-1, 1) for sz in (-1, 1)], dtype=np.float64
        )
        return self.pose.translation + self.pose.rotation.apply(signs * np.asarray(self.half_extents))


@dataclass(frozen=True, eq=False)
class Sphere:
    """Sphere."""

    pose: Pose
    radius: float
    label: str = ""
    geometry_type: GeometryType = field(default=GeometryType.SPHERE, init=False)

    def __post_init__(self) -> None:
        _check_dimension("Sphere", "radius", float(self.radius))
        object.__setattr__(self, "radius", float(self.radius))

    def transform(self, pose: Pose) -> Sphere:
        return replace(self, pose=pose + self.pose)

    def contains_point(self, point: Sequence[float] | NDArray[np.float64]) -> bool:
        offset = np.asarray(point, dtype=np.float64) - self.pose.translation
        return bool(np.linalg.norm(offset) <= self.radius)


@dataclass(frozen=True, eq=False)
class Capsule:
    """Capsule: a segment along local z swept by a sphere.

    ``length`` is the total end-to-end length including both hemispherical
    caps, so it must be at least twice the radius.
    """

    pose: Pose
    radius: float
    length: float
    label: str = ""
    geometry_type: GeometryType = field(default=GeometryType.CAPSULE, init=False)

    def __post_init__(self) -> None:
        _check_dimension("Capsule", "radius", float(self.radius))
        _check_dimension("Capsule", "length", float(self.length))
        if self.length < 2.0 * self.radius:
            raise InvalidGeometryError(
                f"Capsule length {self.length} is shorter than its diameter {2.0 * self.radius}"
            )
        object.__setattr__(self, "radius", float(self.radius))
        object.__setattr__(self, "length", float(self.length))

    def transform(self, pose: Pose) -> Capsule:
        return replace(self, pose=pose + self.pose)

    def segment(self) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        """End points of the capsule's core segment, in its reference frame."""
        half = self.length / 2.0 - self.radius
        a = self.pose.transform_point([0.0, 0.0, -half])
        b = self.pose.transform_point([0.0, 0.0, half])
        return a, b

    def contains_point(self, point: Sequence[float] | NDArray[np.float64]) -> bool:
        a, b = self.segment()
        return point_segment_distance(np.asarray(point, dtype=np.float64), a, b) <= self.radius


Geometry: TypeAlias = Box | Sphere | Capsule
"""Closed set of collision primitives"""


def make_geometry(
    geometry_type: GeometryType,
    pose: Pose,
    dimensions: Sequence[float],
    label: str = "",
) -> Geometry:
    """Build a primitive from its type and dimensions.

    Dimensions by type:
        - BOX: (x, y, z) full edge lengths
        - SPHERE: (radius,)
        - CAPSULE: (radius, length)
    """
    dims = tuple(float(d) for d in dimensions)
    if geometry_type == GeometryType.BOX:
        if len(dims) != 3:
            raise InvalidGeometryError(f"Box requires 3 dimensions, got {len(dims)}")
        return Box.from_dimensions(pose, dims, label)
    if geometry_type == GeometryType.SPHERE:
        if len(dims) != 1:
            raise InvalidGeometryError(f"Sphere requires 1 dimension, got {len(dims)}")
        return Sphere(pose, dims[0], label)
    if geometry_type == GeometryType.CAPSULE:
        if len(dims) != 2:
            raise InvalidGeometryError(f"Capsule requires 2 dimensions, got {len(dims)}")
        return Capsule(pose, dims[0], dims[1], label)
    raise InvalidGeometryError(f"Unknown geometry type: {geometry_type}")
