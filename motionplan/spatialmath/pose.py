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

"""Rigid transforms tagged with a reference frame."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import numpy as np
from scipy.spatial.transform import Rotation

from motionplan.constants import WORLD_FRAME

if TYPE_CHECKING:
    from numpy.typing import NDArray

# Orientation vectors closer than this to a pole have no defined longitude.
_POLE_EPSILON = 1e-8


class Pose:
    """Translation plus orientation, expressed in a named reference frame.

    Poses are immutable. Composition with ``+`` applies ``other`` in the
    coordinate frame defined by ``self``; it is associative.

    Example:
        base = Pose.from_point([1.0, 0.0, 0.0])
        tool = Pose.from_point([0.0, 0.0, 0.5])
        ee = base + tool  # translation (1, 0, 0.5)
    """

    __slots__ = ("_frame_id", "_rotation", "_translation")

    def __init__(
        self,
        translation: Sequence[float] | NDArray[np.float64] | None = None,
        rotation: Rotation | None = None,
        frame_id: str = WORLD_FRAME,
    ) -> None:
        t = np.zeros(3) if translation is None else np.array(translation, dtype=np.float64)
        if t.shape != (3,):
            raise ValueError(f"Pose translation requires 3 components, got shape {t.shape}")
        t.flags.writeable = False
        self._translation = t
        self._rotation = rotation if rotation is not None else Rotation.identity()
        self._frame_id = frame_id

    # ============= Constructors =============

    @classmethod
    def identity(cls, frame_id: str = WORLD_FRAME) -> Pose:
        """Create an identity pose."""
        return cls(frame_id=frame_id)

    @classmethod
    def from_point(cls, point: Sequence[float], frame_id: str = WORLD_FRAME) -> Pose:
        """Create a pose with identity orientation at a point."""
        return cls(point, frame_id=frame_id)

    @classmethod
    def from_quaternion(
        cls,
        point: Sequence[float],
        quaternion: Sequence[float],
        frame_id: str = WORLD_FRAME,
    ) -> Pose:
        """Create a pose from a point and an (x, y, z, w) quaternion."""
        quat = np.asarray(quaternion, dtype=np.float64)
        if np.linalg.norm(quat) == 0.0:
            raise ValueError("Quaternion must have non-zero norm")
        return cls(point, Rotation.from_quat(quat), frame_id=frame_id)

    @classmethod
    def from_axis_angle(
        cls,
        point: Sequence[float],
        axis: Sequence[float],
        angle: float,
        frame_id: str = WORLD_FRAME,
    ) -> Pose:
        """Create a pose rotated by ``angle`` radians about ``axis``."""
        axis_arr = np.asarray(axis, dtype=np.float64)
        norm = np.linalg.norm(axis_arr)
        if norm == 0.0:
            raise ValueError("Rotation axis must have non-zero norm")
        return cls(point, Rotation.from_rotvec(axis_arr / norm * angle), frame_id=frame_id)

    @classmethod
    def from_orientation_vector(
        cls,
        point: Sequence[float],
        ox: float,
        oy: float,
        oz: float,
        theta: float,
        frame_id: str = WORLD_FRAME,
        degrees: bool = True,
    ) -> Pose:
        """Create a pose from an orientation vector.

        The orientation vector (ox, oy, oz) is the direction the local z axis
        points to, and theta is the rotation about that axis.

        Args:
            point: Position
            ox, oy, oz: Direction of the local z axis (normalized internally)
            theta: Rotation about the z axis
            frame_id: Reference frame
            degrees: Whether theta is in degrees (wire format) or radians
        """
        ov = np.array([ox, oy, oz], dtype=np.float64)
        norm = np.linalg.norm(ov)
        if norm == 0.0:
            ov = np.array([0.0, 0.0, 1.0])
        else:
            ov = ov / norm
        th = np.radians(theta) if degrees else float(theta)
        lat = float(np.arccos(np.clip(ov[2], -1.0, 1.0)))
        lon = 0.0
        if 1.0 - abs(ov[2]) > _POLE_EPSILON:
            lon = float(np.arctan2(ov[1], ov[0]))
        rotation = Rotation.from_euler("ZYZ", [lon, lat, th])
        return cls(point, rotation, frame_id=frame_id)

    @classmethod
    def from_matrix(cls, matrix: NDArray[np.float64], frame_id: str = WORLD_FRAME) -> Pose:
        """Create a pose from a 4x4 homogeneous transform."""
        m = np.asarray(matrix, dtype=np.float64)
        if m.shape != (4, 4):
            raise ValueError(f"Expected a 4x4 matrix, got shape {m.shape}")
        return cls(m[:3, 3], Rotation.from_matrix(m[:3, :3]), frame_id=frame_id)

    # ============= Accessors =============

    @property
    def translation(self) -> NDArray[np.float64]:
        return self._translation

    @property
    def point(self) -> NDArray[np.float64]:
        """Alias of translation."""
        return self._translation

    @property
    def rotation(self) -> Rotation:
        return self._rotation

    @property
    def frame_id(self) -> str:
        return self._frame_id

    @property
    def rotation_matrix(self) -> NDArray[np.float64]:
        return self._rotation.as_matrix()

    def quaternion(self) -> NDArray[np.float64]:
        """Orientation as (x, y, z, w)."""
        return self._rotation.as_quat()

    def orientation_vector(self, degrees: bool = True) -> tuple[float, float, float, float]:
        """Orientation as (ox, oy, oz, theta)."""
        ov = self._rotation.apply([0.0, 0.0, 1.0])
        lon, lat, th = self._rotation.as_euler("ZYZ")
        if 1.0 - abs(ov[2]) <= _POLE_EPSILON:
            # At the poles longitude and theta are coupled; fold into theta.
            th = lon + th if ov[2] > 0 else th - lon
            th = float(np.arctan2(np.sin(th), np.cos(th)))
        theta = float(np.degrees(th)) if degrees else float(th)
        return float(ov[0]), float(ov[1]), float(ov[2]), theta

    def to_matrix(self) -> NDArray[np.float64]:
        """Convert to a 4x4 homogeneous transform."""
        T = np.eye(4)
        T[:3, :3] = self._rotation.as_matrix()
        T[:3, 3] = self._translation
        return T

    # ============= Operations =============

    def __add__(self, other: Pose) -> Pose:
        """Compose two poses: apply ``other`` in the frame defined by ``self``."""
        if not isinstance(other, Pose):
            raise TypeError(f"Cannot compose Pose and {type(other).__name__}")
        return Pose(
            self._translation + self._rotation.apply(np.array(other._translation)),
            self._rotation * other._rotation,
            frame_id=self._frame_id,
        )

    def compose(self, other: Pose) -> Pose:
        return self + other

    def inverse(self) -> Pose:
        """Inverse transform, in the same frame id."""
        inv_rotation = self._rotation.inv()
        translation = -inv_rotation.apply(np.array(self._translation))
        return Pose(translation, inv_rotation, frame_id=self._frame_id)

    def transform_point(self, point: Sequence[float] | NDArray[np.float64]) -> NDArray[np.float64]:
        """Map a point from this pose's local frame into its reference frame."""
        return self._translation + self._rotation.apply(np.array(point, dtype=np.float64))

    def in_frame(self, frame_id: str) -> Pose:
        """Same transform relabelled with another reference frame."""
        return Pose(self._translation, self._rotation, frame_id=frame_id)

    def distance_to(self, other: Pose) -> tuple[float, float]:
        """Position distance and orientation angle (radians) between two poses."""
        position_error = float(np.linalg.norm(other._translation - self._translation))
        orientation_error = float((other._rotation * self._rotation.inv()).magnitude())
        return position_error, orientation_error

    def almost_equal(self, other: Pose, tolerance: float = 1e-9) -> bool:
        pos_err, ori_err = self.distance_to(other)
        return self._frame_id == other._frame_id and pos_err <= tolerance and ori_err <= tolerance

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Pose):
            return False
        return self.almost_equal(other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        x, y, z = self._translation
        qx, qy, qz, qw = self.quaternion()
        return (
            f"Pose(translation=({x:.4f}, {y:.4f}, {z:.4f}), "
            f"quaternion=({qx:.4f}, {qy:.4f}, {qz:.4f}, {qw:.4f}), frame_id={self._frame_id!r})"
        )
