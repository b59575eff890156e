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

"""Articulated kinematic chains.

A KinematicChain is an ordered list of joints. Each joint has a static
offset from the previous joint's frame, a kind (revolute, prismatic or
fixed), a unit axis, an inclusive input range, and optionally a link
geometry attached to its moving frame. A configuration holds one input per
non-fixed joint, in chain order.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
import math
from typing import TYPE_CHECKING

import numpy as np

from motionplan.geometry.primitives import Capsule, Geometry
from motionplan.spatialmath.pose import Pose
from motionplan.spec.enums import JointType
from motionplan.spec.errors import InvalidConfigurationError

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from motionplan.spec.types import Jacobian


@dataclass(frozen=True, eq=False)
class Joint:
    """One joint of a kinematic chain.

    Attributes:
        name: Unique joint name; also names the link geometry it carries
        joint_type: REVOLUTE, PRISMATIC or FIXED
        offset: Static transform from the previous joint frame to this joint
        axis: Rotation axis (revolute) or translation direction (prismatic)
        limits: Inclusive input range (min, max); ignored for FIXED joints
        geometry: Link geometry expressed in this joint's moving frame
    """

    name: str
    joint_type: JointType
    offset: Pose = field(default_factory=Pose.identity)
    axis: tuple[float, float, float] = (0.0, 0.0, 1.0)
    limits: tuple[float, float] = (-math.pi, math.pi)
    geometry: Geometry | None = None

    def __post_init__(self) -> None:
        axis = np.asarray(self.axis, dtype=np.float64)
        norm = float(np.linalg.norm(axis))
        if axis.shape != (3,) or not math.isfinite(norm) or norm == 0.0:
            raise InvalidConfigurationError(f"Joint '{self.name}' has an invalid axis {self.axis}")
        object.__setattr__(self, "axis", tuple((axis / norm).tolist()))

        if self.joint_type != JointType.FIXED:
            lo, hi = (float(v) for v in self.limits)
            if not (math.isfinite(lo) and math.isfinite(hi)) or lo > hi:
                raise InvalidConfigurationError(
                    f"Joint '{self.name}' has invalid limits {self.limits}"
                )
            object.__setattr__(self, "limits", (lo, hi))

    @property
    def is_movable(self) -> bool:
        return self.joint_type != JointType.FIXED

    def motion(self, value: float) -> Pose:
        """Local transform produced by the joint input."""
        match self.joint_type:
            case JointType.REVOLUTE:
                return Pose.from_axis_angle((0.0, 0.0, 0.0), self.axis, value)
            case JointType.PRISMATIC:
                return Pose.from_point(np.asarray(self.axis) * value)
            case JointType.FIXED:
                return Pose.identity()
        raise InvalidConfigurationError(f"Unknown joint type: {self.joint_type}")


class KinematicChain:
    """Serial kinematic chain with forward kinematics and a geometric Jacobian.

    The chain is read-only after construction and safe to share between
    threads.

    Example:
        chain = make_planar_arm([1.0, 1.0])
        ee = chain.forward_kinematics([0.0, 0.0])  # translation (2, 0, 0)
    """

    def __init__(
        self,
        name: str,
        joints: Sequence[Joint],
        base_pose: Pose | None = None,
        tool_offset: Pose | None = None,
    ) -> None:
        if not joints:
            raise InvalidConfigurationError(f"Chain '{name}' has no joints")
        names = [j.name for j in joints]
        if len(set(names)) != len(names):
            raise InvalidConfigurationError(f"Chain '{name}' has duplicate joint names: {names}")

        self._name = name
        self._joints = tuple(joints)
        self._base_pose = base_pose if base_pose is not None else Pose.identity()
        self._tool_offset = tool_offset if tool_offset is not None else Pose.identity()
        self._movable = tuple(j for j in self._joints if j.is_movable)
        self._lower = np.array([j.limits[0] for j in self._movable], dtype=np.float64)
        self._upper = np.array([j.limits[1] for j in self._movable], dtype=np.float64)
        self._lower.flags.writeable = False
        self._upper.flags.writeable = False

    # ============= Properties =============

    @property
    def name(self) -> str:
        return self._name

    @property
    def joints(self) -> tuple[Joint, ...]:
        return self._joints

    @property
    def dof(self) -> int:
        """Number of non-fixed joints."""
        return len(self._movable)

    @property
    def joint_names(self) -> list[str]:
        """Names of the non-fixed joints, in configuration order."""
        return [j.name for j in self._movable]

    @property
    def base_pose(self) -> Pose:
        return self._base_pose

    @property
    def tool_offset(self) -> Pose:
        return self._tool_offset

    def joint_limits(self) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        """Get joint limits (lower, upper)."""
        return self._lower, self._upper

    # ============= Validation =============

    def validate(self, configuration: Sequence[float] | NDArray[np.float64]) -> NDArray[np.float64]:
        """Check a configuration and return it as a float array.

        Limits are inclusive: a value exactly at min or max is valid.

        Raises:
            InvalidConfigurationError: Wrong length, non-finite, or out of range
        """
        try:
            q = np.array(configuration, dtype=np.float64)
        except (TypeError, ValueError) as e:
            raise InvalidConfigurationError(f"Configuration is not numeric: {configuration!r}") from e

        if q.shape != (self.dof,):
            raise InvalidConfigurationError(
                f"Chain '{self._name}' expects {self.dof} inputs, got shape {q.shape}",
                configuration=q.ravel().tolist(),
            )
        if not np.all(np.isfinite(q)):
            raise InvalidConfigurationError(
                "Configuration contains non-finite values", configuration=q.tolist()
            )
        out_of_range = (q < self._lower) | (q > self._upper)
        if np.any(out_of_range):
            idx = int(np.argmax(out_of_range))
            raise InvalidConfigurationError(
                f"Input {q[idx]} for joint '{self._movable[idx].name}' is outside "
                f"[{self._lower[idx]}, {self._upper[idx]}]",
                configuration=q.tolist(),
            )
        return q

    def is_valid(self, configuration: Sequence[float] | NDArray[np.float64]) -> bool:
        try:
            self.validate(configuration)
        except InvalidConfigurationError:
            return False
        return True

    def random_configuration(self, rng: np.random.Generator) -> NDArray[np.float64]:
        """Sample uniformly within the joint limits."""
        return rng.uniform(self._lower, self._upper)

    # ============= Kinematics =============

    def _joint_frames(self, q: NDArray[np.float64]) -> list[tuple[Pose, Pose]]:
        # (frame before motion, frame after motion) in world, per joint
        frames = []
        current = self._base_pose
        idx = 0
        for joint in self._joints:
            before = current + joint.offset
            if joint.is_movable:
                after = before + joint.motion(float(q[idx]))
                idx += 1
            else:
                after = before
            frames.append((before, after))
            current = after
        return frames

    def link_poses(self, configuration: Sequence[float] | NDArray[np.float64]) -> list[Pose]:
        """World pose of every joint's moving frame."""
        q = self.validate(configuration)
        return [after for _, after in self._joint_frames(q)]

    def forward_kinematics(self, configuration: Sequence[float] | NDArray[np.float64]) -> Pose:
        """End-effector pose in world.

        Raises:
            InvalidConfigurationError: If the configuration is invalid
        """
        return self.link_poses(configuration)[-1] + self._tool_offset

    def geometries(
        self, configuration: Sequence[float] | NDArray[np.float64]
    ) -> dict[str, Geometry]:
        """Link geometries placed in world at a configuration, keyed by joint name."""
        q = self.validate(configuration)
        placed: dict[str, Geometry] = {}
        for joint, (_, after) in zip(self._joints, self._joint_frames(q), strict=True):
            if joint.geometry is not None:
                placed[joint.name] = joint.geometry.transform(after)
        return placed

    def adjacent_links(self) -> set[frozenset[str]]:
        """Pairs of geometry-carrying links with no geometry-carrying link between them."""
        carriers = [j.name for j in self._joints if j.geometry is not None]
        return {frozenset(pair) for pair in zip(carriers, carriers[1:])}

    def jacobian(self, configuration: Sequence[float] | NDArray[np.float64]) -> Jacobian:
        """Geometric end-effector Jacobian (6 x dof), rows [vx, vy, vz, wx, wy, wz]."""
        q = self.validate(configuration)
        frames = self._joint_frames(q)
        ee = (frames[-1][1] + self._tool_offset).translation

        J = np.zeros((6, self.dof))
        col = 0
        for joint, (before, _) in zip(self._joints, frames, strict=True):
            if not joint.is_movable:
                continue
            z = before.rotation.apply(joint.axis)
            if joint.joint_type == JointType.REVOLUTE:
                J[:3, col] = np.cross(z, ee - before.translation)
                J[3:, col] = z
            else:
                J[:3, col] = z
            col += 1
        return J

    def __repr__(self) -> str:
        names = [j.name for j in self._joints]
        return f"KinematicChain(name={self._name!r}, dof={self.dof}, joints={names})"


def make_planar_arm(
    link_lengths: Sequence[float],
    link_radius: float = 0.05,
    limits: tuple[float, float] = (-math.pi, math.pi),
    base_pose: Pose | None = None,
    name: str = "planar_arm",
) -> KinematicChain:
    """Build an n-link planar arm of revolute joints about z.

    Each link is a capsule along its joint's local x axis; the end effector
    sits at the tip of the last link.
    """
    if not link_lengths:
        raise InvalidConfigurationError("Planar arm needs at least one link")

    joints = []
    previous = 0.0
    for i, length in enumerate(link_lengths):
        geometry = Capsule(
            Pose.from_axis_angle((length / 2.0, 0.0, 0.0), (0.0, 1.0, 0.0), math.pi / 2.0),
            radius=link_radius,
            length=length,
            label=f"link{i + 1}",
        )
        joints.append(
            Joint(
                name=f"joint{i + 1}",
                joint_type=JointType.REVOLUTE,
                offset=Pose.from_point((previous, 0.0, 0.0)),
                axis=(0.0, 0.0, 1.0),
                limits=limits,
                geometry=geometry,
            )
        )
        previous = float(length)

    return KinematicChain(
        name,
        joints,
        base_pose=base_pose,
        tool_offset=Pose.from_point((previous, 0.0, 0.0)),
    )
