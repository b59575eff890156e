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

"""
Kinematics Utilities

Standalone utility functions for inverse kinematics operations.
These functions are stateless and can be used by any IK solver implementation.

## Functions

- damped_pseudoinverse(): Compute damped pseudoinverse of Jacobian
- check_singularity(): Check if Jacobian is near singularity
- get_manipulability(): Compute manipulability measure
- compute_pose_error(): Compute position/orientation error between poses
- compute_error_twist(): Compute error twist for differential IK
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
from scipy.spatial.transform import Rotation

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from motionplan.spatialmath.pose import Pose
    from motionplan.spec.types import Jacobian


def damped_pseudoinverse(
    J: Jacobian,
    damping: float = 0.01,
) -> NDArray[np.float64]:
    """Compute damped pseudoinverse of Jacobian.

    Uses the damped least-squares formula:
        J_pinv = J^T @ (J @ J^T + λ²I)^(-1)

    This avoids numerical issues near singularities where J @ J^T becomes
    ill-conditioned. The damping factor λ controls the trade-off between
    accuracy and stability.

    Tall Jacobians (more task rows than joints, e.g. a planar arm against a
    6D twist) use the equivalent (J^T @ J + λ²I)^(-1) @ J^T, since J @ J^T
    is rank deficient there.

    Args:
        J: m x n Jacobian matrix
        damping: Damping factor λ (higher = more regularization, more stable)

    Returns:
        n x m pseudoinverse matrix
    """
    m, n = J.shape
    if m > n:
        JTJ = J.T @ J
        result: NDArray[np.float64] = np.linalg.solve(JTJ + damping**2 * np.eye(n), J.T)
        return result
    JJT = J @ J.T
    I = np.eye(m)
    result = J.T @ np.linalg.solve(JJT + damping**2 * I, I)
    return result


def get_manipulability(J: Jacobian) -> float:
    """Compute manipulability measure sqrt(det(J @ J^T)).

    Zero at a singularity. For chains with fewer than six joints J @ J^T
    is rank deficient, so the measure is taken over J^T @ J instead.
    """
    JJT = J @ J.T if J.shape[0] <= J.shape[1] else J.T @ J
    det = np.linalg.det(JJT)
    return float(np.sqrt(max(0.0, det)))


def check_singularity(
    J: Jacobian,
    threshold: float = 0.01,
) -> bool:
    """Check if Jacobian is near singularity (manipulability < threshold)."""
    return get_manipulability(J) < threshold


def compute_pose_error(current_pose: Pose, target_pose: Pose) -> tuple[float, float]:
    """Compute position and orientation error between two poses.

    Position error is the Euclidean distance between origins.
    Orientation error is the angle of the rotation relating the two frames.

    Returns:
        Tuple of (position_error, orientation_error) in length units and radians
    """
    return current_pose.distance_to(target_pose)


def compute_error_twist(
    current_pose: Pose,
    target_pose: Pose,
    gain: float = 1.0,
) -> NDArray[np.float64]:
    """Compute error twist for differential IK.

    The 6D twist [vx, vy, vz, wx, wy, wz] that moves the current pose toward
    the target, expressed in the world frame.
    """
    pos_error = target_pose.translation - current_pose.translation
    R_error: Rotation = target_pose.rotation * current_pose.rotation.inv()
    angular_error = R_error.as_rotvec()
    twist: NDArray[np.float64] = np.concatenate([pos_error * gain, angular_error * gain])
    return twist
