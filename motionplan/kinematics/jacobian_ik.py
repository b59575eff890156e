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

"""Jacobian-based inverse kinematics.

JacobianIK resolves an end-effector pose to a configuration of a
KinematicChain with damped least squares. A single attempt is bounded by
an iteration count; ``solve`` retries from a bounded number of alternate
seeds before reporting NO_SOLUTION. Non-convergence is a normal result,
not an exception.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import numpy as np

from motionplan.kinematics.kinematics_utils import (
    check_singularity,
    compute_error_twist,
    compute_pose_error,
    damped_pseudoinverse,
)
from motionplan.spec import IKResult, IKStatus, InvalidConfigurationError
from motionplan.utils.logging_config import setup_logger

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from motionplan.constraints.base import ConstraintSet
    from motionplan.kinematics.frame import KinematicChain
    from motionplan.spatialmath.pose import Pose

logger = setup_logger()


class JacobianIK:
    """Iterative damped-least-squares IK solver.

    Methods:
        - solve_iterative(): One attempt from one seed until convergence
        - solve(): solve_iterative with bounded random restarts

    Example:
        ik = JacobianIK(damping=0.05)
        result = ik.solve(chain, target_pose, seed=current_inputs)
        if result.is_success():
            print(f"Solution: {result.configuration}")
    """

    def __init__(
        self,
        damping: float = 0.05,
        max_iterations: int = 200,
        singularity_threshold: float = 1e-6,
        max_step: float = 0.1,
        position_only: bool = False,
    ):
        """Create Jacobian IK solver.

        Args:
            damping: Damping factor for pseudoinverse (higher = more stable near singularities)
            max_iterations: Maximum iterations per attempt
            singularity_threshold: Manipulability threshold for singularity detection
            max_step: Largest change of any joint input per iteration
            position_only: Ignore orientation (for chains that cannot control it)
        """
        self._damping = damping
        self._max_iterations = max_iterations
        self._singularity_threshold = singularity_threshold
        self._max_step = max_step
        self._position_only = position_only

    def solve(
        self,
        chain: KinematicChain,
        target_pose: Pose,
        seed: Sequence[float] | None = None,
        position_tolerance: float = 0.001,
        orientation_tolerance: float = 0.01,
        constraints: ConstraintSet | None = None,
        max_attempts: int = 10,
        rng: np.random.Generator | None = None,
    ) -> IKResult:
        """Solve IK with bounded random restarts.

        The first attempt starts from ``seed`` (or the middle of the joint
        ranges); later attempts start from random configurations within the
        joint limits. Solutions that violate ``constraints`` are discarded.

        Args:
            chain: Kinematic chain to solve for
            target_pose: Target end-effector pose in world
            seed: Initial guess
            position_tolerance: Required position accuracy
            orientation_tolerance: Required orientation accuracy (radians)
            constraints: Optional constraints the solution must satisfy
            max_attempts: Maximum number of seeds to try
            rng: Random generator for alternate seeds

        Returns:
            IKResult with solution or failure status
        """
        lower, upper = chain.joint_limits()
        rng = rng if rng is not None else np.random.default_rng()
        first_seed = chain.validate(seed) if seed is not None else (lower + upper) / 2.0

        total_iterations = 0
        rejected = 0
        for attempt in range(max_attempts):
            current_seed = first_seed if attempt == 0 else chain.random_configuration(rng)
            result = self.solve_iterative(
                chain,
                target_pose,
                current_seed,
                position_tolerance=position_tolerance,
                orientation_tolerance=orientation_tolerance,
            )
            total_iterations += result.iterations

            if not result.is_success() or result.configuration is None:
                continue

            if constraints is not None:
                check = constraints.evaluate(result.configuration)
                if not check.passed:
                    rejected += 1
                    logger.debug(
                        "IK solution rejected",
                        constraint=check.constraint_name,
                        attempt=attempt,
                    )
                    continue

            result.iterations = total_iterations
            result.attempts = attempt + 1
            return result

        status = IKStatus.CONSTRAINT_VIOLATION if rejected else IKStatus.NO_SOLUTION
        message = f"IK failed after {max_attempts} attempts"
        if rejected:
            message += f" ({rejected} solutions violated constraints)"
        logger.info("IK failed", attempts=max_attempts, rejected=rejected)
        return _create_failure_result(status, message, total_iterations, max_attempts)

    def solve_iterative(
        self,
        chain: KinematicChain,
        target_pose: Pose,
        seed: Sequence[float] | NDArray[np.float64],
        max_iterations: int | None = None,
        position_tolerance: float = 0.001,
        orientation_tolerance: float = 0.01,
    ) -> IKResult:
        """Iterative Jacobian-based IK from one seed until convergence.

        Uses the damped pseudoinverse with adaptive damping near
        singularities and a clamped per-iteration step.

        Raises:
            InvalidConfigurationError: If the seed is invalid or the target
                pose is not expressed in the chain's base frame
        """
        if target_pose.frame_id != chain.base_pose.frame_id:
            raise InvalidConfigurationError(
                f"Target pose frame '{target_pose.frame_id}' does not match "
                f"chain frame '{chain.base_pose.frame_id}'"
            )

        lower, upper = chain.joint_limits()
        q = np.clip(chain.validate(seed), lower, upper)
        max_iterations = max_iterations or self._max_iterations
        ori_tolerance = np.inf if self._position_only else orientation_tolerance

        pos_error = ori_error = np.inf
        for iteration in range(max_iterations):
            current_pose = chain.forward_kinematics(q)
            pos_error, ori_error = compute_pose_error(current_pose, target_pose)

            if pos_error <= position_tolerance and ori_error <= ori_tolerance:
                return _create_success_result(q, pos_error, ori_error, iteration + 1)

            twist = compute_error_twist(current_pose, target_pose, gain=0.5)
            J = chain.jacobian(q)
            if self._position_only:
                J = J[:3, :]
                twist = twist[:3]

            # Increase damping near singularity instead of failing
            if check_singularity(J, threshold=self._singularity_threshold):
                effective_damping = self._damping * 10.0
            else:
                effective_damping = self._damping

            q_dot = damped_pseudoinverse(J, effective_damping) @ twist

            max_change = float(np.max(np.abs(q_dot)))
            if max_change > self._max_step:
                q_dot = q_dot * (self._max_step / max_change)

            q = np.clip(q + q_dot, lower, upper)

        return _create_failure_result(
            IKStatus.NO_SOLUTION,
            f"Did not converge after {max_iterations} iterations "
            f"(pos_err={pos_error:.4f}, ori_err={ori_error:.4f})",
            iterations=max_iterations,
        )


# ============= Result Helpers =============


def _create_success_result(
    configuration: NDArray[np.float64],
    position_error: float,
    orientation_error: float,
    iterations: int,
) -> IKResult:
    """Create a successful IK result."""
    return IKResult(
        status=IKStatus.SUCCESS,
        configuration=configuration.copy(),
        position_error=position_error,
        orientation_error=orientation_error,
        iterations=iterations,
        attempts=1,
        message="IK solution found",
    )


def _create_failure_result(
    status: IKStatus,
    message: str,
    iterations: int = 0,
    attempts: int = 1,
) -> IKResult:
    """Create a failed IK result."""
    return IKResult(
        status=status,
        configuration=None,
        iterations=iterations,
        attempts=attempts,
        message=message,
    )
