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

"""Data types for motion planning."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TypeAlias

from motionplan.spec.enums import IKStatus, PlanningStatus
from motionplan.spec.errors import (
    InfeasibleEndpointError,
    InvalidConfigurationError,
    MotionPlanningError,
    NoIKSolutionError,
    NoPathFoundError,
    PlanningCancelledError,
)

if TYPE_CHECKING:
    import numpy as np
    from numpy.typing import NDArray

# =============================================================================
# Numeric Array Types
# =============================================================================

Configuration: TypeAlias = "NDArray[np.float64]"
"""One scalar input per non-fixed joint, in chain order"""

JointPath: TypeAlias = "list[NDArray[np.float64]]"
"""Ordered list of configurations (waypoints)"""

Jacobian: TypeAlias = "NDArray[np.float64]"
"""6 x n Jacobian matrix (rows: [vx, vy, vz, wx, wy, wz])"""


_STATUS_ERRORS: dict[PlanningStatus, type[MotionPlanningError]] = {
    PlanningStatus.INVALID_CONFIGURATION: InvalidConfigurationError,
    PlanningStatus.INFEASIBLE_ENDPOINT: InfeasibleEndpointError,
    PlanningStatus.NO_IK_SOLUTION: NoIKSolutionError,
    PlanningStatus.NO_PATH_FOUND: NoPathFoundError,
    PlanningStatus.CANCELLED: PlanningCancelledError,
}


# =============================================================================
# Data Classes
# =============================================================================


@dataclass(frozen=True)
class ConstraintResult:
    """Outcome of evaluating a constraint.

    Attributes:
        passed: Whether the constraint is satisfied
        constraint_name: Name of the constraint that produced this result
        configuration: Configuration that failed (None when passed)
        message: Human-readable diagnostic
    """

    passed: bool
    constraint_name: str | None = None
    configuration: NDArray[np.float64] | None = None
    message: str = ""

    def __bool__(self) -> bool:
        return self.passed


@dataclass
class IKResult:
    """Result of an IK solve.

    Attributes:
        status: Solution status
        configuration: Solution configuration (None if failed)
        position_error: Cartesian position error
        orientation_error: Orientation error (radians)
        iterations: Number of iterations taken (summed over attempts)
        attempts: Number of seeds tried
        message: Human-readable status message
    """

    status: IKStatus
    configuration: NDArray[np.float64] | None = None
    position_error: float = 0.0
    orientation_error: float = 0.0
    iterations: int = 0
    attempts: int = 0
    message: str = ""

    def is_success(self) -> bool:
        """Check if IK was successful."""
        return self.status == IKStatus.SUCCESS


@dataclass
class PlanningResult:
    """Result of motion planning.

    Attributes:
        status: Planning status
        path: Solution waypoints from start to goal (empty if failed)
        planning_time: Time taken to plan (seconds)
        path_length: Total path length in configuration space
        iterations: Number of search iterations consumed
        message: Human-readable status message
        failed_constraint: Name of the constraint that blocked planning, if any
        failed_configuration: Configuration at which it failed, if any
    """

    status: PlanningStatus
    path: list[NDArray[np.float64]] = field(default_factory=list)
    planning_time: float = 0.0
    path_length: float = 0.0
    iterations: int = 0
    message: str = ""
    failed_constraint: str | None = None
    failed_configuration: NDArray[np.float64] | None = None

    def is_success(self) -> bool:
        """Check if planning was successful."""
        return self.status == PlanningStatus.SUCCESS

    def raise_for_status(self) -> None:
        """Raise the matching MotionPlanningError unless planning succeeded."""
        if self.is_success():
            return
        error_cls = _STATUS_ERRORS[self.status]
        configuration = (
            self.failed_configuration.tolist() if self.failed_configuration is not None else None
        )
        raise error_cls(
            self.message,
            constraint_name=self.failed_constraint,
            configuration=configuration,
        )
