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

"""Motion Planning Specifications."""

from motionplan.spec.enums import GeometryType, IKStatus, JointType, PlanningStatus
from motionplan.spec.errors import (
    InfeasibleEndpointError,
    InvalidConfigurationError,
    InvalidGeometryError,
    MotionPlanningError,
    NoIKSolutionError,
    NoPathFoundError,
    PlanningCancelledError,
)
from motionplan.spec.protocols import ArmSpec, ConstraintSpec, KinematicsSpec, PlannerSpec
from motionplan.spec.types import (
    Configuration,
    ConstraintResult,
    IKResult,
    Jacobian,
    JointPath,
    PlanningResult,
)

__all__ = [
    "ArmSpec",
    "Configuration",
    "ConstraintResult",
    "ConstraintSpec",
    "GeometryType",
    "IKResult",
    "IKStatus",
    "InfeasibleEndpointError",
    "InvalidConfigurationError",
    "InvalidGeometryError",
    "Jacobian",
    "JointPath",
    "JointType",
    "KinematicsSpec",
    "MotionPlanningError",
    "NoIKSolutionError",
    "NoPathFoundError",
    "PlannerSpec",
    "PlanningCancelledError",
    "PlanningResult",
    "PlanningStatus",
]
