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
motionplan

Collision-aware motion planning for articulated arms.

## Architecture

- **Frame Model**: KinematicChain with forward kinematics and Jacobian
- **Geometry**: Box, Sphere and Capsule primitives with analytic collision tests
- **World State**: obstacles and interaction spaces resolved to the world frame
- **Constraints**: named predicates over configurations and segments
- **Planners**: RRT*-Connect and RRT-Connect over configuration space

## Usage

```python
from motionplan import (
    FakeArm,
    Pose,
    Sphere,
    WorldState,
    make_planar_arm,
    plan_motion,
)

arm = FakeArm(make_planar_arm([1.0, 1.0]))
world = WorldState.from_geometries(
    {"ball": Sphere(Pose.from_point((1.0, 1.0, 0.0)), radius=0.2)}
)
goal = arm.model_frame().forward_kinematics([1.57, 0.0])
result = plan_motion(arm, goal, world, execute=True)
```
"""

from motionplan.arm import FakeArm
from motionplan.config import PlanningSettings
from motionplan.constraints import (
    CollisionConstraint,
    ConstraintSet,
    InteractionSpaceConstraint,
    JointLimitConstraint,
    PredicateConstraint,
)
from motionplan.factory import (
    create_kinematics,
    create_planner,
    create_planner_options,
    plan_motion,
)
from motionplan.geometry import Box, Capsule, Geometry, Sphere, collides
from motionplan.kinematics import JacobianIK, Joint, KinematicChain, load_chain, make_planar_arm
from motionplan.planners import PlannerOptions, RRTConnectPlanner, RRTStarConnectPlanner
from motionplan.spatialmath import Pose
from motionplan.spec import (
    ConstraintResult,
    GeometryType,
    IKResult,
    IKStatus,
    InfeasibleEndpointError,
    InvalidConfigurationError,
    InvalidGeometryError,
    JointType,
    MotionPlanningError,
    NoIKSolutionError,
    NoPathFoundError,
    PlanningCancelledError,
    PlanningResult,
    PlanningStatus,
)
from motionplan.world import GeometriesInFrame, WorldState, WorldStateMessage

__all__ = [
    "Box",
    "Capsule",
    "CollisionConstraint",
    "ConstraintResult",
    "ConstraintSet",
    "FakeArm",
    "GeometriesInFrame",
    "Geometry",
    "GeometryType",
    "IKResult",
    "IKStatus",
    "InfeasibleEndpointError",
    "InteractionSpaceConstraint",
    "InvalidConfigurationError",
    "InvalidGeometryError",
    "JacobianIK",
    "Joint",
    "JointLimitConstraint",
    "JointType",
    "KinematicChain",
    "MotionPlanningError",
    "NoIKSolutionError",
    "NoPathFoundError",
    "PlannerOptions",
    "PlanningCancelledError",
    "PlanningResult",
    "PlanningSettings",
    "PlanningStatus",
    "Pose",
    "PredicateConstraint",
    "RRTConnectPlanner",
    "RRTStarConnectPlanner",
    "Sphere",
    "WorldState",
    "WorldStateMessage",
    "collides",
    "create_kinematics",
    "create_planner",
    "create_planner_options",
    "load_chain",
    "make_planar_arm",
    "plan_motion",
]
