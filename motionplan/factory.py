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

"""Factory functions for motion planning components."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from motionplan.utils.logging_config import setup_logger

if TYPE_CHECKING:
    from threading import Event

    from motionplan.config import PlanningSettings
    from motionplan.kinematics.frame import KinematicChain
    from motionplan.planners.options import PlannerOptions
    from motionplan.spatialmath.pose import Pose
    from motionplan.spec import ArmSpec, KinematicsSpec, PlannerSpec, PlanningResult
    from motionplan.world.world_state import WorldState

logger = setup_logger()


def create_kinematics(
    name: str = "jacobian",
    **kwargs: Any,
) -> KinematicsSpec:
    """Create IK solver. name='jacobian'."""
    if name == "jacobian":
        from motionplan.kinematics.jacobian_ik import JacobianIK

        return JacobianIK(**kwargs)
    else:
        raise ValueError(f"Unknown kinematics solver: {name}. Available: ['jacobian']")


def create_planner(
    name: str = "rrt_star_connect",
    chain: KinematicChain | None = None,
    **kwargs: Any,
) -> PlannerSpec:
    """Create motion planner. name='rrt_star_connect'|'rrt_connect'."""
    if chain is None:
        raise ValueError("A kinematic chain is required to create a planner")
    if name == "rrt_star_connect":
        from motionplan.planners.rrt_star_connect import RRTStarConnectPlanner

        return RRTStarConnectPlanner(chain, **kwargs)
    elif name == "rrt_connect":
        from motionplan.planners.rrt_star_connect import RRTConnectPlanner

        return RRTConnectPlanner(chain, **kwargs)
    else:
        raise ValueError(
            f"Unknown planner: {name}. Available: ['rrt_star_connect', 'rrt_connect']"
        )


def create_planner_options(
    chain: KinematicChain,
    world_state: WorldState,
    settings: PlanningSettings | None = None,
    check_self_collision: bool = False,
    **overrides: Any,
) -> PlannerOptions:
    """Basic options plus the world's constraints.

    Adds a "collision" constraint, and an "interaction_space" constraint
    when the world defines interaction spaces.
    """
    from motionplan.constraints import CollisionConstraint, InteractionSpaceConstraint
    from motionplan.planners.options import PlannerOptions

    options = PlannerOptions.from_settings(settings, **overrides)
    options.constraints.add(
        CollisionConstraint(chain, world_state, check_self_collision=check_self_collision)
    )
    if world_state.interaction_spaces:
        options.constraints.add(InteractionSpaceConstraint(chain, world_state))
    return options


def plan_motion(
    arm: ArmSpec,
    goal_pose: Pose,
    world_state: WorldState,
    options: PlannerOptions | None = None,
    planner_name: str = "rrt_star_connect",
    execute: bool = False,
    cancel_event: Event | None = None,
) -> PlanningResult:
    """Plan from the arm's current inputs to a goal pose.

    When ``options`` is None they are built with create_planner_options().
    With ``execute`` a successful solution is sent to the arm.
    """
    chain = arm.model_frame()
    if options is None:
        options = create_planner_options(chain, world_state)

    planner = create_planner(planner_name, chain)
    result = planner.plan_to_pose(arm.current_inputs(), goal_pose, options, cancel_event)

    if execute and result.is_success():
        arm.go_to_waypoints(result.path)
    elif execute:
        logger.warning("Not executing failed plan", status=result.status.name)
    return result
