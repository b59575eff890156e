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

from unittest.mock import MagicMock

import numpy as np
import pytest

from motionplan.arm import FakeArm
from motionplan.factory import (
    create_kinematics,
    create_planner,
    create_planner_options,
    plan_motion,
)
from motionplan.geometry import Box
from motionplan.kinematics import JacobianIK
from motionplan.planners import RRTConnectPlanner, RRTStarConnectPlanner
from motionplan.spatialmath.pose import Pose
from motionplan.spec import PlanningStatus
from motionplan.world import GeometriesInFrame, WorldState

# =============================================================================
# Component Factories
# =============================================================================


class TestCreate:
    def test_kinematics(self):
        solver = create_kinematics("jacobian", damping=0.1)
        assert isinstance(solver, JacobianIK)

    def test_unknown_kinematics(self):
        with pytest.raises(ValueError, match="Unknown kinematics solver"):
            create_kinematics("drake")

    def test_planners(self, planar_arm):
        assert isinstance(create_planner(chain=planar_arm), RRTStarConnectPlanner)
        assert isinstance(create_planner("rrt_connect", planar_arm), RRTConnectPlanner)

    def test_unknown_planner(self, planar_arm):
        with pytest.raises(ValueError, match="Unknown planner"):
            create_planner("prm", planar_arm)

    def test_planner_needs_chain(self):
        with pytest.raises(ValueError):
            create_planner("rrt_star_connect")


class TestPlannerOptions:
    def test_collision_only(self, planar_arm, sphere_world):
        options = create_planner_options(planar_arm, sphere_world, step_size=0.05)
        assert options.constraints.names == ["collision"]
        assert options.step_size == 0.05

    def test_with_interaction_space(self, planar_arm):
        workspace = Box(Pose.identity(), (6.0, 6.0, 1.0), label="workspace")
        spaces = [GeometriesInFrame.in_world({"workspace": workspace})]
        world = WorldState(interaction_spaces=spaces)
        options = create_planner_options(planar_arm, world)
        assert options.constraints.names == ["collision", "interaction_space"]


# =============================================================================
# plan_motion
# =============================================================================


class TestPlanMotion:
    def test_plans_and_executes(self, planar_arm, sphere_world):
        arm = FakeArm(planar_arm)
        goal_pose = planar_arm.forward_kinematics([1.57, 0.0])
        options = create_planner_options(planar_arm, sphere_world, seed=0, max_iterations=1000)

        result = plan_motion(arm, goal_pose, sphere_world, options, execute=True)

        assert result.is_success(), result.message
        assert len(arm.executed_trajectories) == 1
        assert arm.end_position().distance_to(goal_pose)[0] <= 2e-3

    def test_plan_only_leaves_arm(self, planar_arm, empty_world):
        arm = FakeArm(planar_arm)
        goal_pose = planar_arm.forward_kinematics([0.5, 0.5])

        result = plan_motion(arm, goal_pose, empty_world)

        assert result.is_success(), result.message
        assert arm.executed_trajectories == []
        np.testing.assert_array_equal(arm.current_inputs(), [0.0, 0.0])

    def test_failed_plan_not_executed(self, planar_arm, empty_world):
        arm = MagicMock()
        arm.model_frame.return_value = planar_arm
        arm.current_inputs.return_value = np.zeros(2)

        result = plan_motion(arm, Pose.from_point((5.0, 0.0, 0.0)), empty_world, execute=True)

        assert result.status == PlanningStatus.NO_IK_SOLUTION
        arm.go_to_waypoints.assert_not_called()
