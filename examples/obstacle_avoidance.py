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
# Usage

Move a simulated three-link arm between two poses while avoiding a post
standing between them:

    python examples/obstacle_avoidance.py

Load the arm from a JSON model file instead:

    python examples/obstacle_avoidance.py --model path/to/arm.json --seed 3
"""

import argparse
import sys

import numpy as np

from motionplan import (
    Box,
    FakeArm,
    GeometriesInFrame,
    PlanningStatus,
    Pose,
    WorldState,
    create_planner_options,
    load_chain,
    make_planar_arm,
    plan_motion,
)
from motionplan.utils.logging_config import setup_logger

logger = setup_logger()

POSITION_1 = (1.1, 0.6, 0.0)
POSITION_2 = (1.1, -0.6, 0.0)


def build_world() -> WorldState:
    post = Box.from_dimensions(Pose.from_point((1.0, 0.0, 0.0)), (0.15, 0.15, 0.6), "post")
    table = Box.from_dimensions(Pose.from_point((0.0, 0.0, -0.2)), (3.0, 3.0, 0.1), "table")
    workspace = Box.from_dimensions(Pose.identity(), (3.0, 3.0, 1.0), "workspace")
    return WorldState(
        obstacles=[GeometriesInFrame.in_world({"post": post, "table": table})],
        interaction_spaces=[GeometriesInFrame.in_world({"workspace": workspace})],
    )


def main() -> int:
    parser = argparse.ArgumentParser(description="Obstacle avoidance with a simulated arm")
    parser.add_argument("--model", help="JSON kinematic model (default: built-in planar arm)")
    parser.add_argument("--seed", type=int, default=0, help="Planner seed")
    parser.add_argument("--max-iterations", type=int, default=2000)
    args = parser.parse_args()

    if args.model:
        arm = FakeArm(load_chain(args.model))
    else:
        arm = FakeArm(make_planar_arm([0.6, 0.6, 0.4]), initial_inputs=[0.5, -0.5, 0.0])
    chain = arm.model_frame()
    world = build_world()
    options = create_planner_options(
        chain, world, seed=args.seed, max_iterations=args.max_iterations
    )

    # Start from whichever position the arm is already closer to
    here = arm.end_position().translation
    start, goal = Pose.from_point(POSITION_1), Pose.from_point(POSITION_2)
    if np.linalg.norm(here - start.translation) > np.linalg.norm(here - goal.translation):
        start, goal = goal, start

    for label, pose in (("start", start), ("goal", goal)):
        result = plan_motion(arm, pose, world, options, execute=True)
        if result.status != PlanningStatus.SUCCESS:
            logger.error(
                "Planning failed", leg=label, status=result.status.name, message=result.message
            )
            return 1
        logger.info(
            "Reached pose",
            leg=label,
            waypoints=len(result.path),
            path_length=round(result.path_length, 3),
            inputs=np.round(arm.current_inputs(), 3).tolist(),
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
