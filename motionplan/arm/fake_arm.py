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

"""Simulated arm - implements the ArmSpec protocol in-process.

Implements ArmSpec via duck typing. Moves are instantaneous: the arm
snaps to each waypoint in turn and remembers every trajectory it was
asked to execute.
"""

from __future__ import annotations

from collections.abc import Sequence
import threading
from typing import TYPE_CHECKING

import numpy as np

from motionplan.utils.logging_config import setup_logger

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from motionplan.kinematics.frame import KinematicChain
    from motionplan.spatialmath.pose import Pose
    from motionplan.spec.types import JointPath

logger = setup_logger()


class FakeArm:
    """In-process arm backed by a KinematicChain.

    Example:
        arm = FakeArm(make_planar_arm([1.0, 1.0]))
        arm.go_to_waypoints([np.array([0.1, 0.0]), np.array([0.2, 0.0])])
        arm.current_inputs()  # array([0.2, 0.0])
    """

    def __init__(
        self,
        chain: KinematicChain,
        initial_inputs: Sequence[float] | None = None,
        name: str = "fake_arm",
    ) -> None:
        self._chain = chain
        self._name = name
        self._lock = threading.Lock()
        if initial_inputs is None:
            lower, upper = chain.joint_limits()
            initial_inputs = np.clip(np.zeros(chain.dof), lower, upper)
        self._inputs = chain.validate(initial_inputs)
        self._executed: list[JointPath] = []

    @property
    def name(self) -> str:
        return self._name

    def current_inputs(self) -> NDArray[np.float64]:
        with self._lock:
            return self._inputs.copy()

    def model_frame(self) -> KinematicChain:
        return self._chain

    def end_position(self) -> Pose:
        """End-effector pose at the current inputs."""
        return self._chain.forward_kinematics(self.current_inputs())

    def move_to_joint_positions(self, configuration: Sequence[float]) -> None:
        """Snap to a single configuration.

        Raises:
            InvalidConfigurationError: If the configuration is invalid for the chain
        """
        q = self._chain.validate(configuration)
        with self._lock:
            self._inputs = q

    def go_to_waypoints(self, waypoints: JointPath) -> None:
        """Execute a trajectory, ending at its last waypoint.

        Every waypoint is validated before the arm moves, so an invalid
        trajectory leaves the arm where it was.

        Raises:
            InvalidConfigurationError: If any waypoint is invalid for the chain
        """
        validated = [self._chain.validate(q) for q in waypoints]
        if not validated:
            return
        with self._lock:
            self._executed.append(validated)
            self._inputs = validated[-1].copy()
        logger.info(
            "Executed trajectory", arm=self._name, waypoints=len(validated), final=validated[-1]
        )

    @property
    def executed_trajectories(self) -> list[JointPath]:
        with self._lock:
            return list(self._executed)
