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

"""Load kinematic chains from JSON model files.

A model file lists the joints in chain order::

    {
      "name": "planar2",
      "joints": [
        {"name": "shoulder", "type": "revolute", "axis": [0, 0, 1],
         "min": -180, "max": 180,
         "geometry": {"type": "capsule", "radius": 0.05, "length": 1.0,
                      "center": {"x": 0.5, "o_x": 1, "o_z": 0}}},
        {"name": "elbow", "type": "revolute", "parent_offset": {"x": 1.0},
         "min": -180, "max": 180}
      ],
      "tool_offset": {"x": 1.0}
    }

Revolute limits are in degrees, prismatic limits in model units.
"""

from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError

from motionplan.kinematics.frame import Joint, KinematicChain
from motionplan.spec.enums import JointType
from motionplan.spec.errors import InvalidConfigurationError
from motionplan.utils.logging_config import setup_logger
from motionplan.world.messages import GeometryMessage, PoseMessage

logger = setup_logger()


class JointModel(BaseModel):
    name: str
    type: Literal["revolute", "prismatic", "fixed"] = "revolute"
    parent_offset: PoseMessage = Field(default_factory=PoseMessage)
    axis: tuple[float, float, float] = (0.0, 0.0, 1.0)
    min: float = -180.0
    max: float = 180.0
    geometry: GeometryMessage | None = None

    def to_joint(self) -> Joint:
        joint_type = JointType[self.type.upper()]
        limits = (self.min, self.max)
        if joint_type == JointType.REVOLUTE:
            limits = (math.radians(self.min), math.radians(self.max))
        return Joint(
            name=self.name,
            joint_type=joint_type,
            offset=self.parent_offset.to_pose(),
            axis=self.axis,
            limits=limits,
            geometry=self.geometry.to_geometry() if self.geometry is not None else None,
        )


class ChainModel(BaseModel):
    name: str
    joints: list[JointModel] = Field(min_length=1)
    base: PoseMessage = Field(default_factory=PoseMessage)
    tool_offset: PoseMessage = Field(default_factory=PoseMessage)

    def to_chain(self) -> KinematicChain:
        return KinematicChain(
            self.name,
            [joint.to_joint() for joint in self.joints],
            base_pose=self.base.to_pose(),
            tool_offset=self.tool_offset.to_pose(),
        )


def chain_from_dict(data: dict[str, Any]) -> KinematicChain:
    """Build a chain from a decoded model document.

    Raises:
        InvalidConfigurationError: If the document does not validate
    """
    try:
        model = ChainModel.model_validate(data)
    except ValidationError as e:
        raise InvalidConfigurationError(f"Invalid kinematics model: {e}") from e
    return model.to_chain()


def load_chain(path: str | Path) -> KinematicChain:
    """Load a chain from a JSON model file.

    Raises:
        InvalidConfigurationError: If the file is not valid JSON or not a valid model
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        raise InvalidConfigurationError(f"Model file {path} is not valid JSON: {e}") from e

    chain = chain_from_dict(data)
    logger.info("Loaded kinematic chain", path=str(path), name=chain.name, dof=chain.dof)
    return chain
