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

"""Tests for WorldState frame resolution and read-only views."""

import math

import numpy as np
import pytest

from motionplan.geometry.primitives import Box, Sphere
from motionplan.spatialmath.pose import Pose
from motionplan.spec import InvalidConfigurationError
from motionplan.world.world_state import GeometriesInFrame, WorldState


def _ball(x=0.0, y=0.0, z=0.0, radius=0.1):
    return Sphere(Pose.from_point((x, y, z)), radius)


class TestWorldState:
    def test_empty(self):
        world = WorldState()
        assert world.is_empty()
        assert dict(world.obstacles) == {}
        assert dict(world.interaction_spaces) == {}

    def test_world_frame_geometries_unchanged(self):
        world = WorldState(obstacles=[GeometriesInFrame.in_world({"ball": _ball(1.0)})])
        np.testing.assert_allclose(world.obstacles["ball"].pose.translation, [1.0, 0.0, 0.0])

    def test_resolves_named_frames(self):
        table = Pose.from_axis_angle((0.0, 0.0, 1.0), (0.0, 0.0, 1.0), math.pi / 2)
        world = WorldState(
            obstacles=[GeometriesInFrame("table", {"cup": _ball(1.0)})],
            frames={"table": table},
        )
        cup = world.obstacles["cup"]
        np.testing.assert_allclose(cup.pose.translation, [0.0, 1.0, 1.0], atol=1e-12)
        assert cup.pose.frame_id == "world"

    def test_unknown_frame_rejected(self):
        with pytest.raises(InvalidConfigurationError):
            WorldState(obstacles=[GeometriesInFrame("shelf", {"cup": _ball()})])

    def test_frame_must_be_in_world(self):
        with pytest.raises(InvalidConfigurationError):
            WorldState(frames={"table": Pose.identity(frame_id="floor")})

    def test_duplicate_names_rejected(self):
        with pytest.raises(InvalidConfigurationError):
            WorldState(
                obstacles=[
                    GeometriesInFrame.in_world({"cup": _ball()}),
                    GeometriesInFrame.in_world({"cup": _ball(2.0)}),
                ]
            )

    def test_same_name_allowed_across_kinds(self):
        world = WorldState.from_geometries(
            obstacles={"zone": _ball()},
            interaction_spaces={"zone": Box(Pose.identity(), (5.0, 5.0, 5.0))},
        )
        assert "zone" in world.obstacles
        assert "zone" in world.interaction_spaces

    def test_read_only(self):
        world = WorldState.from_geometries(obstacles={"ball": _ball()})
        with pytest.raises(TypeError):
            world.obstacles["other"] = _ball()  # type: ignore[index]

    def test_input_mapping_not_aliased(self):
        geometries = {"ball": _ball()}
        world = WorldState.from_geometries(obstacles=geometries)
        geometries["late"] = _ball(3.0)
        assert "late" not in world.obstacles
