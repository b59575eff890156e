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

"""Tests for Pose composition and conversions."""

import math

import numpy as np
import pytest
from scipy.spatial.transform import Rotation

from motionplan.spatialmath.pose import Pose


class TestComposition:
    def test_identity_is_neutral(self):
        p = Pose.from_axis_angle((1.0, 2.0, 3.0), (0.0, 0.0, 1.0), 0.7)
        assert p + Pose.identity() == p
        assert Pose.identity() + p == p

    def test_translation_then_rotation(self):
        base = Pose.from_axis_angle((1.0, 0.0, 0.0), (0.0, 0.0, 1.0), math.pi / 2)
        tool = Pose.from_point((1.0, 0.0, 0.0))
        np.testing.assert_allclose((base + tool).translation, [1.0, 1.0, 0.0], atol=1e-12)

    def test_associative(self):
        rng = np.random.default_rng(3)
        a, b, c = (Pose(rng.normal(size=3), Rotation.from_rotvec(rng.normal(size=3))) for _ in range(3))
        assert ((a + b) + c).almost_equal(a + (b + c), tolerance=1e-9)

    def test_inverse(self):
        p = Pose.from_axis_angle((0.3, -0.2, 1.0), (1.0, 1.0, 0.0), 1.1)
        assert (p + p.inverse()).almost_equal(Pose.identity(), tolerance=1e-12)

    def test_translation_is_read_only_and_still_composes(self):
        base = Pose.from_axis_angle((1.0, 0.0, 0.0), (0.0, 0.0, 1.0), math.pi / 2)
        tool = Pose.from_point((0.5, 0.0, 0.0))
        assert not tool.translation.flags.writeable
        np.testing.assert_allclose((base + tool).translation, [1.0, 0.5, 0.0], atol=1e-12)
        np.testing.assert_allclose(base.inverse().translation, [0.0, 1.0, 0.0], atol=1e-12)
        np.testing.assert_allclose(
            base.transform_point(tool.translation), [1.0, 0.5, 0.0], atol=1e-12
        )

    def test_frame_id_kept_from_left_operand(self):
        p = Pose.from_point((1.0, 0.0, 0.0), frame_id="table") + Pose.from_point((0.0, 1.0, 0.0))
        assert p.frame_id == "table"

    def test_compose_rejects_non_pose(self):
        with pytest.raises(TypeError):
            Pose.identity() + (1.0, 0.0, 0.0)


class TestConversions:
    def test_matrix_round_trip(self):
        p = Pose.from_axis_angle((0.5, 0.1, -0.4), (0.0, 1.0, 0.0), 0.3)
        assert Pose.from_matrix(p.to_matrix()) == p

    def test_from_matrix_rejects_bad_shape(self):
        with pytest.raises(ValueError):
            Pose.from_matrix(np.eye(3))

    def test_transform_point(self):
        p = Pose.from_axis_angle((0.0, 0.0, 1.0), (0.0, 0.0, 1.0), math.pi)
        np.testing.assert_allclose(p.transform_point((1.0, 0.0, 0.0)), [-1.0, 0.0, 1.0], atol=1e-12)

    def test_default_orientation_vector_points_up(self):
        assert Pose.identity().orientation_vector() == pytest.approx((0.0, 0.0, 1.0, 0.0))

    def test_orientation_vector_sets_z_axis(self):
        p = Pose.from_orientation_vector((0.0, 0.0, 0.0), 1.0, 0.0, 0.0, 0.0)
        np.testing.assert_allclose(p.rotation.apply([0.0, 0.0, 1.0]), [1.0, 0.0, 0.0], atol=1e-12)

    def test_orientation_vector_round_trip(self):
        p = Pose.from_orientation_vector((1.0, 2.0, 3.0), 0.2, -0.5, 0.7, 35.0)
        ox, oy, oz, theta = p.orientation_vector()
        again = Pose.from_orientation_vector((1.0, 2.0, 3.0), ox, oy, oz, theta)
        assert again.almost_equal(p, tolerance=1e-9)

    def test_orientation_vector_at_pole_folds_theta(self):
        p = Pose.from_orientation_vector((0.0, 0.0, 0.0), 0.0, 0.0, 1.0, 90.0)
        ox, oy, oz, theta = p.orientation_vector()
        assert (ox, oy, oz) == pytest.approx((0.0, 0.0, 1.0))
        assert theta == pytest.approx(90.0)

    def test_translation_is_read_only(self):
        p = Pose.from_point((1.0, 2.0, 3.0))
        with pytest.raises(ValueError):
            p.translation[0] = 5.0

    def test_distance_to(self):
        a = Pose.identity()
        b = Pose.from_axis_angle((3.0, 4.0, 0.0), (0.0, 0.0, 1.0), 0.5)
        pos_err, ori_err = a.distance_to(b)
        assert pos_err == pytest.approx(5.0)
        assert ori_err == pytest.approx(0.5)

    def test_equality_requires_same_frame(self):
        assert Pose.identity() != Pose.identity(frame_id="table")
