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

"""Tests for primitives and pairwise collision checks."""

import math

import numpy as np
import pytest

from motionplan.constants import CONTACT_TOLERANCE
from motionplan.geometry.collision import (
    collides,
    collides_any,
    first_collision,
    penetration_depth,
)
from motionplan.geometry.primitives import Box, Capsule, Sphere, make_geometry
from motionplan.spatialmath.pose import Pose
from motionplan.spec import GeometryType, InvalidConfigurationError, InvalidGeometryError


def _at(x=0.0, y=0.0, z=0.0):
    return Pose.from_point((x, y, z))


def _capsule_along_x(x, y, radius, length):
    return Capsule(
        Pose.from_axis_angle((x, y, 0.0), (0.0, 1.0, 0.0), math.pi / 2), radius=radius, length=length
    )


# =============================================================================
# Primitives
# =============================================================================


class TestPrimitives:
    @pytest.mark.parametrize(
        "factory",
        [
            lambda: Sphere(_at(), radius=0.0),
            lambda: Sphere(_at(), radius=float("nan")),
            lambda: Box(_at(), (1.0, -1.0, 1.0)),
            lambda: Box(_at(), (1.0, 1.0)),
            lambda: Capsule(_at(), radius=0.5, length=0.5),
            lambda: Capsule(_at(), radius=-0.1, length=1.0),
        ],
    )
    def test_malformed_dimensions_rejected(self, factory):
        with pytest.raises(InvalidGeometryError):
            factory()

    def test_geometry_error_is_configuration_error(self):
        with pytest.raises(InvalidConfigurationError):
            Sphere(_at(), radius=-1.0)

    def test_box_from_dimensions_halves(self):
        box = Box.from_dimensions(_at(), (2.0, 4.0, 6.0))
        assert box.half_extents == (1.0, 2.0, 3.0)

    def test_make_geometry(self):
        box = make_geometry(GeometryType.BOX, _at(), (2.0, 2.0, 2.0), label="crate")
        assert isinstance(box, Box)
        assert box.half_extents == (1.0, 1.0, 1.0)
        assert box.label == "crate"
        capsule = make_geometry(GeometryType.CAPSULE, _at(), (0.1, 1.0))
        assert isinstance(capsule, Capsule)
        with pytest.raises(InvalidGeometryError):
            make_geometry(GeometryType.SPHERE, _at(), (1.0, 2.0))

    def test_transform_places_in_parent(self):
        sphere = Sphere(_at(1.0), radius=0.5)
        moved = sphere.transform(Pose.from_axis_angle((0.0, 0.0, 1.0), (0.0, 0.0, 1.0), math.pi / 2))
        np.testing.assert_allclose(moved.pose.translation, [0.0, 1.0, 1.0], atol=1e-12)
        # Original untouched
        np.testing.assert_allclose(sphere.pose.translation, [1.0, 0.0, 0.0])

    def test_capsule_segment_excludes_caps(self):
        a, b = Capsule(_at(), radius=0.25, length=2.0).segment()
        np.testing.assert_allclose(a, [0.0, 0.0, -0.75])
        np.testing.assert_allclose(b, [0.0, 0.0, 0.75])

    def test_contains_point(self):
        box = Box(Pose.from_axis_angle((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), math.pi / 4), (1.0, 0.1, 1.0))
        assert box.contains_point((0.5, 0.5, 0.0))
        assert not box.contains_point((0.5, -0.5, 0.0))
        assert Sphere(_at(), radius=1.0).contains_point((1.0, 0.0, 0.0))
        assert Capsule(_at(), radius=0.1, length=2.0).contains_point((0.0, 0.05, 0.95))


# =============================================================================
# Pair Tests
# =============================================================================


class TestSphereSphere:
    def test_overlapping(self):
        assert collides(Sphere(_at(), 1.0), Sphere(_at(1.5), 1.0))
        assert penetration_depth(Sphere(_at(), 1.0), Sphere(_at(1.5), 1.0)) == pytest.approx(0.5)

    def test_separated_reports_distance(self):
        assert penetration_depth(Sphere(_at(), 1.0), Sphere(_at(3.0), 1.0)) == pytest.approx(-1.0)

    def test_exact_touch_is_not_collision(self):
        assert not collides(Sphere(_at(), 1.0), Sphere(_at(2.0), 1.0))

    def test_just_inside_tolerance_is_not_collision(self):
        assert not collides(Sphere(_at(), 1.0), Sphere(_at(2.0 - CONTACT_TOLERANCE / 2), 1.0))

    def test_beyond_tolerance_collides(self):
        assert collides(Sphere(_at(), 1.0), Sphere(_at(2.0 - 1e-6), 1.0))


class TestCapsule:
    def test_sphere_near_capsule_side(self):
        capsule = _capsule_along_x(0.0, 0.0, radius=0.1, length=2.0)
        assert collides(Sphere(_at(0.5, 0.25), 0.2), capsule)
        assert not collides(Sphere(_at(0.5, 0.35), 0.2), capsule)

    def test_sphere_beyond_capsule_cap(self):
        capsule = _capsule_along_x(0.0, 0.0, radius=0.1, length=2.0)
        assert not collides(Sphere(_at(1.25), 0.1), capsule)
        assert collides(Sphere(_at(1.05), 0.1), capsule)

    def test_crossing_capsules(self):
        a = _capsule_along_x(0.0, 0.0, radius=0.1, length=2.0)
        b = Capsule(Pose.from_axis_angle((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), math.pi / 2), 0.1, 2.0)
        assert collides(a, b)
        assert penetration_depth(a, b) == pytest.approx(0.2)

    def test_parallel_capsules(self):
        a = _capsule_along_x(0.0, 0.0, radius=0.1, length=2.0)
        assert collides(a, _capsule_along_x(0.5, 0.15, radius=0.1, length=2.0))
        assert not collides(a, _capsule_along_x(0.5, 0.25, radius=0.1, length=2.0))


class TestBox:
    def test_sphere_outside_face(self):
        box = Box(_at(), (1.0, 1.0, 1.0))
        assert penetration_depth(Sphere(_at(1.5), 0.25), box) == pytest.approx(-0.25)
        assert not collides(Sphere(_at(1.5), 0.25), box)
        assert collides(Sphere(_at(1.2), 0.25), box)

    def test_sphere_center_inside_box(self):
        box = Box(_at(), (1.0, 1.0, 1.0))
        assert penetration_depth(Sphere(_at(0.5), 0.1), box) == pytest.approx(0.6)

    def test_sphere_near_corner(self):
        box = Box(_at(), (1.0, 1.0, 1.0))
        # Distance from (1.2, 1.2, 0) to the edge is 0.2 * sqrt(2) ~ 0.283
        assert not collides(Sphere(_at(1.2, 1.2), 0.25), box)
        assert collides(Sphere(_at(1.2, 1.2), 0.3), box)

    def test_capsule_box(self):
        box = Box(_at(), (0.5, 0.5, 0.5))
        assert collides(_capsule_along_x(0.0, 0.55, radius=0.1, length=3.0), box)
        assert not collides(_capsule_along_x(0.0, 0.65, radius=0.1, length=3.0), box)

    def test_capsule_box_touching_is_not_collision(self):
        box = Box(_at(), (0.5, 0.5, 0.5))
        assert not collides(_capsule_along_x(0.0, 0.6, radius=0.1, length=3.0), box)

    def test_capsule_through_box(self):
        box = Box(_at(), (0.5, 0.5, 0.5))
        assert collides(_capsule_along_x(0.0, 0.0, radius=0.1, length=3.0), box)

    def test_box_box_axis_aligned(self):
        a = Box(_at(), (1.0, 1.0, 1.0))
        assert collides(a, Box(_at(1.9), (1.0, 1.0, 1.0)))
        assert not collides(a, Box(_at(2.0), (1.0, 1.0, 1.0)))
        assert not collides(a, Box(_at(2.1), (1.0, 1.0, 1.0)))
        assert penetration_depth(a, Box(_at(1.9), (1.0, 1.0, 1.0))) == pytest.approx(0.1)

    def test_box_box_rotated_separated_by_face_axis(self):
        a = Box(_at(), (1.0, 1.0, 1.0))
        # A 45 degree box reaches sqrt(2) along x from its center
        rotated = Pose.from_axis_angle((2.5, 0.0, 0.0), (0.0, 0.0, 1.0), math.pi / 4)
        assert not collides(a, Box(rotated, (1.0, 1.0, 1.0)))
        closer = Pose.from_axis_angle((2.3, 0.0, 0.0), (0.0, 0.0, 1.0), math.pi / 4)
        assert collides(a, Box(closer, (1.0, 1.0, 1.0)))

    def test_box_box_separated_only_by_edge_axis(self):
        a = Box(_at(), (0.5, 0.5, 0.5))
        # Two edges crossing at right angles; only an edge-edge axis separates them
        pose_b = Pose.from_point((1.0, 1.0, 0.0)) + Pose.from_axis_angle(
            (0.0, 0.0, 0.0), (0.0, 0.0, 1.0), math.pi / 4
        ) + Pose.from_axis_angle((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), math.pi / 4)
        b = Box(pose_b, (0.5, 0.5, 0.5))
        depth = penetration_depth(a, b)
        assert depth == pytest.approx(penetration_depth(b, a))
        assert collides(a, b) == (depth > CONTACT_TOLERANCE)


class TestTouching:
    def test_box_faces_touching(self):
        a = Box(_at(), (0.5, 0.5, 0.5))
        assert not collides(a, Box(_at(1.0), (0.5, 0.5, 0.5)))
        assert not collides(a, Box(_at(1.0, 0.3), (0.5, 0.5, 0.5)))
        assert collides(a, Box(_at(0.999), (0.5, 0.5, 0.5)))

    def test_parallel_capsules_tangent(self):
        a = _capsule_along_x(0.0, 0.0, radius=0.1, length=2.0)
        assert not collides(a, _capsule_along_x(0.5, 0.2, radius=0.1, length=2.0))
        assert collides(a, _capsule_along_x(0.5, 0.199, radius=0.1, length=2.0))

    def test_crossing_capsules_tangent(self):
        along_x = _capsule_along_x(0.0, 0.0, radius=0.1, length=2.0)
        along_y = Capsule(
            Pose.from_axis_angle((0.0, 0.0, 0.2), (1.0, 0.0, 0.0), math.pi / 2),
            radius=0.1,
            length=2.0,
        )
        assert not collides(along_x, along_y)
        assert not collides(along_y, along_x)


class TestSymmetry:
    def test_all_pairs_symmetric(self):
        rng = np.random.default_rng(11)
        shapes = []
        for _ in range(12):
            pose = Pose(rng.uniform(-1.0, 1.0, size=3), None) + Pose.from_axis_angle(
                (0.0, 0.0, 0.0), rng.normal(size=3), rng.uniform(0.0, math.pi)
            )
            kind = rng.integers(3)
            if kind == 0:
                shapes.append(Sphere(pose, rng.uniform(0.1, 0.5)))
            elif kind == 1:
                shapes.append(Capsule(pose, 0.1, rng.uniform(0.3, 1.5)))
            else:
                shapes.append(Box(pose, tuple(rng.uniform(0.1, 0.5, size=3))))

        for a in shapes:
            for b in shapes:
                assert collides(a, b) == collides(b, a)
                assert penetration_depth(a, b) == penetration_depth(b, a)


class TestCollidesAny:
    def test_first_collision_names_obstacle(self):
        obstacles = {
            "far": Sphere(_at(10.0), 1.0),
            "near": Sphere(_at(0.5), 1.0),
            "also_near": Sphere(_at(-0.5), 1.0),
        }
        probe = Sphere(_at(), 0.1)
        assert first_collision(probe, obstacles) == "near"
        assert collides_any(probe, obstacles)
        assert collides_any(probe, list(obstacles.values()))

    def test_free(self):
        obstacles = {"far": Sphere(_at(10.0), 1.0)}
        assert first_collision(Sphere(_at(), 0.1), obstacles) is None
        assert not collides_any(Sphere(_at(), 0.1), obstacles)
        assert not collides_any(Sphere(_at(), 0.1), {})
