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

"""Pairwise collision tests between solid primitives.

Collision means strictly positive penetration: geometries whose surfaces
touch (penetration depth within CONTACT_TOLERANCE of zero) do not collide.

## Functions

- penetration_depth(): Signed overlap between two primitives
- collides(): Symmetric collision predicate
- collides_any() / first_collision(): Test one primitive against named obstacles

Pair tests:
- box-box: separating axis test over the 15 candidate axes
- sphere/capsule pairs: distance between core point/segment vs. radius sum
- sphere-box: closest point on the box
- capsule-box: minimum of the (convex) point-to-box distance along the capsule axis
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from itertools import product
from typing import TYPE_CHECKING

import numpy as np
from scipy.optimize import minimize_scalar

from motionplan.constants import CONTACT_TOLERANCE
from motionplan.geometry.distance import (
    point_box_depth,
    point_box_distance,
    point_segment_distance,
    segment_segment_distance,
)
from motionplan.geometry.primitives import Box, Capsule, Geometry, Sphere
from motionplan.spec.enums import GeometryType
from motionplan.spec.errors import InvalidGeometryError

if TYPE_CHECKING:
    from numpy.typing import NDArray

_TYPE_ORDER = {GeometryType.SPHERE: 0, GeometryType.CAPSULE: 1, GeometryType.BOX: 2}

# Cross-product axes shorter than this come from parallel edges and are skipped.
_PARALLEL_AXIS = 1e-9


def _dimensions(geometry: Geometry) -> tuple[float, ...]:
    if isinstance(geometry, Box):
        return geometry.half_extents
    if isinstance(geometry, Sphere):
        return (geometry.radius,)
    return (geometry.radius, geometry.length)


def _sort_key(geometry: Geometry) -> tuple[float, ...]:
    return (
        _TYPE_ORDER[geometry.geometry_type],
        *geometry.pose.translation.tolist(),
        *geometry.pose.quaternion().tolist(),
        *_dimensions(geometry),
    )


def bounding_radius(geometry: Geometry) -> float:
    """Radius of a sphere around the geometry's center enclosing it."""
    if isinstance(geometry, Box):
        return float(np.linalg.norm(geometry.half_extents))
    if isinstance(geometry, Sphere):
        return geometry.radius
    if isinstance(geometry, Capsule):
        return geometry.length / 2.0
    raise InvalidGeometryError(f"Unsupported geometry: {type(geometry).__name__}")


# ============= Pair Tests =============


def _sphere_sphere(a: Sphere, b: Sphere) -> float:
    return a.radius + b.radius - float(np.linalg.norm(b.pose.translation - a.pose.translation))


def _sphere_capsule(a: Sphere, b: Capsule) -> float:
    p, q = b.segment()
    return a.radius + b.radius - point_segment_distance(a.pose.translation, p, q)


def _capsule_capsule(a: Capsule, b: Capsule) -> float:
    p1, q1 = a.segment()
    p2, q2 = b.segment()
    return a.radius + b.radius - segment_segment_distance(p1, q1, p2, q2)


def _sphere_box(a: Sphere, b: Box) -> float:
    depth = point_box_depth(
        a.pose.translation, b.pose.translation, b.pose.rotation_matrix, np.asarray(b.half_extents)
    )
    return a.radius - depth


def _segment_box_distance(
    p: NDArray[np.float64], q: NDArray[np.float64], box: Box
) -> float:
    center = box.pose.translation
    rotation = box.pose.rotation_matrix
    half = np.asarray(box.half_extents)

    def distance_at(t: float) -> float:
        return point_box_distance(p + t * (q - p), center, rotation, half)

    best = min(distance_at(0.0), distance_at(1.0))
    if best == 0.0 or np.allclose(p, q):
        return best
    res = minimize_scalar(distance_at, bounds=(0.0, 1.0), method="bounded", options={"xatol": 1e-12})
    return min(best, float(res.fun))


def _capsule_box(a: Capsule, b: Box) -> float:
    p, q = a.segment()
    distance = _segment_box_distance(p, q, b)
    if distance > 0.0:
        return a.radius - distance
    # Core segment touches the box; report depth from the deepest end point.
    depth = min(
        point_box_depth(pt, b.pose.translation, b.pose.rotation_matrix, np.asarray(b.half_extents))
        for pt in (p, q)
    )
    return a.radius - min(depth, 0.0)


def _box_box(a: Box, b: Box) -> float:
    axes_a = a.pose.rotation_matrix.T
    axes_b = b.pose.rotation_matrix.T
    half_a = np.asarray(a.half_extents)
    half_b = np.asarray(b.half_extents)
    offset = b.pose.translation - a.pose.translation

    candidates = [*axes_a, *axes_b]
    for u, v in product(axes_a, axes_b):
        axis = np.cross(u, v)
        norm = float(np.linalg.norm(axis))
        if norm > _PARALLEL_AXIS:
            candidates.append(axis / norm)

    overlap = np.inf
    for axis in candidates:
        ra = float(np.sum(half_a * np.abs(axes_a @ axis)))
        rb = float(np.sum(half_b * np.abs(axes_b @ axis)))
        overlap = min(overlap, ra + rb - abs(float(np.dot(offset, axis))))
    return float(overlap)


def penetration_depth(a: Geometry, b: Geometry) -> float:
    """Signed overlap between two primitives.

    Positive values are penetration depths. Non-positive values mean the
    geometries are separated (or exactly touching); for pairs involving
    spheres and capsules their magnitude is the separation distance, for
    box-box it is the widest gap found along the separating axes.
    """
    if _sort_key(a) > _sort_key(b):
        a, b = b, a

    match (a, b):
        case (Sphere(), Sphere()):
            return _sphere_sphere(a, b)
        case (Sphere(), Capsule()):
            return _sphere_capsule(a, b)
        case (Sphere(), Box()):
            return _sphere_box(a, b)
        case (Capsule(), Capsule()):
            return _capsule_capsule(a, b)
        case (Capsule(), Box()):
            return _capsule_box(a, b)
        case (Box(), Box()):
            return _box_box(a, b)
    raise InvalidGeometryError(
        f"Unsupported geometry pair: {type(a).__name__}, {type(b).__name__}"
    )


def collides(a: Geometry, b: Geometry) -> bool:
    """Check whether two primitives strictly interpenetrate. Symmetric."""
    gap = float(np.linalg.norm(b.pose.translation - a.pose.translation))
    if gap > bounding_radius(a) + bounding_radius(b) + CONTACT_TOLERANCE:
        return False
    return penetration_depth(a, b) > CONTACT_TOLERANCE


def first_collision(geometry: Geometry, obstacles: Mapping[str, Geometry]) -> str | None:
    """Name of the first obstacle the geometry collides with, or None."""
    for name, obstacle in obstacles.items():
        if collides(geometry, obstacle):
            return name
    return None


def collides_any(
    geometry: Geometry, obstacles: Mapping[str, Geometry] | Iterable[Geometry]
) -> bool:
    """Check a primitive against many obstacles, stopping at the first hit."""
    values = obstacles.values() if isinstance(obstacles, Mapping) else obstacles
    return any(collides(geometry, obstacle) for obstacle in values)
