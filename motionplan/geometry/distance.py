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

"""Closest-point queries between points, segments and boxes."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from numpy.typing import NDArray

# Squared lengths below this are treated as degenerate segments.
_DEGENERATE = 1e-18


def closest_point_on_segment(
    p: NDArray[np.float64], a: NDArray[np.float64], b: NDArray[np.float64]
) -> NDArray[np.float64]:
    ab = b - a
    denom = float(np.dot(ab, ab))
    if denom < _DEGENERATE:
        return a
    t = float(np.clip(np.dot(p - a, ab) / denom, 0.0, 1.0))
    return a + t * ab


def point_segment_distance(
    p: NDArray[np.float64], a: NDArray[np.float64], b: NDArray[np.float64]
) -> float:
    return float(np.linalg.norm(p - closest_point_on_segment(p, a, b)))


def segment_segment_distance(
    p1: NDArray[np.float64],
    q1: NDArray[np.float64],
    p2: NDArray[np.float64],
    q2: NDArray[np.float64],
) -> float:
    """Shortest distance between segments p1-q1 and p2-q2.

    Closest points are found by clamping the parameters of the infinite-line
    solution to [0, 1], recomputing the other parameter after each clamp.
    """
    d1 = q1 - p1
    d2 = q2 - p2
    r = p1 - p2
    a = float(np.dot(d1, d1))
    e = float(np.dot(d2, d2))
    f = float(np.dot(d2, r))

    if a < _DEGENERATE and e < _DEGENERATE:
        return float(np.linalg.norm(p1 - p2))
    if a < _DEGENERATE:
        s = 0.0
        t = float(np.clip(f / e, 0.0, 1.0))
    else:
        c = float(np.dot(d1, r))
        if e < _DEGENERATE:
            t = 0.0
            s = float(np.clip(-c / a, 0.0, 1.0))
        else:
            b = float(np.dot(d1, d2))
            denom = a * e - b * b
            # Parallel segments: any s works, pick 0
            s = float(np.clip((b * f - c * e) / denom, 0.0, 1.0)) if denom > _DEGENERATE else 0.0
            t = (b * s + f) / e
            if t < 0.0:
                t = 0.0
                s = float(np.clip(-c / a, 0.0, 1.0))
            elif t > 1.0:
                t = 1.0
                s = float(np.clip((b - c) / a, 0.0, 1.0))

    c1 = p1 + d1 * s
    c2 = p2 + d2 * t
    return float(np.linalg.norm(c1 - c2))


def point_box_distance(
    p: NDArray[np.float64],
    center: NDArray[np.float64],
    rotation_matrix: NDArray[np.float64],
    half_extents: NDArray[np.float64],
) -> float:
    """Distance from a point to a solid oriented box (0 when inside)."""
    local = rotation_matrix.T @ (p - center)
    excess = np.maximum(np.abs(local) - half_extents, 0.0)
    return float(np.linalg.norm(excess))


def point_box_depth(
    p: NDArray[np.float64],
    center: NDArray[np.float64],
    rotation_matrix: NDArray[np.float64],
    half_extents: NDArray[np.float64],
) -> float:
    """Signed distance from a point to a box surface (negative inside)."""
    local = rotation_matrix.T @ (p - center)
    q = np.abs(local) - half_extents
    outside = float(np.linalg.norm(np.maximum(q, 0.0)))
    inside = float(min(np.max(q), 0.0))
    return outside + inside
