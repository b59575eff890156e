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
Path Utilities

Standalone utility functions for path manipulation and post-processing.
These functions are stateless and can be used by any planner implementation.
Paths are lists of configurations (1-D float arrays).

## Functions

- interpolate_segment(): Interpolate between two configurations
- interpolate_path(): Interpolate path so no step exceeds a distance
- simplify_path(): Random shortcutting against a ConstraintSet
- compute_path_length(): Compute total path length in joint space
- is_path_within_limits(): Check every waypoint against joint limits
- concatenate_paths(): Join paths, dropping duplicate junction waypoints
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from threading import Event

    from numpy.typing import NDArray

    from motionplan.constraints.base import ConstraintSet
    from motionplan.spec.types import JointPath


def interpolate_segment(
    start: Sequence[float] | NDArray[np.float64],
    end: Sequence[float] | NDArray[np.float64],
    step_size: float,
) -> JointPath:
    """Interpolate between two configurations.

    Returns a list of configurations from start to end (inclusive)
    with at most `step_size` Euclidean distance between consecutive points.

    Args:
        start: Start joint configuration
        end: End joint configuration
        step_size: Maximum step size (must be positive)

    Returns:
        List of interpolated configurations [start, ..., end]

    Example:
        # Check collision along a segment
        for q in interpolate_segment(q_a, q_b, step_size=0.02):
            if not constraints.evaluate(q):
                return False
    """
    if step_size <= 0.0:
        raise ValueError(f"step_size must be positive, got {step_size}")

    q_start = np.asarray(start, dtype=np.float64)
    q_end = np.asarray(end, dtype=np.float64)

    diff = q_end - q_start
    distance = float(np.linalg.norm(diff))

    if distance <= step_size:
        return [q_start.copy(), q_end.copy()]

    num_steps = int(np.ceil(distance / step_size))
    return [q_start + (i / num_steps) * diff for i in range(num_steps)] + [q_end.copy()]


def interpolate_path(
    path: JointPath,
    step_size: float,
) -> JointPath:
    """Interpolate path so consecutive waypoints are at most `step_size` apart.

    Existing waypoints are kept; intermediate ones are inserted along the
    straight segments between them.

    Example:
        dense = interpolate_path(result.path, step_size=0.02)
    """
    if len(path) <= 1:
        return [np.asarray(q, dtype=np.float64).copy() for q in path]

    interpolated: JointPath = [np.asarray(path[0], dtype=np.float64).copy()]
    for i in range(len(path) - 1):
        interpolated.extend(interpolate_segment(path[i], path[i + 1], step_size)[1:])
    return interpolated


def simplify_path(
    path: JointPath,
    constraints: ConstraintSet,
    resolution: float,
    max_iterations: int = 100,
    rng: np.random.Generator | None = None,
    cancel_event: Event | None = None,
) -> JointPath:
    """Simplify path by removing unnecessary waypoints.

    Uses random shortcutting: randomly select two points and check if
    the direct connection satisfies every constraint. If so, remove
    intermediate waypoints.

    Args:
        path: Original path
        constraints: Constraints a shortcut segment must satisfy
        resolution: Sampling resolution along shortcut segments
        max_iterations: Maximum shortcutting attempts
        rng: Random generator (seed it for reproducible output)
        cancel_event: Stops shortcutting early when set

    Returns:
        Simplified path with the same endpoints
    """
    if len(path) <= 2:
        return list(path)

    rng = rng if rng is not None else np.random.default_rng()
    simplified = list(path)

    for _ in range(max_iterations):
        if len(simplified) <= 2:
            break
        if cancel_event is not None and cancel_event.is_set():
            break

        # Pick two random indices (at least 2 apart)
        i = int(rng.integers(0, len(simplified) - 2))
        j = int(rng.integers(i + 2, len(simplified)))

        if constraints.evaluate_segment(simplified[i], simplified[j], resolution).passed:
            simplified = simplified[: i + 1] + simplified[j:]

    return simplified


def compute_path_length(path: JointPath) -> float:
    """Compute total path length in joint space.

    Sums the Euclidean distances between consecutive waypoints.
    """
    if len(path) <= 1:
        return 0.0

    q = np.asarray(path, dtype=np.float64)
    return float(np.sum(np.linalg.norm(np.diff(q, axis=0), axis=1)))


def is_path_within_limits(
    path: JointPath,
    lower_limits: NDArray[np.float64],
    upper_limits: NDArray[np.float64],
) -> bool:
    """Check if all waypoints in path are within joint limits (inclusive)."""
    for q in path:
        q = np.asarray(q, dtype=np.float64)
        if np.any(q < lower_limits) or np.any(q > upper_limits):
            return False
    return True


def concatenate_paths(
    *paths: JointPath,
    remove_duplicates: bool = True,
) -> JointPath:
    """Concatenate multiple paths into one.

    Args:
        *paths: Paths to concatenate
        remove_duplicates: If True, remove duplicate waypoints at junctions

    Returns:
        Single concatenated path
    """
    result: JointPath = []

    for path in paths:
        if not path:
            continue

        if remove_duplicates and result and np.allclose(result[-1], path[0], atol=1e-9, rtol=0):
            result.extend(path[1:])
        else:
            result.extend(path)

    return result
