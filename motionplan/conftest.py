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

import math
import threading

import pytest

from motionplan.geometry.primitives import Capsule, Sphere
from motionplan.kinematics.frame import make_planar_arm
from motionplan.spatialmath.pose import Pose
from motionplan.world.world_state import WorldState

_seen_threads = set()
_seen_threads_lock = threading.RLock()

_skip_for = ["heavy"]


@pytest.fixture(autouse=True)
def monitor_threads(request):
    # Skip monitoring for tests marked with specified markers
    if any(request.node.get_closest_marker(marker) for marker in _skip_for):
        yield
        return

    yield

    threads = [t for t in threading.enumerate() if t is not threading.main_thread()]

    if not threads:
        return

    with _seen_threads_lock:
        new_leaks = [t for t in threads if t.ident not in _seen_threads]
        for t in threads:
            _seen_threads.add(t.ident)

    if not new_leaks:
        return

    thread_names = [t.name for t in new_leaks]

    pytest.fail(
        f"Non-closed threads before or during this test. The thread names: {thread_names}. "
        "Please look at the first test that fails and fix that."
    )


@pytest.fixture
def planar_arm():
    """Two unit links, revolute about z, full-turn limits."""
    return make_planar_arm([1.0, 1.0])


@pytest.fixture
def empty_world():
    return WorldState()


@pytest.fixture
def sphere_world():
    """A ball on the diagonal, in the way of the straight [0,0] -> [1.57,0] sweep."""
    return WorldState.from_geometries(
        {"ball": Sphere(Pose.from_point((1.0, 1.0, 0.0)), radius=0.2)}
    )


@pytest.fixture
def walled_world():
    """Rails on both sides of the arm's initial pose.

    The arm starts stretched along +x between the rails. Neither joint can
    turn far before a link hits a rail, so the configuration-space region
    around [0, 0] is disconnected from the one around [pi, 0] (arm along -x).
    """
    along_x = (0.0, 1.0, 0.0)
    return WorldState.from_geometries(
        {
            "left_rail": Capsule(
                Pose.from_axis_angle((1.0, 0.3, 0.0), along_x, math.pi / 2), radius=0.1, length=2.6
            ),
            "right_rail": Capsule(
                Pose.from_axis_angle((1.0, -0.3, 0.0), along_x, math.pi / 2), radius=0.1, length=2.6
            ),
        }
    )
