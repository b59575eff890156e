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
Constraint System

Named predicates over configurations and segments. A ConstraintSet ANDs
its members and reports the first failure.

## Constraints

- CollisionConstraint: link geometries vs obstacles (and optionally each other)
- InteractionSpaceConstraint: link centers inside an interaction space
- JointLimitConstraint: configuration inside the chain's limits
- PredicateConstraint: any user predicate
"""

from motionplan.constraints.base import Constraint, ConstraintSet, segment_samples
from motionplan.constraints.collision import CollisionConstraint, InteractionSpaceConstraint
from motionplan.constraints.joint_limits import JointLimitConstraint, PredicateConstraint

__all__ = [
    "CollisionConstraint",
    "Constraint",
    "ConstraintSet",
    "InteractionSpaceConstraint",
    "JointLimitConstraint",
    "PredicateConstraint",
    "segment_samples",
]
