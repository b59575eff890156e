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

"""Configuration-only constraints."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

import numpy as np

from motionplan.constraints.base import Constraint
from motionplan.spec.errors import InvalidConfigurationError
from motionplan.spec.types import ConstraintResult

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from motionplan.kinematics.frame import KinematicChain


class JointLimitConstraint(Constraint):
    """Configuration has the chain's length and lies inside its inclusive limits."""

    def __init__(self, chain: KinematicChain, name: str = "joint_limits") -> None:
        super().__init__(name)
        self._chain = chain

    def evaluate(self, configuration: NDArray[np.float64]) -> ConstraintResult:
        try:
            self._chain.validate(configuration)
        except InvalidConfigurationError as e:
            return self._failed(np.ravel(configuration), str(e))
        return self._passed()


class PredicateConstraint(Constraint):
    """Wrap a user predicate over a configuration.

    Example:
        elbow_up = PredicateConstraint("elbow_up", lambda q: q[1] >= 0.0)
    """

    def __init__(
        self,
        name: str,
        predicate: Callable[[NDArray[np.float64]], bool],
        message: str = "",
    ) -> None:
        super().__init__(name)
        self._predicate = predicate
        self._message = message or f"Predicate '{name}' not satisfied"

    def evaluate(self, configuration: NDArray[np.float64]) -> ConstraintResult:
        if self._predicate(np.asarray(configuration, dtype=np.float64)):
            return self._passed()
        return self._failed(configuration, self._message)
