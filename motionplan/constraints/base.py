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

"""Constraint base class and the ConstraintSet that ANDs constraints.

A constraint is a named predicate over a configuration. Segments are
checked by sampling: consecutive samples are at most ``resolution``
apart and both endpoints are included. Constraints hold no mutable state
and may be evaluated from several threads at once.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator, Sequence
from typing import TYPE_CHECKING

import numpy as np

from motionplan.spec.errors import InvalidConfigurationError
from motionplan.spec.types import ConstraintResult
from motionplan.utils.logging_config import setup_logger
from motionplan.utils.path_utils import interpolate_segment

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from motionplan.spec.protocols import ConstraintSpec

logger = setup_logger()


def segment_samples(
    start: Sequence[float] | NDArray[np.float64],
    end: Sequence[float] | NDArray[np.float64],
    resolution: float,
) -> list[NDArray[np.float64]]:
    """Samples along a straight segment, endpoints included.

    Raises:
        InvalidConfigurationError: Non-positive resolution or mismatched lengths
    """
    if not resolution > 0.0:
        raise InvalidConfigurationError(f"Resolution must be positive, got {resolution}")
    a = np.asarray(start, dtype=np.float64)
    b = np.asarray(end, dtype=np.float64)
    if a.shape != b.shape:
        raise InvalidConfigurationError(
            f"Segment endpoints differ in shape: {a.shape} vs {b.shape}"
        )
    return interpolate_segment(a, b, resolution)


class Constraint(ABC):
    """Base class for constraints checked sample by sample."""

    def __init__(self, name: str) -> None:
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    @abstractmethod
    def evaluate(self, configuration: NDArray[np.float64]) -> ConstraintResult:
        """Check one configuration."""

    def evaluate_segment(
        self,
        start: NDArray[np.float64],
        end: NDArray[np.float64],
        resolution: float,
    ) -> ConstraintResult:
        """Check every sample of a segment; the first failing sample fails it."""
        for q in segment_samples(start, end, resolution):
            result = self.evaluate(q)
            if not result.passed:
                return result
        return self._passed()

    def _passed(self) -> ConstraintResult:
        return ConstraintResult(passed=True, constraint_name=self._name)

    def _failed(
        self, configuration: Sequence[float] | NDArray[np.float64], message: str
    ) -> ConstraintResult:
        return ConstraintResult(
            passed=False,
            constraint_name=self._name,
            configuration=np.array(configuration, dtype=np.float64),
            message=message,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r})"


class ConstraintSet:
    """Named collection of constraints, all of which must pass.

    Evaluation order is insertion order; the first failure is reported.

    Example:
        constraints = ConstraintSet()
        constraints.add(CollisionConstraint(chain, world_state))
        result = constraints.evaluate_segment(q_a, q_b, resolution=0.025)
        if not result:
            print(result.constraint_name, result.configuration)
    """

    def __init__(self, constraints: Iterable[ConstraintSpec] = ()) -> None:
        self._constraints: dict[str, ConstraintSpec] = {}
        for constraint in constraints:
            self.add(constraint)

    def add(self, constraint: ConstraintSpec, name: str | None = None) -> None:
        """Add a constraint under ``name`` (default: its own name), replacing any existing one."""
        key = name if name is not None else constraint.name
        if key in self._constraints:
            logger.debug("Replacing constraint", name=key)
        self._constraints[key] = constraint

    def remove(self, name: str) -> ConstraintSpec | None:
        return self._constraints.pop(name, None)

    def get(self, name: str) -> ConstraintSpec | None:
        return self._constraints.get(name)

    @property
    def names(self) -> list[str]:
        return list(self._constraints)

    def evaluate(self, configuration: Sequence[float] | NDArray[np.float64]) -> ConstraintResult:
        """Check one configuration against every constraint."""
        q = np.asarray(configuration, dtype=np.float64)
        for name, constraint in self._constraints.items():
            result = constraint.evaluate(q)
            if not result.passed:
                return ConstraintResult(
                    passed=False,
                    constraint_name=name,
                    configuration=q.copy(),
                    message=result.message,
                )
        return ConstraintResult(passed=True)

    def evaluate_segment(
        self,
        start: Sequence[float] | NDArray[np.float64],
        end: Sequence[float] | NDArray[np.float64],
        resolution: float,
    ) -> ConstraintResult:
        """Check every sample of a segment against every constraint.

        Samples are visited from ``start`` to ``end`` so the reported
        configuration is the first failing one along the segment.
        """
        for q in segment_samples(start, end, resolution):
            result = self.evaluate(q)
            if not result.passed:
                return result
        return ConstraintResult(passed=True)

    def __len__(self) -> int:
        return len(self._constraints)

    def __iter__(self) -> Iterator[ConstraintSpec]:
        return iter(self._constraints.values())

    def __contains__(self, name: object) -> bool:
        return name in self._constraints

    def __repr__(self) -> str:
        return f"ConstraintSet({self.names})"
