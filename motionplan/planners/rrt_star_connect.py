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

"""RRT*-Connect and RRT-Connect planners implementing PlannerSpec.

Two trees grow from the start and the goal. Each iteration extends the
active tree toward a sample, then greedily extends the other tree toward
the new node; the trees swap roles every iteration. With ``optimize`` on,
every new node picks the cheapest valid parent in its neighbourhood and
neighbours are rewired through it when that strictly lowers their cost.

The planner holds no per-call state: one instance can serve concurrent
calls from different threads.
"""

from __future__ import annotations

from collections.abc import Sequence
from concurrent.futures import Executor, ThreadPoolExecutor
from contextlib import nullcontext
from dataclasses import replace
import math
import time
from typing import TYPE_CHECKING

import numpy as np

from motionplan.kinematics.jacobian_ik import JacobianIK
from motionplan.planners.options import PlannerOptions, euclidean_distance
from motionplan.spec.enums import PlanningStatus
from motionplan.spec.errors import InvalidConfigurationError
from motionplan.spec.types import PlanningResult
from motionplan.utils.logging_config import setup_logger
from motionplan.utils.path_utils import (
    compute_path_length,
    concatenate_paths,
    interpolate_segment,
    simplify_path,
)

if TYPE_CHECKING:
    from threading import Event

    from numpy.typing import NDArray

    from motionplan.kinematics.frame import KinematicChain
    from motionplan.spatialmath.pose import Pose
    from motionplan.spec.protocols import KinematicsSpec
    from motionplan.spec.types import JointPath

logger = setup_logger()

_ROOT = -1
_MIN_EXTENSION = 1e-12


class _Tree:
    """Arena of nodes addressed by integer handles.

    Node 0 is the root; its parent handle is -1. Configurations are kept in
    a growable array so nearest-neighbour queries stay vectorised.
    """

    def __init__(self, root: NDArray[np.float64]) -> None:
        self._configs = np.empty((64, root.shape[0]), dtype=np.float64)
        self._configs[0] = root
        self._size = 1
        self.parents: list[int] = [_ROOT]
        self.children: list[list[int]] = [[]]
        self.costs: list[float] = [0.0]

    def __len__(self) -> int:
        return self._size

    @property
    def newest(self) -> int:
        return self._size - 1

    def config(self, node: int) -> NDArray[np.float64]:
        return self._configs[node]

    def add(self, config: NDArray[np.float64], parent: int, cost: float) -> int:
        if self._size == self._configs.shape[0]:
            grown = np.empty((2 * self._size, self._configs.shape[1]), dtype=np.float64)
            grown[: self._size] = self._configs[: self._size]
            self._configs = grown
        node = self._size
        self._configs[node] = config
        self._size += 1
        self.parents.append(parent)
        self.children.append([])
        self.costs.append(cost)
        self.children[parent].append(node)
        return node

    def distances(self, target: NDArray[np.float64], metric) -> NDArray[np.float64]:
        configs = self._configs[: self._size]
        if metric is euclidean_distance:
            return np.linalg.norm(configs - target, axis=1)
        return np.array([metric(q, target) for q in configs], dtype=np.float64)

    def nearest(self, target: NDArray[np.float64], metric) -> int:
        # argmin returns the first minimum, so ties go to the oldest node
        return int(np.argmin(self.distances(target, metric)))

    def near(self, target: NDArray[np.float64], radius: float, metric) -> list[int]:
        return np.flatnonzero(self.distances(target, metric) <= radius).tolist()

    def reparent(self, node: int, parent: int, cost: float) -> None:
        """Move ``node`` under ``parent`` and shift its subtree's costs."""
        self.children[self.parents[node]].remove(node)
        self.children[parent].append(node)
        self.parents[node] = parent

        delta = cost - self.costs[node]
        stack = [node]
        while stack:
            current = stack.pop()
            self.costs[current] += delta
            stack.extend(self.children[current])

    def path_to_root(self, node: int) -> JointPath:
        """Configurations from the root to ``node``."""
        path = []
        while node != _ROOT:
            path.append(self._configs[node].copy())
            node = self.parents[node]
        return list(reversed(path))


class _Cancelled(Exception):
    pass


class _Search:
    """State of one planning call."""

    def __init__(
        self,
        chain: KinematicChain,
        options: PlannerOptions,
        rng: np.random.Generator,
        executor: Executor | None,
        cancel_event: Event | None,
    ) -> None:
        self.chain = chain
        self.options = options
        self.constraints = options.constraints
        self.metric = options.distance_metric
        self.resolution = float(options.resolution)  # type: ignore[arg-type]
        self.rng = rng
        self.executor = executor
        self.cancel_event = cancel_event
        self.iterations = 0

    def check_cancelled(self) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise _Cancelled

    # ============= Constraint Checks =============

    def segment_valid(self, pair: tuple[NDArray[np.float64], NDArray[np.float64]]) -> bool:
        return self.constraints.evaluate_segment(pair[0], pair[1], self.resolution).passed

    def segments_valid(
        self, pairs: list[tuple[NDArray[np.float64], NDArray[np.float64]]]
    ) -> list[bool]:
        """Check segments, in parallel when a pool is available; results keep input order."""
        if self.executor is None or len(pairs) <= 1:
            return [self.segment_valid(pair) for pair in pairs]
        return list(self.executor.map(self.segment_valid, pairs))

    # ============= Tree Growth =============

    def neighbourhood_radius(self, tree: _Tree) -> float:
        n = len(tree) + 1
        shrinking = self.options.rewire_gamma * (math.log(n) / n) ** (1.0 / self.chain.dof)
        return min(float(self.options.rewire_radius), shrinking)  # type: ignore[arg-type]

    def extend(self, tree: _Tree, target: NDArray[np.float64]) -> int | None:
        """Grow ``tree`` one step toward ``target``; returns the new node or None."""
        nearest = tree.nearest(target, self.metric)
        q_near = tree.config(nearest)
        diff = target - q_near
        dist = float(np.linalg.norm(diff))

        if dist < _MIN_EXTENSION:
            return None
        if dist <= self.options.step_size:
            q_new = target.copy()
        else:
            q_new = q_near + diff * (self.options.step_size / dist)

        if not self.constraints.evaluate(q_new).passed:
            return None

        if not self.options.optimize:
            if not self.segment_valid((q_near, q_new)):
                return None
            return tree.add(q_new, nearest, tree.costs[nearest] + self.metric(q_near, q_new))

        neighbours = tree.near(q_new, self.neighbourhood_radius(tree), self.metric)
        if nearest not in neighbours:
            neighbours.append(nearest)

        chosen = self.choose_parent(tree, q_new, neighbours)
        if chosen is None:
            return None
        parent, cost = chosen
        node = tree.add(q_new, parent, cost)
        self.rewire(tree, node, neighbours)
        return node

    def choose_parent(
        self, tree: _Tree, q_new: NDArray[np.float64], neighbours: list[int]
    ) -> tuple[int, float] | None:
        candidates = sorted(
            ((tree.costs[n] + self.metric(tree.config(n), q_new), n) for n in neighbours),
        )
        if self.executor is None:
            for cost, node in candidates:
                if self.segment_valid((tree.config(node), q_new)):
                    return node, cost
            return None

        valid = self.segments_valid([(tree.config(node), q_new) for _, node in candidates])
        for (cost, node), ok in zip(candidates, valid, strict=True):
            if ok:
                return node, cost
        return None

    def rewire(self, tree: _Tree, node: int, neighbours: list[int]) -> None:
        q_new = tree.config(node)
        parent = tree.parents[node]
        improvable = [
            n
            for n in neighbours
            if n != parent
            and tree.costs[node] + self.metric(q_new, tree.config(n)) < tree.costs[n]
        ]
        if not improvable:
            return

        valid = self.segments_valid([(q_new, tree.config(n)) for n in improvable])
        for neighbour, ok in zip(improvable, valid, strict=True):
            if not ok:
                continue
            # Earlier reparents may already have lowered this neighbour's cost
            cost = tree.costs[node] + self.metric(q_new, tree.config(neighbour))
            if cost < tree.costs[neighbour]:
                tree.reparent(neighbour, node, cost)

    def connect(self, tree: _Tree, target: NDArray[np.float64]) -> int | None:
        """Extend ``tree`` toward ``target`` until it is reached or blocked."""
        while True:
            self.check_cancelled()
            nearest = tree.nearest(target, self.metric)
            gap = self.metric(tree.config(nearest), target)
            if gap <= self.options.goal_tolerance and (
                gap == 0.0 or self.segment_valid((tree.config(nearest), target))
            ):
                return nearest
            if self.extend(tree, target) is None:
                return None

    # ============= Solution =============

    def densify(self, path: JointPath) -> JointPath:
        """Insert waypoints so no step exceeds step_size, keeping every waypoint valid."""
        step = self.options.step_size
        dense: JointPath = [path[0]]
        for a, b in zip(path, path[1:]):
            self.check_cancelled()
            pieces = interpolate_segment(a, b, step)
            if len(pieces) > 2 and not self._pieces_valid(pieces):
                # Fall back to the exact samples the segment was validated at
                pieces = interpolate_segment(a, b, min(step, self.resolution))
            dense.extend(pieces[1:])
        return dense

    def _pieces_valid(self, pieces: JointPath) -> bool:
        if not all(self.constraints.evaluate(q).passed for q in pieces[1:-1]):
            return False
        return all(self.segments_valid(list(zip(pieces, pieces[1:]))))

    def run(
        self, q_start: NDArray[np.float64], q_goal: NDArray[np.float64], start_time: float
    ) -> tuple[PlanningStatus, JointPath, str]:
        """Run the search; returns (status, path, message)."""
        options = self.options
        trees = (_Tree(q_start), _Tree(q_goal))
        active = 0

        for iteration in range(options.max_iterations):
            self.iterations = iteration
            self.check_cancelled()
            if options.timeout is not None and time.time() - start_time > options.timeout:
                return PlanningStatus.NO_PATH_FOUND, [], f"Timeout after {iteration} iterations"

            tree, other = trees[active], trees[1 - active]
            if self.rng.random() < options.connect_bias:
                sample = other.config(other.newest).copy()
            else:
                sample = self.chain.random_configuration(self.rng)

            node = self.extend(tree, sample)
            if node is not None:
                reached = self.connect(other, tree.config(node))
                if reached is not None:
                    start_node, goal_node = (node, reached) if active == 0 else (reached, node)
                    path = concatenate_paths(
                        trees[0].path_to_root(start_node),
                        list(reversed(trees[1].path_to_root(goal_node))),
                    )
                    logger.debug(
                        "Trees connected",
                        iteration=iteration + 1,
                        start_nodes=len(trees[0]),
                        goal_nodes=len(trees[1]),
                        waypoints=len(path),
                    )
                    self.iterations = iteration + 1
                    return PlanningStatus.SUCCESS, path, "Path found"

            active = 1 - active

        self.iterations = options.max_iterations
        return (
            PlanningStatus.NO_PATH_FOUND,
            [],
            f"No path found after {options.max_iterations} iterations",
        )

    def finish(self, path: JointPath) -> JointPath:
        """Smooth (optionally) and re-interpolate an extracted path."""
        if self.options.smooth and len(path) > 2:
            path = simplify_path(
                path,
                self.constraints,
                self.resolution,
                max_iterations=self.options.smoothing_iterations,
                rng=self.rng,
                cancel_event=self.cancel_event,
            )
            self.check_cancelled()
        return self.densify(path)


class RRTStarConnectPlanner:
    """Bi-directional RRT-Connect planner with RRT* rewiring.

    Example:
        planner = RRTStarConnectPlanner(chain)
        options = PlannerOptions(constraints=constraints, seed=0)
        result = planner.plan([0.0, 0.0], [1.57, 0.0], options)
        if result.is_success():
            arm.go_to_waypoints(result.path)
    """

    def __init__(self, chain: KinematicChain, ik_solver: KinematicsSpec | None = None) -> None:
        self._chain = chain
        self._ik_solver = ik_solver if ik_solver is not None else JacobianIK()

    @property
    def chain(self) -> KinematicChain:
        return self._chain

    def get_name(self) -> str:
        """Get planner name."""
        return "RRTStarConnect"

    def plan(
        self,
        start: Sequence[float],
        goal: Sequence[float],
        options: PlannerOptions | None = None,
        cancel_event: Event | None = None,
    ) -> PlanningResult:
        """Plan a constraint-satisfying path between two configurations.

        Failures are reported through the result status; see
        PlanningResult.raise_for_status() for the exception form.
        """
        options = options if options is not None else PlannerOptions()
        start_time = time.time()

        try:
            q_start = self._chain.validate(start)
            q_goal = self._chain.validate(goal)
            error = self._check_endpoints(q_start, q_goal, options)
        except InvalidConfigurationError as e:
            return _invalid_configuration_result(e, time.time() - start_time)
        if error is not None:
            return error

        if options.distance_metric(q_start, q_goal) <= options.goal_tolerance:
            return _create_success_result([q_start.copy()], time.time() - start_time, 0)

        rng = options.make_rng()
        pool = (
            ThreadPoolExecutor(max_workers=options.num_workers, thread_name_prefix="motionplan")
            if options.num_workers > 1
            else nullcontext()
        )
        with pool as executor:
            search = _Search(self._chain, options, rng, executor, cancel_event)
            try:
                status, path, message = search.run(q_start, q_goal, start_time)
                if status == PlanningStatus.SUCCESS:
                    path = search.finish(path)
            except _Cancelled:
                status, path = PlanningStatus.CANCELLED, []
                message = f"Cancelled after {search.iterations} iterations"
            except InvalidConfigurationError as e:
                return _invalid_configuration_result(
                    e, time.time() - start_time, search.iterations
                )
            iterations = search.iterations

        planning_time = time.time() - start_time
        if status != PlanningStatus.SUCCESS:
            logger.info(
                "Planning failed",
                planner=self.get_name(),
                status=status.name,
                iterations=iterations,
                message=message,
            )
            return _create_failure_result(status, message, planning_time, iterations)

        logger.info(
            "Planning succeeded",
            planner=self.get_name(),
            iterations=iterations,
            waypoints=len(path),
            planning_time=round(planning_time, 4),
        )
        return _create_success_result(path, planning_time, iterations)

    def plan_to_pose(
        self,
        start: Sequence[float],
        goal_pose: Pose,
        options: PlannerOptions | None = None,
        cancel_event: Event | None = None,
    ) -> PlanningResult:
        """Resolve a goal pose through IK, then plan to it.

        IK starts from the start configuration and retries from up to
        ``options.ik_attempts`` alternate seeds. Solutions that violate the
        options' constraints are rejected.
        """
        options = options if options is not None else PlannerOptions()
        start_time = time.time()

        try:
            q_start = self._chain.validate(start)
            ik_result = self._ik_solver.solve(
                self._chain,
                goal_pose,
                seed=q_start,
                constraints=options.constraints,
                max_attempts=options.ik_attempts + 1,
                rng=options.make_rng(),
            )
        except InvalidConfigurationError as e:
            return _invalid_configuration_result(e, time.time() - start_time)

        if not ik_result.is_success() or ik_result.configuration is None:
            logger.info("Goal pose unreachable", message=ik_result.message)
            return _create_failure_result(
                PlanningStatus.NO_IK_SOLUTION,
                f"No IK solution for goal pose: {ik_result.message}",
                time.time() - start_time,
            )

        result = self.plan(q_start, ik_result.configuration, options, cancel_event)
        result.planning_time = time.time() - start_time
        return result

    def _check_endpoints(
        self,
        q_start: NDArray[np.float64],
        q_goal: NDArray[np.float64],
        options: PlannerOptions,
    ) -> PlanningResult | None:
        """Evaluate both endpoints against the constraints, returns error result or None."""
        for label, q in (("Start", q_start), ("Goal", q_goal)):
            check = options.constraints.evaluate(q)
            if not check.passed:
                return _create_failure_result(
                    PlanningStatus.INFEASIBLE_ENDPOINT,
                    f"{label} configuration violates '{check.constraint_name}': {check.message}",
                    failed_constraint=check.constraint_name,
                    failed_configuration=q,
                )
        return None


class RRTConnectPlanner(RRTStarConnectPlanner):
    """Bi-directional RRT-Connect without rewiring."""

    def get_name(self) -> str:
        """Get planner name."""
        return "RRTConnect"

    def plan(
        self,
        start: Sequence[float],
        goal: Sequence[float],
        options: PlannerOptions | None = None,
        cancel_event: Event | None = None,
    ) -> PlanningResult:
        options = options if options is not None else PlannerOptions()
        return super().plan(start, goal, replace(options, optimize=False), cancel_event)


# ============= Result Helpers =============


def _create_success_result(
    path: JointPath,
    planning_time: float,
    iterations: int,
) -> PlanningResult:
    """Create a successful planning result."""
    return PlanningResult(
        status=PlanningStatus.SUCCESS,
        path=path,
        planning_time=planning_time,
        path_length=compute_path_length(path),
        iterations=iterations,
        message="Path found",
    )


def _create_failure_result(
    status: PlanningStatus,
    message: str,
    planning_time: float = 0.0,
    iterations: int = 0,
    failed_constraint: str | None = None,
    failed_configuration: Sequence[float] | NDArray[np.float64] | None = None,
) -> PlanningResult:
    """Create a failed planning result."""
    return PlanningResult(
        status=status,
        path=[],
        planning_time=planning_time,
        iterations=iterations,
        message=message,
        failed_constraint=failed_constraint,
        failed_configuration=(
            np.array(failed_configuration, dtype=np.float64)
            if failed_configuration is not None
            else None
        ),
    )


def _invalid_configuration_result(
    error: InvalidConfigurationError,
    planning_time: float = 0.0,
    iterations: int = 0,
) -> PlanningResult:
    """Failure result for a malformed configuration, chain or constraint setup."""
    logger.info("Invalid planning input", message=str(error), constraint=error.constraint_name)
    return _create_failure_result(
        PlanningStatus.INVALID_CONFIGURATION,
        str(error),
        planning_time,
        iterations,
        failed_constraint=error.constraint_name,
        failed_configuration=error.configuration,
    )
