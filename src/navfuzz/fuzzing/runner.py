"""
Fuzz Runner: Drives randomized walks over a navigation graph.
"""

import asyncio
import time
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, List, Optional

import structlog

from ..config import FuzzingConfig
from ..graph.navigation_graph import NavigationGraph
from .coverage import CoverageTracker
from .executor import ActionExecutor, SimulatedExecutor
from .models import (
    Crashed,
    CrashReport,
    ErrorKind,
    FuzzingReport,
    Invalid,
    InvalidRoute,
    NavigationFailure,
    Severity,
    Success,
    WalkResult,
)
from .random_source import RandomSource, derive_seed, generate_seed

logger = structlog.get_logger()

INVALID_TRANSITION = "invalid state transition"

_SEVERITY_BY_KIND = {
    ErrorKind.FATAL: Severity.CRITICAL,
    ErrorKind.RECOVERABLE: Severity.MEDIUM,
    ErrorKind.OTHER: Severity.LOW,
}


def classify_crash(error: NavigationFailure) -> Severity:
    """
    Map a failure category to a severity.

    fatal -> critical, recoverable -> medium, anything else -> low.
    HIGH is never produced here; pass a custom classifier to use it.
    """
    return _SEVERITY_BY_KIND.get(error.kind, Severity.LOW)


Classifier = Callable[[NavigationFailure], Severity]
ProgressCallback = Callable[[int, int], None]


class NavigationFuzzer:
    """
    Runs randomized walks over a navigation graph.

    Each walk starts at the root and picks random actions until it hits
    `max_depth`, a dead end, or a crash. The session stops early on the
    first critical crash and always returns a complete report.
    """

    def __init__(
        self,
        graph: NavigationGraph,
        executor: Optional[ActionExecutor] = None,
        config: Optional[FuzzingConfig] = None,
        classifier: Classifier = classify_crash,
    ):
        """
        Initialize the fuzzer.

        Args:
            graph: Navigation graph, read-only for the whole session
            executor: Performs actions; defaults to a SimulatedExecutor
            config: Session configuration
            classifier: Maps crash payloads to severities
        """
        self.graph = graph
        self.config = config or FuzzingConfig()
        self.classifier = classifier
        self.executor = executor or SimulatedExecutor(
            graph,
            crash_rate=self.config.crash_rate,
            latency=(self.config.min_latency, self.config.max_latency),
        )

    async def run(self, progress_callback: Optional[ProgressCallback] = None) -> FuzzingReport:
        """
        Run a fuzzing session.

        Args:
            progress_callback: Optional callback(completed_walks, max_iterations)

        Returns:
            FuzzingReport over every walk that ran
        """
        config = self.config
        seed = config.seed if config.seed is not None else generate_seed()
        session_rng = RandomSource(seed)

        log = logger.bind(seed=seed)
        log.info(
            "fuzz_session_started",
            max_depth=config.max_depth,
            max_iterations=config.max_iterations,
            parallel_walks=config.parallel_walks,
            nodes=len(self.graph.all_nodes),
        )

        start_time = time.perf_counter()
        results: List[WalkResult] = []
        coverage_tracker = CoverageTracker(self.graph)
        aborted = False

        iteration = 0
        while iteration < config.max_iterations and not aborted:
            batch_end = min(iteration + config.parallel_walks, config.max_iterations)
            if batch_end - iteration == 1:
                batch = [await self._run_walk(iteration, session_rng)]
            else:
                batch = await asyncio.gather(*(
                    self._run_walk(i, session_rng) for i in range(iteration, batch_end)
                ))

            # Merge in iteration order; walks after a critical crash are dropped
            for result in batch:
                results.append(result)
                coverage_tracker.record_walk(result)
                if progress_callback:
                    progress_callback(len(results), config.max_iterations)

                if result.crash and result.crash.severity == Severity.CRITICAL:
                    aborted = True
                    log.warning(
                        "fuzz_session_aborted",
                        iteration=result.iteration,
                        action=str(result.crash.action),
                        error=str(result.crash.error),
                    )
                    break

            iteration = batch_end

        duration = time.perf_counter() - start_time
        report = self._build_report(results, seed, duration, aborted, coverage_tracker)

        log.info(
            "fuzz_session_completed",
            iterations=report.iterations,
            crashes=len(report.crashes),
            invalid_routes=len(report.invalid_routes),
            coverage=round(report.coverage.percentage_covered, 4),
            duration=round(duration, 3),
        )
        return report

    async def _run_walk(self, iteration: int, session_rng: RandomSource) -> WalkResult:
        """Execute a single random walk from the root."""
        walk_seed = derive_seed(session_rng.seed, iteration)
        rng = session_rng.fork(iteration)
        executor = self.executor.fork(walk_seed)

        graph = self.graph
        current = graph.root
        path = [current]
        invalid_routes: List[InvalidRoute] = []
        crash: Optional[CrashReport] = None
        steps = 0

        for _ in range(self.config.max_depth):
            actions = graph.available_actions(current)
            if not actions:
                break  # Dead end

            action = rng.choice(actions)
            steps += 1

            try:
                outcome = await executor.perform(current, action)
            except Exception as e:
                outcome = Crashed(NavigationFailure(ErrorKind.OTHER, f"{type(e).__name__}: {e}"))

            if isinstance(outcome, Success):
                next_node = outcome.node
                if not graph.is_valid_transition(current, next_node, action):
                    invalid_routes.append(InvalidRoute(current, action, INVALID_TRANSITION))
                path.append(next_node)
                current = next_node

            elif isinstance(outcome, Invalid):
                invalid_routes.append(InvalidRoute(current, action, outcome.reason))

            else:
                severity = self.classifier(outcome.error)
                crash = CrashReport(
                    iteration=iteration,
                    path=tuple(path),
                    action=action,
                    error=outcome.error,
                    severity=severity,
                )
                logger.info(
                    "walk_crashed",
                    iteration=iteration,
                    severity=severity.value,
                    action=str(action),
                    node=current.id,
                )
                break

            # Random backtrack toward earlier branch points
            if rng.coin(self.config.backtrack_rate) and len(path) > 1:
                path.pop()
                current = path[-1] if path else graph.root

        return WalkResult(
            iteration=iteration,
            path=tuple(path),
            invalid_routes=tuple(invalid_routes),
            crash=crash,
            steps=steps,
            seed=walk_seed,
        )

    def _build_report(
        self,
        results: List[WalkResult],
        seed: int,
        duration: float,
        aborted: bool,
        coverage_tracker: CoverageTracker,
    ) -> FuzzingReport:
        """Build the final fuzzing report."""
        crashes = tuple(r.crash for r in results if r.crash)
        invalid_routes = tuple(route for r in results for route in r.invalid_routes)

        return FuzzingReport(
            timestamp=datetime.now(timezone.utc),
            duration=duration,
            iterations=len(results),
            seed=seed,
            results=tuple(results),
            crashes=crashes,
            invalid_routes=invalid_routes,
            coverage=coverage_tracker.generate_report(),
            aborted=aborted,
            config=replace(self.config, seed=seed),
        )


async def fuzz(graph: NavigationGraph, executor: Optional[ActionExecutor] = None, **config) -> FuzzingReport:
    """Convenience wrapper: run one session with keyword configuration."""
    fuzzer = NavigationFuzzer(graph, executor=executor, config=FuzzingConfig(**config))
    return await fuzzer.run()
