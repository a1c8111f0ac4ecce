"""
Action Executors: Perform a single navigation attempt.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Optional, Tuple

from ..config import DEFAULT_CRASH_RATE
from ..graph.models import Node, Action
from ..graph.navigation_graph import NavigationGraph
from .models import ActionOutcome, Success, Invalid, Crashed, NavigationFailure, ErrorKind
from .random_source import RandomSource, derive_seed


NO_ROUTE = "no declared route"

# Sub-stream of a walk seed reserved for executor randomness
_EXECUTOR_STREAM = 0x5EED


class NavigationError(Exception):
    """Raised by navigation delegates to report a categorized failure."""

    def __init__(self, kind: ErrorKind, message: str = ""):
        super().__init__(message or kind.value)
        self.kind = kind
        self.message = message

    def to_failure(self) -> NavigationFailure:
        return NavigationFailure(kind=self.kind, message=self.message)


class ActionExecutor(ABC):
    """Base class for all action executors."""

    @abstractmethod
    async def perform(self, node: Node, action: Action) -> ActionOutcome:
        """Attempt `action` from `node`. Returns Success, Invalid or Crashed."""

    def fork(self, seed: int) -> "ActionExecutor":
        """
        Executor scoped to a single walk.

        Executors that draw random numbers return a copy with an isolated
        stream derived from `seed`; stateless executors return themselves.
        """
        return self


class SimulatedExecutor(ActionExecutor):
    """
    Simulates navigation against the declared graph.

    Looks up the declared destination, waits a random latency, and crashes
    with probability `crash_rate` to model a flaky system under test.
    """

    def __init__(
        self,
        graph: NavigationGraph,
        seed: int = 0,
        crash_rate: float = DEFAULT_CRASH_RATE,
        latency: Tuple[float, float] = (1e-5, 1e-4),
    ):
        self.graph = graph
        self.seed = seed
        self.crash_rate = crash_rate
        self.latency = latency
        self.rng = RandomSource(derive_seed(seed, _EXECUTOR_STREAM))

    async def perform(self, node: Node, action: Action) -> ActionOutcome:
        next_node = self.graph.destination(node, action)
        if next_node is None:
            return Invalid(NO_ROUTE)

        low, high = self.latency
        await asyncio.sleep(self.rng.uniform(low, high) if high > 0 else 0)

        if self.rng.coin(self.crash_rate):
            return Crashed(NavigationFailure(ErrorKind.OTHER, "random crash"))

        return Success(next_node)

    def fork(self, seed: int) -> "SimulatedExecutor":
        return SimulatedExecutor(self.graph, seed, self.crash_rate, self.latency)


NavigateFn = Callable[[Node, Action], Awaitable[Optional[Node]]]


class DelegatingExecutor(ActionExecutor):
    """
    Hands navigation to the real navigation layer.

    `navigate` returns the node it landed on, or None when the action is not
    available. It reports failures by raising NavigationError; any other
    exception counts as an uncategorized crash.
    """

    def __init__(self, navigate: NavigateFn):
        self.navigate = navigate

    async def perform(self, node: Node, action: Action) -> ActionOutcome:
        try:
            next_node = await self.navigate(node, action)
        except NavigationError as e:
            return Crashed(e.to_failure())
        except Exception as e:
            return Crashed(NavigationFailure(ErrorKind.OTHER, f"{type(e).__name__}: {e}"))

        if next_node is None:
            return Invalid(NO_ROUTE)
        return Success(next_node)
