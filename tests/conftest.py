from __future__ import annotations

import logging

import pytest
import structlog

from navfuzz.config import FuzzingConfig
from navfuzz.fuzzing import ActionExecutor, Crashed, Invalid, NavigationFailure, Success
from navfuzz.graph import Action, NavigationGraph, Route, build_graph


# ─── Graphs ───────────────────────────────────────────────────────────────────


@pytest.fixture
def linear_graph() -> NavigationGraph:
    """root -> A -> B, where B is a dead end."""
    return build_graph([
        Route("root", "A", Action.tap("go")),
        Route("A", "B", Action.tap("next")),
    ])


@pytest.fixture
def app_graph() -> NavigationGraph:
    """A small app: login, home with tabs, and back navigation."""
    return build_graph([
        Route("root", "home", Action.tap("Home")),
        Route("root", "login", Action.tap("Login")),
        Route("login", "home", Action.tap("Submit")),
        Route("home", "profile", Action.tap("Profile")),
        Route("home", "settings", Action.tap("Settings")),
        Route("profile", "home", Action.back()),
        Route("settings", "home", Action.back()),
        Route("home", "detail", Action.tap("Item")),
        Route("detail", "home", Action.back()),
    ])


@pytest.fixture
def empty_graph() -> NavigationGraph:
    return build_graph([])


def quiet_config(**overrides) -> FuzzingConfig:
    """Config without simulated latency, so tests stay fast."""
    values = {"min_latency": 0.0, "max_latency": 0.0}
    values.update(overrides)
    return FuzzingConfig(**values)


# ─── Stub executors ───────────────────────────────────────────────────────────


class GraphExecutor(ActionExecutor):
    """Always follows the declared graph, never crashes."""

    def __init__(self, graph: NavigationGraph):
        self.graph = graph

    async def perform(self, node, action):
        return Success(self.graph.destination(node, action))


class InvalidExecutor(ActionExecutor):
    async def perform(self, node, action):
        return Invalid("rejected")


class CrashingExecutor(ActionExecutor):
    def __init__(self, failure: NavigationFailure):
        self.failure = failure
        self.calls = 0

    async def perform(self, node, action):
        self.calls += 1
        return Crashed(self.failure)


# ─── Logging isolation ────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def _restore_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()
