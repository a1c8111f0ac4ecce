"""
Data models for navigation fuzzing sessions.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Dict, Tuple, Optional, Union
from enum import Enum

from ..config import FuzzingConfig
from ..graph.models import Node, Action


class Severity(Enum):
    """Crash severity levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorKind(Enum):
    """Failure categories an executor can report."""
    FATAL = "fatal"
    RECOVERABLE = "recoverable"
    OTHER = "other"


@dataclass(frozen=True)
class NavigationFailure:
    """Payload of a crashed navigation attempt."""
    kind: ErrorKind
    message: str = ""

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}" if self.message else self.kind.value


# Outcomes of a single navigation attempt

@dataclass(frozen=True)
class Success:
    node: Node


@dataclass(frozen=True)
class Invalid:
    reason: str


@dataclass(frozen=True)
class Crashed:
    error: NavigationFailure


ActionOutcome = Union[Success, Invalid, Crashed]


@dataclass(frozen=True)
class InvalidRoute:
    """A rejected transition attempt."""
    from_node: Node
    action: Action
    reason: str

    def to_dict(self) -> Dict:
        return {
            "from": self.from_node.id,
            "action": str(self.action),
            "reason": self.reason,
        }


@dataclass(frozen=True)
class CrashReport:
    """A failed transition attempt."""
    iteration: int
    path: Tuple[Node, ...]
    action: Action
    error: NavigationFailure
    severity: Severity

    def to_dict(self) -> Dict:
        return {
            "iteration": self.iteration,
            "path": [n.id for n in self.path],
            "action": str(self.action),
            "error": {"kind": self.error.kind.value, "message": self.error.message},
            "severity": self.severity.value,
        }


@dataclass(frozen=True)
class WalkResult:
    """Outcome of one randomized walk."""
    iteration: int
    path: Tuple[Node, ...]
    invalid_routes: Tuple[InvalidRoute, ...] = ()
    crash: Optional[CrashReport] = None
    steps: int = 0  # Actions attempted
    seed: int = 0  # Derived seed of this walk's random stream

    def to_dict(self) -> Dict:
        return {
            "iteration": self.iteration,
            "seed": self.seed,
            "steps": self.steps,
            "path": [n.id for n in self.path],
            "invalid_routes": [r.to_dict() for r in self.invalid_routes],
            "crash": self.crash.to_dict() if self.crash else None,
        }


@dataclass(frozen=True)
class CoverageStats:
    """Node and transition coverage across all walks of a session."""
    nodes_covered: int
    total_nodes: int
    transitions_covered: int
    total_transitions: int
    percentage_covered: float
    uncovered_nodes: Tuple[str, ...] = ()
    unreachable_nodes: Tuple[str, ...] = ()

    @property
    def transition_percentage(self) -> float:
        return self.transitions_covered / max(self.total_transitions, 1)

    def to_dict(self) -> Dict:
        return {
            "nodes_covered": self.nodes_covered,
            "total_nodes": self.total_nodes,
            "transitions_covered": self.transitions_covered,
            "total_transitions": self.total_transitions,
            "percentage_covered": self.percentage_covered,
            "uncovered_nodes": list(self.uncovered_nodes),
            "unreachable_nodes": list(self.unreachable_nodes),
        }


@dataclass(frozen=True)
class FuzzingReport:
    """Complete report from a fuzzing session."""
    timestamp: datetime
    duration: float  # seconds
    iterations: int
    seed: int
    results: Tuple[WalkResult, ...]
    crashes: Tuple[CrashReport, ...]
    invalid_routes: Tuple[InvalidRoute, ...]
    coverage: CoverageStats
    aborted: bool = False
    config: FuzzingConfig = field(default_factory=FuzzingConfig)

    def severity_counts(self) -> Dict[Severity, int]:
        counts = {severity: 0 for severity in Severity}
        for crash in self.crashes:
            counts[crash.severity] += 1
        return counts

    def crashes_at_least(self, severity: Severity) -> List[CrashReport]:
        order = list(Severity)
        return [c for c in self.crashes if order.index(c.severity) >= order.index(severity)]

    def summary(self) -> str:
        """Generate summary report."""
        counts = self.severity_counts()
        lines = [
            "=" * 60,
            "NAVIGATION FUZZING REPORT",
            "=" * 60,
            f"Duration: {self.duration:.2f}s",
            f"Iterations: {self.iterations}",
            f"Seed: {self.seed}",
            f"Crashes: {len(self.crashes)}",
            f"Invalid Routes: {len(self.invalid_routes)}",
            f"Coverage: {self.coverage.percentage_covered * 100:.1f}% "
            f"({self.coverage.nodes_covered}/{self.coverage.total_nodes} nodes, "
            f"{self.coverage.transitions_covered}/{self.coverage.total_transitions} transitions)",
            "",
            f"Critical Issues: {counts[Severity.CRITICAL]}",
            f"High Issues: {counts[Severity.HIGH]}",
            f"Medium Issues: {counts[Severity.MEDIUM]}",
            f"Low Issues: {counts[Severity.LOW]}",
        ]

        if self.aborted:
            lines.append("")
            lines.append("Session aborted early after a critical crash")

        if self.coverage.uncovered_nodes:
            lines.append("")
            lines.append(f"Uncovered nodes: {', '.join(self.coverage.uncovered_nodes)}")
        if self.coverage.unreachable_nodes:
            lines.append(f"Unreachable from root: {', '.join(self.coverage.unreachable_nodes)}")

        lines.append("=" * 60)
        return "\n".join(lines)

    def to_dict(self) -> Dict:
        """Convert report to dictionary for JSON export."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "duration": self.duration,
            "iterations": self.iterations,
            "seed": self.seed,
            "aborted": self.aborted,
            "config": self.config.to_dict(),
            "severity_counts": {s.value: n for s, n in self.severity_counts().items()},
            "coverage": self.coverage.to_dict(),
            "crashes": [c.to_dict() for c in self.crashes],
            "invalid_routes": [r.to_dict() for r in self.invalid_routes],
            "results": [r.to_dict() for r in self.results],
        }
