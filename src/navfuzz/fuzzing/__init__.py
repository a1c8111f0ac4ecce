"""
Fuzzing module for randomized walks over navigation graphs.
"""

from .models import (
    Severity,
    ErrorKind,
    NavigationFailure,
    Success,
    Invalid,
    Crashed,
    ActionOutcome,
    InvalidRoute,
    CrashReport,
    WalkResult,
    CoverageStats,
    FuzzingReport,
)
from .random_source import RandomSource, derive_seed, generate_seed
from .executor import (
    ActionExecutor,
    SimulatedExecutor,
    DelegatingExecutor,
    NavigationError,
)
from .coverage import CoverageTracker, calculate_coverage
from .runner import NavigationFuzzer, classify_crash, fuzz

__all__ = [
    "Severity",
    "ErrorKind",
    "NavigationFailure",
    "Success",
    "Invalid",
    "Crashed",
    "ActionOutcome",
    "InvalidRoute",
    "CrashReport",
    "WalkResult",
    "CoverageStats",
    "FuzzingReport",
    "RandomSource",
    "derive_seed",
    "generate_seed",
    "ActionExecutor",
    "SimulatedExecutor",
    "DelegatingExecutor",
    "NavigationError",
    "CoverageTracker",
    "calculate_coverage",
    "NavigationFuzzer",
    "classify_crash",
    "fuzz",
]
