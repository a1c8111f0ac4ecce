"""
CLI entry point for the navigation fuzzer.

Usage:
    navfuzz fuzz routes.json --seed 42 --iterations 500
    navfuzz fuzz routes.json --output report.json --fail-on any
    navfuzz graph routes.json --mermaid
"""

import argparse
import asyncio
import json
import os
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.progress import Progress, BarColumn, TextColumn, MofNCompleteColumn

console = Console()


def load_env():
    """Load .env file from parent directories."""
    current = Path.cwd()
    for _ in range(5):  # Check up to 5 parent dirs
        env_file = current / ".env"
        if env_file.exists():
            with open(env_file) as f:
                for line in f:
                    line = line.strip()
                    if line and not line.startswith("#") and "=" in line:
                        key, value = line.split("=", 1)
                        os.environ.setdefault(key.strip(), value.strip())
            break
        current = current.parent


def _load_graph(path: str):
    from navfuzz.graph import build_graph, load_routes

    routes, node_kinds = load_routes(path)
    return build_graph(routes, node_kinds)


def run_fuzz(args: argparse.Namespace) -> int:
    """Fuzz a navigation graph loaded from a route file."""
    load_env()

    from navfuzz.config import load_fuzzing_config, load_logging_config
    from navfuzz.fuzzing import NavigationFuzzer, Severity
    from navfuzz.telemetry import setup_logging

    try:
        setup_logging(load_logging_config(level=args.log_level, format=args.log_format))
        config = load_fuzzing_config(
            max_depth=args.max_depth,
            max_iterations=args.iterations,
            seed=args.seed,
            crash_rate=args.crash_rate,
            backtrack_rate=args.backtrack_rate,
            parallel_walks=args.parallel,
        )
    except ValueError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return 1

    try:
        graph = _load_graph(args.routes)
    except FileNotFoundError:
        console.print(f"[red]Error: route file not found: {escape(args.routes)}[/red]")
        return 1
    except ValueError as e:
        console.print(f"[red]Error loading routes: {escape(str(e))}[/red]")
        return 1

    console.print()
    console.print(Panel(
        f"[bold cyan]{escape(args.routes)}[/bold cyan]\n\n"
        f"[dim]Nodes: {len(graph.all_nodes)} | Transitions: {len(graph.all_transitions)}[/dim]\n"
        f"[dim]Max depth: {config.max_depth} | Iterations: {config.max_iterations} | "
        f"Seed: {config.seed if config.seed is not None else 'random'}[/dim]",
        title="[bold]Navigation Fuzzer[/bold]",
    ))

    fuzzer = NavigationFuzzer(graph, config=config)

    with Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Walking graph...", total=config.max_iterations)

        def progress_callback(completed, total):
            progress.update(task, completed=completed)

        report = asyncio.run(fuzzer.run(progress_callback))

    console.print()
    console.print(report.summary(), markup=False, highlight=False)

    if report.crashes:
        table = Table(title="Crashes")
        table.add_column("Iteration", justify="right")
        table.add_column("Severity", style="bold")
        table.add_column("Action", style="cyan")
        table.add_column("Path")
        table.add_column("Error")

        for crash in report.crashes:
            style = "red" if crash.severity == Severity.CRITICAL else "yellow"
            table.add_row(
                str(crash.iteration),
                f"[{style}]{crash.severity.value}[/{style}]",
                escape(str(crash.action)),
                escape(" → ".join(n.id for n in crash.path)),
                escape(str(crash.error)),
            )
        console.print(table)

    console.print(f"\n[dim]Re-run with --seed {report.seed} to reproduce[/dim]")

    if args.output:
        with open(args.output, "w") as f:
            json.dump(report.to_dict(), f, indent=2)
        console.print(f"[dim]Report exported to: {args.output}[/dim]")

    if args.fail_on == "any" and report.crashes:
        return 1
    if args.fail_on == "critical" and report.crashes_at_least(Severity.CRITICAL):
        return 1
    return 0


def run_graph(args: argparse.Namespace) -> int:
    """Show the navigation graph declared by a route file."""
    try:
        graph = _load_graph(args.routes)
    except FileNotFoundError:
        console.print(f"[red]Error: route file not found: {escape(args.routes)}[/red]")
        return 1
    except ValueError as e:
        console.print(f"[red]Error loading routes: {escape(str(e))}[/red]")
        return 1

    if args.mermaid:
        console.print(graph.to_mermaid(), markup=False, highlight=False)
        return 0

    nodes_table = Table(title=f"Nodes ({len(graph.all_nodes)})")
    nodes_table.add_column("Id", style="cyan")
    nodes_table.add_column("Kind")
    nodes_table.add_column("Actions", justify="right")
    for node in sorted(graph.all_nodes, key=lambda n: n.id):
        nodes_table.add_row(escape(node.id), node.kind.value, str(len(graph.available_actions(node))))
    console.print(nodes_table)

    edges_table = Table(title="Routes")
    edges_table.add_column("From", style="cyan")
    edges_table.add_column("Action")
    edges_table.add_column("To", style="cyan")
    for from_node, destinations in graph.adjacency.items():
        for action, to_node in destinations.items():
            edges_table.add_row(escape(from_node.id), escape(str(action)), escape(to_node.id))
    console.print(edges_table)

    unreachable = sorted(n.id for n in graph.unreachable_nodes())
    if unreachable:
        console.print(f"[yellow]⚠️ Unreachable from root: {escape(', '.join(unreachable))}[/yellow]")

    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="navfuzz",
        description="Randomized, reproducible fuzzing of navigation graphs",
    )
    subparsers = parser.add_subparsers(dest="command")

    # Fuzz command
    fuzz_parser = subparsers.add_parser("fuzz", help="Run a fuzzing session")
    fuzz_parser.add_argument("routes", type=str, help="Path to JSON route file")
    fuzz_parser.add_argument("--max-depth", type=int, default=None, help="Steps per walk (default: 10)")
    fuzz_parser.add_argument(
        "--iterations", "-n",
        type=int,
        default=None,
        help="Number of walks (default: 1000)",
    )
    fuzz_parser.add_argument("--seed", "-s", type=int, default=None, help="Seed for reproducibility")
    fuzz_parser.add_argument("--crash-rate", type=float, default=None, help="Simulated crash probability")
    fuzz_parser.add_argument("--backtrack-rate", type=float, default=None, help="Backtrack probability")
    fuzz_parser.add_argument("--parallel", type=int, default=None, help="Walks run concurrently")
    fuzz_parser.add_argument("--output", "-o", type=str, help="Export report to JSON file")
    fuzz_parser.add_argument(
        "--fail-on",
        choices=["never", "critical", "any"],
        default="critical",
        help="Exit non-zero when crashes of this class are found",
    )
    fuzz_parser.add_argument("--log-level", type=str, default=None, help="Log level (default: INFO)")
    fuzz_parser.add_argument("--log-format", choices=["console", "json"], default=None)

    # Graph command
    graph_parser = subparsers.add_parser("graph", help="Show the declared navigation graph")
    graph_parser.add_argument("routes", type=str, help="Path to JSON route file")
    graph_parser.add_argument("--mermaid", action="store_true", help="Print a Mermaid state diagram")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command == "fuzz":
        return run_fuzz(args)
    elif args.command == "graph":
        return run_graph(args)
    else:
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
