"""
Coverage Tracking: Tracks which parts of the navigation graph have been visited.
"""

from typing import Iterable, Set

from ..graph.models import Node, Transition
from ..graph.navigation_graph import NavigationGraph
from .models import WalkResult, CoverageStats


class CoverageTracker:
    """
    Tracks node and transition coverage during fuzzing.

    A node counts as covered once it appears in any walk's path; a
    transition once two nodes appear next to each other in a path.
    """

    def __init__(self, graph: NavigationGraph):
        self.graph = graph
        self.visited_nodes: Set[Node] = set()
        self.visited_transitions: Set[Transition] = set()
        self.total_walks = 0

    def record_walk(self, result: WalkResult):
        """Record coverage from a walk."""
        self.total_walks += 1
        self.visited_nodes.update(result.path)
        for from_node, to_node in zip(result.path, result.path[1:]):
            self.visited_transitions.add(Transition(from_node, to_node))

    def get_uncovered_nodes(self) -> Set[Node]:
        return set(self.graph.all_nodes) - self.visited_nodes

    def generate_report(self) -> CoverageStats:
        total_nodes = len(self.graph.all_nodes)
        # Nodes and edges an executor invented outside the graph don't count
        covered = len(self.visited_nodes & self.graph.all_nodes)
        transitions_covered = len(self.visited_transitions & self.graph.all_transitions)

        return CoverageStats(
            nodes_covered=covered,
            total_nodes=total_nodes,
            transitions_covered=transitions_covered,
            total_transitions=len(self.graph.all_transitions),
            percentage_covered=covered / max(total_nodes, 1),
            uncovered_nodes=tuple(sorted(n.id for n in self.get_uncovered_nodes())),
            unreachable_nodes=tuple(sorted(n.id for n in self.graph.unreachable_nodes())),
        )


def calculate_coverage(graph: NavigationGraph, results: Iterable[WalkResult]) -> CoverageStats:
    """Reduce a list of walk results into coverage statistics."""
    tracker = CoverageTracker(graph)
    for result in results:
        tracker.record_walk(result)
    return tracker.generate_report()
