"""
Unit tests for coverage tracking.
"""

from __future__ import annotations

from navfuzz.fuzzing import CoverageTracker, WalkResult, calculate_coverage
from navfuzz.graph import Action, Node, Route, build_graph


def walk(iteration, *nodes):
    return WalkResult(iteration=iteration, path=tuple(nodes))


class TestCoverage:
    def test_union_over_walks(self, app_graph):
        root = app_graph.root
        home = app_graph.get_node("home")
        login = app_graph.get_node("login")
        profile = app_graph.get_node("profile")

        stats = calculate_coverage(app_graph, [
            walk(0, root, home, profile),
            walk(1, root, login, home),
            walk(2, root, home),
        ])

        assert stats.nodes_covered == 4
        assert stats.total_nodes == 6
        # root->home, home->profile, root->login, login->home
        assert stats.transitions_covered == 4
        assert stats.total_transitions == len(app_graph.all_transitions)
        assert stats.percentage_covered == 4 / 6
        assert stats.uncovered_nodes == ("detail", "settings")

    def test_no_walks(self, linear_graph):
        stats = calculate_coverage(linear_graph, [])
        assert stats.nodes_covered == 0
        assert stats.transitions_covered == 0
        assert stats.percentage_covered == 0.0

    def test_root_only_graph(self, empty_graph):
        stats = calculate_coverage(empty_graph, [walk(0, empty_graph.root)])
        assert stats.nodes_covered == 1
        assert stats.total_nodes == 1
        assert stats.percentage_covered == 1.0
        assert stats.total_transitions == 0
        assert stats.transition_percentage == 0.0

    def test_foreign_nodes_not_counted(self, linear_graph):
        stats = calculate_coverage(linear_graph, [walk(0, linear_graph.root, Node("ghost"))])
        assert stats.nodes_covered == 1
        assert stats.percentage_covered == 1 / 3

    def test_unreachable_nodes_reported(self):
        graph = build_graph([
            Route("root", "home", Action.tap("Home")),
            Route("island", "beach", Action.swipe("left")),
        ])
        stats = calculate_coverage(graph, [walk(0, graph.root, graph.get_node("home"))])
        assert stats.unreachable_nodes == ("beach", "island")
        assert stats.uncovered_nodes == ("beach", "island")

    def test_tracker_counts_walks(self, linear_graph):
        tracker = CoverageTracker(linear_graph)
        tracker.record_walk(walk(0, linear_graph.root))
        tracker.record_walk(walk(1, linear_graph.root, linear_graph.get_node("A")))
        assert tracker.total_walks == 2
        assert {n.id for n in tracker.get_uncovered_nodes()} == {"B"}

    def test_undeclared_transitions_not_counted(self, linear_graph):
        root = linear_graph.root
        a = linear_graph.get_node("A")
        b = linear_graph.get_node("B")

        # root -> B is not a declared edge
        stats = calculate_coverage(linear_graph, [walk(0, root, b), walk(1, root, a, b)])

        assert stats.transitions_covered == 2
        assert stats.total_transitions == 2
        assert stats.transition_percentage == 1.0
