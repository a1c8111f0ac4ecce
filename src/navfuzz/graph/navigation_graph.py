"""
Navigation Graph: Models an application's navigable states and transitions.
"""

import json
from collections import deque
from pathlib import Path
from types import MappingProxyType
from typing import List, Dict, Set, Optional, Any, Mapping, Iterable, Tuple

from .models import Node, NodeKind, Action, Transition, Route


ROOT_ID = "root"


class RouteDefinitionError(ValueError):
    """Raised when route declarations cannot be turned into a graph."""


class NavigationGraph:
    """
    Immutable graph of navigable states.

    Used for:
    - Choosing actions during fuzzing (what can be done from here?)
    - Validating transitions reported by an executor
    - Coverage and reachability analysis

    The node and transition sets are computed once at construction; every
    query afterwards is read-only.
    """

    def __init__(
        self,
        root: Node,
        transitions: Mapping[Node, Mapping[Action, Node]],
        nodes: Iterable[Node] = (),
    ):
        self._root = root
        self._adjacency: Mapping[Node, Mapping[Action, Node]] = MappingProxyType({
            node: MappingProxyType(dict(destinations))
            for node, destinations in transitions.items()
        })

        # Declared nodes stay even when a later route replaced their edge
        nodes = {root, *nodes}
        edges = set()
        for from_node, destinations in self._adjacency.items():
            nodes.add(from_node)
            for to_node in destinations.values():
                nodes.add(to_node)
                edges.add(Transition(from_node, to_node))

        self._all_nodes = frozenset(nodes)
        self._all_transitions = frozenset(edges)

    @property
    def root(self) -> Node:
        return self._root

    @property
    def all_nodes(self) -> frozenset:
        return self._all_nodes

    @property
    def all_transitions(self) -> frozenset:
        return self._all_transitions

    @property
    def adjacency(self) -> Mapping[Node, Mapping[Action, Node]]:
        return self._adjacency

    def available_actions(self, node: Node) -> List[Action]:
        """Actions declared from `node`, in declaration order. Empty for unknown nodes."""
        return list(self._adjacency.get(node, {}).keys())

    def destination(self, node: Node, action: Action) -> Optional[Node]:
        """Declared target of `action` from `node`, if any."""
        return self._adjacency.get(node, {}).get(action)

    def is_valid_transition(self, from_node: Node, to_node: Node, action: Action) -> bool:
        """True only if the graph declares exactly `(from_node, action) -> to_node`."""
        return self.destination(from_node, action) == to_node

    def get_node(self, node_id: str) -> Optional[Node]:
        for node in self._all_nodes:
            if node.id == node_id:
                return node
        return None

    def reachable_nodes(self, start: Optional[Node] = None) -> Set[Node]:
        """Get all nodes reachable from `start` (the root by default)."""
        start = start or self._root
        visited = {start}
        queue = deque([start])

        while queue:
            current = queue.popleft()
            for next_node in self._adjacency.get(current, {}).values():
                if next_node not in visited:
                    visited.add(next_node)
                    queue.append(next_node)

        return visited

    def unreachable_nodes(self) -> Set[Node]:
        """Declared nodes that no walk from the root can ever visit."""
        return set(self._all_nodes) - self.reachable_nodes()

    def find_path(self, from_node: Node, to_node: Node) -> Optional[List[Tuple[Action, Node]]]:
        """Find the shortest sequence of (action, node) steps between two nodes."""
        if from_node == to_node:
            return []

        # BFS
        visited = {from_node}
        queue = deque([(from_node, [])])

        while queue:
            current, path = queue.popleft()

            for action, next_node in self._adjacency.get(current, {}).items():
                if next_node == to_node:
                    return path + [(action, next_node)]

                if next_node not in visited:
                    visited.add(next_node)
                    queue.append((next_node, path + [(action, next_node)]))

        return None  # No path found

    def to_dict(self) -> Dict:
        """Convert to dictionary for serialization."""
        return {
            "root": self._root.id,
            "nodes": [node.to_dict() for node in sorted(self._all_nodes, key=_node_sort_key)],
            "edges": [
                {
                    "from": from_node.id,
                    "to": to_node.id,
                    "action": action.to_dict(),
                }
                for from_node, destinations in self._adjacency.items()
                for action, to_node in destinations.items()
            ],
        }

    def to_mermaid(self) -> str:
        """Generate Mermaid diagram syntax."""
        lines = ["stateDiagram-v2"]
        lines.append(f"    [*] --> {self._root.id}")

        for from_node, destinations in self._adjacency.items():
            for action, to_node in destinations.items():
                lines.append(f"    {from_node.id} --> {to_node.id}: {action}")

        # Dead ends
        for node in sorted(self._all_nodes, key=_node_sort_key):
            if not self._adjacency.get(node):
                lines.append(f"    {node.id} --> [*]")

        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"NavigationGraph(root={self._root.id!r}, nodes={len(self._all_nodes)}, "
            f"transitions={len(self._all_transitions)})"
        )


def _node_sort_key(node: Node) -> Tuple[str, str, str]:
    return (node.id, node.kind.value, node.name)


class NavigationGraphBuilder:
    """
    Builds a navigation graph from flat route declarations.

    The node with id "root" becomes the graph root. Every other id becomes a
    screen node unless `node_kinds` says otherwise.
    """

    def build(
        self,
        routes: Iterable[Route],
        node_kinds: Optional[Mapping[str, Tuple[NodeKind, str]]] = None,
    ) -> NavigationGraph:
        """
        Build a navigation graph.

        Args:
            routes: Ordered route declarations. A later route with the same
                (from, action) replaces the earlier destination.
            node_kinds: Optional id -> (kind, name) overrides

        Returns:
            NavigationGraph rooted at the "root" node
        """
        node_kinds = node_kinds or {}
        nodes: Dict[str, Node] = {}

        def node_for(node_id: str) -> Node:
            if node_id not in nodes:
                nodes[node_id] = self._make_node(node_id, node_kinds.get(node_id))
            return nodes[node_id]

        root = node_for(ROOT_ID)
        transitions: Dict[Node, Dict[Action, Node]] = {root: {}}

        for route in routes:
            if not route.from_id or not route.to_id:
                raise RouteDefinitionError(f"Route endpoints must be non-empty: {route!r}")
            from_node = node_for(route.from_id)
            to_node = node_for(route.to_id)
            transitions.setdefault(from_node, {})[route.action] = to_node

        return NavigationGraph(root=root, transitions=transitions, nodes=nodes.values())

    @staticmethod
    def _make_node(node_id: str, kind: Optional[Tuple[NodeKind, str]]) -> Node:
        if node_id == ROOT_ID:
            return Node(id=ROOT_ID, kind=NodeKind.ROOT)
        if kind is None:
            return Node(id=node_id, kind=NodeKind.SCREEN, name=node_id)
        node_kind, name = kind
        if node_kind == NodeKind.ROOT:
            raise RouteDefinitionError(f"Only '{ROOT_ID}' may be a root node, got '{node_id}'")
        return Node(id=node_id, kind=node_kind, name=name)


def build_graph(routes: Iterable[Route], node_kinds=None) -> NavigationGraph:
    """Shortcut for NavigationGraphBuilder().build(...)."""
    return NavigationGraphBuilder().build(routes, node_kinds)


def routes_from_dict(data: Dict[str, Any]) -> Tuple[List[Route], Dict[str, Tuple[NodeKind, str]]]:
    """
    Parse the route-file format.

    {
        "nodes": {"home": {"kind": "tab", "name": "Home"}},
        "routes": [{"from": "root", "to": "home", "action": "tap:Home"}]
    }
    """
    if not isinstance(data, dict):
        raise RouteDefinitionError("Route file must contain a JSON object")

    raw_nodes = data.get("nodes") or {}
    if not isinstance(raw_nodes, dict):
        raise RouteDefinitionError("'nodes' must be a JSON object keyed by node id")

    node_kinds: Dict[str, Tuple[NodeKind, str]] = {}
    for node_id, node_def in raw_nodes.items():
        try:
            kind = NodeKind(str(node_def.get("kind", "screen")).lower())
        except (AttributeError, ValueError):
            raise RouteDefinitionError(f"Invalid node kind for '{node_id}': {node_def!r}") from None
        node_kinds[node_id] = (kind, str(node_def.get("name", node_id)))

    raw_routes = data.get("routes")
    if not isinstance(raw_routes, list):
        raise RouteDefinitionError("Route file must contain a 'routes' list")

    routes = []
    for index, item in enumerate(raw_routes):
        try:
            raw_action = item["action"]
            if isinstance(raw_action, dict):
                action = Action.from_dict(raw_action)
            else:
                action = Action.parse(str(raw_action))
            routes.append(Route(from_id=str(item["from"]), to_id=str(item["to"]), action=action))
        except (KeyError, TypeError, ValueError) as e:
            raise RouteDefinitionError(f"Invalid route #{index}: {e}") from e

    return routes, node_kinds


def load_routes(path) -> Tuple[List[Route], Dict[str, Tuple[NodeKind, str]]]:
    """Load routes and node kinds from a JSON route file."""
    try:
        with open(Path(path)) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise RouteDefinitionError(f"Route file is not valid JSON: {e}") from e
    return routes_from_dict(data)
