"""
Graph module for modeling navigable application states.
"""

from .models import Node, NodeKind, Action, ActionType, Direction, Transition, Route
from .navigation_graph import (
    NavigationGraph,
    NavigationGraphBuilder,
    RouteDefinitionError,
    build_graph,
    load_routes,
    routes_from_dict,
)

__all__ = [
    "Node",
    "NodeKind",
    "Action",
    "ActionType",
    "Direction",
    "Transition",
    "Route",
    "NavigationGraph",
    "NavigationGraphBuilder",
    "RouteDefinitionError",
    "build_graph",
    "load_routes",
    "routes_from_dict",
]
