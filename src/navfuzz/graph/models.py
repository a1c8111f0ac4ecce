"""
Data models for navigation graphs.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Any
from enum import Enum


class NodeKind(Enum):
    """Kind of navigable state."""
    ROOT = "root"
    TAB = "tab"
    SCREEN = "screen"
    MODAL = "modal"
    ALERT = "alert"


class ActionType(Enum):
    """Kind of input that may cause a transition."""
    TAP = "tap"
    SWIPE = "swipe"
    BACK = "back"
    DISMISS = "dismiss"
    DEEP_LINK = "deep_link"


class Direction(Enum):
    """Swipe direction."""
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


# Action types that carry a value, e.g. tap(label)
_VALUED_ACTIONS = (ActionType.TAP, ActionType.SWIPE, ActionType.DEEP_LINK)


@dataclass(frozen=True)
class Node:
    """A distinct navigable application state."""
    id: str
    kind: NodeKind = NodeKind.SCREEN
    name: str = ""

    def __str__(self) -> str:
        return self.id

    def to_dict(self) -> Dict:
        return {"id": self.id, "kind": self.kind.value, "name": self.name}


@dataclass(frozen=True)
class Action:
    """
    A user- or system-initiated input.

    Use the constructors rather than building one by hand:
    Action.tap("Home"), Action.swipe(Direction.LEFT), Action.back(),
    Action.dismiss(), Action.deep_link("app://settings").
    """
    type: ActionType
    value: Optional[str] = None

    @classmethod
    def tap(cls, label: str) -> "Action":
        return cls(ActionType.TAP, label)

    @classmethod
    def swipe(cls, direction: Direction) -> "Action":
        return cls(ActionType.SWIPE, Direction(direction).value)

    @classmethod
    def back(cls) -> "Action":
        return cls(ActionType.BACK)

    @classmethod
    def dismiss(cls) -> "Action":
        return cls(ActionType.DISMISS)

    @classmethod
    def deep_link(cls, target: str) -> "Action":
        return cls(ActionType.DEEP_LINK, target)

    @classmethod
    def parse(cls, text: str) -> "Action":
        """
        Parse the compact form used by route files.

        "tap:Home", "swipe:left", "back", "dismiss", "deep_link:app://x"
        """
        kind, sep, value = text.strip().partition(":")
        try:
            action_type = ActionType(kind.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown action type: {kind!r}") from None
        return cls._build(action_type, value if sep else None)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Action":
        try:
            action_type = ActionType(str(data["type"]).lower())
        except (KeyError, ValueError):
            raise ValueError(f"Invalid action: {data!r}") from None
        return cls._build(action_type, data.get("value"))

    @classmethod
    def _build(cls, action_type: ActionType, value: Optional[str]) -> "Action":
        if value is not None and not isinstance(value, str):
            raise ValueError(f"Action value must be a string, got {value!r}")
        if action_type in _VALUED_ACTIONS:
            if not value:
                raise ValueError(f"Action '{action_type.value}' requires a value")
            if action_type == ActionType.SWIPE:
                try:
                    return cls.swipe(Direction(value.strip().lower()))
                except ValueError:
                    raise ValueError(f"Unknown swipe direction: {value!r}") from None
            return cls(action_type, value)
        if value:
            raise ValueError(f"Action '{action_type.value}' takes no value")
        return cls(action_type)

    def __str__(self) -> str:
        if self.value is None:
            return self.type.value
        return f"{self.type.value}({self.value})"

    def to_dict(self) -> Dict:
        data = {"type": self.type.value}
        if self.value is not None:
            data["value"] = self.value
        return data


@dataclass(frozen=True)
class Transition:
    """An observed (from, to) pair, used for coverage bookkeeping."""
    from_node: Node
    to_node: Node


@dataclass(frozen=True)
class Route:
    """A declared route: following `action` from `from_id` leads to `to_id`."""
    from_id: str
    to_id: str
    action: Action
