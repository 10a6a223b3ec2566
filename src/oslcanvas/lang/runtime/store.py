"""
Variable store for the OSL runtime.

All script state lives in one nested mapping addressed by dotted paths
(``window.width``, ``player.pos.x``). The store is the only channel through
which statements communicate.
"""

from copy import deepcopy
from typing import Any, Dict, Iterator, Optional

from .values import Value

DEFAULT_VARIABLES: Dict[str, Value] = {
    "window": {"width": 640, "height": 360},
    "mouse_x": 0,
    "mouse_y": 0,
    "mouse_down": False,
    "direction": 90,  # degrees, facing right
}


class VariableStore:
    """
    Dotted-path accessor over a nested dict.

    Usage:
        store = VariableStore()
        store.set("player.x", 5)
        store.get("player.x")       # 5
        store.get("player.name.len")  # length of a string value
    """

    def __init__(self, initial: Optional[Dict[str, Value]] = None):
        self.root: Dict[str, Value] = deepcopy(DEFAULT_VARIABLES if initial is None else initial)

    def get(self, path: str) -> Optional[Value]:
        """
        Resolve a dotted path.

        A ``len`` segment applied to a string or list yields its length; a
        trailing ``len`` on any other non-mapping yields 0. Returns None as
        soon as an intermediate value is missing.
        """
        parts = path.split('.')
        cur: Any = self.root
        for i, part in enumerate(parts):
            if part == 'len' and isinstance(cur, (str, list)):
                cur = len(cur)
                continue
            if cur is None:
                return None
            if isinstance(cur, dict):
                cur = cur.get(part)
            elif isinstance(cur, list) and part.isdigit():
                idx = int(part)
                cur = cur[idx] if idx < len(cur) else None
            elif part == 'len' and i == len(parts) - 1:
                return 0
            else:
                cur = None
        return cur

    def set(self, path: str, value: Value) -> None:
        """
        Assign a dotted path, creating intermediate mappings on demand.

        A missing or non-mapping intermediate is replaced by an empty mapping.
        """
        parts = path.split('.')
        cur = self.root
        for part in parts[:-1]:
            nxt = cur.get(part)
            if not isinstance(nxt, dict):
                nxt = {}
                cur[part] = nxt
            cur = nxt
        cur[parts[-1]] = value

    def __getitem__(self, name: str) -> Optional[Value]:
        """Top-level lookup without path splitting."""
        return self.root.get(name)

    def __setitem__(self, name: str, value: Value) -> None:
        self.root[name] = value

    def __contains__(self, name: str) -> bool:
        return name in self.root

    def __iter__(self) -> Iterator[str]:
        return iter(self.root)

    def snapshot(self) -> Dict[str, Value]:
        """Deep copy of the current state."""
        return deepcopy(self.root)
