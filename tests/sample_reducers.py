from __future__ import annotations

from typing import Any

from pyreducex import action_type


def counter(state: Any = None, action: Any = None) -> Any:
    if state is None:
        state = 0
    if action_type(action) == "INC":
        return state + 1
    if action_type(action) == "DEC":
        return state - 1
    return state


def todos(state: Any = None, action: Any = None) -> Any:
    if state is None:
        state = ()
    if action_type(action) == "ADD_TODO":
        return state + (action["text"],)
    return state
