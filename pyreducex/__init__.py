"""
PyReduceX：可預測的單一狀態容器。

狀態只能透過 dispatch action 並由 reducer 計算新狀態來改變，
中介軟體可以在不修改核心的情況下介入 dispatch 流程。
"""

from .errors import (
    PyReduceXError, InvalidArgumentError, InvalidActionError, ReentrantDispatchError,
    ReducerSanityError, UndefinedReducerOutputError, warning
)
from .config import StoreConfig, get_config, configure, reset_config
from .actions import (
    Action, ActionTypes, ActionPool, create_action, action_type, is_action, bind_action_creators
)
from .compose import compose
from .reducers import create_reducer, on, combine_reducers, ReducerManager
from .store import Store, create_store
from .middleware import (
    MiddlewareAPI, apply_middleware, BaseMiddleware, LoggerMiddleware,
    ThunkMiddleware, create_thunk_middleware, thunk
)

__all__ = [
    # Errors
    "PyReduceXError", "InvalidArgumentError", "InvalidActionError", "ReentrantDispatchError",
    "ReducerSanityError", "UndefinedReducerOutputError", "warning",

    # Config
    "StoreConfig", "get_config", "configure", "reset_config",

    # Actions
    "Action", "ActionTypes", "ActionPool", "create_action", "action_type", "is_action",
    "bind_action_creators",

    # Composition
    "compose",

    # Reducers
    "create_reducer", "on", "combine_reducers", "ReducerManager",

    # Store
    "Store", "create_store",

    # Middleware
    "MiddlewareAPI", "apply_middleware", "BaseMiddleware", "LoggerMiddleware",
    "ThunkMiddleware", "create_thunk_middleware", "thunk",
]
