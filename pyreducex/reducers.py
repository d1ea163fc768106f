"""
Reducer 的建立與組合。

create_reducer / on 用來以 action 類型對應處理函數的方式撰寫 reducer，
combine_reducers 把多個具名的子 reducer 合併成一個作用在鍵值狀態上的根 reducer，
ReducerManager 則支援在執行期動態增減子 reducer。
"""
import logging
from typing import Any, Dict, List, Mapping, Optional, Set, TypeVar

from .actions import Action, ActionTypes, action_type, init_action
from .config import get_config
from .errors import (
    InvalidArgumentError, ReducerSanityError, UndefinedReducerOutputError, warning
)
from .types import Reducer

S = TypeVar("S")

logger = logging.getLogger(__name__)


def create_reducer(initial_state: S, *handlers) -> Reducer:
    """
    創建一個 reducer 函式，用於處理狀態變更。

    Args:
        initial_state: 初始狀態，收到 None 狀態時返回此值。
        *handlers: 一系列 (action_type, handler_fn) 元組或使用 on 函式創建的處理器。

    Returns:
        一個 reducer 函式，根據 action 的類型執行對應的處理邏輯。
    """
    action_handlers = {}  # 儲存 action 類型與處理函式的對應關係

    for handler in handlers:
        if isinstance(handler, tuple) and len(handler) == 2:
            # 如果 handler 是元組，則解構為 action 類型與處理函式
            handled_type, handler_fn = handler
            action_handlers[handled_type] = handler_fn
        else:
            # 如果 handler 是字典，則直接更新到 action_handlers
            action_handlers.update(handler)

    def reducer(state: Optional[S] = None, action: Any = None) -> S:
        if state is None:
            state = initial_state
        if action is None:
            return state

        handler = action_handlers.get(action_type(action))
        if handler:
            return handler(state, action)
        return state  # 未知或保留的 action 類型一律返回原狀態

    # 設置 reducer 的初始狀態和處理器映射
    reducer.initial_state = initial_state
    reducer.handlers = action_handlers

    return reducer


def on(action_creator_or_type, handler):
    """
    創建一個 action 類型與處理函式的映射。

    Args:
        action_creator_or_type: Action 創建器函式或 Action 類型。
        handler: 處理該 Action 的函式，接收 (state, action) 並返回新狀態。

    Returns:
        一個包含 {action_type: handler} 的字典。
    """
    if callable(action_creator_or_type) and hasattr(action_creator_or_type, 'type'):
        # 如果是 action 創建器函式，則提取其類型
        handled_type = action_creator_or_type.type
    else:
        handled_type = action_creator_or_type

    return {handled_type: handler}


def _undefined_state_error_message(key: str, action: Any) -> str:
    current_type = action_type(action)
    action_name = f'"{current_type}"' if current_type is not None else "an action"
    return (
        f'Given action {action_name}, reducer "{key}" returned None. '
        f"To ignore an action, you must explicitly return the previous state."
    )


def _unexpected_state_shape_warning_message(
    input_state: Any,
    reducers: Mapping[str, Reducer],
    action: Any,
    unexpected_key_cache: Set[Any],
) -> Optional[str]:
    reducer_keys = list(reducers)
    argument_name = (
        "preloaded_state argument passed to create_store"
        if action_type(action) == ActionTypes.INIT
        else "previous state received by the reducer"
    )

    if not reducer_keys:
        return (
            "Store does not have a valid reducer. Make sure the argument passed "
            "to combine_reducers is a mapping whose values are reducers."
        )

    if not isinstance(input_state, Mapping):
        return (
            f'The {argument_name} has unexpected type of "{type(input_state).__name__}". '
            f'Expected argument to be a mapping with the following keys: "{", ".join(map(str, reducer_keys))}"'
        )

    unexpected_keys = [
        key for key in input_state
        if key not in reducers and key not in unexpected_key_cache
    ]
    unexpected_key_cache.update(unexpected_keys)

    if unexpected_keys:
        return (
            f"Unexpected {'keys' if len(unexpected_keys) > 1 else 'key'} "
            f'"{", ".join(map(str, unexpected_keys))}" found in {argument_name}. '
            f'Expected to find one of the known reducer keys instead: '
            f'"{", ".join(map(str, reducer_keys))}". Unexpected keys will be ignored.'
        )
    return None


def _assert_reducer_sanity(reducers: Mapping[str, Reducer]) -> None:
    """
    以初始化 action 與隨機未知 action 探測每個 reducer，確認都返回非 None 的狀態。

    Raises:
        ReducerSanityError: 任一探測返回 None
    """
    for key, reducer in reducers.items():
        if reducer(None, init_action()) is None:
            raise ReducerSanityError(
                f'Reducer "{key}" returned None during initialization. '
                f"If the state passed to the reducer is None, you must "
                f"explicitly return the initial state. The initial state may "
                f"not be None.",
                reducer_key=key,
                probe_type=ActionTypes.INIT,
            )

        probe_type = ActionTypes.probe_unknown_action()
        if reducer(None, Action(probe_type)) is None:
            raise ReducerSanityError(
                f'Reducer "{key}" returned None when probed with a random type. '
                f'Don\'t try to handle {ActionTypes.INIT} or other actions in the '
                f'"{ActionTypes.PREFIX}" namespace. They are considered private. '
                f"Instead, you must return the current state for any unknown actions, "
                f"unless it is None, in which case you must return the initial state, "
                f"regardless of the action type. The initial state may not be None.",
                reducer_key=key,
                probe_type=probe_type,
            )


def combine_reducers(reducers: Mapping[str, Reducer]) -> Reducer:
    """
    把 鍵 -> reducer 的映射合併成一個根 reducer。

    根 reducer 的狀態是同樣鍵值的字典，每個鍵交給對應的子 reducer 處理。
    沒有任何子狀態改變（以 is 比較）時返回原本的狀態物件。

    Args:
        reducers: 鍵到 reducer 的映射，插入順序即狀態字典的鍵順序

    Returns:
        合併後的 reducer

    Raises:
        InvalidArgumentError: 開啟 strict_reducer_map 且映射中有不可調用的值
    """
    strict = get_config().strict_reducer_map
    final_reducers: Dict[str, Reducer] = {}

    for key, reducer in reducers.items():
        if reducer is None:
            warning(f'No reducer provided for key "{key}"')

        if callable(reducer):
            final_reducers[key] = reducer
        elif strict:
            raise InvalidArgumentError(
                f'Expected the reducer for key "{key}" to be a function.',
                argument=str(key),
                value=reducer,
            )
        else:
            logger.debug("Dropping non-callable reducer for key %r", key)

    unexpected_key_cache: Set[Any] = set()

    # 只在組合時檢查一次，錯誤延遲到每次調用時拋出
    sanity_error: Optional[Exception] = None
    try:
        _assert_reducer_sanity(final_reducers)
    except Exception as err:
        sanity_error = err

    def combination(state: Any = None, action: Any = None) -> Any:
        if sanity_error is not None:
            raise sanity_error

        if state is None:
            state = {}

        if get_config().dev_mode:
            message = _unexpected_state_shape_warning_message(
                state, final_reducers, action, unexpected_key_cache
            )
            if message:
                warning(message)

        is_mapping = isinstance(state, Mapping)
        has_changed = not is_mapping
        next_state = {}
        for key, reducer in final_reducers.items():
            previous_state_for_key = state.get(key) if is_mapping else None
            next_state_for_key = reducer(previous_state_for_key, action)
            if next_state_for_key is None:
                raise UndefinedReducerOutputError(
                    _undefined_state_error_message(key, action),
                    reducer_key=key,
                    action_type=action_type(action),
                )
            next_state[key] = next_state_for_key
            has_changed = has_changed or next_state_for_key is not previous_state_for_key

        return next_state if has_changed else state

    combination.reducers = dict(final_reducers)  # type: ignore[attr-defined]
    return combination


class ReducerManager:
    """
    管理應用中的所有子 reducers，支援在執行期動態註冊與卸載。

    本身可以當作 reducer 傳給 create_store；增減 reducer 後需要呼叫
    store.replace_reducer(manager) 讓新的子狀態取得初始值
    （Store.register_feature / unregister_feature 會代為處理）。

    Attributes:
        _feature_reducers: 儲存每個功能模組的 reducer。
        _keys_to_remove: 已卸載、下一次 reduce 時要從狀態中移除的鍵。
    """
    def __init__(self, reducers: Optional[Mapping[str, Reducer]] = None):
        self._feature_reducers: Dict[str, Reducer] = dict(reducers or {})
        self._keys_to_remove: List[str] = []
        self._combined = combine_reducers(self._feature_reducers)

    def add_reducer(self, feature_key: str, reducer: Reducer) -> None:
        """
        添加一個 reducer 到指定的功能模組。

        Args:
            feature_key: 功能模組的鍵。
            reducer: 要添加的 reducer 函式。
        """
        self._feature_reducers[feature_key] = reducer
        if feature_key in self._keys_to_remove:
            self._keys_to_remove.remove(feature_key)
        self._combined = combine_reducers(self._feature_reducers)

    def add_reducers(self, reducers: Mapping[str, Reducer]) -> None:
        """
        批量添加 reducers。

        Args:
            reducers: 包含功能模組鍵與 reducer 的映射。
        """
        for key, reducer in reducers.items():
            self._feature_reducers[key] = reducer
            if key in self._keys_to_remove:
                self._keys_to_remove.remove(key)
        self._combined = combine_reducers(self._feature_reducers)

    def remove_reducer(self, feature_key: str) -> None:
        """
        移除指定功能模組的 reducer，其狀態會在下一次 reduce 時被移除。

        Args:
            feature_key: 要移除的功能模組鍵。
        """
        if feature_key not in self._feature_reducers:
            return
        del self._feature_reducers[feature_key]
        self._keys_to_remove.append(feature_key)
        self._combined = combine_reducers(self._feature_reducers)

    def get_reducers(self) -> Dict[str, Reducer]:
        """
        獲取當前所有的 reducers。

        Returns:
            一個包含所有功能模組鍵與 reducer 的字典。
        """
        return self._feature_reducers.copy()

    def reduce(self, state: Any = None, action: Any = None) -> Any:
        """
        使用所有註冊的 reducers 處理 action 並返回新狀態。

        Args:
            state: 當前的 root state。
            action: 要處理的 action。

        Returns:
            新的 root state。
        """
        if self._keys_to_remove and isinstance(state, Mapping):
            removed = set(self._keys_to_remove)
            state = {key: value for key, value in state.items() if key not in removed}
            self._keys_to_remove = []
        return self._combined(state, action)

    __call__ = reduce
