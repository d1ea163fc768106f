"""
Store 引擎：保存唯一的狀態、當前 reducer 與訂閱者列表。

狀態只能透過 dispatch 改變；dispatch 執行 reducer 期間不允許再次 dispatch，
訂閱者在每次 dispatch 完成後依註冊順序被通知。
"""
import logging
from typing import Any, Callable, Generic, List, Optional, TypeVar

from reactivex import Observable, create, operators as ops
from reactivex.disposable import Disposable

from .actions import action_type, init_action, is_action
from .errors import InvalidActionError, InvalidArgumentError, ReentrantDispatchError
from .reducers import ReducerManager
from .types import Listener, Reducer, StoreEnhancer, Unsubscribe


S = TypeVar("S")

logger = logging.getLogger(__name__)


class Store(Generic[S]):
    """
    狀態容器，管理應用狀態並通知訂閱者狀態變更。

    建立時會立即 dispatch 一次初始化 action，讓 reducer 產生初始狀態。
    """

    def __init__(self, reducer: Reducer, preloaded_state: Optional[S] = None):
        """
        Args:
            reducer: 根 reducer，(state, action) -> state
            preloaded_state: 可選的預載狀態

        Raises:
            InvalidArgumentError: reducer 不可調用
        """
        if not callable(reducer):
            raise InvalidArgumentError(
                "Expected the reducer to be a function.", argument="reducer", value=reducer
            )

        self._current_reducer = reducer
        self._state = preloaded_state
        # 通知時使用 _current_listeners 的快照，訂閱變更寫入 _next_listeners
        self._current_listeners: List[Listener] = []
        self._next_listeners = self._current_listeners
        self._is_dispatching = False
        # 中介軟體會覆蓋實例上的 dispatch，內部流程一律走原始 dispatch
        self._raw_dispatch = self._dispatch_core

        self._dispatch_core(init_action())

    def _ensure_can_mutate_next_listeners(self) -> None:
        if self._next_listeners is self._current_listeners:
            self._next_listeners = list(self._current_listeners)

    def get_state(self) -> S:
        """
        獲取最近一次完成的 dispatch 所產生的狀態。

        Returns:
            當前狀態。
        """
        return self._state

    @property
    def state(self) -> S:
        """當前狀態的快照，等同 get_state()。"""
        return self._state

    def subscribe(self, listener: Listener) -> Unsubscribe:
        """
        註冊一個在每次 dispatch 完成後被調用的監聽函數。

        通知過程中的訂閱與取消訂閱不影響進行中的通知，只影響之後的 dispatch。

        Args:
            listener: 無參數的回調函數

        Returns:
            取消訂閱的函數，重複調用不會出錯

        Raises:
            InvalidArgumentError: listener 不可調用
        """
        if not callable(listener):
            raise InvalidArgumentError(
                "Expected the listener to be a function.", argument="listener", value=listener
            )

        is_subscribed = True
        self._ensure_can_mutate_next_listeners()
        self._next_listeners.append(listener)

        def unsubscribe() -> None:
            nonlocal is_subscribed
            if not is_subscribed:
                return
            is_subscribed = False

            self._ensure_can_mutate_next_listeners()
            self._next_listeners.remove(listener)

        return unsubscribe

    def _dispatch_core(self, action: Any) -> Any:
        """
        核心的 dispatch 方法：執行 reducer、更新狀態並通知訂閱者。

        Args:
            action: 要分發的 Action。

        Returns:
            傳入的 Action。
        """
        if not is_action(action):
            raise InvalidActionError(
                "Actions must be Action instances or mappings. "
                "Use custom middleware for async actions.",
                action=action,
            )
        if action_type(action) is None:
            raise InvalidActionError(
                'Actions may not have a None "type" property. '
                "Have you misspelled a constant?",
                action=action,
            )
        if self._is_dispatching:
            logger.debug("Rejected nested dispatch of %r while reducing", action_type(action))
            raise ReentrantDispatchError(action_type=action_type(action))

        try:
            self._is_dispatching = True
            next_state = self._current_reducer(self._state, action)
        finally:
            self._is_dispatching = False

        self._state = next_state

        listeners = self._current_listeners = self._next_listeners
        for listener in listeners:
            listener()

        return action

    def dispatch(self, action: Any) -> Any:
        """
        分發一個動作，這是改變狀態的唯一途徑。

        Args:
            action: Action 實例或帶有 "type" 鍵的映射。

        Returns:
            傳入的 Action。

        Raises:
            InvalidActionError: action 不是 Action / 映射，或缺少 type
            ReentrantDispatchError: reducer 執行期間再次 dispatch
        """
        return self._dispatch_core(action)

    def replace_reducer(self, next_reducer: Reducer) -> None:
        """
        替換當前的 reducer，並立即 dispatch 初始化 action 讓新的子狀態取得初始值。

        Args:
            next_reducer: 新的根 reducer

        Raises:
            InvalidArgumentError: next_reducer 不可調用
        """
        if not callable(next_reducer):
            raise InvalidArgumentError(
                "Expected the next_reducer to be a function.",
                argument="next_reducer",
                value=next_reducer,
            )

        self._current_reducer = next_reducer
        logger.debug("Reducer replaced with %r", next_reducer)
        self._raw_dispatch(init_action())

    def observable(self) -> Observable:
        """
        以推送方式觀察狀態：訂閱時立即發送當前狀態，之後每次 dispatch 完成再發送一次。

        Returns:
            發送完整狀態的 Observable，dispose 時自動取消訂閱。
        """
        def on_subscribe(observer, scheduler=None):
            def observe_state() -> None:
                observer.on_next(self.get_state())

            observe_state()
            return Disposable(self.subscribe(observe_state))

        return create(on_subscribe)

    def select(self, selector: Optional[Callable[[S], Any]] = None) -> Observable:
        """
        選擇狀態的一部分進行觀察。

        Args:
            selector: 一個函數，接收整個狀態並返回希望觀察的部分。

        Returns:
            一個可觀察對象，選定的值換成另一個物件（以 is 比較）時才發送。
        """
        if selector is None:
            return self.observable()

        return self.observable().pipe(
            ops.map(selector),
            ops.distinct_until_changed(comparer=lambda previous, current: previous is current),
        )

    def _require_reducer_manager(self) -> ReducerManager:
        if not isinstance(self._current_reducer, ReducerManager):
            raise InvalidArgumentError(
                "Feature registration requires a store created with a ReducerManager.",
                argument="reducer",
                value=self._current_reducer,
            )
        return self._current_reducer

    def register_feature(self, feature_key: str, reducer: Reducer) -> "Store[S]":
        """
        註冊一個特性模組的 reducer，並讓其狀態立即初始化。

        Args:
            feature_key: 特性模組的鍵名。
            reducer: 特性模組的 reducer。
        """
        manager = self._require_reducer_manager()
        manager.add_reducer(feature_key, reducer)
        self.replace_reducer(manager)
        return self

    def unregister_feature(self, feature_key: str) -> "Store[S]":
        """
        卸載一個特性模組的 reducer，並從狀態中移除其子狀態。

        Args:
            feature_key: 特性模組的鍵名。
        """
        manager = self._require_reducer_manager()
        manager.remove_reducer(feature_key)
        self.replace_reducer(manager)
        return self


def create_store(
    reducer: Reducer,
    preloaded_state: Any = None,
    enhancer: Optional[StoreEnhancer] = None,
) -> Store[Any]:
    """
    創建一個新的 Store 實例。

    create_store(reducer, enhancer) 的寫法也被接受：preloaded_state 是函數且
    未提供 enhancer 時，會被當作 enhancer。

    Args:
        reducer: 根 reducer
        preloaded_state: 可選的預載狀態
        enhancer: 可選的 store 增強函數，例如 apply_middleware(...) 的結果

    Returns:
        Store: 新創建的 Store 實例。

    Raises:
        InvalidArgumentError: reducer 或 enhancer 不可調用
    """
    if callable(preloaded_state) and enhancer is None:
        enhancer = preloaded_state
        preloaded_state = None

    if enhancer is not None:
        if not callable(enhancer):
            raise InvalidArgumentError(
                "Expected the enhancer to be a function.", argument="enhancer", value=enhancer
            )
        return enhancer(create_store)(reducer, preloaded_state)

    return Store(reducer, preloaded_state)
