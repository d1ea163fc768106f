"""
基於 PyReduceX 的中介軟體定義模組。

apply_middleware 把一串中介軟體包裹在 store 的 dispatch 外層，
每個中介軟體都可以檢查、改寫、攔截 action，或把它交給下一層。

中介軟體的形狀是 (store_api) -> (next) -> (action) -> result，
可以是普通函數，也可以是實作 __call__ 的物件（例如 BaseMiddleware 的子類）。
"""

import contextlib
import datetime
import inspect
import logging
from typing import Any, Generator, List, Optional

from .actions import action_type
from .compose import compose
from .types import (
    ActionContext, DispatchFunction, GetState, MiddlewareFunction, NextDispatch,
    StoreCreator, StoreEnhancer, ThunkFunction, MiddlewareAPI as MiddlewareAPIProtocol
)

logger = logging.getLogger(__name__)


class MiddlewareAPI:
    """
    傳給每個中介軟體的 store 介面。

    dispatch 透過一個可替換的插槽延遲綁定：中介軟體在建立時就拿到這個物件，
    但實際調用的是組合完成後安裝的 dispatch，因此可以從頭重新進入整條中介軟體鏈。
    """
    __slots__ = ("_get_state", "_dispatch")

    def __init__(self, get_state: GetState, dispatch: DispatchFunction):
        self._get_state = get_state
        self._dispatch = dispatch

    def get_state(self) -> Any:
        return self._get_state()

    @property
    def state(self) -> Any:
        return self._get_state()

    def dispatch(self, action: Any) -> Any:
        return self._dispatch(action)

    def install_dispatch(self, dispatch: DispatchFunction) -> None:
        """安裝組合後的 dispatch，之後的 dispatch 調用都會經過它。"""
        self._dispatch = dispatch


def _compose_chain(chain: List[MiddlewareFunction], raw_dispatch: DispatchFunction) -> DispatchFunction:
    if all(callable(link) for link in chain):
        return compose(*chain)(raw_dispatch)

    # 有中介軟體沒有返回可調用物件時，錯誤留到第一次 dispatch 才拋出
    logger.debug("Middleware chain contains a non-callable link; dispatch will fail when called")

    def broken_dispatch(action: Any) -> Any:
        return compose(*chain)(raw_dispatch)(action)

    return broken_dispatch


def apply_middleware(*middlewares: Any) -> StoreEnhancer:
    """
    建立一個把中介軟體安裝到 store 上的 enhancer。

    Args:
        *middlewares: 依註冊順序排列的中介軟體，可以是函數、實例或無參數可建構的類

    Returns:
        可傳給 create_store 的 enhancer

    範例:
        >>> store = create_store(reducer, apply_middleware(thunk, LoggerMiddleware))
    """
    def enhancer(create_store: StoreCreator) -> StoreCreator:
        def enhanced_create_store(reducer, preloaded_state=None, *args):
            store = create_store(reducer, preloaded_state, *args)
            raw_dispatch = store.dispatch

            # 接受類和實例，如果是類則直接實例化
            instances = [m() if inspect.isclass(m) else m for m in middlewares]

            store_api = MiddlewareAPI(store.get_state, raw_dispatch)
            chain = [middleware(store_api) for middleware in instances]
            dispatch = _compose_chain(chain, raw_dispatch)
            store_api.install_dispatch(dispatch)

            store.dispatch = dispatch
            return store

        return enhanced_create_store

    return enhancer


# ———— Base Middleware ————
class BaseMiddleware:
    """
    基礎中介類，定義所有中介可能實現的鉤子。

    中介軟體可以介入動作分發的流程，在動作到達 Reducer 前、
    動作處理完成後或出現錯誤時執行自定義邏輯。
    """

    def __call__(self, store: MiddlewareAPIProtocol) -> MiddlewareFunction:
        """
        配置中介軟體。

        Args:
            store: 中介軟體的 store 介面

        Returns:
            配置函數，接收 next_dispatch 並返回新的 dispatch 函數
        """
        def middleware(next_dispatch: NextDispatch) -> DispatchFunction:
            def dispatch(action: Any) -> Any:
                with self.action_context(action, store.get_state()) as context:
                    result = next_dispatch(action)
                    context['result'] = result
                    context['next_state'] = store.get_state()
                    return result
            return dispatch
        return middleware

    def on_next(self, action: Any, prev_state: Any) -> None:
        """
        在 action 發送給 reducer 之前調用。

        Args:
            action: 正在 dispatch 的 Action
            prev_state: dispatch 之前的狀態
        """
        pass

    def on_complete(self, next_state: Any, action: Any) -> None:
        """
        在 reducer 處理完 action 之後調用。

        Args:
            next_state: dispatch 之後的最新狀態
            action: 剛剛 dispatch 的 Action
        """
        pass

    def on_error(self, error: Exception, action: Any) -> None:
        """
        如果 dispatch 過程中拋出異常，則調用此鉤子。

        Args:
            error: 拋出的異常
            action: 導致異常的 Action
        """
        pass

    @contextlib.contextmanager
    def action_context(self, action: Any, prev_state: Any) -> Generator[ActionContext, None, None]:
        """
        提供一個上下文管理器來處理 action 分發的生命週期。

        子類可以覆蓋此方法，但應負責呼叫適當的 hook 方法。

        Args:
            action: 要分發的 Action
            prev_state: 分發前的狀態

        Yields:
            包含上下文數據的字典，可用於在上下文內部與外部之間傳遞數據
        """
        context: ActionContext = {
            'action': action,
            'prev_state': prev_state,
            'next_state': None,
            'result': None,
            'error': None,
            'started_at': datetime.datetime.now(),
        }

        self.on_next(action, prev_state)

        try:
            yield context
            self.on_complete(context['next_state'], action)
        except Exception as err:
            context['error'] = err
            self.on_error(err, action)
            raise


# ———— LoggerMiddleware ————
class LoggerMiddleware(BaseMiddleware):
    """
    日誌中介，記錄每個 action 發送前和發送後的 state。

    使用場景:
    - 偵錯時需要觀察每次 state 的變化。
    - 確保 action 的執行順序正確。
    """
    def __init__(self, logger: Optional[logging.Logger] = None, level: int = logging.INFO):
        self.logger = logger or logging.getLogger(__name__)
        self.level = level

    def on_next(self, action: Any, prev_state: Any) -> None:
        self.logger.log(self.level, "dispatching %s", action_type(action))
        self.logger.log(self.level, "state before %s: %r", action_type(action), prev_state)

    @contextlib.contextmanager
    def action_context(self, action: Any, prev_state: Any) -> Generator[ActionContext, None, None]:
        # 計時存放在每次 dispatch 自己的上下文中，巢狀 dispatch 不會互相覆蓋
        with super().action_context(action, prev_state) as context:
            yield context
        elapsed_ms = (datetime.datetime.now() - context['started_at']).total_seconds() * 1000
        self.logger.log(
            self.level, "state after %s (%.2fms): %r", action_type(action), elapsed_ms, context['next_state']
        )

    def on_error(self, error: Exception, action: Any) -> None:
        self.logger.error("error in %s: %s", action_type(action), error)


# ———— ThunkMiddleware ————
class ThunkMiddleware:
    """
    支援 dispatch 函數 (thunk)，可以在 thunk 內執行非同步邏輯或多次 dispatch。

    thunk 以 (dispatch, get_state, extra_argument) 調用，
    其中 dispatch 會重新進入整條中介軟體鏈。

    範例:
        ```python
        def fetch_user(user_id):
            def thunk(dispatch, get_state, api):
                dispatch(request_user(user_id))
                try:
                    dispatch(request_user_success(api.fetch_user(user_id)))
                except ApiError as e:
                    dispatch(request_user_failure(str(e)))
            return thunk

        store = create_store(reducer, apply_middleware(ThunkMiddleware.with_extra_argument(api)))
        store.dispatch(fetch_user("user123"))
        ```
    """
    def __init__(self, extra_argument: Any = None):
        self.extra_argument = extra_argument

    @classmethod
    def with_extra_argument(cls, extra_argument: Any) -> "ThunkMiddleware":
        """建立一個會把 extra_argument 傳給每個 thunk 的中介軟體。"""
        return cls(extra_argument)

    def __call__(self, store: MiddlewareAPIProtocol) -> MiddlewareFunction:
        def middleware(next_dispatch: NextDispatch) -> DispatchFunction:
            def dispatch(action: Any) -> Any:
                if callable(action):
                    thunk_fn: ThunkFunction = action
                    return thunk_fn(store.dispatch, store.get_state, self.extra_argument)
                return next_dispatch(action)
            return dispatch
        return middleware


def create_thunk_middleware(extra_argument: Any = None) -> ThunkMiddleware:
    """
    創建 thunk 中介軟體。

    Args:
        extra_argument: 傳給每個 thunk 的第三個參數

    Returns:
        ThunkMiddleware 實例
    """
    return ThunkMiddleware(extra_argument)


thunk = create_thunk_middleware()
