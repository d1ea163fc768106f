"""
PyReduceX 的共用類型定義模組。

集中定義 reducer、dispatch、middleware 與 action creator 等可調用物件的類型，
供各模組與類型存根共用。
"""
from typing import TYPE_CHECKING, Any, Callable, Dict, Protocol, TypeVar

if TYPE_CHECKING:
    from .actions import Action

P = TypeVar("P")

Reducer = Callable[[Any, Any], Any]
Listener = Callable[[], None]
Unsubscribe = Callable[[], None]
GetState = Callable[[], Any]
DispatchFunction = Callable[[Any], Any]
NextDispatch = DispatchFunction
MiddlewareFunction = Callable[[NextDispatch], DispatchFunction]

# 建立 store 的函數簽名：(reducer, preloaded_state) -> store
StoreCreator = Callable[..., "Store"]
StoreEnhancer = Callable[[StoreCreator], StoreCreator]

# thunk: (dispatch, get_state, extra_argument) -> Any
ThunkFunction = Callable[[DispatchFunction, GetState, Any], Any]

# 中介軟體 action_context 內傳遞的上下文
ActionContext = Dict[str, Any]


class MiddlewareAPI(Protocol):
    """中介軟體在建立時拿到的 store 介面。"""

    def get_state(self) -> Any: ...

    def dispatch(self, action: Any) -> Any: ...


class ActionCreator(Protocol[P]):
    """帶有 type 屬性的 action 生成函數。"""

    type: str

    def __call__(self, *args: Any, **kwargs: Any) -> "Action[P]": ...


ActionCreatorWithoutPayload = ActionCreator[None]
ActionCreatorWithPayload = ActionCreator


class Store(Protocol):
    """Store 對外暴露的最小介面。"""

    def dispatch(self, action: Any) -> Any: ...

    def get_state(self) -> Any: ...

    def subscribe(self, listener: Listener) -> Unsubscribe: ...

    def replace_reducer(self, next_reducer: Reducer) -> None: ...

