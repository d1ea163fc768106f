"""
基於 PyReduceX 的 Action 定義模組。

此模組提供 Action 類別、創建 Action 的功能，以及 store 內部保留的 action 類型。
Actions 是描述狀態變更意圖的不可變對象，可以是 Action 實例，
也可以是帶有 "type" 鍵的映射（例如 {"type": "INC", "amount": 2}）。
"""
import random
import string
from collections import OrderedDict
from typing import Any, Callable, Dict, Generic, Iterator, Mapping, Optional, Tuple, Union, overload

from immutables import Map as ImmutableMap

from .errors import InvalidArgumentError
from .types import (
    P, ActionCreator, ActionCreatorWithoutPayload, ActionCreatorWithPayload, DispatchFunction
)


class Action(Mapping[str, Any], Generic[P]):
    """
    表示一個有類型和可選負載的動作。

    同時是唯讀映射，鍵為 "type" 與 "payload"，因此以 action["type"] 或
    action.get("type") 讀取的 reducer 也能處理 store 內部發送的 action。

    泛型參數:
        P: 負載的類型

    屬性:
        type: 動作的類型（字串或其他可作為判別值的物件）
        payload: 動作的負載數據（可選）
    """
    __slots__ = ('type', 'payload')

    _keys = ('type', 'payload')

    def __init__(self, type: Any, payload: Optional[P] = None):
        super().__setattr__('type', type)
        super().__setattr__('payload', payload)

    def __setattr__(self, name, value):
        if name not in self.__slots__:
            raise AttributeError(f"'{type(self).__name__}' object has no attribute '{name}'")
        if hasattr(self, name):
            raise AttributeError(f"Cannot modify immutable instance attribute '{name}'")
        super().__setattr__(name, value)

    def __getitem__(self, key: str) -> Any:
        if key not in self._keys:
            raise KeyError(key)
        return getattr(self, key)

    def __iter__(self) -> Iterator[str]:
        return iter(self._keys)

    def __len__(self) -> int:
        return len(self._keys)

    def __eq__(self, other):
        if not isinstance(other, Action):
            return False
        return self.type == other.type and self.payload == other.payload

    def __hash__(self):
        return hash((self.type, self.payload))

    def __repr__(self):
        return f"Action(type={self.type!r}, payload={self.payload!r})"


class ActionTypes:
    """
    store 內部保留的 action 類型，使用者的 reducer 不應處理這些類型。

    遇到這些類型時，reducer 應走預設分支並返回現有或初始狀態。
    """
    PREFIX = "@@pyreducex/"
    INIT = "@@pyreducex/INIT"
    PROBE_UNKNOWN_ACTION = "@@pyreducex/PROBE_UNKNOWN_ACTION"

    @classmethod
    def probe_unknown_action(cls) -> str:
        """
        生成一個無法預測的 action 類型，用於檢查 reducer 是否對未知類型返回狀態。

        Returns:
            隨機的 action 類型字串
        """
        suffix = "".join(random.choice(string.ascii_lowercase + string.digits) for _ in range(6))
        return f"{cls.PROBE_UNKNOWN_ACTION}_{'.'.join(suffix)}"


class ActionPool:
    """
    Action 對象池，用於重用頻繁創建的相同 Action 對象。
    主要針對無負載或簡單負載的 Action 進行池化。

    簡單負載池按最近使用順序保留最多 max_simple_payloads 個 Action，
    超出時淘汰最久未使用的項目。
    """
    max_simple_payloads: int = 1024

    _no_payload_pool: Dict[Any, Action] = {}  # type -> Action (無負載)
    # (type, payload 類型, payload) -> Action，以插入/使用順序排列
    _simple_payload_pool: "OrderedDict[Tuple[Any, type, Any], Action]" = OrderedDict()

    @classmethod
    def get(cls, action_type: Any, payload: Any = None) -> Action:
        """
        從池中獲取 Action 對象，如不存在則創建並加入池中。

        Args:
            action_type: Action 的類型
            payload: Action 的負載，默認為 None

        Returns:
            Action 對象
        """
        # 無負載 Action 池化
        if payload is None:
            if action_type not in cls._no_payload_pool:
                cls._no_payload_pool[action_type] = Action(action_type, None)
            return cls._no_payload_pool[action_type]

        # 簡單負載 Action 池化 (僅支持可哈希的基本類型)，以負載類型區分 1 與 True
        if isinstance(payload, (int, str, bool, float, frozenset)):
            key = (action_type, type(payload), payload)
            pooled = cls._simple_payload_pool.get(key)
            if pooled is not None:
                cls._simple_payload_pool.move_to_end(key)
                return pooled

            pooled = cls._simple_payload_pool[key] = Action(action_type, payload)
            while len(cls._simple_payload_pool) > cls.max_simple_payloads:
                cls._simple_payload_pool.popitem(last=False)
            return pooled

        # 複雜負載不池化，直接創建新對象
        return Action(action_type, payload)

    @classmethod
    def clear(cls) -> None:
        """清空對象池。"""
        cls._no_payload_pool.clear()
        cls._simple_payload_pool.clear()


def _process_payload(payload: Any) -> Any:
    """
    處理 payload，將字典轉換為不可變的 immutables.Map。

    Args:
        payload: 原始 payload

    Returns:
        處理後的 payload
    """
    if isinstance(payload, dict):
        return ImmutableMap(payload)
    return payload


@overload
def create_action(action_type: str) -> ActionCreatorWithoutPayload:
    ...


@overload
def create_action(action_type: str, prepare_fn: Callable[..., P]) -> ActionCreatorWithPayload[P]:
    ...


def create_action(action_type: str, prepare_fn: Optional[Callable[..., Any]] = None) -> ActionCreator[Any]:
    """
    創建一個 Action 生成器函數。

    Args:
        action_type: Action 的類型標識符
        prepare_fn: 可選的預處理函數，用於在創建 Action 前處理輸入參數

    Returns:
        一個可調用的函數，用於生成指定類型的 Action

    範例:
        >>> increment = create_action("[Counter] Increment")
        >>> increment()  # 返回 Action(type="[Counter] Increment", payload=None)
        >>>
        >>> add = create_action("[Counter] Add", lambda amount: amount)
        >>> add(5)  # 返回 Action(type="[Counter] Add", payload=5)
    """
    def action_creator(*args: Any, **kwargs: Any) -> Action[Any]:
        if prepare_fn:
            payload = _process_payload(prepare_fn(*args, **kwargs))
            return ActionPool.get(action_type, payload)
        elif len(args) == 1 and not kwargs:
            return ActionPool.get(action_type, _process_payload(args[0]))
        elif args or kwargs:
            payload: Dict[Union[int, str], Any] = dict(zip(range(len(args)), args))
            payload.update(kwargs)
            return ActionPool.get(action_type, _process_payload(payload))

        # 無參數，無負載
        return ActionPool.get(action_type)

    # 添加 type 屬性以便於識別
    action_creator.type = action_type  # type: ignore

    return action_creator


def is_action(value: Any) -> bool:
    """
    判斷一個值是否可以作為 action 被 dispatch。

    Args:
        value: 要檢查的值

    Returns:
        是 Action 實例或映射時為 True
    """
    return isinstance(value, (Action, Mapping))


def action_type(action: Any) -> Any:
    """
    讀取 action 的判別值。

    Args:
        action: Action 實例或帶有 "type" 鍵的映射

    Returns:
        action 的類型，不存在時為 None
    """
    if isinstance(action, Action):
        return action.type
    if isinstance(action, Mapping):
        return action.get("type")
    return getattr(action, "type", None)


def init_action() -> Action[None]:
    """返回 store 初始化時 dispatch 的保留 action。"""
    return ActionPool.get(ActionTypes.INIT)


def _bind_action_creator(action_creator: Callable[..., Any], dispatch: DispatchFunction) -> Callable[..., Any]:
    def bound_action_creator(*args: Any, **kwargs: Any) -> Any:
        return dispatch(action_creator(*args, **kwargs))

    bound_action_creator.__name__ = getattr(action_creator, "__name__", "bound_action_creator")
    if hasattr(action_creator, "type"):
        bound_action_creator.type = action_creator.type  # type: ignore
    return bound_action_creator


def bind_action_creators(
    action_creators: Union[Callable[..., Any], Mapping[str, Any]],
    dispatch: DispatchFunction,
) -> Union[Callable[..., Any], Dict[str, Callable[..., Any]]]:
    """
    讓 action creator 在被調用時自動 dispatch 其結果。

    Args:
        action_creators: 單一 action creator，或 名稱 -> action creator 的映射
        dispatch: store 的 dispatch 函數

    Returns:
        與輸入同形狀的綁定版本；映射中不可調用的值會被略過

    Raises:
        InvalidArgumentError: 參數既不是函數也不是映射
    """
    if callable(action_creators):
        return _bind_action_creator(action_creators, dispatch)

    if not isinstance(action_creators, Mapping):
        received = "None" if action_creators is None else type(action_creators).__name__
        raise InvalidArgumentError(
            f"bind_action_creators expected a mapping or a function, instead received {received}.",
            argument="action_creators",
            value=action_creators,
        )

    return {
        key: _bind_action_creator(creator, dispatch)
        for key, creator in action_creators.items()
        if callable(creator)
    }
