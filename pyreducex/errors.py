"""
PyReduceX 錯誤處理模組。

定義所有 store 操作可能拋出的異常，以及開發模式下的警告輸出。
所有異常都同步拋給觸發該操作的呼叫者，引擎本身不做重試。
"""
import logging
import traceback
from typing import Any, Dict, Optional

from .config import get_config

logger = logging.getLogger("pyreducex")


class PyReduceXError(Exception):
    """所有 PyReduceX 異常的基礎類。"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.traceback = traceback.format_exc()

    def to_dict(self) -> Dict[str, Any]:
        """
        將異常轉換為可序列化的字典。

        Returns:
            包含錯誤類型、訊息與細節的字典
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": dict(self.details),
        }

    def __str__(self) -> str:
        return self.message


class InvalidArgumentError(PyReduceXError, TypeError):
    """公開入口收到違反契約的參數（例如 reducer 不可調用）。"""

    def __init__(self, message: str, argument: str, value: Any = None, **kwargs: Any) -> None:
        details = {"argument": argument, "received": type(value).__name__, **kwargs}
        super().__init__(message, details)


class InvalidActionError(PyReduceXError, TypeError):
    """dispatch 的 action 不是 Action / 映射，或缺少 type。"""

    def __init__(self, message: str, action: Any = None, **kwargs: Any) -> None:
        details = {"received": type(action).__name__, **kwargs}
        super().__init__(message, details)


class ReentrantDispatchError(PyReduceXError):
    """reducer 執行期間再次呼叫 dispatch。"""

    def __init__(self, message: str = "Reducers may not dispatch actions.", action_type: Any = None, **kwargs: Any) -> None:
        details = {"action_type": action_type, **kwargs}
        super().__init__(message, details)


class ReducerSanityError(PyReduceXError):
    """reducer 在初始化或未知 action 探測時返回 None。"""

    def __init__(self, message: str, reducer_key: str, probe_type: str, **kwargs: Any) -> None:
        details = {"reducer_key": reducer_key, "probe_type": probe_type, **kwargs}
        super().__init__(message, details)


class UndefinedReducerOutputError(PyReduceXError):
    """reducer 在實際 dispatch 中返回 None。"""

    def __init__(self, message: str, reducer_key: str, action_type: Any = None, **kwargs: Any) -> None:
        details = {"reducer_key": reducer_key, "action_type": action_type, **kwargs}
        super().__init__(message, details)


def warning(message: str) -> None:
    """
    輸出開發模式下的提示訊息，只記錄日誌，從不拋出異常。

    Args:
        message: 警告內容
    """
    if not get_config().dev_mode:
        return
    logger.warning(message)
