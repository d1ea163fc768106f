"""
PyReduceX 的執行期配置。

配置值預設從環境變數讀取：
    PYREDUCEX_ENV=production        關閉開發模式的提示訊息
    PYREDUCEX_STRICT_REDUCERS=1     combine_reducers 遇到不可調用的 reducer 時直接拋錯
"""
import os
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

_TRUTHY = {"1", "true", "yes", "y", "on"}


def _env_bool(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in _TRUTHY


class StoreConfig(BaseModel):
    """
    store 相關的全域配置。

    Attributes:
        dev_mode: 是否輸出開發模式的提示（未知狀態鍵、缺少 reducer 等）
        strict_reducer_map: combine_reducers 是否拒絕不可調用的 reducer，
            False 時只會略過該項
    """
    model_config = ConfigDict(frozen=True)

    dev_mode: bool = True
    strict_reducer_map: bool = False

    @classmethod
    def from_env(cls) -> "StoreConfig":
        """從環境變數建立配置。"""
        return cls(
            dev_mode=os.environ.get("PYREDUCEX_ENV", "development").strip().lower() != "production",
            strict_reducer_map=_env_bool(os.environ.get("PYREDUCEX_STRICT_REDUCERS"), False),
        )


_config: Optional[StoreConfig] = None


def get_config() -> StoreConfig:
    """
    獲取目前的配置（延遲初始化）。

    Returns:
        StoreConfig 實例
    """
    global _config
    if _config is None:
        _config = StoreConfig.from_env()
    return _config


def configure(**overrides: Any) -> StoreConfig:
    """
    以覆蓋值更新全域配置，未指定的欄位沿用目前設定。

    Args:
        **overrides: StoreConfig 的欄位

    Returns:
        新的 StoreConfig 實例
    """
    global _config
    _config = StoreConfig(**{**get_config().model_dump(), **overrides})
    return _config


def reset_config() -> None:
    """重置配置，下次讀取時重新從環境變數載入（用於測試隔離）。"""
    global _config
    _config = None
