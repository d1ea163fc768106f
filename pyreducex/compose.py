"""
由右至左的函數組合。
"""
from functools import reduce
from typing import Any, Callable


def compose(*funcs: Callable[..., Any]) -> Callable[..., Any]:
    """
    組合多個單參數函數，compose(f, g, h)(x) 等同 f(g(h(x)))。

    最右邊的函數可以接收任意參數，其餘函數只接收前一個函數的返回值。

    Args:
        *funcs: 要組合的函數

    Returns:
        組合後的函數；沒有函數時返回恆等函數，只有一個時直接返回該函數
    """
    if not funcs:
        return lambda arg: arg

    if len(funcs) == 1:
        return funcs[0]

    *rest, last = funcs

    def composed(*args: Any, **kwargs: Any) -> Any:
        return reduce(lambda result, f: f(result), reversed(rest), last(*args, **kwargs))

    return composed
