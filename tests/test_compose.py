from __future__ import annotations

from pyreducex import compose


def test_compose_without_functions_is_identity() -> None:
    identity = compose()
    marker = object()

    assert identity(marker) is marker


def test_compose_single_function_is_returned_unchanged() -> None:
    def double(x: int) -> int:
        return x * 2

    assert compose(double) is double


def test_compose_applies_right_to_left() -> None:
    composed = compose(lambda s: s + "f", lambda s: s + "g", lambda s: s + "h")

    assert composed("x") == "xhgf"


def test_rightmost_function_receives_all_arguments() -> None:
    composed = compose(lambda total: total * 10, lambda a, b, scale=1: (a + b) * scale)

    assert composed(1, 2, scale=3) == 90
