from __future__ import annotations

from typing import Iterator

import pytest

from pyreducex import reset_config


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    # Every test starts from the default development config.
    monkeypatch.delenv("PYREDUCEX_ENV", raising=False)
    monkeypatch.delenv("PYREDUCEX_STRICT_REDUCERS", raising=False)
    reset_config()
    yield
    reset_config()
