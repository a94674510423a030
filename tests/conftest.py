from __future__ import annotations

import pytest

from utils.config import ENV_OVERRIDES


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's Discord settings out of the tests."""
    for name in ENV_OVERRIDES:
        monkeypatch.delenv(name, raising=False)
