from __future__ import annotations

from collections.abc import Generator

import pytest

from fanout_relay.infrastructure.observability.tracing import reset_tracing_state


@pytest.fixture(autouse=True)
def reset_tracing() -> Generator[None, None, None]:
    reset_tracing_state()
    yield
    reset_tracing_state()
