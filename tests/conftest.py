from __future__ import annotations

import pytest

from tests.mocks.telegram import RecordingTransport


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()
