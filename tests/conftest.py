import pytest


@pytest.fixture
def anyio_backend():
    # The package is built on asyncio primitives (asyncio.Lock, gather, to_thread).
    return "asyncio"
