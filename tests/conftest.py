import os
import sys
import pytest

# Ensure project root is on sys.path for imports like `core.*`
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

# Configure pytest-asyncio
pytest_plugins = ('pytest_asyncio',)

import httpx


class RecordingSleep:
    """Stands in for asyncio.sleep and records requested delays."""

    def __init__(self):
        self.delays = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def mock_client():
    """Factory for an AsyncClient backed by httpx.MockTransport.

    The returned client records every response it hands out in ``client.seen``.
    """
    def factory(handler):
        seen = []

        async def remember(response):
            seen.append(response)

        client = httpx.AsyncClient(
            transport=httpx.MockTransport(handler),
            follow_redirects=True,
            event_hooks={"response": [remember]},
        )
        client.seen = seen
        return client

    return factory
