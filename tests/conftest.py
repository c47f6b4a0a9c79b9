"""Root test configuration: isolated settings and loguru capture"""

import pytest
from loguru import logger

from mdenrich.config import Settings


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Keep MDENRICH_* variables from the developer's shell out of every test."""
    for name in Settings.model_fields:
        monkeypatch.delenv(f"MDENRICH_{name.upper()}", raising=False)


@pytest.fixture(name="log_messages")
def log_messages_fixture():
    """Collect loguru messages at WARNING and above for the duration of a test."""
    messages: list[str] = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="WARNING")
    yield messages
    logger.remove(handler_id)
