from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from wa_relay.config import get_settings
from wa_relay.main import app

from payloads import SentMessages

ENV_VARS = (
    "VERIFY_TOKEN",
    "WHATSAPP_TOKEN",
    "PHONE_NUMBER_ID",
    "PORT",
    "HOST",
    "GRAPH_API_BASE_URL",
    "GRAPH_API_VERSION",
    "WHATSAPP_TIMEOUT_SECONDS",
    "REPLY_TEXT",
    "LOG_LEVEL",
    "LOG_FORMAT",
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Start every test from an empty environment and a fresh settings cache."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # A developer's local .env must not leak into tests
    monkeypatch.setattr("wa_relay.config.load_dotenv", lambda *args, **kwargs: False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def restore_root_logger() -> Iterator[None]:
    """The app's lifespan reconfigures the root logger; put it back afterwards."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


@pytest.fixture
def configured_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VERIFY_TOKEN", "verify-secret")
    monkeypatch.setenv("WHATSAPP_TOKEN", "graph-token")
    monkeypatch.setenv("PHONE_NUMBER_ID", "1234567890")
    monkeypatch.setenv("REPLY_TEXT", "Thanks! We got your message.")


@pytest.fixture
def sent(monkeypatch: pytest.MonkeyPatch) -> SentMessages:
    recorder = SentMessages()
    monkeypatch.setattr("wa_relay.main.send_whatsapp_text", recorder)
    return recorder


@pytest.fixture
def client(configured_env: None) -> TestClient:
    # No `with`: the lifespan hook is exercised separately in test_startup.py
    return TestClient(app)
