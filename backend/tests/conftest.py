"""
Shared test fixtures and configuration.
"""

import os
import tempfile

import pytest
from unittest.mock import AsyncMock

# Set test environment variables before importing app modules
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("LOCAL_STORAGE_PATH", tempfile.mkdtemp(prefix="chatrelay_test_"))
os.environ["LLM_API_KEY"] = ""
os.environ["GEMINI_API_KEY"] = ""
os.environ["APP_URL"] = "https://chat.example.com"
os.environ["LOG_FILE_ENABLED"] = "false"
os.environ["LOG_CONSOLE_ENABLED"] = "false"

from chatrelay.core.message_relay import MessageRelay  # noqa: E402
from chatrelay.core.session_manager import SessionManager  # noqa: E402
from chatrelay.llm import GenerationClient, LLMProvider  # noqa: E402
from chatrelay.storage import LocalStorage, SessionRepository  # noqa: E402


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(str(tmp_path / "data"))


@pytest.fixture
def repository(storage):
    return SessionRepository(storage)


@pytest.fixture
def manager(repository):
    return SessionManager(repository, public_base_url="https://chat.example.com")


@pytest.fixture
def echo_relay(manager):
    """Relay without a provider credential (local echo replies)."""
    return MessageRelay(manager, GenerationClient(None))


@pytest.fixture
def mock_provider():
    return AsyncMock(spec=LLMProvider)


@pytest.fixture
def provider_relay(manager, mock_provider):
    """Relay whose provider outcome is set per test via mock_provider."""
    return MessageRelay(manager, GenerationClient(mock_provider))
