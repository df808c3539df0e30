"""
Global fixtures for all unit tests.

This conftest provides autouse fixtures that prevent real external service calls:
- MongoDB connection attempts (would cause 5-30s timeout per test)
- Environment and Config isolation (prevents credential leakage)

These fixtures apply automatically to ALL tests in tests/unit/.
"""

import os
import pytest
from unittest.mock import patch, MagicMock

# Set test environment BEFORE any imports to prevent Config from loading real values
os.environ["ENVIRONMENT"] = "development"

from src.common.config import Config  # noqa: E402
from src.common.match_config import MatchSettings  # noqa: E402
from tests.helpers.fakes import (  # noqa: E402
    FakeCandidateStore,
    FakeChatLLM,
    FakeEmbeddings,
)


@pytest.fixture(autouse=True)
def mock_mongodb():
    """
    Prevent MongoDB connection attempts in all unit tests.

    MongoClient defaults to localhost:27017, causing 5-30s timeout per test.
    """
    with patch("pymongo.MongoClient") as mock_client:
        mock_instance = MagicMock()
        mock_db = MagicMock()
        mock_collection = MagicMock()

        # Setup chain: client["db"]["collection"]
        mock_instance.__getitem__ = MagicMock(return_value=mock_db)
        mock_db.__getitem__ = MagicMock(return_value=mock_collection)
        mock_collection.find_one = MagicMock(return_value=None)
        mock_collection.find = MagicMock(return_value=[])

        mock_client.return_value = mock_instance
        yield mock_client


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """
    Isolate test environment from real credentials and configurations.

    Config reads the environment at import time, so its class attributes are
    patched directly as well.
    """
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test-mock-key")
    monkeypatch.delenv("AZURE_OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("AZURE_OPENAI_ENDPOINT", raising=False)

    monkeypatch.setattr(Config, "OPENAI_API_KEY", "sk-test-mock-key")
    monkeypatch.setattr(Config, "AZURE_OPENAI_API_KEY", "")
    monkeypatch.setattr(Config, "AZURE_OPENAI_ENDPOINT", "")


# ===== SHARED FIXTURES =====


@pytest.fixture
def fast_settings():
    """Default tunables without the pause between embedding groups."""
    return MatchSettings(group_pause_seconds=0.0)


@pytest.fixture
def fake_embeddings():
    return FakeEmbeddings()


@pytest.fixture
def fake_llm():
    return FakeChatLLM()


@pytest.fixture
def empty_store():
    return FakeCandidateStore()
