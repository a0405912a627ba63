"""Test configuration for pytest."""

import shutil
import tempfile
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from snapshell.config import LLMProvider, SnapshellConfig
from snapshell.llm_handler import LLMResponse


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path)


@pytest.fixture
def sample_config(temp_dir):
    """Create a sample configuration for testing."""
    config = SnapshellConfig(
        llm_provider=LLMProvider.OPENROUTER,
        openrouter_api_key="test-key-123",
        openrouter_model="openai/gpt-oss-20b",
        openai_api_key="test-key-openai",
        history_enabled=True,
        history_file=temp_dir / "history" / "history.jsonl",
        copy_to_clipboard=False,
        show_debug=False,
    )
    return config


@pytest.fixture
def mock_handler():
    """Create a mock model client that replies with queued completions."""
    handler = MagicMock()
    handler.complete = AsyncMock(
        return_value=LLMResponse(content="echo test", model="test-model")
    )
    return handler


@pytest.fixture
def mock_presenter():
    """Create a presenter double that records every call."""
    return MagicMock()


@pytest.fixture(autouse=True)
def setup_test_environment(temp_dir, monkeypatch):
    """Isolate HOME and snapshell environment variables for every test."""
    import os

    home = temp_dir / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))

    for key in list(os.environ):
        if key.startswith("SNAPSHELL_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    # Test API key
    monkeypatch.setenv("SNAPSHELL_OPENROUTER_API_KEY", "test-key-openrouter")

    yield
