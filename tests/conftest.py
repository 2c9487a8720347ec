"""
Core pytest configuration and fixtures for Quanta testing.

This module provides shared test fixtures, configuration, and utilities
for the store, renderer, engine and reply client tests.
"""

from typing import Dict, List, Optional
from unittest.mock import MagicMock

import pytest
from quanta.config import Settings
from quanta.engine import Engine
from quanta.errors import ReplyGenerationError
from quanta.models import ASSISTANT_ROLE, USER_ROLE, ChatMessage
from quanta.reply import Reply
from quanta.store import InMemory

# ===== TEST DATA FIXTURES =====


@pytest.fixture
def sample_messages() -> List[ChatMessage]:
    """Sample chat messages for testing."""
    return [
        ChatMessage(role=USER_ROLE, content="Hello, how are you?"),
        ChatMessage(
            role=ASSISTANT_ROLE,
            content="I'm doing **well**, thank you! How can I help you today?",
        ),
        ChatMessage(role=USER_ROLE, content="Can you explain quantum computing?"),
        ChatMessage(
            role=ASSISTANT_ROLE,
            content="Quantum computing uses:\n- qubits\n- superposition",
        ),
    ]


# ===== REPLY FIXTURES =====


class StubReply(Reply):
    """Reply generator returning canned answers, or failing on demand."""

    def __init__(self, answer: str = "Stub reply", error: Optional[str] = None):
        self.answer = answer
        self.error = error
        self.prompts: List[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise ReplyGenerationError(self.error)
        return self.answer


@pytest.fixture
def stub_reply() -> StubReply:
    return StubReply()


@pytest.fixture
def failing_reply() -> StubReply:
    return StubReply(error="Network unreachable")


# ===== STORE FIXTURES =====


@pytest.fixture
def slots() -> Dict[str, str]:
    """Shared storage slots, like a browser's localStorage."""
    return {}


@pytest.fixture
def memory_store(slots) -> InMemory:
    return InMemory(slots=slots)


# ===== ENGINE FIXTURES =====


@pytest.fixture
def engine(memory_store, stub_reply) -> Engine:
    """A started engine with pacing disabled."""
    engine = Engine(memory_store, stub_reply, pacing=False)
    engine.start()
    return engine


# ===== MOCK FIXTURES =====


@pytest.fixture
def mock_llm():
    """Mock LLM provider for testing."""
    mock = MagicMock()
    mock.build_messages.side_effect = lambda prompt: [
        {"role": "user", "content": prompt}
    ]
    mock.generate_response.return_value = {
        "choices": [{"message": {"content": "Mock LLM response"}}]
    }
    mock.extract_content.return_value = "Mock LLM response"
    return mock


# ===== APP FIXTURES =====


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings isolated from the environment and the working directory."""
    return Settings(
        _env_file=None,
        GROQ_API_KEY=None,
        API_BASE=None,
        STORAGE_DIR=str(tmp_path / "storage"),
        PACING=False,
    )


@pytest.fixture
def test_app(settings, slots):
    """
    Provides a Quanta app instance with simple, predictable pillars.

    This fixture is ideal for integration tests where we need a running app
    but want to avoid external dependencies like filesystems or actual LLM APIs.
    """
    from quanta import Quanta
    from quanta.llm import Echo

    app = Quanta(llm=Echo(), store=InMemory(slots=slots), settings=settings)
    yield app
    app.runner.stop()


# ===== CONFIGURATION =====


def pytest_configure(config):
    """Pytest configuration."""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on location."""
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
