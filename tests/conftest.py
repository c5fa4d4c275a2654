# tests/conftest.py

"""Shared pytest fixtures for all harvester tests."""

from collections.abc import Generator
from unittest.mock import AsyncMock, patch

import pytest


@pytest.fixture(autouse=True)
def mock_sleep() -> Generator[None, None, None]:
    """Patch time.sleep and asyncio.sleep so retry/settle loops run instantly."""
    with patch("time.sleep"), patch("asyncio.sleep", new=AsyncMock()):
        yield
