"""
Unit Test Fixtures.

Fixtures for unit tests - all external dependencies are mocked.
Unit tests should be fast and isolated, never touching a real engine.
"""

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from rich.console import Console

from hanlon.cli.client import APIClient
from hanlon.cli.context import CliContext
from hanlon.cli.presenter import RichPresenter

BASE_URL = "http://engine.test:8026/hanlon/api/v1"


# =============================================================================
# API Client Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_api_client() -> MagicMock:
    """
    Mock engine API client.

    Usage:
        async def test_list(mock_api_client):
            mock_api_client.get_json.return_value = [{"uuid": "a"}]
            resource = PolicyResource(mock_api_client)
    """
    client = MagicMock(spec=APIClient)
    client.base_url = BASE_URL
    client.get_json = AsyncMock(return_value=[])
    client.get_text = AsyncMock(return_value="")
    client.post_json = AsyncMock(return_value={})
    client.put_json = AsyncMock(return_value={})
    client.delete = AsyncMock(return_value="")
    client.close = AsyncMock()
    return client


# =============================================================================
# Presentation Fixtures
# =============================================================================


@pytest.fixture
def presenter() -> RichPresenter:
    """Presenter writing to the current stdout with room for wide tables."""
    return RichPresenter(Console(width=240, color_system=None))


@pytest.fixture
def cli_context(mock_api_client: MagicMock, presenter: RichPresenter) -> CliContext:
    """
    Context to inject into CliRunner.invoke(..., obj=cli_context).
    """
    return CliContext(client=mock_api_client, presenter=presenter)


# =============================================================================
# Sample Data
# =============================================================================


@pytest.fixture
def policy_records() -> list[dict[str, Any]]:
    """Engine response for GET /policy, deliberately out of order."""
    return [
        {"uuid": "p3", "label": "third", "line_number": 2, "template": "linux_deploy"},
        {"uuid": "p1", "label": "first", "line_number": 0, "template": "linux_deploy"},
        {"uuid": "p2", "label": "second", "line_number": 1, "template": "vmware_hypervisor"},
    ]
