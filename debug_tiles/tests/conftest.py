"""Pytest configuration for debug_tiles tests.

This configuration file:
1. Adds the repository root to sys.path so tests run without an install
2. Provides shared fixtures (test client, dependency override cleanup)
"""
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

repo_root = Path(__file__).parent.parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from debug_tiles.main import app  # noqa: E402


@pytest.fixture
def client():
    """Test client that resets dependency overrides afterwards."""
    yield TestClient(app)
    app.dependency_overrides.clear()
