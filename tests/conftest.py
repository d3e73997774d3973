"""Pytest configuration and fixtures for all tests.

This file is automatically loaded by pytest and ensures proper test environment setup.
"""

import sys
from pathlib import Path

import pytest

# Ensure project root is in PYTHONPATH for imports to work
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


@pytest.fixture
def test_server_path():
    """Path to test stdio server."""
    return Path(__file__).parent / "mcp_servers" / "test_stdio_server.py"


@pytest.fixture
def test_server_config(test_server_path):
    """ServerConfig launching the test stdio server with this interpreter."""
    from delegateAgent.config.schema import ServerConfig

    return ServerConfig(command=sys.executable, args=[str(test_server_path)])
