"""Shared fixtures for the FlatTree test suite."""

import sys
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

from sample_data import load_sample, sample_categories


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: large-tree scalability tests")


@pytest.fixture
def categories():
    return sample_categories()


@pytest.fixture
def tree():
    """TreeIndex loaded with the sample categories."""
    return load_sample()
