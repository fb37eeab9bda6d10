"""Shared fixtures for the Toolverse tests."""
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

import pytest

from helpers import make_pdf


@pytest.fixture
def five_page_pdf():
    return make_pdf(5)


@pytest.fixture
def three_page_pdf():
    return make_pdf(3)
