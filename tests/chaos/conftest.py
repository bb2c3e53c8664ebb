"""
Chaos testing configuration and shared fixtures.
"""

import random

import pytest


@pytest.fixture(autouse=True)
def seed_random():
    """Seed random for reproducible chaos scenarios."""
    random.seed(42)
    yield
    random.seed()  # Reset after test
