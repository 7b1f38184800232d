"""Pytest configuration and fixtures for integration tests.

Loads .env from the project root and skips the live tests when the required
API keys are not configured.
"""

import os
from pathlib import Path

import pytest
from dotenv import load_dotenv


def pytest_configure(config):
    """Load environment variables before test collection."""
    env_path = Path(__file__).parent.parent.parent / ".env"
    load_dotenv(env_path)

    print("\n" + "=" * 70)
    print("Note: Integration tests call the live Spoonacular (and Gemini) APIs")
    print(f"Environment loaded from: {env_path}")
    print("=" * 70 + "\n")


@pytest.fixture(scope="session", autouse=True)
def check_api_keys():
    """Skip integration tests if SPOONACULAR_API_KEY is not configured."""
    if not os.getenv("SPOONACULAR_API_KEY"):
        pytest.skip("Integration tests skipped. Missing API key: SPOONACULAR_API_KEY. Please set it in your .env file.")


@pytest.fixture
def gemini_key():
    """Skip natural-language tests if GEMINI_API_KEY is not configured."""
    key = os.getenv("GEMINI_API_KEY")
    if not key:
        pytest.skip("GEMINI_API_KEY not set, natural-language search not tested")
    return key
