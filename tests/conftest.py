"""Pytest configuration and fixtures."""

import os

import pytest


@pytest.fixture(scope="session", autouse=True)
def setup_test_env():
    """Set up test environment variables."""
    os.environ["SUPABASE_URL"] = "https://test.supabase.co"
    os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "test-key"
    os.environ["OPENROUTER_API_KEY"] = "test-openrouter-key"
    os.environ["PERPLEXITY_API_KEY"] = "test-perplexity-key"
    os.environ["CONTENTFORGE_ENV"] = "test"
