# ===============================================================================
# PYTEST CONFIGURATION FOR STOREFRONT CHECKOUT
# ===============================================================================
"""
Global test configuration for Storefront Checkout.

Test Structure:
- tests/ mirrors apps/ structure for app-specific tests
- Naming convention: test_{app}_{feature}.py
- Shared model builders live in tests/factories/
"""

import pytest
from django.core.cache import cache

from tests.factories.checkout import create_address, create_user


@pytest.fixture(autouse=True)
def _clear_cache():
    """Throttle history lives in the cache"""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def user(db):
    """Create test user"""
    return create_user()


@pytest.fixture
def address(user):
    return create_address(user)


@pytest.fixture
def authenticated_client(client, user):
    """Client logged in with test user"""
    client.force_login(user)
    return client
