# ===============================================================================
# ORCHID PORTAL TEST CONFIGURATION - DATABASE ACCESS BLOCKER ⚠️
# ===============================================================================
# The portal keeps no database; every order lives in the Orchid API or in the
# shared fallback order store. Any database access in a test is a bug.

from unittest.mock import Mock, patch

import pytest
from django.core.cache import cache, caches
from django.core.exceptions import ImproperlyConfigured
from django.db import DEFAULT_DB_ALIAS, connections

from tests.factories import MOCK_ORCHID_RESPONSE

# ===============================================================================
# DATABASE ACCESS PREVENTION 🚫
# ===============================================================================

@pytest.fixture(autouse=True)
def block_database_access():
    """Fail loudly on any attempt to open a database connection."""

    def blocked_ensure_connection():
        raise ImproperlyConfigured(
            "🚨 Orchid portal attempted database access! "
            "Orders must go through the Orchid API or the fallback order store."
        )

    def blocked_cursor():
        raise ImproperlyConfigured(
            "🚨 Orchid portal attempted to create a database cursor!"
        )

    with patch.object(connections[DEFAULT_DB_ALIAS], 'ensure_connection', blocked_ensure_connection), \
         patch.object(connections[DEFAULT_DB_ALIAS], 'cursor', blocked_cursor):
        yield


@pytest.fixture(autouse=True)
def clear_cache():
    """Catalog snapshots and fallback orders are cached; every test starts cold."""
    cache.clear()
    caches["fallback_orders"].clear()
    yield
    cache.clear()
    caches["fallback_orders"].clear()


# ===============================================================================
# TEST UTILITIES 🧪
# ===============================================================================

@pytest.fixture
def mock_orchid_api():
    """Mock Orchid API client with the common catalog response."""
    api_mock = Mock()
    api_mock.get_all_orchids.return_value = [MOCK_ORCHID_RESPONSE]
    return api_mock
