"""Pytest configuration and fixtures for tests."""
import os
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Set test environment variables BEFORE any imports
os.environ["DATABASE_URL"] = "sqlite:///./test_stylist.db"
os.environ["LOG_FILE"] = ""
os.environ["OFFER_TIMERS_AUTORUN"] = "false"
os.environ["RATE_LIMIT_PER_MINUTE"] = "10000"

import pytest

from stylist.analytics.error_tracker import error_tracker
from stylist.database.repository import InMemoryStoreRepository
from stylist.database.schemas import Product, Shopper
from stylist.database.seed import demo_products, demo_shoppers
from stylist.memory.session_manager import SessionManager
from stylist.utils.clock import VirtualClock


class FlakyCatalogRepository(InMemoryStoreRepository):
    """Returns an empty catalog for the first ``failures`` reads."""

    def __init__(self, failures: int, **kwargs):
        super().__init__(**kwargs)
        self.failures = failures
        self.list_calls = 0

    async def list_products(self):
        self.list_calls += 1
        if self.list_calls <= self.failures:
            return []
        return await super().list_products()


@pytest.fixture(autouse=True)
def reset_error_tracker():
    error_tracker.reset()
    yield
    error_tracker.reset()


@pytest.fixture
def clock():
    return VirtualClock()


@pytest.fixture
def catalog():
    return demo_products()


@pytest.fixture
def shoppers():
    """Demo shoppers keyed by lower-case first name."""
    return {s.name.split()[0].lower(): s for s in demo_shoppers()}


@pytest.fixture
def repository(catalog, shoppers):
    return InMemoryStoreRepository(products=catalog, users=shoppers.values())


@pytest.fixture
def flaky_repository(catalog, shoppers):
    """Factory for repositories whose catalog is empty for the first N reads."""
    def build(failures):
        return FlakyCatalogRepository(failures, products=catalog, users=shoppers.values())
    return build


@pytest.fixture
def make_context():
    """Build a ConversationContext for a repository and shopper id."""
    async def build(repository, user_id=None, session_id="SES-TEST-0001"):
        return await SessionManager(repository).build_context(session_id, user_id)
    return build


@pytest.fixture
def make_product():
    def build(id, brand, name, category=None, price=1000, gender="men", **kwargs):
        image_url = kwargs.pop("image_url", f"/data/{gender}/{id}.jpg")
        return Product(
            id=id, brand=brand, name=name, price=price, category=category,
            image_url=image_url, **kwargs
        )
    return build


@pytest.fixture
def make_shopper():
    def build(name, id=None, **kwargs):
        return Shopper(id=id or f"user-{name.split()[0].lower()}", name=name, **kwargs)
    return build
