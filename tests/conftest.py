"""
Pytest configuration and shared fixtures.

Adds the project root to the Python path so tests can import domain,
repositories and services, and provides an in-memory platform driven by a
controllable clock.
"""

import sys
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path

import pytest

# Add the project directory to the Python path
# so tests can import domain, repositories, etc.
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from domain.catalog import Product  # noqa: E402
from domain.distributor import Distributor  # noqa: E402
from domain.user import Actor, UserRole  # noqa: E402
from repositories.memory import InMemoryDatabase, build_memory_repositories  # noqa: E402
from services.platform import build_platform  # noqa: E402
from settings import Settings  # noqa: E402


class FakeClock:
    """Callable clock returning a fixed UTC instant that tests can move forward."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)

    @property
    def today(self) -> date:
        return self.now.date()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2025, 6, 1, 9, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def db() -> InMemoryDatabase:
    return InMemoryDatabase()


@pytest.fixture
def repositories(db: InMemoryDatabase):
    return build_memory_repositories(db)


@pytest.fixture
def platform(repositories, clock: FakeClock):
    return build_platform(repositories, Settings(wallet_low_threshold=Decimal("1000")), clock=clock)


@pytest.fixture
def admin() -> Actor:
    return Actor(user_id="user-1", username="admin", role=UserRole.SUPER_ADMIN)


@pytest.fixture
def executive() -> Actor:
    return Actor(user_id="user-2", username="exec", role=UserRole.EXECUTIVE)


@pytest.fixture
def products(repositories):
    """SKU001 at 100, SKU002 at 50, SKU003 at 25."""

    catalog = [
        Product(product_id="SKU001", name="Normal 2L", default_unit_price=Decimal("100"), hsn_code="2201"),
        Product(product_id="SKU002", name="Normal 1L", default_unit_price=Decimal("50"), hsn_code="2201"),
        Product(product_id="SKU003", name="Premium 1L", default_unit_price=Decimal("25")),
    ]
    for product in catalog:
        repositories.catalog.add_product(product)
    return catalog


@pytest.fixture
def distributor(repositories, clock: FakeClock) -> Distributor:
    """Distributor D with an empty wallet."""

    d = Distributor(
        distributor_id="dist-1",
        name="Reliable Traders, Pune",
        phone="9123456789",
        state="Maharashtra",
        area="Pune",
        date_added=clock(),
        added_by="exec",
    )
    return repositories.distributors.add_distributor(d)


@pytest.fixture
def other_distributor(repositories, clock: FakeClock) -> Distributor:
    d = Distributor(
        distributor_id="dist-2",
        name="Sunrise Supplies, Surat",
        phone="9876543210",
        state="Gujarat",
        area="Surat",
        date_added=clock(),
        added_by="exec",
    )
    return repositories.distributors.add_distributor(d)
