"""
Seed demo data through the services.

Creates the demo catalog, two global schemes, a set of distributors with an
initial recharge, occasional special prices, and a few orders per distributor
(most of them delivered). Everything goes through the same services the API
uses, so the ledger and balances stay consistent.

Usage:
    python scripts/seed_demo_data.py --distributors 10 --seed 7
    DATA_BACKEND=supabase python scripts/seed_demo_data.py
"""

import argparse
import random
import sys
from datetime import timedelta
from decimal import Decimal
from pathlib import Path

# Add parent directory to path so we can import from services
sys.path.insert(0, str(Path(__file__).parent.parent))

from domain.errors import PlatformError
from domain.order import OrderStatus, RequestedItem
from domain.time import utc_today
from domain.user import Actor, User, UserRole
from services.distributor_service import OnboardingRequest
from services.platform import Platform, build_platform, build_repositories
from settings import load_settings


ADMIN = Actor(user_id="user-1", username="admin", role=UserRole.SUPER_ADMIN)
EXECUTIVE = Actor(user_id="user-2", username="exec", role=UserRole.EXECUTIVE)

DEMO_PRODUCTS = [
    ("sku-1", "Normal 2L", Decimal("90"), "2201"),
    ("sku-2", "Normal 1L", Decimal("50"), "2201"),
    ("sku-3", "Normal 500ml", Decimal("25"), "2201"),
    ("sku-4", "Normal 250ml", Decimal("15"), "2201"),
    ("sku-5", "Premium 1L", Decimal("80"), "2202"),
]

LOCATIONS = {
    "Maharashtra": ["Pune", "Mumbai", "Nagpur", "Nashik"],
    "Karnataka": ["Bangalore", "Mysore", "Mangalore", "Hubli"],
    "Gujarat": ["Ahmedabad", "Surat", "Vadodara", "Rajkot"],
    "Tamil Nadu": ["Chennai", "Coimbatore", "Madurai"],
    "Delhi": ["North Delhi", "South Delhi", "East Delhi"],
}

NAME_PREFIXES = ["Reliable", "Sunrise", "Deccan", "National", "Pioneer", "United", "Prime", "Apex"]
NAME_SUFFIXES = ["Distributors", "Traders", "Enterprises", "Supplies", "Wholesale"]


def seed_users(platform: Platform) -> None:
    # add_user needs an admin actor; the first admin is stored directly.
    platform.repositories.users.add_user(User(ADMIN.user_id, ADMIN.username, ADMIN.role))
    platform.users.add_user(ADMIN, EXECUTIVE.username, EXECUTIVE.role)


def seed_catalog(platform: Platform) -> None:
    today = utc_today()
    for product_id, name, price, hsn_code in DEMO_PRODUCTS:
        platform.catalog.add_product(ADMIN, name=name, default_unit_price=price, hsn_code=hsn_code, product_id=product_id)

    platform.promotions.add_scheme(
        ADMIN,
        description="Monsoon Bonanza (Global)",
        buy_product_id="sku-1",
        buy_quantity=10,
        get_product_id="sku-2",
        get_quantity=1,
        start_date=today - timedelta(days=90),
        end_date=today + timedelta(days=30),
    )
    platform.promotions.add_scheme(
        ADMIN,
        description="Premium Offer (Global)",
        buy_product_id="sku-5",
        buy_quantity=5,
        get_product_id="sku-5",
        get_quantity=1,
        start_date=today - timedelta(days=60),
        end_date=today + timedelta(days=60),
    )


def seed_distributor(platform: Platform, rng: random.Random) -> dict:
    today = utc_today()
    state = rng.choice(list(LOCATIONS))
    area = rng.choice(LOCATIONS[state])
    has_special_pricing = rng.random() < 0.2

    distributor = platform.distributors.onboard_distributor(
        OnboardingRequest(
            name=f"{rng.choice(NAME_PREFIXES)} {rng.choice(NAME_SUFFIXES)}, {area}",
            phone=f"9{rng.randint(100000000, 999999999)}",
            state=state,
            area=area,
            has_special_pricing=has_special_pricing,
        ),
        EXECUTIVE,
    )
    platform.ledger.recharge(distributor.distributor_id, Decimal(rng.randint(50000, 200000)), ADMIN.username)

    if has_special_pricing:
        product_id, _, price, _ = rng.choice(DEMO_PRODUCTS)
        platform.promotions.add_special_price(
            EXECUTIVE,
            distributor_id=distributor.distributor_id,
            product_id=product_id,
            price=(price * Decimal("0.95")).quantize(Decimal("1")),
            start_date=today - timedelta(days=30),
            end_date=today + timedelta(days=30),
        )

    placed = delivered = rejected = 0
    for _ in range(rng.randint(2, 6)):
        items = [
            RequestedItem(product_id=rng.choice(DEMO_PRODUCTS)[0], quantity=rng.randint(5, 50))
            for _ in range(rng.randint(2, 5))
        ]
        try:
            order = platform.orders.place_order(distributor.distributor_id, items, EXECUTIVE.username)
            placed += 1
            if rng.random() < 0.9:
                platform.orders.update_order_status(order.order_id, OrderStatus.DELIVERED, EXECUTIVE.username)
                delivered += 1
        except PlatformError as e:
            print(f"  [SKIP] {distributor.name}: {e.message}")
            rejected += 1

    return {"placed": placed, "delivered": delivered, "rejected": rejected}


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed demo distributors, schemes and orders.")
    parser.add_argument("--distributors", type=int, default=10, help="Number of distributors to create")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible data")
    args = parser.parse_args()

    settings = load_settings()
    platform = build_platform(build_repositories(settings), settings)
    rng = random.Random(args.seed)

    print(f"Seeding {args.distributors} distributors into the '{settings.data_backend}' backend...")
    seed_users(platform)
    seed_catalog(platform)

    totals = {"placed": 0, "delivered": 0, "rejected": 0}
    for _ in range(args.distributors):
        stats = seed_distributor(platform, rng)
        for key, value in stats.items():
            totals[key] += value

    print("[SUCCESS] Demo data created")
    print(f"  Products: {len(DEMO_PRODUCTS)}")
    print(f"  Distributors: {args.distributors}")
    print(f"  Orders placed: {totals['placed']} (delivered: {totals['delivered']}, rejected: {totals['rejected']})")


if __name__ == "__main__":
    main()
