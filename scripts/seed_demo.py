#!/usr/bin/env python3
"""
Seed script to create a demo restaurant, its owner and menu data
"""

import asyncio
from decimal import Decimal

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

DEMO_RESTAURANT = "Moonbrew Coffee House"

MENU = [
    {"name": "Espresso Bliss", "category": "Coffee", "price": "3.00",
     "description": "Rich and bold single-shot espresso brewed to perfection."},
    {"name": "Caramel Cloud Latte", "category": "Coffee", "price": "4.50",
     "description": "Smooth milk latte topped with creamy caramel foam."},
    {"name": "Vanilla Cold Brew", "category": "Coffee", "price": "4.25",
     "description": "Slow-steeped cold brew infused with vanilla sweetness."},
    {"name": "Hazelnut Mocha", "category": "Coffee", "price": "4.75",
     "description": "Espresso with chocolate and hazelnut syrup topped with whipped cream."},
    {"name": "Matcha Green Tea", "category": "Non Coffee", "price": "4.00",
     "description": "Finely ground matcha whisked with steamed milk."},
    {"name": "Choco Mint Frappe", "category": "Non Coffee", "price": "5.00",
     "description": "Chocolate frappe blended with mint and topped with cream."},
    {"name": "Butter Croissant", "category": "Pastry", "price": "3.50",
     "description": "Flaky, golden croissant baked every morning."},
    {"name": "Blueberry Muffin", "category": "Pastry", "price": "3.25",
     "description": "Soft muffin loaded with fresh blueberries."},
]


async def seed_demo_data():
    """Seed demo data for development"""
    from sqlalchemy import select, text

    from app.database import SessionLocal, engine, Base
    from app.models.organization import Organization, Member
    from app.models.menu import MenuCategory, MenuItem
    from app.models.user import User, UserRole
    from app.services.organizations import build_slug

    # Create tables
    async with engine.begin() as conn:
        await conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
        await conn.run_sync(Base.metadata.create_all)

    async with SessionLocal() as db:
        # Check if demo restaurant already exists
        result = await db.execute(
            select(Organization).where(Organization.name == DEMO_RESTAURANT)
        )
        if result.scalar_one_or_none():
            print("Demo data already exists. Skipping...")
            return

        print("Creating demo restaurant...")

        organization = Organization(
            name=DEMO_RESTAURANT,
            slug=build_slug(DEMO_RESTAURANT),
            description="Slow mornings, good stories",
            metadata_json={},
        )
        db.add(organization)
        await db.flush()

        print(f"Created restaurant: {organization.name} (ID: {organization.id})")

        # Create users
        super_admin = User(
            email="admin@chattable.app",
            hashed_password=pwd_context.hash("admin123"),
            full_name="Super Admin",
            role=UserRole.SUPER_ADMIN,
        )
        owner = User(
            email="owner@moonbrew.coffee",
            hashed_password=pwd_context.hash("moonbrew123"),
            full_name="Moonbrew Owner",
            role=UserRole.RESTAURANT_ADMIN,
            active_organization_id=organization.id,
        )
        db.add_all([super_admin, owner])
        await db.flush()

        db.add(Member(organization_id=organization.id, user_id=owner.id, role="owner"))

        # Create categories in menu order
        categories = {}
        for item_data in MENU:
            if item_data["category"] in categories:
                continue
            category = MenuCategory(
                organization_id=organization.id,
                name=item_data["category"],
                order_column=len(categories) + 1,
            )
            db.add(category)
            categories[item_data["category"]] = category
        await db.flush()

        # Create menu items
        for item_data in MENU:
            db.add(
                MenuItem(
                    organization_id=organization.id,
                    category_id=categories[item_data["category"]].id,
                    name=item_data["name"],
                    description=item_data["description"],
                    price=Decimal(item_data["price"]),
                    is_available=True,
                )
            )

        await db.commit()

        print(f"""
Demo data created successfully!

Restaurant: {DEMO_RESTAURANT}
  ID: {organization.id}
  Slug: {organization.slug}

Users:
  Super Admin:
    Email: admin@chattable.app
    Password: admin123

  Restaurant Owner:
    Email: owner@moonbrew.coffee
    Password: moonbrew123

Menu: {len(categories)} categories, {len(MENU)} items created

Provision the voice agent with POST /organizations/{organization.id}/agent.
""")


if __name__ == "__main__":
    asyncio.run(seed_demo_data())
