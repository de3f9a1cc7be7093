"""Seed the Postgres database with demo accounts, categories and products.

The script is idempotent: tables are created if missing and demo rows are
upserted with ON CONFLICT, so it can be re-run against the same database.

Usage:
    python scripts/db_seed.py

The script reads DATABASE_URL from the environment (the app's postgresql+asyncpg:// form
is accepted); the default matches docker-compose.
"""
import os
import sys
import uuid
from pathlib import Path

import psycopg2
from psycopg2.extras import execute_values

# Ensure project root is on sys.path so we can import app helpers
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.catalog import slugify
from app.security import get_password_hash

DATABASE_URL = os.environ.get(
    "DATABASE_URL",
    "postgresql://postgres:postgres@db:5432/storefront_db",
).replace("+asyncpg", "")

DEMO_SELLER_ID = str(uuid.uuid5(uuid.NAMESPACE_URL, "storefront/demo-seller"))
DEMO_BUYER_ID = str(uuid.uuid5(uuid.NAMESPACE_URL, "storefront/demo-buyer"))

DEMO_PRODUCTS = [
    {"name": "Wireless Earbuds", "category": "Electronics", "price": 49.99, "stock": 40,
     "description": "Bluetooth 5.3 earbuds with a charging case and 24h battery."},
    {"name": "USB-C Charger 65W", "category": "Electronics", "price": 29.00, "stock": 25,
     "description": "GaN wall charger with two USB-C ports and one USB-A port."},
    {"name": "Cotton T-Shirt", "category": "Fashion", "price": 12.50, "stock": 100,
     "description": "Plain crew-neck t-shirt in 100% organic cotton."},
    {"name": "Running Shoes", "category": "Fashion", "price": 79.90, "stock": 18,
     "description": "Lightweight road running shoes with a cushioned sole."},
    {"name": "Ceramic Mug", "category": "Home & Kitchen", "price": 8.99, "stock": 60,
     "description": "350 ml stoneware mug, dishwasher and microwave safe."},
    {"name": "Chef's Knife", "category": "Home & Kitchen", "price": 34.00, "stock": 12,
     "description": "20 cm stainless steel chef's knife with a full tang."},
]


def connect_db(dsn: str):
    try:
        conn = psycopg2.connect(dsn)
        conn.autocommit = True
        return conn
    except Exception as e:
        print(f"Failed to connect to database: {e}")
        raise


def ensure_tables():
    # same definitions the app uses; create_all skips existing tables
    from sqlalchemy import create_engine
    from app.database import Base
    import app.models  # noqa: F401

    engine = create_engine(DATABASE_URL)
    Base.metadata.create_all(engine)
    engine.dispose()


def seed_accounts(conn):
    cur = conn.cursor()
    password_hash = get_password_hash("Password123")
    try:
        cur.execute(
            """
            INSERT INTO buyers (id, name, email, phone, password_hash, created_at, updated_at)
            VALUES (%s, %s, %s, %s, %s, now(), now())
            ON CONFLICT (email) DO NOTHING
            """,
            (DEMO_BUYER_ID, "Demo Buyer", "buyer@example.com", None, password_hash),
        )
        cur.execute(
            """
            INSERT INTO sellers (id, name, email, phone, store_name, gst_number, business_type,
                                 business_address, password_hash, created_at, updated_at)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, now(), now())
            ON CONFLICT (email) DO NOTHING
            """,
            (DEMO_SELLER_ID, "Demo Seller", "seller@example.com", "5550100100", "Demo Store",
             "22AAAAA0000A1Z5", "Retail", "1 Market Street, Springfield", password_hash),
        )
        print("Seeded demo accounts (password: Password123)")
    finally:
        cur.close()


def seed_catalog(conn):
    cur = conn.cursor()
    try:
        categories = sorted({p["category"] for p in DEMO_PRODUCTS})
        execute_values(
            cur,
            "INSERT INTO product_categories (name, description, slug) VALUES %s ON CONFLICT (name) DO NOTHING",
            [(c, f"{c} products", slugify(c)) for c in categories],
        )

        cur.execute("SELECT seller_id FROM products WHERE seller_id = %s LIMIT 1", (DEMO_SELLER_ID,))
        if cur.fetchone():
            print("Demo products already present, skipping")
            return

        execute_values(
            cur,
            """
            INSERT INTO products (name, description, category, price, stock, seller_id, created_at, updated_at)
            VALUES %s
            """,
            [
                (p["name"], p["description"], p["category"], p["price"], p["stock"], DEMO_SELLER_ID)
                for p in DEMO_PRODUCTS
            ],
            template="(%s, %s, %s, %s, %s, %s, now(), now())",
        )
        print(f"Seeded {len(DEMO_PRODUCTS)} demo products in {len(categories)} categories")
    finally:
        cur.close()


def main():
    print("DB seed starting, DATABASE_URL=", DATABASE_URL)
    try:
        conn = connect_db(DATABASE_URL)
    except Exception:
        sys.exit(1)

    ensure_tables()
    seed_accounts(conn)
    seed_catalog(conn)

    conn.close()
    print("DB seed complete")


if __name__ == "__main__":
    main()
