"""Upload a CSV of products through the running API as a seller.

Registers the seller if needed, logs in and posts the rows to
/api/products/bulk-upload. The CSV needs the columns name, description,
category and price; stock and image_url are optional.

Usage:
    python scripts/seed_demo.py products.csv [--email seller@example.com] [--password Password123]

The API location comes from API_BASE_URL (default http://localhost:8000).
"""
import argparse
import csv
import os
import sys

import httpx

API_BASE_URL = os.environ.get("API_BASE_URL", "http://localhost:8000").rstrip("/")


def read_rows(path: str) -> list[dict]:
    rows = []
    with open(path, newline="", encoding="utf-8") as fh:
        for raw in csv.DictReader(fh):
            row = {k.strip().lower(): (v or "").strip() for k, v in raw.items() if k}
            rows.append({
                "name": row.get("name"),
                "description": row.get("description"),
                "category": row.get("category"),
                "price": float(row["price"]) if row.get("price") else None,
                "stock": int(row["stock"]) if row.get("stock") else None,
                "image_url": row.get("image_url") or None,
            })
    return rows


def ensure_seller(client: httpx.Client, email: str, password: str) -> str:
    r = client.post("/api/auth/sellers/register", json={
        "name": "Demo Seller",
        "store_name": "Demo Store",
        "gst_number": "22AAAAA0000A1Z5",
        "business_type": "Retail",
        "business_address": "1 Market Street, Springfield",
        "email": email,
        "phone": "5550100100",
        "password": password,
        "confirm_password": password,
    })
    if r.status_code == 201:
        print(f"Registered seller {email}")
    elif r.status_code != 400:
        r.raise_for_status()

    r = client.post("/api/auth/login", json={"email": email, "password": password})
    r.raise_for_status()
    data = r.json()
    if data["role"] != "seller":
        sys.exit(f"{email} is registered as a {data['role']}, not a seller")
    return data["access_token"]


def main():
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("csv_path")
    parser.add_argument("--email", default="seller@example.com")
    parser.add_argument("--password", default="Password123")
    args = parser.parse_args()

    rows = read_rows(args.csv_path)
    print(f"Read {len(rows)} rows from {args.csv_path}")

    with httpx.Client(base_url=API_BASE_URL, timeout=30.0) as client:
        token = ensure_seller(client, args.email, args.password)
        r = client.post(
            "/api/products/bulk-upload",
            json={"products": rows},
            headers={"Authorization": f"Bearer {token}"},
        )

    data = r.json()
    if r.status_code != 200:
        print(f"Upload failed ({r.status_code}): {data.get('error')}")
        for line in data.get("details") or []:
            print(f"  {line}")
        sys.exit(1)
    print(f"Uploaded {data['count']} products for seller {data['seller_id']}")


if __name__ == "__main__":
    main()
