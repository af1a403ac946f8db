#!/usr/bin/env python3
"""
Write a product collection into the storage slot.

Without --file the built-in seed set is written. With --file the JSON array
is validated as products first (camelCase keys, as the app stores them);
entries without an id or createdAt get fresh ones.

Usage:
    python scripts/seed_products.py
    python scripts/seed_products.py --file catalogue.json --reset
"""
import argparse
import json
import os
import sys

# allow running from repo/scripts
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from product_manager.config import settings
from product_manager.db import init_db
from product_manager.repositories.product_repo import (
    ProductStore,
    decode_products,
    seed_products,
    upsert,
)
from product_manager.schemas.product_schema import iso_timestamp, utcnow
from product_manager.services.form_service import new_product_id


def _fill_missing(entry):
    entry = dict(entry)
    entry.setdefault("id", new_product_id())
    entry.setdefault("createdAt", iso_timestamp(utcnow()))
    return entry


def load_source(path):
    with open(path, "r", encoding="utf-8") as fh:
        data = json.load(fh)
    if isinstance(data, dict):
        # tolerate {"items": [...]} / {"products": [...]}
        data = data.get("items") or data.get("products") or []
    products = []
    for p in decode_products(json.dumps([_fill_missing(e) for e in data])):
        products = upsert(products, p)
    return products


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--file", help="JSON array of products to store")
    parser.add_argument("--reset", action="store_true", help="drop and recreate tables first")
    args = parser.parse_args(argv)

    init_db(reset=args.reset)
    products = load_source(args.file) if args.file else seed_products()

    store = ProductStore()
    store.load()
    store.products = products
    store.save(products)
    print(f"Stored {len(products)} products under '{settings.STORAGE_KEY}' ({settings.DATABASE_URL}).")
    return 0


if __name__ == "__main__":
    sys.exit(main())
