"""Storefront database management CLI.

Provides commands to create and drop the database schema and to load a
starter catalogue.

Usage:
    python src/manage.py setup-db        # Create all tables
    python src/manage.py drop-db         # Drop all tables
    python src/manage.py seed-products   # Add the sample catalogue
"""

import argparse
import sys

SAMPLE_PRODUCTS = [
    {"name": "iPhone 14 Pro", "price": 999.99, "stock": 50},
    {"name": "Samsung Galaxy S23", "price": 799.99, "stock": 30},
    {"name": "MacBook Air M2", "price": 1199.99, "stock": 25},
    {"name": "Nike Air Max 270", "price": 149.99, "stock": 100},
    {"name": "Sony WH-1000XM4", "price": 279.99, "stock": 40},
    {"name": "Levi's 501 Original Jeans", "price": 89.99, "stock": 75},
    {"name": "The Great Gatsby", "price": 12.99, "stock": 200},
    {"name": "Instant Pot Duo 7-in-1", "price": 79.99, "stock": 35},
]


def setup_database():
    """Create the database schema for the storefront domain."""
    from storefront.domain import storefront
    from storefront.utils.db import setup_db

    print("Initializing storefront domain...")
    storefront.init()
    print("Creating storefront database schema...")
    touched = setup_db(storefront)
    if touched:
        print(f"  Schema ready on: {', '.join(touched)}.")
    else:
        print("  No relational providers configured; nothing to create.")

    print("Done.")


def drop_database():
    """Drop the database schema for the storefront domain."""
    from storefront.domain import storefront
    from storefront.utils.db import drop_db

    print("Initializing storefront domain...")
    storefront.init()
    print("Dropping storefront database schema...")
    touched = drop_db(storefront)
    if touched:
        print(f"  Schema dropped on: {', '.join(touched)}.")
    else:
        print("  No relational providers configured; nothing to drop.")

    print("Done.")


def seed_products():
    """Add the sample catalogue through the AddProduct command."""
    from storefront.catalogue.management import AddProduct
    from storefront.domain import storefront

    storefront.init()
    with storefront.domain_context():
        for product in SAMPLE_PRODUCTS:
            product_id = storefront.process(AddProduct(**product), asynchronous=False)
            print(f"  {product['name']}: {product_id}")

    print(f"Seeded {len(SAMPLE_PRODUCTS)} products.")


def main():
    parser = argparse.ArgumentParser(description="Storefront database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    subparsers.add_parser("seed-products", help="Add the sample product catalogue")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "seed-products":
        seed_products()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
