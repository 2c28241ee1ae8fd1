#!/usr/bin/env python3
"""
Seed products from a JSON catalogue file and optionally bootstrap an admin.

Usage:
    python scripts/seed_products.py --file catalogue.json
    python scripts/seed_products.py --file catalogue.json --admin-email admin@shop.com --admin-password secret
"""
import argparse
import logging
import os
import sys

# allow running from repo/scripts without installing the package
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from storefront.config import get_settings
from storefront.db import Database
from storefront.seed import ensure_admin, load_catalogue, seed_products
from storefront.utils.log import configure_logging

log = logging.getLogger("storefront.seed")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("--file", "-f", required=True, help="Path to a product JSON file")
    parser.add_argument("--reset", action="store_true", help="Drop and recreate tables first")
    parser.add_argument("--admin-email")
    parser.add_argument("--admin-password")
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)
    if not os.path.exists(args.file):
        log.error("File not found: %s", args.file)
        return 1

    database = Database(settings.DATABASE_URL)
    database.init_db(reset=args.reset)
    seed_products(database, load_catalogue(args.file))
    if args.admin_email and args.admin_password:
        if ensure_admin(database, args.admin_email, args.admin_password):
            log.info("Created admin %s", args.admin_email)
    return 0


if __name__ == "__main__":
    sys.exit(main())
