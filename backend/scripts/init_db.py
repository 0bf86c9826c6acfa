#!/usr/bin/env python3
"""
Initialize the campus bus tracker database.

Usage:
    python scripts/init_db.py [--seed] [--seed-file path/to/campus.json]

This script:
1. Connects to DATABASE_URL
2. Creates the tables if they do not exist
3. Optionally loads drivers, stops, buses, routes and start times
"""

import argparse
import os
import sys

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import config
from db import database
from db.seed import SAMPLE_FILE, seed_from_file


def main(argv=None):
    parser = argparse.ArgumentParser(description="Initialize the campus bus tracker database")
    parser.add_argument("--seed", action="store_true", help="load the sample campus after creating tables")
    parser.add_argument("--seed-file", default=None, help=f"campus JSON to load (default: {SAMPLE_FILE.name})")
    args = parser.parse_args(argv)

    print("=" * 60)
    print("Campus Bus Tracker Database Initialization")
    print("=" * 60)

    print(f"\n📊 Database URL: {config.DATABASE_URL.split('@')[-1]}")

    print("\n🔄 Initializing database connection...")
    engine = database.init_engine()
    if engine is None:
        print("\n❌ Failed to connect to database!")
        print("   Check DATABASE_URL and that the server is reachable.")
        return 1
    print("✅ Database connection successful!")

    print("\n🔄 Creating tables...")
    database.create_tables()
    print("✅ Tables created successfully!")

    from sqlalchemy import inspect
    print("\n📋 Available tables:")
    for table_name in inspect(engine).get_table_names():
        print(f"   - {table_name}")

    if args.seed or args.seed_file:
        print("\n🔄 Seeding sample data...")
        db = database.SessionLocal()
        try:
            counts = seed_from_file(db, args.seed_file)
        finally:
            db.close()
        for kind, count in counts.items():
            print(f"   - {kind}: {count}")
        print("✅ Seed complete!")

    print("\n" + "=" * 60)
    print("Database initialization complete!")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
