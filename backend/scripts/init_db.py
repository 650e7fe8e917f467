#!/usr/bin/env python
"""
Database Initialization Script

Creates all PodBridge feed pipeline tables. Safe to re-run: existing tables
are left untouched.
"""
import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from podbridge.config import DATABASE_PATH
from podbridge.database import init_database, create_tables


def main() -> None:
    """Initialize the database."""
    print("Initializing PodBridge database...")
    print(f"Database location: {DATABASE_PATH}")

    try:
        init_database()
        create_tables()

        from podbridge.models.base import Base
        print(f"\nCreated {len(Base.metadata.tables)} tables:")
        for table_name in sorted(Base.metadata.tables.keys()):
            print(f"  - {table_name}")

        print("\nDatabase initialization complete!")

    except Exception as e:
        print(f"Error initializing database: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
