"""
Create the scheduling tables (tenants, stage types, processes, vacancies,
vacancy stages, holidays and vacancy holiday links).

Usage:
    python migrations/create_scheduling_tables.py [--database-url URL]

The script is idempotent and safe to run multiple times. It inspects the current
schema and only creates the tables that are missing.
"""

import argparse
import os
import sys

from dotenv import load_dotenv

from sqlalchemy import create_engine, inspect
from sqlalchemy.exc import OperationalError, ProgrammingError

ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, ROOT_DIR)

from talentflow.db_config import get_database_config, normalize_url  # noqa: E402
from talentflow.models import db  # noqa: E402

# Load environment variables from a .env file if present
load_dotenv()


def infer_database_url(cli_url: str = None) -> str:
    """Figure out which database to hit, honoring CLI and environment defaults."""
    if cli_url:
        return normalize_url(cli_url.strip())

    database_uri, _ = get_database_config()
    return database_uri


def missing_tables(engine) -> list:
    """Model tables not present in the target database, in dependency order."""
    existing = set(inspect(engine).get_table_names())
    return [table for table in db.metadata.sorted_tables if table.name not in existing]


def migrate(database_url: str = None) -> bool:
    """Create every scheduling table that does not exist yet."""
    db_url = infer_database_url(database_url)
    print(f"Connecting to database: {db_url.split('@')[-1]}")

    engine = create_engine(db_url)

    try:
        tables = missing_tables(engine)
        if not tables:
            print("✓ All scheduling tables already exist. Nothing to do.")
            return True

        print(f"Creating tables: {', '.join(table.name for table in tables)}")
        db.metadata.create_all(engine, tables=tables)

        # Re-check to confirm
        remaining = missing_tables(engine)
        if not remaining:
            print("✓ Successfully created scheduling tables.")
            return True

        print(f"✗ Tables still missing: {', '.join(table.name for table in remaining)}. Please verify manually.")
        return False

    except (OperationalError, ProgrammingError) as exc:
        print(f"✗ Database error while creating tables: {exc}")
        return False
    finally:
        engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create the scheduling tables.")
    parser.add_argument(
        "--database-url",
        help="Override database URL (otherwise inferred from env or defaults).",
    )
    args = parser.parse_args()

    success = migrate(args.database_url)
    sys.exit(0 if success else 1)
