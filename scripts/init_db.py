"""Create the database schema.

Usage:
    python -m scripts.init_db [--database-url URL]

Creates every table that does not exist yet. Safe to re-run.
"""

from __future__ import annotations

import argparse
import asyncio

from hr_compliance.config import configure_logging, get_settings
from hr_compliance.database import create_schema, get_engine


async def init_schema(database_url: str) -> None:
    """Create all tables on the target database."""
    target = database_url.split("@")[1] if "@" in database_url else database_url
    print(f"Target database: {target}")

    engine = get_engine(database_url)
    try:
        await create_schema(engine)
        print("Schema ready")
    finally:
        await engine.dispose()


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Create the compliance engine schema")
    parser.add_argument(
        "--database-url",
        type=str,
        default=get_settings().database_url,
        help="Database URL (default: from settings)",
    )

    args = parser.parse_args()

    configure_logging()
    asyncio.run(init_schema(args.database_url))


if __name__ == "__main__":
    main()
