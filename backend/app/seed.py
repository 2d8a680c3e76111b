"""
Customer Details Backend — Seed Command
=========================================

Usage:
    python -m app.seed customers.json
    python -m app.seed --admin-only

Creates the Admin/Client roles, the bootstrap admin account (when
BOOTSTRAP_ADMIN_PASSWORD is set) and imports customers from the given file,
in one transaction against DATABASE_URL. Tables must already exist
(`alembic upgrade head`).
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional

from app.database import async_session_factory, dispose_engine
from app.exceptions import CustomerApiError
from app.services.seed_service import seed_service

logger = logging.getLogger("app.seed")


async def run_seed(seed_path: Optional[str]) -> None:
    try:
        async with async_session_factory() as session:
            try:
                await seed_service.seed_database(session, seed_path=seed_path)
                await session.commit()
            except Exception:
                await session.rollback()
                raise
    finally:
        await dispose_engine()


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed roles, the admin account and customers")
    parser.add_argument("path", nargs="?", help="JSON file with an array of customer documents")
    parser.add_argument(
        "--admin-only",
        action="store_true",
        help="Only create roles and the bootstrap admin; skip SEED_DATA_PATH",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    if args.admin_only and args.path:
        parser.error("--admin-only cannot be combined with a seed file")

    # An empty string disables the SEED_DATA_PATH fallback
    seed_path = "" if args.admin_only else args.path

    try:
        asyncio.run(run_seed(seed_path))
    except CustomerApiError as e:
        logger.error("Seeding failed: %s", e.message)
        return 1
    logger.info("Seeding complete")
    return 0


if __name__ == "__main__":
    sys.exit(main())
