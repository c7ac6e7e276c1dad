"""Create ledger tables and seed the capability catalog and sample actors.

Safe to re-run: existing tables are left alone, catalog rows are only
inserted when their name is missing, and --actors tops the actors table up
to the requested size.

Usage:
    python backend/scripts/init_schema.py --actors 200
"""

from __future__ import annotations

import argparse
import logging

from sqlalchemy.exc import SQLAlchemyError

from matchledger.database.seed import seed_actors, seed_catalog
from matchledger.database.session import get_engine, get_session_factory
from matchledger.db_base import Base
from matchledger.entitlements.cache import get_catalog_cache

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


def run(actors: int = 0) -> None:
    engine = get_engine()
    logger.info("Creating tables", extra={"tables": sorted(Base.metadata.tables)})
    Base.metadata.create_all(engine)

    session = get_session_factory()()
    try:
        added = seed_catalog(session)
        logger.info("Seeded capability catalog", extra={"added": added})
        cache = get_catalog_cache()
        if added and cache is not None:
            cache.invalidate()
        if actors:
            seed_actors(session, actors)
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Failed seeding database")
        raise
    finally:
        session.close()


def main() -> None:
    parser = argparse.ArgumentParser(description="Create tables and seed matchledger data")
    parser.add_argument(
        "--actors",
        type=int,
        default=0,
        help="Top the actors table up to this many generated profiles (default: 0)",
    )
    args = parser.parse_args()
    if args.actors < 0:
        parser.error("--actors must be >= 0")
    run(actors=args.actors)


if __name__ == "__main__":
    main()
