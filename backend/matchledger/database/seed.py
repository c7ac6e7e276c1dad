"""
Seed data for fresh deployments and local runs.

seed_catalog adds missing catalog capabilities. seed_actors tops the actors
table up to a requested size with generated public profiles so candidate
listing and interactions have someone to work with. Both are safe to re-run.
"""

import logging
import random
from datetime import date
from typing import List, Optional

from dateutil.relativedelta import relativedelta
from sqlalchemy import func
from sqlalchemy.orm import Session

from matchledger.entitlements.models import UNLIMITED_INTERACTIONS
from matchledger.models import Actor, Capability

logger = logging.getLogger(__name__)

CATALOG = [
    (UNLIMITED_INTERACTIONS, "No daily limit on profile interactions"),
]

GENDERS = ("male", "female", "other")
MIN_AGE = 18
MAX_AGE = 59

FIRST_NAMES = (
    "Alex", "Bea", "Chen", "Dara", "Eli", "Farah", "Gus", "Hana", "Ivo", "Jun",
    "Kemi", "Lior", "Maya", "Nico", "Oona", "Pavel", "Quinn", "Rosa", "Sami", "Tariq",
)
LAST_NAMES = (
    "Abe", "Berg", "Costa", "Dahl", "Evans", "Fischer", "Garcia", "Haas", "Ito", "Jensen",
    "Kowalski", "Lund", "Moreau", "Novak", "Okafor", "Park", "Reyes", "Silva", "Tanaka", "Weber",
)
INTERESTS = (
    "hiking", "board games", "live music", "cooking", "climbing", "film photography",
    "cycling", "poetry", "gardening", "street food", "chess", "swimming",
)


def seed_catalog(session: Session) -> int:
    """Insert catalog rows that do not exist yet; returns the number added."""
    existing = {name for (name,) in session.query(Capability.name).all()}
    added = 0
    for name, description in CATALOG:
        if name in existing:
            continue
        session.add(Capability(name=name, description=description))
        added += 1
    session.commit()
    return added


def _profile(rng: random.Random, today: date) -> Actor:
    age_days = rng.randint(0, (MAX_AGE - MIN_AGE + 1) * 365 - 1)
    birth_date = today - relativedelta(years=MIN_AGE) - relativedelta(days=age_days)
    liked = rng.sample(INTERESTS, 2)
    return Actor(
        display_name=f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}",
        bio=f"Into {liked[0]} and {liked[1]}.",
        birth_date=birth_date,
        gender=rng.choice(GENDERS),
    )


def seed_actors(
    session: Session,
    count: int,
    rng: Optional[random.Random] = None,
    today: Optional[date] = None,
) -> List[Actor]:
    """
    Add generated actors until the table holds at least count rows.

    Args:
        session: SQLAlchemy session
        count: Target number of actors
        rng: Random source, seedable for reproducible data
        today: Reference date for birth dates (default: today)

    Returns:
        The actors added by this call (empty when already at count)
    """
    if count < 0:
        raise ValueError("count must be >= 0")
    rng = rng or random.Random()
    today = today or date.today()

    existing = session.query(func.count(Actor.id)).scalar()
    actors = [_profile(rng, today) for _ in range(max(0, count - existing))]
    session.add_all(actors)
    session.commit()

    logger.info("Seeded actors", extra={"added": len(actors), "total": existing + len(actors)})
    return actors
