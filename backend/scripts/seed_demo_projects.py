#!/usr/bin/env python3
"""
Seed Script: Demo Migration Projects
Adds the sample projects shown in demo mode to the configured database
"""
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from config import get_settings
from database import build_engine, build_session_factory, init_db
from services.storage import DEMO_PROJECTS, DEMO_USERNAME, DatabaseStorage, MigrationStorage
import logging

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def seed_demo_projects(storage: MigrationStorage, dry_run: bool = False) -> int:
    """
    Create the demo user and any demo projects it does not own yet

    Args:
        storage: Target storage
        dry_run: If True, only show what would be done

    Returns:
        Number of projects created (or that would be created)
    """
    user = storage.get_user_by_username(DEMO_USERNAME)
    existing = set()
    if user:
        existing = {p["name"] for p in storage.list_projects(user_id=user["id"])}

    missing = [p for p in DEMO_PROJECTS if p["name"] not in existing]
    logger.info(f"Demo projects missing: {len(missing)} of {len(DEMO_PROJECTS)}")

    if not missing:
        logger.info("All demo projects already exist")
        return 0

    if dry_run:
        logger.info("DRY RUN - Would create these projects:")
        for project in missing:
            logger.info(
                f"  - {project['name']} ({project['source_language']} -> {project['target_language']})"
            )
        return len(missing)

    if not user:
        # Placeholder credentials; nothing authenticates against them
        user = storage.create_user({"username": DEMO_USERNAME, "password": "demo"})
        logger.info(f"Created demo user {user['id']}")

    for project in missing:
        created = storage.create_project({**project, "user_id": user["id"]})
        logger.info(f"  Created project {created['id']}: {created['name']}")

    return len(missing)


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Seed demo migration projects")
    parser.add_argument("--dry-run", action="store_true", help="Show what would be done without making changes")

    args = parser.parse_args()

    engine = build_engine(get_settings().database_url)
    init_db(engine)
    count = seed_demo_projects(DatabaseStorage(build_session_factory(engine)), dry_run=args.dry_run)
    logger.info(f"Done: {count} demo projects {'to create' if args.dry_run else 'created'}")
