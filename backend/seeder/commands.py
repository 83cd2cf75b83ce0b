from __future__ import annotations

import logging
from typing import List

from seeder.core.config import settings
from seeder.core.firebase import get_db, get_google_credentials, verify_connection
from seeder.services.indexes import FirestoreIndexManager
from seeder.services.seed_data import SeedReport, seed_authorization_types

LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"

logger = logging.getLogger("seeder")


def configure_logging() -> None:
    logging.basicConfig(level=settings.LOG_LEVEL.upper(), format=LOG_FORMAT)


def format_report(report: SeedReport) -> List[str]:
    lines = [
        f"✅ Upserted {report.created + report.updated} user authorization types "
        f"({report.created} created, {report.updated} updated)",
    ]
    for index in report.indexes:
        if index.unique:
            lines.append(f"✅ Verified unique index {index.name} on {index.field}")
        elif index.created:
            lines.append(f"✅ Created index {index.name} on {index.collection}")
        else:
            lines.append(f"ℹ️  {index.collection} collection doesn't exist yet, skipping index creation")

    lines.append("")
    lines.append("📋 Verification:")
    lines.append(f"Total authorization types: {report.total}")
    lines.append("")
    lines.append("Authorization Types:")
    for item in report.authorization_types:
        lines.append(f"  {item.id}: {item.description}")
    return lines


def seed_main() -> int:
    configure_logging()
    print(f"Creating {settings.AUTHORIZATION_TYPES_COLLECTION} collection...")
    try:
        db = get_db()
        index_manager = FirestoreIndexManager(
            settings.FIREBASE_PROJECT_ID or db.project,
            settings.FIRESTORE_DATABASE,
            credentials=get_google_credentials(),
        )
        report = seed_authorization_types(db, index_manager)
    except Exception:
        logger.exception("Seeding %s failed", settings.AUTHORIZATION_TYPES_COLLECTION)
        print("❌ Migration failed")
        raise

    for line in format_report(report):
        print(line)
    print("\n✅ Migration complete!")
    return 0


def check_main() -> int:
    configure_logging()
    verify_connection(get_db())
    print("Firebase connection verified and bootstrap document created.")
    return 0
