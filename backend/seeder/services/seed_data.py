from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Protocol, Sequence, Tuple

from firebase_admin import firestore
from google.api_core.exceptions import AlreadyExists
from pydantic import ValidationError

from seeder.core.config import Settings, settings
from seeder.models.schemas import AuthorizationType, IndexResult

logger = logging.getLogger(__name__)


MIGRATION_ID = "add_user_authorization_types"
AUTHORIZATION_TYPE_ID_FIELD = "userAuthorizationTypeId"
UNIQUE_INDEX_NAME = "idx_user_authorization_type_id"
IDENTITY_LINKS_INDEX_NAME = "idx_user_identity_links_auth_type"

AUTHORIZATION_TYPES: Tuple[AuthorizationType, ...] = (
    AuthorizationType(id=1, description="Apple"),
    AuthorizationType(id=2, description="Google"),
    AuthorizationType(id=3, description="Email/Password"),
    AuthorizationType(id=4, description="Anonymous"),
)


class SeedError(Exception):
    pass


class DuplicateAuthorizationTypeError(SeedError):
    def __init__(self, type_id: int, document_ids: Iterable[str]) -> None:
        self.type_id = type_id
        self.document_ids = sorted(document_ids)
        super().__init__(
            f"Authorization type id {type_id} is not unique "
            f"(documents: {', '.join(self.document_ids)})"
        )


class InvalidAuthorizationTypeError(SeedError):
    def __init__(self, document_id: str, reason: str) -> None:
        self.document_id = document_id
        super().__init__(f"Document {document_id} is not a valid authorization type: {reason}")


class IndexManager(Protocol):
    def ensure_field_index(self, collection: str, field_path: str, name: str) -> None: ...


@dataclass
class SeedReport:
    created: int
    updated: int
    authorization_types: List[AuthorizationType]
    indexes: List[IndexResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.authorization_types)

    def as_dict(self) -> dict:
        return {
            "created": self.created,
            "updated": self.updated,
            "total": self.total,
            "indexes": [index.model_dump() for index in self.indexes],
            "authorization_types": {item.id: item.description for item in self.authorization_types},
        }


def _check_seed_ids(records: Sequence[AuthorizationType]) -> None:
    seen: set = set()
    for record in records:
        if record.id in seen:
            raise DuplicateAuthorizationTypeError(record.id, [record.document_id, record.document_id])
        seen.add(record.id)


def upsert_authorization_types(
    db,
    records: Sequence[AuthorizationType] = AUTHORIZATION_TYPES,
    collection: str = settings.AUTHORIZATION_TYPES_COLLECTION,
) -> Tuple[int, int]:
    """Write every record keyed on its id in one batch.

    Existing documents keep ``createdAtUtc``; everything else is refreshed.
    Returns ``(created, updated)``.
    """
    _check_seed_ids(records)
    collection_ref = db.collection(collection)
    batch = db.batch()
    created = 0
    updated = 0

    for record in records:
        doc_ref = collection_ref.document(record.document_id)
        payload = record.to_document()
        payload["updatedAtUtc"] = firestore.SERVER_TIMESTAMP
        if doc_ref.get().exists:
            batch.set(doc_ref, payload, merge=True)
            updated += 1
        else:
            payload["createdAtUtc"] = firestore.SERVER_TIMESTAMP
            batch.set(doc_ref, payload)
            created += 1

    batch.commit()
    logger.info("Upserted %d authorization type(s): %d created, %d updated", len(records), created, updated)
    return created, updated


def insert_authorization_type(
    db,
    record: AuthorizationType,
    collection: str = settings.AUTHORIZATION_TYPES_COLLECTION,
) -> None:
    """Create-only insert; a second record with the same id is rejected."""
    payload = record.to_document()
    payload["createdAtUtc"] = firestore.SERVER_TIMESTAMP
    payload["updatedAtUtc"] = firestore.SERVER_TIMESTAMP
    try:
        db.collection(collection).document(record.document_id).create(payload)
    except AlreadyExists as exc:
        raise DuplicateAuthorizationTypeError(record.id, [record.document_id]) from exc


def ensure_unique_ids(db, collection: str = settings.AUTHORIZATION_TYPES_COLLECTION) -> IndexResult:
    """Fail if any document is malformed or two documents share an authorization type id.

    New writes are kept unique by the document ID; this catches rows left over
    from inserts that were not keyed on the id. Ids are compared as integers,
    so a leftover ``"3"`` collides with ``3``.
    """
    by_id: Dict[int, List[str]] = defaultdict(list)
    for snapshot in db.collection(collection).stream():
        try:
            record = AuthorizationType.from_snapshot(snapshot)
        except ValidationError as exc:
            reason = "; ".join(f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in exc.errors())
            raise InvalidAuthorizationTypeError(snapshot.id, reason) from exc
        by_id[record.id].append(snapshot.id)

    for type_id, document_ids in sorted(by_id.items()):
        if len(document_ids) > 1:
            raise DuplicateAuthorizationTypeError(type_id, document_ids)

    logger.info("Unique index %s holds for %s.%s", UNIQUE_INDEX_NAME, collection, AUTHORIZATION_TYPE_ID_FIELD)
    return IndexResult(
        collection=collection,
        field=AUTHORIZATION_TYPE_ID_FIELD,
        name=UNIQUE_INDEX_NAME,
        created=True,
        unique=True,
    )


def collection_exists(db, collection: str) -> bool:
    return any(ref.id == collection for ref in db.collections())


def ensure_identity_links_index(
    db,
    index_manager: IndexManager,
    collection: str = settings.IDENTITY_LINKS_COLLECTION,
) -> IndexResult:
    result = IndexResult(
        collection=collection,
        field=AUTHORIZATION_TYPE_ID_FIELD,
        name=IDENTITY_LINKS_INDEX_NAME,
        created=False,
    )
    if not collection_exists(db, collection):
        logger.info("%s collection doesn't exist yet, skipping index creation", collection)
        return result

    index_manager.ensure_field_index(collection, AUTHORIZATION_TYPE_ID_FIELD, IDENTITY_LINKS_INDEX_NAME)
    return result.model_copy(update={"created": True})


def list_authorization_types(
    db, collection: str = settings.AUTHORIZATION_TYPES_COLLECTION
) -> List[AuthorizationType]:
    items = [AuthorizationType.from_snapshot(snapshot) for snapshot in db.collection(collection).stream()]
    return sorted(items, key=lambda item: item.id)


def record_migration(db, report: SeedReport, collection: str = settings.METADATA_COLLECTION) -> None:
    db.collection(collection).document(f"migration_{MIGRATION_ID}").set(
        {
            "migration": MIGRATION_ID,
            "count": report.total,
            "created": report.created,
            "updated": report.updated,
            "applied_at": firestore.SERVER_TIMESTAMP,
        },
        merge=True,
    )


def seed_authorization_types(db, index_manager: IndexManager, config: Settings = settings) -> SeedReport:
    """Seed the authorization type lookup table and its indexes.

    Every step is fatal on error; nothing is retried or rolled back.
    """
    logger.info("Seeding %s", config.AUTHORIZATION_TYPES_COLLECTION)
    created, updated = upsert_authorization_types(
        db, AUTHORIZATION_TYPES, config.AUTHORIZATION_TYPES_COLLECTION
    )
    unique_index = ensure_unique_ids(db, config.AUTHORIZATION_TYPES_COLLECTION)
    links_index = ensure_identity_links_index(db, index_manager, config.IDENTITY_LINKS_COLLECTION)

    report = SeedReport(
        created=created,
        updated=updated,
        authorization_types=list_authorization_types(db, config.AUTHORIZATION_TYPES_COLLECTION),
        indexes=[unique_index, links_index],
    )
    record_migration(db, report, config.METADATA_COLLECTION)
    logger.info("Seed data status: %s", report.as_dict())
    return report
