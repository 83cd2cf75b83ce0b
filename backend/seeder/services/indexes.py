from __future__ import annotations

import logging
from typing import Optional

from google.cloud.firestore_admin_v1 import FirestoreAdminClient
from google.cloud.firestore_admin_v1.types import Field, Index

logger = logging.getLogger(__name__)

INDEX_OPERATION_TIMEOUT = 300


class FirestoreIndexManager:
    """Single-field index administration through the Firestore Admin API.

    Firestore has no named or unique indexes; ``name`` is only a label used in
    logs so operators can match the index to the migration that created it.
    """

    def __init__(
        self,
        project_id: str,
        database: str = "(default)",
        client: Optional[FirestoreAdminClient] = None,
        credentials=None,
    ) -> None:
        self.project_id = project_id
        self.database = database
        self.client = client or FirestoreAdminClient(credentials=credentials)

    @staticmethod
    def _has_ascending_index(indexes, field_path: str) -> bool:
        for index in indexes:
            if index.query_scope != Index.QueryScope.COLLECTION:
                continue
            for index_field in index.fields:
                if index_field.field_path == field_path and index_field.order == Index.IndexField.Order.ASCENDING:
                    return True
        return False

    def ensure_field_index(self, collection: str, field_path: str, name: str) -> None:
        """Add an ascending collection index to the field, keeping the indexes it already has.

        An explicit ``index_config`` replaces the automatic single-field
        settings, so the current config is read first and extended.
        """
        field_name = FirestoreAdminClient.field_path(self.project_id, self.database, collection, field_path)
        current = self.client.get_field(name=field_name).index_config
        if current.uses_ancestor_config or self._has_ascending_index(current.indexes, field_path):
            logger.info("Index %s already present on %s.%s, skipping", name, collection, field_path)
            return

        ascending = Index(
            query_scope=Index.QueryScope.COLLECTION,
            fields=[
                Index.IndexField(
                    field_path=field_path,
                    order=Index.IndexField.Order.ASCENDING,
                )
            ],
        )
        field = Field(
            name=field_name,
            index_config=Field.IndexConfig(indexes=list(current.indexes) + [ascending]),
        )
        logger.info("Creating index %s on %s.%s", name, collection, field_path)
        operation = self.client.update_field(field=field, update_mask={"paths": ["index_config"]})
        operation.result(timeout=INDEX_OPERATION_TIMEOUT)
        logger.info("Index %s ready", name)
