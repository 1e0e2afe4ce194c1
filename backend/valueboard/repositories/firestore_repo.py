"""
Firestore DAO

Collection storage backed by Firestore.

Data Structure:
    _collections/{name}     - Collection definitions (fields, rules, indexes)
    {name}/{record_id}      - Records, one document each, fields stored flat
    _migrations/{id}        - Executed migration ledger
"""

from typing import Any, Optional

import firebase_admin
from firebase_admin import firestore
from google.api_core import exceptions as google_exceptions
from google.cloud.firestore_v1 import FieldFilter

from valueboard.core.exceptions import NotFoundError, PersistenceError
from valueboard.core.logging import get_logger
from valueboard.repositories.base import MIGRATIONS_COLLECTION, CollectionDao
from valueboard.schemas.collections import Collection, Record, utc_now

logger = get_logger(__name__)

COLLECTIONS_COLLECTION = "_collections"


class FirestoreDao(CollectionDao):
    """DAO storing collection definitions and records in Firestore."""

    # Firestore batch write limit
    BATCH_SIZE = 500

    def __init__(self, db=None) -> None:
        if db is None:
            # Initialize Firebase Admin SDK with Application Default Credentials
            if not firebase_admin._apps:
                firebase_admin.initialize_app()
            db = firestore.client()

        self.db = db

    # =========================================================================
    # Collections
    # =========================================================================

    def find_collection_by_name_or_id(self, name_or_id: str) -> Collection:
        definitions = self.db.collection(COLLECTIONS_COLLECTION)
        try:
            doc = definitions.document(name_or_id).get()
            if doc.exists:
                return Collection.model_validate(doc.to_dict())

            query = definitions.where(filter=FieldFilter("id", "==", name_or_id)).limit(1)
            docs = list(query.stream())
        except google_exceptions.GoogleAPICallError as exc:
            raise PersistenceError(
                f"Failed to look up collection '{name_or_id}': {exc}",
                details={"collection": name_or_id},
            ) from exc

        if not docs:
            raise NotFoundError(
                f"Collection '{name_or_id}' wasn't found", details={"collection": name_or_id}
            )
        return Collection.model_validate(docs[0].to_dict())

    def _write_collection(self, collection: Collection) -> None:
        ref = self.db.collection(COLLECTIONS_COLLECTION).document(collection.name)
        try:
            ref.set(collection.model_dump(mode="json"))
        except google_exceptions.GoogleAPICallError as exc:
            raise PersistenceError(
                f"Failed to save collection '{collection.name}': {exc}",
                details={"collection": collection.name},
            ) from exc

    def delete_collection(self, collection: Collection) -> None:
        """Delete every record of the collection, then its definition."""
        try:
            deleted = self._delete_documents(self.db.collection(collection.name))
            self.db.collection(COLLECTIONS_COLLECTION).document(collection.name).delete()
        except google_exceptions.GoogleAPICallError as exc:
            raise PersistenceError(
                f"Failed to delete collection '{collection.name}': {exc}",
                details={"collection": collection.name},
            ) from exc
        logger.info(f"Deleted collection ({deleted} records)", extra={"collection": collection.name})

    def _delete_documents(self, collection_ref) -> int:
        """Delete all documents in a Firestore collection using batch writes."""
        deleted = 0
        while True:
            docs = list(collection_ref.limit(self.BATCH_SIZE).stream())
            if not docs:
                return deleted

            batch = self.db.batch()
            for doc in docs:
                batch.delete(doc.reference)
            batch.commit()
            deleted += len(docs)

            if len(docs) < self.BATCH_SIZE:
                return deleted

    # =========================================================================
    # Records
    # =========================================================================

    def find_record_by_id(self, collection_name: str, record_id: str) -> Record:
        self.find_collection_by_name_or_id(collection_name)
        try:
            doc = self.db.collection(collection_name).document(record_id).get()
        except google_exceptions.GoogleAPICallError as exc:
            raise PersistenceError(
                f"Failed to load record '{record_id}': {exc}",
                details={"collection": collection_name, "record_id": record_id},
            ) from exc

        if not doc.exists:
            raise NotFoundError(
                f"Record '{record_id}' wasn't found in {collection_name}",
                details={"collection": collection_name, "record_id": record_id},
            )
        return self._to_record(collection_name, doc)

    def find_records(
        self,
        collection_name: str,
        sort: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[Record]:
        self.find_collection_by_name_or_id(collection_name)

        query = self.db.collection(collection_name)
        if sort:
            direction = (
                firestore.Query.DESCENDING if sort.startswith("-") else firestore.Query.ASCENDING
            )
            query = query.order_by(sort.lstrip("-"), direction=direction)
        else:
            query = query.order_by("created")
        if limit is not None:
            query = query.limit(limit)

        try:
            return [self._to_record(collection_name, doc) for doc in query.stream()]
        except google_exceptions.GoogleAPICallError as exc:
            raise PersistenceError(
                f"Failed to list records of {collection_name}: {exc}",
                details={"collection": collection_name},
            ) from exc

    def _find_matching(self, collection_name: str, criteria: dict[str, Any]) -> list[Record]:
        query = self.db.collection(collection_name)
        for field, value in criteria.items():
            query = query.where(filter=FieldFilter(field, "==", value))
        try:
            return [self._to_record(collection_name, doc) for doc in query.stream()]
        except google_exceptions.GoogleAPICallError as exc:
            raise PersistenceError(
                f"Failed to query {collection_name}: {exc}",
                details={"collection": collection_name},
            ) from exc

    def _write_record(self, record: Record) -> None:
        payload = {**record.data, "created": record.created, "updated": record.updated}
        try:
            self.db.collection(record.collection_name).document(record.id).set(payload)
        except google_exceptions.GoogleAPICallError as exc:
            raise PersistenceError(
                f"Failed to save record '{record.id}': {exc}",
                details={"collection": record.collection_name, "record_id": record.id},
            ) from exc

    @staticmethod
    def _to_record(collection_name: str, doc) -> Record:
        data = doc.to_dict()
        created = data.pop("created", None)
        updated = data.pop("updated", None)
        return Record(
            id=doc.id,
            collection_name=collection_name,
            data=data,
            created=created,
            updated=updated,
        )

    # =========================================================================
    # Migration ledger
    # =========================================================================

    def executed_migrations(self) -> dict[str, str]:
        try:
            docs = list(self.db.collection(MIGRATIONS_COLLECTION).stream())
        except google_exceptions.GoogleAPICallError as exc:
            raise PersistenceError(f"Failed to read the migration ledger: {exc}") from exc
        return {doc.id: doc.to_dict().get("executed_at", "") for doc in docs}

    def mark_migration_executed(self, migration_id: str) -> None:
        try:
            self.db.collection(MIGRATIONS_COLLECTION).document(migration_id).set({
                "executed_at": utc_now(),
                "status": "completed",
            })
        except google_exceptions.GoogleAPICallError as exc:
            raise PersistenceError(
                f"Failed to record migration '{migration_id}': {exc}",
                details={"migration_id": migration_id},
            ) from exc

    def unmark_migration(self, migration_id: str) -> None:
        try:
            self.db.collection(MIGRATIONS_COLLECTION).document(migration_id).delete()
        except google_exceptions.GoogleAPICallError as exc:
            raise PersistenceError(
                f"Failed to remove migration '{migration_id}' from the ledger: {exc}",
                details={"migration_id": migration_id},
            ) from exc
