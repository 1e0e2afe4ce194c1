"""
Counter Service

Reads and adjusts the shared counter record in the counters collection.
The record id comes from the configured counter profile.
"""

from typing import Optional

from valueboard.auth.firebase_auth import FirebaseUser
from valueboard.auth.rules import check_rule
from valueboard.core.config import CounterProfile
from valueboard.core.exceptions import NotFoundError
from valueboard.core.logging import get_logger
from valueboard.repositories.base import CollectionDao
from valueboard.schemas.collections import Record

logger = get_logger(__name__)

COLLECTION = "counters"


class CounterService:
    def __init__(self, dao: CollectionDao, profile: CounterProfile) -> None:
        self.dao = dao
        self.counter_id = profile.record_id

    def get_or_create(self, user: Optional[FirebaseUser] = None) -> Record:
        """
        Get the counter record, creating it with value 0 if it is missing.

        Raises:
            NotFoundError: if the counters collection does not exist
            AccessDeniedError: if the view (or create) rule denies the caller
        """
        collection = self.dao.find_collection_by_name_or_id(COLLECTION)
        check_rule(collection, "view", user)

        try:
            return self.dao.find_record_by_id(COLLECTION, self.counter_id)
        except NotFoundError:
            check_rule(collection, "create", user)

        record = Record.new(collection)
        record.set_id(self.counter_id)
        record.set("value", 0)
        self.dao.save_record(record)
        logger.info(f"Created missing counter '{self.counter_id}'")
        return record

    def get_value(self, user: Optional[FirebaseUser] = None) -> float:
        return self.get_or_create(user).get("value") or 0

    def increment(self, user: Optional[FirebaseUser] = None) -> Record:
        return self._adjust(1, user)

    def decrement(self, user: Optional[FirebaseUser] = None) -> Record:
        return self._adjust(-1, user)

    def _adjust(self, delta: int, user: Optional[FirebaseUser]) -> Record:
        counter = self.get_or_create(user)
        collection = self.dao.find_collection_by_name_or_id(COLLECTION)
        check_rule(collection, "update", user)

        counter.set("value", (counter.get("value") or 0) + delta)
        self.dao.save_record(counter)
        return counter
