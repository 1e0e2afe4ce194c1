"""
Collection DAO

The data-access interface the migrations and the API talk to. Backends
implement storage primitives; record validation and unique index checks
live here so every backend enforces the same host rules.
"""

import re
from abc import ABC, abstractmethod
from typing import Any, Optional

from valueboard.core.exceptions import NotFoundError, ValidationError
from valueboard.schemas.collections import Collection, FieldType, Record, utc_now

COLLECTION_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
MIGRATIONS_COLLECTION = "_migrations"


def validate_collection(collection: Collection) -> None:
    """Reject collection definitions the host would not accept."""
    if not COLLECTION_NAME_RE.match(collection.name) or collection.name.startswith("_"):
        raise ValidationError(
            f"Invalid collection name '{collection.name}'",
            details={"collection": collection.name},
        )

    seen: set[str] = set()
    for field in collection.schema_fields:
        if field.name in seen or field.name in ("id", "created", "updated"):
            raise ValidationError(
                f"Duplicate or reserved field '{field.name}' in {collection.name}",
                details={"collection": collection.name, "field": field.name},
            )
        seen.add(field.name)

    for index in collection.unique_indexes():
        missing = [col for col in index.columns if col not in seen]
        if missing:
            raise ValidationError(
                f"Index {index.name} references unknown field(s): {', '.join(missing)}",
                details={"collection": collection.name, "index": index.name},
            )


def _is_blank(field_type: FieldType, value: Any) -> bool:
    if value is None:
        return True
    if field_type == FieldType.TEXT:
        return value == ""
    return value == 0


def validate_record(collection: Collection, record: Record) -> None:
    """Check a record's data against the collection's field definitions."""
    context = {"collection": collection.name, "record_id": record.id}

    unknown = [name for name in record.data if collection.get_field(name) is None]
    if unknown:
        raise ValidationError(
            f"Unknown field(s) for {collection.name}: {', '.join(sorted(unknown))}",
            details=context,
        )

    for field in collection.schema_fields:
        value = record.data.get(field.name)

        if field.required and _is_blank(field.type, value):
            raise ValidationError(
                f"Field '{field.name}' is required", details={**context, "field": field.name}
            )
        if value is None:
            continue

        if field.type == FieldType.TEXT and not isinstance(value, str):
            raise ValidationError(
                f"Field '{field.name}' must be text", details={**context, "field": field.name}
            )
        if field.type == FieldType.NUMBER and (
            isinstance(value, bool) or not isinstance(value, (int, float))
        ):
            raise ValidationError(
                f"Field '{field.name}' must be a number", details={**context, "field": field.name}
            )


class CollectionDao(ABC):
    """Capability set of the host data platform."""

    # =========================================================================
    # Collections
    # =========================================================================

    @abstractmethod
    def find_collection_by_name_or_id(self, name_or_id: str) -> Collection:
        """Return the collection, or raise NotFoundError."""

    def save_collection(self, collection: Collection) -> None:
        """Create or replace a collection definition."""
        validate_collection(collection)
        self._write_collection(collection)

    @abstractmethod
    def delete_collection(self, collection: Collection) -> None:
        """Delete a collection together with all of its records."""

    @abstractmethod
    def _write_collection(self, collection: Collection) -> None:
        ...

    # =========================================================================
    # Records
    # =========================================================================

    def save_record(self, record: Record) -> None:
        """Validate and persist a record, stamping its timestamps."""
        collection = self.find_collection_by_name_or_id(record.collection_name)
        validate_record(collection, record)

        for index in collection.unique_indexes():
            criteria = {col: record.data.get(col) for col in index.columns}
            if all(value is None for value in criteria.values()):
                # NULLs never collide in a unique index
                continue
            clashes = [
                other for other in self._find_matching(collection.name, criteria)
                if other.id != record.id
            ]
            if clashes:
                raise ValidationError(
                    f"Value must be unique for index {index.name}",
                    details={
                        "collection": collection.name,
                        "index": index.name,
                        "record_id": record.id,
                    },
                )

        now = utc_now()
        if record.created is None:
            record.created = now
        record.updated = now
        self._write_record(record)

    @abstractmethod
    def find_record_by_id(self, collection_name: str, record_id: str) -> Record:
        """Return the record, or raise NotFoundError."""

    @abstractmethod
    def find_records(
        self,
        collection_name: str,
        sort: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[Record]:
        """List records of a collection; ``sort`` is a field name, ``-field`` descending."""

    @abstractmethod
    def _find_matching(self, collection_name: str, criteria: dict[str, Any]) -> list[Record]:
        ...

    @abstractmethod
    def _write_record(self, record: Record) -> None:
        ...

    # =========================================================================
    # Migration ledger
    # =========================================================================

    @abstractmethod
    def executed_migrations(self) -> dict[str, str]:
        """Map of executed migration ids to their execution timestamps."""

    @abstractmethod
    def mark_migration_executed(self, migration_id: str) -> None:
        ...

    @abstractmethod
    def unmark_migration(self, migration_id: str) -> None:
        ...

    # =========================================================================
    # Helpers
    # =========================================================================

    def has_collection(self, name_or_id: str) -> bool:
        try:
            self.find_collection_by_name_or_id(name_or_id)
        except NotFoundError:
            return False
        return True


def sort_records(records: list[Record], sort: Optional[str]) -> list[Record]:
    """Sort records in memory the way the Firestore backend orders them."""
    if not sort:
        return sorted(records, key=lambda r: (r.created or "", r.id))
    descending = sort.startswith("-")
    field = sort.lstrip("-")
    present = [r for r in records if r.get(field) is not None]
    missing = [r for r in records if r.get(field) is None]
    present.sort(key=lambda r: r.get(field), reverse=descending)
    return missing + present if not descending else present + missing
