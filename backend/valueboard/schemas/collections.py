"""
Collection Models

Pydantic models for collection definitions and records as the storage
backends persist them.

Access rules follow the host convention: ``None`` restricts the action to
superusers and ``""`` leaves it open to everyone.
"""

import re
import secrets
import string
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

ID_ALPHABET = string.ascii_lowercase + string.digits
ID_LENGTH = 15

_UNIQUE_INDEX_RE = re.compile(
    r"^\s*CREATE\s+UNIQUE\s+INDEX\s+(?:IF\s+NOT\s+EXISTS\s+)?[`\"]?(\w+)[`\"]?"
    r"\s+ON\s+[`\"]?(\w+)[`\"]?\s*\(([^)]+)\)\s*;?\s*$",
    re.IGNORECASE,
)


def generate_id() -> str:
    """Generate a random 15-character lowercase alphanumeric record id."""
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(ID_LENGTH))


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class FieldType(str, Enum):
    """Supported schema field types."""

    TEXT = "text"
    NUMBER = "number"


class CollectionType(str, Enum):
    BASE = "base"


class SchemaField(BaseModel):
    """A typed field of a collection."""

    name: str
    type: FieldType
    required: bool = False
    options: dict[str, Any] = Field(default_factory=dict)


class UniqueIndex(BaseModel):
    name: str
    columns: list[str]


class Collection(BaseModel):
    """A named schema container with fields, access rules and indexes."""

    id: str = Field(default_factory=generate_id)
    name: str
    type: CollectionType = CollectionType.BASE
    list_rule: Optional[str] = None
    view_rule: Optional[str] = None
    create_rule: Optional[str] = None
    update_rule: Optional[str] = None
    delete_rule: Optional[str] = None
    schema_fields: list[SchemaField] = Field(default_factory=list)
    indexes: list[str] = Field(default_factory=list)

    def get_field(self, name: str) -> Optional[SchemaField]:
        for field in self.schema_fields:
            if field.name == name:
                return field
        return None

    def unique_indexes(self) -> list[UniqueIndex]:
        """Parse the unique index statements that target this collection.

        Statements that are not unique indexes, or that target another
        table, are left to the host and ignored here.
        """
        parsed = []
        for statement in self.indexes:
            match = _UNIQUE_INDEX_RE.match(statement)
            if not match or match.group(2) != self.name:
                continue
            columns = [col.strip().strip("`\"") for col in match.group(3).split(",")]
            parsed.append(UniqueIndex(name=match.group(1), columns=columns))
        return parsed


class Record(BaseModel):
    """A single row of a collection."""

    id: str = Field(default_factory=generate_id)
    collection_name: str
    data: dict[str, Any] = Field(default_factory=dict)
    created: Optional[str] = None
    updated: Optional[str] = None

    @classmethod
    def new(cls, collection: Collection) -> "Record":
        """Create an empty record bound to a collection."""
        return cls(collection_name=collection.name)

    def set_id(self, record_id: str) -> None:
        self.id = record_id

    def set(self, field: str, value: Any) -> None:
        self.data[field] = value

    def get(self, field: str, default: Any = None) -> Any:
        return self.data.get(field, default)
