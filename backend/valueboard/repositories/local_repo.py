import json
import shutil
from pathlib import Path
from typing import Any, Optional

from valueboard.core.exceptions import NotFoundError, PersistenceError
from valueboard.core.logging import get_logger
from valueboard.repositories.base import CollectionDao, sort_records
from valueboard.schemas.collections import Collection, Record, utc_now

logger = get_logger(__name__)


class LocalDao(CollectionDao):
    """Collection storage in JSON files, for development and tests.

    Layout under ``base_dir``:
        collections/{name}.json      - collection definitions
        records/{name}/{id}.json     - records
        _migrations.json             - executed migration ledger
    """

    def __init__(self, base_dir: Path | None = None) -> None:
        self.data_dir = base_dir or Path(__file__).resolve().parents[2] / "data"
        self.collection_dir = self.data_dir / "collections"
        self.record_dir = self.data_dir / "records"
        self.ledger_path = self.data_dir / "_migrations.json"
        self.collection_dir.mkdir(parents=True, exist_ok=True)
        self.record_dir.mkdir(parents=True, exist_ok=True)

    def find_collection_by_name_or_id(self, name_or_id: str) -> Collection:
        path = self.collection_dir / f"{name_or_id}.json"
        if path.exists():
            return Collection.model_validate(self._read(path))

        for path in sorted(self.collection_dir.glob("*.json")):
            data = self._read(path)
            if data.get("id") == name_or_id:
                return Collection.model_validate(data)

        raise NotFoundError(
            f"Collection '{name_or_id}' wasn't found", details={"collection": name_or_id}
        )

    def _write_collection(self, collection: Collection) -> None:
        path = self.collection_dir / f"{collection.name}.json"
        self._write(path, collection.model_dump(mode="json"))
        (self.record_dir / collection.name).mkdir(parents=True, exist_ok=True)

    def delete_collection(self, collection: Collection) -> None:
        path = self.collection_dir / f"{collection.name}.json"
        records = self.record_dir / collection.name
        try:
            if records.exists():
                shutil.rmtree(records)
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise PersistenceError(
                f"Failed to delete collection '{collection.name}': {exc}",
                details={"collection": collection.name},
            ) from exc
        logger.info("Deleted collection", extra={"collection": collection.name})

    def find_record_by_id(self, collection_name: str, record_id: str) -> Record:
        self.find_collection_by_name_or_id(collection_name)
        path = self.record_dir / collection_name / f"{record_id}.json"
        if not path.exists():
            raise NotFoundError(
                f"Record '{record_id}' wasn't found in {collection_name}",
                details={"collection": collection_name, "record_id": record_id},
            )
        return Record.model_validate(self._read(path))

    def find_records(
        self,
        collection_name: str,
        sort: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[Record]:
        self.find_collection_by_name_or_id(collection_name)
        records = sort_records(self._load_records(collection_name), sort)
        return records[:limit] if limit is not None else records

    def _find_matching(self, collection_name: str, criteria: dict[str, Any]) -> list[Record]:
        return [
            record for record in self._load_records(collection_name)
            if all(record.get(field) == value for field, value in criteria.items())
        ]

    def _write_record(self, record: Record) -> None:
        path = self.record_dir / record.collection_name / f"{record.id}.json"
        self._write(path, record.model_dump(mode="json"))

    def _load_records(self, collection_name: str) -> list[Record]:
        directory = self.record_dir / collection_name
        return [
            Record.model_validate(self._read(path))
            for path in sorted(directory.glob("*.json"))
        ]

    # Migration ledger

    def executed_migrations(self) -> dict[str, str]:
        if not self.ledger_path.exists():
            return {}
        return {
            migration_id: entry["executed_at"]
            for migration_id, entry in self._read(self.ledger_path).items()
        }

    def mark_migration_executed(self, migration_id: str) -> None:
        ledger = self._read(self.ledger_path) if self.ledger_path.exists() else {}
        ledger[migration_id] = {"executed_at": utc_now(), "status": "completed"}
        self._write(self.ledger_path, ledger)

    def unmark_migration(self, migration_id: str) -> None:
        if not self.ledger_path.exists():
            return
        ledger = self._read(self.ledger_path)
        ledger.pop(migration_id, None)
        self._write(self.ledger_path, ledger)

    @staticmethod
    def _read(path: Path) -> dict[str, Any]:
        return json.loads(path.read_text(encoding="utf-8"))

    @staticmethod
    def _write(path: Path, payload: dict[str, Any]) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"Failed to write {path.name}: {exc}") from exc
