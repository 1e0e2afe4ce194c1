"""
Migration: value_quarters_and_counters
Created: 2025-10-20

Description:
    Creates the value_quarters and counters collections and seeds them.

    value_quarters gets one record per fiscal quarter from 1999Q1 through
    2025Q4, each with a pseudorandom value drawn from a seed-42 generator in
    chronological order, so every run produces the same values.

    counters gets a single record with value 0. Its record id and write
    rules come from the configured counter profile.

    Both collections are dropped first if they exist, so re-running the
    upgrade restores the seeded state.
"""

from contextlib import contextmanager
from typing import Iterator, Optional

from valueboard.core.config import CounterProfile, get_settings
from valueboard.core.exceptions import MigrationError, NotFoundError, PersistenceError
from valueboard.core.logging import LogContext, get_logger
from valueboard.core.seeded_random import SeededRandom
from valueboard.repositories.base import CollectionDao
from valueboard.schemas.collections import Collection, FieldType, Record, SchemaField

logger = get_logger("valueboard.migrations.value_quarters_and_counters")

MIN_VALUE = 1.0
MAX_VALUE = 500_000_000_000.0
START_YEAR = 1999
START_QUARTER = 1
END_YEAR = 2025
END_QUARTER = 4
SEED = 42

VALUE_QUARTERS = "value_quarters"
COUNTERS = "counters"


@contextmanager
def migration_step(step: str, **details) -> Iterator[None]:
    """Turn a persistence failure inside the block into a MigrationError."""
    try:
        yield
    except PersistenceError as exc:
        raise MigrationError(
            f"{step} failed: {exc.message}",
            details={"step": step, **exc.details, **details},
        ) from exc


# =============================================================================
# Quarters
# =============================================================================


def iter_quarters(
    start_year: int,
    start_quarter: int,
    end_year: int,
    end_quarter: int,
) -> Iterator[tuple[int, int]]:
    """Yield (year, quarter) pairs in chronological order, both ends inclusive."""
    for quarter in (start_quarter, end_quarter):
        if not 1 <= quarter <= 4:
            raise ValueError(f"Quarter must be between 1 and 4, got {quarter}")

    for year in range(start_year, end_year + 1):
        q_start = start_quarter if year == start_year else 1
        q_end = end_quarter if year == end_year else 4
        for quarter in range(q_start, q_end + 1):
            yield year, quarter


def quarter_count(start_year: int, start_quarter: int, end_year: int, end_quarter: int) -> int:
    """Number of quarters in the closed range."""
    return max(0, (end_year - start_year) * 4 + (end_quarter - start_quarter + 1))


def quarter_label(year: int, quarter: int) -> str:
    """Format a quarter as stored, e.g. ``1999Q1``."""
    return f"{year}Q{quarter}"


# =============================================================================
# Collection definitions
# =============================================================================


def value_quarters_collection() -> Collection:
    return Collection(
        name=VALUE_QUARTERS,
        list_rule="",
        view_rule="",
        create_rule=None,
        update_rule=None,
        delete_rule=None,
        schema_fields=[
            SchemaField(name="quarter", type=FieldType.TEXT, required=True),
            SchemaField(name="value", type=FieldType.NUMBER, required=True),
        ],
        indexes=[
            "CREATE UNIQUE INDEX idx_value_quarters_quarter ON value_quarters (quarter)",
        ],
    )


def counters_collection(profile: CounterProfile) -> Collection:
    return Collection(
        name=COUNTERS,
        list_rule="",
        view_rule="",
        create_rule=profile.create_rule,
        update_rule=profile.update_rule,
        delete_rule=None,
        schema_fields=[
            SchemaField(name="value", type=FieldType.NUMBER, required=False),
        ],
    )


# =============================================================================
# Steps
# =============================================================================


def drop_collection_if_exists(dao: CollectionDao, name: str) -> bool:
    """Delete a collection and its records. Returns False if it did not exist."""
    with migration_step("find collection", collection=name):
        try:
            existing = dao.find_collection_by_name_or_id(name)
        except NotFoundError:
            return False

    with migration_step("delete collection", collection=name):
        dao.delete_collection(existing)
    return True


def recreate_value_quarters_collection(dao: CollectionDao) -> Collection:
    """Drop, recreate and seed value_quarters."""
    drop_collection_if_exists(dao, VALUE_QUARTERS)

    collection = value_quarters_collection()
    with migration_step("create collection", collection=VALUE_QUARTERS):
        dao.save_collection(collection)

    rng = SeededRandom(SEED)
    seeded = 0
    for year, quarter in iter_quarters(START_YEAR, START_QUARTER, END_YEAR, END_QUARTER):
        record = Record.new(collection)
        record.set("quarter", quarter_label(year, quarter))
        record.set("value", rng.uniform(MIN_VALUE, MAX_VALUE))

        with migration_step("save record", quarter=record.get("quarter")):
            dao.save_record(record)
        seeded += 1

    logger.info(f"Seeded {seeded} records", extra={"collection": VALUE_QUARTERS})
    return collection


def recreate_counters_collection(dao: CollectionDao, profile: CounterProfile) -> Collection:
    """Drop, recreate and seed counters with a single zero-valued record."""
    drop_collection_if_exists(dao, COUNTERS)

    collection = counters_collection(profile)
    with migration_step("create collection", collection=COUNTERS):
        dao.save_collection(collection)

    record = Record.new(collection)
    record.set_id(profile.record_id)
    record.set("value", 0)

    with migration_step("save record", record_id=profile.record_id):
        dao.save_record(record)

    logger.info(
        f"Seeded counter ({profile.name} profile)",
        extra={"collection": COUNTERS, "record_id": profile.record_id},
    )
    return collection


# =============================================================================
# Entry points
# =============================================================================


def upgrade(dao: CollectionDao, counter_profile: Optional[CounterProfile] = None) -> None:
    """
    Create and seed value_quarters and counters.

    Args:
        dao: Collection DAO of the target database
        counter_profile: Variant of the counters collection; defaults to
            the COUNTER_PROFILE setting
    """
    profile = counter_profile or get_settings().counter_profile

    with LogContext(logger, "value_quarters_and_counters upgrade", counter_profile=profile.name):
        recreate_value_quarters_collection(dao)
        recreate_counters_collection(dao, profile)


def downgrade(dao: CollectionDao) -> None:
    """
    Delete value_quarters and counters if they exist.

    Args:
        dao: Collection DAO of the target database
    """
    with LogContext(logger, "value_quarters_and_counters downgrade"):
        for name in (VALUE_QUARTERS, COUNTERS):
            if not drop_collection_if_exists(dao, name):
                logger.info(f"Collection {name} not found, nothing to delete")
