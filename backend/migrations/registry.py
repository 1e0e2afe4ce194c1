"""
Migration registry

The ordered list of migrations handed to the runner. A migration module
that is not listed here is never run.
"""

from dataclasses import dataclass
from typing import Callable

from valueboard.repositories.base import CollectionDao

from migrations import m_20251020_001_value_quarters_and_counters as value_quarters_and_counters


@dataclass(frozen=True)
class Migration:
    id: str
    upgrade: Callable[[CollectionDao], None]
    downgrade: Callable[[CollectionDao], None]
    description: str = ""


MIGRATIONS: list[Migration] = [
    Migration(
        id="m_20251020_001_value_quarters_and_counters",
        upgrade=value_quarters_and_counters.upgrade,
        downgrade=value_quarters_and_counters.downgrade,
        description="Create and seed value_quarters and counters",
    ),
]
