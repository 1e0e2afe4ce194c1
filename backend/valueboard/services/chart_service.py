"""
Chart Service

Builds the quarterly chart series from the value_quarters collection.
"""

import re
from typing import Optional

from valueboard.auth.firebase_auth import FirebaseUser
from valueboard.auth.rules import check_rule
from valueboard.repositories.base import CollectionDao
from valueboard.schemas.collections import Record
from valueboard.schemas.models import ChartSeries


COLLECTION = "value_quarters"
PAGE_SIZE = 200

_QUARTER_RE = re.compile(r"(\d{4})Q([1-4])")


def quarter_sort_key(quarter: str) -> int:
    """Sortable key for a stored quarter, e.g. ``2023Q1`` -> 20231. Unparseable -> 0."""
    match = _QUARTER_RE.search(quarter)
    if not match:
        return 0
    return int(match.group(1)) * 10 + int(match.group(2))


def format_quarter_label(quarter: str) -> str:
    """Display label for a stored quarter, e.g. ``2023Q1`` -> ``Q1 2023``."""
    match = _QUARTER_RE.search(quarter)
    if not match:
        return quarter
    return f"Q{match.group(2)} {match.group(1)}"


class ChartService:
    def __init__(self, dao: CollectionDao) -> None:
        self.dao = dao

    def get_chart_series(self, user: Optional[FirebaseUser] = None) -> ChartSeries:
        """
        Fetch the quarterly records and shape them for the chart.

        Raises:
            NotFoundError: if the collection has not been created yet
            AccessDeniedError: if the list rule denies the caller
        """
        collection = self.dao.find_collection_by_name_or_id(COLLECTION)
        check_rule(collection, "list", user)

        records = self.dao.find_records(COLLECTION, sort="quarter", limit=PAGE_SIZE)
        return self.build_series(records)

    @staticmethod
    def build_series(records: list[Record]) -> ChartSeries:
        ordered = sorted(records, key=lambda r: quarter_sort_key(r.get("quarter", "")))
        return ChartSeries(
            labels=[format_quarter_label(r.get("quarter", "")) for r in ordered],
            values=[r.get("value") for r in ordered],
        )
