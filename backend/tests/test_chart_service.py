"""Unit tests for ChartService."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from valueboard.core.exceptions import AccessDeniedError, NotFoundError
from valueboard.schemas.collections import Collection, Record
from valueboard.services.chart_service import (
    PAGE_SIZE,
    ChartService,
    format_quarter_label,
    quarter_sort_key,
)


def _quarter(quarter: str, value: float) -> Record:
    return Record(collection_name="value_quarters", data={"quarter": quarter, "value": value})


class TestQuarterHelpers:
    def test_sort_key(self):
        assert quarter_sort_key("2023Q1") == 20231
        assert quarter_sort_key("1999Q4") == 19994

    def test_sort_key_unparseable(self):
        assert quarter_sort_key("soon") == 0
        assert quarter_sort_key("2023Q5") == 0

    def test_label(self):
        assert format_quarter_label("2023Q1") == "Q1 2023"

    def test_label_unparseable_kept(self):
        assert format_quarter_label("soon") == "soon"


class TestBuildSeries:
    def test_orders_chronologically(self):
        records = [_quarter("2001Q1", 3.0), _quarter("2000Q4", 2.0), _quarter("2000Q1", 1.0)]

        series = ChartService.build_series(records)

        assert series.labels == ["Q1 2000", "Q4 2000", "Q1 2001"]
        assert series.values == [1.0, 2.0, 3.0]

    def test_unparseable_quarters_first(self):
        series = ChartService.build_series([_quarter("2000Q1", 1.0), _quarter("tbd", 9.0)])
        assert series.labels == ["tbd", "Q1 2000"]

    def test_empty(self):
        series = ChartService.build_series([])
        assert series.labels == []
        assert series.values == []


class TestGetChartSeries:
    def test_fetches_first_page_sorted(self):
        dao = MagicMock()
        dao.find_collection_by_name_or_id.return_value = Collection(name="value_quarters", list_rule="")
        dao.find_records.return_value = [_quarter("2000Q1", 1.0)]

        series = ChartService(dao).get_chart_series()

        dao.find_records.assert_called_once_with("value_quarters", sort="quarter", limit=PAGE_SIZE)
        assert series.labels == ["Q1 2000"]

    def test_missing_collection(self):
        dao = MagicMock()
        dao.find_collection_by_name_or_id.side_effect = NotFoundError("missing")

        with pytest.raises(NotFoundError):
            ChartService(dao).get_chart_series()

    def test_restricted_list_rule(self):
        dao = MagicMock()
        dao.find_collection_by_name_or_id.return_value = Collection(name="value_quarters")

        with pytest.raises(AccessDeniedError):
            ChartService(dao).get_chart_series()
        dao.find_records.assert_not_called()
