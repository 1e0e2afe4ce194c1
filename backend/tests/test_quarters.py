"""Tests for quarter enumeration used by the seed migration."""

from __future__ import annotations

import pytest

from migrations.m_20251020_001_value_quarters_and_counters import (
    END_QUARTER,
    END_YEAR,
    START_QUARTER,
    START_YEAR,
    iter_quarters,
    quarter_count,
    quarter_label,
)


class TestIterQuarters:
    def test_full_seed_range(self):
        quarters = list(iter_quarters(START_YEAR, START_QUARTER, END_YEAR, END_QUARTER))
        assert len(quarters) == 108
        assert quarters[0] == (1999, 1)
        assert quarters[-1] == (2025, 4)

    @pytest.mark.parametrize(
        "start_year,start_quarter,end_year,end_quarter,expected",
        [
            (1999, 1, 2025, 4, 108),
            (2000, 3, 2001, 2, 4),
            (2010, 1, 2012, 4, 12),
            (2020, 2, 2020, 3, 2),
            (2020, 4, 2020, 4, 1),
            (2019, 4, 2020, 1, 2),
        ],
    )
    def test_count_matches_formula(self, start_year, start_quarter, end_year, end_quarter, expected):
        quarters = list(iter_quarters(start_year, start_quarter, end_year, end_quarter))
        assert len(quarters) == expected
        assert quarter_count(start_year, start_quarter, end_year, end_quarter) == expected

    def test_chronological_without_gaps_or_duplicates(self):
        quarters = list(iter_quarters(1999, 1, 2025, 4))
        assert len(set(quarters)) == len(quarters)
        for (year, quarter), (next_year, next_quarter) in zip(quarters, quarters[1:]):
            if quarter == 4:
                assert (next_year, next_quarter) == (year + 1, 1)
            else:
                assert (next_year, next_quarter) == (year, quarter + 1)

    def test_partial_first_and_last_year(self):
        quarters = list(iter_quarters(2000, 3, 2001, 2))
        assert quarters == [(2000, 3), (2000, 4), (2001, 1), (2001, 2)]

    @pytest.mark.parametrize("bounds", [(2021, 1, 2020, 4), (2020, 3, 2020, 2)])
    def test_start_after_end_is_empty(self, bounds):
        assert list(iter_quarters(*bounds)) == []
        assert quarter_count(*bounds) == 0

    @pytest.mark.parametrize("bounds", [(2000, 0, 2001, 4), (2000, 1, 2001, 5)])
    def test_invalid_quarter_rejected(self, bounds):
        with pytest.raises(ValueError):
            list(iter_quarters(*bounds))


class TestQuarterLabel:
    def test_label_format(self):
        assert quarter_label(1999, 1) == "1999Q1"
        assert quarter_label(2025, 4) == "2025Q4"

    def test_labels_sort_chronologically(self):
        labels = [quarter_label(y, q) for y, q in iter_quarters(1999, 1, 2025, 4)]
        assert labels == sorted(labels)
