"""
BigQuery SQL builder tests.

Filter values and dates must only ever travel as named parameters.
"""

from datetime import date

import pytest

from deepdive.models import DimensionFilters, Perspective, Period
from deepdive.sql import (
    build_filter_conditions,
    get_entity_metrics_query,
    get_monthly_revenue_query,
    history_window_start,
)

TABLE = "project.dataset.facts"


@pytest.fixture
def periods():
    return (
        Period(start=date(2024, 10, 1), end=date(2024, 10, 31)),
        Period(start=date(2024, 12, 1), end=date(2024, 12, 31)),
    )


class TestFilterConditions:

    def test_no_filters(self):
        assert build_filter_conditions(DimensionFilters()) == ([], {})

    def test_string_and_int_columns(self):
        conditions, params = build_filter_conditions(
            DimensionFilters(pic=["alice"], pid=["100", "200"], zone="42")
        )

        assert conditions == [
            "pic IN UNNEST(@filter_pic)",
            "pid IN UNNEST(@filter_pid)",
            "zid IN UNNEST(@filter_zone)",
        ]
        assert params == {
            "filter_pic": ("STRING", ["alice"]),
            "filter_pid": ("INT64", [100, 200]),
            "filter_zone": ("INT64", [42]),
        }

    def test_team_is_not_a_column(self):
        assert build_filter_conditions(DimensionFilters(team=["WEB"])) == ([], {})

    def test_empty_list_matches_nothing(self):
        conditions, params = build_filter_conditions(DimensionFilters(pic=[]))
        assert conditions == ["pic IN UNNEST(@filter_pic)"]
        assert params["filter_pic"] == ("STRING", [])


class TestEntityMetricsQuery:

    def test_grouping_and_columns(self, periods):
        query, params = get_entity_metrics_query(TABLE, Perspective.PID, DimensionFilters(), *periods)

        assert f"FROM `{TABLE}`" in query
        assert "pid AS id" in query
        assert "MAX(pubname) AS name" in query
        assert "MAX(pic) AS parent_id" in query
        assert "COUNT(DISTINCT mid) AS media_count" in query
        assert "GROUP BY pid" in query
        assert "ORDER BY rev_p2 DESC" in query
        for suffix in ("p1", "p2"):
            assert f"AS req_{suffix}" in query
            assert f"AS rev_{suffix}" in query
            assert f"AS paid_{suffix}" in query
            assert f"AVG(CASE WHEN DATE BETWEEN @{suffix}_start AND @{suffix}_end" in query

        assert params["p1_start"] == ("DATE", date(2024, 10, 1))
        assert params["p2_end"] == ("DATE", date(2024, 12, 31))

    def test_values_are_parameters(self, periods):
        filters = DimensionFilters(pic=["o'brien"], product=["banner; DROP TABLE x"])
        query, params = get_entity_metrics_query(TABLE, Perspective.ZONE, filters, *periods)

        assert "o'brien" not in query
        assert "DROP TABLE" not in query
        assert "2024-10-01" not in query
        assert "pic IN UNNEST(@filter_pic)" in query
        assert params["filter_product"] == ("STRING", ["banner; DROP TABLE x"])

    def test_perspective_without_parent(self, periods):
        query, _ = get_entity_metrics_query(TABLE, Perspective.PRODUCT, DimensionFilters(), *periods)
        assert "NULL AS parent_id" in query
        assert "GROUP BY product" in query

    def test_team_has_no_column(self, periods):
        with pytest.raises(ValueError):
            get_entity_metrics_query(TABLE, Perspective.TEAM, DimensionFilters(), *periods)


class TestMonthlyRevenueQuery:

    @pytest.mark.parametrize("end,months,expected", [
        (date(2024, 10, 31), 6, date(2024, 5, 1)),
        (date(2024, 3, 15), 6, date(2023, 10, 1)),
        (date(2024, 1, 31), 1, date(2024, 1, 1)),
        (date(2024, 12, 1), 12, date(2024, 1, 1)),
    ])
    def test_window_start(self, end, months, expected):
        assert history_window_start(end, months) == expected

    def test_entity_scope(self):
        query, params = get_monthly_revenue_query(
            TABLE, Perspective.MID, "3010", DimensionFilters(product="banner"), date(2024, 10, 31), 6
        )

        assert "mid = @entity_id" in query
        assert "GROUP BY year, month" in query
        assert params["entity_id"] == ("INT64", 3010)
        assert params["window_start"] == ("DATE", date(2024, 5, 1))
        assert params["window_end"] == ("DATE", date(2024, 10, 31))
        assert params["filter_product"] == ("STRING", ["banner"])

    def test_team_scoped_by_members(self):
        query, params = get_monthly_revenue_query(
            TABLE, Perspective.TEAM, "APP", DimensionFilters(pic=["carol"]), date(2024, 10, 31), 6
        )

        assert "@entity_id" not in query
        assert "entity_id" not in params
        assert params["filter_pic"] == ("STRING", ["carol"])
