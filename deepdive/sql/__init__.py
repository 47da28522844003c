"""
SQL Query Module for the Deep Dive backend.

Provides parameterized BigQuery queries for:
- Two-period entity aggregation per perspective
- Monthly revenue history of a single entity (lost impact)

Query builders return (sql, params); values always travel as BigQuery named
query parameters, never as SQL text.

Example usage:
    from deepdive.sql import get_entity_metrics_query

    sql, params = get_entity_metrics_query(
        table='project.dataset.agg_table',
        perspective=Perspective.PID,
        filters=DimensionFilters(pic=['jane.doe']),
        period1=Period(start=date(2024, 10, 1), end=date(2024, 10, 31)),
        period2=Period(start=date(2024, 12, 1), end=date(2024, 12, 31)),
    )
"""

from deepdive.sql.deep_dive_queries import (
    ID_COLUMN_TYPES,
    QueryParams,
    build_filter_conditions,
    get_entity_metrics_query,
    get_monthly_revenue_query,
    history_window_start,
)


__all__ = [
    'ID_COLUMN_TYPES',
    'QueryParams',
    'build_filter_conditions',
    'get_entity_metrics_query',
    'get_monthly_revenue_query',
    'history_window_start',
]
