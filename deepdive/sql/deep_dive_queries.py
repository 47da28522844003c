"""
Parameterized BigQuery SQL for the deep-dive aggregation adapters.

Two queries are built here:

- Two-period entity aggregation: one row per entity of a perspective with
  req / rev / paid summed and the unit price (request_CPM) averaged per
  period. Counters of a period without activity come back as 0, the unit
  price as NULL.
- Monthly revenue history: revenue summed per calendar month for a single
  entity over a trailing window, used for lost-impact figures.

Filter values and dates are never interpolated into the SQL text; they are
passed as BigQuery named query parameters (@name). Only identifiers that
come from static perspective metadata (columns, table name) are formatted
into the query.

Each builder returns (sql, params) where params maps a parameter name to a
(BigQuery type, value) pair; list values become ARRAY parameters.
"""

from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from deepdive.models import DimensionFilters, Perspective, Period
from deepdive.models.perspectives import FILTER_COLUMNS, get_perspective_config


QueryParams = Dict[str, Tuple[str, Any]]

# Parameter type of each entity id column
ID_COLUMN_TYPES: Dict[str, str] = {
    column: param_type for column, param_type in FILTER_COLUMNS.values()
}


def _coerce(values: List[str], param_type: str) -> List[Any]:
    if param_type == "INT64":
        return [int(value) for value in values]
    return list(values)


def build_filter_conditions(filters: DimensionFilters) -> Tuple[List[str], QueryParams]:
    """
    Translate dimension filters into WHERE conditions.

    The `team` key has no warehouse column and must be resolved to `pic`
    before reaching this layer; it is ignored here.

    Returns:
        Tuple of (conditions, params). An empty value list yields a condition
        that matches nothing.
    """
    conditions: List[str] = []
    params: QueryParams = {}

    for key, values in filters.active().items():
        if key not in FILTER_COLUMNS:
            continue
        column, param_type = FILTER_COLUMNS[key]
        name = f"filter_{key}"
        conditions.append(f"{column} IN UNNEST(@{name})")
        params[name] = (param_type, _coerce(values, param_type))

    return conditions, params


def get_entity_metrics_query(
    table: str,
    perspective: Perspective,
    filters: DimensionFilters,
    period1: Period,
    period2: Period,
) -> Tuple[str, QueryParams]:
    """
    Build the two-period aggregation query of one perspective.

    Args:
        table: Fully qualified fact table, e.g. 'project.dataset.table'.
        perspective: Perspective to group by; team is not a warehouse column.
        filters: Dimension filters, team already resolved.
        period1: Baseline period.
        period2: Current period.

    Returns:
        Tuple[str, QueryParams]: SQL text and its named parameters.

    Raises:
        ValueError: If `perspective` has no warehouse column (team).
    """
    config = get_perspective_config(perspective)
    if config.id_column is None:
        raise ValueError(f"Perspective '{perspective.value}' has no warehouse column")

    select_fields = [
        f"{config.id_column} AS id",
        f"{config.name_expression} AS name",
        f"{config.parent_expression or 'NULL'} AS parent_id",
    ]
    select_fields.extend(
        f"{expression} AS {alias}" for alias, expression in config.attribute_expressions
    )

    for suffix in ("p1", "p2"):
        in_period = f"DATE BETWEEN @{suffix}_start AND @{suffix}_end"
        select_fields.extend([
            f"SUM(CASE WHEN {in_period} THEN req ELSE 0 END) AS req_{suffix}",
            f"SUM(CASE WHEN {in_period} THEN rev ELSE 0 END) AS rev_{suffix}",
            f"SUM(CASE WHEN {in_period} THEN paid ELSE 0 END) AS paid_{suffix}",
            f"AVG(CASE WHEN {in_period} THEN CAST(request_CPM AS FLOAT64) END) AS ecpm_{suffix}",
        ])

    conditions = [
        "(DATE BETWEEN @p1_start AND @p1_end OR DATE BETWEEN @p2_start AND @p2_end)"
    ]
    filter_conditions, params = build_filter_conditions(filters)
    conditions.extend(filter_conditions)

    params.update({
        "p1_start": ("DATE", period1.start),
        "p1_end": ("DATE", period1.end),
        "p2_start": ("DATE", period2.start),
        "p2_end": ("DATE", period2.end),
    })

    select_clause = ",\n        ".join(select_fields)
    where_clause = "\n      AND ".join(conditions)

    query = f"""
    -- Deep-dive entity metrics: {perspective.value} perspective
    SELECT
        {select_clause}
    FROM `{table}`
    WHERE {where_clause}
    GROUP BY {config.id_column}
    ORDER BY rev_p2 DESC
    """
    return query, params


def history_window_start(months_ending_at: date, months: int) -> date:
    """First day of the earliest month of a trailing window of `months` months."""
    month_index = months_ending_at.year * 12 + (months_ending_at.month - 1) - (months - 1)
    return date(month_index // 12, month_index % 12 + 1, 1)


def get_monthly_revenue_query(
    table: str,
    perspective: Perspective,
    entity_id: Optional[str],
    filters: DimensionFilters,
    months_ending_at: date,
    months: int,
) -> Tuple[str, QueryParams]:
    """
    Build the monthly revenue history query of one entity.

    The window spans the `months` calendar months ending with the month that
    contains `months_ending_at`, and stops at `months_ending_at` itself.
    For the team perspective (no warehouse column) the entity is scoped by
    `filters` alone, which carry the team's member pics.

    Returns:
        Tuple[str, QueryParams]: SQL text and its named parameters.
    """
    config = get_perspective_config(perspective)

    conditions = ["DATE BETWEEN @window_start AND @window_end"]
    filter_conditions, params = build_filter_conditions(filters)

    if config.id_column is not None and entity_id is not None:
        id_type = ID_COLUMN_TYPES[config.id_column]
        conditions.append(f"{config.id_column} = @entity_id")
        params["entity_id"] = (id_type, _coerce([entity_id], id_type)[0])

    conditions.extend(filter_conditions)
    params.update({
        "window_start": ("DATE", history_window_start(months_ending_at, months)),
        "window_end": ("DATE", months_ending_at),
    })

    where_clause = "\n      AND ".join(conditions)

    query = f"""
    -- Monthly revenue history: {perspective.value} perspective
    SELECT
        year,
        month,
        SUM(rev) AS revenue
    FROM `{table}`
    WHERE {where_clause}
    GROUP BY year, month
    ORDER BY year, month
    """
    return query, params
