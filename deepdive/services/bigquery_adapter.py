"""
BigQuery implementations of the aggregation and monthly history adapters.

Queries are built by deepdive.sql.deep_dive_queries and executed with the
google-cloud-bigquery client using named query parameters. The client is
synchronous, so each query runs in a worker thread; results come back as a
pandas DataFrame via `to_dataframe()` and are converted into typed rows.

Every transport or query error is logged and re-raised as AdapterFailure.
"""

import asyncio
import logging
from datetime import date
from typing import Any, Dict, List, Optional

import pandas as pd
from google.api_core.exceptions import GoogleAPIError
from google.cloud import bigquery

from deepdive.core.config import Settings
from deepdive.core.exceptions import AdapterFailure
from deepdive.models import (
    DimensionFilters,
    EntityPeriodRow,
    MonthlyRevenue,
    Perspective,
    Period,
    get_perspective_config,
)
from deepdive.sql.deep_dive_queries import (
    QueryParams,
    get_entity_metrics_query,
    get_monthly_revenue_query,
)

logger = logging.getLogger(__name__)


# Columns of the aggregation query that map onto EntityPeriodRow fields
ROW_FIELDS = (
    "id", "name", "parent_id",
    "req_p1", "rev_p1", "paid_p1", "ecpm_p1",
    "req_p2", "rev_p2", "paid_p2", "ecpm_p2",
)


def create_bigquery_client(settings: Settings) -> bigquery.Client:
    """Create a BigQuery client from settings."""
    if settings.google_application_credentials:
        return bigquery.Client.from_service_account_json(
            settings.google_application_credentials,
            project=settings.bigquery_project,
        )
    return bigquery.Client(project=settings.bigquery_project)


def to_query_parameters(params: QueryParams) -> List[Any]:
    """Convert (type, value) pairs into BigQuery named query parameters."""
    query_parameters: List[Any] = []
    for name, (param_type, value) in params.items():
        if isinstance(value, list):
            query_parameters.append(bigquery.ArrayQueryParameter(name, param_type, value))
        else:
            query_parameters.append(bigquery.ScalarQueryParameter(name, param_type, value))
    return query_parameters


def dataframe_records(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """DataFrame rows as dicts, with NaN / NaT replaced by None."""
    if df.empty:
        return []
    cleaned = df.astype(object).where(pd.notnull(df), None)
    return cleaned.to_dict(orient="records")


class BigQueryExecutor:
    """Runs parameterized queries off the event loop."""

    def __init__(self, client: bigquery.Client, adapter_name: str) -> None:
        self.client = client
        self.adapter_name = adapter_name

    def _run(self, query: str, params: QueryParams) -> pd.DataFrame:
        job_config = bigquery.QueryJobConfig(query_parameters=to_query_parameters(params))
        query_job = self.client.query(query, job_config=job_config)
        return query_job.result().to_dataframe()

    async def run(self, query: str, params: QueryParams) -> pd.DataFrame:
        try:
            return await asyncio.to_thread(self._run, query, params)
        except (GoogleAPIError, OSError) as e:
            logger.exception(f"{self.adapter_name} query failed")
            raise AdapterFailure(self.adapter_name, str(e)) from e


class BigQueryAggregationAdapter:
    """Two-period entity aggregation over the warehouse fact table."""

    def __init__(self, client: bigquery.Client, table: str) -> None:
        self.executor = BigQueryExecutor(client, "aggregation")
        self.table = table

    async def fetch(
        self,
        perspective: Perspective,
        filters: DimensionFilters,
        period1: Period,
        period2: Period,
    ) -> List[EntityPeriodRow]:
        query, params = get_entity_metrics_query(
            self.table, perspective, filters, period1, period2
        )
        logger.info(f"Executing BigQuery aggregation for {perspective.value} perspective")
        df = await self.executor.run(query, params)
        logger.info(f"BigQuery returned {len(df)} {perspective.value} rows")

        attribute_names = [alias for alias, _ in get_perspective_config(perspective).attribute_expressions]
        rows: List[EntityPeriodRow] = []
        for record in dataframe_records(df):
            fields = {key: record.get(key) for key in ROW_FIELDS}
            fields["attributes"] = {
                name: record.get(name) for name in attribute_names if name in record
            }
            rows.append(EntityPeriodRow(**fields))
        return rows


class BigQueryMonthlyHistoryAdapter:
    """Monthly revenue history of one entity."""

    def __init__(self, client: bigquery.Client, table: str) -> None:
        self.executor = BigQueryExecutor(client, "monthly history")
        self.table = table

    async def monthly_revenue(
        self,
        perspective: Perspective,
        entity_id: Optional[str],
        filters: DimensionFilters,
        months_ending_at: date,
        count: int,
    ) -> List[MonthlyRevenue]:
        query, params = get_monthly_revenue_query(
            self.table, perspective, entity_id, filters, months_ending_at, count
        )
        df = await self.executor.run(query, params)
        return [
            MonthlyRevenue(
                year=int(record["year"]),
                month=int(record["month"]),
                revenue=float(record["revenue"] or 0.0),
            )
            for record in dataframe_records(df)
        ]
