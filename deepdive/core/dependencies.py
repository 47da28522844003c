"""
FastAPI dependency injection module for the Deep Dive backend.

Provides the settings singleton and the three engine collaborators as FastAPI
dependencies, so endpoint handlers stay free of infrastructure code and tests
can swap any of them through `app.dependency_overrides`.

Key Dependencies Provided:
- get_settings_dependency / SettingsDep: cached Settings
- get_aggregation_adapter / AggregationAdapterDep: BigQuery two-period aggregation
- get_membership_adapter / MembershipAdapterDep: Postgres team membership
- get_history_adapter / HistoryAdapterDep: BigQuery monthly revenue history

Usage:
    @router.post("/deep-dive")
    async def deep_dive(
        request: DeepDiveRequest,
        aggregation: AggregationAdapterDep,
        membership: MembershipAdapterDep,
        history: HistoryAdapterDep,
        settings: SettingsDep,
    ) -> DeepDiveResponse:
        ...

    # In tests
    app.dependency_overrides[get_aggregation_adapter] = lambda: fake_warehouse
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from google.cloud import bigquery

from deepdive.core.config import Settings, get_settings
from deepdive.services.adapters import (
    AggregationAdapter,
    MembershipAdapter,
    MonthlyHistoryAdapter,
)
from deepdive.services.bigquery_adapter import (
    BigQueryAggregationAdapter,
    BigQueryMonthlyHistoryAdapter,
    create_bigquery_client,
)
from deepdive.services.membership import PostgresMembershipAdapter


# =============================================================================
# Settings Dependency
# =============================================================================

def get_settings_dependency() -> Settings:
    """
    Return the Settings singleton instance.

    Thin wrapper around get_settings() so the dependency can be overridden:

        app.dependency_overrides[get_settings_dependency] = lambda: mock_settings
    """
    return get_settings()


# Usage: async def endpoint(settings: SettingsDep)
SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]


# =============================================================================
# Collaborator Dependencies
# =============================================================================

@lru_cache()
def get_bigquery_client() -> bigquery.Client:
    """Process-wide BigQuery client, created on first use."""
    return create_bigquery_client(get_settings())


def get_aggregation_adapter(settings: SettingsDep) -> AggregationAdapter:
    """Warehouse aggregation adapter for one request."""
    return BigQueryAggregationAdapter(get_bigquery_client(), settings.bigquery_table)


def get_membership_adapter(settings: SettingsDep) -> MembershipAdapter:
    """Team membership adapter; reads a fresh snapshot on every call."""
    return PostgresMembershipAdapter(settings.team_table, settings.team_mapping_table)


def get_history_adapter(settings: SettingsDep) -> MonthlyHistoryAdapter:
    """Monthly revenue history adapter for lost-impact lookups."""
    return BigQueryMonthlyHistoryAdapter(get_bigquery_client(), settings.bigquery_table)


AggregationAdapterDep = Annotated[AggregationAdapter, Depends(get_aggregation_adapter)]

MembershipAdapterDep = Annotated[MembershipAdapter, Depends(get_membership_adapter)]

HistoryAdapterDep = Annotated[MonthlyHistoryAdapter, Depends(get_history_adapter)]
