"""
Collaborator contracts of the deep-dive engine.

The engine never talks to the warehouse or to the membership tables
directly; it goes through these three protocols. Production implementations
live in services.bigquery_adapter and services.membership, tests inject
in-memory fakes.

Every implementation must raise AdapterFailure when it cannot produce data.
An empty result is not a failure.
"""

from datetime import date
from typing import List, Protocol

from deepdive.models import (
    DimensionFilters,
    EntityPeriodRow,
    MembershipGroup,
    MonthlyRevenue,
    Perspective,
    Period,
)


class AggregationAdapter(Protocol):
    """Per-entity, two-period aggregation of the warehouse fact table."""

    async def fetch(
        self,
        perspective: Perspective,
        filters: DimensionFilters,
        period1: Period,
        period2: Period,
    ) -> List[EntityPeriodRow]:
        """
        Return one row per distinct entity id of `perspective`.

        Counters of a period in which the entity has no activity are zero.
        Only non-team perspectives are requested; the `team` filter key is
        already resolved to `pic` by the caller.
        """
        ...


class MembershipAdapter(Protocol):
    """Team membership mapping (team id -> account owner names)."""

    async def list_groups(self) -> List[MembershipGroup]:
        ...


class MonthlyHistoryAdapter(Protocol):
    """Monthly revenue history of a single entity."""

    async def monthly_revenue(
        self,
        perspective: Perspective,
        entity_id: str,
        filters: DimensionFilters,
        months_ending_at: date,
        count: int,
    ) -> List[MonthlyRevenue]:
        """
        Return monthly revenue sums for the `count` calendar months ending
        with the month that contains `months_ending_at`. Months without
        activity are absent from the result.
        """
        ...
