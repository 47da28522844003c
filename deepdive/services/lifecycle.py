"""
Lifecycle classification and lost-impact enrichment.

Lifecycle Rules:
    - new:      rev_p1 == 0 and rev_p2 > 0
    - lost:     rev_p1 > 0 and rev_p2 == 0
    - existing: everything else (including 0 -> 0)

Display Labels:
    - existing rows show their plain tier: A / B / C
    - new rows show NEW with tier_group new_<tier>, the tier taken from the
      period 2 ranking
    - lost rows show LOST with tier_group lost_<tier>, the tier taken from
      the period 1 ranking of the same population (the period 2 tier of a
      lost row is always the tail of the ranking)

Lost Impact:
    For lost rows only, the mean of monthly revenue sums over the trailing
    months ending with the month that contains period 1's end date. Each
    lost row triggers one history lookup; lookups run concurrently under a
    semaphore, and a failing lookup cancels the others. An empty history
    leaves the figures unset and the row falls back to rev_p1 as its lost
    revenue.
"""

import asyncio
import logging
from datetime import date
from typing import Dict, List, Optional, Tuple

from deepdive.models import (
    DimensionFilters,
    DisplayTier,
    LifecycleStatus,
    LostImpact,
    MonthlyRevenue,
    Perspective,
    RevenueTier,
)
from deepdive.services.adapters import MonthlyHistoryAdapter

logger = logging.getLogger(__name__)


def classify_lifecycle(rev_p1: float, rev_p2: float) -> LifecycleStatus:
    """Classify an entity from the presence of revenue in each period."""
    if rev_p1 == 0 and rev_p2 > 0:
        return LifecycleStatus.NEW
    if rev_p1 > 0 and rev_p2 == 0:
        return LifecycleStatus.LOST
    return LifecycleStatus.EXISTING


def display_labels(
    status: LifecycleStatus,
    tier: RevenueTier,
    lost_tier: Optional[RevenueTier] = None,
) -> Tuple[DisplayTier, str]:
    """
    Compute the display tier and tier group of a row.

    Args:
        status: Lifecycle status of the row.
        tier: Period 2 Pareto tier of the row.
        lost_tier: Period 1 Pareto tier, used for lost rows when known.

    Returns:
        Tuple[DisplayTier, str]: e.g. (DisplayTier.NEW, "new_A").
    """
    if status == LifecycleStatus.NEW:
        return DisplayTier.NEW, f"new_{tier.value}"
    if status == LifecycleStatus.LOST:
        underlying = lost_tier or tier
        return DisplayTier.LOST, f"lost_{underlying.value}"
    return DisplayTier(tier.value), tier.value


def lost_impact_from_history(months: List[MonthlyRevenue]) -> Optional[LostImpact]:
    """Average monthly revenue sums; None when there is no history."""
    if not months:
        return None
    total = sum(month.revenue for month in months)
    return LostImpact(
        avg_monthly_revenue=total / len(months),
        months_with_data=len(months),
    )


async def fetch_lost_impacts(
    history: MonthlyHistoryAdapter,
    perspective: Perspective,
    scopes: Dict[str, DimensionFilters],
    months_ending_at: date,
    months: int,
    concurrency: int,
) -> Dict[str, Optional[LostImpact]]:
    """
    Look up the lost impact of several entities concurrently.

    Args:
        history: Monthly history adapter.
        perspective: Perspective of the entities.
        scopes: Entity id -> filters scoping that entity's history.
        months_ending_at: Period 1 end date.
        months: Number of trailing calendar months.
        concurrency: Maximum number of lookups in flight.

    Returns:
        Dict[str, Optional[LostImpact]]: Entity id -> impact, None when the
        entity has no monthly history.

    Raises:
        AdapterFailure: If any lookup fails; the whole invocation aborts and
            the lookups still in flight are cancelled.
    """
    if not scopes:
        return {}

    semaphore = asyncio.Semaphore(max(1, concurrency))

    async def lookup(entity_id: str, filters: DimensionFilters) -> Optional[LostImpact]:
        async with semaphore:
            rows = await history.monthly_revenue(
                perspective, entity_id, filters, months_ending_at, months
            )
        impact = lost_impact_from_history(rows)
        if impact is None:
            logger.info(f"No monthly history for lost {perspective.value} {entity_id}")
        return impact

    entity_ids = list(scopes)
    tasks = [
        asyncio.ensure_future(lookup(entity_id, scopes[entity_id]))
        for entity_id in entity_ids
    ]
    try:
        results = await asyncio.gather(*tasks)
    except BaseException:
        # One failure aborts the invocation; stop the lookups still in flight
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
    return dict(zip(entity_ids, results))
