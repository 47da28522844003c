"""
Deep-dive pipeline orchestrator.

One invocation turns a request into a fully decorated, ranked result set:

    validate -> resolve scope (drill-down, team filter)
             -> fetch population (aggregation adapter, or team aggregation)
             -> derived metrics -> ranking / tiering -> lifecycle
             -> health warnings -> lost impact (lost rows only)
             -> tier filter -> summary

Validation happens before any adapter call. Ranking always sees the complete
population; the tier filter is applied afterwards. Adapter failures abort the
whole invocation. An empty population is not an error and produces an empty
result with a zero-valued summary.

The only concurrency is in data fetching: the pic rows and the membership
snapshot of the team perspective are fetched together, and lost-impact
lookups run concurrently. The pipeline yields to the event loop right before
ranking so that a cancelled request stops before the sort.
"""

import asyncio
import logging
from dataclasses import asdict
from typing import Dict, List, Optional, Sequence, Tuple

from deepdive.core.exceptions import InvalidPerspective, InvalidTierFilter
from deepdive.models import (
    DeepDiveContext,
    DeepDiveItem,
    DeepDiveRequest,
    DeepDiveResponse,
    DimensionFilters,
    DisplayTier,
    EntityPeriodRow,
    LifecycleStatus,
    LostImpact,
    MembershipGroup,
    Perspective,
    Period,
)
from deepdive.services.adapters import (
    AggregationAdapter,
    MembershipAdapter,
    MonthlyHistoryAdapter,
)
from deepdive.services.derived_metrics import compute_derived_metrics
from deepdive.services.drill_down import drill_down_scope, filter_by_tier
from deepdive.services.health_warnings import HealthSignals, evaluate_health
from deepdive.services.lifecycle import (
    classify_lifecycle,
    display_labels,
    fetch_lost_impacts,
)
from deepdive.services.summary import calculate_summary
from deepdive.services.team_aggregation import aggregate_teams, resolve_team_members
from deepdive.services.tiering import rank_by_revenue

logger = logging.getLogger(__name__)


DEFAULT_LOST_IMPACT_MONTHS: int = 6
DEFAULT_HISTORY_CONCURRENCY: int = 8


# =============================================================================
# Validation
# =============================================================================

def parse_perspective(value: str) -> Perspective:
    """
    Validate a perspective name.

    Raises:
        InvalidPerspective: If `value` is not one of the six perspectives.
    """
    try:
        return Perspective(value)
    except ValueError:
        raise InvalidPerspective(value) from None


def parse_tier_filter(value: Optional[str]) -> Optional[DisplayTier]:
    """
    Validate a tier filter; None and empty string mean no filter.

    Raises:
        InvalidTierFilter: If `value` is not A, B, C, NEW or LOST.
    """
    if not value:
        return None
    try:
        return DisplayTier(value)
    except ValueError:
        raise InvalidTierFilter(value) from None


# =============================================================================
# Population
# =============================================================================

def _filters_for_members(filters: DimensionFilters, members: List[str]) -> DimensionFilters:
    """Replace the team key by the member pics, intersected with any pic filter."""
    if filters.pic is not None:
        allowed = set(filters.pic)
        members = [member for member in members if member in allowed]
    return filters.model_copy(update={"team": None, "pic": members})


async def fetch_population(
    perspective: Perspective,
    filters: DimensionFilters,
    period1: Period,
    period2: Period,
    aggregation: AggregationAdapter,
    membership: MembershipAdapter,
) -> Tuple[List[EntityPeriodRow], List[MembershipGroup], DimensionFilters]:
    """
    Fetch the complete population of one comparison.

    Returns:
        Tuple of (rows, membership snapshot, effective filters). The snapshot
        is empty when no team resolution was needed. The effective filters
        are the ones sent to the aggregation adapter.
    """
    if perspective == Perspective.TEAM:
        pic_filters = filters.without("team")
        pic_rows, groups = await asyncio.gather(
            aggregation.fetch(Perspective.PIC, pic_filters, period1, period2),
            membership.list_groups(),
        )
        rows = aggregate_teams(pic_rows, groups, filters.team)
        return rows, list(groups), pic_filters

    if filters.team is None:
        rows = await aggregation.fetch(perspective, filters, period1, period2)
        return rows, [], filters

    groups = await membership.list_groups()
    members = resolve_team_members(groups, filters.team)
    effective = _filters_for_members(filters, members)
    if not effective.pic:
        logger.info(f"Team filter {filters.team} resolved to no PICs, empty population")
        return [], list(groups), effective

    rows = await aggregation.fetch(perspective, effective, period1, period2)
    return rows, list(groups), effective


def _history_scopes(
    perspective: Perspective,
    lost_rows: Sequence[EntityPeriodRow],
    filters: DimensionFilters,
    groups: Sequence[MembershipGroup],
) -> Dict[str, DimensionFilters]:
    """Filters scoping the monthly history lookup of each lost row."""
    if perspective != Perspective.TEAM:
        return {row.id: filters for row in lost_rows}

    members_by_team = {group.group_id: group.member_ids for group in groups}
    return {
        row.id: _filters_for_members(filters, list(members_by_team.get(row.id, [])))
        for row in lost_rows
    }


# =============================================================================
# Pipeline
# =============================================================================

async def build_items(
    perspective: Perspective,
    rows: Sequence[EntityPeriodRow],
    filters: DimensionFilters,
    groups: Sequence[MembershipGroup],
    period1: Period,
    history: MonthlyHistoryAdapter,
    lost_impact_months: int = DEFAULT_LOST_IMPACT_MONTHS,
    history_concurrency: int = DEFAULT_HISTORY_CONCURRENCY,
) -> List[DeepDiveItem]:
    """
    Run derived metrics, ranking, lifecycle, warnings and lost impact over a
    complete population.

    Returns:
        List[DeepDiveItem]: Rows sorted by rev_p2 descending, ties in input order.
    """
    derived = [compute_derived_metrics(row) for row in rows]

    # Cancellation checkpoint: the sort and running sum have no partial value
    await asyncio.sleep(0)

    indexed = list(enumerate(rows))
    ranked = rank_by_revenue(indexed, lambda pair: pair[1].rev_p2)

    statuses = [classify_lifecycle(row.rev_p1, row.rev_p2) for row in rows]
    lost_indexes = [i for i, status in enumerate(statuses) if status == LifecycleStatus.LOST]

    lost_tiers = {}
    lost_impacts: Dict[str, Optional[LostImpact]] = {}
    if lost_indexes:
        lost_tiers = {
            entry.entity[0]: entry.tier
            for entry in rank_by_revenue(indexed, lambda pair: pair[1].rev_p1)
        }
        lost_rows = [rows[i] for i in lost_indexes]
        lost_impacts = await fetch_lost_impacts(
            history,
            perspective,
            _history_scopes(perspective, lost_rows, filters, groups),
            period1.end,
            lost_impact_months,
            history_concurrency,
        )

    items: List[DeepDiveItem] = []
    for entry in ranked:
        index, row = entry.entity
        metrics = derived[index]
        status = statuses[index]
        display_tier, tier_group = display_labels(status, entry.tier, lost_tiers.get(index))
        warning = evaluate_health(HealthSignals.from_metrics(metrics), status)

        lost_fields = {}
        if status == LifecycleStatus.LOST:
            impact = lost_impacts.get(row.id)
            if impact is not None:
                lost_fields = {
                    "avg_monthly_revenue": impact.avg_monthly_revenue,
                    "months_with_data": impact.months_with_data,
                    "lost_revenue": impact.avg_monthly_revenue or row.rev_p1,
                }
            else:
                lost_fields = {"lost_revenue": row.rev_p1}

        items.append(DeepDiveItem(
            **row.model_dump(),
            **asdict(metrics),
            total_revenue=entry.total_revenue,
            cumulative_revenue=entry.cumulative_revenue,
            cumulative_revenue_pct=entry.cumulative_revenue_pct,
            revenue_tier=entry.tier,
            tier=entry.tier,
            status=status,
            display_tier=display_tier,
            tier_group=tier_group,
            warning_severity=warning.severity,
            warning_message=warning.message,
            warning_metrics=warning.metrics,
            **lost_fields,
        ))

    return items


async def run_deep_dive(
    request: DeepDiveRequest,
    aggregation: AggregationAdapter,
    membership: MembershipAdapter,
    history: MonthlyHistoryAdapter,
    lost_impact_months: int = DEFAULT_LOST_IMPACT_MONTHS,
    history_concurrency: int = DEFAULT_HISTORY_CONCURRENCY,
) -> DeepDiveResponse:
    """
    Run one deep-dive comparison.

    When `request.parentId` is set, `request.perspective` names the parent
    level and the result holds that parent's children.

    Args:
        request: Validated request body.
        aggregation: Warehouse aggregation adapter.
        membership: Team membership adapter.
        history: Monthly history adapter.
        lost_impact_months: Trailing months averaged for lost rows.
        history_concurrency: Maximum concurrent history lookups.

    Returns:
        DeepDiveResponse: Ranked rows, summary and effective context.

    Raises:
        InvalidPerspective: Unknown perspective, or drill-down from zone.
        InvalidTierFilter: Tier filter outside A, B, C, NEW, LOST.
        InvalidParentId: parentId is not a valid id of the parent perspective.
        AdapterFailure: A collaborator could not produce data.
    """
    requested = parse_perspective(request.perspective)
    tier_filter = parse_tier_filter(request.tierFilter)

    parent_perspective: Optional[Perspective] = None
    if request.parentId is not None:
        perspective, filters = drill_down_scope(requested, request.parentId, request.filters)
        parent_perspective = requested
        logger.info(
            f"Drill-down {requested.value}={request.parentId} -> {perspective.value}"
        )
    else:
        perspective, filters = requested, request.filters

    rows, groups, effective_filters = await fetch_population(
        perspective,
        filters,
        request.period1,
        request.period2,
        aggregation,
        membership,
    )
    if not rows:
        logger.info(f"Empty population for {perspective.value} perspective")
    else:
        logger.info(f"Fetched {len(rows)} {perspective.value} rows")

    items = await build_items(
        perspective,
        rows,
        effective_filters,
        groups,
        request.period1,
        history,
        lost_impact_months=lost_impact_months,
        history_concurrency=history_concurrency,
    )

    data = filter_by_tier(items, tier_filter)

    return DeepDiveResponse(
        data=data,
        summary=calculate_summary(data),
        context=DeepDiveContext(
            perspective=perspective.value,
            parentPerspective=parent_perspective.value if parent_perspective else None,
            parentId=request.parentId,
            tierFilter=tier_filter.value if tier_filter else None,
            period1=request.period1,
            period2=request.period2,
        ),
    )
