"""
Summary aggregator: rolls a result set up into totals and tier breakdowns.

eCPM here is blended from totals (total revenue / total requests * 1000),
not averaged over rows. Tier counts and tier revenue (period 2) are keyed by
display tier, so NEW and LOST rows are counted apart from A/B/C.
"""

from typing import Sequence

from deepdive.models import DeepDiveItem, DeepDiveSummary, DisplayTier
from deepdive.services.derived_metrics import change_pct, effective_ecpm


TIER_KEYS = [tier.value for tier in DisplayTier]


def calculate_summary(items: Sequence[DeepDiveItem]) -> DeepDiveSummary:
    """
    Aggregate a result set.

    An empty result set yields a zero-valued summary with every tier key
    present.
    """
    total_revenue_p1 = sum(item.rev_p1 for item in items)
    total_revenue_p2 = sum(item.rev_p2 for item in items)
    total_requests_p1 = sum(item.req_p1 for item in items)
    total_requests_p2 = sum(item.req_p2 for item in items)

    total_ecpm_p1 = effective_ecpm(total_revenue_p1, total_requests_p1)
    total_ecpm_p2 = effective_ecpm(total_revenue_p2, total_requests_p2)

    tier_counts = {key: 0 for key in TIER_KEYS}
    tier_revenue = {key: 0.0 for key in TIER_KEYS}
    for item in items:
        key = item.display_tier.value
        tier_counts[key] += 1
        tier_revenue[key] += item.rev_p2

    total_items = len(items)
    tier_distribution = {
        key: (count * 100 / total_items if total_items else 0.0)
        for key, count in tier_counts.items()
    }

    return DeepDiveSummary(
        total_items=total_items,
        total_revenue_p1=total_revenue_p1,
        total_revenue_p2=total_revenue_p2,
        revenue_change_pct=change_pct(total_revenue_p1, total_revenue_p2),
        total_requests_p1=total_requests_p1,
        total_requests_p2=total_requests_p2,
        requests_change_pct=change_pct(total_requests_p1, total_requests_p2),
        total_ecpm_p1=total_ecpm_p1,
        total_ecpm_p2=total_ecpm_p2,
        ecpm_change_pct=change_pct(total_ecpm_p1, total_ecpm_p2),
        tier_counts=tier_counts,
        tier_revenue=tier_revenue,
        tier_distribution=tier_distribution,
    )
