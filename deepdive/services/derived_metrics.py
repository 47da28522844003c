"""
Derived metrics calculator for period-over-period comparisons.

Turns one entity's raw counters for two periods into fill rates, effective
eCPM and percentage deltas.

Metric Definitions:
    - fill_rate_pN = paid_pN / req_pN * 100 (0 when req_pN == 0)
    - effective_ecpm_pN = rev_pN / req_pN * 1000 (0 when req_pN == 0)
    - change_pct(v1, v2) = (v2 - v1) / v1 * 100 (0 when v1 is 0 or missing)
    - fill_rate_change = fill_rate_p2 - fill_rate_p1 (percentage points)

A zero baseline always yields a 0% change, including when the current value
is large; a metric that went down to zero from a positive baseline reports
-100%. Every division with a zero denominator yields 0, so no result is ever
NaN or infinite.

Two price signals are kept side by side: `ecpm_change_pct` is the change of
effective eCPM computed from totals, while `unit_price_change_pct` is the
change of the warehouse's averaged unit-price column. They diverge when
volume is not uniform across days.
"""

from dataclasses import dataclass
from typing import Optional

from deepdive.models import EntityPeriodRow


@dataclass
class DerivedMetrics:
    """Fill rates, effective eCPM and deltas of one entity."""
    effective_ecpm_p1: float = 0.0
    effective_ecpm_p2: float = 0.0
    fill_rate_p1: float = 0.0
    fill_rate_p2: float = 0.0
    req_change_pct: float = 0.0
    rev_change_pct: float = 0.0
    ecpm_change_pct: float = 0.0
    unit_price_change_pct: float = 0.0
    fill_rate_change: float = 0.0
    fill_rate_change_pct: float = 0.0


def safe_divide(numerator: float, denominator: Optional[float]) -> float:
    """Divide, returning 0 when the denominator is zero or missing."""
    if not denominator:
        return 0.0
    return numerator / denominator


def change_pct(v1: Optional[float], v2: Optional[float]) -> float:
    """
    Percentage change from v1 to v2.

    Args:
        v1: Baseline (period 1) value. None is treated as 0.
        v2: Current (period 2) value. None is treated as 0.

    Returns:
        float: (v2 - v1) / v1 * 100, or 0 when the baseline is 0.

    Example:
        >>> change_pct(1000, 550)
        -45.0
        >>> change_pct(0, 500)
        0.0
    """
    baseline = v1 or 0.0
    current = v2 or 0.0
    if baseline == 0:
        return 0.0
    return (current - baseline) / baseline * 100


def fill_rate(paid: float, requests: float) -> float:
    """Paid requests as a percentage of all requests."""
    return safe_divide(paid, requests) * 100


def effective_ecpm(revenue: float, requests: float) -> float:
    """Revenue per thousand requests."""
    return safe_divide(revenue, requests) * 1000


def compute_derived_metrics(row: EntityPeriodRow) -> DerivedMetrics:
    """
    Compute all derived metrics for one entity.

    Missing counters are already zero-filled by EntityPeriodRow; a missing
    unit price (None) is treated as a zero baseline, so its change is 0.
    """
    fill_rate_p1 = fill_rate(row.paid_p1, row.req_p1)
    fill_rate_p2 = fill_rate(row.paid_p2, row.req_p2)
    ecpm_p1 = effective_ecpm(row.rev_p1, row.req_p1)
    ecpm_p2 = effective_ecpm(row.rev_p2, row.req_p2)

    return DerivedMetrics(
        effective_ecpm_p1=ecpm_p1,
        effective_ecpm_p2=ecpm_p2,
        fill_rate_p1=fill_rate_p1,
        fill_rate_p2=fill_rate_p2,
        req_change_pct=change_pct(row.req_p1, row.req_p2),
        rev_change_pct=change_pct(row.rev_p1, row.rev_p2),
        ecpm_change_pct=change_pct(ecpm_p1, ecpm_p2),
        unit_price_change_pct=change_pct(row.ecpm_p1, row.ecpm_p2),
        fill_rate_change=fill_rate_p2 - fill_rate_p1,
        fill_rate_change_pct=change_pct(fill_rate_p1, fill_rate_p2),
    )
