"""
Enumeration definitions for the Deep Dive analytics backend.

All enums inherit from both `str` and `Enum` so they serialize as plain strings
in Pydantic models and FastAPI responses, keeping the JSON contract consumed by
the dashboard frontend unchanged (e.g. "A", "NEW", "critical").

Groups:
- Perspective: the entity type a deep dive is run over
- RevenueTier / DisplayTier: Pareto revenue classification and its display label
- LifecycleStatus: new / lost / existing detection from period revenue presence
- WarningSeverity / HealthMetric: output of the health warning engine
"""

from enum import Enum


class Perspective(str, Enum):
    """
    Entity type analysed by a deep dive.

    Values: 'team' | 'pic' | 'pid' | 'mid' | 'product' | 'zone'

    - team: Sales team. Not a warehouse column; synthesized by grouping
      account-owner rows through the team membership mapping.
    - pic: Account owner ("person in charge") of a publisher portfolio.
    - pid: Publisher.
    - mid: Media property owned by a publisher.
    - product: Ad product.
    - zone: Ad zone. Terminal level of the hierarchy.
    """
    TEAM = "team"
    PIC = "pic"
    PID = "pid"
    MID = "mid"
    PRODUCT = "product"
    ZONE = "zone"


class RevenueTier(str, Enum):
    """
    Pareto (ABC) classification by cumulative share of period-2 revenue.

    - A: cumulative revenue share <= 80%
    - B: cumulative revenue share <= 95%
    - C: everything else
    """
    A = "A"
    B = "B"
    C = "C"


class DisplayTier(str, Enum):
    """
    Presentation label of a row.

    Existing entities show their RevenueTier; new and lost entities show
    NEW / LOST while the underlying tier is kept in `tier_group`.
    Also the domain of the post-hoc tier filter.
    """
    A = "A"
    B = "B"
    C = "C"
    NEW = "NEW"
    LOST = "LOST"


class LifecycleStatus(str, Enum):
    """
    Lifecycle of an entity between the two comparison periods.

    - new: no period-1 revenue, some period-2 revenue
    - lost: some period-1 revenue, no period-2 revenue
    - existing: anything else (including no revenue in either period)
    """
    NEW = "new"
    LOST = "lost"
    EXISTING = "existing"


class WarningSeverity(str, Enum):
    """
    Severity of the single health warning attached to each row.

    Ordered from least to most severe. 'healthy' means no rule matched.
    """
    HEALTHY = "healthy"
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class HealthMetric(str, Enum):
    """Metric names a health warning can point at."""
    REQUESTS = "requests"
    ECPM = "ecpm"
    REVENUE = "revenue"
    FILL_RATE = "fill_rate"
