"""
Pydantic request/response models for the Deep Dive analytics backend.

This module defines the typed contracts at every seam of the deep-dive engine:
- Request models: Period, DimensionFilters, DeepDiveRequest
- Collaborator payloads: EntityPeriodRow (aggregation adapter), MembershipGroup
  (team membership adapter), MonthlyRevenue (monthly history adapter)
- Engine outputs: HealthWarning, LostImpact, DeepDiveItem, DeepDiveSummary
- Response envelope: DeepDiveContext, DeepDiveResponse, PerspectiveInfo

Output field names are snake_case (rev_p1, display_tier, ...) and request field
names camelCase (parentId, tierFilter) because that is the JSON contract the
dashboard frontend already consumes.

All models use Pydantic v2 syntax.
"""

from datetime import date as DateType
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from deepdive.models.enums import (
    DisplayTier,
    HealthMetric,
    LifecycleStatus,
    RevenueTier,
    WarningSeverity,
)


# Keys of DimensionFilters, in hierarchy order
FILTER_KEYS = ("team", "pic", "pid", "mid", "product", "zone")


# =============================================================================
# Request Models
# =============================================================================


class Period(BaseModel):
    """
    Closed date interval [start, end], both ends inclusive.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {"start": "2024-10-01", "end": "2024-10-31"}
        }
    )

    start: DateType = Field(
        ...,
        description="First day of the period (inclusive)"
    )
    end: DateType = Field(
        ...,
        description="Last day of the period (inclusive)"
    )

    @model_validator(mode="after")
    def _check_order(self) -> "Period":
        if self.start > self.end:
            raise ValueError(f"period start {self.start} is after end {self.end}")
        return self


class DimensionFilters(BaseModel):
    """
    Closed set of dimension filters passed through to the aggregation adapter.

    Each key holds the list of accepted values for that dimension; a scalar
    value is accepted and wrapped into a one-element list. Unknown keys are
    rejected. The engine itself only interprets `team`, which is resolved to
    account owners through the membership mapping.
    """
    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={
            "example": {"team": ["WEB_GTI"], "product": ["banner"]}
        }
    )

    team: Optional[List[str]] = Field(default=None, description="Team ids")
    pic: Optional[List[str]] = Field(default=None, description="Account owner names")
    pid: Optional[List[str]] = Field(default=None, description="Publisher ids")
    mid: Optional[List[str]] = Field(default=None, description="Media property ids")
    product: Optional[List[str]] = Field(default=None, description="Product names")
    zone: Optional[List[str]] = Field(default=None, description="Zone ids")

    @field_validator(*FILTER_KEYS, mode="before")
    @classmethod
    def _coerce_values(cls, value: Any) -> Optional[List[str]]:
        if value is None:
            return None
        if isinstance(value, (list, tuple, set)):
            return [str(v) for v in value]
        return [str(value)]

    @field_validator("pid", "mid", "zone")
    @classmethod
    def _numeric_ids(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        # Publisher, media and zone ids are integer columns in the warehouse
        if value is not None:
            for item in value:
                if not item.lstrip("-").isdigit():
                    raise ValueError(f"expected a numeric id, got '{item}'")
        return value

    def active(self) -> Dict[str, List[str]]:
        """Return only the keys that carry a filter."""
        return {
            key: getattr(self, key)
            for key in FILTER_KEYS
            if getattr(self, key) is not None
        }

    def narrow(self, key: str, value: str) -> "DimensionFilters":
        """
        Return a copy with `key` restricted to the single value `value`.

        The copy is rebuilt through validation, so a non-numeric id on an
        integer key raises pydantic.ValidationError.
        """
        return DimensionFilters.model_validate({**self.model_dump(), key: [value]})

    def without(self, key: str) -> "DimensionFilters":
        """Return a copy with `key` removed."""
        return self.model_copy(update={key: None})


class DeepDiveRequest(BaseModel):
    """
    Request body for POST /deep-dive.

    `perspective` and `tierFilter` are plain strings here and are validated by
    the engine, so that an invalid value is reported as InvalidPerspective /
    InvalidTierFilter rather than a generic schema error.

    When `parentId` is given, `perspective` names the parent level and the
    response rows are that parent's children (drill-down).
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "perspective": "pid",
                "period1": {"start": "2024-10-01", "end": "2024-10-31"},
                "period2": {"start": "2024-12-01", "end": "2024-12-31"},
                "filters": {"team": ["WEB_GTI"]},
                "parentId": None,
                "tierFilter": None
            }
        }
    )

    perspective: str = Field(
        ...,
        description="Perspective to analyse (team, pic, pid, mid, product, zone)"
    )
    period1: Period = Field(..., description="Baseline comparison period")
    period2: Period = Field(..., description="Current comparison period")
    filters: DimensionFilters = Field(
        default_factory=DimensionFilters,
        description="Dimension filters"
    )
    parentId: Optional[Union[str, int]] = Field(
        default=None,
        description="Parent entity id for drill-down; perspective is then the parent level"
    )
    tierFilter: Optional[str] = Field(
        default=None,
        description="Restrict output rows to one display tier (A, B, C, NEW, LOST)"
    )

    @field_validator("parentId", mode="before")
    @classmethod
    def _parent_id_as_str(cls, value: Any) -> Optional[str]:
        return None if value is None else str(value)


# =============================================================================
# Collaborator Payloads
# =============================================================================


class EntityPeriodRow(BaseModel):
    """
    One entity's raw counters for both comparison periods.

    Returned by the aggregation adapter, one row per distinct entity id.
    Counters of a period in which the entity had no activity are zero, not
    missing; `ecpm_pN` is the average unit price column and stays None when
    the period has no data.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "1042",
                "name": "Example Publisher",
                "parent_id": "jane.doe",
                "attributes": {"media_count": 3},
                "req_p1": 1200000, "rev_p1": 840.5, "paid_p1": 720000, "ecpm_p1": 0.71,
                "req_p2": 1100000, "rev_p2": 770.0, "paid_p2": 640000, "ecpm_p2": 0.69
            }
        }
    )

    id: str = Field(..., description="Perspective-specific entity key")
    name: Optional[str] = Field(default=None, description="Display label")
    parent_id: Optional[str] = Field(
        default=None,
        description="Id of the entity's parent in the perspective hierarchy"
    )
    attributes: Dict[str, Any] = Field(
        default_factory=dict,
        description="Hierarchy attributes such as child counts"
    )

    req_p1: int = Field(default=0, ge=0, description="Period 1 requests")
    rev_p1: float = Field(default=0.0, ge=0.0, description="Period 1 revenue")
    paid_p1: int = Field(default=0, ge=0, description="Period 1 paid (monetized) requests")
    ecpm_p1: Optional[float] = Field(default=None, description="Period 1 average unit price")

    req_p2: int = Field(default=0, ge=0, description="Period 2 requests")
    rev_p2: float = Field(default=0.0, ge=0.0, description="Period 2 revenue")
    paid_p2: int = Field(default=0, ge=0, description="Period 2 paid (monetized) requests")
    ecpm_p2: Optional[float] = Field(default=None, description="Period 2 average unit price")

    @field_validator("id", "parent_id", mode="before")
    @classmethod
    def _key_as_str(cls, value: Any) -> Optional[str]:
        return None if value is None else str(value)

    @field_validator("req_p1", "paid_p1", "req_p2", "paid_p2", "rev_p1", "rev_p2", mode="before")
    @classmethod
    def _missing_counter_is_zero(cls, value: Any) -> Any:
        return 0 if value is None else value


class MembershipGroup(BaseModel):
    """A team and the account owners assigned to it."""
    group_id: str = Field(..., description="Team id")
    group_name: str = Field(..., description="Team display name")
    member_ids: List[str] = Field(
        default_factory=list,
        description="Account owner names assigned to the team"
    )


class MonthlyRevenue(BaseModel):
    """Revenue of one entity summed over one calendar month."""
    year: int = Field(..., description="Calendar year")
    month: int = Field(..., ge=1, le=12, description="Calendar month (1-12)")
    revenue: float = Field(default=0.0, description="Revenue summed over the month")


# =============================================================================
# Engine Outputs
# =============================================================================


class HealthWarning(BaseModel):
    """The single health warning selected for a row."""
    severity: WarningSeverity = Field(
        default=WarningSeverity.HEALTHY,
        description="Severity of the winning rule, healthy when none matched"
    )
    message: Optional[str] = Field(
        default=None,
        description="Actionable message, None when healthy"
    )
    metrics: List[HealthMetric] = Field(
        default_factory=list,
        description="Metrics that contributed to the warning"
    )


class LostImpact(BaseModel):
    """Trailing monthly revenue of a lost entity."""
    avg_monthly_revenue: float = Field(
        ...,
        description="Mean of monthly revenue sums over the trailing window"
    )
    months_with_data: int = Field(
        ...,
        ge=0,
        description="Number of months contributing to the mean"
    )


class DeepDiveItem(BaseModel):
    """
    One fully decorated output row.

    Carries the raw counters, derived metrics, Pareto ranking, lifecycle,
    display tier, health warning and (for lost rows) the lost-impact figures.
    """
    id: str
    name: Optional[str] = None
    parent_id: Optional[str] = None
    attributes: Dict[str, Any] = Field(default_factory=dict)

    # Raw counters
    req_p1: int
    req_p2: int
    rev_p1: float
    rev_p2: float
    paid_p1: int
    paid_p2: int
    ecpm_p1: Optional[float] = Field(default=None, description="Average unit price, period 1")
    ecpm_p2: Optional[float] = Field(default=None, description="Average unit price, period 2")

    # Derived metrics
    effective_ecpm_p1: float = Field(..., description="rev_p1 / req_p1 * 1000")
    effective_ecpm_p2: float = Field(..., description="rev_p2 / req_p2 * 1000")
    fill_rate_p1: float
    fill_rate_p2: float
    req_change_pct: float
    rev_change_pct: float
    ecpm_change_pct: float = Field(..., description="Change of effective eCPM")
    unit_price_change_pct: float = Field(..., description="Change of average unit price")
    fill_rate_change: float = Field(..., description="Fill rate change in percentage points")
    fill_rate_change_pct: float = Field(..., description="Relative fill rate change")

    # Pareto ranking
    total_revenue: float
    cumulative_revenue: float
    cumulative_revenue_pct: float
    revenue_tier: RevenueTier
    tier: RevenueTier

    # Lifecycle and display
    status: LifecycleStatus
    display_tier: DisplayTier
    tier_group: str = Field(..., description="e.g. 'A', 'new_B', 'lost_C'")

    # Health warning
    warning_severity: WarningSeverity
    warning_message: Optional[str] = None
    warning_metrics: List[HealthMetric] = Field(default_factory=list)

    # Lost impact
    avg_monthly_revenue: Optional[float] = None
    months_with_data: Optional[int] = None
    lost_revenue: Optional[float] = Field(
        default=None,
        description="avg_monthly_revenue when known, else rev_p1 (lost rows only)"
    )


class DeepDiveSummary(BaseModel):
    """
    Roll-up of one result set.

    eCPM here is blended from totals (total revenue / total requests * 1000),
    not averaged over rows.
    """
    total_items: int = 0
    total_revenue_p1: float = 0.0
    total_revenue_p2: float = 0.0
    revenue_change_pct: float = 0.0
    total_requests_p1: int = 0
    total_requests_p2: int = 0
    requests_change_pct: float = 0.0
    total_ecpm_p1: float = 0.0
    total_ecpm_p2: float = 0.0
    ecpm_change_pct: float = 0.0
    tier_counts: Dict[str, int] = Field(default_factory=dict)
    tier_revenue: Dict[str, float] = Field(default_factory=dict)
    tier_distribution: Dict[str, float] = Field(
        default_factory=dict,
        description="Share of items per display tier, in percent"
    )


# =============================================================================
# Response Envelope
# =============================================================================


class DeepDiveContext(BaseModel):
    """Echo of the effective request parameters."""
    perspective: str
    parentPerspective: Optional[str] = None
    parentId: Optional[str] = None
    tierFilter: Optional[str] = None
    period1: Period
    period2: Period


class DeepDiveResponse(BaseModel):
    """Response body for POST /deep-dive."""
    status: str = Field(default="ok")
    data: List[DeepDiveItem] = Field(default_factory=list)
    summary: DeepDiveSummary = Field(default_factory=DeepDiveSummary)
    context: DeepDiveContext


class PerspectiveInfo(BaseModel):
    """Perspective metadata exposed to the UI."""
    id: str
    displayName: str
    childPerspective: Optional[str] = None
    isLeaf: bool
