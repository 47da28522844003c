"""
Package initialization file for deep dive models.

Re-exports all Pydantic schemas and enumerations from schemas.py and enums.py
so other modules can import them from deepdive.models directly.

Usage:
    from deepdive.models import (
        Perspective,
        DeepDiveRequest,
        DeepDiveItem,
        # ... etc
    )
"""

# =============================================================================
# Enums
# =============================================================================

from deepdive.models.enums import (
    Perspective,
    RevenueTier,
    DisplayTier,
    LifecycleStatus,
    WarningSeverity,
    HealthMetric,
)


# =============================================================================
# Schemas
# =============================================================================

from deepdive.models.schemas import (
    FILTER_KEYS,
    # Request models
    Period,
    DimensionFilters,
    DeepDiveRequest,
    # Collaborator payloads
    EntityPeriodRow,
    MembershipGroup,
    MonthlyRevenue,
    # Engine outputs
    HealthWarning,
    LostImpact,
    DeepDiveItem,
    DeepDiveSummary,
    # Response envelope
    DeepDiveContext,
    DeepDiveResponse,
    PerspectiveInfo,
)


# =============================================================================
# Perspective metadata
# =============================================================================

from deepdive.models.perspectives import (
    FILTER_COLUMNS,
    PERSPECTIVE_CONFIGS,
    PerspectiveConfig,
    get_perspective_config,
)


__all__ = [
    # Enums
    "Perspective",
    "RevenueTier",
    "DisplayTier",
    "LifecycleStatus",
    "WarningSeverity",
    "HealthMetric",
    # Schemas
    "FILTER_KEYS",
    "Period",
    "DimensionFilters",
    "DeepDiveRequest",
    "EntityPeriodRow",
    "MembershipGroup",
    "MonthlyRevenue",
    "HealthWarning",
    "LostImpact",
    "DeepDiveItem",
    "DeepDiveSummary",
    "DeepDiveContext",
    "DeepDiveResponse",
    "PerspectiveInfo",
    # Perspective metadata
    "FILTER_COLUMNS",
    "PERSPECTIVE_CONFIGS",
    "PerspectiveConfig",
    "get_perspective_config",
]
