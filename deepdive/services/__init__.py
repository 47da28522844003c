"""
Deep Dive Services Module

Business logic of the comparative tiering and drill-down engine. Pipeline
stages are plain functions over typed rows; collaborators are injected.

Services:
- derived_metrics: Fill rates, effective eCPM and period-over-period deltas
- tiering: Stable revenue ranking and Pareto A/B/C tiering
- lifecycle: New / lost / existing classification and lost-impact lookups
- health_warnings: Priority-ordered warning rule table
- summary: Totals and tier breakdown of a result set
- drill_down: Child perspective resolution and tier filtering
- team_aggregation: Team rows synthesized from pic rows via membership
- deep_dive: Pipeline orchestrator
- adapters: Collaborator protocols
- bigquery_adapter / membership: Production collaborators

All services are consumed by the API layer (deepdive/api/).
"""

# =============================================================================
# Pipeline stages
# =============================================================================

from deepdive.services.derived_metrics import (
    DerivedMetrics,
    change_pct,
    compute_derived_metrics,
    effective_ecpm,
    fill_rate,
    safe_divide,
)

from deepdive.services.tiering import (
    TIER_A_MAX_PCT,
    TIER_B_MAX_PCT,
    RankedEntity,
    assign_tier,
    rank_by_revenue,
)

from deepdive.services.lifecycle import (
    classify_lifecycle,
    display_labels,
    fetch_lost_impacts,
    lost_impact_from_history,
)

from deepdive.services.health_warnings import (
    WARNING_RULES,
    HealthSignals,
    WarningRule,
    evaluate_health,
    matching_rules,
    select_rule,
)

from deepdive.services.summary import calculate_summary

from deepdive.services.drill_down import (
    child_perspective,
    drill_down_scope,
    filter_by_tier,
)

from deepdive.services.team_aggregation import (
    aggregate_teams,
    resolve_team_members,
)

# =============================================================================
# Orchestrator
# =============================================================================

from deepdive.services.deep_dive import (
    build_items,
    fetch_population,
    parse_perspective,
    parse_tier_filter,
    run_deep_dive,
)

# =============================================================================
# Collaborators
# =============================================================================

from deepdive.services.adapters import (
    AggregationAdapter,
    MembershipAdapter,
    MonthlyHistoryAdapter,
)


__all__ = [
    # Derived metrics
    'DerivedMetrics',
    'change_pct',
    'compute_derived_metrics',
    'effective_ecpm',
    'fill_rate',
    'safe_divide',
    # Tiering
    'TIER_A_MAX_PCT',
    'TIER_B_MAX_PCT',
    'RankedEntity',
    'assign_tier',
    'rank_by_revenue',
    # Lifecycle
    'classify_lifecycle',
    'display_labels',
    'fetch_lost_impacts',
    'lost_impact_from_history',
    # Health warnings
    'WARNING_RULES',
    'HealthSignals',
    'WarningRule',
    'evaluate_health',
    'matching_rules',
    'select_rule',
    # Summary
    'calculate_summary',
    # Drill-down
    'child_perspective',
    'drill_down_scope',
    'filter_by_tier',
    # Team aggregation
    'aggregate_teams',
    'resolve_team_members',
    # Orchestrator
    'build_items',
    'fetch_population',
    'parse_perspective',
    'parse_tier_filter',
    'run_deep_dive',
    # Collaborator protocols
    'AggregationAdapter',
    'MembershipAdapter',
    'MonthlyHistoryAdapter',
]
