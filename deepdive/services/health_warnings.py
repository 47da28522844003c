"""
Health warning engine.

Each existing row is checked against a fixed, ordered table of rules over
its request, eCPM and revenue deltas (percent) and its fill rate level and
delta (percentage points). All rules are evaluated, then a single winner is
selected: the lowest priority number, and within one priority the first
matching rule in table order. No match means healthy.

Rows that are new or lost are always healthy; their deltas compare against
an empty period.

Thresholds (all inclusive on the lower-is-worse side):

    Priority 1 (critical)
        requests <= -40%
        eCPM <= -40%
        requests <= -25% and eCPM <= -25%
        fill rate p2 < 50% and fill rate change <= -15pp
    Priority 2 (warning)
        requests in (-40%, -25%]
        eCPM in (-40%, -25%]
        revenue in (-40%, -25%] with requests <= -15% and eCPM > -10%
        revenue in (-40%, -25%] with eCPM <= -15% and requests > -10%
        fill rate change in (-30pp, -15pp] and fill rate p2 >= 50%
    Priority 3 (info)
        requests in (-25%, -15%]
        eCPM in (-25%, -15%]
        fill rate change in (-15pp, -10pp]

The eCPM signal is effective eCPM (revenue / requests * 1000).
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from deepdive.models import HealthMetric, HealthWarning, LifecycleStatus, WarningSeverity
from deepdive.services.derived_metrics import DerivedMetrics


@dataclass(frozen=True)
class HealthSignals:
    """Inputs of the warning rules."""
    req_change_pct: float
    ecpm_change_pct: float
    rev_change_pct: float
    fill_rate_p2: float
    fill_rate_change: float

    @classmethod
    def from_metrics(cls, metrics: DerivedMetrics) -> "HealthSignals":
        return cls(
            req_change_pct=metrics.req_change_pct,
            ecpm_change_pct=metrics.ecpm_change_pct,
            rev_change_pct=metrics.rev_change_pct,
            fill_rate_p2=metrics.fill_rate_p2,
            fill_rate_change=metrics.fill_rate_change,
        )

    def message_values(self) -> Dict[str, float]:
        return {
            "req": abs(self.req_change_pct),
            "ecpm": abs(self.ecpm_change_pct),
            "rev": abs(self.rev_change_pct),
            "fill_rate": self.fill_rate_p2,
            "fill_pp": abs(self.fill_rate_change),
        }


@dataclass(frozen=True)
class WarningRule:
    """One row of the rule table."""
    name: str
    priority: int
    severity: WarningSeverity
    predicate: Callable[[HealthSignals], bool]
    message: str
    metrics: Tuple[HealthMetric, ...]

    def render(self, signals: HealthSignals) -> str:
        return self.message.format(**signals.message_values())


def _between(value: float, low: float, high: float) -> bool:
    """low < value <= high"""
    return low < value <= high


_REQ = HealthMetric.REQUESTS
_ECPM = HealthMetric.ECPM
_REV = HealthMetric.REVENUE
_FILL = HealthMetric.FILL_RATE


WARNING_RULES: Tuple[WarningRule, ...] = (
    # Priority 1
    WarningRule(
        name="requests_crash",
        priority=1,
        severity=WarningSeverity.CRITICAL,
        predicate=lambda s: s.req_change_pct <= -40,
        message="Request volume dropped {req:.1f}% - Contact publisher immediately to check integration",
        metrics=(_REQ,),
    ),
    WarningRule(
        name="ecpm_crash",
        priority=1,
        severity=WarningSeverity.CRITICAL,
        predicate=lambda s: s.ecpm_change_pct <= -40,
        message="eCPM dropped {ecpm:.1f}% - Urgent floor price review or demand partner check needed",
        metrics=(_ECPM,),
    ),
    WarningRule(
        name="revenue_crisis",
        priority=1,
        severity=WarningSeverity.CRITICAL,
        predicate=lambda s: s.req_change_pct <= -25 and s.ecpm_change_pct <= -25,
        message=(
            "Revenue crisis: Requests down {req:.1f}%, eCPM down {ecpm:.1f}% "
            "- Immediate investigation required"
        ),
        metrics=(_REQ, _ECPM, _REV),
    ),
    WarningRule(
        name="fill_rate_critical",
        priority=1,
        severity=WarningSeverity.CRITICAL,
        predicate=lambda s: s.fill_rate_p2 < 50 and s.fill_rate_change <= -15,
        message="Fill rate critically low at {fill_rate:.1f}% - Check demand partner health immediately",
        metrics=(_FILL,),
    ),
    # Priority 2
    WarningRule(
        name="requests_drop",
        priority=2,
        severity=WarningSeverity.WARNING,
        predicate=lambda s: _between(s.req_change_pct, -40, -25),
        message="Traffic dropped {req:.1f}% - Verify publisher ad tag implementation",
        metrics=(_REQ,),
    ),
    WarningRule(
        name="ecpm_drop",
        priority=2,
        severity=WarningSeverity.WARNING,
        predicate=lambda s: _between(s.ecpm_change_pct, -40, -25),
        message="eCPM declining {ecpm:.1f}% - Consider floor price optimization",
        metrics=(_ECPM,),
    ),
    WarningRule(
        name="revenue_drop_traffic",
        priority=2,
        severity=WarningSeverity.WARNING,
        predicate=lambda s: (
            _between(s.rev_change_pct, -40, -25)
            and s.req_change_pct <= -15
            and s.ecpm_change_pct > -10
        ),
        message="Revenue down {rev:.1f}% due to traffic drop - Contact publisher about ad inventory",
        metrics=(_REV, _REQ),
    ),
    WarningRule(
        name="revenue_drop_ecpm",
        priority=2,
        severity=WarningSeverity.WARNING,
        predicate=lambda s: (
            _between(s.rev_change_pct, -40, -25)
            and s.ecpm_change_pct <= -15
            and s.req_change_pct > -10
        ),
        message="Revenue down {rev:.1f}% due to eCPM decline - Review pricing strategy",
        metrics=(_REV, _ECPM),
    ),
    WarningRule(
        name="fill_rate_drop",
        priority=2,
        severity=WarningSeverity.WARNING,
        predicate=lambda s: _between(s.fill_rate_change, -30, -15) and s.fill_rate_p2 >= 50,
        message="Fill rate dropped {fill_pp:.1f}pp - Monitor demand partner performance",
        metrics=(_FILL,),
    ),
    # Priority 3
    WarningRule(
        name="requests_decline",
        priority=3,
        severity=WarningSeverity.INFO,
        predicate=lambda s: _between(s.req_change_pct, -25, -15),
        message="Requests declining {req:.1f}% - Monitor for continued trend",
        metrics=(_REQ,),
    ),
    WarningRule(
        name="ecpm_decline",
        priority=3,
        severity=WarningSeverity.INFO,
        predicate=lambda s: _between(s.ecpm_change_pct, -25, -15),
        message="eCPM slightly down {ecpm:.1f}% - Within normal market fluctuation range",
        metrics=(_ECPM,),
    ),
    WarningRule(
        name="fill_rate_decline",
        priority=3,
        severity=WarningSeverity.INFO,
        predicate=lambda s: _between(s.fill_rate_change, -15, -10),
        message="Fill rate decreased {fill_pp:.1f}pp - Continue monitoring",
        metrics=(_FILL,),
    ),
)


def matching_rules(
    signals: HealthSignals,
    rules: Tuple[WarningRule, ...] = WARNING_RULES,
) -> List[WarningRule]:
    """Return every rule whose predicate holds, in table order."""
    return [rule for rule in rules if rule.predicate(signals)]


def select_rule(matches: List[WarningRule]) -> Optional[WarningRule]:
    """Pick the winning rule: lowest priority number, then table order."""
    if not matches:
        return None
    # min() keeps the first of equal keys
    return min(matches, key=lambda rule: rule.priority)


def evaluate_health(
    signals: HealthSignals,
    status: LifecycleStatus = LifecycleStatus.EXISTING,
    rules: Tuple[WarningRule, ...] = WARNING_RULES,
) -> HealthWarning:
    """
    Produce the single health warning of a row.

    Args:
        signals: Deltas and fill rate of the row.
        status: Lifecycle status; new and lost rows are always healthy.
        rules: Rule table, in declaration order.

    Returns:
        HealthWarning: The winning rule's severity, message and metrics,
        or a healthy warning with no message.
    """
    if status != LifecycleStatus.EXISTING:
        return HealthWarning()

    winner = select_rule(matching_rules(signals, rules))
    if winner is None:
        return HealthWarning()

    return HealthWarning(
        severity=winner.severity,
        message=winner.render(signals),
        metrics=list(winner.metrics),
    )
