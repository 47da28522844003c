"""
Revenue ranking and Pareto tiering.

Given the complete population of one comparison, entities are stable-sorted
by revenue descending, a running cumulative revenue is computed in that
order, and each entity is tiered from its running cumulative share:

    A: cumulative_revenue_pct <= 80
    B: cumulative_revenue_pct <= 95
    C: otherwise

Tiering is a property of the whole population and its order. It must never
be applied to a filtered subset or to a page of results: the boundaries
would shift. Entities with equal revenue keep their input order.

When the population's total revenue is zero, every entity gets a cumulative
share of 0 and tier C.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Generic, List, Sequence, TypeVar

from deepdive.models import RevenueTier

logger = logging.getLogger(__name__)


# Pareto cut-offs, in percent of total revenue (inclusive)
TIER_A_MAX_PCT: float = 80.0
TIER_B_MAX_PCT: float = 95.0


T = TypeVar("T")


@dataclass
class RankedEntity(Generic[T]):
    """An entity with its position in the revenue ranking."""
    entity: T
    rank: int
    total_revenue: float
    cumulative_revenue: float
    cumulative_revenue_pct: float
    tier: RevenueTier


def assign_tier(cumulative_revenue_pct: float, total_revenue: float) -> RevenueTier:
    """
    Map a running cumulative share to a Pareto tier.

    Args:
        cumulative_revenue_pct: Running cumulative share at the entity's rank.
        total_revenue: Total revenue of the population.

    Returns:
        RevenueTier: A, B or C.
    """
    if total_revenue <= 0:
        return RevenueTier.C
    if cumulative_revenue_pct <= TIER_A_MAX_PCT:
        return RevenueTier.A
    if cumulative_revenue_pct <= TIER_B_MAX_PCT:
        return RevenueTier.B
    return RevenueTier.C


def rank_by_revenue(
    entities: Sequence[T],
    revenue: Callable[[T], float],
) -> List[RankedEntity[T]]:
    """
    Rank and tier a complete population.

    Args:
        entities: The whole population, in adapter order.
        revenue: Accessor returning the revenue an entity is ranked by.

    Returns:
        List[RankedEntity]: Entities in rank order (revenue descending,
        ties in input order), each with cumulative figures and tier.
    """
    # sorted() is stable, so equal revenues keep their input order
    ordered = sorted(entities, key=lambda entity: revenue(entity) or 0.0, reverse=True)
    total_revenue = sum(revenue(entity) or 0.0 for entity in ordered)

    ranked: List[RankedEntity[T]] = []
    cumulative = 0.0
    for position, entity in enumerate(ordered, start=1):
        cumulative += revenue(entity) or 0.0
        if total_revenue > 0:
            # Multiply first so exact boundaries (80/95) are not lost to rounding
            cumulative_pct = cumulative * 100 / total_revenue
        else:
            cumulative_pct = 0.0
        ranked.append(RankedEntity(
            entity=entity,
            rank=position,
            total_revenue=total_revenue,
            cumulative_revenue=cumulative,
            cumulative_revenue_pct=cumulative_pct,
            tier=assign_tier(cumulative_pct, total_revenue),
        ))

    logger.debug(f"Ranked {len(ranked)} entities, total revenue {total_revenue:.2f}")
    return ranked
