"""
Revenue ranking and Pareto tiering tests.

Covers the inclusive 80 / 95 boundaries, the partition and monotonicity of
tiers over a population, the cumulative total, stable ordering of ties and
the zero-revenue population.
"""

import random
from typing import List, Tuple

import pytest

from deepdive.models import RevenueTier
from deepdive.services.tiering import assign_tier, rank_by_revenue


def _rank(revenues: List[Tuple[str, float]]):
    return rank_by_revenue(revenues, lambda pair: pair[1])


class TestAssignTier:

    @pytest.mark.parametrize("pct,expected", [
        (0.0, RevenueTier.A),
        (80.0, RevenueTier.A),
        (80.0001, RevenueTier.B),
        (95.0, RevenueTier.B),
        (95.0001, RevenueTier.C),
        (100.0, RevenueTier.C),
    ])
    def test_boundaries(self, pct: float, expected: RevenueTier):
        assert assign_tier(pct, total_revenue=1000.0) == expected

    def test_zero_total_is_c(self):
        assert assign_tier(0.0, total_revenue=0.0) == RevenueTier.C


class TestRankByRevenue:

    def test_boundary_example(self):
        ranked = _rank([("B", 150.0), ("C", 50.0), ("A", 800.0)])

        assert [entry.entity[0] for entry in ranked] == ["A", "B", "C"]
        assert [entry.cumulative_revenue_pct for entry in ranked] == pytest.approx([80.0, 95.0, 100.0])
        assert [entry.tier for entry in ranked] == [RevenueTier.A, RevenueTier.B, RevenueTier.C]

    def test_cumulative_total(self):
        ranked = _rank([("x", 12.5), ("y", 7.25), ("z", 0.0), ("w", 80.25)])

        last = ranked[-1]
        assert last.cumulative_revenue == pytest.approx(last.total_revenue)
        assert last.cumulative_revenue_pct == pytest.approx(100.0)
        assert all(entry.total_revenue == pytest.approx(100.0) for entry in ranked)

    def test_ties_keep_input_order(self):
        ranked = _rank([("first", 10.0), ("big", 50.0), ("second", 10.0), ("third", 10.0)])

        assert [entry.entity[0] for entry in ranked] == ["big", "first", "second", "third"]
        assert [entry.rank for entry in ranked] == [1, 2, 3, 4]

    def test_reordering_ties_changes_tiers(self):
        # Same set, different input order of the tied pair straddling 80%
        forward = _rank([("x", 60.0), ("p", 20.0), ("q", 20.0)])
        backward = _rank([("x", 60.0), ("q", 20.0), ("p", 20.0)])

        tiers_forward = {entry.entity[0]: entry.tier for entry in forward}
        tiers_backward = {entry.entity[0]: entry.tier for entry in backward}
        assert tiers_forward == {"x": RevenueTier.A, "p": RevenueTier.A, "q": RevenueTier.C}
        assert tiers_backward == {"x": RevenueTier.A, "q": RevenueTier.A, "p": RevenueTier.C}

    def test_zero_revenue_population(self):
        ranked = _rank([("a", 0.0), ("b", 0.0)])

        assert [entry.entity[0] for entry in ranked] == ["a", "b"]
        assert all(entry.cumulative_revenue_pct == 0.0 for entry in ranked)
        assert all(entry.tier == RevenueTier.C for entry in ranked)

    def test_empty_population(self):
        assert _rank([]) == []

    def test_partition_and_monotonicity(self):
        rng = random.Random(7)
        population = [(str(i), round(rng.uniform(0, 500), 2)) for i in range(200)]
        ranked = _rank(population)

        for entry in ranked:
            pct = entry.cumulative_revenue_pct
            if pct <= 80:
                assert entry.tier == RevenueTier.A
            elif pct <= 95:
                assert entry.tier == RevenueTier.B
            else:
                assert entry.tier == RevenueTier.C

        order = {RevenueTier.A: 0, RevenueTier.B: 1, RevenueTier.C: 2}
        positions = [order[entry.tier] for entry in ranked]
        assert positions == sorted(positions)

    def test_subset_shifts_boundaries(self):
        population = [("a", 500.0), ("b", 300.0), ("c", 150.0), ("d", 50.0)]
        full = {entry.entity[0]: entry.tier for entry in _rank(population)}
        tier_a = [pair for pair in population if full[pair[0]] == RevenueTier.A]
        retiered = {entry.entity[0]: entry.tier for entry in _rank(tier_a)}

        assert set(retiered) == {"a", "b"}
        assert full["b"] == RevenueTier.A
        # Within the A subset, b closes the ranking at 100%
        assert retiered["b"] == RevenueTier.C
