"""
tests/unit/test_optimization_pareto.py - Tests for Pareto front analysis.
"""

import json
import math

import pytest
from laseropt.optimization import (
    Individual,
    ObjectiveVector,
    ParameterVector,
    ParetoAnalyzer,
    crowding_distance,
    dominates,
    non_dominated_sort,
)
from laseropt.optimization.pareto import rank_and_crowd


def ov(cost, time=1.0, quality=80.0, energy=1.0):
    return ObjectiveVector(cost=cost, time=time, quality=quality, energy=energy)


def ind(power, objectives):
    return Individual(
        parameters=ParameterVector(power, 3000.0, 1.0, -1.0),
        objectives=objectives,
        fitness=0.5,
    )


class TestDominates:
    """Tests for the dominance relation."""

    def test_better_everywhere(self):
        """Test strict improvement in all objectives dominates."""
        assert dominates(ov(1.0, 1.0, 90.0, 1.0), ov(2.0, 2.0, 80.0, 2.0))

    def test_equal_does_not_dominate(self):
        """Test identical vectors do not dominate each other."""
        assert not dominates(ov(1.0), ov(1.0))

    def test_one_strictly_better(self):
        """Test no-worse everywhere plus one strict gain dominates."""
        assert dominates(ov(1.0), ov(2.0))
        assert not dominates(ov(2.0), ov(1.0))

    def test_quality_is_maximized(self):
        """Test higher quality counts as better."""
        assert dominates(ov(1.0, quality=95.0), ov(1.0, quality=90.0))
        assert not dominates(ov(1.0, quality=90.0), ov(1.0, quality=95.0))

    def test_tradeoff_is_incomparable(self):
        """Test a tradeoff dominates in neither direction."""
        a = ov(1.0, quality=70.0)
        b = ov(2.0, quality=90.0)
        assert not dominates(a, b)
        assert not dominates(b, a)


class TestNonDominatedSort:
    """Tests for non-dominated sorting."""

    def test_layers(self):
        """Test chained dominance produces one front per layer."""
        objectives = [ov(3.0), ov(1.0), ov(2.0)]
        assert non_dominated_sort(objectives) == [[1], [2], [0]]

    def test_mutually_non_dominated(self):
        """Test a tradeoff set forms a single front."""
        objectives = [ov(1.0, quality=70.0), ov(2.0, quality=80.0), ov(3.0, quality=90.0)]
        assert non_dominated_sort(objectives) == [[0, 1, 2]]

    def test_mixed(self):
        """Test two fronts with a dominated pair."""
        objectives = [
            ov(1.0, quality=70.0),   # front 0
            ov(2.0, quality=90.0),   # front 0
            ov(2.0, quality=70.0),   # dominated by 0
            ov(3.0, quality=85.0),   # dominated by 1
        ]
        assert non_dominated_sort(objectives) == [[0, 1], [2, 3]]

    def test_empty(self):
        """Test nothing to sort."""
        assert non_dominated_sort([]) == []

    def test_every_index_assigned_once(self):
        """Test fronts partition the input."""
        objectives = [ov(float(i % 4), quality=60.0 + (i * 7) % 30) for i in range(20)]
        fronts = non_dominated_sort(objectives)
        flat = sorted(i for front in fronts for i in front)
        assert flat == list(range(20))


class TestCrowdingDistance:
    """Tests for crowding distance."""

    def test_small_fronts_infinite(self):
        """Test fronts of one or two members are all boundary."""
        assert crowding_distance([ov(1.0)]) == [math.inf]
        assert crowding_distance([ov(1.0), ov(2.0)]) == [math.inf, math.inf]

    def test_boundaries_infinite(self):
        """Test extremes get infinite distance, interior finite."""
        front = [ov(1.0, quality=70.0), ov(2.0, quality=80.0), ov(4.0, quality=90.0)]
        distances = crowding_distance(front)
        assert distances[0] == math.inf
        assert distances[2] == math.inf
        # cost gap (4-1)/3 + quality gap (90-70)/20
        assert distances[1] == pytest.approx(2.0)

    def test_denser_region_is_smaller(self):
        """Test crowded members get lower distance."""
        front = [
            ov(1.0, quality=60.0),
            ov(1.1, quality=61.0),
            ov(1.2, quality=62.0),
            ov(3.0, quality=80.0),
            ov(5.0, quality=100.0),
        ]
        distances = crowding_distance(front)
        assert distances[1] < distances[3]

    def test_empty(self):
        """Test empty front."""
        assert crowding_distance([]) == []


class TestParetoAnalyzer:
    """Tests for ParetoAnalyzer."""

    def individuals(self):
        return [
            ind(1000.0, ov(1.0, quality=70.0)),
            ind(1100.0, ov(2.0, quality=90.0)),
            ind(1200.0, ov(2.0, quality=70.0)),
            ind(1300.0, ov(3.0, quality=85.0)),
        ]

    def test_rank_and_crowd(self):
        """Test ranks align with the input order."""
        ranks, _ = rank_and_crowd(self.individuals())
        assert ranks == [0, 0, 1, 1]

    def test_extract_front(self):
        """Test only rank-0 entries are returned."""
        front = ParetoAnalyzer().extract_front(self.individuals())
        assert {e.parameters.power for e in front} == {1000.0, 1100.0}
        assert all(e.dominance_rank == 0 for e in front)

    def test_front_not_dominated(self):
        """Test no front member is dominated by any individual."""
        population = self.individuals()
        for entry in ParetoAnalyzer().extract_front(population):
            assert not any(dominates(other.objectives, entry.objectives) for other in population)

    def test_duplicates_removed(self):
        """Test repeated parameter vectors appear once."""
        population = self.individuals()
        population.append(population[0])
        entries = ParetoAnalyzer().rank(population)
        assert len(entries) == 4

    def test_ordered_by_rank(self):
        """Test entries are sorted by rank then crowding."""
        entries = ParetoAnalyzer().rank(self.individuals())
        assert [e.dominance_rank for e in entries] == [0, 0, 1, 1]

    def test_fronts_by_rank(self):
        """Test grouping by rank."""
        grouped = ParetoAnalyzer().fronts_by_rank(self.individuals())
        assert set(grouped) == {0, 1}
        assert len(grouped[1]) == 2

    def test_requires_evaluated(self):
        """Test unevaluated individuals are rejected."""
        with pytest.raises(ValueError):
            ParetoAnalyzer().rank([Individual(parameters=ParameterVector(1.0, 1.0, 1.0, 1.0))])

    def test_entry_to_dict(self):
        """Test camelCase entry keys."""
        entry = ParetoAnalyzer().extract_front(self.individuals())[0]
        data = entry.to_dict()
        assert set(data) == {"parameters", "objectives", "dominanceRank", "crowdingDistance"}

    def test_boundary_distance_serializes_as_none(self):
        """Test infinite crowding distances become None in the output dict."""
        front = ParetoAnalyzer().extract_front(self.individuals())
        assert all(math.isinf(e.crowding_distance) for e in front)
        assert all(e.to_dict()["crowdingDistance"] is None for e in front)
        json.dumps([e.to_dict() for e in front], allow_nan=False)
