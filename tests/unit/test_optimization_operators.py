"""
tests/unit/test_optimization_operators.py - Tests for variation operators.
"""

import random

import pytest
from laseropt.optimization import Individual, ParameterVector
from laseropt.optimization.operators import (
    mutate,
    perturb_one,
    swarm_move,
    tournament_select,
    uniform_crossover,
)


A = ParameterVector(1000.0, 2000.0, 1.0, -1.0)
B = ParameterVector(2000.0, 6000.0, 10.0, 1.0)


class ScriptedRandom(random.Random):
    """Random source returning scripted randrange values."""

    def __init__(self, indices):
        super().__init__(0)
        self._indices = list(indices)

    def randrange(self, *args, **kwargs):
        return self._indices.pop(0)


class TestTournamentSelect:
    """Tests for tournament selection."""

    def individuals(self, fitnesses):
        return [
            Individual(parameters=A.with_value("power", 500.0 + i), fitness=f)
            for i, f in enumerate(fitnesses)
        ]

    def test_returns_fittest_sampled(self):
        """Test the best of the sampled individuals wins."""
        pool = self.individuals([0.1, 0.5, 0.9, 0.3])
        rng = ScriptedRandom([0, 3, 1])
        assert tournament_select(pool, rng, k=3) is pool[1]

    def test_first_sampled_wins_ties(self):
        """Test tie-break favors the first sample."""
        pool = self.individuals([0.5, 0.5, 0.5])
        rng = ScriptedRandom([2, 0, 1])
        assert tournament_select(pool, rng, k=3) is pool[2]

    def test_samples_with_replacement(self):
        """Test the same index may be drawn repeatedly."""
        pool = self.individuals([0.1, 0.9])
        rng = ScriptedRandom([0, 0, 0])
        assert tournament_select(pool, rng, k=3) is pool[0]

    def test_custom_comparator(self):
        """Test selection over arbitrary candidates."""
        rng = ScriptedRandom([0, 1, 2])
        assert tournament_select([5, 2, 8], rng, k=3, better=lambda a, b: a < b) == 2

    def test_empty_rejected(self, rng):
        """Test selection from nothing raises."""
        with pytest.raises(ValueError):
            tournament_select([], rng)


class TestCrossover:
    """Tests for uniform crossover."""

    def test_genes_come_from_parents(self, rng):
        """Test every field is inherited from one parent."""
        for _ in range(50):
            child = uniform_crossover(A, B, rng)
            for name in ("power", "speed", "gas_pressure", "focus_height"):
                assert child.get(name) in (A.get(name), B.get(name))

    def test_mixes_parents(self):
        """Test both parents contribute over many draws."""
        rng = random.Random(3)
        children = [uniform_crossover(A, B, rng) for _ in range(100)]
        assert any(c.power == A.power for c in children)
        assert any(c.power == B.power for c in children)


class TestMutation:
    """Tests for bounded mutation."""

    def test_rate_zero_is_identity(self, steel_space, rng):
        """Test no mutation without probability."""
        assert mutate(A, steel_space, rng, rate=0.0) == A

    def test_step_bounded_by_scale(self, steel_space, rng):
        """Test each step is at most scale * span."""
        for _ in range(200):
            child = mutate(A, steel_space, rng, rate=1.0, scale=0.1)
            for name in ("power", "speed", "gas_pressure", "focus_height"):
                assert abs(child.get(name) - A.get(name)) <= 0.1 * steel_space.span(name) + 1e-9

    def test_clamped_at_boundary(self, steel_space, rng):
        """Test mutation never leaves the space."""
        corner = ParameterVector(3000.0, 8000.0, 20.0, 2.0)
        for _ in range(200):
            assert steel_space.contains(mutate(corner, steel_space, rng, rate=1.0, scale=0.5))

    def test_perturb_one_changes_single_field(self, steel_space, rng):
        """Test exactly one field can differ."""
        for _ in range(50):
            child = perturb_one(A, steel_space, rng)
            changed = [n for n in ("power", "speed", "gas_pressure", "focus_height")
                       if child.get(n) != A.get(n)]
            assert len(changed) <= 1
            assert steel_space.contains(child)


class TestSwarmMove:
    """Tests for the particle swarm update."""

    def test_stationary_at_best(self, steel_space, rng):
        """Test a resting particle at the global best stays put."""
        still = ParameterVector(0.0, 0.0, 0.0, 0.0)
        particle = Individual(parameters=A, velocity=still, personal_best=A)
        position, velocity = swarm_move(particle, A, steel_space, rng)
        assert position == A
        assert velocity == still

    def test_velocity_limited(self, steel_space, rng):
        """Test velocity is clipped to the limit fraction of each span."""
        particle = Individual(
            parameters=ParameterVector(500.0, 500.0, 0.5, -5.0),
            personal_best=ParameterVector(3000.0, 8000.0, 20.0, 2.0),
        )
        gbest = ParameterVector(3000.0, 8000.0, 20.0, 2.0)
        for _ in range(20):
            position, velocity = swarm_move(particle, gbest, steel_space, rng, velocity_limit=0.2)
            for name in ("power", "speed", "gas_pressure", "focus_height"):
                assert abs(velocity.get(name)) <= 0.2 * steel_space.span(name) + 1e-9
            assert steel_space.contains(position)

    def test_moves_towards_best(self, steel_space):
        """Test attraction pulls the particle towards the bests."""
        start = ParameterVector(500.0, 500.0, 0.5, -5.0)
        particle = Individual(parameters=start, personal_best=B)
        position, _ = swarm_move(particle, B, steel_space, random.Random(1))
        for name in ("power", "speed", "gas_pressure", "focus_height"):
            assert position.get(name) >= start.get(name)
