"""
optimization/population.py - Population management.

Creates generation zero, measures spread in bound-normalized space and
picks the elites carried unchanged into the next generation.
"""

from __future__ import annotations
import math
import random
from typing import List, Optional

from .materials import ParameterSpace
from .schema import PARAMETER_NAMES, Individual, ParameterVector, Population


def random_vector(space: ParameterSpace, rng: random.Random) -> ParameterVector:
    """Draw every parameter independently and uniformly within its interval."""
    return ParameterVector(**{
        name: rng.uniform(*space.interval(name)) for name in PARAMETER_NAMES
    })


def initialize(
    size: int,
    space: ParameterSpace,
    rng: random.Random,
    seed_vectors: Optional[List[ParameterVector]] = None,
) -> Population:
    """
    Create an unevaluated generation-zero population.

    Args:
        size: Number of individuals
        space: Parameter bounds
        rng: Seeded random source
        seed_vectors: Optional vectors placed first (clamped into bounds)

    Returns:
        Population of `size` individuals
    """
    if size < 1:
        raise ValueError(f"Population size must be positive, got {size}")

    individuals = []
    for vector in (seed_vectors or [])[:size]:
        individuals.append(Individual(parameters=space.clamp(vector)))

    while len(individuals) < size:
        individuals.append(Individual(parameters=random_vector(space, rng)))

    return Population(generation=0, individuals=tuple(individuals))


def diversity(population: Population, space: ParameterSpace) -> float:
    """Mean pairwise Euclidean distance in bound-normalized parameter space."""
    points = [space.normalize(ind.parameters) for ind in population]
    n = len(points)
    if n < 2:
        return 0.0

    total = 0.0
    for i in range(n):
        pi = points[i]
        for j in range(i + 1, n):
            total += math.dist(pi, points[j])

    return total / (n * (n - 1) / 2)


def elite_count(population_size: int, fraction: float) -> int:
    """Number of elites for a population size (at least one when fraction > 0)."""
    if fraction <= 0:
        return 0
    return min(population_size - 1, max(1, int(population_size * fraction)))


def elite(population: Population, fraction: float) -> List[Individual]:
    """Top `fraction` of the population by fitness, unchanged."""
    count = elite_count(len(population), fraction)
    return population.ranked()[:count]
