"""
optimization/operators.py - Variation operators.

Every operator takes the run's random source explicitly and returns new
vectors clamped into the parameter space.
"""

from __future__ import annotations
import random
from typing import Callable, Sequence, Tuple, TypeVar

from .materials import ParameterSpace
from .schema import PARAMETER_NAMES, Individual, ParameterVector

T = TypeVar("T")

# better(a, b) -> True when a should win over b
Comparator = Callable[[T, T], bool]


def fitter(a: Individual, b: Individual) -> bool:
    return a.fitness > b.fitness


def tournament_select(
    candidates: Sequence[T],
    rng: random.Random,
    k: int = 3,
    better: Comparator = fitter,
) -> T:
    """
    Tournament selection with replacement.

    The first sampled individual wins ties.
    """
    if not candidates:
        raise ValueError("Cannot select from an empty population")

    winner = candidates[rng.randrange(len(candidates))]
    for _ in range(k - 1):
        challenger = candidates[rng.randrange(len(candidates))]
        if better(challenger, winner):
            winner = challenger
    return winner


def uniform_crossover(
    a: ParameterVector,
    b: ParameterVector,
    rng: random.Random,
) -> ParameterVector:
    """Each parameter comes from parent A or B with probability 0.5."""
    return ParameterVector(**{
        name: a.get(name) if rng.random() < 0.5 else b.get(name)
        for name in PARAMETER_NAMES
    })


def mutate(
    vector: ParameterVector,
    space: ParameterSpace,
    rng: random.Random,
    rate: float = 0.1,
    scale: float = 0.1,
) -> ParameterVector:
    """
    Bounded uniform mutation.

    Each parameter mutates with probability `rate` by a symmetric step of
    at most `scale` times its interval width, then is clamped.
    """
    values = {}
    for name in PARAMETER_NAMES:
        value = vector.get(name)
        if rng.random() < rate:
            step = rng.uniform(-1.0, 1.0) * scale * space.span(name)
            value = space.clamp_value(name, value + step)
        values[name] = value
    return ParameterVector(**values)


def perturb_one(
    vector: ParameterVector,
    space: ParameterSpace,
    rng: random.Random,
    scale: float = 0.1,
) -> ParameterVector:
    """Mutate exactly one randomly chosen parameter."""
    name = PARAMETER_NAMES[rng.randrange(len(PARAMETER_NAMES))]
    step = rng.uniform(-1.0, 1.0) * scale * space.span(name)
    return vector.with_value(name, space.clamp_value(name, vector.get(name) + step))


def swarm_move(
    particle: Individual,
    global_best: ParameterVector,
    space: ParameterSpace,
    rng: random.Random,
    inertia: float = 0.7,
    cognitive: float = 1.5,
    social: float = 1.5,
    velocity_limit: float = 0.2,
) -> Tuple[ParameterVector, ParameterVector]:
    """
    Particle swarm velocity and position update.

    v' = w*v + c1*r1*(pbest - x) + c2*r2*(gbest - x), limited to
    `velocity_limit` of each interval width; x' = clamp(x + v').

    Returns:
        (new position, new velocity)
    """
    position = particle.parameters
    personal_best = particle.personal_best or position
    velocity = particle.velocity

    new_position = {}
    new_velocity = {}
    for name in PARAMETER_NAMES:
        x = position.get(name)
        v = velocity.get(name) if velocity is not None else 0.0
        r1, r2 = rng.random(), rng.random()

        v = (
            inertia * v
            + cognitive * r1 * (personal_best.get(name) - x)
            + social * r2 * (global_best.get(name) - x)
        )
        v_max = velocity_limit * space.span(name)
        v = max(-v_max, min(v_max, v))

        new_position[name] = space.clamp_value(name, x + v)
        new_velocity[name] = v

    return ParameterVector(**new_position), ParameterVector(**new_velocity)
