"""
optimization/strategies.py - Search strategies.

The evolution loop talks only to AlgorithmStrategy. Each algorithm type
decides how parents are chosen and how offspring are produced; all of
them draw randomness from the run's generator passed in by the loop.

A strategy instance belongs to one run and may keep run-local state
(swarm memory lives on the individuals, the annealing chain on the
strategy).
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Dict, List, NamedTuple, Optional, Type
import logging
import math
import random

from ..bootstrap.config import EngineSettings
from .enums import AlgorithmType
from .materials import ParameterSpace
from .operators import (
    mutate,
    perturb_one,
    swarm_move,
    tournament_select,
    uniform_crossover,
)
from .pareto import rank_and_crowd
from .population import elite
from .schema import PARAMETER_NAMES, Individual, ParameterVector, Population

logger = logging.getLogger(__name__)


class AlgorithmStrategy(ABC):
    """Selection and variation for one algorithm type."""

    algorithm: AlgorithmType

    def __init__(self, space: ParameterSpace, settings: Optional[EngineSettings] = None):
        self.space = space
        self.settings = settings or EngineSettings()

    def elites(self, population: Population) -> List[Individual]:
        """Individuals carried unchanged into the next generation."""
        return elite(population, self.settings.elite_fraction)

    def initialize(self, population: Population) -> Population:
        """Hook run once on the evaluated generation zero."""
        return population

    @abstractmethod
    def select(self, population: Population, rng: random.Random) -> Individual:
        """Choose one parent."""

    @abstractmethod
    def vary(self, population: Population, count: int, rng: random.Random) -> List[Individual]:
        """Produce `count` unevaluated offspring."""

    def settle(self, offspring: List[Individual], rng: random.Random) -> List[Individual]:
        """Hook run on evaluated offspring before they join the next generation."""
        return offspring

    def finish(self) -> None:
        """Hook run once when the loop terminates normally."""

    def _mutate(self, vector: ParameterVector, rng: random.Random) -> ParameterVector:
        return mutate(
            vector,
            self.space,
            rng,
            rate=self.settings.mutation_rate,
            scale=self.settings.mutation_scale,
        )


class GeneticStrategy(AlgorithmStrategy):
    """Tournament selection, uniform crossover, bounded mutation."""

    algorithm = AlgorithmType.GENETIC

    def select(self, population: Population, rng: random.Random) -> Individual:
        return tournament_select(
            population.individuals, rng, k=self.settings.tournament_size
        )

    def vary(self, population: Population, count: int, rng: random.Random) -> List[Individual]:
        offspring = []
        for _ in range(count):
            parent1 = self.select(population, rng)
            parent2 = self.select(population, rng)
            child = uniform_crossover(parent1.parameters, parent2.parameters, rng)
            offspring.append(Individual(parameters=self._mutate(child, rng)))
        return offspring


class _Ranked(NamedTuple):
    individual: Individual
    rank: int
    crowding: float


def _crowded_better(a: _Ranked, b: _Ranked) -> bool:
    """Lower rank wins; larger crowding distance breaks ties."""
    if a.rank != b.rank:
        return a.rank < b.rank
    return a.crowding > b.crowding


class NSGA2Strategy(GeneticStrategy):
    """Genetic variation with rank/crowding tournament instead of fitness."""

    algorithm = AlgorithmType.MULTI_OBJECTIVE

    def __init__(self, space: ParameterSpace, settings: Optional[EngineSettings] = None):
        super().__init__(space, settings)
        self._ranked: List[_Ranked] = []

    def vary(self, population: Population, count: int, rng: random.Random) -> List[Individual]:
        ranks, crowding = rank_and_crowd(population.individuals)
        self._ranked = [
            _Ranked(ind, r, d) for ind, r, d in zip(population.individuals, ranks, crowding)
        ]
        return super().vary(population, count, rng)

    def select(self, population: Population, rng: random.Random) -> Individual:
        if len(self._ranked) != len(population):
            ranks, crowding = rank_and_crowd(population.individuals)
            self._ranked = [
                _Ranked(ind, r, d) for ind, r, d in zip(population.individuals, ranks, crowding)
            ]
        winner = tournament_select(
            self._ranked, rng, k=self.settings.tournament_size, better=_crowded_better
        )
        return winner.individual


class ParticleSwarmStrategy(AlgorithmStrategy):
    """
    Particle swarm: non-elite particles move towards their personal best
    and the swarm's best, then mutate.
    """

    algorithm = AlgorithmType.PARTICLE_SWARM

    def initialize(self, population: Population) -> Population:
        still = ParameterVector(**{name: 0.0 for name in PARAMETER_NAMES})
        return Population(
            generation=population.generation,
            individuals=tuple(
                replace(
                    ind,
                    velocity=still,
                    personal_best=ind.parameters,
                    personal_best_fitness=ind.fitness,
                )
                for ind in population
            ),
        )

    def global_best(self, population: Population) -> ParameterVector:
        leader = population[0]
        for ind in population.individuals[1:]:
            if ind.personal_best_fitness > leader.personal_best_fitness:
                leader = ind
        return leader.personal_best or leader.parameters

    def select(self, population: Population, rng: random.Random) -> Individual:
        return population.best()

    def vary(self, population: Population, count: int, rng: random.Random) -> List[Individual]:
        if count <= 0:
            return []

        gbest = self.global_best(population)
        movers = population.ranked()[-count:]

        offspring = []
        for particle in movers:
            position, velocity = swarm_move(
                particle,
                gbest,
                self.space,
                rng,
                inertia=self.settings.pso_inertia,
                cognitive=self.settings.pso_cognitive,
                social=self.settings.pso_social,
                velocity_limit=self.settings.pso_velocity_limit,
            )
            offspring.append(Individual(
                parameters=self._mutate(position, rng),
                velocity=velocity,
                personal_best=particle.personal_best,
                personal_best_fitness=particle.personal_best_fitness,
            ))
        return offspring

    def settle(self, offspring: List[Individual], rng: random.Random) -> List[Individual]:
        settled = []
        for particle in offspring:
            if particle.personal_best is None or particle.fitness > particle.personal_best_fitness:
                particle = replace(
                    particle,
                    personal_best=particle.parameters,
                    personal_best_fitness=particle.fitness,
                )
            settled.append(particle)
        return settled


class SimulatedAnnealingStrategy(AlgorithmStrategy):
    """
    Simulated annealing around a single current solution.

    Each generation proposes neighbours of the current solution; the best
    neighbour replaces it when fitter, or with probability exp(-delta/T)
    when worse. T decays geometrically per generation.
    """

    algorithm = AlgorithmType.SIMULATED_ANNEALING

    def __init__(self, space: ParameterSpace, settings: Optional[EngineSettings] = None):
        super().__init__(space, settings)
        self.current: Optional[Individual] = None
        self.temperature = self.settings.sa_initial_temperature
        self.accepted_worse = 0

    def initialize(self, population: Population) -> Population:
        self.current = population.best()
        self.temperature = self.settings.sa_initial_temperature
        self.accepted_worse = 0
        return population

    def select(self, population: Population, rng: random.Random) -> Individual:
        if self.current is None:
            self.current = population.best()
        return self.current

    def vary(self, population: Population, count: int, rng: random.Random) -> List[Individual]:
        origin = self.select(population, rng).parameters
        offspring = []
        for _ in range(count):
            neighbor = self._mutate(origin, rng)
            if neighbor == origin:
                neighbor = perturb_one(origin, self.space, rng, scale=self.settings.mutation_scale)
            offspring.append(Individual(parameters=neighbor))
        return offspring

    def settle(self, offspring: List[Individual], rng: random.Random) -> List[Individual]:
        if offspring:
            candidate = offspring[0]
            for ind in offspring[1:]:
                if ind.fitness > candidate.fitness:
                    candidate = ind

            delta = self.current.fitness - candidate.fitness
            if delta <= 0:
                self.current = candidate
            elif rng.random() < math.exp(-delta / self.temperature):
                self.current = candidate
                self.accepted_worse += 1

        self.temperature *= self.settings.sa_cooling_rate
        return offspring

    def finish(self) -> None:
        logger.info(
            f"Annealing finished: accepted {self.accepted_worse} worse moves, "
            f"final temperature={self.temperature:.6f}"
        )


STRATEGIES: Dict[AlgorithmType, Type[AlgorithmStrategy]] = {
    AlgorithmType.GENETIC: GeneticStrategy,
    AlgorithmType.PARTICLE_SWARM: ParticleSwarmStrategy,
    AlgorithmType.SIMULATED_ANNEALING: SimulatedAnnealingStrategy,
    AlgorithmType.MULTI_OBJECTIVE: NSGA2Strategy,
}


def create_strategy(
    algorithm: AlgorithmType,
    space: ParameterSpace,
    settings: Optional[EngineSettings] = None,
) -> AlgorithmStrategy:
    """Instantiate the strategy for an algorithm type."""
    if not isinstance(algorithm, AlgorithmType):
        algorithm = AlgorithmType(algorithm)
    strategy_cls = STRATEGIES[algorithm]
    logger.debug(f"Using {strategy_cls.__name__} for {algorithm.value}")
    return strategy_cls(space, settings)
