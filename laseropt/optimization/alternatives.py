"""
optimization/alternatives.py - Alternative solutions.

Turns the final population into a short list of distinct, ranked
alternatives with a plain-language description and tradeoff notes.
Tradeoffs name the objectives a solution gives up for the one it favors,
measured against the population median, plus fixed-limit notes.
"""

from __future__ import annotations
from statistics import median
from typing import Dict, List, Optional, Sequence, Tuple

from ..bootstrap.config import EngineSettings
from .enums import ObjectiveType
from .materials import ParameterSpace
from .schema import (
    OBJECTIVE_DIRECTIONS,
    OBJECTIVE_NAMES,
    AlternativeSolution,
    Individual,
    ObjectiveVector,
)

DESCRIPTIONS: Dict[str, str] = {
    "cost": "Cost-optimized solution with good efficiency",
    "time": "Speed-optimized solution for high throughput",
    "quality": "Quality-focused solution for precision applications",
    "energy": "Energy-efficient solution with reduced power draw",
    "balanced": "Balanced solution with good overall performance",
}

# Note for giving up each objective
SACRIFICE_NOTES: Dict[str, str] = {
    "cost": "Higher material and energy costs",
    "time": "Longer processing time",
    "quality": "Reduced edge quality",
    "energy": "Higher energy consumption",
}

# (objective, limit); the note applies when the objective is worse than the limit
TRADEOFF_THRESHOLDS: Tuple[Tuple[str, float], ...] = (
    ("cost", 8.0),
    ("time", 15.0),
    ("quality", 75.0),
    ("energy", 2.0),
)

NO_TRADEOFFS = "Well-balanced with minimal tradeoffs"

# Share of the population an objective must beat to count as favored
FAVOR_THRESHOLD = 0.6


def _better(name: str, a: float, b: float) -> bool:
    if OBJECTIVE_DIRECTIONS[name] == ObjectiveType.MAXIMIZE:
        return a > b
    return a < b


def tradeoffs(
    objectives: ObjectiveVector,
    favored: str = "balanced",
    medians: Optional[Dict[str, float]] = None,
) -> Tuple[str, ...]:
    """
    Tradeoff notes for an objective vector.

    Args:
        objectives: Objectives of the solution
        favored: Objective the solution favors, or "balanced"
        medians: Population median per objective; without it only the
            fixed limits apply

    Returns:
        Notes in objective order, or NO_TRADEOFFS when nothing is given up
    """
    given_up = set()
    if medians:
        for name in OBJECTIVE_NAMES:
            if name != favored and _better(name, medians[name], objectives.get(name)):
                given_up.add(name)
    for name, limit in TRADEOFF_THRESHOLDS:
        if _better(name, limit, objectives.get(name)):
            given_up.add(name)

    notes = tuple(SACRIFICE_NOTES[name] for name in OBJECTIVE_NAMES if name in given_up)
    return notes or (NO_TRADEOFFS,)


def population_medians(individuals: Sequence[Individual]) -> Dict[str, float]:
    """Median of every objective over evaluated individuals."""
    return {
        name: median(ind.objectives.get(name) for ind in individuals)
        for name in OBJECTIVE_NAMES
    }


class AlternativeSynthesizer:
    """Picks up to N mutually distinct alternatives from a population."""

    def __init__(self, space: ParameterSpace, settings: Optional[EngineSettings] = None):
        self.space = space
        self.settings = settings or EngineSettings()

    def synthesize(self, individuals: Sequence[Individual]) -> List[AlternativeSolution]:
        """
        Build alternatives from evaluated individuals.

        Candidates are taken in descending fitness order; one is kept only
        if its normalized parameter distance to every kept one is at least
        `alternative_min_distance`.
        """
        evaluated = [ind for ind in individuals if ind.is_evaluated]
        ranked = sorted(evaluated, key=lambda ind: ind.fitness, reverse=True)

        picked: List[Individual] = []
        for candidate in ranked:
            if len(picked) >= self.settings.alternative_count:
                break
            if all(
                self.space.distance(candidate.parameters, other.parameters)
                >= self.settings.alternative_min_distance
                for other in picked
            ):
                picked.append(candidate)

        medians = population_medians(evaluated) if evaluated else None
        alternatives = []
        for index, ind in enumerate(picked):
            favored = self.favored_objective(ind, evaluated)
            alternatives.append(AlternativeSolution(
                name=f"Alternative {index + 1}",
                description=DESCRIPTIONS[favored],
                parameters=ind.parameters,
                predicted_objectives=ind.objectives,
                tradeoffs=tradeoffs(ind.objectives, favored, medians),
                suitability_score=round(ind.fitness * 10, 1),
                favored_objective=favored,
            ))
        return alternatives

    def favored_objective(self, individual: Individual, population: Sequence[Individual]) -> str:
        """
        Objective in which the individual beats the largest share of the
        population, or "balanced" when no share reaches FAVOR_THRESHOLD.
        """
        others = [ind for ind in population if ind is not individual]
        if not others:
            return "balanced"

        best_name = "balanced"
        best_share = FAVOR_THRESHOLD
        for name in OBJECTIVE_NAMES:
            value = individual.objectives.get(name)
            beaten = sum(1 for ind in others if _better(name, value, ind.objectives.get(name)))
            share = beaten / len(others)
            if share >= best_share and (best_name == "balanced" or share > best_share):
                best_name = name
                best_share = share
        return best_name
