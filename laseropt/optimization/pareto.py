"""
optimization/pareto.py - Pareto front analysis.

Non-dominated sorting and crowding distance over the four objectives,
respecting that quality is maximized while the rest are minimized.
"""

from __future__ import annotations
from typing import Dict, List, Sequence, Tuple

from .enums import ObjectiveType
from .schema import (
    OBJECTIVE_DIRECTIONS,
    OBJECTIVE_NAMES,
    Individual,
    ObjectiveVector,
    ParameterVector,
    ParetoEntry,
)


def _as_minimization(objectives: ObjectiveVector) -> Tuple[float, ...]:
    return tuple(
        -objectives.get(name)
        if OBJECTIVE_DIRECTIONS[name] == ObjectiveType.MAXIMIZE
        else objectives.get(name)
        for name in OBJECTIVE_NAMES
    )


def _dominates_min(p: Tuple[float, ...], q: Tuple[float, ...]) -> bool:
    better_in_any = False
    for x, y in zip(p, q):
        if x > y:
            return False
        if x < y:
            better_in_any = True
    return better_in_any


def dominates(a: ObjectiveVector, b: ObjectiveVector) -> bool:
    """True iff a is no worse than b everywhere and strictly better somewhere."""
    return _dominates_min(_as_minimization(a), _as_minimization(b))


def non_dominated_sort(objectives: Sequence[ObjectiveVector]) -> List[List[int]]:
    """
    Classical non-dominated sorting.

    Returns:
        Fronts as lists of indices into `objectives`; front 0 is the
        non-dominated set, front k is non-dominated once fronts < k are removed.
    """
    n = len(objectives)
    if n == 0:
        return []

    points = [_as_minimization(o) for o in objectives]
    dominated_by_me: List[List[int]] = [[] for _ in range(n)]
    dom_count = [0] * n

    for i in range(n):
        for j in range(i + 1, n):
            if _dominates_min(points[i], points[j]):
                dominated_by_me[i].append(j)
                dom_count[j] += 1
            elif _dominates_min(points[j], points[i]):
                dominated_by_me[j].append(i)
                dom_count[i] += 1

    fronts: List[List[int]] = []
    current = [i for i in range(n) if dom_count[i] == 0]
    while current:
        fronts.append(current)
        next_front = []
        for i in current:
            for j in dominated_by_me[i]:
                dom_count[j] -= 1
                if dom_count[j] == 0:
                    next_front.append(j)
        current = sorted(next_front)

    return fronts


def crowding_distance(front: Sequence[ObjectiveVector]) -> List[float]:
    """
    Crowding distance of each member of one front.

    Boundary solutions of every objective get infinite distance; interior
    ones accumulate the range-normalized gap between their neighbours.
    Objectives that are constant across the front contribute nothing.
    """
    n = len(front)
    if n == 0:
        return []
    if n <= 2:
        return [float("inf")] * n

    distances = [0.0] * n
    for name in OBJECTIVE_NAMES:
        order = sorted(range(n), key=lambda i: front[i].get(name))
        lowest = front[order[0]].get(name)
        highest = front[order[-1]].get(name)

        obj_range = highest - lowest
        if obj_range == 0:
            continue

        distances[order[0]] = float("inf")
        distances[order[-1]] = float("inf")

        for pos in range(1, n - 1):
            i = order[pos]
            if distances[i] == float("inf"):
                continue
            gap = front[order[pos + 1]].get(name) - front[order[pos - 1]].get(name)
            distances[i] += gap / obj_range

    return distances


def rank_and_crowd(individuals: Sequence[Individual]) -> Tuple[List[int], List[float]]:
    """Dominance rank and within-front crowding distance for each individual."""
    objectives = [ind.objectives for ind in individuals]
    ranks = [0] * len(individuals)
    crowding = [0.0] * len(individuals)

    for rank, front in enumerate(non_dominated_sort(objectives)):
        distances = crowding_distance([objectives[i] for i in front])
        for i, d in zip(front, distances):
            ranks[i] = rank
            crowding[i] = d

    return ranks, crowding


class ParetoAnalyzer:
    """
    Analyzer for the final population's Pareto structure.
    """

    def rank(self, individuals: Sequence[Individual]) -> List[ParetoEntry]:
        """ParetoEntries for every distinct individual, ordered by rank then crowding."""
        unique = self._unique(individuals)
        ranks, crowding = rank_and_crowd(unique)

        entries = [
            ParetoEntry(
                parameters=ind.parameters,
                objectives=ind.objectives,
                dominance_rank=r,
                crowding_distance=d,
            )
            for ind, r, d in zip(unique, ranks, crowding)
        ]
        entries.sort(key=lambda e: (e.dominance_rank, -e.crowding_distance))
        return entries

    def extract_front(self, individuals: Sequence[Individual]) -> List[ParetoEntry]:
        """Rank-0 entries, most isolated first."""
        return [e for e in self.rank(individuals) if e.dominance_rank == 0]

    def fronts_by_rank(self, individuals: Sequence[Individual]) -> Dict[int, List[ParetoEntry]]:
        grouped: Dict[int, List[ParetoEntry]] = {}
        for entry in self.rank(individuals):
            grouped.setdefault(entry.dominance_rank, []).append(entry)
        return grouped

    def _unique(self, individuals: Sequence[Individual]) -> List[Individual]:
        """Drop repeated parameter vectors (elites are carried as copies)."""
        seen: Dict[ParameterVector, bool] = {}
        unique = []
        for ind in individuals:
            if ind.objectives is None:
                raise ValueError("Pareto ranking requires evaluated individuals")
            if ind.parameters in seen:
                continue
            seen[ind.parameters] = True
            unique.append(ind)
        return unique
