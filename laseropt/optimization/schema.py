"""
optimization/schema.py - Optimization data structures.

All records are frozen: a generation never edits the Individuals of the
previous one, it builds new ones.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple
import math

from .enums import ObjectiveType, OptimizationGoal, OptimizerStatus, SensitivityImpact


PARAMETER_NAMES: Tuple[str, ...] = ("power", "speed", "gas_pressure", "focus_height")

# Names used by the calculator layer
PARAMETER_LABELS: Dict[str, str] = {
    "power": "power",
    "speed": "speed",
    "gas_pressure": "gasPressure",
    "focus_height": "focusHeight",
}

OBJECTIVE_NAMES: Tuple[str, ...] = ("cost", "time", "quality", "energy")

OBJECTIVE_DIRECTIONS: Dict[str, ObjectiveType] = {
    "cost": ObjectiveType.MINIMIZE,
    "time": ObjectiveType.MINIMIZE,
    "quality": ObjectiveType.MAXIMIZE,
    "energy": ObjectiveType.MINIMIZE,
}

# Raw (cost, time, quality, energy) weights per goal, normalized on use
GOAL_WEIGHTS: Dict[OptimizationGoal, Tuple[float, float, float, float]] = {
    OptimizationGoal.COST: (1.0, 0.2, 0.3, 0.1),
    OptimizationGoal.TIME: (0.2, 1.0, 0.3, 0.1),
    OptimizationGoal.QUALITY: (0.3, 0.2, 1.0, 0.1),
    OptimizationGoal.ENERGY: (0.2, 0.1, 0.3, 1.0),
    OptimizationGoal.BALANCED: (0.25, 0.25, 0.25, 0.25),
}


def _round(value: float, precision: Optional[int]) -> float:
    return value if precision is None else round(value, precision)


@dataclass(frozen=True)
class ParameterVector:
    """Laser process settings: W, mm/min, bar, mm."""
    power: float
    speed: float
    gas_pressure: float
    focus_height: float

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> "ParameterVector":
        if len(values) != len(PARAMETER_NAMES):
            raise ValueError(f"Expected {len(PARAMETER_NAMES)} values, got {len(values)}")
        return cls(*(float(v) for v in values))

    def get(self, name: str) -> float:
        return getattr(self, name)

    def with_value(self, name: str, value: float) -> "ParameterVector":
        return replace(self, **{name: value})

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.power, self.speed, self.gas_pressure, self.focus_height)

    def to_dict(self, precision: Optional[int] = None) -> Dict[str, float]:
        return {
            PARAMETER_LABELS[name]: _round(getattr(self, name), precision)
            for name in PARAMETER_NAMES
        }


@dataclass(frozen=True)
class ObjectiveVector:
    """Predicted outcome: USD, minutes, 0-100 score, kWh."""
    cost: float
    time: float
    quality: float
    energy: float

    def get(self, name: str) -> float:
        return getattr(self, name)

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.cost, self.time, self.quality, self.energy)

    def to_dict(self, precision: Optional[int] = None) -> Dict[str, float]:
        return {name: _round(getattr(self, name), precision) for name in OBJECTIVE_NAMES}


@dataclass(frozen=True)
class ObjectiveWeights:
    """Normalized per-objective weights (sum to 1)."""
    cost: float
    time: float
    quality: float
    energy: float

    @classmethod
    def from_goal(cls, goal: OptimizationGoal) -> "ObjectiveWeights":
        raw = GOAL_WEIGHTS.get(goal, GOAL_WEIGHTS[OptimizationGoal.BALANCED])
        total = sum(raw)
        return cls(*(w / total for w in raw))

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.cost, self.time, self.quality, self.energy)

    def dominant_objective(self) -> str:
        return max(OBJECTIVE_NAMES, key=lambda name: getattr(self, name))

    def to_dict(self) -> Dict[str, float]:
        return {name: round(getattr(self, name), 6) for name in OBJECTIVE_NAMES}


@dataclass(frozen=True)
class Individual:
    """
    One candidate solution.

    Objectives stay None until the individual is evaluated. Particle swarm
    runs also carry a velocity and the personal-best position.
    """
    parameters: ParameterVector
    objectives: Optional[ObjectiveVector] = None
    fitness: float = 0.0

    velocity: Optional[ParameterVector] = None
    personal_best: Optional[ParameterVector] = None
    personal_best_fitness: float = 0.0

    @property
    def is_evaluated(self) -> bool:
        return self.objectives is not None

    def evaluated(self, objectives: ObjectiveVector, fitness: float) -> "Individual":
        """Return a new evaluated copy of this individual."""
        return replace(self, objectives=objectives, fitness=fitness)


@dataclass(frozen=True)
class Population:
    """Immutable snapshot of one generation."""
    generation: int
    individuals: Tuple[Individual, ...]

    def __post_init__(self):
        if not isinstance(self.individuals, tuple):
            object.__setattr__(self, "individuals", tuple(self.individuals))

    def __len__(self) -> int:
        return len(self.individuals)

    def __iter__(self) -> Iterator[Individual]:
        return iter(self.individuals)

    def __getitem__(self, index: int) -> Individual:
        return self.individuals[index]

    @property
    def size(self) -> int:
        return len(self.individuals)

    def best(self) -> Individual:
        """Highest-fitness individual; the earliest one wins ties."""
        best = self.individuals[0]
        for ind in self.individuals[1:]:
            if ind.fitness > best.fitness:
                best = ind
        return best

    def average_fitness(self) -> float:
        if not self.individuals:
            return 0.0
        return sum(ind.fitness for ind in self.individuals) / len(self.individuals)

    def ranked(self) -> List[Individual]:
        """Individuals by descending fitness (stable)."""
        return sorted(self.individuals, key=lambda ind: ind.fitness, reverse=True)


@dataclass(frozen=True)
class ConvergenceRecord:
    """Per-generation search statistics."""
    generation: int
    best_fitness: float
    average_fitness: float
    diversity: float
    elapsed_seconds: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generation": self.generation,
            "bestFitness": round(self.best_fitness, 6),
            "averageFitness": round(self.average_fitness, 6),
            "diversity": round(self.diversity, 6),
            "elapsedSeconds": round(self.elapsed_seconds, 4),
        }


@dataclass(frozen=True)
class ParetoEntry:
    """Ranked member of the final population."""
    parameters: ParameterVector
    objectives: ObjectiveVector
    dominance_rank: int
    crowding_distance: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "parameters": self.parameters.to_dict(precision=3),
            "objectives": self.objectives.to_dict(precision=4),
            "dominanceRank": self.dominance_rank,
            # JSON has no infinity; boundary entries serialize as None
            "crowdingDistance": self.crowding_distance if math.isfinite(self.crowding_distance) else None,
        }


@dataclass(frozen=True)
class AlternativeSolution:
    """Human-facing alternative derived from the final population."""
    name: str
    description: str
    parameters: ParameterVector
    predicted_objectives: ObjectiveVector
    tradeoffs: Tuple[str, ...]
    suitability_score: float
    favored_objective: str = "balanced"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters.to_dict(precision=2),
            "predictedObjectives": self.predicted_objectives.to_dict(precision=2),
            "tradeoffs": list(self.tradeoffs),
            "suitabilityScore": self.suitability_score,
        }


@dataclass(frozen=True)
class ParameterSensitivity:
    """Fitness response of one parameter around the optimum."""
    parameter: str
    sensitivity: float
    impact: SensitivityImpact
    importance: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "parameter": PARAMETER_LABELS.get(self.parameter, self.parameter),
            "sensitivity": round(self.sensitivity, 6),
            "impact": self.impact.value,
            "importance": round(self.importance, 4),
        }


@dataclass
class OptimizationInsights:
    """Sensitivity ranking and advice."""
    critical_parameters: List[str] = field(default_factory=list)
    parameter_sensitivity: List[ParameterSensitivity] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    implementation_guidance: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "criticalParameters": [PARAMETER_LABELS.get(p, p) for p in self.critical_parameters],
            "parameterSensitivity": [s.to_dict() for s in self.parameter_sensitivity],
            "recommendations": list(self.recommendations),
            "implementationGuidance": list(self.implementation_guidance),
        }


@dataclass
class OptimizationSummary:
    """Run-level summary."""
    algorithm: str
    goal: str
    generations_run: int
    convergence_achieved: bool
    execution_time: float
    final_fitness: float
    improvement_percent: float
    status: OptimizerStatus = OptimizerStatus.MAX_ITERATIONS
    seed: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "algorithm": self.algorithm,
            "goal": self.goal,
            "generationsRun": self.generations_run,
            "convergenceAchieved": self.convergence_achieved,
            "executionTime": round(self.execution_time, 4),
            "finalFitness": round(self.final_fitness, 6),
            "improvementPercent": self.improvement_percent,
            "status": self.status.value,
            "seed": self.seed,
        }


@dataclass
class OptimalParameters:
    """Best solution formatted for the calculator layer."""
    power: float
    speed: float
    gas_pressure: float
    focus_height: float
    fitness_score: float
    objectives: ObjectiveVector
    frequency: float = 0.0  # continuous wave
    passes: int = 1

    @classmethod
    def from_individual(cls, individual: Individual) -> "OptimalParameters":
        params = individual.parameters
        objectives = individual.objectives
        return cls(
            power=round(params.power),
            speed=round(params.speed),
            gas_pressure=round(params.gas_pressure, 1),
            focus_height=round(params.focus_height, 1),
            fitness_score=round(individual.fitness, 3),
            objectives=ObjectiveVector(
                cost=round(objectives.cost, 2),
                time=round(objectives.time, 2),
                quality=round(objectives.quality, 2),
                energy=round(objectives.energy, 2),
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "power": self.power,
            "speed": self.speed,
            "gasPressure": self.gas_pressure,
            "focusHeight": self.focus_height,
            "frequency": self.frequency,
            "passes": self.passes,
            "fitnessScore": self.fitness_score,
            "objectives": self.objectives.to_dict(),
        }


@dataclass
class ProcessOptimizationResult:
    """Complete output bundle returned to the calculator layer."""
    optimization_summary: OptimizationSummary
    optimal_parameters: OptimalParameters
    pareto_front: List[ParetoEntry] = field(default_factory=list)
    convergence_history: List[ConvergenceRecord] = field(default_factory=list)
    alternative_solutions: List[AlternativeSolution] = field(default_factory=list)
    optimization_insights: OptimizationInsights = field(default_factory=OptimizationInsights)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "optimizationSummary": self.optimization_summary.to_dict(),
            "optimalParameters": self.optimal_parameters.to_dict(),
            "paretoFront": [p.to_dict() for p in self.pareto_front],
            "convergenceHistory": [r.to_dict() for r in self.convergence_history],
            "alternativeSolutions": [a.to_dict() for a in self.alternative_solutions],
            "optimizationInsights": self.optimization_insights.to_dict(),
            "warnings": list(self.warnings),
        }


@dataclass
class OptimizationOutcome:
    """Success or failure envelope around a run."""
    success: bool
    status: OptimizerStatus
    data: Optional[ProcessOptimizationResult] = None
    error: Optional[str] = None
    error_details: Dict[str, Any] = field(default_factory=dict)
    seed: Optional[int] = None

    @property
    def is_cancelled(self) -> bool:
        return self.status == OptimizerStatus.CANCELLED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "status": self.status.value,
            "data": self.data.to_dict() if self.data else None,
            "error": self.error,
            "errorDetails": self.error_details,
            "seed": self.seed,
        }

