"""
optimization/objectives.py - Objective model and fitness.

The objective model maps a parameter vector to predicted cost, time,
quality and energy per metre of cut. It is pure: the same vector always
yields the same objectives, so evaluations may run on any worker.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import math

from ..errors import EvaluationError, InvalidParameterError
from .materials import MaterialProfile, ParameterSpace
from .schema import (
    PARAMETER_NAMES,
    ObjectiveVector,
    ObjectiveWeights,
    ParameterVector,
)

# Quality optimum
OPTIMAL_POWER_PER_MM = 200.0   # W per mm of thickness
OPTIMAL_SPEED = 3000.0         # mm/min
FOCUS_DEPTH_RATIO = 3.0        # optimal focus = -thickness / ratio

# Quality penalties per unit relative deviation
POWER_PENALTY = 20.0
SPEED_PENALTY = 15.0
FOCUS_PENALTY = 10.0

# Unit prices
ENERGY_PRICE = 0.12            # USD per kWh-equivalent
GAS_PRICE = 0.1                # USD per bar
MATERIAL_PRICE = 0.5           # USD per mm thickness


@dataclass(frozen=True)
class ObjectiveModel:
    """Objective model of one material/thickness combination."""
    profile: MaterialProfile
    thickness: float
    space: ParameterSpace

    def evaluate(self, parameters: ParameterVector) -> ObjectiveVector:
        """
        Evaluate all four objectives.

        Raises:
            InvalidParameterError: if the vector is outside the parameter space
            EvaluationError: if the vector is numerically degenerate
        """
        for name in PARAMETER_NAMES:
            lower, upper = self.space.interval(name)
            value = parameters.get(name)
            if not lower <= value <= upper:
                raise InvalidParameterError(name, value, lower, upper)

        if self.thickness <= 0:
            raise EvaluationError(f"Thickness must be positive, got {self.thickness}")
        if parameters.speed <= 0:
            raise EvaluationError(f"Cutting speed must be positive, got {parameters.speed}")
        if parameters.power <= 0:
            raise EvaluationError(f"Laser power must be positive, got {parameters.power}")

        time = self.cut_time(parameters)
        objectives = ObjectiveVector(
            cost=self.cost(parameters),
            time=time,
            quality=self.quality(parameters),
            energy=(parameters.power / 1000) * (time / 60) * self.profile.energy_weight,
        )

        for name, value in zip(("cost", "time", "quality", "energy"), objectives.as_tuple()):
            if not math.isfinite(value):
                raise EvaluationError(
                    f"Objective '{name}' is not finite for {parameters.to_dict()}",
                    objective=name,
                )
        return objectives

    def cost(self, parameters: ParameterVector) -> float:
        """Material, energy and assist-gas cost (USD per metre)."""
        material_cost = self.thickness * MATERIAL_PRICE * self.profile.cost_weight
        energy_cost = (parameters.power / 1000) * (60 / parameters.speed) * ENERGY_PRICE
        gas_cost = parameters.gas_pressure * GAS_PRICE
        return material_cost + energy_cost + gas_cost

    def cut_time(self, parameters: ParameterVector) -> float:
        """Minutes per metre; faster and more powerful cuts take less time."""
        base_time = 1000 / parameters.speed
        thickness_factor = math.sqrt(self.thickness / 5)
        power_factor = math.sqrt(2000 / parameters.power)
        return base_time * thickness_factor * power_factor

    def quality(self, parameters: ParameterVector) -> float:
        """Edge quality score in [0, 100], penalizing distance from the optimum."""
        quality = 60 + 40 * self.profile.quality_weight

        optimal_power = self.thickness * OPTIMAL_POWER_PER_MM
        quality -= abs(parameters.power - optimal_power) / optimal_power * POWER_PENALTY

        quality -= abs(parameters.speed - OPTIMAL_SPEED) / OPTIMAL_SPEED * SPEED_PENALTY

        optimal_focus = -self.thickness / FOCUS_DEPTH_RATIO
        quality -= abs(parameters.focus_height - optimal_focus) / abs(optimal_focus) * FOCUS_PENALTY

        return max(0.0, min(100.0, quality))

    def quality_optimum(self) -> ParameterVector:
        """
        Best-quality vector inside the space.

        Quality is a sum of independent per-parameter penalties, so clamping
        each optimum into its interval gives the global maximum.
        """
        return self.space.clamp(ParameterVector(
            power=self.thickness * OPTIMAL_POWER_PER_MM,
            speed=OPTIMAL_SPEED,
            gas_pressure=self.space.gas_pressure[0],
            focus_height=-self.thickness / FOCUS_DEPTH_RATIO,
        ))

    def max_quality(self) -> float:
        return self.quality(self.quality_optimum())


class FitnessFunction:
    """
    Weighted, normalized scalar fitness in [0, 1].

    Minimization targets map through 1 / (1 + x), quality through q / 100.
    Constraint violations shrink fitness by 1 / (1 + relative violation).
    """

    def __init__(self, weights: ObjectiveWeights, constraints: Optional[Any] = None):
        """
        Initialize fitness function.

        Args:
            weights: Normalized objective weights
            constraints: Object with optional max_time, max_cost,
                min_quality and max_energy attributes
        """
        self.weights = weights
        self.constraints = constraints

    def __call__(self, objectives: ObjectiveVector) -> float:
        return self.score(objectives)

    def base_score(self, objectives: ObjectiveVector) -> float:
        normalized = (
            1 / (1 + objectives.cost),
            1 / (1 + objectives.time),
            objectives.quality / 100,
            1 / (1 + objectives.energy),
        )
        weights = self.weights.as_tuple()
        total_weight = sum(weights)
        if total_weight <= 0:
            return 0.0
        return sum(w * n for w, n in zip(weights, normalized)) / total_weight

    def score(self, objectives: ObjectiveVector) -> float:
        score = self.base_score(objectives) / (1 + self.total_violation(objectives))
        return max(0.0, min(1.0, score))

    def violations(self, objectives: ObjectiveVector) -> Dict[str, float]:
        """Relative violation per active constraint (0 when satisfied)."""
        result: Dict[str, float] = {}
        c = self.constraints
        if c is None:
            return result

        if getattr(c, "max_time", None):
            result["max_time"] = max(0.0, objectives.time - c.max_time) / c.max_time
        if getattr(c, "max_cost", None):
            result["max_cost"] = max(0.0, objectives.cost - c.max_cost) / c.max_cost
        if getattr(c, "min_quality", None):
            result["min_quality"] = max(0.0, c.min_quality - objectives.quality) / c.min_quality
        if getattr(c, "max_energy", None):
            result["max_energy"] = max(0.0, objectives.energy - c.max_energy) / c.max_energy
        return result

    def total_violation(self, objectives: ObjectiveVector) -> float:
        return sum(self.violations(objectives).values())

    def violated_constraints(self, objectives: ObjectiveVector) -> List[str]:
        return [name for name, v in self.violations(objectives).items() if v > 0]
