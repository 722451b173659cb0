"""
optimization/sensitivity.py - Sensitivity analysis.

Measures how strongly fitness reacts to each process parameter around
the optimum, using one-sided finite differences on both sides.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..bootstrap.config import EngineSettings
from .enums import SensitivityImpact
from .objectives import FitnessFunction, ObjectiveModel
from .schema import PARAMETER_NAMES, Individual, ParameterSensitivity, ParameterVector


@dataclass
class SensitivityResult:
    """Complete sensitivity analysis result."""
    base_fitness: float = 0.0
    perturbation: float = 0.2
    parameters: List[ParameterSensitivity] = field(default_factory=list)

    @property
    def critical_parameters(self) -> List[str]:
        """Parameters classified high or critical, most sensitive first."""
        critical = [
            p for p in self.parameters
            if p.impact in (SensitivityImpact.HIGH, SensitivityImpact.CRITICAL)
        ]
        critical.sort(key=lambda p: p.sensitivity, reverse=True)
        return [p.parameter for p in critical]

    def ranked(self) -> List[ParameterSensitivity]:
        return sorted(self.parameters, key=lambda p: p.sensitivity, reverse=True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "baseFitness": round(self.base_fitness, 6),
            "perturbation": self.perturbation,
            "parameters": [p.to_dict() for p in self.parameters],
        }


class SensitivityAnalyzer:
    """
    Analyzer for parameter sensitivity.

    For each parameter the best solution is moved by +/- `perturbation`
    of that parameter's bound range (clamped) and re-scored. Sensitivity
    is |delta fitness| / |delta parameter fraction|, the larger side wins.
    """

    def __init__(
        self,
        model: ObjectiveModel,
        fitness: FitnessFunction,
        settings: Optional[EngineSettings] = None,
    ):
        """
        Initialize analyzer.

        Args:
            model: Objective model used for re-evaluation
            fitness: Fitness function of the run
            settings: Perturbation size and classification thresholds
        """
        self.model = model
        self.fitness = fitness
        self.settings = settings or EngineSettings()

    def analyze(self, solution: Individual) -> SensitivityResult:
        """
        Perform sensitivity analysis around a solution.

        Raises:
            EvaluationError: if a perturbed vector cannot be evaluated
        """
        space = self.model.space
        perturbation = self.settings.sensitivity_perturbation
        base = solution.parameters
        base_fitness = self._score(base)

        result = SensitivityResult(base_fitness=base_fitness, perturbation=perturbation)

        for name in PARAMETER_NAMES:
            span = space.span(name)
            sensitivity = 0.0

            if span > 0:
                for direction in (1.0, -1.0):
                    moved = space.clamp_value(name, base.get(name) + direction * perturbation * span)
                    fraction = (moved - base.get(name)) / span
                    if fraction == 0:
                        continue
                    delta = self._score(base.with_value(name, moved)) - base_fitness
                    sensitivity = max(sensitivity, abs(delta) / abs(fraction))

            result.parameters.append(ParameterSensitivity(
                parameter=name,
                sensitivity=sensitivity,
                impact=self.classify(sensitivity),
            ))

        self._compute_importance(result)
        return result

    def classify(self, sensitivity: float) -> SensitivityImpact:
        s = self.settings
        if sensitivity >= s.sensitivity_critical:
            return SensitivityImpact.CRITICAL
        if sensitivity >= s.sensitivity_high:
            return SensitivityImpact.HIGH
        if sensitivity >= s.sensitivity_medium:
            return SensitivityImpact.MEDIUM
        return SensitivityImpact.LOW

    def _score(self, parameters: ParameterVector) -> float:
        return self.fitness(self.model.evaluate(parameters))

    def _compute_importance(self, result: SensitivityResult) -> None:
        """Normalize sensitivities against the largest one."""
        if not result.parameters:
            return

        max_sensitivity = max(p.sensitivity for p in result.parameters)
        if max_sensitivity <= 0:
            return

        result.parameters = [
            ParameterSensitivity(
                parameter=p.parameter,
                sensitivity=p.sensitivity,
                impact=p.impact,
                importance=p.sensitivity / max_sensitivity,
            )
            for p in result.parameters
        ]
