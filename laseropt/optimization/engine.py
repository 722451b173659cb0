"""
optimization/engine.py - Process optimization engine.

Single entry point for the calculator layer: validates a request, runs
the evolution loop and assembles the result bundle (optimum, Pareto
front, convergence history, alternatives, insights, warnings).
"""

from __future__ import annotations
from typing import Any, List, Mapping, Optional, Union
import asyncio
import logging
import time

from ..bootstrap.config import LaserOptConfig, get_config
from ..errors import EvaluationError
from .alternatives import AlternativeSynthesizer
from .enums import OptimizerStatus, SensitivityImpact
from .inputs import ProcessOptimizationInputs
from .materials import ParameterSpace, get_profile
from .objectives import FitnessFunction, ObjectiveModel
from .optimizer import CancellationToken, Clock, ProcessOptimizer, RunBudget, RunResult
from .pareto import ParetoAnalyzer
from .schema import (
    PARAMETER_LABELS,
    ObjectiveWeights,
    OptimalParameters,
    OptimizationInsights,
    OptimizationOutcome,
    OptimizationSummary,
    ProcessOptimizationResult,
)
from .sensitivity import SensitivityAnalyzer, SensitivityResult
from .validator import OptimizationValidator, validate_inputs

logger = logging.getLogger(__name__)

IMPLEMENTATION_GUIDANCE = (
    "Implement optimized parameters gradually",
    "Monitor quality metrics during transition",
    "Validate results with test cuts before production",
)

InputsLike = Union[ProcessOptimizationInputs, Mapping[str, Any]]


class ProcessOptimizationEngine:
    """
    Multi-objective optimizer for laser cutting process parameters.

    Usage:
        engine = ProcessOptimizationEngine()
        outcome = engine.calculate({"materialType": "steel", "thickness": 5, ...}, seed=42)
        if outcome.success:
            print(outcome.data.optimal_parameters.power)
    """

    def __init__(self, config: Optional[LaserOptConfig] = None):
        self.config = config or get_config()
        self.settings = self.config.engine
        self.settings.validate()

    def calculate(
        self,
        inputs: InputsLike,
        seed: Optional[int] = None,
        budget: Optional[RunBudget] = None,
        cancel_token: Optional[CancellationToken] = None,
        clock: Optional[Clock] = None,
    ) -> OptimizationOutcome:
        """
        Run one optimization.

        Args:
            inputs: Request record or camelCase mapping
            seed: Random seed; the run's seed is reported in the outcome
            budget: Optional time/generation budget
            cancel_token: Optional cooperative cancellation signal
            clock: Time source, injectable for reproducible histories

        Returns:
            OptimizationOutcome; success=False when an evaluation failed

        Raises:
            ValidationError: if the request is malformed or out of range
        """
        request = validate_inputs(inputs)
        clock = clock or time.perf_counter
        start = clock()

        space = ParameterSpace.for_material(request.material_type, request.laser_power)
        model = ObjectiveModel(
            profile=get_profile(request.material_type),
            thickness=request.thickness,
            space=space,
        )
        weights = ObjectiveWeights.from_goal(request.optimization_goal)
        constraints = None if request.constraints.is_empty() else request.constraints
        fitness = FitnessFunction(weights, constraints)

        validator = OptimizationValidator(request, model)
        warnings = validator.check_inputs() + validator.check_feasibility()

        optimizer = ProcessOptimizer(
            model,
            fitness,
            algorithm=request.algorithm_type,
            population_size=request.population_size,
            max_generations=request.generations,
            convergence_tolerance=request.convergence_tolerance,
            settings=self.settings,
            seed=seed,
            clock=clock,
        )
        run = optimizer.run(budget=budget, cancel_token=cancel_token)

        if run.status == OptimizerStatus.FAILED:
            return self._failure(run.error, run.seed)

        try:
            sensitivity = SensitivityAnalyzer(model, fitness, self.settings).analyze(run.best)
            baseline = self._baseline_fitness(request, model, fitness, run)
        except EvaluationError as e:
            logger.error(f"Post-processing failed: {e}")
            return self._failure(e, run.seed)

        warnings += validator.check_result(run.best, run.converged, fitness)
        if run.status == OptimizerStatus.CANCELLED:
            warnings.append(
                f"Optimization cancelled after {run.generations_run} of "
                f"{request.generations} generations; best solution so far is reported"
            )

        summary = OptimizationSummary(
            algorithm=request.algorithm_type.value,
            goal=request.optimization_goal.value,
            generations_run=run.generations_run,
            convergence_achieved=run.converged,
            execution_time=clock() - start,
            final_fitness=run.best.fitness,
            improvement_percent=self.improvement_percent(run.best.fitness, baseline),
            status=run.status,
            seed=run.seed,
        )

        result = ProcessOptimizationResult(
            optimization_summary=summary,
            optimal_parameters=OptimalParameters.from_individual(run.best),
            pareto_front=ParetoAnalyzer().extract_front(run.population.individuals),
            convergence_history=list(run.history),
            alternative_solutions=AlternativeSynthesizer(space, self.settings).synthesize(
                run.population.individuals
            ),
            optimization_insights=self._insights(sensitivity, run, request),
            warnings=[str(w) for w in warnings],
        )

        logger.info(
            f"Optimization complete: status={run.status.value}, "
            f"fitness={run.best.fitness:.4f}, warnings={len(result.warnings)}"
        )
        return OptimizationOutcome(
            success=True,
            status=run.status,
            data=result,
            seed=run.seed,
        )

    async def calculate_async(self, inputs: InputsLike, **kwargs) -> OptimizationOutcome:
        """Run calculate() on a worker thread."""
        return await asyncio.to_thread(self.calculate, inputs, **kwargs)

    @staticmethod
    def improvement_percent(final_fitness: float, baseline_fitness: float) -> float:
        """Relative fitness gain over the baseline, one decimal, never negative."""
        if baseline_fitness <= 0:
            return 0.0
        improvement = (final_fitness - baseline_fitness) / baseline_fitness * 100
        return max(0.0, round(improvement, 1))

    def _baseline_fitness(
        self,
        request: ProcessOptimizationInputs,
        model: ObjectiveModel,
        fitness: FitnessFunction,
        run: RunResult,
    ) -> float:
        """Fitness of the caller's current settings, else of generation zero's best."""
        if request.current_parameters is None:
            return run.initial_best.fitness
        space = model.space
        current = space.clamp(request.current_parameters.to_vector(space.midpoint()))
        return fitness(model.evaluate(current))

    def _insights(
        self,
        sensitivity: SensitivityResult,
        run: RunResult,
        request: ProcessOptimizationInputs,
    ) -> OptimizationInsights:
        ranked = sensitivity.ranked()
        recommendations: List[str] = []

        if ranked and ranked[0].sensitivity > 0:
            top = PARAMETER_LABELS[ranked[0].parameter]
            recommendations.append(f"Focus on {top} optimization for maximum impact")

        for entry in ranked:
            label = PARAMETER_LABELS[entry.parameter]
            if entry.impact in (SensitivityImpact.HIGH, SensitivityImpact.CRITICAL):
                recommendations.append(
                    f"{label} settings show {entry.impact.value} sensitivity - implement precise control"
                )
            elif entry.impact == SensitivityImpact.LOW:
                recommendations.append(
                    f"{label} has low impact - standard settings acceptable"
                )

        if not run.converged:
            recommendations.append(
                f"Search did not converge within {run.generations_run} generations - "
                f"raise generations above {request.generations} or relax "
                f"convergenceTolerance from {request.convergence_tolerance:g}"
            )

        return OptimizationInsights(
            critical_parameters=sensitivity.critical_parameters,
            parameter_sensitivity=ranked,
            recommendations=recommendations,
            implementation_guidance=list(IMPLEMENTATION_GUIDANCE),
        )

    def _failure(self, error: Optional[Exception], seed: int) -> OptimizationOutcome:
        details = error.to_dict() if isinstance(error, EvaluationError) else {}
        return OptimizationOutcome(
            success=False,
            status=OptimizerStatus.FAILED,
            error=f"Process optimization failed: {error}",
            error_details=details,
            seed=seed,
        )
