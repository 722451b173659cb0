"""
optimization/validator.py - Input validation and advisory checks.

Rejects malformed requests before any generation runs and collects the
soft warnings that accompany a result: advisory input checks, constraints
the material envelope cannot meet, and weaknesses of the final optimum.
"""

from __future__ import annotations
from typing import Any, List, Mapping, Optional, Union
import logging

import pydantic

from ..errors import ErrorCode, ErrorSeverity, InfeasibleConstraintWarning, ValidationError
from .inputs import ProcessOptimizationInputs
from .materials import get_profile
from .objectives import FitnessFunction, ObjectiveModel
from .schema import Individual, ParameterVector

logger = logging.getLogger(__name__)

# Advisory thresholds
MAX_COMPLEXITY = 50000
TIGHT_TIME_LIMIT = 5.0
HIGH_QUALITY_LIMIT = 95.0
SMALL_POPULATION = 30
LOW_FITNESS = 0.7
HIGH_COST = 10.0
LONG_TIME = 20.0


def _format_location(loc) -> str:
    return ".".join(str(part) for part in loc) or "input"


def validate_inputs(
    raw: Union[ProcessOptimizationInputs, Mapping[str, Any]],
) -> ProcessOptimizationInputs:
    """
    Parse and range-check a request.

    Raises:
        ValidationError: with one message per offending field
    """
    if isinstance(raw, ProcessOptimizationInputs):
        return raw

    try:
        return ProcessOptimizationInputs.model_validate(raw)
    except pydantic.ValidationError as e:
        field_errors = [
            f"{_format_location(err['loc'])}: {err['msg']}" for err in e.errors()
        ]
        logger.warning(f"Rejected optimization input: {'; '.join(field_errors)}")
        raise ValidationError(field_errors=field_errors, error_count=len(field_errors)) from e


def _advisory(constraint: str, message: str, **context) -> InfeasibleConstraintWarning:
    return InfeasibleConstraintWarning(
        constraint=constraint,
        message=message,
        code=ErrorCode.VAL_OUT_OF_RANGE,
        severity=ErrorSeverity.INFO,
        context=context,
    )


class OptimizationValidator:
    """
    Soft checks around one optimization request.

    None of these block a run; they only populate the warnings list.
    """

    def __init__(self, inputs: ProcessOptimizationInputs, model: ObjectiveModel):
        self.inputs = inputs
        self.model = model

    def check_inputs(self) -> List[InfeasibleConstraintWarning]:
        """Advisory checks on the request alone."""
        inputs = self.inputs
        constraints = inputs.constraints
        warnings = []

        complexity = inputs.population_size * inputs.generations
        if complexity > MAX_COMPLEXITY:
            warnings.append(_advisory(
                "populationSize",
                "High optimization complexity may require significant computation time",
                complexity=complexity,
            ))

        if constraints.max_time is not None and constraints.max_time < TIGHT_TIME_LIMIT:
            warnings.append(_advisory(
                "maxTime",
                "Very tight time constraint may limit optimization effectiveness",
            ))

        if constraints.min_quality is not None and constraints.min_quality > HIGH_QUALITY_LIMIT:
            warnings.append(_advisory(
                "minQuality",
                "Very high quality requirement may significantly increase cost and time",
            ))

        if inputs.population_size < SMALL_POPULATION:
            warnings.append(_advisory(
                "populationSize",
                "Small population size may limit solution diversity",
            ))

        return warnings

    def check_feasibility(self) -> List[InfeasibleConstraintWarning]:
        """
        Compare each constraint with the best value the parameter space allows.

        Every objective is monotone in each parameter, so the extreme is
        attained at a corner (or, for quality, at the clamped optimum).
        """
        inputs = self.inputs
        constraints = inputs.constraints
        space = self.model.space
        warnings = []

        profile = get_profile(inputs.material_type)
        power_min = profile.power_range[0]
        if inputs.laser_power < power_min:
            warnings.append(InfeasibleConstraintWarning(
                constraint="laserPower",
                message=(
                    f"Available laser power ({inputs.laser_power:g} W) is below the "
                    f"{inputs.material_type.value} minimum of {power_min:g} W; "
                    f"power is held at {power_min:g} W"
                ),
                requested=inputs.laser_power,
                achievable=power_min,
            ))

        if constraints.min_quality is not None:
            best_quality = self.model.max_quality()
            if best_quality < constraints.min_quality:
                warnings.append(InfeasibleConstraintWarning(
                    constraint="minQuality",
                    message=(
                        f"Minimum quality {constraints.min_quality:g} is unreachable: "
                        f"best achievable quality is {best_quality:.1f} with "
                        f"{inputs.laser_power:g} W for {inputs.thickness:g} mm "
                        f"{inputs.material_type.value}"
                    ),
                    requested=constraints.min_quality,
                    achievable=best_quality,
                ))

        # Fastest and most frugal corner: full power / fastest speed, or least power
        fastest = ParameterVector(
            power=space.power[1],
            speed=space.speed[1],
            gas_pressure=space.gas_pressure[0],
            focus_height=space.focus_height[0],
        )
        frugal = fastest.with_value("power", space.power[0])

        if constraints.max_time is not None:
            min_time = self.model.cut_time(fastest)
            if min_time > constraints.max_time:
                warnings.append(InfeasibleConstraintWarning(
                    constraint="maxTime",
                    message=(
                        f"Maximum time {constraints.max_time:g} min is unreachable: "
                        f"fastest achievable cut takes {min_time:.2f} min"
                    ),
                    requested=constraints.max_time,
                    achievable=min_time,
                ))

        if constraints.max_cost is not None:
            min_cost = self.model.cost(frugal)
            if min_cost > constraints.max_cost:
                warnings.append(InfeasibleConstraintWarning(
                    constraint="maxCost",
                    message=(
                        f"Maximum cost {constraints.max_cost:g} USD is unreachable: "
                        f"lowest achievable cost is {min_cost:.2f} USD"
                    ),
                    requested=constraints.max_cost,
                    achievable=min_cost,
                ))

        if constraints.max_energy is not None:
            min_energy = self.model.evaluate(frugal).energy
            if min_energy > constraints.max_energy:
                warnings.append(InfeasibleConstraintWarning(
                    constraint="maxEnergy",
                    message=(
                        f"Maximum energy {constraints.max_energy:g} kWh is unreachable: "
                        f"lowest achievable energy is {min_energy:.3f} kWh"
                    ),
                    requested=constraints.max_energy,
                    achievable=min_energy,
                ))

        for warning in warnings:
            logger.warning(f"Infeasible constraint {warning.constraint}: {warning.message}")
        return warnings

    def check_result(
        self,
        best: Individual,
        converged: bool,
        fitness: Optional[FitnessFunction] = None,
    ) -> List[InfeasibleConstraintWarning]:
        """Warnings about the optimum of a finished run."""
        objectives = best.objectives
        warnings = []

        if not converged:
            warnings.append(_advisory(
                "generations",
                "Optimization did not fully converge - consider increasing generations",
            ))

        if best.fitness < LOW_FITNESS:
            warnings.append(_advisory(
                "fitness",
                "Optimization fitness is relatively low - constraints may be too restrictive",
                fitness=best.fitness,
            ))

        if objectives.cost > HIGH_COST:
            warnings.append(_advisory(
                "cost",
                "Optimized solution has high cost - consider relaxing quality constraints",
                cost=objectives.cost,
            ))

        if objectives.time > LONG_TIME:
            warnings.append(_advisory(
                "time",
                "Optimized solution has long processing time - consider speed-focused optimization",
                time=objectives.time,
            ))

        if fitness is not None:
            labels = {
                "max_time": ("maxTime", "time", "min"),
                "max_cost": ("maxCost", "cost", "USD"),
                "min_quality": ("minQuality", "quality", "points"),
                "max_energy": ("maxEnergy", "energy", "kWh"),
            }
            for name in fitness.violated_constraints(objectives):
                label, objective, unit = labels[name]
                limit = getattr(self.inputs.constraints, name)
                achieved = objectives.get(objective)
                warnings.append(InfeasibleConstraintWarning(
                    constraint=label,
                    message=(
                        f"Optimal solution violates {label}: {objective} {achieved:.2f} {unit} "
                        f"against a limit of {limit:g} {unit}"
                    ),
                    code=ErrorCode.CON_VIOLATED,
                    requested=limit,
                    achievable=achieved,
                ))

        return warnings
