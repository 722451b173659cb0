"""
optimization/inputs.py - Input records.

Pydantic models of the request handed over by the calculator layer.
Keys are accepted in camelCase (as the calculator sends them) or in
snake_case.
"""

from __future__ import annotations
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .enums import AlgorithmType, MaterialType, OptimizationGoal
from .schema import ParameterVector


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class ProcessConstraints(_CamelModel):
    """Optional limits on the optimum."""
    max_time: Optional[float] = Field(None, ge=1, le=1440, description="Minutes per metre")
    max_cost: Optional[float] = Field(None, ge=0.1, le=1000, description="USD per metre")
    min_quality: Optional[float] = Field(None, ge=60, le=100, description="Quality score")
    max_energy: Optional[float] = Field(None, ge=0.1, le=100, description="kWh per metre")

    def is_empty(self) -> bool:
        return all(
            v is None for v in (self.max_time, self.max_cost, self.min_quality, self.max_energy)
        )


class CurrentParameters(_CamelModel):
    """Settings the shop runs today; used as the improvement baseline."""
    power: Optional[float] = Field(None, ge=100, le=20000, description="W")
    speed: Optional[float] = Field(None, ge=100, le=15000, description="mm/min")
    gas_pressure: Optional[float] = Field(None, ge=0.1, le=30, description="bar")
    focus_height: Optional[float] = Field(None, ge=-10, le=10, description="mm")

    def to_vector(self, fallback: ParameterVector) -> ParameterVector:
        """Fill missing fields from `fallback`."""
        return ParameterVector(
            power=self.power if self.power is not None else fallback.power,
            speed=self.speed if self.speed is not None else fallback.speed,
            gas_pressure=self.gas_pressure if self.gas_pressure is not None else fallback.gas_pressure,
            focus_height=self.focus_height if self.focus_height is not None else fallback.focus_height,
        )


class ProcessOptimizationInputs(_CamelModel):
    """Complete optimization request."""
    material_type: MaterialType
    thickness: float = Field(..., ge=0.1, le=50, description="mm")
    laser_power: float = Field(..., ge=100, le=20000, description="Available laser power, W")
    optimization_goal: OptimizationGoal = OptimizationGoal.BALANCED
    constraints: ProcessConstraints = Field(default_factory=ProcessConstraints)
    algorithm_type: AlgorithmType = AlgorithmType.GENETIC
    population_size: int = Field(50, ge=10, le=200)
    generations: int = Field(100, ge=10, le=500)
    convergence_tolerance: float = Field(0.01, ge=0.001, le=0.1)
    current_parameters: Optional[CurrentParameters] = None
