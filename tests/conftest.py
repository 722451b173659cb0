"""
LaserOpt Test Configuration and Fixtures
"""

import random

import pytest

from laseropt.bootstrap import EngineSettings, LaserOptConfig
from laseropt.optimization import (
    FitnessFunction,
    MaterialType,
    ObjectiveModel,
    ObjectiveWeights,
    OptimizationGoal,
    ParameterSpace,
    ProcessOptimizationEngine,
    get_profile,
)


class StepClock:
    """Deterministic clock advancing a fixed step on every read."""

    def __init__(self, step: float = 0.001):
        self.step = step
        self.now = 0.0

    def __call__(self) -> float:
        self.now += self.step
        return self.now


@pytest.fixture
def rng():
    """Seeded random source."""
    return random.Random(1234)


@pytest.fixture
def steel_space():
    """Steel parameter space with a 3 kW laser."""
    return ParameterSpace.for_material(MaterialType.STEEL, 3000)


@pytest.fixture
def steel_model(steel_space):
    """Objective model for 5 mm steel."""
    return ObjectiveModel(
        profile=get_profile(MaterialType.STEEL),
        thickness=5.0,
        space=steel_space,
    )


@pytest.fixture
def balanced_fitness():
    """Unconstrained balanced fitness."""
    return FitnessFunction(ObjectiveWeights.from_goal(OptimizationGoal.BALANCED))


@pytest.fixture
def sequential_settings():
    """Engine settings with evaluation on the calling thread."""
    return EngineSettings(parallel_evaluation=False)


@pytest.fixture
def engine():
    """Engine with default settings, independent of environment and files."""
    return ProcessOptimizationEngine(LaserOptConfig())


@pytest.fixture
def step_clock():
    """Factory for deterministic clocks."""
    return StepClock


@pytest.fixture
def scenario_a_inputs():
    """Balanced genetic run on 5 mm steel with a 3 kW laser."""
    return {
        "materialType": "steel",
        "thickness": 5,
        "laserPower": 3000,
        "optimizationGoal": "balanced",
        "constraints": {},
        "algorithmType": "genetic",
        "populationSize": 50,
        "generations": 100,
        "convergenceTolerance": 0.01,
    }
