"""
optimization/ - Laser process parameter optimization.

Population-based search (genetic, particle swarm, simulated annealing,
NSGA-II) over power, speed, gas pressure and focus height, balancing
cost, time, quality and energy. Includes Pareto analysis, sensitivity
analysis and alternative-solution synthesis.
"""

from .enums import (
    MaterialType,
    OptimizationGoal,
    AlgorithmType,
    ObjectiveType,
    OptimizerStatus,
    SensitivityImpact,
)

from .schema import (
    ParameterVector,
    ObjectiveVector,
    ObjectiveWeights,
    Individual,
    Population,
    ConvergenceRecord,
    ParetoEntry,
    AlternativeSolution,
    ParameterSensitivity,
    OptimizationInsights,
    OptimizationSummary,
    OptimalParameters,
    ProcessOptimizationResult,
    OptimizationOutcome,
)

from .inputs import ProcessOptimizationInputs, ProcessConstraints, CurrentParameters
from .materials import MaterialProfile, MATERIAL_PROFILES, ParameterSpace, bounds, get_profile
from .objectives import ObjectiveModel, FitnessFunction
from .strategies import (
    AlgorithmStrategy,
    GeneticStrategy,
    NSGA2Strategy,
    ParticleSwarmStrategy,
    SimulatedAnnealingStrategy,
    create_strategy,
)
from .optimizer import ProcessOptimizer, ParallelEvaluator, CancellationToken, RunBudget, RunResult
from .pareto import ParetoAnalyzer, dominates, non_dominated_sort, crowding_distance
from .sensitivity import SensitivityAnalyzer, SensitivityResult
from .alternatives import AlternativeSynthesizer
from .validator import OptimizationValidator, validate_inputs
from .engine import ProcessOptimizationEngine

__all__ = [
    # Enums
    "MaterialType",
    "OptimizationGoal",
    "AlgorithmType",
    "ObjectiveType",
    "OptimizerStatus",
    "SensitivityImpact",
    # Schema
    "ParameterVector",
    "ObjectiveVector",
    "ObjectiveWeights",
    "Individual",
    "Population",
    "ConvergenceRecord",
    "ParetoEntry",
    "AlternativeSolution",
    "ParameterSensitivity",
    "OptimizationInsights",
    "OptimizationSummary",
    "OptimalParameters",
    "ProcessOptimizationResult",
    "OptimizationOutcome",
    # Inputs
    "ProcessOptimizationInputs",
    "ProcessConstraints",
    "CurrentParameters",
    # Model
    "MaterialProfile",
    "MATERIAL_PROFILES",
    "ParameterSpace",
    "bounds",
    "get_profile",
    "ObjectiveModel",
    "FitnessFunction",
    # Search
    "AlgorithmStrategy",
    "GeneticStrategy",
    "NSGA2Strategy",
    "ParticleSwarmStrategy",
    "SimulatedAnnealingStrategy",
    "create_strategy",
    "ProcessOptimizer",
    "ParallelEvaluator",
    "CancellationToken",
    "RunBudget",
    "RunResult",
    # Analysis
    "ParetoAnalyzer",
    "dominates",
    "non_dominated_sort",
    "crowding_distance",
    "SensitivityAnalyzer",
    "SensitivityResult",
    "AlternativeSynthesizer",
    # Validation
    "OptimizationValidator",
    "validate_inputs",
    # Engine
    "ProcessOptimizationEngine",
]
