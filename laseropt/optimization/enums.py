"""
optimization/enums.py - Optimization enumerations.
"""

from enum import Enum


class MaterialType(Enum):
    """Materials with a known parameter envelope."""
    STEEL = "steel"
    STAINLESS_STEEL = "stainless_steel"
    ALUMINUM = "aluminum"
    COPPER = "copper"
    TITANIUM = "titanium"
    BRASS = "brass"


class OptimizationGoal(Enum):
    """Primary objective requested by the user."""
    COST = "cost"
    TIME = "time"
    QUALITY = "quality"
    ENERGY = "energy"
    BALANCED = "balanced"


class AlgorithmType(Enum):
    """Search strategy selector."""
    GENETIC = "genetic"
    PARTICLE_SWARM = "particle_swarm"
    SIMULATED_ANNEALING = "simulated_annealing"
    MULTI_OBJECTIVE = "multi_objective"  # NSGA-II


class ObjectiveType(Enum):
    """Objective direction."""
    MINIMIZE = "minimize"
    MAXIMIZE = "maximize"


class OptimizerStatus(Enum):
    """Optimizer execution status."""
    PENDING = "pending"
    RUNNING = "running"
    CONVERGED = "converged"
    MAX_ITERATIONS = "max_iterations"
    CANCELLED = "cancelled"
    FAILED = "failed"


class SensitivityImpact(Enum):
    """Qualitative class of a parameter sensitivity."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"
