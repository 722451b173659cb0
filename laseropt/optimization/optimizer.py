"""
optimization/optimizer.py - Evolution loop.

Drives one optimization run:

    Init -> Evaluate -> Vary -> EvaluateOffspring -> Merge -> CheckTermination
         -> {Loop | Converged | MaxGenerationsReached | Cancelled}

Evaluations inside a step may run on worker threads; Merge waits for all
of them. Randomness comes from a single random.Random seeded per run.
"""

from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence
import logging
import random
import threading
import time

from ..bootstrap.config import EngineSettings
from ..errors import EvaluationError, OptimizationError
from .enums import AlgorithmType, OptimizerStatus
from .materials import ParameterSpace
from .objectives import FitnessFunction, ObjectiveModel
from .population import diversity, initialize
from .schema import (
    ConvergenceRecord,
    Individual,
    ParameterVector,
    Population,
)
from .strategies import AlgorithmStrategy, create_strategy

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class CancellationToken:
    """Cooperative cancellation flag, observed between generations."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass
class RunBudget:
    """Wall-clock and generation limits that cancel a run when exceeded."""
    time_budget_seconds: Optional[float] = None
    generation_budget: Optional[int] = None

    def exhausted(self, elapsed: float, generations_run: int) -> bool:
        if self.time_budget_seconds is not None and elapsed >= self.time_budget_seconds:
            return True
        if self.generation_budget is not None and generations_run >= self.generation_budget:
            return True
        return False


@dataclass
class RunResult:
    """Raw outcome of the evolution loop, before post-processing."""
    status: OptimizerStatus
    seed: int
    best: Optional[Individual] = None
    initial_best: Optional[Individual] = None
    population: Optional[Population] = None
    history: List[ConvergenceRecord] = field(default_factory=list)
    generations_run: int = 0
    elapsed: float = 0.0
    error: Optional[OptimizationError] = None

    @property
    def converged(self) -> bool:
        return self.status == OptimizerStatus.CONVERGED

    @property
    def succeeded(self) -> bool:
        return self.status != OptimizerStatus.FAILED and self.best is not None


class ParallelEvaluator:
    """
    Evaluates individuals through the objective model.

    Uses a thread pool with an order-preserving map when enabled, so the
    returned list lines up with the input regardless of completion order.
    Any failure is re-raised as EvaluationError.
    """

    def __init__(
        self,
        model: ObjectiveModel,
        fitness: FitnessFunction,
        parallel: bool = True,
        max_workers: int = 4,
    ):
        self.model = model
        self.fitness = fitness
        self.parallel = parallel and max_workers > 1
        self.max_workers = max_workers
        self._executor: Optional[ThreadPoolExecutor] = None

    def __enter__(self) -> "ParallelEvaluator":
        if self.parallel:
            self._executor = ThreadPoolExecutor(
                max_workers=self.max_workers,
                thread_name_prefix="laseropt-eval",
            )
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def evaluate_one(self, individual: Individual) -> Individual:
        try:
            objectives = self.model.evaluate(individual.parameters)
        except EvaluationError:
            raise
        except Exception as e:
            raise EvaluationError(
                f"Evaluation failed for {individual.parameters.to_dict()}: {e}",
                original_error=e,
            ) from e
        return individual.evaluated(objectives, self.fitness(objectives))

    def evaluate(self, individuals: Sequence[Individual]) -> List[Individual]:
        if self._executor is None:
            return [self.evaluate_one(ind) for ind in individuals]
        return list(self._executor.map(self.evaluate_one, individuals))


class ProcessOptimizer:
    """
    Population-based optimizer for laser process parameters.

    The loop only knows the AlgorithmStrategy interface; the algorithm
    type picks the implementation.
    """

    def __init__(
        self,
        model: ObjectiveModel,
        fitness: FitnessFunction,
        algorithm: AlgorithmType = AlgorithmType.GENETIC,
        population_size: int = 50,
        max_generations: int = 100,
        convergence_tolerance: float = 0.01,
        settings: Optional[EngineSettings] = None,
        seed: Optional[int] = None,
        clock: Optional[Clock] = None,
    ):
        """
        Initialize optimizer.

        Args:
            model: Objective model for the material and thickness
            fitness: Scalar fitness over objective vectors
            algorithm: Search strategy
            population_size: Individuals per generation
            max_generations: Upper bound on evolved generations
            convergence_tolerance: Minimum best-fitness gain that resets stagnation
            settings: Engine constants
            seed: Random seed (drawn from the system source when omitted)
            clock: Monotonic time source in seconds
        """
        self.model = model
        self.fitness = fitness
        self.space: ParameterSpace = model.space
        self.algorithm = algorithm
        self.population_size = population_size
        self.max_generations = max_generations
        self.convergence_tolerance = convergence_tolerance
        self.settings = settings or EngineSettings()
        self.clock = clock or time.perf_counter

        if seed is None:
            seed = self.settings.default_seed
        if seed is None:
            seed = random.SystemRandom().getrandbits(32)
        self.seed = seed

    def run(
        self,
        budget: Optional[RunBudget] = None,
        cancel_token: Optional[CancellationToken] = None,
        seed_vectors: Optional[List[ParameterVector]] = None,
        callback: Optional[Callable[[ConvergenceRecord], None]] = None,
    ) -> RunResult:
        """
        Run the evolution loop to termination.

        Args:
            budget: Optional time/generation budget
            cancel_token: Optional external cancellation signal
            seed_vectors: Vectors placed into generation zero
            callback: Called with each ConvergenceRecord as it is appended

        Returns:
            RunResult; status FAILED with `error` set when an evaluation failed
        """
        rng = random.Random(self.seed)
        strategy = create_strategy(self.algorithm, self.space, self.settings)
        result = RunResult(status=OptimizerStatus.RUNNING, seed=self.seed)
        start = self.clock()

        logger.info(
            f"Starting {self.algorithm.value} run: population={self.population_size}, "
            f"generations={self.max_generations}, seed={self.seed}"
        )

        evaluator = ParallelEvaluator(
            self.model,
            self.fitness,
            parallel=self.settings.parallel_evaluation,
            max_workers=self.settings.max_workers,
        )

        try:
            with evaluator:
                self._evolve(strategy, evaluator, rng, result, start,
                             budget, cancel_token, seed_vectors, callback)
        except EvaluationError as e:
            logger.error(f"Run aborted after {result.generations_run} generations: {e}")
            result.status = OptimizerStatus.FAILED
            result.error = e
            result.best = None
            result.population = None

        result.elapsed = self.clock() - start
        logger.info(
            f"Run finished: status={result.status.value}, "
            f"generations={result.generations_run}, elapsed={result.elapsed:.3f}s"
        )
        return result

    def _evolve(
        self,
        strategy: AlgorithmStrategy,
        evaluator: ParallelEvaluator,
        rng: random.Random,
        result: RunResult,
        start: float,
        budget: Optional[RunBudget],
        cancel_token: Optional[CancellationToken],
        seed_vectors: Optional[List[ParameterVector]],
        callback: Optional[Callable[[ConvergenceRecord], None]],
    ) -> None:
        size = self.population_size

        # Init / Evaluate
        population = initialize(size, self.space, rng, seed_vectors)
        population = Population(0, evaluator.evaluate(population.individuals))
        population = strategy.initialize(population)

        best = population.best()
        result.initial_best = best
        result.best = best
        result.population = population
        self._record(result, population, best, start, callback)

        reference = best.fitness
        stagnant = 0

        while True:
            # Vary / EvaluateOffspring
            elites = strategy.elites(population)
            offspring = strategy.vary(population, size - len(elites), rng)
            offspring = evaluator.evaluate(offspring)
            offspring = strategy.settle(offspring, rng)

            # Merge
            population = Population(population.generation + 1, tuple(elites) + tuple(offspring))
            generation_best = population.best()
            if generation_best.fitness > best.fitness:
                best = generation_best

            result.best = best
            result.population = population
            result.generations_run = population.generation
            self._record(result, population, best, start, callback)

            # CheckTermination
            if best.fitness - reference >= self.convergence_tolerance:
                reference = best.fitness
                stagnant = 0
            else:
                stagnant += 1

            if stagnant >= self.settings.stagnation_window:
                result.status = OptimizerStatus.CONVERGED
                break
            if population.generation >= self.max_generations:
                result.status = OptimizerStatus.MAX_ITERATIONS
                break
            if self._cancelled(budget, cancel_token, start, population.generation):
                logger.info(f"Run cancelled at generation {population.generation}")
                result.status = OptimizerStatus.CANCELLED
                break

        strategy.finish()

    def _record(
        self,
        result: RunResult,
        population: Population,
        best: Individual,
        start: float,
        callback: Optional[Callable[[ConvergenceRecord], None]],
    ) -> None:
        record = ConvergenceRecord(
            generation=population.generation,
            best_fitness=best.fitness,
            average_fitness=population.average_fitness(),
            diversity=diversity(population, self.space),
            elapsed_seconds=self.clock() - start,
        )
        result.history.append(record)
        logger.debug(
            f"Generation {record.generation}: best={record.best_fitness:.4f}, "
            f"avg={record.average_fitness:.4f}, diversity={record.diversity:.4f}"
        )
        if callback:
            callback(record)

    def _cancelled(
        self,
        budget: Optional[RunBudget],
        cancel_token: Optional[CancellationToken],
        start: float,
        generations_run: int,
    ) -> bool:
        if cancel_token is not None and cancel_token.cancelled:
            return True
        if budget is not None and budget.exhausted(self.clock() - start, generations_run):
            return True
        return False
