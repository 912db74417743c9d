"""Hyper-parameter bundles of the four metaheuristics.

Defaults reproduce the constants of the reference runs. Each bundle
validates itself on construction so a bad config section fails before any
search starts.
"""
from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional

EXHAUSTION_MODES = ("operations", "single_visit")
CROSSOVER_MODES = ("order", "prefix")
MOVE_IDENTITIES = ("swap", "leading_pair")
NEIGHBOR_CHOICES = ("improving", "best_sampled")


def _check_positive(name: str, value: float) -> None:
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")


def _check_rate(name: str, value: float) -> None:
    if not (0.0 <= value <= 1.0):
        raise ValueError(f"{name} must be within [0, 1], got {value}")


def _check_time_limit(value: Optional[int]) -> None:
    if value is not None and value <= 0:
        raise ValueError(f"time_limit_ms must be positive or None, got {value}")


@dataclass(slots=True)
class AntColonyParams:
    """Ant colony: colony size, pheromone exponents and update constants.

    ``exhaustion`` decides when a job stops being selectable during one
    ant's construction: ``"operations"`` once all its operations were
    dispatched, ``"single_visit"`` after its first selection.
    """

    num_ants: int = 30
    iterations: int = 1000
    alpha: float = 1.0
    beta: float = 2.0
    evaporation: float = 0.5
    q: float = 100.0
    exhaustion: str = "operations"
    workers: int = 1
    time_limit_ms: Optional[int] = None

    def __post_init__(self) -> None:
        _check_positive("num_ants", self.num_ants)
        _check_positive("iterations", self.iterations)
        _check_rate("evaporation", self.evaporation)
        _check_positive("q", self.q)
        _check_positive("workers", self.workers)
        _check_time_limit(self.time_limit_ms)
        if self.exhaustion not in EXHAUSTION_MODES:
            raise ValueError(f"exhaustion must be one of {EXHAUSTION_MODES}, got {self.exhaustion!r}")


@dataclass(slots=True)
class GeneticParams:
    population_size: int = 30
    generations: int = 1000
    crossover_rate: float = 0.8
    mutation_rate: float = 0.1
    tournament_size: int = 3
    crossover: str = "order"
    workers: int = 1
    time_limit_ms: Optional[int] = None

    def __post_init__(self) -> None:
        _check_positive("population_size", self.population_size)
        _check_positive("generations", self.generations)
        _check_rate("crossover_rate", self.crossover_rate)
        _check_rate("mutation_rate", self.mutation_rate)
        _check_positive("tournament_size", self.tournament_size)
        _check_positive("workers", self.workers)
        _check_time_limit(self.time_limit_ms)
        if self.crossover not in CROSSOVER_MODES:
            raise ValueError(f"crossover must be one of {CROSSOVER_MODES}, got {self.crossover!r}")


@dataclass(slots=True)
class AnnealingParams:
    iterations: int = 1000
    initial_temperature: float = 10000.0
    cooling_rate: float = 0.995
    time_limit_ms: Optional[int] = None

    def __post_init__(self) -> None:
        _check_positive("iterations", self.iterations)
        _check_positive("initial_temperature", self.initial_temperature)
        if not (0.0 < self.cooling_rate <= 1.0):
            raise ValueError(f"cooling_rate must be within (0, 1], got {self.cooling_rate}")
        _check_time_limit(self.time_limit_ms)


@dataclass(slots=True)
class TabuParams:
    """Tabu search settings.

    ``neighbors`` is the number of random swaps sampled per iteration
    (``None`` -> number of jobs). ``move_identity`` selects what is stored
    in the tabu list: the job pair actually swapped (``"swap"``) or the job
    pair at the first two schedule positions (``"leading_pair"``).
    ``neighbor_choice`` decides whether a worse sample may replace the
    current solution (``"best_sampled"``) or only a strictly better one
    (``"improving"``).
    """

    iterations: int = 1000
    tenure: int = 10
    neighbors: Optional[int] = None
    move_identity: str = "swap"
    neighbor_choice: str = "improving"
    time_limit_ms: Optional[int] = None

    def __post_init__(self) -> None:
        _check_positive("iterations", self.iterations)
        _check_positive("tenure", self.tenure)
        if self.neighbors is not None:
            _check_positive("neighbors", self.neighbors)
        _check_time_limit(self.time_limit_ms)
        if self.move_identity not in MOVE_IDENTITIES:
            raise ValueError(
                f"move_identity must be one of {MOVE_IDENTITIES}, got {self.move_identity!r}"
            )
        if self.neighbor_choice not in NEIGHBOR_CHOICES:
            raise ValueError(
                f"neighbor_choice must be one of {NEIGHBOR_CHOICES}, got {self.neighbor_choice!r}"
            )


PARAMS_BY_ALGORITHM: dict[str, type] = {
    "ant_colony": AntColonyParams,
    "genetic": GeneticParams,
    "annealing": AnnealingParams,
    "tabu": TabuParams,
}


def params_from_mapping(name: str, mapping: Optional[Mapping[str, Any]] = None) -> Any:
    """Build the parameter bundle of algorithm ``name`` from a config section.

    Raises:
        ValueError: Unknown algorithm or unknown key in ``mapping``.
    """
    try:
        cls = PARAMS_BY_ALGORITHM[name]
    except KeyError:
        raise ValueError(f"Unknown algorithm: {name}") from None
    mapping = dict(mapping or {})
    known = {f.name for f in fields(cls)}
    unknown = set(mapping) - known
    if unknown:
        raise ValueError(f"Unknown {name} parameter(s): {', '.join(sorted(unknown))}")
    return cls(**mapping)
