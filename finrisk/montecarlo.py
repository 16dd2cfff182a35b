"""Monte Carlo aggregator for FinRisk

Runs many independent household trajectories per strategy and reduces
them to per-strategy probability estimates and outcome distributions.

Reduction
---------
- ending_net_worths : every run's terminal net worth, sorted ascending
- sampled_trajectories : runs 0, k, 2k, … with k = max(1, runs // 200)
- ruin / goal / debt-free probabilities : counts / runs
- median_debt_free_month : element floor(n/2) of the sorted debt-free months

Design goals
------------
- Deterministic given a seed: each strategy draws from its own child
  stream of ``SeedSequence(seed)``
- Strategies never share sampler state
- Cooperative cancellation checked once per completed trajectory

Typical usage
-------------
>>> from finrisk.config import SAMPLE_PARAMETERS
>>> results = run_monte_carlo(SAMPLE_PARAMETERS, runs=2000, seed=42)
>>> results["aggressive"].ruin_probability
>>> results.summary()
"""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import (
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Union,
)

import numpy as np
import pandas as pd
from pydantic import ValidationError

from .config import MonteCarloConfig, SimulationParameters, coerce_parameters
from .constants import DEFAULT_RUNS, MAX_SAMPLED_TRAJECTORIES
from .exceptions import InvalidParameterError, SimulationCancelledError
from .sampler import NormalSampler, spawn_samplers
from .simulation import Trajectory, simulate_once
from .strategy import ALL_STRATEGIES, Strategy

logger = logging.getLogger(__name__)

__all__ = [
    "StrategyResult",
    "SimulationResults",
    "MonteCarloEngine",
    "run_monte_carlo",
    "sample_stride",
]

ProgressCallback = Callable[[Strategy, int, int], None]
SamplerFactory = Callable[[Strategy], NormalSampler]


def sample_stride(runs: int) -> int:
    """Stride k between retained trajectories: max(1, runs // 200)."""
    return max(1, runs // MAX_SAMPLED_TRAJECTORIES)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class StrategyResult:
    """
    Aggregated outcome of all runs for one strategy.

    Attributes
    ----------
    strategy : Strategy
    runs : int
        Number of simulated trajectories.
    ending_net_worths : np.ndarray, shape (runs,)
        Terminal net worths sorted ascending (read-only).
    sampled_trajectories : tuple of Trajectory
        Every k-th trajectory (indices 0, k, 2k, …).
    ruin_probability : float
    goal_probability : float
    debt_free_probability : float
    median_debt_free_month : int or None
        None when no run ever retired its debt.
    """

    strategy: Strategy
    runs: int
    ending_net_worths: np.ndarray
    sampled_trajectories: Tuple[Trajectory, ...]
    ruin_probability: float
    goal_probability: float
    debt_free_probability: float
    median_debt_free_month: Optional[int]

    @property
    def median_ending_net_worth(self) -> float:
        """Upper median of the sorted terminal net worths."""
        if self.ending_net_worths.size == 0:
            return 0.0
        return float(self.ending_net_worths[self.ending_net_worths.size // 2])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StrategyResult):
            return NotImplemented
        return (
            self.to_dict() == other.to_dict()
            and np.array_equal(self.ending_net_worths, other.ending_net_worths)
            and self.sampled_trajectories == other.sampled_trajectories
        )

    def to_dict(self) -> Dict[str, object]:
        """Scalar summary (no arrays) for tables and reports."""
        return {
            "strategy": self.strategy.value,
            "runs": self.runs,
            "median_ending_net_worth": self.median_ending_net_worth,
            "ruin_probability": self.ruin_probability,
            "goal_probability": self.goal_probability,
            "debt_free_probability": self.debt_free_probability,
            "median_debt_free_month": self.median_debt_free_month,
        }


class SimulationResults(Mapping[Strategy, StrategyResult]):
    """
    Read-only mapping ``Strategy -> StrategyResult``.

    Keys may also be given as strategy values (``results["investing"]``).
    """

    def __init__(self, results: Mapping[Strategy, StrategyResult], params: SimulationParameters):
        self._results: Dict[Strategy, StrategyResult] = dict(results)
        self.params = params

    def __getitem__(self, key: Union[Strategy, str]) -> StrategyResult:
        return self._results[Strategy.parse(key)]

    def __iter__(self) -> Iterator[Strategy]:
        return iter(self._results)

    def __len__(self) -> int:
        return len(self._results)

    def __contains__(self, key: object) -> bool:
        try:
            return Strategy.parse(key) in self._results
        except InvalidParameterError:
            return False

    def summary(self) -> pd.DataFrame:
        """One row per strategy with the scalar aggregates."""
        rows = [res.to_dict() for res in self._results.values()]
        if not rows:
            return pd.DataFrame(columns=[
                "runs", "median_ending_net_worth", "ruin_probability",
                "goal_probability", "debt_free_probability", "median_debt_free_month",
            ])
        return pd.DataFrame(rows).set_index("strategy")

    def __repr__(self) -> str:
        keys = ", ".join(s.value for s in self._results)
        return f"SimulationResults({keys})"


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class MonteCarloEngine:
    """
    Runs ``config.runs`` trajectories per strategy and aggregates them.

    Parameters
    ----------
    params : SimulationParameters
        Household record shared (read-only) by every run.
    config : MonteCarloConfig, optional
        Run count, root seed and progress interval.
    sampler_factory : callable, optional
        ``Strategy -> NormalSampler``. Overrides the seeded Box-Muller
        streams, e.g. to inject a ConstantSampler in tests.

    Examples
    --------
    >>> engine = MonteCarloEngine(params, MonteCarloConfig(runs=1000, seed=7))
    >>> results = engine.run()
    """

    def __init__(
        self,
        params: Union[SimulationParameters, Mapping[str, object]],
        config: Optional[MonteCarloConfig] = None,
        *,
        sampler_factory: Optional[SamplerFactory] = None,
    ):
        self.params = coerce_parameters(params)
        self.config = config or MonteCarloConfig()
        self.sampler_factory = sampler_factory

    def _samplers(self, strategies: Sequence[Strategy]) -> Dict[Strategy, NormalSampler]:
        if self.sampler_factory is not None:
            return {s: self.sampler_factory(s) for s in strategies}
        # One child stream per strategy in canonical order, so a strategy's
        # draws do not depend on which other strategies are requested.
        streams = spawn_samplers(self.config.seed, len(ALL_STRATEGIES))
        by_strategy = dict(zip(ALL_STRATEGIES, streams))
        return {s: by_strategy[s] for s in strategies}

    def run(
        self,
        strategies: Optional[Iterable[Union[Strategy, str]]] = None,
        *,
        cancel_event: Optional[threading.Event] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> SimulationResults:
        """
        Simulate every requested strategy.

        Parameters
        ----------
        strategies : iterable, optional
            Subset of strategies; defaults to all three.
        cancel_event : threading.Event, optional
            When set, the run stops after the current trajectory and
            SimulationCancelledError is raised.
        progress_callback : callable, optional
            Called as ``(strategy, completed, runs)`` every
            ``config.progress_interval`` trajectories and at completion.
        """
        if strategies is None:
            selected: List[Strategy] = list(ALL_STRATEGIES)
        else:
            selected = list(dict.fromkeys(Strategy.parse(s) for s in strategies))
        samplers = self._samplers(selected)

        results: Dict[Strategy, StrategyResult] = {}
        for strategy in selected:
            results[strategy] = self._run_strategy(
                strategy,
                samplers[strategy],
                cancel_event=cancel_event,
                progress_callback=progress_callback,
            )
        return SimulationResults(results, self.params)

    def _run_strategy(
        self,
        strategy: Strategy,
        sampler: NormalSampler,
        *,
        cancel_event: Optional[threading.Event],
        progress_callback: Optional[ProgressCallback],
    ) -> StrategyResult:
        runs = self.config.runs
        stride = sample_stride(runs)
        interval = self.config.progress_interval

        ending = np.empty(runs, dtype=float)
        sampled: List[Trajectory] = []
        debt_free_months: List[int] = []
        ruin_count = 0
        goal_count = 0

        logger.info("Simulating %s strategy: %d runs (stride %d)", strategy.value, runs, stride)
        t0 = time.perf_counter()

        for i in range(runs):
            traj = simulate_once(self.params, strategy, sampler, validate=False)

            ending[i] = traj.terminal_net_worth
            ruin_count += traj.ruined
            goal_count += traj.goal_hit
            if traj.debt_free_month is not None:
                debt_free_months.append(traj.debt_free_month)
            if i % stride == 0:
                sampled.append(traj)

            completed = i + 1
            if progress_callback is not None and (completed % interval == 0 or completed == runs):
                progress_callback(strategy, completed, runs)
            if cancel_event is not None and cancel_event.is_set():
                logger.info(
                    "Cancellation requested during %s strategy at run %d/%d",
                    strategy.value, completed, runs,
                )
                raise SimulationCancelledError(
                    f"Simulation cancelled after {completed} of {runs} runs "
                    f"({strategy.value} strategy).",
                    strategy=strategy,
                    completed=completed,
                )

        ending.sort()
        ending.flags.writeable = False

        if debt_free_months:
            debt_free_months.sort()
            median_month: Optional[int] = debt_free_months[len(debt_free_months) // 2]
        else:
            median_month = None

        result = StrategyResult(
            strategy=strategy,
            runs=runs,
            ending_net_worths=ending,
            sampled_trajectories=tuple(sampled),
            ruin_probability=ruin_count / runs,
            goal_probability=goal_count / runs,
            debt_free_probability=len(debt_free_months) / runs,
            median_debt_free_month=median_month,
        )
        logger.info(
            "Finished %s strategy in %.2fs: ruin=%.4f goal=%.4f debt_free=%.4f",
            strategy.value, time.perf_counter() - t0,
            result.ruin_probability, result.goal_probability, result.debt_free_probability,
        )
        return result


def run_monte_carlo(
    params: Union[SimulationParameters, Mapping[str, object]],
    runs: int = DEFAULT_RUNS,
    *,
    seed: Optional[int] = None,
    strategies: Optional[Iterable[Union[Strategy, str]]] = None,
    sampler_factory: Optional[SamplerFactory] = None,
    cancel_event: Optional[threading.Event] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> SimulationResults:
    """
    Run the Monte Carlo simulation for all (or selected) strategies.

    Parameters
    ----------
    params : SimulationParameters or mapping
        Household record; mappings are validated.
    runs : int, default 5000
        Trajectories per strategy (positive integer).
    seed : int, optional
        Root seed for reproducible results.
    strategies, sampler_factory, cancel_event, progress_callback
        See MonteCarloEngine.

    Returns
    -------
    SimulationResults

    Raises
    ------
    InvalidParameterError
        Invalid parameters or ``runs < 1``.
    SimulationCancelledError
        ``cancel_event`` was set during the run.
    """
    if isinstance(runs, bool) or not isinstance(runs, (int, np.integer)) or runs < 1:
        raise InvalidParameterError(f"runs must be a positive integer, got {runs!r}.")
    try:
        config = MonteCarloConfig(runs=int(runs), seed=seed)
    except ValidationError as e:
        raise InvalidParameterError(f"Invalid Monte Carlo settings: {e}") from e
    engine = MonteCarloEngine(params, config, sampler_factory=sampler_factory)
    return engine.run(
        strategies,
        cancel_event=cancel_event,
        progress_callback=progress_callback,
    )
