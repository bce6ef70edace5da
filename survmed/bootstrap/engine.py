"""
Bootstrap Engine for the mediated proportion

Implements the log-scale nonparametric bootstrap:
- Point estimate on the full population
- B replicate estimates on row-resampled copies of the population
- se_log = SD(log(estimate_b)), interval = exp(log(point) +/- z * se_log)

The ratio (total - direct) / total is right-skewed; working on the log
scale symmetrizes it before the normal approximation and the interval is
back-transformed afterwards.
"""

from typing import Callable, Dict, List, Optional, Any, Tuple
from dataclasses import dataclass, field
from collections import Counter
from datetime import datetime
import logging

import numpy as np
import pandas as pd

from ..core.config import FailurePolicy, StudyConfig
from ..core.exceptions import (
    BootstrapAbortedError,
    ConfigurationError,
    EstimationError,
    NonPositiveEstimateError,
    PointEstimateError,
)
from ..estimation.mediation import MediationResult, estimate_mediation
from .resampler import resample_rows

logger = logging.getLogger(__name__)

Estimator = Callable[[pd.DataFrame], MediationResult]


def log_scale_interval(point_estimate: float, se_log: float, z_critical: float) -> Tuple[float, float]:
    """[exp(log(p) - z * se), exp(log(p) + z * se)]"""
    log_point = np.log(point_estimate)
    return (
        float(np.exp(log_point - z_critical * se_log)),
        float(np.exp(log_point + z_critical * se_log))
    )


@dataclass
class BootstrapConfig:
    """Configuration for the bootstrap loop"""
    n_replicates: int = 100
    z_critical: float = 1.96

    # Failure handling
    failure_policy: FailurePolicy = FailurePolicy.EXCLUDE
    min_success_fraction: float = 0.0

    # Computational
    random_seed: Optional[int] = None

    def __post_init__(self):
        if self.n_replicates <= 0:
            raise ConfigurationError(f"Replicate count must be positive, got {self.n_replicates}")
        if self.z_critical <= 0:
            raise ConfigurationError(f"z_critical must be positive, got {self.z_critical}")
        if not 0.0 <= self.min_success_fraction <= 1.0:
            raise ConfigurationError(f"min_success_fraction must be in [0, 1], got {self.min_success_fraction}")
        self.failure_policy = FailurePolicy(self.failure_policy)

    @classmethod
    def from_study_config(cls, config: StudyConfig) -> "BootstrapConfig":
        return cls(
            n_replicates=config.n_replicates,
            z_critical=config.z_critical,
            failure_policy=config.failure_policy,
            min_success_fraction=config.min_success_fraction,
            random_seed=config.seed
        )


@dataclass
class ReplicateFailure:
    """A replicate excluded from the summary"""
    index: int
    reason: str
    message: str


@dataclass
class BootstrapSummary:
    """Results from the bootstrap"""
    point_estimate: MediationResult
    estimates: np.ndarray  # usable replicate estimates, in replicate order
    se_log: float
    lower: float
    upper: float
    z_critical: float
    n_requested: int
    failures: List[ReplicateFailure] = field(default_factory=list)

    # Metadata
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())
    elapsed_seconds: float = 0.0

    @property
    def proportion_mediated(self) -> float:
        return self.point_estimate.proportion_mediated

    @property
    def interval(self) -> Tuple[float, float]:
        return self.lower, self.upper

    @property
    def n_used(self) -> int:
        return len(self.estimates)

    @property
    def n_excluded(self) -> int:
        return len(self.failures)

    def failure_counts(self) -> Dict[str, int]:
        return dict(Counter(f.reason for f in self.failures))

    def summary(self) -> Dict[str, Any]:
        """Generate summary statistics"""
        return {
            "proportion_mediated": self.proportion_mediated,
            "direct_effect": self.point_estimate.direct_effect,
            "total_effect": self.point_estimate.total_effect,
            "se_log": self.se_log,
            "interval": {
                "lower": self.lower,
                "upper": self.upper,
                "z_critical": self.z_critical
            },
            "replicates": {
                "requested": self.n_requested,
                "used": self.n_used,
                "excluded": self.n_excluded,
                "failures_by_reason": self.failure_counts()
            },
            "elapsed": f"{self.elapsed_seconds:.2f} seconds"
        }


class MediationBootstrap:
    """
    Bootstrap driver for the mediated proportion

    Each replicate gets its own generator spawned from one master
    SeedSequence, so replicate b is reproducible on its own and the whole
    loop is deterministic for a fixed seed.

    Usage:
        bootstrap = MediationBootstrap(BootstrapConfig(n_replicates=100, random_seed=1))
        summary = bootstrap.run(population)
        print(summary.proportion_mediated, summary.interval)
    """

    def __init__(
        self,
        config: BootstrapConfig,
        estimator: Estimator = estimate_mediation,
        seed_sequence: Optional[np.random.SeedSequence] = None
    ):
        self.config = config
        self.estimator = estimator
        self.results: Optional[BootstrapSummary] = None

        # An explicit seed_sequence takes precedence over config.random_seed
        if seed_sequence is None:
            seed_sequence = np.random.SeedSequence(config.random_seed)
            if config.random_seed is None:
                logger.info(f"No bootstrap seed given; using entropy {seed_sequence.entropy}")
        self.seed_sequence = seed_sequence

    def replicate_generators(self) -> List[np.random.Generator]:
        """
        One independent generator per replicate

        Children are keyed by replicate index rather than taken from
        SeedSequence.spawn, so repeated calls yield the same streams.
        """
        root = self.seed_sequence
        return [
            np.random.default_rng(np.random.SeedSequence(
                entropy=root.entropy,
                spawn_key=tuple(root.spawn_key) + (idx,),
                pool_size=root.pool_size
            ))
            for idx in range(self.config.n_replicates)
        ]

    def estimate_point(self, population: pd.DataFrame) -> MediationResult:
        """
        Point estimate on the full population

        Failures are fatal here since there is no replicate to fall back to.
        """
        try:
            result = self.estimator(population)
            if not result.proportion_mediated > 0:
                raise NonPositiveEstimateError(result.proportion_mediated)
        except EstimationError as exc:
            logger.error(f"Point estimate failed: {exc}")
            raise PointEstimateError(exc) from exc

        logger.info(
            f"Point estimate: proportion mediated = {result.proportion_mediated:.4f} "
            f"(direct = {result.direct_effect:.4f}, total = {result.total_effect:.4f})"
        )
        return result

    def run_replicate(self, population: pd.DataFrame, rng: np.random.Generator) -> float:
        """Resample the population and return the replicate's mediated proportion"""
        replicate = resample_rows(population, rng)
        estimate = self.estimator(replicate).proportion_mediated
        if not estimate > 0:
            raise NonPositiveEstimateError(estimate)
        return estimate

    def run(self, population: pd.DataFrame) -> BootstrapSummary:
        """
        Run point estimate plus B replicates and summarise on the log scale

        Main entry point for users
        """
        start_time = datetime.now()
        n_replicates = self.config.n_replicates

        point = self.estimate_point(population)

        logger.info(f"Running {n_replicates} bootstrap replicates on {len(population)} rows...")

        estimates: List[float] = []
        failures: List[ReplicateFailure] = []

        for idx, rng in enumerate(self.replicate_generators()):
            try:
                estimate = self.run_replicate(population, rng)
            except EstimationError as exc:
                if self.config.failure_policy == FailurePolicy.ABORT:
                    raise BootstrapAbortedError(f"Replicate {idx + 1}/{n_replicates} failed: {exc}") from exc
                logger.debug(f"  Replicate {idx + 1}/{n_replicates} excluded ({exc.reason}): {exc}")
                failures.append(ReplicateFailure(index=idx, reason=exc.reason, message=str(exc)))
                continue

            estimates.append(estimate)
            logger.debug(f"  Replicate {idx + 1}/{n_replicates}: {estimate:.4f}")

        if failures:
            counts = dict(Counter(f.reason for f in failures))
            logger.warning(f"Excluded {len(failures)}/{n_replicates} bootstrap replicates: {counts}")

        if len(estimates) < 2:
            raise BootstrapAbortedError(
                f"Only {len(estimates)} usable replicates out of {n_replicates}; "
                "need at least 2 for a standard error"
            )
        success_fraction = len(estimates) / n_replicates
        if success_fraction < self.config.min_success_fraction:
            raise BootstrapAbortedError(
                f"Only {success_fraction:.0%} of replicates succeeded "
                f"(minimum {self.config.min_success_fraction:.0%})"
            )

        estimates_arr = np.asarray(estimates, dtype=float)
        se_log = float(np.std(np.log(estimates_arr), ddof=1))
        lower, upper = log_scale_interval(point.proportion_mediated, se_log, self.config.z_critical)

        elapsed = (datetime.now() - start_time).total_seconds()

        self.results = BootstrapSummary(
            point_estimate=point,
            estimates=estimates_arr,
            se_log=se_log,
            lower=lower,
            upper=upper,
            z_critical=self.config.z_critical,
            n_requested=n_replicates,
            failures=failures,
            elapsed_seconds=elapsed
        )

        logger.info(f"Bootstrap complete in {elapsed:.1f} seconds")
        logger.info(
            f"  proportion mediated = {point.proportion_mediated:.4f}, "
            f"interval ({lower:.4f}, {upper:.4f}), se_log = {se_log:.4f}"
        )

        return self.results
