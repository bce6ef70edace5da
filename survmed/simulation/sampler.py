"""
Correlated covariate sampler

Draws the exposure and confounder columns jointly from a multivariate
normal with fixed mean and covariance.
"""

from typing import List, Optional, Sequence
import logging

import numpy as np
import pandas as pd

from ..core.config import CovariateDistribution, validate_covariance
from ..core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class CorrelatedSampler:
    """
    Multivariate normal sampler for named covariates

    Usage:
        sampler = CorrelatedSampler(CovariateDistribution())
        covariates = sampler.sample(10000, np.random.default_rng(1))
    """

    def __init__(self, distribution: CovariateDistribution):
        self.distribution = distribution
        self.variable_names: List[str] = list(distribution.names)
        self.mean = np.asarray(distribution.mean, dtype=float)
        self.covariance = validate_covariance(
            distribution.mean, distribution.covariance, distribution.names
        )

    @classmethod
    def from_arrays(
        cls,
        mean: Sequence[float],
        covariance: Sequence[Sequence[float]],
        names: Optional[Sequence[str]] = None
    ) -> "CorrelatedSampler":
        """Build a sampler from raw arrays, raising ConfigurationError on bad input"""
        # Raises ConfigurationError itself, not a pydantic ValidationError
        matrix = validate_covariance(mean, covariance, names)
        if names is None:
            names = [f"x{i + 1}" for i in range(matrix.shape[0])]
        return cls(CovariateDistribution(
            names=list(names),
            mean=[float(m) for m in mean],
            covariance=matrix.tolist()
        ))

    def sample(self, n_samples: int, rng: np.random.Generator) -> pd.DataFrame:
        """
        Draw n_samples independent rows

        Args:
            n_samples: Number of individuals
            rng: Generator owned by the caller; advanced by this call

        Returns:
            DataFrame of shape (n_samples, k) labelled with the covariate names
        """
        if n_samples <= 0:
            raise ConfigurationError(f"Sample size must be positive, got {n_samples}")

        draws = rng.multivariate_normal(
            mean=self.mean,
            cov=self.covariance,
            size=n_samples
        )

        logger.debug(f"Sampled {n_samples} rows of {self.variable_names}")

        return pd.DataFrame(draws, columns=self.variable_names)
