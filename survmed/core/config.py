"""
Core Configuration Data Structures

Pydantic models describing the simulated study: the joint distribution of
exposure and confounders, the mediator, the Weibull hazard and the
bootstrap settings. Every model validates eagerly so that configuration
errors surface before any simulation starts.
"""

from typing import Optional, List, Dict, Any, Literal, Sequence
from pathlib import Path
from enum import Enum
import json
import math

import numpy as np
from pydantic import BaseModel, Field, field_validator, model_validator, ConfigDict

from .exceptions import ConfigurationError


class FailurePolicy(str, Enum):
    """What the bootstrap does with a replicate whose estimate fails"""
    EXCLUDE = "exclude"
    ABORT = "abort"


def validate_covariance(
    mean: Sequence[float],
    covariance: Any,
    names: Optional[Sequence[str]] = None,
    tolerance: float = 1e-8
) -> np.ndarray:
    """
    Check that (mean, covariance) define a valid multivariate normal

    Args:
        mean: Mean vector of length k
        covariance: k x k covariance matrix
        names: Optional variable labels, one per row of the matrix
        tolerance: Slack allowed on symmetry and on the smallest eigenvalue

    Returns:
        The covariance matrix as a float array

    Raises:
        ConfigurationError: on any dimension mismatch, asymmetry or a
            matrix that is not positive semi-definite
    """
    matrix = np.asarray(covariance, dtype=float)

    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        raise ConfigurationError(f"Covariance matrix must be square, got shape {matrix.shape}")

    k = matrix.shape[0]
    if len(mean) != k:
        raise ConfigurationError(f"Mean vector has length {len(mean)} but covariance is {k}x{k}")
    if names is not None and len(names) != k:
        raise ConfigurationError(f"Got {len(names)} variable names for a {k}x{k} covariance matrix")
    if not np.all(np.isfinite(matrix)):
        raise ConfigurationError("Covariance matrix contains non-finite entries")
    if not np.allclose(matrix, matrix.T, atol=tolerance):
        raise ConfigurationError("Covariance matrix must be symmetric")

    # Positive semi-definiteness via eigenvalues
    min_eigenval = float(np.min(np.linalg.eigvalsh(matrix)))
    if min_eigenval < -tolerance:
        raise ConfigurationError(
            f"Covariance matrix not positive semi-definite (min eigenvalue = {min_eigenval:.6f})"
        )

    return matrix


# ============================================================================
# COVARIATES AND MEDIATOR
# ============================================================================

class CovariateDistribution(BaseModel):
    """Multivariate normal distribution of the exposure and confounders"""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    names: List[str] = Field(default_factory=lambda: ["wp", "ldl", "smoke"])
    mean: List[float] = Field(default_factory=lambda: [0.0, 0.0, 0.0])
    covariance: List[List[float]] = Field(
        default_factory=lambda: [
            [1.0, -0.3, -0.2],
            [-0.3, 1.0, 0.1],
            [-0.2, 0.1, 1.0],
        ],
        description="Row/column order follows `names`"
    )

    @field_validator('names')
    def validate_names(cls, v):
        if len(set(v)) != len(v):
            raise ValueError(f"Covariate names must be unique, got {v}")
        return v

    @model_validator(mode='after')
    def validate_matrix(self):
        validate_covariance(self.mean, self.covariance, self.names)
        return self

    def covariance_matrix(self) -> np.ndarray:
        return np.asarray(self.covariance, dtype=float)

    def correlation_matrix(self) -> np.ndarray:
        cov = self.covariance_matrix()
        sd = np.sqrt(np.diag(cov))
        return cov / np.outer(sd, sd)


class MediatorSpec(BaseModel):
    """Mediator = slope * source + noise_scale * N(0, 1)"""
    name: str = "bmi"
    source: str = "wp"
    slope: float = -math.sqrt(0.5)
    noise_scale: float = Field(default=math.sqrt(0.8), ge=0.0)


# ============================================================================
# HAZARD
# ============================================================================

class WeibullHazard(BaseModel):
    """
    Log-linear Weibull proportional hazard

    h(t | x) = scale * shape * t^(shape - 1) * exp(sum_c coefficients[c] * x_c)
    """
    family: Literal["weibull"] = "weibull"
    shape: float = Field(default=1.0, gt=0.0, description="gamma")
    scale: float = Field(default=0.05, gt=0.0, description="lambda")
    coefficients: Dict[str, float] = Field(
        default_factory=lambda: {"wp": 0.4, "bmi": -0.3, "ldl": -0.1, "smoke": -0.3},
        description="Covariate name -> log hazard ratio"
    )

    @field_validator('coefficients')
    def validate_coefficients(cls, v):
        if not all(math.isfinite(c) for c in v.values()):
            raise ValueError("Hazard coefficients must be finite")
        return v

    def cumulative_hazard(self, t: np.ndarray, eta: np.ndarray) -> np.ndarray:
        """H(t | eta) = scale * t^shape * exp(eta)"""
        return self.scale * np.power(t, self.shape) * np.exp(eta)


# ============================================================================
# STUDY
# ============================================================================

class SimulationConfig(BaseModel):
    """Everything needed to simulate one population"""
    n_samples: int = Field(default=10000, gt=0)
    covariates: CovariateDistribution = Field(default_factory=CovariateDistribution)
    mediator: MediatorSpec = Field(default_factory=MediatorSpec)
    hazard: WeibullHazard = Field(default_factory=WeibullHazard)
    max_time: float = Field(default=12.0, gt=0.0, description="Administrative censoring time")

    exposure: str = "wp"
    confounders: List[str] = Field(default_factory=lambda: ["ldl", "smoke"])

    @model_validator(mode='after')
    def validate_roles(self):
        sampled = set(self.covariates.names)

        if self.exposure not in sampled:
            raise ValueError(f"Exposure {self.exposure} not in sampled covariates {self.covariates.names}")
        for name in self.confounders:
            if name not in sampled:
                raise ValueError(f"Confounder {name} not in sampled covariates {self.covariates.names}")
        if self.mediator.source not in sampled:
            raise ValueError(f"Mediator source {self.mediator.source} not in sampled covariates")
        if self.mediator.name in sampled:
            raise ValueError(f"Mediator name {self.mediator.name} clashes with a sampled covariate")

        available = sampled | {self.mediator.name}
        missing = [name for name in self.hazard.coefficients if name not in available]
        if missing:
            raise ValueError(f"Hazard coefficients reference unknown covariates: {missing}")

        return self

    @property
    def column_names(self) -> List[str]:
        return list(self.covariates.names) + [self.mediator.name]


class StudyConfig(BaseModel):
    """Simulation plus bootstrap settings for a full study run"""
    simulation: SimulationConfig = Field(default_factory=SimulationConfig)

    n_replicates: int = Field(default=100, gt=0)
    z_critical: float = Field(default=1.96, gt=0.0)
    failure_policy: FailurePolicy = FailurePolicy.EXCLUDE
    min_success_fraction: float = Field(default=0.0, ge=0.0, le=1.0)
    seed: Optional[int] = Field(default=None, ge=0)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StudyConfig":
        """Load from dictionary"""
        return cls.model_validate(data)

    @classmethod
    def from_json(cls, filepath: Path) -> "StudyConfig":
        """Load from a JSON file"""
        with open(filepath, 'r', encoding="utf-8") as f:
            return cls.from_dict(json.load(f))
