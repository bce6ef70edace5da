"""
SURVMED: Survival Mediation by Simulation and Bootstrap

Simulates a population in which an exposure affects a time-to-event
outcome partly through a mediator, estimates the proportion mediated from
two Cox models and bootstraps a log-scale confidence interval for it.
"""

from .core.config import (
    CovariateDistribution,
    MediatorSpec,
    WeibullHazard,
    SimulationConfig,
    StudyConfig,
    FailurePolicy,
    validate_covariance,
)

from .core.exceptions import (
    SurvmedError,
    ConfigurationError,
    EstimationError,
    ModelConvergenceError,
    ZeroTotalEffectError,
    NonPositiveEstimateError,
    PointEstimateError,
    BootstrapAbortedError,
)

from .simulation.sampler import CorrelatedSampler
from .simulation.mediator import generate_mediator, add_mediator
from .simulation.survival import SurvivalSimulator, linear_predictor

from .estimation.cox import CoxFitResult, fit_cox
from .estimation.mediation import MediationResult, estimate_mediation, proportion_mediated

from .bootstrap.resampler import resample_rows
from .bootstrap.engine import (
    BootstrapConfig,
    BootstrapSummary,
    MediationBootstrap,
    log_scale_interval,
)

from .pipeline import (
    MediationStudy,
    StudyResults,
    SimulatedPopulation,
    simulate_population,
)

__version__ = "0.1.0"

__all__ = [
    # Configuration
    "CovariateDistribution",
    "MediatorSpec",
    "WeibullHazard",
    "SimulationConfig",
    "StudyConfig",
    "FailurePolicy",
    "validate_covariance",

    # Errors
    "SurvmedError",
    "ConfigurationError",
    "EstimationError",
    "ModelConvergenceError",
    "ZeroTotalEffectError",
    "NonPositiveEstimateError",
    "PointEstimateError",
    "BootstrapAbortedError",

    # Simulation
    "CorrelatedSampler",
    "generate_mediator",
    "add_mediator",
    "SurvivalSimulator",
    "linear_predictor",

    # Estimation
    "CoxFitResult",
    "fit_cox",
    "MediationResult",
    "estimate_mediation",
    "proportion_mediated",

    # Bootstrap
    "resample_rows",
    "BootstrapConfig",
    "BootstrapSummary",
    "MediationBootstrap",
    "log_scale_interval",

    # Pipeline
    "MediationStudy",
    "StudyResults",
    "SimulatedPopulation",
    "simulate_population",
]
