"""
Exception hierarchy for SURVMED

Configuration errors are raised eagerly before any simulation starts.
Estimation errors are raised per dataset and can be recovered from at
bootstrap-replicate granularity.
"""

from typing import Optional


class SurvmedError(Exception):
    """Base class for all SURVMED errors"""


class ConfigurationError(SurvmedError, ValueError):
    """Invalid simulation or bootstrap configuration"""


# ============================================================================
# NUMERICAL DEGENERACY
# ============================================================================

class EstimationError(SurvmedError):
    """A mediation estimate could not be computed for a dataset"""

    reason = "estimation"


class ModelConvergenceError(EstimationError):
    """A Cox model fit did not converge"""

    reason = "convergence"

    def __init__(self, model_name: str, message: Optional[str] = None):
        self.model_name = model_name
        self.message = message or "fit did not converge"
        super().__init__(f"{model_name} model failed to converge: {self.message}")


class ZeroTotalEffectError(EstimationError):
    """Total effect is exactly zero, so the mediated proportion is undefined"""

    reason = "zero_total_effect"

    def __init__(self, direct_effect: float):
        self.direct_effect = direct_effect
        super().__init__(
            f"total effect is zero (direct effect = {direct_effect:.6g}); "
            "proportion mediated is undefined"
        )


class NonPositiveEstimateError(EstimationError):
    """Proportion mediated is <= 0, so its logarithm is undefined"""

    reason = "non_positive"

    def __init__(self, estimate: float):
        self.estimate = estimate
        super().__init__(f"proportion mediated {estimate:.6g} has no logarithm")


# ============================================================================
# BOOTSTRAP
# ============================================================================

class PointEstimateError(SurvmedError):
    """The population point estimate failed; there is no replicate to fall back to"""

    def __init__(self, cause: EstimationError):
        self.cause = cause
        self.model_name = getattr(cause, "model_name", None)
        super().__init__(f"point estimate failed: {cause}")


class BootstrapAbortedError(SurvmedError):
    """The bootstrap loop stopped before producing a usable summary"""
