"""
Two-model mediation estimator

Stage 1: Cox model with exposure, mediator and confounders gives the
direct effect of the exposure (its coefficient with the mediator held
fixed).
Stage 2: Cox model without the mediator gives the total effect.

proportion mediated = (total - direct) / total
"""

from typing import Sequence
from dataclasses import dataclass
import logging

import pandas as pd

from ..core.exceptions import ModelConvergenceError, ZeroTotalEffectError
from .cox import CoxFitter, fit_cox

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MediationResult:
    """Exposure coefficients from the two models and the derived proportion"""
    direct_effect: float
    total_effect: float
    proportion_mediated: float


def proportion_mediated(total_effect: float, direct_effect: float) -> float:
    """(total - direct) / total; raises ZeroTotalEffectError when total == 0"""
    if total_effect == 0:
        raise ZeroTotalEffectError(direct_effect)
    return (total_effect - direct_effect) / total_effect


def _exposure_coefficient(
    data: pd.DataFrame,
    covariates: Sequence[str],
    exposure: str,
    model_name: str,
    fitter: CoxFitter
) -> float:
    result = fitter(data, covariates)
    if not result.converged:
        raise ModelConvergenceError(model_name, result.message)
    return result.coefficients[exposure]


def estimate_mediation(
    data: pd.DataFrame,
    exposure: str = "wp",
    mediator: str = "bmi",
    confounders: Sequence[str] = ("ldl", "smoke"),
    fitter: CoxFitter = fit_cox
) -> MediationResult:
    """
    Estimate the proportion of the exposure effect mediated by `mediator`

    Args:
        data: Survival dataset with eventtime, status and the named columns
        exposure: Exposure column
        mediator: Mediator column
        confounders: Confounder columns, adjusted for in both models
        fitter: Cox capability; defaults to the lifelines wrapper

    Returns:
        MediationResult

    Raises:
        ModelConvergenceError: either model failed to converge
        ZeroTotalEffectError: total effect is exactly zero
    """
    confounders = list(confounders)

    direct_effect = _exposure_coefficient(
        data, [exposure, mediator] + confounders, exposure, "direct", fitter
    )
    total_effect = _exposure_coefficient(
        data, [exposure] + confounders, exposure, "total", fitter
    )

    result = MediationResult(
        direct_effect=direct_effect,
        total_effect=total_effect,
        proportion_mediated=proportion_mediated(total_effect, direct_effect)
    )

    logger.debug(
        f"direct={result.direct_effect:.4f} total={result.total_effect:.4f} "
        f"mediated={result.proportion_mediated:.4f}"
    )

    return result
