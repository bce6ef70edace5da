"""
Cox proportional hazards capability

Thin wrapper around lifelines.CoxPHFitter exposing the contract the
mediation estimator relies on: one coefficient per requested covariate
plus a convergence flag.
"""

from typing import Callable, Dict, Optional, Sequence
from dataclasses import dataclass, field
import logging
import warnings

import pandas as pd
from lifelines import CoxPHFitter
from lifelines.exceptions import ConvergenceError, ConvergenceWarning

logger = logging.getLogger(__name__)


@dataclass
class CoxFitResult:
    """Outcome of one Cox model fit"""
    coefficients: Dict[str, float]
    converged: bool
    message: Optional[str] = None
    n_observations: int = 0
    n_events: int = 0
    log_likelihood: Optional[float] = None
    standard_errors: Dict[str, float] = field(default_factory=dict)


# Any callable with this signature can stand in for fit_cox
CoxFitter = Callable[[pd.DataFrame, Sequence[str]], CoxFitResult]


def fit_cox(
    data: pd.DataFrame,
    covariates: Sequence[str],
    duration_col: str = "eventtime",
    event_col: str = "status",
    penalizer: float = 0.0
) -> CoxFitResult:
    """
    Fit Surv(duration, event) ~ covariates by partial likelihood

    Args:
        data: Survival dataset
        covariates: Covariate column names, in model order
        duration_col: Event/censoring time column
        event_col: Event indicator column (True/1 = event observed)
        penalizer: Passed through to CoxPHFitter

    Returns:
        CoxFitResult; converged is False when lifelines raised a
        ConvergenceError or emitted a ConvergenceWarning during the fit
    """
    covariates = list(covariates)
    df = data[[duration_col, event_col] + covariates].copy()
    df[event_col] = df[event_col].astype(int)

    n_events = int(df[event_col].sum())
    cph = CoxPHFitter(penalizer=penalizer)

    try:
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always", ConvergenceWarning)
            cph.fit(df, duration_col=duration_col, event_col=event_col)
    except ConvergenceError as exc:
        logger.debug(f"Cox fit on {covariates} raised ConvergenceError: {exc}")
        return CoxFitResult(
            coefficients={},
            converged=False,
            message=str(exc),
            n_observations=len(df),
            n_events=n_events
        )

    convergence_warnings = [
        str(w.message) for w in caught if issubclass(w.category, ConvergenceWarning)
    ]

    return CoxFitResult(
        coefficients={name: float(cph.params_[name]) for name in covariates},
        converged=not convergence_warnings,
        message="; ".join(convergence_warnings) or None,
        n_observations=len(df),
        n_events=n_events,
        log_likelihood=float(cph.log_likelihood_),
        standard_errors={name: float(cph.standard_errors_[name]) for name in covariates}
    )
