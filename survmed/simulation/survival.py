"""
Survival time simulation

Generates right-censored event times from a Weibull proportional hazards
model by inverse-transform sampling: draw U ~ Uniform(0, 1) and solve
-log(U) = H(t | x) for t, where H is the cumulative hazard.

    h(t | x) = lambda * gamma * t^(gamma - 1) * exp(eta)
    H(t | x) = lambda * t^gamma * exp(eta)
    t*       = (-log(U) / (lambda * exp(eta)))^(1 / gamma)

Observed time is min(t*, maxt) and status is t* <= maxt.
"""

from typing import Literal, Optional
import logging

import numpy as np
import pandas as pd
from scipy.optimize import brentq

from ..core.config import WeibullHazard
from ..core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def linear_predictor(data: pd.DataFrame, hazard: WeibullHazard) -> np.ndarray:
    """eta[i] = sum_c coefficients[c] * data[c][i]"""
    missing = [name for name in hazard.coefficients if name not in data.columns]
    if missing:
        raise ConfigurationError(f"Hazard coefficients reference columns not in data: {missing}")

    eta = np.zeros(len(data), dtype=float)
    for name, coef in hazard.coefficients.items():
        eta += coef * data[name].to_numpy(dtype=float)
    return eta


def weibull_event_times(
    u: np.ndarray,
    eta: np.ndarray,
    shape: float,
    scale: float
) -> np.ndarray:
    """Closed-form inverse of the Weibull cumulative hazard"""
    with np.errstate(over='ignore', divide='ignore', invalid='ignore'):
        return np.power(-np.log(u) / (scale * np.exp(eta)), 1.0 / shape)


def invert_cumulative_hazard(
    hazard: WeibullHazard,
    target: float,
    eta: float,
    upper: float,
    xtol: float = 1e-12
) -> float:
    """
    Solve H(t | eta) = target for t in (0, upper] with Brent's method

    Returns np.inf when H(upper) < target, i.e. the event falls after the
    end of follow-up, and np.nan when the inputs are not finite.
    """
    if not (np.isfinite(target) and np.isfinite(eta)):
        return np.nan

    def objective(t: float) -> float:
        return float(hazard.cumulative_hazard(t, eta)) - target

    with np.errstate(over='ignore'):
        at_upper = objective(upper)
    if not np.isfinite(at_upper):
        return np.nan
    if at_upper < 0:
        return np.inf

    return brentq(objective, 0.0, upper, xtol=xtol)


class SurvivalSimulator:
    """
    Simulate (eventtime, status) for each row of a covariate frame

    Args:
        hazard: Weibull hazard specification
        max_time: Administrative censoring time (maxt)
        method: "analytic" for the closed-form inverse, "root" for numeric
            inversion of the cumulative hazard

    After `simulate`, `latent_times_` holds t* for every row (np.inf when the
    root search showed the event is beyond follow-up) and `n_clamped_` the
    number of rows whose t* was non-finite or non-positive and was censored
    at max_time instead.
    """

    def __init__(
        self,
        hazard: WeibullHazard,
        max_time: float,
        method: Literal["analytic", "root"] = "analytic"
    ):
        if max_time <= 0:
            raise ConfigurationError(f"max_time must be positive, got {max_time}")
        if method not in ("analytic", "root"):
            raise ConfigurationError(f"Unknown inversion method: {method}")

        self.hazard = hazard
        self.max_time = float(max_time)
        self.method = method

        self.latent_times_: Optional[np.ndarray] = None
        self.n_clamped_: int = 0

    def simulate(self, data: pd.DataFrame, rng: np.random.Generator) -> pd.DataFrame:
        """
        Args:
            data: Covariate frame containing every column named by the hazard
            rng: Generator owned by the caller; one uniform is drawn per row

        Returns:
            DataFrame with columns id, eventtime, status (same row order as data)
        """
        eta = linear_predictor(data, self.hazard)
        u = rng.uniform(0.0, 1.0, size=len(data))

        if self.method == "analytic":
            latent = weibull_event_times(u, eta, self.hazard.shape, self.hazard.scale)
        else:
            with np.errstate(divide='ignore'):
                targets = -np.log(u)
            latent = np.array([
                invert_cumulative_hazard(self.hazard, target, e, self.max_time)
                for target, e in zip(targets, eta)
            ])

        # np.inf from the root search means "after maxt", not a failure
        invalid = np.isnan(latent) | (latent <= 0)
        if self.method == "analytic":
            invalid |= ~np.isfinite(latent)

        self.n_clamped_ = int(np.sum(invalid))
        if self.n_clamped_ > 0:
            logger.warning(
                f"{self.n_clamped_} simulated event times were non-finite or non-positive; "
                f"censored at max_time={self.max_time}"
            )

        status = (latent <= self.max_time) & ~invalid
        eventtime = np.where(status, latent, self.max_time)

        self.latent_times_ = latent

        if "id" in data.columns:
            ids = data["id"].to_numpy()
        else:
            ids = np.arange(1, len(data) + 1)

        n_events = int(status.sum())
        logger.debug(f"Simulated {len(data)} survival times: {n_events} events, {len(data) - n_events} censored")

        return pd.DataFrame({
            "id": ids,
            "eventtime": eventtime.astype(float),
            "status": status.astype(bool)
        }, index=data.index)
