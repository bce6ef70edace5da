"""Shared fixtures: seeded populations and a mocked Cox fitter"""

from typing import List, Optional, Sequence

import numpy as np
import pytest

from survmed.core.config import SimulationConfig
from survmed.estimation.cox import CoxFitResult
from survmed.pipeline import simulate_population


@pytest.fixture
def rng():
    return np.random.default_rng(12345)


@pytest.fixture(scope="session")
def default_population():
    """The default study population (N = 10000), fixed seed"""
    return simulate_population(SimulationConfig(), np.random.SeedSequence(2024))


@pytest.fixture(scope="session")
def small_population():
    return simulate_population(SimulationConfig(n_samples=2000), np.random.SeedSequence(7))


@pytest.fixture
def make_fitter():
    """
    Factory for a fake Cox capability

    The model containing the mediator is the "direct" model; the exposure
    coefficient returned for each model is fixed by the caller.
    """
    def factory(
        direct: float,
        total: float,
        fail_model: Optional[str] = None,
        exposure: str = "wp",
        mediator: str = "bmi"
    ):
        calls: List[List[str]] = []

        def fitter(data, covariates: Sequence[str]) -> CoxFitResult:
            covariates = list(covariates)
            calls.append(covariates)
            model = "direct" if mediator in covariates else "total"
            if model == fail_model:
                return CoxFitResult(coefficients={}, converged=False, message="mock failure")
            coef = direct if model == "direct" else total
            return CoxFitResult(
                coefficients={c: (coef if c == exposure else 0.0) for c in covariates},
                converged=True
            )

        fitter.calls = calls
        return fitter

    return factory
