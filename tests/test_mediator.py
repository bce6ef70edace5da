import math

import numpy as np
import pandas as pd
import pytest

from survmed.core.config import MediatorSpec
from survmed.core.exceptions import ConfigurationError
from survmed.simulation.mediator import add_mediator, generate_mediator


SLOPE = -math.sqrt(0.5)
NOISE = math.sqrt(0.8)


def test_formula_against_noise_stream():
    exposure = np.linspace(-2, 2, 50)
    mediator = generate_mediator(exposure, SLOPE, NOISE, np.random.default_rng(9))

    noise = np.random.default_rng(9).standard_normal(50)
    np.testing.assert_allclose(mediator, SLOPE * exposure + NOISE * noise)


def test_same_seed_identical_column():
    exposure = np.random.default_rng(0).standard_normal(1000)
    first = generate_mediator(exposure, SLOPE, NOISE, np.random.default_rng(5))
    second = generate_mediator(exposure, SLOPE, NOISE, np.random.default_rng(5))
    np.testing.assert_array_equal(first, second)


def test_zero_noise_is_deterministic_in_exposure(rng):
    exposure = np.array([1.0, -2.0, 0.5])
    np.testing.assert_allclose(generate_mediator(exposure, 2.0, 0.0, rng), [2.0, -4.0, 1.0])


def test_add_mediator_returns_copy(rng):
    data = pd.DataFrame({"wp": [0.1, 0.2, 0.3], "ldl": [1.0, 2.0, 3.0]})
    out = add_mediator(data, MediatorSpec(), rng)

    assert "bmi" in out.columns
    assert "bmi" not in data.columns
    pd.testing.assert_frame_equal(out[["wp", "ldl"]], data)


def test_add_mediator_missing_source(rng):
    with pytest.raises(ConfigurationError):
        add_mediator(pd.DataFrame({"ldl": [1.0]}), MediatorSpec(), rng)


def test_mediator_depends_on_exposure_only(default_population):
    data = default_population.data
    residual = data["bmi"] - SLOPE * data["wp"]
    # Residual noise is independent of the confounders
    assert abs(np.corrcoef(residual, data["ldl"])[0, 1]) < 0.05
    assert abs(np.corrcoef(residual, data["smoke"])[0, 1]) < 0.05
    assert residual.std() == pytest.approx(NOISE, abs=0.03)
