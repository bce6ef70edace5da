import json
import math

import numpy as np
import pytest
from pydantic import ValidationError

from survmed.core.config import (
    CovariateDistribution,
    FailurePolicy,
    MediatorSpec,
    SimulationConfig,
    StudyConfig,
    WeibullHazard,
    validate_covariance,
)
from survmed.core.exceptions import ConfigurationError


NOT_PSD = [
    [1.0, 0.9, 0.9],
    [0.9, 1.0, -0.9],
    [0.9, -0.9, 1.0],
]


def test_defaults_match_study_design():
    config = SimulationConfig()

    assert config.n_samples == 10000
    assert config.max_time == 12.0
    assert config.covariates.names == ["wp", "ldl", "smoke"]
    assert config.covariates.covariance[0][1] == -0.3
    assert config.covariates.covariance[0][2] == -0.2
    assert config.covariates.covariance[1][2] == 0.1
    assert config.mediator.slope == pytest.approx(-math.sqrt(0.5))
    assert config.mediator.noise_scale == pytest.approx(math.sqrt(0.8))
    assert config.hazard.coefficients == {"wp": 0.4, "bmi": -0.3, "ldl": -0.1, "smoke": -0.3}
    assert config.hazard.scale == 0.05
    assert config.hazard.shape == 1.0
    assert config.column_names == ["wp", "ldl", "smoke", "bmi"]


def test_study_defaults():
    config = StudyConfig()
    assert config.n_replicates == 100
    assert config.z_critical == 1.96
    assert config.failure_policy == FailurePolicy.EXCLUDE


def test_non_psd_covariance_rejected():
    with pytest.raises(ValidationError):
        CovariateDistribution(covariance=NOT_PSD)


def test_mean_length_mismatch_rejected():
    with pytest.raises(ValidationError):
        CovariateDistribution(mean=[0.0, 0.0])


def test_validation_errors_are_value_errors():
    with pytest.raises(ValueError):
        CovariateDistribution(names=["a", "a", "b"])


@pytest.mark.parametrize("mean, covariance, names", [
    ([0.0, 0.0], [[1.0, 0.2], [0.3, 1.0]], None),
    ([0.0, 0.0], [[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]], None),
    ([0.0], [[1.0, 0.0], [0.0, 1.0]], None),
    ([0.0, 0.0], [[1.0, 0.0], [0.0, 1.0]], ["a"]),
    ([0.0, 0.0, 0.0], NOT_PSD, None),
])
def test_validate_covariance_raises_configuration_error(mean, covariance, names):
    with pytest.raises(ConfigurationError):
        validate_covariance(mean, covariance, names)


def test_semi_definite_covariance_accepted():
    # Rank-1 matrix: PSD but singular
    matrix = validate_covariance([0.0, 0.0], [[1.0, 1.0], [1.0, 1.0]])
    assert matrix.shape == (2, 2)


def test_hazard_must_reference_known_covariates():
    hazard = WeibullHazard(coefficients={"wp": 0.4, "age": 0.1})
    with pytest.raises(ValidationError, match="age"):
        SimulationConfig(hazard=hazard)


def test_hazard_parameters_must_be_positive():
    with pytest.raises(ValidationError):
        WeibullHazard(scale=0.0)
    with pytest.raises(ValidationError):
        WeibullHazard(shape=-1.0)


def test_roles_must_exist():
    with pytest.raises(ValidationError):
        SimulationConfig(exposure="pace")
    with pytest.raises(ValidationError):
        SimulationConfig(confounders=["ldl", "age"])
    with pytest.raises(ValidationError):
        SimulationConfig(mediator=MediatorSpec(name="ldl"))


@pytest.mark.parametrize("field, value", [
    ("n_samples", 0),
    ("n_samples", -5),
    ("max_time", 0.0),
])
def test_non_positive_sizes_rejected(field, value):
    with pytest.raises(ValidationError):
        SimulationConfig(**{field: value})


def test_non_positive_replicates_rejected():
    with pytest.raises(ValidationError):
        StudyConfig(n_replicates=0)


def test_round_trip_through_dict_and_json(tmp_path):
    config = StudyConfig(n_replicates=25, seed=3, failure_policy="abort")

    restored = StudyConfig.from_dict(config.to_dict())
    assert restored == config

    path = tmp_path / "study.json"
    path.write_text(json.dumps(config.to_dict()))
    assert StudyConfig.from_json(path) == config


def test_correlation_matrix_has_unit_diagonal():
    corr = CovariateDistribution(covariance=[[4.0, 0.0], [0.0, 9.0]], mean=[0, 0], names=["a", "b"]).correlation_matrix()
    np.testing.assert_allclose(np.diag(corr), [1.0, 1.0])
