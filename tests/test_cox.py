import warnings

import pytest
from lifelines import CoxPHFitter
from lifelines.exceptions import ConvergenceError, ConvergenceWarning

from survmed.estimation.cox import fit_cox


FULL_MODEL = ["wp", "bmi", "ldl", "smoke"]


def test_recovers_true_coefficients(default_population):
    result = fit_cox(default_population.data, FULL_MODEL)

    assert result.converged
    assert list(result.coefficients) == FULL_MODEL
    assert result.coefficients["wp"] == pytest.approx(0.4, abs=0.1)
    assert result.coefficients["bmi"] == pytest.approx(-0.3, abs=0.1)
    assert result.coefficients["ldl"] == pytest.approx(-0.1, abs=0.1)
    assert result.coefficients["smoke"] == pytest.approx(-0.3, abs=0.1)
    assert result.n_observations == len(default_population.data)
    assert result.n_events == int(default_population.data["status"].sum())
    assert all(se > 0 for se in result.standard_errors.values())


def test_does_not_modify_input(small_population):
    data = small_population.data
    before = data.copy()
    fit_cox(data, ["wp", "ldl"])
    assert data.equals(before)


def test_convergence_error_maps_to_flag(small_population, monkeypatch):
    def failing_fit(self, *args, **kwargs):
        raise ConvergenceError("delta contains nan value(s)")

    monkeypatch.setattr(CoxPHFitter, "fit", failing_fit)
    result = fit_cox(small_population.data, ["wp"])

    assert not result.converged
    assert result.coefficients == {}
    assert "nan" in result.message


def test_convergence_warning_maps_to_flag(small_population, monkeypatch):
    original_fit = CoxPHFitter.fit

    def warning_fit(self, *args, **kwargs):
        warnings.warn("Newton-Raphson failed to converge sufficiently", ConvergenceWarning)
        return original_fit(self, *args, **kwargs)

    monkeypatch.setattr(CoxPHFitter, "fit", warning_fit)
    result = fit_cox(small_population.data, ["wp"])

    assert not result.converged
    assert "Newton-Raphson" in result.message
