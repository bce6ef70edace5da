import numpy as np
import pandas as pd
import pytest

from survmed.core.config import SimulationConfig, StudyConfig
from survmed.pipeline import MediationStudy, simulate_population


def test_population_columns(small_population):
    data = small_population.data
    assert list(data.columns) == ["id", "wp", "ldl", "smoke", "bmi", "eventtime", "status"]
    np.testing.assert_array_equal(data["id"], np.arange(1, 2001))
    assert data["status"].dtype == bool
    assert small_population.n_clamped == 0


def test_population_reproducible():
    config = SimulationConfig(n_samples=500)
    first = simulate_population(config, np.random.SeedSequence(99))
    second = simulate_population(config, np.random.SeedSequence(99))
    pd.testing.assert_frame_equal(first.data, second.data)


def test_population_differs_across_seeds():
    config = SimulationConfig(n_samples=500)
    first = simulate_population(config, np.random.SeedSequence(1))
    second = simulate_population(config, np.random.SeedSequence(2))
    assert not np.allclose(first.data["wp"], second.data["wp"])


def test_root_method_matches_analytic():
    config = SimulationConfig(n_samples=500)
    analytic = simulate_population(config, np.random.SeedSequence(5))
    root = simulate_population(config, np.random.SeedSequence(5), method="root")

    np.testing.assert_array_equal(analytic.data["status"], root.data["status"])
    np.testing.assert_allclose(analytic.data["eventtime"], root.data["eventtime"], rtol=1e-8)


def test_default_event_rate(default_population):
    # Mostly censored at t = 12 under the default hazard
    assert 0.2 < default_population.event_rate < 0.6


def test_study_reproducible():
    config = StudyConfig(simulation=SimulationConfig(n_samples=1500), n_replicates=5, seed=17)
    first = MediationStudy(config).run()
    second = MediationStudy(config).run()

    pd.testing.assert_frame_equal(first.population.data, second.population.data)
    np.testing.assert_array_equal(first.bootstrap.estimates, second.bootstrap.estimates)
    assert first.bootstrap.interval == second.bootstrap.interval


def test_study_on_given_population(make_fitter, small_population):
    fitter = make_fitter(direct=0.3, total=0.5)
    config = StudyConfig(simulation=SimulationConfig(n_samples=2000), n_replicates=4, seed=1)

    results = MediationStudy(config, fitter=fitter).run(small_population)

    assert results.population is small_population
    assert results.bootstrap.proportion_mediated == pytest.approx(0.4)
    # Point estimate plus four replicates, two models each
    assert len(fitter.calls) == 10
    assert fitter.calls[0] == ["wp", "bmi", "ldl", "smoke"]
    assert fitter.calls[1] == ["wp", "ldl", "smoke"]


def test_end_to_end_default_study():
    results = MediationStudy(StudyConfig(n_replicates=20, seed=2024)).run()
    summary = results.bootstrap

    assert 0.25 < summary.proportion_mediated < 0.45
    assert summary.lower < summary.proportion_mediated < summary.upper
    assert summary.lower > 0.2
    assert summary.upper < 0.5
    assert summary.n_used == 20

    report = results.validate_quality()
    assert report.passed, report.generate_report()

    overview = results.summary()
    assert overview["population"]["n_samples"] == 10000
    assert overview["replicates"]["used"] == 20
    assert set(overview["interval"]) == {"lower", "upper", "z_critical"}
