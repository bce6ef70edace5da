"""
SURVMED Quick Start Example

Walks through the pieces of a simulated mediation study one step at a
time, then runs the whole study in one call.
"""

import logging

import numpy as np
from survmed import (
    # Configuration
    SimulationConfig,
    StudyConfig,
    WeibullHazard,

    # Simulation
    CorrelatedSampler,
    add_mediator,
    SurvivalSimulator,

    # Estimation and bootstrap
    estimate_mediation,
    BootstrapConfig,
    MediationBootstrap,
    MediationStudy,
    simulate_population,
)


def example_1_step_by_step():
    """Example 1: Build the population by hand and estimate once"""

    print("=" * 80)
    print("EXAMPLE 1: Step-by-step simulation")
    print("=" * 80)

    config = SimulationConfig()
    rng = np.random.default_rng(2024)

    # Walking pace and two confounders
    covariates = CorrelatedSampler(config.covariates).sample(config.n_samples, rng)

    # BMI as a mediator
    covariates = add_mediator(covariates, config.mediator, rng)
    covariates.insert(0, "id", np.arange(1, config.n_samples + 1))

    # Weibull survival outcome, censored at 12
    simulator = SurvivalSimulator(config.hazard, config.max_time)
    outcome = simulator.simulate(covariates, rng)
    data = covariates.assign(eventtime=outcome["eventtime"], status=outcome["status"])

    print(f"\n  Rows: {len(data)}, events: {int(data['status'].sum())}")

    result = estimate_mediation(data)
    print(f"  Direct effect: {result.direct_effect:.4f}")
    print(f"  Total effect:  {result.total_effect:.4f}")
    print(f"  Proportion mediated: {result.proportion_mediated:.2%}")

    return data


def example_2_bootstrap(data):
    """Example 2: Log-scale bootstrap on an existing population"""

    print("\n" + "=" * 80)
    print("EXAMPLE 2: Bootstrap confidence interval")
    print("=" * 80)

    bootstrap = MediationBootstrap(BootstrapConfig(n_replicates=50, random_seed=7))
    summary = bootstrap.run(data)

    print(f"\n  Proportion mediated: {summary.proportion_mediated:.4f}")
    print(f"  SE (log scale): {summary.se_log:.4f}")
    print(f"  95% CI: ({summary.lower:.4f}, {summary.upper:.4f})")
    print(f"  Replicates used: {summary.n_used}/{summary.n_requested}")


def example_3_no_mediation():
    """Example 3: With no mediator effect on the hazard the proportion is ~0"""

    print("\n" + "=" * 80)
    print("EXAMPLE 3: No-mediation baseline")
    print("=" * 80)

    hazard = WeibullHazard(coefficients={"wp": 0.4, "bmi": 0.0, "ldl": -0.1, "smoke": -0.3})
    population = simulate_population(SimulationConfig(hazard=hazard), np.random.SeedSequence(11))

    # May be slightly negative, so no log-scale bootstrap here
    result = estimate_mediation(population.data)
    print(f"\n  Proportion mediated: {result.proportion_mediated:.4f}")


def example_4_full_study():
    """Example 4: Full study in one call, with a validation report"""

    print("\n" + "=" * 80)
    print("EXAMPLE 4: Full study")
    print("=" * 80)

    results = MediationStudy(StudyConfig(seed=2024)).run()
    print()
    for key, value in results.summary().items():
        print(f"  {key}: {value}")

    print()
    print(results.validate_quality().generate_report())


def main():
    """Run all examples"""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    data = example_1_step_by_step()
    example_2_bootstrap(data)
    example_3_no_mediation()
    example_4_full_study()


if __name__ == "__main__":
    main()
