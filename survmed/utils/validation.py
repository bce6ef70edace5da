"""
Validation Utilities for SURVMED

Provides tools for checking that a simulated population matches the
configuration it was generated from.
"""

from typing import Dict, List, Any, Optional
import argparse
import logging
import sys

import numpy as np
import pandas as pd

from ..core.config import SimulationConfig

logger = logging.getLogger(__name__)


class SimulationValidator:
    """
    Validation suite for simulated populations

    Provides diagnostic tools to assess:
    1. Covariate marginals and correlations vs the target distribution
    2. Mediator slope and noise vs the mediator specification
    3. Survival invariants (positive times, cap at max_time, status coding)
    """

    def __init__(self, tolerance: float = 0.05):
        """
        Args:
            tolerance: Absolute tolerance for moments, correlations and slopes
        """
        self.tolerance = tolerance

    def validate_population(
        self,
        data: pd.DataFrame,
        config: SimulationConfig
    ) -> Dict[str, Any]:
        """
        Check a simulated population against its configuration

        Returns:
            Dict with validation results for each check group
        """
        results = {
            'marginals': self._validate_marginals(data, config),
            'correlations': self._validate_correlations(data, config),
            'mediator': self._validate_mediator(data, config),
            'survival': self._validate_survival(data, config),
        }

        results['overall_pass'] = all(
            result['all_within_tolerance'] for result in results.values()
        )

        return results

    def _validate_marginals(self, data: pd.DataFrame, config: SimulationConfig) -> Dict[str, Any]:
        """Compare covariate means and SDs with the target distribution"""
        cov = config.covariates.covariance_matrix()
        errors = []

        for idx, name in enumerate(config.covariates.names):
            target_mean = config.covariates.mean[idx]
            target_std = float(np.sqrt(cov[idx, idx]))
            values = data[name].to_numpy()

            for statistic, target, empirical in (
                ('mean', target_mean, float(np.mean(values))),
                ('std', target_std, float(np.std(values, ddof=1))),
            ):
                absolute_error = abs(empirical - target)
                errors.append({
                    'variable': name,
                    'statistic': statistic,
                    'target': target,
                    'empirical': empirical,
                    'absolute_error': absolute_error,
                    'within_tolerance': absolute_error < self.tolerance
                })

        return {
            'errors': errors,
            'all_within_tolerance': all(e['within_tolerance'] for e in errors),
            'max_absolute_error': max(e['absolute_error'] for e in errors),
            'n_checked': len(errors)
        }

    def _validate_correlations(self, data: pd.DataFrame, config: SimulationConfig) -> Dict[str, Any]:
        """Compare pairwise correlations with the target correlation matrix"""
        names = config.covariates.names
        target = config.covariates.correlation_matrix()
        empirical = np.corrcoef(data[names].to_numpy(), rowvar=False)

        errors = []
        for i in range(len(names)):
            for j in range(i + 1, len(names)):
                absolute_error = abs(empirical[i, j] - target[i, j])
                errors.append({
                    'variables': f"{names[i]}-{names[j]}",
                    'target': float(target[i, j]),
                    'empirical': float(empirical[i, j]),
                    'absolute_error': float(absolute_error),
                    'within_tolerance': absolute_error < self.tolerance
                })

        return {
            'errors': errors,
            'all_within_tolerance': all(e['within_tolerance'] for e in errors) if errors else True,
            'max_absolute_error': max((e['absolute_error'] for e in errors), default=0.0),
            'n_checked': len(errors)
        }

    def _validate_mediator(self, data: pd.DataFrame, config: SimulationConfig) -> Dict[str, Any]:
        """Regress the mediator on its source and compare slope and residual SD"""
        spec = config.mediator
        x = data[spec.source].to_numpy()
        y = data[spec.name].to_numpy()

        slope, intercept = np.polyfit(x, y, 1)
        residual_std = float(np.std(y - (slope * x + intercept), ddof=2))

        slope_error = abs(slope - spec.slope)
        noise_error = abs(residual_std - spec.noise_scale)

        return {
            'slope': float(slope),
            'target_slope': spec.slope,
            'residual_std': residual_std,
            'target_noise_scale': spec.noise_scale,
            'all_within_tolerance': bool(slope_error < self.tolerance and noise_error < self.tolerance)
        }

    def _validate_survival(self, data: pd.DataFrame, config: SimulationConfig) -> Dict[str, Any]:
        """Check survival invariants; these are exact, not tolerance based"""
        times = data['eventtime'].to_numpy()
        status = data['status'].to_numpy(dtype=bool)
        max_time = config.max_time

        checks = {
            'times_finite': bool(np.all(np.isfinite(times))),
            'times_positive': bool(np.all(times > 0)),
            'times_within_follow_up': bool(np.all(times <= max_time)),
            'censored_at_max_time': bool(np.all(times[~status] == max_time)),
        }

        return {
            'checks': checks,
            'event_rate': float(status.mean()),
            'censoring_rate': float(1.0 - status.mean()),
            'all_within_tolerance': all(checks.values())
        }


class ValidationReport:
    """Human-readable wrapper around validation results"""

    def __init__(self, validation_results: Dict[str, Any]):
        self.results = validation_results

    @property
    def passed(self) -> bool:
        return bool(self.results.get('overall_pass', False))

    def generate_report(self) -> str:
        return generate_validation_report(self.results)


def generate_validation_report(results: Dict[str, Any]) -> str:
    """Generate human-readable validation report"""
    report = []

    report.append("=" * 80)
    report.append("SIMULATED POPULATION VALIDATION REPORT")
    report.append("=" * 80)

    if 'marginals' in results:
        marg = results['marginals']
        report.append(f"\nMarginal moments: {marg['n_checked']} checked")
        report.append(f" Max absolute error: {marg['max_absolute_error']:.4f}")
        report.append(f" All within tolerance: {'YES' if marg['all_within_tolerance'] else 'NO'}")

    if 'correlations' in results:
        corr = results['correlations']
        report.append(f"\nCorrelations: {corr['n_checked']} checked")
        report.append(f" Max absolute error: {corr['max_absolute_error']:.4f}")
        report.append(f" All within tolerance: {'YES' if corr['all_within_tolerance'] else 'NO'}")

    if 'mediator' in results:
        med = results['mediator']
        report.append(f"\nMediator slope: {med['slope']:.4f} (target {med['target_slope']:.4f})")
        report.append(f" Residual SD: {med['residual_std']:.4f} (target {med['target_noise_scale']:.4f})")

    if 'survival' in results:
        surv = results['survival']
        report.append(f"\nEvent rate: {surv['event_rate']:.2%}, censoring rate: {surv['censoring_rate']:.2%}")
        for name, ok in surv['checks'].items():
            report.append(f" {name}: {'OK' if ok else 'FAILED'}")

    overall = results.get('overall_pass', False)
    report.append(f"\n{'=' * 80}")
    report.append(f"OVERALL: {'PASS' if overall else 'FAIL'}")
    report.append(f"{'=' * 80}")

    return "\n".join(report)


def main(argv: Optional[List[str]] = None) -> int:
    """Simulate one population with the default study and print its validation report"""
    from ..pipeline import simulate_population

    parser = argparse.ArgumentParser(description="Validate a simulated mediation population")
    parser.add_argument("--n-samples", type=int, default=10000)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--tolerance", type=float, default=0.05)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    config = SimulationConfig(n_samples=args.n_samples)
    population = simulate_population(config, np.random.SeedSequence(args.seed))

    results = SimulationValidator(tolerance=args.tolerance).validate_population(population.data, config)
    print(generate_validation_report(results))

    return 0 if results['overall_pass'] else 1


if __name__ == "__main__":
    sys.exit(main())
