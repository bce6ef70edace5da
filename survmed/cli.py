"""
Command line entry point

Runs the default mediation study and prints the point estimate of the
proportion mediated followed by the lower and upper confidence bounds.
"""

from typing import List, Optional
import argparse
import logging
import sys

from .core.config import FailurePolicy, StudyConfig
from .core.exceptions import SurvmedError
from .pipeline import MediationStudy

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="survmed",
        description="Bootstrap the proportion of a survival effect mediated by an intermediate variable"
    )
    parser.add_argument("--config", type=str, default=None, help="JSON file holding a StudyConfig")
    parser.add_argument("--n-samples", type=int, default=None, help="Population size (default 10000)")
    parser.add_argument("--replicates", type=int, default=None, help="Bootstrap replicates (default 100)")
    parser.add_argument("--seed", type=int, default=None, help="Master random seed")
    parser.add_argument(
        "--failure-policy",
        choices=[p.value for p in FailurePolicy],
        default=None,
        help="What to do with a replicate whose model fit fails"
    )
    parser.add_argument("-v", "--verbose", action="count", default=0)
    return parser


def load_config(args: argparse.Namespace) -> StudyConfig:
    """Start from --config (or defaults) and apply command line overrides"""
    config = StudyConfig.from_json(args.config) if args.config else StudyConfig()

    data = config.to_dict()
    if args.n_samples is not None:
        data["simulation"]["n_samples"] = args.n_samples
    if args.replicates is not None:
        data["n_replicates"] = args.replicates
    if args.seed is not None:
        data["seed"] = args.seed
    if args.failure_policy is not None:
        data["failure_policy"] = args.failure_policy

    return StudyConfig.from_dict(data)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        config = load_config(args)
        results = MediationStudy(config).run()
    except (SurvmedError, ValueError) as exc:
        logger.error(str(exc))
        return 1

    summary = results.bootstrap
    print(f"{summary.proportion_mediated:.6f} {summary.lower:.6f} {summary.upper:.6f}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
