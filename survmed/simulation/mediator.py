"""Mediator generation: a linear function of the exposure plus Gaussian noise"""

import numpy as np
import pandas as pd

from ..core.config import MediatorSpec
from ..core.exceptions import ConfigurationError


def generate_mediator(
    exposure: np.ndarray,
    slope: float,
    noise_scale: float,
    rng: np.random.Generator
) -> np.ndarray:
    """mediator[i] = slope * exposure[i] + noise_scale * Z[i], Z ~ N(0, 1) i.i.d."""
    exposure = np.asarray(exposure, dtype=float)
    noise = rng.standard_normal(exposure.shape[0])
    return slope * exposure + noise_scale * noise


def add_mediator(
    data: pd.DataFrame,
    spec: MediatorSpec,
    rng: np.random.Generator
) -> pd.DataFrame:
    """Return a copy of `data` with the mediator column appended"""
    if spec.source not in data.columns:
        raise ConfigurationError(f"Mediator source {spec.source} not in data columns {list(data.columns)}")

    out = data.copy()
    out[spec.name] = generate_mediator(
        out[spec.source].to_numpy(),
        slope=spec.slope,
        noise_scale=spec.noise_scale,
        rng=rng
    )
    return out
