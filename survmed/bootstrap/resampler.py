"""Row-level nonparametric bootstrap resampling"""

import numpy as np
import pandas as pd


def resample_rows(
    data: pd.DataFrame,
    rng: np.random.Generator,
    id_col: str = "id"
) -> pd.DataFrame:
    """
    Draw len(data) rows uniformly with replacement

    Whole rows are resampled so each individual's covariates and outcome
    stay together. The result has a fresh RangeIndex and, when `id_col` is
    present, ids reassigned to 1..N in draw order.
    """
    n = len(data)
    positions = rng.integers(0, n, size=n)

    boot_data = data.iloc[positions].reset_index(drop=True)
    if id_col in boot_data.columns:
        boot_data[id_col] = np.arange(1, n + 1)

    return boot_data
