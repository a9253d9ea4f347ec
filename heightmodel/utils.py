"""Small data helpers shared across the pipeline.

* **Weekday derivation** -- ordered categorical day-of-week, plotting only.
* **Informative-time view** -- drops measurements without a recorded time.
* **Descriptive summary** -- n, mean, sd, range of the heights.
* **Draw stacking** -- flattens an ArviZ posterior variable over
  (chain, draw) into a 1-d array.
"""

from typing import Dict

import numpy as np
import pandas as pd

from heightmodel.config import (
    DATE_COLUMN, TIME_COLUMN, HEIGHT_COLUMN, NO_TIME_RECORDED, WEEKDAYS,
)

WEEKDAY_COLUMN = "weekday"

_WEEKDAY_DTYPE = pd.CategoricalDtype(categories=list(WEEKDAYS), ordered=True)


def add_weekday(df: pd.DataFrame) -> pd.DataFrame:
    """Return a copy of *df* with an ordered ``weekday`` column derived from ``date``."""
    out = df.copy()
    dates = pd.to_datetime(out[DATE_COLUMN])
    # dayofweek: Monday=0 ... Sunday=6, independent of locale.
    names = [WEEKDAYS[d] for d in dates.dt.dayofweek]
    out[WEEKDAY_COLUMN] = pd.Categorical(names, dtype=_WEEKDAY_DTYPE)
    return out


def informative_times(df: pd.DataFrame) -> pd.DataFrame:
    """Rows whose time of day was actually recorded (time_hours != 0)."""
    return df.loc[df[TIME_COLUMN] != NO_TIME_RECORDED].copy()


def describe_heights(df: pd.DataFrame) -> Dict[str, float]:
    h = df[HEIGHT_COLUMN].to_numpy(dtype=float)
    return {
        "n": int(h.size),
        "mean": float(np.mean(h)),
        "sd": float(np.std(h, ddof=1)) if h.size > 1 else float("nan"),
        "min": float(np.min(h)),
        "max": float(np.max(h)),
    }


def stacked_draws(idata, var_name: str, group: str = "posterior") -> np.ndarray:
    """All draws of a scalar variable across chains, as a flat float array."""
    values = getattr(idata, group)[var_name].values
    return np.asarray(values, dtype=float).reshape(-1)
