"""Loader for the height measurement table.

The input is a small comma-separated file with a fixed header
``date,time_hours,height_cm``.  The loader only parses and type-coerces; it
never filters or transforms rows, so the returned row count always equals the
number of data rows in the file.
"""

from pathlib import Path
from typing import Union

import numpy as np
import pandas as pd

from heightmodel.config import (
    DATA_PATH, DATE_COLUMN, TIME_COLUMN, HEIGHT_COLUMN, HEIGHT_COLUMNS,
)


class HeightDataError(ValueError):
    """Raised when the height file cannot be parsed into the expected schema."""


def load_height_data(path: Union[str, Path] = DATA_PATH) -> pd.DataFrame:
    """Load the height measurements into a typed DataFrame.

    Returns a frame with exactly the columns ``date`` (datetime64),
    ``time_hours`` (float64) and ``height_cm`` (float64), in that order.

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    HeightDataError
        If the file is not parseable UTF-8 CSV, the header does not match the
        schema, a value cannot be coerced, a value is missing, or a time of
        day falls outside [0, 24).
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Height data file not found: {path}")

    try:
        df = pd.read_csv(path, dtype=str, skipinitialspace=True)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise HeightDataError(f"{path} is not a readable CSV file: {e}") from e

    df.columns = [str(c).strip() for c in df.columns]
    if sorted(df.columns) != sorted(HEIGHT_COLUMNS):
        raise HeightDataError(
            f"{path} has columns {list(df.columns)}; expected {list(HEIGHT_COLUMNS)}"
        )
    df = df.loc[:, list(HEIGHT_COLUMNS)]

    missing = df.isna().any(axis=1).to_numpy()
    if missing.any():
        rows = (np.flatnonzero(missing) + 2).tolist()  # 1-based, after header
        raise HeightDataError(f"{path}: missing values on line(s) {rows}")

    try:
        dates = pd.to_datetime(df[DATE_COLUMN], format="%Y-%m-%d")
    except ValueError as e:
        raise HeightDataError(f"{path}: column '{DATE_COLUMN}' is not ISO-8601 dates: {e}") from e

    numeric = {}
    for col in (TIME_COLUMN, HEIGHT_COLUMN):
        try:
            numeric[col] = pd.to_numeric(df[col]).astype(np.float64)
        except ValueError as e:
            raise HeightDataError(f"{path}: column '{col}' is not numeric: {e}") from e

    times = numeric[TIME_COLUMN]
    bad = ~((times >= 0) & (times < 24))
    if bad.any():
        rows = (np.flatnonzero(bad.to_numpy()) + 2).tolist()
        raise HeightDataError(f"{path}: '{TIME_COLUMN}' outside [0, 24) on line(s) {rows}")

    out = pd.DataFrame({
        DATE_COLUMN: dates,
        TIME_COLUMN: times,
        HEIGHT_COLUMN: numeric[HEIGHT_COLUMN],
    })
    if len(out):
        print(f"[load] {path}: {len(out)} rows, "
              f"{out[DATE_COLUMN].min():%Y-%m-%d} to {out[DATE_COLUMN].max():%Y-%m-%d}")
    else:
        print(f"[load] {path}: no data rows")
    return out
