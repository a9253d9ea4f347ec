import numpy as np
import pandas as pd
import pytest

from heightmodel.config import WEEKDAYS
from heightmodel.utils import (
    WEEKDAY_COLUMN, add_weekday, describe_heights, informative_times, stacked_draws,
)


def _frame(dates):
    return pd.DataFrame({
        "date": pd.to_datetime(dates),
        "time_hours": np.arange(len(dates), dtype=float),
        "height_cm": np.full(len(dates), 196.0),
    })


def test_weekday_labels_known_dates():
    df = add_weekday(_frame(["2021-10-04", "2021-10-09", "2021-10-10", "2024-02-29"]))
    assert df[WEEKDAY_COLUMN].tolist() == ["Monday", "Saturday", "Sunday", "Thursday"]


def test_weekday_is_ordered_categorical_over_fixed_week():
    df = add_weekday(_frame(["2021-10-06"]))
    col = df[WEEKDAY_COLUMN]
    assert col.cat.ordered
    assert list(col.cat.categories) == list(WEEKDAYS)
    assert WEEKDAYS[0] == "Monday" and WEEKDAYS[-1] == "Sunday"


def test_weekday_is_deterministic_and_pure():
    base = _frame(["2021-10-04", "2021-10-05", "2021-10-04"])
    first = add_weekday(base)
    second = add_weekday(base)
    assert WEEKDAY_COLUMN not in base.columns
    assert first[WEEKDAY_COLUMN].tolist() == second[WEEKDAY_COLUMN].tolist()
    assert first[WEEKDAY_COLUMN].iloc[0] == first[WEEKDAY_COLUMN].iloc[2]


def test_weekday_on_shipped_data(height_df):
    df = add_weekday(height_df)
    assert set(df[WEEKDAY_COLUMN]) <= set(WEEKDAYS)
    assert df[WEEKDAY_COLUMN].iloc[0] == "Monday"


def test_informative_times_drops_midnight(height_df):
    view = informative_times(height_df)
    assert len(view) == len(height_df) - 1
    assert (view["time_hours"] != 0).all()


def test_describe_heights():
    df = pd.DataFrame({"height_cm": [196.0, 197.0, 195.0]})
    d = describe_heights(df)
    assert d["n"] == 3
    assert d["mean"] == pytest.approx(196.0)
    assert d["sd"] == pytest.approx(1.0)
    assert (d["min"], d["max"]) == (195.0, 197.0)


def test_stacked_draws_flattens_chains(synthetic_idata):
    mu = stacked_draws(synthetic_idata, "mu")
    assert mu.shape == (2000,)
    assert mu.mean() == pytest.approx(196.5, abs=0.02)
