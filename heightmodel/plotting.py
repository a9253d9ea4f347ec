"""Exploratory plots of the raw measurements.

Each function builds one figure under the given ``PlotConfig``, saves it and
returns the path.  Height axes are clipped to ``plot_config.height_range``.
"""

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
from scipy.stats import gaussian_kde

from heightmodel.config import TIME_COLUMN, HEIGHT_COLUMN, WEEKDAYS, PlotConfig
from heightmodel.utils import WEEKDAY_COLUMN, add_weekday, informative_times

# Points on the height grid used for density curves.
N_GRID = 400


def height_grid(plot_config: PlotConfig, n: int = N_GRID) -> np.ndarray:
    lo, hi = plot_config.height_range
    return np.linspace(lo, hi, n)


def plot_height_by_weekday(df: pd.DataFrame, plot_config: PlotConfig,
                           name: str = "height_by_weekday"):
    if WEEKDAY_COLUMN not in df.columns:
        df = add_weekday(df)
    x = df[WEEKDAY_COLUMN].cat.codes.to_numpy()
    with plot_config.context():
        fig, ax = plt.subplots()
        ax.scatter(x, df[HEIGHT_COLUMN], alpha=0.7, edgecolor="black")
        ax.set_xticks(range(len(WEEKDAYS)))
        ax.set_xticklabels(WEEKDAYS, rotation=30)
        ax.set_ylim(*plot_config.height_range)
        ax.set_xlabel("weekday"); ax.set_ylabel("height (cm)")
        ax.set_title("Height by day of the week")
        ax.grid(True, linestyle="--", linewidth=0.5)
    return plot_config.save(fig, name)


def plot_height_by_time(df: pd.DataFrame, plot_config: PlotConfig,
                        name: str = "height_by_time"):
    """Height against time of day, without the measurements lacking a time."""
    view = informative_times(df)
    with plot_config.context():
        fig, ax = plt.subplots()
        ax.scatter(view[TIME_COLUMN], view[HEIGHT_COLUMN], alpha=0.7, edgecolor="black")
        ax.set_xlim(0, 24)
        ax.set_xticks(range(0, 25, 3))
        ax.set_ylim(*plot_config.height_range)
        ax.set_xlabel("time of day (h)"); ax.set_ylabel("height (cm)")
        ax.set_title(f"Height by time of day (n={len(view)})")
        ax.grid(True, linestyle="--", linewidth=0.5)
    return plot_config.save(fig, name)


def _data_density(ax, heights: np.ndarray, grid: np.ndarray, **kwargs):
    kde = gaussian_kde(heights)
    ax.plot(grid, kde(grid), **kwargs)
    ax.plot(heights, np.zeros_like(heights), "|", color="black", markersize=12)


def plot_height_density(df: pd.DataFrame, plot_config: PlotConfig,
                        name: str = "height_density"):
    heights = df[HEIGHT_COLUMN].to_numpy(dtype=float)
    grid = height_grid(plot_config)
    with plot_config.context():
        fig, ax = plt.subplots()
        _data_density(ax, heights, grid, linewidth=2, label="data")
        ax.set_xlim(*plot_config.height_range)
        ax.set_xlabel("height (cm)"); ax.set_ylabel("density")
        ax.set_title("Density of measured heights")
        ax.grid(True, linestyle="--", linewidth=0.5)
    return plot_config.save(fig, name)


def plot_prior_vs_data(df: pd.DataFrame, prior, plot_config: PlotConfig,
                       name: str = "prior_vs_data"):
    """Prior density of mu on the same axes as the density of the data."""
    heights = df[HEIGHT_COLUMN].to_numpy(dtype=float)
    grid = height_grid(plot_config)
    with plot_config.context():
        fig, ax = plt.subplots()
        _data_density(ax, heights, grid, linewidth=2, label="data")
        ax.plot(grid, prior.pdf(grid), linewidth=2, linestyle="--",
                label=f"prior on mu: {prior.describe()}")
        ax.set_xlim(*plot_config.height_range)
        ax.set_xlabel("height (cm)"); ax.set_ylabel("density")
        ax.set_title("Prior belief vs. measured heights")
        ax.grid(True, linestyle="--", linewidth=0.5)
        ax.legend()
    return plot_config.save(fig, name)
