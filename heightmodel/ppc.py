"""Posterior (and prior) predictive checks.

For a random subset of posterior draws a replicate dataset of the same size
as the observations is simulated from Normal(mu, sigma).  The replicates are
held in a wide table (one row per draw, one column per replicate height),
reshaped to a long table and compared with the data visually.  No closeness
statistic is computed.
"""

from typing import Optional, Sequence

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import arviz as az
from scipy.stats import gaussian_kde

from heightmodel.config import SEED, PPC_N_DRAWS, HEIGHT_COLUMN, PlotConfig
from heightmodel.model import HEIGHT_MODEL, FixedValue, HeightModelSpec
from heightmodel.plotting import height_grid
from heightmodel.utils import stacked_draws

DRAW_COLUMN = "draw"
OBS_COLUMN = "obs"
REPLICATE_PREFIX = "height_"


def draw_replicates(loc, scale, n_obs: int, rng: np.random.Generator) -> np.ndarray:
    """Simulate *n_obs* heights for each (loc, scale) pair.

    Returns an array of shape (len(loc), n_obs); scalars give one row.
    """
    loc = np.atleast_1d(np.asarray(loc, dtype=float))
    scale = np.broadcast_to(np.asarray(scale, dtype=float), loc.shape)
    if np.any(scale <= 0):
        raise ValueError("scale must be positive")
    return rng.normal(loc[:, None], scale[:, None], size=(loc.size, int(n_obs)))


def _parameter_draws(idata: az.InferenceData, spec: HeightModelSpec, name: str) -> np.ndarray:
    prior = spec.priors[name]
    if isinstance(prior, FixedValue):
        if not spec.free_parameters:
            raise ValueError("model has no sampled parameters to simulate from")
        n = stacked_draws(idata, spec.free_parameters[0]).size
        return np.full(n, float(prior.value))
    return stacked_draws(idata, name)


def simulate_replicates(
    idata: az.InferenceData,
    spec: HeightModelSpec = HEIGHT_MODEL,
    *,
    n_draws: int = PPC_N_DRAWS,
    n_obs: int = 30,
    seed: int = SEED,
) -> pd.DataFrame:
    """Wide table of replicate datasets, one row per sampled posterior draw.

    Draws are chosen without replacement from all (chain, draw) pairs; if
    fewer than *n_draws* exist, every draw is used.  The ``draw`` column is
    the flat index of the posterior draw.
    """
    loc = _parameter_draws(idata, spec, spec.likelihood.loc)
    scale = _parameter_draws(idata, spec, spec.likelihood.scale)
    rng = np.random.default_rng(seed)
    k = int(min(n_draws, loc.size))
    idx = np.sort(rng.choice(loc.size, size=k, replace=False))

    sims = draw_replicates(loc[idx], scale[idx], n_obs, rng)
    wide = pd.DataFrame(sims, columns=[f"{REPLICATE_PREFIX}{i + 1}" for i in range(n_obs)])
    wide.insert(0, DRAW_COLUMN, idx)
    print(f"[ppc] simulated {k} replicate datasets of {n_obs} heights")
    return wide


def replicates_to_long(wide: pd.DataFrame) -> pd.DataFrame:
    """Reshape to (draw, obs, height_cm), obs numbered from 1."""
    long = wide.melt(id_vars=[DRAW_COLUMN], var_name=OBS_COLUMN, value_name=HEIGHT_COLUMN)
    long[OBS_COLUMN] = long[OBS_COLUMN].str.slice(len(REPLICATE_PREFIX)).astype(int)
    return long.sort_values([DRAW_COLUMN, OBS_COLUMN], ignore_index=True)


def prior_replicates_long(prior_idata: az.InferenceData,
                          spec: HeightModelSpec = HEIGHT_MODEL) -> pd.DataFrame:
    """Long table of heights simulated by ``sampling.sample_prior``."""
    sims = prior_idata.prior[spec.observed_name].values
    sims = sims.reshape(-1, sims.shape[-1])
    wide = pd.DataFrame(sims, columns=[f"{REPLICATE_PREFIX}{i + 1}" for i in range(sims.shape[1])])
    wide.insert(0, DRAW_COLUMN, np.arange(sims.shape[0]))
    return replicates_to_long(wide)


def plot_predictive_density(
    long: pd.DataFrame,
    observed: Sequence[float],
    plot_config: PlotConfig,
    *,
    reference: Optional[float] = None,
    reference_label: str = "posterior mean of mu",
    title: str = "Posterior predictive check",
    name: str = "posterior_predictive",
):
    """Density of all simulated heights against the density of the data."""
    sims = long[HEIGHT_COLUMN].to_numpy(dtype=float)
    obs = np.asarray(observed, dtype=float)
    grid = height_grid(plot_config)
    with plot_config.context():
        fig, ax = plt.subplots()
        ax.plot(grid, gaussian_kde(sims)(grid), linewidth=2, label="simulated")
        ax.plot(grid, gaussian_kde(obs)(grid), linewidth=2, color="black", label="observed")
        if reference is not None:
            ax.axvline(reference, color="red", linestyle="--", linewidth=1.5,
                       label=f"{reference_label} = {reference:.2f}")
        ax.set_xlim(*plot_config.height_range)
        ax.set_xlabel("height (cm)"); ax.set_ylabel("density")
        ax.set_title(f"{title} ({long[DRAW_COLUMN].nunique()} replicates)")
        ax.grid(True, linestyle="--", linewidth=0.5)
        ax.legend()
    return plot_config.save(fig, name)
