"""Convergence summaries and diagnostic plots for a posterior fit.

Everything here reports; nothing gates.  A fit with a large R-hat is printed
and plotted like any other so the reader can judge it.
"""

from typing import Optional, Sequence, Tuple

import numpy as np
import pandas as pd
import arviz as az

from heightmodel.config import CREDIBLE_PROB, PlotConfig
from heightmodel.utils import stacked_draws

SUMMARY_COLUMNS = ["mean", "sd", "ess_bulk", "ess_tail", "r_hat"]


def summarize_posterior(idata: az.InferenceData,
                        var_names: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """Per-parameter mean, sd, HDI, MCSE, bulk/tail ESS and rank-normalised R-hat."""
    summary = az.summary(idata, var_names=list(var_names) if var_names else None,
                         kind="all", round_to="none")
    print("[diagnostics] posterior summary")
    print(summary[SUMMARY_COLUMNS].to_string(float_format=lambda v: f"{v:.4g}"))
    return summary


def credible_interval(idata: az.InferenceData, var_name: str,
                      prob: float = CREDIBLE_PROB) -> Tuple[float, float]:
    """Equal-tailed credible interval containing *prob* of the posterior mass."""
    if not 0 < prob < 1:
        raise ValueError(f"prob must be in (0, 1), got {prob}")
    draws = stacked_draws(idata, var_name)
    tail = (1.0 - prob) / 2.0
    lo, hi = np.quantile(draws, [tail, 1.0 - tail])
    return float(lo), float(hi)


def posterior_mean(idata: az.InferenceData, var_name: str) -> float:
    return float(np.mean(stacked_draws(idata, var_name)))


def _figure_of(axes):
    return np.asarray(axes).ravel()[0].get_figure()


def plot_trace(idata: az.InferenceData, var_names: Sequence[str],
               plot_config: PlotConfig, name: str = "trace"):
    """Per-chain densities (left) and values by iteration (right)."""
    with plot_config.context():
        axes = az.plot_trace(idata, var_names=list(var_names), compact=False,
                             figsize=plot_config.figsize)
        fig = _figure_of(axes)
        fig.suptitle("Trace and per-chain density")
    return plot_config.save(fig, name)


def plot_autocorr(idata: az.InferenceData, var_names: Sequence[str],
                  plot_config: PlotConfig, name: str = "autocorr"):
    with plot_config.context():
        axes = az.plot_autocorr(idata, var_names=list(var_names), combined=True,
                                figsize=plot_config.figsize)
        fig = _figure_of(axes)
    return plot_config.save(fig, name)


def plot_posterior(idata: az.InferenceData, var_names: Sequence[str],
                   plot_config: PlotConfig, name: str = "posterior",
                   prob: float = CREDIBLE_PROB):
    """Marginal posterior density of each parameter with the equal-tailed
    interval from :func:`credible_interval` marked by dotted lines."""
    var_names = list(var_names)
    pct = round(100 * prob)
    with plot_config.context():
        axes = az.plot_posterior(idata, var_names=var_names, hdi_prob="hide",
                                 figsize=plot_config.figsize)
        for ax, var in zip(np.asarray(axes).ravel(), var_names):
            lo, hi = credible_interval(idata, var, prob)
            ax.axvline(lo, color="k", linestyle=":")
            ax.axvline(hi, color="k", linestyle=":")
            ax.set_title(f"{var}: {pct}% equal-tailed interval [{lo:.2f}, {hi:.2f}]")
        fig = _figure_of(axes)
    return plot_config.save(fig, name)
