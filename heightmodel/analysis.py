"""End-to-end height analysis and its summary tables.

Two main entry points:
  - analyze_height(): the full pipeline for one measurement table, from
    exploratory plots through sampling, diagnostics and the posterior
    predictive check.
  - summary_tables(): turns the result dict into printable / HTML tables.
"""

from typing import List, Optional

import pandas as pd

from heightmodel.config import (
    SEED, PPC_N_DRAWS, N_PRIOR_DRAWS, CREDIBLE_PROB, PRIOR_CHECK_PROBS,
    HEIGHT_COLUMN, PlotConfig,
)
from heightmodel.model import HEIGHT_MODEL, HeightModelSpec, FixedValue
from heightmodel.sampling import SamplerConfig, sample_posterior, sample_prior
from heightmodel.diagnostics import (
    SUMMARY_COLUMNS, summarize_posterior, credible_interval, posterior_mean,
    plot_trace, plot_autocorr, plot_posterior,
)
from heightmodel.plotting import (
    plot_height_by_weekday, plot_height_by_time, plot_height_density,
    plot_prior_vs_data,
)
from heightmodel.ppc import (
    simulate_replicates, replicates_to_long, prior_replicates_long,
    plot_predictive_density,
)
from heightmodel.utils import add_weekday, describe_heights


def analyze_height(
    df: pd.DataFrame,
    *,
    spec: HeightModelSpec = HEIGHT_MODEL,
    sampler_config: Optional[SamplerConfig] = None,
    plot_config: Optional[PlotConfig] = None,
    n_ppc_draws: int = PPC_N_DRAWS,
    n_prior_draws: int = N_PRIOR_DRAWS,
    credible_prob: float = CREDIBLE_PROB,
    seed: int = SEED,
) -> dict:
    """Run the analysis pipeline on a loaded measurement table.

    Pipeline steps:
      1. Derive the weekday column and describe the heights.
      2. Exploratory plots: by weekday, by time of day, density, prior vs data.
      3. Prior predictive check from the predictive version of the model.
      4. Posterior sampling.
      5. Diagnostics: summary table, trace, autocorrelation, marginals.
      6. Posterior predictive check on a subset of draws.

    Args:
        df: Table returned by ``loaders.load_height_data``.
        spec: Model specification (priors + likelihood).
        sampler_config: Engine settings; defaults to ``SamplerConfig(seed=seed)``.
        plot_config: Figure settings; defaults to ``PlotConfig()``.
        n_ppc_draws: Posterior draws used for replicate datasets.
        n_prior_draws: Draws per chain for the prior predictive check.
        credible_prob: Mass of the reported credible intervals.
        seed: Seed for prior sampling and replicate simulation.

    Returns:
        Dictionary with keys: data_summary, spec, sampler_config, prior_checks,
        idata, prior_idata, summary, posterior_means, credible_intervals,
        credible_prob, ppc_wide, ppc_long, figures.
    """
    sampler_config = sampler_config or SamplerConfig(seed=seed)
    plot_config = plot_config or PlotConfig()
    results = {"spec": spec, "sampler_config": sampler_config, "credible_prob": credible_prob}
    figures = {}

    # Step 1: derived columns and a description of the raw data.
    df = add_weekday(df)
    heights = df[HEIGHT_COLUMN].to_numpy(dtype=float)
    results["data_summary"] = describe_heights(df)
    ds = results["data_summary"]
    print(f"[data] n={ds['n']}, mean={ds['mean']:.2f} cm, sd={ds['sd']:.2f} cm, "
          f"range {ds['min']:.1f}-{ds['max']:.1f} cm")

    # Prior percentiles as communicated in the report.
    results["prior_checks"] = {
        name: dict(zip(PRIOR_CHECK_PROBS, prior.quantiles(PRIOR_CHECK_PROBS).tolist()))
        for name, prior in spec.priors.items()
        if not isinstance(prior, FixedValue)
    }

    # Step 2: exploratory plots.
    figures["height_by_weekday"] = plot_height_by_weekday(df, plot_config)
    figures["height_by_time"] = plot_height_by_time(df, plot_config)
    figures["height_density"] = plot_height_density(df, plot_config)
    figures["prior_vs_data"] = plot_prior_vs_data(
        df, spec.priors[spec.likelihood.loc], plot_config)

    # Step 3: prior predictive check.
    prior_idata = sample_prior(spec, n_obs=len(heights), draws=n_prior_draws,
                               seed=seed, chains=sampler_config.chains)
    results["prior_idata"] = prior_idata
    figures["prior_predictive"] = plot_predictive_density(
        prior_replicates_long(prior_idata, spec), heights, plot_config,
        reference=spec.priors[spec.likelihood.loc].mean_value(),
        reference_label="prior mean of mu",
        title="Prior predictive check", name="prior_predictive",
    )

    # Step 4: posterior.
    idata = sample_posterior(heights, spec, sampler_config)
    results["idata"] = idata

    # Step 5: diagnostics.
    params = list(spec.free_parameters)
    results["summary"] = summarize_posterior(idata, params)
    results["posterior_means"] = {p: posterior_mean(idata, p) for p in params}
    results["credible_intervals"] = {p: credible_interval(idata, p, credible_prob) for p in params}
    figures["trace"] = plot_trace(idata, params, plot_config)
    figures["autocorr"] = plot_autocorr(idata, params, plot_config)
    figures["posterior"] = plot_posterior(idata, params, plot_config, prob=credible_prob)

    # Step 6: posterior predictive check.
    wide = simulate_replicates(idata, spec, n_draws=n_ppc_draws, n_obs=len(heights), seed=seed)
    long = replicates_to_long(wide)
    results["ppc_wide"] = wide
    results["ppc_long"] = long
    figures["posterior_predictive"] = plot_predictive_density(
        long, heights, plot_config,
        reference=results["posterior_means"][spec.likelihood.loc],
    )

    results["figures"] = figures
    return results


def summary_tables(results: dict) -> List[dict]:
    """Summary tables as dicts with keys {title, headers, rows}.

    The same tables are printed to stdout and embedded in the HTML report.
    """
    tables = []

    ds = results["data_summary"]
    tables.append({
        "title": "Measured heights",
        "headers": ["n", "mean (cm)", "sd (cm)", "min (cm)", "max (cm)"],
        "rows": [[str(ds["n"]), f"{ds['mean']:.2f}", f"{ds['sd']:.2f}",
                  f"{ds['min']:.1f}", f"{ds['max']:.1f}"]],
    })

    spec = results["spec"]
    prior_rows = []
    for name, prior in spec.priors.items():
        q = results["prior_checks"].get(name)
        cells = [f"{q[p]:.2f}" for p in PRIOR_CHECK_PROBS] if q else ["-"] * len(PRIOR_CHECK_PROBS)
        prior_rows.append([name, prior.describe()] + cells)
    tables.append({
        "title": "Priors",
        "headers": ["Parameter", "Prior"] + [f"q{int(p * 100)}" for p in PRIOR_CHECK_PROBS],
        "rows": prior_rows,
    })

    summary = results["summary"]
    prob = results["credible_prob"]
    post_rows = []
    for name in summary.index:
        lo, hi = results["credible_intervals"][name]
        row = summary.loc[name, SUMMARY_COLUMNS]
        post_rows.append([
            name, f"{row['mean']:.3f}", f"{row['sd']:.3f}", f"{lo:.3f}", f"{hi:.3f}",
            f"{row['ess_bulk']:.0f}", f"{row['ess_tail']:.0f}", f"{row['r_hat']:.3f}",
        ])
    tables.append({
        "title": f"Posterior summary ({int(round(prob * 100))}% equal-tailed intervals)",
        "headers": ["Parameter", "mean", "sd", "lower", "upper", "ESS bulk", "ESS tail", "R-hat"],
        "rows": post_rows,
    })

    for t in tables:
        print(f"\n{t['title']}")
        print("  ".join(h.rjust(12) for h in t["headers"]))
        print("-" * (14 * len(t["headers"])))
        for row in t["rows"]:
            print("  ".join(c.rjust(12) for c in row))

    return tables
