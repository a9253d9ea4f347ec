"""
Main entry point for the height analysis.

Runs the whole pipeline top to bottom on data/height_d.csv:
  Phase 1 -- Load the measurements and derive the weekday column.
  Phase 2 -- Exploratory plots and the prior predictive check.
  Phase 3 -- Fit the model (NUTS, parallel chains) and print diagnostics.
  Phase 4 -- Posterior predictive check.
  Phase 5 -- Save the JSON checkpoint and figure archive, and build the
             HTML report with the fitted numbers filled in.

Usage:
    python scripts/run_analysis.py
"""

import os, sys

import matplotlib
matplotlib.use("Agg")

# Ensure CWD is repo root so relative data paths resolve correctly.
REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
os.chdir(REPO_ROOT)
sys.path.insert(0, REPO_ROOT)

from heightmodel.config import SEED, DATA_PATH, ARTIFACT_DIR, PlotConfig
from heightmodel.loaders import load_height_data
from heightmodel.model import HEIGHT_MODEL
from heightmodel.sampling import SamplerConfig
from heightmodel.analysis import analyze_height, summary_tables
from heightmodel.reporting import save_artifacts, build_html_report


def main():
    # --- Phase 1: data ---
    df = load_height_data(DATA_PATH)

    # --- Phases 2-4: plots, prior check, fit, diagnostics, PPC ---
    plot_config = PlotConfig()
    print("\nModel:\n" + HEIGHT_MODEL.describe())
    results = analyze_height(
        df,
        spec=HEIGHT_MODEL,
        sampler_config=SamplerConfig(seed=SEED),
        plot_config=plot_config,
        seed=SEED,
    )
    tables = summary_tables(results)

    # --- Phase 5: artifacts + report ---
    save_artifacts(results, ARTIFACT_DIR, plot_config.fig_dir)
    build_html_report(results, plot_config.fig_dir, ARTIFACT_DIR / "report.html", tables=tables)


if __name__ == "__main__":
    main()
