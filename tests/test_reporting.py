import json
import tarfile

import pytest

from heightmodel.analysis import summary_tables
from heightmodel.config import PRIOR_CHECK_PROBS
from heightmodel.diagnostics import credible_interval, posterior_mean, summarize_posterior
from heightmodel.model import HEIGHT_MODEL
from heightmodel.plotting import plot_height_density
from heightmodel.ppc import simulate_replicates
from heightmodel.reporting import build_html_report, narrative, save_artifacts
from heightmodel.sampling import SamplerConfig
from heightmodel.utils import describe_heights


@pytest.fixture
def results(synthetic_idata, height_df, plot_config):
    params = list(HEIGHT_MODEL.free_parameters)
    return {
        "spec": HEIGHT_MODEL,
        "sampler_config": SamplerConfig(chains=4, draws=500),
        "credible_prob": 0.95,
        "data_summary": describe_heights(height_df),
        "prior_checks": {
            "mu": dict(zip(PRIOR_CHECK_PROBS,
                           HEIGHT_MODEL.priors["mu"].quantiles(PRIOR_CHECK_PROBS).tolist())),
            "sigma": dict(zip(PRIOR_CHECK_PROBS,
                              HEIGHT_MODEL.priors["sigma"].quantiles(PRIOR_CHECK_PROBS).tolist())),
        },
        "summary": summarize_posterior(synthetic_idata, params),
        "posterior_means": {p: posterior_mean(synthetic_idata, p) for p in params},
        "credible_intervals": {p: credible_interval(synthetic_idata, p) for p in params},
        "ppc_wide": simulate_replicates(synthetic_idata, n_draws=100, seed=0),
        "figures": {"height_density": plot_height_density(height_df, plot_config)},
    }


def test_summary_tables(results):
    tables = summary_tables(results)
    assert [t["title"] for t in tables][:2] == ["Measured heights", "Priors"]
    post = tables[-1]
    assert post["headers"][-1] == "R-hat"
    assert [row[0] for row in post["rows"]] == ["mu", "sigma"]
    prior_rows = {row[0]: row for row in tables[1]["rows"]}
    assert prior_rows["mu"][2:] == ["195.04", "196.00", "196.96"]


def test_narrative_inlines_fitted_numbers(results):
    text = " ".join(narrative(results))
    mu_mean = results["posterior_means"]["mu"]
    lo, hi = results["credible_intervals"]["mu"]
    assert f"{mu_mean:.2f} cm" in text
    assert f"from {lo:.2f} to {hi:.2f} cm" in text
    assert "195.04, 196.00 and 196.96 cm" in text
    assert "4 chains of 500 draws" in text


def test_save_artifacts(results, plot_config, tmp_path):
    out_dir = tmp_path / "results"
    ckpt_path = save_artifacts(results, out_dir, plot_config.fig_dir)
    ckpt = json.loads(ckpt_path.read_text())
    assert ckpt["config"]["model"]["mu"] == {"family": "NormalPrior", "mean": 196.0, "sd": 0.75}
    assert ckpt["config"]["sampler"]["chains"] == 4
    assert set(ckpt["posterior_summary"]) == {"mu", "sigma"}
    assert ckpt["credible_intervals"]["mu"][0] < ckpt["credible_intervals"]["mu"][1]
    with tarfile.open(out_dir / "figures.tar.gz") as tar:
        assert any(n.endswith("height_density.png") for n in tar.getnames())


def test_build_html_report(results, plot_config, tmp_path):
    out = build_html_report(results, plot_config.fig_dir, tmp_path / "report.html",
                            tables=summary_tables(results))
    page = out.read_text(encoding="utf-8")
    assert page.startswith("<!DOCTYPE html>")
    assert page.count("data:image/png;base64,") == 1
    assert "Posterior summary" in page
    assert f"{results['posterior_means']['mu']:.2f} cm" in page
