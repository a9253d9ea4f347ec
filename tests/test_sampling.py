import numpy as np
import pymc as pm
import pytest

from heightmodel.model import FIXED_SIGMA_MODEL, HEIGHT_MODEL, build_model
from heightmodel.sampling import SamplerConfig, _make_step, sample_posterior, sample_prior
from heightmodel.utils import stacked_draws


@pytest.mark.parametrize("kwargs", [
    {"sampler": "gibbs"},
    {"chains": 0},
    {"draws": 0},
    {"tune": -1},
    {"target_accept": 1.0},
    {"step_size": 0.0},
    {"n_leapfrog": 0},
])
def test_sampler_config_validation(kwargs):
    with pytest.raises(ValueError):
        SamplerConfig(**kwargs)


def test_default_sampler_config_is_canonical():
    cfg = SamplerConfig()
    assert cfg.sampler == "nuts"
    assert (cfg.chains, cfg.draws, cfg.tune) == (8, 1000, 1000)
    assert cfg.target_accept == 0.65
    assert cfg.discard_tuned_samples


def test_nuts_step_uses_target_accept():
    model = build_model(HEIGHT_MODEL, [196.0, 196.5, 197.0])
    with model:
        step = _make_step(model, SamplerConfig(target_accept=0.9))
    assert isinstance(step, pm.NUTS)
    assert step.target_accept == 0.9


def test_hmc_step_has_fixed_step_size_and_leapfrog_count():
    model = build_model(HEIGHT_MODEL, [196.0, 196.5, 197.0])
    cfg = SamplerConfig(sampler="hmc", step_size=0.05, n_leapfrog=10)
    with model:
        step = _make_step(model, cfg)
    assert isinstance(step, pm.HamiltonianMC)
    assert not step.adapt_step_size
    assert step.step_size == pytest.approx(0.05)
    assert int(step.path_length / step.step_size) == 10


def test_prior_only_sampling_ignores_data():
    idata = sample_prior(HEIGHT_MODEL, n_obs=30, draws=400, seed=3, chains=1)
    heights = idata.prior["height"].values
    assert heights.shape == (1, 400, 30)
    mu = stacked_draws(idata, "mu", group="prior")
    sigma = stacked_draws(idata, "sigma", group="prior")
    assert mu.mean() == pytest.approx(196.0, abs=0.15)
    assert mu.std() == pytest.approx(0.75, abs=0.1)
    assert (sigma > 0).all()
    assert sigma.mean() == pytest.approx(1.0, abs=0.2)


def test_prior_only_sampling_with_fixed_sigma():
    idata = sample_prior(FIXED_SIGMA_MODEL, n_obs=5, draws=100, seed=3, chains=1)
    assert "sigma" not in idata.prior
    assert idata.prior["height"].shape == (1, 100, 5)


def test_prior_only_sampling_returns_only_prior_group():
    idata = sample_prior(HEIGHT_MODEL, n_obs=5, draws=20, seed=1, chains=1)
    assert idata.groups() == ["prior"]
    assert set(idata.prior.data_vars) == {"mu", "sigma", "height"}


def test_prior_only_sampling_splits_draws_into_chains():
    idata = sample_prior(HEIGHT_MODEL, n_obs=7, draws=60, seed=2, chains=4)
    assert idata.prior["mu"].shape == (4, 60)
    assert idata.prior["sigma"].shape == (4, 60)
    assert idata.prior["height"].shape == (4, 60, 7)
    # chains are independent blocks, not copies of one another
    mu = idata.prior["mu"].values
    assert not np.allclose(mu[0], mu[1])


@pytest.mark.parametrize("kwargs", [{"chains": 0}, {"draws": 0}])
def test_prior_only_sampling_rejects_empty_layout(kwargs):
    with pytest.raises(ValueError):
        sample_prior(HEIGHT_MODEL, n_obs=5, **kwargs)


@pytest.mark.slow
def test_parameter_recovery_on_synthetic_data():
    rng = np.random.default_rng(11)
    heights = rng.normal(196.0, 0.5, size=2000)
    cfg = SamplerConfig(chains=2, draws=500, tune=500, cores=1, seed=11)
    idata = sample_posterior(heights, HEIGHT_MODEL, cfg)
    assert idata.posterior["mu"].shape == (2, 500)
    assert stacked_draws(idata, "mu").mean() == pytest.approx(196.0, abs=0.1)
    assert stacked_draws(idata, "sigma").mean() == pytest.approx(0.5, abs=0.05)


@pytest.mark.slow
def test_hmc_fit_with_fixed_sigma(height_df):
    heights = height_df["height_cm"].to_numpy()
    cfg = SamplerConfig(sampler="hmc", chains=2, draws=500, tune=300, cores=1, seed=5)
    idata = sample_posterior(heights, FIXED_SIGMA_MODEL, cfg)
    assert "sigma" not in idata.posterior
    # Prior weight is small next to 30 observations with sd 0.5.
    assert stacked_draws(idata, "mu").mean() == pytest.approx(196.49, abs=0.1)


@pytest.mark.slow
def test_tuning_draws_kept_on_request():
    cfg = SamplerConfig(chains=1, draws=100, tune=50, cores=1,
                        discard_tuned_samples=False)
    idata = sample_posterior([196.0, 196.4, 196.9, 197.1], HEIGHT_MODEL, cfg)
    assert idata.warmup_posterior["mu"].shape == (1, 50)
    assert idata.posterior["mu"].shape == (1, 100)
