"""Thin boundary around PyMC's samplers.

Two posterior samplers are supported:

``nuts``
    the No-U-Turn sampler with step-size adaptation during tuning;
``hmc``
    plain Hamiltonian Monte Carlo with a fixed step size and a fixed number
    of leapfrog steps per iteration (no step-size adaptation, no jitter).

The prior-only mode draws from the ``predictive`` version of the model, so
heights are simulated rather than conditioned on.

Chains run in parallel through PyMC's ``cores`` option; this module does no
coordination of its own and lets engine errors propagate.
"""

from dataclasses import asdict, dataclass
from typing import Optional, Sequence

import numpy as np
import pymc as pm
import arviz as az

from heightmodel.config import (
    SEED, SAMPLER, N_CHAINS, N_DRAWS, N_TUNE, TARGET_ACCEPT,
    DISCARD_TUNED_SAMPLES, HMC_STEP_SIZE, HMC_N_LEAPFROG, N_PRIOR_DRAWS,
)
from heightmodel.model import HEIGHT_MODEL, HeightModelSpec, build_model

SAMPLERS = ("nuts", "hmc")


@dataclass(frozen=True)
class SamplerConfig:
    """Everything passed to the engine for one posterior fit."""

    sampler: str = SAMPLER
    chains: int = N_CHAINS
    draws: int = N_DRAWS
    tune: int = N_TUNE
    target_accept: float = TARGET_ACCEPT
    step_size: float = HMC_STEP_SIZE
    n_leapfrog: int = HMC_N_LEAPFROG
    discard_tuned_samples: bool = DISCARD_TUNED_SAMPLES
    cores: Optional[int] = None
    seed: int = SEED
    progressbar: bool = False

    def __post_init__(self):
        if self.sampler not in SAMPLERS:
            raise ValueError(f"sampler must be one of {SAMPLERS}, got {self.sampler!r}")
        if self.chains < 1 or self.draws < 1 or self.tune < 0:
            raise ValueError(
                f"need chains >= 1, draws >= 1, tune >= 0 "
                f"(got {self.chains}, {self.draws}, {self.tune})"
            )
        if not 0 < self.target_accept < 1:
            raise ValueError(f"target_accept must be in (0, 1), got {self.target_accept}")
        if self.step_size <= 0 or self.n_leapfrog < 1:
            raise ValueError("HMC needs step_size > 0 and n_leapfrog >= 1")

    def as_dict(self) -> dict:
        return asdict(self)


def _make_step(model: pm.Model, config: SamplerConfig):
    """Build the step method; must be called inside the model context."""
    if config.sampler == "nuts":
        return pm.NUTS(target_accept=config.target_accept)

    # PyMC scales the requested step by ndim**-0.25; undo that so the
    # leapfrog step equals config.step_size.
    ndim = int(sum(np.size(v) for v in model.initial_point().values()))
    step_scale = config.step_size * ndim ** 0.25
    # The sampler runs int(path_length / step_size) leapfrog steps; the extra
    # half step keeps float rounding from dropping one.
    path_length = config.step_size * (config.n_leapfrog + 0.5)
    return pm.HamiltonianMC(
        path_length=path_length,
        step_scale=step_scale,
        adapt_step_size=False,
        step_rand=None,
        target_accept=config.target_accept,
    )


def sample_posterior(
    height: Sequence[float],
    spec: HeightModelSpec = HEIGHT_MODEL,
    config: SamplerConfig = SamplerConfig(),
) -> az.InferenceData:
    """Fit *spec* to the measured heights and return the posterior draws.

    The result has a ``posterior`` group with (chain, draw) dimensions and a
    ``sample_stats`` group; tuning draws are kept only when
    ``config.discard_tuned_samples`` is False.
    """
    model = build_model(spec, height, mode="observed")
    cores = config.cores if config.cores is not None else config.chains
    print(f"[sample] {config.sampler.upper()}: {config.chains} chains x "
          f"{config.draws} draws (+{config.tune} tuning), cores={cores}")
    with model:
        step = _make_step(model, config)
        idata = pm.sample(
            draws=config.draws,
            tune=config.tune,
            chains=config.chains,
            cores=cores,
            step=step,
            random_seed=config.seed,
            discard_tuned_samples=config.discard_tuned_samples,
            progressbar=config.progressbar,
            return_inferencedata=True,
        )
    return idata


def sample_prior(
    spec: HeightModelSpec = HEIGHT_MODEL,
    n_obs: int = 30,
    draws: int = N_PRIOR_DRAWS,
    seed: int = SEED,
    chains: int = N_CHAINS,
) -> az.InferenceData:
    """Draw from the prior, ignoring any data.

    In the predictive model the heights are unobserved random variables, so
    the result has a single ``prior`` group holding both the parameters and
    ``spec.observed_name``.  Forward draws are exact; they are split into
    *chains* blocks so the layout matches a posterior fit, giving shape
    (chains, draws) for parameters and (chains, draws, n_obs) for heights.
    """
    if chains < 1 or draws < 1:
        raise ValueError(f"need chains >= 1 and draws >= 1 (got {chains}, {draws})")
    model = build_model(spec, mode="predictive", n_obs=n_obs)
    print(f"[sample] prior only: {chains} chains x {draws} draws of {n_obs} heights")
    with model:
        flat = pm.sample_prior_predictive(chains * draws, random_seed=seed)
    prior = {}
    for name in flat.prior.data_vars:
        values = flat.prior[name].values
        prior[name] = values.reshape((chains, draws) + values.shape[2:])
    return az.from_dict(prior=prior)
