"""Declarative specification of the height model and its PyMC translation.

The generative model is

    mu       ~ Normal(196, 0.75)
    sigma    ~ Exponential(1)          (fixed at 0.5 in the first version)
    height_i ~ Normal(mu, sigma)       i = 1..n, independent given (mu, sigma)

It is written down as data -- a mapping of parameter name to prior record plus
a likelihood record naming the parameters it uses -- and only turned into a
``pymc.Model`` by ``build_model``.  The same record serves two modes:

``observed``
    the likelihood conditions on the measured heights (posterior sampling);
``predictive``
    the heights are left unobserved so the model simulates them (prior
    predictive sampling).

Each prior record also exposes its closed-form distribution through
``scipy.stats`` so the prior can be checked and plotted without sampling.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Sequence, Tuple

import numpy as np
import pymc as pm
from scipy import stats

from heightmodel.config import (
    PRIOR_MU_MEAN, PRIOR_MU_SD, PRIOR_SIGMA_RATE, FIXED_SIGMA,
)

MODES = ("observed", "predictive")


# -- Prior records --


@dataclass(frozen=True)
class NormalPrior:
    mean: float
    sd: float

    def __post_init__(self):
        if not self.sd > 0:
            raise ValueError(f"Normal prior needs sd > 0, got {self.sd}")

    def to_pymc(self, name: str):
        return pm.Normal(name, mu=self.mean, sigma=self.sd)

    def frozen(self):
        return stats.norm(loc=self.mean, scale=self.sd)

    def quantiles(self, probs: Sequence[float]) -> np.ndarray:
        return self.frozen().ppf(np.asarray(probs, dtype=float))

    def cdf(self, x) -> np.ndarray:
        return self.frozen().cdf(x)

    def pdf(self, x) -> np.ndarray:
        return self.frozen().pdf(x)

    def mean_value(self) -> float:
        return float(self.mean)

    def describe(self) -> str:
        return f"Normal(mean={self.mean:g}, sd={self.sd:g})"


@dataclass(frozen=True)
class ExponentialPrior:
    rate: float

    def __post_init__(self):
        if not self.rate > 0:
            raise ValueError(f"Exponential prior needs rate > 0, got {self.rate}")

    def to_pymc(self, name: str):
        return pm.Exponential(name, lam=self.rate)

    def frozen(self):
        # scipy parameterises the exponential by scale = 1 / rate.
        return stats.expon(scale=1.0 / self.rate)

    def quantiles(self, probs: Sequence[float]) -> np.ndarray:
        return self.frozen().ppf(np.asarray(probs, dtype=float))

    def cdf(self, x) -> np.ndarray:
        return self.frozen().cdf(x)

    def pdf(self, x) -> np.ndarray:
        return self.frozen().pdf(x)

    def mean_value(self) -> float:
        return 1.0 / self.rate

    def describe(self) -> str:
        return f"Exponential(rate={self.rate:g})"


@dataclass(frozen=True)
class FixedValue:
    """A parameter pinned to a constant; it is never sampled."""

    value: float

    def to_pymc(self, name: str):
        return self.value

    def quantiles(self, probs: Sequence[float]) -> np.ndarray:
        return np.full(np.shape(probs), float(self.value))

    def cdf(self, x) -> np.ndarray:
        return (np.asarray(x, dtype=float) >= self.value).astype(float)

    def mean_value(self) -> float:
        return float(self.value)

    def describe(self) -> str:
        return f"fixed at {self.value:g}"


# -- Likelihood and model records --


@dataclass(frozen=True)
class NormalLikelihood:
    """Per-observation Normal(loc, scale); fields name model parameters."""

    loc: str = "mu"
    scale: str = "sigma"

    @property
    def parameter_names(self) -> Tuple[str, str]:
        return (self.loc, self.scale)

    def to_pymc(self, name: str, params: Mapping[str, object], *,
                observed: Optional[np.ndarray] = None, shape: Optional[int] = None):
        return pm.Normal(
            name,
            mu=params[self.loc],
            sigma=params[self.scale],
            observed=observed,
            shape=shape,
        )

    def describe(self) -> str:
        return f"Normal({self.loc}, {self.scale})"


@dataclass(frozen=True)
class HeightModelSpec:
    """Parameter priors plus the likelihood of each observed height."""

    priors: Dict[str, object]
    likelihood: NormalLikelihood = field(default_factory=NormalLikelihood)
    observed_name: str = "height"

    def __post_init__(self):
        missing = [p for p in self.likelihood.parameter_names if p not in self.priors]
        if missing:
            raise ValueError(f"Likelihood uses parameters without a prior: {missing}")
        if self.observed_name in self.priors:
            raise ValueError(f"'{self.observed_name}' is both a parameter and the observed variable")

    @property
    def free_parameters(self) -> Tuple[str, ...]:
        """Names of the parameters that are actually inferred."""
        return tuple(name for name, prior in self.priors.items()
                     if not isinstance(prior, FixedValue))

    def describe(self) -> str:
        lines = [f"{name} ~ {prior.describe()}" if not isinstance(prior, FixedValue)
                 else f"{name} {prior.describe()}"
                 for name, prior in self.priors.items()]
        lines.append(f"{self.observed_name}[i] ~ {self.likelihood.describe()}")
        return "\n".join(lines)


# First version: sigma known.
FIXED_SIGMA_MODEL = HeightModelSpec(
    priors={
        "mu": NormalPrior(PRIOR_MU_MEAN, PRIOR_MU_SD),
        "sigma": FixedValue(FIXED_SIGMA),
    },
)

# Current version: sigma estimated.
HEIGHT_MODEL = HeightModelSpec(
    priors={
        "mu": NormalPrior(PRIOR_MU_MEAN, PRIOR_MU_SD),
        "sigma": ExponentialPrior(PRIOR_SIGMA_RATE),
    },
)


def build_model(
    spec: HeightModelSpec = HEIGHT_MODEL,
    height: Optional[Sequence[float]] = None,
    *,
    mode: str = "observed",
    n_obs: Optional[int] = None,
) -> pm.Model:
    """Translate *spec* into a ``pymc.Model``.

    Parameters
    ----------
    spec : HeightModelSpec
        Priors and likelihood.
    height : sequence of float, optional
        Measured heights; required in ``observed`` mode.
    mode : {"observed", "predictive"}
        Whether the likelihood conditions on *height* or simulates it.
    n_obs : int, optional
        Number of heights to simulate in ``predictive`` mode.  Defaults to
        ``len(height)`` when heights are given.
    """
    if mode not in MODES:
        raise ValueError(f"mode must be one of {MODES}, got {mode!r}")

    if mode == "observed":
        if height is None:
            raise ValueError("observed mode needs the measured heights")
        observed = np.asarray(height, dtype=float)
        if observed.ndim != 1 or observed.size == 0:
            raise ValueError(f"heights must be a non-empty 1-d sequence, got shape {observed.shape}")
        shape = None
    else:
        observed = None
        if n_obs is None and height is not None:
            n_obs = len(height)
        if n_obs is None or int(n_obs) < 1:
            raise ValueError("predictive mode needs n_obs >= 1")
        shape = int(n_obs)

    with pm.Model() as model:
        params = {name: prior.to_pymc(name) for name, prior in spec.priors.items()}
        spec.likelihood.to_pymc(spec.observed_name, params, observed=observed, shape=shape)
    return model
