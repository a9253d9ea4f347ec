"""
heightmodel -- a Bayesian estimate of one person's height.

The package loads a small table of repeated height measurements, plots it,
fits a Normal model of the true height (mu) and the measurement spread
(sigma) with PyMC, and reports convergence diagnostics and a posterior
predictive check.

Key exports
-----------
load_height_data : function
    Read and type-check the measurement CSV.
HeightModelSpec, HEIGHT_MODEL, FIXED_SIGMA_MODEL
    Declarative model records (priors + likelihood) and the two shipped
    model versions.
build_model : function
    Turn a model record into a ``pymc.Model`` in observed or predictive mode.
SamplerConfig, sample_posterior, sample_prior
    Engine settings and the sampling boundary.
analyze_height : function
    Full pipeline: plots, prior check, fit, diagnostics, predictive check.
"""

from heightmodel.loaders import load_height_data, HeightDataError
from heightmodel.model import HeightModelSpec, HEIGHT_MODEL, FIXED_SIGMA_MODEL, build_model
from heightmodel.sampling import SamplerConfig, sample_posterior, sample_prior
from heightmodel.analysis import analyze_height

__version__ = "0.1.0"

__all__ = [
    "load_height_data",
    "HeightDataError",
    "HeightModelSpec",
    "HEIGHT_MODEL",
    "FIXED_SIGMA_MODEL",
    "build_model",
    "SamplerConfig",
    "sample_posterior",
    "sample_prior",
    "analyze_height",
]
