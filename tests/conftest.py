from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import arviz as az
import numpy as np
import pandas as pd
import pytest

from heightmodel.config import PlotConfig

REPO_ROOT = Path(__file__).resolve().parent.parent
DATA_FILE = REPO_ROOT / "data" / "height_d.csv"


def make_csv(tmp_path: Path, text: str, name: str = "heights.csv") -> Path:
    path = tmp_path / name
    path.write_text(text)
    return path


@pytest.fixture
def data_file() -> Path:
    return DATA_FILE


@pytest.fixture
def height_df(data_file) -> pd.DataFrame:
    from heightmodel.loaders import load_height_data
    return load_height_data(data_file)


@pytest.fixture
def plot_config(tmp_path) -> PlotConfig:
    # Low dpi keeps the rendering tests fast.
    return PlotConfig(fig_dir=tmp_path / "figures", dpi=50)


@pytest.fixture
def synthetic_idata() -> az.InferenceData:
    """Posterior-shaped draws without running the sampler: 4 chains x 500 draws."""
    rng = np.random.default_rng(0)
    return az.from_dict(posterior={
        "mu": rng.normal(196.5, 0.1, size=(4, 500)),
        "sigma": np.abs(rng.normal(0.6, 0.05, size=(4, 500))),
    })


@pytest.fixture(autouse=True)
def _close_leftover_figures():
    """Close figures a test left open (e.g. by stubbing PlotConfig.save) so
    they do not leak into later tests."""
    yield
    import matplotlib.pyplot as plt
    plt.close("all")
