import matplotlib.pyplot as plt
import numpy as np

from heightmodel.config import PlotConfig
from heightmodel.model import HEIGHT_MODEL
from heightmodel.plotting import (
    height_grid, plot_height_by_time, plot_height_by_weekday, plot_height_density,
    plot_prior_vs_data,
)


def test_plot_config_defaults():
    cfg = PlotConfig()
    assert cfg.figsize == (8.0, 6.0)
    assert cfg.dpi == 300
    assert cfg.height_range == (194.0, 200.0)
    assert cfg.path_for("x").name == "x.png"


def test_plot_config_context_is_scoped():
    before = plt.rcParams["figure.figsize"]
    cfg = PlotConfig(width_px=400, height_px=300, rc={"lines.linewidth": 7.0})
    with cfg.context():
        assert tuple(plt.rcParams["figure.figsize"]) == (4.0, 3.0)
        assert plt.rcParams["lines.linewidth"] == 7.0
    assert plt.rcParams["figure.figsize"] == before


def test_height_grid_spans_range():
    grid = height_grid(PlotConfig(height_range=(190.0, 192.0)), n=5)
    np.testing.assert_allclose(grid, [190.0, 190.5, 191.0, 191.5, 192.0])


def test_descriptive_plots_render(height_df, plot_config):
    outputs = [
        plot_height_by_weekday(height_df, plot_config),
        plot_height_by_time(height_df, plot_config),
        plot_height_density(height_df, plot_config),
        plot_prior_vs_data(height_df, HEIGHT_MODEL.priors["mu"], plot_config),
    ]
    for out in outputs:
        assert out.parent == plot_config.fig_dir
        assert out.exists() and out.stat().st_size > 0
    assert len({o.name for o in outputs}) == 4
    # Figures are closed after saving.
    assert plt.get_fignums() == []


def test_pdf_output(height_df, tmp_path):
    cfg = PlotConfig(fig_dir=tmp_path, fmt="pdf", dpi=72)
    out = plot_height_density(height_df, cfg)
    assert out.suffix == ".pdf"
    assert out.read_bytes()[:4] == b"%PDF"
