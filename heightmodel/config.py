"""Package-wide constants and the plotting configuration object.

This module centralizes every tuneable parameter for the height analysis --
input schema, prior hyperparameters, sampler defaults, posterior predictive
sizes, output paths -- so that the pipeline, the scripts and the tests
import a single source of truth.

Figure settings live in ``PlotConfig``, which is passed explicitly to every
plotting call.  Nothing here touches matplotlib's process-wide state at
import time.
"""

from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, Tuple

import matplotlib.pyplot as plt

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Global random seed for sampling, posterior-predictive draw selection and
# replicate simulation.
SEED = 42

# --- Input data -------------------------------------------------------------

# The measurements shipped with the repository.
DATA_PATH = Path("data/height_d.csv")

# Expected header of the input file, in order.
DATE_COLUMN = "date"
TIME_COLUMN = "time_hours"
HEIGHT_COLUMN = "height_cm"
HEIGHT_COLUMNS = (DATE_COLUMN, TIME_COLUMN, HEIGHT_COLUMN)

# time_hours == 0 marks a measurement without a reliable time of day.
NO_TIME_RECORDED = 0.0

# Canonical weekday order used for the derived categorical column.
WEEKDAYS = (
    "Monday", "Tuesday", "Wednesday", "Thursday",
    "Friday", "Saturday", "Sunday",
)

# --- Model --------------------------------------------------------------------

# Prior on mu.  With sd 0.75 the 10th/50th/90th percentiles are roughly
# 195.0 / 196.0 / 197.0 cm, i.e. anything between 194 and 198 is plausible
# but the end values are unlikely.
PRIOR_MU_MEAN = 196.0
PRIOR_MU_SD = 0.75

# Prior on sigma in the current model version.
PRIOR_SIGMA_RATE = 1.0

# The earliest model version did not estimate sigma.
FIXED_SIGMA = 0.5

# Percentiles used to communicate the prior on mu.
PRIOR_CHECK_PROBS = (0.1, 0.5, 0.9)

# --- Sampler ------------------------------------------------------------------

SAMPLER = "nuts"
N_CHAINS = 8
N_DRAWS = 1000
N_TUNE = 1000
TARGET_ACCEPT = 0.65
DISCARD_TUNED_SAMPLES = True

# Fixed-trajectory HMC settings (only used when sampler == "hmc").
HMC_STEP_SIZE = 0.05
HMC_N_LEAPFROG = 10

# Draws taken from the prior-only model for the prior predictive check.
N_PRIOR_DRAWS = 1000

# --- Posterior predictive check -----------------------------------------------

# Number of posterior draws (sampled without replacement) used to simulate
# replicate datasets.
PPC_N_DRAWS = 1500

# Probability mass of the credible interval quoted in the report.
CREDIBLE_PROB = 0.95

# --- Figure and artifact output paths -----------------------------------------

FIG_DIR = Path("figures")
FIG_FORMAT = "png"
FIG_DPI = 300

# Nominal figure size in pixels at 100 px per inch.
FIG_WIDTH_PX = 800
FIG_HEIGHT_PX = 600

# Height axis range chosen for readability.
HEIGHT_RANGE = (194.0, 200.0)

# Directory for the JSON checkpoint, figure archive and HTML report.
ARTIFACT_DIR = Path("results")


@dataclass(frozen=True)
class PlotConfig:
    """Settings handed to every plotting function.

    Attributes
    ----------
    fig_dir : Path
        Directory figures are written to (created on first save).
    fmt : str
        Image format passed to ``savefig`` (e.g. "png", "pdf").
    dpi : int
        Resolution of saved images.
    width_px, height_px : int
        Nominal figure size, converted to inches at 100 px per inch.
    height_range : (float, float)
        Axis limits for any axis showing height in cm.
    rc : dict
        Extra matplotlib rc parameters applied while a figure is built.
    """

    fig_dir: Path = FIG_DIR
    fmt: str = FIG_FORMAT
    dpi: int = FIG_DPI
    width_px: int = FIG_WIDTH_PX
    height_px: int = FIG_HEIGHT_PX
    height_range: Tuple[float, float] = HEIGHT_RANGE
    rc: Dict[str, object] = field(default_factory=dict)

    @property
    def figsize(self) -> Tuple[float, float]:
        return (self.width_px / 100, self.height_px / 100)

    def path_for(self, name: str) -> Path:
        return Path(self.fig_dir) / f"{name}.{self.fmt}"

    @contextmanager
    def context(self) -> Iterator[None]:
        """Apply this configuration to matplotlib for the duration of a block."""
        params = {"figure.figsize": self.figsize, "savefig.dpi": self.dpi}
        params.update(self.rc)
        with plt.rc_context(params):
            yield

    def save(self, fig, name: str) -> Path:
        """Write *fig* as <fig_dir>/<name>.<fmt>, close it and return the path."""
        out = self.path_for(name)
        out.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(out, format=self.fmt, dpi=self.dpi, bbox_inches="tight")
        plt.close(fig)
        print(f"[plot] wrote {out}")
        return out
