"""Artifact saving and the HTML report.

Provides two main utilities:
- save_artifacts: writes an analysis checkpoint as JSON (configuration,
  data summary, posterior summary, credible intervals) and bundles all saved
  figures into a compressed tar.gz archive.
- build_html_report: compiles the narrative, base64-embedded figures and
  summary tables into a single self-contained HTML file.  The fitted numbers
  in the narrative are filled in from the results of the current run.
"""

import base64
import html
import json
import tarfile
from pathlib import Path
from typing import List, Optional

from heightmodel.config import ARTIFACT_DIR, FIG_DIR, FIG_FORMAT, SEED
from heightmodel.model import FixedValue


def _prior_config(spec) -> dict:
    out = {}
    for name, prior in spec.priors.items():
        entry = {"family": type(prior).__name__}
        entry.update(vars(prior))
        out[name] = entry
    out[spec.observed_name] = {"likelihood": spec.likelihood.describe()}
    return out


def save_artifacts(results: dict, out_dir: Path = ARTIFACT_DIR,
                   fig_dir: Path = FIG_DIR) -> Path:
    """Save the analysis checkpoint as JSON and bundle figures into tar.gz.

    Returns the path of the JSON checkpoint.
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    fig_dir = Path(fig_dir)

    # --- Bundle figures into a compressed tar archive ---
    if fig_dir.exists():
        out_tgz = out_dir / "figures.tar.gz"
        with tarfile.open(out_tgz, "w:gz") as tar:
            tar.add(str(fig_dir), arcname=fig_dir.name)
        print("Wrote", out_tgz)
    else:
        print("No figures directory to bundle.")

    # --- Write JSON checkpoint with config + results ---
    summary = results["summary"]
    ckpt = {
        "config": {
            "SEED": SEED,
            "model": _prior_config(results["spec"]),
            "sampler": results["sampler_config"].as_dict(),
            "credible_prob": results["credible_prob"],
        },
        "data_summary": results["data_summary"],
        "posterior_summary": {
            name: {col: float(summary.loc[name, col]) for col in summary.columns}
            for name in summary.index
        },
        "posterior_means": results["posterior_means"],
        "credible_intervals": {k: list(v) for k, v in results["credible_intervals"].items()},
        "figures": {k: str(v) for k, v in results.get("figures", {}).items()},
    }

    ckpt_path = out_dir / "analysis_checkpoint.json"
    with open(ckpt_path, "w") as f:
        json.dump(ckpt, f, indent=2)
    print("Wrote", ckpt_path)
    return ckpt_path


def narrative(results: dict) -> List[str]:
    """Report paragraphs with this run's numbers filled in."""
    spec = results["spec"]
    ds = results["data_summary"]
    cfg = results["sampler_config"]
    loc = spec.likelihood.loc
    scale = spec.likelihood.scale
    mu_prior = spec.priors[loc]
    q = results["prior_checks"][loc]
    probs = sorted(q)
    pct = int(round(results["credible_prob"] * 100))

    paras = [
        f"I measured my height {ds['n']} times. The measurements average "
        f"{ds['mean']:.2f} cm with a standard deviation of {ds['sd']:.2f} cm and "
        f"range from {ds['min']:.1f} to {ds['max']:.1f} cm.",
        f"Before looking at the data my belief was that I am about "
        f"{mu_prior.mean_value():.0f} cm tall, with anything between 194 and 198 cm "
        f"plausible but the end values unlikely. The prior {loc} ~ {mu_prior.describe()} "
        f"puts its {int(probs[0] * 100)}th, {int(probs[1] * 100)}th and "
        f"{int(probs[-1] * 100)}th percentiles at {q[probs[0]]:.2f}, "
        f"{q[probs[1]]:.2f} and {q[probs[-1]]:.2f} cm.",
    ]
    scale_prior = spec.priors[scale]
    if isinstance(scale_prior, FixedValue):
        paras.append(f"The measurement spread {scale} is {scale_prior.describe()} cm.")
    else:
        paras.append(f"The measurement spread is estimated too, with "
                     f"{scale} ~ {scale_prior.describe()}.")

    paras.append(
        f"The model was fitted with {cfg.sampler.upper()} using {cfg.chains} chains of "
        f"{cfg.draws} draws after {cfg.tune} tuning iterations."
    )
    for name in spec.free_parameters:
        lo, hi = results["credible_intervals"][name]
        row = results["summary"].loc[name]
        paras.append(
            f"The posterior mean of {name} is {results['posterior_means'][name]:.2f} cm, "
            f"with a {pct}% credible interval from {lo:.2f} to {hi:.2f} cm "
            f"(R-hat {row['r_hat']:.3f}, bulk ESS {row['ess_bulk']:.0f})."
        )
    paras.append(
        "The posterior predictive check below overlays the heights simulated from "
        f"{results['ppc_wide'].shape[0]} posterior draws on the measured heights; "
        f"the dashed line marks the posterior mean of {loc}."
    )
    return paras


def build_html_report(
    results: dict,
    fig_dir: Path = FIG_DIR,
    out_path: Path = ARTIFACT_DIR / "report.html",
    tables: Optional[List[dict]] = None,
    title: str = "How tall am I?",
) -> Path:
    """Compile narrative, figures and summary tables into one self-contained HTML file.

    Each figure is read from disk and base64-encoded directly into an <img>
    tag, so the resulting HTML has no external dependencies.

    Parameters
    ----------
    results : dict
        Output of ``analysis.analyze_height``.
    fig_dir : Path
        Directory containing saved figure files.
    out_path : Path
        Output path for the generated HTML file.
    tables : list of dict, optional
        Each dict has keys "title" (str), "headers" (list of str), and
        "rows" (list of list) for rendering an HTML table.
    """
    figures = results.get("figures") or {}
    if figures:
        figs = [Path(p) for p in figures.values()]
    else:
        figs = sorted(Path(fig_dir).glob(f"*.{FIG_FORMAT}"))

    parts = [
        "<!DOCTYPE html><html><head>",
        "<meta charset='utf-8'>",
        f"<title>{html.escape(title)}</title>",
        "<style>",
        "body{font-family:system-ui,sans-serif;max-width:960px;margin:0 auto;padding:20px;"
        "line-height:1.5}",
        "h1{text-align:center}",
        "h2{margin-top:40px;border-bottom:1px solid #999;padding-bottom:6px}",
        ".fig{margin:24px 0;text-align:center}",
        ".fig img{max-width:100%;height:auto}",
        ".fig p{color:#555;font-size:14px;margin:8px 0 0}",
        "table{border-collapse:collapse;margin:20px auto;font-size:14px}",
        "th,td{border:1px solid #999;padding:6px 12px;text-align:right}",
        "th{background:#eee}",
        "td:first-child,th:first-child{text-align:left}",
        "</style></head><body>",
        f"<h1>{html.escape(title)}</h1>",
    ]

    parts.append("<h2>Analysis</h2>")
    for para in narrative(results):
        parts.append(f"<p>{html.escape(para)}</p>")

    if figs:
        parts.append("<h2>Figures</h2>")
        for fig_path in figs:
            data = base64.b64encode(fig_path.read_bytes()).decode("ascii")
            fmt = fig_path.suffix.lstrip(".")
            mime = "image/svg+xml" if fmt == "svg" else f"image/{fmt}"
            if fmt == "pdf":
                parts.append(f'<div class="fig"><embed src="data:application/pdf;base64,{data}" '
                             f'width="800" height="600"/><p>{fig_path.name}</p></div>')
                continue
            parts.append('<div class="fig">')
            parts.append(f'<img src="data:{mime};base64,{data}"/>')
            parts.append(f"<p>{html.escape(fig_path.name)}</p>")
            parts.append("</div>")

    if tables:
        parts.append("<h2>Summary Tables</h2>")
        for tbl in tables:
            parts.append(f"<h3>{html.escape(tbl['title'])}</h3>")
            parts.append("<table>")
            parts.append("<tr>" + "".join(f"<th>{html.escape(h)}</th>" for h in tbl["headers"]) + "</tr>")
            for row in tbl["rows"]:
                parts.append("<tr>" + "".join(f"<td>{html.escape(str(c))}</td>" for c in row) + "</tr>")
            parts.append("</table>")

    parts.append("</body></html>")

    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text("\n".join(parts), encoding="utf-8")
    n_tables = len(tables) if tables else 0
    print(f"Wrote {out_path} with {len(figs)} figures and {n_tables} tables.")
    return out_path
