"""Shared plotting utilities used by figure factories."""

from __future__ import annotations

from pathlib import Path

import matplotlib.figure
import matplotlib.pyplot as plt
import numpy as np

from degmap.plotting.styles import DEFAULT_PLOT_STYLE, PlotStyle


def scale_sizes(values: np.ndarray, size_range: tuple[float, float]) -> np.ndarray:
    """Linearly map values onto marker areas; constant input gets the midpoint."""
    v = np.asarray(values, dtype=float).ravel()
    s_min, s_max = float(size_range[0]), float(size_range[1])
    if v.size == 0:
        return v
    lo, hi = float(np.min(v)), float(np.max(v))
    if np.isclose(lo, hi):
        return np.full(v.shape, 0.5 * (s_min + s_max))
    return s_min + (v - lo) / (hi - lo) * (s_max - s_min)


def save_figure(
    fig: matplotlib.figure.Figure,
    out_path: Path,
    *,
    style: PlotStyle = DEFAULT_PLOT_STYLE,
    bbox_tight: bool = False,
    close: bool = True,
) -> Path:
    """Save figure deterministically, overwriting `out_path`, and optionally close it."""
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    save_kwargs: dict[str, object] = {
        "dpi": style.dpi,
        "facecolor": "white",
        "pad_inches": 0.02,
    }
    if bbox_tight:
        save_kwargs["bbox_inches"] = "tight"
    fig.savefig(out_path, **save_kwargs)
    if close:
        plt.close(fig)
    return out_path
