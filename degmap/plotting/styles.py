"""Shared plotting style settings for deterministic figure outputs."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

import matplotlib
import matplotlib.pyplot as plt
import numpy as np


@dataclass(frozen=True)
class PlotStyle:
    """Centralized plotting defaults for the DEG embedding map."""

    dpi: int = 300
    width: float = 12.0
    height: float = 8.0
    size_range: tuple[float, float] = (8.0, 120.0)
    alpha_points: float = 0.8
    point_edgecolor: str = "none"
    cmap_colors: tuple[str, str, str] = ("#2166AC", "#BDBDBD", "#B2182B")
    icon_size: float = 18.0
    label_fontsize: int = 8
    label_color: str = "black"
    leader_color: str = "#555555"
    leader_width: float = 0.5
    size_legend_n: int = 4
    legend_fontsize: int = 8
    axis_label_fontsize: int = 11
    title_fontsize: int = 13
    colorbar_shrink: float = 0.8
    colorbar_pad: float = 0.02

    @property
    def figsize(self) -> tuple[float, float]:
        return (float(self.width), float(self.height))


DEFAULT_PLOT_STYLE = PlotStyle()


def apply_plot_style(style: PlotStyle = DEFAULT_PLOT_STYLE) -> None:
    """Apply deterministic matplotlib rcParams for pipeline plots."""
    plt.rcParams.update(
        {
            "figure.dpi": style.dpi,
            "savefig.dpi": style.dpi,
            "savefig.facecolor": "white",
            "font.family": "DejaVu Sans",
            "axes.titlesize": style.title_fontsize,
            "axes.labelsize": style.axis_label_fontsize,
            "legend.fontsize": style.legend_fontsize,
            "axes.grid": False,
            "axes.spines.top": False,
            "axes.spines.right": False,
        }
    )


def plot_style_dict(style: PlotStyle = DEFAULT_PLOT_STYLE) -> dict[str, Any]:
    """Return style + dependency versions for metadata manifests."""
    d = asdict(style)
    d["matplotlib_version"] = str(matplotlib.__version__)
    d["numpy_version"] = str(np.__version__)
    return d
