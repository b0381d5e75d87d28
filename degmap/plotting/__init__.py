"""Plotting API for the DEG embedding map."""

from degmap.plotting.embedding_map import (
    EmbeddingMapBuilder,
    diverging_cmap,
    load_icon,
    render_embedding_map,
)
from degmap.plotting.styles import (
    DEFAULT_PLOT_STYLE,
    PlotStyle,
    apply_plot_style,
    plot_style_dict,
)
from degmap.plotting.utils import save_figure, scale_sizes

__all__ = [
    "PlotStyle",
    "DEFAULT_PLOT_STYLE",
    "apply_plot_style",
    "plot_style_dict",
    "save_figure",
    "scale_sizes",
    "diverging_cmap",
    "load_icon",
    "EmbeddingMapBuilder",
    "render_embedding_map",
]
