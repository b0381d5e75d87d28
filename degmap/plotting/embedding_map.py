"""Layered DEG embedding map: base scatter, icon overlay, repelled labels."""

from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from adjustText import adjust_text
from matplotlib.colors import CenteredNorm, LinearSegmentedColormap
from matplotlib.offsetbox import AnnotationBbox, OffsetImage
from matplotlib.text import Text

from degmap.plotting.styles import DEFAULT_PLOT_STYLE, PlotStyle
from degmap.plotting.utils import save_figure, scale_sizes


def diverging_cmap(style: PlotStyle = DEFAULT_PLOT_STYLE) -> LinearSegmentedColormap:
    """Blue -> gray -> red colormap used for fold change."""
    return LinearSegmentedColormap.from_list("deg_fold_change", list(style.cmap_colors))


def load_icon(icon_path: str | Path) -> np.ndarray:
    path = Path(icon_path)
    if not path.exists():
        raise FileNotFoundError(f"Icon asset '{path}' not found.")
    return plt.imread(path.as_posix())


class EmbeddingMapBuilder:
    """Compose the embedding map one layer at a time.

    Each layer method draws onto the same axes and returns the builder, so
    layers can be chained or exercised on their own:

        EmbeddingMapBuilder(table, x_col="UMAP1", y_col="UMAP2")
            .draw_base().add_icons(top, "sun.png").add_labels(top).finalize()
            .save(out_png)
    """

    def __init__(
        self,
        table: pd.DataFrame,
        *,
        x_col: str = "UMAP1",
        y_col: str = "UMAP2",
        size_col: str = "log_baseMean",
        color_col: str = "log2FoldChange",
        style: PlotStyle = DEFAULT_PLOT_STYLE,
    ):
        missing = [c for c in (x_col, y_col, size_col, color_col) if c not in table.columns]
        if missing:
            raise KeyError(f"Column(s) missing for embedding map: {', '.join(missing)}.")
        self.table = table
        self.x_col = x_col
        self.y_col = y_col
        self.size_col = size_col
        self.color_col = color_col
        self.style = style
        self.fig, self.ax = plt.subplots(figsize=style.figsize)
        self.scatter = None
        self.icons: list[AnnotationBbox] = []
        self.texts: list[Text] = []

    def _xy(self, df: pd.DataFrame) -> tuple[np.ndarray, np.ndarray]:
        return (
            df[self.x_col].to_numpy(dtype=float),
            df[self.y_col].to_numpy(dtype=float),
        )

    def draw_base(self) -> "EmbeddingMapBuilder":
        """Scatter every gene: size from expression level, color from fold change."""
        style = self.style
        x, y = self._xy(self.table)
        size_values = self.table[self.size_col].to_numpy(dtype=float)
        sizes = scale_sizes(size_values, style.size_range)
        self.scatter = self.ax.scatter(
            x,
            y,
            c=self.table[self.color_col].to_numpy(dtype=float),
            s=sizes,
            cmap=diverging_cmap(style),
            norm=CenteredNorm(vcenter=0.0),
            alpha=style.alpha_points,
            edgecolors=style.point_edgecolor,
            zorder=1,
        )
        cbar = self.fig.colorbar(
            self.scatter, ax=self.ax, shrink=style.colorbar_shrink, pad=style.colorbar_pad
        )
        cbar.set_label(self.color_col)
        self._add_size_legend(size_values)
        return self

    def _add_size_legend(self, values: np.ndarray) -> None:
        if values.size == 0 or np.isclose(values.min(), values.max()):
            return
        style = self.style
        picks = np.linspace(values.min(), values.max(), style.size_legend_n)
        # picks span the full value range, so this matches the point mapping.
        pick_sizes = scale_sizes(picks, style.size_range)
        handles = [
            self.ax.scatter([], [], s=s, color=style.cmap_colors[1], edgecolors="none")
            for s in pick_sizes
        ]
        self.ax.legend(
            handles,
            [f"{v:.2g}" for v in picks],
            title=self.size_col,
            loc="upper left",
            frameon=False,
            fontsize=style.legend_fontsize,
            title_fontsize=style.legend_fontsize,
            scatterpoints=1,
        )

    def add_icons(self, top: pd.DataFrame, icon_path: str | Path) -> "EmbeddingMapBuilder":
        """Overlay the icon image at each top gene's coordinates."""
        image = load_icon(icon_path)
        zoom = float(self.style.icon_size) / float(max(image.shape[:2]))
        x, y = self._xy(top)
        for xi, yi in zip(x, y):
            box = AnnotationBbox(
                OffsetImage(image, zoom=zoom),
                (xi, yi),
                frameon=False,
                zorder=3,
            )
            self.ax.add_artist(box)
            self.icons.append(box)
        return self

    def add_labels(self, top: pd.DataFrame, label_col: str = "label") -> "EmbeddingMapBuilder":
        """Place top-gene labels, repelled from each other and from their points."""
        if top.empty:
            return self
        style = self.style
        x, y = self._xy(top)
        self.texts = [
            self.ax.text(xi, yi, str(label), fontsize=style.label_fontsize, color=style.label_color, zorder=4)
            for xi, yi, label in zip(x, y, top[label_col])
        ]
        adjust_text(
            self.texts,
            x=x,
            y=y,
            ax=self.ax,
            arrowprops=dict(arrowstyle="-", color=style.leader_color, lw=style.leader_width),
        )
        return self

    def finalize(self, title: str | None = None) -> "EmbeddingMapBuilder":
        self.ax.set_xlabel(self.x_col, fontsize=self.style.axis_label_fontsize)
        self.ax.set_ylabel(self.y_col, fontsize=self.style.axis_label_fontsize)
        if title:
            self.ax.set_title(title, fontsize=self.style.title_fontsize)
        return self

    def save(self, out_path: str | Path, *, close: bool = True) -> Path:
        return save_figure(self.fig, Path(out_path), style=self.style, close=close)


def render_embedding_map(
    table: pd.DataFrame,
    top: pd.DataFrame,
    out_path: str | Path,
    *,
    x_col: str = "UMAP1",
    y_col: str = "UMAP2",
    icon_path: str | Path | None = None,
    title: str | None = None,
    style: PlotStyle = DEFAULT_PLOT_STYLE,
) -> Path:
    """Draw all layers in order and write the image to `out_path`."""
    builder = EmbeddingMapBuilder(table, x_col=x_col, y_col=y_col, style=style)
    try:
        builder.draw_base()
        if icon_path is not None:
            builder.add_icons(top, icon_path)
        return builder.add_labels(top).finalize(title).save(out_path)
    finally:
        plt.close(builder.fig)
