from __future__ import annotations

from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pytest
from matplotlib.offsetbox import AnnotationBbox

from degmap.plotting import embedding_map
from degmap.plotting.embedding_map import EmbeddingMapBuilder, render_embedding_map
from degmap.plotting.styles import PlotStyle
from degmap.plotting.utils import scale_sizes

SMALL = PlotStyle(dpi=40)


def _tables(n: int = 15) -> tuple[pd.DataFrame, pd.DataFrame]:
    rng = np.random.default_rng(0)
    table = pd.DataFrame(
        {
            "gene_id": [f"AT1G{i:05d}" for i in range(n)],
            "log_baseMean": rng.uniform(0.0, 4.0, size=n),
            "log2FoldChange": rng.normal(0.0, 2.0, size=n),
            "padj": rng.uniform(0.0, 1.0, size=n),
            "UMAP1": rng.normal(size=n),
            "UMAP2": rng.normal(size=n),
        }
    )
    top = table.nsmallest(5, "padj").reset_index(drop=True)
    top["label"] = [f"{g} | NA" for g in top["gene_id"]]
    return table, top


def _icon(tmp_path: Path) -> Path:
    path = tmp_path / "sun.png"
    img = np.zeros((16, 16, 4), dtype=float)
    img[4:12, 4:12] = [1.0, 0.8, 0.0, 1.0]
    plt.imsave(path, img)
    return path


def test_scale_sizes_linear_and_constant():
    out = scale_sizes(np.array([0.0, 1.0, 2.0]), (10.0, 30.0))
    assert np.allclose(out, [10.0, 20.0, 30.0])
    assert np.allclose(scale_sizes(np.array([3.0, 3.0]), (10.0, 30.0)), [20.0, 20.0])


def test_base_layer_encodes_size_and_color():
    table, _ = _tables()
    builder = EmbeddingMapBuilder(table, style=SMALL).draw_base()
    sc = builder.scatter
    assert sc is not None
    assert sc.get_offsets().shape == (len(table), 2)
    sizes = sc.get_sizes()
    order = np.argsort(table["log_baseMean"].to_numpy())
    assert np.all(np.diff(sizes[order]) >= 0)
    norm = sc.norm
    assert np.isclose(norm(0.0), 0.5)
    assert builder.ax.get_legend() is not None
    plt.close(builder.fig)


def test_icon_layer_adds_one_icon_per_top_gene(tmp_path: Path):
    table, top = _tables()
    builder = EmbeddingMapBuilder(table, style=SMALL).add_icons(top, _icon(tmp_path))
    boxes = [a for a in builder.ax.artists if isinstance(a, AnnotationBbox)]
    assert len(boxes) == len(top)
    assert [b.xy for b in boxes] == list(zip(top["UMAP1"], top["UMAP2"]))
    plt.close(builder.fig)


def test_missing_icon_raises(tmp_path: Path):
    table, top = _tables()
    builder = EmbeddingMapBuilder(table, style=SMALL)
    with pytest.raises(FileNotFoundError, match="Icon asset"):
        builder.add_icons(top, tmp_path / "nope.png")
    plt.close(builder.fig)


def test_label_layer_repels_with_leader_lines(monkeypatch):
    table, top = _tables()
    seen: dict = {}

    def _fake_adjust(texts, **kwargs):
        seen["n"] = len(texts)
        seen.update(kwargs)

    monkeypatch.setattr(embedding_map, "adjust_text", _fake_adjust)
    builder = EmbeddingMapBuilder(table, style=SMALL).add_labels(top)
    assert [t.get_text() for t in builder.texts] == list(top["label"])
    assert seen["n"] == len(top)
    assert seen["ax"] is builder.ax
    assert seen["arrowprops"]["arrowstyle"] == "-"
    plt.close(builder.fig)


def test_missing_columns_rejected():
    table, _ = _tables()
    with pytest.raises(KeyError, match="UMAP2"):
        EmbeddingMapBuilder(table.drop(columns=["UMAP2"]), style=SMALL)


def test_render_writes_fixed_size_image(tmp_path: Path):
    table, top = _tables()
    out = tmp_path / "figs" / "map.png"
    out.parent.mkdir()
    out.write_bytes(b"stale")
    path = render_embedding_map(table, top, out, icon_path=_icon(tmp_path), title="test")
    assert path == out
    img = plt.imread(out)
    assert img.shape[:2] == (2400, 3600)


def test_render_closes_figure_when_icon_missing(tmp_path: Path):
    table, top = _tables()
    before = set(plt.get_fignums())
    with pytest.raises(FileNotFoundError, match="Icon asset"):
        render_embedding_map(table, top, tmp_path / "map.png", icon_path=tmp_path / "nope.png", style=SMALL)
    assert set(plt.get_fignums()) == before
    assert not (tmp_path / "map.png").exists()
