from __future__ import annotations

import json
from pathlib import Path

import pytest

from degmap.config import (
    load_json_config,
    load_pipeline_config,
    pipeline_config_from_dict,
    with_overrides,
)
from degmap.core.types import PipelineConfig


def test_load_project_config():
    root = Path(__file__).resolve().parents[1]
    cfg = load_pipeline_config(root / "configs" / "degmap_default.json")
    assert cfg.top_n == 10
    assert cfg.padj_epsilon == 1e-10
    assert cfg.embedding.method == "umap"
    assert cfg.symbols.species == "3702"
    assert (root / cfg.icon_path).exists()


def test_invalid_json_reports_line_and_column(tmp_path: Path):
    bad = tmp_path / "bad.json"
    bad.write_text('{"a": 1,}\n', encoding="utf-8")
    with pytest.raises(ValueError, match=r"line \d+, column \d+"):
        load_json_config(bad)


def test_non_object_json_config_rejected(tmp_path: Path):
    bad = tmp_path / "list.json"
    bad.write_text(json.dumps([1, 2, 3]), encoding="utf-8")
    with pytest.raises(ValueError, match="expected JSON object"):
        load_json_config(bad)


def test_non_json_extension_rejected(tmp_path: Path):
    bad = tmp_path / "cfg.yaml"
    bad.write_text("{}", encoding="utf-8")
    with pytest.raises(ValueError, match="Use a .json config file"):
        load_json_config(bad)


def test_missing_config_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_json_config(tmp_path / "absent.json")


def test_nested_sections_and_defaults():
    cfg = pipeline_config_from_dict(
        {"outdir": "out", "embedding": {"seed": 3}, "symbols": {"source": "none"}}
    )
    assert cfg.outdir == "out"
    assert cfg.embedding.seed == 3
    assert cfg.embedding.n_neighbors == 15
    assert cfg.symbols.source == "none"
    assert cfg.figure_path == Path("out") / "deg_embedding_top10.png"


@pytest.mark.parametrize(
    "payload,match",
    [
        ({"outdirr": "x"}, "<root>.*outdirr"),
        ({"embedding": {"sead": 1}}, "embedding.*sead"),
        ({"symbols": []}, "must be a JSON object"),
        ({"top_n": 0}, "top_n must be positive"),
    ],
)
def test_bad_config_rejected(payload, match):
    with pytest.raises(ValueError, match=match):
        pipeline_config_from_dict(payload)


def test_overrides_apply_only_given_values():
    base = PipelineConfig(outdir="a")
    out = with_overrides(base, outdir=None, input_path="x.csv", seed=9, symbol_source="table")
    assert out.outdir == "a"
    assert out.input_path == "x.csv"
    assert out.embedding.seed == 9
    assert out.symbols.source == "table"
    assert base.embedding.seed == 42
