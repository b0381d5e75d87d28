from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from degmap.core.io import load_deg_table, validate_deg_table


def _write_csv(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_load_preserves_order_and_string_ids(tmp_path: Path):
    csv = _write_csv(
        tmp_path / "deg.csv",
        "gene_id,baseMean,log2FoldChange,padj,extra\n"
        "0123,5.0,1.0,0.01,a\n"
        "AT1G01010,10,-2.5,0.5,b\n"
        "AT5G99999,0,0.0,1.0,c\n",
    )
    df = load_deg_table(csv)
    assert list(df["gene_id"]) == ["0123", "AT1G01010", "AT5G99999"]
    assert df["baseMean"].dtype == float
    assert list(df["extra"]) == ["a", "b", "c"]


def test_missing_file_raises(tmp_path: Path):
    with pytest.raises(FileNotFoundError, match="not found"):
        load_deg_table(tmp_path / "absent.csv")


def test_empty_file_raises_value_error(tmp_path: Path):
    csv = _write_csv(tmp_path / "empty.csv", "")
    with pytest.raises(ValueError, match="empty"):
        load_deg_table(csv)


def test_missing_required_columns_listed(tmp_path: Path):
    csv = _write_csv(tmp_path / "deg.csv", "gene_id,baseMean\nA,1\n")
    with pytest.raises(ValueError, match="log2FoldChange, padj"):
        load_deg_table(csv)


def test_non_numeric_column_rejected(tmp_path: Path):
    csv = _write_csv(
        tmp_path / "deg.csv",
        "gene_id,baseMean,log2FoldChange,padj\nA,1,high,0.1\n",
    )
    with pytest.raises(ValueError, match="log2FoldChange"):
        load_deg_table(csv)


def test_validate_rejects_missing_values_by_default():
    df = pd.DataFrame(
        {
            "gene_id": ["A", "B"],
            "baseMean": [1.0, 2.0],
            "log2FoldChange": [0.5, 1.0],
            "padj": [0.01, np.nan],
        }
    )
    with pytest.raises(ValueError, match="drop_incomplete"):
        validate_deg_table(df)


def test_validate_drops_incomplete_rows_when_asked(caplog):
    caplog.set_level(logging.WARNING)
    df = pd.DataFrame(
        {
            "gene_id": ["A", "B", "C"],
            "baseMean": [1.0, 2.0, 3.0],
            "log2FoldChange": [0.5, np.nan, 1.0],
            "padj": [0.01, 0.2, 0.3],
        }
    )
    out = validate_deg_table(df, drop_incomplete=True, logger=logging.getLogger("test"))
    assert list(out["gene_id"]) == ["A", "C"]
    assert list(out.index) == [0, 1]
    assert "Dropping 1 row" in caplog.text


@pytest.mark.parametrize(
    "column,value,match",
    [("baseMean", -1.0, "nonnegative"), ("padj", 1.5, r"\[0, 1\]")],
)
def test_validate_rejects_out_of_range_values(column, value, match):
    df = pd.DataFrame(
        {
            "gene_id": ["A", "B"],
            "baseMean": [1.0, 2.0],
            "log2FoldChange": [0.5, 1.0],
            "padj": [0.01, 0.02],
        }
    )
    df.loc[1, column] = value
    with pytest.raises(ValueError, match=match):
        validate_deg_table(df)


def test_gene_id_named_na_is_kept_verbatim(tmp_path: Path):
    csv = _write_csv(
        tmp_path / "deg.csv",
        "gene_id,baseMean,log2FoldChange,padj\n"
        "NA,1,0.5,0.01\n"
        "B,2,1.0,NA\n"
        "C,3,-1.0,0.3\n",
    )
    df = load_deg_table(csv)
    assert list(df["gene_id"]) == ["NA", "B", "C"]
    assert np.isnan(df.loc[1, "padj"])
    out = validate_deg_table(df, drop_incomplete=True)
    assert list(out["gene_id"]) == ["NA", "C"]


def test_blank_gene_id_rejected(tmp_path: Path):
    csv = _write_csv(
        tmp_path / "deg.csv",
        "gene_id,baseMean,log2FoldChange,padj\n"
        ",1,0.5,0.01\n"
        "NA,2,1.0,0.02\n"
        "B,3,-1.0,0.3\n"
        "C,4,2.0,0.4\n",
    )
    df = load_deg_table(csv)
    assert list(df["gene_id"]) == ["", "NA", "B", "C"]
    with pytest.raises(ValueError, match="blank gene_id"):
        validate_deg_table(df)
