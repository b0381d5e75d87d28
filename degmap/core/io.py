"""DEG table loading."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

import numpy as np
import pandas as pd

REQUIRED_COLUMNS: tuple[str, ...] = ("gene_id", "baseMean", "log2FoldChange", "padj")
NUMERIC_COLUMNS: tuple[str, ...] = ("baseMean", "log2FoldChange", "padj")
# Missing-value markers for the numeric columns only; gene_id is read verbatim.
NUMERIC_NA_VALUES: tuple[str, ...] = ("", "NA", "N/A", "NaN", "nan", "NULL", "null")


def load_deg_table(
    path: str | Path,
    *,
    required_columns: Sequence[str] = REQUIRED_COLUMNS,
    sep: str = ",",
) -> pd.DataFrame:
    """Read a DEG results table, preserving row order.

    `gene_id` is always kept as a verbatim string, so a gene named "NA" stays
    "NA" and a blank id stays blank. The numeric columns must parse as floats
    (missing values are allowed here and checked downstream).
    """
    table_path = Path(path)
    if not table_path.exists():
        raise FileNotFoundError(f"Input file '{table_path}' not found.")

    try:
        df = pd.read_csv(
            table_path,
            sep=sep,
            dtype={"gene_id": str},
            keep_default_na=False,
            na_values={c: list(NUMERIC_NA_VALUES) for c in NUMERIC_COLUMNS},
        )
    except pd.errors.EmptyDataError as exc:
        raise ValueError(f"Input file '{table_path}' is empty.") from exc
    except pd.errors.ParserError as exc:
        raise ValueError(f"Could not parse '{table_path}' as delimited text: {exc}") from exc

    missing = [c for c in required_columns if c not in df.columns]
    if missing:
        raise ValueError(
            f"Input file '{table_path}' is missing required column(s): {', '.join(missing)}."
        )

    for col in NUMERIC_COLUMNS:
        if col not in df.columns:
            continue
        try:
            df[col] = pd.to_numeric(df[col], errors="raise").astype(float)
        except (TypeError, ValueError) as exc:
            raise ValueError(
                f"Column '{col}' in '{table_path}' contains non-numeric values."
            ) from exc

    if "gene_id" in df.columns:
        df["gene_id"] = df["gene_id"].astype(str)
    return df.reset_index(drop=True)


def validate_deg_table(
    df: pd.DataFrame,
    *,
    drop_incomplete: bool = False,
    logger: logging.Logger | None = None,
) -> pd.DataFrame:
    """Check gene ids, value ranges and missing values of the numeric DEG columns.

    A blank `gene_id` always raises; it cannot be labelled or looked up.

    Rows with missing numeric values raise unless `drop_incomplete` is set, in
    which case they are removed and the count is logged.
    """
    log = logger or logging.getLogger(__name__)
    ids = df["gene_id"]
    blank = ids.isna() | (ids.astype(str).str.strip() == "")
    if blank.any():
        rows = ", ".join(str(i) for i in np.flatnonzero(blank.to_numpy())[:5])
        raise ValueError(f"{int(blank.sum())} row(s) have a blank gene_id (row index {rows}).")

    numeric = df.loc[:, list(NUMERIC_COLUMNS)]
    incomplete = ~np.isfinite(numeric.to_numpy(dtype=float)).all(axis=1)
    n_bad = int(incomplete.sum())
    if n_bad:
        if not drop_incomplete:
            raise ValueError(
                f"{n_bad} row(s) have missing or non-finite values in "
                f"{', '.join(NUMERIC_COLUMNS)}; set drop_incomplete to skip them."
            )
        log.warning("Dropping %d row(s) with missing numeric values.", n_bad)
        df = df.loc[~incomplete].reset_index(drop=True)

    if (df["baseMean"] < 0).any():
        raise ValueError("baseMean must be nonnegative.")
    padj = df["padj"]
    if ((padj < 0) | (padj > 1)).any():
        raise ValueError("padj must lie in [0, 1].")
    return df
