"""Derived log columns and the standardized feature matrix."""

from __future__ import annotations

from typing import Sequence

import numpy as np
import pandas as pd

FEATURE_COLUMNS: tuple[str, ...] = ("log2FoldChange", "log_baseMean", "log_padj")
PADJ_EPSILON = 1e-10


def add_log_columns(df: pd.DataFrame, *, padj_epsilon: float = PADJ_EPSILON) -> pd.DataFrame:
    """Append `log_baseMean` and `log_padj` to a copy of `df`.

    log_baseMean = log10(baseMean + 1)
    log_padj = -log10(padj + padj_epsilon)
    """
    out = df.copy()
    base = out["baseMean"].to_numpy(dtype=float)
    padj = out["padj"].to_numpy(dtype=float)
    out["log_baseMean"] = np.log10(base + 1.0)
    out["log_padj"] = -np.log10(padj + float(padj_epsilon))
    return out


def standardize_features(matrix: np.ndarray, names: Sequence[str] | None = None) -> np.ndarray:
    """Column-wise z-score using the sample standard deviation (ddof=1).

    Constant columns have no defined z-score and raise rather than yield NaN.
    """
    arr = np.asarray(matrix, dtype=float)
    if arr.ndim != 2:
        raise ValueError(f"feature matrix must be 2D, got shape {arr.shape}.")
    if arr.shape[0] < 2:
        raise ValueError("At least 2 rows are required to standardize features; input is degenerate.")
    if not np.isfinite(arr).all():
        raise ValueError("feature matrix contains NaN/inf values.")

    labels = list(names) if names is not None else [str(i) for i in range(arr.shape[1])]
    mean = arr.mean(axis=0)
    sd = arr.std(axis=0, ddof=1)
    constant = [labels[i] for i in np.flatnonzero(~(sd > 0.0))]
    if constant:
        raise ValueError(
            f"Zero-variance feature column(s) {', '.join(constant)}; "
            "standardization is degenerate."
        )
    return (arr - mean) / sd


def build_feature_matrix(
    df: pd.DataFrame, columns: Sequence[str] = FEATURE_COLUMNS
) -> np.ndarray:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise KeyError(f"Feature column(s) missing: {', '.join(missing)}.")
    raw = df.loc[:, list(columns)].to_numpy(dtype=float)
    return standardize_features(raw, names=columns)
