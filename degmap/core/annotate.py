"""Top-gene selection and symbol labelling."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pandas as pd

if TYPE_CHECKING:
    from degmap.symbols import SymbolResolver

DEFAULT_TOP_N = 10
LABEL_SEP = " | "


def select_top_genes(df: pd.DataFrame, n: int = DEFAULT_TOP_N) -> pd.DataFrame:
    """Return the `min(n, N)` rows with the smallest `padj`.

    The sort is stable so ties keep input row order; missing p-values sort last.
    """
    if int(n) <= 0:
        raise ValueError("n must be positive.")
    if "padj" not in df.columns:
        raise KeyError("Column 'padj' is required to rank genes.")
    ranked = df.sort_values("padj", ascending=True, kind="mergesort", na_position="last")
    top = ranked.head(int(n)).reset_index(drop=True)
    top.insert(0, "rank", range(1, len(top) + 1))
    return top


def format_label(
    gene_id: str,
    symbol: str | None,
    placeholder: str = "NA",
    sep: str = LABEL_SEP,
) -> str:
    shown = placeholder if symbol is None or pd.isna(symbol) or str(symbol).strip() == "" else str(symbol)
    return f"{gene_id}{sep}{shown}"


def annotate_top_genes(
    top: pd.DataFrame,
    resolver: SymbolResolver,
    *,
    placeholder: str = "NA",
    logger: logging.Logger | None = None,
) -> pd.DataFrame:
    """Attach `symbol` and `label` columns using one batch resolver call."""
    log = logger or logging.getLogger(__name__)
    out = top.copy()
    ids = [str(g) for g in out["gene_id"]]
    mapping = resolver.resolve(ids) if ids else {}

    symbols = [mapping.get(g) for g in ids]
    out["symbol"] = pd.Series(symbols, index=out.index, dtype="object")
    out["label"] = [format_label(g, s, placeholder=placeholder) for g, s in zip(ids, symbols)]

    misses = [g for g, s in zip(ids, symbols) if s is None]
    if misses:
        log.warning(
            "No symbol found for %d of %d top gene(s): %s",
            len(misses),
            len(ids),
            ", ".join(misses),
        )
    return out
