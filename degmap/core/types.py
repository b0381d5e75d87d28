"""Typed configuration and result containers for degmap pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pandas as pd


@dataclass(frozen=True)
class EmbeddingConfig:
    """Dimensionality-reduction settings for one embedding run."""

    method: str = "umap"
    seed: int = 42
    n_neighbors: int = 15
    min_dist: float = 0.1
    spread: float = 1.0
    metric: str = "euclidean"
    perplexity: float = 30.0


@dataclass(frozen=True)
class SymbolConfig:
    """Where gene symbols come from.

    - `source`: "mygene", "table" or "none".
    - `cache_path`: optional JSON cache wrapped around the source.
    """

    source: str = "mygene"
    species: str = "3702"
    scopes: str = "locus_tag,symbol,ensembl.gene"
    table_path: str | None = None
    id_column: str = "gene_id"
    symbol_column: str = "symbol"
    cache_path: str | None = None
    placeholder: str = "NA"
    timeout: float = 10.0


@dataclass(frozen=True)
class PipelineConfig:
    """End-to-end run configuration; every stage reads its inputs from here."""

    input_path: str = "deg_results.csv"
    outdir: str = "results"
    figure_name: str = "deg_embedding_top10.png"
    icon_path: str | None = "assets/sun.png"
    top_n: int = 10
    padj_epsilon: float = 1e-10
    drop_incomplete: bool = False
    title: str | None = None
    embedding: EmbeddingConfig = field(default_factory=EmbeddingConfig)
    symbols: SymbolConfig = field(default_factory=SymbolConfig)

    @property
    def figure_path(self) -> Path:
        return Path(self.outdir) / self.figure_name


@dataclass(frozen=True)
class PipelineResult:
    """Output of `run_pipeline`.

    - `table`: every gene with derived columns and embedding coordinates.
    - `top_genes`: the annotated top-N subset in rank order.
    """

    table: pd.DataFrame
    top_genes: pd.DataFrame
    figure_path: Path
    top_genes_path: Path
    embedding_path: Path
    metadata_path: Path
    metadata: dict[str, Any] = field(default_factory=dict)
