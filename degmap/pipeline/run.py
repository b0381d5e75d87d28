"""End-to-end DEG embedding map pipeline."""

from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import matplotlib

# Use a non-interactive backend for reproducible headless runs.
matplotlib.use("Agg")

from degmap._version import __version__
from degmap.core.annotate import annotate_top_genes, select_top_genes
from degmap.core.embedding import compute_embedding, embedding_columns
from degmap.core.features import FEATURE_COLUMNS, add_log_columns, build_feature_matrix
from degmap.core.io import load_deg_table, validate_deg_table
from degmap.core.types import PipelineConfig, PipelineResult
from degmap.pipeline.io import (
    close_logger,
    package_versions,
    setup_logger,
    write_json,
    write_table,
)
from degmap.plotting.embedding_map import render_embedding_map
from degmap.plotting.styles import DEFAULT_PLOT_STYLE, PlotStyle, apply_plot_style, plot_style_dict
from degmap.symbols import SymbolResolver, build_symbol_resolver

TOP_GENES_NAME = "top_genes.csv"
EMBEDDING_NAME = "embedding.csv"
METADATA_NAME = "metadata.json"
LOG_NAME = "degmap.log"
VERSIONED_PACKAGES = ("numpy", "pandas", "scanpy", "anndata", "umap-learn", "matplotlib", "adjustText")


def run_pipeline(
    config: PipelineConfig,
    *,
    resolver: SymbolResolver | None = None,
    logger: logging.Logger | None = None,
    style: PlotStyle = DEFAULT_PLOT_STYLE,
) -> PipelineResult:
    """Load, transform, embed, annotate and render one DEG table.

    Stages run once, in order. Any fatal error propagates before the figure is
    written. `resolver` overrides the one built from `config.symbols`.
    """
    outdir = Path(config.outdir)
    own_logger = logger is None
    if logger is None:
        logger = setup_logger(outdir / "logs" / LOG_NAME, "degmap")
    try:
        return _run(config, resolver=resolver, logger=logger, style=style)
    finally:
        if own_logger:
            close_logger(logger)


def _run(
    config: PipelineConfig,
    *,
    resolver: SymbolResolver | None,
    logger: logging.Logger,
    style: PlotStyle,
) -> PipelineResult:
    outdir = Path(config.outdir)
    if config.icon_path is not None and not Path(config.icon_path).exists():
        raise FileNotFoundError(f"Icon asset '{config.icon_path}' not found.")

    logger.info("Loading DEG table: %s", config.input_path)
    table = load_deg_table(config.input_path)
    n_input = int(len(table))
    table = validate_deg_table(table, drop_incomplete=config.drop_incomplete, logger=logger)
    logger.info("Loaded %d gene(s), %d kept after validation.", n_input, len(table))

    table = add_log_columns(table, padj_epsilon=config.padj_epsilon)
    features = build_feature_matrix(table, FEATURE_COLUMNS)

    coords = compute_embedding(features, config.embedding, logger=logger)
    x_col, y_col = embedding_columns(config.embedding.method)
    table[x_col] = coords[:, 0]
    table[y_col] = coords[:, 1]

    top = select_top_genes(table, n=config.top_n)
    if resolver is None:
        resolver = build_symbol_resolver(config.symbols, logger=logger)
    top = annotate_top_genes(top, resolver, placeholder=config.symbols.placeholder, logger=logger)
    n_missing = int(top["symbol"].isna().sum())
    logger.info("Selected %d top gene(s); %d without symbol.", len(top), n_missing)

    apply_plot_style(style)
    figure_path = render_embedding_map(
        table,
        top,
        config.figure_path,
        x_col=x_col,
        y_col=y_col,
        icon_path=config.icon_path,
        title=config.title,
        style=style,
    )
    logger.info("Wrote figure: %s", figure_path.as_posix())

    top_genes_path = write_table(outdir / TOP_GENES_NAME, top)
    embedding_path = write_table(outdir / EMBEDDING_NAME, table)

    metadata: dict[str, Any] = {
        "degmap_version": __version__,
        "timestamp_utc": datetime.now(timezone.utc).isoformat(),
        "config": asdict(config),
        "plot_style": plot_style_dict(style),
        "versions": package_versions(VERSIONED_PACKAGES),
        "n_input_rows": n_input,
        "n_rows": int(len(table)),
        "n_top": int(len(top)),
        "n_top_missing_symbol": n_missing,
        "embedding_columns": [x_col, y_col],
        "top_gene_ids": [str(g) for g in top["gene_id"]],
    }
    metadata_path = write_json(outdir / METADATA_NAME, metadata)
    logger.info("Pipeline complete. Results in %s", outdir.as_posix())

    return PipelineResult(
        table=table,
        top_genes=top,
        figure_path=figure_path,
        top_genes_path=top_genes_path,
        embedding_path=embedding_path,
        metadata_path=metadata_path,
        metadata=metadata,
    )
