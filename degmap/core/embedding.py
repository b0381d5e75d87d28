"""2D embedding of the standardized gene feature matrix."""

from __future__ import annotations

import logging

import anndata as ad
import numpy as np
import pandas as pd
import scanpy as sc

from degmap.core.types import EmbeddingConfig

MIN_ROWS = 4
# Spectral initialisation needs more graph nodes than Lanczos vectors.
MIN_SPECTRAL_ROWS = 16
SUPPORTED_METHODS: tuple[str, ...] = ("umap", "tsne")


def embedding_columns(method: str) -> tuple[str, str]:
    prefix = str(method).strip().upper()
    return f"{prefix}1", f"{prefix}2"


def _features_to_adata(features: np.ndarray) -> ad.AnnData:
    n_obs, n_vars = features.shape
    obs = pd.DataFrame(index=[f"g{i}" for i in range(n_obs)])
    var = pd.DataFrame(index=[f"f{j}" for j in range(n_vars)])
    return ad.AnnData(X=features.astype(np.float32), obs=obs, var=var)


def _run_umap(adata: ad.AnnData, config: EmbeddingConfig, logger: logging.Logger) -> np.ndarray:
    n_obs = adata.n_obs
    n_neighbors = min(int(config.n_neighbors), n_obs - 1)
    if n_neighbors < int(config.n_neighbors):
        logger.info("Clamping n_neighbors to %d for %d rows.", n_neighbors, n_obs)
    init_pos = "spectral" if n_obs >= MIN_SPECTRAL_ROWS else "random"
    if init_pos != "spectral":
        logger.info("Using random UMAP initialisation for %d rows.", n_obs)

    sc.pp.neighbors(
        adata,
        n_neighbors=n_neighbors,
        use_rep="X",
        metric=config.metric,
        random_state=int(config.seed),
    )
    sc.tl.umap(
        adata,
        min_dist=float(config.min_dist),
        spread=float(config.spread),
        init_pos=init_pos,
        random_state=int(config.seed),
    )
    return np.asarray(adata.obsm["X_umap"], dtype=float)


def _run_tsne(adata: ad.AnnData, config: EmbeddingConfig, logger: logging.Logger) -> np.ndarray:
    n_obs = adata.n_obs
    perplexity = min(float(config.perplexity), (n_obs - 1) / 3.0)
    if perplexity < float(config.perplexity):
        logger.info("Clamping perplexity to %.3g for %d rows.", perplexity, n_obs)
    sc.tl.tsne(
        adata,
        use_rep="X",
        perplexity=perplexity,
        metric=config.metric,
        random_state=int(config.seed),
        n_jobs=1,
    )
    return np.asarray(adata.obsm["X_tsne"], dtype=float)


def compute_embedding(
    features: np.ndarray,
    config: EmbeddingConfig = EmbeddingConfig(),
    *,
    logger: logging.Logger | None = None,
) -> np.ndarray:
    """Embed rows of `features` into 2D, one coordinate pair per input row.

    Output rows follow input row order. The same seed and input give the same
    coordinates.
    """
    log = logger or logging.getLogger(__name__)
    arr = np.asarray(features, dtype=float)
    if arr.ndim != 2:
        raise ValueError(f"features must have shape (N, D), got {arr.shape}.")
    if arr.shape[0] < MIN_ROWS:
        raise ValueError(
            f"Embedding needs at least {MIN_ROWS} rows, got {arr.shape[0]}; "
            "input is degenerate."
        )
    if not np.isfinite(arr).all():
        raise ValueError("features contain NaN/inf values.")

    method = str(config.method).strip().lower()
    if method not in SUPPORTED_METHODS:
        raise ValueError(
            f"Unsupported embedding method '{config.method}'. Use one of: "
            f"{', '.join(SUPPORTED_METHODS)}."
        )

    adata = _features_to_adata(arr)
    log.info("Computing %s embedding for %d rows (seed=%d).", method, arr.shape[0], config.seed)
    if method == "umap":
        coords = _run_umap(adata, config, log)
    else:
        coords = _run_tsne(adata, config, log)

    if coords.shape != (arr.shape[0], 2):
        raise ValueError(f"Embedding returned shape {coords.shape}, expected ({arr.shape[0]}, 2).")
    if not np.isfinite(coords).all():
        raise ValueError("Embedding produced NaN/inf coordinates.")
    return coords
