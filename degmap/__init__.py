"""degmap public API."""

from degmap._version import __version__
from degmap.core.annotate import annotate_top_genes, select_top_genes
from degmap.core.embedding import compute_embedding
from degmap.core.features import add_log_columns, build_feature_matrix
from degmap.core.io import load_deg_table
from degmap.core.types import EmbeddingConfig, PipelineConfig, SymbolConfig


def run_pipeline(*args, **kwargs):
    """Lazy wrapper to avoid importing plotting dependencies at import time."""
    from degmap.pipeline.run import run_pipeline as _run_pipeline

    return _run_pipeline(*args, **kwargs)


__all__ = [
    "__version__",
    "EmbeddingConfig",
    "SymbolConfig",
    "PipelineConfig",
    "load_deg_table",
    "add_log_columns",
    "build_feature_matrix",
    "compute_embedding",
    "select_top_genes",
    "annotate_top_genes",
    "run_pipeline",
]
