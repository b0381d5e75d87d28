"""Core pipeline stages (no plotting, no filesystem output)."""

from degmap.core.annotate import annotate_top_genes, format_label, select_top_genes
from degmap.core.embedding import compute_embedding, embedding_columns
from degmap.core.features import (
    FEATURE_COLUMNS,
    add_log_columns,
    build_feature_matrix,
    standardize_features,
)
from degmap.core.io import REQUIRED_COLUMNS, load_deg_table, validate_deg_table
from degmap.core.types import EmbeddingConfig, PipelineConfig, PipelineResult, SymbolConfig

__all__ = [
    "EmbeddingConfig",
    "SymbolConfig",
    "PipelineConfig",
    "PipelineResult",
    "REQUIRED_COLUMNS",
    "FEATURE_COLUMNS",
    "load_deg_table",
    "validate_deg_table",
    "add_log_columns",
    "standardize_features",
    "build_feature_matrix",
    "compute_embedding",
    "embedding_columns",
    "select_top_genes",
    "annotate_top_genes",
    "format_label",
]
