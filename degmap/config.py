"""Configuration loading utilities for degmap pipelines."""

from __future__ import annotations

import json
from dataclasses import fields, replace
from pathlib import Path
from typing import Any

from degmap.core.types import EmbeddingConfig, PipelineConfig, SymbolConfig


def load_json_config(path: str | Path) -> dict[str, Any]:
    """Load and validate a pipeline config from a JSON file."""
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    if config_path.suffix.lower() != ".json":
        raise ValueError(
            f"Unsupported config format for '{config_path}'. Use a .json config file."
        )

    try:
        with open(config_path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except json.JSONDecodeError as exc:
        raise ValueError(
            f"Invalid JSON in config '{config_path}' at line {exc.lineno}, "
            f"column {exc.colno}: {exc.msg}"
        ) from exc

    if not isinstance(data, dict):
        raise ValueError(
            f"Invalid config root in '{config_path}': expected JSON object, got {type(data).__name__}."
        )
    return data


def _check_keys(section: str, data: dict[str, Any], cls: type) -> None:
    allowed = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - allowed)
    if unknown:
        raise ValueError(
            f"Unknown key(s) in config section '{section}': {', '.join(unknown)}."
        )


def _section(data: dict[str, Any], key: str, cls: type) -> Any:
    raw = data.get(key, {})
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValueError(
            f"Config section '{key}' must be a JSON object, got {type(raw).__name__}."
        )
    _check_keys(key, raw, cls)
    return cls(**raw)


def pipeline_config_from_dict(data: dict[str, Any]) -> PipelineConfig:
    """Build a `PipelineConfig` from a parsed config mapping."""
    _check_keys("<root>", data, PipelineConfig)
    top_level = {k: v for k, v in data.items() if k not in ("embedding", "symbols")}
    cfg = PipelineConfig(
        **top_level,
        embedding=_section(data, "embedding", EmbeddingConfig),
        symbols=_section(data, "symbols", SymbolConfig),
    )
    if int(cfg.top_n) <= 0:
        raise ValueError("top_n must be positive.")
    return cfg


def load_pipeline_config(path: str | Path) -> PipelineConfig:
    return pipeline_config_from_dict(load_json_config(path))


def with_overrides(cfg: PipelineConfig, **overrides: Any) -> PipelineConfig:
    """Return a copy of `cfg` with non-None overrides applied.

    `seed` is routed into the embedding section; `symbol_source` and
    `symbol_table` into symbols.
    """
    seed = overrides.pop("seed", None)
    symbol_source = overrides.pop("symbol_source", None)
    symbol_table = overrides.pop("symbol_table", None)
    top = {k: v for k, v in overrides.items() if v is not None}
    out = replace(cfg, **top)
    if seed is not None:
        out = replace(out, embedding=replace(out.embedding, seed=int(seed)))
    if symbol_source is not None:
        out = replace(out, symbols=replace(out.symbols, source=str(symbol_source)))
    if symbol_table is not None:
        out = replace(out, symbols=replace(out.symbols, table_path=str(symbol_table)))
    return out
