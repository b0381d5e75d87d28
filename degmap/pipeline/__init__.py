"""Pipeline entrypoints."""

from degmap.pipeline.run import run_pipeline

__all__ = ["run_pipeline"]
