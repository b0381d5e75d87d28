"""Command-line interface for the DEG embedding map pipeline."""

from __future__ import annotations

import argparse
from typing import Iterable

from degmap.config import load_pipeline_config, with_overrides
from degmap.core.types import PipelineConfig
from degmap.pipeline.run import run_pipeline


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Embed a DEG table in 2D and plot the top genes by adjusted p-value."
    )
    parser.add_argument(
        "--config", default=None, help="Path to JSON pipeline config (defaults apply if omitted)."
    )
    parser.add_argument("--input", dest="input_path", default=None, help="DEG results CSV")
    parser.add_argument("--outdir", default=None, help="Output directory")
    parser.add_argument("--seed", type=int, default=None, help="Embedding random seed")
    parser.add_argument("--icon", dest="icon_path", default=None, help="Icon image for top genes")
    parser.add_argument(
        "--symbol-source",
        choices=["mygene", "table", "none"],
        default=None,
        help="Where gene symbols are looked up",
    )
    parser.add_argument(
        "--symbol-table",
        dest="symbol_table",
        default=None,
        help="Local id -> symbol table (CSV or TSV) for --symbol-source table",
    )
    return parser.parse_args(list(argv) if argv is not None else None)


def main(argv: Iterable[str] | None = None) -> int:
    """Main CLI entry point.

    Args:
        argv: Command-line arguments (if None, uses sys.argv).

    Returns:
        Exit code (0 for success).
    """
    args = parse_args(argv)
    cfg = load_pipeline_config(args.config) if args.config else PipelineConfig()
    cfg = with_overrides(
        cfg,
        input_path=args.input_path,
        outdir=args.outdir,
        icon_path=args.icon_path,
        seed=args.seed,
        symbol_source=args.symbol_source,
        symbol_table=args.symbol_table,
    )
    result = run_pipeline(cfg)
    print(f"figure={result.figure_path.as_posix()}")
    print(f"top_genes={result.top_genes_path.as_posix()}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
