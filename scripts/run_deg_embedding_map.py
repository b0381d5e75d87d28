#!/usr/bin/env python3
"""CLI entrypoint for the DEG embedding map pipeline."""

from __future__ import annotations

from degmap.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
