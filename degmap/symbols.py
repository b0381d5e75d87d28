"""Gene identifier to symbol resolvers.

Every resolver maps a batch of gene identifiers to a symbol, or `None` when the
identifier has no entry. Resolvers never raise for a lookup miss.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Mapping, Protocol, Sequence

import pandas as pd
import requests

from degmap.core.types import SymbolConfig

MYGENE_QUERY_URL = "https://mygene.info/v3/query"


class SymbolResolver(Protocol):
    def resolve(self, gene_ids: Sequence[str]) -> dict[str, str | None]: ...


def _clean_symbol(value: object) -> str | None:
    if value is None:
        return None
    if isinstance(value, float) and pd.isna(value):
        return None
    text = str(value).strip()
    return text or None


class TableSymbolResolver:
    """Resolve symbols from an in-memory id -> symbol mapping."""

    def __init__(self, mapping: Mapping[str, str | None] | None = None):
        self._mapping = {str(k): _clean_symbol(v) for k, v in (mapping or {}).items()}

    def __len__(self) -> int:
        return len(self._mapping)

    @classmethod
    def from_file(
        cls,
        path: str | Path,
        *,
        id_column: str = "gene_id",
        symbol_column: str = "symbol",
        sep: str | None = None,
    ) -> "TableSymbolResolver":
        """Load a local annotation table (CSV, or TSV for .tsv/.txt files).

        Duplicate identifiers keep their first symbol.
        """
        table_path = Path(path)
        if not table_path.exists():
            raise FileNotFoundError(f"Symbol table '{table_path}' not found.")
        if sep is None:
            sep = "\t" if table_path.suffix.lower() in (".tsv", ".txt") else ","
        df = pd.read_csv(table_path, sep=sep, dtype=str)
        missing = [c for c in (id_column, symbol_column) if c not in df.columns]
        if missing:
            raise ValueError(
                f"Symbol table '{table_path}' is missing column(s): {', '.join(missing)}."
            )
        df = df.drop_duplicates(subset=id_column, keep="first")
        return cls(dict(zip(df[id_column].astype(str), df[symbol_column])))

    def resolve(self, gene_ids: Sequence[str]) -> dict[str, str | None]:
        return {str(g): self._mapping.get(str(g)) for g in gene_ids}


class MyGeneSymbolResolver:
    """Batch symbol lookup against the mygene.info query service."""

    def __init__(
        self,
        *,
        species: str = "3702",
        scopes: str = "locus_tag,symbol,ensembl.gene",
        session: requests.Session | None = None,
        timeout: float = 10.0,
        batch_size: int = 1000,
        url: str = MYGENE_QUERY_URL,
        logger: logging.Logger | None = None,
    ):
        self.species = species
        self.scopes = scopes
        self.session = session or requests.Session()
        self.timeout = float(timeout)
        self.batch_size = int(batch_size)
        self.url = url
        self.logger = logger or logging.getLogger(__name__)

    def _query_batch(self, batch: list[str]) -> dict[str, str | None]:
        out: dict[str, str | None] = {g: None for g in batch}
        try:
            resp = self.session.post(
                self.url,
                data={
                    "q": ",".join(batch),
                    "scopes": self.scopes,
                    "fields": "symbol",
                    "species": self.species,
                },
                timeout=self.timeout,
            )
            resp.raise_for_status()
            hits = resp.json()
        except requests.RequestException as exc:
            self.logger.warning(
                "Symbol lookup failed for %d id(s); using placeholders: %s", len(batch), exc
            )
            return out

        if not isinstance(hits, list):
            self.logger.warning("Unexpected mygene response type %s.", type(hits).__name__)
            return out
        for hit in hits:
            if not isinstance(hit, dict) or hit.get("notfound"):
                continue
            query = str(hit.get("query", ""))
            # Several hits per query are possible; the first one wins.
            if query in out and out[query] is None:
                out[query] = _clean_symbol(hit.get("symbol"))
        return out

    def resolve(self, gene_ids: Sequence[str]) -> dict[str, str | None]:
        ids = list(dict.fromkeys(str(g) for g in gene_ids))
        result: dict[str, str | None] = {}
        for start in range(0, len(ids), self.batch_size):
            result.update(self._query_batch(ids[start : start + self.batch_size]))
        return result


class CachedSymbolResolver:
    """Wrap a resolver with a JSON file cache of id -> symbol.

    Only resolved symbols are cached; misses are asked again on the next call.
    """

    def __init__(self, inner: SymbolResolver, cache_path: str | Path):
        self.inner = inner
        self.cache_path = Path(cache_path)
        self._cache = self._read_cache()

    def _read_cache(self) -> dict[str, str | None]:
        if not self.cache_path.exists():
            return {}
        try:
            with self.cache_path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except json.JSONDecodeError as exc:
            raise ValueError(
                f"Invalid JSON in symbol cache '{self.cache_path}' at line {exc.lineno}, "
                f"column {exc.colno}: {exc.msg}"
            ) from exc
        if not isinstance(data, dict):
            raise ValueError(f"Symbol cache '{self.cache_path}' must hold a JSON object.")
        return {str(k): _clean_symbol(v) for k, v in data.items()}

    def _write_cache(self) -> None:
        self.cache_path.parent.mkdir(parents=True, exist_ok=True)
        with self.cache_path.open("w", encoding="utf-8") as fh:
            json.dump(self._cache, fh, indent=2, sort_keys=True)

    def resolve(self, gene_ids: Sequence[str]) -> dict[str, str | None]:
        ids = [str(g) for g in gene_ids]
        unseen = [g for g in dict.fromkeys(ids) if g not in self._cache]
        fetched: dict[str, str | None] = {}
        if unseen:
            fetched = {g: _clean_symbol(s) for g, s in self.inner.resolve(unseen).items()}
            added = {g: s for g, s in fetched.items() if s is not None}
            if added:
                self._cache.update(added)
                self._write_cache()
        return {g: self._cache.get(g, fetched.get(g)) for g in ids}


def build_symbol_resolver(
    config: SymbolConfig, *, logger: logging.Logger | None = None
) -> SymbolResolver:
    """Create the resolver described by `config`."""
    source = str(config.source).strip().lower()
    resolver: SymbolResolver
    if source == "mygene":
        resolver = MyGeneSymbolResolver(
            species=config.species,
            scopes=config.scopes,
            timeout=config.timeout,
            logger=logger,
        )
    elif source == "table":
        if not config.table_path:
            raise ValueError("symbols.table_path is required when symbols.source is 'table'.")
        resolver = TableSymbolResolver.from_file(
            config.table_path,
            id_column=config.id_column,
            symbol_column=config.symbol_column,
        )
    elif source == "none":
        resolver = TableSymbolResolver()
    else:
        raise ValueError(
            f"Unsupported symbol source '{config.source}'. Use 'mygene', 'table' or 'none'."
        )

    if config.cache_path and source != "none":
        resolver = CachedSymbolResolver(resolver, config.cache_path)
    return resolver
