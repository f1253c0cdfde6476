# src/tomvar/core/cache.py
"""
Cache de resolução com invalidação por data de modificação.

Este módulo encapsula o pipeline completo (descoberta → store →
substituição → lookup) atrás de um acessor memoizado por chave.

Política de cache (v1):
    - Armazenamento por chave: cada chave pedida guarda seu resultado
      (valor ou erro) em um `CacheEntry`
    - Invalidação do store inteiro: qualquer documento novo, removido ou
      com data de modificação diferente da registrada descarta todas as
      entradas e o store resolvido
    - O store resolvido é reaproveitado entre chaves distintas enquanto
      nenhum documento mudar

Decisões arquiteturais:
    - Nenhum estado global: o cache é um objeto do chamador
    - Colaboradores injetáveis (descoberta, stat, parser, relógio, ambiente)
    - A sequência stat → decisão → reconstrução → memoização é atômica
      sob um único `threading.Lock`

Invariantes:
    - Um valor nunca é servido após a mudança do documento de origem
    - O store é reconstruído no máximo uma vez por invalidação
    - Falhas de descoberta não são memoizadas

Limites explícitos:
    - Não converte tipos
    - Não observa mudanças no ambiente (use `clear`)
"""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from .discovery import discover_documents, find_project_root, load_document
from .errors import DiscoveryFailure, TomvarError
from .events import Clock, EventLog, utc_now
from .hashing import compute_store_hash
from .lookup import lookup
from .resolver import resolve_store
from .result import Result
from .settings import ResolverSettings
from .store import Loader, NamespacedStore, build_store

Discover = Callable[[], Iterable[Path]]
Stat = Callable[[Path], Any]


def mtime_ns(path: Path) -> int:
    return path.stat().st_mtime_ns


@dataclass(frozen=True)
class CacheEntry:
    value: Optional[str]
    error: Optional[TomvarError]
    timestamp: datetime

    def to_result(self) -> Result[str]:
        if self.error is not None:
            return Result.failure(self.error)
        return Result.success(self.value)


@dataclass
class CacheStats:
    lookups: int = 0
    hits: int = 0
    misses: int = 0
    rebuilds: int = 0
    invalidations: int = 0
    documents_parsed: int = 0


class ResolutionCache:
    """
    Acessor memoizado de chaves de configuração.

    Exemplo:
        cache = ResolutionCache(ResolverSettings(root=Path("conf")))
        cache.resolve("database.url").unwrap()
    """

    def __init__(
        self,
        settings: Optional[ResolverSettings] = None,
        *,
        discover: Optional[Discover] = None,
        stat: Stat = mtime_ns,
        loader: Loader = load_document,
        clock: Clock = utc_now,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.settings = settings or ResolverSettings()
        self._discover = discover or self._discover_documents
        self._stat = stat
        self._loader = loader
        self._clock = clock
        self._environ = environ

        self.events = EventLog(clock=clock)
        self.stats = CacheStats()
        self.store_hash: Optional[str] = None

        self._lock = threading.Lock()
        self._root: Optional[Path] = self.settings.root
        self._entries: Dict[str, CacheEntry] = {}
        self._seen: Optional[Dict[Path, Any]] = None
        self._resolved: Optional[Result[NamespacedStore]] = None

    # -----------------------------
    # Colaboradores padrão
    # -----------------------------
    def _discover_documents(self) -> List[Path]:
        root = self.settings.root or find_project_root(markers=self.settings.root_markers)
        self._root = root
        return discover_documents(root, self.settings)

    def _load(self, path: Path) -> Mapping[str, Any]:
        self.stats.documents_parsed += 1
        return self._loader(path)

    # -----------------------------
    # Estado
    # -----------------------------
    def _snapshot(self) -> Dict[Path, Any]:
        snapshot: Dict[Path, Any] = {}
        for path in self._discover():
            try:
                snapshot[path] = self._stat(path)
            except OSError:
                # removido entre a descoberta e o stat: tratado como ausente
                continue
        return snapshot

    def _invalidate(self, snapshot: Dict[Path, Any]) -> None:
        seen = self._seen or {}
        added = sorted(str(p) for p in snapshot.keys() - seen.keys())
        removed = sorted(str(p) for p in seen.keys() - snapshot.keys())
        modified = sorted(
            str(p) for p in snapshot.keys() & seen.keys() if snapshot[p] != seen[p]
        )

        self._entries.clear()
        self._resolved = None
        self._seen = None
        self.store_hash = None
        self.stats.invalidations += 1
        self.events.info(
            "cache.invalidated",
            "configuration documents changed",
            added=added,
            removed=removed,
            modified=modified,
        )

    def _rebuild(self, locations: List[Path]) -> Result[NamespacedStore]:
        self.stats.rebuilds += 1
        store = build_store(locations, root=self._root, loader=self._load)

        for namespace, failure in store.skipped.items():
            self.events.warning(
                "document.skipped",
                failure.message,
                namespace=namespace,
                location=failure.details.get("location"),
            )

        resolved = resolve_store(
            store,
            environ=os.environ if self._environ is None else self._environ,
            env_prefix=self.settings.env_prefix,
            max_passes=self.settings.max_passes,
        )

        if resolved.ok:
            self.store_hash = compute_store_hash(resolved.value)
            self.events.info(
                "store.rebuilt",
                f"resolved {len(store.documents)} configuration documents",
                documents=len(store.documents),
                skipped=len(store.skipped),
                store_hash=self.store_hash,
            )
        else:
            self.events.error(
                "resolution.failed",
                resolved.error.message,
                kind=resolved.error.kind,
                details=resolved.error.details,
            )

        return resolved

    # -----------------------------
    # API
    # -----------------------------
    def resolve(self, key: str) -> Result[str]:
        """
        Resolve `key`, reconstruindo o store apenas se algum documento mudou.

        Returns:
            Result[str]: Valor ou erro (memoizado por chave).
        """
        with self._lock:
            self.stats.lookups += 1

            try:
                snapshot = self._snapshot()
            except DiscoveryFailure as e:
                self.events.error("discovery.failed", e.message, **e.details)
                return Result.failure(e)

            if self._seen is not None and snapshot != self._seen:
                self._invalidate(snapshot)

            entry = self._entries.get(key)
            if entry is not None:
                self.stats.hits += 1
                return entry.to_result()

            self.stats.misses += 1
            if self._resolved is None:
                self._resolved = self._rebuild(sorted(snapshot))
                self._seen = snapshot

            if self._resolved.ok:
                result = lookup(self._resolved.value, key)
            else:
                result = Result.failure(self._resolved.error)

            self._entries[key] = CacheEntry(value=result.value, error=result.error, timestamp=self._clock())
            return result

    def lookup(self, key: str) -> Tuple[str, bool]:
        """Contrato `(valor, encontrado)` usado pela camada de acessores tipados."""
        result = self.resolve(key)
        if result.ok:
            return result.value, True
        return "", False

    def entry(self, key: str) -> Optional[CacheEntry]:
        with self._lock:
            return self._entries.get(key)

    def clear(self) -> None:
        """Descarta entradas, store e datas registradas (ex.: após mudar o ambiente)."""
        with self._lock:
            self._entries.clear()
            self._resolved = None
            self._seen = None
            self.store_hash = None
            self.events.info("cache.cleared", "cache cleared by caller")
