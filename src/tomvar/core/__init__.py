# src/tomvar/core/__init__.py
"""
Core do tomvar.

Este pacote contém o motor de resolução: descoberta e carregamento de
documentos, construção do store com namespaces, substituição de
placeholders por ponto fixo, busca com detecção de conflitos e o cache
invalidado por data de modificação.

Componentes principais:
    - discovery / store → documentos e namespaces
    - placeholders / resolver → substituição e diagnóstico de ciclos
    - lookup → desambiguação de chaves
    - cache → memoização e invalidação

Princípios fundamentais:
    - Operações devolvem `Result`; nada é levantado por falhas de domínio
    - Nenhum estado global
    - Nenhum resultado parcial é exposto

Limites explícitos:
    - Não converte tipos (ver `tomvar.accessors`)
    - Não oferece CLI
"""

from .cache import CacheEntry, CacheStats, ResolutionCache
from .errors import (
    AmbiguousKey,
    CircularReference,
    DiscoveryFailure,
    InvalidValue,
    KeyNotFound,
    MalformedPlaceholder,
    ParseFailure,
    TomvarError,
    UnresolvedReference,
)
from .lookup import locate, lookup
from .resolver import resolve_store
from .result import Result
from .settings import ResolverSettings
from .store import Document, NamespacedStore, build_store

__all__ = [
    "AmbiguousKey",
    "CacheEntry",
    "CacheStats",
    "CircularReference",
    "DiscoveryFailure",
    "Document",
    "InvalidValue",
    "KeyNotFound",
    "MalformedPlaceholder",
    "NamespacedStore",
    "ParseFailure",
    "ResolutionCache",
    "ResolverSettings",
    "Result",
    "TomvarError",
    "UnresolvedReference",
    "build_store",
    "locate",
    "lookup",
    "resolve_store",
]
