# src/tomvar/core/lookup.py
"""
Busca de chaves e resolução de conflitos entre documentos.

Este módulo mapeia uma chave externa (ex.: `server.port` ou
`app.server.port`) para exatamente um valor de folha, ou falha com um erro
descritivo. A mesma regra de desambiguação (`locate`) é usada pelo
resolvedor de placeholders, de modo que uma referência se comporta igual
venha ela do usuário ou de dentro de um `{{...}}`.

Regra de desambiguação:
    - se o primeiro segmento nomeia um namespace e há mais segmentos,
      apenas aquele documento é consultado
    - caso contrário, todos os documentos são consultados
    - somente folhas contam como correspondência

Resultados:
    - nenhuma correspondência   → KeyNotFound
    - uma correspondência       → valor
    - várias correspondências   → AmbiguousKey

Limites explícitos:
    - Não resolve placeholders
    - Não carrega documentos
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Mapping, Optional, Sequence

from .errors import (
    ambiguous_key,
    key_not_found,
    key_not_found_in_document,
    no_documents,
)
from .result import Result
from .store import NamespacedStore
from .tree import KeyPath, Section, collect_keys, find_leaf, join_key, split_key


@dataclass(frozen=True)
class Match:
    namespace: str
    path: KeyPath
    value: str

    @property
    def qualified_key(self) -> str:
        return join_key((self.namespace,) + self.path)


@dataclass(frozen=True)
class Location:
    """Resultado da regra de desambiguação para um caminho."""

    path: KeyPath
    namespace: Optional[str]
    matches: List[Match]

    @property
    def explicit(self) -> bool:
        return self.namespace is not None


def locate(trees: Mapping[str, Section], path: Sequence[str]) -> Location:
    path = tuple(path)
    if len(path) > 1 and path[0] in trees:
        namespace, rest = path[0], path[1:]
        value = find_leaf(trees[namespace], rest)
        matches = [] if value is None else [Match(namespace, rest, value)]
        return Location(path=rest, namespace=namespace, matches=matches)

    matches = []
    for namespace, tree in trees.items():
        value = find_leaf(tree, path)
        if value is not None:
            matches.append(Match(namespace, path, value))
    return Location(path=path, namespace=None, matches=matches)


def available_keys(store: NamespacedStore) -> List[str]:
    """Todas as chaves de folha, qualificadas pelo namespace."""
    keys: List[str] = []
    for namespace, doc in store.documents.items():
        keys.extend(f"{namespace}.{key}" for key in collect_keys(doc.tree))
    return keys


def lookup(store: NamespacedStore, key: str) -> Result[str]:
    """
    Resolve `key` contra um store já substituído.

    Args:
        store (NamespacedStore): Store resolvido.
        key (str): Chave pontuada, opcionalmente qualificada.

    Returns:
        Result[str]: Valor da folha ou um dos erros
        `KeyNotFound`, `AmbiguousKey`, `ParseFailure`.
    """
    if not store.documents and not store.skipped:
        return Result.failure(no_documents(key=key))

    segments = split_key(key)
    head = segments[0]

    if len(segments) > 1 and head in store.skipped and head not in store.documents:
        return Result.failure(store.skipped[head])

    found = locate(store.trees, segments)

    if found.explicit:
        if found.matches:
            return Result.success(found.matches[0].value)
        doc = store.documents[found.namespace]
        return Result.failure(
            key_not_found_in_document(
                key=join_key(found.path),
                namespace=doc.namespace,
                location=str(doc.location),
                available=collect_keys(doc.tree),
            )
        )

    if len(found.matches) == 1:
        return Result.success(found.matches[0].value)

    if not found.matches:
        return Result.failure(
            key_not_found(
                key=key,
                searched=[str(doc.location) for doc in store.documents.values()],
                skipped=[store.location_of(ns) for ns in store.skipped],
                available=available_keys(store),
                # 3+ segmentos: o primeiro provavelmente era um namespace
                namespaces=store.namespaces if len(segments) > 2 else (),
            )
        )

    return Result.failure(
        ambiguous_key(
            key=key,
            candidates=[
                {"namespace": m.namespace, "location": store.location_of(m.namespace)}
                for m in found.matches
            ],
        )
    )
