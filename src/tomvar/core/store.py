# src/tomvar/core/store.py
"""
Construção do store com namespaces.

Este módulo reúne os documentos descobertos em um único mapa
`namespace → árvore`, o universo de resolução de uma execução. Cada
documento é carregado de forma independente: um documento inválido é
registrado em `skipped` e não bloqueia os demais.

Derivação de namespace:
    - nome do arquivo sem extensão ("app.toml" → "app")
    - pontos no nome viram "_" ("app.prod.toml" → "app_prod")
    - se o nome já foi usado por um documento anterior, usa-se o caminho
      relativo sem extensão ("services/app"), e por fim o caminho relativo
      completo, também sem pontos ("services/app_yaml")

Invariantes:
    - Namespaces são únicos dentro de um store
    - A mesma lista de caminhos produz sempre os mesmos namespaces
    - Um store nunca é mutado após construído

Limites explícitos:
    - Não resolve placeholders
    - Não trata conflitos de chave (isso é papel do lookup)
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Set

from .discovery import load_document
from .errors import ParseFailure, parse_failure
from .tree import Section, build_tree

Loader = Callable[[Path], Mapping[str, Any]]


@dataclass(frozen=True)
class Document:
    location: Path
    namespace: str
    tree: Section


@dataclass(frozen=True)
class NamespacedStore:
    documents: Dict[str, Document] = field(default_factory=dict)
    skipped: Dict[str, ParseFailure] = field(default_factory=dict)

    @property
    def namespaces(self) -> List[str]:
        return list(self.documents)

    @property
    def trees(self) -> Dict[str, Section]:
        return {ns: doc.tree for ns, doc in self.documents.items()}

    def location_of(self, namespace: str) -> str:
        if namespace in self.documents:
            return str(self.documents[namespace].location)
        return str(self.skipped[namespace].details.get("location", namespace))

    def with_trees(self, trees: Mapping[str, Section]) -> "NamespacedStore":
        """Novo store com as mesmas origens e árvores substituídas."""
        documents = {
            ns: replace(doc, tree=trees[ns]) for ns, doc in self.documents.items()
        }
        return NamespacedStore(documents=documents, skipped=dict(self.skipped))


def _sanitize(name: str) -> str:
    return name.replace(".", "_")


def derive_namespace(location: Path, root: Optional[Path], taken: Set[str]) -> str:
    candidates = [_sanitize(location.stem)]

    try:
        relative = location.relative_to(root) if root is not None else location
    except ValueError:
        relative = location

    candidates.append(_sanitize(relative.with_suffix("").as_posix()))
    candidates.append(_sanitize(relative.as_posix()))

    for candidate in candidates:
        if candidate not in taken:
            return candidate
    # a troca de "." por "_" pode aproximar nomes distintos
    base = _sanitize(location.as_posix())
    candidate, n = base, 2
    while candidate in taken:
        candidate, n = f"{base}_{n}", n + 1
    return candidate


def build_store(
    locations: Iterable[Path],
    *,
    root: Optional[Path] = None,
    loader: Loader = load_document,
) -> NamespacedStore:
    """
    Carrega cada documento e monta o store com namespaces.

    Args:
        locations (Iterable[Path]): Caminhos descobertos.
        root (Optional[Path]): Raiz usada para namespaces de desempate.
        loader (Loader): Parser de documentos (injetável em testes).

    Returns:
        NamespacedStore: Documentos carregados e documentos ignorados.
    """
    documents: Dict[str, Document] = {}
    skipped: Dict[str, ParseFailure] = {}
    taken: Set[str] = set()

    for location in sorted(locations):
        namespace = derive_namespace(location, root, taken)
        taken.add(namespace)

        try:
            data = loader(location)
        except ParseFailure as e:
            skipped[namespace] = parse_failure(
                location=str(location), namespace=namespace, reason=e.details.get("reason", e.message)
            )
            continue

        documents[namespace] = Document(location=location, namespace=namespace, tree=build_tree(data))

    return NamespacedStore(documents=documents, skipped=skipped)
