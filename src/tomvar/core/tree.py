# src/tomvar/core/tree.py
"""
Árvore tipada de documentos de configuração.

Este módulo define a representação interna de um documento carregado:
uma união etiquetada `Leaf(str) | Section(mapping)`, construída a partir
do dicionário devolvido pelo parser e percorrida sem asserções dinâmicas
de tipo espalhadas pelo resto do core.

Política de conversão (v1):
    - str               → texto inalterado
    - bool              → "true" / "false"
    - int / float       → `str(valor)`
    - date / time       → formato ISO
    - None              → texto vazio
    - lista de escalares → uma folha com os itens unidos por ","
    - lista com tabelas → seção indexada por posição ("0", "1", ...)

Invariantes:
    - Toda folha contém texto (`str`)
    - Chaves de seção são sempre `str`
    - Nenhuma função deste módulo muta a árvore recebida

Limites explícitos:
    - Não lê arquivos
    - Não resolve placeholders
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

KeyPath = Tuple[str, ...]


@dataclass(frozen=True)
class Leaf:
    value: str


@dataclass(frozen=True)
class Section:
    children: Mapping[str, "Node"]


Node = Union[Leaf, Section]


def scalar_to_text(value: Any) -> str:
    """Converte um escalar do parser para a forma textual canônica."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    # bool antes de int: bool é subclasse de int
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return ",".join(scalar_to_text(item) for item in value)
    return str(value)


def build_tree(data: Mapping[Any, Any]) -> Section:
    """
    Constrói uma `Section` a partir do mapa aninhado devolvido pelo parser.

    Listas que contêm ao menos uma tabela viram seções indexadas por
    posição, de modo que `servers.0.host` seja endereçável. Demais listas
    viram uma única folha separada por vírgulas.

    Args:
        data (Mapping[Any, Any]): Conteúdo do documento.

    Returns:
        Section: Raiz da árvore tipada.
    """
    children: Dict[str, Node] = {}
    for key, value in data.items():
        children[str(key)] = _build_node(value)
    return Section(children)


def _build_node(value: Any) -> Node:
    if isinstance(value, Mapping):
        return build_tree(value)
    if isinstance(value, (list, tuple)) and any(isinstance(item, Mapping) for item in value):
        return Section({str(i): _build_node(item) for i, item in enumerate(value)})
    return Leaf(scalar_to_text(value))


def split_key(key: str) -> KeyPath:
    return tuple(key.split("."))


def join_key(path: Sequence[str]) -> str:
    return ".".join(path)


def find_node(section: Section, path: Sequence[str]) -> Optional[Node]:
    """Percorre `path` a partir de `section`; devolve None se algum trecho não existir."""
    current: Node = section
    for part in path:
        if not isinstance(current, Section):
            return None
        nxt = current.children.get(part)
        if nxt is None:
            return None
        current = nxt
    return current


def find_leaf(section: Section, path: Sequence[str]) -> Optional[str]:
    node = find_node(section, path) if path else None
    if isinstance(node, Leaf):
        return node.value
    return None


def iter_leaves(section: Section, prefix: KeyPath = ()) -> Iterator[Tuple[KeyPath, str]]:
    for key, node in section.children.items():
        path = prefix + (key,)
        if isinstance(node, Section):
            yield from iter_leaves(node, path)
        else:
            yield path, node.value


def collect_keys(section: Section) -> List[str]:
    return [join_key(path) for path, _ in iter_leaves(section)]


def map_leaves(section: Section, fn: Callable[[KeyPath, str], str], prefix: KeyPath = ()) -> Section:
    """Devolve uma nova árvore com `fn(path, value)` aplicada a cada folha."""
    children: Dict[str, Node] = {}
    for key, node in section.children.items():
        path = prefix + (key,)
        if isinstance(node, Section):
            children[key] = map_leaves(node, fn, path)
        else:
            children[key] = Leaf(fn(path, node.value))
    return Section(children)


def to_dict(section: Section) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key, node in section.children.items():
        out[key] = to_dict(node) if isinstance(node, Section) else node.value
    return out
