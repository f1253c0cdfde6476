# src/tomvar/core/resolver.py
"""
Resolvedor de placeholders por ponto fixo.

Este módulo recebe o store com namespaces e devolve um novo store em que
toda folha textual teve seus placeholders substituídos, ou um único erro
descritivo identificando as chaves problemáticas.

Algoritmo (v1):
    1. Cada passada percorre todas as folhas de todos os documentos contra
       o retrato do store tomado no início da passada.
    2. Referências internas usam a regra de `lookup.locate`; um alvo
       ausente, ambíguo, que não é folha ou que ainda contém "{{" adia a
       ocorrência para a próxima passada.
    3. Referências de ambiente usam o mapa de ambiente injetado; variável
       ausente (ou vazia) com default usa o default; ausente sem default
       adia a ocorrência.
    4. Uma passada é produtiva se ao menos uma ocorrência foi trocada.
       Repete-se até uma passada improdutiva ou até o teto de passadas.
       O teto automático conta os "{{" das folhas e dos valores de ambiente.
    5. Se restar algum "{{", o grafo de dependências das folhas pendentes é
       montado e uma busca em profundidade extrai o ciclo mínimo.
    6. Um caminho cujo primeiro segmento nomeia um documento ignorado
       (falha de parse) devolve a própria `ParseFailure` desse documento.

Decisões arquiteturais:
    - Substituição é textual: "3000" entra como o texto 3000
    - Auto-referência é um ciclo de um nó, sem caso especial
    - Cada texto de placeholder distinto é trocado em todas as ocorrências
    - Um "{{" literal que sobra após a convergência é erro
      (`MalformedPlaceholder`), nunca passa adiante

Invariantes:
    - Nenhum resultado parcial é exposto
    - Resolver um store sem placeholders devolve o próprio store
    - O número de passadas é sempre limitado

Limites explícitos:
    - Não lê arquivos nem descobre documentos
    - Não converte tipos
"""

from __future__ import annotations

import os
import re
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Set, Tuple

from .errors import (
    ParseFailure,
    TomvarError,
    ambiguous_reference,
    circular_reference,
    malformed_placeholder,
    unresolved_reference,
)
from .lookup import locate
from .placeholders import (
    ENVIRONMENT,
    MALFORMED,
    OPEN,
    PLACEHOLDER_PATTERN,
    Placeholder,
    count_open_delimiters,
    dangling_fragment,
    parse_body,
    scan,
)
from .result import Result
from .store import NamespacedStore
from .tree import KeyPath, Section, iter_leaves, join_key, map_leaves

Trees = Mapping[str, Section]


def _qualified(namespace: str, path: KeyPath) -> str:
    return join_key((namespace,) + tuple(path))


def _iter_qualified_leaves(trees: Trees) -> Iterator[Tuple[str, str]]:
    for namespace, tree in trees.items():
        for path, value in iter_leaves(tree):
            yield _qualified(namespace, path), value


def _env_value(ph: Placeholder, environ: Mapping[str, str]) -> Optional[str]:
    current = environ.get(ph.env_name)
    if current:
        return current
    if ph.default is not None:
        return ph.default
    # definida porém vazia, sem default: o texto vazio é o valor
    return current


def _replacement(ph: Placeholder, trees: Trees, environ: Mapping[str, str]) -> Optional[str]:
    if ph.kind == MALFORMED:
        return None
    if ph.kind == ENVIRONMENT:
        return _env_value(ph, environ)

    found = locate(trees, ph.path)
    if len(found.matches) != 1:
        return None
    value = found.matches[0].value
    if OPEN in value:
        return None
    return value


def substitute_value(
    value: str,
    trees: Trees,
    environ: Mapping[str, str],
    env_prefix: str = "ENV",
) -> Tuple[str, int]:
    """
    Substitui, em uma folha, todo placeholder resolvível nesta passada.

    Returns:
        Tuple[str, int]: Novo texto e número de ocorrências trocadas.
    """
    if OPEN not in value:
        return value, 0

    memo: Dict[str, Optional[str]] = {}
    replaced = 0

    def repl(m: "re.Match[str]") -> str:
        nonlocal replaced
        text = m.group(0)
        if text not in memo:
            memo[text] = _replacement(parse_body(text, m.group(1), env_prefix), trees, environ)
        new = memo[text]
        if new is None or new == text:
            return text
        replaced += 1
        return new

    return PLACEHOLDER_PATTERN.sub(repl, value), replaced


def _substitute_pass(trees: Trees, environ: Mapping[str, str], env_prefix: str) -> Tuple[Dict[str, Section], int]:
    replaced = 0

    def substitute(_path: KeyPath, value: str) -> str:
        nonlocal replaced
        new, n = substitute_value(value, trees, environ, env_prefix)
        replaced += n
        return new

    new_trees = {ns: map_leaves(tree, substitute) for ns, tree in trees.items()}
    return new_trees, replaced


def pass_ceiling(trees: Trees, environ: Optional[Mapping[str, str]] = None) -> int:
    """
    Teto automático de passadas.

    Referências e defaults nunca inserem "{{", então cada passada produtiva
    encurta em ao menos um elo a cadeia de dependências. Valores de ambiente
    podem trazer novos "{{"; cada um deles soma um elo possível, por isso
    também entram na contagem.
    """
    in_leaves = sum(count_open_delimiters(v) for _, v in _iter_qualified_leaves(trees))
    in_environ = sum(count_open_delimiters(v) for v in (environ or {}).values())
    return in_leaves + in_environ + 1


def find_cycle(graph: Mapping[str, Sequence[str]]) -> Optional[List[str]]:
    """
    Busca em profundidade com pilha de recursão explícita.

    Ao encontrar uma aresta de retorno, devolve a fatia da pilha entre a
    primeira e a segunda ocorrência do nó repetido (ex.: ["a", "b", "a"]).
    """
    done: Set[str] = set()

    for root in graph:
        if root in done:
            continue

        stack: List[str] = [root]
        on_stack: Dict[str, int] = {root: 0}
        iterators = [iter(graph.get(root, ()))]

        while iterators:
            nxt = next(iterators[-1], None)
            if nxt is None:
                node = stack.pop()
                del on_stack[node]
                done.add(node)
                iterators.pop()
                continue
            if nxt in on_stack:
                return stack[on_stack[nxt]:] + [nxt]
            if nxt in done or nxt not in graph:
                continue
            on_stack[nxt] = len(stack)
            stack.append(nxt)
            iterators.append(iter(graph[nxt]))

    return None


def dependency_graph(
    trees: Trees,
    environ: Mapping[str, str],
    env_prefix: str = "ENV",
    skipped: Optional[Mapping[str, ParseFailure]] = None,
) -> Tuple[Dict[str, List[str]], List[Dict[str, Any]]]:
    """
    Grafo {chave → chaves referenciadas} restrito às folhas pendentes.

    Também devolve, para cada placeholder pendente, o motivo pelo qual ele
    não foi substituído: `missing`, `ambiguous`, `malformed`, `env-unset`,
    `parse-failure` (o caminho nomeia um documento ignorado), `blocked`
    (alvo também pendente) ou `pending` (resolvível, mas o teto de passadas
    foi atingido).
    """
    skipped = skipped or {}
    stalled = {key: value for key, value in _iter_qualified_leaves(trees) if OPEN in value}

    graph: Dict[str, List[str]] = {}
    references: List[Dict[str, Any]] = []

    for key, value in stalled.items():
        edges: List[str] = []
        seen: Set[str] = set()
        placeholders = scan(value, env_prefix)

        for ph in placeholders:
            if ph.text in seen:
                continue
            seen.add(ph.text)
            ref: Dict[str, Any] = {"key": key, "placeholder": ph.text, "target": ph.target}

            if ph.kind == MALFORMED:
                ref["reason"] = "malformed"
            elif ph.kind == ENVIRONMENT:
                ref["reason"] = "pending" if _env_value(ph, environ) is not None else "env-unset"
            elif len(ph.path) > 1 and ph.path[0] in skipped and ph.path[0] not in trees:
                ref["reason"] = "parse-failure"
                ref["namespace"] = ph.path[0]
                ref["location"] = skipped[ph.path[0]].details.get("location")
            else:
                found = locate(trees, ph.path)
                if not found.matches:
                    ref["reason"] = "missing"
                elif len(found.matches) > 1:
                    ref["reason"] = "ambiguous"
                    ref["namespaces"] = [m.namespace for m in found.matches]
                else:
                    target = found.matches[0].qualified_key
                    ref["target_key"] = target
                    if target in stalled:
                        ref["reason"] = "blocked"
                        edges.append(target)
                    else:
                        ref["reason"] = "pending"
            references.append(ref)

        if not placeholders:
            fragment = dangling_fragment(value) or value
            references.append(
                {"key": key, "placeholder": fragment, "target": fragment, "reason": "malformed"}
            )

        graph[key] = edges

    return graph, references


def _diagnose(
    trees: Trees,
    environ: Mapping[str, str],
    env_prefix: str,
    passes: int,
    skipped: Mapping[str, ParseFailure],
) -> TomvarError:
    graph, references = dependency_graph(trees, environ, env_prefix, skipped)

    cycle = find_cycle(graph)
    if cycle is not None:
        members = set(cycle)
        for ref in references:
            if ref["key"] in members and ref.get("target_key") in members:
                ref["reason"] = "cycle"
        return circular_reference(cycle=cycle, references=_primary_first(references, {"cycle"}), passes=passes)

    reasons = {ref["reason"] for ref in references}

    # documento alvo ignorado: a falha de parse original é o erro
    for ref in references:
        if ref["reason"] == "parse-failure":
            return skipped[ref["namespace"]]

    if "ambiguous" in reasons:
        return ambiguous_reference(references=_primary_first(references, {"ambiguous"}), passes=passes)

    if "malformed" in reasons and not reasons & {"missing", "env-unset"}:
        return malformed_placeholder(references=_primary_first(references, {"malformed"}), passes=passes)

    available = [key for key, _ in _iter_qualified_leaves(trees)]
    return unresolved_reference(
        references=_primary_first(references, {"missing", "env-unset", "malformed"}),
        available=available,
        passes=passes,
    )


def _primary_first(references: List[Dict[str, Any]], reasons: Set[str]) -> List[Dict[str, Any]]:
    primary = [r for r in references if r["reason"] in reasons]
    rest = [r for r in references if r["reason"] not in reasons]
    return primary + rest


def resolve_store(
    store: NamespacedStore,
    *,
    environ: Optional[Mapping[str, str]] = None,
    env_prefix: str = "ENV",
    max_passes: Optional[int] = None,
) -> Result[NamespacedStore]:
    """
    Substitui todos os placeholders do store até o ponto fixo.

    Args:
        store (NamespacedStore): Store recém-construído.
        environ (Optional[Mapping[str, str]]): Ambiente (padrão: `os.environ`).
        env_prefix (str): Prefixo dos placeholders de ambiente.
        max_passes (Optional[int]): Teto de passadas; automático se None.

    Returns:
        Result[NamespacedStore]: Store totalmente resolvido, ou
        `CircularReference`, `ParseFailure` (referência a documento
        ignorado), `AmbiguousKey`, `MalformedPlaceholder`,
        `UnresolvedReference`.
    """
    env = os.environ if environ is None else environ
    trees: Trees = store.trees
    ceiling = max_passes if max_passes is not None else pass_ceiling(trees, env)

    passes = 0
    total = 0
    while passes < ceiling:
        passes += 1
        trees, replaced = _substitute_pass(trees, env, env_prefix)
        total += replaced
        if not replaced:
            break

    if any(OPEN in value for _, value in _iter_qualified_leaves(trees)):
        return Result.failure(_diagnose(trees, env, env_prefix, passes, store.skipped))

    if total == 0:
        return Result.success(store)

    return Result.success(store.with_trees(trees))
