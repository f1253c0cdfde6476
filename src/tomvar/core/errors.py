# src/tomvar/core/errors.py
"""
Exceções canônicas do tomvar.

Este módulo define a hierarquia oficial de erros produzidos durante a
descoberta de documentos, a substituição de placeholders e a busca de
chaves. Os erros são tratados como valores: o core os devolve dentro de um
`Result` e apenas a borda escolhida pelo chamador os levanta.

Princípios fundamentais:
    - Erros são tipados e semânticos
    - Toda falha carrega contexto acionável (chave, documentos, alternativas)
    - Nenhum fallback silencioso é aplicado pelo core

Invariantes:
    - Todas as exceções herdam de `TomvarError`
    - `kind` é um código estável (não é texto livre)
    - `details` contém apenas dados serializáveis

Limites explícitos:
    - Não decide se uma falha é fatal (isso é papel do chamador)
    - Não aplica defaults
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro
# ---------------------------------------------------------------------------

PARSE_FAILURE = "PARSE_FAILURE"
DISCOVERY_FAILURE = "DISCOVERY_FAILURE"
KEY_NOT_FOUND = "KEY_NOT_FOUND"
AMBIGUOUS_KEY = "AMBIGUOUS_KEY"
UNRESOLVED_REFERENCE = "UNRESOLVED_REFERENCE"
MALFORMED_PLACEHOLDER = "MALFORMED_PLACEHOLDER"
CIRCULAR_REFERENCE = "CIRCULAR_REFERENCE"
INVALID_VALUE = "INVALID_VALUE"


@dataclass(frozen=True, eq=False)
class TomvarError(Exception):
    """Base class para erros do tomvar.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Mensagem pode ser multi-linha e deve listar alternativas
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    kind = "TOMVAR_ERROR"

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return {
            "type": self.kind,
            "message": self.message,
            "details": dict(self.details),
            "hint": self.hint,
        }


@dataclass(frozen=True, eq=False)
class ParseFailure(TomvarError):
    """Documento não pôde ser carregado; é ignorado até ser referenciado."""

    kind = PARSE_FAILURE


@dataclass(frozen=True, eq=False)
class DiscoveryFailure(TomvarError):
    """Falha ao percorrer o diretório do projeto."""

    kind = DISCOVERY_FAILURE


@dataclass(frozen=True, eq=False)
class KeyNotFound(TomvarError):
    """Nenhum documento contém o caminho solicitado."""

    kind = KEY_NOT_FOUND


@dataclass(frozen=True, eq=False)
class AmbiguousKey(TomvarError):
    """Mais de um documento contém o caminho; exige qualificação explícita."""

    kind = AMBIGUOUS_KEY


@dataclass(frozen=True, eq=False)
class UnresolvedReference(TomvarError):
    """Placeholder cujo alvo nunca pôde ser resolvido."""

    kind = UNRESOLVED_REFERENCE


@dataclass(frozen=True, eq=False)
class MalformedPlaceholder(UnresolvedReference):
    """Placeholder com sintaxe inválida ou delimitador sem par."""

    kind = MALFORMED_PLACEHOLDER


@dataclass(frozen=True, eq=False)
class CircularReference(TomvarError):
    """Ciclo de dependências entre placeholders."""

    kind = CIRCULAR_REFERENCE


@dataclass(frozen=True, eq=False)
class InvalidValue(TomvarError):
    """Valor resolvido não pôde ser convertido para o tipo pedido."""

    kind = INVALID_VALUE


# ---------------------------------------------------------------------------
# Helpers de formatação
# ---------------------------------------------------------------------------

def format_list(items: Iterable[str], empty: str = "- (no variables found)") -> str:
    lines = [f"- {item}" for item in items]
    if not lines:
        return empty
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def parse_failure(*, location: str, namespace: str, reason: str) -> ParseFailure:
    return ParseFailure(
        message=f"failed to parse configuration file {location}: {reason}",
        details={"location": location, "namespace": namespace, "reason": reason},
        hint="Fix the syntax of the document; it is skipped until then.",
    )


def discovery_failure(*, root: str, reason: str) -> DiscoveryFailure:
    return DiscoveryFailure(
        message=f"failed to discover configuration files under {root}: {reason}",
        details={"root": root, "reason": reason},
    )


def no_documents(*, key: str, root: Optional[str] = None) -> KeyNotFound:
    return KeyNotFound(
        message=f'variable "{key}" not found\n\nNo configuration files found in project',
        details={"key": key, "root": root, "searched": [], "available": []},
    )


def key_not_found(
    *,
    key: str,
    searched: Sequence[str],
    available: Sequence[str],
    skipped: Sequence[str] = (),
    namespaces: Sequence[str] = (),
) -> KeyNotFound:
    message = f'variable "{key}" not found\n\nSearched in:\n' + format_list(searched, empty="- (none)")
    if skipped:
        message += "\n\nSkipped (failed to parse):\n" + format_list(skipped)
    if available:
        message += "\n\nAvailable variables:\n" + format_list(available)

    hint = None
    if namespaces:
        hint = "Known namespaces: " + ", ".join(namespaces)
        message += "\n\nAvailable namespaces:\n" + format_list(namespaces)

    return KeyNotFound(
        message=message,
        details={
            "key": key,
            "searched": list(searched),
            "skipped": list(skipped),
            "available": list(available),
        },
        hint=hint,
    )


def key_not_found_in_document(
    *,
    key: str,
    namespace: str,
    location: str,
    available: Sequence[str],
) -> KeyNotFound:
    return KeyNotFound(
        message=(
            f'variable "{key}" not found in file {location}\n\n'
            f"Available variables in {location}:\n" + format_list(available)
        ),
        details={
            "key": key,
            "namespace": namespace,
            "location": location,
            "available": list(available),
        },
    )


def ambiguous_key(*, key: str, candidates: Sequence[Dict[str, str]]) -> AmbiguousKey:
    """
    Constrói o erro de chave ambígua.

    `candidates` contém dicionários com `namespace` e `location`, na ordem
    em que os documentos foram descobertos.
    """
    suggestions = [f"{c['namespace']}.{key}" for c in candidates]
    message = f'variable "{key}" found in multiple files:\n' + format_list(c["location"] for c in candidates)
    message += "\n\nUse explicit syntax:\n" + format_list(f'get("{s}")' for s in suggestions)
    return AmbiguousKey(
        message=message,
        details={
            "key": key,
            "namespaces": [c["namespace"] for c in candidates],
            "locations": [c["location"] for c in candidates],
            "suggestions": suggestions,
        },
        hint="Qualify the key with one of the namespaces listed.",
    )


def _describe_references(references: Sequence[Dict[str, Any]]) -> str:
    return format_list(
        f"{r['key']}: {r['placeholder']} ({r['reason']})" for r in references
    )


def unresolved_reference(
    *,
    references: Sequence[Dict[str, Any]],
    available: Sequence[str],
    passes: int,
) -> UnresolvedReference:
    first = references[0]
    message = (
        f"variable '{first['target']}' referenced by '{first['key']}' could not be resolved\n\n"
        "Unresolved references:\n" + _describe_references(references)
    )
    if available:
        message += "\n\nAvailable variables:\n" + format_list(available)
    return UnresolvedReference(
        message=message,
        details={"references": list(references), "passes": passes},
        hint="Define the referenced keys or set the environment variables (or give a ':-default').",
    )


def malformed_placeholder(*, references: Sequence[Dict[str, Any]], passes: int) -> MalformedPlaceholder:
    first = references[0]
    return MalformedPlaceholder(
        message=(
            f"malformed placeholder {first['placeholder']!r} in '{first['key']}'\n\n"
            "Unresolved references:\n" + _describe_references(references)
        ),
        details={"references": list(references), "passes": passes},
        hint="Placeholders look like {{section.key}} or {{ENV.NAME:-default}}.",
    )


def ambiguous_reference(*, references: Sequence[Dict[str, Any]], passes: int) -> AmbiguousKey:
    first = references[0]
    namespaces: List[str] = list(first.get("namespaces", []))
    return AmbiguousKey(
        message=(
            f"variable '{first['target']}' referenced by '{first['key']}' is defined in multiple files: "
            + ", ".join(namespaces)
            + "\n\nUnresolved references:\n" + _describe_references(references)
        ),
        details={
            "key": first["target"],
            "namespaces": namespaces,
            "suggestions": [f"{ns}.{first['target']}" for ns in namespaces],
            "references": list(references),
            "passes": passes,
        },
        hint="Use the {{namespace.section.key}} form inside the placeholder.",
    )


def circular_reference(
    *,
    cycle: Sequence[str],
    references: Sequence[Dict[str, Any]],
    passes: int,
) -> CircularReference:
    return CircularReference(
        message="circular dependency detected: " + " → ".join(cycle),
        details={"cycle": list(cycle), "references": list(references), "passes": passes},
        hint="Break the cycle by replacing one of the references with a literal value.",
    )


def invalid_value(*, key: str, value: str, expected: str) -> InvalidValue:
    return InvalidValue(
        message=f'variable "{key}" is not a valid {expected}: {value}',
        details={"key": key, "value": value, "expected": expected},
    )
