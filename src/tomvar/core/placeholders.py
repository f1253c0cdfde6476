# src/tomvar/core/placeholders.py
"""
Detecção de placeholders em valores textuais.

Formas reconhecidas:
    - referência interna:  {{section.key}}  /  {{namespace.section.key}}
    - ambiente:            {{ENV.NAME}}     /  {{ENV.NAME:-default}}

O corpo de um placeholder nunca contém "{{" nem "}}". Com isso, em
`{{ENV.LOG:-{{paths.base}}/logs}}` apenas a referência interna é
reconhecida na primeira passada; o placeholder de ambiente passa a existir
depois que ela é substituída.

Corpos que não se encaixam em nenhuma forma são marcados como malformados.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

OPEN = "{{"

PLACEHOLDER_PATTERN = re.compile(r"\{\{((?:(?!\{\{|\}\}).)*)\}\}", re.DOTALL)
_PATH_PATTERN = re.compile(r"\s*([A-Za-z0-9_\-]+(?:\.[A-Za-z0-9_\-]+)*)\s*")
_ENV_NAME = r"([A-Za-z_][A-Za-z0-9_]*)"

REFERENCE = "reference"
ENVIRONMENT = "environment"
MALFORMED = "malformed"


@dataclass(frozen=True)
class Placeholder:
    text: str
    kind: str
    path: Tuple[str, ...] = ()
    env_name: Optional[str] = None
    default: Optional[str] = None

    @property
    def target(self) -> str:
        if self.kind == REFERENCE:
            return ".".join(self.path)
        if self.kind == ENVIRONMENT:
            return f"ENV.{self.env_name}"
        return self.text


def _env_pattern(prefix: str) -> "re.Pattern[str]":
    return re.compile(r"\s*" + re.escape(prefix) + r"\." + _ENV_NAME + r"\s*(?::-(.*))?", re.DOTALL)


def parse_body(text: str, body: str, env_prefix: str = "ENV") -> Placeholder:
    env = _env_pattern(env_prefix).fullmatch(body)
    if env is not None:
        return Placeholder(text=text, kind=ENVIRONMENT, env_name=env.group(1), default=env.group(2))

    ref = _PATH_PATTERN.fullmatch(body)
    if ref is not None and ref.group(1) != env_prefix:
        return Placeholder(text=text, kind=REFERENCE, path=tuple(ref.group(1).split(".")))

    return Placeholder(text=text, kind=MALFORMED)


def scan(value: str, env_prefix: str = "ENV") -> List[Placeholder]:
    """Placeholders de `value`, da esquerda para a direita, sem sobreposição."""
    return [parse_body(m.group(0), m.group(1), env_prefix) for m in PLACEHOLDER_PATTERN.finditer(value)]


def count_open_delimiters(value: str) -> int:
    return value.count(OPEN)


def dangling_fragment(value: str) -> Optional[str]:
    """
    Trecho a partir de um "{{" que não inicia nenhum placeholder completo.

    Devolve None quando todo "{{" do valor pertence a um placeholder.
    """
    spans = [m.span() for m in PLACEHOLDER_PATTERN.finditer(value)]
    start = value.find(OPEN)
    while start != -1:
        if not any(lo <= start < hi for lo, hi in spans):
            end = value.find("}}", start)
            return value[start:] if end == -1 else value[start:end + 2]
        start = value.find(OPEN, start + 1)
    return None
