# src/tomvar/accessors.py
"""
Acessores tipados sobre o resultado textual do core.

Esta camada é o único lugar onde conversões de tipo e fallbacks suaves
acontecem. O core sempre devolve texto ou erro; aqui o texto vira `int`,
`bool`, `float`, `timedelta` ou listas.

Duas famílias de métodos:
    - `get_*`     → falham alto: levantam o erro do core ou `InvalidValue`
    - `get_*_or`  → devolvem o default em qualquer falha (chave ausente ou
                    valor inválido)

Formatos aceitos:
    - inteiros, floats e durações: apenas dígitos ASCII
    - bool: "true", "1", "yes" / "false", "0", "no" (sem diferenciar maiúsculas)
    - duração: sequência de número + unidade ("300ms", "1h30m", "-2.5s");
      unidades ns, us, µs, ms, s, m, h; "0" sozinho é aceito
    - listas: separadas por vírgula, itens aparados; texto vazio → []
"""

from __future__ import annotations

import re
from datetime import timedelta
from typing import Callable, List, Optional, TypeVar

from .core.cache import ResolutionCache
from .core.errors import TomvarError, invalid_value
from .core.settings import ResolverSettings

T = TypeVar("T")

TRUE_VALUES = frozenset({"true", "1", "yes"})
FALSE_VALUES = frozenset({"false", "0", "no"})

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = re.compile(r"([0-9]+\.?[0-9]*|\.[0-9]+)(ns|us|µs|μs|ms|s|m|h)")


def parse_int(value: str) -> int:
    if not _INT_PATTERN.fullmatch(value):
        raise ValueError(value)
    return int(value)


def parse_bool(value: str) -> bool:
    lowered = value.lower()
    if lowered in TRUE_VALUES:
        return True
    if lowered in FALSE_VALUES:
        return False
    raise ValueError(value)


def parse_float(value: str) -> float:
    if "_" in value or not value.isascii() or value != value.strip():
        raise ValueError(value)
    return float(value)


def parse_duration(value: str) -> timedelta:
    """Interpreta durações no formato "1h30m" / "250ms" / "-1.5s"."""
    text = value
    sign = 1.0
    if text and text[0] in "+-":
        sign = -1.0 if text[0] == "-" else 1.0
        text = text[1:]

    if text == "0":
        return timedelta(0)
    if not text:
        raise ValueError(value)

    seconds = 0.0
    pos = 0
    for m in _DURATION_PART.finditer(text):
        if m.start() != pos:
            raise ValueError(value)
        seconds += float(m.group(1)) * _DURATION_UNITS[m.group(2)]
        pos = m.end()
    if pos != len(text):
        raise ValueError(value)

    return timedelta(seconds=sign * seconds)


def split_list(value: str) -> List[str]:
    if value == "":
        return []
    return [part.strip() for part in value.split(",")]


def parse_int_list(value: str) -> List[int]:
    return [parse_int(item) for item in split_list(value) if item != ""]


class Config:
    """
    Fachada tipada sobre um `ResolutionCache`.

    Exemplo:
        config = Config()
        port = config.get_int("server.port")
        hosts = config.get_list_or("server.allowed_hosts", [])
    """

    def __init__(self, cache: Optional[ResolutionCache] = None, settings: Optional[ResolverSettings] = None):
        if cache is not None and settings is not None:
            raise ValueError("Pass either cache or settings, not both")
        self.cache = cache or ResolutionCache(settings or ResolverSettings.from_env())

    def _convert(self, key: str, parse: Callable[[str], T], expected: str) -> T:
        value = self.get(key)
        try:
            return parse(value)
        except ValueError:
            raise invalid_value(key=key, value=value, expected=expected) from None

    def _convert_or(self, key: str, parse: Callable[[str], T], default: T) -> T:
        result = self.cache.resolve(key)
        if not result.ok:
            return default
        try:
            return parse(result.value)
        except ValueError:
            return default

    # -----------------------------
    # Falha alta
    # -----------------------------
    def get(self, key: str) -> str:
        return self.cache.resolve(key).unwrap()

    def get_int(self, key: str) -> int:
        return self._convert(key, parse_int, "integer")

    def get_bool(self, key: str) -> bool:
        return self._convert(key, parse_bool, "boolean")

    def get_float(self, key: str) -> float:
        return self._convert(key, parse_float, "float")

    def get_duration(self, key: str) -> timedelta:
        return self._convert(key, parse_duration, "duration")

    def get_list(self, key: str) -> List[str]:
        return split_list(self.get(key))

    def get_int_list(self, key: str) -> List[int]:
        return self._convert(key, parse_int_list, "integer list")

    # -----------------------------
    # Com default
    # -----------------------------
    def get_or(self, key: str, default: str) -> str:
        return self._convert_or(key, str, default)

    def get_int_or(self, key: str, default: int) -> int:
        return self._convert_or(key, parse_int, default)

    def get_bool_or(self, key: str, default: bool) -> bool:
        return self._convert_or(key, parse_bool, default)

    def get_float_or(self, key: str, default: float) -> float:
        return self._convert_or(key, parse_float, default)

    def get_duration_or(self, key: str, default: timedelta) -> timedelta:
        return self._convert_or(key, parse_duration, default)

    def get_list_or(self, key: str, default: List[str]) -> List[str]:
        return self._convert_or(key, split_list, default)

    def get_int_list_or(self, key: str, default: List[int]) -> List[int]:
        return self._convert_or(key, parse_int_list, default)

    def exists(self, key: str) -> bool:
        _, found = self.cache.lookup(key)
        return found


__all__ = [
    "Config",
    "TomvarError",
    "parse_bool",
    "parse_duration",
    "parse_float",
    "parse_int",
    "parse_int_list",
    "split_list",
]
