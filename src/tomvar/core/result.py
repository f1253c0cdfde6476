# src/tomvar/core/result.py
"""
Tipo de resultado das operações do core.

Toda chamada de resolução devolve um `Result`: ou um valor de sucesso ou
um dos erros do catálogo em `tomvar.core.errors`. Levantar o erro é uma
decisão do chamador (`unwrap`).

Invariantes:
    - Exatamente um entre `value` e `error` é significativo
    - `unwrap` nunca devolve um valor quando há erro
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from .errors import TomvarError

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    value: Optional[T] = None
    error: Optional[TomvarError] = None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value, error=None)

    @classmethod
    def failure(cls, error: TomvarError) -> "Result[T]":
        return cls(value=None, error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Devolve o valor ou levanta o erro carregado."""
        if self.error is not None:
            # o mesmo erro pode ser memoizado e levantado várias vezes
            raise self.error.with_traceback(None)
        return self.value  # type: ignore[return-value]
