# src/tomvar/core/events.py
"""
Registro estruturado de eventos do resolvedor.

Segue o mesmo modelo do log de execução do pipeline: cada evento é um
dicionário simples com nível, código do evento, mensagem e timestamp,
acrescido de campos extras. Os eventos ficam em memória, pertencem ao
objeto que os produz e podem ser inspecionados por testes ou exportados
pelo chamador.

Invariantes:
    - Todo evento possui `level`, `event`, `message` e `timestamp`
    - A ordem de inserção é preservada
    - O relógio é injetado (nenhuma chamada direta a `datetime.now`)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class EventLog:
    clock: Clock = utc_now
    max_events: Optional[int] = 1000
    events: List[Dict[str, Any]] = field(default_factory=list, init=False)

    def log(self, *, level: str, event: str, message: str, **extra: Any) -> None:
        record = {
            "level": level,
            "event": event,
            "message": message,
            "timestamp": self.clock().isoformat(),
        }
        record.update(extra)
        self.events.append(record)
        if self.max_events is not None and len(self.events) > self.max_events:
            del self.events[: len(self.events) - self.max_events]

    def info(self, event: str, message: str, **extra: Any) -> None:
        self.log(level="INFO", event=event, message=message, **extra)

    def warning(self, event: str, message: str, **extra: Any) -> None:
        self.log(level="WARNING", event=event, message=message, **extra)

    def error(self, event: str, message: str, **extra: Any) -> None:
        self.log(level="ERROR", event=event, message=message, **extra)

    def named(self, event: str) -> List[Dict[str, Any]]:
        return [e for e in self.events if e["event"] == event]

    def clear(self) -> None:
        self.events.clear()
