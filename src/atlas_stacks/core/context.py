"""
OperationContext — contexto explícito de diagnóstico de uma operação.

Este módulo define o **OperationContext**, o valor passado explicitamente
(como parâmetro) por toda a cadeia de chamadas de uma operação do core
(`list_changed_stacks`, `load_env`, `resolve_watches`, ...).

O OperationContext carrega apenas identificadores de correlação:
- run_id: identificador único da invocação
- fields: campos de correlação (ex.: action, root, stack)

e encaminha eventos de log estruturados para um `EventLog`, o colaborador
de logging. Não existe logger global: quem precisa registrar um evento
recebe o contexto como argumento.

Princípios fundamentais:
- Isolamento por invocação (cada operação cria seu próprio contexto)
- Eventos estruturados, nunca strings livres
- Contextos filhos (`bind`) são novos valores; o pai nunca é mutado
- O EventLog é append-only e pode ser compartilhado entre workers
"""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional


LEVELS = ("trace", "debug", "info", "warn", "error")


class EventLog:
    """Coletor append-only de eventos estruturados.

    É o único objeto compartilhado entre contextos filhos executando em
    threads diferentes; por isso o append é feito sob lock.
    """

    def __init__(self) -> None:
        self._events: List[Dict[str, Any]] = []
        self._lock = threading.Lock()

    def append(self, event: Dict[str, Any]) -> None:
        with self._lock:
            self._events.append(event)

    @property
    def events(self) -> List[Dict[str, Any]]:
        with self._lock:
            return list(self._events)

    def filter(self, *, min_level: str = "trace") -> List[Dict[str, Any]]:
        threshold = LEVELS.index(min_level)
        return [e for e in self.events if LEVELS.index(e["level"]) >= threshold]

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)


@dataclass(frozen=True)
class OperationContext:
    """
    Contexto de diagnóstico de uma operação do core.

    Campos canônicos:
    - run_id: identificador único da invocação
    - fields: campos de correlação herdados por todos os eventos
    - sink: EventLog que recebe os eventos
    """

    run_id: str
    fields: Mapping[str, Any] = field(default_factory=dict)
    sink: EventLog = field(default_factory=EventLog, repr=False, compare=False)

    @classmethod
    def new(cls, *, action: Optional[str] = None, **fields: Any) -> "OperationContext":
        """Cria um contexto raiz com run_id aleatório."""
        base: Dict[str, Any] = {}
        if action is not None:
            base["action"] = action
        base.update(fields)
        return cls(run_id=uuid.uuid4().hex, fields=base)

    def bind(self, **fields: Any) -> "OperationContext":
        """Retorna um contexto filho com campos adicionais (mesmo run_id e sink)."""
        merged = dict(self.fields)
        merged.update(fields)
        return OperationContext(run_id=self.run_id, fields=merged, sink=self.sink)

    # -----------------------------
    # Logging
    # -----------------------------
    def log(self, *, level: str, message: str, **extra: Any) -> None:
        if level not in LEVELS:
            raise ValueError(f"unknown log level: {level}")
        event: Dict[str, Any] = {
            "run_id": self.run_id,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(self.fields)
        event.update(extra)
        self.sink.append(event)

    def trace(self, message: str, **extra: Any) -> None:
        self.log(level="trace", message=message, **extra)

    def debug(self, message: str, **extra: Any) -> None:
        self.log(level="debug", message=message, **extra)

    @property
    def events(self) -> List[Dict[str, Any]]:
        return self.sink.events


def ensure_context(ctx: Optional[OperationContext], *, action: str, **fields: Any) -> OperationContext:
    """Deriva o contexto da operação, criando um novo quando o chamador não passou nenhum."""
    if ctx is None:
        return OperationContext.new(action=action, **fields)
    return ctx.bind(action=action, **fields)
