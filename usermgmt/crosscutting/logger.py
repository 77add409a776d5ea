"""
===============================================================================
TARJETA CRC — crosscutting/logger.py
===============================================================================

Responsabilidades:
  - Logger único del servicio ("usermgmt"), en JSON o texto según Settings.
  - Cada línea JSON lleva el contexto del request (request_id, method, path,
    actor_id) más los `extra` del llamador.
  - Ninguna credencial llega al log: claves con password/secret/token/
    authorization/credential se reemplazan por REDACTED, a cualquier
    profundidad.

Colaboradores:
  - usermgmt.context.get_context_dict
  - crosscutting.config.get_settings (log_level, log_json)
===============================================================================
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from ..context import get_context_dict

REDACTED = "***REDACTED***"

# Atributos propios de LogRecord; el resto son `extra`.
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}


class _Redactor:
    """Copia apta para JSON de un valor de `extra`, sin secretos."""

    SENSITIVE_MARKERS = ("password", "secret", "token", "authorization", "credential")

    def __init__(self, max_str: int = 4_000, max_depth: int = 4) -> None:
        self.max_str = max_str
        self.max_depth = max_depth

    def is_sensitive(self, key: str) -> bool:
        lowered = key.lower()
        return any(marker in lowered for marker in self.SENSITIVE_MARKERS)

    def sanitize(self, value: Any, *, key: str | None = None, depth: int = 0) -> Any:
        if key is not None and self.is_sensitive(key):
            return REDACTED
        if value is None or isinstance(value, (bool, int, float)):
            return value
        if isinstance(value, str):
            if len(value) > self.max_str:
                return value[: self.max_str] + "...(truncated)"
            return value
        if isinstance(value, (bytes, bytearray)):
            return f"<bytes {len(value)}B>"
        if depth >= self.max_depth:
            return "***TRUNCATED***"
        if isinstance(value, dict):
            return {
                str(k): self.sanitize(v, key=str(k), depth=depth + 1)
                for k, v in value.items()
            }
        if isinstance(value, (list, tuple, set, frozenset)):
            return [self.sanitize(item, depth=depth + 1) for item in value]
        return str(value)


class JSONFormatter(logging.Formatter):
    def __init__(self) -> None:
        super().__init__()
        self._redactor = _Redactor()

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
            **get_context_dict(),
        }
        entry.update(
            (name, self._redactor.sanitize(value, key=name))
            for name, value in vars(record).items()
            if name not in _RECORD_ATTRS
        )
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "stacktrace": self.formatException(record.exc_info),
            }
        return json.dumps(entry, ensure_ascii=False, default=str)


def _log_options() -> tuple[str, bool]:
    from .config import get_settings

    try:
        settings = get_settings()
    except ValidationError:
        # R: un env inválido no rompe el import; el error sale en get_settings().
        return "INFO", True
    return settings.log_level.upper(), settings.log_json


def setup_logger(name: str = "usermgmt") -> logging.Logger:
    """Configura el logger del servicio una sola vez (idempotente en reimport)."""
    log = logging.getLogger(name)
    level, as_json = _log_options()
    log.setLevel(logging.getLevelNamesMapping().get(level, logging.INFO))

    if not log.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            JSONFormatter()
            if as_json
            else logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
        )
        log.addHandler(handler)
    return log


logger = setup_logger()
