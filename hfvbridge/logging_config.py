"""
Structured logging configuration using structlog.

Library modules log through ``logging.getLogger(__name__)``; setup_logging()
routes those records through structlog so every line carries the bound wallet
context and never leaks provider API keys embedded in RPC or indexer URLs.
"""

import logging
import sys
from typing import Any, Dict, Iterable, List, Optional

import structlog

from .config import settings

# RPC sweeps issue hundreds of requests per portfolio; keep transport chatter out
QUIET_LOGGERS = ("uvicorn.access", "httpcore", "httpx")


class SecretRedactor:
    """structlog processor masking configured API keys in rendered fields."""

    def __init__(self, secrets: Iterable[str]):
        self.secrets = [secret for secret in secrets if secret]

    def __call__(self, logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
        if not self.secrets:
            return event_dict
        for key, value in event_dict.items():
            if isinstance(value, str):
                for secret in self.secrets:
                    value = value.replace(secret, "***")
                event_dict[key] = value
        return event_dict


def _processors(redactor: SecretRedactor, with_exc_info: bool) -> List[structlog.types.Processor]:
    processors: List[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if with_exc_info:
        processors.append(structlog.processors.format_exc_info)
    processors += [structlog.processors.UnicodeDecoder(), redactor]
    return processors


def setup_logging(log_level: Optional[str] = None) -> None:
    """Configure structlog and the stdlib root logger.

    JSON lines normally, colored console output at DEBUG.
    """
    level = getattr(logging, (log_level or settings.log_level).upper(), logging.INFO)
    console = level == logging.DEBUG
    redactor = SecretRedactor(
        [settings.alchemy_api_key, settings.covalent_api_key, settings.coingecko_api_key]
    )
    shared = _processors(redactor, with_exc_info=not console)

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    renderer = structlog.dev.ConsoleRenderer() if console else structlog.processors.JSONRenderer()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def bind_wallet_context(address: Optional[str], chain_id: Optional[int]) -> None:
    """Attach the active wallet to every subsequent log line in this context."""

    structlog.contextvars.clear_contextvars()
    if address:
        structlog.contextvars.bind_contextvars(wallet=address.lower(), chain_id=chain_id)
