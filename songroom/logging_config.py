import json
import logging
import os
import sys
from contextvars import ContextVar
from datetime import UTC, datetime

# Exposed so other modules can set/request ids
req_id_var: ContextVar[str] = ContextVar("req_id", default="-")


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.now(UTC).isoformat(timespec="seconds").replace("+00:00", "Z"),
            "req_id": getattr(record, "req_id", req_id_var.get()),
            "level": record.levelname,
            "component": record.name,
            "msg": record.getMessage(),
        }
        env = os.getenv("ENV", "").strip()
        if env:
            payload["env"] = env
        if hasattr(record, "meta"):
            payload["meta"] = record.meta
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        try:
            return json.dumps(payload, ensure_ascii=False, default=str)
        except (TypeError, ValueError):
            # Fallback to plain message if payload has unserialisable types
            return payload["msg"]


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        # Propagate request id from context-var into every log line
        record.req_id = req_id_var.get()
        return True


def configure_logging(level: str | None = None) -> None:
    """
    Call once at app startup.
    LOG_LEVEL env var controls verbosity (default INFO).
    LOG_TO_STDOUT switches from JSON on stderr to a plain stdout format.
    """
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    force_stdout = os.getenv("LOG_TO_STDOUT", "").lower() in {"1", "true", "yes", "on"}

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level, logging.INFO))

    # Clear existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if force_stdout:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - [%(req_id)s] %(message)s"
            )
        )
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(JsonFormatter())
    # Filters on the handler so records from child loggers get a req_id too
    handler.addFilter(RequestIdFilter())
    root_logger.addHandler(handler)

    # Reduce third-party verbosity unless LOG_LEVEL is DEBUG
    if level != "DEBUG":
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
        logging.getLogger("aiosqlite").setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        "Logging configured",
        extra={"meta": {"level": level, "stdout": force_stdout}},
    )
