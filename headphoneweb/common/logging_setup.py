import logging
import sys
import json
import re
from typing import Any, Dict, Optional
from logging.handlers import QueueHandler, QueueListener
from queue import Queue
from headphoneweb.config.settings import config_settings
from headphoneweb.common.constants import request_id_ctx

SENSITIVE_PATTERNS = [
    r"password", r"secret", r"token", r"key", r"authorization",
    r"api_key", r"apikey", r"client_secret", r"session",
    r"credit_card", r"cvv", r"password_hash"
]

# attributes every LogRecord carries; anything else came in through `extra`
_RECORD_ATTRS = frozenset((
    "name", "msg", "args", "levelname", "levelno", "pathname", "filename",
    "module", "exc_info", "exc_text", "stack_info", "lineno", "funcName",
    "created", "msecs", "relativeCreated", "thread", "threadName", "processName",
    "process", "taskName", "message",
))


def sanitize_message_text(msg: str) -> str:
    """Sanitize sensitive patterns inside a text message (best-effort)."""
    out = msg
    for p in SENSITIVE_PATTERNS:
        # replace occurrences like "password=abc" or '"password": "abc"'
        out = re.sub(rf'("{p}"\s*:\s*")[^"]+(")', rf'\1[REDACTED]\2', out, flags=re.IGNORECASE)
        out = re.sub(rf'({p}\s*[=:]\s*)[\w\-\./]+', rf'\1[REDACTED]', out, flags=re.IGNORECASE)
    return out


class JSONFormatter(logging.Formatter):
    """Structured JSON formatter for production"""

    def __init__(self, env: str = "prod", service: str = "headphoneweb"):
        super().__init__()
        self.env = env
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": sanitize_message_text(record.getMessage()),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "env": self.env,
            "service": self.service,
        }

        rid = request_id_ctx.get()
        if rid:
            log_data["request_id"] = rid

        for k, v in record.__dict__.items():
            if k in _RECORD_ATTRS or k.startswith("_"):
                continue
            log_data[k] = v

        # cart session identifiers are client secrets of a sort; keep a prefix only
        if "session_id" in log_data and isinstance(log_data["session_id"], str):
            val = log_data["session_id"]
            log_data["session_id"] = val[:8] + "..." if len(val) > 8 else val

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class SecurityFilter(logging.Filter):
    """Redact sensitive info in non-dev logs"""

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            record.msg = sanitize_message_text(record.getMessage())
            record.args = ()
        except (TypeError, ValueError):
            pass
        return True


# Non-blocking queue-based logging. Use once at app startup.
_queue_listener: Optional[QueueListener] = None


def setup_logging(env: Optional[str] = None, service: Optional[str] = None) -> logging.Logger:
    global _queue_listener

    env = (env or config_settings.ENV).lower()
    service = service or config_settings.SERVICE_NAME

    if env in ("prod", "staging"):
        log_level = logging.INFO
    else:
        log_level = logging.DEBUG

    stop_logging()

    root = logging.getLogger()
    # Clear existing handlers to avoid duplication
    for h in list(root.handlers):
        root.removeHandler(h)

    q: Queue = Queue(-1)
    qh = QueueHandler(q)

    console_handler = logging.StreamHandler(sys.stdout)
    if env != "dev":
        console_handler.setFormatter(JSONFormatter(env=env, service=service))
        console_handler.addFilter(SecurityFilter())
    else:
        console_handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)8s] %(name)s:%(funcName)s:%(lineno)d | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))

    root.setLevel(log_level)
    root.addHandler(qh)

    _queue_listener = QueueListener(q, console_handler, respect_handler_level=True)
    _queue_listener.start()

    # silence noisy third-party loggers outside dev
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING if env != "dev" else logging.INFO)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("stripe").setLevel(logging.WARNING)

    return logging.getLogger("headphoneweb.app")


def stop_logging() -> None:
    global _queue_listener
    if _queue_listener is not None:
        _queue_listener.stop()
        _queue_listener = None


class ContextLogger:
    def __init__(self, name: str):
        self._logger = logging.getLogger(name)

    def _with_ctx(self, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        extra = dict(extra or {})
        rid = request_id_ctx.get()
        if rid:
            extra.setdefault("request_id", rid)
        return extra

    def _log(self, level: int, msg: str, *args, **kwargs):
        extra = kwargs.pop("extra", None)
        kwargs["extra"] = self._with_ctx(extra)
        kwargs.setdefault("stacklevel", 3)
        self._logger.log(level, msg, *args, **kwargs)

    def debug(self, msg: str, *args, **kwargs):
        self._log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs):
        self._log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        self._log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        self._log(logging.ERROR, msg, *args, **kwargs)

    def exception(self, msg: str, *args, **kwargs):
        kwargs.setdefault("exc_info", True)
        self._log(logging.ERROR, msg, *args, **kwargs)


def get_logger(name: str = "headphoneweb.app") -> ContextLogger:
    return ContextLogger(name)
