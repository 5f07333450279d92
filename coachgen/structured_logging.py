"""
Structured logging for the generation pipeline.

Console output stays human readable; the optional log file receives one
JSON object per line so individual generation requests can be traced by
request id.
"""

import json
import logging
import sys
import time
import uuid
from contextvars import ContextVar
from pathlib import Path
from typing import Any, Dict, Optional

# Request tracking
request_id_var: ContextVar[str] = ContextVar('request_id', default='')


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": record.created,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        # Add structured data if present
        if hasattr(record, 'structured_data'):
            log_data.update(record.structured_data)

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class ColoredConsoleFormatter(logging.Formatter):
    """Colored console formatter for better readability"""

    COLORS = {
        'DEBUG': '\033[36m',    # Cyan
        'INFO': '\033[32m',     # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',    # Red
        'CRITICAL': '\033[35m', # Magenta
        'RESET': '\033[0m'      # Reset
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        reset = self.COLORS['RESET']

        timestamp = time.strftime('%H:%M:%S', time.localtime(record.created))

        context_info = ""
        if hasattr(record, 'structured_data'):
            data = record.structured_data

            if data.get('request_id'):
                context_info += f" [{data['request_id'][:8]}]"

            if 'event' in data:
                context_info += f" {data['event']}"

            if 'duration_ms' in data:
                context_info += f" ({data['duration_ms']:.1f}ms)"

        message = f"{color}{timestamp}{reset} {record.getMessage()}{context_info}"
        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)
        return message


def new_request_id() -> str:
    """Start a new request scope and return its id"""
    request_id = str(uuid.uuid4())
    request_id_var.set(request_id)
    return request_id


def log_generation_event(
    logger: logging.Logger,
    event: str,
    message: str,
    level: int = logging.INFO,
    **data: Any
) -> None:
    """Log a pipeline event with the current request id attached"""
    structured: Dict[str, Any] = {'event': event, 'request_id': request_id_var.get()}
    structured.update(data)
    logger.log(level, message, extra={"structured_data": structured})


def setup_logging(debug: bool = False, log_file: Optional[str] = None, json_logs: bool = False) -> None:
    """Setup logging configuration"""
    level = logging.DEBUG if debug else logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(StructuredFormatter() if json_logs else ColoredConsoleFormatter())
    root_logger.addHandler(console_handler)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(StructuredFormatter())
        root_logger.addHandler(file_handler)

    # httpx logs every request at INFO
    logging.getLogger('httpx').setLevel(logging.DEBUG if debug else logging.WARNING)
