"""Application-wide logging initialization

IMPORTANT: `initialize_logging()` runs when `simplelink.lambdas` is imported,
i.e. before any handler module logs anything.

Every line is a JSON object. Fields passed through `extra=` are copied to the
top level, and the id of the Lambda invocation being served (see
`bind_request_id()`) is attached as `request_id`:
{
    "timestamp": "2025-12-26T12:00:00.000Z",
    "level": "INFO",
    "logger": "simplelink.lambdas.redirect_url.app",
    "message": "Redirecting client to target URL. Responding with 307.",
    "request_id": "c6af9ac6-7b61-11e6-9a41-93e8deadbeef",
    "shortcode": "abc123",
    "event": "REDIRECT_SUCCESS"
}
"""

import os
import json
import logging
import logging.config
from contextvars import ContextVar
from datetime import datetime, UTC

from simplelink.constants import ENV


_request_id: ContextVar[str | None] = ContextVar('request_id', default=None)

# Attributes every LogRecord carries; anything else on a record came from `extra=`
_RECORD_ATTRS = frozenset(logging.LogRecord('', logging.NOTSET, '', 0, '', (), None).__dict__) | {'message', 'asctime'}


def bind_request_id(request_id: str | None) -> None:
    """Tag subsequent log lines with the given invocation id (None clears it)"""
    _request_id.set(request_id)


class JsonFormatter(logging.Formatter):
    """Render a LogRecord, its extras and the bound request id as one JSON line"""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, tz=UTC).isoformat(timespec='milliseconds')
        log = {
            'timestamp': timestamp.replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }

        request_id = _request_id.get()
        if request_id:
            log['request_id'] = request_id

        log.update((key, value) for key, value in record.__dict__.items() if key not in _RECORD_ATTRS)

        if record.exc_info:
            log['exception'] = self.formatException(record.exc_info)

        return json.dumps(log, default=str)


def initialize_logging() -> None:
    """Route the root logger to stdout through JsonFormatter at LOG_LEVEL (default INFO)"""
    logging.config.dictConfig(
        {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {'json': {'()': JsonFormatter}},
            'handlers': {
                'stdout': {
                    'class': 'logging.StreamHandler',
                    'formatter': 'json',
                    'stream': 'ext://sys.stdout',
                }
            },
            'root': {
                'level': os.getenv(ENV.App.LOG_LEVEL, 'INFO').upper(),
                'handlers': ['stdout'],
            },
        }
    )
