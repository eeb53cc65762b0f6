"""
Logging helpers for Storefront Checkout
Attaches the current request ID to every log record.
"""

import logging
import threading

_local = threading.local()

NO_REQUEST_ID = '-'


def set_request_id(request_id: str) -> None:
    _local.request_id = request_id


def clear_request_id() -> None:
    _local.request_id = None


def get_request_id() -> str:
    return getattr(_local, 'request_id', None) or NO_REQUEST_ID


class RequestIDFilter(logging.Filter):
    """Expose ``%(request_id)s`` to formatters"""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id()
        return True
