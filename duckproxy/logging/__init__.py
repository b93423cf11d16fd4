"""Logging module for the gateway."""

from .recorder import RequestLogRecorder, wait_for_pending_logs
from .setup import setup_logging

__all__ = [
    "RequestLogRecorder",
    "setup_logging",
    "wait_for_pending_logs",
]
