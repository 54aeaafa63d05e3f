"""Request log sinks for promptgate."""

from .base import Callback, CallbackManager, RequestLog, RequestStatus
from .logging_callback import LoggingCallback

__all__ = [
    "Callback",
    "CallbackManager",
    "RequestLog",
    "RequestStatus",
    "LoggingCallback",
]
