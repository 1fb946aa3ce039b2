"""
Notifications module.

Opaque email sinks for one-time codes, reset codes, verification links
and welcome mail.

Public API:
- INotifier: Interface every sender implements
- ResendEmailNotifier: Sends through the Resend HTTP API
- LoggingNotifier: Logs instead of sending (development)
"""

from .interfaces import INotifier
from .service import LoggingNotifier, ResendEmailNotifier, get_notifier

__all__ = [
    "INotifier",
    "ResendEmailNotifier",
    "LoggingNotifier",
    "get_notifier",
]
