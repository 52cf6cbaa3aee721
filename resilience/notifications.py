"""User-facing notices for retry progress and connectivity changes."""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable

from models.enums import NotificationSeverity

logger = logging.getLogger(__name__)


@dataclass
class Notification:
    """A transient message for the user (a toast in the web client)."""
    title: str
    description: str = ""
    severity: NotificationSeverity = NotificationSeverity.INFO
    duration: Optional[float] = None  # seconds; None = sink default


@runtime_checkable
class NotificationSink(Protocol):
    """Protocol for notice consumers.

    Purely informational: implementations must not raise.
    """

    def notify(self, notification: Notification) -> None:
        ...


class LoggingNotifier:
    """Sink that writes notices to the standard logger."""

    _LEVELS: dict[NotificationSeverity, int] = {
        NotificationSeverity.INFO: logging.INFO,
        NotificationSeverity.SUCCESS: logging.INFO,
        NotificationSeverity.WARNING: logging.WARNING,
        NotificationSeverity.DESTRUCTIVE: logging.ERROR,
    }

    def notify(self, notification: Notification) -> None:
        logger.log(
            self._LEVELS.get(notification.severity, logging.INFO),
            "%s: %s",
            notification.title,
            notification.description,
        )


class RichNotifier:
    """Sink that prints notices to a Rich console."""

    _STYLES: dict[NotificationSeverity, str] = {
        NotificationSeverity.INFO: "info",
        NotificationSeverity.SUCCESS: "success",
        NotificationSeverity.WARNING: "warning",
        NotificationSeverity.DESTRUCTIVE: "error",
    }

    def __init__(self, console=None):
        """
        Args:
            console: Rich Console instance. Creates a themed one if not provided.
        """
        if console is None:
            from cli.theme import get_console
            console = get_console()
        self._console = console

    def notify(self, notification: Notification) -> None:
        style = self._STYLES.get(notification.severity, "info")
        text = f"[{style}]{notification.title}[/]"
        if notification.description:
            text += f" [muted]{notification.description}[/]"
        self._console.print(text)
