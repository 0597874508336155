"""User-visible notifications ("toasts") raised by order operations.

The board and the transition service report progress and failures through
an ``INotifier``.  API views use a ``ToastCollector`` and return the
collected toasts with their response; background jobs use a
``LoggingNotifier`` so failures are logged and nobody is interrupted.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Protocol

import structlog
from django.db import models

logger = structlog.get_logger(__name__)


class ToastLevel(models.TextChoices):
    LOADING = "loading", "Cargando"
    SUCCESS = "success", "Éxito"
    WARNING = "warning", "Aviso"
    ERROR = "error", "Error"


@dataclass(frozen=True)
class Toast:
    level: str
    message: str
    description: str = ""


class INotifier(Protocol):
    def loading(self, message: str) -> None: ...

    def success(self, message: str, description: str = "") -> None: ...

    def warning(self, message: str, description: str = "") -> None: ...

    def error(self, message: str, description: str = "") -> None: ...

    def dismiss(self) -> None: ...


class ToastCollector:
    """Collects toasts in emission order; ``dismiss`` drops pending loaders."""

    def __init__(self) -> None:
        self._toasts: List[Toast] = []

    def loading(self, message: str) -> None:
        self._toasts.append(Toast(ToastLevel.LOADING, message))

    def success(self, message: str, description: str = "") -> None:
        self._toasts.append(Toast(ToastLevel.SUCCESS, message, description))

    def warning(self, message: str, description: str = "") -> None:
        self._toasts.append(Toast(ToastLevel.WARNING, message, description))

    def error(self, message: str, description: str = "") -> None:
        self._toasts.append(Toast(ToastLevel.ERROR, message, description))

    def dismiss(self) -> None:
        self._toasts = [t for t in self._toasts if t.level != ToastLevel.LOADING]

    @property
    def toasts(self) -> List[Toast]:
        return list(self._toasts)

    @property
    def errors(self) -> List[Toast]:
        return [t for t in self._toasts if t.level == ToastLevel.ERROR]


class LoggingNotifier:
    """Notifier for work nobody is watching: everything goes to the log."""

    def loading(self, message: str) -> None:
        logger.debug("notification.loading", message=message)

    def success(self, message: str, description: str = "") -> None:
        logger.info("notification.success", message=message, description=description)

    def warning(self, message: str, description: str = "") -> None:
        logger.warning("notification.warning", message=message, description=description)

    def error(self, message: str, description: str = "") -> None:
        logger.warning("notification.error", message=message, description=description)

    def dismiss(self) -> None:
        pass
