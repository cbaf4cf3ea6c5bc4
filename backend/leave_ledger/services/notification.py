# ruff: noqa: TC003
"""Notification collaborator.

Delivery is someone else's job: the engine only hands over an event. A
failing backend must never undo a committed ledger change, so callers use
:func:`notify_safely` after their transaction has been committed.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from leave_ledger.exceptions import DownstreamNotificationFailure
from leave_ledger.models.enums import NotificationEvent

logger = logging.getLogger(__name__)


@dataclass
class SentNotification:
    """One event recorded by the in-memory backend."""

    event_type: NotificationEvent
    employee_id: uuid.UUID
    payload: dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class NotificationService(Protocol):
    """Interface for the notification collaborator."""

    async def notify(
        self,
        event_type: NotificationEvent,
        employee_id: uuid.UUID,
        payload: dict[str, Any],
    ) -> None:
        """Hand an event to the delivery pipeline."""
        ...


class InMemoryNotificationService:
    """In-memory stub that records events instead of delivering them."""

    def __init__(self) -> None:
        self.sent: list[SentNotification] = []

    async def notify(
        self,
        event_type: NotificationEvent,
        employee_id: uuid.UUID,
        payload: dict[str, Any],
    ) -> None:
        self.sent.append(SentNotification(event_type=event_type, employee_id=employee_id, payload=payload))


_notification_service: NotificationService = InMemoryNotificationService()


def get_notification_service() -> NotificationService:
    """Return the configured notification collaborator."""
    return _notification_service


def set_notification_service(service: NotificationService) -> None:
    """Override the service (for testing or production wiring)."""
    global _notification_service
    _notification_service = service


async def notify_safely(
    event_type: NotificationEvent,
    employee_id: uuid.UUID,
    payload: dict[str, Any] | None = None,
) -> bool:
    """Send a notification, logging instead of raising on failure.

    Returns True when the backend accepted the event.
    """
    service = get_notification_service()
    try:
        await service.notify(event_type, employee_id, payload or {})
    except DownstreamNotificationFailure as exc:
        logger.warning("Notification %s for employee=%s failed: %s", event_type, employee_id, exc)
        return False
    except Exception:
        logger.exception("Notification backend crashed on %s for employee=%s", event_type, employee_id)
        return False
    return True
