"""Notification dispatch.

The workflow only emits :class:`NotificationEffect` instructions; a
``Notifier`` turns them into messages. Delivery (mail, chat, ...) is up to
the host application; the default notifier just logs.
"""

from __future__ import annotations

import logging
from typing import List, Protocol

from sop_documents.dto.effects import NotificationEffect

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def notify(self, recipient_role: str, document_id: str, template_key: str) -> None: ...


class LoggingNotifier:
    """Writes each notification to the module logger."""

    def notify(self, recipient_role: str, document_id: str, template_key: str) -> None:
        logger.info("Notify %s about document %s (template=%s)", recipient_role, document_id, template_key)


class RecordingNotifier:
    """Keeps every notification in memory."""

    def __init__(self) -> None:
        self.sent: List[NotificationEffect] = []

    def notify(self, recipient_role: str, document_id: str, template_key: str) -> None:
        self.sent.append(
            NotificationEffect(recipient_role=recipient_role, document_id=document_id, template_key=template_key)
        )


def deliver(notifier: Notifier, effect: NotificationEffect) -> None:
    notifier.notify(effect.recipient_role, effect.document_id, effect.template_key)
