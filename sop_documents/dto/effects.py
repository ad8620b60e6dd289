"""Side-effect instructions returned by the workflow engine.

The engine never performs these; the caller persists the document first and
then hands each effect to the matching collaborator (log sink, notifier).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Union


@dataclass(frozen=True)
class LogEffect:
    """``logAction(document_id, action_kind, details)``"""

    document_id: str
    action_kind: str
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class NotificationEffect:
    """``notify(recipient_role, document_id, template_key)``"""

    recipient_role: str
    document_id: str
    template_key: str


@dataclass(frozen=True)
class DateStampEffect:
    """A date field the transition stamped on the new document."""

    document_id: str
    field_name: str
    value: str


Effect = Union[LogEffect, NotificationEffect, DateStampEffect]
