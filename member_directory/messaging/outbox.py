from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime

from member_directory.core.exceptions import MessageDispatchFailedException
from member_directory.messaging.base import Channel, Messenger
from member_directory.models.utils import generate_id

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass
class OutboxMessage:
    """A bulk message accepted by :class:`OutboxMessenger`."""

    recipient_ids: list[str]
    channel: str
    subject: str | None
    body: str

    id: str = field(default_factory=generate_id)
    queued_at: datetime = field(default_factory=_utcnow)


class OutboxMessenger(Messenger):
    """Messenger that queues messages in memory instead of delivering them.

    Used for tests and for deployments where another process drains the
    outbox.
    """

    def __init__(self) -> None:
        self.outbox: list[OutboxMessage] = []

    async def send_bulk_message(
        self,
        recipient_ids: list[str],
        channel: str,
        subject: str | None,
        body: str,
    ) -> None:
        try:
            channel = Channel(channel).value
        except ValueError as exc:
            raise MessageDispatchFailedException(
                f"unsupported channel '{channel}'"
            ) from exc

        message = OutboxMessage(
            recipient_ids=list(recipient_ids),
            channel=channel,
            subject=subject,
            body=body,
        )
        self.outbox.append(message)
        logger.info(
            "Queued %s message %s for %d recipient(s)",
            channel,
            message.id,
            len(recipient_ids),
        )
