from __future__ import annotations

import enum
from abc import ABC, abstractmethod


class Channel(enum.StrEnum):
    email = "email"
    sms = "sms"


class Messenger(ABC):
    """Delivers one message to a list of recipients.

    The whole recipient list is handed over in a single call; delivery to
    each individual recipient is the implementation's concern.  A refused
    request raises
    :class:`~member_directory.core.exceptions.MessageDispatchFailedException`,
    an unreachable service raises
    :class:`~member_directory.core.exceptions.CollaboratorUnavailableError`.
    """

    @abstractmethod
    async def send_bulk_message(
        self,
        recipient_ids: list[str],
        channel: str,
        subject: str | None,
        body: str,
    ) -> None: ...

    async def close(self) -> None:
        """Release any held resources."""
