from member_directory.messaging.base import Channel, Messenger
from member_directory.messaging.outbox import OutboxMessage, OutboxMessenger

__all__ = [
    "Channel",
    "Messenger",
    "OutboxMessage",
    "OutboxMessenger",
]
