"""Batch operations that can be applied to a selection of records.

Each operation is a small immutable pydantic model.  ``check()`` is
called once per batch, before any collaborator call, and raises
:class:`PreconditionFailedError` when the operation is incomplete.
"""

from __future__ import annotations

import dataclasses
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from member_directory.core.exceptions import PreconditionFailedError
from member_directory.importing.normalizer import coerce_value
from member_directory.messaging.base import Channel
from member_directory.models.record import Record

# Fields a bulk update may not touch; moving branches goes through transfers.
PROTECTED_FIELDS = frozenset(
    {"id", "category", "branch_id", "created_at", "updated_at"}
)
UPDATABLE_FIELDS = frozenset(
    f.name for f in dataclasses.fields(Record) if f.name not in PROTECTED_FIELDS
)


class _Operation(BaseModel):
    model_config = ConfigDict(frozen=True)

    def check(self) -> None:
        """Raise :class:`PreconditionFailedError` if the operation is incomplete."""


class TransferOperation(_Operation):
    """Request that each selected record move to another branch."""

    kind: Literal["transfer"] = "transfer"
    to_branch_id: str = ""
    reason: str = ""
    notes: str | None = None

    def check(self) -> None:
        if not self.to_branch_id.strip():
            raise PreconditionFailedError("a target branch is required")
        if not self.reason.strip():
            raise PreconditionFailedError("a transfer reason is required")


class NotifyOperation(_Operation):
    """Send one message to every selected record."""

    kind: Literal["notify"] = "notify"
    channel: str = Channel.sms.value
    body: str = ""
    subject: str | None = None

    def check(self) -> None:
        try:
            channel = Channel(self.channel)
        except ValueError as exc:
            raise PreconditionFailedError(
                f"unsupported channel '{self.channel}'"
            ) from exc
        if not self.body.strip():
            raise PreconditionFailedError("a message body is required")
        if channel is Channel.email and not (self.subject or "").strip():
            raise PreconditionFailedError("a subject is required for email")


class DeleteOperation(_Operation):
    """Delete each selected record."""

    kind: Literal["delete"] = "delete"


class UpdateOperation(_Operation):
    """Apply the same field changes to each selected record."""

    kind: Literal["update"] = "update"
    changes: dict[str, Any] = Field(default_factory=dict)

    def check(self) -> None:
        self.normalized_changes()

    def normalized_changes(self) -> dict[str, Any]:
        """Return *changes* with values in the form imported records use.

        Raises :class:`PreconditionFailedError` for an empty change set, a
        field that cannot be updated in bulk, or an invalid value.
        """
        if not self.changes:
            raise PreconditionFailedError("no changes given")
        unknown = sorted(set(self.changes) - UPDATABLE_FIELDS)
        if unknown:
            raise PreconditionFailedError(
                f"fields cannot be updated in bulk: {', '.join(unknown)}"
            )
        normalized: dict[str, Any] = {}
        for name, value in self.changes.items():
            try:
                normalized[name] = coerce_value(name, value)
            except ValueError as exc:
                raise PreconditionFailedError(str(exc)) from exc
        return normalized


BatchOperation = Union[
    TransferOperation,
    NotifyOperation,
    DeleteOperation,
    UpdateOperation,
]

_operation_map: dict[str, type[_Operation]] = {
    "transfer": TransferOperation,
    "notify": NotifyOperation,
    "delete": DeleteOperation,
    "update": UpdateOperation,
}


def parse_operation(data: dict[str, Any]) -> BatchOperation:
    """Build an operation from a plain dict keyed by ``kind``."""
    kind = data.get("kind")
    cls = _operation_map.get(kind)  # type: ignore[arg-type]
    if cls is None:
        raise PreconditionFailedError(f"unknown operation kind: {kind!r}")
    return cls.model_validate(data)  # type: ignore[return-value]
