from datetime import UTC, date, datetime

from sqlalchemy import Date, DateTime, Index, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from member_directory.models.utils import generate_id


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Declarative base for all member_directory ORM rows."""

    pass


class TimeStampMixin:
    """Mixin that adds created_at / updated_at columns."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False,
    )


class RecordRow(TimeStampMixin, Base):
    """Members and visitors share one table, keyed by ``category``."""

    __tablename__ = "records"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    category: Mapped[str] = mapped_column(String(16), nullable=False)
    branch_id: Mapped[str] = mapped_column(String(64), nullable=False)
    display_name: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False)

    email: Mapped[str | None] = mapped_column(String, nullable=True)
    phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    street: Mapped[str | None] = mapped_column(String, nullable=True)
    area: Mapped[str | None] = mapped_column(String, nullable=True)
    community: Mapped[str | None] = mapped_column(String, nullable=True)
    gender: Mapped[str | None] = mapped_column(String(16), nullable=True)
    marital_status: Mapped[str | None] = mapped_column(String(16), nullable=True)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    date_joined: Mapped[date | None] = mapped_column(Date, nullable=True)

    membership_level: Mapped[str | None] = mapped_column(String(16), nullable=True)
    sub_level: Mapped[str | None] = mapped_column(String(16), nullable=True)
    leader_role: Mapped[str | None] = mapped_column(String(32), nullable=True)

    service_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    invited_by: Mapped[str | None] = mapped_column(String, nullable=True)
    follow_up_status: Mapped[str | None] = mapped_column(String(16), nullable=True)

    __table_args__ = (
        Index("ix_records_category_branch", "category", "branch_id"),
    )


class TransferRequestRow(Base):
    __tablename__ = "transfer_requests"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    record_id: Mapped[str] = mapped_column(String(36), nullable=False)
    category: Mapped[str] = mapped_column(String(16), nullable=False)
    from_branch_id: Mapped[str] = mapped_column(String(64), nullable=False)
    to_branch_id: Mapped[str] = mapped_column(String(64), nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        nullable=False,
    )

    __table_args__ = (Index("ix_transfer_requests_record_id", "record_id"),)
