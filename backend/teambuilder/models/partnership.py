import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from teambuilder.database import Base


class TeamStatus(str, enum.Enum):
    FILLING = "filling"
    COMPLETE = "complete"
    INACTIVE = "inactive"


_FILLING = text("status = 'filling'")
_ACTIVE = text("status IN ('filling', 'complete')")


class Partnership(Base):
    """A team inside a company, led by the user whose join position is its number."""

    __tablename__ = "partnerships"
    __table_args__ = (
        UniqueConstraint("company_id", "team_number", name="uq_partnerships_company_team"),
        UniqueConstraint("company_id", "group_id", name="uq_partnerships_company_group"),
        CheckConstraint(
            "team_number > 0 AND team_number <= 1000", name="ck_partnerships_team_number"
        ),
        # One filling team per company
        Index(
            "uq_partnerships_filling_team",
            "company_id",
            unique=True,
            postgresql_where=_FILLING,
            sqlite_where=_FILLING,
        ),
        # A user leads at most one active team per company
        Index(
            "uq_partnerships_active_leader",
            "leader_id",
            "company_id",
            unique=True,
            postgresql_where=_ACTIVE,
            sqlite_where=_ACTIVE,
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    group_id: Mapped[str] = mapped_column(String(64), nullable=False)
    company_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("companies.id"), nullable=False
    )
    team_number: Mapped[int] = mapped_column(Integer, nullable=False)
    leader_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False
    )
    status: Mapped[TeamStatus] = mapped_column(
        Enum(TeamStatus, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=TeamStatus.FILLING,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    company: Mapped["Company"] = relationship(back_populates="partnerships")  # noqa: F821
    leader: Mapped["User"] = relationship(foreign_keys=[leader_id])  # noqa: F821
    members: Mapped[list["PartnershipMember"]] = relationship(back_populates="partnership")


class PartnershipMember(Base):
    __tablename__ = "partnership_members"
    __table_args__ = (
        UniqueConstraint("partnership_id", "user_id", name="uq_partnership_members_team_user"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    partnership_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("partnerships.id"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    partnership: Mapped["Partnership"] = relationship(back_populates="members")
    user: Mapped["User"] = relationship()  # noqa: F821


class PartnershipHistory(Base):
    """Append-only record of two users having shared a team."""

    __tablename__ = "partnership_history"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user1_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False
    )
    user2_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False
    )
    partnership_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("partnerships.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
