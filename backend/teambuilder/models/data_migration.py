import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum, String, Text, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from teambuilder.database import Base


class DataMigrationStatus(str, enum.Enum):
    COMPLETED = "completed"
    FAILED = "failed"
    PENDING = "pending"


class AppDataMigration(Base):
    """Bookkeeping row for a data migration applied to one environment."""

    __tablename__ = "app_data_migrations"
    __table_args__ = (
        UniqueConstraint("name", "environment", name="uq_app_data_migrations_name_env"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    checksum: Mapped[str] = mapped_column(String(128), nullable=False)
    executed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    environment: Mapped[str] = mapped_column(String(32), nullable=False)  # development, production
    status: Mapped[DataMigrationStatus] = mapped_column(
        Enum(DataMigrationStatus, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=DataMigrationStatus.COMPLETED,
    )
    executed_by: Mapped[str | None] = mapped_column(String(320), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
