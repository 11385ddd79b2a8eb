"""
Modelo de Registro de Recordatorio
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum, Text, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from zoneinfo import ZoneInfo
import enum

from app.core.config import get_settings
from app.core.database import Base

settings = get_settings()


class ReminderStatus(str, enum.Enum):
    """Estados de un recordatorio"""
    PENDING = "pending"
    TAKEN = "taken"
    SKIPPED = "skipped"
    MISSED = "missed"


# Estados resueltos (los únicos que entran en las analíticas)
RESOLVED_STATUSES = (ReminderStatus.TAKEN, ReminderStatus.SKIPPED, ReminderStatus.MISSED)


class ReminderLog(Base):
    """Una toma programada y su estado resuelto"""
    __tablename__ = "reminder_logs"
    __table_args__ = (
        Index("ix_reminder_logs_user_timestamp", "user_id", "timestamp"),
        Index("ix_reminder_logs_medicine_timestamp", "medicine_id", "timestamp"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    medicine_id = Column(Integer, ForeignKey("medicines.id"), nullable=False)

    time = Column(String(5), nullable=False)  # Formato HH:MM (ej: "08:30")
    status = Column(Enum(ReminderStatus), default=ReminderStatus.PENDING, nullable=False)
    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False)  # UTC
    taken_at = Column(DateTime, nullable=True)
    notes = Column(Text, nullable=True)

    # Metadatos
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relaciones
    user = relationship("User", back_populates="reminder_logs")
    medicine = relationship("Medicine", back_populates="reminder_logs")

    def __repr__(self):
        return f"<ReminderLog(id={self.id}, medicine_id={self.medicine_id}, status={self.status.value})>"

    @property
    def local_timestamp(self) -> datetime:
        """timestamp en la zona horaria del usuario (o DEFAULT_TIMEZONE)"""
        tz_name = (self.user.timezone if self.user else None) or settings.DEFAULT_TIMEZONE
        return self.timestamp.replace(tzinfo=timezone.utc).astimezone(ZoneInfo(tz_name))

    @property
    def date(self) -> str:
        """Fecha local (YYYY-MM-DD) del registro"""
        return self.local_timestamp.date().isoformat()
