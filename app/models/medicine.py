"""
Modelo de Medicina
"""
from sqlalchemy import Column, Integer, String, Text, Date, DateTime, Float, JSON, Enum, Boolean, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from datetime import datetime
from typing import Optional
import enum
import logging
import math

from app.core.database import Base

logger = logging.getLogger(__name__)


class MedicineFrequency(str, enum.Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    CUSTOM = "custom"


class Medicine(Base):
    """Medicina del catálogo personal de un usuario"""
    __tablename__ = "medicines"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Información básica
    name = Column(String(255), nullable=False, index=True)
    dosage = Column(String(100), nullable=False)  # ej: "500mg", "2 tabletas"
    frequency = Column(Enum(MedicineFrequency), nullable=False, default=MedicineFrequency.DAILY)
    times = Column(JSON, default=list)  # Lista de horarios "HH:MM"
    notes = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True)

    # Inventario
    inventory_count = Column(Float, nullable=False, default=0)
    doses_per_intake = Column(Float, nullable=False, default=1)
    low_inventory_threshold = Column(Integer, nullable=False, default=5)
    refill_reminder = Column(Boolean, default=True)
    refill_amount = Column(Float, nullable=False, default=30)
    last_refill_date = Column(DateTime, nullable=True)
    expiration_date = Column(Date, nullable=True)

    # Farmacia
    pharmacy_name = Column(String(255), nullable=True)
    pharmacy_phone = Column(String(20), nullable=True)
    prescription_number = Column(String(100), nullable=True)

    # Metadatos
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relaciones
    user = relationship("User", back_populates="medicines")
    reminder_logs = relationship("ReminderLog", back_populates="medicine", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Medicine(id={self.id}, name='{self.name}', dosage='{self.dosage}')>"

    @property
    def full_name(self) -> str:
        """Nombre completo de la medicina"""
        return f"{self.name} {self.dosage}"

    @property
    def daily_consumption(self) -> float:
        """Unidades por día según horarios y frecuencia"""
        if not self.times or not self.doses_per_intake:
            return 0.0
        per_schedule = len(self.times) * self.doses_per_intake
        if self.frequency == MedicineFrequency.DAILY:
            return per_schedule
        # weekly/custom: los horarios cubren una semana
        return per_schedule / 7

    @property
    def days_remaining(self) -> int:
        consumption = self.daily_consumption
        if not self.inventory_count or consumption == 0:
            return 0
        return math.floor(self.inventory_count / consumption)

    @property
    def is_low_inventory(self) -> bool:
        return (self.inventory_count or 0) <= (self.low_inventory_threshold or 0)

    def consume_dose(self):
        """Descontar una toma del inventario (nunca por debajo de 0)"""
        self.inventory_count = max(0.0, (self.inventory_count or 0) - (self.doses_per_intake or 0))
        if self.refill_reminder and self.is_low_inventory:
            logger.warning(
                f"⚠️ Inventario bajo: {self.full_name} ({self.inventory_count:g} unidades)"
            )

    def refill(self, amount: Optional[float] = None):
        """Reponer inventario (por defecto refill_amount)"""
        self.inventory_count = (self.inventory_count or 0) + (amount or self.refill_amount or 0)
        self.last_refill_date = datetime.utcnow()
