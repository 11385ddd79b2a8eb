"""
Esquemas Pydantic para analíticas de adherencia

Las respuestas usan camelCase (overall, dayOfWeek, timeOfDay, byMedicine,
trend), que es lo que consumen las gráficas del frontend.
"""
from pydantic import BaseModel, Field
from typing import Optional, Tuple, Union
from datetime import date, datetime
import enum


class AnalyticsPeriod(str, enum.Enum):
    """Períodos de reporte aceptados por ?period="""
    LAST_7_DAYS = "7days"
    LAST_30_DAYS = "30days"
    LAST_90_DAYS = "90days"
    LAST_6_MONTHS = "6months"
    LAST_YEAR = "1year"


class FrozenModel(BaseModel):
    """Base inmutable; acepta nombres de campo o alias"""

    class Config:
        frozen = True
        populate_by_name = True


# ==== ENTRADA ====

class ReminderLogEntry(FrozenModel):
    """Registro resuelto tal como lo consume el agregador"""
    id: Union[int, str]
    medicine_id: Union[int, str] = Field(..., alias="medicineId")
    medicine_name: str = Field("", alias="medicineName")
    dosage: str = ""
    status: str
    scheduled_time: Optional[str] = Field(None, alias="scheduledTime")
    # datetime ya resuelto en la zona horaria de presentación, o texto ISO-8601
    occurred_at: Union[datetime, str] = Field(..., alias="occurredAt")


# ==== SALIDA ====

class RateBucket(FrozenModel):
    total: int = 0
    taken: int = 0
    adherence_rate: float = Field(0.0, alias="adherenceRate")


class OverallStats(FrozenModel):
    total: int = 0
    taken: int = 0
    skipped: int = 0
    missed: int = 0
    adherence_rate: float = Field(0.0, alias="adherenceRate")


class TimeOfDayBreakdown(FrozenModel):
    morning: RateBucket
    afternoon: RateBucket
    evening: RateBucket
    night: RateBucket


class MedicineAdherence(FrozenModel):
    medicine_id: Union[int, str] = Field(..., alias="medicineId")
    name: str
    dosage: str = ""
    total: int = 0
    taken: int = 0
    skipped: int = 0
    missed: int = 0
    adherence_rate: float = Field(0.0, alias="adherenceRate")


class WeeklyTrendPoint(FrozenModel):
    week_start: date = Field(..., alias="weekStart")
    week_end: date = Field(..., alias="weekEnd")
    total: int = 0
    taken: int = 0
    adherence_rate: float = Field(0.0, alias="adherenceRate")


class AdherenceSummary(FrozenModel):
    """Resumen de adherencia; se calcula en cada petición y nunca se persiste"""
    overall: OverallStats
    by_day_of_week: Tuple[RateBucket, ...] = Field(..., alias="dayOfWeek")  # Domingo..Sábado
    by_time_of_day: TimeOfDayBreakdown = Field(..., alias="timeOfDay")
    by_medicine: Tuple[MedicineAdherence, ...] = Field(..., alias="byMedicine")
    trend: Tuple[WeeklyTrendPoint, ...]


class DateRange(FrozenModel):
    start: date
    end: date


class AdherenceAnalytics(AdherenceSummary):
    """Respuesta de /reminder-logs/analytics"""
    period: str
    date_range: DateRange = Field(..., alias="dateRange")


class ReminderStats(FrozenModel):
    """Respuesta de /reminder-logs/stats"""
    overall: OverallStats
    by_medicine: Tuple[MedicineAdherence, ...] = Field(..., alias="byMedicine")
