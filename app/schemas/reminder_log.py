"""
Esquemas Pydantic para Registros de Recordatorio
"""
from pydantic import BaseModel, validator, Field
from typing import Optional, List, Dict
from datetime import datetime, timezone
import re

from app.models.reminder_log import ReminderStatus

TIME_PATTERN = re.compile(r"^([01]?[0-9]|2[0-3]):([0-5][0-9])$")


def validate_hhmm(v: str) -> str:
    """Validar formato HH:MM (24 horas) y normalizar a dos dígitos"""
    match = TIME_PATTERN.match(v or "")
    if not match:
        raise ValueError('El tiempo debe estar en formato HH:MM (24 horas)')
    return f"{int(match.group(1)):02d}:{match.group(2)}"


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Los timestamps se guardan en UTC sin tzinfo"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class ReminderLogCreate(BaseModel):
    """Esquema para crear un registro"""
    medicine_id: int
    time: str = Field(..., description="Hora programada HH:MM")
    status: ReminderStatus = ReminderStatus.PENDING
    timestamp: Optional[datetime] = Field(None, description="Momento del evento (default: ahora)")
    notes: Optional[str] = Field(None, max_length=1000)

    @validator('time')
    def validate_time_format(cls, v):
        return validate_hhmm(v)

    @validator('timestamp')
    def normalize_timestamp(cls, v):
        return to_naive_utc(v)


class ReminderLogQuick(BaseModel):
    """Registro rápido de una toma (status por defecto: taken, hora: ahora)"""
    medicine_id: int
    time: Optional[str] = None
    status: ReminderStatus = ReminderStatus.TAKEN

    @validator('time')
    def validate_time_format(cls, v):
        if v is not None:
            return validate_hhmm(v)
        return v


class ReminderLogStatusUpdate(BaseModel):
    """Esquema para actualizar el estado de un registro"""
    status: ReminderStatus
    notes: Optional[str] = Field(None, max_length=1000)


class MedicineRef(BaseModel):
    """Medicina embebida en un registro"""
    id: int
    name: str
    dosage: str

    class Config:
        from_attributes = True


class ReminderLogResponse(BaseModel):
    """Esquema de respuesta de registro"""
    id: int
    medicine_id: int
    medicine: Optional[MedicineRef] = None
    time: str
    status: ReminderStatus
    timestamp: datetime
    date: str
    taken_at: Optional[datetime] = None
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class Pagination(BaseModel):
    page: int
    pages: int
    limit: int


class ReminderLogList(BaseModel):
    """Lista paginada de registros"""
    count: int
    total: int
    pagination: Pagination
    data: List[ReminderLogResponse]


class ReminderLogGroupedList(ReminderLogList):
    """Lista paginada con agrupación por fecha"""
    groupedByDate: Dict[str, List[ReminderLogResponse]]


class QuickLogResponse(BaseModel):
    """Respuesta del registro rápido"""
    message: str
    id: int
    medicine: str
    time: str
    status: ReminderStatus
    timestamp: datetime
