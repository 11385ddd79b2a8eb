"""
Esquemas Pydantic para Medicinas
"""
from pydantic import BaseModel, validator, Field
from typing import Optional, List
from datetime import date, datetime
import enum

from app.models.medicine import MedicineFrequency
from app.schemas.reminder_log import validate_hhmm


def _clean_times(v):
    # Remover duplicados conservando el orden
    seen = []
    for item in v:
        item = validate_hhmm(item.strip())
        if item not in seen:
            seen.append(item)
    return seen


class MedicineBase(BaseModel):
    """Base para esquemas de medicina"""
    name: str = Field(..., min_length=1, max_length=255, description="Nombre de la medicina")
    dosage: str = Field(..., min_length=1, max_length=100, description="Dosis (ej: 500mg)")
    frequency: MedicineFrequency = Field(MedicineFrequency.DAILY, description="Frecuencia")
    times: List[str] = Field(default=[], description="Horarios HH:MM")
    notes: Optional[str] = Field(None, max_length=1000)

    # Inventario
    inventory_count: float = Field(0, ge=0, description="Unidades disponibles")
    doses_per_intake: float = Field(1, ge=0.5, description="Unidades por toma")
    low_inventory_threshold: int = Field(5, ge=1)
    refill_reminder: bool = True
    refill_amount: float = Field(30, ge=0)
    expiration_date: Optional[date] = None
    pharmacy_name: Optional[str] = Field(None, max_length=255)
    pharmacy_phone: Optional[str] = Field(None, max_length=20)
    prescription_number: Optional[str] = Field(None, max_length=100)

    @validator('name')
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError('El nombre de la medicina es requerido')
        return v.strip()

    @validator('dosage')
    def validate_dosage(cls, v):
        if not v or not v.strip():
            raise ValueError('La dosis es requerida')
        return v.strip()

    @validator('times')
    def validate_times(cls, v):
        return _clean_times(v)


class MedicineCreate(MedicineBase):
    """Esquema para crear medicina"""
    pass


class MedicineUpdate(BaseModel):
    """Esquema para actualizar medicina"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    dosage: Optional[str] = Field(None, min_length=1, max_length=100)
    frequency: Optional[MedicineFrequency] = None
    times: Optional[List[str]] = None
    notes: Optional[str] = Field(None, max_length=1000)
    is_active: Optional[bool] = None
    inventory_count: Optional[float] = Field(None, ge=0)
    doses_per_intake: Optional[float] = Field(None, ge=0.5)
    low_inventory_threshold: Optional[int] = Field(None, ge=1)
    refill_reminder: Optional[bool] = None
    refill_amount: Optional[float] = Field(None, ge=0)
    expiration_date: Optional[date] = None
    pharmacy_name: Optional[str] = Field(None, max_length=255)
    pharmacy_phone: Optional[str] = Field(None, max_length=20)
    prescription_number: Optional[str] = Field(None, max_length=100)

    @validator('times')
    def validate_times(cls, v):
        if v is not None:
            return _clean_times(v)
        return v


class MedicineResponse(MedicineBase):
    """Esquema de respuesta de medicina"""
    id: int
    is_active: bool
    last_refill_date: Optional[datetime] = None
    days_remaining: int = 0
    is_low_inventory: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ==== INVENTARIO ====

class InventoryAction(str, enum.Enum):
    REFILL = "refill"   # sumar (por defecto refill_amount)
    ADJUST = "adjust"   # sumar o restar, sin bajar de 0
    SET = "set"         # fijar el valor


class InventoryUpdate(BaseModel):
    """Movimiento de inventario de una medicina"""
    action: InventoryAction
    amount: Optional[float] = None

    @validator('amount', always=True)
    def validate_amount(cls, v, values):
        action = values.get('action')
        if v is None:
            if action == InventoryAction.REFILL:
                return v
            raise ValueError('amount es requerido para adjust y set')
        if action in (InventoryAction.REFILL, InventoryAction.SET) and v < 0:
            raise ValueError('amount no puede ser negativo')
        return v


class MedicineInventory(BaseModel):
    """Estado del inventario de una medicina"""
    id: int
    name: str
    dosage: str
    inventory_count: float
    doses_per_intake: float
    low_inventory_threshold: int
    refill_amount: float
    days_remaining: int
    is_low_inventory: bool
    last_refill_date: Optional[datetime] = None
    expiration_date: Optional[date] = None
    pharmacy_name: Optional[str] = None
    pharmacy_phone: Optional[str] = None
    prescription_number: Optional[str] = None

    class Config:
        from_attributes = True


class InventoryList(BaseModel):
    count: int
    data: List[MedicineInventory]


class InventoryUpdateResponse(BaseModel):
    message: str
    medicine: MedicineInventory
