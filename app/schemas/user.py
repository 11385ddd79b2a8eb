"""
Esquemas Pydantic para Usuario y Autenticación
"""
from pydantic import BaseModel, EmailStr, Field, validator
from typing import Optional
from datetime import datetime
import enum
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def _validate_timezone(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    try:
        ZoneInfo(v)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f'Zona horaria desconocida: {v}')
    return v


class UserCreate(BaseModel):
    """Esquema para crear usuario"""
    email: EmailStr
    name: str
    password: str
    confirm_password: str
    phone: Optional[str] = None
    timezone: Optional[str] = None

    @validator('confirm_password')
    def passwords_match(cls, v, values):
        if 'password' in values and v != values['password']:
            raise ValueError('Las contraseñas no coinciden')
        return v

    @validator('password')
    def validate_password(cls, v):
        if len(v) < 8:
            raise ValueError('La contraseña debe tener al menos 8 caracteres')
        return v

    @validator('timezone')
    def validate_timezone(cls, v):
        return _validate_timezone(v)


class UserUpdate(BaseModel):
    """Esquema para actualizar usuario"""
    name: Optional[str] = None
    phone: Optional[str] = None
    timezone: Optional[str] = None

    @validator('timezone')
    def validate_timezone(cls, v):
        return _validate_timezone(v)


class DefaultView(str, enum.Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    CALENDAR = "calendar"


class UserPreferences(BaseModel):
    """Preferencias del usuario"""
    email_notifications: bool = True
    push_notifications: bool = True
    reminder_advance_minutes: int = Field(15, ge=0, le=60)
    default_view: DefaultView = DefaultView.DAILY


class UserPreferencesUpdate(BaseModel):
    """Actualización parcial de preferencias"""
    email_notifications: Optional[bool] = None
    push_notifications: Optional[bool] = None
    reminder_advance_minutes: Optional[int] = Field(None, ge=0, le=60)
    default_view: Optional[DefaultView] = None

    class Config:
        use_enum_values = True


class UserResponse(BaseModel):
    """Esquema de respuesta de usuario"""
    id: int
    email: str
    name: str
    phone: Optional[str] = None
    timezone: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None
    preferences: UserPreferences = Field(default_factory=UserPreferences)

    @validator('preferences', pre=True, always=True)
    def default_preferences(cls, v):
        return v or {}

    class Config:
        from_attributes = True


class LoginResponse(BaseModel):
    """Esquema de respuesta de login"""
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
