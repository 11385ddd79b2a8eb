"""
Dependencias globales de la aplicación
"""
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from typing import Optional

from app.core.database import get_db
from app.core.security import verify_token
from app.models.user import User
from app.services.auth_service import AuthService

# Configurar OAuth2
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl="api/auth/login",
    auto_error=False
)


async def get_current_user(
        token: Optional[str] = Depends(oauth2_scheme),
        db: Session = Depends(get_db)
) -> User:
    """
    Obtener usuario actual del token JWT
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="No se pudo validar las credenciales",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if not token:
        raise credentials_exception

    payload = verify_token(token)
    user_id: Optional[str] = payload.get("sub")
    if user_id is None:
        raise credentials_exception

    auth_service = AuthService(db)
    user = auth_service.get_user_by_id(int(user_id))
    if user is None:
        raise credentials_exception

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Usuario inactivo"
        )

    return user


# Dependencias para paginación
class PaginationParams:
    def __init__(self, page: int = 1, limit: int = 10):
        self.page = max(1, page)
        self.limit = max(1, min(limit, 1000))  # Máximo 1000 registros por página

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


def get_pagination_params(page: int = 1, limit: int = 10) -> PaginationParams:
    """
    Parámetros de paginación
    """
    return PaginationParams(page=page, limit=limit)


# Dependencias para filtros comunes
class DateRangeParams:
    def __init__(
            self,
            start_date: Optional[str] = None,
            end_date: Optional[str] = None
    ):
        from datetime import datetime

        self.start_date = None
        self.end_date = None

        if start_date:
            try:
                self.start_date = datetime.strptime(start_date, "%Y-%m-%d").date()
            except ValueError:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Formato de fecha inválido. Use YYYY-MM-DD"
                )

        if end_date:
            try:
                self.end_date = datetime.strptime(end_date, "%Y-%m-%d").date()
            except ValueError:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Formato de fecha inválido. Use YYYY-MM-DD"
                )

        # Validar que start_date <= end_date
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="La fecha de inicio debe ser menor o igual a la fecha de fin"
            )

    @property
    def is_complete(self) -> bool:
        return self.start_date is not None and self.end_date is not None


def get_date_range_params(
        startDate: Optional[str] = None,
        endDate: Optional[str] = None
) -> DateRangeParams:
    """
    Parámetros de rango de fechas (?startDate=YYYY-MM-DD&endDate=YYYY-MM-DD)
    """
    return DateRangeParams(start_date=startDate, end_date=endDate)
