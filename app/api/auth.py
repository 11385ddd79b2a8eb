"""
Endpoints de autenticación y perfil del usuario
"""
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
import logging

from app.core.database import get_db
from app.core.security import create_access_token
from app.core.dependencies import get_current_user
from app.models.user import User
from app.schemas.user import (
    UserCreate,
    UserResponse,
    UserUpdate,
    UserPreferencesUpdate,
    LoginResponse
)
from app.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter()


def _token_for(user: User) -> dict:
    token = create_access_token(data={"sub": str(user.id), "email": user.email})
    return {"access_token": token, "token_type": "bearer", "user": user}


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register_user(
        user_data: UserCreate,
        db: Session = Depends(get_db)
):
    """
    Crear una cuenta (email único, contraseña de 8+ caracteres)
    """
    service = AuthService(db)
    if service.get_user_by_email(user_data.email) is not None:
        logger.warning(f"⚠️ Registro rechazado, email en uso: {user_data.email}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Ya existe un usuario con ese email"
        )

    return service.create_user(user_data)


@router.post("/login", response_model=LoginResponse)
async def login_for_access_token(
        form_data: OAuth2PasswordRequestForm = Depends(),
        db: Session = Depends(get_db)
):
    """
    Login con formulario OAuth2 (username = email); devuelve JWT y usuario
    """
    service = AuthService(db)
    user = service.authenticate_user(form_data.username, form_data.password)

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Credenciales inválidas",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Usuario inactivo"
        )

    service.update_last_login(user.id)
    return _token_for(user)


@router.get("/me", response_model=UserResponse)
async def read_profile(current_user: User = Depends(get_current_user)):
    return current_user


@router.put("/me", response_model=UserResponse)
async def update_profile(
        changes: UserUpdate,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """
    Actualizar nombre, teléfono o zona horaria
    """
    return AuthService(db).update_user(current_user.id, changes.dict(exclude_unset=True))


@router.put("/me/preferences", response_model=UserResponse)
async def update_preferences(
        changes: UserPreferencesUpdate,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """
    Actualizar notificaciones, minutos de anticipación o vista por defecto
    """
    return AuthService(db).update_preferences(current_user.id, changes.dict(exclude_unset=True))
