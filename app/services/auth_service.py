"""
Servicio de autenticación
"""
from sqlalchemy.orm import Session
from datetime import datetime
from typing import Optional
import logging

from app.models.user import User
from app.schemas.user import UserCreate
from app.core.security import get_password_hash, verify_password

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("name", "phone", "timezone")


class AuthService:
    """Servicio para manejo de autenticación"""

    def __init__(self, db: Session):
        self.db = db

    def get_user_by_email(self, email: str) -> Optional[User]:
        """Obtener usuario por email"""
        return self.db.query(User).filter(User.email == email.lower()).first()

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        """Obtener usuario por ID"""
        return self.db.query(User).filter(User.id == user_id).first()

    def create_user(self, user_data: UserCreate) -> User:
        """Crear nuevo usuario"""
        db_user = User(
            email=user_data.email.lower(),
            name=user_data.name,
            hashed_password=get_password_hash(user_data.password),
            phone=user_data.phone,
            timezone=user_data.timezone
        )

        self.db.add(db_user)
        self.db.commit()
        self.db.refresh(db_user)

        logger.info(f"Usuario registrado: {db_user.email} (ID: {db_user.id})")
        return db_user

    def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """Autenticar usuario"""
        user = self.get_user_by_email(email)
        if not user:
            return None
        if not verify_password(password, user.hashed_password):
            return None
        return user

    def update_last_login(self, user_id: int):
        """Actualizar último login"""
        user = self.get_user_by_id(user_id)
        if user:
            user.last_login = datetime.utcnow()
            self.db.commit()

    def update_user(self, user_id: int, changes: dict) -> Optional[User]:
        """Actualizar campos de perfil; ignora cualquier otro campo"""
        user = self.get_user_by_id(user_id)
        if not user:
            return None

        applied = {k: v for k, v in changes.items() if k in PROFILE_FIELDS}
        for field, value in applied.items():
            setattr(user, field, value)

        self.db.commit()
        self.db.refresh(user)

        if applied:
            logger.info(f"Perfil {user.id} actualizado: {sorted(applied)}")
        return user

    def update_preferences(self, user_id: int, changes: dict) -> Optional[User]:
        """Combinar las preferencias nuevas con las guardadas"""
        user = self.get_user_by_id(user_id)
        if not user:
            return None

        # Reasignar el dict para que SQLAlchemy detecte el cambio en la columna JSON
        user.preferences = {**(user.preferences or {}), **changes}
        self.db.commit()
        self.db.refresh(user)

        logger.info(f"Preferencias {user.id} actualizadas: {sorted(changes)}")
        return user
