"""
Configuración de la aplicación para MySQL y despliegue
"""
from functools import lru_cache
from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Configuración de la aplicación"""

    # Información del proyecto
    PROJECT_NAME: str = "MedReminder API"
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = "production"
    DEBUG: bool = False

    # Configuración del servidor
    HOST: str = "0.0.0.0"
    PORT: int = 8081

    # Seguridad
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Base de datos MySQL
    DB_HOST: str = "localhost"
    DB_PORT: int = 3306
    DB_NAME: str = "medreminder"
    DB_USER: str = "medreminder"
    DB_PASSWORD: str = ""
    DB_CHARSET: str = "utf8mb4"

    # URL completa (tiene prioridad sobre DB_*, ej: sqlite:// en pruebas)
    DATABASE_URL: Optional[str] = None

    # CORS
    CORS_ORIGINS: List[str] = Field(
        default=[
            "http://localhost:3000",
            "http://localhost:5173"
        ]
    )

    # Logging
    LOG_LEVEL: str = "INFO"

    # Timezone usado para agrupar logs cuando el usuario no tiene uno propio
    DEFAULT_TIMEZONE: str = "UTC"

    # Analíticas
    DEFAULT_ANALYTICS_PERIOD: str = "30days"

    @property
    def database_url(self) -> str:
        """Construir URL de conexión"""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"mysql+pymysql://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
            f"?charset={self.DB_CHARSET}"
        )

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def is_production(self) -> bool:
        """Verificar si estamos en producción"""
        return self.ENVIRONMENT.lower() == "production"

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Obtener configuración con cache"""
    return Settings()
