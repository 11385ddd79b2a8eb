"""
Archivo principal de la aplicación FastAPI - MedReminder
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from app.core.config import get_settings
from app.core.database import create_tables, test_connection, get_db_info
from app.api import api_router
import logging

settings = get_settings()

# Configurar logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Gestión del ciclo de vida de la aplicación"""
    # Startup
    logger.info("🚀 Iniciando MedReminder API...")
    logger.info(f"🌍 Ambiente: {settings.ENVIRONMENT}")
    logger.info(f"🔑 Debug: {settings.DEBUG}")

    if test_connection():
        db_info = get_db_info()
        if db_info:
            logger.info(f"📊 Base de datos: {db_info}")

        # Crear tablas si no existen
        try:
            create_tables()
            logger.info("✅ Esquema de base de datos verificado")
        except Exception as e:
            logger.error(f"❌ Error al verificar esquema: {e}")
    else:
        logger.warning("⚠️ La aplicación continuará pero sin base de datos")

    logger.info("🎯 MedReminder API lista para recibir requests")
    yield

    # Shutdown
    logger.info("🛑 Cerrando MedReminder API...")


def create_application() -> FastAPI:
    """Factory function para crear la aplicación FastAPI"""

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="""
## MedReminder API

API REST para recordatorios de medicación y analíticas de adherencia.

### Características principales:
- 💊 Catálogo personal de medicinas
- ⏰ Registro de tomas (taken / missed / skipped)
- 📈 Adherencia por día, franja horaria, medicina y semana
        """,
        version=settings.VERSION,
        lifespan=lifespan,
    )

    setup_middlewares(app)
    setup_routes(app)

    return app


def setup_middlewares(app: FastAPI):
    """Configurar middlewares de la aplicación"""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["*"],
    )
    logger.info(f"🌐 Orígenes permitidos: {settings.CORS_ORIGINS}")


def setup_routes(app: FastAPI):
    """Configurar rutas de la aplicación"""

    @app.get("/")
    async def root():
        return {
            "message": "💊 MedReminder API",
            "version": settings.VERSION,
            "environment": settings.ENVIRONMENT,
            "documentation": "/docs",
            "health": "/health",
            "api": "/api"
        }

    @app.get("/health")
    async def health_check():
        """Health check completo de la aplicación"""
        db_status = "connected" if test_connection() else "disconnected"

        health_status = {
            "status": "healthy" if db_status == "connected" else "degraded",
            "service": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "environment": settings.ENVIRONMENT,
            "database": {"status": db_status},
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

        # Información adicional en desarrollo
        if settings.DEBUG:
            db_info = get_db_info()
            if db_info:
                health_status["database"].update(db_info)

        return health_status

    app.include_router(api_router, prefix="/api")

    logger.info("🛣️ Rutas configuradas correctamente")


# Crear la aplicación
app = create_application()


# Solo para desarrollo con uvicorn run
if __name__ == "__main__":
    import uvicorn

    logger.info(f"🌐 URL: http://{settings.HOST}:{settings.PORT}")
    logger.info(f"📚 Docs: http://{settings.HOST}:{settings.PORT}/docs")

    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
        access_log=settings.DEBUG,
    )
