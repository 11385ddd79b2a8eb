#!/usr/bin/env python3
"""
Script para crear tablas de la base de datos
"""
import sys
import os

# Agregar el directorio raíz al path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import inspect

from app.core.database import create_tables, test_connection, get_db_info, engine
from app.core.config import get_settings
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

EXPECTED_TABLES = ["users", "medicines", "reminder_logs"]


def main():
    """Función principal"""
    settings = get_settings()

    logger.info("🚀 Iniciando creación de tablas para MedReminder")
    logger.info(f"📊 Entorno: {settings.ENVIRONMENT}")

    logger.info("🔗 Probando conexión...")
    if not test_connection():
        logger.error("❌ No se pudo conectar a la base de datos")
        return False

    db_info = get_db_info()
    if db_info:
        logger.info(f"✅ Conectado: {db_info}")

    try:
        logger.info("🔨 Creando tablas...")
        create_tables()
        logger.info("✅ ¡Tablas creadas exitosamente!")

        verify_tables()
        return True

    except Exception as e:
        logger.error(f"❌ Error al crear tablas: {e}")
        return False


def verify_tables():
    """Verificar que las tablas se crearon correctamente"""
    tables = inspect(engine).get_table_names()

    logger.info("📋 Verificando tablas creadas:")
    for table in EXPECTED_TABLES:
        if table in tables:
            logger.info(f"   ✅ {table}")
        else:
            logger.warning(f"   ⚠️ {table} - No encontrada")

    logger.info(f"📊 Total de tablas: {len(tables)}")


if __name__ == "__main__":
    success = main()
    sys.exit(0 if success else 1)
