"""
Endpoints de registros de recordatorio y analíticas de adherencia
"""
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Dict, List, Optional
import logging
import math

from app.core.config import get_settings
from app.core.database import get_db
from app.core.dependencies import (
    get_current_user,
    get_pagination_params,
    get_date_range_params,
    DateRangeParams,
    PaginationParams
)
from app.models.user import User
from app.models.reminder_log import ReminderStatus
from app.schemas.analytics import AdherenceAnalytics, AnalyticsPeriod, ReminderStats
from app.schemas.reminder_log import (
    ReminderLogCreate,
    ReminderLogQuick,
    ReminderLogStatusUpdate,
    ReminderLogResponse,
    ReminderLogList,
    ReminderLogGroupedList,
    QuickLogResponse
)
from app.services.adherence import MalformedInputError
from app.services.reminder_log_service import ReminderLogService

logger = logging.getLogger(__name__)

settings = get_settings()

router = APIRouter()


def _page(logs, total: int, pagination: PaginationParams) -> Dict:
    return {
        "count": len(logs),
        "total": total,
        "pagination": {
            "page": pagination.page,
            "pages": math.ceil(total / pagination.limit),
            "limit": pagination.limit
        },
        "data": logs
    }


@router.post("/", response_model=ReminderLogResponse, status_code=status.HTTP_201_CREATED)
async def create_reminder_log(
        log_data: ReminderLogCreate,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """
    Crear un registro de recordatorio
    """
    reminder_log = ReminderLogService(db, current_user).create_log(log_data)
    if not reminder_log:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Medicina no encontrada o no autorizada"
        )

    return reminder_log


@router.post("/log", response_model=QuickLogResponse, status_code=status.HTTP_201_CREATED)
async def log_medicine_reminder(
        log_data: ReminderLogQuick,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """
    Registrar una toma ahora (status por defecto: taken)
    """
    result = ReminderLogService(db, current_user).quick_log(log_data)
    if not result:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Medicina no encontrada o no autorizada"
        )

    reminder_log, medicine = result
    return {
        "message": f"Medicina {reminder_log.status.value} registrada exitosamente",
        "id": reminder_log.id,
        "medicine": medicine.name,
        "time": reminder_log.time,
        "status": reminder_log.status,
        "timestamp": reminder_log.timestamp
    }


@router.get("/", response_model=ReminderLogList)
async def list_reminder_logs(
        pagination: PaginationParams = Depends(get_pagination_params),
        date_range: DateRangeParams = Depends(get_date_range_params),
        medicineId: Optional[int] = Query(None, description="Filtrar por medicina"),
        status_filter: Optional[ReminderStatus] = Query(None, alias="status", description="Filtrar por estado"),
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """
    Listar registros del usuario (más recientes primero)
    """
    logs, total = ReminderLogService(db, current_user).list_logs(
        pagination=pagination,
        date_range=date_range,
        medicine_id=medicineId,
        status=status_filter
    )

    return _page(logs, total, pagination)


@router.get("/grouped", response_model=ReminderLogGroupedList)
async def list_grouped_reminder_logs(
        page: int = Query(1, ge=1),
        limit: int = Query(20, ge=1),
        date_range: DateRangeParams = Depends(get_date_range_params),
        medicineId: Optional[int] = Query(None, description="Filtrar por medicina"),
        status_filter: Optional[ReminderStatus] = Query(None, alias="status", description="Filtrar por estado"),
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """
    Listar registros agrupados por fecha (YYYY-MM-DD)
    """
    pagination = PaginationParams(page=page, limit=limit)
    logs, total = ReminderLogService(db, current_user).list_logs(
        pagination=pagination,
        date_range=date_range,
        medicine_id=medicineId,
        status=status_filter
    )

    grouped: Dict[str, List] = {}
    for reminder_log in logs:
        grouped.setdefault(reminder_log.date, []).append(reminder_log)

    response = _page(logs, total, pagination)
    response["groupedByDate"] = grouped
    return response


@router.get("/stats", response_model=ReminderStats)
async def get_reminder_stats(
        date_range: DateRangeParams = Depends(get_date_range_params),
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """
    Estadísticas del rango (startDate y endDate requeridos)
    """
    if not date_range.is_complete:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="startDate y endDate son requeridos"
        )

    try:
        return ReminderLogService(db, current_user).get_stats(
            date_range.start_date,
            date_range.end_date
        )
    except MalformedInputError as e:
        logger.error(f"❌ Error en estadísticas: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )


@router.get("/analytics", response_model=AdherenceAnalytics)
async def get_adherence_analytics(
        period: AnalyticsPeriod = Query(
            AnalyticsPeriod(settings.DEFAULT_ANALYTICS_PERIOD),
            description="Período: 7days, 30days, 90days, 6months, 1year"
        ),
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """
    Analíticas de adherencia: general, por día de la semana, por franja
    horaria, por medicina y tendencia semanal
    """
    try:
        return ReminderLogService(db, current_user).get_analytics(period)
    except MalformedInputError as e:
        logger.error(f"❌ Error generando analíticas: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )


@router.get("/{log_id}", response_model=ReminderLogResponse)
async def get_reminder_log(
        log_id: int,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """
    Obtener un registro
    """
    reminder_log = ReminderLogService(db, current_user).get_log(log_id)
    if not reminder_log:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Registro no encontrado o no autorizado"
        )

    return reminder_log


@router.put("/{log_id}", response_model=ReminderLogResponse)
async def update_reminder_log_status(
        log_id: int,
        status_update: ReminderLogStatusUpdate,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """
    Actualizar el estado de un registro
    """
    reminder_log = ReminderLogService(db, current_user).update_status(log_id, status_update)
    if not reminder_log:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Registro no encontrado o no autorizado"
        )

    return reminder_log
