"""
Servicio de registros de recordatorio y analíticas de adherencia
"""
from sqlalchemy.orm import Session, joinedload
from typing import List, Optional, Tuple
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo
import calendar
import logging

from app.core.config import get_settings
from app.core.dependencies import DateRangeParams, PaginationParams
from app.models.medicine import Medicine
from app.models.reminder_log import ReminderLog, ReminderStatus, RESOLVED_STATUSES
from app.models.user import User
from app.schemas.analytics import (
    AdherenceAnalytics,
    AnalyticsPeriod,
    DateRange,
    MedicineAdherence,
    ReminderLogEntry,
    ReminderStats,
)
from app.schemas.reminder_log import (
    ReminderLogCreate,
    ReminderLogQuick,
    ReminderLogStatusUpdate,
)
from app.services.adherence import aggregate

logger = logging.getLogger(__name__)

settings = get_settings()

PERIOD_DAYS = {
    AnalyticsPeriod.LAST_7_DAYS: 7,
    AnalyticsPeriod.LAST_30_DAYS: 30,
    AnalyticsPeriod.LAST_90_DAYS: 90,
}

PERIOD_MONTHS = {
    AnalyticsPeriod.LAST_6_MONTHS: 6,
    AnalyticsPeriod.LAST_YEAR: 12,
}


def shift_months(moment: datetime, months: int) -> datetime:
    """Mover una fecha N meses de calendario (el día se ajusta al fin de mes)"""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def resolve_period(period: AnalyticsPeriod, end: datetime) -> Tuple[datetime, datetime]:
    """Convertir el período (7days, 30days, ...) en [inicio, fin] terminando en `end`"""
    if period in PERIOD_DAYS:
        return end - timedelta(days=PERIOD_DAYS[period]), end
    return shift_months(end, -PERIOD_MONTHS[period]), end


def to_utc_naive(moment: datetime) -> datetime:
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


def day_bounds(start_date: date, end_date: date) -> Tuple[datetime, datetime]:
    """Rango inclusivo: desde 00:00 del inicio hasta 23:59:59.999 del fin"""
    return datetime.combine(start_date, time.min), datetime.combine(end_date, time.max)


class ReminderLogService:
    """Registros de recordatorio de un usuario"""

    def __init__(self, db: Session, user: User):
        self.db = db
        self.user = user

    @property
    def tz(self) -> ZoneInfo:
        """Zona horaria del usuario para agrupar por día y franja horaria"""
        return ZoneInfo(self.user.timezone or settings.DEFAULT_TIMEZONE)

    def _local_day_bounds(self, start_date: date, end_date: date) -> Tuple[datetime, datetime]:
        """Días completos en la zona del usuario, como instantes con zona"""
        start, end = day_bounds(start_date, end_date)
        return start.replace(tzinfo=self.tz), end.replace(tzinfo=self.tz)

    def _get_medicine(self, medicine_id: int) -> Optional[Medicine]:
        return self.db.query(Medicine).filter(
            Medicine.id == medicine_id,
            Medicine.user_id == self.user.id
        ).first()

    # ==== ESCRITURA ====

    def create_log(self, log_data: ReminderLogCreate) -> Optional[ReminderLog]:
        """Crear registro; None si la medicina no es del usuario"""
        medicine = self._get_medicine(log_data.medicine_id)
        if not medicine:
            return None

        reminder_log = ReminderLog(
            user_id=self.user.id,
            medicine_id=log_data.medicine_id,
            time=log_data.time,
            status=log_data.status,
            timestamp=log_data.timestamp or datetime.utcnow(),
            notes=log_data.notes
        )
        if reminder_log.status == ReminderStatus.TAKEN:
            reminder_log.taken_at = reminder_log.timestamp
            medicine.consume_dose()

        self.db.add(reminder_log)
        self.db.commit()
        self.db.refresh(reminder_log)

        logger.info(f"Registro creado: {reminder_log}")
        return reminder_log

    def quick_log(self, log_data: ReminderLogQuick) -> Optional[Tuple[ReminderLog, Medicine]]:
        """Registrar una toma ahora mismo"""
        medicine = self._get_medicine(log_data.medicine_id)
        if not medicine:
            return None

        now = datetime.utcnow()
        log_time = log_data.time or now.replace(tzinfo=timezone.utc).astimezone(self.tz).strftime("%H:%M")

        reminder_log = ReminderLog(
            user_id=self.user.id,
            medicine_id=medicine.id,
            time=log_time,
            status=log_data.status,
            timestamp=now,
            taken_at=now if log_data.status == ReminderStatus.TAKEN else None
        )
        if log_data.status == ReminderStatus.TAKEN:
            medicine.consume_dose()

        self.db.add(reminder_log)
        self.db.commit()
        self.db.refresh(reminder_log)

        logger.info(f"Toma registrada: {medicine.name} {log_data.status.value} a las {log_time}")
        return reminder_log, medicine

    def update_status(
            self,
            log_id: int,
            status_update: ReminderLogStatusUpdate
    ) -> Optional[ReminderLog]:
        """Actualizar estado y notas; al pasar a taken marca taken_at y descuenta inventario"""
        reminder_log = self.get_log(log_id)
        if not reminder_log:
            return None

        previous_status = reminder_log.status
        reminder_log.status = status_update.status
        if status_update.notes is not None:
            reminder_log.notes = status_update.notes

        if status_update.status == ReminderStatus.TAKEN and previous_status != ReminderStatus.TAKEN:
            reminder_log.taken_at = datetime.utcnow()
            reminder_log.medicine.consume_dose()

        self.db.commit()
        self.db.refresh(reminder_log)

        logger.info(
            f"Registro {reminder_log.id} actualizado: "
            f"{previous_status.value} -> {reminder_log.status.value}"
        )
        return reminder_log

    # ==== LECTURA ====

    def get_log(self, log_id: int) -> Optional[ReminderLog]:
        """Obtener registro por ID (solo si pertenece al usuario)"""
        return self.db.query(ReminderLog).options(
            joinedload(ReminderLog.medicine)
        ).filter(
            ReminderLog.id == log_id,
            ReminderLog.user_id == self.user.id
        ).first()

    def _filtered_query(
            self,
            date_range: Optional[DateRangeParams] = None,
            medicine_id: Optional[int] = None,
            status: Optional[ReminderStatus] = None
    ):
        query = self.db.query(ReminderLog).filter(ReminderLog.user_id == self.user.id)

        if date_range is not None and date_range.is_complete:
            start, end = self._local_day_bounds(date_range.start_date, date_range.end_date)
            query = query.filter(
                ReminderLog.timestamp >= to_utc_naive(start),
                ReminderLog.timestamp <= to_utc_naive(end)
            )

        if medicine_id:
            query = query.filter(ReminderLog.medicine_id == medicine_id)

        if status:
            query = query.filter(ReminderLog.status == status)

        return query

    def list_logs(
            self,
            pagination: PaginationParams,
            date_range: Optional[DateRangeParams] = None,
            medicine_id: Optional[int] = None,
            status: Optional[ReminderStatus] = None
    ) -> Tuple[List[ReminderLog], int]:
        """Registros más recientes primero, con total para paginar"""
        query = self._filtered_query(date_range, medicine_id, status)
        total = query.count()

        logs = query.options(
            joinedload(ReminderLog.medicine)
        ).order_by(
            ReminderLog.timestamp.desc(), ReminderLog.id.desc()
        ).offset(pagination.skip).limit(pagination.limit).all()

        return logs, total

    def _resolved_logs(self, start: datetime, end: datetime) -> List[ReminderLog]:
        """Registros taken/skipped/missed entre dos instantes UTC naive"""
        return self.db.query(ReminderLog).options(
            joinedload(ReminderLog.medicine)
        ).filter(
            ReminderLog.user_id == self.user.id,
            ReminderLog.status.in_(RESOLVED_STATUSES),
            ReminderLog.timestamp >= start,
            ReminderLog.timestamp <= end
        ).order_by(ReminderLog.timestamp, ReminderLog.id).all()

    def _to_entries(self, logs: List[ReminderLog]) -> List[ReminderLogEntry]:
        """Pasar los registros a la zona horaria del usuario para agregarlos"""
        tz = self.tz
        return [
            ReminderLogEntry(
                id=log.id,
                medicine_id=log.medicine_id,
                medicine_name=log.medicine.name if log.medicine else "",
                dosage=log.medicine.dosage if log.medicine else "",
                status=log.status.value,
                scheduled_time=log.time,
                occurred_at=log.timestamp.replace(tzinfo=timezone.utc).astimezone(tz)
            )
            for log in logs
        ]

    # ==== ESTADÍSTICAS ====

    def get_stats(self, start_date: date, end_date: date) -> ReminderStats:
        """
        Totales del rango y adherencia de TODAS las medicinas del catálogo
        (las que no tienen registros aparecen con tasa 0)
        """
        start, end = self._local_day_bounds(start_date, end_date)
        logs = self._resolved_logs(to_utc_naive(start), to_utc_naive(end))
        summary = aggregate(self._to_entries(logs), start, end)

        seen = {item.medicine_id: item for item in summary.by_medicine}
        by_medicine = []
        for medicine in self.db.query(Medicine).filter(
                Medicine.user_id == self.user.id
        ).order_by(Medicine.name).all():
            by_medicine.append(seen.get(medicine.id) or MedicineAdherence(
                medicine_id=medicine.id,
                name=medicine.name,
                dosage=medicine.dosage
            ))

        return ReminderStats(overall=summary.overall, by_medicine=tuple(by_medicine))

    def get_analytics(
            self,
            period: AnalyticsPeriod,
            now: Optional[datetime] = None
    ) -> AdherenceAnalytics:
        """
        Analíticas de adherencia del período que termina en `now`.
        Puede lanzar MalformedInputError.
        """
        now = now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)

        period_end = now.astimezone(self.tz)
        period_start, period_end = resolve_period(period, period_end)

        logs = self._resolved_logs(to_utc_naive(period_start), to_utc_naive(period_end))
        summary = aggregate(self._to_entries(logs), period_start, period_end)

        logger.info(
            f"📊 Analíticas {period.value} para usuario {self.user.id}: "
            f"{summary.overall.total} registros, {summary.overall.adherence_rate:.1f}%"
        )

        return AdherenceAnalytics(
            period=period.value,
            date_range=DateRange(start=period_start.date(), end=period_end.date()),
            **summary.dict()
        )
