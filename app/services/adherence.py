"""
Agregación de adherencia a la medicación

Función pura: recibe los registros resueltos (taken/missed/skipped) de un
período y construye un AdherenceSummary nuevo. No consulta la base de datos,
no guarda estado y no verifica que los registros caigan dentro del período;
el filtrado por fechas y la zona horaria los decide quien la llama.
"""
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Union
import logging

from pydantic import ValidationError

from app.schemas.analytics import (
    AdherenceSummary,
    MedicineAdherence,
    OverallStats,
    RateBucket,
    ReminderLogEntry,
    TimeOfDayBreakdown,
    WeeklyTrendPoint,
)

logger = logging.getLogger(__name__)

TAKEN = "taken"
SKIPPED = "skipped"
MISSED = "missed"
VALID_STATUSES = (TAKEN, SKIPPED, MISSED)

DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")
TIME_OF_DAY_BUCKETS = ("morning", "afternoon", "evening", "night")

WEEK = timedelta(days=7)


class MalformedInputError(ValueError):
    """Un registro tiene timestamp ilegible o un estado fuera del enum"""

    def __init__(self, entry_id, reason: str):
        self.entry_id = entry_id
        self.reason = reason
        super().__init__(f"Registro {entry_id} inválido: {reason}")


def adherence_rate(taken: int, total: int) -> float:
    """Porcentaje 0-100 sin redondear; 0 cuando no hay dosis"""
    return (taken / total) * 100 if total > 0 else 0.0


def day_of_week_index(moment: datetime) -> int:
    """Domingo=0 ... Sábado=6 (datetime.weekday() usa Lunes=0)"""
    return (moment.weekday() + 1) % 7


def time_of_day_bucket(hour: int) -> str:
    """
    Franja del día según la hora:
    morning 05-11, afternoon 12-16, evening 17-20, night 21-04
    """
    if 5 <= hour < 12:
        return "morning"
    if 12 <= hour < 17:
        return "afternoon"
    if 17 <= hour < 21:
        return "evening"
    return "night"


def week_count(period_start: datetime, period_end: datetime) -> int:
    """ceil((period_end - period_start) / 7 días); 0 para períodos vacíos"""
    span = period_end - period_start
    if span <= timedelta(0):
        return 0
    weeks, remainder = divmod(span, WEEK)
    return weeks + (1 if remainder else 0)


def _to_entry(raw: Union[ReminderLogEntry, dict]) -> ReminderLogEntry:
    if isinstance(raw, ReminderLogEntry):
        return raw
    try:
        return ReminderLogEntry(**raw)
    except ValidationError as e:
        fields = sorted({str(error["loc"][0]) for error in e.errors() if error["loc"]})
        raise MalformedInputError(raw.get("id"), f"campos inválidos: {', '.join(fields)}") from e


def _parse_occurred_at(entry: ReminderLogEntry) -> datetime:
    value = entry.occurred_at
    if isinstance(value, datetime):
        return value

    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        raise MalformedInputError(entry.id, f"timestamp ilegible '{value}'")


def _parse_status(entry: ReminderLogEntry) -> str:
    status = getattr(entry.status, "value", entry.status)
    if status not in VALID_STATUSES:
        raise MalformedInputError(entry.id, f"estado desconocido '{status}'")
    return status


def _align(moment: datetime, reference: datetime) -> datetime:
    # Mezcla de naive/aware: se compara por hora de reloj
    if moment.tzinfo is None and reference.tzinfo is not None:
        return moment.replace(tzinfo=reference.tzinfo)
    if moment.tzinfo is not None and reference.tzinfo is None:
        return moment.replace(tzinfo=None)
    return moment


def _counter() -> Dict[str, int]:
    return {"total": 0, "taken": 0, "skipped": 0, "missed": 0}


def _rate_bucket(counter: Dict[str, int]) -> RateBucket:
    return RateBucket(
        total=counter["total"],
        taken=counter["taken"],
        adherence_rate=adherence_rate(counter["taken"], counter["total"]),
    )


def aggregate(
        logs: Iterable[Union[ReminderLogEntry, dict]],
        period_start: datetime,
        period_end: datetime
) -> AdherenceSummary:
    """
    Calcular el resumen de adherencia de un período.

    - overall: totales por estado y tasa global
    - dayOfWeek: 7 entradas, Domingo..Sábado
    - timeOfDay: morning/afternoon/evening/night según la hora de occurred_at
    - byMedicine: una entrada por medicina presente, en orden de aparición
    - trend: semanas consecutivas de 7 días desde period_start; la última
      termina en period_end y las semanas sin registros aparecen en cero

    Lanza MalformedInputError si algún registro no se puede interpretar; en
    ese caso no se devuelve ningún resultado parcial.
    """
    overall = _counter()
    by_day = [_counter() for _ in DAY_NAMES]
    by_time = {bucket: _counter() for bucket in TIME_OF_DAY_BUCKETS}
    by_medicine: Dict[Union[int, str], Dict] = {}

    weeks = week_count(period_start, period_end)
    by_week = [_counter() for _ in range(weeks)]

    count = 0
    for raw in logs:
        entry = _to_entry(raw)
        status = _parse_status(entry)
        occurred_at = _parse_occurred_at(entry)
        count += 1

        counters = [
            overall,
            by_day[day_of_week_index(occurred_at)],
            by_time[time_of_day_bucket(occurred_at.hour)],
        ]

        medicine = by_medicine.get(entry.medicine_id)
        if medicine is None:
            medicine = by_medicine[entry.medicine_id] = {
                "name": entry.medicine_name,
                "dosage": entry.dosage,
                "counter": _counter(),
            }
        counters.append(medicine["counter"])

        if weeks:
            offset = _align(occurred_at, period_start) - period_start
            index = min(max(offset // WEEK, 0), weeks - 1)
            counters.append(by_week[index])

        for counter in counters:
            counter["total"] += 1
            counter[status] += 1

    trend: List[WeeklyTrendPoint] = []
    for index, counter in enumerate(by_week):
        week_start = period_start + index * WEEK
        week_end = min(week_start + timedelta(days=6), period_end)
        trend.append(WeeklyTrendPoint(
            week_start=week_start.date(),
            week_end=week_end.date(),
            total=counter["total"],
            taken=counter["taken"],
            adherence_rate=adherence_rate(counter["taken"], counter["total"]),
        ))

    summary = AdherenceSummary(
        overall=OverallStats(
            adherence_rate=adherence_rate(overall["taken"], overall["total"]),
            **overall
        ),
        by_day_of_week=tuple(_rate_bucket(counter) for counter in by_day),
        by_time_of_day=TimeOfDayBreakdown(
            **{bucket: _rate_bucket(counter) for bucket, counter in by_time.items()}
        ),
        by_medicine=tuple(
            MedicineAdherence(
                medicine_id=medicine_id,
                name=item["name"],
                dosage=item["dosage"],
                adherence_rate=adherence_rate(item["counter"]["taken"], item["counter"]["total"]),
                **item["counter"]
            )
            for medicine_id, item in by_medicine.items()
        ),
        trend=tuple(trend),
    )

    logger.debug(
        f"Adherencia agregada: {count} registros, {len(by_medicine)} medicinas, "
        f"{weeks} semanas, tasa {summary.overall.adherence_rate:.1f}%"
    )
    return summary
