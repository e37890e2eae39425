"""Сервис для подсчета статистики: сводка дня и корзины истории."""
import calendar
import enum
import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Optional

from nutrilog.models import ActivityLog, FoodLog, round_half_up
from nutrilog.services.labels import Locale, format_bucket_label
from nutrilog.services.ledger_store import LedgerStore

logger = logging.getLogger(__name__)


class Period(str, enum.Enum):
    """Гранулярность истории."""
    WEEK = "week"              # 7 последних дней, сегодня последний
    MONTH_DAY = "month_day"    # 30 последних дней (скользящий месяц, не календарный)
    MONTH_WEEK = "month_week"  # 12 последних календарных недель с понедельника
    YEAR = "year"              # 12 календарных месяцев текущего года


BUCKET_COUNTS = {
    Period.WEEK: 7,
    Period.MONTH_DAY: 30,
    Period.MONTH_WEEK: 12,
    Period.YEAR: 12,
}


@dataclass
class HistoryBucket:
    """Суммы за один интервал истории."""

    label: str
    start: date
    end: date
    calories_in: float = 0.0
    calories_out: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    sodium: float = 0.0
    weight: Optional[float] = None
    body_fat: Optional[float] = None
    has_data: bool = False

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def add_food(self, log: FoodLog) -> None:
        self.calories_in += log.total_calories or 0
        self.protein += log.total_protein_g or 0
        self.carbs += log.total_carbs_g or 0
        self.fat += log.total_fat_g or 0
        self.sodium += log.total_sodium_mg or 0
        self.has_data = True

    def add_activity(self, log: ActivityLog) -> None:
        self.calories_out += log.calories_burned or 0
        self.has_data = True

    def daily_average(self) -> dict:
        """Средние за день внутри корзины (для недель и месяцев)."""
        days = max(self.days, 1)
        return {
            "label": self.label,
            "calories_in": round_half_up(self.calories_in / days),
            "calories_out": round_half_up(self.calories_out / days),
            "protein": round_half_up(self.protein / days),
            "carbs": round_half_up(self.carbs / days),
            "fat": round_half_up(self.fat / days),
            "sodium": round_half_up(self.sodium / days),
        }


@dataclass
class DailySummary:
    """Сводка одного дня: суммы и сами записи."""

    day: date
    calories_in: float = 0.0
    calories_out: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    sodium: float = 0.0
    food_logs: list = field(default_factory=list)
    activity_logs: list = field(default_factory=list)

    @property
    def net_calories(self) -> float:
        return self.calories_in - self.calories_out


def bucket_ranges(period: Period, today: date) -> list[tuple[date, date]]:
    """Границы корзин периода, от старых к новым. Длина всегда фиксирована."""
    period = Period(period)
    count = BUCKET_COUNTS[period]

    if period in (Period.WEEK, Period.MONTH_DAY):
        days = [today - timedelta(days=offset) for offset in range(count - 1, -1, -1)]
        return [(day, day) for day in days]

    if period == Period.MONTH_WEEK:
        this_monday = today - timedelta(days=today.weekday())
        ranges = []
        for offset in range(count - 1, -1, -1):
            start = this_monday - timedelta(weeks=offset)
            ranges.append((start, start + timedelta(days=6)))
        return ranges

    ranges = []
    for month in range(1, 13):
        last_day = calendar.monthrange(today.year, month)[1]
        ranges.append((date(today.year, month, 1), date(today.year, month, last_day)))
    return ranges


def _average(values: list[float]) -> Optional[float]:
    values = [value for value in values if value and value > 0]
    if not values:
        return None
    return round(sum(values) / len(values), 1)


def get_history(
    store: LedgerStore,
    period: Period,
    today: Optional[date] = None,
    locale: Locale = Locale.EN,
) -> list[HistoryBucket]:
    """Корзины истории за период.

    Пустые корзины возвращаются с нулями, поэтому длина списка всегда
    7, 30 или 12, сколько бы записей ни было.
    """
    period = Period(period)
    today = today or date.today()
    ranges = bucket_ranges(period, today)
    buckets = [
        HistoryBucket(label=format_bucket_label(period.value, start, locale), start=start, end=end)
        for start, end in ranges
    ]
    first, last = ranges[0][0], ranges[-1][1]

    def find_bucket(day: date) -> Optional[HistoryBucket]:
        for bucket in buckets:
            if bucket.contains(day):
                return bucket
        return None

    for log in store.query_food_logs_between(first, last):
        bucket = find_bucket(log.date)
        if bucket:
            bucket.add_food(log)

    for log in store.query_activity_logs_between(first, last):
        bucket = find_bucket(log.date)
        if bucket:
            bucket.add_activity(log)

    metrics = store.list_daily_metrics(first, last)
    for bucket in buckets:
        inside = [metric for metric in metrics if bucket.contains(metric.date)]
        bucket.weight = _average([metric.weight_kg for metric in inside])
        bucket.body_fat = _average([metric.body_fat_percentage for metric in inside])

    logger.debug(f"History {period.value}: {len(buckets)} buckets from {first} to {last}")
    return buckets


def get_daily_summary(store: LedgerStore, day: Optional[date] = None) -> DailySummary:
    """Сводка за день. Пустой день даёт нули и пустые списки, а не None."""
    day = day or date.today()
    food_logs = store.query_food_logs_by_date(day)
    activity_logs = store.query_activity_logs_by_date(day)

    return DailySummary(
        day=day,
        calories_in=sum(log.total_calories or 0 for log in food_logs),
        calories_out=sum(log.calories_burned or 0 for log in activity_logs),
        protein=sum(log.total_protein_g or 0 for log in food_logs),
        carbs=sum(log.total_carbs_g or 0 for log in food_logs),
        fat=sum(log.total_fat_g or 0 for log in food_logs),
        sodium=sum(log.total_sodium_mg or 0 for log in food_logs),
        food_logs=list(food_logs),
        activity_logs=list(activity_logs),
    )


def remaining_kcal(daily_target: Optional[int], summary: DailySummary) -> int:
    """Остаток на день: норма − съедено + сожжено."""
    return round_half_up((daily_target or 0) - summary.calories_in + summary.calories_out)


def period_averages(buckets: list[HistoryBucket]) -> dict:
    """Средние по корзинам, в которых есть записи."""
    filled = [bucket for bucket in buckets if bucket.has_data]
    if not filled:
        return {"calories_in": 0, "calories_out": 0, "protein": 0, "carbs": 0, "fat": 0, "sodium": 0, "buckets": 0}

    count = len(filled)
    return {
        "calories_in": round_half_up(sum(b.calories_in for b in filled) / count),
        "calories_out": round_half_up(sum(b.calories_out for b in filled) / count),
        "protein": round_half_up(sum(b.protein for b in filled) / count),
        "carbs": round_half_up(sum(b.carbs for b in filled) / count),
        "fat": round_half_up(sum(b.fat for b in filled) / count),
        "sodium": round_half_up(sum(b.sodium for b in filled) / count),
        "buckets": count,
    }
