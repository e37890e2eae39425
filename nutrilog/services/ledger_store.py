"""Хранилище дневника: схема, миграции и CRUD.

Перед любой операцией нужно дождаться init(). Запись по несуществующему id
не бросает исключение, а возвращает 0 затронутых строк.
"""
import logging
from contextlib import contextmanager
from datetime import date, datetime
from typing import Any, Iterator, Optional, Type

from sqlalchemy import func, inspect, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from nutrilog.database import Base, make_engine, make_session_factory, session_scope
from nutrilog.exceptions import ProfileValidationError, StoreInitError, StoreNotReadyError
from nutrilog.models import (
    NUTRIENT_FIELDS,
    ActivityLog,
    BaseModel,
    DailyMetric,
    FoodItem,
    FoodLog,
    MealTime,
    UserProfile,
    parse_number,
)

logger = logging.getLogger(__name__)

# Колонки, появившиеся после первой версии схемы. Только ADD COLUMN:
# старые установки должны открываться без потери данных.
ADDITIVE_MIGRATIONS = (
    ("user_profiles", "birth_date", "DATE"),
    ("user_profiles", "target_date", "DATE"),
    ("user_profiles", "current_body_fat", "FLOAT"),
    ("user_profiles", "target_body_fat", "FLOAT"),
    ("user_profiles", "sodium_target_mg", "INTEGER DEFAULT 2300"),
    ("food_items", "serving_weight_g", "FLOAT"),
    ("food_items", "saturated_fat_g", "FLOAT DEFAULT 0"),
    ("food_items", "trans_fat_g", "FLOAT DEFAULT 0"),
    ("food_items", "cholesterol_mg", "FLOAT DEFAULT 0"),
    ("food_items", "magnesium_mg", "FLOAT DEFAULT 0"),
    ("food_items", "zinc_mg", "FLOAT DEFAULT 0"),
    ("food_items", "iron_mg", "FLOAT DEFAULT 0"),
    ("food_items", "created_at", "DATETIME"),
    ("food_logs", "total_sugar_g", "FLOAT DEFAULT 0"),
    ("food_logs", "total_fiber_g", "FLOAT DEFAULT 0"),
    ("food_logs", "total_saturated_fat_g", "FLOAT DEFAULT 0"),
    ("food_logs", "total_trans_fat_g", "FLOAT DEFAULT 0"),
    ("food_logs", "total_cholesterol_mg", "FLOAT DEFAULT 0"),
    ("food_logs", "total_magnesium_mg", "FLOAT DEFAULT 0"),
    ("food_logs", "total_zinc_mg", "FLOAT DEFAULT 0"),
    ("food_logs", "total_iron_mg", "FLOAT DEFAULT 0"),
    ("food_logs", "notes", "TEXT"),
    ("food_logs", "created_at", "DATETIME"),
    ("food_logs", "updated_at", "DATETIME"),
    ("activity_logs", "created_at", "DATETIME"),
    ("activity_logs", "updated_at", "DATETIME"),
    ("daily_metrics", "updated_at", "DATETIME"),
)

DEFAULT_ACTIVITY_NAMES = ("Walking", "Running", "Stairs", "Cleaning", "Yoga", "General exercise")

_PROTECTED_COLUMNS = {"id", "created_at"}


def _column_values(model: Type[BaseModel], data: dict) -> dict:
    """Оставить только колонки модели; лишние ключи считаются ошибкой вызывающего кода."""
    unknown = set(data) - model.column_names()
    if unknown:
        raise ValueError(f"Unknown {model.__tablename__} fields: {', '.join(sorted(unknown))}")
    return {key: value for key, value in data.items() if key not in _PROTECTED_COLUMNS}


def _clean_nutrients(values: dict, prefix: str = "") -> dict:
    for name in NUTRIENT_FIELDS:
        key = prefix + name
        if key in values:
            values[key] = max(0.0, parse_number(values[key]))
    return values


def _stamp_dates(values: dict) -> dict:
    """Дата записи берётся из logged_at, если не указана явно."""
    logged_at = values.get("logged_at")
    if logged_at is None:
        day = values.get("date")
        now = datetime.now()
        logged_at = values["logged_at"] = datetime.combine(day, now.time()) if day else now
    if values.get("date") is None:
        values["date"] = logged_at.date()
    return values


def _coerce_date(key: str, value: Any) -> Optional[date]:
    """date, datetime или строка "YYYY-MM-DD"; пустое значение = None."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError as e:
        raise ProfileValidationError(f"{key} must be a date (YYYY-MM-DD), got {value!r}") from e


def _validate_profile(values: dict) -> None:
    for key in ("height_cm", "current_weight_kg"):
        value = values.get(key)
        if value is not None and parse_number(value) <= 0:
            raise ProfileValidationError(f"{key} must be greater than zero")
    for key in ("birth_date", "target_date"):
        if key in values:
            values[key] = _coerce_date(key, values[key])
    birth_date = values.get("birth_date")
    if birth_date is not None and birth_date > date.today():
        raise ProfileValidationError("birth_date cannot be in the future")


class LedgerStore:
    """Локальное хранилище профиля, продуктов и записей."""

    def __init__(self, url: str, echo: bool = False, max_history_days: int = 365):
        self.url = url
        self.max_history_days = max_history_days
        self.engine = make_engine(url, echo=echo)
        self._session_factory = make_session_factory(self.engine)
        self._ready = False

    @property
    def ready(self) -> bool:
        return self._ready

    # ------------------------------------------------------------------
    # Схема
    # ------------------------------------------------------------------

    def init(self) -> list[str]:
        """Создать таблицы и применить недостающие колонки.

        Returns:
            список применённых миграций вида "table.column"

        Raises:
            StoreInitError: таблицы создать не удалось
        """
        try:
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as e:
            self._ready = False
            logger.error(f"Ledger table creation failed: {e}")
            raise StoreInitError(f"Cannot create ledger tables: {e}") from e

        applied = self._apply_migrations()
        self._ready = True
        logger.info(f"Ledger store ready ({len(applied)} migrations applied)")
        return applied

    def _apply_migrations(self) -> list[str]:
        applied = []
        inspector = inspect(self.engine)
        existing = {}
        for table, column, ddl in ADDITIVE_MIGRATIONS:
            if table not in existing:
                existing[table] = {col["name"] for col in inspector.get_columns(table)}
            if column in existing[table]:
                logger.debug(f"Migration {table}.{column} already applied")
                continue
            try:
                with self.engine.begin() as conn:
                    conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {column} {ddl}"))
            except SQLAlchemyError as e:
                logger.warning(f"Migration {table}.{column} skipped: {e}")
                continue
            existing[table].add(column)
            applied.append(f"{table}.{column}")
            logger.info(f"Migration {table}.{column} applied")
        return applied

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Сессия БД; доступна только после init()."""
        if not self._ready:
            raise StoreNotReadyError("LedgerStore.init() must complete before use")
        with session_scope(self._session_factory) as db:
            yield db

    def _update(self, model: Type[BaseModel], record_id: int, values: dict) -> int:
        with self.session() as db:
            rows = db.query(model).filter(model.id == record_id).update(values, synchronize_session=False)
            db.commit()
        if not rows:
            logger.debug(f"{model.__tablename__} id={record_id} not found for update")
        return rows

    def _delete(self, model: Type[BaseModel], record_id: int) -> int:
        with self.session() as db:
            rows = db.query(model).filter(model.id == record_id).delete(synchronize_session=False)
            db.commit()
        return rows

    def _insert(self, record: BaseModel) -> BaseModel:
        with self.session() as db:
            db.add(record)
            db.commit()
            db.refresh(record)
        return record

    # ------------------------------------------------------------------
    # Профиль
    # ------------------------------------------------------------------

    def get_profile(self) -> Optional[UserProfile]:
        with self.session() as db:
            return db.query(UserProfile).order_by(UserProfile.id).first()

    def get_or_create_profile(self) -> UserProfile:
        """Единственный профиль установки; создаётся пустым при первом обращении."""
        profile = self.get_profile()
        if profile is None:
            profile = self._insert(UserProfile(updated_at=datetime.now()))
            logger.info("Profile created")
        return profile

    def upsert_profile(self, data: dict) -> UserProfile:
        """Вставить профиль, если его нет, иначе обновить единственную строку."""
        values = _column_values(UserProfile, data)
        _validate_profile(values)
        values["updated_at"] = datetime.now()

        with self.session() as db:
            profile = db.query(UserProfile).order_by(UserProfile.id).first()
            if profile is None:
                profile = UserProfile(**values)
                db.add(profile)
            else:
                for key, value in values.items():
                    setattr(profile, key, value)
            db.commit()
            db.refresh(profile)
        return profile

    # ------------------------------------------------------------------
    # Продукты
    # ------------------------------------------------------------------

    def create_food_item(self, data: dict) -> FoodItem:
        if "calories" not in data:
            raise ValueError("calories is required for a food item")
        values = _clean_nutrients(_column_values(FoodItem, data))
        values.setdefault("updated_at", datetime.now())
        return self._insert(FoodItem(**values))

    def update_food_item(self, item_id: int, data: dict) -> int:
        """Обновить базу продукта на месте («обновить всё»). Записи в дневнике не пересчитываются."""
        values = _clean_nutrients(_column_values(FoodItem, data))
        values["updated_at"] = datetime.now()
        return self._update(FoodItem, item_id, values)

    def delete_food_item(self, item_id: int) -> int:
        return self._delete(FoodItem, item_id)

    def get_food_item(self, item_id: int) -> Optional[FoodItem]:
        with self.session() as db:
            return db.get(FoodItem, item_id)

    def find_food_item_by_barcode(self, barcode: str) -> Optional[FoodItem]:
        """Последний сохранённый продукт с этим штрихкодом."""
        if not barcode:
            return None
        with self.session() as db:
            return (
                db.query(FoodItem)
                .filter(FoodItem.barcode == barcode)
                .order_by(FoodItem.id.desc())
                .first()
            )

    def list_food_items(self, search: Optional[str] = None, limit: int = 50) -> list[FoodItem]:
        with self.session() as db:
            query = db.query(FoodItem)
            if search:
                query = query.filter(FoodItem.name.ilike(f"%{search.strip()}%"))
            return query.order_by(FoodItem.name).limit(limit).all()

    # ------------------------------------------------------------------
    # Дневник питания
    # ------------------------------------------------------------------

    def create_food_log(self, data: dict) -> FoodLog:
        values = _stamp_dates(_clean_nutrients(_column_values(FoodLog, data), prefix="total_"))
        if not values.get("meal_time_category"):
            values["meal_time_category"] = MealTime.for_time(values["logged_at"])
        return self._insert(FoodLog(**values))

    def update_food_log(self, log_id: int, data: dict) -> int:
        values = _clean_nutrients(_column_values(FoodLog, data), prefix="total_")
        if values.get("logged_at") is not None and "date" not in values:
            values["date"] = values["logged_at"].date()
        return self._update(FoodLog, log_id, values)

    def delete_food_log(self, log_id: int) -> int:
        return self._delete(FoodLog, log_id)

    def get_food_log(self, log_id: int) -> Optional[FoodLog]:
        with self.session() as db:
            return db.get(FoodLog, log_id)

    def query_food_logs_by_date(self, day: date) -> list[FoodLog]:
        """Записи за день по полю date (не по времени, без дублей на границе часовых поясов)."""
        with self.session() as db:
            return db.query(FoodLog).filter(FoodLog.date == day).order_by(FoodLog.logged_at).all()

    def query_food_logs_between(self, start: date, end: date) -> list[FoodLog]:
        """Записи с start по end включительно."""
        with self.session() as db:
            return (
                db.query(FoodLog)
                .filter(FoodLog.date >= start, FoodLog.date <= end)
                .order_by(FoodLog.date, FoodLog.logged_at)
                .all()
            )

    def frequent_foods(self, limit: int = 5) -> list[FoodLog]:
        """Самые частые продукты, по последней записи каждого."""
        with self.session() as db:
            rows = (
                db.query(FoodLog.food_name, func.max(FoodLog.id).label("last_id"), func.count(FoodLog.id).label("uses"))
                .group_by(FoodLog.food_name)
                .order_by(func.count(FoodLog.id).desc(), func.max(FoodLog.id).desc())
                .limit(limit)
                .all()
            )
            return [db.get(FoodLog, row.last_id) for row in rows]

    # ------------------------------------------------------------------
    # Дневник активности
    # ------------------------------------------------------------------

    def create_activity_log(self, data: dict) -> ActivityLog:
        values = _stamp_dates(_column_values(ActivityLog, data))
        if "calories_burned" in values:
            values["calories_burned"] = max(0.0, parse_number(values["calories_burned"]))
        return self._insert(ActivityLog(**values))

    def update_activity_log(self, log_id: int, data: dict) -> int:
        values = _column_values(ActivityLog, data)
        if "calories_burned" in values:
            values["calories_burned"] = max(0.0, parse_number(values["calories_burned"]))
        if values.get("logged_at") is not None and "date" not in values:
            values["date"] = values["logged_at"].date()
        return self._update(ActivityLog, log_id, values)

    def delete_activity_log(self, log_id: int) -> int:
        return self._delete(ActivityLog, log_id)

    def delete_activity_logs_by_name(self, activity_name: str) -> int:
        with self.session() as db:
            rows = (
                db.query(ActivityLog)
                .filter(ActivityLog.activity_name == activity_name)
                .delete(synchronize_session=False)
            )
            db.commit()
        logger.info(f"Deleted {rows} activity logs named '{activity_name}'")
        return rows

    def get_activity_log(self, log_id: int) -> Optional[ActivityLog]:
        with self.session() as db:
            return db.get(ActivityLog, log_id)

    def query_activity_logs_by_date(self, day: date) -> list[ActivityLog]:
        with self.session() as db:
            return db.query(ActivityLog).filter(ActivityLog.date == day).order_by(ActivityLog.logged_at).all()

    def query_activity_logs_between(self, start: date, end: date) -> list[ActivityLog]:
        with self.session() as db:
            return (
                db.query(ActivityLog)
                .filter(ActivityLog.date >= start, ActivityLog.date <= end)
                .order_by(ActivityLog.date, ActivityLog.logged_at)
                .all()
            )

    def frequent_activity_names(self) -> list[str]:
        """Названия активностей по частоте, затем стандартные, без повторов."""
        with self.session() as db:
            rows = (
                db.query(ActivityLog.activity_name, func.count(ActivityLog.id))
                .group_by(ActivityLog.activity_name)
                .order_by(func.count(ActivityLog.id).desc(), ActivityLog.activity_name)
                .all()
            )
        names = [name for name, _count in rows]
        names.extend(name for name in DEFAULT_ACTIVITY_NAMES if name not in names)
        return names

    # ------------------------------------------------------------------
    # Вес и процент жира
    # ------------------------------------------------------------------

    def record_daily_metric(self, day: date, weight_kg: Any, body_fat: Any = None) -> DailyMetric:
        """Записать вес за дату: обновить запись дня или создать новую."""
        weight = parse_number(weight_kg)
        with self.session() as db:
            metric = db.query(DailyMetric).filter(DailyMetric.date == day).first()
            if metric is None:
                metric = DailyMetric(
                    date=day,
                    weight_kg=weight,
                    body_fat_percentage=parse_number(body_fat) if body_fat else None,
                )
                db.add(metric)
            else:
                metric.weight_kg = weight
                if body_fat:
                    metric.body_fat_percentage = parse_number(body_fat)
            db.commit()
            db.refresh(metric)
            self._trim_metrics(db)
        return metric

    def _trim_metrics(self, db: Session) -> None:
        stale = (
            db.query(DailyMetric.id)
            .order_by(DailyMetric.date.desc())
            .offset(self.max_history_days)
            .all()
        )
        if stale:
            db.query(DailyMetric).filter(DailyMetric.id.in_([row.id for row in stale])).delete(
                synchronize_session=False
            )
            db.commit()

    def list_daily_metrics(self, start: date, end: date) -> list[DailyMetric]:
        with self.session() as db:
            return (
                db.query(DailyMetric)
                .filter(DailyMetric.date >= start, DailyMetric.date <= end)
                .order_by(DailyMetric.date)
                .all()
            )
