"""Тесты хранилища: схема, миграции, CRUD."""
import sqlite3
from datetime import date, datetime, timedelta

import pytest
from sqlalchemy import inspect

from conftest import activity_log_data, food_log_data
from nutrilog.exceptions import ProfileValidationError, StoreInitError, StoreNotReadyError
from nutrilog.models import FoodItem, Gender, MealTime
from nutrilog.services import ledger_store
from nutrilog.services.ledger_store import ADDITIVE_MIGRATIONS, DEFAULT_ACTIVITY_NAMES, LedgerStore


def test_init_is_idempotent():
    """Повторный init() не падает и ничего не меняет."""
    store = LedgerStore("sqlite://")

    assert store.init() == []
    columns = {t: {c["name"] for c in inspect(store.engine).get_columns(t)} for t in inspect(store.engine).get_table_names()}

    assert store.init() == []
    assert store.ready
    again = {t: {c["name"] for c in inspect(store.engine).get_columns(t)} for t in inspect(store.engine).get_table_names()}
    assert again == columns
    assert {"user_profiles", "food_items", "food_logs", "activity_logs", "daily_metrics"} <= set(columns)


def test_legacy_database_is_migrated(tmp_path):
    """Старая база без новых колонок открывается, данные на месте."""
    path = tmp_path / "legacy.db"
    conn = sqlite3.connect(path)
    conn.execute(
        "CREATE TABLE food_logs ("
        "id INTEGER PRIMARY KEY, date DATE NOT NULL, meal_time_category VARCHAR(32) NOT NULL, "
        "logged_at DATETIME NOT NULL, food_item_id INTEGER, food_name VARCHAR(255) NOT NULL, "
        "serving_type VARCHAR(32), serving_amount FLOAT, unit_weight_g FLOAT, total_weight_g FLOAT, "
        "total_calories FLOAT, total_protein_g FLOAT, total_fat_g FLOAT, total_carbs_g FLOAT, "
        "total_sodium_mg FLOAT, image_url TEXT, ai_analysis_log TEXT)"
    )
    conn.execute(
        "INSERT INTO food_logs (date, meal_time_category, logged_at, food_name, total_calories) "
        "VALUES ('2024-06-15', 'lunch', '2024-06-15 12:00:00', 'Old soup', 120)"
    )
    conn.commit()
    conn.close()

    store = LedgerStore(f"sqlite:///{path}")
    applied = store.init()

    assert "food_logs.total_iron_mg" in applied
    assert "food_logs.notes" in applied
    assert not any(name.startswith("user_profiles.") for name in applied)
    columns = {c["name"] for c in inspect(store.engine).get_columns("food_logs")}
    assert {column for table, column, _ in ADDITIVE_MIGRATIONS if table == "food_logs"} <= columns

    logs = store.query_food_logs_by_date(date(2024, 6, 15))
    assert [log.food_name for log in logs] == ["Old soup"]
    assert logs[0].total_calories == 120

    # Второй запуск: миграции уже применены
    assert store.init() == []
    store.engine.dispose()


def test_store_requires_init():
    store = LedgerStore("sqlite://")

    with pytest.raises(StoreNotReadyError):
        store.get_profile()


def test_get_or_create_profile_is_singleton(store):
    first = store.get_or_create_profile()
    second = store.get_or_create_profile()

    assert first.id == second.id


def test_upsert_profile_updates_single_row(store):
    created = store.upsert_profile({"gender": Gender.FEMALE, "height_cm": 160})
    updated = store.upsert_profile({"current_weight_kg": 55})

    assert created.id == updated.id
    assert updated.gender == Gender.FEMALE
    assert updated.height_cm == 160
    assert updated.current_weight_kg == 55
    assert updated.updated_at is not None


@pytest.mark.parametrize("data", [
    {"height_cm": 0},
    {"current_weight_kg": -70},
    {"birth_date": date.today() + timedelta(days=1)},
])
def test_upsert_profile_validation(store, data):
    with pytest.raises(ProfileValidationError):
        store.upsert_profile(data)


def test_unknown_fields_rejected(store):
    with pytest.raises(ValueError):
        store.create_food_item({"calories": 100, "name": "Tea", "colour": "green"})


def test_food_item_crud(store):
    item = store.create_food_item({"name": "Oats", "calories": 380, "protein_g": "13,5", "fat_g": -1, "barcode": "123"})

    assert item.id is not None
    assert item.protein_g == 13.5
    assert item.fat_g == 0
    assert item.sugar_g == 0
    assert item.base_amount == 100

    assert store.update_food_item(item.id, {"calories": 390}) == 1
    assert store.get_food_item(item.id).calories == 390
    assert store.find_food_item_by_barcode("123").id == item.id
    assert [i.name for i in store.list_food_items(search="oat")] == ["Oats"]

    assert store.delete_food_item(item.id) == 1
    assert store.get_food_item(item.id) is None


def test_food_item_requires_calories(store):
    with pytest.raises(ValueError):
        store.create_food_item({"name": "Mystery"})


def test_missing_id_affects_zero_rows(store):
    """Запись по несуществующему id не ошибка, а 0 строк."""
    assert store.update_food_item(999, {"calories": 1}) == 0
    assert store.update_food_log(999, {"notes": "x"}) == 0
    assert store.delete_food_log(999) == 0
    assert store.update_activity_log(999, {"notes": "x"}) == 0
    assert store.delete_activity_log(999) == 0


def test_food_log_defaults(store, today):
    log = store.create_food_log(food_log_data(today, hour=8))

    assert log.date == today
    assert log.meal_time_category == MealTime.BREAKFAST
    assert log.food_item_id is None


def test_food_log_keeps_name_after_item_deleted(store, today):
    item = store.create_food_item({"name": "Bread", "calories": 250})
    log = store.create_food_log(food_log_data(today, food_name="Bread", food_item_id=item.id))

    store.delete_food_item(item.id)
    reloaded = store.get_food_log(log.id)

    assert reloaded.food_name == "Bread"
    assert reloaded.food_item_id is None


def test_food_log_update_moves_date(store, today):
    log = store.create_food_log(food_log_data(today))
    moved = datetime(2024, 6, 14, 21, 0)

    assert store.update_food_log(log.id, {"logged_at": moved}) == 1
    assert store.query_food_logs_by_date(today) == []
    assert store.query_food_logs_by_date(moved.date())[0].id == log.id


def test_query_by_date_is_exact(store, today):
    store.create_food_log(food_log_data(today, hour=0))
    store.create_food_log(food_log_data(today, hour=23))
    store.create_food_log(food_log_data(today - timedelta(days=1), hour=23))
    store.create_activity_log(activity_log_data(today))

    assert len(store.query_food_logs_by_date(today)) == 2
    assert len(store.query_activity_logs_by_date(today)) == 1
    assert store.query_activity_logs_by_date(today - timedelta(days=1)) == []
    assert len(store.query_food_logs_between(today - timedelta(days=1), today)) == 3


def test_activity_log_crud(store, today):
    log = store.create_activity_log(activity_log_data(today, calories=-5))

    assert log.calories_burned == 0
    assert store.update_activity_log(log.id, {"calories_burned": 250}) == 1
    assert store.get_activity_log(log.id).calories_burned == 250
    assert store.delete_activity_log(log.id) == 1
    assert store.get_activity_log(log.id) is None


def test_delete_activity_logs_by_name(store, today):
    store.create_activity_log(activity_log_data(today, name="Yoga"))
    store.create_activity_log(activity_log_data(today, name="Yoga"))
    store.create_activity_log(activity_log_data(today, name="Running"))

    assert store.delete_activity_logs_by_name("Yoga") == 2
    assert [log.activity_name for log in store.query_activity_logs_by_date(today)] == ["Running"]


def test_frequent_foods(store, today):
    for name in ("Rice", "Egg", "Rice", "Rice", "Egg", "Tea"):
        store.create_food_log(food_log_data(today, food_name=name))

    names = [log.food_name for log in store.frequent_foods(limit=2)]

    assert names == ["Rice", "Egg"]


def test_frequent_activity_names(store, today):
    store.create_activity_log(activity_log_data(today, name="Swimming"))
    store.create_activity_log(activity_log_data(today, name="Swimming"))
    store.create_activity_log(activity_log_data(today, name="Yoga"))

    names = store.frequent_activity_names()

    assert names[:2] == ["Swimming", "Yoga"]
    assert names.count("Yoga") == 1
    assert set(DEFAULT_ACTIVITY_NAMES) <= set(names)


def test_daily_metric_upsert(store, today):
    store.record_daily_metric(today, 70.5, 18)
    store.record_daily_metric(today, "70,1")

    metrics = store.list_daily_metrics(today, today)

    assert len(metrics) == 1
    assert metrics[0].weight_kg == 70.1
    assert metrics[0].body_fat_percentage == 18


def test_daily_metric_history_trimmed(today):
    store = LedgerStore("sqlite://", max_history_days=3)
    store.init()
    for offset in range(5):
        store.record_daily_metric(today - timedelta(days=offset), 70 + offset)

    metrics = store.list_daily_metrics(today - timedelta(days=10), today)

    assert [m.date for m in metrics] == [today - timedelta(days=2), today - timedelta(days=1), today]
    store.engine.dispose()


def test_food_item_model_baseline(store):
    item = store.create_food_item({"name": "Milk", "calories": 64, "protein_g": 3.2})

    assert isinstance(item, FoodItem)
    assert item.baseline().calories == 64
    assert item.baseline().protein_g == 3.2


def test_failed_migration_does_not_stop_the_rest(monkeypatch):
    """Сломанная миграция пропускается, следующие применяются."""
    monkeypatch.setattr(ledger_store, "ADDITIVE_MIGRATIONS", (
        ("food_logs", "broken_col", "NOT A TYPE ((("),
        ("food_logs", "extra_col", "TEXT"),
    ))
    store = LedgerStore("sqlite://")

    applied = store.init()

    assert applied == ["food_logs.extra_col"]
    assert store.ready
    columns = {c["name"] for c in inspect(store.engine).get_columns("food_logs")}
    assert "extra_col" in columns
    assert "broken_col" not in columns
    store.engine.dispose()


def test_table_creation_failure_blocks_store(tmp_path):
    """Не удалось создать таблицы: StoreInitError, хранилище не готово."""
    store = LedgerStore(f"sqlite:///{tmp_path / 'missing' / 'dir' / 'ledger.db'}")

    with pytest.raises(StoreInitError):
        store.init()

    assert not store.ready
    with pytest.raises(StoreNotReadyError):
        store.query_food_logs_by_date(date(2024, 6, 15))
    store.engine.dispose()


def test_upsert_profile_accepts_iso_date_strings(store):
    profile = store.upsert_profile({"birth_date": "1990-01-01", "target_date": "2030-12-31"})

    assert profile.birth_date == date(1990, 1, 1)
    assert profile.target_date == date(2030, 12, 31)


@pytest.mark.parametrize("data", [
    {"birth_date": "not a date"},
    {"target_date": "31/12/2030"},
])
def test_upsert_profile_rejects_malformed_dates(store, data):
    with pytest.raises(ProfileValidationError):
        store.upsert_profile(data)
