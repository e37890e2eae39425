"""Точка входа: инициализация хранилища и сводка за сегодня."""
import logging

from nutrilog.config import config
from nutrilog.exceptions import StoreInitError
from nutrilog.services import LedgerStore, Period, get_daily_summary, get_history, remaining_kcal
from nutrilog.services.labels import Locale
from nutrilog.services.stats_service import period_averages

# Настройка логирования
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", level=logging.INFO
)
logger = logging.getLogger(__name__)


def main() -> None:
    """Открыть дневник и вывести итоги дня и недели."""
    # Проверка конфигурации
    try:
        config.validate()
    except ValueError as e:
        logger.error(f"Ошибка конфигурации: {e}")
        return

    # Инициализация БД
    logger.info("Инициализация базы данных...")
    store = LedgerStore(
        config.DATABASE_URL,
        echo=config.SQL_ECHO,
        max_history_days=config.MAX_WEIGHT_HISTORY_DAYS,
    )
    try:
        store.init()
    except StoreInitError as e:
        logger.error(f"Хранилище недоступно: {e}")
        return

    profile = store.get_or_create_profile()
    summary = get_daily_summary(store)
    logger.info(
        f"Today: in {summary.calories_in:.0f} kcal, out {summary.calories_out:.0f} kcal, "
        f"{len(summary.food_logs)} food / {len(summary.activity_logs)} activity entries"
    )
    if profile.daily_calorie_target:
        logger.info(f"Remaining: {remaining_kcal(profile.daily_calorie_target, summary)} kcal")

    week = get_history(store, Period.WEEK, locale=Locale.parse(config.LOCALE))
    averages = period_averages(week)
    logger.info(f"Week average: {averages['calories_in']} kcal in over {averages['buckets']} days with data")


if __name__ == "__main__":
    main()
