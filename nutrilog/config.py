"""Конфигурация дневника из переменных окружения."""
import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()

SUPPORTED_LOCALES = ("en", "zh-TW")


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Config:
    """Настройки дневника."""

    DATABASE_URL: str
    LOCALE: str = "en"
    SQL_ECHO: bool = False
    MAX_WEIGHT_HISTORY_DAYS: int = 365

    @classmethod
    def from_env(cls) -> "Config":
        """Загрузка конфигурации из окружения."""
        return cls(
            DATABASE_URL=os.getenv("DATABASE_URL", "sqlite:///nutrilog.db"),
            LOCALE=os.getenv("LOCALE", "en"),
            SQL_ECHO=_env_flag("SQL_ECHO"),
            MAX_WEIGHT_HISTORY_DAYS=int(os.getenv("MAX_WEIGHT_HISTORY_DAYS", "365")),
        )

    def validate(self) -> None:
        """Проверка обязательных настроек."""
        if not self.DATABASE_URL:
            raise ValueError("DATABASE_URL не установлен в .env")
        if self.LOCALE not in SUPPORTED_LOCALES:
            raise ValueError(f"LOCALE должен быть одним из {', '.join(SUPPORTED_LOCALES)}")
        if self.MAX_WEIGHT_HISTORY_DAYS <= 0:
            raise ValueError("MAX_WEIGHT_HISTORY_DAYS должен быть больше нуля")


# Глобальный экземпляр конфигурации
config = Config.from_env()
