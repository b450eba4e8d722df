"""
═══════════════════════════════════════════════════════════════════════════════
Identity Store — Настройки (Application Configuration)
═══════════════════════════════════════════════════════════════════════════════

Класс StoreSettings для библиотеки отображения identity-сущностей.
Содержит настройки:
    • Среда выполнения и уровень логирования
    • NATS (для публикации событий жизненного цикла)
    • Политика компиляции предикатов по атрибутам
    • Полиморфные запросы (учёт подтипов)
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StoreSettings(BaseSettings):
    """
    Настройки Identity Store.

    Все параметры читаются из переменных окружения или .env файла.
    Префикс не используется (NATS_URL, LOG_LEVEL и т.д.).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Среда выполнения ──────────────────────────────────────────────────
    app_env: str = Field(
        default="development",
        description="Application environment: development | staging | production",
    )
    log_level: str = Field(default="INFO")

    # ── NATS (публикация событий) ─────────────────────────────────────────
    nats_url: str = Field(default="nats://localhost:4222")
    event_subject_prefix: str = Field(
        default="identity",
        description="Subject prefix for lifecycle events: <prefix>.<event name>",
    )

    # ── Компиляция предикатов ─────────────────────────────────────────────
    # Требуемое число совпадений N по умолчанию равно длине переданного
    # списка значений, дубликаты учитываются. Флаг включает дедупликацию.
    distinct_attribute_values: bool = Field(
        default=False,
        description="Deduplicate attribute values before computing the match count",
    )
    include_subtypes: bool = Field(
        default=True,
        description="Queries for a variant also match registered subclass variants",
    )

    @model_validator(mode="after")
    def _validate_subject_prefix(self) -> "StoreSettings":
        """Префикс NATS-темы не может быть пустым и не заканчивается точкой."""
        prefix = self.event_subject_prefix.strip()
        if not prefix or prefix.endswith("."):
            raise ValueError(
                f"EVENT_SUBJECT_PREFIX must be a non-empty subject token, got {self.event_subject_prefix!r}"
            )
        return self


@lru_cache
def get_settings() -> StoreSettings:
    """
    Возвращает единственный экземпляр StoreSettings (singleton).

    Декоратор ``@lru_cache`` гарантирует, что объект создаётся
    только при первом вызове.
    """
    return StoreSettings()


__all__ = ["StoreSettings", "get_settings"]
