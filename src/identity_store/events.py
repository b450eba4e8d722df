"""
identity_store/events.py — События жизненного цикла и NATS Event Publisher.

RecordMapper не рассылает события сам, а только описывает их
(``IdentityEvent``). Рассылку выполняет внешний диспетчер; здесь —
адаптер для NATS:
    • ``identity.user.created``   — пользователь сохранён
    • ``identity.group.updated``  — группа изменена
    • ``identity.role.deleted``   — роль удалена

Graceful degradation: если NATS недоступен — событие пропускается
с предупреждением в лог (не ломает основной процесс).
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any

import nats
from nats.aio.client import Client as NATSClient
from pydantic import Field

from identity_store.config import StoreSettings, get_settings
from identity_store.models.common import IdentityBase

logger = logging.getLogger(__name__)


class LifecycleAction(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"


class IdentityEvent(IdentityBase):
    """Описание доменного события над identity-сущностью."""
    name: str = Field(..., examples=["user.created"])
    action: LifecycleAction
    discriminator: str
    key: str
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    payload: dict[str, Any] = Field(default_factory=dict)


class EventPublisher:
    """Публикует IdentityEvent в NATS как JSON."""

    def __init__(self, settings: StoreSettings | None = None) -> None:
        self.settings = settings or get_settings()
        self._nc: NATSClient | None = None

    def subject_for(self, event: IdentityEvent) -> str:
        return f"{self.settings.event_subject_prefix}.{event.name}"

    async def connect(self) -> NATSClient | None:
        """Подключается к NATS (если ещё не подключён)."""
        if self._nc is not None and self._nc.is_connected:
            return self._nc
        try:
            self._nc = await nats.connect(self.settings.nats_url)
            logger.info("NATS publisher connected: %s", self.settings.nats_url)
            return self._nc
        except Exception as exc:
            logger.warning("NATS connect failed (events will be skipped): %s", exc)
            self._nc = None
            return None

    async def disconnect(self) -> None:
        """Закрывает соединение с NATS."""
        if self._nc and self._nc.is_connected:
            await self._nc.drain()
            logger.info("NATS publisher disconnected")
        self._nc = None

    async def publish(self, event: IdentityEvent) -> bool:
        """
        Публикует событие.

        Returns:
            True, если событие отправлено; False, если NATS недоступен
            или публикация не удалась.
        """
        subject = self.subject_for(event)
        nc = await self.connect()
        if nc is None:
            logger.debug("NATS unavailable — skipping event %s", subject)
            return False
        try:
            payload = json.dumps(event.model_dump(mode="json"), default=str).encode("utf-8")
            await nc.publish(subject, payload)
            logger.info("NATS event published: %s", subject)
            return True
        except Exception as exc:
            logger.warning("NATS publish failed for %s: %s", subject, exc)
            return False
