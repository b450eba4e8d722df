"""
identity_store/models/identity.py — Доменные модели identity-сущностей.

Иерархия:
    IdentityType (абстрактный)
        ├── Agent ── User
        ├── Group
        └── Role

Ключ (``key``) вычисляется из естественного идентификатора варианта
в формате ``<PREFIX>://<id>`` и не хранится отдельным полем модели.
"""

from __future__ import annotations

from abc import abstractmethod
from datetime import datetime, timezone
from typing import Any, ClassVar

from pydantic import Field, model_validator

from identity_store.models.common import IdentityBase

KEY_SEPARATOR = "://"

_now = lambda: datetime.now(timezone.utc)  # noqa: E731


def parse_key(key: str) -> tuple[str, str]:
    """Разбирает ключ ``USER://alice`` → ``("USER", "alice")``."""
    prefix, sep, identifier = key.partition(KEY_SEPARATOR)
    if not sep or not prefix or not identifier:
        raise ValueError(f"Malformed identity key: {key!r}")
    return prefix, identifier


class Realm(IdentityBase):
    """Раздел (partition) — граница видимости identity-сущностей."""
    id: str = Field(..., min_length=1)
    name: str | None = None


class IdentityType(IdentityBase):
    """
    Абстрактная identity-сущность.

    Общие поля: enabled, created_date, expiration_date, partition.
    Атрибуты — открытый набор имя → список значений.
    """

    KEY_PREFIX: ClassVar[str] = ""

    enabled: bool = True
    created_date: datetime = Field(default_factory=_now)
    expiration_date: datetime | None = None
    partition: Realm | None = None
    attributes: dict[str, list[Any]] = Field(default_factory=dict)

    @property
    @abstractmethod
    def key_id(self) -> str:
        """Естественный идентификатор варианта (логин, путь, имя)."""

    @property
    def key(self) -> str:
        """Естественный неизменяемый идентификатор: ``<PREFIX>://<id>``."""
        return f"{self.KEY_PREFIX}{KEY_SEPARATOR}{self.key_id}"

    # ── Атрибуты ─────────────────────────────────────────────────────────

    def set_attribute(self, name: str, *values: Any) -> None:
        self.attributes[name] = list(values)

    def get_attribute(self, name: str) -> list[Any]:
        return list(self.attributes.get(name, []))

    def remove_attribute(self, name: str) -> None:
        self.attributes.pop(name, None)


class Agent(IdentityType):
    """Агент — субъект с логином (сервис, устройство)."""

    KEY_PREFIX: ClassVar[str] = "AGENT"

    login_name: str = Field(..., min_length=1, max_length=255)

    @property
    def key_id(self) -> str:
        return self.login_name


class User(Agent):
    """Пользователь — агент с персональными данными."""

    KEY_PREFIX: ClassVar[str] = "USER"

    first_name: str | None = None
    last_name: str | None = None
    email: str | None = Field(default=None, examples=["user@example.com"])


class Group(IdentityType):
    """Группа. Ключ строится по пути (``/parent/name``)."""

    KEY_PREFIX: ClassVar[str] = "GROUP"

    name: str = Field(..., min_length=1, max_length=255)
    path: str | None = None

    @model_validator(mode="after")
    def _default_path(self) -> "Group":
        if not self.path:
            self.path = f"/{self.name}"
        return self

    @property
    def key_id(self) -> str:
        return self.path


class Role(IdentityType):
    """Роль."""

    KEY_PREFIX: ClassVar[str] = "ROLE"

    name: str = Field(..., min_length=1, max_length=255)

    @property
    def key_id(self) -> str:
        return self.name
