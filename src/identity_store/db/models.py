"""
identity_store/db/models.py — Схема хранилища по умолчанию (SQLAlchemy ORM).

Одна обобщённая таблица ``identity_objects`` хранит все варианты
identity-сущностей; вариант определяется колонкой ``discriminator``.
Атрибуты хранятся отдельными строками в ``identity_object_attributes``
(имя может повторяться — многозначные атрибуты).

Каждая привязываемая колонка помечена абстрактным именем свойства в
``info={"identity_property": ...}``; ``StoreConfiguration.from_models``
строит привязки по этим меткам.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from identity_store.store.configuration import (
    IDENTITY_PROPERTY_INFO,
    PROPERTY_ATTRIBUTE_IDENTITY,
    PROPERTY_ATTRIBUTE_NAME,
    PROPERTY_ATTRIBUTE_VALUE,
    PROPERTY_IDENTITY_CREATED,
    PROPERTY_IDENTITY_DISCRIMINATOR,
    PROPERTY_IDENTITY_EMAIL,
    PROPERTY_IDENTITY_ENABLED,
    PROPERTY_IDENTITY_EXPIRES,
    PROPERTY_IDENTITY_FIRST_NAME,
    PROPERTY_IDENTITY_GROUP_PATH,
    PROPERTY_IDENTITY_KEY,
    PROPERTY_IDENTITY_LAST_NAME,
    PROPERTY_IDENTITY_NAME,
    PROPERTY_IDENTITY_PARTITION,
)


def _bind(name: str) -> dict:
    return {IDENTITY_PROPERTY_INFO: name}


class Base(DeclarativeBase):
    pass


class PartitionObject(Base):
    """ORM-модель раздела (realm)."""

    __tablename__ = "identity_partitions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<PartitionObject(id={self.id}, name={self.name})>"


class IdentityObject(Base):
    """ORM-модель identity-записи (общие поля + колонки вариантов)."""

    __tablename__ = "identity_objects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    discriminator: Mapped[str] = mapped_column(
        String(32), nullable=False, index=True, info=_bind(PROPERTY_IDENTITY_DISCRIMINATOR)
    )
    key: Mapped[str] = mapped_column(
        String(512), nullable=False, index=True, info=_bind(PROPERTY_IDENTITY_KEY)
    )
    enabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, info=_bind(PROPERTY_IDENTITY_ENABLED)
    )
    created: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, info=_bind(PROPERTY_IDENTITY_CREATED)
    )
    expires: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, info=_bind(PROPERTY_IDENTITY_EXPIRES)
    )
    partition_id: Mapped[str | None] = mapped_column(
        ForeignKey("identity_partitions.id"), nullable=True, index=True
    )
    partition: Mapped[PartitionObject | None] = relationship(
        info=_bind(PROPERTY_IDENTITY_PARTITION)
    )

    # ── Колонки вариантов ─────────────────────────────────────────────────
    name: Mapped[str | None] = mapped_column(
        String(255), nullable=True, info=_bind(PROPERTY_IDENTITY_NAME)
    )
    first_name: Mapped[str | None] = mapped_column(
        String(255), nullable=True, info=_bind(PROPERTY_IDENTITY_FIRST_NAME)
    )
    last_name: Mapped[str | None] = mapped_column(
        String(255), nullable=True, info=_bind(PROPERTY_IDENTITY_LAST_NAME)
    )
    email: Mapped[str | None] = mapped_column(
        String(255), nullable=True, info=_bind(PROPERTY_IDENTITY_EMAIL)
    )
    group_path: Mapped[str | None] = mapped_column(
        String(1024), nullable=True, info=_bind(PROPERTY_IDENTITY_GROUP_PATH)
    )

    attributes: Mapped[list["IdentityObjectAttribute"]] = relationship(
        back_populates="identity", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<IdentityObject(id={self.id}, discriminator={self.discriminator}, key={self.key})>"


class IdentityObjectAttribute(Base):
    """ORM-модель строки атрибута (владелец, имя, значение)."""

    __tablename__ = "identity_object_attributes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    identity_id: Mapped[int] = mapped_column(
        ForeignKey("identity_objects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    identity: Mapped[IdentityObject] = relationship(
        back_populates="attributes", info=_bind(PROPERTY_ATTRIBUTE_IDENTITY)
    )
    name: Mapped[str] = mapped_column(
        String(255), nullable=False, index=True, info=_bind(PROPERTY_ATTRIBUTE_NAME)
    )
    value: Mapped[str] = mapped_column(
        String(1024), nullable=False, info=_bind(PROPERTY_ATTRIBUTE_VALUE)
    )

    def __repr__(self) -> str:
        return f"<IdentityObjectAttribute(identity_id={self.identity_id}, name={self.name}, value={self.value})>"
