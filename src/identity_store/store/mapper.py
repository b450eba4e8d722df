"""
═══════════════════════════════════════════════════════════════════════════════
Identity Store — Record Mapper (доменный объект ⇄ запись хранилища)
═══════════════════════════════════════════════════════════════════════════════

RecordMapper переводит типизированный доменный объект в обобщённую
запись хранилища и обратно, обрабатывая только общие для всех
вариантов поля:

    discriminator, key, enabled, created   — обязательные
    expires                                — необязательное
    partition                              — только если раздел передан

Поля конкретного варианта пишет и читает ``IdentityVariant``,
переданный в конструктор. Маппер не хранит состояния между вызовами:
каждый вызов — самостоятельный перевод.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Generic, Iterable, TypeVar

from identity_store.events import IdentityEvent, LifecycleAction
from identity_store.exceptions import ConfigurationError, DataIntegrityError
from identity_store.models.identity import IdentityType, Realm
from identity_store.store.configuration import (
    PROPERTY_ATTRIBUTE_NAME,
    PROPERTY_ATTRIBUTE_VALUE,
    PROPERTY_IDENTITY_CREATED,
    PROPERTY_IDENTITY_DISCRIMINATOR,
    PROPERTY_IDENTITY_ENABLED,
    PROPERTY_IDENTITY_EXPIRES,
    PROPERTY_IDENTITY_KEY,
    PROPERTY_IDENTITY_PARTITION,
    StoreConfiguration,
)
from identity_store.store.discriminators import DiscriminatorResolver
from identity_store.store.partitions import PartitionResolver
from identity_store.store.variants import IdentityVariant

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=IdentityType)


def _as_utc(value: datetime | None) -> datetime | None:
    """Наивное значение из хранилища считается UTC (SQLite не хранит tzinfo)."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class RecordMapper(Generic[T]):
    """Перевод общих полей IdentityType для одного варианта."""

    def __init__(
        self,
        variant: IdentityVariant[T],
        configuration: StoreConfiguration,
        discriminators: DiscriminatorResolver,
        partitions: PartitionResolver | None = None,
    ) -> None:
        self.variant = variant
        self.configuration = configuration
        self.discriminators = discriminators
        self.partitions = partitions

    # ═══════════════════════════════════════════════════════════════════════
    # ДОМЕН → ЗАПИСЬ
    # ═══════════════════════════════════════════════════════════════════════

    def create_record(self, partition: Realm | None, domain_object: T) -> Any:
        """Создаёт новую запись хранилища и заполняет её из доменного объекта."""
        record = self.configuration.new_identity_record()
        self.populate_record(partition, record, domain_object)
        return record

    def populate_record(self, partition: Realm | None, record: Any, domain_object: T) -> None:
        """
        Копирует общие поля доменного объекта в запись, затем поля варианта.

        Без раздела (``partition=None``) поле раздела в записи не меняется.

        Raises:
            ConfigurationError: нет привязки обязательного свойства,
                тип варианта не зарегистрирован, не настроен PartitionResolver.
            DataIntegrityError: обязательное поле доменного объекта равно None.
        """
        config = self.configuration
        discriminator = self.discriminators.token_for(type(domain_object))

        config.set_model_property(record, PROPERTY_IDENTITY_DISCRIMINATOR, discriminator, required=True)
        config.set_model_property(record, PROPERTY_IDENTITY_KEY, domain_object.key, required=True)
        config.set_model_property(record, PROPERTY_IDENTITY_ENABLED, domain_object.enabled, required=True)
        config.set_model_property(record, PROPERTY_IDENTITY_CREATED, domain_object.created_date, required=True)
        config.set_model_property(record, PROPERTY_IDENTITY_EXPIRES, domain_object.expiration_date)

        if partition is not None:
            if self.partitions is None:
                raise ConfigurationError(
                    "A partition was supplied but no partition resolver is configured",
                    details={"partition": partition.id},
                )
            config.set_model_property(record, PROPERTY_IDENTITY_PARTITION, self.partitions.lookup(partition))

        self.variant.populate_extra(config, record, domain_object)
        logger.debug("Populated %s record for %s", discriminator, domain_object.key)

    # ═══════════════════════════════════════════════════════════════════════
    # ЗАПИСЬ → ДОМЕН
    # ═══════════════════════════════════════════════════════════════════════

    def read_record(self, partition: Realm | None, record: Any) -> T:
        """
        Восстанавливает доменный объект из записи.

        Вариант создаёт типизированный объект (ключ и дискриминатор уже
        определены им), затем копируются enabled, created и expires.

        Raises:
            DataIntegrityError: в записи нет дискриминатора, ключа,
                enabled или created, либо дискриминатор чужого варианта.
        """
        config = self.configuration
        discriminator = config.read_model_property(record, PROPERTY_IDENTITY_DISCRIMINATOR, required=True)
        if discriminator != self.variant.discriminator:
            raise DataIntegrityError(
                PROPERTY_IDENTITY_DISCRIMINATOR,
                message=f"Record discriminator {discriminator!r} does not match variant {self.variant.discriminator!r}",
            )

        domain_object = self.variant.create_domain_object(config, record)
        domain_object.enabled = config.read_model_property(record, PROPERTY_IDENTITY_ENABLED, required=True)
        domain_object.created_date = _as_utc(
            config.read_model_property(record, PROPERTY_IDENTITY_CREATED, required=True)
        )
        domain_object.expiration_date = _as_utc(config.read_model_property(record, PROPERTY_IDENTITY_EXPIRES))

        self.variant.read_extra(config, record, domain_object)
        if partition is not None:
            domain_object.partition = partition
        return domain_object

    def before_remove(self, record: Any, domain_object: T) -> None:
        """Вызывается перед удалением записи (очистка, специфичная для варианта)."""
        self.variant.before_remove(record, domain_object)

    # ── Атрибуты ─────────────────────────────────────────────────────────

    def create_attribute_records(self, record: Any, domain_object: T) -> list[Any]:
        """Одна запись атрибута на каждую пару (имя, значение) доменного объекта."""
        config = self.configuration
        attribute_records = []
        for name, values in domain_object.attributes.items():
            for value in values:
                attribute = config.new_attribute_record()
                config.assign_attribute_owner(attribute, record)
                config.set_model_property(attribute, PROPERTY_ATTRIBUTE_NAME, name, required=True)
                config.set_model_property(attribute, PROPERTY_ATTRIBUTE_VALUE, value, required=True)
                attribute_records.append(attribute)
        return attribute_records

    def read_attributes(self, domain_object: T, attribute_records: Iterable[Any]) -> T:
        """Добавляет значения из записей атрибутов в ``domain_object.attributes``."""
        config = self.configuration
        for attribute in attribute_records:
            name = config.read_model_property(attribute, PROPERTY_ATTRIBUTE_NAME, required=True)
            value = config.read_model_property(attribute, PROPERTY_ATTRIBUTE_VALUE, required=True)
            domain_object.attributes.setdefault(name, []).append(value)
        return domain_object

    # ── События жизненного цикла ─────────────────────────────────────────

    def on_created(self, domain_object: T) -> IdentityEvent:
        return self._describe(LifecycleAction.CREATED, domain_object)

    def on_updated(self, domain_object: T) -> IdentityEvent:
        return self._describe(LifecycleAction.UPDATED, domain_object)

    def on_deleted(self, domain_object: T) -> IdentityEvent:
        return self._describe(LifecycleAction.DELETED, domain_object)

    def _describe(self, action: LifecycleAction, domain_object: T) -> IdentityEvent:
        return IdentityEvent(
            name=f"{self.variant.event_name}.{action.value}",
            action=action,
            discriminator=self.discriminators.token_for(type(domain_object)),
            key=domain_object.key,
            payload=domain_object.model_dump(mode="json", exclude={"attributes"}),
        )
