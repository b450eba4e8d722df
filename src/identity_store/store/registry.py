"""
identity_store/store/registry.py — Реестр мапперов по вариантам.

Выбирает RecordMapper по типу доменного объекта или по дискриминатору
сохранённой записи (полиморфное восстановление).
"""

from __future__ import annotations

import logging
from typing import Any

from identity_store.exceptions import ConfigurationError
from identity_store.models.identity import IdentityType, Realm
from identity_store.store.configuration import PROPERTY_IDENTITY_DISCRIMINATOR, StoreConfiguration
from identity_store.store.discriminators import DiscriminatorResolver
from identity_store.store.mapper import RecordMapper
from identity_store.store.partitions import PartitionResolver
from identity_store.store.variants import DEFAULT_VARIANTS, IdentityVariant

logger = logging.getLogger(__name__)


class MapperRegistry:
    def __init__(
        self,
        configuration: StoreConfiguration,
        discriminators: DiscriminatorResolver | None = None,
        partitions: PartitionResolver | None = None,
    ) -> None:
        self.configuration = configuration
        self.discriminators = discriminators or DiscriminatorResolver()
        self.partitions = partitions
        self._mappers: dict[type[IdentityType], RecordMapper] = {}

    def register(self, variant: IdentityVariant) -> RecordMapper:
        self.discriminators.register(variant.domain_type, variant.discriminator)
        mapper = RecordMapper(variant, self.configuration, self.discriminators, self.partitions)
        self._mappers[variant.domain_type] = mapper
        logger.debug("Registered mapper for %s", variant.domain_type.__name__)
        return mapper

    def for_type(self, domain_type: type[IdentityType]) -> RecordMapper:
        try:
            return self._mappers[domain_type]
        except KeyError:
            raise ConfigurationError(
                f"No mapper registered for {domain_type.__name__}",
                details={"type": domain_type.__name__},
            ) from None

    def for_record(self, record: Any) -> RecordMapper:
        token = self.configuration.read_model_property(record, PROPERTY_IDENTITY_DISCRIMINATOR, required=True)
        return self.for_type(self.discriminators.type_for(token))

    def variants(self) -> list[IdentityVariant]:
        return [mapper.variant for mapper in self._mappers.values()]

    def create_record(self, partition: Realm | None, domain_object: IdentityType) -> Any:
        return self.for_type(type(domain_object)).create_record(partition, domain_object)

    def read_record(self, partition: Realm | None, record: Any) -> IdentityType:
        """Восстанавливает объект нужного варианта по дискриминатору записи."""
        return self.for_record(record).read_record(partition, record)


def default_registry(
    configuration: StoreConfiguration,
    partitions: PartitionResolver | None = None,
) -> MapperRegistry:
    """Реестр со встроенными вариантами Agent, User, Group, Role."""
    registry = MapperRegistry(configuration, partitions=partitions)
    for variant_class in DEFAULT_VARIANTS:
        registry.register(variant_class())
    return registry
