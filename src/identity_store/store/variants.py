"""
identity_store/store/variants.py — Расширения для конкретных identity-вариантов.

Каждый вариант (Agent, User, Group, Role) реализует интерфейс
``IdentityVariant`` и передаётся в RecordMapper композицией:

    create_domain_object — пустой, но типизированный объект по записи
    populate_extra       — запись полей, которыми владеет только вариант
    read_extra           — чтение этих полей обратно
    before_remove        — очистка перед удалением записи

Общие поля (enabled, created, expires, partition) вариант не трогает.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol, TypeVar

from identity_store.exceptions import DataIntegrityError
from identity_store.models.enums import VariantParameter
from identity_store.models.identity import Agent, Group, IdentityType, Role, User, parse_key
from identity_store.store.configuration import (
    PROPERTY_IDENTITY_EMAIL,
    PROPERTY_IDENTITY_FIRST_NAME,
    PROPERTY_IDENTITY_GROUP_PATH,
    PROPERTY_IDENTITY_KEY,
    PROPERTY_IDENTITY_LAST_NAME,
    PROPERTY_IDENTITY_NAME,
    StoreConfiguration,
)

T = TypeVar("T", bound=IdentityType)


class IdentityVariant(Protocol[T]):
    domain_type: type[T]
    discriminator: str
    event_name: str
    query_properties: Mapping[VariantParameter, str]

    def create_domain_object(self, configuration: StoreConfiguration, record: Any) -> T: ...

    def populate_extra(self, configuration: StoreConfiguration, record: Any, domain_object: T) -> None: ...

    def read_extra(self, configuration: StoreConfiguration, record: Any, domain_object: T) -> None: ...

    def before_remove(self, record: Any, domain_object: T) -> None: ...


def read_key_id(configuration: StoreConfiguration, record: Any, prefix: str) -> str:
    """Читает ключ записи и возвращает идентификатор после ``<PREFIX>://``."""
    key = configuration.read_model_property(record, PROPERTY_IDENTITY_KEY, required=True)
    try:
        found, identifier = parse_key(key)
    except ValueError as exc:
        raise DataIntegrityError(PROPERTY_IDENTITY_KEY, message=str(exc)) from exc
    if found != prefix:
        raise DataIntegrityError(
            PROPERTY_IDENTITY_KEY,
            message=f"Key {key!r} does not belong to variant {prefix}",
        )
    return identifier


class AgentVariant:
    domain_type: type[Agent] = Agent
    discriminator = "AGENT"
    event_name = "agent"
    query_properties: Mapping[VariantParameter, str] = {
        VariantParameter.LOGIN_NAME: PROPERTY_IDENTITY_NAME,
    }

    def create_domain_object(self, configuration, record):
        return self.domain_type(
            login_name=read_key_id(configuration, record, self.domain_type.KEY_PREFIX)
        )

    def populate_extra(self, configuration, record, domain_object):
        configuration.set_model_property(record, PROPERTY_IDENTITY_NAME, domain_object.login_name)

    def read_extra(self, configuration, record, domain_object):
        pass

    def before_remove(self, record, domain_object):
        pass


class UserVariant(AgentVariant):
    domain_type: type[User] = User
    discriminator = "USER"
    event_name = "user"
    query_properties: Mapping[VariantParameter, str] = {
        **AgentVariant.query_properties,
        VariantParameter.FIRST_NAME: PROPERTY_IDENTITY_FIRST_NAME,
        VariantParameter.LAST_NAME: PROPERTY_IDENTITY_LAST_NAME,
        VariantParameter.EMAIL: PROPERTY_IDENTITY_EMAIL,
    }

    def populate_extra(self, configuration, record, domain_object):
        super().populate_extra(configuration, record, domain_object)
        configuration.set_model_property(record, PROPERTY_IDENTITY_FIRST_NAME, domain_object.first_name)
        configuration.set_model_property(record, PROPERTY_IDENTITY_LAST_NAME, domain_object.last_name)
        configuration.set_model_property(record, PROPERTY_IDENTITY_EMAIL, domain_object.email)

    def read_extra(self, configuration, record, domain_object):
        domain_object.first_name = configuration.read_model_property(record, PROPERTY_IDENTITY_FIRST_NAME)
        domain_object.last_name = configuration.read_model_property(record, PROPERTY_IDENTITY_LAST_NAME)
        domain_object.email = configuration.read_model_property(record, PROPERTY_IDENTITY_EMAIL)


class GroupVariant:
    domain_type: type[Group] = Group
    discriminator = "GROUP"
    event_name = "group"
    query_properties: Mapping[VariantParameter, str] = {
        VariantParameter.NAME: PROPERTY_IDENTITY_NAME,
        VariantParameter.GROUP_PATH: PROPERTY_IDENTITY_GROUP_PATH,
    }

    def create_domain_object(self, configuration, record):
        path = read_key_id(configuration, record, Group.KEY_PREFIX)
        # последний сегмент пути — имя группы; у корня ("/") сегмента нет
        name = (
            path.rstrip("/").rsplit("/", 1)[-1]
            or configuration.read_model_property(record, PROPERTY_IDENTITY_NAME)
            or path
        )
        return Group(name=name, path=path)

    def populate_extra(self, configuration, record, domain_object):
        configuration.set_model_property(record, PROPERTY_IDENTITY_NAME, domain_object.name)
        configuration.set_model_property(record, PROPERTY_IDENTITY_GROUP_PATH, domain_object.path)

    def read_extra(self, configuration, record, domain_object):
        name = configuration.read_model_property(record, PROPERTY_IDENTITY_NAME)
        if name:
            domain_object.name = name

    def before_remove(self, record, domain_object):
        pass


class RoleVariant:
    domain_type: type[Role] = Role
    discriminator = "ROLE"
    event_name = "role"
    query_properties: Mapping[VariantParameter, str] = {
        VariantParameter.NAME: PROPERTY_IDENTITY_NAME,
    }

    def create_domain_object(self, configuration, record):
        return Role(name=read_key_id(configuration, record, Role.KEY_PREFIX))

    def populate_extra(self, configuration, record, domain_object):
        configuration.set_model_property(record, PROPERTY_IDENTITY_NAME, domain_object.name)

    def read_extra(self, configuration, record, domain_object):
        pass

    def before_remove(self, record, domain_object):
        pass


DEFAULT_VARIANTS = (AgentVariant, UserVariant, GroupVariant, RoleVariant)
