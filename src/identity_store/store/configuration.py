"""
═══════════════════════════════════════════════════════════════════════════════
Identity Store — Конфигурация схемы и привязка свойств (Schema Configuration)
═══════════════════════════════════════════════════════════════════════════════

StoreConfiguration связывает абстрактные имена свойств (дискриминатор,
ключ, enabled, …) с конкретными атрибутами ORM-классов хранилища:

    PROPERTY_IDENTITY_KEY  →  IdentityObject.key
    PROPERTY_ATTRIBUTE_VALUE  →  IdentityObjectAttribute.value

Привязки задаются явно (словарём) или строятся по меткам
``info={"identity_property": ...}`` на колонках и связях моделей.

Обязательные свойства: отсутствие привязки — ConfigurationError,
значение None — DataIntegrityError. Необязательные свойства без
привязки молча пропускаются.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import NoInspectionAvailable

from identity_store.exceptions import ConfigurationError, DataIntegrityError

logger = logging.getLogger(__name__)

IDENTITY_PROPERTY_INFO = "identity_property"

# ── Общие свойства identity-записи ───────────────────────────────────────
PROPERTY_IDENTITY_DISCRIMINATOR = "identity.discriminator"
PROPERTY_IDENTITY_KEY = "identity.key"
PROPERTY_IDENTITY_ENABLED = "identity.enabled"
PROPERTY_IDENTITY_CREATED = "identity.created"
PROPERTY_IDENTITY_EXPIRES = "identity.expires"
PROPERTY_IDENTITY_PARTITION = "identity.partition"

# ── Свойства вариантов ───────────────────────────────────────────────────
PROPERTY_IDENTITY_NAME = "identity.name"
PROPERTY_IDENTITY_FIRST_NAME = "identity.first_name"
PROPERTY_IDENTITY_LAST_NAME = "identity.last_name"
PROPERTY_IDENTITY_EMAIL = "identity.email"
PROPERTY_IDENTITY_GROUP_PATH = "identity.group_path"

# ── Свойства записи атрибута ─────────────────────────────────────────────
PROPERTY_ATTRIBUTE_IDENTITY = "attribute.identity"
PROPERTY_ATTRIBUTE_NAME = "attribute.name"
PROPERTY_ATTRIBUTE_VALUE = "attribute.value"

REQUIRED_IDENTITY_PROPERTIES = (
    PROPERTY_IDENTITY_DISCRIMINATOR,
    PROPERTY_IDENTITY_KEY,
    PROPERTY_IDENTITY_ENABLED,
    PROPERTY_IDENTITY_CREATED,
)
REQUIRED_ATTRIBUTE_PROPERTIES = (
    PROPERTY_ATTRIBUTE_IDENTITY,
    PROPERTY_ATTRIBUTE_NAME,
    PROPERTY_ATTRIBUTE_VALUE,
)


def _mapper_for(model: type):
    try:
        return sa_inspect(model)
    except NoInspectionAvailable as exc:
        raise ConfigurationError(
            f"{model!r} is not a mapped SQLAlchemy class",
            details={"type": repr(model)},
        ) from exc


def scan_bindings(model: type) -> dict[str, str]:
    """Собирает привязки ``абстрактное имя → атрибут`` по меткам ``info``."""
    bindings: dict[str, str] = {}
    for prop in _mapper_for(model).attrs:
        info = dict(prop.info)
        for column in getattr(prop, "columns", ()):
            info.update(column.info)
        name = info.get(IDENTITY_PROPERTY_INFO)
        if name:
            bindings[name] = prop.key
    return bindings


class StoreConfiguration:
    """
    Провайдер конфигурации схемы.

    Атрибуты
    ────────
        identity_class:  ORM-класс identity-записи (конструктор без аргументов).
        attribute_class: ORM-класс записи атрибута.
        properties:      абстрактное имя свойства → имя атрибута класса.
    """

    def __init__(
        self,
        identity_class: type | None,
        attribute_class: type | None,
        properties: Mapping[str, str],
    ) -> None:
        if identity_class is None:
            raise ConfigurationError("Identity record class is not configured")
        if attribute_class is None:
            raise ConfigurationError("Attribute record class is not configured")

        self.identity_class = identity_class
        self.attribute_class = attribute_class
        self._properties = dict(properties)
        self._validate()

    @classmethod
    def from_models(cls, identity_class: type, attribute_class: type) -> "StoreConfiguration":
        properties = scan_bindings(identity_class)
        properties.update(scan_bindings(attribute_class))
        logger.debug(
            "Scanned %d property bindings from %s/%s",
            len(properties), identity_class.__name__, attribute_class.__name__,
        )
        return cls(identity_class, attribute_class, properties)

    def _validate(self) -> None:
        for name in REQUIRED_IDENTITY_PROPERTIES + REQUIRED_ATTRIBUTE_PROPERTIES:
            if name not in self._properties:
                raise ConfigurationError(
                    f"Required property binding is missing: {name}",
                    details={"property": name},
                )
        for name, attr in self._properties.items():
            owner = self.attribute_class if name.startswith("attribute.") else self.identity_class
            if not hasattr(owner, attr):
                raise ConfigurationError(
                    f"Property {name} is bound to unknown attribute {owner.__name__}.{attr}",
                    details={"property": name, "attribute": attr},
                )

    # ── Привязки ─────────────────────────────────────────────────────────

    def is_model_property_set(self, name: str) -> bool:
        return name in self._properties

    def get_model_property(self, name: str) -> str:
        """Возвращает имя атрибута для абстрактного свойства."""
        try:
            return self._properties[name]
        except KeyError:
            raise ConfigurationError(
                f"Property binding is not configured: {name}",
                details={"property": name},
            ) from None

    def set_model_property(
        self, record: Any, name: str, value: Any, required: bool = False
    ) -> None:
        """
        Записывает значение свойства в запись хранилища.

        required=True: привязка обязана существовать, значение — не None.
        required=False: без привязки запись пропускается, None пишется как есть.
        """
        if not self.is_model_property_set(name):
            if required:
                self.get_model_property(name)
            logger.debug("Optional property %s is not bound, skipping write", name)
            return
        if required and value is None:
            raise DataIntegrityError(name)
        setattr(record, self._properties[name], value)

    def read_model_property(self, record: Any, name: str, required: bool = False) -> Any:
        """Читает значение свойства из записи хранилища."""
        if not self.is_model_property_set(name):
            if required:
                self.get_model_property(name)
            return None
        value = getattr(record, self._properties[name], None)
        if required and value is None:
            raise DataIntegrityError(
                name, message=f"Stored record has no value for required property {name}"
            )
        return value

    # ── Связь атрибут → владелец ─────────────────────────────────────────

    def _owner_relationship(self):
        prop = self.get_model_property(PROPERTY_ATTRIBUTE_IDENTITY)
        relationships = _mapper_for(self.attribute_class).relationships
        return relationships[prop] if prop in relationships else None

    def attribute_owner_reference(self, attribute_entity: Any = None) -> Any:
        """Колонка записи атрибута, ссылающаяся на владельца (FK)."""
        entity = attribute_entity if attribute_entity is not None else self.attribute_class
        relationship = self._owner_relationship()
        if relationship is None:
            return getattr(entity, self.get_model_property(PROPERTY_ATTRIBUTE_IDENTITY))
        local_column = relationship.local_remote_pairs[0][0]
        key = _mapper_for(self.attribute_class).get_property_by_column(local_column).key
        return getattr(entity, key)

    def identity_reference(self, root: Any = None) -> Any:
        """Колонка identity-записи, на которую ссылается запись атрибута."""
        entity = root if root is not None else self.identity_class
        mapper = _mapper_for(self.identity_class)
        relationship = self._owner_relationship()
        if relationship is None:
            column = mapper.primary_key[0]
        else:
            column = relationship.local_remote_pairs[0][1]
        return getattr(entity, mapper.get_property_by_column(column).key)

    def attribute_owner_value(self, record: Any) -> Any:
        """Значение ссылки на владельца: сама запись (связь) или её ключ (FK)."""
        if self._owner_relationship() is not None:
            return record
        mapper = _mapper_for(self.identity_class)
        return getattr(record, mapper.get_property_by_column(mapper.primary_key[0]).key)

    def assign_attribute_owner(self, attribute: Any, record: Any) -> None:
        """
        Связывает запись атрибута с владельцем.

        При привязке к FK-колонке используется связь атрибута, построенная
        на этой колонке: владелец может быть ещё не сохранён. Без такой
        связи нужен первичный ключ владельца (запись должна быть сохранена).
        """
        relationship = self._owner_relationship() or self._relationship_for_owner_column()
        if relationship is not None:
            setattr(attribute, relationship.key, record)
            return
        value = self.attribute_owner_value(record)
        if value is None:
            raise ConfigurationError(
                "Owner reference is bound to a foreign key column without a relationship; "
                "the identity record must be flushed before attribute records can reference it",
                details={"property": PROPERTY_ATTRIBUTE_IDENTITY},
            )
        setattr(attribute, self.get_model_property(PROPERTY_ATTRIBUTE_IDENTITY), value)

    def _relationship_for_owner_column(self):
        mapper = _mapper_for(self.attribute_class)
        prop = mapper.attrs[self.get_model_property(PROPERTY_ATTRIBUTE_IDENTITY)]
        columns = getattr(prop, "columns", ())
        for relationship in mapper.relationships:
            if relationship.mapper.class_ is not self.identity_class:
                continue
            if any(local is column for local in relationship.local_columns for column in columns):
                return relationship
        return None

    # ── Создание записей ─────────────────────────────────────────────────

    def new_identity_record(self) -> Any:
        return self._instantiate(self.identity_class)

    def new_attribute_record(self) -> Any:
        return self._instantiate(self.attribute_class)

    @staticmethod
    def _instantiate(record_class: type) -> Any:
        try:
            return record_class()
        except Exception as exc:
            raise ConfigurationError(
                f"Record class {record_class.__name__} cannot be instantiated: {exc}",
                details={"type": record_class.__name__},
            ) from exc


__all__ = [
    "StoreConfiguration",
    "scan_bindings",
    "IDENTITY_PROPERTY_INFO",
    "PROPERTY_IDENTITY_DISCRIMINATOR",
    "PROPERTY_IDENTITY_KEY",
    "PROPERTY_IDENTITY_ENABLED",
    "PROPERTY_IDENTITY_CREATED",
    "PROPERTY_IDENTITY_EXPIRES",
    "PROPERTY_IDENTITY_PARTITION",
    "PROPERTY_IDENTITY_NAME",
    "PROPERTY_IDENTITY_FIRST_NAME",
    "PROPERTY_IDENTITY_LAST_NAME",
    "PROPERTY_IDENTITY_EMAIL",
    "PROPERTY_IDENTITY_GROUP_PATH",
    "PROPERTY_ATTRIBUTE_IDENTITY",
    "PROPERTY_ATTRIBUTE_NAME",
    "PROPERTY_ATTRIBUTE_VALUE",
]
