from __future__ import annotations

from datetime import datetime

import pytest
from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from identity_store.db.models import IdentityObject, IdentityObjectAttribute
from identity_store.exceptions import ConfigurationError, DataIntegrityError
from identity_store.store.configuration import (
    PROPERTY_ATTRIBUTE_IDENTITY,
    PROPERTY_ATTRIBUTE_NAME,
    PROPERTY_ATTRIBUTE_VALUE,
    PROPERTY_IDENTITY_CREATED,
    PROPERTY_IDENTITY_DISCRIMINATOR,
    PROPERTY_IDENTITY_ENABLED,
    PROPERTY_IDENTITY_EXPIRES,
    PROPERTY_IDENTITY_KEY,
    PROPERTY_IDENTITY_PARTITION,
    StoreConfiguration,
    scan_bindings,
)

REQUIRED = {
    PROPERTY_IDENTITY_DISCRIMINATOR: "discriminator",
    PROPERTY_IDENTITY_KEY: "key",
    PROPERTY_IDENTITY_ENABLED: "enabled",
    PROPERTY_IDENTITY_CREATED: "created",
    PROPERTY_ATTRIBUTE_IDENTITY: "identity",
    PROPERTY_ATTRIBUTE_NAME: "name",
    PROPERTY_ATTRIBUTE_VALUE: "value",
}


class _NeedsArguments:
    discriminator = key = enabled = created = None

    def __init__(self, required):
        self.required = required


def test_bindings_scanned_from_model_info(configuration):
    assert configuration.get_model_property(PROPERTY_IDENTITY_KEY) == "key"
    assert configuration.get_model_property(PROPERTY_IDENTITY_PARTITION) == "partition"
    assert configuration.get_model_property(PROPERTY_IDENTITY_EXPIRES) == "expires"
    assert configuration.get_model_property(PROPERTY_ATTRIBUTE_IDENTITY) == "identity"


def test_scan_rejects_unmapped_class():
    with pytest.raises(ConfigurationError):
        scan_bindings(_NeedsArguments)


def test_missing_required_binding_is_configuration_error():
    properties = dict(REQUIRED)
    del properties[PROPERTY_IDENTITY_KEY]
    with pytest.raises(ConfigurationError) as exc:
        StoreConfiguration(IdentityObject, IdentityObjectAttribute, properties)
    assert exc.value.details["property"] == PROPERTY_IDENTITY_KEY


def test_binding_to_unknown_attribute_is_configuration_error():
    properties = {**REQUIRED, PROPERTY_IDENTITY_EXPIRES: "valid_until"}
    with pytest.raises(ConfigurationError):
        StoreConfiguration(IdentityObject, IdentityObjectAttribute, properties)


def test_record_classes_must_be_configured():
    with pytest.raises(ConfigurationError):
        StoreConfiguration(None, IdentityObjectAttribute, REQUIRED)
    with pytest.raises(ConfigurationError):
        StoreConfiguration(IdentityObject, None, REQUIRED)


def test_unbound_property_lookup_raises():
    config = StoreConfiguration(IdentityObject, IdentityObjectAttribute, REQUIRED)
    assert config.is_model_property_set(PROPERTY_IDENTITY_EXPIRES) is False
    with pytest.raises(ConfigurationError):
        config.get_model_property(PROPERTY_IDENTITY_EXPIRES)


def test_optional_unbound_property_is_skipped():
    config = StoreConfiguration(IdentityObject, IdentityObjectAttribute, REQUIRED)
    record = IdentityObject()
    config.set_model_property(record, PROPERTY_IDENTITY_EXPIRES, "ignored")
    assert record.expires is None
    assert config.read_model_property(record, PROPERTY_IDENTITY_EXPIRES) is None


def test_required_none_value_is_data_integrity_error(configuration):
    record = IdentityObject()
    with pytest.raises(DataIntegrityError) as exc:
        configuration.set_model_property(record, PROPERTY_IDENTITY_KEY, None, required=True)
    assert exc.value.details["property"] == PROPERTY_IDENTITY_KEY

    with pytest.raises(DataIntegrityError):
        configuration.read_model_property(record, PROPERTY_IDENTITY_CREATED, required=True)


def test_optional_none_value_is_written(configuration):
    record = IdentityObject(expires=None)
    configuration.set_model_property(record, PROPERTY_IDENTITY_EXPIRES, None)
    assert record.expires is None


def test_unconstructible_record_class_is_configuration_error():
    config = StoreConfiguration(_NeedsArguments, IdentityObjectAttribute, REQUIRED)
    with pytest.raises(ConfigurationError):
        config.new_identity_record()


def test_owner_reference_resolved_from_relationship(configuration):
    assert configuration.identity_reference().key == "id"
    assert configuration.attribute_owner_reference().key == "identity_id"

    record = IdentityObject()
    assert configuration.attribute_owner_value(record) is record


def test_owner_reference_bound_to_foreign_key_column():
    properties = {**REQUIRED, PROPERTY_ATTRIBUTE_IDENTITY: "identity_id"}
    config = StoreConfiguration(IdentityObject, IdentityObjectAttribute, properties)
    assert config.identity_reference().key == "id"
    assert config.attribute_owner_reference().key == "identity_id"
    assert config.attribute_owner_value(IdentityObject(id=7)) == 7


class _FailingConstructor:
    discriminator = key = enabled = created = None

    def __init__(self):
        raise RuntimeError("connection pool exhausted")


def test_failing_record_constructor_is_configuration_error():
    config = StoreConfiguration(_FailingConstructor, IdentityObjectAttribute, REQUIRED)
    with pytest.raises(ConfigurationError) as exc:
        config.new_identity_record()
    assert isinstance(exc.value.__cause__, RuntimeError)
    assert exc.value.details["type"] == "_FailingConstructor"


class _LooseBase(DeclarativeBase):
    pass


class _LooseIdentity(_LooseBase):
    __tablename__ = "loose_identities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    discriminator: Mapped[str] = mapped_column(String(32))
    key: Mapped[str] = mapped_column(String(512))
    enabled: Mapped[bool] = mapped_column(Boolean)
    created: Mapped[datetime] = mapped_column(DateTime(timezone=True))


class _LooseAttribute(_LooseBase):
    """Запись атрибута с FK на владельца, но без relationship."""

    __tablename__ = "loose_attributes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    identity_id: Mapped[int] = mapped_column(ForeignKey("loose_identities.id"))
    name: Mapped[str] = mapped_column(String(255))
    value: Mapped[str] = mapped_column(String(1024))


def _loose_configuration():
    properties = {**REQUIRED, PROPERTY_ATTRIBUTE_IDENTITY: "identity_id"}
    return StoreConfiguration(_LooseIdentity, _LooseAttribute, properties)


def test_owner_assigned_through_relationship_on_foreign_key_column():
    config = StoreConfiguration(
        IdentityObject, IdentityObjectAttribute, {**REQUIRED, PROPERTY_ATTRIBUTE_IDENTITY: "identity_id"}
    )
    record = IdentityObject()
    attribute = IdentityObjectAttribute()

    config.assign_attribute_owner(attribute, record)

    assert attribute.identity is record


def test_owner_assigned_as_foreign_key_value_without_relationship():
    config = _loose_configuration()
    attribute = _LooseAttribute()

    config.assign_attribute_owner(attribute, _LooseIdentity(id=7))

    assert attribute.identity_id == 7


def test_unflushed_owner_without_relationship_is_configuration_error():
    config = _loose_configuration()
    with pytest.raises(ConfigurationError) as exc:
        config.assign_attribute_owner(_LooseAttribute(), _LooseIdentity())
    assert exc.value.details["property"] == PROPERTY_ATTRIBUTE_IDENTITY
