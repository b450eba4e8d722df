"""
identity_store/store/partitions.py — Разрешение раздела (realm) в форму хранилища.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from sqlalchemy.orm import Session

from identity_store.exceptions import NotFoundError
from identity_store.models.identity import Realm

logger = logging.getLogger(__name__)


class PartitionResolver(Protocol):
    def lookup(self, partition: Realm) -> Any: ...


class SessionPartitionResolver:
    """Загружает сохранённый раздел по первичному ключу через SQLAlchemy Session."""

    def __init__(self, session: Session, partition_class: type) -> None:
        self.session = session
        self.partition_class = partition_class

    def lookup(self, partition: Realm) -> Any:
        stored = self.session.get(self.partition_class, partition.id)
        if stored is None:
            logger.warning("Partition %s is not stored", partition.id)
            raise NotFoundError("Partition", partition.id)
        return stored
